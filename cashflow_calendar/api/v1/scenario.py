"""POST /v1/scenario - "Can I afford this?" overlay on a fresh forecast"""

import logging
import time
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Request

from cashflow_calendar.api.dependencies import get_now, get_request_id, get_settings
from cashflow_calendar.api.v1.forecast import resolve_today, run_forecast
from cashflow_calendar.api.v1.schemas import (
    ScenarioPreviewDaySchema,
    ScenarioRequest,
    ScenarioResponse,
    ScenarioResultSchema,
)
from cashflow_calendar.config import Settings
from cashflow_calendar.domain.scenario import compute_scenario, is_valid_expense_amount, next_affordable_date
from cashflow_calendar.infrastructure.observability.logging import log_scenario
from cashflow_calendar.infrastructure.observability.metrics import record_scenario

router = APIRouter()


@router.post("/scenario", response_model=ScenarioResponse)
def evaluate_scenario(
    request_body: ScenarioRequest,
    request: Request,
    config: Settings = Depends(get_settings),
    now: datetime = Depends(get_now),
):
    """
    Overlay a hypothetical expense on the user's forecast.

    Flow:
    1. Reject expense dates before today
    2. Generate the baseline forecast
    3. Overlay the expense (one-time or monthly) without touching the baseline
    4. Suggest the next income day on which the expense would fit

    User mistakes (past date, non-positive amount) come back as ok=false with
    a message rather than an HTTP error.
    """
    start_time = time.time()
    request_id = get_request_id(request)
    today = resolve_today(request_body, config, now)
    expense = request_body.expense.to_domain()

    if expense.date < today:
        return ScenarioResponse(ok=False, error="Please select a future date.")

    try:
        calendar = run_forecast(request_body, today, config, request_id)

        result, preview = compute_scenario(
            calendar,
            expense,
            low_balance_threshold_cents=config.low_balance_threshold_cents,
            preview_radius_days=config.preview_radius_days,
        )
    except HTTPException:
        raise
    except Exception as e:
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    valid = is_valid_expense_amount(expense.amount_cents)
    record_scenario(result, valid=valid)
    log_scenario(request_id, result, expense.amount_cents, (time.time() - start_time) * 1000)

    if not valid:
        return ScenarioResponse(ok=False, error=result.impact_summary, result=ScenarioResultSchema.from_domain(result))

    suggestion = None
    if not result.can_afford:
        suggestion = next_affordable_date(calendar, expense, config.low_balance_threshold_cents)

    return ScenarioResponse(
        ok=True,
        result=ScenarioResultSchema.from_domain(result),
        preview=[ScenarioPreviewDaySchema.from_domain(p) for p in preview],
        next_affordable_date=suggestion,
    )
