"""POST /v1/forecast - Day-by-day cash-flow projection"""

import logging
import time
from datetime import date, datetime

from fastapi import APIRouter, Depends, HTTPException, Request

from cashflow_calendar.api.dependencies import get_now, get_request_id, get_settings
from cashflow_calendar.api.v1.schemas import ForecastRequest, ForecastResponse
from cashflow_calendar.config import Settings
from cashflow_calendar.domain.collisions import CollisionThresholds
from cashflow_calendar.domain.exceptions import ForecastConfigurationError, ForecastGenerationError
from cashflow_calendar.domain.forecast import generate_forecast
from cashflow_calendar.domain.models import CalendarData
from cashflow_calendar.infrastructure.observability.logging import log_forecast
from cashflow_calendar.infrastructure.observability.metrics import forecast_counter, record_forecast
from cashflow_calendar.utils.date_utils import today_for_timezone

router = APIRouter()


def resolve_today(request_body: ForecastRequest, config: Settings, now: datetime) -> date:
    """Explicit `today` wins, otherwise the current day in the user's timezone"""
    if request_body.today is not None:
        return request_body.today
    return today_for_timezone(request_body.timezone or config.default_timezone, now)


def run_forecast(request_body: ForecastRequest, today: date, config: Settings, request_id: str) -> CalendarData:
    """
    Build domain inputs from the request and run the engine.

    Engine errors are translated to HTTP errors here so every route that
    needs a forecast reports them the same way.
    """
    credit_cards = (
        None
        if request_body.credit_card_accounts is None
        else [a.to_domain() for a in request_body.credit_card_accounts]
    )
    safety_buffer = (
        config.default_safety_buffer_cents
        if request_body.safety_buffer_cents is None
        else request_body.safety_buffer_cents
    )
    horizon = config.default_horizon_days if request_body.horizon_days is None else request_body.horizon_days

    start_time = time.time()
    try:
        calendar = generate_forecast(
            [a.to_domain() for a in request_body.accounts],
            [i.to_domain() for i in request_body.income],
            [b.to_domain() for b in request_body.bills],
            [t.to_domain() for t in request_body.transfers],
            credit_cards,
            horizon,
            safety_buffer,
            today,
            safe_to_spend_window_days=config.safe_to_spend_window_days,
            collision_thresholds=CollisionThresholds(
                min_bills_for_warning=config.collision_min_bills_warning,
                min_bills_for_critical=config.collision_min_bills_critical,
                critical_amount_threshold_cents=config.collision_critical_amount_cents,
            ),
        )

    except ForecastConfigurationError as e:
        forecast_counter.labels(outcome="rejected").inc()
        logging.warning(f"Invalid forecast parameters: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    except ForecastGenerationError as e:
        forecast_counter.labels(outcome="failed").inc()
        logging.error(f"Forecast generation failed: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Failed to generate forecast")

    duration = time.time() - start_time
    record_forecast(calendar, duration)
    log_forecast(request_id, calendar, duration * 1000)
    return calendar


@router.post("/forecast", response_model=ForecastResponse)
def create_forecast(
    request_body: ForecastRequest,
    request: Request,
    config: Settings = Depends(get_settings),
    now: datetime = Depends(get_now),
):
    """
    Project balances over the horizon.

    Returns:
        One entry per day with balance, status and that day's income, bills
        and transfers, plus lowest day, safe-to-spend, collisions and any
        sources that were skipped as unreadable
    """
    request_id = get_request_id(request)
    today = resolve_today(request_body, config, now)

    try:
        calendar = run_forecast(request_body, today, config, request_id)
    except HTTPException:
        raise
    except Exception as e:
        forecast_counter.labels(outcome="failed").inc()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    return ForecastResponse.from_domain(calendar)
