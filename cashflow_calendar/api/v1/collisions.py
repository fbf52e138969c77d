"""POST /v1/collisions - Re-run bill collision detection on an existing day sequence"""

from fastapi import APIRouter, Depends

from cashflow_calendar.api.dependencies import get_settings
from cashflow_calendar.api.v1.schemas import CollisionsRequest, CollisionSummarySchema
from cashflow_calendar.config import Settings
from cashflow_calendar.domain.collisions import detect_collisions
from cashflow_calendar.domain.models import CalendarDay, Occurrence, OccurrenceKind

router = APIRouter()


@router.post("/collisions", response_model=CollisionSummarySchema)
def analyze_collisions(request_body: CollisionsRequest, config: Settings = Depends(get_settings)):
    """
    Detect bill collisions in days the client already holds (e.g. after
    filtering some bills out). Thresholds default to the service settings.
    """
    days = [
        CalendarDay(
            date=day.date,
            balance_cents=0,
            bills=[
                Occurrence(
                    date=day.date,
                    source_id=bill.id,
                    name=bill.name,
                    amount_cents=bill.amount_cents,
                    kind=OccurrenceKind.BILL,
                    frequency="",
                )
                for bill in day.bills
            ],
        )
        for day in request_body.days
    ]

    summary = detect_collisions(
        days,
        min_bills_for_warning=request_body.min_bills_for_warning or config.collision_min_bills_warning,
        min_bills_for_critical=request_body.min_bills_for_critical or config.collision_min_bills_critical,
        critical_amount_threshold_cents=(
            config.collision_critical_amount_cents
            if request_body.critical_amount_threshold_cents is None
            else request_body.critical_amount_threshold_cents
        ),
    )
    return CollisionSummarySchema.from_domain(summary)
