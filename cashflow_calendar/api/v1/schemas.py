"""Pydantic schemas for API request/response validation"""

from datetime import date
from typing import List, Optional

from pydantic import BaseModel, Field

from cashflow_calendar.domain.forecast import find_low_balance_day
from cashflow_calendar.domain.models import (
    Account,
    BillCollision,
    BillSource,
    CalendarData,
    CalendarDay,
    CollisionSummary,
    DataQualityWarning,
    IncomeSource,
    Occurrence,
    ScenarioExpense,
    ScenarioFrequency,
    ScenarioPreviewDay,
    ScenarioResult,
    TransferSource,
)

# Upper bound on a single projection; longer horizons must be paged by the caller
MAX_HORIZON_DAYS = 365


# Requests
#
# Source dates stay strings: a malformed stored date must surface as a
# data-quality warning on the forecast, not reject the whole request.


class AccountSchema(BaseModel):
    """Account snapshot; credit-card fields are optional"""

    id: str = Field(..., min_length=1)
    name: str = ""
    current_balance_cents: int
    is_spendable: Optional[bool] = None
    account_type: Optional[str] = None
    credit_limit_cents: Optional[int] = None
    apr: Optional[float] = None
    payment_due_day: Optional[int] = None
    statement_close_day: Optional[int] = None

    def to_domain(self) -> Account:
        return Account(**self.model_dump())


class IncomeSchema(BaseModel):
    id: str = Field(..., min_length=1)
    name: str = ""
    amount_cents: int
    frequency: str
    is_active: Optional[bool] = None
    next_date: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    status: Optional[str] = None
    invoice_id: Optional[str] = None

    def to_domain(self) -> IncomeSource:
        return IncomeSource(**self.model_dump())


class BillSchema(BaseModel):
    id: str = Field(..., min_length=1)
    name: str = ""
    amount_cents: int
    frequency: str
    is_active: Optional[bool] = None
    due_date: Optional[str] = None
    end_date: Optional[str] = None

    def to_domain(self) -> BillSource:
        return BillSource(**self.model_dump())


class TransferSchema(BaseModel):
    id: str = Field(..., min_length=1)
    amount_cents: int
    frequency: str
    from_account_id: str
    to_account_id: str
    transfer_date: Optional[str] = None
    description: Optional[str] = None
    is_active: Optional[bool] = None
    end_date: Optional[str] = None
    recurrence_day: Optional[int] = None
    from_account_name: Optional[str] = None
    to_account_name: Optional[str] = None

    def to_domain(self) -> TransferSource:
        return TransferSource(**self.model_dump())


class ForecastRequest(BaseModel):
    """Request body for POST /v1/forecast"""

    accounts: List[AccountSchema]
    income: List[IncomeSchema] = []
    bills: List[BillSchema] = []
    transfers: List[TransferSchema] = []
    credit_card_accounts: Optional[List[AccountSchema]] = Field(
        None, description="Defaults to the credit cards among `accounts`"
    )
    horizon_days: Optional[int] = Field(
        None, ge=1, le=MAX_HORIZON_DAYS, description="Days to project, including today"
    )
    safety_buffer_cents: Optional[int] = None
    timezone: Optional[str] = Field(None, description="IANA zone used to resolve today")
    today: Optional[date] = Field(None, description="Overrides the timezone-derived current day")


class ExpenseSchema(BaseModel):
    """Hypothetical purchase; amount is validated by the engine, not here"""

    name: str = "New purchase"
    amount_cents: float
    date: date
    is_recurring: bool = False

    def to_domain(self) -> ScenarioExpense:
        return ScenarioExpense(
            amount_cents=self.amount_cents,
            date=self.date,
            frequency=ScenarioFrequency.MONTHLY if self.is_recurring else ScenarioFrequency.ONE_TIME,
            name=self.name.strip() or "New purchase",
        )


class ScenarioRequest(ForecastRequest):
    """Request body for POST /v1/scenario"""

    expense: ExpenseSchema


class CollisionBillInput(BaseModel):
    id: str
    name: str = ""
    amount_cents: int


class CollisionDayInput(BaseModel):
    date: date
    bills: List[CollisionBillInput] = []


class CollisionsRequest(BaseModel):
    """Request body for POST /v1/collisions"""

    days: List[CollisionDayInput]
    min_bills_for_warning: Optional[int] = Field(None, ge=1)
    min_bills_for_critical: Optional[int] = Field(None, ge=1)
    critical_amount_threshold_cents: Optional[int] = Field(None, ge=0)


# Responses


class OccurrenceSchema(BaseModel):
    date: date
    id: str
    name: str
    amount_cents: int
    type: str
    frequency: str
    status: Optional[str] = None
    invoice_id: Optional[str] = None
    from_account_id: Optional[str] = None
    to_account_id: Optional[str] = None

    @classmethod
    def from_domain(cls, occ: Occurrence) -> "OccurrenceSchema":
        return cls(
            date=occ.date,
            id=occ.source_id,
            name=occ.name,
            amount_cents=occ.amount_cents,
            type=occ.kind.value,
            frequency=occ.frequency,
            status=occ.status,
            invoice_id=occ.invoice_id,
            from_account_id=occ.from_account_id,
            to_account_id=occ.to_account_id,
        )


class CalendarDaySchema(BaseModel):
    date: date
    balance_cents: int
    status: str
    income: List[OccurrenceSchema]
    bills: List[OccurrenceSchema]
    transfers: List[OccurrenceSchema]
    transfer_net_cents: int

    @classmethod
    def from_domain(cls, day: CalendarDay) -> "CalendarDaySchema":
        return cls(
            date=day.date,
            balance_cents=day.balance_cents,
            status=day.status.value,
            income=[OccurrenceSchema.from_domain(o) for o in day.income],
            bills=[OccurrenceSchema.from_domain(o) for o in day.bills],
            transfers=[OccurrenceSchema.from_domain(o) for o in day.transfers],
            transfer_net_cents=day.transfer_net_cents,
        )


class CollisionBillSchema(BaseModel):
    id: str
    name: str
    amount_cents: int


class BillCollisionSchema(BaseModel):
    date: date
    bills: List[CollisionBillSchema]
    total_amount_cents: int
    severity: str

    @classmethod
    def from_domain(cls, collision: BillCollision) -> "BillCollisionSchema":
        return cls(
            date=collision.date,
            bills=[CollisionBillSchema(id=b.id, name=b.name, amount_cents=b.amount_cents) for b in collision.bills],
            total_amount_cents=collision.total_amount_cents,
            severity=collision.severity.value,
        )


class CollisionSummarySchema(BaseModel):
    collisions: List[BillCollisionSchema]
    has_collisions: bool
    critical_count: int
    warning_count: int
    highest_collision_amount_cents: int
    highest_collision_date: Optional[date] = None

    @classmethod
    def from_domain(cls, summary: CollisionSummary) -> "CollisionSummarySchema":
        return cls(
            collisions=[BillCollisionSchema.from_domain(c) for c in summary.collisions],
            has_collisions=summary.has_collisions,
            critical_count=summary.critical_count,
            warning_count=summary.warning_count,
            highest_collision_amount_cents=summary.highest_collision_amount_cents,
            highest_collision_date=summary.highest_collision_date,
        )


class DataQualityWarningSchema(BaseModel):
    source_id: str
    source_kind: str
    reason: str
    detail: str

    @classmethod
    def from_domain(cls, warning: DataQualityWarning) -> "DataQualityWarningSchema":
        return cls(
            source_id=warning.source_id,
            source_kind=warning.source_kind,
            reason=warning.reason,
            detail=warning.detail,
        )


class ForecastResponse(BaseModel):
    """Response for POST /v1/forecast"""

    start_date: date
    end_date: date
    starting_balance_cents: int
    lowest_balance_cents: int
    lowest_balance_day: date
    safe_to_spend_cents: int
    safety_buffer_cents: int
    low_balance_day: Optional[date] = Field(None, description="First day below the safety buffer")
    days: List[CalendarDaySchema]
    collisions: CollisionSummarySchema
    warnings: List[DataQualityWarningSchema]

    @classmethod
    def from_domain(cls, calendar: CalendarData) -> "ForecastResponse":
        low_day = find_low_balance_day(calendar)
        return cls(
            start_date=calendar.days[0].date,
            end_date=calendar.days[-1].date,
            starting_balance_cents=calendar.starting_balance_cents,
            lowest_balance_cents=calendar.lowest_balance_cents,
            lowest_balance_day=calendar.lowest_balance_day,
            safe_to_spend_cents=calendar.safe_to_spend_cents,
            safety_buffer_cents=calendar.safety_buffer_cents,
            low_balance_day=low_day.date if low_day else None,
            days=[CalendarDaySchema.from_domain(d) for d in calendar.days],
            collisions=CollisionSummarySchema.from_domain(calendar.collisions),
            warnings=[DataQualityWarningSchema.from_domain(w) for w in calendar.warnings],
        )


class ScenarioResultSchema(BaseModel):
    can_afford: bool
    lowest_balance_cents: int
    previous_lowest_cents: int
    lowest_date: date
    causes_overdraft: bool
    causes_low_balance: bool
    first_problem_day: Optional[date] = None
    impact_summary: str

    @classmethod
    def from_domain(cls, result: ScenarioResult) -> "ScenarioResultSchema":
        return cls(
            can_afford=result.can_afford,
            lowest_balance_cents=result.lowest_balance_cents,
            previous_lowest_cents=result.previous_lowest_cents,
            lowest_date=result.lowest_date,
            causes_overdraft=result.causes_overdraft,
            causes_low_balance=result.causes_low_balance,
            first_problem_day=result.first_problem_day,
            impact_summary=result.impact_summary,
        )


class ScenarioPreviewDaySchema(BaseModel):
    date: date
    baseline_balance_cents: int
    scenario_balance_cents: int
    delta_cents: int

    @classmethod
    def from_domain(cls, day: ScenarioPreviewDay) -> "ScenarioPreviewDaySchema":
        return cls(
            date=day.date,
            baseline_balance_cents=day.baseline_balance_cents,
            scenario_balance_cents=day.scenario_balance_cents,
            delta_cents=day.delta_cents,
        )


class ScenarioResponse(BaseModel):
    """Response for POST /v1/scenario"""

    ok: bool
    error: Optional[str] = None
    result: Optional[ScenarioResultSchema] = None
    preview: List[ScenarioPreviewDaySchema] = []
    next_affordable_date: Optional[date] = None
