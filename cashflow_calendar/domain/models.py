"""Domain models - pure Python dataclasses representing forecast entities"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import List, Optional, Union

# Raw rows from persistence may carry dates as ISO strings
DateLike = Union[date, str, None]


class Frequency(str, Enum):
    """How often a recurring source repeats"""

    ONE_TIME = "one-time"
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    SEMI_MONTHLY = "semi-monthly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    ANNUALLY = "annually"
    IRREGULAR = "irregular"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: Union["Frequency", str, None]) -> "Frequency":
        """Map a stored frequency label to a Frequency, UNKNOWN when unrecognised"""
        if isinstance(value, Frequency):
            return value
        if not value:
            return cls.UNKNOWN
        normalized = str(value).strip().lower().replace("_", "-")
        normalized = _FREQUENCY_ALIASES.get(normalized, normalized)
        try:
            return cls(normalized)
        except ValueError:
            return cls.UNKNOWN


_FREQUENCY_ALIASES = {
    "semimonthly": "semi-monthly",
    "once": "one-time",
    "onetime": "one-time",
    "bi-weekly": "biweekly",
    "yearly": "annually",
    "annual": "annually",
}


class OccurrenceKind(str, Enum):
    INCOME = "income"
    BILL = "bill"
    TRANSFER = "transfer"


class DayStatus(str, Enum):
    """Balance health relative to the safety buffer"""

    GREEN = "green"
    YELLOW = "yellow"
    ORANGE = "orange"
    RED = "red"


class CollisionSeverity(str, Enum):
    WARNING = "warning"
    CRITICAL = "critical"


class ScenarioFrequency(str, Enum):
    ONE_TIME = "one-time"
    MONTHLY = "monthly"


@dataclass
class Account:
    """Bank or credit-card account snapshot"""

    id: str
    name: str
    current_balance_cents: int
    is_spendable: Optional[bool] = None  # None counts as spendable
    account_type: Optional[str] = None
    credit_limit_cents: Optional[int] = None
    apr: Optional[float] = None
    payment_due_day: Optional[int] = None
    statement_close_day: Optional[int] = None

    @property
    def is_credit_card(self) -> bool:
        return self.account_type == "credit_card"


@dataclass
class IncomeSource:
    """Recurring or one-time income"""

    id: str
    name: str
    amount_cents: int
    frequency: Union[Frequency, str]
    is_active: Optional[bool] = None  # None counts as active
    next_date: DateLike = None
    start_date: DateLike = None  # fallback anchor when next_date is missing
    end_date: DateLike = None
    status: Optional[str] = None  # e.g. "pending" for invoice-linked income
    invoice_id: Optional[str] = None


@dataclass
class BillSource:
    """Recurring or one-time bill"""

    id: str
    name: str
    amount_cents: int
    frequency: Union[Frequency, str]
    is_active: Optional[bool] = None
    due_date: DateLike = None
    end_date: DateLike = None


@dataclass
class TransferSource:
    """Scheduled movement of money between two accounts"""

    id: str
    amount_cents: int
    frequency: Union[Frequency, str]
    from_account_id: str
    to_account_id: str
    transfer_date: DateLike = None
    description: Optional[str] = None
    is_active: Optional[bool] = None
    end_date: DateLike = None
    recurrence_day: Optional[int] = None  # overrides the anchor's day of month
    from_account_name: Optional[str] = None
    to_account_name: Optional[str] = None


@dataclass(frozen=True)
class Occurrence:
    """Single dated instance of an income, bill or transfer"""

    date: date
    source_id: str
    name: str
    amount_cents: int
    kind: OccurrenceKind
    frequency: str
    status: Optional[str] = None
    invoice_id: Optional[str] = None
    from_account_id: Optional[str] = None
    to_account_id: Optional[str] = None


@dataclass(frozen=True)
class DataQualityWarning:
    """A source that could not be expanded as stored"""

    source_id: str
    source_kind: str
    reason: str  # missing_anchor | invalid_anchor | invalid_end_date | invalid_amount | unknown_frequency
    detail: str = ""


@dataclass
class CalendarDay:
    """Projected state at the end of one calendar day"""

    date: date
    balance_cents: int
    income: List[Occurrence] = field(default_factory=list)
    bills: List[Occurrence] = field(default_factory=list)
    transfers: List[Occurrence] = field(default_factory=list)
    status: DayStatus = DayStatus.GREEN
    transfer_net_cents: int = 0

    @property
    def income_total_cents(self) -> int:
        return sum(occ.amount_cents for occ in self.income)

    @property
    def bills_total_cents(self) -> int:
        return sum(occ.amount_cents for occ in self.bills)


@dataclass(frozen=True)
class CollisionBill:
    id: str
    name: str
    amount_cents: int


@dataclass
class BillCollision:
    """Day on which several bills land together"""

    date: date
    bills: List[CollisionBill]
    total_amount_cents: int
    severity: CollisionSeverity


@dataclass
class CollisionSummary:
    collisions: List[BillCollision] = field(default_factory=list)
    has_collisions: bool = False
    critical_count: int = 0
    warning_count: int = 0
    highest_collision_amount_cents: int = 0
    highest_collision_date: Optional[date] = None


@dataclass
class CalendarData:
    """Complete forecast: one CalendarDay per day of the horizon plus summary"""

    days: List[CalendarDay]
    starting_balance_cents: int
    lowest_balance_cents: int
    lowest_balance_day: date
    safe_to_spend_cents: int
    safe_to_spend_raw_cents: int
    safety_buffer_cents: int
    collisions: CollisionSummary
    warnings: List[DataQualityWarning] = field(default_factory=list)


@dataclass(frozen=True)
class ScenarioExpense:
    """Hypothetical expense to overlay on a forecast"""

    amount_cents: Union[int, float]
    date: date
    frequency: ScenarioFrequency = ScenarioFrequency.ONE_TIME
    name: str = "New purchase"


@dataclass
class ScenarioResult:
    can_afford: bool
    lowest_balance_cents: int
    previous_lowest_cents: int
    lowest_date: date
    causes_overdraft: bool
    causes_low_balance: bool
    first_problem_day: Optional[date]
    impact_summary: str


@dataclass(frozen=True)
class ScenarioPreviewDay:
    date: date
    baseline_balance_cents: int
    scenario_balance_cents: int
    delta_cents: int  # baseline - scenario
