"""Recurrence expansion - turns income, bill, transfer and credit-card rows into dated occurrences"""

from datetime import date, timedelta
from typing import List, NamedTuple, Optional

from cashflow_calendar.domain.models import (
    Account,
    BillSource,
    DataQualityWarning,
    DateLike,
    Frequency,
    IncomeSource,
    Occurrence,
    OccurrenceKind,
    TransferSource,
)
from cashflow_calendar.utils.date_utils import add_months, clamped_date, parse_local_date
from cashflow_calendar.utils.money import coerce_cents

DAY_PERIODS = {Frequency.WEEKLY: 7, Frequency.BIWEEKLY: 14}
MONTH_STEPS = {Frequency.MONTHLY: 1, Frequency.QUARTERLY: 3, Frequency.ANNUALLY: 12}

# Credit-card due days are limited to days every month has
MAX_PAYMENT_DUE_DAY = 28


def occurrence_dates(
    frequency: Frequency | str,
    anchor: date,
    range_start: date,
    range_end: date,
    end_date: date | None = None,
    target_day: int | None = None,
) -> List[date]:
    """
    Expand one recurrence rule into the dates it lands on within [range_start, range_end].

    Rules:
    - Anchor after the range, or end_date before it: nothing
    - Expansion stops at min(range_end, end_date)
    - ONE_TIME: the anchor itself, boundaries inclusive
    - WEEKLY/BIWEEKLY: fixed 7/14 day period, fast-forwarded to the range start
    - SEMI_MONTHLY: anchor day plus the day 15 away from it, each clamped to month end
    - MONTHLY/QUARTERLY/ANNUALLY: anchor day of month (or target_day) every 1/3/12
      months, clamped to month end (Jan 31 -> Feb 28 -> Mar 31)
    - IRREGULAR/UNKNOWN: nothing

    Returns:
        Dates in chronological order
    """
    frequency = Frequency.parse(frequency)

    if anchor > range_end:
        return []
    if end_date is not None and end_date < range_start:
        return []
    effective_end = min(range_end, end_date) if end_date is not None else range_end

    if frequency is Frequency.ONE_TIME:
        return [anchor] if range_start <= anchor <= range_end else []
    elif frequency in DAY_PERIODS:
        return _fixed_period_dates(anchor, range_start, effective_end, DAY_PERIODS[frequency])
    elif frequency is Frequency.SEMI_MONTHLY:
        return _semi_monthly_dates(anchor, range_start, effective_end)
    elif frequency in MONTH_STEPS:
        return _month_step_dates(
            anchor, range_start, effective_end, MONTH_STEPS[frequency], target_day or anchor.day
        )
    # IRREGULAR cannot be predicted; UNKNOWN is reported by the per-kind expanders
    return []


def _fixed_period_dates(anchor: date, range_start: date, end: date, period_days: int) -> List[date]:
    current = anchor
    if current < range_start:
        # ceil(days / period) periods lands on the first date >= range_start
        periods = -(-(range_start - anchor).days // period_days)
        current = anchor + timedelta(days=periods * period_days)

    dates = []
    while current <= end:
        dates.append(current)
        current = current + timedelta(days=period_days)
    return dates


def _semi_monthly_dates(anchor: date, range_start: date, end: date) -> List[date]:
    primary_day = anchor.day
    secondary_day = primary_day + 15 if primary_day <= 15 else primary_day - 15

    first_allowed = max(anchor, range_start)
    year, month = first_allowed.year, first_allowed.month

    dates = []
    while date(year, month, 1) <= end:
        month_dates = {
            clamped_date(year, month, primary_day),
            clamped_date(year, month, secondary_day),
        }
        for candidate in sorted(month_dates):
            if first_allowed <= candidate <= end:
                dates.append(candidate)
        year, month = add_months(year, month, 1)
    return dates


def _month_step_dates(
    anchor: date, range_start: date, end: date, step_months: int, target_day: int
) -> List[date]:
    def nth(period: int) -> date:
        year, month = add_months(anchor.year, anchor.month, period * step_months)
        return clamped_date(year, month, target_day)

    # Clamping is not linear, so walk period by period instead of jumping ahead
    period = 0
    current = nth(period)
    while current < range_start or current < anchor:
        period += 1
        current = nth(period)

    dates = []
    while current <= end:
        dates.append(current)
        period += 1
        current = nth(period)
    return dates


class _ResolvedSource(NamedTuple):
    anchor: date
    end_date: Optional[date]
    amount_cents: int
    frequency: Frequency


def _warn(
    warnings: Optional[List[DataQualityWarning]], source_id: str, kind: str, reason: str, detail: str
) -> None:
    if warnings is not None:
        warnings.append(DataQualityWarning(source_id=source_id, source_kind=kind, reason=reason, detail=detail))


def _resolve_source(
    source_id: str,
    kind: str,
    anchor_value: DateLike,
    end_value: DateLike,
    amount_value,
    frequency_value,
    warnings: Optional[List[DataQualityWarning]],
) -> Optional[_ResolvedSource]:
    """Validate the raw fields every source kind shares; None means "expand to nothing" """
    if anchor_value is None or anchor_value == "":
        _warn(warnings, source_id, kind, "missing_anchor", "no anchor date set")
        return None

    anchor = parse_local_date(anchor_value)
    if anchor is None:
        _warn(warnings, source_id, kind, "invalid_anchor", f"unparseable date {anchor_value!r}")
        return None

    end_date = None
    if end_value is not None and end_value != "":
        end_date = parse_local_date(end_value)
        if end_date is None:
            _warn(warnings, source_id, kind, "invalid_end_date", f"unparseable date {end_value!r}")
            return None

    amount_cents = coerce_cents(amount_value)
    if amount_cents is None:
        _warn(warnings, source_id, kind, "invalid_amount", f"non-numeric amount {amount_value!r}")
        return None

    frequency = Frequency.parse(frequency_value)
    if frequency is Frequency.UNKNOWN:
        _warn(warnings, source_id, kind, "unknown_frequency", f"unsupported frequency {frequency_value!r}")
        return None

    return _ResolvedSource(anchor, end_date, amount_cents, frequency)


def _frequency_label(value) -> str:
    return value.value if isinstance(value, Frequency) else str(value)


def expand_income(
    income: IncomeSource,
    range_start: date,
    range_end: date,
    warnings: Optional[List[DataQualityWarning]] = None,
) -> List[Occurrence]:
    """Income occurrences, anchored on next_date (falling back to start_date)"""
    if income.is_active is False:
        return []

    resolved = _resolve_source(
        income.id,
        OccurrenceKind.INCOME.value,
        income.next_date or income.start_date,
        income.end_date,
        income.amount_cents,
        income.frequency,
        warnings,
    )
    if resolved is None:
        return []

    return [
        Occurrence(
            date=day,
            source_id=income.id,
            name=income.name,
            amount_cents=resolved.amount_cents,
            kind=OccurrenceKind.INCOME,
            frequency=_frequency_label(income.frequency),
            status=income.status,
            invoice_id=income.invoice_id,
        )
        for day in occurrence_dates(
            resolved.frequency, resolved.anchor, range_start, range_end, resolved.end_date
        )
    ]


def expand_bill(
    bill: BillSource,
    range_start: date,
    range_end: date,
    warnings: Optional[List[DataQualityWarning]] = None,
) -> List[Occurrence]:
    """Bill occurrences, anchored on due_date"""
    if bill.is_active is False:
        return []

    resolved = _resolve_source(
        bill.id,
        OccurrenceKind.BILL.value,
        bill.due_date,
        bill.end_date,
        bill.amount_cents,
        bill.frequency,
        warnings,
    )
    if resolved is None:
        return []

    return [
        Occurrence(
            date=day,
            source_id=bill.id,
            name=bill.name,
            amount_cents=resolved.amount_cents,
            kind=OccurrenceKind.BILL,
            frequency=_frequency_label(bill.frequency),
        )
        for day in occurrence_dates(
            resolved.frequency, resolved.anchor, range_start, range_end, resolved.end_date
        )
    ]


def expand_transfer(
    transfer: TransferSource,
    range_start: date,
    range_end: date,
    warnings: Optional[List[DataQualityWarning]] = None,
) -> List[Occurrence]:
    """Transfer occurrences, anchored on transfer_date; recurrence_day pins the day of month"""
    if transfer.is_active is False:
        return []

    resolved = _resolve_source(
        transfer.id,
        OccurrenceKind.TRANSFER.value,
        transfer.transfer_date,
        transfer.end_date,
        transfer.amount_cents,
        transfer.frequency,
        warnings,
    )
    if resolved is None:
        return []

    target_day = transfer.recurrence_day if transfer.recurrence_day and 1 <= transfer.recurrence_day <= 31 else None

    return [
        Occurrence(
            date=day,
            source_id=transfer.id,
            name=transfer.description or "Transfer",
            amount_cents=resolved.amount_cents,
            kind=OccurrenceKind.TRANSFER,
            frequency=_frequency_label(transfer.frequency),
            from_account_id=transfer.from_account_id,
            to_account_id=transfer.to_account_id,
        )
        for day in occurrence_dates(
            resolved.frequency,
            resolved.anchor,
            range_start,
            range_end,
            resolved.end_date,
            target_day=target_day,
        )
    ]


def is_credit_card_payment_source(account: Account) -> bool:
    """A credit card generates a payment only with a due day of 1-28 and a balance owed"""
    due_day = account.payment_due_day
    if not account.is_credit_card:
        return False
    if not isinstance(due_day, int) or isinstance(due_day, bool):
        return False
    if not 1 <= due_day <= MAX_PAYMENT_DUE_DAY:
        return False
    balance = coerce_cents(account.current_balance_cents)
    return balance is not None and balance > 0


def next_payment_date(payment_due_day: int, from_date: date) -> date:
    """First due date on or after from_date"""
    this_month = clamped_date(from_date.year, from_date.month, payment_due_day)
    if from_date <= this_month:
        return this_month
    year, month = add_months(from_date.year, from_date.month, 1)
    return clamped_date(year, month, payment_due_day)


def expand_credit_card_payment(
    account: Account,
    range_start: date,
    range_end: date,
    warnings: Optional[List[DataQualityWarning]] = None,
) -> List[Occurrence]:
    """
    Next credit-card payment, treated as a bill for the full current balance.

    Only the upcoming due date is projected: future charges and whether the
    user pays in full are unknown, so repeating today's balance every month
    would overstate outflows.
    """
    if account.is_credit_card and coerce_cents(account.current_balance_cents) is None:
        _warn(
            warnings,
            account.id,
            "credit_card",
            "invalid_amount",
            f"non-numeric balance {account.current_balance_cents!r}",
        )
        return []
    if not is_credit_card_payment_source(account):
        return []

    payment_date = next_payment_date(account.payment_due_day, range_start)
    if payment_date > range_end:
        return []

    return [
        Occurrence(
            date=payment_date,
            source_id=f"cc-payment-{account.id}-{payment_date:%Y-%m}",
            name=f"{account.name} Payment",
            amount_cents=coerce_cents(account.current_balance_cents),
            kind=OccurrenceKind.BILL,
            frequency="once",
            status="pending",
        )
    ]
