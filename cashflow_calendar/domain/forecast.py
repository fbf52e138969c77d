"""Forecast engine - projects a day-by-day balance from accounts and recurring sources"""

import logging
from collections import defaultdict
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional, Sequence

from cashflow_calendar.domain.collisions import CollisionThresholds, detect_collisions_with
from cashflow_calendar.domain.exceptions import ForecastConfigurationError, ForecastGenerationError
from cashflow_calendar.domain.models import (
    Account,
    BillSource,
    CalendarData,
    CalendarDay,
    DataQualityWarning,
    IncomeSource,
    Occurrence,
    TransferSource,
)
from cashflow_calendar.domain.recurrence import (
    expand_bill,
    expand_credit_card_payment,
    expand_income,
    expand_transfer,
)
from cashflow_calendar.domain.status import classify_status, validate_safety_buffer
from cashflow_calendar.utils.date_utils import generate_date_range, parse_local_date
from cashflow_calendar.utils.money import coerce_cents

module_logger = logging.getLogger(__name__)

# Library use stays silent until the host application configures logging
logging.getLogger("cashflow_calendar.domain").addHandler(logging.NullHandler())


def compute_starting_balance(accounts: Iterable[Account]) -> int:
    """
    Sum current balances of spendable accounts.

    An account whose is_spendable flag is missing counts as spendable; only an
    explicit False excludes it.

    Raises:
        ForecastGenerationError: A spendable account has no finite balance
    """
    total = 0
    for account in accounts:
        if account.is_spendable is False:
            continue
        balance = coerce_cents(account.current_balance_cents)
        if balance is None:
            raise ForecastGenerationError(
                f"Failed to generate forecast: account {account.id!r} has no usable balance "
                f"({account.current_balance_cents!r})"
            )
        total += balance
    return total


def compute_safe_to_spend(
    days: Sequence[CalendarDay],
    safety_buffer_cents: int,
    window_days: int = 14,
    starting_balance_cents: int = 0,
) -> int:
    """
    Amount that can leave the account today without any day in the window
    dropping below the safety buffer. Signed: negative means already short.
    """
    window = days[: max(window_days, 1)]
    lowest = min(d.balance_cents for d in window) if window else starting_balance_cents
    return lowest - safety_buffer_cents


def find_low_balance_day(
    calendar: CalendarData,
    threshold_cents: Optional[int] = None,
    window_days: Optional[int] = None,
) -> Optional[CalendarDay]:
    """First day whose balance falls below the threshold (default: the safety buffer)"""
    threshold = calendar.safety_buffer_cents if threshold_cents is None else threshold_cents
    days = calendar.days if window_days is None else calendar.days[:window_days]
    for day in days:
        if day.balance_cents < threshold:
            return day
    return None


def _group_by_day(occurrences: Iterable[Occurrence]) -> Dict[date, List[Occurrence]]:
    grouped: Dict[date, List[Occurrence]] = defaultdict(list)
    for occ in occurrences:
        grouped[occ.date].append(occ)
    return grouped


def _transfer_net(transfers: Iterable[Occurrence], spendable_by_account: Dict[str, bool]) -> int:
    """
    Effect of a day's transfers on total spendable cash.

    Only transfers whose two legs are both known accounts move the balance,
    and only when they cross the spendable boundary (e.g. checking -> credit
    card payment). Moves between two spendable accounts net to zero.
    """
    net = 0
    for transfer in transfers:
        from_spendable = spendable_by_account.get(transfer.from_account_id)
        to_spendable = spendable_by_account.get(transfer.to_account_id)
        if from_spendable is None or to_spendable is None:
            continue
        if from_spendable and not to_spendable:
            net -= transfer.amount_cents
        elif to_spendable and not from_spendable:
            net += transfer.amount_cents
    return net


def _log_warnings(log: logging.Logger, warnings: Iterable[DataQualityWarning]) -> None:
    for warning in warnings:
        log.warning(
            f"Forecast source skipped: {warning.reason}",
            extra={
                "source_id": warning.source_id,
                "source_kind": warning.source_kind,
                "reason": warning.reason,
                "detail": warning.detail,
            },
        )


def generate_forecast(
    accounts: Sequence[Account],
    income_sources: Iterable[IncomeSource],
    bill_sources: Iterable[BillSource],
    transfer_sources: Iterable[TransferSource],
    credit_card_accounts: Optional[Iterable[Account]],
    horizon_days: int,
    safety_buffer_cents: int,
    today: date,
    *,
    safe_to_spend_window_days: int = 14,
    collision_thresholds: Optional[CollisionThresholds] = None,
    logger: Optional[logging.Logger] = None,
) -> CalendarData:
    """
    Main entry point: project balances for `horizon_days` days starting at `today`.

    Flow:
    1. Starting balance from spendable accounts
    2. Expand every income, bill, credit-card payment and transfer over the horizon
    3. Sum each day's income and bills, then accumulate the running balance
    4. Classify each day against the safety buffer and track the lowest day
    5. Safe to spend over the near-term window
    6. Bill collision detection

    credit_card_accounts defaults to `accounts` when None. Sources that cannot be
    expanded (bad dates, unknown frequency) are skipped and reported on
    CalendarData.warnings and through `logger`.

    Raises:
        ForecastConfigurationError: Non-positive safety buffer or horizon, missing today
        ForecastGenerationError: Starting balance cannot be computed
    """
    log = logger or module_logger

    validate_safety_buffer(safety_buffer_cents)
    if isinstance(horizon_days, bool) or not isinstance(horizon_days, int) or horizon_days < 1:
        raise ForecastConfigurationError(f"Horizon must be at least one day, got {horizon_days!r}")
    start = parse_local_date(today)
    if start is None:
        raise ForecastConfigurationError(f"A valid 'today' date is required, got {today!r}")

    accounts = list(accounts)
    starting_balance = compute_starting_balance(accounts)

    dates = generate_date_range(start, start + timedelta(days=horizon_days - 1))
    end = dates[-1]

    warnings: List[DataQualityWarning] = []
    income = [occ for source in income_sources for occ in expand_income(source, start, end, warnings)]
    bills = [occ for source in bill_sources for occ in expand_bill(source, start, end, warnings)]
    cards = accounts if credit_card_accounts is None else list(credit_card_accounts)
    bills += [occ for card in cards for occ in expand_credit_card_payment(card, start, end, warnings)]
    transfers = [occ for source in transfer_sources for occ in expand_transfer(source, start, end, warnings)]
    _log_warnings(log, warnings)

    log.debug(
        "Expanded forecast sources",
        extra={
            "income_occurrences": len(income),
            "bill_occurrences": len(bills),
            "transfer_occurrences": len(transfers),
        },
    )

    income_by_day = _group_by_day(income)
    bills_by_day = _group_by_day(bills)
    transfers_by_day = _group_by_day(transfers)
    spendable_by_account = {account.id: account.is_spendable is not False for account in accounts}

    days: List[CalendarDay] = []
    balance = starting_balance
    for day in dates:
        day_income = income_by_day.get(day, [])
        day_bills = bills_by_day.get(day, [])
        day_transfers = transfers_by_day.get(day, [])
        transfer_net = _transfer_net(day_transfers, spendable_by_account)

        # Sum the whole day before accumulating
        balance = (
            balance
            + sum(occ.amount_cents for occ in day_income)
            - sum(occ.amount_cents for occ in day_bills)
            + transfer_net
        )
        status = classify_status(balance, safety_buffer_cents)

        days.append(
            CalendarDay(
                date=day,
                balance_cents=balance,
                income=list(day_income),
                bills=list(day_bills),
                transfers=list(day_transfers),
                status=status,
                transfer_net_cents=transfer_net,
            )
        )
        log.debug(
            "Projected day",
            extra={
                "date": day.isoformat(),
                "balance_cents": balance,
                "status": status.value,
                "income_count": len(day_income),
                "bill_count": len(day_bills),
                "transfer_count": len(day_transfers),
            },
        )

    # min() keeps the first of equal balances, i.e. the earliest day
    lowest_day = min(days, key=lambda d: d.balance_cents)

    safe_to_spend_raw = compute_safe_to_spend(
        days, safety_buffer_cents, safe_to_spend_window_days, starting_balance
    )

    collisions = detect_collisions_with(days, collision_thresholds or CollisionThresholds())

    return CalendarData(
        days=days,
        starting_balance_cents=starting_balance,
        lowest_balance_cents=lowest_day.balance_cents,
        lowest_balance_day=lowest_day.date,
        safe_to_spend_cents=max(0, safe_to_spend_raw),
        safe_to_spend_raw_cents=safe_to_spend_raw,
        safety_buffer_cents=safety_buffer_cents,
        collisions=collisions,
        warnings=warnings,
    )
