"""What-if overlay: can the user afford one more expense?"""

from datetime import date
from typing import Dict, List, Optional, Tuple

from cashflow_calendar.domain.models import (
    CalendarData,
    Frequency,
    ScenarioExpense,
    ScenarioFrequency,
    ScenarioPreviewDay,
    ScenarioResult,
)
from cashflow_calendar.domain.recurrence import occurrence_dates
from cashflow_calendar.utils.money import coerce_cents, format_cents

_RECURRENCE = {
    ScenarioFrequency.ONE_TIME: Frequency.ONE_TIME,
    ScenarioFrequency.MONTHLY: Frequency.MONTHLY,
}


def is_valid_expense_amount(amount_cents) -> bool:
    """Positive, finite amount of at least one cent"""
    amount = coerce_cents(amount_cents)
    return amount is not None and amount > 0


def _short_date(day: date) -> str:
    return f"{day:%b} {day.day}"


def _invalid_result(forecast: CalendarData, summary: str) -> ScenarioResult:
    anchor = forecast.days[0].date if forecast.days else forecast.lowest_balance_day
    return ScenarioResult(
        can_afford=False,
        lowest_balance_cents=forecast.lowest_balance_cents,
        previous_lowest_cents=forecast.lowest_balance_cents,
        lowest_date=anchor,
        causes_overdraft=False,
        causes_low_balance=False,
        first_problem_day=None,
        impact_summary=summary,
    )


def _impact_summary(
    can_afford: bool,
    causes_overdraft: bool,
    lowest_cents: int,
    lowest_date: date,
    first_problem_day: Optional[date],
    threshold_cents: int,
) -> str:
    lowest = f"Lowest balance would be {format_cents(lowest_cents)} on {_short_date(lowest_date)}."
    if can_afford:
        return lowest

    when = _short_date(first_problem_day or lowest_date)
    if causes_overdraft:
        return f"This would cause an overdraft risk starting {when}. {lowest}"
    return f"This would push your balance below {format_cents(threshold_cents)} starting {when}. {lowest}"


def compute_scenario(
    forecast: CalendarData,
    expense: ScenarioExpense,
    low_balance_threshold_cents: int = 10_000,
    preview_radius_days: int = 3,
) -> Tuple[ScenarioResult, List[ScenarioPreviewDay]]:
    """
    Overlay a hypothetical expense on a finished forecast.

    The forecast is read, never modified. Expense dates follow the same
    recurrence rules as bills (monthly expenses clamp to month end). Each
    occurrence lowers that day's balance and every later day.

    Invalid amounts (zero, negative, NaN) come back as a "cannot afford"
    result with an explanation instead of an exception.

    Returns:
        (result, preview) where preview is up to 2 * preview_radius_days + 1
        days around the first problem day, or around the lowest day if none
    """
    if not is_valid_expense_amount(expense.amount_cents):
        return _invalid_result(forecast, "Please enter a valid amount."), []
    amount = coerce_cents(expense.amount_cents)

    days = forecast.days
    if not days:
        return _invalid_result(forecast, "No calendar data available to calculate impact."), []

    expense_dates = occurrence_dates(
        _RECURRENCE[ScenarioFrequency(expense.frequency)],
        expense.date,
        days[0].date,
        days[-1].date,
    )

    index_by_date: Dict[date, int] = {day.date: i for i, day in enumerate(days)}
    extra = [0] * len(days)
    for occurrence_date in expense_dates:
        index = index_by_date.get(occurrence_date)
        if index is not None:
            extra[index] += amount

    scenario_balances: List[int] = []
    running_extra = 0
    lowest_index = 0
    first_problem_index: Optional[int] = None
    causes_overdraft = False
    causes_low_balance = False

    for i, day in enumerate(days):
        running_extra += extra[i]
        balance = day.balance_cents - running_extra
        scenario_balances.append(balance)

        if balance < scenario_balances[lowest_index]:
            lowest_index = i
        if balance < 0:
            causes_overdraft = True
        if balance < low_balance_threshold_cents:
            causes_low_balance = True
        if first_problem_index is None and (balance < 0 or balance < low_balance_threshold_cents):
            first_problem_index = i

    can_afford = first_problem_index is None
    lowest_cents = scenario_balances[lowest_index]
    lowest_date = days[lowest_index].date
    first_problem_day = None if first_problem_index is None else days[first_problem_index].date

    anchor = lowest_index if first_problem_index is None else first_problem_index
    start = max(0, anchor - preview_radius_days)
    stop = min(len(days) - 1, anchor + preview_radius_days)
    preview = [
        ScenarioPreviewDay(
            date=days[i].date,
            baseline_balance_cents=days[i].balance_cents,
            scenario_balance_cents=scenario_balances[i],
            delta_cents=days[i].balance_cents - scenario_balances[i],
        )
        for i in range(start, stop + 1)
    ]

    result = ScenarioResult(
        can_afford=can_afford,
        lowest_balance_cents=lowest_cents,
        previous_lowest_cents=forecast.lowest_balance_cents,
        lowest_date=lowest_date,
        causes_overdraft=causes_overdraft,
        causes_low_balance=causes_low_balance,
        first_problem_day=first_problem_day,
        impact_summary=_impact_summary(
            can_afford,
            causes_overdraft,
            lowest_cents,
            lowest_date,
            first_problem_day,
            low_balance_threshold_cents,
        ),
    )
    return result, preview


def next_affordable_date(
    forecast: CalendarData,
    expense: ScenarioExpense,
    low_balance_threshold_cents: int = 10_000,
) -> Optional[date]:
    """
    Suggest the first income day after the chosen date on which the same
    expense (same amount and frequency) would be affordable.
    """
    for day in forecast.days:
        if day.date <= expense.date or not day.income:
            continue
        moved = ScenarioExpense(
            amount_cents=expense.amount_cents,
            date=day.date,
            frequency=expense.frequency,
            name=expense.name,
        )
        result, _ = compute_scenario(forecast, moved, low_balance_threshold_cents)
        if result.can_afford:
            return day.date
    return None
