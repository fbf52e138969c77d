"""Unit tests for recurrence expansion"""

from datetime import date, timedelta

from cashflow_calendar.domain.models import (
    Account,
    BillSource,
    Frequency,
    IncomeSource,
    OccurrenceKind,
    TransferSource,
)
from cashflow_calendar.domain.recurrence import (
    expand_bill,
    expand_credit_card_payment,
    expand_income,
    expand_transfer,
    is_credit_card_payment_source,
    next_payment_date,
    occurrence_dates,
)


def test_monthly_month_end_clamping_non_leap_year():
    """Jan 31 anchor lands on the last day of every shorter month"""
    dates = occurrence_dates(Frequency.MONTHLY, date(2025, 1, 31), date(2025, 1, 1), date(2025, 5, 31))

    assert dates == [
        date(2025, 1, 31),
        date(2025, 2, 28),
        date(2025, 3, 31),
        date(2025, 4, 30),
        date(2025, 5, 31),
    ]


def test_monthly_month_end_clamping_leap_year():
    """Leap years clamp to Feb 29, and March returns to the 31st"""
    dates = occurrence_dates(Frequency.MONTHLY, date(2024, 1, 31), date(2024, 2, 1), date(2024, 3, 31))

    assert dates == [date(2024, 2, 29), date(2024, 3, 31)]


def test_monthly_anchor_before_range_steps_forward():
    """Anchor months before the range are stepped over, not emitted"""
    dates = occurrence_dates(Frequency.MONTHLY, date(2024, 11, 15), date(2025, 2, 1), date(2025, 3, 31))

    assert dates == [date(2025, 2, 15), date(2025, 3, 15)]


def test_quarterly_keeps_target_day():
    """Quarterly clamps per period without drifting the target day"""
    dates = occurrence_dates(Frequency.QUARTERLY, date(2024, 11, 30), date(2025, 1, 1), date(2025, 12, 31))

    assert dates == [date(2025, 2, 28), date(2025, 5, 30), date(2025, 8, 30), date(2025, 11, 30)]


def test_annually_pins_month_and_handles_feb_29():
    """Annual Feb 29 anchor falls back to Feb 28 in non-leap years"""
    dates = occurrence_dates(Frequency.ANNUALLY, date(2024, 2, 29), date(2024, 3, 1), date(2028, 12, 31))

    assert dates == [date(2025, 2, 28), date(2026, 2, 28), date(2027, 2, 28), date(2028, 2, 29)]


def test_weekly_fast_forward_includes_range_start():
    """An anchor exactly N weeks before the range start produces the range start itself"""
    dates = occurrence_dates(Frequency.WEEKLY, date(2025, 1, 6), date(2025, 1, 20), date(2025, 2, 3))

    assert dates == [date(2025, 1, 20), date(2025, 1, 27), date(2025, 2, 3)]


def test_biweekly_fast_forward():
    """19 days past the anchor rounds up to two 14-day periods"""
    dates = occurrence_dates(Frequency.BIWEEKLY, date(2025, 1, 1), date(2025, 1, 20), date(2025, 2, 28))

    assert dates == [date(2025, 1, 29), date(2025, 2, 12), date(2025, 2, 26)]


def test_weekly_end_date_truncation():
    """Weekly income ending 30 days out inside a 60-day horizon"""
    start = date(2025, 3, 3)
    end_date = start + timedelta(days=30)

    dates = occurrence_dates(Frequency.WEEKLY, start, start, start + timedelta(days=59), end_date)

    assert 4 <= len(dates) <= 5
    assert all(d <= end_date for d in dates)
    assert dates[0] == start


def test_end_date_before_range_is_empty():
    dates = occurrence_dates(Frequency.WEEKLY, date(2024, 1, 1), date(2025, 1, 1), date(2025, 3, 1), date(2024, 6, 1))

    assert dates == []


def test_anchor_after_range_is_empty():
    dates = occurrence_dates(Frequency.MONTHLY, date(2025, 6, 1), date(2025, 1, 1), date(2025, 3, 1))

    assert dates == []


def test_one_time_boundaries_are_inclusive():
    """One-time sources count on the first and last day of the range, nowhere else"""
    start, end = date(2025, 1, 1), date(2025, 1, 31)

    assert occurrence_dates(Frequency.ONE_TIME, start, start, end) == [start]
    assert occurrence_dates(Frequency.ONE_TIME, end, start, end) == [end]
    assert occurrence_dates(Frequency.ONE_TIME, date(2025, 1, 15), start, end) == [date(2025, 1, 15)]
    assert occurrence_dates(Frequency.ONE_TIME, date(2024, 12, 31), start, end) == []
    assert occurrence_dates(Frequency.ONE_TIME, date(2025, 2, 1), start, end) == []


def test_semi_monthly_low_anchor():
    """Anchor on the 15th pairs with the 30th, clamped to Feb 28"""
    dates = occurrence_dates(Frequency.SEMI_MONTHLY, date(2025, 1, 15), date(2025, 1, 1), date(2025, 3, 31))

    assert dates == [
        date(2025, 1, 15),
        date(2025, 1, 30),
        date(2025, 2, 15),
        date(2025, 2, 28),
        date(2025, 3, 15),
        date(2025, 3, 30),
    ]


def test_semi_monthly_high_anchor_never_precedes_anchor():
    """Anchor on the 31st pairs with the 16th; the 16th before the anchor is skipped"""
    dates = occurrence_dates(Frequency.SEMI_MONTHLY, date(2025, 1, 31), date(2025, 1, 1), date(2025, 3, 31))

    assert dates == [
        date(2025, 1, 31),
        date(2025, 2, 16),
        date(2025, 2, 28),
        date(2025, 3, 16),
        date(2025, 3, 31),
    ]


def test_semi_monthly_respects_end_date():
    dates = occurrence_dates(
        Frequency.SEMI_MONTHLY, date(2025, 1, 1), date(2025, 1, 1), date(2025, 3, 31), date(2025, 2, 10)
    )

    assert dates == [date(2025, 1, 1), date(2025, 1, 16), date(2025, 2, 1)]


def test_irregular_expands_to_nothing():
    dates = occurrence_dates(Frequency.IRREGULAR, date(2025, 1, 10), date(2025, 1, 1), date(2025, 3, 31))

    assert dates == []


def test_frequency_parse_aliases():
    assert Frequency.parse(" Semi-Monthly ") is Frequency.SEMI_MONTHLY
    assert Frequency.parse("semimonthly") is Frequency.SEMI_MONTHLY
    assert Frequency.parse("once") is Frequency.ONE_TIME
    assert Frequency.parse("yearly") is Frequency.ANNUALLY
    assert Frequency.parse("fortnightly") is Frequency.UNKNOWN
    assert Frequency.parse(None) is Frequency.UNKNOWN


def test_inactive_sources_expand_to_nothing():
    """is_active=False wins over any frequency"""
    start, end = date(2025, 1, 1), date(2025, 3, 31)
    for frequency in ["one-time", "weekly", "biweekly", "semi-monthly", "monthly", "quarterly", "annually"]:
        bill = BillSource(
            id="b", name="Bill", amount_cents=1000, frequency=frequency, is_active=False, due_date="2025-01-05"
        )
        income = IncomeSource(
            id="i", name="Pay", amount_cents=1000, frequency=frequency, is_active=False, next_date="2025-01-05"
        )
        assert expand_bill(bill, start, end) == []
        assert expand_income(income, start, end) == []


def test_missing_active_flag_counts_as_active():
    bill = BillSource(id="b", name="Bill", amount_cents=1000, frequency="monthly", is_active=None, due_date="2025-01-05")

    occurrences = expand_bill(bill, date(2025, 1, 1), date(2025, 2, 28))

    assert [o.date for o in occurrences] == [date(2025, 1, 5), date(2025, 2, 5)]
    assert all(o.kind is OccurrenceKind.BILL for o in occurrences)


def test_income_falls_back_to_start_date_and_keeps_invoice_link():
    income = IncomeSource(
        id="inv-income",
        name="Client invoice",
        amount_cents=80_000,
        frequency="one-time",
        start_date="2025-01-20",
        status="pending",
        invoice_id="inv-42",
    )

    occurrences = expand_income(income, date(2025, 1, 1), date(2025, 1, 31))

    assert len(occurrences) == 1
    assert occurrences[0].date == date(2025, 1, 20)
    assert occurrences[0].status == "pending"
    assert occurrences[0].invoice_id == "inv-42"
    assert occurrences[0].kind is OccurrenceKind.INCOME


def test_unknown_frequency_is_reported():
    """Unsupported frequencies expand to nothing but leave a warning behind"""
    warnings = []
    bill = BillSource(id="gym", name="Gym", amount_cents=4000, frequency="fortnightly", due_date="2025-01-05")

    assert expand_bill(bill, date(2025, 1, 1), date(2025, 3, 31), warnings) == []
    assert len(warnings) == 1
    assert warnings[0].reason == "unknown_frequency"
    assert warnings[0].source_id == "gym"
    assert warnings[0].source_kind == "bill"


def test_unparseable_and_missing_anchor_are_reported():
    warnings = []
    broken = IncomeSource(id="a", name="A", amount_cents=100, frequency="monthly", next_date="31/01/2025")
    missing = IncomeSource(id="b", name="B", amount_cents=100, frequency="monthly")

    assert expand_income(broken, date(2025, 1, 1), date(2025, 3, 31), warnings) == []
    assert expand_income(missing, date(2025, 1, 1), date(2025, 3, 31), warnings) == []
    assert [w.reason for w in warnings] == ["invalid_anchor", "missing_anchor"]


def test_irregular_income_is_not_a_warning():
    warnings = []
    income = IncomeSource(id="gig", name="Gig", amount_cents=100, frequency="irregular", next_date="2025-01-10")

    assert expand_income(income, date(2025, 1, 1), date(2025, 3, 31), warnings) == []
    assert warnings == []


def test_transfer_recurrence_day_and_default_name():
    transfer = TransferSource(
        id="t1",
        amount_cents=25_000,
        frequency="monthly",
        from_account_id="checking",
        to_account_id="savings",
        transfer_date="2025-01-10",
        recurrence_day=25,
    )

    occurrences = expand_transfer(transfer, date(2025, 1, 1), date(2025, 3, 31))

    assert [o.date for o in occurrences] == [date(2025, 1, 25), date(2025, 2, 25), date(2025, 3, 25)]
    assert occurrences[0].name == "Transfer"
    assert occurrences[0].from_account_id == "checking"
    assert occurrences[0].to_account_id == "savings"
    assert occurrences[0].kind is OccurrenceKind.TRANSFER


def test_credit_card_payment_only_next_due_date():
    card = Account(
        id="card-1",
        name="Visa",
        current_balance_cents=30_000,
        is_spendable=False,
        account_type="credit_card",
        payment_due_day=15,
    )

    occurrences = expand_credit_card_payment(card, date(2025, 3, 20), date(2025, 5, 18))

    assert len(occurrences) == 1
    payment = occurrences[0]
    assert payment.date == date(2025, 4, 15)
    assert payment.amount_cents == 30_000
    assert payment.source_id == "cc-payment-card-1-2025-04"
    assert payment.name == "Visa Payment"
    assert payment.kind is OccurrenceKind.BILL
    assert payment.status == "pending"


def test_credit_card_payment_eligibility():
    def card(**overrides) -> Account:
        fields = dict(
            id="c", name="Card", current_balance_cents=10_000, account_type="credit_card", payment_due_day=10
        )
        fields.update(overrides)
        return Account(**fields)

    assert is_credit_card_payment_source(card())
    assert not is_credit_card_payment_source(card(payment_due_day=29))
    assert not is_credit_card_payment_source(card(payment_due_day=0))
    assert not is_credit_card_payment_source(card(payment_due_day=None))
    assert not is_credit_card_payment_source(card(current_balance_cents=0))
    assert not is_credit_card_payment_source(card(account_type="checking"))


def test_next_payment_date():
    assert next_payment_date(10, date(2025, 1, 10)) == date(2025, 1, 10)
    assert next_payment_date(10, date(2025, 1, 11)) == date(2025, 2, 10)
    assert next_payment_date(5, date(2025, 12, 20)) == date(2026, 1, 5)


def test_occurrences_stay_inside_range():
    """Every expanded date lies within [start, end] for every frequency"""
    start, end = date(2025, 2, 1), date(2025, 4, 1)
    for frequency in Frequency:
        for anchor in [date(2024, 12, 31), date(2025, 1, 31), date(2025, 2, 14), date(2025, 3, 31)]:
            for d in occurrence_dates(frequency, anchor, start, end):
                assert start <= d <= end
