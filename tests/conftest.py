"""Pytest fixtures for testing"""

from datetime import date, datetime, timezone
from typing import List

import pytest
from fastapi.testclient import TestClient

from cashflow_calendar.api.dependencies import get_now
from cashflow_calendar.api.main import create_app
from cashflow_calendar.domain.forecast import generate_forecast
from cashflow_calendar.domain.models import Account, BillSource, CalendarData, IncomeSource

# 2025-02-01 is a Saturday; the 60-day horizon ends on 2025-04-01
TODAY = date(2025, 2, 1)
FIXED_NOW = datetime(2025, 2, 1, 15, 0, tzinfo=timezone.utc)


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def client() -> TestClient:
    """Create FastAPI test client with a pinned clock"""
    app = create_app()
    app.dependency_overrides[get_now] = lambda: FIXED_NOW
    return TestClient(app)


@pytest.fixture
def mixed_accounts() -> List[Account]:
    """$0 spendable + $1000 spendable + $5000 savings excluded from spendable"""
    return [
        Account(id="empty", name="Empty Checking", current_balance_cents=0, is_spendable=True),
        Account(id="checking", name="Checking", current_balance_cents=100_000, is_spendable=True),
        Account(id="savings", name="Savings", current_balance_cents=500_000, is_spendable=False),
    ]


@pytest.fixture
def sample_income(today: date) -> List[IncomeSource]:
    """$2000 paycheck every other week starting today"""
    return [
        IncomeSource(
            id="paycheck",
            name="Paycheck",
            amount_cents=200_000,
            frequency="biweekly",
            is_active=True,
            next_date=today.isoformat(),
        )
    ]


@pytest.fixture
def sample_bills() -> List[BillSource]:
    """$1500 rent on the 1st and a $500 loan anchored on Jan 31"""
    return [
        BillSource(
            id="rent",
            name="Rent",
            amount_cents=150_000,
            frequency="monthly",
            is_active=True,
            due_date="2025-01-01",
        ),
        BillSource(
            id="loan",
            name="Car Loan",
            amount_cents=50_000,
            frequency="monthly",
            is_active=True,
            due_date="2025-01-31",
        ),
    ]


def _flat_forecast(
    balance_cents: int,
    today: date = TODAY,
    horizon_days: int = 30,
    safety_buffer_cents: int = 50_000,
    income: List[IncomeSource] = (),
    bills: List[BillSource] = (),
) -> CalendarData:
    """Forecast for a single spendable account and optional sources"""
    return generate_forecast(
        [Account(id="checking", name="Checking", current_balance_cents=balance_cents, is_spendable=True)],
        list(income),
        list(bills),
        [],
        None,
        horizon_days,
        safety_buffer_cents,
        today,
    )


@pytest.fixture
def flat_forecast():
    """Factory for simple forecasts, see _flat_forecast"""
    return _flat_forecast


@pytest.fixture
def forecast_payload(today: date) -> dict:
    """Request body mirroring the sample fixtures"""
    return {
        "accounts": [
            {"id": "empty", "name": "Empty Checking", "current_balance_cents": 0, "is_spendable": True},
            {"id": "checking", "name": "Checking", "current_balance_cents": 100_000, "is_spendable": True},
            {"id": "savings", "name": "Savings", "current_balance_cents": 500_000, "is_spendable": False},
        ],
        "income": [
            {
                "id": "paycheck",
                "name": "Paycheck",
                "amount_cents": 200_000,
                "frequency": "biweekly",
                "next_date": today.isoformat(),
            }
        ],
        "bills": [
            {"id": "rent", "name": "Rent", "amount_cents": 150_000, "frequency": "monthly", "due_date": "2025-01-01"},
            {"id": "loan", "name": "Car Loan", "amount_cents": 50_000, "frequency": "monthly", "due_date": "2025-01-31"},
        ],
        "horizon_days": 60,
        "safety_buffer_cents": 50_000,
        "today": today.isoformat(),
    }
