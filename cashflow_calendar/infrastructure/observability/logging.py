"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict

from pythonjsonlogger.json import JsonFormatter

from cashflow_calendar.domain.models import CalendarData, ScenarioResult

SERVICE_NAME = "cashflow-calendar"
ENGINE_LOGGER = "cashflow_calendar.domain"


class CustomJsonFormatter(JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = SERVICE_NAME


def setup_logging(level: str = "INFO", verbose: bool = False) -> None:
    """
    Configure structured JSON logging.

    verbose turns on DEBUG for the forecast engine only, which traces every
    projected day (balance, status, occurrence counts).
    """
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    # JSON handler for stdout
    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s")
    handler.setFormatter(formatter)
    logger.addHandler(handler)

    logging.getLogger(ENGINE_LOGGER).setLevel(logging.DEBUG if verbose else logging.NOTSET)


def log_forecast(request_id: str, calendar: CalendarData, duration_ms: float) -> None:
    """Log structured forecast outcome for analysis"""
    logging.info(
        "Forecast generated",
        extra={
            "request_id": request_id,
            "step": "forecast_complete",
            "horizon_days": len(calendar.days),
            "starting_balance_cents": calendar.starting_balance_cents,
            "lowest_balance_cents": calendar.lowest_balance_cents,
            "lowest_balance_day": calendar.lowest_balance_day.isoformat(),
            "safe_to_spend_cents": calendar.safe_to_spend_cents,
            "collision_count": len(calendar.collisions.collisions),
            "warning_count": len(calendar.warnings),
            "duration_ms": duration_ms,
        },
    )


def log_scenario(request_id: str, result: ScenarioResult, amount_cents, duration_ms: float) -> None:
    """Log structured affordability outcome"""
    logging.info(
        "Scenario evaluated",
        extra={
            "request_id": request_id,
            "step": "scenario_complete",
            "amount_cents": amount_cents,
            "can_afford": result.can_afford,
            "causes_overdraft": result.causes_overdraft,
            "causes_low_balance": result.causes_low_balance,
            "lowest_balance_cents": result.lowest_balance_cents,
            "duration_ms": duration_ms,
        },
    )
