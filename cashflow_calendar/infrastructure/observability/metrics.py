"""Prometheus metrics for forecast volume, affordability outcomes and source data quality"""

from prometheus_client import Counter, Histogram

from cashflow_calendar.domain.models import CalendarData, ScenarioResult

# Forecast metrics
forecast_counter = Counter(
    "cashflow_forecast_total",
    "Total forecasts requested",
    ["outcome"],  # generated | rejected | failed
)

forecast_duration_histogram = Histogram(
    "cashflow_forecast_duration_seconds",
    "Time spent generating a forecast",
    buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0],
)

collision_counter = Counter(
    "cashflow_bill_collisions_total",
    "Bill collisions found in generated forecasts",
    ["severity"],  # warning | critical
)

data_quality_warning_counter = Counter(
    "cashflow_source_warnings_total",
    "Sources skipped during expansion",
    ["source_kind", "reason"],
)

# Scenario metrics
scenario_counter = Counter(
    "cashflow_scenario_total",
    "Affordability checks evaluated",
    ["outcome"],  # affordable | low_balance | overdraft | invalid
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_forecast(calendar: CalendarData, duration_seconds: float) -> None:
    """Record forecast metrics, including per-severity collisions and skipped sources"""
    forecast_counter.labels(outcome="generated").inc()
    forecast_duration_histogram.observe(duration_seconds)

    if calendar.collisions.warning_count:
        collision_counter.labels(severity="warning").inc(calendar.collisions.warning_count)
    if calendar.collisions.critical_count:
        collision_counter.labels(severity="critical").inc(calendar.collisions.critical_count)

    for warning in calendar.warnings:
        data_quality_warning_counter.labels(source_kind=warning.source_kind, reason=warning.reason).inc()


def record_scenario(result: ScenarioResult, valid: bool = True) -> None:
    """Bucket affordability outcomes"""
    if not valid:
        outcome = "invalid"
    elif result.can_afford:
        outcome = "affordable"
    elif result.causes_overdraft:
        outcome = "overdraft"
    else:
        outcome = "low_balance"

    scenario_counter.labels(outcome=outcome).inc()
