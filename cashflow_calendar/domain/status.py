"""Day status classification against the user's safety buffer"""

from cashflow_calendar.domain.exceptions import ForecastConfigurationError
from cashflow_calendar.domain.models import DayStatus


def validate_safety_buffer(safety_buffer_cents) -> int:
    """Reject buffers that cannot drive classification (zero, negative, non-integral)"""
    if isinstance(safety_buffer_cents, bool) or not isinstance(safety_buffer_cents, int):
        raise ForecastConfigurationError(f"Safety buffer must be whole cents, got {safety_buffer_cents!r}")
    if safety_buffer_cents <= 0:
        raise ForecastConfigurationError(f"Safety buffer must be positive, got {safety_buffer_cents}")
    return safety_buffer_cents


def classify_status(balance_cents: int, safety_buffer_cents: int) -> DayStatus:
    """
    Map a projected balance to a health status.

    Thresholds (multiples of the safety buffer):
    - >= 2.0x: green  (comfortable)
    - >= 1.5x: yellow (caution)
    - >= 1.0x: orange (at the buffer)
    - <  1.0x: red    (below the buffer or overdrawn)
    """
    validate_safety_buffer(safety_buffer_cents)

    if balance_cents >= 2 * safety_buffer_cents:
        return DayStatus.GREEN
    elif 2 * balance_cents >= 3 * safety_buffer_cents:
        return DayStatus.YELLOW
    elif balance_cents >= safety_buffer_cents:
        return DayStatus.ORANGE
    else:
        return DayStatus.RED
