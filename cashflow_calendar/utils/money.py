"""Money helpers - all engine amounts are integer cents"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional


def coerce_cents(value) -> Optional[int]:
    """
    Convert a stored amount in cents to an int.

    Floats, Decimals and numeric strings are rounded half up to the nearest
    cent. Returns None for missing, non-numeric or non-finite values
    (NaN, infinity) so callers can decide whether that is fatal.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value

    try:
        amount = Decimal(str(value).strip()) if isinstance(value, str) else Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        return None

    if not amount.is_finite():
        return None

    return int(amount.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def format_cents(amount_cents: int) -> str:
    """
    Render cents as a dollar string.

    Example:
        -123456 -> "-$1,234.56"
    """
    sign = "-" if amount_cents < 0 else ""
    dollars = Decimal(abs(amount_cents)) / Decimal(100)
    return f"{sign}${dollars:,.2f}"
