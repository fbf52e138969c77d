"""Date manipulation utilities"""

import calendar
import logging
from datetime import date, datetime, timedelta
from typing import List, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)


def generate_date_range(start: date, end: date) -> List[date]:
    """Generate list of dates from start to end (inclusive)"""
    days = (end - start).days + 1
    return [start + timedelta(days=i) for i in range(days)]


def last_day_of_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def clamped_date(year: int, month: int, day: int) -> date:
    """Build a date, pulling `day` back to the month's last day when it overflows (Jan 31 -> Feb 28)"""
    return date(year, month, min(day, last_day_of_month(year, month)))


def add_months(year: int, month: int, months: int) -> tuple[int, int]:
    """Shift a (year, month) pair by a number of months"""
    index = year * 12 + (month - 1) + months
    return index // 12, index % 12 + 1


def parse_local_date(value) -> Optional[date]:
    """
    Normalize a stored date to a calendar day.

    Accepts date, datetime (the calendar day it names, no timezone shift)
    and ISO strings ("2025-01-31" or a full timestamp). Returns None when the
    value is missing or unparseable.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            return date.fromisoformat(text[:10])
        except ValueError:
            return None
    return None


def today_for_timezone(tz_name: Optional[str], now: Optional[datetime] = None) -> date:
    """
    Calendar day "today" as seen from a user's IANA timezone.

    Falls back to the server's local date when no zone is given or the zone
    is unknown.
    """
    if not tz_name:
        return (now or datetime.now()).date()

    try:
        zone = ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown timezone, using server date", extra={"timezone": tz_name})
        return (now or datetime.now()).date()

    if now is None:
        return datetime.now(zone).date()
    if now.tzinfo is None:
        # Naive instants are read as server-local time
        now = now.astimezone()
    return now.astimezone(zone).date()
