import datetime as dt
from typing import Callable
from zoneinfo import ZoneInfo

from loguru import logger

Clock = Callable[[], dt.datetime]


def resolve_timezone(name: str) -> dt.tzinfo:
    """Resolve a timezone name, falling back to UTC if invalid."""
    try:
        return ZoneInfo(name)
    except Exception:
        logger.warning("Invalid clinic timezone '{}'; defaulting to UTC", name)
        return dt.timezone.utc


def clinic_clock(timezone_name: str) -> Clock:
    """Return a clock reading naive wall time in the clinic's timezone.

    Appointment slots are stored as naive clinic-local datetimes, so "now" has
    to be compared in the same frame.
    """
    tz = resolve_timezone(timezone_name)

    def now() -> dt.datetime:
        return dt.datetime.now(tz).replace(tzinfo=None)

    return now


def day_bounds(start: dt.date, end: dt.date) -> tuple[dt.datetime, dt.datetime]:
    """Expand an inclusive date range to ``[start 00:00, end 23:59:59.999999]``."""
    return dt.datetime.combine(start, dt.time.min), dt.datetime.combine(end, dt.time.max)
