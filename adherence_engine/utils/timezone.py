"""
User-local day boundaries.

Every "day" in the engine is the user's local calendar date. Timestamps are
stored as naive UTC; this module converts between the two and is the only
place that decides which calendar day an instant belongs to.
"""
from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Optional, Tuple, Union

import pytz

from adherence_engine.config import settings
from adherence_engine.utils.logger import get_logger

logger = get_logger(__name__)

DateLike = Union[date, str]


def resolve_timezone(tz_name: Optional[str]):
    """
    Resolve an IANA timezone name, failing soft to the fallback zone.

    A malformed timezone on one user must never crash a scoring pass.
    """
    name = tz_name or settings.DEFAULT_TIMEZONE
    try:
        return pytz.timezone(name)
    except pytz.UnknownTimeZoneError:
        logger.warning(f"Invalid timezone {name!r}, falling back to {settings.FALLBACK_TIMEZONE}")
        return pytz.timezone(settings.FALLBACK_TIMEZONE)


def as_utc(instant: datetime) -> datetime:
    """Attach UTC to a naive instant, or convert an aware one to UTC."""
    if instant.tzinfo is None:
        return pytz.utc.localize(instant)
    return instant.astimezone(pytz.utc)


def to_naive_utc(instant: datetime) -> datetime:
    """Naive UTC form used by the DateTime columns."""
    return as_utc(instant).replace(tzinfo=None)


def to_local_date(instant: datetime, tz_name: Optional[str]) -> date:
    """Calendar date of a UTC instant in the user's timezone."""
    tz = resolve_timezone(tz_name)
    return as_utc(instant).astimezone(tz).date()


def to_local_date_string(instant: datetime, tz_name: Optional[str]) -> str:
    """``YYYY-MM-DD`` of a UTC instant in the user's timezone."""
    return to_local_date(instant, tz_name).isoformat()


def local_day_bounds_utc(day: date, tz_name: Optional[str]) -> Tuple[datetime, datetime]:
    """
    Naive UTC ``[start, end)`` covering one local calendar day.

    DST transitions make local days 23 or 25 hours long, so both ends are
    localized separately instead of adding 24 hours.
    """
    tz = resolve_timezone(tz_name)
    start = tz.localize(datetime.combine(day, time.min))
    end = tz.localize(datetime.combine(day + timedelta(days=1), time.min))
    return to_naive_utc(start), to_naive_utc(end)


def seconds_until_local_midnight(now: datetime, tz_name: Optional[str]) -> int:
    """Seconds from ``now`` until the next local midnight of the user."""
    tz = resolve_timezone(tz_name)
    today = as_utc(now).astimezone(tz).date()
    next_midnight = tz.localize(datetime.combine(today + timedelta(days=1), time.min))
    return max(int((next_midnight - as_utc(now)).total_seconds()), 1)


def parse_day(value: DateLike) -> date:
    """Accept a ``date`` or a ``YYYY-MM-DD`` string."""
    if isinstance(value, datetime):
        raise TypeError("Expected a calendar date, got a datetime; convert it with to_local_date first")
    if isinstance(value, date):
        return value
    return datetime.strptime(value, "%Y-%m-%d").date()
