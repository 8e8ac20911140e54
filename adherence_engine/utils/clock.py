from datetime import datetime, timedelta
from typing import Optional, Protocol

import pytz


class Clock(Protocol):
    """Source of the current instant. Always returns an aware UTC datetime."""

    def now(self) -> datetime:
        ...


class SystemClock:
    def now(self) -> datetime:
        return datetime.now(pytz.utc)


class FixedClock:
    """
    Clock frozen at a given instant, advanced explicitly.

    Used by tests and by backfill jobs that replay a past day.
    """

    def __init__(self, instant: datetime):
        self._instant = instant if instant.tzinfo else pytz.utc.localize(instant)

    def now(self) -> datetime:
        return self._instant

    def advance(self, days: int = 0, hours: int = 0, minutes: int = 0) -> None:
        self._instant = self._instant + timedelta(days=days, hours=hours, minutes=minutes)

    def set(self, instant: datetime) -> None:
        self._instant = instant if instant.tzinfo else pytz.utc.localize(instant)


system_clock = SystemClock()


def resolve_clock(clock: Optional[Clock]) -> Clock:
    return clock or system_clock
