"""Wall-clock access for the booking rules."""
from datetime import datetime, timedelta
from typing import Optional

import pytz

from booking_engine.core.config import settings


class Clock:
    """Source of the current local time."""

    def now(self, timezone: Optional[str] = None) -> datetime:
        raise NotImplementedError


class SystemClock(Clock):
    """Clock backed by the system time, converted to a club's local time."""

    def now(self, timezone: Optional[str] = None) -> datetime:
        tz = pytz.timezone(timezone or settings.TIMEZONE)
        current_time_utc = datetime.now(pytz.UTC)
        # Reservations store naive wall-clock values local to the club
        return current_time_utc.astimezone(tz).replace(tzinfo=None)


class FixedClock(Clock):
    """Clock frozen at a given naive local instant. Used by tests and replays."""

    def __init__(self, instant: datetime):
        self.instant = instant

    def now(self, timezone: Optional[str] = None) -> datetime:
        return self.instant

    def advance(self, **delta) -> None:
        self.instant = self.instant + timedelta(**delta)


system_clock = SystemClock()
