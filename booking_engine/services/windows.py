"""Booking windows on the absolute time line."""
from dataclasses import dataclass
from datetime import date, datetime, time as dt_time, timedelta


@dataclass(frozen=True)
class BookingWindow:
    """Half-open interval [start, end) of naive club-local datetimes."""

    start: datetime
    end: datetime

    @classmethod
    def from_start(cls, day: date, start_time: dt_time, duration_hours: int) -> "BookingWindow":
        start = datetime.combine(day, start_time)
        return cls(start=start, end=start + timedelta(hours=duration_hours))

    @property
    def day(self) -> date:
        return self.start.date()

    @property
    def start_time(self) -> dt_time:
        return self.start.time()

    @property
    def end_time(self) -> dt_time:
        return self.end.time()

    @property
    def ends_next_day(self) -> bool:
        # Includes windows ending exactly at midnight (end_time 00:00 of the next day)
        return self.end.date() > self.start.date()

    def overlaps(self, other: "BookingWindow") -> bool:
        return self.start < other.end and other.start < self.end

    def contains(self, instant: datetime) -> bool:
        return self.start <= instant < self.end


def time_in_range(value: dt_time, start: dt_time, end: dt_time) -> bool:
    """
    Check whether ``value`` falls in the daily range [start, end).

    The range wraps past midnight when ``end`` is earlier than ``start``.
    Equal bounds cover the whole day.
    """
    if start == end:
        return True
    if start < end:
        return start <= value < end
    return value >= start or value < end
