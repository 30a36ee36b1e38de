"""Club operating hours lookup and window checks."""
import logging
from dataclasses import dataclass
from datetime import date, datetime, time as dt_time, timedelta
from typing import Optional

from sqlalchemy import select, and_
from sqlalchemy.ext.asyncio import AsyncSession

from booking_engine.models.operating_hours import OperatingHours
from booking_engine.services.windows import BookingWindow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OpeningWindow:
    """Opening boundaries of a club on one weekday."""

    opens_at: dt_time
    closes_at: dt_time
    is_open: bool = True

    @property
    def closes_after_midnight(self) -> bool:
        return self.closes_at < self.opens_at

    @property
    def round_the_clock(self) -> bool:
        return self.closes_at == self.opens_at

    def bounds_on(self, day: date):
        """Absolute opening and closing instants for a booking made on ``day``."""
        opening = datetime.combine(day, self.opens_at)
        if self.round_the_clock:
            return opening, opening + timedelta(days=1)
        closing_day = day + timedelta(days=1) if self.closes_after_midnight else day
        return opening, datetime.combine(closing_day, self.closes_at)


def iso_weekday(day: date) -> int:
    """Weekday number 1 (Monday) through 7 (Sunday)."""
    return day.isoweekday()


async def hours_for(
    db: AsyncSession, club_id: int, weekday: int
) -> Optional[OpeningWindow]:
    """
    Get the opening window of a club for a weekday.

    Args:
        db: Database session
        club_id: Club ID
        weekday: ISO weekday (1-7)

    Returns:
        The opening window, or None when the day is not configured
    """
    result = await db.execute(
        select(OperatingHours).where(
            and_(
                OperatingHours.club_id == club_id,
                OperatingHours.weekday == weekday,
            )
        )
    )
    row = result.scalar_one_or_none()

    if row is None:
        logger.debug(f"Club {club_id} has no hours configured for weekday {weekday}")
        return None

    return OpeningWindow(
        opens_at=row.opens_at,
        closes_at=row.closes_at,
        is_open=bool(row.active),
    )


def window_allowed(window: BookingWindow, opening: Optional[OpeningWindow]) -> bool:
    """Check that the whole booking window lies inside the club's opening hours."""
    if opening is None or not opening.is_open:
        return False

    # Any window starting on the booking date
    if opening.round_the_clock:
        return True

    opening_at, closing_at = opening.bounds_on(window.day)
    return window.start >= opening_at and window.end <= closing_at
