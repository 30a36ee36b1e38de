"""Price resolution for a booking window.

Precedence:

1. A tariff rule of the club for the weekday whose range fully covers the
   window. Among several, the one starting latest wins, then the lowest id.
2. The court's night price when the window starts inside the club's night
   range (the range may wrap past midnight).
3. The court's day price.
"""
import logging
from dataclasses import dataclass
from datetime import time as dt_time
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional, Tuple

from sqlalchemy import select, and_
from sqlalchemy.ext.asyncio import AsyncSession

from booking_engine.core.errors import NoPriceAvailable
from booking_engine.models.club import Club
from booking_engine.models.court import Court
from booking_engine.models.tariff_rule import TariffRule
from booking_engine.services.windows import BookingWindow, time_in_range

logger = logging.getLogger(__name__)

SOURCE_RULE = "rule"
SOURCE_COURT_DAY = "court-day"
SOURCE_COURT_NIGHT = "court-night"

CENTS = Decimal("0.01")


def to_money(value) -> Decimal:
    """Round a monetary value to two decimals."""
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class PriceQuote:
    """The hourly price chosen for a window and where it came from."""

    price_per_hour: Decimal
    source: str
    rule_id: Optional[int] = None
    night_range: Optional[Tuple[dt_time, dt_time]] = None

    def base_amount(self, duration_hours: int) -> Decimal:
        return to_money(self.price_per_hour * duration_hours)


def rule_covers(rule: TariffRule, window: BookingWindow) -> bool:
    """A rule applies only if its range contains the whole window."""
    if window.ends_next_day:
        return False
    return rule.starts_at <= window.start_time and rule.ends_at >= window.end_time


def select_rule(rules: Iterable[TariffRule], window: BookingWindow) -> Optional[TariffRule]:
    """Pick the most specific covering rule, or None."""
    covering = [rule for rule in rules if rule_covers(rule, window)]
    if not covering:
        return None
    # Latest start first, then lowest id
    covering.sort(key=lambda rule: (-_seconds(rule.starts_at), rule.id))
    return covering[0]


def _seconds(value: dt_time) -> int:
    return value.hour * 3600 + value.minute * 60 + value.second


def night_range_of(club: Optional[Club]) -> Optional[Tuple[dt_time, dt_time]]:
    if club is None or club.night_start is None or club.night_end is None:
        return None
    return club.night_start, club.night_end


def is_night(window: BookingWindow, club: Optional[Club]) -> bool:
    """A window is night when its start time falls inside the club's night range."""
    night_range = night_range_of(club)
    if night_range is None:
        return False
    return time_in_range(window.start_time, *night_range)


def court_price(court: Court, club: Optional[Club], window: BookingWindow) -> PriceQuote:
    """Fall back to the court's base prices."""
    night_range = night_range_of(club)

    if is_night(window, club) and court.night_price is not None:
        return PriceQuote(
            price_per_hour=to_money(court.night_price),
            source=SOURCE_COURT_NIGHT,
            night_range=night_range,
        )

    if court.day_price is None:
        raise NoPriceAvailable(f"La cancha {court.id} no tiene precio configurado para ese horario")

    return PriceQuote(
        price_per_hour=to_money(court.day_price),
        source=SOURCE_COURT_DAY,
        night_range=night_range,
    )


async def resolve_price(
    db: AsyncSession,
    club: Club,
    court: Court,
    weekday: int,
    window: BookingWindow,
) -> PriceQuote:
    """
    Resolve the hourly price for a window.

    Args:
        db: Database session
        club: Club owning the court
        court: Court being booked
        weekday: ISO weekday of the booking date
        window: Requested booking window

    Returns:
        The price quote

    Raises:
        NoPriceAvailable: when neither a rule nor the court prices apply
    """
    result = await db.execute(
        select(TariffRule).where(
            and_(
                TariffRule.club_id == club.id,
                TariffRule.weekday == weekday,
            )
        )
    )
    rule = select_rule(result.scalars().all(), window)

    if rule is not None:
        logger.debug(f"Tariff rule {rule.id} applies to court {court.id} at {window.start}")
        return PriceQuote(
            price_per_hour=to_money(rule.price_per_hour),
            source=SOURCE_RULE,
            rule_id=rule.id,
            night_range=night_range_of(club),
        )

    return court_price(court, club, window)
