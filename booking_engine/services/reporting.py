"""Reservation summaries for club dashboards."""
import logging
from collections import Counter
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Tuple

from sqlalchemy import select, and_, func
from sqlalchemy.ext.asyncio import AsyncSession

from booking_engine.core.clock import Clock, system_clock
from booking_engine.core.errors import NotFoundError, ValidationError
from booking_engine.core.statuses import CANCELADA, is_active
from booking_engine.models.club import Club
from booking_engine.models.court import Court
from booking_engine.models.reservation import Reservation
from booking_engine.schemas.reservation import ReservationInDB
from booking_engine.schemas.summary import DailySummaries, Panel, Summary, Totals
from booking_engine.services.tariffs import to_money

logger = logging.getLogger(__name__)


def week_bounds(day: date) -> Tuple[date, date]:
    """Monday to Sunday of the week containing ``day``."""
    monday = day - timedelta(days=day.weekday())
    return monday, monday + timedelta(days=6)


def month_bounds(day: date) -> Tuple[date, date]:
    first = day.replace(day=1)
    next_month = (first + timedelta(days=32)).replace(day=1)
    return first, next_month - timedelta(days=1)


def fold_rows(club_id: int, day: date, reservations: Iterable[Reservation]) -> Summary:
    """
    Summarize the reservations of one day.

    Every row is counted under its status and payment status and adds its
    amounts to the totals. Active and cancelled counts derive from the status.
    """
    per_status: Counter = Counter()
    per_payment_status: Counter = Counter()
    amount_per_payment_status: Dict[str, Decimal] = {}
    totals = Totals()

    for reservation in reservations:
        per_status[reservation.estado] += 1
        per_payment_status[reservation.estado_pago] += 1
        amount_per_payment_status[reservation.estado_pago] = amount_per_payment_status.get(
            reservation.estado_pago, Decimal("0.00")
        ) + to_money(reservation.monto_total or 0)

        totals.count += 1
        if is_active(reservation.estado):
            totals.active_count += 1
        elif reservation.estado == CANCELADA:
            totals.cancelled_count += 1

        totals.gross_amount += to_money(reservation.monto_total or 0)
        totals.base_amount += to_money(reservation.monto_base or 0)
        totals.add_on_amount += to_money(reservation.monto_add_on or 0)

    return Summary(
        club_id=club_id,
        from_date=day,
        to_date=day,
        per_status=dict(per_status),
        per_payment_status=dict(per_payment_status),
        amount_per_payment_status=amount_per_payment_status,
        totals=totals,
    )


def merge(club_id: int, start: date, end: date, summaries: Iterable[Summary]) -> Summary:
    """Fold several summaries into one covering ``start``..``end``."""
    per_status: Counter = Counter()
    per_payment_status: Counter = Counter()
    amount_per_payment_status: Dict[str, Decimal] = {}
    totals = Totals()

    for summary in summaries:
        per_status.update(summary.per_status)
        per_payment_status.update(summary.per_payment_status)
        for estado_pago, amount in summary.amount_per_payment_status.items():
            amount_per_payment_status[estado_pago] = (
                amount_per_payment_status.get(estado_pago, Decimal("0.00")) + amount
            )
        totals.count += summary.totals.count
        totals.active_count += summary.totals.active_count
        totals.cancelled_count += summary.totals.cancelled_count
        totals.gross_amount += summary.totals.gross_amount
        totals.base_amount += summary.totals.base_amount
        totals.add_on_amount += summary.totals.add_on_amount

    return Summary(
        club_id=club_id,
        from_date=start,
        to_date=end,
        per_status=dict(per_status),
        per_payment_status=dict(per_payment_status),
        amount_per_payment_status=amount_per_payment_status,
        totals=totals,
    )


class ReportingService:
    """Service computing reservation summaries."""

    def __init__(self, clock: Clock = system_clock):
        self.clock = clock

    async def _get_club(self, db: AsyncSession, club_id: int) -> Club:
        result = await db.execute(select(Club).where(Club.id == club_id))
        club = result.scalar_one_or_none()
        if not club:
            raise NotFoundError(f"Club {club_id} no encontrado")
        return club

    async def today(self, db: AsyncSession, club_id: int) -> date:
        """Current date in the club's timezone."""
        club = await self._get_club(db, club_id)
        return self.clock.now(club.timezone).date()

    async def _reservations_on(
        self, db: AsyncSession, club_id: int, day: date
    ) -> List[Reservation]:
        result = await db.execute(
            select(Reservation)
            .where(
                and_(
                    Reservation.club_id == club_id,
                    Reservation.date == day,
                )
            )
            .order_by(Reservation.start_time, Reservation.court_id)
        )
        return list(result.scalars().all())

    async def daily_breakdown(
        self, db: AsyncSession, club_id: int, start: date, end: date
    ) -> List[Summary]:
        """
        Get one summary per day of a date range.

        Args:
            db: Database session
            club_id: Club ID
            start: First date
            end: Last date (inclusive)

        Returns:
            List of daily summaries, empty days included
        """
        if start > end:
            raise ValidationError("from_date debe ser anterior o igual a to_date")

        await self._get_club(db, club_id)

        daily = []
        current_date = start
        while current_date <= end:
            reservations = await self._reservations_on(db, club_id, current_date)
            daily.append(fold_rows(club_id, current_date, reservations))
            current_date += timedelta(days=1)

        return daily

    async def summarize(
        self,
        db: AsyncSession,
        club_id: int,
        start: date,
        end: Optional[date] = None,
    ) -> Summary:
        """
        Summarize a club's reservations on a date or over an inclusive range.

        Ranges are the fold of their daily summaries.

        Args:
            db: Database session
            club_id: Club ID
            start: Date, or first date of the range
            end: Last date of the range (defaults to ``start``)

        Returns:
            The summary
        """
        end = end or start
        daily = await self.daily_breakdown(db, club_id, start, end)
        return merge(club_id, start, end, daily)

    async def daily_summaries(
        self, db: AsyncSession, club_id: int, start: date, end: date
    ) -> DailySummaries:
        days = await self.daily_breakdown(db, club_id, start, end)
        return DailySummaries(club_id=club_id, from_date=start, to_date=end, days=days)

    async def agenda(self, db: AsyncSession, club_id: int, day: date) -> List[Reservation]:
        """The club's reservations on a day ordered by start time then court."""
        await self._get_club(db, club_id)
        return await self._reservations_on(db, club_id, day)

    async def in_progress(
        self, db: AsyncSession, club_id: int, now: datetime
    ) -> List[Reservation]:
        """Active reservations whose window contains ``now``."""
        # A window running now started today or, crossing midnight, yesterday
        result = await db.execute(
            select(Reservation)
            .where(
                and_(
                    Reservation.club_id == club_id,
                    Reservation.date.in_([now.date() - timedelta(days=1), now.date()]),
                )
            )
            .order_by(Reservation.date, Reservation.start_time, Reservation.court_id)
        )
        return [
            reservation
            for reservation in result.scalars().all()
            if is_active(reservation.estado) and reservation.starts <= now < reservation.ends
        ]

    async def court_states(self, db: AsyncSession, club_id: int) -> Dict[str, int]:
        result = await db.execute(
            select(Court.state, func.count(Court.id))
            .where(Court.club_id == club_id)
            .group_by(Court.state)
        )
        return {state: count for state, count in result.all()}

    async def panel(
        self,
        db: AsyncSession,
        club_id: int,
        day: Optional[date] = None,
        now: Optional[datetime] = None,
    ) -> Panel:
        """
        Build the club dashboard for a day.

        Args:
            db: Database session
            club_id: Club ID
            day: Dashboard date (defaults to the club's current date)
            now: Reference instant for in-progress reservations

        Returns:
            Day, week and month summaries with the agenda, the reservations
            in progress and the court state counts
        """
        club = await self._get_club(db, club_id)
        now = now or self.clock.now(club.timezone)
        day = day or now.date()

        week_start, week_end = week_bounds(day)
        month_start, month_end = month_bounds(day)

        agenda = await self._reservations_on(db, club_id, day)
        day_summary = fold_rows(club_id, day, agenda)
        week_summary = await self.summarize(db, club_id, week_start, week_end)
        month_summary = await self.summarize(db, club_id, month_start, month_end)

        logger.debug(f"Panel for club {club_id} on {day}: {day_summary.totals.count} reservations")

        return Panel(
            club_id=club_id,
            date=day,
            day=day_summary,
            week=week_summary,
            month=month_summary,
            agenda=[ReservationInDB.model_validate(r) for r in agenda],
            in_progress=[
                ReservationInDB.model_validate(r)
                for r in await self.in_progress(db, club_id, now)
            ],
            court_states=await self.court_states(db, club_id),
        )


# Singleton instance
reporting_service = ReportingService()
