"""Overlap detection and the locked check-then-insert for new reservations."""
import logging
from datetime import timedelta
from typing import Awaitable, Callable, Iterable, List, Optional

from sqlalchemy import select, and_
from sqlalchemy.ext.asyncio import AsyncSession

from booking_engine.core.errors import ReservationConflict
from booking_engine.core.statuses import ACTIVE_STATUSES
from booking_engine.models.court import Court
from booking_engine.models.reservation import Reservation
from booking_engine.services.windows import BookingWindow

logger = logging.getLogger(__name__)

CONFLICT_MESSAGE = "El horario solicitado se solapa con otra reserva"


def windows_overlap(a: BookingWindow, b: BookingWindow) -> bool:
    """Half-open overlap: touching windows do not conflict."""
    return a.start < b.end and b.start < a.end


def reservation_window(reservation: Reservation) -> BookingWindow:
    return BookingWindow(start=reservation.starts, end=reservation.ends)


def find_conflict(
    reservations: Iterable[Reservation],
    window: BookingWindow,
    exclude_id: Optional[int] = None,
) -> Optional[Reservation]:
    """Return the first active reservation overlapping ``window``, if any."""
    for reservation in reservations:
        if exclude_id is not None and reservation.id == exclude_id:
            continue
        if reservation.estado not in ACTIVE_STATUSES:
            continue
        if windows_overlap(reservation_window(reservation), window):
            return reservation
    return None


def _candidate_days(window: BookingWindow):
    # The previous day can hold a reservation running past midnight into ours
    days = [window.day - timedelta(days=1), window.day]
    if window.ends_next_day:
        days.append(window.day + timedelta(days=1))
    return days


async def load_active(
    db: AsyncSession, court_id: int, window: BookingWindow, lock: bool = False
) -> List[Reservation]:
    query = (
        select(Reservation)
        .where(
            and_(
                Reservation.court_id == court_id,
                Reservation.date.in_(_candidate_days(window)),
                Reservation.estado.in_(ACTIVE_STATUSES),
            )
        )
        .order_by(Reservation.date, Reservation.start_time)
    )
    if lock:
        query = query.with_for_update()

    result = await db.execute(query)
    return list(result.scalars().all())


async def has_conflict(db: AsyncSession, court_id: int, window: BookingWindow) -> bool:
    """
    Check, without locking, whether a window collides with an active reservation.

    Args:
        db: Database session
        court_id: Court ID
        window: Window on the court (its start date is the booking date)

    Returns:
        True if an active reservation overlaps the window
    """
    candidates = await load_active(db, court_id, window)
    return find_conflict(candidates, window) is not None


async def reserve_if_free(
    db: AsyncSession,
    court_id: int,
    window: BookingWindow,
    build: Callable[[], Awaitable[Reservation]],
) -> Reservation:
    """
    Insert a reservation only if the window is still free, atomically.

    The court row is locked first so that concurrent attempts on the same
    court queue up even when no candidate reservation exists yet. The
    overlapping candidates are then locked and verified, and ``build`` is
    awaited to produce the row to insert. Any failure rolls the whole unit
    of work back.

    Args:
        db: Database session
        court_id: Court ID
        window: Requested window
        build: Coroutine factory producing the unsaved reservation

    Returns:
        The committed reservation

    Raises:
        ReservationConflict: if an active reservation overlaps the window
    """
    try:
        await db.execute(select(Court.id).where(Court.id == court_id).with_for_update())

        candidates = await load_active(db, court_id, window, lock=True)
        conflict = find_conflict(candidates, window)
        if conflict is not None:
            logger.warning(
                f"Court {court_id}: {window.start}-{window.end} overlaps reservation {conflict.id}"
            )
            raise ReservationConflict(CONFLICT_MESSAGE, conflicting_id=conflict.id)

        reservation = await build()
        db.add(reservation)
        await db.flush()
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    await db.refresh(reservation)
    return reservation
