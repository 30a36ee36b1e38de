"""Booking orchestration: from a request to a committed reservation.

Rules are checked in a fixed order and the first violation is returned:

1. required fields (court, date, start time, and the contact or player
   fields the reservation kind needs)
2. duration between the configured minimum and maximum hours
3. the window does not start in the past
4. the court exists
5. a club manager only books courts of their own club
6. the club is open for the whole window
7. no active reservation overlaps the window (checked under lock)
8. a price can be resolved
9. the linked player exists
"""
import logging
from datetime import date, datetime, time, timedelta
from typing import List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from booking_engine.core.clock import Clock, system_clock
from booking_engine.core.config import settings
from booking_engine.core.errors import (
    AuthorizationError,
    BookingError,
    BookingResult,
    NotFoundError,
    ValidationError,
)
from booking_engine.core.requester import Requester
from booking_engine.core.statuses import (
    PENDIENTE,
    RESERVATION_KINDS,
    TIPO_PRIVADA,
    TIPO_RELACIONADA,
)
from booking_engine.models.club import Club
from booking_engine.models.court import Court
from booking_engine.models.reservation import Reservation
from booking_engine.models.user import User
from booking_engine.schemas.reservation import CourtAvailability, ReservationCreate
from booking_engine.services.conflict_guard import (
    has_conflict,
    load_active,
    reservation_window,
    reserve_if_free,
    windows_overlap,
)
from booking_engine.services.operating_hours import hours_for, iso_weekday, window_allowed
from booking_engine.services.tariffs import PriceQuote, resolve_price, to_money
from booking_engine.services.windows import BookingWindow

logger = logging.getLogger(__name__)


def _blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def check_required_fields(
    request: ReservationCreate, requester: Requester
) -> Optional[BookingError]:
    if request.court_id is None or request.date is None or request.start_time is None:
        return ValidationError("Faltan campos requeridos (court_id, date, start_time)")

    if request.kind not in RESERVATION_KINDS:
        return ValidationError("kind debe ser 'relacionada' o 'privada'")

    if request.kind == TIPO_PRIVADA:
        if _blank(request.contact_name) or _blank(request.contact_surname):
            return ValidationError("Las reservas privadas requieren nombre y apellido de contacto")
    elif linked_user_id(request, requester) is None:
        return ValidationError("Las reservas relacionadas requieren linked_user_id")

    return None


def check_duration(request: ReservationCreate) -> Optional[BookingError]:
    duration = request.duration_hours
    if (
        isinstance(duration, bool)
        or not isinstance(duration, int)
        or duration < settings.MIN_DURATION_HOURS
        or duration > settings.MAX_DURATION_HOURS
    ):
        return ValidationError(
            f"duration_hours debe ser entero entre {settings.MIN_DURATION_HOURS} "
            f"y {settings.MAX_DURATION_HOURS}"
        )
    return None


def linked_user_id(request: ReservationCreate, requester: Requester) -> Optional[int]:
    """Player the reservation belongs to. Players booking for themselves may omit it."""
    if request.kind != TIPO_RELACIONADA:
        return None
    if request.linked_user_id is not None:
        return request.linked_user_id
    if not requester.acts_for_club:
        return requester.user_id
    return None


class BookingService:
    """Service creating reservations."""

    def __init__(self, clock: Clock = system_clock):
        self.clock = clock

    async def create_reservation(
        self,
        db: AsyncSession,
        requester: Requester,
        request: ReservationCreate,
    ) -> BookingResult:
        """
        Validate a booking request and commit the reservation.

        Args:
            db: Database session
            requester: Calling party
            request: Booking request

        Returns:
            BookingResult with the reservation and its price quote, or the
            first rule violation as ``error``
        """
        error = check_required_fields(request, requester) or check_duration(request)
        if error is not None:
            return BookingResult.failure(error)

        window = BookingWindow.from_start(request.date, request.start_time, request.duration_hours)

        court, club = await self._load_court(db, request.court_id)

        timezone = club.timezone if club is not None else None
        if window.start < self.clock.now(timezone):
            return BookingResult.failure(ValidationError("No se puede reservar en el pasado"))

        if court is None:
            return BookingResult.failure(NotFoundError("Cancha no encontrada"))

        if requester.acts_for_club and not requester.manages(court.club_id):
            return BookingResult.failure(AuthorizationError("La cancha no pertenece a tu club"))

        weekday = iso_weekday(request.date)
        opening = await hours_for(db, court.club_id, weekday)
        if opening is None or not opening.is_open:
            return BookingResult.failure(ValidationError("El club está cerrado ese día"))
        if not window_allowed(window, opening):
            return BookingResult.failure(
                ValidationError("Reserva fuera del horario comercial del club")
            )

        # The rollback on rejection expires every loaded instance
        court_id = court.id
        quotes = []

        async def build() -> Reservation:
            quote = await resolve_price(db, club, court, weekday, window)
            quotes.append(quote)
            return await self._build_reservation(db, requester, request, court, club, window, quote)

        try:
            reservation = await reserve_if_free(db, court_id, window, build)
        except BookingError as e:
            logger.info(f"Booking on court {court_id} at {window.start} rejected: {e.message}")
            return BookingResult.failure(e)

        logger.info(
            f"Reservation {reservation.id} created on court {court_id} "
            f"{window.start}-{window.end} total {reservation.monto_total}"
        )
        return BookingResult(reservation=reservation, quote=quotes[-1])

    async def check_availability(
        self,
        db: AsyncSession,
        court_id: int,
        day: date,
        start_time: time,
        duration_hours: int = 1,
    ) -> CourtAvailability:
        """
        Tell whether a window on a court is free, without locking.

        Args:
            db: Database session
            court_id: Court ID
            day: Booking date
            start_time: Start of the window
            duration_hours: Whole hours

        Returns:
            The window and whether it is free
        """
        if not settings.MIN_DURATION_HOURS <= duration_hours <= settings.MAX_DURATION_HOURS:
            raise ValidationError(
                f"duration_hours debe ser entero entre {settings.MIN_DURATION_HOURS} "
                f"y {settings.MAX_DURATION_HOURS}"
            )

        court, _ = await self._load_court(db, court_id)
        if court is None:
            raise NotFoundError("Cancha no encontrada")

        window = BookingWindow.from_start(day, start_time, duration_hours)
        taken = await has_conflict(db, court_id, window)
        return CourtAvailability(
            court_id=court_id,
            date=day,
            start_time=window.start_time,
            end_time=window.end_time,
            available=not taken,
        )

    async def court_agenda(
        self, db: AsyncSession, requester: Requester, court_id: int, day: date
    ) -> List[Reservation]:
        """Active reservations on a court touching ``day``, including ones spilling over midnight.

        Only a manager of the court's club may read its schedule.
        """
        court, _ = await self._load_court(db, court_id)
        if court is None:
            raise NotFoundError("Cancha no encontrada")
        if not requester.manages(court.club_id):
            raise AuthorizationError("No tienes permisos para esta operación")

        window = BookingWindow(
            start=datetime.combine(day, time(0, 0)),
            end=datetime.combine(day + timedelta(days=1), time(0, 0)),
        )
        return [
            reservation
            for reservation in await load_active(db, court_id, window)
            if windows_overlap(reservation_window(reservation), window)
        ]

    async def _load_court(
        self, db: AsyncSession, court_id: int
    ) -> Tuple[Optional[Court], Optional[Club]]:
        result = await db.execute(
            select(Court, Club).join(Club, Club.id == Court.club_id).where(Court.id == court_id)
        )
        row = result.first()
        if row is None:
            return None, None
        return row[0], row[1]

    async def _build_reservation(
        self,
        db: AsyncSession,
        requester: Requester,
        request: ReservationCreate,
        court: Court,
        club: Club,
        window: BookingWindow,
        quote: PriceQuote,
    ) -> Reservation:
        contact_name = request.contact_name
        contact_surname = request.contact_surname
        contact_phone = request.contact_phone

        player_id = linked_user_id(request, requester)
        if player_id is not None:
            result = await db.execute(select(User).where(User.id == player_id))
            player = result.scalar_one_or_none()
            if player is None:
                raise NotFoundError("Usuario no encontrado")
            contact_name = contact_name or player.name
            contact_surname = contact_surname or player.surname
            contact_phone = contact_phone or player.phone

        monto_base = quote.base_amount(request.duration_hours)
        if request.add_on_requested and club.add_on_price is not None:
            monto_add_on = to_money(club.add_on_price)
        else:
            monto_add_on = to_money(0)

        return Reservation(
            club_id=court.club_id,
            court_id=court.id,
            date=window.day,
            start_time=window.start_time,
            end_time=window.end_time,
            ends_next_day=window.ends_next_day,
            duration_hours=request.duration_hours,
            user_id=player_id,
            created_by_id=requester.user_id,
            tipo_reserva=request.kind,
            contact_name=contact_name,
            contact_surname=contact_surname,
            contact_phone=contact_phone,
            add_on_requested=bool(request.add_on_requested),
            price_per_hour=quote.price_per_hour,
            tariff_source=quote.source,
            tariff_rule_id=quote.rule_id,
            monto_base=monto_base,
            monto_add_on=monto_add_on,
            monto_total=to_money(monto_base + monto_add_on),
            estado=PENDIENTE,
            estado_pago="pendiente_pago",
        )


# Singleton instance
booking_service = BookingService()
