"""Reservation lifecycle transitions."""
import logging
from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy import select, update, and_, or_
from sqlalchemy.ext.asyncio import AsyncSession

from booking_engine.core.clock import Clock, system_clock
from booking_engine.core.errors import (
    AuthorizationError,
    InvalidTransition,
    NotFoundError,
    ValidationError,
)
from booking_engine.core.requester import Requester
from booking_engine.core.statuses import (
    ACTIVE_STATUSES,
    CANCELADA,
    FINALIZADA,
    PAYMENT_STATUSES,
    TRANSITIONS,
    is_active,
    normalize_payment_status,
    normalize_status,
)
from booking_engine.models.club import Club
from booking_engine.models.reservation import Reservation

logger = logging.getLogger(__name__)

NOT_FOUND_MESSAGE = "Reserva no encontrada"
NOT_YOUR_CLUB_MESSAGE = "La reserva no pertenece a tu club"
CLUB_ONLY_MESSAGE = "No tienes permisos para esta operación"
INVALID_STATUS_MESSAGE = "Estado inválido"
INVALID_PAYMENT_STATUS_MESSAGE = (
    "Estado de pago inválido. Valores permitidos: " + ", ".join(PAYMENT_STATUSES)
)


class ReservationLifecycle:
    """State changes on existing reservations."""

    def __init__(self, clock: Clock = system_clock):
        self.clock = clock

    async def get(self, db: AsyncSession, reservation_id: int) -> Reservation:
        result = await db.execute(select(Reservation).where(Reservation.id == reservation_id))
        reservation = result.scalar_one_or_none()
        if reservation is None:
            raise NotFoundError(NOT_FOUND_MESSAGE)
        return reservation

    async def get_for(
        self, db: AsyncSession, requester: Requester, reservation_id: int
    ) -> Reservation:
        """Fetch a reservation visible to the requester: its player, its creator or its club."""
        reservation = await self.get(db, reservation_id)
        is_owner = requester.user_id in (reservation.user_id, reservation.created_by_id)
        if not is_owner and not requester.manages(reservation.club_id):
            raise AuthorizationError(NOT_YOUR_CLUB_MESSAGE)
        return reservation

    async def list_mine(self, db: AsyncSession, requester: Requester) -> List[Reservation]:
        """Reservations where the requester is the player or the creator, newest first."""
        result = await db.execute(
            select(Reservation)
            .where(
                or_(
                    Reservation.user_id == requester.user_id,
                    Reservation.created_by_id == requester.user_id,
                )
            )
            .order_by(Reservation.date.desc(), Reservation.start_time.desc())
        )
        return list(result.scalars().all())

    async def _club_timezone(self, db: AsyncSession, club_id: int) -> Optional[str]:
        result = await db.execute(select(Club.timezone).where(Club.id == club_id))
        return result.scalar_one_or_none()

    async def cancel(
        self, db: AsyncSession, requester: Requester, reservation_id: int
    ) -> Reservation:
        """
        Cancel an active reservation, freeing its slot.

        Only the linked player, whoever created the booking, or the managing
        club may cancel. Cancelling twice is an error.

        Args:
            db: Database session
            requester: Calling party
            reservation_id: Reservation ID

        Returns:
            The cancelled reservation
        """
        reservation = await self.get(db, reservation_id)

        is_owner = requester.user_id in (reservation.user_id, reservation.created_by_id)
        if not is_owner and not requester.manages(reservation.club_id):
            raise AuthorizationError("No tienes permiso para cancelar esta reserva")

        if not is_active(reservation.estado):
            raise InvalidTransition(
                f"No se puede cancelar una reserva en estado {reservation.estado}"
            )

        reservation.estado = CANCELADA
        await db.commit()
        await db.refresh(reservation)

        logger.info(f"Reservation {reservation.id} cancelled by user {requester.user_id}")
        return reservation

    async def update_statuses(
        self,
        db: AsyncSession,
        requester: Requester,
        reservation_id: int,
        estado: Optional[str] = None,
        estado_pago: Optional[str] = None,
    ) -> Reservation:
        """
        Change the reservation status, the payment status, or both.

        Args:
            db: Database session
            requester: Calling party, must act for the owning club
            reservation_id: Reservation ID
            estado: New reservation status (optional)
            estado_pago: New payment status (optional, aliases accepted)

        Returns:
            The updated reservation
        """
        if not requester.acts_for_club:
            raise AuthorizationError(CLUB_ONLY_MESSAGE)

        if estado is None and estado_pago is None:
            raise ValidationError("Debes enviar al menos un campo (estado o estado_pago)")

        new_estado = None
        if estado is not None:
            new_estado = normalize_status(estado)
            if new_estado is None:
                raise ValidationError(INVALID_STATUS_MESSAGE)

        new_estado_pago = None
        if estado_pago is not None:
            new_estado_pago = normalize_payment_status(estado_pago)
            if new_estado_pago is None:
                raise ValidationError(INVALID_PAYMENT_STATUS_MESSAGE)

        reservation = await self.get(db, reservation_id)
        if not requester.manages(reservation.club_id):
            raise AuthorizationError(NOT_YOUR_CLUB_MESSAGE)

        if new_estado is not None and new_estado == reservation.estado:
            # Terminal states are final, so cancelling twice is an error
            if not is_active(reservation.estado):
                raise InvalidTransition(f"La reserva ya está en estado {reservation.estado}")
        elif new_estado is not None:
            if new_estado not in TRANSITIONS[reservation.estado]:
                raise InvalidTransition(
                    f"No se puede pasar de {reservation.estado} a {new_estado}"
                )
            if new_estado == FINALIZADA:
                timezone = await self._club_timezone(db, reservation.club_id)
                if self.clock.now(timezone) < reservation.ends:
                    raise InvalidTransition("La reserva todavía no terminó")
            reservation.estado = new_estado

        if new_estado_pago is not None:
            reservation.estado_pago = new_estado_pago

        await db.commit()
        await db.refresh(reservation)

        logger.info(
            f"Reservation {reservation.id} now {reservation.estado}/{reservation.estado_pago}"
        )
        return reservation

    async def delete(
        self, db: AsyncSession, requester: Requester, reservation_id: int
    ) -> None:
        """Administrative removal by the owning club."""
        if not requester.acts_for_club:
            raise AuthorizationError(CLUB_ONLY_MESSAGE)

        reservation = await self.get(db, reservation_id)
        if not requester.manages(reservation.club_id):
            raise AuthorizationError(NOT_YOUR_CLUB_MESSAGE)

        await db.delete(reservation)
        await db.commit()
        logger.info(f"Reservation {reservation_id} deleted by club {requester.club_id}")

    async def finalize_elapsed(self, db: AsyncSession, now: Optional[datetime] = None) -> int:
        """
        Mark active reservations whose window has ended as finalizada.

        Args:
            db: Database session
            now: Reference instant; defaults to each club's local clock

        Returns:
            Number of reservations finalized
        """
        # UTC+14 is the first zone to reach a new date, so no club is ahead of it
        latest_today = now.date() if now is not None else self.clock.now("Pacific/Kiritimati").date()

        result = await db.execute(
            select(Reservation, Club.timezone)
            .join(Club, Club.id == Reservation.club_id)
            .where(
                and_(
                    Reservation.estado.in_(ACTIVE_STATUSES),
                    Reservation.date <= latest_today,
                )
            )
        )

        local_now: Dict[Optional[str], datetime] = {}
        elapsed_ids = []
        for reservation, timezone in result.all():
            if now is not None:
                reference = now
            else:
                if timezone not in local_now:
                    local_now[timezone] = self.clock.now(timezone)
                reference = local_now[timezone]

            if reservation.ends <= reference:
                elapsed_ids.append(reservation.id)

        finalized = await self.mark_finalized(db, elapsed_ids)

        if finalized:
            logger.info(f"Finalized {finalized} elapsed reservations")
        return finalized

    async def mark_finalized(self, db: AsyncSession, reservation_ids: List[int]) -> int:
        """
        Move the given reservations to finalizada if they are still active.

        A reservation cancelled between the scan and this write keeps its
        status.
        """
        if not reservation_ids:
            return 0

        result = await db.execute(
            update(Reservation)
            .where(
                and_(
                    Reservation.id.in_(reservation_ids),
                    Reservation.estado.in_(ACTIVE_STATUSES),
                )
            )
            .values(estado=FINALIZADA)
        )
        await db.commit()
        return result.rowcount


# Singleton instance
reservation_lifecycle = ReservationLifecycle()
