"""Reservation endpoints."""
import logging

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.ext.asyncio import AsyncSession

from booking_engine.api.deps import get_booking_service, get_lifecycle, get_requester
from booking_engine.core.database import get_db
from booking_engine.core.errors import BookingError
from booking_engine.core.requester import Requester
from booking_engine.schemas.reservation import (
    NightRange,
    PricingInfo,
    ReservationCreate,
    ReservationCreated,
    ReservationInDB,
    ReservationList,
    ReservationStatusUpdate,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reservations", tags=["reservations"])


@router.post("", response_model=ReservationCreated, status_code=201)
async def create_reservation(
    request: ReservationCreate,
    requester: Requester = Depends(get_requester),
    service=Depends(get_booking_service),
    db: AsyncSession = Depends(get_db),
):
    """
    Book a court.

    The window is checked against the club's opening hours and the court's
    active reservations, and priced from the club tariffs.

    Args:
        request: Booking request
        requester: Calling party
        db: Database session

    Returns:
        Created reservation and how its price was resolved
    """
    try:
        result = await service.create_reservation(db, requester, request)
    except Exception as e:
        logger.error(f"Failed to create reservation: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error al crear la reserva")

    if not result.ok:
        raise result.error

    quote = result.quote
    night_range = None
    if quote.night_range is not None:
        night_range = NightRange(start=quote.night_range[0], end=quote.night_range[1])

    return ReservationCreated(
        reservation=ReservationInDB.model_validate(result.reservation),
        pricing=PricingInfo(
            price_per_hour=quote.price_per_hour,
            tariff_source=quote.source,
            tariff_rule_id=quote.rule_id,
            night_range=night_range,
        ),
    )


@router.get("/mine", response_model=ReservationList)
async def list_my_reservations(
    requester: Requester = Depends(get_requester),
    lifecycle=Depends(get_lifecycle),
    db: AsyncSession = Depends(get_db),
):
    """List the reservations of the requester as player or creator."""
    reservations = await lifecycle.list_mine(db, requester)
    return ReservationList(
        reservations=[ReservationInDB.model_validate(r) for r in reservations]
    )


@router.get("/{reservation_id}", response_model=ReservationInDB)
async def get_reservation(
    reservation_id: int,
    requester: Requester = Depends(get_requester),
    lifecycle=Depends(get_lifecycle),
    db: AsyncSession = Depends(get_db),
):
    """Get a reservation by ID."""
    return await lifecycle.get_for(db, requester, reservation_id)


@router.patch("/{reservation_id}/cancel", response_model=ReservationInDB)
async def cancel_reservation(
    reservation_id: int,
    requester: Requester = Depends(get_requester),
    lifecycle=Depends(get_lifecycle),
    db: AsyncSession = Depends(get_db),
):
    """
    Cancel a reservation.

    Args:
        reservation_id: Reservation ID
        requester: The player, the creator or the owning club
        db: Database session

    Returns:
        Cancelled reservation
    """
    try:
        return await lifecycle.cancel(db, requester, reservation_id)
    except BookingError:
        raise
    except Exception as e:
        logger.error(f"Failed to cancel reservation {reservation_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error al cancelar la reserva")


@router.patch("/{reservation_id}/status", response_model=ReservationInDB)
async def update_reservation_status(
    reservation_id: int,
    update: ReservationStatusUpdate,
    requester: Requester = Depends(get_requester),
    lifecycle=Depends(get_lifecycle),
    db: AsyncSession = Depends(get_db),
):
    """
    Change the reservation status and/or the payment status.

    Only the owning club may do this. Payment status aliases such as
    ``seña`` or ``abonado`` are accepted.
    """
    try:
        return await lifecycle.update_statuses(
            db,
            requester,
            reservation_id,
            estado=update.estado,
            estado_pago=update.estado_pago,
        )
    except BookingError:
        raise
    except Exception as e:
        logger.error(f"Failed to update reservation {reservation_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Error al actualizar la reserva")


@router.delete("/{reservation_id}", status_code=204)
async def delete_reservation(
    reservation_id: int,
    requester: Requester = Depends(get_requester),
    lifecycle=Depends(get_lifecycle),
    db: AsyncSession = Depends(get_db),
):
    """Delete a reservation (owning club only)."""
    await lifecycle.delete(db, requester, reservation_id)
    return Response(status_code=204)
