"""Court schedule endpoints."""
from datetime import date, time

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from booking_engine.api.deps import get_booking_service, get_requester
from booking_engine.core.database import get_db
from booking_engine.core.requester import Requester
from booking_engine.schemas.reservation import (
    CourtAvailability,
    ReservationInDB,
    ReservationList,
)

router = APIRouter(prefix="/courts/{court_id}", tags=["courts"])


@router.get("/reservations", response_model=ReservationList)
async def get_court_reservations(
    court_id: int,
    day: date = Query(..., alias="date", description="Day to list"),
    requester: Requester = Depends(get_requester),
    service=Depends(get_booking_service),
    db: AsyncSession = Depends(get_db),
):
    """
    Get the active reservations of a court on a day.

    Reservations from the previous evening that run past midnight are included.

    Args:
        court_id: Court ID
        day: Day to list
        requester: Calling party, must manage the court's club
        db: Database session

    Returns:
        Reservations ordered by start
    """
    reservations = await service.court_agenda(db, requester, court_id, day)
    return ReservationList(
        reservations=[ReservationInDB.model_validate(r) for r in reservations]
    )


@router.get("/availability", response_model=CourtAvailability)
async def get_court_availability(
    court_id: int,
    day: date = Query(..., alias="date", description="Booking date"),
    start_time: time = Query(..., description="Start of the window"),
    duration_hours: int = Query(default=1, description="Whole hours"),
    service=Depends(get_booking_service),
    db: AsyncSession = Depends(get_db),
):
    """Check whether a window on a court is free. The answer is not a hold."""
    return await service.check_availability(db, court_id, day, start_time, duration_hours)
