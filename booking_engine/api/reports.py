"""Club summary and dashboard endpoints."""
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from booking_engine.api.deps import get_reporting_service, get_requester
from booking_engine.core.database import get_db
from booking_engine.core.errors import AuthorizationError
from booking_engine.core.requester import Requester
from booking_engine.schemas.summary import DailySummaries, Panel, Summary
from booking_engine.services.reporting import week_bounds

router = APIRouter(prefix="/clubs/{club_id}", tags=["reports"])


def _check_manager(requester: Requester, club_id: int):
    if not requester.manages(club_id):
        raise AuthorizationError("No tienes permisos para esta operación")


def _date_range(
    on: Optional[date], from_date: Optional[date], to_date: Optional[date], today: date
):
    if on is not None:
        return on, on
    if from_date is None and to_date is None:
        return today, today
    from_date = from_date or to_date
    to_date = to_date or from_date
    return from_date, to_date


@router.get("/summary", response_model=Summary)
async def get_summary(
    club_id: int,
    on: Optional[date] = Query(default=None, alias="date", description="Single day"),
    from_date: Optional[date] = Query(default=None, description="Start date"),
    to_date: Optional[date] = Query(default=None, description="End date (inclusive)"),
    requester: Requester = Depends(get_requester),
    service=Depends(get_reporting_service),
    db: AsyncSession = Depends(get_db),
):
    """
    Get reservation counts and amounts for a day or a date range.

    Args:
        club_id: Club ID
        on: Single day (takes precedence over the range)
        from_date: Start date
        to_date: End date
        db: Database session

    Returns:
        Counts per status and payment status with the monetary totals
    """
    _check_manager(requester, club_id)
    start, end = _date_range(on, from_date, to_date, await service.today(db, club_id))
    return await service.summarize(db, club_id, start, end)


@router.get("/summary/daily", response_model=DailySummaries)
async def get_daily_summaries(
    club_id: int,
    from_date: Optional[date] = Query(default=None, description="Start date (defaults to the week's Monday)"),
    to_date: Optional[date] = Query(default=None, description="End date (defaults to the week's Sunday)"),
    requester: Requester = Depends(get_requester),
    service=Depends(get_reporting_service),
    db: AsyncSession = Depends(get_db),
):
    """Get one summary per day of a date range."""
    _check_manager(requester, club_id)

    # Default date range: the current week
    if from_date is None and to_date is None:
        from_date, to_date = week_bounds(await service.today(db, club_id))
    from_date = from_date or to_date
    to_date = to_date or from_date

    return await service.daily_summaries(db, club_id, from_date, to_date)


@router.get("/panel", response_model=Panel)
async def get_panel(
    club_id: int,
    on: Optional[date] = Query(default=None, alias="date", description="Dashboard day"),
    requester: Requester = Depends(get_requester),
    service=Depends(get_reporting_service),
    db: AsyncSession = Depends(get_db),
):
    """Get the club dashboard: day, week and month summaries, agenda and courts."""
    _check_manager(requester, club_id)
    return await service.panel(db, club_id, on)
