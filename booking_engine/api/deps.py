"""Shared endpoint dependencies."""
from typing import Optional

from fastapi import Header, HTTPException

from booking_engine.core.requester import Requester
from booking_engine.services.booking import booking_service
from booking_engine.services.lifecycle import reservation_lifecycle
from booking_engine.services.reporting import reporting_service


async def get_requester(
    x_user_id: Optional[int] = Header(default=None),
    x_club_id: Optional[int] = Header(default=None),
) -> Requester:
    """
    Build the calling party from the headers set by the authenticating gateway.

    Args:
        x_user_id: Authenticated user ID
        x_club_id: Club the user acts for, if any

    Returns:
        The requester
    """
    if x_user_id is None:
        raise HTTPException(status_code=401, detail="Falta el encabezado X-User-Id")
    return Requester(user_id=x_user_id, club_id=x_club_id)


def get_booking_service():
    return booking_service


def get_lifecycle():
    return reservation_lifecycle


def get_reporting_service():
    return reporting_service
