"""API schemas."""
from booking_engine.schemas.reservation import (
    ReservationCreate,
    ReservationStatusUpdate,
    ReservationInDB,
    NightRange,
    PricingInfo,
    ReservationCreated,
    ReservationList,
    CourtAvailability,
)
from booking_engine.schemas.summary import (
    Totals,
    Summary,
    DailySummaries,
    Panel,
)

__all__ = [
    "ReservationCreate",
    "ReservationStatusUpdate",
    "ReservationInDB",
    "NightRange",
    "PricingInfo",
    "ReservationCreated",
    "ReservationList",
    "CourtAvailability",
    "Totals",
    "Summary",
    "DailySummaries",
    "Panel",
]
