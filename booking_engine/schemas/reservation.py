"""Reservation schemas."""
from pydantic import BaseModel, ConfigDict
from typing import Optional, List
from datetime import datetime, date as dt_date, time as dt_time
from decimal import Decimal


class ReservationCreate(BaseModel):
    """Schema for a booking request.

    Every field is optional at this level so that missing values are reported
    by the booking rules with their own messages.
    """

    court_id: Optional[int] = None
    date: Optional[dt_date] = None
    start_time: Optional[dt_time] = None
    duration_hours: int = 1
    add_on_requested: bool = False
    kind: str = "relacionada"  # relacionada, privada
    linked_user_id: Optional[int] = None
    contact_name: Optional[str] = None
    contact_surname: Optional[str] = None
    contact_phone: Optional[str] = None


class ReservationStatusUpdate(BaseModel):
    """Schema for changing the reservation and/or payment status."""

    estado: Optional[str] = None
    estado_pago: Optional[str] = None


class ReservationInDB(BaseModel):
    """Schema for a reservation from database."""

    id: int
    club_id: int
    court_id: int
    date: dt_date
    start_time: dt_time
    end_time: dt_time
    ends_next_day: bool
    duration_hours: int
    user_id: Optional[int] = None
    created_by_id: Optional[int] = None
    tipo_reserva: str
    contact_name: Optional[str] = None
    contact_surname: Optional[str] = None
    contact_phone: Optional[str] = None
    add_on_requested: bool
    price_per_hour: Decimal
    tariff_source: str
    tariff_rule_id: Optional[int] = None
    monto_base: Decimal
    monto_add_on: Decimal
    monto_total: Decimal
    estado: str
    estado_pago: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class NightRange(BaseModel):
    start: dt_time
    end: dt_time


class PricingInfo(BaseModel):
    """How the price of a new reservation was resolved."""

    price_per_hour: Decimal
    tariff_source: str  # rule, court-day, court-night
    tariff_rule_id: Optional[int] = None
    night_range: Optional[NightRange] = None


class ReservationCreated(BaseModel):
    """Schema for the booking response."""

    reservation: ReservationInDB
    pricing: PricingInfo


class ReservationList(BaseModel):
    reservations: List[ReservationInDB]


class CourtAvailability(BaseModel):
    """Schema for a free/busy check of one window."""

    court_id: int
    date: dt_date
    start_time: dt_time
    end_time: dt_time
    available: bool
