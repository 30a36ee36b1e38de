"""Reporting schemas."""
from pydantic import BaseModel, ConfigDict
from typing import Dict, List
from datetime import date as dt_date
from decimal import Decimal

from booking_engine.schemas.reservation import ReservationInDB


class Totals(BaseModel):
    """Counts and amounts over a set of reservations."""

    count: int = 0
    active_count: int = 0
    cancelled_count: int = 0
    gross_amount: Decimal = Decimal("0.00")  # Sum of monto_total over every row
    base_amount: Decimal = Decimal("0.00")
    add_on_amount: Decimal = Decimal("0.00")


class Summary(BaseModel):
    """Schema for a club summary over an inclusive date range."""

    club_id: int
    from_date: dt_date
    to_date: dt_date
    per_status: Dict[str, int]
    per_payment_status: Dict[str, int]
    # Sum of monto_total per payment status, cancelled rows included
    amount_per_payment_status: Dict[str, Decimal] = {}
    totals: Totals


class DailySummaries(BaseModel):
    club_id: int
    from_date: dt_date
    to_date: dt_date
    days: List[Summary]


class Panel(BaseModel):
    """Schema for the club dashboard of one day."""

    club_id: int
    date: dt_date
    day: Summary
    week: Summary
    month: Summary
    agenda: List[ReservationInDB]
    in_progress: List[ReservationInDB]
    court_states: Dict[str, int]

    model_config = ConfigDict(from_attributes=True)
