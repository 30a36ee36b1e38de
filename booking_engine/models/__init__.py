"""Database models."""
from booking_engine.models.club import Club
from booking_engine.models.court import Court
from booking_engine.models.operating_hours import OperatingHours
from booking_engine.models.tariff_rule import TariffRule
from booking_engine.models.user import User
from booking_engine.models.reservation import Reservation
from booking_engine.models.schema_meta import SchemaMeta

__all__ = [
    "Club",
    "Court",
    "OperatingHours",
    "TariffRule",
    "User",
    "Reservation",
    "SchemaMeta",
]
