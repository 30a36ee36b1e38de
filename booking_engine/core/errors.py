"""Booking error taxonomy.

Every failure the engine reports to callers is one of these kinds. Each kind
carries a stable ``code`` and the HTTP status the API answers with.
"""
from dataclasses import dataclass
from typing import Any, Optional


class BookingError(Exception):
    """Base class for errors surfaced to booking callers."""

    code = "booking_error"
    status_code = 400

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def to_dict(self) -> dict:
        return {"detail": self.message, "code": self.code}


class ValidationError(BookingError):
    """Malformed, missing or out-of-range input."""

    code = "validation_error"
    status_code = 400


class InvalidTransition(ValidationError):
    """A lifecycle change that the current state does not allow."""

    code = "invalid_transition"


class NotFoundError(BookingError):
    code = "not_found"
    status_code = 404


class AuthorizationError(BookingError):
    """The acting party has no rights over the resource."""

    code = "forbidden"
    status_code = 403


class ReservationConflict(BookingError):
    """The requested window overlaps an active reservation on the same court."""

    code = "reservation_conflict"
    status_code = 409

    def __init__(self, message: str, conflicting_id: Optional[int] = None):
        self.conflicting_id = conflicting_id
        super().__init__(message)


class NoPriceAvailable(BookingError):
    """Neither a tariff rule nor the court base prices give a price."""

    code = "no_price_available"
    status_code = 422


@dataclass
class BookingResult:
    """Outcome of a booking attempt: either a reservation or an error."""

    reservation: Any = None
    quote: Any = None
    error: Optional[BookingError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def failure(cls, error: BookingError) -> "BookingResult":
        return cls(error=error)
