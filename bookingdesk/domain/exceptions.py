"""
Domain-specific exception hierarchy for the booking desk.
"""

from __future__ import annotations

from datetime import date, time
from typing import Dict, Optional


GENERIC_ERROR_MESSAGE = "An unknown error occurred"


class BookingDeskError(Exception):
    """Base class for all application-level errors."""


class ValidationError(BookingDeskError):
    """
    Raised when one or more form fields fail validation.

    ``errors`` maps each offending field to a user-facing message so that
    every violation can be reported at once.
    """

    def __init__(self, errors: Dict[str, str]):
        self.errors = dict(errors)
        fields = ", ".join(sorted(self.errors))
        super().__init__(f"Validation failed for: {fields}")


class AvailabilityConflict(BookingDeskError):
    """Raised when the selected slot is no longer bookable. Retryable."""

    def __init__(
        self,
        message: str = "The selected time is no longer available. Please choose another time.",
        booking_date: Optional[date] = None,
        booking_time: Optional[time] = None,
    ):
        self.booking_date = booking_date
        self.booking_time = booking_time
        super().__init__(message)


class CollaboratorError(BookingDeskError):
    """Raised when the Directory or Identity backend reports a failure."""

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message or GENERIC_ERROR_MESSAGE)


class NotFoundError(CollaboratorError):
    """Raised when a requested record does not exist."""


class AuthenticationError(CollaboratorError):
    """Raised when sign-in, sign-up or session handling fails."""


class StateViolation(BookingDeskError):
    """Raised when an operation is not allowed in the entity's current state."""

    def __init__(self, action: str, status: str):
        self.action = action
        self.status = status
        super().__init__(f"Cannot {action} a booking with status '{status}'")
