"""
Booking status lifecycle rules.

pending -> confirmed -> in-progress -> completed, with cancelled reachable
from every non-terminal state. There are no reverse transitions.
"""

from __future__ import annotations

from typing import Dict, Optional

from .exceptions import StateViolation
from .models import Booking, BookingStatus

NEXT_STATUS: Dict[BookingStatus, BookingStatus] = {
    BookingStatus.PENDING: BookingStatus.CONFIRMED,
    BookingStatus.CONFIRMED: BookingStatus.IN_PROGRESS,
    BookingStatus.IN_PROGRESS: BookingStatus.COMPLETED,
}


def next_status(status: BookingStatus) -> Optional[BookingStatus]:
    """Return the status one step ahead, or None if there is none."""
    return NEXT_STATUS.get(BookingStatus(status))


def can_advance(status: BookingStatus) -> bool:
    return next_status(status) is not None


def can_cancel(status: BookingStatus) -> bool:
    return not BookingStatus(status).is_terminal


def can_delete(status: BookingStatus) -> bool:
    return BookingStatus(status) is BookingStatus.PENDING


def ensure_can_advance(booking: Booking) -> BookingStatus:
    """Return the next status or raise StateViolation."""
    target = next_status(booking.status)
    if target is None:
        raise StateViolation("advance", booking.status.value)
    return target


def ensure_can_cancel(booking: Booking) -> None:
    if not can_cancel(booking.status):
        raise StateViolation("cancel", booking.status.value)


def ensure_can_delete(booking: Booking) -> None:
    if not can_delete(booking.status):
        raise StateViolation("delete", booking.status.value)
