"""
Staff-triggered booking status changes.
"""

from __future__ import annotations

import dataclasses
import logging

from ..domain.models import Booking, BookingStatus
from ..domain.status import ensure_can_advance, ensure_can_cancel, ensure_can_delete
from .protocols import DirectoryProtocol

logger = logging.getLogger(__name__)


class StatusWorkflow:
    """
    Applies lifecycle transitions through the Directory.

    Disallowed transitions raise StateViolation before anything is sent.
    Bookings are immutable, so a failed update leaves the caller's copy as
    it was; the Directory error propagates unchanged and is not retried.
    """

    def __init__(self, directory: DirectoryProtocol) -> None:
        self._directory = directory

    async def advance(self, booking: Booking) -> Booking:
        """Move the booking exactly one step forward."""
        target = ensure_can_advance(booking)
        return await self._set_status(booking, target)

    async def cancel(self, booking: Booking) -> Booking:
        ensure_can_cancel(booking)
        return await self._set_status(booking, BookingStatus.CANCELLED)

    async def delete(self, booking: Booking) -> None:
        """Delete a booking; only pending bookings may be deleted."""
        ensure_can_delete(booking)
        await self._directory.delete_booking(booking.id)
        logger.info("Booking %s deleted", booking.id)

    async def _set_status(self, booking: Booking, status: BookingStatus) -> Booking:
        await self._directory.update_booking_status(booking.id, status)
        logger.info("Booking %s: %s -> %s", booking.id, booking.status.value, status.value)
        return dataclasses.replace(booking, status=status)
