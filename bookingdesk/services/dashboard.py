"""
Staff dashboard: booking statistics, upcoming jobs and recent activity.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from decimal import Decimal
from typing import List, Optional

import pendulum

from ..domain.exceptions import NotFoundError
from ..domain.models import Booking, BookingStatus, Client
from .protocols import DirectoryProtocol
from .status_workflow import StatusWorkflow

logger = logging.getLogger(__name__)

UPCOMING_LIMIT = 5
ACTIVITY_LIMIT = 10
DASHBOARD_DAYS = 7


@dataclass(frozen=True)
class DashboardStats:
    today_bookings: int = 0
    week_bookings: int = 0
    total_clients: int = 0
    monthly_revenue: Decimal = Decimal("0")


@dataclass
class DashboardSnapshot:
    stats: DashboardStats = field(default_factory=DashboardStats)
    upcoming: List[Booking] = field(default_factory=list)
    recent: List[Booking] = field(default_factory=list)


def compute_stats(bookings: List[Booking], clients: List[Client], today: date) -> DashboardStats:
    """
    Aggregate dashboard figures.

    Revenue only counts bookings in the current month whose payment succeeded.
    """
    revenue = sum(
        (
            booking.total_amount
            for booking in bookings
            if booking.date.year == today.year
            and booking.date.month == today.month
            and booking.payment_status == "succeeded"
        ),
        Decimal("0"),
    )

    return DashboardStats(
        today_bookings=sum(1 for booking in bookings if booking.date == today),
        week_bookings=len(bookings),
        total_clients=len(clients),
        monthly_revenue=revenue,
    )


def upcoming_jobs(bookings: List[Booking], today: date, limit: int = UPCOMING_LIMIT) -> List[Booking]:
    upcoming = [
        booking for booking in sorted(bookings, key=lambda b: b.scheduled_at)
        if booking.date >= today and booking.status is not BookingStatus.CANCELLED
    ]
    return upcoming[:limit]


class DashboardService:
    """
    Loads the dashboard snapshot and applies staff actions.

    After every mutation the snapshot is reloaded in full rather than
    patched locally.
    """

    def __init__(self, directory: DirectoryProtocol, business_id: str, today: Optional[date] = None) -> None:
        self._directory = directory
        self._business_id = business_id
        self._today = today
        self.workflow = StatusWorkflow(directory)
        self.snapshot = DashboardSnapshot()

    @property
    def today(self) -> date:
        return self._today or pendulum.today().date()

    async def refresh(self) -> DashboardSnapshot:
        today = self.today
        bookings = await self._directory.get_bookings(
            self._business_id,
            today,
            today + timedelta(days=DASHBOARD_DAYS),
        )
        clients = await self._directory.get_clients(self._business_id)

        self.snapshot = DashboardSnapshot(
            stats=compute_stats(bookings, clients, today),
            upcoming=upcoming_jobs(bookings, today),
            recent=sorted(bookings, key=lambda b: b.scheduled_at)[:ACTIVITY_LIMIT],
        )
        logger.debug("Dashboard refreshed: %d bookings, %d clients", len(bookings), len(clients))
        return self.snapshot

    async def find_booking(self, booking_id: str) -> Booking:
        """
        Look a booking up by id across all dates.

        Raises:
            NotFoundError: If the business has no booking with that id
        """
        for booking in await self._directory.get_bookings(self._business_id):
            if booking.id == booking_id:
                return booking
        raise NotFoundError(f"Booking {booking_id} not found")

    async def advance(self, booking: Booking) -> Booking:
        updated = await self.workflow.advance(booking)
        await self.refresh()
        return updated

    async def cancel(self, booking: Booking) -> Booking:
        updated = await self.workflow.cancel(booking)
        await self.refresh()
        return updated

    async def delete(self, booking: Booking) -> None:
        await self.workflow.delete(booking)
        await self.refresh()
