"""
Collaborator protocols consumed by the application services.

The services depend on these protocols only, so the hosted backend adapter,
the in-memory mock and test stubs are interchangeable.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Optional, Protocol

from ..domain.models import Booking, BookingStatus, Business, Client, Service, User


class DirectoryProtocol(Protocol):
    """CRUD persistence for businesses, services, clients and bookings."""

    async def get_business(self, business_id: str) -> Optional[Business]:
        """Return the business profile or None if it does not exist."""

    async def get_services(self, business_id: str) -> List[Service]:
        """Return all services of a business."""

    async def create_service(self, service: Service) -> Service:
        """Persist a new service and return it with its id."""

    async def update_service(self, service: Service) -> Service:
        """Persist changes to an existing service."""

    async def delete_service(self, service_id: str) -> None:
        """Remove a service."""

    async def get_bookings(
        self,
        business_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> List[Booking]:
        """Return bookings of a business, optionally limited to a date range."""

    async def create_booking(self, booking: Booking) -> Booking:
        """Persist a new booking and return it with its id."""

    async def update_booking_status(self, booking_id: str, status: BookingStatus) -> None:
        """Atomically set the status of a booking."""

    async def delete_booking(self, booking_id: str) -> None:
        """Remove a booking."""

    async def get_clients(self, business_id: str) -> List[Client]:
        """Return the clients of a business ordered by name."""

    async def create_client(self, client: Client, business_id: str) -> Client:
        """Persist a new client."""


class IdentityProtocol(Protocol):
    """Authentication and session state."""

    async def sign_up(self, email: str, password: str, metadata: Dict[str, Any]) -> User:
        """Register a new account."""

    async def sign_in(self, email: str, password: str) -> User:
        """Start a session with email and password."""

    async def sign_out(self) -> None:
        """End the current session."""

    async def get_current_user(self) -> Optional[User]:
        """Return the signed-in user, or None."""
