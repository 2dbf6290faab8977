"""
In-memory Directory and Identity for demos and tests without a backend.
"""

import dataclasses
import itertools
import json
from datetime import date, timedelta
from pathlib import Path
from typing import Any, Dict, List, Optional

import pendulum

from ..domain.exceptions import AuthenticationError, AvailabilityConflict, NotFoundError
from ..domain.models import Booking, BookingStatus, Business, Client, Service, User
from .records import BookingRecord, BusinessRecord, ClientRecord, ServiceRecord, parse_rows


class MockDirectory:
    """
    Directory backed by plain lists.

    Seed data is loaded from mock_directory_data.json. Booking rows there use
    ``day_offset`` (days from today) instead of fixed dates so the demo data
    always lies in the bookable window.
    """

    def __init__(self, data: Optional[Dict[str, Any]] = None, today: Optional[date] = None):
        """
        Initialize the mock directory.

        Args:
            data: Seed rows; defaults to the bundled JSON file
            today: Reference day for ``day_offset`` rows
        """
        self.today = today or pendulum.today().date()
        self._ids = itertools.count(1000)
        self.businesses: Dict[str, Business] = {}
        self.services: List[Service] = []
        self.bookings: List[Booking] = []
        self.clients: Dict[str, List[Client]] = {}
        self._load(data if data is not None else self._load_seed_file())

    def _load_seed_file(self) -> Dict[str, Any]:
        """Load mock directory data from JSON file."""
        data_file = Path(__file__).parent / "mock_directory_data.json"

        if data_file.exists():
            with open(data_file, "r", encoding="utf-8") as f:
                return json.load(f)

        # Fallback to empty if file doesn't exist
        return {}

    def _load(self, data: Dict[str, Any]) -> None:
        for business in parse_rows(data.get("businesses", []), BusinessRecord, "business"):
            self.businesses[business.id] = business

        self.services = parse_rows(data.get("services", []), ServiceRecord, "service")

        booking_rows = []
        for row in data.get("bookings", []):
            row = dict(row)
            if "day_offset" in row:
                row["booking_date"] = (self.today + timedelta(days=row.pop("day_offset"))).isoformat()
            booking_rows.append(row)
        self.bookings = parse_rows(booking_rows, BookingRecord, "booking")

        for row in data.get("clients", []):
            business_id = row.get("user_id", "")
            self.clients.setdefault(business_id, []).extend(parse_rows([row], ClientRecord, "client"))

    def _next_id(self, prefix: str) -> str:
        return f"{prefix}-{next(self._ids)}"

    # Businesses

    async def get_business(self, business_id: str) -> Optional[Business]:
        return self.businesses.get(business_id)

    # Services

    async def get_services(self, business_id: str) -> List[Service]:
        return [service for service in self.services if service.business_id == business_id]

    async def create_service(self, service: Service) -> Service:
        created = dataclasses.replace(service, id=self._next_id("svc"))
        self.services.append(created)
        return created

    async def update_service(self, service: Service) -> Service:
        for index, existing in enumerate(self.services):
            if existing.id == service.id:
                self.services[index] = service
                return service
        raise NotFoundError(f"Service {service.id} not found")

    async def delete_service(self, service_id: str) -> None:
        self.services = [service for service in self.services if service.id != service_id]

    # Bookings

    async def get_bookings(
        self,
        business_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> List[Booking]:
        return sorted(
            (
                booking for booking in self.bookings
                if booking.business_id == business_id
                and (start_date is None or booking.date >= start_date)
                and (end_date is None or booking.date <= end_date)
            ),
            key=lambda b: b.scheduled_at,
        )

    async def create_booking(self, booking: Booking) -> Booking:
        for existing in self.bookings:
            if (
                existing.business_id == booking.business_id
                and existing.booked_slot == booking.booked_slot
                and existing.status is not BookingStatus.CANCELLED
            ):
                raise AvailabilityConflict(booking_date=booking.date, booking_time=booking.time)

        created = dataclasses.replace(booking, id=self._next_id("bkg"))
        self.bookings.append(created)
        return created

    async def update_booking_status(self, booking_id: str, status: BookingStatus) -> None:
        booking = self._find_booking(booking_id)
        self.bookings[self.bookings.index(booking)] = dataclasses.replace(booking, status=status)

    async def delete_booking(self, booking_id: str) -> None:
        booking = self._find_booking(booking_id)
        self.bookings.remove(booking)

    def _find_booking(self, booking_id: str) -> Booking:
        for booking in self.bookings:
            if booking.id == booking_id:
                return booking
        raise NotFoundError(f"Booking {booking_id} not found")

    # Clients

    async def get_clients(self, business_id: str) -> List[Client]:
        return sorted(self.clients.get(business_id, []), key=lambda c: c.name.lower())

    async def create_client(self, client: Client, business_id: str) -> Client:
        created = dataclasses.replace(client, id=self._next_id("cli"))
        self.clients.setdefault(business_id, []).append(created)
        return created


class MockIdentity:
    """
    Identity that accepts any registered email/password pair.

    Useful for exercising the account flow without Supabase credentials.
    """

    def __init__(self, user: Optional[User] = None):
        self._accounts: Dict[str, str] = {}
        self._users: Dict[str, User] = {}
        self._current: Optional[User] = user
        if user is not None:
            self._users[user.email] = user

    async def sign_up(self, email: str, password: str, metadata: Dict[str, Any]) -> User:
        if email in self._accounts:
            raise AuthenticationError("Email already registered")
        user = User(
            id=f"user-{len(self._users) + 1}",
            email=email,
            business_name=metadata.get("business_name", ""),
            business_type=metadata.get("business_type"),
            contact_phone=metadata.get("contact_phone", ""),
        )
        self._accounts[email] = password
        self._users[email] = user
        self._current = user
        return user

    async def sign_in(self, email: str, password: str) -> User:
        if self._accounts.get(email) != password:
            raise AuthenticationError("Invalid login credentials")
        self._current = self._users[email]
        return self._current

    async def sign_out(self) -> None:
        self._current = None

    async def get_current_user(self) -> Optional[User]:
        return self._current
