"""
Tests for the in-memory directory and identity.
"""

import asyncio
import dataclasses
from datetime import date, timedelta

import pytest

from bookingdesk.adapters.mock_directory import MockDirectory, MockIdentity
from bookingdesk.domain.exceptions import AuthenticationError, AvailabilityConflict, NotFoundError
from bookingdesk.domain.models import BookingStatus

TODAY = date(2025, 3, 3)


@pytest.fixture
def directory() -> MockDirectory:
    return MockDirectory(today=TODAY)


class TestMockDirectory:
    """Tests for MockDirectory seed data and CRUD."""

    def test_seed_data(self, directory):
        business = asyncio.run(directory.get_business("sparkle-home"))
        services = asyncio.run(directory.get_services("sparkle-home"))
        bookings = asyncio.run(directory.get_bookings("sparkle-home"))

        assert business.name == "Sparkle Home Cleaning"
        assert business.hours is not None
        assert len(services) == 4
        assert [booking.id for booking in bookings] == ["bkg-1", "bkg-2", "bkg-3", "bkg-4"]
        assert bookings[0].date == TODAY
        assert bookings[0].time_key == "10:00"

    def test_unknown_business(self, directory):
        assert asyncio.run(directory.get_business("nobody")) is None

    def test_bookings_in_range(self, directory):
        bookings = asyncio.run(
            directory.get_bookings("sparkle-home", TODAY + timedelta(days=1), TODAY + timedelta(days=2))
        )
        assert {booking.id for booking in bookings} == {"bkg-2", "bkg-3"}

    def test_duplicate_slot_is_a_conflict(self, directory):
        existing = asyncio.run(directory.get_bookings("sparkle-home"))[0]
        duplicate = dataclasses.replace(existing, id=None, client_name="Someone Else")

        with pytest.raises(AvailabilityConflict):
            asyncio.run(directory.create_booking(duplicate))

    def test_cancelled_slot_can_be_rebooked(self, directory):
        cancelled = next(b for b in asyncio.run(directory.get_bookings("sparkle-home")) if b.id == "bkg-3")

        created = asyncio.run(
            directory.create_booking(dataclasses.replace(cancelled, id=None, status=BookingStatus.PENDING))
        )

        assert created.id.startswith("bkg-")
        assert created.id != "bkg-3"

    def test_update_and_delete(self, directory):
        asyncio.run(directory.update_booking_status("bkg-2", BookingStatus.CONFIRMED))
        asyncio.run(directory.delete_booking("bkg-4"))

        bookings = {b.id: b for b in asyncio.run(directory.get_bookings("sparkle-home"))}

        assert bookings["bkg-2"].status is BookingStatus.CONFIRMED
        assert "bkg-4" not in bookings

    def test_unknown_booking(self, directory):
        with pytest.raises(NotFoundError):
            asyncio.run(directory.delete_booking("bkg-404"))

    def test_clients_sorted_by_name(self, directory):
        clients = asyncio.run(directory.get_clients("sparkle-home"))
        assert [client.name for client in clients] == ["Dana Whitfield", "Luis Ortega", "Priya Raman"]

    def test_empty_data(self):
        directory = MockDirectory(data={}, today=TODAY)
        assert asyncio.run(directory.get_services("sparkle-home")) == []


class TestMockIdentity:
    """Tests for MockIdentity."""

    def test_sign_up_and_in(self):
        identity = MockIdentity()

        user = asyncio.run(identity.sign_up("owner@example.com", "secret1", {"business_name": "Sparkle"}))
        asyncio.run(identity.sign_out())
        assert asyncio.run(identity.get_current_user()) is None

        signed_in = asyncio.run(identity.sign_in("owner@example.com", "secret1"))
        assert signed_in == user
        assert user.business_name == "Sparkle"

    def test_wrong_password(self):
        identity = MockIdentity()
        asyncio.run(identity.sign_up("owner@example.com", "secret1", {}))

        with pytest.raises(AuthenticationError):
            asyncio.run(identity.sign_in("owner@example.com", "wrong"))

    def test_duplicate_sign_up(self):
        identity = MockIdentity()
        asyncio.run(identity.sign_up("owner@example.com", "secret1", {}))

        with pytest.raises(AuthenticationError):
            asyncio.run(identity.sign_up("owner@example.com", "secret2", {}))
