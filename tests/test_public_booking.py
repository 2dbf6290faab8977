"""
Tests for booking links and opening the public booking page.
"""

import asyncio
from datetime import date, time

import pytest

from bookingdesk.adapters.mock_directory import MockDirectory
from bookingdesk.config import AppConfig
from bookingdesk.domain.exceptions import NotFoundError
from bookingdesk.services.public_booking import build_booking_link, open_booking_session, parse_booking_link

TODAY = date(2025, 3, 3)


class TestBookingLinks:
    """Tests for parse_booking_link and build_booking_link."""

    def test_parse_full_link(self):
        link = "https://book.example.com/book/sparkle-home?service=svc-deep"
        assert parse_booking_link(link) == ("sparkle-home", "svc-deep")

    def test_parse_without_service(self):
        assert parse_booking_link("/book/sparkle-home") == ("sparkle-home", None)

    def test_parse_without_book_prefix(self):
        assert parse_booking_link("https://example.com/green-thumb/") == ("green-thumb", None)

    def test_parse_without_business_raises(self):
        with pytest.raises(ValueError, match="No business id"):
            parse_booking_link("https://example.com/book/")

    def test_build_link(self):
        assert build_booking_link("https://book.example.com/", "sparkle-home") == (
            "https://book.example.com/book/sparkle-home"
        )
        assert build_booking_link("https://book.example.com", "sparkle-home", "svc-deep") == (
            "https://book.example.com/book/sparkle-home?service=svc-deep"
        )

    def test_build_then_parse(self):
        link = build_booking_link("https://book.example.com", "biz 1", "svc-2")
        assert parse_booking_link(link) == ("biz 1", "svc-2")


class TestOpenBookingSession:
    """Tests for open_booking_session."""

    def _open(self, business_id, service_id=None, config=None):
        return asyncio.run(
            open_booking_session(
                MockDirectory(today=TODAY),
                business_id,
                service_id,
                config=config,
                today=TODAY,
            )
        )

    def test_unknown_business(self):
        with pytest.raises(NotFoundError, match="Business not found"):
            self._open("nobody")

    def test_preselects_linked_service(self):
        session = self._open("sparkle-home", "svc-deep")

        assert session.selected_service.id == "svc-deep"
        assert session.navigator.duration_minutes == 120
        assert session.business.name == "Sparkle Home Cleaning"

    def test_business_hours_from_record(self):
        session = self._open("green-thumb")

        assert session.navigator.business_hours.start == time(7, 30)
        assert session.selected_service.id == "svc-mow"

    def test_window_and_excluded_days_from_config(self):
        config = AppConfig(exclude_days=[6], defaults={"booking_window_days": 14})
        session = self._open("sparkle-home", config=config)

        assert session.select_date(date(2025, 3, 4))
        assert not session.select_date(date(2025, 3, 9))  # Sunday
        assert not session.select_date(date(2025, 3, 17))  # outside the window

    def test_existing_bookings_block_slots(self):
        session = self._open("sparkle-home")

        session.select_date(TODAY)

        assert "10:00" not in [slot.time for slot in session.navigator.time_slots]

    def test_booking_without_contact_still_blocks_its_slot(self):
        directory = MockDirectory(
            data={
                "businesses": [{"id": "biz-9", "business_name": "Tidy Co"}],
                "services": [{"id": "svc-9", "business_id": "biz-9", "name": "Clean", "duration": 60, "price": "60"}],
                "bookings": [
                    {"id": "staff-job", "service_id": "svc-9", "user_id": "biz-9", "client_id": "c9",
                     "client_name": "Walk-in", "booking_date": "2025-03-04", "booking_time": "10:00:00",
                     "status": "confirmed"},
                ],
            },
            today=TODAY,
        )
        session = asyncio.run(open_booking_session(directory, "biz-9", today=TODAY))

        assert session.select_date(date(2025, 3, 4))
        assert "10:00" not in [slot.time for slot in session.navigator.time_slots]
        assert not session.select_time("10:00")
