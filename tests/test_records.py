"""
Tests for raw row validation and conversion.
"""

import logging
from datetime import date, time
from decimal import Decimal

import pytest

from bookingdesk.adapters.records import (
    BookingRecord,
    BusinessRecord,
    ClientRecord,
    ServiceRecord,
    UserRecord,
    booking_to_row,
    parse_rows,
    service_to_row,
)
from bookingdesk.domain.models import BookingStatus, ServiceLocation


class TestBusinessRecord:
    """Tests for business rows."""

    def test_hours_from_columns(self):
        business = BusinessRecord.model_validate(
            {"id": "b1", "business_name": "Sparkle", "opening_time": "08:00:00", "closing_time": "16:30:00"}
        ).to_domain()

        assert business.hours.start == time(8, 0)
        assert business.hours.end == time(16, 30)

    def test_hours_from_text(self):
        business = BusinessRecord.model_validate(
            {"id": "b1", "name": "Green Thumb", "business_hours": "Mon-Sat 7:30-15:30"}
        ).to_domain()

        assert business.name == "Green Thumb"
        assert business.hours.start == time(7, 30)
        assert business.hours_text == "Mon-Sat 7:30-15:30"

    def test_inverted_hours_are_ignored(self):
        business = BusinessRecord.model_validate({"id": "b1", "business_hours": "17:00-09:00"}).to_domain()
        assert business.hours is None

    def test_missing_hours(self):
        business = BusinessRecord.model_validate({"id": "b1", "business_hours": "By appointment"}).to_domain()
        assert business.hours is None


class TestServiceRecord:
    """Tests for service rows."""

    def test_camel_case_keys(self):
        service = ServiceRecord.model_validate(
            {
                "id": 12,
                "name": "Deep Clean",
                "duration": 120,
                "price": "180.00",
                "isActive": False,
                "requiresDeposit": True,
                "depositAmount": "40",
            }
        ).to_domain()

        assert service.id == "12"
        assert not service.is_active
        assert service.requires_deposit
        assert service.deposit_amount == Decimal("40")

    def test_deposit_dropped_when_not_required(self):
        service = ServiceRecord.model_validate(
            {"name": "Standard", "duration": 60, "price": 85, "deposit_amount": "0"}
        ).to_domain()

        assert service.deposit_amount is None

    def test_missing_location_defaults_to_client(self):
        service = ServiceRecord.model_validate(
            {"name": "Standard", "duration": 60, "price": 85, "location": None}
        ).to_domain()

        assert service.location is ServiceLocation.CLIENT_LOCATION

    def test_row_round_trip_fields(self):
        service = ServiceRecord.model_validate(
            {"id": "s1", "business_id": "b1", "name": "Quote", "duration": 30, "price": "0", "location": "remote"}
        ).to_domain()

        row = service_to_row(service)

        assert row["id"] == "s1"
        assert row["location"] == "remote"
        assert row["price"] == "0"
        assert row["deposit_amount"] is None


class TestBookingRecord:
    """Tests for booking rows."""

    def test_row_with_embedded_service(self):
        booking = BookingRecord.model_validate(
            {
                "id": 7,
                "service_id": 3,
                "user_id": "b1",
                "booking_date": "2025-03-04",
                "booking_time": "10:00:00",
                "client_name": "Dana",
                "client_email": "dana@example.com",
                "client_phone": "",
                "total_amount": 85,
                "status": None,
                "services": {"name": "Standard Clean", "duration": 60},
            }
        ).to_domain()

        assert booking.id == "7"
        assert booking.date == date(2025, 3, 4)
        assert booking.time_key == "10:00"
        assert booking.status is BookingStatus.PENDING
        assert booking.client_phone is None
        assert booking.business_id == "b1"
        assert booking.service_name == "Standard Clean"
        assert booking.duration_minutes == 60

    def test_to_row(self):
        booking = BookingRecord.model_validate(
            {
                "service_id": "s1",
                "business_id": "b1",
                "booking_date": "2025-03-04",
                "booking_time": "14:30",
                "duration": 90,
                "client_name": "Luis",
                "client_phone": "555-0142",
                "total_amount": "120.50",
                "status": "in-progress",
            }
        ).to_domain()

        row = booking_to_row(booking)

        assert row["user_id"] == "b1"
        assert row["booking_date"] == "2025-03-04"
        assert row["booking_time"] == "14:30"
        assert row["total_amount"] == "120.50"
        assert row["status"] == "in-progress"
        assert "client_id" not in row


class TestOtherRecords:
    """Tests for client and user rows."""

    def test_client_nulls_get_defaults(self):
        client = ClientRecord.model_validate(
            {"id": 1, "name": "Priya", "status": None, "is_vip": None, "total_bookings": None, "tags": None}
        ).to_domain()

        assert client.id == "1"
        assert client.status == "active"
        assert client.is_vip is False
        assert client.total_bookings == 0
        assert client.tags == []

    def test_user_metadata(self):
        user = UserRecord.model_validate(
            {
                "id": "u1",
                "email": "owner@example.com",
                "user_metadata": {"business_name": "Sparkle", "business_type": "housekeeping"},
            }
        ).to_domain()

        assert user.business_name == "Sparkle"
        assert user.business_type == "housekeeping"
        assert user.contact_phone == ""


class TestParseRows:
    """Tests for parse_rows."""

    def test_invalid_rows_are_skipped_and_logged(self, caplog):
        rows = [
            {"id": "ok", "service_id": "s1", "booking_date": "2025-03-04", "booking_time": "09:00",
             "client_name": "A", "client_email": "a@example.com"},
            {"id": "bad-time", "service_id": "s1", "booking_date": "2025-03-04", "booking_time": "noon",
             "client_name": "C", "client_email": "c@example.com"},
        ]

        with caplog.at_level(logging.WARNING):
            bookings = parse_rows(rows, BookingRecord, "booking")

        assert [booking.id for booking in bookings] == ["ok"]
        assert "bad-time" in caplog.text

    def test_booking_without_contact_is_kept(self):
        rows = [
            {"id": "staff-job", "service_id": "s1", "booking_date": "2025-03-04", "booking_time": "10:00:00",
             "client_name": "B", "client_id": "c9", "status": "confirmed"},
        ]

        bookings = parse_rows(rows, BookingRecord, "booking")

        assert [booking.id for booking in bookings] == ["staff-job"]
        assert bookings[0].client_id == "c9"
        assert bookings[0].booked_slot.time == "10:00"

    def test_empty(self):
        assert parse_rows([], ServiceRecord, "service") == []


@pytest.mark.parametrize("value, expected", [("09:00", "09:00"), ("09:00:00", "09:00"), ("17:45:30", "17:45")])
def test_booking_time_normalisation(value, expected):
    record = BookingRecord.model_validate(
        {"service_id": "s1", "booking_date": "2025-03-04", "booking_time": value}
    )
    assert record.booking_time == expected
