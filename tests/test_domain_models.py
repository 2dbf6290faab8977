"""
Tests for domain models.
"""

import pytest
from datetime import date, time
from decimal import Decimal

from bookingdesk.domain.models import (
    BookedSlot,
    Booking,
    BookingStatus,
    BusinessHours,
    Service,
    ServiceLocation,
    Slot,
    format_time_display,
    format_time_key,
    parse_time_of_day,
)


def _booking(**overrides) -> Booking:
    values = dict(
        id="bkg-1",
        service_id="svc-1",
        date=date(2025, 3, 4),
        time="10:00",
        duration_minutes=60,
        client_name="Dana",
        total_amount=Decimal("85.00"),
        client_email="dana@example.com",
    )
    values.update(overrides)
    return Booking(**values)


class TestTimeHelpers:
    """Tests for time-of-day parsing and formatting."""

    def test_parse_drops_seconds(self):
        """Database times carry seconds, slot keys do not."""
        assert parse_time_of_day("09:00:00") == time(9, 0)
        assert parse_time_of_day(time(14, 30, 15)) == time(14, 30)

    def test_parse_invalid_raises_error(self):
        with pytest.raises(ValueError, match="Invalid time of day"):
            parse_time_of_day("quarter past nine")

    def test_format_key(self):
        assert format_time_key("10:30:00") == "10:30"
        assert format_time_key(time(8, 5)) == "08:05"

    def test_format_display_uses_12_hour_clock(self):
        assert format_time_display("09:00") == "9:00 AM"
        assert format_time_display("13:30") == "1:30 PM"
        assert format_time_display("00:00") == "12:00 AM"
        assert format_time_display("12:00") == "12:00 PM"

    def test_slot_at(self):
        assert Slot.at("16:00:00") == Slot(time="16:00", display="4:00 PM")


class TestBusinessHours:
    """Tests for BusinessHours model."""

    def test_accepts_strings(self):
        hours = BusinessHours(start="08:30", end="16:00")

        assert hours.start == time(8, 30)
        assert hours.end == time(16, 0)
        assert str(hours) == "8:30 AM - 4:00 PM"

    def test_start_after_end_raises_error(self):
        with pytest.raises(ValueError, match="must be before closing time"):
            BusinessHours(start="17:00", end="09:00")

    def test_equal_start_and_end_raises_error(self):
        with pytest.raises(ValueError):
            BusinessHours(start="09:00", end="09:00")


class TestService:
    """Tests for Service model invariants."""

    def test_create_valid_service(self):
        service = Service(id="svc-1", name="Standard Clean", duration_minutes=60, price=Decimal("85"))

        assert service.location is ServiceLocation.CLIENT_LOCATION
        assert service.is_active
        assert service.format_display() == "Standard Clean | 60 mins | $85.00 | At your location"

    def test_non_positive_duration_raises_error(self):
        with pytest.raises(ValueError, match="duration must be positive"):
            Service(id=None, name="Broken", duration_minutes=0, price=Decimal("10"))

    def test_negative_price_raises_error(self):
        with pytest.raises(ValueError, match="must not be negative"):
            Service(id=None, name="Broken", duration_minutes=30, price=Decimal("-1"))

    def test_free_service_is_allowed(self):
        service = Service(id=None, name="Quote", duration_minutes=30, price=Decimal("0"))
        assert service.price == 0

    def test_deposit_required_without_amount_raises_error(self):
        with pytest.raises(ValueError, match="positive deposit amount"):
            Service(id=None, name="Deep", duration_minutes=120, price=Decimal("180"), requires_deposit=True)

    def test_deposit_amount_without_requirement_raises_error(self):
        with pytest.raises(ValueError, match="must be empty"):
            Service(
                id=None,
                name="Deep",
                duration_minutes=120,
                price=Decimal("180"),
                deposit_amount=Decimal("40"),
            )


class TestBooking:
    """Tests for Booking model."""

    def test_time_is_normalised(self):
        booking = _booking(time="10:00:00")

        assert booking.time == time(10, 0)
        assert booking.time_key == "10:00"
        assert booking.booked_slot == BookedSlot(date=date(2025, 3, 4), time="10:00")

    def test_status_is_coerced_from_string(self):
        booking = _booking(status="in-progress")
        assert booking.status is BookingStatus.IN_PROGRESS

    def test_unknown_status_raises_error(self):
        with pytest.raises(ValueError):
            _booking(status="archived")

    def test_requires_email_or_phone(self):
        with pytest.raises(ValueError, match="email or phone"):
            _booking(client_email=None, client_phone=None)

    def test_stored_booking_may_lack_contact(self):
        booking = _booking(client_email=None, client_phone=None, client_id="c9", requires_contact=False)
        assert booking.booked_slot.time == "10:00"

    def test_phone_alone_is_enough(self):
        booking = _booking(client_email=None, client_phone="+1 503 555 0142")
        assert booking.client_phone

    def test_scheduled_at(self):
        booking = _booking(time="14:30")
        assert booking.scheduled_at.isoformat() == "2025-03-04T14:30:00"


class TestBookingStatus:
    """Tests for status labels and terminal states."""

    def test_labels(self):
        assert BookingStatus.IN_PROGRESS.label == "In Progress"
        assert BookingStatus.PENDING.label == "Pending"

    def test_terminal_states(self):
        assert BookingStatus.COMPLETED.is_terminal
        assert BookingStatus.CANCELLED.is_terminal
        assert not BookingStatus.CONFIRMED.is_terminal

    def test_location_labels(self):
        assert ServiceLocation.REMOTE.label == "Remote/Virtual"
