"""
Domain models for businesses, services, bookings and time slots.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import List, Optional

import pendulum


def parse_time_of_day(value: "time | str") -> time:
    """
    Parse a time-of-day given as ``time`` or an ``HH:MM`` / ``HH:MM:SS`` string.

    Seconds and microseconds are dropped, slots live on a minute grid.
    """
    if isinstance(value, time):
        parsed = value
    else:
        try:
            parsed = time.fromisoformat(str(value).strip())
        except ValueError as exc:
            raise ValueError(f"Invalid time of day: {value!r}") from exc
    return parsed.replace(second=0, microsecond=0, tzinfo=None)


def format_time_key(value: "time | str") -> str:
    """Format a time-of-day as the ``HH:MM`` key used for slot matching."""
    return parse_time_of_day(value).strftime("%H:%M")


def format_time_display(value: "time | str") -> str:
    """
    Format a time-of-day for display on a 12-hour clock.

    Example: 09:00 -> "9:00 AM", 13:30 -> "1:30 PM"
    """
    parsed = parse_time_of_day(value)
    return pendulum.naive(2000, 1, 1, parsed.hour, parsed.minute).format("h:mm A")


class ServiceLocation(str, Enum):
    """Where a service is delivered."""
    CLIENT_LOCATION = "client_location"
    BUSINESS_LOCATION = "business_location"
    REMOTE = "remote"

    @property
    def label(self) -> str:
        return {
            ServiceLocation.CLIENT_LOCATION: "At your location",
            ServiceLocation.BUSINESS_LOCATION: "At business",
            ServiceLocation.REMOTE: "Remote/Virtual",
        }[self]


class BookingStatus(str, Enum):
    """Lifecycle states of a booking."""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @property
    def label(self) -> str:
        return self.value.replace("-", " ").title()

    @property
    def is_terminal(self) -> bool:
        return self in (BookingStatus.COMPLETED, BookingStatus.CANCELLED)


class BusinessType(str, Enum):
    HOUSEKEEPING = "housekeeping"
    LANDSCAPING = "landscaping"
    PERSONAL_CARE = "personal_care"
    PROFESSIONAL_SERVICES = "professional_services"
    OTHER = "other"


@dataclass(frozen=True)
class BusinessHours:
    """
    Opening hours for a single day.

    Invariant: start must be before end, no overnight spans.
    """
    start: time
    end: time

    def __post_init__(self):
        object.__setattr__(self, "start", parse_time_of_day(self.start))
        object.__setattr__(self, "end", parse_time_of_day(self.end))
        if self.start >= self.end:
            raise ValueError(
                f"Opening time {self.start:%H:%M} must be before closing time {self.end:%H:%M}"
            )

    def __str__(self) -> str:
        return f"{format_time_display(self.start)} - {format_time_display(self.end)}"


@dataclass(frozen=True)
class Slot:
    """A candidate appointment start time on a given date."""
    time: str  # HH:MM
    display: str

    @classmethod
    def at(cls, value: "time | str") -> "Slot":
        return cls(time=format_time_key(value), display=format_time_display(value))


@dataclass(frozen=True)
class BookedSlot:
    """A (date, time) pair already consumed by an existing booking."""
    date: date
    time: str  # HH:MM


@dataclass(frozen=True)
class Business:
    id: str
    name: str
    hours: Optional[BusinessHours] = None
    hours_text: str = ""
    tagline: str = ""
    description: str = ""
    location: str = ""
    logo_url: str = ""
    rating: Optional[float] = None
    review_count: int = 0


@dataclass(frozen=True)
class Service:
    """
    A bookable service offered by a business.

    Invariants: duration is positive, price is non-negative, and a deposit
    amount is present (and positive) exactly when a deposit is required.
    """
    id: Optional[str]
    name: str
    duration_minutes: int
    price: Decimal
    location: ServiceLocation = ServiceLocation.CLIENT_LOCATION
    is_active: bool = True
    requires_deposit: bool = False
    deposit_amount: Optional[Decimal] = None
    business_id: Optional[str] = None
    description: str = ""
    category: str = ""
    notes: str = ""

    def __post_init__(self):
        if self.duration_minutes <= 0:
            raise ValueError(f"Service duration must be positive, got {self.duration_minutes}")
        if self.price < 0:
            raise ValueError(f"Service price must not be negative, got {self.price}")
        if self.requires_deposit:
            if self.deposit_amount is None or self.deposit_amount <= 0:
                raise ValueError("A positive deposit amount is required when a deposit is required")
        elif self.deposit_amount is not None:
            raise ValueError("Deposit amount must be empty when no deposit is required")

    def format_display(self) -> str:
        return f"{self.name} | {self.duration_minutes} mins | ${self.price:.2f} | {self.location.label}"


@dataclass(frozen=True)
class Booking:
    """
    An appointment for a service on a date and time.

    New bookings need at least one of client email or phone. Rows read back
    from the Directory set ``requires_contact=False`` so a staff-entered job
    linked only by client id still occupies its slot.
    """
    id: Optional[str]
    service_id: str
    date: date
    time: time
    duration_minutes: int
    client_name: str
    total_amount: Decimal
    status: BookingStatus = BookingStatus.PENDING
    client_email: Optional[str] = None
    client_phone: Optional[str] = None
    address: Optional[str] = None
    notes: Optional[str] = None
    created_by: Optional[str] = None
    business_id: Optional[str] = None
    client_id: Optional[str] = None
    payment_status: Optional[str] = None
    service_name: Optional[str] = None
    requires_contact: bool = field(default=True, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "time", parse_time_of_day(self.time))
        object.__setattr__(self, "status", BookingStatus(self.status))
        if self.duration_minutes <= 0:
            raise ValueError(f"Booking duration must be positive, got {self.duration_minutes}")
        if self.requires_contact and not (self.client_email or self.client_phone):
            raise ValueError("A booking needs a client email or phone number")

    @property
    def time_key(self) -> str:
        return format_time_key(self.time)

    @property
    def booked_slot(self) -> BookedSlot:
        return BookedSlot(date=self.date, time=self.time_key)

    @property
    def scheduled_at(self) -> datetime:
        return datetime.combine(self.date, self.time)

    def format_display(self) -> str:
        when = pendulum.instance(self.scheduled_at).format("ddd, MMM D YYYY h:mm A")
        service = self.service_name or "Service"
        return f"{when} | {service} | {self.client_name} | {self.status.label}"


@dataclass(frozen=True)
class Client:
    id: Optional[str]
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    status: str = "active"
    is_vip: bool = False
    created_at: Optional[datetime] = None
    last_booking_date: Optional[date] = None
    total_bookings: int = 0
    notes: str = ""
    tags: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class User:
    id: str
    email: str
    business_name: str = ""
    business_type: Optional[str] = None
    contact_phone: str = ""
