"""
Pydantic models for raw Directory rows.

Rows from the hosted database arrive as loosely shaped dicts (snake_case
columns, some legacy camelCase keys, embedded relations). They are validated
here and converted into domain objects; missing fields get their defaults
at this boundary and nowhere else.
"""

from __future__ import annotations

import logging
import re
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    ValidationInfo,
    field_validator,
)

from ..domain.models import (
    Booking,
    BookingStatus,
    Business,
    BusinessHours,
    Client,
    Service,
    ServiceLocation,
    User,
    format_time_key,
)

logger = logging.getLogger(__name__)

_HOURS_TEXT = re.compile(r"(\d{1,2}:\d{2})\s*[-–]\s*(\d{1,2}:\d{2})")
_CLIENT_DEFAULTS: Dict[str, Any] = {
    "status": "active",
    "is_vip": False,
    "total_bookings": 0,
    "tags": [],
}


class _Record(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class EmbeddedService(_Record):
    name: Optional[str] = None
    duration: Optional[int] = None


class BusinessRecord(_Record):
    id: str
    business_name: str = Field(default="", validation_alias=AliasChoices("business_name", "name"))
    business_hours: Optional[str] = None
    opening_time: Optional[str] = None
    closing_time: Optional[str] = None
    tagline: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    logo_url: Optional[str] = None
    rating: Optional[float] = None
    review_count: Optional[int] = None

    def parse_hours(self) -> Optional[BusinessHours]:
        """Use explicit opening/closing columns, else an ``HH:MM-HH:MM`` text."""
        start, end = self.opening_time, self.closing_time
        if not (start and end) and self.business_hours:
            match = _HOURS_TEXT.search(self.business_hours)
            if match:
                start, end = match.group(1).zfill(5), match.group(2).zfill(5)
        if not (start and end):
            return None
        try:
            return BusinessHours(start=start, end=end)
        except ValueError as exc:
            logger.warning("Ignoring business hours of %s: %s", self.id, exc)
            return None

    def to_domain(self) -> Business:
        return Business(
            id=self.id,
            name=self.business_name,
            hours=self.parse_hours(),
            hours_text=self.business_hours or "",
            tagline=self.tagline or "",
            description=self.description or "",
            location=self.location or "",
            logo_url=self.logo_url or "",
            rating=self.rating,
            review_count=self.review_count or 0,
        )


class ServiceRecord(_Record):
    id: Optional[str] = None
    business_id: Optional[str] = None
    name: str
    description: Optional[str] = None
    duration: int = Field(validation_alias=AliasChoices("duration", "duration_minutes"))
    price: Decimal = Decimal("0")
    category: Optional[str] = None
    location: ServiceLocation = ServiceLocation.CLIENT_LOCATION
    is_active: bool = Field(default=True, validation_alias=AliasChoices("is_active", "isActive"))
    requires_deposit: bool = Field(
        default=False, validation_alias=AliasChoices("requires_deposit", "requiresDeposit")
    )
    deposit_amount: Optional[Decimal] = Field(
        default=None, validation_alias=AliasChoices("deposit_amount", "depositAmount")
    )
    notes: Optional[str] = None

    @field_validator("location", mode="before")
    @classmethod
    def default_location(cls, value: Any) -> Any:
        return value or ServiceLocation.CLIENT_LOCATION

    @field_validator("id", "business_id", mode="before")
    @classmethod
    def stringify_id(cls, value: Any) -> Any:
        return None if value is None else str(value)

    def to_domain(self) -> Service:
        return Service(
            id=self.id,
            name=self.name,
            duration_minutes=self.duration,
            price=self.price,
            location=self.location,
            is_active=self.is_active,
            requires_deposit=self.requires_deposit,
            deposit_amount=self.deposit_amount if self.requires_deposit else None,
            business_id=self.business_id,
            description=self.description or "",
            category=self.category or "",
            notes=self.notes or "",
        )


class BookingRecord(_Record):
    id: Optional[str] = None
    service_id: str
    booking_date: date
    booking_time: str
    duration: Optional[int] = None
    client_name: str = ""
    client_email: Optional[str] = None
    client_phone: Optional[str] = None
    client_address: Optional[str] = None
    notes: Optional[str] = None
    total_amount: Decimal = Decimal("0")
    status: BookingStatus = BookingStatus.PENDING
    created_by: Optional[str] = None
    user_id: Optional[str] = Field(default=None, validation_alias=AliasChoices("user_id", "business_id"))
    client_id: Optional[str] = None
    payment_status: Optional[str] = None
    services: Optional[EmbeddedService] = None

    @field_validator("status", mode="before")
    @classmethod
    def default_status(cls, value: Any) -> Any:
        return value or BookingStatus.PENDING

    @field_validator("booking_time")
    @classmethod
    def normalise_time(cls, value: str) -> str:
        return format_time_key(value)

    @field_validator("id", "service_id", "client_id", mode="before")
    @classmethod
    def stringify_id(cls, value: Any) -> Any:
        return None if value is None else str(value)

    @field_validator("client_email", "client_phone", "client_address", "notes", mode="before")
    @classmethod
    def blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    def to_domain(self) -> Booking:
        embedded = self.services or EmbeddedService()
        return Booking(
            id=self.id,
            service_id=self.service_id,
            date=self.booking_date,
            time=self.booking_time,
            duration_minutes=self.duration or embedded.duration or 60,
            client_name=self.client_name,
            client_email=self.client_email,
            client_phone=self.client_phone,
            address=self.client_address,
            notes=self.notes,
            total_amount=self.total_amount,
            status=self.status,
            created_by=self.created_by,
            business_id=self.user_id,
            client_id=self.client_id,
            payment_status=self.payment_status,
            service_name=embedded.name,
            requires_contact=False,
        )


class ClientRecord(_Record):
    id: Optional[str] = None
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    status: str = "active"
    is_vip: bool = False
    created_at: Optional[datetime] = None
    last_booking_date: Optional[date] = None
    total_bookings: int = 0
    notes: Optional[str] = None
    tags: List[str] = Field(default_factory=list)

    @field_validator("id", mode="before")
    @classmethod
    def stringify_id(cls, value: Any) -> Any:
        return None if value is None else str(value)

    @field_validator("status", "total_bookings", "tags", "is_vip", mode="before")
    @classmethod
    def drop_nulls(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None:
            default = _CLIENT_DEFAULTS[info.field_name]
            return list(default) if isinstance(default, list) else default
        return value

    def to_domain(self) -> Client:
        return Client(
            id=self.id,
            name=self.name,
            email=self.email,
            phone=self.phone,
            address=self.address,
            status=self.status,
            is_vip=self.is_vip,
            created_at=self.created_at,
            last_booking_date=self.last_booking_date,
            total_bookings=self.total_bookings,
            notes=self.notes or "",
            tags=list(self.tags),
        )


class UserRecord(_Record):
    id: str
    email: str = ""
    user_metadata: Dict[str, Any] = Field(default_factory=dict)

    def to_domain(self) -> User:
        meta = self.user_metadata or {}
        return User(
            id=self.id,
            email=self.email,
            business_name=meta.get("business_name", ""),
            business_type=meta.get("business_type"),
            contact_phone=meta.get("contact_phone", ""),
        )


def parse_rows(
    rows: Iterable[Dict[str, Any]],
    record_type: type,
    label: str,
) -> List[Any]:
    """
    Convert raw rows into domain objects, skipping rows that fail validation.

    Invalid rows are logged rather than failing the whole listing.
    """
    parsed: List[Any] = []
    for row in rows:
        try:
            parsed.append(record_type.model_validate(row).to_domain())
        except (ValidationError, ValueError) as exc:
            logger.warning("Skipping invalid %s row %s: %s", label, row.get("id"), exc)
    return parsed


def service_to_row(service: Service) -> Dict[str, Any]:
    row: Dict[str, Any] = {
        "business_id": service.business_id,
        "name": service.name,
        "description": service.description,
        "duration": service.duration_minutes,
        "price": str(service.price),
        "category": service.category,
        "location": service.location.value,
        "is_active": service.is_active,
        "requires_deposit": service.requires_deposit,
        "deposit_amount": str(service.deposit_amount) if service.requires_deposit else None,
        "notes": service.notes,
    }
    if service.id:
        row["id"] = service.id
    return row


def booking_to_row(booking: Booking) -> Dict[str, Any]:
    row: Dict[str, Any] = {
        "service_id": booking.service_id,
        "user_id": booking.business_id,
        "booking_date": booking.date.isoformat(),
        "booking_time": booking.time_key,
        "duration": booking.duration_minutes,
        "client_name": booking.client_name,
        "client_email": booking.client_email,
        "client_phone": booking.client_phone,
        "client_address": booking.address,
        "notes": booking.notes,
        "total_amount": str(booking.total_amount),
        "status": booking.status.value,
        "created_by": booking.created_by,
    }
    if booking.client_id:
        row["client_id"] = booking.client_id
    return row


def client_to_row(client: Client, business_id: str) -> Dict[str, Any]:
    return {
        "user_id": business_id,
        "name": client.name,
        "email": client.email,
        "phone": client.phone,
        "address": client.address,
        "status": client.status,
        "is_vip": client.is_vip,
        "notes": client.notes,
        "tags": list(client.tags),
    }
