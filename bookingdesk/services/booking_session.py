"""
Booking session: service choice -> date/time choice -> contact form -> submit.

The session holds everything the customer entered until submission
succeeds. A failed submission keeps the form intact so it can be retried.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from datetime import date, time
from enum import Enum
from typing import AbstractSet, Dict, List, Optional

import pendulum

from ..domain.calendar import CalendarNavigator
from ..domain.exceptions import AvailabilityConflict, CollaboratorError, ValidationError
from ..domain.models import (
    Booking,
    BookingStatus,
    Business,
    BusinessHours,
    Service,
    format_time_display,
    parse_time_of_day,
)
from ..domain.validation import ContactDetails, validate_booking_form
from .protocols import DirectoryProtocol, IdentityProtocol

logger = logging.getLogger(__name__)

SUBMIT_FAILED_MESSAGE = "Failed to create booking. Please try again."
CONFLICT_MESSAGE = "This time was just booked by someone else. Please choose another time."


class SessionPhase(str, Enum):
    SELECTING = "selecting"
    CONFIRMED = "confirmed"
    CLOSED = "closed"


@dataclass(frozen=True)
class BookingConfirmation:
    """The created booking plus the service snapshot used to price it."""
    booking: Booking
    service: Service

    def summary_lines(self) -> List[str]:
        booking_date = pendulum.date(
            self.booking.date.year, self.booking.date.month, self.booking.date.day
        )
        lines = [
            f"Date: {booking_date.format('MMM DD, YYYY')}",
            f"Time: {format_time_display(self.booking.time)}",
            f"Service: {self.service.name} ({self.service.duration_minutes} minutes)",
            f"Total: ${self.booking.total_amount:.2f}",
        ]
        if self.booking.client_email:
            lines.append(f"A confirmation email has been sent to {self.booking.client_email}.")
        return lines


class BookingSession:
    """
    Orchestrates a single customer booking against the Directory.

    The bookings snapshot used for slot exclusion is fetched when the session
    starts and replaced in full after every mutation.
    """

    def __init__(
        self,
        directory: DirectoryProtocol,
        business: Business,
        *,
        available_dates: AbstractSet[date],
        default_hours: BusinessHours,
        identity: Optional[IdentityProtocol] = None,
        default_duration_minutes: int = 60,
        min_date: Optional[date] = None,
        max_date: Optional[date] = None,
        today: Optional[date] = None,
        months_ahead: int = 3,
    ) -> None:
        self._directory = directory
        self._identity = identity
        self.business = business
        self.services: List[Service] = []
        self.selected_service: Optional[Service] = None
        self.contact = ContactDetails()
        self.errors: Dict[str, str] = {}
        self.phase = SessionPhase.SELECTING
        self.confirmation: Optional[BookingConfirmation] = None
        self._submitting = False

        self.navigator = CalendarNavigator(
            available_dates=available_dates,
            business_hours=business.hours or default_hours,
            duration_minutes=default_duration_minutes,
            min_date=min_date,
            max_date=max_date,
            today=today,
            months_ahead=months_ahead,
        )

    @property
    def submitting(self) -> bool:
        """True while a submission is in flight; further submits are no-ops."""
        return self._submitting

    async def start(self, service_id: Optional[str] = None) -> None:
        """
        Load active services and the bookings snapshot.

        Args:
            service_id: Service to pre-select; unknown ids are ignored and the
                first active service is used instead
        """
        services = await self._directory.get_services(self.business.id)
        self.services = [service for service in services if service.is_active]

        preselected = None
        if service_id:
            preselected = self._find_service(service_id)
            if preselected is None:
                logger.info("Pre-selected service %s is not bookable, ignoring", service_id)
        if preselected is None and self.services:
            preselected = self.services[0]

        if preselected is not None:
            self._apply_service(preselected)

        await self.refresh_bookings()

    async def refresh_bookings(self) -> None:
        """Replace the bookings snapshot with the Directory's current state."""
        bookings = await self._directory.get_bookings(
            self.business.id,
            self.navigator.state.min_date,
            self.navigator.state.max_date,
        )
        active = [b for b in bookings if b.status is not BookingStatus.CANCELLED]
        self.navigator.refresh_bookings(active)
        logger.debug("Bookings snapshot refreshed: %d active bookings", len(active))

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def select_service(self, service_id: str) -> bool:
        service = self._find_service(service_id)
        if service is None:
            return False
        self._apply_service(service)
        self.errors.pop("service", None)
        return True

    def select_date(self, day: date) -> bool:
        accepted = self.navigator.select_date(day)
        if accepted:
            self.errors.pop("date", None)
        return accepted

    def select_time(self, value: "time | str") -> bool:
        accepted = self.navigator.select_time(value)
        if accepted:
            self.errors.pop("time", None)
        return accepted

    def update_contact(self, **values: str) -> None:
        """Update contact fields; editing a field clears its error."""
        known = {f.name for f in fields(ContactDetails)}
        for name, value in values.items():
            if name not in known:
                raise ValueError(f"Unknown contact field: {name}")
            setattr(self.contact, name, value or "")
            self.errors.pop(name, None)
            if name in ("email", "phone"):
                self.errors.pop("contact", None)

    def validate(self) -> Dict[str, str]:
        return validate_booking_form(
            service_selected=self.selected_service is not None,
            date_selected=self.navigator.selected_date is not None,
            time_selected=self.navigator.selected_time is not None,
            contact=self.contact,
        )

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    async def submit(self) -> Optional[BookingConfirmation]:
        """
        Validate, re-check availability and create the booking.

        Returns:
            The confirmation, or None if a submission is already in flight,
            the session is no longer collecting input, or it was closed while
            the request was outstanding

        Raises:
            ValidationError: If any form field is invalid (nothing is sent)
            AvailabilityConflict: If the selected time was taken meanwhile
            CollaboratorError: If the Directory rejects the booking
        """
        if self._submitting or self.phase is not SessionPhase.SELECTING:
            return None

        errors = self.validate()
        self.errors = errors
        if errors:
            raise ValidationError(errors)

        self._submitting = True
        try:
            await self._recheck_availability()
            booking = await self._build_booking()
            created = await self._create(booking)
        finally:
            self._submitting = False

        if self.phase is SessionPhase.CLOSED:
            logger.info("Booking %s created after the session was closed, ignoring", created.id)
            return None

        self.confirmation = BookingConfirmation(booking=created, service=self.selected_service)
        self.phase = SessionPhase.CONFIRMED
        logger.info("Booking %s created for %s", created.id, created.scheduled_at)

        try:
            await self.refresh_bookings()
        except CollaboratorError as exc:
            logger.warning("Could not refresh bookings after submission: %s", exc)

        return self.confirmation

    def close(self) -> None:
        """Tear the session down; an in-flight submission result is ignored."""
        self.phase = SessionPhase.CLOSED

    async def _recheck_availability(self) -> None:
        try:
            await self.refresh_bookings()
        except CollaboratorError as exc:
            logger.warning("Could not re-check availability, using last snapshot: %s", exc)

        # refresh_bookings drops a selected time that is no longer offered
        if self.navigator.selected_time is None:
            self._report_conflict()

    async def _create(self, booking: Booking) -> Booking:
        try:
            return await self._directory.create_booking(booking)
        except AvailabilityConflict:
            try:
                await self.refresh_bookings()
            except CollaboratorError as exc:
                logger.warning("Could not refresh bookings after conflict: %s", exc)
            self._report_conflict(booking)
        except CollaboratorError as exc:
            logger.error("Error creating booking: %s", exc)
            self.errors = {"submit": SUBMIT_FAILED_MESSAGE}
            raise

    def _report_conflict(self, booking: Optional[Booking] = None) -> None:
        self.navigator.state.selected_time = None
        self.errors = {"time": CONFLICT_MESSAGE}
        raise AvailabilityConflict(
            CONFLICT_MESSAGE,
            booking_date=booking.date if booking else self.navigator.selected_date,
            booking_time=booking.time if booking else None,
        )

    async def _build_booking(self) -> Booking:
        service = self.selected_service
        created_by = None
        if self._identity is not None:
            try:
                user = await self._identity.get_current_user()
            except CollaboratorError as exc:
                logger.error("Error looking up the signed-in user: %s", exc)
                self.errors = {"submit": SUBMIT_FAILED_MESSAGE}
                raise
            created_by = user.id if user else None

        return Booking(
            id=None,
            service_id=service.id,
            date=self.navigator.selected_date,
            time=parse_time_of_day(self.navigator.selected_time),
            duration_minutes=service.duration_minutes,
            client_name=self.contact.name.strip(),
            client_email=self.contact.email.strip() or None,
            client_phone=self.contact.phone.strip() or None,
            address=self.contact.address.strip() or None,
            notes=self.contact.notes.strip() or None,
            total_amount=service.price,
            status=BookingStatus.PENDING,
            created_by=created_by,
            business_id=self.business.id,
            service_name=service.name,
        )

    def _find_service(self, service_id: str) -> Optional[Service]:
        for service in self.services:
            if service.id == service_id:
                return service
        return None

    def _apply_service(self, service: Service) -> None:
        self.selected_service = service
        self.navigator.set_duration(service.duration_minutes)
