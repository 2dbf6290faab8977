"""
Domain layer - Pure business logic without external dependencies.
"""

from .availability import available_slots_for_date, candidate_dates, is_date_available
from .calendar import CalendarNavigator, CalendarViewState
from .models import (
    BookedSlot,
    Booking,
    BookingStatus,
    Business,
    BusinessHours,
    Client,
    Service,
    ServiceLocation,
    Slot,
    User,
)
from .slot_generator import SlotSequence, generate_slots

__all__ = [
    "BookedSlot",
    "Booking",
    "BookingStatus",
    "Business",
    "BusinessHours",
    "CalendarNavigator",
    "CalendarViewState",
    "Client",
    "Service",
    "ServiceLocation",
    "Slot",
    "SlotSequence",
    "User",
    "available_slots_for_date",
    "candidate_dates",
    "generate_slots",
    "is_date_available",
]
