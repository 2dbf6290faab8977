"""
Date- and time-level availability.

The two notions are intentionally decoupled: a date can be open for booking
while every time slot on it is already taken.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import AbstractSet, Iterable, List, Sequence, Set

from .models import BookedSlot, Booking, BusinessHours, Slot
from .slot_generator import generate_slots


def booked_slots_for_date(on_date: date, bookings: Iterable[Booking]) -> List[BookedSlot]:
    """Return the booked (date, time) pairs that fall on ``on_date``."""
    return [booking.booked_slot for booking in bookings if booking.date == on_date]


def available_slots_for_date(
    on_date: date,
    business_hours: BusinessHours,
    duration_minutes: int,
    bookings: Iterable[Booking],
) -> List[Slot]:
    """
    Compute the bookable slots for a single date.

    Every booking on the same date removes its start time from the slot grid.
    """
    excluded = {booked.time for booked in booked_slots_for_date(on_date, bookings)}
    return list(
        generate_slots(
            business_hours.start,
            business_hours.end,
            duration_minutes,
            excluded,
        )
    )


def is_date_available(on_date: date, available_dates: AbstractSet[date]) -> bool:
    """Membership test against the externally supplied candidate dates."""
    return on_date in available_dates


def candidate_dates(
    start: date,
    days: int,
    exclude_weekdays: Sequence[int] = (),
) -> Set[date]:
    """
    Build the set of date-available days starting at ``start``.

    Args:
        start: First candidate day (usually today)
        days: Number of consecutive days to consider
        exclude_weekdays: Weekdays to skip, 0=Monday, 6=Sunday
    """
    if days < 0:
        raise ValueError(f"Number of days must not be negative, got {days}")

    excluded = set(exclude_weekdays)
    result: Set[date] = set()
    for offset in range(days):
        day = start + timedelta(days=offset)
        if day.weekday() not in excluded:
            result.add(day)
    return result
