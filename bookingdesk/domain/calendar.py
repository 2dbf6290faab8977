"""
Month-grid calendar state for picking a booking date and time.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, time
from typing import AbstractSet, Iterable, List, Optional

import pendulum

from .availability import available_slots_for_date, is_date_available
from .models import Booking, BusinessHours, Slot, format_time_key

WEEK_DAYS = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]


def _month_start(value: date) -> pendulum.Date:
    return pendulum.date(value.year, value.month, 1)


@dataclass
class CalendarViewState:
    """
    What the calendar currently shows and what the user has picked.

    Invariant: min_date <= max_date; a selected date lies within the range
    and is date-available.
    """
    current_month: pendulum.Date
    min_date: date
    max_date: date
    selected_date: Optional[date] = None
    selected_time: Optional[str] = None  # HH:MM


@dataclass(frozen=True)
class CalendarDay:
    """Rendering flags for a single day cell."""
    date: date
    is_available: bool
    is_selectable: bool
    is_selected: bool
    is_today: bool

    @property
    def label(self) -> str:
        return str(self.date.day)


class CalendarNavigator:
    """
    State machine over CalendarViewState.

    Transitions never raise for disallowed input; they return False and
    leave the state untouched, the same way a disabled button does nothing.
    Slots are recomputed explicitly whenever the date, the bookings snapshot
    or the service duration changes.
    """

    def __init__(
        self,
        available_dates: AbstractSet[date],
        business_hours: BusinessHours,
        duration_minutes: int,
        bookings: Iterable[Booking] = (),
        min_date: Optional[date] = None,
        max_date: Optional[date] = None,
        today: Optional[date] = None,
        months_ahead: int = 3,
    ):
        self.today = today or pendulum.today().date()
        min_date = min_date or self.today
        max_date = max_date or pendulum.date(
            self.today.year, self.today.month, self.today.day
        ).add(months=months_ahead)

        if min_date > max_date:
            raise ValueError(f"Minimum date {min_date} must not be after maximum date {max_date}")
        if duration_minutes <= 0:
            raise ValueError(f"Service duration must be positive, got {duration_minutes}")

        self.available_dates = frozenset(available_dates)
        self.business_hours = business_hours
        self.duration_minutes = duration_minutes
        self._bookings: List[Booking] = list(bookings)
        self._time_slots: List[Slot] = []

        initial_month = min(max(_month_start(self.today), _month_start(min_date)), _month_start(max_date))
        self.state = CalendarViewState(
            current_month=initial_month,
            min_date=min_date,
            max_date=max_date,
        )

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def current_month(self) -> pendulum.Date:
        return self.state.current_month

    @property
    def selected_date(self) -> Optional[date]:
        return self.state.selected_date

    @property
    def selected_time(self) -> Optional[str]:
        return self.state.selected_time

    @property
    def time_slots(self) -> List[Slot]:
        return list(self._time_slots)

    @property
    def bookings(self) -> List[Booking]:
        return list(self._bookings)

    @property
    def month_title(self) -> str:
        return self.state.current_month.format("MMMM YYYY")

    @property
    def can_go_previous(self) -> bool:
        return self.state.current_month.subtract(months=1) >= _month_start(self.state.min_date)

    @property
    def can_go_next(self) -> bool:
        return self.state.current_month.add(months=1) <= _month_start(self.state.max_date)

    @property
    def no_times_left(self) -> bool:
        """True when the selected date is open but every slot is taken."""
        return self.state.selected_date is not None and not self._time_slots

    def is_date_available(self, day: date) -> bool:
        return is_date_available(day, self.available_dates)

    def is_selectable(self, day: date) -> bool:
        return (
            self.is_date_available(day)
            and self.state.min_date <= day <= self.state.max_date
        )

    def leading_blanks(self) -> int:
        """Number of empty cells before the 1st in a Monday-first grid."""
        return self.state.current_month.weekday()

    def month_days(self) -> List[CalendarDay]:
        """Build the day cells for the displayed month."""
        first = self.state.current_month
        last = first.end_of("month")
        days: List[CalendarDay] = []

        for step in pendulum.interval(first, last).range("days"):
            day = date(step.year, step.month, step.day)
            is_selected = self.state.selected_date == day
            days.append(
                CalendarDay(
                    date=day,
                    is_available=self.is_date_available(day),
                    is_selectable=self.is_selectable(day),
                    is_selected=is_selected,
                    is_today=day == self.today and not is_selected,
                )
            )

        return days

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def previous_month(self) -> bool:
        if not self.can_go_previous:
            return False
        self.state.current_month = self.state.current_month.subtract(months=1)
        return True

    def next_month(self) -> bool:
        if not self.can_go_next:
            return False
        self.state.current_month = self.state.current_month.add(months=1)
        return True

    def select_date(self, day: date) -> bool:
        """
        Select a date and recompute its slots.

        Any previously selected time is cleared, times are date-scoped.
        """
        if not self.is_selectable(day):
            return False

        self.state.selected_date = day
        self.state.selected_time = None
        self._recompute_slots()
        return True

    def select_time(self, value: "time | str") -> bool:
        """Select a time; only times offered for the selected date are accepted."""
        if self.state.selected_date is None:
            return False

        try:
            key = format_time_key(value)
        except ValueError:
            return False

        if key not in {slot.time for slot in self._time_slots}:
            return False

        self.state.selected_time = key
        return True

    def clear_selection(self) -> None:
        self.state.selected_date = None
        self.state.selected_time = None
        self._time_slots = []

    def refresh_bookings(self, bookings: Iterable[Booking]) -> None:
        """Replace the bookings snapshot in full and recompute slots."""
        self._bookings = list(bookings)
        self._recompute_slots()

    def set_duration(self, duration_minutes: int) -> None:
        """Switch to another service duration and recompute slots."""
        if duration_minutes <= 0:
            raise ValueError(f"Service duration must be positive, got {duration_minutes}")
        self.duration_minutes = duration_minutes
        self._recompute_slots()

    def _recompute_slots(self) -> None:
        if self.state.selected_date is None:
            self._time_slots = []
            return

        self._time_slots = available_slots_for_date(
            self.state.selected_date,
            self.business_hours,
            self.duration_minutes,
            self._bookings,
        )

        offered = {slot.time for slot in self._time_slots}
        if self.state.selected_time not in offered:
            self.state.selected_time = None
