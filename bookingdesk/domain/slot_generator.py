"""
Discrete appointment slot generation.

Pure domain logic: no I/O and no shared state between calls.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import time
from typing import FrozenSet, Iterable, Iterator

import pendulum

from .models import Slot, format_time_key, parse_time_of_day

# Arbitrary anchor day; only the time of day matters for the cursor.
_ANCHOR = (2000, 1, 1)


@dataclass(frozen=True)
class SlotSequence:
    """
    Lazy, restartable sequence of slots between opening and closing time.

    Algorithm:
    1. Start a cursor at the opening time
    2. While the cursor is before closing time, emit it unless excluded
    3. Advance the cursor by the service duration

    Note: a slot is admitted whenever its start is before closing time, even
    if the service would run past closing. This matches the booking page's
    long-standing behaviour and is kept until product decides otherwise.
    """
    start: time
    end: time
    duration_minutes: int
    excluded: FrozenSet[str] = frozenset()

    def __post_init__(self):
        if self.duration_minutes <= 0:
            raise ValueError(f"Slot duration must be positive, got {self.duration_minutes}")

    def __iter__(self) -> Iterator[Slot]:
        cursor = pendulum.naive(*_ANCHOR, self.start.hour, self.start.minute)
        closing = pendulum.naive(*_ANCHOR, self.end.hour, self.end.minute)

        while cursor < closing:
            key = cursor.format("HH:mm")
            if key not in self.excluded:
                yield Slot.at(key)
            cursor = cursor.add(minutes=self.duration_minutes)

    def times(self) -> list[str]:
        """Return the ``HH:MM`` keys of all slots."""
        return [slot.time for slot in self]


def generate_slots(
    start: "time | str",
    end: "time | str",
    duration_minutes: int,
    excluded: Iterable["time | str"] = (),
) -> SlotSequence:
    """
    Generate candidate slots from ``start`` stepping by ``duration_minutes``.

    Args:
        start: Opening time of day
        end: Closing time of day
        duration_minutes: Step between slots (the service duration), must be > 0
        excluded: Times already booked; matched on their ``HH:MM`` form

    Returns:
        A SlotSequence that can be iterated any number of times

    Raises:
        ValueError: If the duration is not positive
    """
    return SlotSequence(
        start=parse_time_of_day(start),
        end=parse_time_of_day(end),
        duration_minutes=duration_minutes,
        excluded=frozenset(format_time_key(value) for value in excluded),
    )
