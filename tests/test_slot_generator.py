"""
Tests for slot generation.
"""

import pytest
from datetime import time

from bookingdesk.domain.slot_generator import SlotSequence, generate_slots


class TestGenerateSlots:
    """Tests for generate_slots."""

    def test_full_day_hourly(self):
        """09:00-17:00 with 60 minute steps yields eight slots."""
        slots = generate_slots("09:00", "17:00", 60)

        assert slots.times() == [
            "09:00", "10:00", "11:00", "12:00",
            "13:00", "14:00", "15:00", "16:00",
        ]

    def test_excluded_time_is_skipped(self):
        slots = generate_slots("09:00", "12:00", 90, excluded=["10:30"])
        assert slots.times() == ["09:00"]

    def test_exclusion_matches_database_time_format(self):
        """Booked times stored with seconds still remove the slot."""
        slots = generate_slots(time(9, 0), time(12, 0), 60, excluded=["10:00:00"])
        assert slots.times() == ["09:00", "11:00"]

    def test_off_grid_exclusion_has_no_effect(self):
        slots = generate_slots("09:00", "12:00", 60, excluded=["09:15"])
        assert slots.times() == ["09:00", "10:00", "11:00"]

    def test_start_equal_to_end_yields_nothing(self):
        assert list(generate_slots("09:00", "09:00", 30)) == []

    def test_slot_may_run_past_closing(self):
        """A slot is admitted as long as it starts before closing time."""
        slots = generate_slots("09:00", "10:00", 45)
        assert slots.times() == ["09:00", "09:45"]

    def test_non_positive_duration_raises_error(self):
        with pytest.raises(ValueError, match="must be positive"):
            generate_slots("09:00", "17:00", 0)
        with pytest.raises(ValueError):
            generate_slots("09:00", "17:00", -30)

    def test_sequence_is_restartable(self):
        slots = generate_slots("09:00", "11:00", 30)

        first = list(slots)
        second = list(slots)

        assert first == second
        assert len(first) == 4

    def test_display_labels(self):
        slots = list(generate_slots("09:00", "14:00", 240))

        assert [slot.display for slot in slots] == ["9:00 AM", "1:00 PM"]

    def test_returns_slot_sequence(self):
        slots = generate_slots("09:00", "10:00", 15)

        assert isinstance(slots, SlotSequence)
        assert slots.duration_minutes == 15
