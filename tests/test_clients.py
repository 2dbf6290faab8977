"""
Tests for client search, filter and sort.
"""

from datetime import date, datetime, timezone

import pytest

from bookingdesk.domain.clients import filter_clients
from bookingdesk.domain.models import Client

TODAY = date(2025, 3, 3)

CLIENTS = [
    Client(
        id="c1",
        name="Dana Whitfield",
        email="dana@example.com",
        phone="503-555-0101",
        address="88 Birch Ln",
        is_vip=True,
        created_at=datetime(2024, 2, 11, tzinfo=timezone.utc),
        last_booking_date=date(2025, 2, 28),
        total_bookings=14,
    ),
    Client(
        id="c2",
        name="luis Ortega",
        phone="+1 (503) 555-0142",
        address="412 Alder St",
        created_at=datetime(2025, 2, 20),
        total_bookings=3,
    ),
    Client(
        id="c3",
        name="Priya Raman",
        email="priya@example.com",
        status="inactive",
        created_at=datetime(2023, 11, 20, tzinfo=timezone.utc),
        last_booking_date=date(2024, 1, 5),
        total_bookings=1,
    ),
]


def _ids(clients):
    return [client.id for client in clients]


class TestFilterClients:
    """Tests for filter_clients."""

    def test_default_sorts_by_name_case_insensitive(self):
        assert _ids(filter_clients(CLIENTS, today=TODAY)) == ["c1", "c2", "c3"]

    def test_search_name_and_address(self):
        assert _ids(filter_clients(CLIENTS, search="ORTEGA", today=TODAY)) == ["c2"]
        assert _ids(filter_clients(CLIENTS, search="birch", today=TODAY)) == ["c1"]

    def test_search_phone(self):
        assert _ids(filter_clients(CLIENTS, search="555-01", today=TODAY)) == ["c1", "c2"]

    def test_filters(self):
        assert _ids(filter_clients(CLIENTS, filter_by="vip", today=TODAY)) == ["c1"]
        assert _ids(filter_clients(CLIENTS, filter_by="inactive", today=TODAY)) == ["c3"]
        assert _ids(filter_clients(CLIENTS, filter_by="active", today=TODAY)) == ["c1", "c2"]

    def test_recent_means_created_within_a_month(self):
        assert _ids(filter_clients(CLIENTS, filter_by="recent", today=TODAY)) == ["c2"]

    def test_sort_by_total_bookings_descending(self):
        result = filter_clients(CLIENTS, sort_by="totalBookings", descending=True, today=TODAY)
        assert _ids(result) == ["c1", "c2", "c3"]

    def test_sort_by_created_mixes_aware_and_naive(self):
        assert _ids(filter_clients(CLIENTS, sort_by="created", today=TODAY)) == ["c3", "c1", "c2"]

    def test_sort_by_last_booking_missing_first(self):
        assert _ids(filter_clients(CLIENTS, sort_by="lastBooking", today=TODAY)) == ["c2", "c3", "c1"]

    def test_unknown_filter_raises(self):
        with pytest.raises(ValueError, match="Unknown client filter"):
            filter_clients(CLIENTS, filter_by="favourites")
