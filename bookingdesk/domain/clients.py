"""
Searching, filtering and sorting of the client list.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Callable, Dict, Iterable, List, Optional

import pendulum

from .models import Client

FILTERS = ("all", "active", "inactive", "vip", "recent")
SORT_KEYS = ("name", "email", "created", "lastBooking", "totalBookings")

_EPOCH = datetime(1970, 1, 1)


def _matches_search(client: Client, term: str) -> bool:
    needle = term.lower()
    return (
        needle in (client.name or "").lower()
        or needle in (client.email or "").lower()
        or term in (client.phone or "")
        or needle in (client.address or "").lower()
    )


def _matches_filter(client: Client, filter_by: str, today: date) -> bool:
    if filter_by == "active":
        return client.status == "active"
    if filter_by == "inactive":
        return client.status == "inactive"
    if filter_by == "vip":
        return client.is_vip
    if filter_by == "recent":
        if client.created_at is None:
            return False
        one_month_ago = pendulum.date(today.year, today.month, today.day).subtract(months=1)
        return client.created_at.date() >= one_month_ago
    return True


def _naive(value: Optional[datetime]) -> datetime:
    if value is None:
        return _EPOCH
    return value.replace(tzinfo=None)


_SORTERS: Dict[str, Callable[[Client], object]] = {
    "name": lambda c: (c.name or "").lower(),
    "email": lambda c: (c.email or "").lower(),
    "created": lambda c: _naive(c.created_at),
    "lastBooking": lambda c: c.last_booking_date or _EPOCH.date(),
    "totalBookings": lambda c: c.total_bookings or 0,
}


def filter_clients(
    clients: Iterable[Client],
    *,
    search: str = "",
    filter_by: str = "all",
    sort_by: str = "name",
    descending: bool = False,
    today: Optional[date] = None,
) -> List[Client]:
    """
    Apply search, filter and sort to a client list.

    Args:
        clients: Clients as fetched from the directory
        search: Case-insensitive term matched against name, email and address,
            and as a plain substring against the phone number
        filter_by: One of ``FILTERS``
        sort_by: One of ``SORT_KEYS``; unknown keys sort by name
        descending: Reverse the sort order
        today: Reference day for the ``recent`` filter
    """
    if filter_by not in FILTERS:
        raise ValueError(f"Unknown client filter '{filter_by}', expected one of {', '.join(FILTERS)}")

    today = today or pendulum.today().date()
    result = list(clients)

    if search:
        result = [client for client in result if _matches_search(client, search)]

    if filter_by != "all":
        result = [client for client in result if _matches_filter(client, filter_by, today)]

    sorter = _SORTERS.get(sort_by, _SORTERS["name"])
    return sorted(result, key=sorter, reverse=descending)
