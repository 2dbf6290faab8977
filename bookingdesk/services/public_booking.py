"""
Public booking page entry point.

A booking link looks like ``<base>/book/<businessId>?service=<serviceId>``.
"""

from __future__ import annotations

from datetime import date
from typing import Optional, Tuple
from urllib.parse import parse_qs, quote, unquote, urlencode, urlparse

import pendulum

from ..config import AppConfig
from ..domain.availability import candidate_dates
from ..domain.exceptions import NotFoundError
from .booking_session import BookingSession
from .protocols import DirectoryProtocol, IdentityProtocol

BOOKING_PATH_PREFIX = "book"


def parse_booking_link(link: str) -> Tuple[str, Optional[str]]:
    """
    Extract the business id and optional pre-selected service id.

    Raises:
        ValueError: If the link carries no business id
    """
    parsed = urlparse(link)
    segments = [segment for segment in parsed.path.split("/") if segment]

    if BOOKING_PATH_PREFIX in segments:
        segments = segments[segments.index(BOOKING_PATH_PREFIX) + 1:]
    if not segments:
        raise ValueError(f"No business id in booking link: {link}")

    service_ids = parse_qs(parsed.query).get("service")
    return unquote(segments[0]), service_ids[0] if service_ids else None


def build_booking_link(base_url: str, business_id: str, service_id: Optional[str] = None) -> str:
    link = f"{base_url.rstrip('/')}/{BOOKING_PATH_PREFIX}/{quote(business_id, safe='')}"
    if service_id:
        link = f"{link}?{urlencode({'service': service_id})}"
    return link


async def open_booking_session(
    directory: DirectoryProtocol,
    business_id: str,
    service_id: Optional[str] = None,
    *,
    config: Optional[AppConfig] = None,
    identity: Optional[IdentityProtocol] = None,
    today: Optional[date] = None,
) -> BookingSession:
    """
    Load the business and start a booking session for it.

    Raises:
        NotFoundError: If the business does not exist
        CollaboratorError: If the Directory cannot be reached
    """
    config = config or AppConfig()
    defaults = config.defaults
    today = today or pendulum.today(config.timezone).date()

    business = await directory.get_business(business_id)
    if business is None:
        raise NotFoundError("Business not found")

    session = BookingSession(
        directory,
        business,
        available_dates=candidate_dates(today, defaults.booking_window_days, config.exclude_days),
        default_hours=defaults.business_hours.to_business_hours(),
        identity=identity,
        default_duration_minutes=defaults.duration_minutes,
        today=today,
        months_ahead=defaults.months_ahead,
    )
    await session.start(service_id)
    return session
