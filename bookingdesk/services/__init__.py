"""
Service layer helpers that orchestrate collaborators and domain logic.
"""

from .account import AccountService
from .booking_session import BookingConfirmation, BookingSession, SessionPhase
from .catalog import ServiceCatalog, build_service
from .dashboard import DashboardService, DashboardStats
from .protocols import DirectoryProtocol, IdentityProtocol
from .public_booking import build_booking_link, open_booking_session, parse_booking_link
from .status_workflow import StatusWorkflow

__all__ = [
    "AccountService",
    "BookingConfirmation",
    "BookingSession",
    "DashboardService",
    "DashboardStats",
    "DirectoryProtocol",
    "IdentityProtocol",
    "ServiceCatalog",
    "SessionPhase",
    "StatusWorkflow",
    "build_booking_link",
    "build_service",
    "open_booking_session",
    "parse_booking_link",
]
