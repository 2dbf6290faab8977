"""
Form validation rules.

Each validator checks every field and returns a field -> message mapping,
an empty mapping means the form is valid.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Dict, Optional

from .models import BusinessType

EMAIL_PATTERN = re.compile(r"^[A-Z0-9._%+-]+@[A-Z0-9.-]+\.[A-Z]{2,}$", re.IGNORECASE)
PHONE_PATTERN = re.compile(r"^\+?[\d\s\-()]+$")
LOOSE_EMAIL_PATTERN = re.compile(r"\S+@\S+\.\S+")

MIN_PASSWORD_LENGTH = 6


@dataclass
class ContactDetails:
    """Contact form fields as typed by the customer."""
    name: str = ""
    email: str = ""
    phone: str = ""
    address: str = ""
    notes: str = ""


def validate_booking_form(
    *,
    service_selected: bool,
    date_selected: bool,
    time_selected: bool,
    contact: ContactDetails,
) -> Dict[str, str]:
    """Validate the booking form, reporting every violated field at once."""
    errors: Dict[str, str] = {}

    if not service_selected:
        errors["service"] = "Please select a service"
    if not date_selected:
        errors["date"] = "Please select a date"
    if not time_selected:
        errors["time"] = "Please select a time"
    if not contact.name.strip():
        errors["name"] = "Name is required"

    email = contact.email.strip()
    phone = contact.phone.strip()
    if not email and not phone:
        errors["contact"] = "Either email or phone is required"
    if email and not EMAIL_PATTERN.match(email):
        errors["email"] = "Invalid email address"
    if phone and not PHONE_PATTERN.match(phone):
        errors["phone"] = "Invalid phone number"

    return errors


def _positive_amount(value) -> Optional[Decimal]:
    if value is None or value == "":
        return None
    try:
        amount = Decimal(str(value))
    except InvalidOperation:
        return None
    if not amount.is_finite() or amount <= 0:
        return None
    return amount


def validate_service_form(
    *,
    name: str,
    price,
    duration_minutes,
    requires_deposit: bool = False,
    deposit_amount=None,
) -> Dict[str, str]:
    """Validate the add/edit service form."""
    errors: Dict[str, str] = {}

    if not (name or "").strip():
        errors["name"] = "Service name is required"

    if _positive_amount(price) is None:
        errors["price"] = "Valid price is required"

    try:
        duration_ok = int(duration_minutes) > 0
    except (TypeError, ValueError):
        duration_ok = False
    if not duration_ok:
        errors["duration"] = "Valid duration is required"

    if requires_deposit and _positive_amount(deposit_amount) is None:
        errors["deposit_amount"] = "Valid deposit amount is required when deposit is enabled"

    return errors


def validate_registration(
    *,
    email: str,
    password: str,
    confirm_password: str,
    business_name: str,
    business_type: str,
) -> Dict[str, str]:
    """Validate the account registration form."""
    errors: Dict[str, str] = {}

    if not email:
        errors["email"] = "Email address is required"
    elif not LOOSE_EMAIL_PATTERN.search(email):
        errors["email"] = "Please enter a valid email address"

    if not business_name.strip():
        errors["business_name"] = "Business name is required"

    if not business_type:
        errors["business_type"] = "Business type is required"
    elif business_type not in {member.value for member in BusinessType}:
        errors["business_type"] = f"Unknown business type: {business_type}"

    if not password:
        errors["password"] = "Password is required"
    elif len(password) < MIN_PASSWORD_LENGTH:
        errors["password"] = f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
    elif password != confirm_password:
        errors["confirm_password"] = "Passwords do not match"

    return errors
