"""
Service catalog management for business owners.
"""

from __future__ import annotations

import dataclasses
import logging
from decimal import Decimal
from typing import List, Optional

from ..domain.exceptions import ValidationError
from ..domain.models import Service, ServiceLocation
from ..domain.validation import validate_service_form
from .protocols import DirectoryProtocol

logger = logging.getLogger(__name__)

DURATION_OPTIONS = [15, 30, 45, 60, 90, 120, 180, 240]
CATEGORIES = [
    "Cleaning",
    "Maintenance",
    "Repair",
    "Installation",
    "Consultation",
    "Beauty & Wellness",
    "Pet Services",
    "Other",
]


def build_service(
    *,
    name: str,
    price,
    duration_minutes,
    business_id: Optional[str] = None,
    service_id: Optional[str] = None,
    location: str = ServiceLocation.CLIENT_LOCATION.value,
    is_active: bool = True,
    requires_deposit: bool = False,
    deposit_amount=None,
    description: str = "",
    category: str = "",
    notes: str = "",
) -> Service:
    """
    Validate raw form input and build a Service.

    The deposit amount is dropped when no deposit is required.

    Raises:
        ValidationError: If any field is invalid
    """
    errors = validate_service_form(
        name=name,
        price=price,
        duration_minutes=duration_minutes,
        requires_deposit=requires_deposit,
        deposit_amount=deposit_amount,
    )
    try:
        location_value = ServiceLocation(location)
    except ValueError:
        errors["location"] = f"Unknown location: {location}"
    if errors:
        raise ValidationError(errors)

    return Service(
        id=service_id,
        name=name.strip(),
        duration_minutes=int(duration_minutes),
        price=Decimal(str(price)),
        location=location_value,
        is_active=is_active,
        requires_deposit=requires_deposit,
        deposit_amount=Decimal(str(deposit_amount)) if requires_deposit else None,
        business_id=business_id,
        description=description,
        category=category,
        notes=notes,
    )


class ServiceCatalog:
    """Lists and edits the services of one business."""

    def __init__(self, directory: DirectoryProtocol, business_id: str) -> None:
        self._directory = directory
        self._business_id = business_id

    async def list(self, active_only: bool = False) -> List[Service]:
        services = await self._directory.get_services(self._business_id)
        if active_only:
            services = [service for service in services if service.is_active]
        return services

    async def save(self, service: Service) -> Service:
        """Create the service, or update it when it already has an id."""
        if not service.business_id:
            service = dataclasses.replace(service, business_id=self._business_id)
        if service.id:
            saved = await self._directory.update_service(service)
            logger.info("Service %s updated", saved.id)
        else:
            saved = await self._directory.create_service(service)
            logger.info("Service %s created", saved.id)
        return saved

    async def delete(self, service_id: str) -> None:
        await self._directory.delete_service(service_id)
        logger.info("Service %s deleted", service_id)
