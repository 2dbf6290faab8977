"""
Business account registration and sign-in.
"""

from __future__ import annotations

import logging
from typing import Optional

from ..domain.exceptions import ValidationError
from ..domain.models import User
from ..domain.validation import validate_registration
from .protocols import IdentityProtocol

logger = logging.getLogger(__name__)


class AccountService:
    """Thin layer over the Identity collaborator that validates input first."""

    def __init__(self, identity: IdentityProtocol) -> None:
        self._identity = identity

    async def register(
        self,
        *,
        email: str,
        password: str,
        confirm_password: str,
        business_name: str,
        business_type: str,
        contact_phone: str = "",
    ) -> User:
        errors = validate_registration(
            email=email,
            password=password,
            confirm_password=confirm_password,
            business_name=business_name,
            business_type=business_type,
        )
        if errors:
            raise ValidationError(errors)

        metadata = {
            "business_name": business_name.strip(),
            "contact_phone": contact_phone.strip(),
            "business_type": business_type,
            "contact_email": email,
        }
        user = await self._identity.sign_up(email, password, metadata)
        logger.info("Registered account %s", user.email)
        return user

    async def sign_in(self, email: str, password: str) -> User:
        if not email or not password:
            raise ValidationError({"credentials": "Email and password are required"})
        return await self._identity.sign_in(email, password)

    async def sign_out(self) -> None:
        await self._identity.sign_out()

    async def current_user(self) -> Optional[User]:
        return await self._identity.get_current_user()
