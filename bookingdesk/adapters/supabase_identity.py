"""
Identity adapter for Supabase Auth (GoTrue) with a persisted session.
"""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import keyring
import requests
from keyring.errors import KeyringError

from ..domain.exceptions import AuthenticationError, CollaboratorError
from ..domain.models import User
from .records import UserRecord

logger = logging.getLogger(__name__)


KEYRING_SERVICE_NAME = "bookingdesk"


class SupabaseIdentity:
    """
    Handles sign-up, sign-in and session persistence against Supabase Auth.

    The session (access and refresh token) is stored in the system keyring.
    When no keyring backend is usable it falls back to a plaintext file
    readable only by the owner.
    """

    AUTH_PATH = "/auth/v1"

    def __init__(
        self,
        url: str,
        anon_key: str,
        cache_file: Path | None = None,
        timeout: int = 30,
    ):
        """
        Initialize the identity client.

        Args:
            url: Project URL, e.g. https://xyz.supabase.co
            anon_key: Public anon API key
            cache_file: Optional path to the session fallback file
            timeout: Request timeout in seconds
        """
        self.base_url = url.rstrip("/") + self.AUTH_PATH
        self.anon_key = anon_key
        self.timeout = timeout
        self.cache_file = cache_file or Path.home() / ".bookingdesk_session.json"
        self._key_identifier = url.rstrip("/")
        self._keyring_supported = True
        self._cache_backend = "keyring"
        self._insecure_storage_warning: Optional[str] = None
        self._session: Optional[Dict[str, Any]] = self._load_session()

    @property
    def cache_backend(self) -> str:
        """Return the active session backend (keyring or file)."""
        return self._cache_backend

    @property
    def insecure_storage_warning(self) -> Optional[str]:
        """Provide a warning message when the session falls back to plaintext storage."""
        return self._insecure_storage_warning

    @property
    def access_token(self) -> Optional[str]:
        if not self._session:
            return None
        return self._session.get("access_token")

    # ------------------------------------------------------------------
    # Identity operations
    # ------------------------------------------------------------------

    async def sign_up(self, email: str, password: str, metadata: Dict[str, Any]) -> User:
        body = await self._auth_call(
            "POST",
            "/signup",
            payload={"email": email, "password": password, "data": metadata},
        )
        # With email confirmation enabled there is a user but no session yet
        if "access_token" in body:
            self._store_session(body)
        user_data = body.get("user") or body
        return UserRecord.model_validate(user_data).to_domain()

    async def sign_in(self, email: str, password: str) -> User:
        body = await self._auth_call(
            "POST",
            "/token",
            params={"grant_type": "password"},
            payload={"email": email, "password": password},
        )
        if "access_token" not in body:
            raise AuthenticationError("Invalid login credentials")
        self._store_session(body)
        return UserRecord.model_validate(body["user"]).to_domain()

    async def sign_out(self) -> None:
        token = self.access_token
        if token:
            try:
                await self._auth_call("POST", "/logout", token=token)
            except CollaboratorError as exc:
                logger.warning("Server-side sign out failed: %s", exc)
        self.clear_session()

    async def get_current_user(self) -> Optional[User]:
        """Return the signed-in user, refreshing the session once if it expired."""
        if not self._session:
            return None

        try:
            body = await self._auth_call("GET", "/user", token=self.access_token)
        except AuthenticationError:
            if not await self._refresh_session():
                return None
            body = await self._auth_call("GET", "/user", token=self.access_token)

        return UserRecord.model_validate(body).to_domain()

    async def _refresh_session(self) -> bool:
        refresh_token = (self._session or {}).get("refresh_token")
        if not refresh_token:
            self.clear_session()
            return False

        try:
            body = await self._auth_call(
                "POST",
                "/token",
                params={"grant_type": "refresh_token"},
                payload={"refresh_token": refresh_token},
            )
        except AuthenticationError as exc:
            logger.info("Session refresh rejected, signing out: %s", exc)
            self.clear_session()
            return False

        self._store_session(body)
        return True

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    async def _auth_call(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, str]] = None,
        payload: Optional[Dict[str, Any]] = None,
        token: Optional[str] = None,
    ) -> Dict[str, Any]:
        return await asyncio.to_thread(self._request, method, path, params, payload, token)

    def _request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, str]],
        payload: Optional[Dict[str, Any]],
        token: Optional[str],
    ) -> Dict[str, Any]:
        headers = {
            "apikey": self.anon_key,
            "Authorization": f"Bearer {token or self.anon_key}",
            "Content-Type": "application/json",
        }
        try:
            response = requests.request(
                method,
                f"{self.base_url}{path}",
                headers=headers,
                params=params,
                json=payload,
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as exc:
            raise CollaboratorError(f"Network error. Please check your connection ({exc})") from exc

        try:
            body = response.json() if response.content else {}
        except ValueError:
            body = {}

        if response.ok:
            return body if isinstance(body, dict) else {}

        message = None
        if isinstance(body, dict):
            message = body.get("error_description") or body.get("msg") or body.get("message")
        if response.status_code in (400, 401, 403, 422):
            raise AuthenticationError(message, status_code=response.status_code)
        raise CollaboratorError(message, status_code=response.status_code)

    # ------------------------------------------------------------------
    # Session persistence
    # ------------------------------------------------------------------

    def _store_session(self, body: Dict[str, Any]) -> None:
        self._session = {
            "access_token": body.get("access_token"),
            "refresh_token": body.get("refresh_token"),
        }
        serialized = json.dumps(self._session)

        if self._keyring_supported and self._save_session_to_keyring(serialized):
            return

        self._save_session_to_file(serialized)

    def _load_session(self) -> Optional[Dict[str, Any]]:
        serialized = self._load_session_from_keyring()
        if serialized is None:
            serialized = self._load_session_from_file()

        if not serialized:
            return None

        try:
            session = json.loads(serialized)
        except ValueError as exc:
            logger.warning("Could not deserialize stored session: %s", exc)
            return None
        return session if isinstance(session, dict) else None

    def _load_session_from_keyring(self) -> Optional[str]:
        if not self._keyring_supported:
            return None

        try:
            return keyring.get_password(KEYRING_SERVICE_NAME, self._key_identifier)
        except KeyringError as exc:  # pragma: no cover - environment dependent
            self._handle_keyring_failure(f"reading credentials failed: {exc}")
            return None

    def _load_session_from_file(self) -> Optional[str]:
        if self.cache_file.exists():
            try:
                with open(self.cache_file, "r", encoding="utf-8") as file_handle:
                    return file_handle.read()
            except OSError as exc:
                logger.warning("Could not load session file %s: %s", self.cache_file, exc)
        return None

    def _save_session_to_keyring(self, serialized: str) -> bool:
        try:
            keyring.set_password(KEYRING_SERVICE_NAME, self._key_identifier, serialized)
            self._cache_backend = "keyring"
            return True
        except KeyringError as exc:  # pragma: no cover - environment dependent
            self._handle_keyring_failure(f"writing credentials failed: {exc}")
            return False

    def _save_session_to_file(self, serialized: str) -> None:
        try:
            self.cache_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self.cache_file, "w", encoding="utf-8") as file_handle:
                file_handle.write(serialized)
            self.cache_file.chmod(0o600)
        except OSError as exc:
            logger.warning("Could not save session to %s: %s", self.cache_file, exc)

    def _handle_keyring_failure(self, reason: str) -> None:
        if self._keyring_supported:
            logger.warning(
                "Secure credential storage unavailable (%s). Falling back to plaintext session file.",
                reason,
            )
        self._keyring_supported = False
        self._cache_backend = "file"
        if not self._insecure_storage_warning:
            self._insecure_storage_warning = (
                f"Secure credential storage unavailable ({reason}). "
                f"Falling back to plaintext session file at {self.cache_file}."
            )

    def clear_session(self) -> None:
        """Forget the stored session (the next call needs a fresh sign-in)."""
        self._session = None
        if self.cache_file.exists():
            self.cache_file.unlink()
        try:
            keyring.delete_password(KEYRING_SERVICE_NAME, self._key_identifier)
        except KeyringError as exc:  # pragma: no cover - environment dependent
            logger.debug("No session removed from keyring: %s", exc)
