"""
Directory adapter for the hosted Supabase (PostgREST) backend.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date
from typing import Any, Dict, List, Optional, Sequence, Tuple

import requests

from ..domain.exceptions import (
    AvailabilityConflict,
    CollaboratorError,
    NotFoundError,
)
from ..domain.models import Booking, BookingStatus, Business, Client, Service
from .records import (
    BookingRecord,
    BusinessRecord,
    ClientRecord,
    ServiceRecord,
    booking_to_row,
    client_to_row,
    parse_rows,
    service_to_row,
)

logger = logging.getLogger(__name__)

# Postgres unique_violation / exclusion_violation
CONFLICT_CODES = {"23505", "23P01"}

Params = Sequence[Tuple[str, str]]


class SupabaseDirectory:
    """
    Client for the Directory tables exposed through the Supabase REST API.

    Requests are blocking (``requests``) and run in a worker thread so the
    async services are not stalled. Mutations are never retried here.
    """

    REST_PATH = "/rest/v1"

    def __init__(
        self,
        url: str,
        anon_key: str,
        access_token: Optional[str] = None,
        timeout: int = 30,
    ):
        """
        Initialize the Directory client.

        Args:
            url: Project URL, e.g. https://xyz.supabase.co
            anon_key: Public anon API key
            access_token: Signed-in user's JWT; the anon key is used when absent
            timeout: Request timeout in seconds
        """
        self.base_url = url.rstrip("/") + self.REST_PATH
        self.timeout = timeout
        self.headers = {
            "apikey": anon_key,
            "Authorization": f"Bearer {access_token or anon_key}",
            "Content-Type": "application/json",
        }

    # ------------------------------------------------------------------
    # Businesses
    # ------------------------------------------------------------------

    async def get_business(self, business_id: str) -> Optional[Business]:
        rows = await self._call("GET", "businesses", params=[("id", f"eq.{business_id}"), ("select", "*")])
        businesses = parse_rows(rows, BusinessRecord, "business")
        return businesses[0] if businesses else None

    # ------------------------------------------------------------------
    # Services
    # ------------------------------------------------------------------

    async def get_services(self, business_id: str) -> List[Service]:
        rows = await self._call(
            "GET",
            "services",
            params=[
                ("business_id", f"eq.{business_id}"),
                ("select", "*"),
                ("order", "created_at.desc"),
            ],
        )
        return parse_rows(rows, ServiceRecord, "service")

    async def create_service(self, service: Service) -> Service:
        rows = await self._call("POST", "services", payload=service_to_row(service))
        return self._single(rows, ServiceRecord, "service")

    async def update_service(self, service: Service) -> Service:
        payload = service_to_row(service)
        payload.pop("id", None)
        rows = await self._call("PATCH", "services", params=[("id", f"eq.{service.id}")], payload=payload)
        return self._single(rows, ServiceRecord, "service")

    async def delete_service(self, service_id: str) -> None:
        await self._call("DELETE", "services", params=[("id", f"eq.{service_id}")])

    # ------------------------------------------------------------------
    # Bookings
    # ------------------------------------------------------------------

    async def get_bookings(
        self,
        business_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> List[Booking]:
        params: List[Tuple[str, str]] = [
            ("user_id", f"eq.{business_id}"),
            ("select", "*,services(name,duration)"),
            ("order", "booking_date.asc"),
        ]
        if start_date:
            params.append(("booking_date", f"gte.{start_date.isoformat()}"))
        if end_date:
            params.append(("booking_date", f"lte.{end_date.isoformat()}"))

        rows = await self._call("GET", "bookings", params=params)
        return parse_rows(rows, BookingRecord, "booking")

    async def create_booking(self, booking: Booking) -> Booking:
        try:
            rows = await self._call("POST", "bookings", payload=booking_to_row(booking))
        except CollaboratorError as exc:
            if exc.status_code == 409:
                raise AvailabilityConflict(
                    booking_date=booking.date,
                    booking_time=booking.time,
                ) from exc
            raise
        created = self._single(rows, BookingRecord, "booking")
        logger.info("Created booking %s on %s %s", created.id, created.date, created.time_key)
        return created

    async def update_booking_status(self, booking_id: str, status: BookingStatus) -> None:
        await self._call(
            "PATCH",
            "bookings",
            params=[("id", f"eq.{booking_id}")],
            payload={"status": BookingStatus(status).value},
        )

    async def delete_booking(self, booking_id: str) -> None:
        await self._call("DELETE", "bookings", params=[("id", f"eq.{booking_id}")])

    # ------------------------------------------------------------------
    # Clients
    # ------------------------------------------------------------------

    async def get_clients(self, business_id: str) -> List[Client]:
        rows = await self._call(
            "GET",
            "clients",
            params=[("user_id", f"eq.{business_id}"), ("select", "*"), ("order", "name.asc")],
        )
        return parse_rows(rows, ClientRecord, "client")

    async def create_client(self, client: Client, business_id: str) -> Client:
        rows = await self._call("POST", "clients", payload=client_to_row(client, business_id))
        return self._single(rows, ClientRecord, "client")

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    async def _call(
        self,
        method: str,
        table: str,
        params: Optional[Params] = None,
        payload: Optional[Dict[str, Any]] = None,
    ) -> List[Dict[str, Any]]:
        return await asyncio.to_thread(self._request, method, table, params, payload)

    def _request(
        self,
        method: str,
        table: str,
        params: Optional[Params],
        payload: Optional[Dict[str, Any]],
    ) -> List[Dict[str, Any]]:
        """
        Perform a single REST call.

        Returns:
            The response rows (empty for calls without a body)

        Raises:
            CollaboratorError: On network failure or a non-2xx response
        """
        url = f"{self.base_url}/{table}"
        headers = dict(self.headers)
        if method in ("POST", "PATCH"):
            headers["Prefer"] = "return=representation"

        try:
            response = requests.request(
                method,
                url,
                headers=headers,
                params=list(params or []),
                json=payload,
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as exc:
            logger.warning("%s %s failed: %s", method, table, exc)
            raise CollaboratorError(f"Network error. Please check your connection ({exc})") from exc

        if not response.ok:
            raise self._error_from_response(method, table, response)

        if not response.content:
            return []
        try:
            data = response.json()
        except ValueError as exc:
            logger.warning("%s %s returned a non-JSON body", method, table)
            raise CollaboratorError(f"Unexpected response from the server ({exc})") from exc
        return data if isinstance(data, list) else [data]

    @staticmethod
    def _error_from_response(method: str, table: str, response: requests.Response) -> CollaboratorError:
        message = None
        code = None
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            message = body.get("message") or body.get("error_description") or body.get("msg")
            code = body.get("code")

        status = response.status_code
        if code in CONFLICT_CODES:
            status = 409

        logger.warning("%s %s returned %s: %s", method, table, response.status_code, message)
        if status == 404:
            return NotFoundError(message, status_code=status)
        return CollaboratorError(message, status_code=status)

    @staticmethod
    def _single(rows: List[Dict[str, Any]], record_type: type, label: str):
        if not rows:
            raise CollaboratorError(f"The server returned no {label} record")
        try:
            return record_type.model_validate(rows[0]).to_domain()
        except ValueError as exc:
            raise CollaboratorError(f"The server returned an invalid {label} record: {exc}") from exc
