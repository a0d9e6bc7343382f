"""Acuity Scheduling REST client adapter (Basic auth over httpx)."""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import httpx

from booking_api.adapters.acuity.base import AbstractSchedulingClient
from booking_api.core.errors import AcuityAPIError
from booking_api.schemas.acuity import (
    AcuityAppointmentType,
    AcuityAvailabilityDate,
    AcuityCalendar,
    AcuityTimeSlot,
)

logger = logging.getLogger(__name__)

# Client-facing message; upstream detail stays in logs and error details
UNAVAILABLE_MESSAGE = "Service temporarily unavailable"


def _clean_params(params: dict[str, Any] | None) -> dict[str, str]:
    """Drop empty values and stringify the rest (booleans as true/false)."""
    cleaned: dict[str, str] = {}
    for key, value in (params or {}).items():
        if value is None or value == "":
            continue
        if isinstance(value, bool):
            cleaned[key] = "true" if value else "false"
        else:
            cleaned[key] = str(value)
    return cleaned


class AcuityClient(AbstractSchedulingClient):
    """Client for the Acuity Scheduling v1 API.

    Uses one pooled ``httpx.AsyncClient`` with Basic auth built from the
    Acuity user id and API key.
    """

    def __init__(
        self,
        user_id: str,
        api_key: str,
        base_url: str = "https://acuityscheduling.com/api/v1",
        timeout_seconds: float = 8.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the async HTTP client.

        Args:
            user_id: Acuity user id (Basic auth username).
            api_key: Acuity API key (Basic auth password).
            base_url: API base URL.
            timeout_seconds: Timeout applied to each request.
            transport: Optional httpx transport (tests pass a MockTransport).
        """
        self.timeout_seconds = timeout_seconds
        self.client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            auth=httpx.BasicAuth(user_id, api_key),
            headers={"Accept": "application/json"},
            timeout=timeout_seconds,
            transport=transport,
        )

    async def _get_json(self, endpoint: str, params: dict[str, Any] | None = None) -> Any:
        """GET an endpoint and decode its JSON body.

        Raises:
            AcuityAPIError: On timeout, transport failure, non-2xx status or
                an undecodable body.
        """
        try:
            response = await self.client.get(endpoint, params=_clean_params(params))
        except httpx.TimeoutException as exc:
            logger.error(
                "acuity.timeout",
                extra={"endpoint": endpoint, "timeout_s": self.timeout_seconds},
            )
            raise AcuityAPIError(
                code="acuity_timeout",
                message=UNAVAILABLE_MESSAGE,
                details={"endpoint": endpoint},
            ) from exc
        except httpx.HTTPError as exc:
            logger.error(
                "acuity.transport_error",
                extra={"endpoint": endpoint, "error_type": type(exc).__name__},
            )
            raise AcuityAPIError(
                code="acuity_unreachable",
                message=UNAVAILABLE_MESSAGE,
                details={"endpoint": endpoint, "hint": str(exc)},
            ) from exc

        if response.is_error:
            body = response.text[:500]
            logger.error(
                "acuity.request_failed",
                extra={
                    "endpoint": endpoint,
                    "status_code": response.status_code,
                    "response_body": body,
                },
            )
            raise AcuityAPIError(
                code="acuity_http_error",
                message=UNAVAILABLE_MESSAGE,
                details={
                    "endpoint": endpoint,
                    "http_status": response.status_code,
                    "hint": f"{response.reason_phrase}: {body}",
                },
            )

        try:
            return response.json()
        except ValueError as exc:
            logger.error("acuity.invalid_json", extra={"endpoint": endpoint})
            raise AcuityAPIError(
                code="acuity_invalid_json",
                message=UNAVAILABLE_MESSAGE,
                details={"endpoint": endpoint},
            ) from exc

    async def _get_list(self, endpoint: str, params: dict[str, Any] | None = None) -> list[Any]:
        payload = await self._get_json(endpoint, params)
        if not isinstance(payload, list):
            raise AcuityAPIError(
                code="acuity_unexpected_payload",
                message=UNAVAILABLE_MESSAGE,
                details={"endpoint": endpoint, "hint": "expected a JSON array"},
            )
        return payload

    async def get_calendars(self) -> list[AcuityCalendar]:
        items = await self._get_list("/calendars")
        return [AcuityCalendar.model_validate(item) for item in items]

    async def get_appointment_types(self) -> list[AcuityAppointmentType]:
        items = await self._get_list("/appointment-types")
        return [AcuityAppointmentType.model_validate(item) for item in items]

    async def get_available_dates(
        self,
        calendar_id: int,
        appointment_type_id: int,
        month: str,
    ) -> list[AcuityAvailabilityDate]:
        items = await self._get_list(
            "/availability/dates",
            {
                "calendarID": calendar_id,
                "appointmentTypeID": appointment_type_id,
                "month": month,
            },
        )
        return [AcuityAvailabilityDate.model_validate(item) for item in items]

    async def get_available_times(
        self,
        calendar_id: int,
        appointment_type_id: int,
        date: str,
    ) -> list[AcuityTimeSlot]:
        items = await self._get_list(
            "/availability/times",
            {
                "calendarID": calendar_id,
                "appointmentTypeID": appointment_type_id,
                "date": date,
            },
        )
        return [AcuityTimeSlot.model_validate(item) for item in items]

    async def list_appointments(self, **filters: Any) -> list[dict[str, Any]]:
        return await self._get_list("/appointments", filters)

    async def get_appointment(self, appointment_id: int | str) -> dict[str, Any]:
        payload = await self._get_json(
            f"/appointments/{quote(str(appointment_id), safe='')}",
            {"pastFormAnswers": False},
        )
        if not isinstance(payload, dict):
            raise AcuityAPIError(
                code="acuity_unexpected_payload",
                message=UNAVAILABLE_MESSAGE,
                details={"endpoint": "/appointments/{id}", "hint": "expected a JSON object"},
            )
        return payload

    async def aclose(self) -> None:
        await self.client.aclose()
