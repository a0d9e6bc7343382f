"""Pytest configuration and fixtures shared across all test modules.

This file is loaded before any test module imports the application, so the
environment set here is what the settings object sees.
"""

import os
from collections import Counter
from typing import Any

import pytest

# Must run before booking_api.core.config is imported
os.environ["APP_ENV"] = "testing"
os.environ.pop("ACUITY_USER_ID", None)
os.environ.pop("ACUITY_API_KEY", None)
os.environ.setdefault("LOG_LEVEL", "WARNING")

from booking_api.adapters.acuity.base import AbstractSchedulingClient  # noqa: E402
from booking_api.adapters.rate_limit.in_memory import InMemoryFixedWindowRateLimiter  # noqa: E402
from booking_api.core.errors import AcuityAPIError  # noqa: E402
from booking_api.schemas.acuity import (  # noqa: E402
    AcuityAppointmentType,
    AcuityAvailabilityDate,
    AcuityCalendar,
    AcuityTimeSlot,
)
from booking_api.utils.ttl_cache import StaleFallbackTTLCache  # noqa: E402


class FakeTime:
    """Deterministic clock used to test expiration and window logic."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.current = start

    def time(self) -> float:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += seconds


class FakeSchedulingClient(AbstractSchedulingClient):
    """In-memory stand-in for the Acuity API.

    Set ``fail = True`` to make every call raise AcuityAPIError.
    """

    def __init__(self) -> None:
        self.calendars: list[dict[str, Any]] = []
        self.appointment_types: list[dict[str, Any]] = []
        self.dates_by_month: dict[str, list[str]] = {}
        self.times_by_date: dict[str, list[str]] = {}
        self.appointments: list[dict[str, Any]] = []
        self.details: dict[str, dict[str, Any]] = {}
        self.fail = False
        self.calls: Counter[str] = Counter()
        self.appointment_queries: list[dict[str, Any]] = []
        self.closed = False

    def _record(self, name: str) -> None:
        self.calls[name] += 1
        if self.fail:
            raise AcuityAPIError(
                code="acuity_http_error",
                message="Service temporarily unavailable",
                details={"http_status": 500, "hint": "upstream exploded: secret-detail"},
            )

    async def get_calendars(self) -> list[AcuityCalendar]:
        self._record("calendars")
        return [AcuityCalendar.model_validate(c) for c in self.calendars]

    async def get_appointment_types(self) -> list[AcuityAppointmentType]:
        self._record("appointment_types")
        return [AcuityAppointmentType.model_validate(a) for a in self.appointment_types]

    async def get_available_dates(self, calendar_id, appointment_type_id, month):
        self._record("dates")
        return [AcuityAvailabilityDate(date=d) for d in self.dates_by_month.get(month, [])]

    async def get_available_times(self, calendar_id, appointment_type_id, date):
        self._record("times")
        return [
            AcuityTimeSlot(time=t, slots_available=1)
            for t in self.times_by_date.get(date, [])
        ]

    async def list_appointments(self, **filters: Any) -> list[dict[str, Any]]:
        self._record("appointments")
        self.appointment_queries.append(filters)
        calendar_id = filters.get("calendarID")
        canceled = bool(filters.get("canceled"))
        return [
            a
            for a in self.appointments
            if bool(a.get("canceled", False)) == canceled
            and (calendar_id is None or a.get("calendarID") == calendar_id)
        ]

    async def get_appointment(self, appointment_id):
        self.calls["appointment_detail"] += 1
        detail = self.details.get(str(appointment_id))
        if detail is None:
            raise AcuityAPIError(code="acuity_http_error", message="Service temporarily unavailable")
        return detail

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def fake_time() -> FakeTime:
    return FakeTime()


@pytest.fixture
def fake_client() -> FakeSchedulingClient:
    return FakeSchedulingClient()


@pytest.fixture
def cache(fake_time: FakeTime) -> StaleFallbackTTLCache:
    return StaleFallbackTTLCache(clock=fake_time.time)


@pytest.fixture
def rate_limiter(fake_time: FakeTime) -> InMemoryFixedWindowRateLimiter:
    return InMemoryFixedWindowRateLimiter(clock=fake_time.time)
