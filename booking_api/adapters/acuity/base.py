from abc import ABC, abstractmethod
from typing import Any

from booking_api.schemas.acuity import (
    AcuityAppointmentType,
    AcuityAvailabilityDate,
    AcuityCalendar,
    AcuityTimeSlot,
)


class AbstractSchedulingClient(ABC):
    """Interface for the scheduling API the site reads calendars and services from."""

    @abstractmethod
    async def get_calendars(self) -> list[AcuityCalendar]:
        """Return all calendars (one per stylist)."""
        ...

    @abstractmethod
    async def get_appointment_types(self) -> list[AcuityAppointmentType]:
        """Return all appointment types (services), including inactive/private ones."""
        ...

    @abstractmethod
    async def get_available_dates(
        self,
        calendar_id: int,
        appointment_type_id: int,
        month: str,
    ) -> list[AcuityAvailabilityDate]:
        """Return dates with openings in month (YYYY-MM)."""
        ...

    @abstractmethod
    async def get_available_times(
        self,
        calendar_id: int,
        appointment_type_id: int,
        date: str,
    ) -> list[AcuityTimeSlot]:
        """Return open time slots on date (YYYY-MM-DD)."""
        ...

    @abstractmethod
    async def list_appointments(self, **filters: Any) -> list[dict[str, Any]]:
        """Return booked appointments matching the given query filters.

        Raises:
            AcuityAPIError: If the request fails or the payload is not a list.
        """
        ...

    @abstractmethod
    async def get_appointment(self, appointment_id: int | str) -> dict[str, Any]:
        """Return one appointment with its full detail."""
        ...

    async def aclose(self) -> None:
        """Release network resources held by the client."""
        return None
