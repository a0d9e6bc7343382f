"""Pydantic models for the Acuity Scheduling API payloads we consume.

Only the fields the site uses are declared; anything else Acuity sends is
ignored.
"""

from __future__ import annotations

from typing import List

from pydantic import BaseModel, ConfigDict, Field


class _AcuityModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class AcuityCalendar(_AcuityModel):
    """A calendar, which the salon uses as one stylist."""

    id: int
    name: str
    email: str | None = None
    description: str | None = None
    location: str | None = None
    timezone: str | None = None
    # Acuity sends the string "false" (or false) when no image is set
    image: str | bool | None = None


class AcuityAppointmentType(_AcuityModel):
    """A bookable service."""

    id: int
    name: str
    active: bool = True
    private: bool = False
    description: str | None = None
    duration: int = 0
    price: str | None = None
    category: str | None = None
    scheduling_url: str | None = Field(None, alias="schedulingUrl")
    calendar_ids: List[int] = Field(default_factory=list, alias="calendarIDs")


class AcuityAvailabilityDate(_AcuityModel):
    """A date (YYYY-MM-DD) with at least one open slot."""

    date: str


class AcuityTimeSlot(_AcuityModel):
    """An open slot, as an ISO-8601 datetime with offset."""

    time: str
    slots_available: int | None = Field(None, alias="slotsAvailable")
