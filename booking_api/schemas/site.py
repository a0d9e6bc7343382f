"""View-models returned by the public site API.

JSON field names are camelCase to match what the site's front-end reads.
"""

from __future__ import annotations

from typing import Generic, List, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class SiteModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Stylist(SiteModel):
    id: int
    name: str
    image: str
    description: str = ""
    booking_url: str


class Service(SiteModel):
    id: int
    name: str
    description: str = ""
    duration: int
    price: str
    category: str
    booking_url: str
    calendar_ids: List[int] = Field(default_factory=list)


class ServiceCategory(SiteModel):
    name: str
    slug: str
    services: List[Service]


class NextSlot(SiteModel):
    """Next open slot, with text ready to render ("Tomorrow at 2:00 PM")."""

    datetime: str
    display_text: str
    relative_text: str


class TimeSlotView(SiteModel):
    datetime: str
    display_time: str
    slots_available: int | None = None


class AvailabilityView(SiteModel):
    """Availability of one stylist for one service.

    ``slots`` is filled when a date was requested; ``next_slot`` otherwise.
    """

    calendar_id: int
    appointment_type_id: int
    date: str | None = None
    slots: List[TimeSlotView] = Field(default_factory=list)
    next_slot: NextSlot | None = None


class ApiResponse(SiteModel, Generic[T]):
    """Envelope shared by every data route.

    Attributes:
        data: Payload (live, cached, or static fallback).
        cached: True when served from the cache.
        cached_at: ISO-8601 time the cached value was stored.
        stale: True when an expired value was served because Acuity failed.
        fallback: True when static fallback content was served.
        error: Generic, client-safe reason for a fallback.
    """

    data: T
    cached: bool = False
    cached_at: str | None = None
    stale: bool | None = None
    fallback: bool | None = None
    error: str | None = None

    def to_json(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
