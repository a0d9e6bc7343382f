"""Catalog service turning Acuity data into site view-models.

This service is the seam between routes and the scheduling API. It handles:
- Normalizing calendars and appointment types into stylists and services
- Grouping services into the site's category order
- Resolving availability (a given date, or the next open slot)
- Caching every Acuity read through the stale-fallback TTL cache
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import Callable

from booking_api.adapters.acuity.base import AbstractSchedulingClient
from booking_api.adapters.acuity.urls import (
    booking_url_for_appointment_type,
    booking_url_for_calendar,
    slugify,
)
from booking_api.core.errors import ConfigurationError
from booking_api.data.fallback import PLACEHOLDER_IMAGE
from booking_api.schemas.acuity import AcuityAppointmentType, AcuityCalendar
from booking_api.schemas.site import (
    AvailabilityView,
    Service,
    ServiceCategory,
    Stylist,
    TimeSlotView,
)
from booking_api.utils.datetime_format import (
    format_next_slot,
    format_time,
    get_current_month,
    next_month,
)
from booking_api.utils.ttl_cache import (
    CacheResult,
    CacheTTL,
    StaleFallbackTTLCache,
    availability_cache_key,
    services_cache_key,
    stylists_cache_key,
)

# Canonical category names shown in the site UI
CANONICAL_CATEGORIES = ("Haircuts", "Color", "Extras", "Other", "Consultation")

# Display order; categories not listed follow in first-seen order
CATEGORY_ORDER = ("Haircuts", "Color", "Extras", "Other")

_WHITESPACE_RE = re.compile(r"\s+")


def _collapse_whitespace(text: str) -> str:
    return _WHITESPACE_RE.sub(" ", text.strip())


def normalize_category_name(category: str | None) -> str:
    """Map an Acuity category onto the site's canonical names.

    Categories created during the Acuity migration carry a stylist prefix
    ("Alyssa Color", "Virginia Haircuts"); the canonical keyword wins.

    Examples:
        >>> normalize_category_name("  color ")
        'Color'
        >>> normalize_category_name("Kim Extras")
        'Extras'
        >>> normalize_category_name(None)
        'Other'
    """
    raw = _collapse_whitespace(category or "")
    if not raw:
        return "Other"

    for canonical in CANONICAL_CATEGORIES:
        if canonical.lower() == raw.lower():
            return canonical

    for canonical in CANONICAL_CATEGORIES:
        if re.search(rf"\b{re.escape(canonical)}\b", raw, flags=re.IGNORECASE):
            return canonical

    return raw


def transform_calendar(calendar: AcuityCalendar) -> Stylist:
    """Convert an Acuity calendar to a Stylist."""
    image = ""
    if isinstance(calendar.image, str) and calendar.image and calendar.image != "false":
        # Acuity returns protocol-relative image URLs
        image = f"https:{calendar.image}" if calendar.image.startswith("//") else calendar.image

    return Stylist(
        id=calendar.id,
        name=calendar.name,
        image=image or PLACEHOLDER_IMAGE,
        description=calendar.description or "",
        booking_url=booking_url_for_calendar(calendar.id),
    )


def transform_appointment_type(apt: AcuityAppointmentType) -> Service:
    """Convert an Acuity appointment type to a Service."""
    return Service(
        id=apt.id,
        name=_collapse_whitespace(apt.name),
        description=apt.description or "",
        duration=apt.duration,
        price=f"${apt.price}" if apt.price else "Consultation",
        category=normalize_category_name(apt.category),
        booking_url=apt.scheduling_url or booking_url_for_appointment_type(apt.id),
        calendar_ids=list(apt.calendar_ids),
    )


def group_services_by_category(services: list[Service]) -> list[ServiceCategory]:
    """Group services by category in the site's preferred order."""
    by_category: dict[str, list[Service]] = {}
    for service in services:
        by_category.setdefault(service.category, []).append(service)

    categories: list[ServiceCategory] = []
    for name in CATEGORY_ORDER:
        items = by_category.pop(name, None)
        if items:
            categories.append(ServiceCategory(name=name, slug=slugify(name), services=items))

    for name, items in by_category.items():
        categories.append(ServiceCategory(name=name, slug=slugify(name), services=items))

    return categories


class CatalogService:
    """Cached reads of services, stylists and availability."""

    def __init__(
        self,
        client: AbstractSchedulingClient | None,
        cache: StaleFallbackTTLCache,
        *,
        now: Callable[[], datetime | None] = lambda: None,
    ) -> None:
        """Initialize the catalog service.

        Args:
            client: Scheduling API client, or None when Acuity is not configured.
            cache: Shared response cache.
            now: Returns the reference time for "today"/"this month"
                (None means the real current time).
        """
        self.client = client
        self.cache = cache
        self._now = now

    def _require_client(self) -> AbstractSchedulingClient:
        if self.client is None:
            raise ConfigurationError(
                code="acuity_not_configured",
                message="API not configured",
                details={"missing": ["ACUITY_USER_ID", "ACUITY_API_KEY"]},
            )
        return self.client

    async def get_services(self) -> CacheResult[list[ServiceCategory]]:
        """Active, public services grouped by category.

        Raises:
            ConfigurationError: If Acuity credentials are missing.
            FetchError: If Acuity fails and nothing is cached.
        """
        client = self._require_client()

        async def _fetch() -> list[ServiceCategory]:
            appointment_types = await client.get_appointment_types()
            active = [
                transform_appointment_type(apt)
                for apt in appointment_types
                if apt.active and not apt.private
            ]
            return group_services_by_category(active)

        return await self.cache.get_or_fetch(services_cache_key(), _fetch, CacheTTL.SERVICES)

    async def get_stylists(self) -> CacheResult[list[Stylist]]:
        """All calendars as stylists.

        Raises:
            ConfigurationError: If Acuity credentials are missing.
            FetchError: If Acuity fails and nothing is cached.
        """
        client = self._require_client()

        async def _fetch() -> list[Stylist]:
            calendars = await client.get_calendars()
            return [transform_calendar(calendar) for calendar in calendars]

        return await self.cache.get_or_fetch(stylists_cache_key(), _fetch, CacheTTL.STYLISTS)

    async def get_availability(
        self,
        calendar_id: int,
        appointment_type_id: int,
        date: str | None = None,
    ) -> CacheResult[AvailabilityView]:
        """Open slots on a date, or the next open slot when no date is given.

        The next-slot lookup checks the current month, then the following one.

        Raises:
            ConfigurationError: If Acuity credentials are missing.
            FetchError: If Acuity fails and nothing is cached.
        """
        client = self._require_client()
        key = availability_cache_key(calendar_id, date, appointment_type_id)

        if date is not None:

            async def _fetch_day() -> AvailabilityView:
                times = await client.get_available_times(calendar_id, appointment_type_id, date)
                return AvailabilityView(
                    calendar_id=calendar_id,
                    appointment_type_id=appointment_type_id,
                    date=date,
                    slots=[
                        TimeSlotView(
                            datetime=slot.time,
                            display_time=format_time(slot.time),
                            slots_available=slot.slots_available,
                        )
                        for slot in times
                    ],
                )

            return await self.cache.get_or_fetch(key, _fetch_day, CacheTTL.AVAILABILITY)

        async def _fetch_next() -> AvailabilityView:
            now = self._now()
            month = get_current_month(now=now)
            for candidate in (month, next_month(month)):
                dates = await client.get_available_dates(calendar_id, appointment_type_id, candidate)
                for available in dates:
                    times = await client.get_available_times(
                        calendar_id, appointment_type_id, available.date
                    )
                    if times:
                        return AvailabilityView(
                            calendar_id=calendar_id,
                            appointment_type_id=appointment_type_id,
                            next_slot=format_next_slot(times[0].time, now=now),
                        )
            return AvailabilityView(calendar_id=calendar_id, appointment_type_id=appointment_type_id)

        return await self.cache.get_or_fetch(key, _fetch_next, CacheTTL.NEXT_SLOT)
