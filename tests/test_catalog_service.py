"""Tests for catalog transforms, fallback content and the cached CatalogService."""

from datetime import datetime, timezone

import pytest

from booking_api.adapters.acuity.urls import (
    base_schedule_url,
    booking_url_for_appointment_type,
    booking_url_for_calendar,
    booking_url_for_category,
    slugify,
)
from booking_api.core.errors import ConfigurationError, FetchError
from booking_api.data.fallback import PLACEHOLDER_IMAGE, fallback_services, fallback_stylists
from booking_api.schemas.acuity import AcuityAppointmentType, AcuityCalendar
from booking_api.schemas.site import Service
from booking_api.services.catalog_service import (
    CatalogService,
    group_services_by_category,
    normalize_category_name,
    transform_appointment_type,
    transform_calendar,
)

SCHEDULE = "https://app.acuityscheduling.com/schedule.php?owner=38274584"

# 10:00 AM in New York on Tuesday Feb 10, 2026
FIXED_NOW = datetime(2026, 2, 10, 15, 0, tzinfo=timezone.utc)


def _service(name: str, category: str) -> Service:
    return Service(id=1, name=name, duration=30, price="$10", category=category, booking_url="u")


class TestUrls:
    def test_booking_urls(self) -> None:
        assert base_schedule_url() == SCHEDULE
        assert booking_url_for_calendar(13484805) == f"{SCHEDULE}&calendarID=13484805"
        assert booking_url_for_appointment_type(77) == f"{SCHEDULE}&appointmentType=77"

    def test_slugify(self) -> None:
        assert slugify("Women's Haircut") == "womens-haircut"
        assert slugify("Color / Foil") == "color-foil"
        assert slugify("  Bridal & Updo ") == "bridal-updo"

    def test_category_url_encodes_name_only(self) -> None:
        assert booking_url_for_category("Extras & More") == (
            f"{SCHEDULE}&appointmentType=category:Extras%20%26%20More"
        )


class TestNormalizeCategory:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            (None, "Other"),
            ("", "Other"),
            ("   ", "Other"),
            ("color", "Color"),
            ("  HAIRCUTS ", "Haircuts"),
            ("Alyssa Color", "Color"),
            ("Virginia   Haircuts", "Haircuts"),
            ("Kim Extras", "Extras"),
            ("Colorist Specials", "Colorist Specials"),
            ("Bridal  Party", "Bridal Party"),
        ],
    )
    def test_normalize(self, raw, expected) -> None:
        assert normalize_category_name(raw) == expected


class TestTransforms:
    def test_calendar_protocol_relative_image(self) -> None:
        stylist = transform_calendar(
            AcuityCalendar(id=5, name="Kim", image="//cdn.acuity.com/kim.jpg", description="Colorist")
        )

        assert stylist.image == "https://cdn.acuity.com/kim.jpg"
        assert stylist.description == "Colorist"
        assert stylist.booking_url == f"{SCHEDULE}&calendarID=5"

    @pytest.mark.parametrize("image", [None, "", "false", False])
    def test_calendar_missing_image_uses_placeholder(self, image) -> None:
        stylist = transform_calendar(AcuityCalendar(id=5, name="Kim", image=image))

        assert stylist.image == PLACEHOLDER_IMAGE
        assert stylist.description == ""

    def test_calendar_absolute_image_kept(self) -> None:
        stylist = transform_calendar(AcuityCalendar(id=5, name="Kim", image="https://x/y.png"))
        assert stylist.image == "https://x/y.png"

    def test_appointment_type_with_price(self) -> None:
        service = transform_appointment_type(
            AcuityAppointmentType.model_validate(
                {
                    "id": 9,
                    "name": "  Women's   Haircut ",
                    "duration": 45,
                    "price": "50.00",
                    "category": "Alyssa Haircuts",
                    "schedulingUrl": "https://book.example/9",
                    "calendarIDs": [1, 2],
                }
            )
        )

        assert service.name == "Women's Haircut"
        assert service.price == "$50.00"
        assert service.category == "Haircuts"
        assert service.booking_url == "https://book.example/9"
        assert service.calendar_ids == [1, 2]
        assert service.description == ""

    def test_appointment_type_without_price_is_consultation(self) -> None:
        service = transform_appointment_type(
            AcuityAppointmentType(id=9, name="Color Consult", duration=15, price="")
        )

        assert service.price == "Consultation"
        assert service.category == "Other"
        assert service.booking_url == f"{SCHEDULE}&appointmentType=9"

    def test_group_uses_display_order_then_first_seen(self) -> None:
        services = [
            _service("Bridal", "Bridal"),
            _service("Wax", "Extras"),
            _service("Misc", "Other"),
            _service("Cut", "Haircuts"),
            _service("Consult", "Consultation"),
            _service("Cut 2", "Haircuts"),
        ]

        groups = group_services_by_category(services)

        assert [g.name for g in groups] == ["Haircuts", "Extras", "Other", "Bridal", "Consultation"]
        assert [s.name for s in groups[0].services] == ["Cut", "Cut 2"]
        assert groups[0].slug == "haircuts"

    def test_group_slugs_are_url_safe(self) -> None:
        groups = group_services_by_category(
            [_service("Updo", "Bridal & Special Events"), _service("Cut", "Haircuts")]
        )

        assert [(g.name, g.slug) for g in groups] == [
            ("Haircuts", "haircuts"),
            ("Bridal & Special Events", "bridal-special-events"),
        ]

    def test_group_skips_empty_categories(self) -> None:
        assert group_services_by_category([]) == []


class TestFallbackContent:
    def test_fallback_services_menu(self) -> None:
        categories = fallback_services()

        assert [c.name for c in categories] == ["Haircuts", "Color", "Extras"]
        assert [c.slug for c in categories] == ["haircuts", "color", "extras"]
        ids = [s.id for c in categories for s in c.services]
        assert ids == list(range(1, 17))
        haircut = categories[0].services[0]
        assert haircut.booking_url == f"{SCHEDULE}&appointmentType=category:Haircuts"

    def test_fallback_stylists(self) -> None:
        stylists = fallback_stylists()

        assert [(s.id, s.name) for s in stylists] == [(1, "Alyssa"), (2, "Virginia"), (3, "Kim")]
        assert all(s.image == PLACEHOLDER_IMAGE for s in stylists)
        assert all(s.booking_url == SCHEDULE for s in stylists)


class TestCatalogService:
    @pytest.fixture
    def catalog(self, fake_client, cache) -> CatalogService:
        return CatalogService(fake_client, cache, now=lambda: FIXED_NOW)

    @pytest.mark.asyncio
    async def test_not_configured_raises(self, cache) -> None:
        catalog = CatalogService(None, cache)

        with pytest.raises(ConfigurationError) as exc_info:
            await catalog.get_services()

        assert exc_info.value.message == "API not configured"

        with pytest.raises(ConfigurationError):
            await catalog.get_stylists()
        with pytest.raises(ConfigurationError):
            await catalog.get_availability(1, 2)

    @pytest.mark.asyncio
    async def test_services_filter_and_cache(self, catalog, fake_client) -> None:
        fake_client.appointment_types = [
            {"id": 1, "name": "Cut", "duration": 30, "price": "50", "category": "Haircuts"},
            {"id": 2, "name": "Old", "duration": 30, "price": "50", "active": False},
            {"id": 3, "name": "Secret", "duration": 30, "price": "50", "private": True},
            {"id": 4, "name": "Glaze", "duration": 60, "price": "75", "category": "Kim Color"},
        ]

        first = await catalog.get_services()
        second = await catalog.get_services()

        assert [c.name for c in first.value] == ["Haircuts", "Color"]
        assert [s.id for c in first.value for s in c.services] == [1, 4]
        assert first.served_from_cache is False
        assert second.served_from_cache is True
        assert fake_client.calls["appointment_types"] == 1

    @pytest.mark.asyncio
    async def test_services_failure_with_nothing_cached(self, catalog, fake_client) -> None:
        fake_client.fail = True

        with pytest.raises(FetchError):
            await catalog.get_services()

    @pytest.mark.asyncio
    async def test_stylists_stale_after_failure(self, catalog, fake_client, fake_time) -> None:
        fake_client.calendars = [{"id": 7, "name": "Alyssa", "image": "false"}]
        await catalog.get_stylists()

        fake_time.advance(1801)
        fake_client.fail = True
        result = await catalog.get_stylists()

        assert result.stale is True
        assert result.value[0].name == "Alyssa"

    @pytest.mark.asyncio
    async def test_availability_for_date(self, catalog, fake_client) -> None:
        fake_client.times_by_date = {
            "2026-02-11": ["2026-02-11T09:00:00-0500", "2026-02-11T14:30:00-0500"],
        }

        result = await catalog.get_availability(7, 3, "2026-02-11")

        view = result.value
        assert view.date == "2026-02-11"
        assert [s.display_time for s in view.slots] == ["9:00 AM", "2:30 PM"]
        assert view.next_slot is None
        assert fake_client.calls["dates"] == 0

    @pytest.mark.asyncio
    async def test_next_slot_checks_following_month(self, catalog, fake_client) -> None:
        fake_client.dates_by_month = {"2026-02": [], "2026-03": ["2026-03-02", "2026-03-03"]}
        fake_client.times_by_date = {"2026-03-02": ["2026-03-02T14:00:00-0500"]}

        result = await catalog.get_availability(7, 3)

        next_slot = result.value.next_slot
        assert next_slot is not None
        assert next_slot.datetime == "2026-03-02T14:00:00-0500"
        assert next_slot.display_text == "Mar 2 at 2:00 PM"
        assert fake_client.calls["dates"] == 2
        assert fake_client.calls["times"] == 1

    @pytest.mark.asyncio
    async def test_next_slot_skips_dates_without_times(self, catalog, fake_client) -> None:
        fake_client.dates_by_month = {"2026-02": ["2026-02-11", "2026-02-12"]}
        fake_client.times_by_date = {"2026-02-12": ["2026-02-12T10:00:00-0500"]}

        result = await catalog.get_availability(7, 3)

        assert result.value.next_slot.display_text == "Thursday at 10:00 AM"

    @pytest.mark.asyncio
    async def test_no_open_slot_in_two_months(self, catalog, fake_client) -> None:
        result = await catalog.get_availability(7, 3)

        assert result.value.next_slot is None
        assert result.value.slots == []

    @pytest.mark.asyncio
    async def test_availability_cached_per_type_and_date(self, catalog, fake_client) -> None:
        fake_client.times_by_date = {"2026-02-11": ["2026-02-11T09:00:00-0500"]}

        await catalog.get_availability(7, 3, "2026-02-11")
        await catalog.get_availability(7, 3, "2026-02-11")
        await catalog.get_availability(7, 4, "2026-02-11")

        assert fake_client.calls["times"] == 2
