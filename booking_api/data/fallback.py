"""Static content served when Acuity is not configured or unreachable."""

from __future__ import annotations

from booking_api.adapters.acuity.urls import base_schedule_url, booking_url_for_category, slugify
from booking_api.schemas.site import Service, ServiceCategory, Stylist

PLACEHOLDER_IMAGE = "/images/placeholder-stylist.svg"

# (id, name, price, duration minutes) per category, in display order
_FALLBACK_MENU: list[tuple[str, list[tuple[int, str, str, int]]]] = [
    (
        "Haircuts",
        [
            (1, "Women's Haircut", "$50", 45),
            (2, "Men's Haircut", "$25+", 30),
            (3, "Children's Cut (10 & under)", "$30", 30),
            (4, "Blowdry Style", "$45+", 30),
        ],
    ),
    (
        "Color",
        [
            (5, "Root Touch Up", "$95+", 90),
            (6, "All Over Color", "$125+", 90),
            (7, "Halo Foil", "$130+", 90),
            (8, "Partial Foil", "$150+", 90),
            (9, "Full Foil", "$180+", 120),
            (10, "Color/Foil Combination", "$200+", 120),
            (11, "Glaze (Toner)", "$75+", 60),
        ],
    ),
    (
        "Extras",
        [
            (12, "Brazilian Blowout", "$325+", 120),
            (13, "Eyebrow Tint", "$45", 15),
            (14, "Eyebrow Wax", "$20", 15),
            (15, "Lip Wax", "$25", 15),
            (16, "Chin Wax", "$25", 15),
        ],
    ),
]

_FALLBACK_STYLISTS: list[tuple[int, str, str]] = [
    (1, "Alyssa", "Stylist"),
    (2, "Virginia", "Stylist"),
    (3, "Kim", "Stylist"),
]


def fallback_services() -> list[ServiceCategory]:
    categories: list[ServiceCategory] = []
    for category, items in _FALLBACK_MENU:
        booking_url = booking_url_for_category(category)
        categories.append(
            ServiceCategory(
                name=category,
                slug=slugify(category),
                services=[
                    Service(
                        id=service_id,
                        name=name,
                        price=price,
                        duration=duration,
                        category=category,
                        description="",
                        booking_url=booking_url,
                    )
                    for service_id, name, price, duration in items
                ],
            )
        )
    return categories


def fallback_stylists() -> list[Stylist]:
    # Generic booking page: calendar ids here are not guaranteed to be live.
    return [
        Stylist(
            id=stylist_id,
            name=name,
            image=PLACEHOLDER_IMAGE,
            description=role,
            booking_url=base_schedule_url(),
        )
        for stylist_id, name, role in _FALLBACK_STYLISTS
    ]
