"""Public Acuity booking URL builders and the site's URL slugs.

The owner id and origin come from settings so booking links are built in
one place.
"""

from __future__ import annotations

import re
from urllib.parse import quote

from booking_api.core.config import settings

SCHEDULE_PATH = "/schedule.php"

_NON_SLUG_RE = re.compile(r"[^\w\s-]")
_WHITESPACE_RE = re.compile(r"\s+")


def slugify(text: str) -> str:
    """Slugify text for URLs: lowercase, drop punctuation, spaces to dashes."""
    return _WHITESPACE_RE.sub("-", _NON_SLUG_RE.sub("", text.lower()).strip())


def base_schedule_url() -> str:
    return f"{settings.acuity.app_origin}{SCHEDULE_PATH}?owner={settings.acuity.owner_id}"


def booking_url_for_calendar(calendar_id: int | str) -> str:
    return f"{base_schedule_url()}&calendarID={calendar_id}"


def booking_url_for_appointment_type(appointment_type_id: int | str) -> str:
    return f"{base_schedule_url()}&appointmentType={appointment_type_id}"


def booking_url_for_category(category_name: str) -> str:
    # Only the category text is encoded; the "category:" prefix stays readable.
    return f"{base_schedule_url()}&appointmentType=category:{quote(category_name, safe='')}"
