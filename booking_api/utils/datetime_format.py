"""Date/time formatting in the salon's local time zone.

Servers usually run in UTC while Acuity returns datetimes with offsets
(e.g. ``-0500``); everything here converts to the salon zone explicitly so a
5:00 PM appointment never renders as 10:00 PM.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

from booking_api.core.config import settings
from booking_api.schemas.site import NextSlot


def salon_tz() -> ZoneInfo:
    return ZoneInfo(settings.app.salon_time_zone)


def _now(now: datetime | None) -> datetime:
    if now is None:
        return datetime.now(timezone.utc)
    if now.tzinfo is None:
        return now.replace(tzinfo=timezone.utc)
    return now


def parse_iso(value: str) -> datetime:
    """Parse an Acuity ISO datetime, accepting both ``-0500`` and ``-05:00`` offsets.

    Naive values are assumed to be UTC.
    """
    try:
        parsed = datetime.strptime(value, "%Y-%m-%dT%H:%M:%S%z")
    except ValueError:
        parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def to_salon_time(value: str) -> datetime:
    return parse_iso(value).astimezone(salon_tz())


def format_time(iso_string: str) -> str:
    """Format a datetime for display, e.g. "2:00 PM"."""
    local = to_salon_time(iso_string)
    hour = local.hour % 12 or 12
    suffix = "AM" if local.hour < 12 else "PM"
    return f"{hour}:{local.minute:02d} {suffix}"


def get_relative_day(iso_string: str, *, now: datetime | None = None) -> str:
    """Return "Today", "Tomorrow", a weekday name within a week, else "Feb 3"."""
    local = to_salon_time(iso_string)
    today = _now(now).astimezone(salon_tz()).date()

    days_until = (local.date() - today).days

    if days_until == 0:
        return "Today"
    if days_until == 1:
        return "Tomorrow"
    if days_until <= 7:
        return local.strftime("%A")
    return f"{local.strftime('%b')} {local.day}"


def format_next_slot(iso_string: str, *, now: datetime | None = None) -> NextSlot:
    relative_text = get_relative_day(iso_string, now=now)
    return NextSlot(
        datetime=iso_string,
        display_text=f"{relative_text} at {format_time(iso_string)}",
        relative_text=relative_text,
    )


def get_current_month(*, now: datetime | None = None) -> str:
    """Current salon-local month as YYYY-MM."""
    return _now(now).astimezone(salon_tz()).strftime("%Y-%m")


def next_month(month: str) -> str:
    """Return the month after a YYYY-MM month."""
    first = date.fromisoformat(f"{month}-01")
    return (first.replace(day=28) + timedelta(days=4)).strftime("%Y-%m")
