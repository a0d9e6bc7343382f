"""Acuity appointment audit tool for operators.

Answers "what's booked on our side?" during migrations without exposing
client data through the public API. Reads appointments for a date range,
optionally joins who scheduled each one, and prints a summary plus either a
TSV preview or a CSV file.

Usage:
    ACUITY_USER_ID=... ACUITY_API_KEY=... booking-audit --from 2026-02-01 \
        --to 2026-03-01 --calendar 13484805 --csv output/feb.csv
"""

from __future__ import annotations

import argparse
import asyncio
import csv
import io
import logging
import sys
from collections import Counter
from datetime import date, timedelta
from pathlib import Path
from typing import Any, Awaitable, Callable, Iterable, Sequence, TypeVar

from booking_api.adapters.acuity.base import AbstractSchedulingClient
from booking_api.adapters.acuity.factory import create_acuity_client
from booking_api.core.config import AcuitySettings
from booking_api.core.errors import AcuityAPIError, ConfigurationError

logger = logging.getLogger("booking_api.audit")

T = TypeVar("T")
R = TypeVar("R")

DETAILS_CONCURRENCY = 5
DEFAULT_RANGE_DAYS = 30

AUDIT_COLUMNS = [
    "id",
    "datetime",
    "date",
    "time",
    "endTime",
    "dateCreated",
    "type",
    "appointmentTypeID",
    "calendar",
    "calendarID",
    "firstName",
    "lastName",
    "email",
    "phone",
    "canceled",
    "scheduledBy",
]

PREVIEW_COLUMNS = [
    "datetime",
    "calendarID",
    "type",
    "firstName",
    "lastName",
    "email",
    "phone",
    "dateCreated",
    "id",
]


def _iso_date(value: str) -> str:
    try:
        return date.fromisoformat(value).isoformat()
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid date (expected YYYY-MM-DD): {value}") from exc


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"must be a positive number: {value}") from exc
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be a positive number: {value}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="booking-audit",
        description="Audit Acuity appointments. Requires ACUITY_USER_ID and ACUITY_API_KEY.",
    )
    parser.add_argument("--from", dest="from_date", type=_iso_date, help="YYYY-MM-DD (default: today)")
    parser.add_argument("--to", dest="to_date", type=_iso_date, help="YYYY-MM-DD (default: from + 30 days)")
    parser.add_argument(
        "--calendar",
        dest="calendars",
        type=int,
        action="append",
        default=[],
        help="calendar id (repeatable)",
    )
    parser.add_argument("--max", dest="max_results", type=_positive_int, default=100)
    parser.add_argument(
        "--direction",
        type=str.upper,
        choices=["ASC", "DESC"],
        default="ASC",
    )
    parser.add_argument("--canceled", action="store_true", help="fetch only canceled")
    parser.add_argument(
        "--include-canceled",
        action="store_true",
        help="fetch both active and canceled",
    )
    parser.add_argument(
        "--include-forms",
        dest="exclude_forms",
        action="store_false",
        help="include intake forms (excluded by default for speed)",
    )
    parser.add_argument("--exclude-forms", dest="exclude_forms", action="store_true", help=argparse.SUPPRESS)
    parser.set_defaults(exclude_forms=True)
    parser.add_argument("--first-name")
    parser.add_argument("--last-name")
    parser.add_argument("--email")
    parser.add_argument("--phone")
    parser.add_argument("--details", action="store_true", help="fetch each appointment for scheduledBy")
    parser.add_argument("--csv", dest="csv_path", help="write CSV to this path")
    return parser


def resolve_date_range(from_date: str | None, to_date: str | None, *, today: date | None = None) -> tuple[str, str]:
    start = from_date or (today or date.today()).isoformat()
    end = to_date or (date.fromisoformat(start) + timedelta(days=DEFAULT_RANGE_DAYS)).isoformat()
    return start, end


async def gather_limited(
    items: Sequence[T],
    limit: int,
    fn: Callable[[T], Awaitable[R]],
) -> list[R]:
    """Apply fn to every item with at most ``limit`` calls in flight, keeping order."""
    semaphore = asyncio.Semaphore(limit)

    async def _run(item: T) -> R:
        async with semaphore:
            return await fn(item)

    return list(await asyncio.gather(*(_run(item) for item in items)))


async def fetch_appointments(
    client: AbstractSchedulingClient,
    *,
    from_date: str,
    to_date: str,
    calendar_ids: Iterable[int],
    max_results: int,
    direction: str,
    canceled: bool,
    exclude_forms: bool,
    first_name: str | None = None,
    last_name: str | None = None,
    email: str | None = None,
    phone: str | None = None,
) -> list[dict[str, Any]]:
    """Read appointments, one request per calendar since the API takes a single calendarID."""
    query: dict[str, Any] = {
        "max": max_results,
        "minDate": from_date,
        "maxDate": to_date,
        "canceled": canceled,
        "excludeForms": exclude_forms,
        "direction": direction,
        "firstName": first_name,
        "lastName": last_name,
        "email": email,
        "phone": phone,
    }

    calendar_ids = list(calendar_ids)
    if not calendar_ids:
        return await client.list_appointments(**query)

    appointments: list[dict[str, Any]] = []
    for calendar_id in calendar_ids:
        appointments.extend(await client.list_appointments(**query, calendarID=calendar_id))
    return appointments


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def normalize_appointment(appointment: dict[str, Any], *, canceled: bool | None = None, scheduled_by: str = "") -> dict[str, str]:
    """Flatten an Acuity appointment into the audit columns."""
    row = {column: _cell(appointment.get(column)) for column in AUDIT_COLUMNS[:-2]}
    row["canceled"] = _cell(canceled)
    row["scheduledBy"] = _cell(scheduled_by)
    return row


async def attach_scheduled_by(
    client: AbstractSchedulingClient,
    rows: list[dict[str, str]],
    *,
    concurrency: int = DETAILS_CONCURRENCY,
) -> list[dict[str, str]]:
    """Fill scheduledBy from each appointment's detail; failures leave it empty."""

    async def _lookup(row: dict[str, str]) -> str:
        try:
            detail = await client.get_appointment(row["id"])
            return _cell(detail.get("scheduledBy"))
        except AcuityAPIError as exc:
            logger.warning("Detail fetch failed for appointment %s: %s", row["id"], exc.code)
        except Exception as exc:
            logger.warning("Detail fetch failed for appointment %s: %s", row["id"], type(exc).__name__)
        return ""

    scheduled_by = await gather_limited(rows, concurrency, _lookup)
    return [{**row, "scheduledBy": value} for row, value in zip(rows, scheduled_by)]


def _sort_key(row: dict[str, str]) -> tuple[str, int, str]:
    raw_id = row["id"]
    return (row["datetime"], int(raw_id) if raw_id.isdigit() else 0, raw_id)


def sort_rows(rows: list[dict[str, str]]) -> list[dict[str, str]]:
    """Deterministic order for human review: by datetime, then numeric id."""
    return sorted(rows, key=_sort_key)


def summarize(rows: list[dict[str, str]]) -> list[str]:
    missing_contact = sum(1 for r in rows if not r["email"].strip() and not r["phone"].strip())
    lines = [f"Appointments: {len(rows)}", f"Missing email+phone: {missing_contact}"]

    by_calendar = Counter(r["calendarID"] for r in rows)
    if by_calendar:
        ordered = sorted(by_calendar.items(), key=lambda kv: (int(kv[0]) if kv[0].isdigit() else 0, kv[0]))
        lines.append("By calendarID: " + " ".join(f"{k}:{v}" for k, v in ordered))
    return lines


def to_csv(rows: list[dict[str, str]], columns: Sequence[str] = AUDIT_COLUMNS) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(columns)
    for row in rows:
        writer.writerow([row.get(column, "") for column in columns])
    return buffer.getvalue()


def to_preview(rows: list[dict[str, str]], columns: Sequence[str] = PREVIEW_COLUMNS) -> str:
    lines = ["\t".join(columns)]
    lines.extend("\t".join(row.get(column, "") for column in columns) for row in rows)
    return "\n".join(lines)


async def run_audit(client: AbstractSchedulingClient, args: argparse.Namespace, *, today: date | None = None) -> list[dict[str, str]]:
    """Fetch, normalize, optionally enrich and sort the audit rows."""
    from_date, to_date = resolve_date_range(args.from_date, args.to_date, today=today)
    common = dict(
        from_date=from_date,
        to_date=to_date,
        calendar_ids=args.calendars,
        max_results=args.max_results,
        direction=args.direction,
        exclude_forms=args.exclude_forms,
        first_name=args.first_name,
        last_name=args.last_name,
        email=args.email,
        phone=args.phone,
    )

    if args.include_canceled:
        active = await fetch_appointments(client, canceled=False, **common)
        canceled = await fetch_appointments(client, canceled=True, **common)
        rows = [normalize_appointment(a, canceled=False) for a in active]
        rows += [normalize_appointment(a, canceled=True) for a in canceled]
    else:
        appointments = await fetch_appointments(client, canceled=args.canceled, **common)
        rows = [normalize_appointment(a, canceled=args.canceled) for a in appointments]

    if args.details and rows:
        rows = await attach_scheduled_by(client, rows)

    return sort_rows(rows)


async def _main_async(args: argparse.Namespace, client: AbstractSchedulingClient) -> int:
    try:
        rows = await run_audit(client, args)
    finally:
        await client.aclose()

    for line in summarize(rows):
        print(line)

    if args.csv_path:
        Path(args.csv_path).write_text(to_csv(rows), encoding="utf-8")
        print(f"Wrote CSV: {args.csv_path}")
    else:
        print(to_preview(rows))
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    logging.basicConfig(
        level=logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    args = build_parser().parse_args(argv)

    try:
        client = create_acuity_client(AcuitySettings())
    except ConfigurationError as exc:
        for name in (exc.details or {}).get("missing", []):
            print(f"Missing env var: {name}", file=sys.stderr)
        return 2

    try:
        return asyncio.run(_main_async(args, client))
    except AcuityAPIError as exc:
        hint = (exc.details or {}).get("hint", "")
        status = (exc.details or {}).get("http_status")
        print(f"Acuity API error {status or ''} {hint}".strip(), file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
