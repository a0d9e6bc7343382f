"""JSON envelope responses shared by the data routes."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from fastapi.responses import JSONResponse

from booking_api.schemas.site import ApiResponse
from booking_api.utils.ttl_cache import CacheResult

NOT_CONFIGURED_MESSAGE = "API not configured"
UNAVAILABLE_MESSAGE = "Service temporarily unavailable"

# Retry-After seconds for each fallback reason
NOT_CONFIGURED_RETRY_AFTER = 300
UNAVAILABLE_RETRY_AFTER = 60


def _iso_timestamp(epoch_seconds: float) -> str:
    stamp = datetime.fromtimestamp(epoch_seconds, tz=timezone.utc)
    return stamp.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def cached_response(result: CacheResult[Any]) -> JSONResponse:
    """200 response carrying live or cached data."""
    envelope = ApiResponse[Any](
        data=result.value,
        cached=result.served_from_cache,
        cached_at=_iso_timestamp(result.cached_at) if result.cached_at is not None else None,
        stale=result.stale,
    )
    return JSONResponse(status_code=200, content=envelope.to_json())


def fallback_response(data: Any, *, error: str, retry_after: int) -> JSONResponse:
    """503 response carrying static fallback data and retry guidance."""
    envelope = ApiResponse[Any](data=data, cached=False, fallback=True, error=error)
    return JSONResponse(
        status_code=503,
        content=envelope.to_json(),
        headers={"Retry-After": str(retry_after)},
    )
