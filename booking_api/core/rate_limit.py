"""Rate limiting dependency for FastAPI routes.

This module wires the rate limiting adapter into the HTTP layer.

Design goals:
- Minimal coupling: routes declare ``Depends(rate_limit("api:services"))``.
- Transport-agnostic limiter: the client identity is derived here and handed
  to the limiter as an opaque string.
- Per-route buckets: each route has its own fixed bucket name.

Rate limiting strategy:
- Fixed window per (route bucket, client IP), best-effort and per process.
- Client IP is the first X-Forwarded-For entry, then X-Real-IP, then "unknown".
"""

from __future__ import annotations

import hashlib
import logging
import math
from typing import Awaitable, Callable

from fastapi import HTTPException, Request, status

from booking_api.core.config import settings
from booking_api.core.dependencies import get_rate_limiter

logger = logging.getLogger(__name__)

UNKNOWN_CLIENT = "unknown"


def get_client_identity(request: Request) -> str:
    """Derive the caller identity used for rate limiting.

    Args:
        request: FastAPI request.

    Returns:
        str: Client IP from proxy headers, or "unknown".
    """

    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip() or UNKNOWN_CLIENT

    real_ip = request.headers.get("x-real-ip")
    if real_ip and real_ip.strip():
        return real_ip.strip()

    return UNKNOWN_CLIENT


def _hash_identity(identity: str) -> str:
    """Hash the client identity for logging without exposing IPs."""
    return hashlib.sha256(identity.encode()).hexdigest()[:16]


def rate_limit(
    bucket_key: str,
    *,
    limit: int | None = None,
    window_seconds: float | None = None,
) -> Callable[[Request], Awaitable[None]]:
    """Build a dependency enforcing a fixed-window limit for one route bucket.

    Args:
        bucket_key: Fixed bucket name for the route (e.g. "api:services").
        limit: Requests per window; defaults to APP_RATE_LIMIT_REQUESTS.
        window_seconds: Window length; defaults to APP_RATE_LIMIT_WINDOW_SECONDS.

    Returns:
        Async dependency raising HTTP 429 when the budget is exhausted.
    """

    async def enforce_rate_limit(request: Request) -> None:
        if not settings.app.rate_limit_enabled:
            return

        effective_limit = limit or settings.app.rate_limit_requests
        effective_window = window_seconds or settings.app.rate_limit_window_seconds
        identity = get_client_identity(request)

        result = get_rate_limiter(request).check(
            bucket_key,
            identity,
            limit=effective_limit,
            window_seconds=effective_window,
        )
        if result.allowed:
            logger.debug(
                "rate_limit.allowed",
                extra={
                    "bucket": bucket_key,
                    "client_hash": _hash_identity(identity),
                    "limit": result.limit,
                    "remaining": result.remaining,
                },
            )
            return

        retry_after = result.retry_after_seconds or 1
        logger.warning(
            "rate_limit.exceeded",
            extra={
                "bucket": bucket_key,
                "client_hash": _hash_identity(identity),
                "limit": result.limit,
                "window_s": effective_window,
                "retry_after_s": retry_after,
            },
        )

        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Too many requests",
            headers={
                "Retry-After": str(retry_after),
                "X-RateLimit-Limit": str(result.limit),
                "X-RateLimit-Remaining": str(result.remaining),
                "X-RateLimit-Reset": str(math.ceil(result.reset_at)),
            },
        )

    return enforce_rate_limit
