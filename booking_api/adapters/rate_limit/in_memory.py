"""In-memory fixed-window rate limiter.

Notes:
- Per-process only: running multiple workers multiplies the effective limit.
- Thread-safe: uses a lock around shared state.
- Windows start at a bucket's first request, not on wall-clock boundaries.
  A client can send ``limit`` requests at the end of one window and another
  ``limit`` right after it resets; this is a best-effort abuse guard, not a
  precise rate guarantee.
"""

from __future__ import annotations

import math
import threading
import time
from dataclasses import dataclass
from typing import Callable

from booking_api.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult


@dataclass
class _Bucket:
    count: int
    reset_at: float


class InMemoryFixedWindowRateLimiter(AbstractRateLimiter):
    """Rate limiter counting requests per (bucket, client) within a fixed window.

    Buckets are created on first use and mutated in place afterwards; they
    are never deleted except by reset().
    """

    def __init__(self, *, clock: Callable[[], float] = time.time) -> None:
        """Initialize the in-memory rate limiter.

        Args:
            clock: Time source function returning UNIX time in seconds.
        """
        self._clock = clock
        self._lock = threading.RLock()
        self._buckets: dict[tuple[str, str], _Bucket] = {}

    def check(
        self,
        bucket_key: str,
        client_identity: str,
        *,
        limit: int,
        window_seconds: float,
    ) -> RateLimitResult:
        """Count one request and decide whether it is admitted.

        Args:
            bucket_key: Logical bucket name (e.g. "api:services").
            client_identity: Caller identity, "unknown" when none was derived.
            limit: Max requests per window.
            window_seconds: Window length in seconds.

        Returns:
            RateLimitResult with allowance decision and metadata.
        """
        bucket_id = (bucket_key, client_identity)
        now = self._clock()

        with self._lock:
            bucket = self._buckets.get(bucket_id)

            if bucket is None or now >= bucket.reset_at:
                reset_at = now + window_seconds
                self._buckets[bucket_id] = _Bucket(count=1, reset_at=reset_at)
                return RateLimitResult(
                    allowed=True,
                    limit=limit,
                    remaining=max(0, limit - 1),
                    reset_at=reset_at,
                )

            if bucket.count >= limit:
                retry_after = max(1, math.ceil(bucket.reset_at - now))
                return RateLimitResult(
                    allowed=False,
                    limit=limit,
                    remaining=0,
                    reset_at=bucket.reset_at,
                    retry_after_seconds=retry_after,
                )

            bucket.count += 1
            return RateLimitResult(
                allowed=True,
                limit=limit,
                remaining=max(0, limit - bucket.count),
                reset_at=bucket.reset_at,
            )

    def reset(self) -> None:
        with self._lock:
            self._buckets.clear()

    def bucket_count(self) -> int:
        with self._lock:
            return len(self._buckets)
