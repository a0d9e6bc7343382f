"""Rate limiter interfaces.

Routes depend on this abstraction (not the concrete implementation) so the
in-memory store can later be swapped for a shared one with minimal changes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class RateLimitResult:
    """Result of a rate limit check.

    Attributes:
        allowed: Whether the request is allowed to proceed.
        limit: Max requests per window.
        remaining: Remaining requests in the current window (0 when blocked).
        reset_at: UNIX time (seconds, fractional) when the current window ends.
        retry_after_seconds: Whole seconds to wait, only set when blocked (>= 1).
    """

    allowed: bool
    limit: int
    remaining: int
    reset_at: float
    retry_after_seconds: int | None = None


class AbstractRateLimiter(ABC):
    """Interface for rate limiters."""

    @abstractmethod
    def check(
        self,
        bucket_key: str,
        client_identity: str,
        *,
        limit: int,
        window_seconds: float,
    ) -> RateLimitResult:
        """Count one request against the (bucket_key, client_identity) budget.

        Args:
            bucket_key: Logical bucket, usually a fixed per-route name.
            client_identity: Opaque caller identity (e.g. client IP).
            limit: Max requests admitted per window.
            window_seconds: Window length in seconds.

        Returns:
            RateLimitResult describing whether the request was admitted.
        """
        raise NotImplementedError

    @abstractmethod
    def reset(self) -> None:
        """Drop all tracked buckets."""
        raise NotImplementedError
