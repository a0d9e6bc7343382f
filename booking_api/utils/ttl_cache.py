"""In-memory TTL cache with stale-on-error fallback for Acuity responses.

Each entry records the TTL it was stored with, so one cache instance can hold
services (1h), stylists (30min) and availability (minutes) side by side.
Expired entries are never evicted in the background: they stay in the store
so a failed refresh can still serve the last good value, flagged as stale.

Concurrent misses on the same key are not de-duplicated; each caller runs
its own fetch and the last successful write wins.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, TypeVar

from booking_api.core.errors import FetchError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CacheTTL:
    """TTL values in seconds per logical resource."""

    SERVICES = 60 * 60
    STYLISTS = 30 * 60
    AVAILABILITY = 10 * 60
    NEXT_SLOT = 5 * 60


@dataclass
class CacheEntry:
    """Stored value with the time it was written and the TTL it was written with."""

    value: Any
    stored_at: float
    ttl: float

    def is_fresh(self, now: float) -> bool:
        return now - self.stored_at < self.ttl


@dataclass(frozen=True)
class CacheResult(Generic[T]):
    """Outcome of a get_or_fetch call.

    Attributes:
        value: Payload, either freshly fetched or read from the store.
        served_from_cache: True when the value came from the store.
        cached_at: UNIX time the served entry was written (None on a fresh fetch).
        stale: True only when an expired entry was served because the fetch failed.
    """

    value: T
    served_from_cache: bool
    cached_at: float | None = None
    stale: bool | None = None


class StaleFallbackTTLCache:
    """Process-local cache memoizing async fetches per string key.

    Lookups and write-backs hold an RLock; the fetch itself runs unlocked so
    independent keys never wait on each other.
    """

    def __init__(self, *, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._store: dict[str, CacheEntry] = {}
        self._lock = threading.RLock()
        self._hits = 0
        self._misses = 0
        self._stale_hits = 0

    def __repr__(self) -> str:  # pragma: no cover - representation only
        return (
            f"StaleFallbackTTLCache(size={len(self._store)}, hits={self._hits}, "
            f"misses={self._misses}, stale_hits={self._stale_hits})"
        )

    async def get_or_fetch(
        self,
        key: str,
        fetch_fn: Callable[[], Awaitable[T]],
        ttl: float,
    ) -> CacheResult[T]:
        """Return the cached value for key, fetching it when missing or expired.

        Args:
            key: Cache key (see the *_cache_key builders).
            fetch_fn: Zero-argument coroutine function producing a fresh value.
            ttl: Seconds the fetched value stays fresh.

        Returns:
            CacheResult describing where the value came from.

        Raises:
            FetchError: fetch_fn failed and nothing was ever stored under key.
        """

        with self._lock:
            entry = self._store.get(key)
            if entry is not None and entry.is_fresh(self._clock()):
                self._hits += 1
                logger.debug("cache.hit", extra={"cache_key": key})
                return CacheResult(
                    value=entry.value,
                    served_from_cache=True,
                    cached_at=entry.stored_at,
                )
            self._misses += 1

        logger.debug(
            "cache.miss",
            extra={
                "cache_key": key,
                "reason": "expired" if entry is not None else "not_found",
            },
        )

        try:
            value = await fetch_fn()
        except Exception as exc:
            if entry is None:
                logger.warning(
                    "cache.fetch_failed",
                    extra={"cache_key": key, "error_type": type(exc).__name__},
                )
                raise FetchError(
                    code="fetch_failed",
                    message=f"Fetching '{key}' failed and no cached value exists",
                    details={"cache_key": key},
                ) from exc

            with self._lock:
                self._stale_hits += 1
            logger.warning(
                "cache.stale_fallback",
                extra={
                    "cache_key": key,
                    "error_type": type(exc).__name__,
                    "age_s": round(self._clock() - entry.stored_at, 3),
                },
            )
            return CacheResult(
                value=entry.value,
                served_from_cache=True,
                cached_at=entry.stored_at,
                stale=True,
            )

        with self._lock:
            self._store[key] = CacheEntry(value=value, stored_at=self._clock(), ttl=ttl)
            size = len(self._store)

        logger.debug("cache.set", extra={"cache_key": key, "ttl_s": ttl, "size": size})
        return CacheResult(value=value, served_from_cache=False)

    def invalidate(self, key: str) -> None:
        """Remove one entry; later lookups behave as if nothing was stored."""

        with self._lock:
            self._store.pop(key, None)

    def clear(self) -> None:
        """Remove all cached entries and reset counters."""

        with self._lock:
            self._store.clear()
            self._hits = 0
            self._misses = 0
            self._stale_hits = 0

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._store

    def stats(self) -> dict[str, int]:
        """Return lightweight cache metrics without exposing values."""

        with self._lock:
            return {
                "entries": len(self._store),
                "hits": self._hits,
                "misses": self._misses,
                "stale_hits": self._stale_hits,
            }


def availability_cache_key(
    calendar_id: int,
    date: str | None = None,
    appointment_type_id: int | None = None,
) -> str:
    """Key for availability of one calendar on a date ("next" when no date).

    The appointment type suffix is only added when given, so calendar-wide
    keys keep the plain ``availability:{calendar}:{date}`` shape.
    """

    key = f"availability:{calendar_id}:{date or 'next'}"
    if appointment_type_id is not None:
        key = f"{key}:{appointment_type_id}"
    return key


def services_cache_key() -> str:
    return "services:all"


def stylists_cache_key() -> str:
    return "stylists:all"
