"""Rate limiting adapters.

Routes talk to AbstractRateLimiter; the in-memory fixed-window limiter is the
only backend today, and a shared store can replace it without touching the
API layer.
"""

from booking_api.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult
from booking_api.adapters.rate_limit.in_memory import InMemoryFixedWindowRateLimiter

__all__ = ["AbstractRateLimiter", "InMemoryFixedWindowRateLimiter", "RateLimitResult"]
