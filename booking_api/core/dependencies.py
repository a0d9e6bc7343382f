"""FastAPI dependencies exposing the per-app stores and services.

The cache, rate limiter and Acuity client are built once per application in
``create_app`` and kept on ``app.state``; routes receive them through these
functions so tests can swap them with ``app.dependency_overrides`` or fresh
instances.
"""

from __future__ import annotations

from fastapi import Request

from booking_api.adapters.acuity.base import AbstractSchedulingClient
from booking_api.adapters.rate_limit.base import AbstractRateLimiter
from booking_api.services.catalog_service import CatalogService
from booking_api.utils.ttl_cache import StaleFallbackTTLCache


def get_cache(request: Request) -> StaleFallbackTTLCache:
    return request.app.state.cache


def get_rate_limiter(request: Request) -> AbstractRateLimiter:
    return request.app.state.rate_limiter


def get_acuity_client(request: Request) -> AbstractSchedulingClient | None:
    """Return the Acuity client, or None when credentials are not configured."""
    return request.app.state.acuity_client


def get_catalog_service(request: Request) -> CatalogService:
    return CatalogService(
        client=get_acuity_client(request),
        cache=get_cache(request),
    )
