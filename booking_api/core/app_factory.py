from __future__ import annotations

"""Application factory for the FastAPI app.

Centralizes app construction (metadata, middleware, handlers, routers and the
per-app cache/rate limiter/Acuity client) so tests can build isolated apps.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from booking_api.adapters.acuity.base import AbstractSchedulingClient
from booking_api.adapters.acuity.factory import create_acuity_client
from booking_api.adapters.rate_limit.base import AbstractRateLimiter
from booking_api.adapters.rate_limit.in_memory import InMemoryFixedWindowRateLimiter
from booking_api.api.routes import (
    availability_router,
    health_router,
    services_router,
    stylists_router,
)
from booking_api.core.config import settings
from booking_api.core.errors import ConfigurationError
from booking_api.core.exception_handlers import setup_exception_handlers
from booking_api.core.logging import configure_logging
from booking_api.core.middleware import request_id_middleware, security_headers_middleware
from booking_api.utils.ttl_cache import StaleFallbackTTLCache

logger = logging.getLogger(__name__)

_UNSET = object()


def _build_acuity_client() -> AbstractSchedulingClient | None:
    try:
        return create_acuity_client()
    except ConfigurationError as exc:
        logger.warning(
            "acuity.not_configured",
            extra={"missing": (exc.details or {}).get("missing", [])},
        )
        return None


@asynccontextmanager
async def _lifespan(app: FastAPI):
    yield
    client = app.state.acuity_client
    if client is not None:
        await client.aclose()


def create_app(
    *,
    cache: StaleFallbackTTLCache | None = None,
    rate_limiter: AbstractRateLimiter | None = None,
    acuity_client: AbstractSchedulingClient | None | object = _UNSET,
) -> FastAPI:
    """Create and configure the FastAPI application instance.

    Args:
        cache: Response cache; a new one is created when omitted.
        rate_limiter: Rate limiter; a new in-memory one is created when omitted.
        acuity_client: Scheduling client. Omit to build it from settings;
            pass None to run as "not configured".

    Returns:
        Configured FastAPI app with middleware, handlers and routers.
    """
    # Logging first so subsequent init logs are formatted as desired
    configure_logging(settings.log)

    app = FastAPI(
        title="Salon Booking API",
        description=(
            "Public read API for the salon website: services, stylists and "
            "availability from Acuity Scheduling, cached briefly with stale "
            "fallback and rate limited per client."
        ),
        version="0.1.0",
        lifespan=_lifespan,
    )

    app.state.cache = cache if cache is not None else StaleFallbackTTLCache()
    app.state.rate_limiter = (
        rate_limiter if rate_limiter is not None else InMemoryFixedWindowRateLimiter()
    )
    app.state.acuity_client = (
        _build_acuity_client() if acuity_client is _UNSET else acuity_client
    )

    # Middleware
    app.middleware("http")(security_headers_middleware)
    app.middleware("http")(request_id_middleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.app.cors_allow_origin],
        allow_methods=["GET", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    # Exception handlers
    setup_exception_handlers(app)

    # Routers
    app.include_router(services_router)
    app.include_router(stylists_router)
    app.include_router(availability_router)
    app.include_router(health_router)

    return app
