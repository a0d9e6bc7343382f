"""GET /api/services: services grouped by category."""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from booking_api.api.responses import (
    NOT_CONFIGURED_MESSAGE,
    NOT_CONFIGURED_RETRY_AFTER,
    UNAVAILABLE_MESSAGE,
    UNAVAILABLE_RETRY_AFTER,
    cached_response,
    fallback_response,
)
from booking_api.core.dependencies import get_catalog_service
from booking_api.core.errors import AcuityAPIError, ConfigurationError, FetchError
from booking_api.core.rate_limit import rate_limit
from booking_api.data.fallback import fallback_services
from booking_api.services.catalog_service import CatalogService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Services"])


@router.get("/api/services", dependencies=[Depends(rate_limit("api:services"))])
async def list_services(
    catalog: CatalogService = Depends(get_catalog_service),
) -> JSONResponse:
    """Return active, public services grouped by category.

    Serves the static menu with 503 when Acuity is not configured or fails
    with nothing cached.
    """
    try:
        result = await catalog.get_services()
    except ConfigurationError:
        logger.warning("services.not_configured")
        return fallback_response(
            [category.model_dump(by_alias=True) for category in fallback_services()],
            error=NOT_CONFIGURED_MESSAGE,
            retry_after=NOT_CONFIGURED_RETRY_AFTER,
        )
    except (FetchError, AcuityAPIError) as exc:
        logger.error("services.fetch_failed", extra={"error_code": exc.code})
        return fallback_response(
            [category.model_dump(by_alias=True) for category in fallback_services()],
            error=UNAVAILABLE_MESSAGE,
            retry_after=UNAVAILABLE_RETRY_AFTER,
        )

    return cached_response(result)
