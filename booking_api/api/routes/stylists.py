"""GET /api/stylists: stylists (Acuity calendars)."""

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
from booking_api.data.fallback import fallback_stylists
from booking_api.services.catalog_service import CatalogService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Stylists"])


@router.get("/api/stylists", dependencies=[Depends(rate_limit("api:stylists"))])
async def list_stylists(
    catalog: CatalogService = Depends(get_catalog_service),
) -> JSONResponse:
    """Return all stylists, or the static team list with 503 on failure."""
    try:
        result = await catalog.get_stylists()
    except ConfigurationError:
        logger.warning("stylists.not_configured")
        return fallback_response(
            [stylist.model_dump(by_alias=True) for stylist in fallback_stylists()],
            error=NOT_CONFIGURED_MESSAGE,
            retry_after=NOT_CONFIGURED_RETRY_AFTER,
        )
    except (FetchError, AcuityAPIError) as exc:
        logger.error("stylists.fetch_failed", extra={"error_code": exc.code})
        return fallback_response(
            [stylist.model_dump(by_alias=True) for stylist in fallback_stylists()],
            error=UNAVAILABLE_MESSAGE,
            retry_after=UNAVAILABLE_RETRY_AFTER,
        )

    return cached_response(result)
