"""GET /api/availability/{calendar_id}: open slots for one stylist and service."""

import logging

from fastapi import APIRouter, Depends, Query
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
from booking_api.schemas.site import AvailabilityView
from booking_api.services.catalog_service import CatalogService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Availability"])


@router.get(
    "/api/availability/{calendar_id}",
    dependencies=[Depends(rate_limit("api:availability"))],
)
async def get_availability(
    calendar_id: int,
    appointment_type_id: int = Query(..., alias="appointmentTypeId", ge=1),
    date: str | None = Query(
        None,
        pattern=r"^\d{4}-\d{2}-\d{2}$",
        description="YYYY-MM-DD; omit to get the next open slot",
    ),
    catalog: CatalogService = Depends(get_catalog_service),
) -> JSONResponse:
    """Return open time slots on a date, or the next open slot.

    On failure the payload is an empty availability view (no slots, no
    next slot) so the site can fall back to its booking link.
    """
    try:
        result = await catalog.get_availability(calendar_id, appointment_type_id, date)
    except (ConfigurationError, FetchError, AcuityAPIError) as exc:
        empty = AvailabilityView(
            calendar_id=calendar_id,
            appointment_type_id=appointment_type_id,
            date=date,
        ).model_dump(by_alias=True, exclude_none=True)
        if isinstance(exc, ConfigurationError):
            logger.warning("availability.not_configured")
            return fallback_response(
                empty,
                error=NOT_CONFIGURED_MESSAGE,
                retry_after=NOT_CONFIGURED_RETRY_AFTER,
            )
        logger.error(
            "availability.fetch_failed",
            extra={"error_code": exc.code, "calendar_id": calendar_id},
        )
        return fallback_response(
            empty,
            error=UNAVAILABLE_MESSAGE,
            retry_after=UNAVAILABLE_RETRY_AFTER,
        )

    return cached_response(result)
