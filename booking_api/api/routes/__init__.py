from __future__ import annotations

from booking_api.api.routes.availability import router as availability_router
from booking_api.api.routes.health import router as health_router
from booking_api.api.routes.services import router as services_router
from booking_api.api.routes.stylists import router as stylists_router

__all__ = ["availability_router", "health_router", "services_router", "stylists_router"]
