from booking_api.adapters.acuity.base import AbstractSchedulingClient
from booking_api.adapters.acuity.factory import create_acuity_client, is_acuity_configured
from booking_api.adapters.acuity.http_client import AcuityClient

__all__ = [
    "AbstractSchedulingClient",
    "AcuityClient",
    "create_acuity_client",
    "is_acuity_configured",
]
