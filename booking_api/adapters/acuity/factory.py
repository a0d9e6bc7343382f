"""Factory for the Acuity scheduling client."""

from booking_api.adapters.acuity.base import AbstractSchedulingClient
from booking_api.adapters.acuity.http_client import AcuityClient
from booking_api.core.config import AcuitySettings, settings
from booking_api.core.errors import ConfigurationError


def is_acuity_configured(acuity_settings: AcuitySettings | None = None) -> bool:
    """Return True when both Acuity credentials are present."""
    return (acuity_settings or settings.acuity).is_configured


def create_acuity_client(acuity_settings: AcuitySettings | None = None) -> AbstractSchedulingClient:
    """Instantiate the Acuity client from settings.

    Returns:
        AbstractSchedulingClient: Configured client instance.

    Raises:
        ConfigurationError: If ACUITY_USER_ID or ACUITY_API_KEY is not set.
    """
    cfg = acuity_settings or settings.acuity

    missing = [
        name
        for name, value in (("ACUITY_USER_ID", cfg.user_id), ("ACUITY_API_KEY", cfg.api_key))
        if not value
    ]
    if missing:
        raise ConfigurationError(
            code="acuity_not_configured",
            message="Missing ACUITY_USER_ID or ACUITY_API_KEY environment variables",
            details={"missing": missing},
        )

    return AcuityClient(
        user_id=cfg.user_id,  # type: ignore[arg-type]
        api_key=cfg.api_key,  # type: ignore[arg-type]
        base_url=cfg.base_url,
        timeout_seconds=cfg.timeout_seconds,
    )
