"""Error types shared by the Acuity adapter, the cache and the routes.

Every error carries a stable ``code`` for logs and an optional ``details``
mapping for operators; HTTP responses expose only the code and a generic
message.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, NotRequired, TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability.

    Upstream details (status, body excerpt) are meant for server-side logs and
    operator tooling only; HTTP handlers never echo them to clients.
    """

    code: str
    message: str
    hint: str
    http_status: int
    retry_after: float
    endpoint: str
    cache_key: str
    missing: list[str]
    request_id: str
    context: NotRequired[dict[str, Any]]


@dataclass
class AppError(Exception):
    """Base error for the booking API.

    Attributes:
        code: Machine-readable code, e.g. "acuity_timeout".
        message: Human-readable message (never upstream response text).
        details: Operator-facing context such as http_status or cache_key.
    """

    code: str
    message: str
    details: ErrorDetails | None = None

    def __post_init__(self) -> None:
        super().__init__(self.message)


class ConfigurationError(AppError):
    """Raised when required Acuity credentials/environment are absent."""


class FetchError(AppError):
    """Raised when a data fetch fails and no cached value can be served.

    The underlying failure is chained as ``__cause__``.
    """


class AcuityAPIError(AppError):
    """Raised when the Acuity API returns an error, times out, or is unreachable."""
