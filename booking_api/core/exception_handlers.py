"""Global exception handlers for errors that escape a route.

The data routes catch Acuity failures themselves and answer with fallback
content; these handlers only guarantee that anything else still gets the
standard ``{"error": {...}}`` body with a client-safe message.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from booking_api.core.errors import AcuityAPIError, AppError, ConfigurationError, FetchError
from booking_api.core.logging import get_request_id

logger = logging.getLogger(__name__)

# error type -> (status, Retry-After seconds, public message); checked in order
_UPSTREAM_ERRORS: tuple[tuple[type[AppError], int, int, str], ...] = (
    (ConfigurationError, 503, 300, "API not configured"),
    (FetchError, 503, 60, "Service temporarily unavailable"),
    (AcuityAPIError, 503, 60, "Service temporarily unavailable"),
)


def _error_body(code: str, message: str) -> dict:
    return {"error": {"code": code, "message": message, "request_id": get_request_id()}}


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Map an AppError to its HTTP status.

    Configuration and upstream errors become 503 with Retry-After and a fixed
    message; any other AppError is a 400 carrying its own message.
    """
    status_code, headers, message = 400, None, exc.message
    for error_type, error_status, retry_after, public_message in _UPSTREAM_ERRORS:
        if isinstance(exc, error_type):
            status_code = error_status
            headers = {"Retry-After": str(retry_after)}
            message = public_message
            break

    logger.warning(
        "app_error_handled",
        extra={
            "error_code": exc.code,
            "error_message": exc.message,
            "status_code": status_code,
            "request_path": request.url.path,
        },
    )
    return JSONResponse(status_code=status_code, content=_error_body(exc.code, message), headers=headers)


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last-resort 500; the exception text stays in the server log."""
    logger.error(
        "unhandled_exception",
        extra={
            "error_type": type(exc).__name__,
            "error_msg": str(exc),
            "request_path": request.url.path,
            "request_method": request.method,
        },
    )
    return JSONResponse(
        status_code=500,
        content=_error_body(
            "internal_server_error",
            "An unexpected error occurred. Please try again later.",
        ),
    )


def setup_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(Exception, general_exception_handler)
