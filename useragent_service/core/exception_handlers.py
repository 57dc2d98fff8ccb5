"""Global exception handlers for consistent error responses.

Design:
- RateLimitedError → 429 with Retry-After / X-RateLimit-* headers
- InvalidRequestError and malformed query parameters → 400
- HistoryUnavailableError → 404
- Selection failures (empty catalog, entropy failure, uninitialized
  catalog) → 503 with a generic message
- Any other AppError or unexpected Exception → generic 500

Bodies never carry parse errors, file paths or stack traces; those go to
the logs only. Every body includes the request_id for tracing.
"""

from __future__ import annotations

import logging
import math

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from useragent_service.core.config import settings
from useragent_service.core.errors import (
    AppError,
    CatalogNotInitializedError,
    EmptyCatalogError,
    HistoryUnavailableError,
    InvalidRequestError,
    RandomSourceError,
    RateLimitedError,
)
from useragent_service.core.logging import get_request_id

logger = logging.getLogger(__name__)

SELECTION_UNAVAILABLE_MESSAGE = "Unable to provide a user agent at this time."
INTERNAL_ERROR_MESSAGE = "An unexpected error occurred. Please try again later."

_SELECTION_ERRORS = (EmptyCatalogError, RandomSourceError, CatalogNotInitializedError)


def _error_response(
    status_code: int,
    code: str,
    message: str,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "error": {
                "code": code,
                "message": message,
                "request_id": get_request_id(),
            },
        },
        headers=headers,
    )


async def rate_limited_handler(request: Request, exc: RateLimitedError) -> JSONResponse:
    """Map a rate-limit rejection to 429 Too Many Requests."""

    headers: dict[str, str] = {}
    result = exc.result
    if result is not None and settings.app.rate_limit_include_headers:
        headers["Retry-After"] = str(result.retry_after_seconds or 0)
        headers["X-RateLimit-Limit"] = str(result.limit)
        headers["X-RateLimit-Remaining"] = str(result.remaining)
        headers["X-RateLimit-Reset"] = str(int(math.ceil(result.reset_after_seconds)))

    return _error_response(429, exc.code, exc.message, headers or None)


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Handle domain errors without leaking their internals.

    Args:
        request: FastAPI request object.
        exc: AppError instance (or subclass).

    Returns:
        JSONResponse with the mapped status code.
    """
    if isinstance(exc, InvalidRequestError):
        status_code, message = 400, exc.message
    elif isinstance(exc, HistoryUnavailableError):
        status_code, message = 404, exc.message
    elif isinstance(exc, _SELECTION_ERRORS):
        status_code, message = 503, SELECTION_UNAVAILABLE_MESSAGE
    else:
        status_code, message = 500, INTERNAL_ERROR_MESSAGE

    log = logger.warning if status_code < 500 else logger.error
    log(
        "app_error_handled",
        extra={
            "error_code": exc.code,
            "error_message": exc.message,
            "status_code": status_code,
            "request_path": request.url.path,
        },
    )

    return _error_response(status_code, exc.code, message)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Map unparseable request parameters to 400 in the standard envelope.

    Only the parameter name reaches the client; pydantic's error detail is
    logged.
    """
    errors = exc.errors()
    loc = errors[0].get("loc", ()) if errors else ()
    param = str(loc[-1]) if len(loc) > 1 else None

    logger.warning(
        "request_validation_failed",
        extra={
            "request_path": request.url.path,
            "error_count": len(errors),
            "error_types": [e.get("type") for e in errors],
        },
    )

    if param is None:
        return _error_response(400, "invalid_request", "invalid request parameters")
    return _error_response(400, f"invalid_{param}", f"invalid {param} parameter")


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Fallback handler for unexpected errors (safety net)."""
    logger.error(
        "unhandled_exception",
        extra={
            "error_type": type(exc).__name__,
            "error_msg": str(exc),
            "request_path": request.url.path,
            "request_method": request.method,
        },
    )

    return _error_response(500, "internal_server_error", INTERNAL_ERROR_MESSAGE)


def setup_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI app.

    Specific handlers are registered before the general fallback; Starlette
    picks the most specific class in the exception's MRO.
    """
    app.exception_handler(RateLimitedError)(rate_limited_handler)
    app.exception_handler(RequestValidationError)(request_validation_handler)
    app.exception_handler(AppError)(app_error_handler)
    app.exception_handler(Exception)(general_exception_handler)
