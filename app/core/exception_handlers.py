"""Global exception handlers for consistent error responses.

Every error body has the shape::

    {"error": {"code": ..., "message": ..., "request_id": ..., "details": ...}}

Status mapping:
- ValidationAppError → 400
- AuthenticationAppError → 403
- RateLimitAppError → 429 (with Retry-After when configured)
- DeliveryAppError → 502
- StoreError / any other AppError → 500
- RequestValidationError (malformed JSON, missing body, bad query) → 400
- unexpected Exception → generic 500 without internals
"""

import logging

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.core.config import settings
from app.core.errors import (
    AppError,
    AuthenticationAppError,
    DeliveryAppError,
    RateLimitAppError,
    StoreError,
    ValidationAppError,
)
from app.core.logging import get_request_id

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR: list[tuple[type[AppError], int]] = [
    (ValidationAppError, 400),
    (AuthenticationAppError, 403),
    (RateLimitAppError, 429),
    (DeliveryAppError, 502),
    (StoreError, 500),
]


def status_for(exc: AppError) -> int:
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    return 500


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Render a domain error with its mapped HTTP status."""
    status_code = status_for(exc)

    logger.warning(
        "app_error_handled",
        extra={
            "error_code": exc.code,
            "error_message": exc.message,
            "status_code": status_code,
            "has_details": bool(exc.details),
            "request_path": request.url.path,
        },
    )

    error_content = {
        "code": exc.code,
        "message": exc.message,
        "request_id": get_request_id(),
    }
    if exc.details:
        error_content["details"] = exc.details

    headers: dict[str, str] = {}
    if isinstance(exc, RateLimitAppError) and settings.app.rate_limit_include_headers:
        details = exc.details or {}
        if "retry_after" in details:
            headers["Retry-After"] = str(details["retry_after"])
        if "limit" in details:
            headers["X-RateLimit-Limit"] = str(details["limit"])
            headers["X-RateLimit-Remaining"] = str(details.get("remaining", 0))

    return JSONResponse(
        status_code=status_code,
        content={"error": error_content},
        headers=headers or None,
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render framework-level request validation failures in the error envelope."""
    errors = exc.errors()
    loc = tuple(errors[0].get("loc", ())) if errors else ()
    if loc[:1] == ("body",):
        error = ValidationAppError(code="invalid_request_body", message="Invalid request body")
    else:
        field = ".".join(str(part) for part in loc[1:])
        error = ValidationAppError(
            code="invalid_request",
            message=f"Invalid value for '{field}'" if field else "Invalid request",
            details={"field": field} if field else None,
        )
    return await app_error_handler(request, error)


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Fallback for unexpected errors; never leaks exception text to clients."""
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
        content={
            "error": {
                "code": "internal_server_error",
                "message": "Internal server error",
                "request_id": get_request_id(),
            }
        },
    )


def setup_exception_handlers(app) -> None:
    """Register the handlers on a FastAPI app (specific before general)."""
    app.exception_handler(AppError)(app_error_handler)
    app.exception_handler(RequestValidationError)(request_validation_handler)
    app.exception_handler(Exception)(general_exception_handler)
