"""Global exception handlers for consistent error responses.

Design:
- RateLimitExceededError → 429 with a plain-text body and nothing else
- Other AppError subclasses → JSON error envelope with a mapped status
- Unexpected Exception → generic 500 (safety net)
"""

import logging

from fastapi import Request, status
from fastapi.responses import JSONResponse, PlainTextResponse

from quotagate.core.errors import (
    AppError,
    AuthenticationAppError,
    CounterStoreError,
    CredentialValidationError,
    RateLimitExceededError,
)
from quotagate.core.logging import get_request_id

logger = logging.getLogger(__name__)


def _status_for(exc: AppError) -> int:
    if isinstance(exc, CredentialValidationError):
        return status.HTTP_401_UNAUTHORIZED
    if isinstance(exc, AuthenticationAppError):
        return status.HTTP_403_FORBIDDEN
    if isinstance(exc, CounterStoreError):
        return status.HTTP_503_SERVICE_UNAVAILABLE
    return status.HTTP_400_BAD_REQUEST


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceededError) -> PlainTextResponse:
    """Reject a throttled request.

    The body is the same for every denial reason so callers cannot tell an
    exhausted quota from a rejected credential or a store outage.
    """
    logger.info(
        "rate_limit.rejected",
        extra={
            "request_path": request.url.path,
            "request_method": request.method,
        },
    )
    return PlainTextResponse(exc.message, status_code=status.HTTP_429_TOO_MANY_REQUESTS)


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Handle domain application errors with consistent JSON format.

    Status mapping:
    - CredentialValidationError → 401 Unauthorized
    - AuthenticationAppError → 403 Forbidden
    - CounterStoreError → 503 Service Unavailable
    - anything else (ValidationAppError) → 400 Bad Request

    Args:
        request: FastAPI request object.
        exc: AppError instance (or subclass).

    Returns:
        JSONResponse with appropriate status code and error details.
    """
    status_code = _status_for(exc)

    logger.warning(
        "app_error_handled",
        extra={
            "error_code": exc.code,
            "error_message": exc.message,
            "status_code": status_code,
            "has_details": bool(exc.details),
        },
    )

    error_content = {
        "code": exc.code,
        "message": exc.message,
        "request_id": get_request_id(),
    }
    if exc.details:
        error_content["details"] = exc.details

    return JSONResponse(status_code=status_code, content={"error": error_content})


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Fallback handler for unexpected errors; never leaks internals."""
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
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": {
                "code": "internal_server_error",
                "message": "An unexpected error occurred. Please try again later.",
                "request_id": get_request_id(),
            }
        },
    )


def setup_exception_handlers(app) -> None:
    """Register all exception handlers with the FastAPI app.

    Starlette resolves handlers by walking the exception MRO, so the
    RateLimitExceededError handler wins over the AppError one.
    """
    app.exception_handler(RateLimitExceededError)(rate_limit_exceeded_handler)
    app.exception_handler(AppError)(app_error_handler)
    app.exception_handler(Exception)(general_exception_handler)
