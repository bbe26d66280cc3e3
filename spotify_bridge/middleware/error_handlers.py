"""Exception handlers for the application.

Script failures never reach this layer: the service turns every
CommandError into a safe default. What can reach it is a broken
configuration (raised by get_settings inside Depends), the rate limiter,
and genuine bugs.
"""

from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded

from spotify_bridge.exceptions import ConfigurationException, ErrorCode
from spotify_bridge.logging_config import get_logger, log_with_context

logger = get_logger(__name__)


def error_response(
    status_code: int,
    code: ErrorCode,
    message: str,
    details: dict[str, Any] | None = None,
) -> JSONResponse:
    """Build the ``{"error": {code, message, details}}`` body every handler returns."""
    return JSONResponse(
        status_code=status_code,
        content={"error": {"code": code.value, "message": message, "details": details or {}}},
    )


async def configuration_exception_handler(request: Request, exc: ConfigurationException) -> JSONResponse:
    """Report invalid settings, including which fields failed validation."""
    log_with_context(
        logger,
        "error",
        "Bridge configuration is invalid",
        error_code=exc.code.value,
        error_message=exc.message,
        details=exc.details,
        path=request.url.path,
        event_type="config_error",
    )
    return error_response(exc.status_code, exc.code, exc.message, exc.details)


async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """429 in the same error shape as the other handlers."""
    log_with_context(
        logger,
        "warning",
        "Rate limit exceeded",
        limit=exc.detail,
        path=request.url.path,
        ip=request.client.host if request.client else "unknown",
        event_type="rate_limited",
    )
    return error_response(429, ErrorCode.RATE_LIMITED, f"Rate limit exceeded: {exc.detail}")


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log unexpected exceptions with traceback; never leak them to clients."""
    log_with_context(
        logger,
        "error",
        "Unhandled exception",
        error=str(exc),
        error_type=type(exc).__name__,
        method=request.method,
        path=request.url.path,
        event_type="unhandled_error",
    )
    logger.error("Exception traceback:", exc_info=exc)
    return error_response(500, ErrorCode.INTERNAL_ERROR, "Internal server error")


def register_error_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the application.

    Args:
        app: FastAPI application instance
    """
    app.add_exception_handler(ConfigurationException, configuration_exception_handler)
    app.add_exception_handler(RateLimitExceeded, rate_limit_handler)
    app.add_exception_handler(Exception, general_exception_handler)
