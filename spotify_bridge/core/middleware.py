"""Middleware configuration."""

import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from slowapi import Limiter
from slowapi.util import get_remote_address

from spotify_bridge.config import Settings
from spotify_bridge.logging_config import get_logger, log_with_context
from spotify_bridge.security import get_trusted_hosts

logger = get_logger(__name__)

# Any port on this machine; the bridge drives a desktop app and is never remote
LOCAL_ORIGIN_PATTERN = r"http://(localhost|127\.0\.0\.1)(:\d+)?"

# A status client polls every few seconds and issues a command burst on top
DEFAULT_RATE_LIMIT = "120/minute"


def setup_middleware(app: FastAPI, settings: Settings) -> Limiter:
    """Install CORS, trusted hosts, the rate limiter and request timing.

    Args:
        app: FastAPI application instance
        settings: Application settings

    Returns:
        Limiter instance for rate limiting
    """
    app.add_middleware(
        CORSMiddleware,
        allow_origin_regex=LOCAL_ORIGIN_PATTERN,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT"],
        allow_headers=["Authorization", "Content-Type"],
    )

    trusted_hosts = get_trusted_hosts(settings)
    log_with_context(
        logger,
        "info",
        "Configuring CORS and TrustedHost middleware",
        event_type="security_config",
        origin_pattern=LOCAL_ORIGIN_PATTERN,
        hosts=trusted_hosts,
    )
    app.add_middleware(TrustedHostMiddleware, allowed_hosts=trusted_hosts)

    limiter = Limiter(key_func=get_remote_address, default_limits=[DEFAULT_RATE_LIMIT])
    app.state.limiter = limiter

    slow_after = settings.call_timeout

    @app.middleware("http")
    async def time_requests(request: Request, call_next):
        """Count requests and flag those that outlived one bridge call bound."""
        app.state.request_count += 1
        started = time.perf_counter()
        response = await call_next(request)
        elapsed = time.perf_counter() - started

        if elapsed > slow_after:
            app.state.slow_request_count += 1
            log_with_context(
                logger,
                "warning",
                "Slow request",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                elapsed_seconds=round(elapsed, 3),
                call_timeout=slow_after,
                event_type="slow_request",
            )
        return response

    return limiter
