"""Application factory for creating and configuring the FastAPI app."""

from fastapi import FastAPI

from spotify_bridge import __version__
from spotify_bridge.config import Settings, get_settings
from spotify_bridge.core.lifespan import lifespan
from spotify_bridge.core.middleware import setup_middleware
from spotify_bridge.middleware.error_handlers import register_error_handlers
from spotify_bridge.routers import health_router, spotify_router


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Settings to use instead of the get_settings() singleton

    Returns:
        Configured FastAPI application instance
    """
    if settings is None:
        settings = get_settings()

    app = FastAPI(
        title="Spotify Bridge API",
        description="""
        🎵 **Spotify Bridge** - Control the Spotify desktop app on macOS

        Commands and queries run as AppleScript through `osascript`.
        Failed scripts never surface as errors: queries fall back to
        "not running" / volume 50 / empty lists.

        ## 🔐 Authentication
        When `BRIDGE_API_KEY` is set, `/api/*` and `/debug` require
        `Authorization: Bearer <key>`.

        ## 📊 Health & Monitoring
        - `/health` - Basic health check
        - `/health/ready` - Interpreter available, Spotify running?
        - `/debug` - Poller state and configuration
        """,
        version=__version__,
        lifespan=lifespan,
        license_info={
            "name": "MIT",
        },
    )
    app.state.settings = settings
    app.dependency_overrides[get_settings] = lambda: settings

    # Configure middleware
    setup_middleware(app, settings)

    # Register exception handlers
    register_error_handlers(app)

    # Health and debug endpoints
    app.include_router(health_router.router, tags=["health"])

    # API routes
    app.include_router(spotify_router.router, prefix="/api/spotify", tags=["spotify"])

    return app
