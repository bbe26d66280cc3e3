"""Application lifespan management."""

import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from spotify_bridge import __version__
from spotify_bridge.config import Settings, get_settings
from spotify_bridge.logging_config import get_logger, log_with_context
from spotify_bridge.models import PlaybackState
from spotify_bridge.services.process_bridge import ProcessCommandBridge
from spotify_bridge.services.spotify_service import SpotifyMacService
from spotify_bridge.state_managers import PlaybackPoller

logger = get_logger(__name__)


async def log_playback_change(state: PlaybackState) -> None:
    """Poller listener that logs snapshots at debug level."""
    log_with_context(
        logger,
        "debug",
        "Playback snapshot",
        is_running=state.is_running,
        is_playing=state.is_playing,
        track_label=state.track_label,
        volume_percent=state.volume_percent,
        event_type="playback_snapshot",
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifespan - startup and shutdown events.

    Exceptions after yield are logged and re-raised so cleanup still runs.
    """
    app.state.startup_time = time.time()
    app.state.request_count = 0
    app.state.slow_request_count = 0
    settings: Settings = getattr(app.state, "settings", None) or get_settings()

    log_with_context(
        logger,
        "info",
        "Starting Spotify bridge",
        version=__version__,
        interpreter=settings.osascript_path,
        target_application=settings.target_application,
        event_type="app_startup",
    )

    # Store in app state instead of global variables
    bridge = ProcessCommandBridge(settings)
    service = SpotifyMacService(bridge, settings)
    poller = PlaybackPoller(service, interval=settings.poll_interval)
    poller.subscribe(log_playback_change)

    app.state.process_bridge = bridge
    app.state.spotify_service = service
    app.state.playback_poller = poller

    if not bridge.interpreter_available():
        log_with_context(
            logger,
            "warning",
            "Script interpreter not found; every Spotify query will return defaults",
            interpreter=settings.osascript_path,
            event_type="interpreter_missing",
        )

    if settings.poller_enabled:
        await poller.initialize()

    try:
        yield
    except Exception as e:
        log_with_context(
            logger,
            "error",
            "Application error during lifespan",
            error=str(e),
            error_type=type(e).__name__,
            event_type="app_error",
        )
        raise
    finally:
        log_with_context(
            logger,
            "info",
            "Shutting down Spotify bridge",
            event_type="app_shutdown",
        )

        await poller.cleanup()
        await service.wait_for_pending()
        log_with_context(
            logger,
            "info",
            "Pending Spotify commands finished",
            event_type="pending_commands_done",
        )
