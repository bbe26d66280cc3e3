"""Liveness, readiness and debug probes."""

import platform
import time
from datetime import UTC, datetime

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from spotify_bridge import __version__
from spotify_bridge.config import Settings, get_settings
from spotify_bridge.dependencies import get_playback_poller, get_process_bridge, get_spotify_service
from spotify_bridge.models import (
    BridgeConfigInfo,
    DebugInfo,
    DetailedHealthResponse,
    HealthResponse,
    PollerInfo,
    ReadinessChecks,
    RequestStats,
    SystemInfo,
)
from spotify_bridge.security import get_trusted_hosts, verify_api_key
from spotify_bridge.services.process_bridge import ProcessCommandBridge
from spotify_bridge.services.spotify_service import SpotifyMacService
from spotify_bridge.state_managers import PlaybackPoller

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Liveness only; never runs a script. Use `/health/ready` for the bridge itself."""
    return HealthResponse(status="ok", version=__version__)


@router.get(
    "/health/ready",
    response_model=DetailedHealthResponse,
    responses={503: {"model": DetailedHealthResponse, "description": "osascript not found"}},
)
async def readiness_check(
    bridge: ProcessCommandBridge = Depends(get_process_bridge),
    service: SpotifyMacService = Depends(get_spotify_service),
):
    """Readiness probe.

    503 only when the interpreter is missing. A closed Spotify is reported in
    `checks.spotify` but is not a failure: the bridge works and answers with
    not-running defaults.
    """
    if bridge.interpreter_available():
        is_running = await service.query_running_state()
        checks = ReadinessChecks(interpreter="ok", spotify="running" if is_running else "not_running")
    else:
        # Without osascript the Spotify check would only time out or fail
        checks = ReadinessChecks(interpreter=f"missing: {bridge.interpreter}", spotify="unknown")

    healthy = checks.interpreter == "ok"
    body = DetailedHealthResponse(
        status="healthy" if healthy else "unhealthy",
        version=__version__,
        timestamp=datetime.now(UTC),
        interpreter_path=bridge.interpreter,
        target_application=service.app,
        checks=checks,
    )
    return JSONResponse(status_code=200 if healthy else 503, content=body.model_dump(mode="json"))


@router.get(
    "/debug",
    response_model=DebugInfo,
    dependencies=[Depends(verify_api_key)],
    responses={401: {"description": "Unauthorized - missing or invalid API key"}},
)
async def debug_info(
    request: Request,
    service: SpotifyMacService = Depends(get_spotify_service),
    poller: PlaybackPoller = Depends(get_playback_poller),
    settings: Settings = Depends(get_settings),
) -> DebugInfo:
    """Poller state, pending commands, effective settings and request counters."""
    state = request.app.state
    return DebugInfo(
        system=SystemInfo(
            version=__version__,
            python_version=platform.python_version(),
            platform=f"{platform.system()} {platform.mac_ver()[0] or platform.release()}",
            uptime_seconds=int(time.time() - state.startup_time),
            log_level=settings.log_level,
        ),
        poller=PollerInfo(
            running=poller.running,
            interval_seconds=poller.interval,
            poll_count=poller.poll_count,
            latest_snapshot=poller.latest,
            pending_commands=service.pending_count,
        ),
        config=BridgeConfigInfo(
            osascript_path=settings.osascript_path,
            target_application=settings.target_application,
            process_timeout=settings.process_timeout,
            call_timeout=settings.call_timeout,
            poll_interval=settings.poll_interval,
            poller_enabled=settings.poller_enabled,
            api_key_required=bool(settings.bridge_api_key),
            trusted_hosts=get_trusted_hosts(settings),
        ),
        requests=RequestStats(
            total_requests=state.request_count,
            slow_requests=state.slow_request_count,
        ),
    )
