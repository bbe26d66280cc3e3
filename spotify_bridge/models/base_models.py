"""Pydantic models for the health and debug probes."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from spotify_bridge.models.spotify import PlaybackState

SpotifyProcessCheck = Literal["running", "not_running", "unknown"]


class HealthResponse(BaseModel):
    """Liveness: the API process answers."""

    status: str
    version: str


class ReadinessChecks(BaseModel):
    """What the bridge needs to reach Spotify."""

    interpreter: str = Field(..., description='"ok" or "missing: <path>"')
    spotify: SpotifyProcessCheck = Field(..., description="Spotify process state; informational only")


class DetailedHealthResponse(BaseModel):
    """Readiness: can scripts be run against Spotify right now?"""

    status: Literal["healthy", "unhealthy"]
    version: str
    timestamp: datetime
    interpreter_path: str = Field(..., description="Configured osascript executable")
    target_application: str
    checks: ReadinessChecks


class SystemInfo(BaseModel):
    version: str
    python_version: str
    platform: str
    uptime_seconds: int
    log_level: str


class PollerInfo(BaseModel):
    """Background poller and command queue state."""

    running: bool
    interval_seconds: float
    poll_count: int
    latest_snapshot: PlaybackState | None = Field(None, description="Null before the first poll")
    pending_commands: int = Field(..., description="Fire-and-forget commands not finished yet")


class BridgeConfigInfo(BaseModel):
    """Effective bridge settings; the API key itself is never reported."""

    osascript_path: str
    target_application: str
    process_timeout: float
    call_timeout: float
    poll_interval: float
    poller_enabled: bool
    api_key_required: bool
    trusted_hosts: list[str]


class RequestStats(BaseModel):
    total_requests: int
    slow_requests: int = Field(..., description="Requests that took longer than call_timeout")


class DebugInfo(BaseModel):
    """Everything /debug reports."""

    system: SystemInfo
    poller: PollerInfo
    config: BridgeConfigInfo
    requests: RequestStats
