"""Spotify bridge models"""

from spotify_bridge.models.base_models import (
    BridgeConfigInfo,
    DebugInfo,
    DetailedHealthResponse,
    HealthResponse,
    PollerInfo,
    ReadinessChecks,
    RequestStats,
    SystemInfo,
)
from spotify_bridge.models.spotify import (
    DEFAULT_VOLUME,
    CommandRequest,
    CommandResponse,
    PlaybackState,
    TrackRef,
    TransportCommand,
    VolumeRequest,
    VolumeResponse,
    clamp_volume,
)

__all__ = [
    "DEFAULT_VOLUME",
    "BridgeConfigInfo",
    "CommandRequest",
    "CommandResponse",
    "DebugInfo",
    "DetailedHealthResponse",
    "HealthResponse",
    "PlaybackState",
    "PollerInfo",
    "ReadinessChecks",
    "RequestStats",
    "SystemInfo",
    "TrackRef",
    "TransportCommand",
    "VolumeRequest",
    "VolumeResponse",
    "clamp_volume",
]
