"""FastAPI dependencies for dependency injection."""

from fastapi import Request

from spotify_bridge.services.process_bridge import ProcessCommandBridge
from spotify_bridge.services.spotify_service import SpotifyMacService
from spotify_bridge.state_managers import PlaybackPoller


async def get_process_bridge(request: Request) -> ProcessCommandBridge:
    """
    Get the shared process bridge from app state.

    Args:
        request: The FastAPI request object.

    Returns:
        The shared ProcessCommandBridge instance.

    Raises:
        RuntimeError: If the bridge is not initialized.
    """
    bridge: ProcessCommandBridge | None = getattr(request.app.state, "process_bridge", None)

    if bridge is None:
        raise RuntimeError("Process bridge not initialized. This should never happen.")

    return bridge


async def get_spotify_service(request: Request) -> SpotifyMacService:
    """
    Get the Spotify service from app state.

    Args:
        request: The FastAPI request object.

    Returns:
        The shared SpotifyMacService instance.

    Raises:
        RuntimeError: If the Spotify service is not initialized.
    """
    service: SpotifyMacService | None = getattr(request.app.state, "spotify_service", None)

    if service is None:
        raise RuntimeError("Spotify service not initialized.")

    return service


async def get_playback_poller(request: Request) -> PlaybackPoller:
    """
    Get the playback poller from app state.

    Args:
        request: The FastAPI request object.

    Returns:
        The shared PlaybackPoller instance.

    Raises:
        RuntimeError: If the poller is not initialized.
    """
    poller: PlaybackPoller | None = getattr(request.app.state, "playback_poller", None)

    if poller is None:
        raise RuntimeError("Playback poller not initialized.")

    return poller
