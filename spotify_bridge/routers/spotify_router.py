"""Spotify control routes backed by the AppleScript bridge.

Every route answers with a safe default when Spotify cannot be reached;
the service layer never raises on script failures.
"""

from fastapi import APIRouter, Depends, Query, Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from spotify_bridge.dependencies import get_playback_poller, get_spotify_service
from spotify_bridge.logging_config import get_logger, log_with_context
from spotify_bridge.models import (
    CommandResponse,
    PlaybackState,
    TrackRef,
    TransportCommand,
    VolumeRequest,
    VolumeResponse,
    clamp_volume,
)
from spotify_bridge.security import verify_api_key
from spotify_bridge.services.spotify_service import SpotifyMacService
from spotify_bridge.state_managers import PlaybackPoller

router = APIRouter(dependencies=[Depends(verify_api_key)])
limiter = Limiter(key_func=get_remote_address)
logger = get_logger(__name__)


@router.get(
    "/status",
    response_model=PlaybackState,
    summary="Get Spotify playback status",
    description="""
    Queries Spotify now and returns a fresh snapshot.

    When Spotify is not running the snapshot is
    `{"is_running": false, "is_playing": false, "track_label": null, "volume_percent": 50}`.
    """,
    responses={
        200: {
            "description": "Successful response",
            "content": {
                "application/json": {
                    "example": {
                        "is_running": True,
                        "is_playing": True,
                        "track_label": "Queen - Bohemian Rhapsody",
                        "volume_percent": 65,
                    }
                }
            },
        },
    },
)
async def get_status(poller: PlaybackPoller = Depends(get_playback_poller)) -> PlaybackState:
    """Get a fresh playback snapshot, serialized with commands."""
    return await poller.refresh()


@router.get(
    "/status/latest",
    response_model=PlaybackState | None,
    summary="Get the last polled snapshot",
    description="Returns the snapshot from the most recent poll without querying Spotify, or null before the first poll.",
)
async def get_latest_status(poller: PlaybackPoller = Depends(get_playback_poller)) -> PlaybackState | None:
    return poller.latest


@router.get("/running", summary="Is Spotify running")
async def get_running(service: SpotifyMacService = Depends(get_spotify_service)) -> dict[str, bool]:
    return {"is_running": await service.query_running_state()}


async def _transport(poller: PlaybackPoller, command: TransportCommand) -> CommandResponse:
    async with poller.sequenced() as service:
        accepted = await service.send_transport_command(command)
    log_with_context(
        logger,
        "info",
        "Transport command handled",
        command=command.value,
        accepted=accepted,
        event_type="transport_command",
    )
    return CommandResponse(command=command.value, accepted=accepted)


@router.post(
    "/play-pause",
    response_model=CommandResponse,
    summary="Toggle play/pause",
    responses={200: {"content": {"application/json": {"example": {"command": "play_pause", "accepted": True}}}}},
)
@limiter.limit("60/minute")
async def play_pause(request: Request, poller: PlaybackPoller = Depends(get_playback_poller)) -> CommandResponse:
    return await _transport(poller, TransportCommand.PLAY_PAUSE)


@router.post("/next", response_model=CommandResponse, summary="Skip to next track")
@limiter.limit("60/minute")
async def next_track(request: Request, poller: PlaybackPoller = Depends(get_playback_poller)) -> CommandResponse:
    return await _transport(poller, TransportCommand.NEXT)


@router.post("/previous", response_model=CommandResponse, summary="Go to previous track")
@limiter.limit("60/minute")
async def previous_track(request: Request, poller: PlaybackPoller = Depends(get_playback_poller)) -> CommandResponse:
    return await _transport(poller, TransportCommand.PREVIOUS)


@router.get(
    "/volume",
    response_model=VolumeResponse,
    summary="Get Spotify volume",
    description="Returns the sound volume, or 50 when it cannot be read.",
)
async def get_volume(service: SpotifyMacService = Depends(get_spotify_service)) -> VolumeResponse:
    return VolumeResponse(volume_percent=await service.get_volume())


@router.put(
    "/volume",
    response_model=VolumeResponse,
    summary="Set Spotify volume",
    description="Out-of-range values are clamped to 0-100. The response echoes the clamped value.",
)
@limiter.limit("120/minute")
async def set_volume(
    request: Request,
    body: VolumeRequest,
    poller: PlaybackPoller = Depends(get_playback_poller),
) -> VolumeResponse:
    async with poller.sequenced() as service:
        await service.set_volume(body.percent)
    return VolumeResponse(volume_percent=clamp_volume(body.percent))


@router.post("/volume/up", response_model=VolumeResponse, summary="Raise volume by a step")
async def volume_up(
    amount: int | None = Query(default=None, ge=1, le=100, description="Step (defaults to VOLUME_STEP)"),
    poller: PlaybackPoller = Depends(get_playback_poller),
) -> VolumeResponse:
    async with poller.sequenced() as service:
        volume = await service.increase_volume(amount)
    return VolumeResponse(volume_percent=volume)


@router.post("/volume/down", response_model=VolumeResponse, summary="Lower volume by a step")
async def volume_down(
    amount: int | None = Query(default=None, ge=1, le=100, description="Step (defaults to VOLUME_STEP)"),
    poller: PlaybackPoller = Depends(get_playback_poller),
) -> VolumeResponse:
    async with poller.sequenced() as service:
        volume = await service.decrease_volume(amount)
    return VolumeResponse(volume_percent=volume)


@router.get(
    "/tracks/artist",
    response_model=list[TrackRef],
    summary="Tracks by an artist",
    description="""
    Searches Spotify for tracks by the artist, falling back through simpler searches.

    When every search fails the list holds placeholder entries (`is_placeholder: true`).
    """,
)
async def tracks_by_artist(
    artist: str = Query(min_length=1, description="Artist name"),
    service: SpotifyMacService = Depends(get_spotify_service),
) -> list[TrackRef]:
    return await service.search_tracks_by_artist(artist)


@router.get(
    "/tracks/context",
    response_model=list[TrackRef],
    summary="Tracks by the current artist",
    description="Empty when Spotify is not running or nothing is playing.",
)
async def tracks_for_current_artist(service: SpotifyMacService = Depends(get_spotify_service)) -> list[TrackRef]:
    return await service.get_current_context_tracks()


@router.get("/tracks/recent", response_model=list[TrackRef], summary="Recently played tracks")
async def recent_tracks(service: SpotifyMacService = Depends(get_spotify_service)) -> list[TrackRef]:
    return await service.get_recently_played_tracks()


@router.post("/tracks/play", response_model=CommandResponse, summary="Play a listed track")
@limiter.limit("30/minute")
async def play_track(
    request: Request,
    track: TrackRef,
    poller: PlaybackPoller = Depends(get_playback_poller),
) -> CommandResponse:
    async with poller.sequenced() as service:
        accepted = await service.play_track(track)
    return CommandResponse(command="play_track", accepted=accepted)


@router.post(
    "/tracks/play/{index}",
    response_model=CommandResponse,
    summary="Play the N-th track for the current artist",
    description="1-based index into `/tracks/context`. Out of range is not accepted.",
)
@limiter.limit("30/minute")
async def play_track_at(
    request: Request,
    index: int,
    poller: PlaybackPoller = Depends(get_playback_poller),
) -> CommandResponse:
    async with poller.sequenced() as service:
        accepted = await service.play_track_at(index)
    return CommandResponse(command="play_track_at", accepted=accepted)
