"""Spotify desktop control via AppleScript.

Every public operation returns a safe default instead of raising: the
callers are live status displays that must keep rendering when a script
fails. Failures are logged.
"""

import asyncio
from collections.abc import Coroutine, Sequence
from typing import Any

from spotify_bridge.config import Settings
from spotify_bridge.exceptions import CommandError, ScriptOutputParseError
from spotify_bridge.logging_config import get_logger, log_with_context
from spotify_bridge.models import PlaybackState, TrackRef, TransportCommand, clamp_volume
from spotify_bridge.models.spotify import PLACEHOLDER_POPULAR_PREFIX, PLACEHOLDER_SEARCH_TITLE
from spotify_bridge.protocols import CommandRunner, TrackSearchStrategy
from spotify_bridge.services import scripts
from spotify_bridge.services.track_search import (
    by_title_and_artist,
    default_strategies,
    parse_track_lines,
    search_with_fallback,
)

logger = get_logger(__name__)

NOT_PLAYING_LABEL = "Not playing"

_TRANSPORT_SCRIPTS = {
    TransportCommand.NEXT: scripts.next_track,
    TransportCommand.PREVIOUS: scripts.previous_track,
    TransportCommand.PLAY_PAUSE: scripts.play_pause,
}


def parse_volume(output: str) -> int:
    """Parse the sound volume reported by Spotify.

    Raises:
        ScriptOutputParseError: If the output is not an integer
    """
    try:
        return clamp_volume(int(output.strip()))
    except ValueError:
        raise ScriptOutputParseError(f"Volume is not an integer: {output!r}", output=output) from None


class SpotifyMacService:
    """Typed operations on the Spotify desktop app."""

    def __init__(
        self,
        runner: CommandRunner,
        settings: Settings,
        strategies: Sequence[TrackSearchStrategy] | None = None,
    ):
        """Initialize the service.

        Args:
            runner: Script runner (normally a ProcessCommandBridge)
            settings: Settings instance
            strategies: Artist search cascade (defaults to popular, simplified, fallback, placeholder)
        """
        self.runner = runner
        self.app = settings.target_application
        self.default_volume = settings.default_volume
        self.volume_step = settings.volume_step
        self.strategies = list(strategies) if strategies is not None else default_strategies(self.app)
        self._pending: set[asyncio.Task[bool]] = set()

    async def _run_or_none(self, script: str, operation: str) -> str | None:
        """Run a script, logging and absorbing any CommandError."""
        try:
            return await self.runner.run(script)
        except CommandError as e:
            log_with_context(
                logger,
                "debug",
                "Spotify script failed, using default",
                operation=operation,
                error=e.message,
                error_code=e.code.value,
                event_type="spotify_script_failed",
            )
            return None

    # Queries

    async def query_running_state(self) -> bool:
        """Check whether the Spotify process exists.

        Returns:
            True if running, False otherwise or on any error.
        """
        output = await self._run_or_none(scripts.is_running(self.app), "query_running_state")
        return output is not None and output.strip().lower() == "true"

    async def query_is_playing(self) -> bool:
        output = await self._run_or_none(scripts.player_state(self.app), "query_is_playing")
        return output is not None and output.strip().lower() == "playing"

    async def query_track_label(self) -> str | None:
        """Get "Artist - Title" for the current track, None when stopped or unknown."""
        output = await self._run_or_none(scripts.track_label(self.app), "query_track_label")
        if not output or output == NOT_PLAYING_LABEL:
            return None
        return output

    async def get_volume(self) -> int:
        """Get the Spotify sound volume.

        Returns:
            Volume in [0, 100]; settings.default_volume when it cannot be read.
        """
        output = await self._run_or_none(scripts.sound_volume(self.app), "get_volume")
        if output is None:
            return self.default_volume
        try:
            return parse_volume(output)
        except ScriptOutputParseError as e:
            log_with_context(
                logger,
                "debug",
                "Unparseable volume, using default",
                output=e.output,
                default_volume=self.default_volume,
                event_type="spotify_volume_parse_error",
            )
            return self.default_volume

    async def query_playback_state(self) -> PlaybackState:
        """Assemble a fresh playback snapshot.

        Short-circuits after the running check when Spotify is not running.
        Each remaining read degrades on its own rather than failing the snapshot.
        """
        if not await self.query_running_state():
            return PlaybackState.not_running()

        return PlaybackState(
            is_running=True,
            is_playing=await self.query_is_playing(),
            track_label=await self.query_track_label(),
            volume_percent=await self.get_volume(),
        )

    async def get_current_artist(self) -> str | None:
        output = await self._run_or_none(scripts.current_artist(self.app), "get_current_artist")
        if not output or not output.strip():
            return None
        return output.strip()

    # Fire-and-forget commands

    def _submit(self, coro: Coroutine[Any, Any, bool]) -> "asyncio.Task[bool]":
        """Schedule a command; keep a reference until it finishes."""
        task = asyncio.create_task(coro)
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _command(self, script: str, operation: str, **context) -> bool:
        try:
            await self.runner.run(script)
        except CommandError as e:
            log_with_context(
                logger,
                "warning",
                "Spotify command failed",
                operation=operation,
                error=e.message,
                error_code=e.code.value,
                event_type="spotify_command_failed",
                **context,
            )
            return False
        log_with_context(
            logger,
            "debug",
            "Spotify command sent",
            operation=operation,
            event_type="spotify_command_sent",
            **context,
        )
        return True

    def send_transport_command(self, command: TransportCommand) -> "asyncio.Task[bool]":
        """Send next/previous/play-pause without waiting for it.

        Must be called from a running event loop.

        Returns:
            Task resolving to True on success, False on a logged failure.
        """
        script = _TRANSPORT_SCRIPTS[command](self.app)
        return self._submit(self._command(script, "transport", command=command.value))

    def play_pause(self) -> "asyncio.Task[bool]":
        return self.send_transport_command(TransportCommand.PLAY_PAUSE)

    def next_track(self) -> "asyncio.Task[bool]":
        return self.send_transport_command(TransportCommand.NEXT)

    def previous_track(self) -> "asyncio.Task[bool]":
        return self.send_transport_command(TransportCommand.PREVIOUS)

    def set_volume(self, percent: int) -> "asyncio.Task[bool]":
        """Set the volume, clamped to [0, 100], without waiting for it."""
        safe_volume = clamp_volume(percent)
        return self._submit(
            self._command(scripts.set_sound_volume(self.app, safe_volume), "set_volume", volume=safe_volume)
        )

    async def _step_volume(self, delta: int) -> int:
        new_volume = clamp_volume(await self.get_volume() + delta)
        await self._command(scripts.set_sound_volume(self.app, new_volume), "step_volume", volume=new_volume)
        return new_volume

    async def increase_volume(self, amount: int | None = None) -> int:
        """Raise the volume by ``amount`` (default settings.volume_step), capped at 100.

        Returns:
            The volume that was requested.
        """
        return await self._step_volume(self.volume_step if amount is None else amount)

    async def decrease_volume(self, amount: int | None = None) -> int:
        """Lower the volume by ``amount`` (default settings.volume_step), floored at 0."""
        return await self._step_volume(-(self.volume_step if amount is None else amount))

    async def wait_for_pending(self) -> None:
        """Wait for every submitted command to finish."""
        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    # Track lists

    async def search_tracks_by_artist(self, artist: str) -> list[TrackRef]:
        """Find tracks by an artist through the search cascade.

        Never empty for a non-empty artist: the last strategy returns placeholders.
        """
        return await search_with_fallback(self.strategies, self.runner, artist)

    async def get_current_context_tracks(self) -> list[TrackRef]:
        """Tracks by the artist of the current track.

        Returns:
            Empty list when Spotify is not running or the artist is unknown.
        """
        if not await self.query_running_state():
            log_with_context(logger, "debug", "Spotify is not running", event_type="spotify_not_running")
            return []

        artist = await self.get_current_artist()
        if artist is None:
            log_with_context(logger, "debug", "Could not determine current artist", event_type="spotify_no_artist")
            return []

        return await self.search_tracks_by_artist(artist)

    async def get_recently_played_tracks(self) -> list[TrackRef]:
        output = await self._run_or_none(scripts.recent_tracks(self.app), "get_recently_played_tracks")
        if not output:
            return []
        return parse_track_lines(output, key=by_title_and_artist)

    async def play_track(self, track: TrackRef) -> bool:
        """Play a track picked from one of the track lists.

        Placeholder entries trigger an artist search instead.

        Returns:
            True if the script ran, False on a logged failure.
        """
        if track.title == PLACEHOLDER_SEARCH_TITLE:
            return await self._command(scripts.search(self.app, track.artist), "search_artist", artist=track.artist)

        if track.title.startswith(PLACEHOLDER_POPULAR_PREFIX):
            suffix = track.title.rsplit(" ", 1)[-1]
            position = int(suffix) if suffix.isdecimal() else 1
            return await self._command(
                scripts.play_search_result(self.app, f"artist:{track.artist}", position),
                "play_popular_track",
                artist=track.artist,
                position=position,
            )

        return await self._command(
            scripts.play_search_result(self.app, f"{track.artist} {track.title}"),
            "play_track",
            artist=track.artist,
            title=track.title,
        )

    async def play_track_at(self, index: int) -> bool:
        """Play the ``index``-th (1-based) track of the current context list."""
        tracks = await self.get_current_context_tracks()
        if index < 1 or index > len(tracks):
            log_with_context(
                logger,
                "debug",
                "Track index out of range",
                index=index,
                available=len(tracks),
                event_type="spotify_track_index_out_of_range",
            )
            return False
        return await self.play_track(tracks[index - 1])
