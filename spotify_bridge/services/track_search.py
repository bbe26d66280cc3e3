"""Artist track search with an ordered fallback cascade.

Strategies are tried in order and the first non-empty result wins:
popular tracks, then a simplified artist search, then a plain search, then
synthetic placeholders so the caller always has something to show.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable, Hashable, Sequence

from spotify_bridge.exceptions import CommandError
from spotify_bridge.logging_config import get_logger, log_with_context
from spotify_bridge.models import TrackRef
from spotify_bridge.models.spotify import PLACEHOLDER_POPULAR_PREFIX, PLACEHOLDER_SEARCH_TITLE
from spotify_bridge.protocols import CommandRunner, TrackSearchStrategy
from spotify_bridge.services import scripts

logger = get_logger(__name__)

ERROR_PREFIX = "ERROR:"


def by_title(track: TrackRef) -> Hashable:
    return track.title


def by_title_and_artist(track: TrackRef) -> Hashable:
    return (track.title, track.artist)


def parse_track_lines(output: str, key: Callable[[TrackRef], Hashable] = by_title) -> list[TrackRef]:
    """Parse ``name::artist`` lines into tracks, dropping duplicates by ``key``.

    Lines without exactly one separator are skipped. The first occurrence of
    each key is kept, in output order.
    """
    tracks: list[TrackRef] = []
    seen: set[Hashable] = set()

    for line in output.splitlines():
        parts = line.strip().split(scripts.TRACK_FIELD_SEPARATOR)
        if len(parts) != 2:
            continue
        track = TrackRef(title=parts[0], artist=parts[1])
        track_key = key(track)
        if track_key in seen:
            continue
        seen.add(track_key)
        tracks.append(track)

    return tracks


class ScriptedSearchStrategy(ABC):
    """Strategy that runs one search script and parses its lines."""

    name = "scripted"

    def __init__(self, app: str):
        self.app = app

    @abstractmethod
    def build_script(self, artist: str) -> str:
        """Script whose output is one ``name::artist`` line per track."""
        pass

    def parse(self, output: str) -> list[TrackRef]:
        return parse_track_lines(output)

    async def find(self, runner: CommandRunner, artist: str) -> list[TrackRef]:
        try:
            output = await runner.run(self.build_script(artist))
        except CommandError as e:
            log_with_context(
                logger,
                "debug",
                "Track search strategy failed",
                strategy=self.name,
                artist=artist,
                error=e.message,
                error_code=e.code.value,
                event_type="track_search_strategy_failed",
            )
            return []

        tracks = self.parse(output)
        log_with_context(
            logger,
            "debug",
            "Track search strategy finished",
            strategy=self.name,
            artist=artist,
            found=len(tracks),
            event_type="track_search_strategy_done",
        )
        return tracks


class PopularTracksStrategy(ScriptedSearchStrategy):
    """Current track plus the artist's own search hits."""

    name = "popular"

    def build_script(self, artist: str) -> str:
        return scripts.artist_popular_tracks(self.app, artist)

    def parse(self, output: str) -> list[TrackRef]:
        if output.startswith(ERROR_PREFIX):
            log_with_context(
                logger,
                "debug",
                "Popular tracks script reported an error",
                output=output,
                event_type="track_search_script_error",
            )
            return []
        return parse_track_lines(output)


class SimplifiedSearchStrategy(ScriptedSearchStrategy):
    """Current track plus ``artist:<name>`` hits, without filtering by artist."""

    name = "simplified"

    def build_script(self, artist: str) -> str:
        return scripts.artist_search_tracks(self.app, artist)


class FallbackSearchStrategy(ScriptedSearchStrategy):
    """Plain search for the artist name."""

    name = "fallback"

    def build_script(self, artist: str) -> str:
        return scripts.plain_search_tracks(self.app, artist, limit=10)


class PlaceholderStrategy:
    """Synthetic entries for the artist; never empty.

    TODO: these look like real results to a listener; replace with an explicit
    "no results" state once the HTTP clients can render one.
    """

    name = "placeholder"

    async def find(self, runner: CommandRunner, artist: str) -> list[TrackRef]:
        return placeholder_tracks(artist)


def placeholder_tracks(artist: str) -> list[TrackRef]:
    return [
        TrackRef(title=PLACEHOLDER_SEARCH_TITLE, artist=artist),
        *(TrackRef(title=f"{PLACEHOLDER_POPULAR_PREFIX} {n}", artist=artist) for n in range(1, 4)),
    ]


def default_strategies(app: str) -> list[TrackSearchStrategy]:
    return [
        PopularTracksStrategy(app),
        SimplifiedSearchStrategy(app),
        FallbackSearchStrategy(app),
        PlaceholderStrategy(),
    ]


async def search_with_fallback(
    strategies: Sequence[TrackSearchStrategy],
    runner: CommandRunner,
    artist: str,
) -> list[TrackRef]:
    """Try each strategy in order; return the first non-empty result.

    Args:
        strategies: Strategies in priority order
        runner: Script runner
        artist: Artist to search for

    Returns:
        Tracks from the first strategy that found any, or an empty list
    """
    for strategy in strategies:
        tracks = await strategy.find(runner, artist)
        if tracks:
            log_with_context(
                logger,
                "info",
                "Artist tracks found",
                strategy=strategy.name,
                artist=artist,
                count=len(tracks),
                event_type="track_search_done",
            )
            return tracks
    return []
