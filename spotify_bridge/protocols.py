"""Protocol definitions for dependency injection."""

from typing import Protocol

from spotify_bridge.models import TrackRef


class CommandRunner(Protocol):
    """Protocol for anything that runs script text and returns its output.

    ProcessCommandBridge is the real implementation; tests substitute mocks.
    """

    async def run(self, script: str, timeout: float | None = None) -> str:
        """Run a script.

        Args:
            script: Script text
            timeout: Process timeout in seconds

        Returns:
            Trimmed script output
        """
        ...


class TrackSearchStrategy(Protocol):
    """One step of the artist track search cascade."""

    name: str

    async def find(self, runner: CommandRunner, artist: str) -> list[TrackRef]:
        """Find tracks for an artist.

        Args:
            runner: Script runner
            artist: Artist name

        Returns:
            Tracks found, empty when this strategy has nothing
        """
        ...
