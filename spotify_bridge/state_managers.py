"""Long-lived playback state owned by the app lifespan.

The bridge holds no state. The poller keeps the latest snapshot and owns the
lock that orders polls against user commands.
"""

import asyncio
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager

from spotify_bridge.logging_config import get_logger, log_with_context
from spotify_bridge.models import PlaybackState
from spotify_bridge.services.spotify_service import SpotifyMacService

logger = get_logger(__name__)

PlaybackListener = Callable[[PlaybackState], Awaitable[None] | None]


class StateManager(ABC):
    """Component started and stopped by the app lifespan."""

    @abstractmethod
    async def initialize(self) -> None:
        """Start background work (app startup)."""
        pass

    @abstractmethod
    async def cleanup(self) -> None:
        """Stop background work and wait for it (app shutdown)."""
        pass


class PlaybackPoller(StateManager):
    """Polls Spotify on a fixed interval and hands each snapshot to listeners.

    Poll cycles and user commands share one lock (see ``sequenced``) so a
    command never lands between the reads of a poll.
    """

    def __init__(self, service: SpotifyMacService, interval: float = 3.0):
        """Initialize the poller.

        Args:
            service: Spotify service to poll
            interval: Seconds between polls
        """
        self._service = service
        self._interval = interval
        self._lock = asyncio.Lock()
        self._listeners: list[PlaybackListener] = []
        self._latest: PlaybackState | None = None
        self._task: asyncio.Task[None] | None = None
        self._poll_count = 0

    async def initialize(self) -> None:
        """Start the poll loop."""
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self._run())
            log_with_context(
                logger,
                "info",
                "Playback poller started",
                interval=self._interval,
                event_type="poller_started",
            )

    async def cleanup(self) -> None:
        """Stop the poll loop and wait for it to exit."""
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
            log_with_context(logger, "info", "Playback poller stopped", event_type="poller_stopped")

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def latest(self) -> PlaybackState | None:
        """Last snapshot delivered to listeners, None before the first poll."""
        return self._latest

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def poll_count(self) -> int:
        return self._poll_count

    def subscribe(self, listener: PlaybackListener) -> Callable[[], None]:
        """Register a listener for every snapshot.

        Returns:
            Callable that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    @asynccontextmanager
    async def sequenced(self) -> AsyncIterator[SpotifyMacService]:
        """Hold the poll lock while issuing commands.

        Example:
            async with poller.sequenced() as service:
                await service.play_pause()
        """
        async with self._lock:
            yield self._service

    async def refresh(self) -> PlaybackState:
        """Poll once now and deliver the snapshot."""
        async with self._lock:
            state = await self._service.query_playback_state()
        self._latest = state
        self._poll_count += 1
        await self._notify(state)
        return state

    async def _notify(self, state: PlaybackState) -> None:
        for listener in list(self._listeners):
            try:
                result = listener(state)
                if result is not None:
                    await result
            except Exception as e:
                log_with_context(
                    logger,
                    "warning",
                    "Playback listener failed",
                    error=str(e),
                    error_type=type(e).__name__,
                    event_type="poller_listener_error",
                )

    async def _run(self) -> None:
        while True:
            await self.refresh()
            await asyncio.sleep(self._interval)
