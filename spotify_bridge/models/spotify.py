"""Pydantic models for Spotify playback state and commands."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

# Reported whenever the real volume cannot be read
DEFAULT_VOLUME = 50

PLACEHOLDER_SEARCH_TITLE = "Click to search for more songs"
PLACEHOLDER_POPULAR_PREFIX = "Popular track"


def clamp_volume(percent: int) -> int:
    """Clamp a volume percentage into [0, 100]."""
    return max(0, min(100, int(percent)))


class TransportCommand(str, Enum):
    """Playback transport commands."""

    NEXT = "next"
    PREVIOUS = "previous"
    PLAY_PAUSE = "play_pause"


class PlaybackState(BaseModel):
    """Snapshot of Spotify playback, produced fresh on every query."""

    model_config = ConfigDict(frozen=True)

    is_running: bool
    is_playing: bool = False
    track_label: str | None = None
    volume_percent: int = DEFAULT_VOLUME

    @field_validator("volume_percent", mode="before")
    @classmethod
    def clamp_volume_percent(cls, v: int) -> int:
        return clamp_volume(v)

    @classmethod
    def not_running(cls) -> "PlaybackState":
        """State reported when Spotify is not running."""
        return cls(is_running=False, is_playing=False, track_label=None, volume_percent=DEFAULT_VOLUME)


class TrackRef(BaseModel):
    """A track as listed by Spotify search: title and artist."""

    model_config = ConfigDict(frozen=True)

    title: str
    artist: str

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_placeholder(self) -> bool:
        """True for the synthetic entries returned when every search failed."""
        return self.title == PLACEHOLDER_SEARCH_TITLE or self.title.startswith(PLACEHOLDER_POPULAR_PREFIX)


class CommandRequest(BaseModel):
    """Literal script text plus its process timeout budget in seconds."""

    script: str = Field(min_length=1)
    timeout: float = Field(default=3.0, gt=0)


class VolumeRequest(BaseModel):
    """Requested volume; out-of-range values are clamped, not rejected."""

    percent: int


class VolumeResponse(BaseModel):
    """Current or requested volume."""

    volume_percent: int


class CommandResponse(BaseModel):
    """Outcome of a transport or playback command."""

    command: str
    accepted: bool
