"""Bridge settings loaded from the environment and .env."""

from pathlib import Path

from pydantic import Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from spotify_bridge.exceptions import ConfigurationException, ErrorCode

BASE_DIR = Path(__file__).resolve().parent.parent  # spotify-mac-bridge/


class Settings(BaseSettings):
    """Bridge settings with validation.

    Every field has a default matching the status-bar widget timings, so the
    bridge runs without a .env file. Values can be overridden via environment
    variables or .env.

    Uses Pydantic v2 API:
    - model_config with SettingsConfigDict
    - @field_validator / @model_validator decorators
    """

    # API server settings
    api_host: str = Field(default="127.0.0.1", min_length=1, description="API server host")
    api_port: int = Field(ge=1, le=65535, default=8765, description="API server port")
    log_level: str = Field(default="INFO", description="Root log level")

    # Script interpreter
    osascript_path: str = Field(default="osascript", min_length=1, description="Script interpreter executable")
    target_application: str = Field(default="Spotify", min_length=1, description="Application the scripts control")

    # Timeouts (seconds)
    process_timeout: float = Field(default=3.0, gt=0, description="Inner wait for the interpreter process")
    call_timeout: float = Field(default=5.0, gt=0, description="Outer bound on one bridge call")
    poll_interval: float = Field(default=3.0, gt=0, description="Seconds between playback polls")
    poller_enabled: bool = Field(default=True, description="Poll playback in the background while serving")

    # Volume
    default_volume: int = Field(default=50, ge=0, le=100, description="Reported when the volume is unknown")
    volume_step: int = Field(default=10, ge=1, le=100, description="Step for volume up/down")

    # Security
    bridge_api_key: str = Field(default="", description="Bearer key for /api routes (empty disables the check)")
    trusted_hosts: str = Field(default="localhost,127.0.0.1,testserver", description="Comma-separated hosts")

    model_config = SettingsConfigDict(
        env_file=Path(BASE_DIR / ".env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        validate_default=True,
    )

    @field_validator("log_level", mode="after")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure log_level names a standard logging level."""
        v = v.strip().upper()
        if v not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"log_level must be a standard logging level, got {v!r}")
        return v

    @field_validator("osascript_path", "target_application", mode="after")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        """Ensure string fields are not whitespace."""
        v = v.strip()
        if not v:
            raise ValueError("value cannot be empty")
        return v

    @model_validator(mode="after")
    def validate_timeouts(self) -> "Settings":
        """The outer call timeout must leave room for the inner process wait."""
        if self.call_timeout <= self.process_timeout:
            raise ValueError(
                f"call_timeout ({self.call_timeout}) must be greater than process_timeout ({self.process_timeout})"
            )
        return self


# Singleton settings instance (cached for performance)
_settings_instance: Settings | None = None


def get_settings() -> Settings:
    """Get singleton Settings instance for dependency injection.

    The bridge and service take their Settings explicitly; this singleton only
    serves the FastAPI layer via Depends().

    Returns:
        Cached Settings instance

    Raises:
        ConfigurationException: If the environment or .env holds invalid values
    """
    global _settings_instance
    if _settings_instance is None:
        try:
            _settings_instance = Settings()
        except ValidationError as e:
            raise ConfigurationException(
                "Invalid bridge configuration",
                code=ErrorCode.CONFIG_INVALID,
                details={"errors": [f"{'.'.join(map(str, err['loc']))}: {err['msg']}" for err in e.errors()]},
            ) from e
    return _settings_instance
