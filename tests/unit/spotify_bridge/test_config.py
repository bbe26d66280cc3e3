"""Unit tests for configuration."""

import os
from unittest.mock import patch

import pytest

from spotify_bridge import config
from spotify_bridge.config import Settings, get_settings
from spotify_bridge.exceptions import ConfigurationException, ErrorCode


def test_settings_defaults():
    """Test Settings model has correct defaults without a .env file."""
    with patch.dict(os.environ, {}, clear=True):
        settings = Settings(_env_file=None)

    assert settings.api_host == "127.0.0.1"
    assert settings.api_port == 8765
    assert settings.osascript_path == "osascript"
    assert settings.target_application == "Spotify"
    assert settings.process_timeout == 3.0
    assert settings.call_timeout == 5.0
    assert settings.poll_interval == 3.0
    assert settings.default_volume == 50
    assert settings.bridge_api_key == ""


def test_settings_env_loading():
    """Test settings can load from environment."""
    env = {
        "OSASCRIPT_PATH": "/usr/local/bin/osascript",
        "TARGET_APPLICATION": "Spotify Beta",
        "PROCESS_TIMEOUT": "1.5",
        "CALL_TIMEOUT": "2.5",
        "LOG_LEVEL": "debug",
    }
    with patch.dict(os.environ, env, clear=True):
        settings = Settings(_env_file=None)

    assert settings.osascript_path == "/usr/local/bin/osascript"
    assert settings.target_application == "Spotify Beta"
    assert settings.process_timeout == 1.5
    assert settings.call_timeout == 2.5
    assert settings.log_level == "DEBUG"


def test_settings_call_timeout_must_exceed_process_timeout():
    """Test the outer timeout must be longer than the inner one."""
    with pytest.raises(ValueError, match="call_timeout"):
        Settings(_env_file=None, process_timeout=3.0, call_timeout=3.0)


def test_settings_invalid_log_level():
    """Test unknown log levels are rejected."""
    with pytest.raises(ValueError):
        Settings(_env_file=None, log_level="LOUD")


def test_settings_blank_interpreter_rejected():
    """Test a whitespace interpreter path is rejected."""
    with pytest.raises(ValueError):
        Settings(_env_file=None, osascript_path="   ")


@pytest.mark.parametrize("field,value", [("default_volume", 101), ("volume_step", 0), ("api_port", 0)])
def test_settings_range_validation(field, value):
    """Test numeric fields are range-checked."""
    with pytest.raises(ValueError):
        Settings(_env_file=None, **{field: value})


def test_get_settings_singleton():
    """Test get_settings caches one instance."""
    with patch.object(config, "_settings_instance", None):
        first = get_settings()
        second = get_settings()

        assert first is second


def test_get_settings_invalid_environment():
    """Test invalid environment values surface as a configuration error."""
    env = {"PROCESS_TIMEOUT": "6", "CALL_TIMEOUT": "5"}
    with patch.object(config, "_settings_instance", None), patch.dict(os.environ, env, clear=True):
        with pytest.raises(ConfigurationException) as exc_info:
            get_settings()

    assert exc_info.value.code == ErrorCode.CONFIG_INVALID
    assert exc_info.value.details["errors"]
