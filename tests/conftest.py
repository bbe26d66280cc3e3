"""Pytest configuration and shared fixtures."""

import stat
from pathlib import Path
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from spotify_bridge.config import Settings
from spotify_bridge.core.app_factory import create_app
from spotify_bridge.services.spotify_service import SpotifyMacService
from spotify_bridge.state_managers import PlaybackPoller

# Stands in for osascript: runs the -e argument as shell text
FAKE_INTERPRETER = """#!/bin/sh
if [ "$1" = "-e" ]; then
    shift
fi
eval "$1"
"""


@pytest.fixture
def mock_settings():
    """Settings instance with test values and no background polling."""
    return Settings(
        api_host="127.0.0.1",
        api_port=8765,
        osascript_path="osascript",
        target_application="Spotify",
        process_timeout=3.0,
        call_timeout=5.0,
        poll_interval=3.0,
        poller_enabled=False,
        bridge_api_key="",
    )


@pytest.fixture
def fake_interpreter(tmp_path: Path) -> Path:
    """Executable shell script that behaves like `osascript -e <script>`."""
    path = tmp_path / "fake-osascript"
    path.write_text(FAKE_INTERPRETER)
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


@pytest.fixture
def fake_interpreter_settings(mock_settings, fake_interpreter):
    """Settings pointing the bridge at the fake interpreter with short timeouts."""
    return mock_settings.model_copy(
        update={"osascript_path": str(fake_interpreter), "process_timeout": 1.0, "call_timeout": 3.0}
    )


@pytest.fixture
def mock_runner():
    """Mock script runner; set run.side_effect / run.return_value per test."""
    runner = AsyncMock()
    runner.run = AsyncMock(return_value="")
    return runner


@pytest.fixture
def spotify_service(mock_runner, mock_settings):
    """SpotifyMacService backed by the mock runner."""
    return SpotifyMacService(mock_runner, mock_settings)


@pytest.fixture
def sent_scripts(mock_runner):
    """Callable returning the script texts passed to the mock runner, in call order."""

    def _sent() -> list[str]:
        return [call.args[0] for call in mock_runner.run.await_args_list]

    return _sent


@pytest.fixture
def test_app(mock_settings):
    """FastAPI app built from test settings."""
    return create_app(mock_settings)


@pytest.fixture
def test_client(test_app, spotify_service):
    """Test client whose Spotify service runs scripts through the mock runner."""
    with TestClient(test_app) as client:
        test_app.state.spotify_service = spotify_service
        test_app.state.playback_poller = PlaybackPoller(spotify_service, interval=3.0)
        yield client
