"""Integration tests for API routes with dependency injection."""

import asyncio
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from spotify_bridge.config import get_settings
from spotify_bridge.core.app_factory import create_app
from spotify_bridge.exceptions import CommandExecutionError, CommandTimeoutError, ConfigurationException, ErrorCode
from spotify_bridge.services.process_bridge import ProcessCommandBridge


def test_health_endpoint(test_client):
    """Test health check endpoint."""
    response = test_client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert "version" in data


def test_status_when_spotify_running(test_client, mock_runner):
    """Test a full snapshot is assembled from the script replies."""
    mock_runner.run.side_effect = ["true", "playing", "Queen - Bohemian Rhapsody", "65"]

    response = test_client.get("/api/spotify/status")

    assert response.status_code == 200
    assert response.json() == {
        "is_running": True,
        "is_playing": True,
        "track_label": "Queen - Bohemian Rhapsody",
        "volume_percent": 65,
    }


def test_status_when_spotify_not_running(test_client, mock_runner):
    """Test the not-running defaults."""
    mock_runner.run.return_value = "false"

    response = test_client.get("/api/spotify/status")

    assert response.status_code == 200
    assert response.json() == {"is_running": False, "is_playing": False, "track_label": None, "volume_percent": 50}
    assert mock_runner.run.await_count == 1


def test_status_when_interpreter_fails(test_client, mock_runner):
    """Test script failures are reported as not running, never as errors."""
    mock_runner.run.side_effect = CommandTimeoutError()

    response = test_client.get("/api/spotify/status")

    assert response.status_code == 200
    assert response.json()["is_running"] is False


def test_latest_status_follows_refresh(test_client, mock_runner):
    """Test the cached snapshot is empty until a poll happens."""
    assert test_client.get("/api/spotify/status/latest").json() is None

    mock_runner.run.return_value = "false"
    test_client.get("/api/spotify/status")

    assert test_client.get("/api/spotify/status/latest").json()["is_running"] is False


def test_running_endpoint(test_client, mock_runner):
    """Test the running check."""
    mock_runner.run.return_value = "true"

    response = test_client.get("/api/spotify/running")

    assert response.json() == {"is_running": True}


@pytest.mark.parametrize(
    "path,command,script_line",
    [
        ("/api/spotify/play-pause", "play_pause", "playpause"),
        ("/api/spotify/next", "next", "next track"),
        ("/api/spotify/previous", "previous", "previous track"),
    ],
)
def test_transport_endpoints(test_client, sent_scripts, path, command, script_line):
    """Test transport routes send one script and report it accepted."""
    response = test_client.post(path)

    assert response.status_code == 200
    assert response.json() == {"command": command, "accepted": True}
    assert len(sent_scripts()) == 1
    assert script_line in sent_scripts()[0]


def test_transport_failure_not_accepted(test_client, mock_runner):
    """Test a failed command is reported, not raised."""
    mock_runner.run.side_effect = CommandExecutionError("execution error: Spotify got an error")

    response = test_client.post("/api/spotify/next")

    assert response.status_code == 200
    assert response.json() == {"command": "next", "accepted": False}


def test_get_volume(test_client, mock_runner):
    """Test reading the volume."""
    mock_runner.run.return_value = "37"

    assert test_client.get("/api/spotify/volume").json() == {"volume_percent": 37}


def test_get_volume_unreadable(test_client, mock_runner):
    """Test an unreadable volume reads as 50."""
    mock_runner.run.return_value = "missing value"

    assert test_client.get("/api/spotify/volume").json() == {"volume_percent": 50}


@pytest.mark.parametrize("requested,expected", [(150, 100), (-10, 0), (42, 42)])
def test_set_volume_clamps(test_client, sent_scripts, requested, expected):
    """Test out-of-range volumes are clamped rather than rejected."""
    response = test_client.put("/api/spotify/volume", json={"percent": requested})

    assert response.status_code == 200
    assert response.json() == {"volume_percent": expected}
    assert f"set sound volume to {expected}" in sent_scripts()[0]


def test_volume_up_and_down(test_client, mock_runner):
    """Test stepping the volume from the current value."""
    mock_runner.run.side_effect = ["40", "", "95", ""]

    assert test_client.post("/api/spotify/volume/up").json() == {"volume_percent": 50}
    assert test_client.post("/api/spotify/volume/up?amount=20").json() == {"volume_percent": 100}


def test_volume_down_floor(test_client, mock_runner):
    """Test the volume never drops below zero."""
    mock_runner.run.side_effect = ["5", ""]

    assert test_client.post("/api/spotify/volume/down").json() == {"volume_percent": 0}


def test_tracks_by_artist(test_client, mock_runner):
    """Test artist search returns parsed tracks."""
    mock_runner.run.return_value = "Song A::Queen\nSong B::Queen\nSong A::Queen"

    response = test_client.get("/api/spotify/tracks/artist", params={"artist": "Queen"})

    assert response.status_code == 200
    assert response.json() == [
        {"title": "Song A", "artist": "Queen", "is_placeholder": False},
        {"title": "Song B", "artist": "Queen", "is_placeholder": False},
    ]


def test_tracks_by_artist_placeholders(test_client, mock_runner):
    """Test the cascade ends in flagged placeholders."""
    mock_runner.run.side_effect = CommandTimeoutError()

    data = test_client.get("/api/spotify/tracks/artist", params={"artist": "Queen"}).json()

    assert len(data) == 4
    assert all(track["is_placeholder"] for track in data)


def test_tracks_by_artist_requires_artist(test_client):
    """Test the artist parameter is required."""
    assert test_client.get("/api/spotify/tracks/artist").status_code == 422


def test_context_tracks_when_not_running(test_client, mock_runner):
    """Test no context tracks without Spotify."""
    mock_runner.run.return_value = "false"

    assert test_client.get("/api/spotify/tracks/context").json() == []


def test_recent_tracks(test_client, mock_runner):
    """Test recent tracks keep same-title tracks by different artists."""
    mock_runner.run.return_value = "Hurt::Nine Inch Nails\nHurt::Johnny Cash"

    data = test_client.get("/api/spotify/tracks/recent").json()

    assert [track["artist"] for track in data] == ["Nine Inch Nails", "Johnny Cash"]


def test_play_track(test_client, sent_scripts):
    """Test playing a listed track searches for it."""
    response = test_client.post("/api/spotify/tracks/play", json={"title": "Song", "artist": "Band"})

    assert response.status_code == 200
    assert response.json() == {"command": "play_track", "accepted": True}
    assert 'search "Band Song"' in sent_scripts()[0]


def test_play_track_at_out_of_range(test_client, mock_runner):
    """Test an index beyond the list is not accepted."""
    mock_runner.run.return_value = "false"

    response = test_client.post("/api/spotify/tracks/play/3")

    assert response.json() == {"command": "play_track_at", "accepted": False}


def test_readiness_without_interpreter(test_client):
    """Test readiness fails when osascript is missing."""
    with patch.object(ProcessCommandBridge, "interpreter_available", return_value=False):
        response = test_client.get("/health/ready")

    assert response.status_code == 503
    assert response.json()["status"] == "unhealthy"


def test_readiness_with_interpreter(test_client, mock_runner):
    """Test readiness reports Spotify as informational."""
    mock_runner.run.return_value = "false"

    with patch.object(ProcessCommandBridge, "interpreter_available", return_value=True):
        response = test_client.get("/health/ready")

    assert response.status_code == 200
    assert response.json()["checks"] == {"interpreter": "ok", "spotify": "not_running"}


def test_readiness_reports_interpreter_and_target(test_client, mock_runner):
    """Test readiness names the interpreter and application it checked."""
    mock_runner.run.return_value = "true"

    with patch.object(ProcessCommandBridge, "interpreter_available", return_value=True):
        data = test_client.get("/health/ready").json()

    assert data["status"] == "healthy"
    assert data["interpreter_path"] == "osascript"
    assert data["target_application"] == "Spotify"
    assert data["checks"]["spotify"] == "running"


def test_debug_endpoint(test_client, mock_runner):
    """Test debug output includes poller state and sanitized config."""
    mock_runner.run.return_value = "false"
    test_client.get("/api/spotify/status")

    response = test_client.get("/debug")

    assert response.status_code == 200
    data = response.json()
    assert data["poller"]["running"] is False
    assert data["poller"]["poll_count"] == 1
    assert data["poller"]["latest_snapshot"]["is_running"] is False
    assert data["poller"]["pending_commands"] == 0
    assert data["config"]["api_key_required"] is False
    assert data["config"]["call_timeout"] == 5.0
    assert "bridge_api_key" not in data["config"]
    assert data["requests"]["total_requests"] >= 2


def test_slow_requests_are_counted(mock_settings, spotify_service, mock_runner):
    """Test requests that outlive the call timeout show up in /debug."""
    app = create_app(mock_settings.model_copy(update={"process_timeout": 0.01, "call_timeout": 0.02}))

    async def slow_run(script, timeout=None):
        await asyncio.sleep(0.1)
        return "true"

    mock_runner.run.side_effect = slow_run

    with TestClient(app) as client:
        app.state.spotify_service = spotify_service
        client.get("/api/spotify/running")
        data = client.get("/debug").json()

    assert data["requests"]["slow_requests"] >= 1


def test_invalid_configuration_is_reported(test_app, test_client):
    """Test a broken environment surfaces as a structured configuration error."""

    def broken_settings():
        raise ConfigurationException(
            "Invalid bridge configuration",
            code=ErrorCode.CONFIG_INVALID,
            details={"errors": ["call_timeout: must exceed process_timeout"]},
        )

    test_app.dependency_overrides[get_settings] = broken_settings

    response = test_client.get("/debug")

    assert response.status_code == 500
    assert response.json()["error"] == {
        "code": "CONFIG_INVALID",
        "message": "Invalid bridge configuration",
        "details": {"errors": ["call_timeout: must exceed process_timeout"]},
    }


class TestApiKey:
    """Tests for bearer key protection."""

    @pytest.fixture
    def secured_client(self, mock_settings):
        app = create_app(mock_settings.model_copy(update={"bridge_api_key": "secret"}))
        with TestClient(app) as client:
            yield client

    def test_missing_key(self, secured_client):
        """Test requests without a key are rejected."""
        response = secured_client.get("/api/spotify/volume")

        assert response.status_code == 401

    def test_invalid_key(self, secured_client):
        """Test requests with a wrong key are rejected."""
        response = secured_client.get("/api/spotify/volume", headers={"Authorization": "Bearer wrong"})

        assert response.status_code == 401

    def test_health_stays_open(self, secured_client):
        """Test /health does not need a key."""
        assert secured_client.get("/health").status_code == 200
