"""Unit tests for AppleScript texts."""

from spotify_bridge.services import scripts


def test_escape_applescript():
    """Test backslashes are escaped before quotes."""
    assert scripts.escape_applescript('a\\b"c') == 'a\\\\b\\"c'


def test_is_running_uses_system_events():
    """Test the running check never talks to Spotify itself."""
    script = scripts.is_running("Spotify")

    assert script.startswith('tell application "System Events"')
    assert 'process whose name is "Spotify"' in script


def test_set_sound_volume_formats_integer():
    """Test the volume is embedded as an integer literal."""
    assert "set sound volume to 37" in scripts.set_sound_volume("Spotify", 37)


def test_target_application_is_configurable():
    """Test scripts address the configured application."""
    assert scripts.play_pause("Spotify Beta").startswith('tell application "Spotify Beta"')


def test_multi_item_scripts_join_lines():
    """Test list replies are joined with linefeeds."""
    for script in (
        scripts.artist_popular_tracks("Spotify", "Queen"),
        scripts.artist_search_tracks("Spotify", "Queen"),
        scripts.plain_search_tracks("Spotify", "Queen"),
        scripts.recent_tracks("Spotify"),
    ):
        assert "text item delimiters to linefeed" in script
        assert '"::"' in script


def test_play_search_result_position():
    """Test the requested position is embedded and guarded."""
    script = scripts.play_search_result("Spotify", "artist:Queen", 3)

    assert "set trackNum to 3" in script
    assert "if trackNum > (count of searchResults) or trackNum < 1 then set trackNum to 1" in script
