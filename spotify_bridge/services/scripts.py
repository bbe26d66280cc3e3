"""AppleScript texts sent to the target application.

Multi-item scripts return one ``name::artist`` entry per line.
"""

TRACK_FIELD_SEPARATOR = "::"


def escape_applescript(value: str) -> str:
    """Escape a value for use inside an AppleScript string literal.

    Backslashes first, then quotes.
    """
    return value.replace("\\", "\\\\").replace('"', '\\"')


def _tell(app: str, body: str) -> str:
    return f'tell application "{escape_applescript(app)}"\n{body}\nend tell'


def is_running(app: str) -> str:
    return (
        'tell application "System Events"\n'
        f'    set isRunning to (exists (some process whose name is "{escape_applescript(app)}"))\n'
        "    return isRunning\n"
        "end tell"
    )


def player_state(app: str) -> str:
    return _tell(app, "    return player state as string")


def track_label(app: str) -> str:
    return _tell(
        app,
        "    if player state is playing or player state is paused then\n"
        "        return (artist of current track) & \" - \" & (name of current track)\n"
        "    else\n"
        '        return "Not playing"\n'
        "    end if",
    )


def sound_volume(app: str) -> str:
    return _tell(app, "    return sound volume")


def set_sound_volume(app: str, percent: int) -> str:
    return _tell(app, f"    set sound volume to {int(percent)}")


def play_pause(app: str) -> str:
    return _tell(app, "    playpause")


def next_track(app: str) -> str:
    return _tell(app, "    next track")


def previous_track(app: str) -> str:
    return _tell(app, "    previous track")


def current_artist(app: str) -> str:
    return _tell(
        app,
        "    try\n"
        "        return artist of current track\n"
        "    on error\n"
        '        return ""\n'
        "    end try",
    )


# Collected entries are joined with linefeeds before returning
_JOIN_LINES = (
    "    set AppleScript's text item delimiters to linefeed\n"
    "    set joined to {list_name} as string\n"
    '    set AppleScript\'s text item delimiters to ""\n'
    "    return joined"
)

_ADD_CURRENT_TRACK = (
    "    try\n"
    "        set end of {list_name} to (name of current track) & \"::\" & (artist of current track)\n"
    "    end try\n"
)


def _collect_search(query: str, limit: int, list_name: str, artist_filter: str | None = None) -> str:
    condition = "class of aTrack is track"
    if artist_filter:
        # Only tracks by (or featuring) the artist
        condition += f' and artist of aTrack contains "{artist_filter}"'
    return (
        f'    set searchResults to search "{query}"\n'
        "    repeat with i from 1 to count of searchResults\n"
        f"        if i > {limit} then exit repeat\n"
        "        try\n"
        "            set aTrack to item i of searchResults\n"
        f"            if {condition} then\n"
        f'                set end of {list_name} to (name of aTrack) & "::" & (artist of aTrack)\n'
        "            end if\n"
        "        end try\n"
        "    end repeat\n"
    )


def artist_popular_tracks(app: str, artist: str) -> str:
    """Current track plus up to 20 artist search hits by that artist.

    Returns ``ERROR: <message>`` instead of raising when Spotify fails.
    """
    safe = escape_applescript(artist)
    return _tell(
        app,
        "    try\n"
        "        set popularTracks to {}\n"
        '        set end of popularTracks to (name of current track) & "::" & (artist of current track)\n'
        + _collect_search(f"artist:{safe}", 20, "popularTracks", artist_filter=safe)
        + _JOIN_LINES.format(list_name="popularTracks")
        + "\n    on error errMsg\n"
        '        return "ERROR: " & errMsg\n'
        "    end try",
    )


def artist_search_tracks(app: str, artist: str) -> str:
    """Current track plus up to 20 hits for ``artist:<name>``."""
    safe = escape_applescript(artist)
    return _tell(
        app,
        "    set trackList to {}\n"
        + _ADD_CURRENT_TRACK.format(list_name="trackList")
        + "    try\n"
        + _collect_search(f"artist:{safe}", 20, "trackList")
        + "    end try\n"
        + _JOIN_LINES.format(list_name="trackList"),
    )


def plain_search_tracks(app: str, query: str, limit: int = 10) -> str:
    """Up to ``limit`` hits for a free-text search."""
    return _tell(
        app,
        "    set trackList to {}\n"
        + _collect_search(escape_applescript(query), limit, "trackList")
        + _JOIN_LINES.format(list_name="trackList"),
    )


def recent_tracks(app: str) -> str:
    """Current track plus up to 8 hits for "recent".

    AppleScript has no play history; the search is the closest stand-in.
    """
    return _tell(
        app,
        "    set recentTracks to {}\n"
        + _ADD_CURRENT_TRACK.format(list_name="recentTracks")
        + "    try\n"
        + _collect_search("recent", 8, "recentTracks")
        + "    end try\n"
        + _JOIN_LINES.format(list_name="recentTracks"),
    )


def search(app: str, query: str) -> str:
    return _tell(app, f'    search "{escape_applescript(query)}"')


def play_search_result(app: str, query: str, position: int = 1) -> str:
    """Search and play hit ``position`` (1-based, falls back to 1 when out of range)."""
    return _tell(
        app,
        f'    set searchResults to search "{escape_applescript(query)}"\n'
        "    if (count of searchResults) > 0 then\n"
        f"        set trackNum to {int(position)}\n"
        "        if trackNum > (count of searchResults) or trackNum < 1 then set trackNum to 1\n"
        "        play item trackNum of searchResults\n"
        '        return "Playing " & (name of current track) & " by " & (artist of current track)\n'
        "    else\n"
        '        return "No results found"\n'
        "    end if",
    )
