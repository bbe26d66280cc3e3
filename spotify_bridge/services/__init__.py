"""Services talking to the Spotify desktop app."""
