"""Spotify macOS bridge"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("spotify-mac-bridge")
except PackageNotFoundError:
    __version__ = "dev"
