"""Structured logging configuration for the Spotify bridge.

Everything goes to a rotating JSON file (logs/bridge.log, 10MB x 5). The
console gets a human-readable copy without the per-poll chatter: the poller
runs every few seconds, and a closed or hung Spotify would otherwise repeat
the same failure line on every cycle.
"""

import logging
import sys
import time
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

from pythonjsonlogger import jsonlogger

# Emitted on every poll cycle or search step; kept in the JSON file only
POLL_EVENT_TYPES = frozenset(
    {
        "playback_snapshot",
        "spotify_script_failed",
        "track_search_strategy_done",
        "track_search_strategy_failed",
    }
)

# Seconds during which a repeated event_type from the same logger is not echoed to the console
REPEAT_WINDOW_SECONDS = 60.0

# Third-party loggers and the level below which they are dropped
QUIET_LOGGERS = {
    "uvicorn.access": logging.WARNING,  # status polls arrive every few seconds
    "asyncio": logging.WARNING,  # subprocess transport debug output
    "slowapi": logging.ERROR,  # rate limit hits are logged by our handler
}


class ConsoleEventFilter(logging.Filter):
    """Drop per-poll events and collapse repeats of the same event on the console."""

    def __init__(
        self,
        quiet_events: frozenset[str] = POLL_EVENT_TYPES,
        repeat_window: float = REPEAT_WINDOW_SECONDS,
    ):
        super().__init__()
        self.quiet_events = quiet_events
        self.repeat_window = repeat_window
        self._last_seen: dict[tuple[str, str], float] = {}

    def filter(self, record: logging.LogRecord) -> bool:
        event_type = getattr(record, "event_type", None)
        if event_type is None:
            return True
        if event_type in self.quiet_events:
            return False

        key = (record.name, event_type)
        now = time.monotonic()
        last = self._last_seen.get(key)
        if last is not None and now - last < self.repeat_window:
            return False
        self._last_seen[key] = now
        return True


def _json_file_handler(log_dir: Path) -> logging.Handler:
    handler = RotatingFileHandler(
        log_dir / "bridge.log",
        maxBytes=10 * 1024 * 1024,  # 10MB
        backupCount=5,
        encoding="utf-8",
    )
    handler.setFormatter(
        jsonlogger.JsonFormatter(
            "%(asctime)s %(name)s %(levelname)s %(message)s %(filename)s %(lineno)d",
            timestamp=True,
        )
    )
    handler.setLevel(logging.DEBUG)
    return handler


def _console_handler(level: int) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s", datefmt="%Y-%m-%d %H:%M:%S")
    )
    handler.setLevel(level)
    handler.addFilter(ConsoleEventFilter())
    return handler


def setup_logging(log_level: str = "INFO", log_dir: Path | None = None) -> logging.Logger:
    """Install the JSON file handler and the filtered console handler on the root logger.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_dir: Directory for bridge.log (defaults to ./logs next to the package)

    Returns:
        Configured root logger instance
    """
    if log_dir is None:
        log_dir = Path(__file__).parent.parent / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)
    level = getattr(logging, log_level.upper())

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()
    root_logger.addHandler(_json_file_handler(log_dir))
    root_logger.addHandler(_console_handler(level))

    for name, quiet_level in QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(quiet_level)

    return root_logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance with structured logging support.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger instance configured for structured logging
    """
    return logging.getLogger(name)


def log_with_context(
    logger: logging.Logger,
    level: str,
    message: str,
    **extra_fields: Any,
) -> None:
    """Log a message with additional structured context fields.

    Args:
        logger: Logger instance
        level: Log level (debug, info, warning, error, critical)
        message: Log message
        **extra_fields: Additional fields to include in JSON log (e.g. event_type, exit_code)
    """
    log_method = getattr(logger, level.lower())
    log_method(message, extra=extra_fields)
