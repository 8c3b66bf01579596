"""
pioclient Utility Functions
Helpers for logging and timestamps.
"""

import logging
from datetime import datetime, timezone
from typing import Optional


def setup_logging(level: str = "INFO", log_file: Optional[str] = None) -> logging.Logger:
    """
    Route pioclient's log records to the console, and to ``log_file`` if given.
    Safe to call again: only the level changes, handlers are not duplicated.
    """
    logger = logging.getLogger("pioclient")
    logger.setLevel(getattr(logging, level.upper()))
    installed = {handler.get_name() for handler in logger.handlers}
    formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    handlers = []
    if "pioclient.console" not in installed:
        handlers.append(("pioclient.console", logging.StreamHandler()))
    if log_file and f"pioclient.file:{log_file}" not in installed:
        handlers.append((f"pioclient.file:{log_file}", logging.FileHandler(log_file)))

    for name, handler in handlers:
        handler.set_name(name)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger


def utc_now() -> datetime:
    """Current wall-clock time, timezone-aware."""
    return datetime.now(timezone.utc)


def format_event_time(value: datetime) -> str:
    """
    Format a timestamp the way the event server decodes it.

    Millisecond precision with a numeric offset, e.g.
    ``2024-03-01T12:30:45.123+00:00``. Naive values are taken as local time.
    """
    if value.tzinfo is None:
        value = value.astimezone()
    return value.isoformat(timespec="milliseconds")
