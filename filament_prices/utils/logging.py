from __future__ import annotations

import logging
import os

_LEVELS = {
    "CRITICAL": logging.CRITICAL,
    "ERROR": logging.ERROR,
    "WARNING": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
}

_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


def resolve_level(level: str | int | None = None) -> int:
    if level is None:
        level = os.getenv("TRACKER_LOG_LEVEL", "INFO")
    if isinstance(level, str):
        return _LEVELS.get(level.upper(), logging.INFO)
    return level


def setup_logging(level: str | int | None = None) -> None:
    """
    Configure application logging once for the CLI, the API server and the scheduler.
    """
    logging.basicConfig(level=resolve_level(level), format=_FORMAT)
    # apscheduler logs every job run at INFO.
    if resolve_level(level) > logging.DEBUG:
        logging.getLogger("apscheduler").setLevel(logging.WARNING)
