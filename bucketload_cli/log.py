"""Logging setup for the bucketload CLI.

Library modules only call ``logging.getLogger(__name__)``; the CLI calls
configure_logging() once with the level from the config file.
"""

from __future__ import annotations

import logging
import sys
from typing import TextIO

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s [%(threadName)s] %(message)s"

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def parse_level(level: str | None) -> int:
    """Map a config log level name to a logging level; unknown names mean INFO."""
    return _LEVELS.get((level or "").strip().lower(), logging.INFO)


def configure_logging(level: str | None, *, stream: TextIO | None = None) -> logging.Logger:
    """Attach a single stderr handler to the ``bucketload_cli`` logger.

    Calling it again replaces the handler rather than stacking another one.
    """
    logger = logging.getLogger("bucketload_cli")
    logger.setLevel(parse_level(level))

    for handler in list(logger.handlers):
        if getattr(handler, "_bucketload", False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._bucketload = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
    return logger
