"""Logging setup for the command line tool."""

from __future__ import annotations

import logging
import os
import sys

LOG_LEVEL_ENV = "GEDA_KICAD_LOG_LEVEL"
DEFAULT_FORMAT = "%(asctime)s [%(levelname)s] [%(name)s] %(message)s"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def setup_logging(
    level: int | str | None = None,
    format_string: str | None = None,
) -> logging.Logger:
    """Configure the package logger.

    Args:
        level: Logging level (e.g. 'DEBUG', 'INFO').  Defaults to the
               GEDA_KICAD_LOG_LEVEL env var or 'WARNING'.
        format_string: Custom log format string.

    Returns:
        The configured ``geda_kicad`` logger.
    """
    if level is None:
        level = os.environ.get(LOG_LEVEL_ENV, "WARNING")
    if isinstance(level, str):
        level = level.upper()

    logger = logging.getLogger("geda_kicad")
    logger.setLevel(level)
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(format_string or DEFAULT_FORMAT))
    logger.addHandler(handler)
    return logger
