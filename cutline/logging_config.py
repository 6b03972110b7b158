"""Logging setup for the ``cutline`` package.

Modules log through ``logging.getLogger(__name__)``; applications call
``configure_logging()`` once. ``CUTLINE_DEBUG=1`` is a shortcut for DEBUG.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Optional, Union

LOGGER_NAME = "cutline"
LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def _level_from_env() -> int:
    name = os.getenv("CUTLINE_LOG_LEVEL")
    if name:
        level = logging.getLevelName(name.upper())
        if isinstance(level, int):
            return level
    if os.getenv("CUTLINE_DEBUG", "").lower() in ("1", "true", "yes"):
        return logging.DEBUG
    return logging.WARNING


def configure_logging(level: Optional[Union[int, str]] = None) -> logging.Logger:
    """Attach a single stream handler to the package logger and set its level."""
    if level is None:
        resolved = _level_from_env()
    elif isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        if not isinstance(resolved, int):
            resolved = logging.WARNING
    else:
        resolved = level

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(resolved)
    for handler in list(logger.handlers):
        if getattr(handler, "_cutline", False):
            logger.removeHandler(handler)
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._cutline = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
    return logger


__all__ = ["configure_logging", "LOGGER_NAME"]
