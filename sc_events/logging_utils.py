# Copyright (c) 2026 Squig-AI (squig-ai.com) — MIT License
# See LICENSE file for details.
"""Package logger helpers."""

import logging
from typing import Optional

BASE_LOGGER_NAME = "sc_events"
BASE_LOGGER = logging.getLogger(BASE_LOGGER_NAME)
BASE_LOGGER.addHandler(logging.NullHandler())


def get_logger(suffix: Optional[str] = None) -> logging.Logger:
    """Return the package logger or one of its children."""
    if suffix is None:
        return BASE_LOGGER
    return BASE_LOGGER.getChild(suffix)


def set_log_level(level: int) -> None:
    """Update the base logger level (and implicitly its children)."""
    BASE_LOGGER.setLevel(level)
