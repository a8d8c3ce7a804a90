# Copyright (c) 2026 Squig-AI (squig-ai.com) — MIT License
# See LICENSE file for details.
"""
Configuration management for the Game.log parser.
Persists settings to a JSON file alongside the package.
"""

import json
import os
from dataclasses import dataclass, asdict, fields
from typing import Optional

from sc_events.logging_utils import get_logger

logger = get_logger("config")

CONFIG_FILE = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "sc_events_config.json")


@dataclass
class ParserConfig:
    """Parser settings."""
    # Log file (used by the command line driver)
    log_path: Optional[str] = None
    auto_detect: bool = True

    # Stamped on events when the caller doesn't pass a user id
    default_user_id: str = "local"

    # Equipment aggregation
    equipment_window_ms: int = 5000       # events closer than this are merged
    equipment_cleanup_ms: int = 60000     # idle windows older than this are dropped

    # Bounty marker correlation
    bounty_marker_ttl_ms: int = 30 * 60 * 1000

    # <[ActorState] Place> lines are very chatty, off unless asked for
    include_item_placement: bool = False

    @classmethod
    def load(cls, path: Optional[str] = None) -> "ParserConfig":
        """Load config from disk, or return defaults."""
        path = path or CONFIG_FILE
        if os.path.exists(path):
            try:
                with open(path, "r", encoding="utf-8") as f:
                    data = json.load(f)
                known = {f.name for f in fields(cls)}
                unknown = sorted(set(data) - known)
                if unknown:
                    logger.warning("Ignoring unknown config keys: %s", ", ".join(unknown))
                return cls(**{k: v for k, v in data.items() if k in known})
            except (OSError, ValueError, TypeError) as e:
                logger.warning("Failed to load config %s: %s, using defaults", path, e)
        return cls()

    def save(self, path: Optional[str] = None):
        """Persist config to disk."""
        path = path or CONFIG_FILE
        try:
            with open(path, "w", encoding="utf-8") as f:
                json.dump(asdict(self), f, indent=2)
        except OSError as e:
            logger.warning("Failed to save config %s: %s", path, e)
