# Copyright (c) 2026 Squig-AI (squig-ai.com) — MIT License
# See LICENSE file for details.
"""Star Citizen Game.log event parser."""

from sc_events.config import ParserConfig
from sc_events.event_parser import parse_line, parse_lines, parse_log_timestamp
from sc_events.log_detector import detect_environment, extract_player_name, find_game_logs, find_most_recent_log
from sc_events.log_id import generate_id
from sc_events.models import EventType, LogEvent
from sc_events.session import ParserSession, new_session

__all__ = [
    "EventType",
    "LogEvent",
    "ParserConfig",
    "ParserSession",
    "detect_environment",
    "extract_player_name",
    "find_game_logs",
    "find_most_recent_log",
    "generate_id",
    "new_session",
    "parse_line",
    "parse_lines",
    "parse_log_timestamp",
]
