# Copyright (c) 2026 Squig-AI (squig-ai.com) — MIT License
# See LICENSE file for details.
"""
Parse a whole Star Citizen Game.log once and print its events.

    python main.py                         # configured or auto-detected log
    python main.py path/to/Game.log --json --flush
"""

import argparse
import json
import logging
import sys
from typing import List, Optional

from sc_events.config import ParserConfig
from sc_events.log_detector import detect_environment, find_most_recent_log
from sc_events.logging_utils import get_logger, set_log_level
from sc_events.models import LogEvent
from sc_events.session import new_session

logger = get_logger("cli")


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Print the events found in a Star Citizen Game.log")
    parser.add_argument("log_path", nargs="?", help="Game.log to read (default: config, then auto-detect)")
    parser.add_argument("--user-id", help="user id stamped on every event")
    parser.add_argument("--json", action="store_true", help="print one JSON object per event")
    parser.add_argument("--verbose", action="store_true", help="log rejected lines and detector activity")
    parser.add_argument("--flush", action="store_true", help="emit equipment still pending at end of file")
    parser.add_argument("--config", help="config file (default: sc_events_config.json)")
    return parser


def resolve_log_path(args: argparse.Namespace, config: ParserConfig) -> Optional[str]:
    if args.log_path:
        return args.log_path
    if config.log_path:
        return config.log_path
    if config.auto_detect:
        return find_most_recent_log()
    return None


def format_event(event: LogEvent, as_json: bool = False) -> str:
    if as_json:
        return json.dumps(event.to_dict(), ensure_ascii=False)
    # 2025-11-02T07:47:09.855Z -> 07:47:09
    clock = event.timestamp[11:19]
    prefix = f"{event.emoji} " if event.emoji else ""
    return f"{clock} {prefix}{event.line}"


def main(argv: Optional[List[str]] = None) -> int:
    args = build_arg_parser().parse_args(argv)

    logging.basicConfig(format="[%(name)s] %(levelname)s: %(message)s")
    set_log_level(logging.DEBUG if args.verbose else logging.WARNING)

    config = ParserConfig.load(args.config)
    log_path = resolve_log_path(args, config)
    if not log_path:
        logger.error("No Game.log found, pass a path or set log_path in the config")
        return 1

    logger.info("Reading %s (%s)", log_path, detect_environment(log_path))
    try:
        with open(log_path, "r", encoding="utf-8", errors="ignore") as f:
            lines = f.readlines()
    except OSError as e:
        logger.error("Cannot read %s: %s", log_path, e)
        return 1

    session = new_session(config)
    events = session.parse_lines(lines, args.user_id)
    if args.flush:
        events.extend(session.flush_pending(args.user_id))

    for event in events:
        print(format_event(event, args.json))
    return 0


if __name__ == "__main__":
    sys.exit(main())
