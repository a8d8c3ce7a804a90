# Copyright (c) 2026 Squig-AI (squig-ai.com) — MIT License
# See LICENSE file for details.
"""
Find Star Citizen Game.log files across drives and common install paths,
and read basic session facts out of them.
Supports LIVE, PTU, EPTU and HOTFIX environments.
"""

import os
import platform
from typing import List, Optional, Tuple

from sc_events.event_parser import RE_CONNECTION_NAME
from sc_events.logging_utils import get_logger

logger = get_logger("detector")

ENVIRONMENTS = ("LIVE", "PTU", "EPTU", "HOTFIX")

# Install roots relative to a drive/base directory
INSTALL_ROOTS = [
    os.path.join("Roberts Space Industries", "StarCitizen"),
    os.path.join("steamapps", "common", "Star Citizen"),
]

COMMON_BASES = [
    "",          # Drive root
    "Games",
    "Program Files",
    "Program Files (x86)",
]

# Wine/Proton prefixes for Linux
LINUX_WINE_PATHS = [
    os.path.expanduser("~/.wine/drive_c"),
    os.path.expanduser("~/Games/star-citizen/drive_c"),
]

# Player name lookups stop after this many lines
NAME_SCAN_LIMIT = 5000


def detect_environment(path: str) -> str:
    """
    Environment a Game.log path belongs to: LIVE, PTU, HOTFIX or UNKNOWN.
    Directory names are matched case sensitively with either separator.
    """
    for env in ("LIVE", "PTU", "HOTFIX"):
        if f"\\{env}\\" in path or f"/{env}/" in path:
            return env
    return "UNKNOWN"


def _mounted_dirs(base: str) -> List[str]:
    try:
        return [os.path.join(base, entry) for entry in os.listdir(base)
                if os.path.isdir(os.path.join(base, entry))]
    except OSError as e:
        logger.debug("Cannot list %s: %s", base, e)
        return []


def get_drives() -> List[str]:
    """All mounted drive roots for the current OS."""
    system = platform.system()

    if system == "Windows":
        return [f"{letter}:\\" for letter in "ABCDEFGHIJKLMNOPQRSTUVWXYZ" if os.path.exists(f"{letter}:\\")]

    roots = ["/"]
    if system == "Linux":
        for mount_base in ("/mnt", "/media"):
            if os.path.isdir(mount_base):
                roots.extend(_mounted_dirs(mount_base))
        roots.extend(p for p in LINUX_WINE_PATHS if os.path.isdir(p))
    elif system == "Darwin" and os.path.isdir("/Volumes"):
        roots.extend(_mounted_dirs("/Volumes"))
    return roots


def _mtime(path: str) -> float:
    try:
        return os.path.getmtime(path)
    except OSError:
        return 0


def find_game_logs(drives: Optional[List[str]] = None) -> List[Tuple[str, str, str]]:
    """
    Scan drives for Game.log files.

    Returns (environment, log_path, install_dir) tuples, newest first.
    """
    found = []
    seen_paths = set()

    for drive in drives if drives is not None else get_drives():
        for base in COMMON_BASES:
            for root in INSTALL_ROOTS:
                for env in ENVIRONMENTS:
                    install_dir = os.path.join(drive, base, root, env)
                    log_file = os.path.join(install_dir, "Game.log")
                    if log_file in seen_paths or not os.path.isfile(log_file):
                        continue
                    seen_paths.add(log_file)
                    found.append((env, log_file, install_dir))

    found.sort(key=lambda entry: _mtime(entry[1]), reverse=True)
    logger.debug("Found %d Game.log file(s)", len(found))
    return found


def find_most_recent_log(drives: Optional[List[str]] = None) -> Optional[str]:
    """Most recently modified Game.log, or None."""
    logs = find_game_logs(drives)
    return logs[0][1] if logs else None


def extract_player_name(text: str) -> Optional[str]:
    """The log owner's handle from the first character login line in ``text``."""
    for line in text.splitlines():
        if "AccountLoginCharacterStatus_Character" in line:
            match = RE_CONNECTION_NAME.search(line)
            if match:
                return match.group(1)
    return None


def read_player_name(log_path: str) -> Optional[str]:
    """Like extract_player_name, reading the head of a Game.log on disk."""
    if not os.path.isfile(log_path):
        return None

    try:
        with open(log_path, "r", encoding="utf-8", errors="ignore") as f:
            for i, line in enumerate(f):
                if i >= NAME_SCAN_LIMIT:
                    break
                name = extract_player_name(line)
                if name:
                    return name
    except OSError as e:
        logger.warning("Error reading player name from %s: %s", log_path, e)

    return None
