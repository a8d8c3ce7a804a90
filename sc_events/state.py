# Copyright (c) 2026 Squig-AI (squig-ai.com) — MIT License
# See LICENSE file for details.
"""
Cross-line parser state for one Game.log session.

Everything the parser remembers between lines lives here: who owns the log,
which entity ids map to which names, the ship the owner is flying, and the
caches used to merge equipment floods and correlate bounty kills.
All time arithmetic uses the timestamps embedded in the log lines.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set, Tuple

from sc_events.config import ParserConfig
from sc_events.logging_utils import get_logger

logger = get_logger("state")


@dataclass
class PlayerShip:
    name: str
    id: str


# ─── Equipment aggregation ─────────────────────────────────────────────────

@dataclass
class EquipmentWindow:
    """Equip events merged for one player."""
    started_at: str          # timestamp of the event that opened the window
    original: str            # raw line that opened the window
    last_update_ms: int
    items: List[str] = field(default_factory=list)
    item_count: int = 0
    port: Optional[str] = None
    post_action: Optional[str] = None

    def add(self, item: str, at_ms: int, port: Optional[str], post_action: Optional[str]):
        self.item_count += 1
        if item not in self.items:
            self.items.append(item)
        self.last_update_ms = at_ms
        self.port = port
        self.post_action = post_action


class EquipmentAggregator:
    """
    Merges bursts of equip events per player.

    An event within ``window_ms`` of the window's last update extends it.
    The first event after that closes the window (returned to the caller for
    emission) and opens a new one.
    """

    def __init__(self, window_ms: int = 5000, cleanup_ms: int = 60000):
        self.window_ms = window_ms
        self.cleanup_ms = cleanup_ms
        self.windows: Dict[str, EquipmentWindow] = {}

    def add(self, player: str, item: str, timestamp: str, at_ms: int, line: str,
            port: Optional[str] = None, post_action: Optional[str] = None) -> Optional[EquipmentWindow]:
        """Record an equip event. Returns the window it closed, if any."""
        self.purge(at_ms, keep=player)

        window = self.windows.get(player)
        if window is not None and at_ms - window.last_update_ms < self.window_ms:
            window.add(item, at_ms, port, post_action)
            return None

        opened = EquipmentWindow(started_at=timestamp, original=line, last_update_ms=at_ms)
        opened.add(item, at_ms, port, post_action)
        self.windows[player] = opened
        return window

    def purge(self, now_ms: int, keep: Optional[str] = None):
        """Discard idle windows of other players without emitting them (e.g. after a character switch)."""
        stale = [
            player for player, window in self.windows.items()
            if player != keep and now_ms - window.last_update_ms > self.cleanup_ms
        ]
        for player in stale:
            logger.debug("Dropping idle equipment window for %s", player)
            del self.windows[player]

    def drain(self) -> List[Tuple[str, EquipmentWindow]]:
        """Close and return every open window."""
        drained = list(self.windows.items())
        self.windows.clear()
        return drained

    def clear(self):
        self.windows.clear()


# ─── Bounty correlation ────────────────────────────────────────────────────

@dataclass
class BountyMarker:
    mission_id: str
    generator_name: str
    contract: str
    cached_at_ms: int


class BountyTracker:
    """Matches bounty target markers to the objective completion that follows."""

    def __init__(self, ttl_ms: int = 30 * 60 * 1000):
        self.ttl_ms = ttl_ms
        self.markers: Dict[str, BountyMarker] = {}
        self.emitted: Set[str] = set()

    def cache(self, marker: BountyMarker):
        self.purge(marker.cached_at_ms)
        self.markers[marker.mission_id] = marker

    def claim_kill(self, mission_id: str, now_ms: int) -> Optional[BountyMarker]:
        """Marker for a completed mission, at most once per mission."""
        self.purge(now_ms)
        if mission_id in self.emitted:
            return None
        marker = self.markers.get(mission_id)
        if marker is not None:
            self.emitted.add(mission_id)
        return marker

    def clear_mission(self, mission_id: str):
        self.markers.pop(mission_id, None)
        self.emitted.discard(mission_id)

    def purge(self, now_ms: int):
        stale = [
            mission_id for mission_id, marker in self.markers.items()
            if now_ms - marker.cached_at_ms > self.ttl_ms
        ]
        for mission_id in stale:
            logger.debug("Dropping stale bounty marker %s", mission_id)
            self.clear_mission(mission_id)

    def clear(self):
        self.markers.clear()
        self.emitted.clear()


# ─── Session state ─────────────────────────────────────────────────────────

class SessionState:
    """Mutable memory of one parsing session. Not shared between threads."""

    def __init__(self, config: Optional[ParserConfig] = None):
        self.config = config or ParserConfig()
        self.current_player: Optional[str] = None
        self.current_player_ship: Optional[PlayerShip] = None
        self.player_registry: Dict[str, str] = {}
        self.seen_ship_ids: Set[str] = set()
        self.equipment = EquipmentAggregator(
            window_ms=self.config.equipment_window_ms,
            cleanup_ms=self.config.equipment_cleanup_ms,
        )
        self.bounties = BountyTracker(ttl_ms=self.config.bounty_marker_ttl_ms)

    def reset(self):
        """Forget everything. Call when a new log file or game session starts."""
        self.current_player = None
        self.current_player_ship = None
        self.player_registry.clear()
        self.seen_ship_ids.clear()
        self.equipment.clear()
        self.bounties.clear()

    def get_current_player(self) -> Optional[str]:
        return self.current_player

    def set_current_player(self, name: Optional[str]):
        self.current_player = name

    def reported_by(self) -> Tuple[str, ...]:
        return (self.current_player,) if self.current_player else ("Unknown",)

    def register_player(self, entity_id: Optional[str], name: Optional[str]):
        """Remember an id -> name pair. Id "0" and name "unknown" are never stored."""
        if not entity_id or not name or entity_id == "0" or name == "unknown":
            return
        self.player_registry[entity_id] = name

    def get_player_name(self, entity_id: Optional[str]) -> Optional[str]:
        if not entity_id:
            return None
        return self.player_registry.get(entity_id)
