# Copyright (c) 2026 Squig-AI (squig-ai.com) — MIT License
# See LICENSE file for details.
"""
Event model for parsed Game.log lines.

Every parsed line becomes a LogEvent. The event-specific fields live in a
metadata dataclass chosen by the event type; ``extra`` carries anything the
typed fields don't cover.
"""

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class EventType(Enum):
    CONNECTION = "connection"
    ACTOR_DEATH = "actor_death"
    DESTRUCTION = "destruction"
    VEHICLE_CONTROL_FLOW = "vehicle_control_flow"
    FATAL_COLLISION = "fatal_collision"
    LOCATION_CHANGE = "location_change"
    SYSTEM_QUIT = "system_quit"
    MISSION_SHARED = "mission_shared"
    MISSION_OBJECTIVE = "mission_objective"
    MISSION_COMPLETED = "mission_completed"    # <MissionEnded> push message
    MISSION_ENDED = "mission_ended"            # <EndMission> with completion type
    BOUNTY_MARKER = "bounty_marker"
    BOUNTY_KILL = "bounty_kill"
    PURCHASE = "purchase"
    INSURANCE_CLAIM = "insurance_claim"
    QUANTUM_TRAVEL = "quantum_travel"
    QUANTUM_ARRIVAL = "quantum_arrival"
    EQUIPMENT_RECEIVED = "equipment_received"
    EQUIPMENT_EQUIP = "equipment_equip"
    ENVIRONMENTAL_HAZARD = "environmental_hazard"
    HOSPITAL_RESPAWN = "hospital_respawn"
    MEDICAL_BED = "medical_bed"
    LANDING_PAD = "landing_pad"
    ITEM_PLACEMENT = "item_placement"


# Wire names that don't follow the plain snake_case -> camelCase rule
_WIRE_NAMES = {
    "is_ai_victim": "isAIVictim",
    "is_ai_killer": "isAIKiller",
    "is_ai_vehicle": "isAIVehicle",
    "is_ai_kill": "isAIKill",
    "entitlement_urn": "entitlementURN",
}


def to_camel(name: str) -> str:
    if name in _WIRE_NAMES:
        return _WIRE_NAMES[name]
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


def _wire_value(value: Any) -> Any:
    if isinstance(value, (tuple, set, frozenset)):
        return list(value)
    return value


# ─── Metadata ──────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class EventMetadata:
    """Base metadata. Used as-is by events that carry no fields."""
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Wire form: camelCase keys, None values dropped, extra merged last."""
        data = {}
        for f in fields(self):
            if f.name == "extra":
                continue
            value = getattr(self, f.name)
            if value is not None:
                data[to_camel(f.name)] = _wire_value(value)
        data.update(self.extra)
        return data


@dataclass(frozen=True)
class ConnectionMetadata(EventMetadata):
    player_id: Optional[str] = None
    player_name: Optional[str] = None


@dataclass(frozen=True)
class LocationMetadata(EventMetadata):
    location: Optional[str] = None


@dataclass(frozen=True)
class VehicleControlMetadata(EventMetadata):
    vehicle_name: Optional[str] = None
    vehicle_id: Optional[str] = None
    player_id: Optional[str] = None
    action: Optional[str] = None   # "granted" or "releasing"


@dataclass(frozen=True)
class ActorDeathMetadata(EventMetadata):
    victim_name: Optional[str] = None
    victim_id: Optional[str] = None
    killer_name: Optional[str] = None
    killer_id: Optional[str] = None
    zone: Optional[str] = None
    weapon_class: Optional[str] = None
    damage_type: Optional[str] = None
    is_ai_victim: bool = False
    is_ai_killer: bool = False

    # Set only for deaths inferred from <[ActorState] Dead>
    death_cause: Optional[str] = None
    source_zone_id: Optional[str] = None
    dest_zone: Optional[str] = None
    dest_zone_id: Optional[str] = None


@dataclass(frozen=True)
class DestructionMetadata(EventMetadata):
    vehicle_name: Optional[str] = None
    vehicle_id: Optional[str] = None
    driver_name: Optional[str] = None
    driver_id: Optional[str] = None
    cause_name: Optional[str] = None   # None when the causer is unknown
    cause_id: Optional[str] = None
    cause_type: Optional[str] = None
    destroy_level_from: Optional[str] = None
    destroy_level_to: Optional[str] = None
    is_ai_vehicle: bool = False


@dataclass(frozen=True)
class FatalCollisionMetadata(EventMetadata):
    vehicle_name: Optional[str] = None
    vehicle_id: Optional[str] = None
    zone: Optional[str] = None
    hit_entity: Optional[str] = None
    hit_entity_player: Optional[str] = None
    hit_entity_ship: Optional[str] = None
    part: Optional[str] = None


@dataclass(frozen=True)
class MissionSharedMetadata(EventMetadata):
    mission_id: Optional[str] = None
    owner_id: Optional[str] = None


@dataclass(frozen=True)
class MissionObjectiveMetadata(EventMetadata):
    mission_id: Optional[str] = None
    objective_id: Optional[str] = None
    objective_state: Optional[str] = None


@dataclass(frozen=True)
class MissionCompletedMetadata(EventMetadata):
    mission_id: Optional[str] = None
    mission_state: Optional[str] = None


@dataclass(frozen=True)
class MissionEndedMetadata(EventMetadata):
    mission_id: Optional[str] = None
    player: Optional[str] = None
    player_id: Optional[str] = None
    completion_type: Optional[str] = None
    reason: Optional[str] = None


@dataclass(frozen=True)
class BountyMetadata(EventMetadata):
    mission_id: Optional[str] = None
    objective_id: Optional[str] = None
    generator_name: Optional[str] = None
    contract: Optional[str] = None
    target_type: Optional[str] = None
    is_ai_kill: Optional[bool] = None   # bounty_kill only


@dataclass(frozen=True)
class PurchaseMetadata(EventMetadata):
    item_name: Optional[str] = None
    item_price: Optional[str] = None
    shop_name: Optional[str] = None


@dataclass(frozen=True)
class InsuranceClaimMetadata(EventMetadata):
    entitlement_urn: Optional[str] = None


@dataclass(frozen=True)
class QuantumTravelMetadata(EventMetadata):
    qt_state_from: Optional[str] = None
    qt_state_to: Optional[str] = None
    qt_reason: Optional[str] = None
    vehicle_name: Optional[str] = None
    vehicle_id: Optional[str] = None
    zone: Optional[str] = None
    system: Optional[str] = None
    linked_type: Optional[str] = None   # "jump_point", "none" or "unknown"
    is_near_jump_point: bool = False


@dataclass(frozen=True)
class QuantumArrivalMetadata(EventMetadata):
    vehicle_name: Optional[str] = None
    vehicle_id: Optional[str] = None


@dataclass(frozen=True)
class EquipmentReceivedMetadata(EventMetadata):
    player: Optional[str] = None
    attachment_name: Optional[str] = None
    attachment_status: Optional[str] = None
    attachment_port: Optional[str] = None


@dataclass(frozen=True)
class EquipmentEquipMetadata(EventMetadata):
    item_class: Optional[str] = None   # only set when a single item was equipped
    item_count: int = 0
    items: Tuple[str, ...] = ()
    aggregated: bool = True
    port: Optional[str] = None
    post_action: Optional[str] = None


@dataclass(frozen=True)
class HazardMetadata(EventMetadata):
    player: Optional[str] = None
    hazard_type: Optional[str] = None    # "suffocation" or "depressurization"
    hazard_state: Optional[str] = None   # "started" or "stopped"


@dataclass(frozen=True)
class RespawnMetadata(EventMetadata):
    player: Optional[str] = None
    bed_id: Optional[str] = None
    spawnpoint_id: Optional[str] = None
    location_id: Optional[str] = None


@dataclass(frozen=True)
class MedicalBedMetadata(EventMetadata):
    player: Optional[str] = None


@dataclass(frozen=True)
class ItemPlacementMetadata(EventMetadata):
    player: Optional[str] = None
    player_id: Optional[str] = None
    item_name: Optional[str] = None
    item_id: Optional[str] = None
    action: Optional[str] = None   # "placing" or "placed"


# ─── Event ─────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class LogEvent:
    """A parsed Game.log event."""
    id: str
    event_type: EventType
    timestamp: str
    original: str
    line: str
    emoji: str = ""
    player: Optional[str] = None
    user_id: str = "local"
    metadata: EventMetadata = field(default_factory=EventMetadata)
    reported_by: Tuple[str, ...] = ("Unknown",)

    def to_dict(self) -> Dict[str, Any]:
        """Serialise to the camelCase shape consumers store and transmit."""
        return {
            "id": self.id,
            "userId": self.user_id,
            "player": self.player,
            "emoji": self.emoji,
            "line": self.line,
            "timestamp": self.timestamp,
            "original": self.original,
            "eventType": self.event_type.value,
            "metadata": self.metadata.to_dict(),
            "reportedBy": list(self.reported_by),
        }
