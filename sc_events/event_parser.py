# Copyright (c) 2026 Squig-AI (squig-ai.com) — MIT License
# See LICENSE file for details.
"""
Star Citizen Game.log event parser.
Turns raw log lines into LogEvents using per-event regex rules and the
cross-line memory held in a SessionState.

Each rule has the signature ``(line, timestamp, state) -> Optional[LogEvent]``
and returns None when the line isn't its event or lacks a required field.
PARSERS lists the rules in priority order; the first match wins.
"""

import re
from dataclasses import replace
from typing import Callable, Iterable, List, Optional, Tuple

from sc_events.log_id import generate_id, timestamp_to_ms
from sc_events.logging_utils import get_logger
from sc_events.models import (
    ActorDeathMetadata, BountyMetadata, ConnectionMetadata, DestructionMetadata,
    EquipmentEquipMetadata, EquipmentReceivedMetadata, EventMetadata, EventType,
    FatalCollisionMetadata, HazardMetadata, InsuranceClaimMetadata,
    ItemPlacementMetadata, LocationMetadata, LogEvent, MedicalBedMetadata,
    MissionCompletedMetadata, MissionEndedMetadata, MissionObjectiveMetadata,
    MissionSharedMetadata, PurchaseMetadata, QuantumArrivalMetadata,
    QuantumTravelMetadata, RespawnMetadata, VehicleControlMetadata,
)
from sc_events.names import (
    camel_case_to_words, clean_item_name, clean_player_name, clean_ship_name,
    clean_weapon_class, format_mission_state, get_clean_ship_name, is_npc,
    parse_target_type, prettify_bed_name,
)
from sc_events.state import BountyMarker, EquipmentWindow, PlayerShip, SessionState

logger = get_logger("parser")

Parser = Callable[[str, str, SessionState], Optional[LogEvent]]


# ─── Regex patterns for Star Citizen Game.log ──────────────────────────────

# <2025-11-02T07:47:09.855Z>
RE_TIMESTAMP = re.compile(r"<(\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z)>")

# Shared field captures
RE_PLAYER_BRACKET = re.compile(r"Player\[([^\]]+)\]")
RE_VEHICLE_WITH_ID = re.compile(r"([A-Za-z_0-9]+)\[(\d+)\]")

# Connection: ... geid 201990709919 - ... - name space-man-rob - ...
RE_GEID = re.compile(r"geid\s+(\d+)")
RE_CONNECTION_NAME = re.compile(r"name\s+(.+?)\s+-\s+")

# Actor Death: CActor::Kill: 'victim' [id] in zone 'zone' killed by 'killer' [id] using 'weapon' ... with damage type 'type'
RE_KILL_VICTIM = re.compile(r"CActor::Kill:\s+'([^']+)'\s+\[(\d+)\]")
RE_KILLED_BY = re.compile(r"killed by\s+'([^']+)'\s+\[(\d+)\]")
RE_IN_ZONE = re.compile(r"in zone\s+'([^']+)'")
RE_USING = re.compile(r"using\s+'([^']+)'")
RE_DAMAGE_TYPE = re.compile(r"with damage type\s+'([^']+)'")

# <[ActorState] Dead> Actor 'name' [id] ejected from zone 'vehicle' [id] to zone 'dest' [id] ...
RE_ACTOR = re.compile(r"Actor\s+'([^']+)'\s+\[(\d+)\]")
RE_EJECTED_FROM = re.compile(r"ejected from zone\s+'([^']+)'\s+\[(\d+)\]")
RE_TO_ZONE = re.compile(r"to zone\s+'([^']+)'\s+\[(\d+)\]")

# <Vehicle Control Flow> Local client node [id] granted control token for 'AEGS_Gladius_717' [717]
RE_LOCAL_CLIENT = re.compile(r"Local client node \[(\d+)\]")
RE_CONTROL_VEHICLE = re.compile(r"for\s+'([^']+)'")
RE_CONTROL_VEHICLE_ID = re.compile(r"for\s+'[^']+'\s+\[(\d+)\]")

# <Failed to get starmap route data!> ... ANVL_Paladin_737[737]|CSCItemNavigation::GetStarmapRouteSegmentData
RE_STARMAP_VEHICLE = re.compile(r"([A-Za-z_0-9]+)\[(\d+)\]\|CSCItemNavigation::GetStarmapRouteSegmentData")

# <Vehicle Destruction> CVehicle::OnAdvanceDestroyLevel: Vehicle 'v' [id] ... from destroy level 1 to 2 driven by 'd' [id] caused by 'c' [id] with 'Combat'
RE_DESTROYED_VEHICLE = re.compile(r"Vehicle\s+'([^']+)'\s+\[(\d+)\]")
RE_DRIVEN_BY = re.compile(r"driven by\s+'([^']+)'\s+\[(\d+)\]")
RE_CAUSED_BY = re.compile(r"caused by\s+'([^']+)'\s+\[(\d+)\]")
RE_DESTROY_LEVEL = re.compile(r"from destroy level (\d+) to (\d+)")
RE_CAUSE_TYPE = re.compile(r"with\s+'([^']+)'")

# <FatalCollision> Fatal Collision occured for vehicle X [Part: Y, Pos: ..., Zone: Z, PlayerPilot: 1] after hitting entity: W [id].
RE_COLLISION_VEHICLE = re.compile(r"for vehicle\s+([A-Za-z_0-9]+)\s+\[")
RE_COLLISION_ZONE = re.compile(r"Zone:\s+([^,\]]+)")
RE_COLLISION_PART = re.compile(r"Part:\s+([^,\]]+)")
RE_HIT_ENTITY = re.compile(r"after hitting entity:\s+(.+?)\s*\]\.")
RE_HIT_ENTITY_NAME = re.compile(r"^([^\[]+)")
RE_HIT_ENTITY_DETAIL = re.compile(r"^([^\[]+)\s*\[Zone:\s*[^\-]+-\s*Class\(([^)]+)\)")

# <RequestLocationInventory> Player[name] requested inventory for Location[RR_CRU_LEO]
RE_LOCATION = re.compile(r"Location\[([^\]]+)\]")

# Missions
RE_MISSION_SHARED = re.compile(
    r"<MissionShared>\s+Received\s+share\s+push\s+message:\s+ownerId\[(\d+)\]\s+-\s+missionId\[([a-f0-9\-]+)\]"
)
RE_OBJECTIVE_UPSERTED = re.compile(
    r"<ObjectiveUpserted>\s+Received\s+ObjectiveUpserted\s+push\s+message\s+for:\s+"
    r"mission_id\s+([a-f0-9\-]+)\s+-\s+objective_id\s+([a-f0-9\-]+)\s+-\s+state\s+(\w+)"
)
RE_MISSION_ENDED = re.compile(
    r"<MissionEnded>\s+Received\s+MissionEnded\s+push\s+message\s+for:\s+"
    r"mission_id\s+([a-f0-9\-]+)\s+-\s+mission_state\s+(\w+)"
)
RE_END_MISSION_ID = re.compile(r"MissionId\[([a-f0-9\-]+)\]")
RE_PLAYER_ID_BRACKET = re.compile(r"PlayerId\[(\d+)\]")
RE_COMPLETION_TYPE = re.compile(r"CompletionType\[([^\]]+)\]")
RE_REASON = re.compile(r"Reason\[([^\]]+)\]")

# <CLocalMissionPhaseMarker::CreateMarker> Creating objective marker: missionId [uuid], generator name [InterSec_KillShip], contract [InterSec_Bounty_Nyx_Easy], ...
RE_MARKER_MISSION_ID = re.compile(r"missionId\s*\[([a-f0-9\-]+)\]")
RE_MARKER_GENERATOR = re.compile(r"generator name\s*\[([^\]]+)\]")
RE_MARKER_CONTRACT = re.compile(r"contract\s*\[([^\]]+)\]")
RE_MARKER_OBJECTIVE_ID = re.compile(r"objectiveId\s*\[([a-f0-9\-]+)\]")

# <Spawn Flow> Player 'X' ... lost reservation for spawnpoint bed_hospital_1_a-007 [id] at location 456
RE_SPAWN_RESERVATION = re.compile(
    r"Player\s+'([^']+)'.*lost\s+reservation\s+for\s+spawnpoint\s+([^\s]+)\s+\[(\d+)\]\s+at\s+location\s+(\d+)"
)

# Economy
RE_ITEM_NAME = re.compile(r"itemName\[([^\]]+)\]")
RE_CLIENT_PRICE = re.compile(r"client_price\[([^\]]+)\]")
RE_SHOP_NAME = re.compile(r"shopName\[([^\]]+)\]")
RE_ENTITLEMENT = re.compile(r"entitlementURN:\s+([^\s,]+)")

# <Jump Drive Requesting State Change> Requested change from Idle to Spooling, reason: ... | Stanton | (player: SHIP in zone ZONE)
RE_QT_CHANGE = re.compile(r"Requested\s+change\s+from\s+(\w+)\s+to\s+(\w+),\s+reason:\s+([^|]+)")
RE_QT_SHIP = re.compile(r"\((?:\w+):\s+([A-Z_0-9]+(?:_\d+)?)\s+in\s+zone\s+([^)]+)\)")
RE_QT_SYSTEM = re.compile(r"\|\s*([A-Z]\w+)\s*\|")
RE_QT_LINK = re.compile(r"\[linked to ([^\]]+)\]")
RE_JUMP_POINT_ZONE = re.compile(r"JumpPoint_(\w+)_(\w+)")

# Equipment
RE_ATTACHMENT = re.compile(r"Attachment\[([^\]]+)\]")
RE_STATUS = re.compile(r"Status\[([^\]]+)\]")
RE_PORT = re.compile(r"Port\[([^\]]+)\]")
RE_ITEM_CLASS = re.compile(r"Class\[([^\]]+)\]")
RE_POST_ACTION = re.compile(r"PostAction\[([^\]]+)\]")

# <[ActorState] Place> ... 'PlayerName' [id] placed 'ItemName' [id] ...
RE_PLACE_PLAYER = re.compile(r"'([^']+)'\s+\[(\d+)\]")
RE_PLACE_ITEM = re.compile(r"'[^']+'\s+\[\d+\][^']*'([^']+)'\s+\[(\d+)\]")

# Reason text -> short description, first hit wins
QT_REASONS = (
    ("QDRV is no longer powered", "drive lost power"),
    ("Jump Drive is no longer in use", "drive shut down"),
    ("spooling", "spooling drive"),
    ("calibrating", "calibrating"),
    ("traveling", "traveling"),
)

HAZARDS = (
    ("Player started suffocating", "suffocation", "started", "started suffocating"),
    ("Player stopped suffocating", "suffocation", "stopped", "stopped suffocating"),
    ("Player started depressurization", "depressurization", "started", "started depressurizing"),
    ("Player stopped depressurization", "depressurization", "stopped", "stopped depressurizing"),
)

MISSION_END_DISPLAY = {
    "Complete": ("✅", "completed mission"),
    "Abort": ("🚫", "aborted mission"),
    "Fail": ("❌", "failed mission"),
}

OBJECTIVE_COMPLETED = "MISSION_OBJECTIVE_STATE_COMPLETED"


# ─── Helpers ───────────────────────────────────────────────────────────────

def parse_log_timestamp(line: str) -> Optional[str]:
    """Return the line's ``<...Z>`` timestamp, or None if the line has none."""
    match = RE_TIMESTAMP.search(line)
    if not match:
        return None
    try:
        timestamp_to_ms(match.group(1))
    except ValueError:
        logger.debug("Rejected line with impossible timestamp: %s", line)
        return None
    return match.group(1)


def _group(pattern: re.Pattern, text: str, index: int = 1) -> Optional[str]:
    match = pattern.search(text)
    return match.group(index) if match else None


def _event(event_type: EventType, line: str, timestamp: str, state: SessionState,
           text: str, emoji: str = "", metadata: Optional[EventMetadata] = None,
           player: Optional[str] = None) -> LogEvent:
    return LogEvent(
        id=generate_id(timestamp, line),
        event_type=event_type,
        timestamp=timestamp,
        original=line,
        line=text,
        emoji=emoji,
        player=player if player is not None else state.current_player,
        metadata=metadata if metadata is not None else EventMetadata(),
    )


def _reject(kind: str, line: str) -> None:
    logger.debug("%s line missing required fields: %s", kind, line)
    return None


def format_price(price: str) -> str:
    """5000 -> 5,000 aUEC"""
    try:
        return f"{round(float(price)):,} aUEC"
    except (ValueError, OverflowError):
        return f"{price} aUEC"


# ─── Connection, location, session ─────────────────────────────────────────

def parse_connection(line: str, timestamp: str, state: SessionState) -> Optional[LogEvent]:
    if "AccountLoginCharacterStatus_Character" not in line:
        return None

    entity_id = _group(RE_GEID, line)
    player_name = _group(RE_CONNECTION_NAME, line)
    if not entity_id or not player_name:
        return _reject("Connection", line)

    state.register_player(entity_id, player_name)
    state.current_player = player_name

    return _event(
        EventType.CONNECTION, line, timestamp, state,
        f"{player_name} connected to server",
        emoji="🔗",
        metadata=ConnectionMetadata(player_id=entity_id, player_name=player_name),
    )


def parse_location_change(line: str, timestamp: str, state: SessionState) -> Optional[LogEvent]:
    if "<RequestLocationInventory>" not in line:
        return None

    location = _group(RE_LOCATION, line)
    if not location:
        return _reject("Location", line)

    player_name = _group(RE_PLAYER_BRACKET, line) or state.current_player

    return _event(
        EventType.LOCATION_CHANGE, line, timestamp, state,
        f"{player_name or 'Player'} opened inventory at {location}",
        emoji="📍",
        metadata=LocationMetadata(location=location),
    )


def parse_system_quit(line: str, timestamp: str, state: SessionState) -> Optional[LogEvent]:
    if "<SystemQuit>" not in line:
        return None
    return _event(EventType.SYSTEM_QUIT, line, timestamp, state, "Game session ended", emoji="🔌")


# ─── Combat ────────────────────────────────────────────────────────────────

def parse_actor_death(line: str, timestamp: str, state: SessionState) -> Optional[LogEvent]:
    if "<Actor Death>" not in line:
        return None

    victim = RE_KILL_VICTIM.search(line)
    killer = RE_KILLED_BY.search(line)
    if not victim or not killer:
        return _reject("Actor death", line)

    victim_name, victim_id = victim.groups()
    killer_name, killer_id = killer.groups()

    zone_raw = _group(RE_IN_ZONE, line)
    weapon_raw = _group(RE_USING, line)
    damage_raw = _group(RE_DAMAGE_TYPE, line)

    state.register_player(victim_id, victim_name)
    state.register_player(killer_id, killer_name)

    is_ai_victim = is_npc(victim_name)
    is_ai_killer = is_npc(killer_name)

    # NPC vs NPC, skip
    if is_ai_victim and is_ai_killer:
        return None

    clean_victim = clean_player_name(victim_name)
    clean_killer = clean_player_name(killer_name)

    return _event(
        EventType.ACTOR_DEATH, line, timestamp, state,
        f"{clean_killer} killed {clean_victim}",
        emoji="💀",
        metadata=ActorDeathMetadata(
            victim_name=clean_victim,
            victim_id=victim_id,
            killer_name=clean_killer,
            killer_id=killer_id,
            zone=get_clean_ship_name(zone_raw) if zone_raw else None,
            weapon_class=(clean_weapon_class(weapon_raw) or None) if weapon_raw else None,
            damage_type=camel_case_to_words(damage_raw) if damage_raw else None,
            is_ai_victim=is_ai_victim,
            is_ai_killer=is_ai_killer,
        ),
    )


def parse_actor_state_death(line: str, timestamp: str, state: SessionState) -> Optional[LogEvent]:
    """Death caused by the actor's vehicle being destroyed around them."""
    if "<[ActorState] Dead>" not in line:
        return None

    actor = RE_ACTOR.search(line)
    if not actor:
        return _reject("Actor state death", line)

    actor_name, actor_id = actor.groups()
    source = RE_EJECTED_FROM.search(line)
    dest = RE_TO_ZONE.search(line)

    source_zone = get_clean_ship_name(source.group(1)) if source else None
    source_zone_id = source.group(2) if source else None

    state.register_player(actor_id, actor_name)
    clean_actor = clean_player_name(actor_name)

    if source_zone:
        text = f"{clean_actor} died in {source_zone}"
    else:
        text = f"{clean_actor} died in vehicle destruction"

    return _event(
        EventType.ACTOR_DEATH, line, timestamp, state, text,
        emoji="💀",
        metadata=ActorDeathMetadata(
            victim_name=clean_actor,
            victim_id=actor_id,
            killer_id=source_zone_id,
            zone=source_zone,
            damage_type="vehicle destruction",
            is_ai_victim=is_npc(actor_name),
            is_ai_killer=False,
            death_cause="vehicle_destruction",
            source_zone_id=source_zone_id,
            dest_zone=dest.group(1) if dest else None,
            dest_zone_id=dest.group(2) if dest else None,
        ),
    )


# ─── Vehicles ──────────────────────────────────────────────────────────────

def parse_vehicle_control_flow(line: str, timestamp: str, state: SessionState) -> Optional[LogEvent]:
    if "<Vehicle Control Flow>" not in line:
        return None

    vehicle_raw = _group(RE_CONTROL_VEHICLE, line)
    if not vehicle_raw:
        return _reject("Vehicle control", line)

    # Placeholder vehicles (Default_17518) are never real ships
    if vehicle_raw.startswith("Default_") or vehicle_raw == "Default":
        return None

    player_entity_id = _group(RE_LOCAL_CLIENT, line)
    vehicle_id = _group(RE_CONTROL_VEHICLE_ID, line)
    vehicle_name = get_clean_ship_name(vehicle_raw)

    if "requesting" in line:
        action = "requesting"
    elif "granted" in line:
        action = "granted"
    elif "releasing" in line:
        action = "releasing"
    else:
        return _reject("Vehicle control", line)

    player_name = state.get_player_name(player_entity_id) or state.current_player

    if player_name == state.current_player:
        if action == "granted":
            state.current_player_ship = PlayerShip(name=vehicle_name, id=vehicle_id or "")
        elif action == "releasing":
            state.current_player_ship = None

    if action == "requesting":
        return None

    verb = "controls" if action == "granted" else "exited"
    return _event(
        EventType.VEHICLE_CONTROL_FLOW, line, timestamp, state,
        f"{player_name or 'Player'} {verb} {vehicle_name}",
        metadata=VehicleControlMetadata(
            vehicle_name=vehicle_name,
            vehicle_id=vehicle_id,
            player_id=player_entity_id,
            action=action,
        ),
    )


def parse_starmap_navigation(line: str, timestamp: str, state: SessionState) -> Optional[LogEvent]:
    """
    The navigation error that fires once the owner's ship loads its starmap.
    Reported as a "controls" event, at most once per vehicle id per session.
    """
    if "<Failed to get starmap route data!>" not in line:
        return None

    match = RE_STARMAP_VEHICLE.search(line)
    if not match:
        return _reject("Starmap navigation", line)

    vehicle_raw, vehicle_id = match.groups()
    if vehicle_id in state.seen_ship_ids:
        return None
    state.seen_ship_ids.add(vehicle_id)

    vehicle_name = get_clean_ship_name(vehicle_raw)
    state.current_player_ship = PlayerShip(name=vehicle_name, id=vehicle_id)

    return _event(
        EventType.VEHICLE_CONTROL_FLOW, line, timestamp, state,
        f"{state.current_player or 'Player'} controls {vehicle_name}",
        metadata=VehicleControlMetadata(vehicle_name=vehicle_name, vehicle_id=vehicle_id, action="granted"),
    )


def parse_destruction(line: str, timestamp: str, state: SessionState) -> Optional[LogEvent]:
    if "Destruction>" not in line:
        return None

    vehicle = RE_DESTROYED_VEHICLE.search(line)
    causer = RE_CAUSED_BY.search(line)
    levels = RE_DESTROY_LEVEL.search(line)
    if not vehicle or not causer or not levels:
        return _reject("Destruction", line)

    vehicle_raw, vehicle_id = vehicle.groups()
    causer_name, causer_id = causer.groups()
    driver = RE_DRIVEN_BY.search(line)
    driver_name, driver_id = driver.groups() if driver else (None, None)
    level_from, level_to = int(levels.group(1)), int(levels.group(2))

    state.register_player(driver_id, driver_name)
    state.register_player(causer_id, causer_name)

    # Only full destruction (soft death -> exploded) is reported
    if (level_from, level_to) != (1, 2):
        return None

    cause_type = _group(RE_CAUSE_TYPE, line)
    is_real_causer = causer_name != "unknown" and causer_id != "0"

    clean_causer = clean_player_name(causer_name)
    # Technical names (ships, PDC turrets) go through the ship cleaner
    if "_" in causer_name and " " not in causer_name:
        ship_causer = get_clean_ship_name(causer_name)
        if ship_causer != causer_name:
            clean_causer = ship_causer
    if not is_real_causer and cause_type:
        clean_causer = cause_type.lower()

    cleaned_vehicle = clean_ship_name(vehicle_raw)
    vehicle_name = cleaned_vehicle.name if cleaned_vehicle else vehicle_raw

    return _event(
        EventType.DESTRUCTION, line, timestamp, state,
        f"{clean_causer} destroyed {vehicle_name}",
        emoji="💥",
        metadata=DestructionMetadata(
            vehicle_name=vehicle_name,
            vehicle_id=vehicle_id,
            driver_name=clean_player_name(driver_name) if driver_name else None,
            driver_id=driver_id,
            cause_name=clean_causer if is_real_causer else None,
            cause_id=causer_id,
            cause_type=cause_type,
            destroy_level_from=str(level_from),
            destroy_level_to=str(level_to),
            is_ai_vehicle=cleaned_vehicle.is_ai if cleaned_vehicle else False,
        ),
    )


def parse_fatal_collision(line: str, timestamp: str, state: SessionState) -> Optional[LogEvent]:
    if "<FatalCollision>" not in line:
        return None

    vehicle_raw = _group(RE_COLLISION_VEHICLE, line)
    full_entity = _group(RE_HIT_ENTITY, line)
    if not vehicle_raw or full_entity is None:
        return _reject("Fatal collision", line)

    full_entity = full_entity.strip()
    entity_name = _group(RE_HIT_ENTITY_NAME, full_entity)
    hit_entity = entity_name.strip().lower() if entity_name else "unknown"

    # "PlayerName [Zone: ShipInstance - Class(AEGS_Sabre_789)]"
    hit_player = hit_ship = None
    detail = RE_HIT_ENTITY_DETAIL.search(full_entity)
    if detail:
        hit_player = detail.group(1).strip()
        hit_ship = get_clean_ship_name(detail.group(2).strip())

    vehicle_name = get_clean_ship_name(vehicle_raw)
    if hit_entity and hit_entity != "unknown":
        text = f"{vehicle_name} crashed into {hit_entity}"
    else:
        text = f"{vehicle_name} fatal crash"

    return _event(
        EventType.FATAL_COLLISION, line, timestamp, state, text,
        emoji="💥",
        metadata=FatalCollisionMetadata(
            vehicle_name=vehicle_name,
            vehicle_id=vehicle_raw,
            zone=_group(RE_COLLISION_ZONE, line),
            hit_entity=hit_entity,
            hit_entity_player=hit_player,
            hit_entity_ship=hit_ship,
            part=_group(RE_COLLISION_PART, line),
        ),
    )


# ─── Missions ──────────────────────────────────────────────────────────────

def parse_bounty_marker(line: str, timestamp: str, state: SessionState) -> Optional[LogEvent]:
    """
    A bounty target spawned. The marker is cached so the objective completion
    for the same mission can later be reported as a bounty kill.
    """
    if "<CLocalMissionPhaseMarker::CreateMarker>" not in line:
        return None

    mission_id = _group(RE_MARKER_MISSION_ID, line)
    generator_name = _group(RE_MARKER_GENERATOR, line)
    if not mission_id or not generator_name:
        return _reject("Bounty marker", line)

    # Only KillShip generators are bounty targets
    if "KillShip" not in generator_name:
        return None

    contract = _group(RE_MARKER_CONTRACT, line) or "Unknown"
    state.bounties.cache(BountyMarker(
        mission_id=mission_id,
        generator_name=generator_name,
        contract=contract,
        cached_at_ms=timestamp_to_ms(timestamp),
    ))

    target_type = parse_target_type(contract)
    return _event(
        EventType.BOUNTY_MARKER, line, timestamp, state,
        f"Bounty target spawned{f' ({target_type})' if target_type else ''}",
        emoji="🎯",
        metadata=BountyMetadata(
            mission_id=mission_id,
            objective_id=_group(RE_MARKER_OBJECTIVE_ID, line),
            generator_name=generator_name,
            contract=contract,
            target_type=target_type,
        ),
    )


def _parse_mission_shared(line: str, timestamp: str, state: SessionState) -> Optional[LogEvent]:
    match = RE_MISSION_SHARED.search(line)
    if not match:
        return _reject("Mission shared", line)

    owner_id, mission_id = match.groups()
    owner_name = state.get_player_name(owner_id) or state.current_player

    if owner_name:
        text = f"Mission shared by {owner_name}"
    else:
        text = f"Mission shared: {mission_id[:8]}..."

    return _event(
        EventType.MISSION_SHARED, line, timestamp, state, text,
        emoji="📋",
        metadata=MissionSharedMetadata(mission_id=mission_id, owner_id=owner_id),
        player=owner_name,
    )


def _parse_objective_upserted(line: str, timestamp: str, state: SessionState) -> Optional[LogEvent]:
    match = RE_OBJECTIVE_UPSERTED.search(line)
    if not match:
        return _reject("Objective", line)

    mission_id, objective_id, objective_state = match.groups()

    if objective_state == OBJECTIVE_COMPLETED and "ShowInLog" in line:
        marker = state.bounties.claim_kill(mission_id, timestamp_to_ms(timestamp))
        if marker is not None:
            target_type = parse_target_type(marker.contract)
            return _event(
                EventType.BOUNTY_KILL, line, timestamp, state,
                f"Bounty target eliminated{f' ({target_type})' if target_type else ''}",
                emoji="🎯",
                metadata=BountyMetadata(
                    mission_id=mission_id,
                    objective_id=objective_id,
                    generator_name=marker.generator_name,
                    contract=marker.contract,
                    target_type=target_type,
                    is_ai_kill=True,
                ),
            )

    return _event(
        EventType.MISSION_OBJECTIVE, line, timestamp, state,
        f"Mission objective: {format_mission_state(objective_state)}",
        emoji="🎯",
        metadata=MissionObjectiveMetadata(
            mission_id=mission_id,
            objective_id=objective_id,
            objective_state=objective_state,
        ),
    )


def _parse_mission_ended(line: str, timestamp: str, state: SessionState) -> Optional[LogEvent]:
    match = RE_MISSION_ENDED.search(line)
    if not match:
        return _reject("Mission ended", line)

    mission_id, mission_state = match.groups()
    state.bounties.clear_mission(mission_id)

    return _event(
        EventType.MISSION_COMPLETED, line, timestamp, state,
        f"Mission {format_mission_state(mission_state)}",
        emoji="✅",
        metadata=MissionCompletedMetadata(mission_id=mission_id, mission_state=mission_state),
    )


def parse_mission_events(line: str, timestamp: str, state: SessionState) -> Optional[LogEvent]:
    """<MissionShared>, <ObjectiveUpserted> and <MissionEnded> push messages."""
    if "<MissionShared>" in line:
        return _parse_mission_shared(line, timestamp, state)
    if "<ObjectiveUpserted>" in line:
        return _parse_objective_upserted(line, timestamp, state)
    if "<MissionEnded>" in line:
        return _parse_mission_ended(line, timestamp, state)
    return None


def parse_end_mission(line: str, timestamp: str, state: SessionState) -> Optional[LogEvent]:
    if "<EndMission>" not in line:
        return None

    mission_id = _group(RE_END_MISSION_ID, line)
    if not mission_id:
        return _reject("End mission", line)

    player_name = _group(RE_PLAYER_BRACKET, line) or state.current_player
    player_id = _group(RE_PLAYER_ID_BRACKET, line)
    completion_type = _group(RE_COMPLETION_TYPE, line) or "Unknown"

    state.register_player(player_id, player_name)

    who = player_name or "Player"
    if completion_type in MISSION_END_DISPLAY:
        emoji, verb = MISSION_END_DISPLAY[completion_type]
        text = f"{who} {verb}"
    else:
        emoji, text = "✅", f"{who} ended mission ({completion_type})"

    return _event(
        EventType.MISSION_ENDED, line, timestamp, state, text,
        emoji=emoji,
        metadata=MissionEndedMetadata(
            mission_id=mission_id,
            player=player_name,
            player_id=player_id,
            completion_type=completion_type,
            reason=_group(RE_REASON, line),
        ),
    )


# ─── Stations, medical, economy ────────────────────────────────────────────

def parse_landing_pad(line: str, timestamp: str, state: SessionState) -> Optional[LogEvent]:
    if "<CSCLoadingPlatformManager>" not in line:
        return None
    return _event(EventType.LANDING_PAD, line, timestamp, state, "Landing platform activity", emoji="🛬")


def parse_medical_events(line: str, timestamp: str, state: SessionState) -> Optional[LogEvent]:
    """Hospital/hab respawns and leaving a medical bed."""
    if "<Spawn Flow>" in line:
        match = RE_SPAWN_RESERVATION.search(line)
        if not match:
            return _reject("Spawn flow", line)

        player_name, bed_id, spawnpoint_id, location_id = match.groups()
        bed_name = prettify_bed_name(bed_id)
        text = f"{player_name} respawned at {bed_name}" if bed_name else f"{player_name} respawned"

        return _event(
            EventType.HOSPITAL_RESPAWN, line, timestamp, state, text,
            emoji="🏥",
            metadata=RespawnMetadata(
                player=player_name,
                bed_id=bed_id,
                spawnpoint_id=spawnpoint_id,
                location_id=location_id,
            ),
        )

    if "<CEntity::OnOwnerRemoved>" in line and "bed" in line:
        player_name = _group(RE_PLAYER_BRACKET, line) or state.current_player
        return _event(
            EventType.MEDICAL_BED, line, timestamp, state,
            f"{player_name or 'Player'} left medical bed",
            emoji="🛏️",
            metadata=MedicalBedMetadata(player=player_name),
        )

    return None


def parse_economy_events(line: str, timestamp: str, state: SessionState) -> Optional[LogEvent]:
    """Shop purchases and insurance claims."""
    if "<CEntityComponentShoppingProvider::SendStandardItemBuyRequest>" in line:
        item_name = _group(RE_ITEM_NAME, line)
        if not item_name:
            return _reject("Purchase", line)

        price = _group(RE_CLIENT_PRICE, line) or "0"
        return _event(
            EventType.PURCHASE, line, timestamp, state,
            f"Purchased {item_name} for {format_price(price)}",
            emoji="🛒",
            metadata=PurchaseMetadata(
                item_name=item_name,
                item_price=price,
                shop_name=_group(RE_SHOP_NAME, line),
            ),
        )

    if "<CWallet::ProcessClaimToNextStep>" in line:
        urn = _group(RE_ENTITLEMENT, line)
        if not urn:
            return _reject("Insurance claim", line)

        return _event(
            EventType.INSURANCE_CLAIM, line, timestamp, state,
            "Insurance claim processed",
            emoji="📋",
            metadata=InsuranceClaimMetadata(entitlement_urn=urn),
        )

    return None


# ─── Quantum travel ────────────────────────────────────────────────────────

def _clean_qt_zone(zone: str) -> str:
    jump_point = RE_JUMP_POINT_ZONE.search(zone) if "JumpPoint_" in zone else None
    if jump_point:
        return f"{jump_point.group(1)}-{jump_point.group(2)} jump point"
    cleaned = re.sub(r"^OOC_", "", zone)
    cleaned = re.sub(r"^Hangar_\w+_", "", cleaned)
    cleaned = re.sub(r"RestStop_\d+$", "Rest Stop", cleaned)
    return cleaned.replace("_", " ")


def parse_quantum_travel(line: str, timestamp: str, state: SessionState) -> Optional[LogEvent]:
    if "<Jump Drive Requesting State Change>" not in line:
        return None

    match = RE_QT_CHANGE.search(line)
    if not match:
        return _reject("Quantum travel", line)

    from_state, to_state = match.group(1), match.group(2)
    reason = match.group(3).strip()

    ship = RE_QT_SHIP.search(line)
    ship_raw = ship.group(1) if ship else None
    zone = ship.group(2) if ship else None

    linked_to = _group(RE_QT_LINK, reason)
    is_near_jump_point = linked_to == "JumpPoint_Permanent" or bool(zone and "JumpPoint" in zone)

    # The drive polls Idle -> Idle constantly; only keep it next to a jump point
    if from_state == "Idle" and to_state == "Idle" and not is_near_jump_point:
        return None

    short_reason = next((short for needle, short in QT_REASONS if needle in reason), reason)
    ship_name = get_clean_ship_name(ship_raw) if ship_raw else None
    cleaned_zone = _clean_qt_zone(zone) if zone else None

    if from_state == to_state:
        ship_prefix = f"{ship_name}'s " if ship_name else ""
        near = f" near {cleaned_zone}" if cleaned_zone and cleaned_zone != zone else ""
        text = f"QT: {ship_prefix}{short_reason}{near}"
    else:
        ship_prefix = f"{ship_name}: " if ship_name else ""
        text = f"{ship_prefix}Quantum travel: {from_state} → {to_state}"

    if linked_to == "JumpPoint_Permanent":
        linked_type = "jump_point"
    elif linked_to == "no jump point":
        linked_type = "none"
    else:
        linked_type = "unknown"

    return _event(
        EventType.QUANTUM_TRAVEL, line, timestamp, state, text,
        emoji="⚡",
        metadata=QuantumTravelMetadata(
            qt_state_from=from_state,
            qt_state_to=to_state,
            qt_reason=reason,
            vehicle_name=ship_name,
            vehicle_id=ship_raw,
            zone=cleaned_zone,
            system=_group(RE_QT_SYSTEM, line),
            linked_type=linked_type,
            is_near_jump_point=is_near_jump_point,
        ),
    )


def parse_quantum_arrival(line: str, timestamp: str, state: SessionState) -> Optional[LogEvent]:
    """Another ship dropping out of quantum near the owner."""
    if "<Quantum Drive Arrived" not in line:
        return None

    match = RE_VEHICLE_WITH_ID.search(line)
    if not match:
        return _reject("Quantum arrival", line)

    vehicle_raw, vehicle_id = match.groups()

    # The owner's own ship arriving isn't a sighting
    if state.current_player_ship and vehicle_id == state.current_player_ship.id:
        return None

    vehicle_name = get_clean_ship_name(vehicle_raw)
    return _event(
        EventType.QUANTUM_ARRIVAL, line, timestamp, state,
        f"{vehicle_name} spotted nearby",
        emoji="👀",
        metadata=QuantumArrivalMetadata(vehicle_name=vehicle_name, vehicle_id=vehicle_id),
    )


# ─── Equipment ─────────────────────────────────────────────────────────────

def parse_attachment_received(line: str, timestamp: str, state: SessionState) -> Optional[LogEvent]:
    if "<AttachmentReceived>" not in line:
        return None

    player_name = _group(RE_PLAYER_BRACKET, line)
    attachment = _group(RE_ATTACHMENT, line)
    if not player_name or not attachment:
        return _reject("Attachment", line)

    return _event(
        EventType.EQUIPMENT_RECEIVED, line, timestamp, state,
        f"{player_name} equipped {attachment}",
        emoji="🎒",
        metadata=EquipmentReceivedMetadata(
            player=player_name,
            attachment_name=attachment,
            attachment_status=_group(RE_STATUS, line) or "unknown",
            attachment_port=_group(RE_PORT, line) or "unknown",
        ),
    )


def equipment_event(player: str, window: EquipmentWindow, state: SessionState) -> LogEvent:
    """Summary event for a closed equipment window."""
    single = window.item_count == 1
    if single:
        text = f"{player} equipped {window.items[0]}"
    else:
        text = f"{player} equipped {window.item_count} items"

    return LogEvent(
        id=generate_id(window.started_at, f"equipment_aggregated_{player}"),
        event_type=EventType.EQUIPMENT_EQUIP,
        timestamp=window.started_at,
        original=window.original,
        line=text,
        emoji="🎒",
        player=state.current_player,
        metadata=EquipmentEquipMetadata(
            item_class=window.items[0] if single else None,
            item_count=window.item_count,
            items=tuple(window.items),
            aggregated=True,
            port=window.port,
            post_action=window.post_action,
        ),
    )


def parse_equip_item(line: str, timestamp: str, state: SessionState) -> Optional[LogEvent]:
    """
    Equip requests, merged per player.

    Logging in or respawning equips hundreds of items in a burst, so nothing
    is emitted for the event itself. The event that arrives after a quiet
    window returns the summary of the previous window instead.
    """
    if "<EquipItem>" not in line:
        return None

    item_class = _group(RE_ITEM_CLASS, line)
    if not item_class:
        return _reject("Equip item", line)

    post_action = _group(RE_POST_ACTION, line)
    # Picking things up is far too noisy to report
    if post_action == "Carry":
        return None

    player = state.current_player or "Player"
    closed = state.equipment.add(
        player,
        clean_item_name(item_class),
        timestamp,
        timestamp_to_ms(timestamp),
        line,
        port=_group(RE_PORT, line),
        post_action=post_action,
    )
    if closed is None:
        return None
    return equipment_event(player, closed, state)


# ─── Environment ───────────────────────────────────────────────────────────

def parse_environmental_hazards(line: str, timestamp: str, state: SessionState) -> Optional[LogEvent]:
    """Suffocation and depressurization start/stop."""
    if "<[STAMINA]" not in line:
        return None

    player_name = _group(RE_PLAYER_BRACKET, line) or state.current_player
    for marker, hazard_type, hazard_state, verb in HAZARDS:
        if marker in line:
            return _event(
                EventType.ENVIRONMENTAL_HAZARD, line, timestamp, state,
                f"{player_name or 'Player'} {verb}",
                emoji="⚠️",
                metadata=HazardMetadata(player=player_name, hazard_type=hazard_type, hazard_state=hazard_state),
            )
    return None


def parse_item_placement(line: str, timestamp: str, state: SessionState) -> Optional[LogEvent]:
    """Placing carried items in the world. Off unless the config enables it."""
    if not state.config.include_item_placement or "<[ActorState] Place>" not in line:
        return None

    player = RE_PLACE_PLAYER.search(line)
    if not player:
        return _reject("Item placement", line)

    player_name, player_id = player.groups()
    item = RE_PLACE_ITEM.search(line)
    item_name = clean_item_name(item.group(1)) if item else "Item"
    action = "placing" if "placing" in line else "placed"

    state.register_player(player_id, player_name)
    clean_player = clean_player_name(player_name)

    return _event(
        EventType.ITEM_PLACEMENT, line, timestamp, state,
        f"{clean_player} {action} {item_name}",
        emoji="📦",
        metadata=ItemPlacementMetadata(
            player=clean_player,
            player_id=player_id,
            item_name=item_name,
            item_id=item.group(2) if item else None,
            action=action,
        ),
    )


# ─── Dispatch ──────────────────────────────────────────────────────────────

# Priority order, first match wins.
#  - parse_bounty_marker runs before parse_mission_events so a marker is cached
#    before any later ObjectiveUpserted line looks it up.
#  - parse_starmap_navigation runs after parse_vehicle_control_flow; both report
#    ship control but from different markers.
PARSERS: Tuple[Parser, ...] = (
    parse_connection,
    parse_actor_death,
    parse_actor_state_death,
    parse_vehicle_control_flow,
    parse_starmap_navigation,
    parse_destruction,
    parse_fatal_collision,
    parse_location_change,
    parse_system_quit,
    parse_bounty_marker,
    parse_mission_events,
    parse_end_mission,
    parse_landing_pad,
    parse_medical_events,
    parse_economy_events,
    parse_quantum_travel,
    parse_quantum_arrival,
    parse_attachment_received,
    parse_equip_item,
    parse_environmental_hazards,
    parse_item_placement,
)


def stamp(event: LogEvent, user_id: str, state: SessionState) -> LogEvent:
    """Attach the caller's user id and the current reporter."""
    return replace(event, user_id=user_id, reported_by=state.reported_by())


def parse_line(line: str, user_id: str, state: SessionState) -> Optional[LogEvent]:
    """
    Parse a single log line and return a LogEvent if it matches a known pattern.
    Returns None for lines without a timestamp and for unrecognized lines.
    """
    line = line.rstrip("\r\n")
    timestamp = parse_log_timestamp(line)
    if timestamp is None:
        return None

    for parser in PARSERS:
        event = parser(line, timestamp, state)
        if event is not None:
            return stamp(event, user_id, state)
    return None


def parse_lines(lines: Iterable[str], user_id: str, state: SessionState) -> List[LogEvent]:
    """Parse multiple log lines. Returns events in input order (no Nones)."""
    events = []
    for line in lines:
        event = parse_line(line, user_id, state)
        if event:
            events.append(event)
    return events
