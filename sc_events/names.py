# Copyright (c) 2026 Squig-AI (squig-ai.com) — MIT License
# See LICENSE file for details.
"""
Name and label cleanup for Game.log identifiers.

The game logs machine names (``AEGS_Gladius_7174409165064``,
``NPC_Archetypes-Male-Human-FrontierFighters_Pilot_73276680``,
``MISSION_OBJECTIVE_STATE_INPROGRESS``). These helpers turn them into
something a person can read and flag AI/NPC entities along the way.
"""

import re
from dataclasses import dataclass
from typing import Optional


# Manufacturer code -> display name
MANUFACTURERS = {
    "ANVL": "Anvil", "AEGS": "Aegis", "ORIG": "Origin", "DRAK": "Drake",
    "CNOU": "CNOU", "MISC": "MISC", "RSI": "RSI", "VAND": "Vanduul",
    "AOPO": "Aopoa", "BANU": "Banu", "CRUS": "Crusader", "KRIN": "Kruger",
    "ESPR": "Esperia", "ARGO": "ARGO", "MRAI": "Mirai", "TUMB": "Tumbril",
}

# Engine tokens that are never part of a ship's display name.
# "Al" is a common misspelling of "AI" in the game's own data and is NOT
# treated as an AI marker.
TECHNICAL_TOKENS = {"PU", "AI", "FF", "PDC", "Al", "CRIM"}

AI_MARKERS = ("_PU_AI_", "_AI_", "AIModule")
PDC_MARKERS = ("_PU_PDC_", "_PDC_", "AIModule_Unmanned")

NPC_ARCHETYPE_PREFIX = "NPC_Archetypes-"

# Compound state tokens the game writes without separators
STATE_WORDS = {
    "INPROGRESS": "In Progress",
    "NOTSTARTED": "Not Started",
}

RE_STATE_PREFIX = re.compile(r"^MISSION_(?:OBJECTIVE_)?STATE_")
RE_CAPITAL = re.compile(r"([A-Z])")
RE_SPACES = re.compile(r"\s+")

RE_BED_HOSPITAL = re.compile(r"bed_hospital_(\d+)_([a-z])-(\d+)", re.IGNORECASE)
RE_BED_HAB = re.compile(r"Bed_.*_Hab-(\d+)", re.IGNORECASE)
RE_BED_GENERIC = re.compile(r"bed_[^_]+_([a-z])-(\d+)", re.IGNORECASE)

RE_ITEM_CARRYABLE = re.compile(r"^Carryable_\w+_")
RE_ITEM_PREFIX = re.compile(r"^(?:Clothing|Armor)_")
RE_ITEM_SUFFIX = re.compile(r"_\d+_\w+$")

RE_TARGET_TYPE = re.compile(r"_(Easy|Medium|Hard|VHRT|ERT|Intro)$", re.IGNORECASE)


@dataclass(frozen=True)
class CleanedShipName:
    name: str
    is_ai: bool
    is_pdc: bool
    original: str


@dataclass(frozen=True)
class CleanedNPCName:
    name: str
    role: Optional[str]
    subtype: Optional[str]
    is_npc: bool
    original: str


# ─── Ships ─────────────────────────────────────────────────────────────────

def clean_ship_name(raw_name: Optional[str]) -> Optional[CleanedShipName]:
    """
    Strip ids and engine tokens from a ship identifier.

    ``ANVL_Hawk_PU_AI_FF_7347713149574`` -> ``Anvil Hawk (AI)``
    ``AIModule_Unmanned_PU_PDC_7166699717034`` -> ``PDC (AI)``
    """
    if not raw_name:
        return None

    is_ai = any(marker in raw_name for marker in AI_MARKERS)
    is_pdc = any(marker in raw_name for marker in PDC_MARKERS)

    if is_pdc:
        return CleanedShipName(name="PDC (AI)", is_ai=True, is_pdc=True, original=raw_name)

    parts = raw_name.split("_")
    if parts[-1].isdigit():
        parts.pop()

    parts = [part for part in parts if part not in TECHNICAL_TOKENS]

    if parts and parts[0] in MANUFACTURERS:
        parts[0] = MANUFACTURERS[parts[0]]

    name = " ".join(parts)
    if is_ai:
        name += " (AI)"

    return CleanedShipName(name=name, is_ai=is_ai, is_pdc=False, original=raw_name)


def get_clean_ship_name(raw_name: Optional[str]) -> str:
    """Cleaned ship name, falling back to the raw name, then "Unknown"."""
    cleaned = clean_ship_name(raw_name)
    if cleaned and cleaned.name:
        return cleaned.name
    return raw_name or "Unknown"


# ─── NPCs and players ──────────────────────────────────────────────────────

def split_camel_case(text: str) -> str:
    """FrontierFighters -> Frontier Fighters"""
    return RE_SPACES.sub(" ", RE_CAPITAL.sub(r" \1", text).strip())


def camel_case_to_words(text: str) -> str:
    """VehicleDestruction -> vehicle destruction"""
    return split_camel_case(text).lower()


def clean_npc_name(raw_name: Optional[str]) -> Optional[CleanedNPCName]:
    """
    Format ``NPC_Archetypes-<Gender>-<Species>-<Role>[_<Subtype>]_<ID>`` names.

    Anything that isn't an archetype name passes through with ``is_npc`` False.
    """
    if not raw_name:
        return None

    if not raw_name.startswith(NPC_ARCHETYPE_PREFIX):
        return CleanedNPCName(name=raw_name, role=None, subtype=None, is_npc=False, original=raw_name)

    parts = raw_name.split("_")
    role = split_camel_case(parts[1].split("-")[-1])

    subtype = None
    if len(parts) >= 4 and not parts[2][:1].isdigit():
        subtype = parts[2]

    label = f"{role} {subtype}" if subtype else role
    return CleanedNPCName(
        name=f"NPC ({label})",
        role=role,
        subtype=subtype,
        is_npc=True,
        original=raw_name,
    )


def get_clean_npc_name(raw_name: Optional[str]) -> str:
    cleaned = clean_npc_name(raw_name)
    if cleaned and cleaned.name:
        return cleaned.name
    return raw_name or "Unknown"


def is_npc(name: Optional[str]) -> bool:
    """Check if an actor name carries one of the game's NPC markers."""
    if not name:
        return False
    return (
        name.startswith("PU_")
        or "_NPC_" in name
        or "AIModule" in name
        or name.startswith(NPC_ARCHETYPE_PREFIX)
    )


def clean_player_name(name: str) -> str:
    """Readable actor name: archetypes formatted, PU_ prefix and _NPC_ tail removed."""
    if name.startswith(NPC_ARCHETYPE_PREFIX):
        return get_clean_npc_name(name)
    name = name[3:] if name.startswith("PU_") else name
    return re.sub(r"_NPC_.*$", "", name)


# ─── States, items, places ─────────────────────────────────────────────────

def format_mission_state(state: str) -> str:
    """MISSION_OBJECTIVE_STATE_INPROGRESS -> In Progress"""
    state = RE_STATE_PREFIX.sub("", state)
    if state.upper() in STATE_WORDS:
        return STATE_WORDS[state.upper()]
    return " ".join(word.capitalize() for word in state.split("_") if word)


def prettify_bed_name(bed_id: str) -> Optional[str]:
    """
    Human label for a spawn bed id, or None when the bed is "Unknown".

    bed_hospital_1_a-007 -> Hospital 1 Bed A-007
    Bed_Single_Front_Spawnpoint_No_Persistent_Hab-001 -> Hab Bed 001
    """
    if bed_id.lower() == "unknown":
        return None

    match = RE_BED_HOSPITAL.search(bed_id)
    if match:
        return f"Hospital {match.group(1)} Bed {match.group(2).upper()}-{match.group(3)}"

    match = RE_BED_HAB.search(bed_id)
    if match:
        return f"Hab Bed {match.group(1)}"

    match = RE_BED_GENERIC.search(bed_id)
    if match:
        return f"Bed {match.group(1).upper()}-{match.group(2)}"

    return " ".join(word.capitalize() for word in bed_id.replace("_", " ").split(" "))


def clean_item_name(item_class: str) -> str:
    """Armor_Heavy_Chest -> Heavy Chest"""
    name = RE_ITEM_CARRYABLE.sub("", item_class)
    name = RE_ITEM_PREFIX.sub("", name)
    name = RE_ITEM_SUFFIX.sub("", name)
    name = name.replace("_", " ").strip()
    return name[:1].upper() + name[1:]


def clean_weapon_class(raw_weapon: str) -> str:
    """KLWE_LaserRepeater_S2_123456 -> KLWE LaserRepeater S2 (last token dropped)"""
    return " ".join(raw_weapon.split("_")[:-1])


def parse_target_type(contract: str) -> Optional[str]:
    """InterSec_Bounty_Nyx_Easy -> Easy"""
    match = RE_TARGET_TYPE.search(contract)
    return match.group(1) if match else None
