import pytest

from sc_events.names import (
    camel_case_to_words, clean_item_name, clean_npc_name, clean_player_name,
    clean_ship_name, clean_weapon_class, format_mission_state, get_clean_npc_name,
    get_clean_ship_name, is_npc, parse_target_type, prettify_bed_name,
)


class TestCleanShipName:
    @pytest.mark.parametrize("raw", [None, ""])
    def test_empty(self, raw):
        assert clean_ship_name(raw) is None

    @pytest.mark.parametrize("raw, name", [
        ("ANVL_Valkyrie_7347713114638", "Anvil Valkyrie"),
        ("AEGS_Gladius_123", "Aegis Gladius"),
        ("ORIG_300i_456", "Origin 300i"),
        ("MISC_Freelancer_111", "MISC Freelancer"),
        ("CRUS_C2_Hercules_333", "Crusader C2 Hercules"),
        ("AEGS_Gladius_PU_123", "Aegis Gladius"),
    ])
    def test_manufacturer_and_id(self, raw, name):
        cleaned = clean_ship_name(raw)
        assert cleaned.name == name
        assert cleaned.is_ai is False
        assert cleaned.is_pdc is False
        assert cleaned.original == raw

    @pytest.mark.parametrize("raw, name", [
        ("ANVL_Hawk_PU_AI_FF_7347713149574", "Anvil Hawk (AI)"),
        ("ANVL_Hornet_AI_456", "Anvil Hornet (AI)"),
        ("DRAK_Cutlass_PU_AI_CRIM_999", "Drake Cutlass (AI)"),
        ("ANVL_Hawk_PU_AI_FF_CRIM_7347713149574", "Anvil Hawk (AI)"),
    ])
    def test_ai_ships(self, raw, name):
        cleaned = clean_ship_name(raw)
        assert cleaned.name == name
        assert cleaned.is_ai is True

    def test_al_is_not_ai(self):
        cleaned = clean_ship_name("ANVL_Valkyrie_PU_Al_FF_7347713114638")
        assert cleaned.name == "Anvil Valkyrie"
        assert cleaned.is_ai is False

    @pytest.mark.parametrize("raw", ["AIModule_Unmanned_PDC_789", "AIModule_Unmanned_PU_PDC_7166699717034"])
    def test_pdc(self, raw):
        cleaned = clean_ship_name(raw)
        assert cleaned.name == "PDC (AI)"
        assert cleaned.is_pdc is True
        assert cleaned.is_ai is True

    def test_get_clean_ship_name_fallbacks(self):
        assert get_clean_ship_name("AEGS_Gladius_123") == "Aegis Gladius"
        assert get_clean_ship_name(None) == "Unknown"
        assert get_clean_ship_name("") == "Unknown"


class TestNpcNames:
    def test_archetype_with_subtype(self):
        cleaned = clean_npc_name("NPC_Archetypes-Male-Human-FrontierFighters_Pilot_73276680")
        assert cleaned.name == "NPC (Frontier Fighters Pilot)"
        assert cleaned.role == "Frontier Fighters"
        assert cleaned.subtype == "Pilot"
        assert cleaned.is_npc is True

    def test_archetype_without_subtype(self):
        cleaned = clean_npc_name("NPC_Archetypes-Female-Human-Security_123")
        assert cleaned.name == "NPC (Security)"
        assert cleaned.subtype is None

    def test_plain_name_passes_through(self):
        cleaned = clean_npc_name("space-man-rob")
        assert cleaned.name == "space-man-rob"
        assert cleaned.is_npc is False
        assert get_clean_npc_name(None) == "Unknown"

    @pytest.mark.parametrize("name, expected", [
        ("PU_SecurityGuard", True),
        ("Pilot_NPC_123", True),
        ("AIModule_Ship_789", True),
        ("NPC_Archetypes-Male-Human-Guard_1", True),
        ("space-man-rob", False),
        (None, False),
    ])
    def test_is_npc(self, name, expected):
        assert is_npc(name) is expected

    def test_clean_player_name(self):
        assert clean_player_name("PU_Pilot_NPC_123") == "Pilot"
        assert clean_player_name("space-man-rob") == "space-man-rob"


class TestLabels:
    @pytest.mark.parametrize("state, label", [
        ("MISSION_OBJECTIVE_STATE_INPROGRESS", "In Progress"),
        ("MISSION_OBJECTIVE_STATE_COMPLETED", "Completed"),
        ("MISSION_OBJECTIVE_STATE_FAILED", "Failed"),
        ("MISSION_STATE_SUCCEEDED", "Succeeded"),
    ])
    def test_format_mission_state(self, state, label):
        assert format_mission_state(state) == label

    def test_camel_case_to_words(self):
        assert camel_case_to_words("VehicleDestruction") == "vehicle destruction"
        assert camel_case_to_words("Combat") == "combat"

    def test_clean_weapon_class(self):
        assert clean_weapon_class("KLWE_LaserRepeater_S2_123456") == "KLWE LaserRepeater S2"

    def test_parse_target_type(self):
        assert parse_target_type("InterSec_Bounty_Nyx_Easy") == "Easy"
        assert parse_target_type("InterSec_Bounty_Nyx_VHRT") == "VHRT"
        assert parse_target_type("InterSec_Bounty_Nyx") is None

    @pytest.mark.parametrize("bed, label", [
        ("bed_hospital_1_a-007", "Hospital 1 Bed A-007"),
        ("Bed_Single_Front_Spawnpoint_No_Persistent_Hab-001", "Hab Bed 001"),
        ("Unknown", None),
    ])
    def test_prettify_bed_name(self, bed, label):
        assert prettify_bed_name(bed) == label

    @pytest.mark.parametrize("item, name", [
        ("Armor_Heavy_Chest", "Heavy Chest"),
        ("Carryable_Food_Apple", "Apple"),
        ("Clothing_Shirt_01_blue", "Shirt"),
    ])
    def test_clean_item_name(self, item, name):
        assert clean_item_name(item) == name
