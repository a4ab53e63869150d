"""Tests for the character JSON codec and its legacy leniency."""

import json
from datetime import date

import pytest

from v5_sheets.models.character import GhoulCharacter, MageCharacter, VampireCharacter
from v5_sheets.models.disciplines import V5Discipline, V5DisciplinePower, catalog_power_id
from v5_sheets.models.predator import PredatorBonus, PredatorBonusType, PredatorPath
from v5_sheets.models.traits import (
    Background,
    ChangeLogEntry,
    HealthState,
    HumanityState,
    Specialization,
)
from v5_sheets.transfer.codec import (
    character_from_dict,
    character_to_dict,
    decode_collection,
    dumps,
    encode_collection,
)


def _rich_vampire() -> VampireCharacter:
    v = VampireCharacter(
        name="Ada",
        chronicle_name="Chicago",
        concept="Surgeon",
        clan="Tremere",
        generation=12,
        hunger=2,
        predator_path="Consensualist",
        date_of_embrace=date(1999, 10, 31),
        convictions=["Do no harm"],
        advantages=[Background("Allies", 3, comment="Hospital staff")],
        flaws=[Background("Bad Sight", -1, is_custom=True)],
        specializations=[Specialization("Medicine", "Surgery")],
        experience=12,
        spent_experience=5,
        current_session=4,
        change_log=[ChangeLogEntry("strength 1→2")],
    )
    v.set_attribute("Stamina", 3)
    v.health_states[0] = HealthState.AGGRAVATED
    v.set_skill("Medicine", 3)
    v.set_v5_discipline_level("Animalism", 2)
    v.toggle_v5_power(catalog_power_id("Animalism", 1, "Bond Famulus"), "Animalism", 1)
    custom = V5Discipline(name="Thaumaturgy")
    custom.add_power(V5DisciplinePower("Taste", "Read blood", 1, id="p-1"), 1)
    v.add_custom_v5_discipline(custom)
    v.custom_predator_paths.append(PredatorPath(
        name="Night Nurse",
        description="Feeds on patients",
        bonuses=[PredatorBonus(PredatorBonusType.SKILL_SPECIALIZATION, "Medicine",
                               skill_name="Medicine", alternatives=("Insight",))],
        drawbacks=["Hospital records"],
        is_custom=True,
    ))
    return v


# --- Encoding ---

def test_envelope_shape():
    env = character_to_dict(VampireCharacter(name="Ada"))
    assert env["type"] == "Vampire"
    assert env["data"]["name"] == "Ada"
    assert env["data"]["attributes"]["physical"]["Strength"] == 1


def test_encoded_values_are_plain_json():
    env = character_to_dict(_rich_vampire())
    data = env["data"]
    assert data["date_of_embrace"] == "1999-10-31"
    assert data["health_states"][0] == "aggravated"
    assert list(data["v5_disciplines"]["Animalism"]["selected_powers"]) == ["1"]
    json.dumps(env)


def test_dumps_is_deterministic():
    assert dumps({"b": 1, "a": "é"}) == '{"a":"é","b":1}'


# --- Round trips ---

def test_vampire_round_trip():
    original = _rich_vampire()
    decoded = character_from_dict(json.loads(dumps(character_to_dict(original))))
    assert isinstance(decoded, VampireCharacter)
    assert decoded == original


def test_ghoul_and_mage_round_trip():
    g = GhoulCharacter(name="Renfield", disciplines={"Potence": 1}, humanity=6)
    m = MageCharacter(name="Mira", arete=3)
    m.set_sphere("Forces", 2)
    for ch in (g, m):
        assert character_from_dict(character_to_dict(ch)) == ch


# --- Leniency ---

def test_missing_fields_take_defaults():
    ch = character_from_dict({"type": "Vampire", "data": {"name": "Old"}})
    assert ch.name == "Old"
    assert ch.humanity == 7
    assert ch.get_attribute("Wits") == 1
    assert ch.health == 4
    assert ch.humanity_states[:7] == [HumanityState.CHECKED] * 7


def test_partial_attributes_are_merged():
    ch = character_from_dict({
        "type": "Ghoul",
        "data": {"attributes": {"physical": {"Strength": 3}}},
    })
    assert ch.get_attribute("Strength") == 3
    assert ch.get_attribute("Dexterity") == 1
    assert ch.get_attribute("Wits") == 1


def test_legacy_string_backgrounds():
    ch = character_from_dict({
        "type": "Vampire",
        "data": {"advantages": ["Haven"], "flaws": ["Enemy"]},
    })
    assert ch.advantages == [Background("Haven", 1, is_custom=True)]
    assert ch.flaws == [Background("Enemy", -1, is_custom=True)]


def test_humanity_track_built_from_humanity():
    ch = character_from_dict({"type": "Vampire", "data": {"humanity": 4}})
    assert ch.humanity_states.count(HumanityState.CHECKED) == 4


@pytest.mark.parametrize(
    "payload",
    [
        {"data": {}},
        {"type": "Werewolf", "data": {}},
        {"type": "Vampire", "data": []},
        {"type": "Vampire", "data": {"health_states": ["bruised"]}},
        {"type": "Vampire", "data": {"specializations": [{"name": "x"}]}},
        {"type": "Vampire", "data": {"experience": float("inf")}},
        {"type": "Mage", "data": {"arete": float("inf")}},
        {"type": "Vampire", "data": {"attributes": {"physical": {"Stamina": 0}}}},
        {"type": "Ghoul", "data": {"attributes": {"physical": {"Stamina": 9}}}},
        {"type": "Vampire", "data": {"skills": {"physical": {"Brawl": -1}}}},
    ],
)
def test_malformed_raises_value_error(payload):
    with pytest.raises(ValueError):
        character_from_dict(payload)


# --- Collections ---

def test_collection_round_trip():
    chars = [VampireCharacter(name="A"), MageCharacter(name="B")]
    decoded = decode_collection(encode_collection(chars))
    assert [type(c) for c in decoded] == [VampireCharacter, MageCharacter]
    assert [c.id for c in decoded] == [c.id for c in chars]


def test_collection_must_be_list():
    with pytest.raises(ValueError, match="JSON array"):
        decode_collection('{"type": "Vampire"}')
