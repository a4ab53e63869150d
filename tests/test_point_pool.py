"""Tests for the attribute pool and skill preset matching."""

from collections import Counter

import pytest

from v5_sheets.engine.creation_config import DEFAULT_SKILL_PRESETS, SkillPreset
from v5_sheets.engine.point_pool import (
    AttributePool,
    available_presets,
    available_skill_values,
    can_set_skill,
    can_use_preset,
    matching_preset,
    remaining_values,
)
from v5_sheets.models.character import VampireCharacter
from v5_sheets.models.constants import ALL_ATTRIBUTES, ALL_SKILLS

SPECIALIST = DEFAULT_SKILL_PRESETS[2]


def _skills(**values: int) -> dict[str, int]:
    out = {name: 0 for name in ALL_SKILLS}
    for key, value in values.items():
        out[key.replace("_", " ")] = value
    return out


def _fill(pool: AttributePool) -> None:
    for name, value in zip(ALL_ATTRIBUTES, pool.available_values()):
        pool.assign(name, value)


def _multiset_holds(pool: AttributePool) -> bool:
    held = list(pool.assigned.values()) + pool.available_values()
    return Counter(held) == Counter(pool.starting_values)


# --- Attribute pool ---

class TestAttributePool:
    def test_starts_unassigned(self):
        pool = AttributePool()
        assert pool.available_values() == [4, 3, 3, 3, 2, 2, 2, 2, 1]
        assert pool.unassigned_attributes() == list(ALL_ATTRIBUTES)
        assert not pool.is_complete

    def test_wrong_size(self):
        with pytest.raises(ValueError, match="needs 9 values"):
            AttributePool([3, 2, 1])

    def test_assign(self):
        pool = AttributePool()
        pool.assign("Strength", 4)
        assert pool.value_of("Strength") == 4
        assert 4 not in pool.available_values()
        assert _multiset_holds(pool)

    def test_reassign_returns_previous(self):
        pool = AttributePool()
        pool.assign("Strength", 4)
        pool.assign("Strength", 1)
        assert pool.value_of("Strength") == 1
        assert 4 in pool.available_values()
        assert _multiset_holds(pool)

    def test_assign_unavailable(self):
        pool = AttributePool()
        pool.assign("Strength", 4)
        with pytest.raises(ValueError, match="not available"):
            pool.assign("Dexterity", 4)

    def test_assign_unknown_attribute(self):
        with pytest.raises(ValueError, match="Unknown attribute"):
            AttributePool().assign("Luck", 4)

    def test_move_to_empty(self):
        pool = AttributePool()
        pool.assign("Strength", 4)
        pool.move("Strength", "Wits")
        assert pool.value_of("Strength") is None
        assert pool.value_of("Wits") == 4
        assert _multiset_holds(pool)

    def test_move_swaps(self):
        pool = AttributePool()
        pool.assign("Strength", 4)
        pool.assign("Wits", 1)
        pool.move("Strength", "Wits")
        assert pool.value_of("Strength") == 1
        assert pool.value_of("Wits") == 4
        assert _multiset_holds(pool)

    def test_move_from_unassigned(self):
        with pytest.raises(ValueError, match="no value"):
            AttributePool().move("Strength", "Wits")

    def test_unassign(self):
        pool = AttributePool()
        pool.assign("Strength", 4)
        assert pool.unassign("Strength") == 4
        assert pool.unassign("Strength") is None
        assert 4 in pool.available_values()

    def test_complete(self):
        pool = AttributePool()
        _fill(pool)
        assert pool.is_complete
        assert pool.available_values() == []
        assert _multiset_holds(pool)

    def test_reset(self):
        pool = AttributePool()
        _fill(pool)
        pool.reset()
        assert pool.assigned == {}
        assert len(pool.available_values()) == 9

    def test_apply_to_defaults_unassigned_to_one(self):
        pool = AttributePool()
        pool.assign("Stamina", 4)
        ch = VampireCharacter()
        ch.set_attribute("Wits", 3)
        pool.apply_to(ch)
        assert ch.get_attribute("Stamina") == 4
        assert ch.get_attribute("Wits") == 1
        assert ch.health == 7


class TestFromCharacter:
    def test_rebuilds_completed_spread(self):
        ch = VampireCharacter()
        for name, value in zip(ALL_ATTRIBUTES, (4, 3, 3, 3, 2, 2, 2, 2, 1)):
            ch.set_attribute(name, value)
        pool = AttributePool.from_character(ch)
        assert pool.is_complete
        assert pool.value_of("Strength") == 4

    def test_fresh_sheet_starts_empty(self):
        pool = AttributePool.from_character(VampireCharacter())
        assert pool.assigned == {}
        assert not pool.is_complete


# --- Skill presets ---

def test_can_use_preset_ignores_zero():
    assert can_use_preset([0, 0, 4, 3], SPECIALIST)
    assert not can_use_preset([4, 4], SPECIALIST)


def test_remaining_values():
    assert remaining_values([4, 3, 0], SPECIALIST) == [3, 3, 2, 2, 2, 1, 1, 1]


def test_all_presets_available_when_empty():
    assert available_presets(_skills()) == list(DEFAULT_SKILL_PRESETS)


def test_four_dots_only_fit_specialist():
    assert [p.name for p in available_presets(_skills(Brawl=4))] == ["Specialist"]


def test_matching_preset_exact():
    values = _skills(
        Brawl=4, Athletics=3, Melee=3, Stealth=3, Drive=2, Firearms=2,
        Larceny=2, Survival=1, Insight=1, Occult=1,
    )
    assert matching_preset(values) == SPECIALIST


def test_matching_preset_partial():
    assert matching_preset(_skills(Brawl=4)) is None


def test_available_skill_values_always_has_zero():
    assert available_skill_values(_skills())[-1] == 0
    assert available_skill_values(_skills()) == [4, 3, 2, 1, 0]


def test_available_skill_values_frees_own_value():
    values = _skills(Brawl=4)
    assert 4 not in available_skill_values(values, "Athletics")
    assert 4 in available_skill_values(values, "Brawl")


def test_can_set_skill():
    values = _skills(Brawl=4)
    assert can_set_skill(values, "Athletics", 3)
    assert not can_set_skill(values, "Athletics", 4)


def test_custom_presets():
    only_ones = (SkillPreset("Dabbler", (1, 1)),)
    assert can_set_skill(_skills(Brawl=1), "Drive", 1, only_ones)
    assert not can_set_skill(_skills(Brawl=1), "Drive", 2, only_ones)
