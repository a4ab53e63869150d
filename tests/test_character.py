"""Tests for the character sheet model: traits, specializations, V5 disciplines."""

import pytest

from v5_sheets.models.character import (
    CREATION_COMPLETE,
    GhoulCharacter,
    MageCharacter,
    VampireCharacter,
    new_character,
)
from v5_sheets.models.constants import (
    ALL_ATTRIBUTES,
    ALL_SKILLS,
    MAGE_SPHERES,
    CharacterType,
    attribute_category,
    skill_category,
    skills_requiring_free_specialization,
)
from v5_sheets.models.disciplines import V5Discipline, V5DisciplinePower, catalog_power_id
from v5_sheets.models.traits import Background, HumanityState, MageTraitState


def _bond_famulus() -> str:
    return catalog_power_id("Animalism", 1, "Bond Famulus")


# --- Defaults ---

def test_new_vampire_defaults():
    v = VampireCharacter()
    assert v.character_type == CharacterType.VAMPIRE
    assert all(v.get_attribute(a) == 1 for a in ALL_ATTRIBUTES)
    assert all(v.get_skill(s) == 0 for s in ALL_SKILLS)
    assert v.generation == 13
    assert v.blood_potency == 1
    assert v.humanity == 7
    assert v.hunger == 1
    assert v.current_session == 1
    assert v.creation_progress == CREATION_COMPLETE
    assert not v.is_in_creation


def test_new_vampire_humanity_track():
    v = VampireCharacter()
    assert len(v.humanity_states) == 10
    assert v.humanity_states[:7] == [HumanityState.CHECKED] * 7
    assert v.humanity_states[7:] == [HumanityState.UNCHECKED] * 3


def test_new_character_derived_values():
    """Stamina 1 → 4 health; Resolve 1 + Composure 1 → 2 willpower."""
    v = VampireCharacter()
    assert v.health == 4
    assert v.willpower == 2
    assert len(v.health_states) == 4
    assert len(v.willpower_states) == 2


def test_new_mage_defaults():
    m = MageCharacter()
    assert m.spheres == {name: 0 for name in MAGE_SPHERES}
    assert m.arete == 2
    assert m.paradox == 1
    assert m.hubris_states == [MageTraitState.UNCHECKED] * 5
    assert m.quiet_states == [MageTraitState.UNCHECKED] * 5


def test_new_character_factory():
    assert isinstance(new_character(CharacterType.GHOUL), GhoulCharacter)
    assert isinstance(new_character("Mage"), MageCharacter)
    assert isinstance(new_character(CharacterType.VAMPIRE), VampireCharacter)


def test_ids_are_unique():
    assert VampireCharacter().id != VampireCharacter().id


# --- Categories ---

def test_attribute_and_skill_categories():
    assert attribute_category("Stamina") == "physical"
    assert attribute_category("Composure") == "social"
    assert skill_category("Occult") == "mental"
    with pytest.raises(ValueError):
        attribute_category("Luck")
    with pytest.raises(ValueError):
        skill_category("Lockpick")


def test_free_specialization_skills():
    assert set(skills_requiring_free_specialization()) == {
        "Academics", "Craft", "Performance", "Science",
    }


# --- Attributes / skills ---

class TestAttributes:
    def test_set_attribute_stores_value(self):
        v = VampireCharacter()
        v.set_attribute("Strength", 4)
        assert v.get_attribute("Strength") == 4
        assert v.attributes["physical"]["Strength"] == 4

    def test_stamina_updates_health(self):
        v = VampireCharacter()
        v.set_attribute("Stamina", 3)
        assert v.health == 6
        assert len(v.health_states) == 6

    def test_resolve_and_composure_update_willpower(self):
        v = VampireCharacter()
        v.set_attribute("Resolve", 3)
        v.set_attribute("Composure", 2)
        assert v.willpower == 5

    @pytest.mark.parametrize("value", [0, 6])
    def test_out_of_range(self, value):
        v = VampireCharacter()
        with pytest.raises(ValueError, match="Strength must be 1-5"):
            v.set_attribute("Strength", value)

    def test_unknown_attribute(self):
        with pytest.raises(ValueError):
            VampireCharacter().set_attribute("Luck", 3)


class TestSkills:
    def test_set_skill(self):
        v = VampireCharacter()
        v.set_skill("Brawl", 2)
        assert v.get_skill("Brawl") == 2
        assert v.skills_with_points() == ["Brawl"]

    def test_skill_range(self):
        v = VampireCharacter()
        v.set_skill("Brawl", 0)
        with pytest.raises(ValueError):
            v.set_skill("Brawl", 6)
        with pytest.raises(ValueError):
            v.set_skill("Brawl", -1)

    def test_free_specialization_skills_with_points(self):
        v = VampireCharacter()
        v.set_skill("Craft", 1)
        v.set_skill("Brawl", 3)
        assert v.skills_requiring_free_specialization_with_points() == ["Craft"]


class TestSpecializations:
    def test_add_trims_text(self):
        v = VampireCharacter()
        spec = v.add_specialization("Craft", "  Carpentry ")
        assert spec.name == "Carpentry"
        assert [s.name for s in v.get_specializations("Craft")] == ["Carpentry"]

    def test_same_text_on_different_skills(self):
        v = VampireCharacter()
        v.add_specialization("Craft", "Art")
        v.add_specialization("Performance", "Art")
        assert len(v.specializations) == 2

    def test_duplicate_rejected(self):
        v = VampireCharacter()
        v.add_specialization("Craft", "Art")
        with pytest.raises(ValueError, match="already has"):
            v.add_specialization("Craft", "Art")

    def test_empty_rejected(self):
        with pytest.raises(ValueError, match="empty"):
            VampireCharacter().add_specialization("Craft", "   ")

    def test_remove(self):
        v = VampireCharacter()
        v.add_specialization("Craft", "Art")
        assert v.remove_specialization("Craft", "Art")
        assert not v.remove_specialization("Craft", "Art")


# --- Backgrounds / experience ---

def test_background_totals():
    v = VampireCharacter()
    v.advantages = [Background("Allies", 3), Background("Haven", 2)]
    v.flaws = [Background("Enemy", -1)]
    assert v.total_advantage_cost == 5
    assert v.total_flaw_value == -1
    assert v.net_advantage_flaw_cost == 4
    assert Background("Enemy", -1).is_flaw


def test_available_experience():
    v = VampireCharacter(experience=15, spent_experience=6)
    assert v.available_experience == 9


def test_clone_is_independent():
    v = VampireCharacter(name="Ada")
    copy = v.clone()
    copy.set_skill("Brawl", 2)
    copy.convictions.append("Never kill")
    assert copy.id == v.id
    assert v.get_skill("Brawl") == 0
    assert v.convictions == []


# --- V5 disciplines ---

class TestV5Disciplines:
    def test_set_level_creates_progress(self):
        v = VampireCharacter()
        v.set_v5_discipline_level("Animalism", 2)
        progress = v.get_v5_discipline_progress("Animalism")
        assert progress.current_level == 2
        assert progress.accessible_levels() == [1, 2]
        assert v.is_using_v5_disciplines

    def test_level_zero_removes(self):
        v = VampireCharacter()
        v.set_v5_discipline_level("Animalism", 2)
        v.set_v5_discipline_level("Animalism", 0)
        assert v.get_v5_discipline_progress("Animalism") is None

    def test_level_out_of_range(self):
        with pytest.raises(ValueError):
            VampireCharacter().set_v5_discipline_level("Animalism", 6)

    def test_toggle_power(self):
        v = VampireCharacter()
        v.set_v5_discipline_level("Animalism", 1)
        assert v.toggle_v5_power(_bond_famulus(), "Animalism", 1)
        selected = v.get_selected_v5_powers("Animalism", 1)
        assert [p.name for p in selected] == ["Bond Famulus"]

        assert v.toggle_v5_power(_bond_famulus(), "Animalism", 1)
        assert v.get_selected_v5_powers("Animalism", 1) == []

    def test_toggle_requires_accessible_level(self):
        v = VampireCharacter()
        v.set_v5_discipline_level("Animalism", 1)
        feral = catalog_power_id("Animalism", 2, "Feral Whispers")
        assert not v.toggle_v5_power(feral, "Animalism", 2)

    def test_toggle_without_discipline(self):
        assert not VampireCharacter().toggle_v5_power(_bond_famulus(), "Animalism", 1)

    def test_lowering_level_drops_selections(self):
        v = VampireCharacter()
        v.set_v5_discipline_level("Animalism", 2)
        feral = catalog_power_id("Animalism", 2, "Feral Whispers")
        v.toggle_v5_power(feral, "Animalism", 2)
        v.set_v5_discipline_level("Animalism", 1)
        assert v.get_selected_v5_powers("Animalism", 2) == []

    def test_custom_discipline(self):
        v = VampireCharacter()
        custom = V5Discipline(name="Thaumaturgy")
        custom.add_power(V5DisciplinePower("Taste", "Read blood", 1), 1)
        v.add_custom_v5_discipline(custom)
        assert custom.is_custom
        assert "Thaumaturgy" in [d.name for d in v.all_available_v5_disciplines()]
        with pytest.raises(ValueError, match="already exists"):
            v.add_custom_v5_discipline(V5Discipline(name="Thaumaturgy"))
        with pytest.raises(ValueError, match="already exists"):
            v.add_custom_v5_discipline(V5Discipline(name="Animalism"))

    def test_migrate_legacy(self):
        v = VampireCharacter(disciplines={"Animalism": 2, "Auspex": 0, "Potence": 1})
        assert v.migrate_legacy_disciplines_to_v5() == 2
        assert v.get_v5_discipline_progress("Animalism").current_level == 2
        assert v.get_v5_discipline_progress("Auspex") is None
        assert v.migrate_legacy_disciplines_to_v5() == 0


# --- Mage ---

def test_set_sphere():
    m = MageCharacter()
    m.set_sphere("Forces", 3)
    assert m.spheres["Forces"] == 3
    with pytest.raises(ValueError, match="Unknown sphere"):
        m.set_sphere("Fire", 1)
    with pytest.raises(ValueError):
        m.set_sphere("Forces", 6)
