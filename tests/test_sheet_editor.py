"""Tests for in-play sheet edits: damage, stains, status values, merits."""

import pytest

from v5_sheets.engine.sheet_editor import (
    HEALTH,
    WILLPOWER,
    SheetEditor,
    apply_damage,
    heal_damage,
    mage_trait_track,
    sort_damage,
    stain_count,
)
from v5_sheets.models.character import GhoulCharacter, MageCharacter, VampireCharacter
from v5_sheets.models.disciplines import catalog_power_id
from v5_sheets.models.traits import HealthState, HumanityState, MageTraitState

OK = HealthState.OK
SUP = HealthState.SUPERFICIAL
AGG = HealthState.AGGRAVATED


# --- Damage tracks ---

class TestDamage:
    def test_sorted_aggravated_first(self):
        assert sort_damage([OK, SUP, AGG, SUP]) == [AGG, SUP, SUP, OK]

    def test_fills_first_open_box(self):
        assert apply_damage([OK, OK, OK], SUP) == [SUP, OK, OK]
        assert apply_damage([SUP, OK, OK], AGG) == [AGG, SUP, OK]

    def test_full_track_upgrades_superficial(self):
        assert apply_damage([SUP, SUP], SUP) == [AGG, SUP]
        assert apply_damage([AGG, SUP], AGG) == [AGG, AGG]

    def test_full_of_aggravated(self):
        with pytest.raises(ValueError, match="already full"):
            apply_damage([AGG, AGG], SUP)

    def test_ok_is_not_damage(self):
        with pytest.raises(ValueError, match="superficial or aggravated"):
            apply_damage([OK], OK)

    def test_heal(self):
        assert heal_damage([AGG, SUP, SUP, OK], SUP) == [AGG, SUP, OK, OK]
        assert heal_damage([AGG, SUP, OK], AGG) == [SUP, OK, OK]
        with pytest.raises(ValueError, match="No aggravated damage"):
            heal_damage([SUP, OK], AGG)

    def test_editor_tracks(self):
        v = VampireCharacter(name="Ada")
        editor = SheetEditor(v)
        editor.damage(HEALTH, AGG)
        editor.damage(WILLPOWER, SUP)
        assert v.health_states[0] == AGG
        assert v.willpower_states[0] == SUP
        assert len(v.health_states) == v.health
        editor.heal(HEALTH, AGG)
        assert AGG not in v.health_states

    def test_unknown_track(self):
        with pytest.raises(ValueError, match="Unknown track"):
            SheetEditor(VampireCharacter()).damage("blood", SUP)


# --- Humanity ---

class TestHumanity:
    def test_stains_fill_from_the_right(self):
        v = VampireCharacter(humanity=7)
        editor = SheetEditor(v)
        editor.add_stain()
        editor.add_stain()
        assert v.humanity_states[-2:] == [HumanityState.STAINED] * 2
        assert v.humanity_states[7] == HumanityState.UNCHECKED
        assert stain_count(v.humanity_states) == 2

    def test_no_room_for_stain(self):
        g = GhoulCharacter(humanity=9)
        editor = SheetEditor(g)
        editor.add_stain()
        with pytest.raises(ValueError, match="No unchecked humanity box"):
            editor.add_stain()

    def test_clear_stains(self):
        v = VampireCharacter()
        editor = SheetEditor(v)
        editor.add_stain()
        assert editor.clear_stains() == 1
        assert stain_count(v.humanity_states) == 0

    def test_set_humanity_keeps_stains_that_fit(self):
        v = VampireCharacter(humanity=7)
        editor = SheetEditor(v)
        editor.add_stain()
        editor.add_stain()
        editor.set_humanity(5)
        assert v.humanity == 5
        assert v.humanity_states.count(HumanityState.CHECKED) == 5
        assert stain_count(v.humanity_states) == 2
        editor.set_humanity(9)
        assert stain_count(v.humanity_states) == 1

    def test_humanity_range(self):
        with pytest.raises(ValueError, match="must be 0-10"):
            SheetEditor(VampireCharacter()).set_humanity(11)

    def test_mage_has_no_humanity(self):
        with pytest.raises(ValueError, match="has no humanity"):
            SheetEditor(MageCharacter()).add_stain()


# --- Type-specific status ---

class TestVampireStatus:
    def test_values(self):
        v = VampireCharacter()
        editor = SheetEditor(v)
        editor.set_hunger(5)
        editor.set_blood_potency(3)
        editor.set_generation(10)
        assert (v.hunger, v.blood_potency, v.generation) == (5, 3, 10)

    @pytest.mark.parametrize(
        "setter, value",
        [("set_hunger", 6), ("set_hunger", -1), ("set_blood_potency", 11), ("set_generation", 3),
         ("set_generation", 17)],
    )
    def test_out_of_range(self, setter, value):
        v = VampireCharacter()
        with pytest.raises(ValueError, match="must be"):
            getattr(SheetEditor(v), setter)(value)

    def test_ghoul_has_no_hunger(self):
        with pytest.raises(ValueError, match="Only vampires"):
            SheetEditor(GhoulCharacter()).set_hunger(2)

    def test_toggle_power(self):
        v = VampireCharacter()
        v.set_v5_discipline_level("Animalism", 1)
        power_id = catalog_power_id("Animalism", 1, "Bond Famulus")
        editor = SheetEditor(v)
        editor.toggle_power("Animalism", 1, power_id)
        assert [p.name for p in v.get_selected_v5_powers("Animalism", 1)] == ["Bond Famulus"]
        editor.toggle_power("Animalism", 1, power_id)
        assert v.get_selected_v5_powers("Animalism", 1) == []

    def test_toggle_power_above_level(self):
        v = VampireCharacter()
        v.set_v5_discipline_level("Animalism", 1)
        with pytest.raises(ValueError, match="no level 2 powers"):
            SheetEditor(v).toggle_power("Animalism", 2, "x")


class TestMageStatus:
    def test_tracks_follow_values(self):
        m = MageCharacter()
        editor = SheetEditor(m)
        editor.set_hubris(2)
        editor.set_quiet(1)
        assert m.hubris_states[:3] == [MageTraitState.CHECKED] * 2 + [MageTraitState.UNCHECKED]
        assert m.quiet_states.count(MageTraitState.CHECKED) == 1

    def test_ranges(self):
        editor = SheetEditor(MageCharacter())
        editor.set_arete(5)
        with pytest.raises(ValueError, match="Paradox must be 0-5"):
            editor.set_paradox(6)
        with pytest.raises(ValueError, match="Only mages"):
            SheetEditor(VampireCharacter()).set_arete(2)

    def test_trait_track_clamped(self):
        assert mage_trait_track(9, length=3) == [MageTraitState.CHECKED] * 3


# --- Experience, merits, specializations, text ---

class TestSheetFields:
    def test_experience(self):
        v = VampireCharacter()
        editor = SheetEditor(v)
        editor.set_experience(10, 4)
        assert v.available_experience == 6
        with pytest.raises(ValueError, match="Cannot spend 11"):
            editor.set_experience(10, 11)
        with pytest.raises(ValueError, match="negative"):
            editor.set_experience(-1, 0)

    def test_backgrounds(self):
        v = VampireCharacter()
        editor = SheetEditor(v)
        editor.add_advantage("Contacts", 2, "Dockworkers")
        editor.add_flaw("Bad Sight", -1)
        with pytest.raises(ValueError, match="already on the sheet"):
            editor.add_advantage("Contacts", 1)
        with pytest.raises(ValueError, match="negative"):
            editor.add_flaw("Odd", 2)
        assert editor.remove_advantage("Contacts")
        assert not editor.remove_advantage("Contacts")
        assert [bg.name for bg in v.flaws] == ["Bad Sight"]

    def test_specialization_needs_dots(self):
        v = VampireCharacter()
        editor = SheetEditor(v)
        with pytest.raises(ValueError, match="at least one dot"):
            editor.add_specialization("Medicine", "Surgery")
        v.set_skill("Medicine", 2)
        editor.add_specialization("Medicine", "Surgery")
        assert [s.name for s in v.get_specializations("Medicine")] == ["Surgery"]
        assert editor.remove_specialization("Medicine", "Surgery")

    def test_convictions_and_touchstones(self):
        v = VampireCharacter()
        editor = SheetEditor(v)
        editor.add_conviction("Never kill")
        editor.add_touchstone("My sister")
        with pytest.raises(ValueError, match="already added"):
            editor.add_conviction("Never kill")
        assert editor.remove_touchstone("My sister")
        assert v.convictions == ["Never kill"]
        assert v.touchstones == []

    def test_text_fields(self):
        v = VampireCharacter()
        editor = SheetEditor(v)
        editor.set_text("ambition", "Rule the city")
        editor.set_text("character_description", "Tall")
        assert (v.ambition, v.character_description) == ("Rule the city", "Tall")
        with pytest.raises(ValueError, match="not a text field"):
            editor.set_text("id", "x")
