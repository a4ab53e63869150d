"""Tests for change summaries and the session/change log."""

import pytest

from v5_sheets.engine.change_log import (
    change_summary,
    record_changes,
    record_session_change,
)
from v5_sheets.models.character import GhoulCharacter, MageCharacter, VampireCharacter
from v5_sheets.models.disciplines import catalog_power_id
from v5_sheets.models.traits import Background, Specialization


def _vampire() -> VampireCharacter:
    return VampireCharacter(name="Ada", chronicle_name="Chicago", clan="Toreador")


# --- Summaries ---

def test_no_changes_is_empty():
    v = _vampire()
    assert change_summary(v, v.clone()) == ""


def test_attribute_change():
    v = _vampire()
    edited = v.clone()
    edited.set_attribute("Strength", 3)
    assert change_summary(v, edited) == "strength 1→3"


def test_skill_change():
    v = _vampire()
    edited = v.clone()
    edited.set_skill("Animal Ken", 2)
    assert change_summary(v, edited) == "animal ken 0→2"


def test_text_fields_are_reported_as_updated():
    v = _vampire()
    edited = v.clone()
    edited.character_description = "Tall, pale"
    edited.notes = "Owes a boon"
    lines = change_summary(v, edited).split("\n")
    assert lines == ["character description updated", "notes updated"]


def test_name_change_shows_values():
    v = _vampire()
    edited = v.clone()
    edited.name = "Adeline"
    assert change_summary(v, edited) == "name Ada→Adeline"


def test_v5_discipline_level():
    v = _vampire()
    v.set_v5_discipline_level("Animalism", 2)
    edited = v.clone()
    edited.set_v5_discipline_level("Animalism", 3)
    edited.set_v5_discipline_level("Auspex", 1)
    assert change_summary(v, edited).split("\n") == [
        "animalism level 2→3",
        "auspex level 0→1",
    ]


def test_v5_power_selection():
    v = _vampire()
    v.set_v5_discipline_level("Animalism", 1)
    edited = v.clone()
    edited.toggle_v5_power(catalog_power_id("Animalism", 1, "Bond Famulus"), "Animalism", 1)
    assert change_summary(v, edited) == "animalism powers added: Bond Famulus"


def test_vampire_fields():
    v = _vampire()
    edited = v.clone()
    edited.humanity = 6
    edited.hunger = 3
    edited.predator_path = "Siren"
    assert change_summary(v, edited).split("\n") == [
        "humanity 7→6",
        "hunger 1→3",
        "predator path none→Siren",
    ]


def test_list_changes():
    v = _vampire()
    v.advantages = [Background("Haven", 2)]
    v.convictions = ["Protect the weak"]
    edited = v.clone()
    edited.advantages = [Background("Allies", 3)]
    edited.flaws = [Background("Enemy", -1)]
    edited.convictions = []
    edited.specializations = [Specialization("Craft", "Art")]
    assert change_summary(v, edited).split("\n") == [
        "convictions removed: Protect the weak",
        "specializations added: Craft: Art",
        "advantages removed: Haven",
        "advantages added: Allies",
        "flaws added: Enemy",
    ]


def test_mage_spheres_and_arete():
    m = MageCharacter(name="Mira")
    m.set_sphere("Forces", 2)
    edited = m.clone()
    edited.set_sphere("Forces", 3)
    edited.arete = 4
    assert change_summary(m, edited).split("\n") == ["arete 2→4", "forces 2→3"]


def test_ghoul_disciplines():
    g = GhoulCharacter(disciplines={"Potence": 1})
    edited = g.clone()
    edited.disciplines["Potence"] = 2
    assert change_summary(g, edited) == "potence 1→2"


def test_experience():
    v = _vampire()
    edited = v.clone()
    edited.experience = 10
    assert change_summary(v, edited) == "experience 0→10"


def test_type_mismatch():
    with pytest.raises(ValueError, match="Cannot compare"):
        change_summary(VampireCharacter(), MageCharacter())


# --- Recording ---

def test_record_changes_appends_entry():
    v = _vampire()
    edited = v.clone()
    edited.set_attribute("Wits", 2)
    summary = record_changes(v, edited)
    assert summary == "wits 1→2"
    assert [e.summary for e in edited.change_log] == ["wits 1→2"]
    assert v.change_log == []


def test_record_changes_without_changes():
    v = _vampire()
    edited = v.clone()
    assert record_changes(v, edited) == ""
    assert edited.change_log == []


class TestSessionChange:
    def test_logs_jump(self):
        v = _vampire()
        assert record_session_change(v, 3)
        assert v.current_session == 3
        assert v.change_log[-1].summary == "Session changed from 1 to 3"

    def test_same_session(self):
        v = _vampire()
        assert not record_session_change(v, 1)
        assert v.change_log == []

    @pytest.mark.parametrize("session", [0, -2])
    def test_must_be_positive(self, session):
        with pytest.raises(ValueError, match="positive"):
            record_session_change(_vampire(), session)
