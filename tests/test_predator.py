"""Tests for the predator type catalog and per-vampire selection."""

import pytest

from v5_sheets.models.character import VampireCharacter
from v5_sheets.models.predator import (
    NONE_PATH_NAME,
    PREDATOR_PATHS,
    PredatorBonusType,
    PredatorPath,
    add_custom_predator_path,
    all_predator_path_names,
    available_predator_paths,
    get_predator_path,
    select_predator_path,
)


def test_catalog_has_ten_paths():
    assert len(PREDATOR_PATHS) == 10
    assert "Farmer" in all_predator_path_names()
    assert NONE_PATH_NAME not in all_predator_path_names()


def test_every_path_is_described():
    for path in PREDATOR_PATHS:
        assert path.description, path.name
        assert path.feeding_description, path.name
        assert path.bonuses, path.name


def test_only_sandman_has_no_drawbacks():
    without = [p.name for p in PREDATOR_PATHS if not p.drawbacks]
    assert without == ["Sandman"]


def test_farmer_bonuses():
    farmer = get_predator_path("Farmer")
    disc = next(b for b in farmer.bonuses if b.type == PredatorBonusType.DISCIPLINE_DOT)
    spec = next(b for b in farmer.bonuses if b.type == PredatorBonusType.SKILL_SPECIALIZATION)
    assert disc.discipline_name == "Animalism"
    assert spec.skill_name == "Animal Ken"


def test_bonus_type_wire_values():
    assert PredatorBonusType.DISCIPLINE_DOT.value == "disciplineDot"
    assert PredatorBonusType.SKILL_SPECIALIZATION.value == "skillSpecialization"


def test_get_none_and_unknown():
    assert get_predator_path(NONE_PATH_NAME).name == NONE_PATH_NAME
    assert get_predator_path("Vegan") is None


# --- Selection ---

class TestSelection:
    def test_select_known_path(self):
        v = VampireCharacter()
        select_predator_path(v, "Siren")
        assert v.predator_path == "Siren"

    @pytest.mark.parametrize("name", ["", NONE_PATH_NAME])
    def test_clear(self, name):
        v = VampireCharacter(predator_path="Siren")
        select_predator_path(v, name)
        assert v.predator_path == ""

    def test_unknown_rejected(self):
        with pytest.raises(ValueError, match="Unknown predator path"):
            select_predator_path(VampireCharacter(), "Vegan")


class TestCustomPaths:
    def test_add_and_select(self):
        v = VampireCharacter()
        path = PredatorPath(name="Night Nurse", description="Feeds in hospitals")
        add_custom_predator_path(v, path)
        assert path.is_custom
        select_predator_path(v, "Night Nurse")
        assert v.predator_path == "Night Nurse"

    def test_ordering(self):
        v = VampireCharacter()
        add_custom_predator_path(v, PredatorPath(name="Night Nurse", description=""))
        names = [p.name for p in available_predator_paths(v)]
        assert names[:10] == all_predator_path_names()
        assert names[10:] == ["Night Nurse", NONE_PATH_NAME]

    @pytest.mark.parametrize("name", ["Farmer", NONE_PATH_NAME])
    def test_clash_with_catalog(self, name):
        with pytest.raises(ValueError, match="already exists"):
            add_custom_predator_path(VampireCharacter(), PredatorPath(name=name, description=""))

    def test_duplicate_custom(self):
        v = VampireCharacter()
        add_custom_predator_path(v, PredatorPath(name="Night Nurse", description=""))
        with pytest.raises(ValueError, match="already exists"):
            add_custom_predator_path(v, PredatorPath(name="Night Nurse", description=""))

    def test_empty_name(self):
        with pytest.raises(ValueError, match="empty"):
            add_custom_predator_path(VampireCharacter(), PredatorPath(name=" ", description=""))
