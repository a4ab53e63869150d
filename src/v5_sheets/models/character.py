"""Character sheet data model.

A sheet is a ``CharacterBase`` subclass per character type. Attributes and
skills are nested maps ``category -> trait name -> dots`` so the three
columns of the printed sheet stay grouped. Derived health and willpower
are kept on the record (they are persisted) and recomputed through
``models.derived_stats`` whenever Stamina, Resolve or Composure change.
"""

from __future__ import annotations

import copy
import uuid
from dataclasses import dataclass, field
from datetime import date
from typing import ClassVar

from v5_sheets.models import derived_stats
from v5_sheets.models.constants import (
    ALL_SKILLS,
    ATTRIBUTES_BY_CATEGORY,
    DEFAULT_ATTRIBUTE_VALUE,
    DEFAULT_SKILL_VALUE,
    MAGE_SPHERES,
    MAGE_TRACK_LENGTH,
    MAX_DOTS,
    MIN_DOTS,
    SKILLS_BY_CATEGORY,
    CharacterType,
    attribute_category,
    skill_category,
    skills_requiring_free_specialization,
)
from v5_sheets.models.disciplines import (
    V5_DISCIPLINES,
    V5Discipline,
    V5DisciplinePower,
    V5DisciplineProgress,
)
from v5_sheets.models.predator import PredatorPath
from v5_sheets.models.traits import (
    Background,
    ChangeLogEntry,
    HealthState,
    HumanityState,
    MageTraitState,
    Specialization,
)

# Attributes that feed health/willpower.
_DERIVED_INPUTS = frozenset({"Stamina", "Resolve", "Composure"})

# creation_progress value for a finished character.
CREATION_COMPLETE = -1


def _default_attributes() -> dict[str, dict[str, int]]:
    return {
        category: {name: DEFAULT_ATTRIBUTE_VALUE for name in names}
        for category, names in ATTRIBUTES_BY_CATEGORY.items()
    }


def _default_skills() -> dict[str, dict[str, int]]:
    return {
        category: {name: DEFAULT_SKILL_VALUE for name in names}
        for category, names in SKILLS_BY_CATEGORY.items()
    }


def _new_id() -> str:
    return str(uuid.uuid4())


@dataclass
class CharacterBase:
    """Fields and behaviour shared by every sheet type."""

    character_type: ClassVar[CharacterType]

    # Identity
    id: str = field(default_factory=_new_id)
    name: str = ""
    chronicle_name: str = ""
    concept: str = ""

    # Traits: category -> name -> dots
    attributes: dict[str, dict[str, int]] = field(default_factory=_default_attributes)
    skills: dict[str, dict[str, int]] = field(default_factory=_default_skills)
    specializations: list[Specialization] = field(default_factory=list)

    # Derived (recomputed in __post_init__ and on attribute edits)
    health: int = 0
    willpower: int = 0
    health_states: list[HealthState] = field(default_factory=list)
    willpower_states: list[HealthState] = field(default_factory=list)

    experience: int = 0
    spent_experience: int = 0

    # Narrative
    ambition: str = ""
    desire: str = ""
    character_description: str = ""
    notes: str = ""
    date_of_birth: date | None = None
    convictions: list[str] = field(default_factory=list)
    touchstones: list[str] = field(default_factory=list)

    advantages: list[Background] = field(default_factory=list)
    flaws: list[Background] = field(default_factory=list)

    # Bookkeeping
    current_session: int = 1
    change_log: list[ChangeLogEntry] = field(default_factory=list)
    is_archived: bool = False
    creation_progress: int = CREATION_COMPLETE

    def __post_init__(self) -> None:
        derived_stats.recalculate(self)

    # --- Attributes / skills ------------------------------------------------

    def get_attribute(self, name: str) -> int:
        return self.attributes[attribute_category(name)].get(name, DEFAULT_ATTRIBUTE_VALUE)

    def set_attribute(self, name: str, value: int) -> None:
        """Set an attribute (1-5) and refresh derived values if needed."""
        category = attribute_category(name)
        if value < 1 or value > MAX_DOTS:
            raise ValueError(f"{name} must be 1-{MAX_DOTS}, got {value}")
        self.attributes[category][name] = value
        if name in _DERIVED_INPUTS:
            derived_stats.recalculate(self)

    def all_attributes(self) -> dict[str, int]:
        return {
            name: values[name]
            for values in self.attributes.values()
            for name in values
        }

    def get_skill(self, name: str) -> int:
        return self.skills[skill_category(name)].get(name, DEFAULT_SKILL_VALUE)

    def set_skill(self, name: str, value: int) -> None:
        category = skill_category(name)
        if value < MIN_DOTS or value > MAX_DOTS:
            raise ValueError(f"{name} must be {MIN_DOTS}-{MAX_DOTS}, got {value}")
        self.skills[category][name] = value

    def all_skills(self) -> dict[str, int]:
        return {name: self.get_skill(name) for name in ALL_SKILLS}

    def skills_with_points(self) -> list[str]:
        return [name for name in ALL_SKILLS if self.get_skill(name) > 0]

    def skills_requiring_free_specialization_with_points(self) -> list[str]:
        return [
            name for name in skills_requiring_free_specialization()
            if self.get_skill(name) > 0
        ]

    # --- Specializations ----------------------------------------------------

    def get_specializations(self, skill_name: str) -> list[Specialization]:
        return [s for s in self.specializations if s.skill_name == skill_name]

    def add_specialization(self, skill_name: str, text: str) -> Specialization:
        """Add a (skill, text) specialization. Text is trimmed; pairs are unique."""
        skill_category(skill_name)
        text = text.strip()
        if not text:
            raise ValueError("Specialization text cannot be empty")
        spec = Specialization(skill_name=skill_name, name=text)
        if spec in self.specializations:
            raise ValueError(f"{skill_name} already has specialization {text!r}")
        self.specializations.append(spec)
        return spec

    def remove_specialization(self, skill_name: str, text: str) -> bool:
        spec = Specialization(skill_name=skill_name, name=text)
        if spec not in self.specializations:
            return False
        self.specializations.remove(spec)
        return True

    # --- Backgrounds / experience -------------------------------------------

    @property
    def total_advantage_cost(self) -> int:
        return sum(bg.cost for bg in self.advantages)

    @property
    def total_flaw_value(self) -> int:
        return sum(bg.cost for bg in self.flaws)

    @property
    def net_advantage_flaw_cost(self) -> int:
        return self.total_advantage_cost + self.total_flaw_value

    @property
    def available_experience(self) -> int:
        return self.experience - self.spent_experience

    # --- Derived ------------------------------------------------------------

    @property
    def health_box_count(self) -> int:
        return derived_stats.health_for(self.get_attribute("Stamina"))

    @property
    def willpower_box_count(self) -> int:
        return derived_stats.willpower_for(
            self.get_attribute("Resolve"), self.get_attribute("Composure"),
        )

    def recalculate_derived_values(self) -> None:
        derived_stats.recalculate(self)

    # --- Lifecycle ----------------------------------------------------------

    @property
    def is_in_creation(self) -> bool:
        return self.creation_progress != CREATION_COMPLETE

    def clone(self) -> CharacterBase:
        """Deep copy, keeping the same id."""
        return copy.deepcopy(self)


@dataclass
class VampireCharacter(CharacterBase):
    character_type: ClassVar[CharacterType] = CharacterType.VAMPIRE

    clan: str = ""
    generation: int = 13
    blood_potency: int = 1
    humanity: int = 7
    hunger: int = 1
    humanity_states: list[HumanityState] = field(
        default_factory=lambda: derived_stats.humanity_track(7)
    )
    # Legacy name → dots map from sheets made before V5 powers were tracked.
    disciplines: dict[str, int] = field(default_factory=dict)
    v5_disciplines: dict[str, V5DisciplineProgress] = field(default_factory=dict)
    custom_v5_disciplines: list[V5Discipline] = field(default_factory=list)
    predator_path: str = ""
    custom_predator_paths: list[PredatorPath] = field(default_factory=list)
    date_of_embrace: date | None = None

    # --- V5 disciplines -----------------------------------------------------

    def _find_discipline(self, name: str) -> V5Discipline | None:
        for custom in self.custom_v5_disciplines:
            if custom.name == name:
                return custom
        return V5_DISCIPLINES.get(name)

    def all_available_v5_disciplines(self) -> list[V5Discipline]:
        catalog = sorted(V5_DISCIPLINES.values(), key=lambda d: d.name)
        return catalog + list(self.custom_v5_disciplines)

    def get_v5_discipline_progress(self, name: str) -> V5DisciplineProgress | None:
        return self.v5_disciplines.get(name)

    def set_v5_discipline_level(self, name: str, level: int) -> None:
        """Set dots in a discipline; 0 removes it. Selections above the level are dropped."""
        if level < 0 or level > MAX_DOTS:
            raise ValueError(f"Discipline level must be 0-{MAX_DOTS}, got {level}")
        if level == 0:
            self.remove_v5_discipline(name)
            return
        progress = self.v5_disciplines.get(name)
        if progress is None:
            self.v5_disciplines[name] = V5DisciplineProgress(name, current_level=level)
            return
        progress.current_level = level
        progress.drop_levels_above(level)

    def remove_v5_discipline(self, name: str) -> bool:
        return self.v5_disciplines.pop(name, None) is not None

    def toggle_v5_power(self, power_id: str, discipline_name: str, level: int) -> bool:
        """Toggle a power selection. Returns True if the toggle was applied."""
        progress = self.v5_disciplines.get(discipline_name)
        if progress is None or level not in progress.accessible_levels():
            return False
        progress.toggle_power(power_id, level)
        return True

    def get_selected_v5_powers(self, discipline_name: str, level: int) -> list[V5DisciplinePower]:
        progress = self.v5_disciplines.get(discipline_name)
        discipline = self._find_discipline(discipline_name)
        if progress is None or discipline is None:
            return []
        selected = progress.get_selected_powers(level)
        return [p for p in discipline.get_powers(level) if p.id in selected]

    def add_custom_v5_discipline(self, discipline: V5Discipline) -> None:
        if not discipline.name.strip():
            raise ValueError("Discipline name cannot be empty")
        if self._find_discipline(discipline.name) is not None:
            raise ValueError(f"Discipline {discipline.name!r} already exists")
        discipline.is_custom = True
        self.custom_v5_disciplines.append(discipline)

    def migrate_legacy_disciplines_to_v5(self) -> int:
        """Copy legacy discipline dots into V5 progress. Returns how many were added."""
        migrated = 0
        for name, dots in self.disciplines.items():
            if dots > 0 and name not in self.v5_disciplines:
                self.v5_disciplines[name] = V5DisciplineProgress(
                    name, current_level=min(dots, MAX_DOTS),
                )
                migrated += 1
        return migrated

    @property
    def is_using_v5_disciplines(self) -> bool:
        return bool(self.v5_disciplines)


@dataclass
class GhoulCharacter(CharacterBase):
    character_type: ClassVar[CharacterType] = CharacterType.GHOUL

    humanity: int = 7
    humanity_states: list[HumanityState] = field(
        default_factory=lambda: derived_stats.humanity_track(7)
    )
    disciplines: dict[str, int] = field(default_factory=dict)
    date_of_ghouling: date | None = None


@dataclass
class MageCharacter(CharacterBase):
    character_type: ClassVar[CharacterType] = CharacterType.MAGE

    spheres: dict[str, int] = field(
        default_factory=lambda: {name: 0 for name in MAGE_SPHERES}
    )
    arete: int = 2
    paradox: int = 1
    hubris: int = 0
    quiet: int = 0
    hubris_states: list[MageTraitState] = field(
        default_factory=lambda: [MageTraitState.UNCHECKED] * MAGE_TRACK_LENGTH
    )
    quiet_states: list[MageTraitState] = field(
        default_factory=lambda: [MageTraitState.UNCHECKED] * MAGE_TRACK_LENGTH
    )

    def set_sphere(self, name: str, value: int) -> None:
        if name not in MAGE_SPHERES:
            raise ValueError(f"Unknown sphere: {name!r}")
        if value < MIN_DOTS or value > MAX_DOTS:
            raise ValueError(f"{name} must be {MIN_DOTS}-{MAX_DOTS}, got {value}")
        self.spheres[name] = value


Character = VampireCharacter | GhoulCharacter | MageCharacter

CHARACTER_CLASSES: dict[CharacterType, type[CharacterBase]] = {
    CharacterType.VAMPIRE: VampireCharacter,
    CharacterType.GHOUL: GhoulCharacter,
    CharacterType.MAGE: MageCharacter,
}


def new_character(character_type: CharacterType | str) -> CharacterBase:
    """Blank sheet of the given type."""
    return CHARACTER_CLASSES[CharacterType(character_type)]()
