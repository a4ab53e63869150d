"""Creation wizard: a linear, validation-gated walk through the new-sheet stages.

The wizard owns the in-progress sheet and the attribute pool. Each stage
has a gate (``errors(stage)``); ``next()`` only advances when the current
stage's gate passes. Stages that do not apply to the chosen character
type (Clan and Predator Path for non-vampires) are skipped in both
directions. Mutation helpers raise ``ValueError`` on rule violations so
the caller can surface the message verbatim.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

from v5_sheets.engine.creation_config import CreationConfig, SkillPreset
from v5_sheets.engine.point_pool import (
    AttributePool,
    available_presets,
    available_skill_values,
    can_set_skill,
    matching_preset,
)
from v5_sheets.engine.sheet_editor import (
    add_background,
    append_unique,
    remove_background,
    remove_if_present,
)
from v5_sheets.models.character import (
    CREATION_COMPLETE,
    CharacterBase,
    GhoulCharacter,
    MageCharacter,
    VampireCharacter,
    new_character,
)
from v5_sheets.models.constants import (
    CLANS,
    DISCIPLINES,
    CharacterType,
    skills_requiring_free_specialization,
)
from v5_sheets.models.predator import select_predator_path
from v5_sheets.models.traits import Background, Specialization


class CreationStage(IntEnum):
    CHARACTER_TYPE = 0
    NAME_AND_CHRONICLE = 1
    CLAN = 2
    PREDATOR_PATH = 3
    ATTRIBUTES = 4
    SKILLS = 5
    SPECIALIZATIONS = 6
    DISCIPLINES = 7
    MERITS_AND_FLAWS = 8
    CONVICTIONS_AND_TOUCHSTONES = 9
    AMBITION_AND_DESIRE = 10


STAGE_TITLES: dict[CreationStage, str] = {
    CreationStage.CHARACTER_TYPE: "Character Type",
    CreationStage.NAME_AND_CHRONICLE: "Name & Chronicle",
    CreationStage.CLAN: "Clan",
    CreationStage.PREDATOR_PATH: "Predator Path",
    CreationStage.ATTRIBUTES: "Attributes",
    CreationStage.SKILLS: "Skills",
    CreationStage.SPECIALIZATIONS: "Specializations",
    CreationStage.DISCIPLINES: "Disciplines",
    CreationStage.MERITS_AND_FLAWS: "Merits & Flaws",
    CreationStage.CONVICTIONS_AND_TOUCHSTONES: "Convictions & Touchstones",
    CreationStage.AMBITION_AND_DESIRE: "Ambition & Desire",
}

_VAMPIRE_ONLY = frozenset({CreationStage.CLAN, CreationStage.PREDATOR_PATH})


@dataclass(slots=True)
class CreationError:
    """A single gate failure on a wizard stage."""

    stage: CreationStage
    category: str      # "name" | "chronicle" | "clan" | "attributes" | "skills" | ...
    message: str


class CreationWizard:
    """Builds one new character stage by stage."""

    __slots__ = ("_config", "_character", "_pool", "_stage")

    def __init__(
        self,
        character_type: CharacterType = CharacterType.VAMPIRE,
        config: CreationConfig | None = None,
    ) -> None:
        self._config = config or CreationConfig()
        self._character: CharacterBase = new_character(character_type)
        self._character.creation_progress = int(CreationStage.CHARACTER_TYPE)
        self._pool = AttributePool(self._config.attribute_pool)
        self._stage = CreationStage.CHARACTER_TYPE

    @classmethod
    def resume(
        cls,
        character: CharacterBase,
        config: CreationConfig | None = None,
    ) -> CreationWizard:
        """Continue a sheet that was saved part-way through creation."""
        wizard = cls(character.character_type, config)
        wizard._character = character
        wizard._pool = AttributePool.from_character(character, wizard._config.attribute_pool)
        progress = max(character.creation_progress, 0)
        stage = CreationStage(min(progress, max(CreationStage)))
        while not wizard.applies(stage):
            stage = CreationStage(stage - 1)
        wizard._stage = stage
        character.creation_progress = int(stage)
        return wizard

    # --- Properties ---------------------------------------------------------

    @property
    def character(self) -> CharacterBase:
        return self._character

    @property
    def pool(self) -> AttributePool:
        return self._pool

    @property
    def config(self) -> CreationConfig:
        return self._config

    @property
    def stage(self) -> CreationStage:
        return self._stage

    @property
    def is_vampire(self) -> bool:
        return isinstance(self._character, VampireCharacter)

    # --- Navigation ---------------------------------------------------------

    def applies(self, stage: CreationStage) -> bool:
        if stage in _VAMPIRE_ONLY and not self.is_vampire:
            return False
        if stage == CreationStage.PREDATOR_PATH and self._config.skip_predator_stage:
            return False
        return True

    def stages(self) -> list[CreationStage]:
        """Stages that apply to the current character type, in order."""
        return [s for s in CreationStage if self.applies(s)]

    def stage_title(self, stage: CreationStage | None = None) -> str:
        stage = self._stage if stage is None else stage
        if stage == CreationStage.DISCIPLINES and isinstance(self._character, MageCharacter):
            return "Spheres"
        return STAGE_TITLES[stage]

    @property
    def progress(self) -> float:
        """Fraction of the applicable stages reached, in (0, 1]."""
        stages = self.stages()
        return (stages.index(self._stage) + 1) / len(stages)

    @property
    def is_last_stage(self) -> bool:
        return self._stage == self.stages()[-1]

    def can_proceed(self) -> bool:
        return not self.errors()

    def next(self) -> bool:
        """Advance past the current stage if its gate passes."""
        if not self.can_proceed() or self.is_last_stage:
            return False
        stages = self.stages()
        self._stage = stages[stages.index(self._stage) + 1]
        self._character.creation_progress = int(self._stage)
        return True

    def back(self) -> bool:
        stages = self.stages()
        idx = stages.index(self._stage)
        if idx == 0:
            return False
        self._stage = stages[idx - 1]
        self._character.creation_progress = int(self._stage)
        return True

    # --- Validation ---------------------------------------------------------

    def errors(self, stage: CreationStage | None = None) -> list[CreationError]:
        """Gate failures for one stage (default: the current one)."""
        stage = self._stage if stage is None else stage
        ch = self._character
        errs: list[CreationError] = []

        if stage == CreationStage.NAME_AND_CHRONICLE:
            if not ch.name.strip():
                errs.append(CreationError(stage, "name", "Character name is required"))
            if not ch.chronicle_name.strip():
                errs.append(CreationError(stage, "chronicle", "Chronicle name is required"))

        elif stage == CreationStage.CLAN:
            if isinstance(ch, VampireCharacter) and not ch.clan:
                errs.append(CreationError(stage, "clan", "Choose a clan"))

        elif stage == CreationStage.ATTRIBUTES:
            if not self._pool.is_complete:
                left = len(self._pool.unassigned_attributes())
                errs.append(CreationError(
                    stage, "attributes", f"{left} attribute(s) still need a value",
                ))

        elif stage == CreationStage.SKILLS:
            if self._config.require_preset_match and not self.available_presets():
                errs.append(CreationError(
                    stage, "skills", "Skill values do not fit any skill distribution",
                ))

        elif stage == CreationStage.SPECIALIZATIONS:
            for skill in ch.skills_requiring_free_specialization_with_points():
                if not ch.get_specializations(skill):
                    errs.append(CreationError(
                        stage, "specializations", f"{skill} requires a specialization",
                    ))
            extra = self.extra_specializations_used()
            if extra > self._config.extra_free_specializations:
                errs.append(CreationError(
                    stage,
                    "specializations",
                    f"Only {self._config.extra_free_specializations} additional "
                    f"specialization(s) allowed, {extra} chosen",
                ))

        elif stage == CreationStage.DISCIPLINES:
            spent, budget = self.power_dots_spent(), self.power_dot_budget()
            if spent > budget:
                errs.append(CreationError(
                    stage, "disciplines", f"{spent} dots assigned, at most {budget} allowed",
                ))

        return errs

    def validate(self) -> list[CreationError]:
        """Gate failures across every applicable stage."""
        return [err for stage in self.stages() for err in self.errors(stage)]

    def finish(self) -> CharacterBase:
        """Finalize the sheet. Raises ValueError if any stage gate fails."""
        errs = self.validate()
        if errs:
            raise ValueError("; ".join(e.message for e in errs))
        self._pool.apply_to(self._character)
        self._character.recalculate_derived_values()
        self._character.creation_progress = CREATION_COMPLETE
        return self._character

    # --- Character type -----------------------------------------------------

    def select_type(self, character_type: CharacterType) -> None:
        """Switch sheet type, keeping identity and narrative text entered so far."""
        character_type = CharacterType(character_type)
        if character_type == self._character.character_type:
            return
        old = self._character
        fresh = new_character(character_type)
        fresh.id = old.id
        fresh.name = old.name
        fresh.chronicle_name = old.chronicle_name
        fresh.concept = old.concept
        fresh.creation_progress = old.creation_progress
        self._character = fresh
        self._pool.reset()
        if not self.applies(self._stage):
            self._stage = CreationStage.CHARACTER_TYPE
            fresh.creation_progress = int(self._stage)

    # --- Name / clan / predator ---------------------------------------------

    def set_name(self, name: str) -> None:
        self._character.name = name

    def set_chronicle(self, chronicle: str) -> None:
        self._character.chronicle_name = chronicle

    def set_concept(self, concept: str) -> None:
        self._character.concept = concept

    def set_clan(self, clan: str) -> None:
        if not isinstance(self._character, VampireCharacter):
            raise ValueError("Only vampires have a clan")
        if clan and clan not in CLANS:
            raise ValueError(f"Unknown clan: {clan!r}")
        self._character.clan = clan

    def set_predator_path(self, name: str) -> None:
        if not isinstance(self._character, VampireCharacter):
            raise ValueError("Only vampires have a predator path")
        select_predator_path(self._character, name)

    # --- Attributes ---------------------------------------------------------

    def assign_attribute(self, attribute: str, value: int) -> None:
        self._pool.assign(attribute, value)
        self._pool.apply_to(self._character)

    def move_attribute(self, source: str, target: str) -> None:
        self._pool.move(source, target)
        self._pool.apply_to(self._character)

    def unassign_attribute(self, attribute: str) -> None:
        self._pool.unassign(attribute)
        self._pool.apply_to(self._character)

    # --- Skills -------------------------------------------------------------

    def available_presets(self) -> list[SkillPreset]:
        return available_presets(self._character.all_skills(), self._config.skill_presets)

    def matching_preset(self) -> SkillPreset | None:
        return matching_preset(self._character.all_skills(), self._config.skill_presets)

    def available_skill_values(self, skill: str | None = None) -> list[int]:
        return available_skill_values(
            self._character.all_skills(), skill, self._config.skill_presets,
        )

    def set_skill(self, skill: str, value: int) -> None:
        if self._config.require_preset_match and not can_set_skill(
            self._character.all_skills(), skill, value, self._config.skill_presets,
        ):
            raise ValueError(f"{skill} {value} does not fit any skill distribution")
        self._character.set_skill(skill, value)
        if value == 0:
            # A skill without dots cannot keep specializations.
            for spec in self._character.get_specializations(skill):
                self._character.specializations.remove(spec)

    # --- Specializations ----------------------------------------------------

    def extra_specializations_used(self) -> int:
        """Specializations beyond the one each required skill gets for free."""
        required = set(skills_requiring_free_specialization())
        extra = 0
        covered: set[str] = set()
        for spec in self._character.specializations:
            if spec.skill_name in required and spec.skill_name not in covered:
                covered.add(spec.skill_name)
                continue
            extra += 1
        return extra

    def add_specialization(self, skill: str, text: str) -> Specialization:
        if self._character.get_skill(skill) <= 0:
            raise ValueError(f"{skill} needs at least one dot before a specialization")
        spec = self._character.add_specialization(skill, text)
        if self.extra_specializations_used() > self._config.extra_free_specializations:
            self._character.specializations.remove(spec)
            raise ValueError(
                f"Only {self._config.extra_free_specializations} additional "
                "specialization(s) allowed"
            )
        return spec

    def remove_specialization(self, skill: str, text: str) -> bool:
        return self._character.remove_specialization(skill, text)

    # --- Disciplines / spheres ----------------------------------------------

    def power_dot_budget(self) -> int:
        ch = self._character
        if isinstance(ch, MageCharacter):
            return self._config.mage_sphere_dots
        if isinstance(ch, GhoulCharacter):
            return self._config.ghoul_discipline_dots
        return self._config.vampire_discipline_dots

    def power_dots_spent(self) -> int:
        ch = self._character
        if isinstance(ch, MageCharacter):
            return sum(ch.spheres.values())
        if isinstance(ch, VampireCharacter):
            return sum(p.current_level for p in ch.v5_disciplines.values())
        if isinstance(ch, GhoulCharacter):
            return sum(ch.disciplines.values())
        return 0

    def set_discipline(self, name: str, level: int) -> None:
        ch = self._character
        if isinstance(ch, MageCharacter):
            raise ValueError("Mages learn spheres, not disciplines")
        if not 0 <= level <= self._config.max_dots:
            raise ValueError(f"Discipline level must be 0-{self._config.max_dots}, got {level}")
        if isinstance(ch, VampireCharacter):
            if name not in {d.name for d in ch.all_available_v5_disciplines()}:
                raise ValueError(f"Unknown discipline: {name!r}")
            current = ch.v5_disciplines.get(name)
            before = current.current_level if current else 0
        else:
            if name not in DISCIPLINES:
                raise ValueError(f"Unknown discipline: {name!r}")
            before = ch.disciplines.get(name, 0)
        if self.power_dots_spent() - before + level > self.power_dot_budget():
            raise ValueError(f"Only {self.power_dot_budget()} discipline dot(s) available")
        if isinstance(ch, VampireCharacter):
            ch.set_v5_discipline_level(name, level)
        elif level == 0:
            ch.disciplines.pop(name, None)
        else:
            ch.disciplines[name] = level

    def set_sphere(self, name: str, value: int) -> None:
        ch = self._character
        if not isinstance(ch, MageCharacter):
            raise ValueError("Only mages have spheres")
        before = ch.spheres.get(name, 0)
        if self.power_dots_spent() - before + value > self.power_dot_budget():
            raise ValueError(f"Only {self.power_dot_budget()} sphere dot(s) available")
        ch.set_sphere(name, value)

    # --- Merits & flaws -----------------------------------------------------

    def add_advantage(self, name: str, cost: int | None = None, comment: str = "") -> Background:
        """Add a predefined advantage by name, or a custom one when ``cost`` is given."""
        return add_background(self._character, name, cost, comment, flaw=False)

    def add_flaw(self, name: str, cost: int | None = None, comment: str = "") -> Background:
        return add_background(self._character, name, cost, comment, flaw=True)

    def remove_advantage(self, name: str) -> bool:
        return remove_background(self._character.advantages, name)

    def remove_flaw(self, name: str) -> bool:
        return remove_background(self._character.flaws, name)

    # --- Convictions / touchstones / ambition -------------------------------

    def add_conviction(self, text: str) -> None:
        append_unique(self._character.convictions, text, "Conviction")

    def remove_conviction(self, text: str) -> bool:
        return remove_if_present(self._character.convictions, text)

    def add_touchstone(self, text: str) -> None:
        append_unique(self._character.touchstones, text, "Touchstone")

    def remove_touchstone(self, text: str) -> bool:
        return remove_if_present(self._character.touchstones, text)

    def set_ambition(self, text: str) -> None:
        self._character.ambition = text

    def set_desire(self, text: str) -> None:
        self._character.desire = text
