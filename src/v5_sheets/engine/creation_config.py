"""Configuration knobs for character creation.

Defaults follow the V5 core rules. Chronicles with house rules may swap
the attribute spread, the skill presets, or the specialization allowance.
"""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class SkillPreset:
    """A named skill distribution, e.g. "Balanced" = 3/3/3/2/2/2/2/2/1x7."""

    name: str
    values: tuple[int, ...]


DEFAULT_ATTRIBUTE_POOL: tuple[int, ...] = (4, 3, 3, 3, 2, 2, 2, 2, 1)

DEFAULT_SKILL_PRESETS: tuple[SkillPreset, ...] = (
    SkillPreset("Jack of all trades", (3,) + (2,) * 8 + (1,) * 10),
    SkillPreset("Balanced", (3, 3, 3) + (2,) * 5 + (1,) * 7),
    SkillPreset("Specialist", (4, 3, 3, 3, 2, 2, 2, 1, 1, 1)),
)


@dataclass(slots=True)
class CreationConfig:
    """Tuneable parameters for the creation wizard."""

    attribute_pool: tuple[int, ...] = DEFAULT_ATTRIBUTE_POOL
    skill_presets: tuple[SkillPreset, ...] = DEFAULT_SKILL_PRESETS
    extra_free_specializations: int = 1   # On top of the mandatory ones
    max_dots: int = 5
    vampire_discipline_dots: int = 3      # Two disciplines at 2 + 1 in V5
    ghoul_discipline_dots: int = 1
    mage_sphere_dots: int = 6
    require_preset_match: bool = True     # Skills must fit some preset
    skip_predator_stage: bool = False
