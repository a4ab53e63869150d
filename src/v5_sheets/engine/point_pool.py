"""Point allocation for creation: the attribute pool and skill presets.

Attributes are dealt from a fixed multiset (4, 3, 3, 3, 2, 2, 2, 2, 1 by
default). Every value sits either on exactly one attribute or in the
unassigned pool, so at all times

    sorted(assigned values + unassigned) == sorted(starting multiset)

Skills are checked against presets instead: the non-zero skill values must
fit inside at least one preset's multiset.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Mapping

from v5_sheets.engine.creation_config import (
    DEFAULT_ATTRIBUTE_POOL,
    DEFAULT_SKILL_PRESETS,
    SkillPreset,
)
from v5_sheets.models.character import CharacterBase
from v5_sheets.models.constants import ALL_ATTRIBUTES


class AttributePool:
    """Drag-and-drop assignment of a fixed value multiset onto attributes."""

    __slots__ = ("_values", "_unassigned", "_assigned")

    def __init__(self, values: Iterable[int] = DEFAULT_ATTRIBUTE_POOL) -> None:
        self._values: tuple[int, ...] = tuple(sorted(values, reverse=True))
        if len(self._values) != len(ALL_ATTRIBUTES):
            raise ValueError(
                f"Attribute pool needs {len(ALL_ATTRIBUTES)} values, got {len(self._values)}"
            )
        self._unassigned: list[int] = list(self._values)
        self._assigned: dict[str, int] = {}

    @classmethod
    def from_character(
        cls,
        character: CharacterBase,
        values: Iterable[int] = DEFAULT_ATTRIBUTE_POOL,
    ) -> AttributePool:
        """Rebuild a completed pool if the sheet's attributes use the spread exactly.

        Otherwise (e.g. a fresh sheet with every attribute at 1) the pool
        starts empty-handed with everything unassigned.
        """
        pool = cls(values)
        current = character.all_attributes()
        if sorted(current.values(), reverse=True) == list(pool._values):
            pool._assigned = {name: current[name] for name in ALL_ATTRIBUTES}
            pool._unassigned = []
        return pool

    # --- Queries ------------------------------------------------------------

    @property
    def starting_values(self) -> tuple[int, ...]:
        return self._values

    def available_values(self) -> list[int]:
        """Unassigned values, highest first."""
        return sorted(self._unassigned, reverse=True)

    @property
    def assigned(self) -> dict[str, int]:
        return dict(self._assigned)

    def value_of(self, attribute: str) -> int | None:
        return self._assigned.get(attribute)

    def unassigned_attributes(self) -> list[str]:
        return [name for name in ALL_ATTRIBUTES if name not in self._assigned]

    @property
    def is_complete(self) -> bool:
        return not self._unassigned and len(self._assigned) == len(ALL_ATTRIBUTES)

    # --- Mutations ----------------------------------------------------------

    def assign(self, attribute: str, value: int) -> None:
        """Drop an unassigned value on an attribute.

        Whatever the attribute held before goes back to the pool.
        """
        self._check_attribute(attribute)
        if value not in self._unassigned:
            raise ValueError(f"Value {value} is not available in the pool")
        self._unassigned.remove(value)
        previous = self._assigned.get(attribute)
        if previous is not None:
            self._unassigned.append(previous)
        self._assigned[attribute] = value

    def move(self, source: str, target: str) -> None:
        """Drag a value from one attribute to another, swapping if occupied."""
        self._check_attribute(source)
        self._check_attribute(target)
        if source not in self._assigned:
            raise ValueError(f"{source} has no value to move")
        if source == target:
            return
        value = self._assigned.pop(source)
        displaced = self._assigned.get(target)
        if displaced is not None:
            self._assigned[source] = displaced
        self._assigned[target] = value

    def unassign(self, attribute: str) -> int | None:
        """Return an attribute's value to the pool. Returns the value, if any."""
        self._check_attribute(attribute)
        value = self._assigned.pop(attribute, None)
        if value is not None:
            self._unassigned.append(value)
        return value

    def reset(self) -> None:
        self._assigned.clear()
        self._unassigned = list(self._values)

    def apply_to(self, character: CharacterBase) -> None:
        """Write assigned values to the sheet; unassigned attributes stay at 1."""
        for name in ALL_ATTRIBUTES:
            character.set_attribute(name, self._assigned.get(name, 1))

    @staticmethod
    def _check_attribute(name: str) -> None:
        if name not in ALL_ATTRIBUTES:
            raise ValueError(f"Unknown attribute: {name!r}")


# ---------------------------------------------------------------------------
# Skill presets
# ---------------------------------------------------------------------------


def _nonzero(values: Iterable[int]) -> Counter[int]:
    return Counter(v for v in values if v > 0)


def can_use_preset(values: Iterable[int], preset: SkillPreset) -> bool:
    """True if the non-zero ``values`` fit inside the preset's multiset."""
    allowed = Counter(preset.values)
    used = _nonzero(values)
    return all(allowed[v] >= count for v, count in used.items())


def remaining_values(values: Iterable[int], preset: SkillPreset) -> list[int]:
    """Preset values not yet spent by ``values``, highest first."""
    left = Counter(preset.values)
    left.subtract(_nonzero(values))
    return sorted(left.elements(), reverse=True)


def available_presets(
    skill_values: Mapping[str, int],
    presets: Iterable[SkillPreset] = DEFAULT_SKILL_PRESETS,
) -> list[SkillPreset]:
    values = list(skill_values.values())
    return [p for p in presets if can_use_preset(values, p)]


def matching_preset(
    skill_values: Mapping[str, int],
    presets: Iterable[SkillPreset] = DEFAULT_SKILL_PRESETS,
) -> SkillPreset | None:
    """The preset the values use up exactly, if any."""
    used = _nonzero(skill_values.values())
    for preset in presets:
        if Counter(preset.values) == used:
            return preset
    return None


def available_skill_values(
    skill_values: Mapping[str, int],
    skill: str | None = None,
    presets: Iterable[SkillPreset] = DEFAULT_SKILL_PRESETS,
) -> list[int]:
    """Values a skill picker may offer, highest first; 0 is always allowed.

    When ``skill`` is given, its own current value is treated as free, so
    re-picking or swapping it stays possible.
    """
    values = dict(skill_values)
    if skill is not None:
        values[skill] = 0
    offered: set[int] = {0}
    for preset in available_presets(values, presets):
        offered.update(remaining_values(values.values(), preset))
    return sorted(offered, reverse=True)


def can_set_skill(
    skill_values: Mapping[str, int],
    skill: str,
    value: int,
    presets: Iterable[SkillPreset] = DEFAULT_SKILL_PRESETS,
) -> bool:
    """True if setting ``skill`` to ``value`` keeps some preset usable."""
    values = dict(skill_values)
    values[skill] = value
    return bool(available_presets(values, presets))
