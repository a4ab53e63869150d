"""Derived values: health and willpower, plus the box tracks that show them.

    health    = Stamina + 3
    willpower = Resolve + Composure

Whenever one of those attributes changes the totals are recomputed and the
damage tracks are resized: existing box states are kept, new boxes start
``ok``, and surplus boxes are dropped from the end.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, TypeVar

from v5_sheets.models.constants import HUMANITY_TRACK_LENGTH
from v5_sheets.models.traits import HealthState, HumanityState

if TYPE_CHECKING:
    from v5_sheets.models.character import CharacterBase

HEALTH_BASE = 3

_S = TypeVar("_S")


def health_for(stamina: int) -> int:
    return stamina + HEALTH_BASE


def willpower_for(resolve: int, composure: int) -> int:
    return resolve + composure


def resize_track(states: list[_S], size: int, fill: _S) -> list[_S]:
    """Return ``states`` truncated or padded with ``fill`` to ``size`` boxes."""
    size = max(size, 0)
    if len(states) >= size:
        return list(states[:size])
    return list(states) + [fill] * (size - len(states))


def humanity_track(
    humanity: int, length: int = HUMANITY_TRACK_LENGTH, stains: int = 0,
) -> list[HumanityState]:
    """Humanity track: ``humanity`` checked boxes from the left, ``stains`` from the right.

    Stains only ever occupy unchecked boxes, so they are capped at
    ``length - humanity``.
    """
    humanity = max(0, min(humanity, length))
    stains = max(0, min(stains, length - humanity))
    blank = length - humanity - stains
    return (
        [HumanityState.CHECKED] * humanity
        + [HumanityState.UNCHECKED] * blank
        + [HumanityState.STAINED] * stains
    )


def recalculate(character: CharacterBase) -> None:
    """Recompute health/willpower from attributes and resize both tracks."""
    character.health = health_for(character.get_attribute("Stamina"))
    character.willpower = willpower_for(
        character.get_attribute("Resolve"),
        character.get_attribute("Composure"),
    )
    character.health_states = resize_track(
        character.health_states, character.health, HealthState.OK,
    )
    character.willpower_states = resize_track(
        character.willpower_states, character.willpower, HealthState.OK,
    )


@dataclass(frozen=True, slots=True)
class DerivedSummary:
    """Read-only snapshot of the computed numbers shown on a sheet."""

    health: int
    willpower: int
    superficial_damage: int
    aggravated_damage: int
    superficial_willpower: int
    aggravated_willpower: int
    available_experience: int
    net_background_cost: int


def summarize(character: CharacterBase) -> DerivedSummary:
    return DerivedSummary(
        health=character.health,
        willpower=character.willpower,
        superficial_damage=character.health_states.count(HealthState.SUPERFICIAL),
        aggravated_damage=character.health_states.count(HealthState.AGGRAVATED),
        superficial_willpower=character.willpower_states.count(HealthState.SUPERFICIAL),
        aggravated_willpower=character.willpower_states.count(HealthState.AGGRAVATED),
        available_experience=character.available_experience,
        net_background_cost=character.net_advantage_flaw_cost,
    )
