"""In-play edits on a finished sheet: damage, stains, status values, merits.

``SheetEditor`` wraps the detached clone handed out by
``SessionManager.begin_edit``. Nothing is persisted until that clone is
saved. Rule violations raise ``ValueError`` with a message fit to show
the user.

Damage follows the V5 track rules::

    superficial on a full track   -> one superficial box becomes aggravated
    aggravated on a full track    -> one superficial box becomes aggravated
    boxes are kept sorted         -> aggravated, superficial, ok
"""

from __future__ import annotations

import logging

from v5_sheets.models.character import (
    CharacterBase,
    GhoulCharacter,
    MageCharacter,
    VampireCharacter,
)
from v5_sheets.models.constants import (
    HUMANITY_TRACK_LENGTH,
    MAGE_TRACK_LENGTH,
    MAX_BLOOD_POTENCY,
    MAX_DOTS,
    MAX_GENERATION,
    MAX_HUNGER,
    MIN_GENERATION,
    advantages_for,
    flaws_for,
)
from v5_sheets.models.derived_stats import humanity_track
from v5_sheets.models.traits import Background, HealthState, HumanityState, MageTraitState

LOG = logging.getLogger(__name__)

HEALTH = "health"
WILLPOWER = "willpower"

TEXT_FIELDS: tuple[str, ...] = (
    "name", "concept", "chronicle_name", "ambition", "desire", "character_description", "notes",
)

_DAMAGE_ORDER = {HealthState.AGGRAVATED: 0, HealthState.SUPERFICIAL: 1, HealthState.OK: 2}


# --- Damage tracks ---

def sort_damage(states: list[HealthState]) -> list[HealthState]:
    """Aggravated boxes first, then superficial, then undamaged."""
    return sorted(states, key=_DAMAGE_ORDER.__getitem__)


def apply_damage(states: list[HealthState], kind: HealthState) -> list[HealthState]:
    """Mark one box of ``kind`` damage. Returns the new, sorted track."""
    if kind == HealthState.OK:
        raise ValueError("Damage must be superficial or aggravated")
    out = sort_damage(states)
    if HealthState.OK in out:
        out[out.index(HealthState.OK)] = kind
    elif HealthState.SUPERFICIAL in out:
        out[out.index(HealthState.SUPERFICIAL)] = HealthState.AGGRAVATED
    else:
        raise ValueError("Track is already full of aggravated damage")
    return sort_damage(out)


def heal_damage(states: list[HealthState], kind: HealthState) -> list[HealthState]:
    """Clear one box of ``kind`` damage. Returns the new, sorted track."""
    if kind not in states:
        raise ValueError(f"No {kind.value} damage to heal")
    out = sort_damage(states)
    last = len(out) - 1 - out[::-1].index(kind)
    out[last] = HealthState.OK
    return sort_damage(out)


# --- Humanity / mage tracks ---

def stain_count(states: list[HumanityState]) -> int:
    return states.count(HumanityState.STAINED)


def mage_trait_track(value: int, length: int = MAGE_TRACK_LENGTH) -> list[MageTraitState]:
    """Hubris or Quiet track with the first ``value`` boxes checked."""
    value = max(0, min(value, length))
    return [MageTraitState.CHECKED] * value + [MageTraitState.UNCHECKED] * (length - value)


# --- Shared list helpers (also used by the creation wizard) ---

def add_background(
    ch: CharacterBase, name: str, cost: int | None, comment: str, *, flaw: bool,
) -> Background:
    """Add a catalog merit/flaw by name, or a custom one when ``cost`` is given."""
    target = ch.flaws if flaw else ch.advantages
    name = name.strip()
    if not name:
        raise ValueError("Name cannot be empty")
    if any(bg.name == name for bg in target):
        raise ValueError(f"{name} is already on the sheet")
    if cost is None:
        catalog = flaws_for(ch.character_type) if flaw else advantages_for(ch.character_type)
        entry = next((bg for bg in catalog if bg.name == name), None)
        if entry is None:
            raise ValueError(f"{name} is not available to a {ch.character_type.display_name}")
        background = Background(entry.name, entry.cost, comment=comment)
    else:
        if flaw and cost >= 0:
            raise ValueError("Flaws must have a negative value")
        if not flaw and cost <= 0:
            raise ValueError("Advantages must have a positive cost")
        background = Background(name, cost, is_custom=True, comment=comment)
    target.append(background)
    return background


def remove_background(target: list[Background], name: str) -> bool:
    for bg in target:
        if bg.name == name:
            target.remove(bg)
            return True
    return False


def append_unique(items: list[str], text: str, label: str) -> None:
    text = text.strip()
    if not text:
        raise ValueError(f"{label} cannot be empty")
    if text in items:
        raise ValueError(f"{label} {text!r} already added")
    items.append(text)


def remove_if_present(items: list[str], text: str) -> bool:
    if text not in items:
        return False
    items.remove(text)
    return True


def _check_range(label: str, value: int, lower: int, upper: int) -> None:
    if not lower <= value <= upper:
        raise ValueError(f"{label} must be {lower}-{upper}, got {value}")


class SheetEditor:
    """Validated mutations on one sheet during play."""

    __slots__ = ("_character",)

    def __init__(self, character: CharacterBase) -> None:
        self._character = character

    @property
    def character(self) -> CharacterBase:
        return self._character

    # --- Health / willpower -------------------------------------------------

    def _track(self, track: str) -> list[HealthState]:
        if track == HEALTH:
            return self._character.health_states
        if track == WILLPOWER:
            return self._character.willpower_states
        raise ValueError(f"Unknown track: {track!r}")

    def _set_track(self, track: str, states: list[HealthState]) -> None:
        if track == HEALTH:
            self._character.health_states = states
        else:
            self._character.willpower_states = states

    def damage(self, track: str, kind: HealthState) -> None:
        self._set_track(track, apply_damage(self._track(track), kind))

    def heal(self, track: str, kind: HealthState) -> None:
        self._set_track(track, heal_damage(self._track(track), kind))

    # --- Humanity -----------------------------------------------------------

    def _mortal_side(self) -> VampireCharacter | GhoulCharacter:
        ch = self._character
        if not isinstance(ch, (VampireCharacter, GhoulCharacter)):
            raise ValueError(f"A {ch.character_type.display_name} has no humanity")
        return ch

    def set_humanity(self, value: int) -> None:
        """Change humanity, keeping as many stains as still fit on the track."""
        ch = self._mortal_side()
        _check_range("Humanity", value, 0, HUMANITY_TRACK_LENGTH)
        ch.humanity = value
        ch.humanity_states = humanity_track(value, stains=stain_count(ch.humanity_states))

    def add_stain(self) -> None:
        ch = self._mortal_side()
        stains = stain_count(ch.humanity_states)
        if ch.humanity + stains >= HUMANITY_TRACK_LENGTH:
            raise ValueError("No unchecked humanity box left to stain")
        ch.humanity_states = humanity_track(ch.humanity, stains=stains + 1)

    def clear_stains(self) -> int:
        ch = self._mortal_side()
        cleared = stain_count(ch.humanity_states)
        ch.humanity_states = humanity_track(ch.humanity)
        return cleared

    # --- Vampire status -----------------------------------------------------

    def _vampire(self) -> VampireCharacter:
        ch = self._character
        if not isinstance(ch, VampireCharacter):
            raise ValueError("Only vampires have that trait")
        return ch

    def set_hunger(self, value: int) -> None:
        _check_range("Hunger", value, 0, MAX_HUNGER)
        self._vampire().hunger = value

    def set_blood_potency(self, value: int) -> None:
        _check_range("Blood potency", value, 0, MAX_BLOOD_POTENCY)
        self._vampire().blood_potency = value

    def set_generation(self, value: int) -> None:
        _check_range("Generation", value, MIN_GENERATION, MAX_GENERATION)
        self._vampire().generation = value

    def toggle_power(self, discipline_name: str, level: int, power_id: str) -> None:
        if not self._vampire().toggle_v5_power(power_id, discipline_name, level):
            raise ValueError(f"{discipline_name} has no level {level} powers available")

    # --- Mage status --------------------------------------------------------

    def _mage(self) -> MageCharacter:
        ch = self._character
        if not isinstance(ch, MageCharacter):
            raise ValueError("Only mages have that trait")
        return ch

    def set_arete(self, value: int) -> None:
        _check_range("Arete", value, 0, MAX_DOTS)
        self._mage().arete = value

    def set_paradox(self, value: int) -> None:
        _check_range("Paradox", value, 0, MAX_DOTS)
        self._mage().paradox = value

    def set_hubris(self, value: int) -> None:
        _check_range("Hubris", value, 0, MAGE_TRACK_LENGTH)
        mage = self._mage()
        mage.hubris = value
        mage.hubris_states = mage_trait_track(value)

    def set_quiet(self, value: int) -> None:
        _check_range("Quiet", value, 0, MAGE_TRACK_LENGTH)
        mage = self._mage()
        mage.quiet = value
        mage.quiet_states = mage_trait_track(value)

    # --- Experience ---------------------------------------------------------

    def set_experience(self, total: int, spent: int) -> None:
        if total < 0 or spent < 0:
            raise ValueError("Experience cannot be negative")
        if spent > total:
            raise ValueError(f"Cannot spend {spent} experience out of {total}")
        self._character.experience = total
        self._character.spent_experience = spent

    # --- Merits, flaws, specializations -------------------------------------

    def add_advantage(self, name: str, cost: int | None = None, comment: str = "") -> Background:
        return add_background(self._character, name, cost, comment, flaw=False)

    def add_flaw(self, name: str, cost: int | None = None, comment: str = "") -> Background:
        return add_background(self._character, name, cost, comment, flaw=True)

    def remove_advantage(self, name: str) -> bool:
        return remove_background(self._character.advantages, name)

    def remove_flaw(self, name: str) -> bool:
        return remove_background(self._character.flaws, name)

    def add_specialization(self, skill_name: str, text: str) -> None:
        if self._character.get_skill(skill_name) == 0:
            raise ValueError(f"{skill_name} needs at least one dot for a specialization")
        self._character.add_specialization(skill_name, text)

    def remove_specialization(self, skill_name: str, text: str) -> bool:
        return self._character.remove_specialization(skill_name, text)

    # --- Convictions, touchstones, free text --------------------------------

    def add_conviction(self, text: str) -> None:
        append_unique(self._character.convictions, text, "Conviction")

    def remove_conviction(self, text: str) -> bool:
        return remove_if_present(self._character.convictions, text)

    def add_touchstone(self, text: str) -> None:
        append_unique(self._character.touchstones, text, "Touchstone")

    def remove_touchstone(self, text: str) -> bool:
        return remove_if_present(self._character.touchstones, text)

    def set_text(self, field_name: str, text: str) -> None:
        if field_name not in TEXT_FIELDS:
            raise ValueError(f"{field_name} is not a text field")
        LOG.debug("Editing %s on %s", field_name, self._character.id)
        setattr(self._character, field_name, text)
