"""Human-readable diffs between two versions of a sheet.

Edits happen on a clone; when the user saves, ``record_changes`` compares
the clone against the stored original and appends one ``ChangeLogEntry``
whose summary lists every change on its own line, e.g.::

    strength 2→3
    animalism level 1→2
    advantages added: Allies
"""

from __future__ import annotations

from collections.abc import Sequence

from v5_sheets.models.character import (
    CharacterBase,
    GhoulCharacter,
    MageCharacter,
    VampireCharacter,
)
from v5_sheets.models.constants import ALL_ATTRIBUTES, ALL_SKILLS, MAGE_SPHERES
from v5_sheets.models.traits import ChangeLogEntry

ARROW = "→"

ARCHIVED_MESSAGE = "Character moved to archive."
UNARCHIVED_MESSAGE = "Character returned from archive"


def _value_change(label: str, old: object, new: object, out: list[str]) -> None:
    if old != new:
        out.append(f"{label} {old}{ARROW}{new}")


def _text_change(label: str, old: str, new: str, out: list[str]) -> None:
    if old != new:
        out.append(f"{label} updated")


def _list_change(label: str, old: Sequence[str], new: Sequence[str], out: list[str]) -> None:
    removed = [item for item in old if item not in new]
    added = [item for item in new if item not in old]
    if removed:
        out.append(f"{label} removed: {', '.join(removed)}")
    if added:
        out.append(f"{label} added: {', '.join(added)}")


def _dots_change(old: dict[str, int], new: dict[str, int], out: list[str], suffix: str = "") -> None:
    for name in sorted(set(old) | set(new)):
        _value_change(f"{name.lower()}{suffix}", old.get(name, 0), new.get(name, 0), out)


def _vampire_changes(old: VampireCharacter, new: VampireCharacter, out: list[str]) -> None:
    _value_change("clan", old.clan or "none", new.clan or "none", out)
    _value_change("generation", old.generation, new.generation, out)
    _value_change("blood potency", old.blood_potency, new.blood_potency, out)
    _value_change("humanity", old.humanity, new.humanity, out)
    _value_change("hunger", old.hunger, new.hunger, out)
    _value_change("predator path", old.predator_path or "none", new.predator_path or "none", out)
    _dots_change(old.disciplines, new.disciplines, out)

    old_levels = {n: p.current_level for n, p in old.v5_disciplines.items()}
    new_levels = {n: p.current_level for n, p in new.v5_disciplines.items()}
    _dots_change(old_levels, new_levels, out, suffix=" level")

    for name in sorted(set(old.v5_disciplines) & set(new.v5_disciplines)):
        for level in range(1, 6):
            before = [p.name for p in old.get_selected_v5_powers(name, level)]
            after = [p.name for p in new.get_selected_v5_powers(name, level)]
            _list_change(f"{name.lower()} powers", before, after, out)

    _list_change(
        "custom disciplines",
        [d.name for d in old.custom_v5_disciplines],
        [d.name for d in new.custom_v5_disciplines],
        out,
    )


def _ghoul_changes(old: GhoulCharacter, new: GhoulCharacter, out: list[str]) -> None:
    _value_change("humanity", old.humanity, new.humanity, out)
    _dots_change(old.disciplines, new.disciplines, out)


def _mage_changes(old: MageCharacter, new: MageCharacter, out: list[str]) -> None:
    _value_change("arete", old.arete, new.arete, out)
    _value_change("paradox", old.paradox, new.paradox, out)
    _value_change("hubris", old.hubris, new.hubris, out)
    _value_change("quiet", old.quiet, new.quiet, out)
    for sphere in MAGE_SPHERES:
        _value_change(sphere.lower(), old.spheres.get(sphere, 0), new.spheres.get(sphere, 0), out)


def change_summary(original: CharacterBase, updated: CharacterBase) -> str:
    """Newline-joined list of differences; ``""`` when nothing changed."""
    if type(original) is not type(updated):
        raise ValueError(
            f"Cannot compare {original.character_type.value} with "
            f"{updated.character_type.value}"
        )
    out: list[str] = []

    _value_change("name", original.name, updated.name, out)
    _value_change("concept", original.concept, updated.concept, out)
    _value_change("chronicle name", original.chronicle_name, updated.chronicle_name, out)
    _text_change("ambition", original.ambition, updated.ambition, out)
    _text_change("desire", original.desire, updated.desire, out)
    _text_change(
        "character description",
        original.character_description,
        updated.character_description,
        out,
    )
    _text_change("notes", original.notes, updated.notes, out)

    for attribute in ALL_ATTRIBUTES:
        _value_change(
            attribute.lower(),
            original.get_attribute(attribute),
            updated.get_attribute(attribute),
            out,
        )
    for skill in ALL_SKILLS:
        _value_change(skill.lower(), original.get_skill(skill), updated.get_skill(skill), out)

    if isinstance(original, VampireCharacter):
        _vampire_changes(original, updated, out)
    elif isinstance(original, GhoulCharacter):
        _ghoul_changes(original, updated, out)
    elif isinstance(original, MageCharacter):
        _mage_changes(original, updated, out)

    _value_change("experience", original.experience, updated.experience, out)
    _value_change("spent experience", original.spent_experience, updated.spent_experience, out)

    _list_change("convictions", original.convictions, updated.convictions, out)
    _list_change("touchstones", original.touchstones, updated.touchstones, out)
    _list_change(
        "specializations",
        [f"{s.skill_name}: {s.name}" for s in original.specializations],
        [f"{s.skill_name}: {s.name}" for s in updated.specializations],
        out,
    )
    _list_change(
        "advantages",
        [bg.name for bg in original.advantages],
        [bg.name for bg in updated.advantages],
        out,
    )
    _list_change(
        "flaws",
        [bg.name for bg in original.flaws],
        [bg.name for bg in updated.flaws],
        out,
    )
    return "\n".join(out)


def record_changes(original: CharacterBase, updated: CharacterBase) -> str:
    """Append a log entry to ``updated`` describing the edit. Returns the summary."""
    summary = change_summary(original, updated)
    if summary:
        updated.change_log.append(ChangeLogEntry(summary))
    return summary


def record_session_change(character: CharacterBase, new_session: int) -> bool:
    """Move the sheet to another session number, logging the jump."""
    if new_session < 1:
        raise ValueError(f"Session number must be positive, got {new_session}")
    old_session = character.current_session
    if old_session == new_session:
        return False
    character.current_session = new_session
    character.change_log.append(
        ChangeLogEntry(f"Session changed from {old_session} to {new_session}")
    )
    return True
