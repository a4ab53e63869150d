"""V5 discipline model: powers by level, per-character progress, catalog.

A vampire's V5 discipline record is a ``V5DisciplineProgress`` keyed by
discipline name. Selected powers are stored by power id, so catalog power
ids are derived deterministically from (discipline, level, power name)
and stay stable across runs and devices.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field

# Namespace for catalog power ids. Changing it orphans saved selections.
_POWER_NAMESPACE = uuid.UUID("6f1f4d5e-2a0b-4c8e-9a57-5d3b1e0c7a21")


def catalog_power_id(discipline: str, level: int, power: str) -> str:
    return str(uuid.uuid5(_POWER_NAMESPACE, f"{discipline}:{level}:{power}"))


@dataclass(slots=True)
class V5DisciplinePower:
    name: str
    description: str
    level: int
    is_custom: bool = False
    id: str = field(default_factory=lambda: str(uuid.uuid4()))


@dataclass(slots=True)
class V5Discipline:
    """A discipline definition: its powers grouped by level (1-5)."""

    name: str
    description: str = ""
    is_custom: bool = False
    powers: dict[int, list[V5DisciplinePower]] = field(default_factory=dict)

    def add_power(self, power: V5DisciplinePower, level: int) -> None:
        if not 1 <= level <= 5:
            raise ValueError(f"Discipline level must be 1-5, got {level}")
        self.powers.setdefault(level, []).append(power)

    def get_powers(self, level: int) -> list[V5DisciplinePower]:
        return list(self.powers.get(level, []))

    def find_power(self, power_id: str) -> V5DisciplinePower | None:
        for level_powers in self.powers.values():
            for power in level_powers:
                if power.id == power_id:
                    return power
        return None


@dataclass(slots=True)
class V5DisciplineProgress:
    """A character's dots in one discipline plus the powers picked per level."""

    discipline_name: str
    current_level: int = 0
    selected_powers: dict[int, list[str]] = field(default_factory=dict)

    def toggle_power(self, power_id: str, level: int) -> bool:
        """Select or deselect a power. Returns True if now selected."""
        selected = self.selected_powers.setdefault(level, [])
        if power_id in selected:
            selected.remove(power_id)
            if not selected:
                del self.selected_powers[level]
            return False
        selected.append(power_id)
        return True

    def is_power_selected(self, power_id: str, level: int) -> bool:
        return power_id in self.selected_powers.get(level, [])

    def get_selected_powers(self, level: int) -> list[str]:
        return list(self.selected_powers.get(level, []))

    def accessible_levels(self) -> list[int]:
        return list(range(1, self.current_level + 1))

    def drop_levels_above(self, level: int) -> None:
        """Forget selections for levels the character no longer has."""
        for lvl in [lvl for lvl in self.selected_powers if lvl > level]:
            del self.selected_powers[lvl]


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------

# discipline → (description, {level: [(power, description), ...]})
_CATALOG_DATA: dict[str, tuple[str, dict[int, list[tuple[str, str]]]]] = {
    "Animalism": (
        "Supernatural kinship with animals and mastery over the Beast.",
        {
            1: [
                ("Bond Famulus", "Bind an animal as a loyal companion."),
                ("Sense the Beast", "Sense hostility and the Beast in others."),
            ],
            2: [("Feral Whispers", "Speak with and summon animals.")],
            3: [
                ("Animal Succulence", "Feed more effectively from animals."),
                ("Quell the Beast", "Cow a mortal or calm a vampire's Beast."),
                ("Unliving Hive", "House insects within your body."),
            ],
            4: [("Subsume the Spirit", "Possess an animal's body.")],
            5: [
                ("Animal Dominion", "Command whole flocks or packs at once."),
                ("Drawing Out the Beast", "Transfer your frenzy into another."),
            ],
        },
    ),
    "Auspex": (
        "Extrasensory perception, premonition and mind-reading.",
        {
            1: [
                ("Heightened Senses", "Sharpen all senses far beyond mortal limits."),
                ("Sense the Unseen", "Notice supernatural presences and effects."),
            ],
            2: [("Premonition", "Receive flashes of insight and warning.")],
            3: [
                ("Scry the Soul", "Read auras to learn emotions and nature."),
                ("Share the Senses", "Experience the senses of another."),
            ],
            4: [("Spirit's Touch", "Read psychic impressions left on objects.")],
            5: [
                ("Clairvoyance", "Gather information about a familiar area."),
                ("Possession", "Take control of a mortal's body."),
                ("Telepathy", "Read thoughts and project your own."),
            ],
        },
    ),
    "Celerity": (
        "Supernatural speed and reflexes.",
        {
            1: [
                ("Cat's Grace", "Perfect balance on any surface."),
                ("Rapid Reflexes", "React faster than the eye can follow."),
            ],
            2: [("Fleetness", "Add speed to defence and non-combat Dexterity.")],
            3: [
                ("Blink", "Close distance in an instant."),
                ("Traversal", "Run across walls and water."),
            ],
            4: [
                ("Draught of Elegance", "Share Celerity through your vitae."),
                ("Unerring Aim", "Aim as if the world stood still."),
            ],
            5: [
                ("Lightning Strike", "Strike before anyone can react."),
                ("Split Second", "Rewrite events a moment after they happen."),
            ],
        },
    ),
    "Dominate": (
        "Overriding minds through eye contact and command.",
        {
            1: [
                ("Cloud Memory", "Make a victim forget the last moments."),
                ("Compel", "Issue a single-word command that must be obeyed."),
            ],
            2: [
                ("Mesmerize", "Implant complex commands."),
                ("Dementation", "Drive a victim toward madness."),
            ],
            3: [
                ("Forgetful Mind", "Rewrite a victim's memories."),
                ("Submerged Directive", "Plant a command triggered later."),
            ],
            4: [("Rationalize", "Victims believe their actions were their own.")],
            5: [
                ("Mass Manipulation", "Dominate a group at once."),
                ("Terminal Decree", "Commands may override self-preservation."),
            ],
        },
    ),
    "Fortitude": (
        "Unnatural resilience against harm and coercion.",
        {
            1: [
                ("Resilience", "Add to health track."),
                ("Unswayable Mind", "Resist mental coercion."),
            ],
            2: [
                ("Toughness", "Reduce superficial damage."),
                ("Enduring Beasts", "Share toughness with animals."),
            ],
            3: [
                ("Defy Bane", "Turn aggravated damage into superficial."),
                ("Fortify the Inner Facade", "Resist attempts to read your mind."),
            ],
            4: [("Draught of Endurance", "Share Fortitude through your vitae.")],
            5: [
                ("Flesh of Marble", "Ignore the first damage each turn."),
                ("Prowess from Pain", "Grow stronger as you are hurt."),
            ],
        },
    ),
    "Obfuscate": (
        "Remaining unseen even in plain sight.",
        {
            1: [
                ("Cloak of Shadows", "Become unseen while motionless."),
                ("Silence of Death", "Make no sound at all."),
            ],
            2: [("Unseen Passage", "Remain hidden while moving.")],
            3: [
                ("Ghost in the Machine", "Extend Obfuscate to recordings."),
                ("Mask of a Thousand Faces", "Appear as a forgettable stranger."),
            ],
            4: [("Conceal", "Hide an object or building.")],
            5: [
                ("Cloak the Gathering", "Hide a group of companions."),
                ("Impostor's Guise", "Take on the appearance of a specific person."),
            ],
        },
    ),
    "Potence": (
        "Supernatural physical strength.",
        {
            1: [
                ("Lethal Body", "Unarmed attacks deal serious damage."),
                ("Soaring Leap", "Jump great distances."),
            ],
            2: [("Prowess", "Add to Strength rolls and damage.")],
            3: [
                ("Brutal Feed", "Drain a victim in moments."),
                ("Spark of Rage", "Incite violence in others."),
            ],
            4: [("Draught of Might", "Share Potence through your vitae.")],
            5: [
                ("Earthshock", "Strike the ground to knock others down."),
                ("Fist of Caine", "Deal aggravated damage unarmed."),
            ],
        },
    ),
    "Presence": (
        "Supernatural charisma, awe and dread.",
        {
            1: [
                ("Awe", "Draw attention and admiration."),
                ("Daunt", "Push others away with menace."),
            ],
            2: [("Lingering Kiss", "Make your bite addictive.")],
            3: [
                ("Dread Gaze", "Terrify a single target."),
                ("Entrancement", "Make a target eager to please."),
            ],
            4: [
                ("Irresistible Voice", "Dominate without eye contact."),
                ("Summon", "Call a person to your side."),
            ],
            5: [
                ("Majesty", "None dare act against you."),
                ("Star Magnetism", "Presence works through screens and recordings."),
            ],
        },
    ),
}


def _build_catalog() -> dict[str, V5Discipline]:
    catalog: dict[str, V5Discipline] = {}
    for name, (description, levels) in _CATALOG_DATA.items():
        discipline = V5Discipline(name=name, description=description)
        for level, powers in levels.items():
            for power_name, power_desc in powers:
                discipline.add_power(
                    V5DisciplinePower(
                        name=power_name,
                        description=power_desc,
                        level=level,
                        id=catalog_power_id(name, level, power_name),
                    ),
                    level,
                )
        catalog[name] = discipline
    return catalog


# Shared catalog instances; treat as read-only.
V5_DISCIPLINES: dict[str, V5Discipline] = _build_catalog()


def get_v5_discipline(name: str) -> V5Discipline | None:
    return V5_DISCIPLINES.get(name)


def all_v5_discipline_names() -> list[str]:
    return sorted(V5_DISCIPLINES)
