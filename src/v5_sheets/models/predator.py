"""Predator types: how a vampire feeds, and what it grants at creation."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from v5_sheets.models.character import VampireCharacter


class PredatorBonusType(str, Enum):
    DISCIPLINE_DOT = "disciplineDot"
    SKILL_SPECIALIZATION = "skillSpecialization"
    BACKGROUND = "background"
    FLAW = "flaw"
    HUMANITY_CHANGE = "humanityChange"
    BLOOD_POTENCY_CHANGE = "bloodPotencyChange"


@dataclass(slots=True)
class PredatorBonus:
    """One grant of a predator type.

    ``alternatives`` lists the other picks when the rules offer a choice
    (e.g. "Animalism or Protean"); the named field holds the first option.
    """

    type: PredatorBonusType
    description: str
    discipline_name: str | None = None
    skill_name: str | None = None
    specialization_name: str | None = None
    background_name: str | None = None
    value: int = 0
    alternatives: tuple[str, ...] = ()


@dataclass(slots=True)
class PredatorPath:
    name: str
    description: str
    bonuses: list[PredatorBonus] = field(default_factory=list)
    drawbacks: list[str] = field(default_factory=list)
    feeding_description: str = ""
    is_custom: bool = False


NONE_PATH_NAME = "None"

NONE_PATH = PredatorPath(
    name=NONE_PATH_NAME,
    description="No predator type chosen.",
    feeding_description="Feeds without a defined hunting pattern.",
)

_T = PredatorBonusType


def _disc(first: str, second: str) -> PredatorBonus:
    return PredatorBonus(
        _T.DISCIPLINE_DOT, f"One dot of {first} or {second}",
        discipline_name=first, alternatives=(second,),
    )


def _spec(skill: str, spec: str, alt: str = "") -> PredatorBonus:
    desc = f"{skill} ({spec}) specialization"
    if alt:
        desc += f" or {alt}"
    return PredatorBonus(
        _T.SKILL_SPECIALIZATION, desc,
        skill_name=skill, specialization_name=spec,
        alternatives=(alt,) if alt else (),
    )


PREDATOR_PATHS: tuple[PredatorPath, ...] = (
    PredatorPath(
        name="Alleycat",
        description="A combative hunter who stalks, overpowers and feeds by force.",
        bonuses=[
            _spec("Intimidation", "Stickups", "Brawl (Grappling)"),
            _disc("Celerity", "Potence"),
            PredatorBonus(_T.BACKGROUND, "Three dots of criminal Contacts",
                          background_name="Contacts", value=3),
            PredatorBonus(_T.HUMANITY_CHANGE, "Lose one dot of Humanity", value=-1),
        ],
        drawbacks=["Lose one dot of Humanity"],
        feeding_description="Takes blood by violence or threat, mugging victims in dark alleys.",
    ),
    PredatorPath(
        name="Bagger",
        description="Feeds on preserved blood: blood banks, hospitals, the black market.",
        bonuses=[
            _spec("Larceny", "Lock Picking", "Streetwise (Black Market)"),
            _disc("Blood Sorcery", "Obfuscate"),
            PredatorBonus(_T.BACKGROUND, "Iron Gullet merit", background_name="Iron Gullet",
                          value=3),
        ],
        drawbacks=["Enemy flaw (two dots): someone believes you owe them"],
        feeding_description="Steals, buys or collects cold bagged blood.",
    ),
    PredatorPath(
        name="Blood Leech",
        description="Hunts other vampires and feeds on Kindred vitae.",
        bonuses=[
            _spec("Brawl", "Kindred", "Stealth (Against Kindred)"),
            _disc("Celerity", "Protean"),
            PredatorBonus(_T.BLOOD_POTENCY_CHANGE, "Increase Blood Potency by one", value=1),
        ],
        drawbacks=[
            "Lose one dot of Humanity",
            "Dark Secret: Diablerist, or Shunned flaw",
            "Prey Exclusion (mortals)",
        ],
        feeding_description="Refuses mortal blood and preys on other Kindred.",
    ),
    PredatorPath(
        name="Cleaver",
        description="Feeds covertly from their own mortal family or friends.",
        bonuses=[
            _spec("Persuasion", "Gaslighting", "Subterfuge (Coverups)"),
            _disc("Animalism", "Dominate"),
            PredatorBonus(_T.BACKGROUND, "Herd (two dots)", background_name="Herd", value=2),
        ],
        drawbacks=["Dark Secret: Cleaver"],
        feeding_description="Keeps a mortal family and feeds on them in secret.",
    ),
    PredatorPath(
        name="Consensualist",
        description="Never feeds against the vessel's will.",
        bonuses=[
            _spec("Medicine", "Phlebotomy", "Persuasion (Vessels)"),
            _disc("Auspex", "Fortitude"),
            PredatorBonus(_T.HUMANITY_CHANGE, "Gain one dot of Humanity", value=1),
        ],
        drawbacks=["Dark Secret: Masquerade breacher", "Prey Exclusion (non-consenting)"],
        feeding_description="Takes blood only with consent, often posing as a blood drive.",
    ),
    PredatorPath(
        name="Farmer",
        description="Feeds only from animals, at great cost to the Beast.",
        bonuses=[
            _spec("Animal Ken", "Specific Animal", "Survival (Hunting)"),
            _disc("Animalism", "Protean"),
            PredatorBonus(_T.HUMANITY_CHANGE, "Gain one dot of Humanity", value=1),
        ],
        drawbacks=["Feeding flaw: Farmer (two dots), must spend extra blood on humans"],
        feeding_description="Sustains itself on animal blood to spare human lives.",
    ),
    PredatorPath(
        name="Osiris",
        description="A celebrity or cult leader who feeds on devoted followers.",
        bonuses=[
            _spec("Occult", "Specific Tradition", "Performance (Specific Field)"),
            _disc("Blood Sorcery", "Presence"),
            PredatorBonus(_T.BACKGROUND, "Three dots of Fame or Herd", background_name="Fame",
                          value=3, alternatives=("Herd",)),
        ],
        drawbacks=["Two dots of Enemies or Mythic flaws"],
        feeding_description="Feeds from worshippers, fans or cult members.",
    ),
    PredatorPath(
        name="Sandman",
        description="Feeds from sleeping victims who never know they were touched.",
        bonuses=[
            _spec("Medicine", "Anesthetics", "Stealth (Break-in)"),
            _disc("Auspex", "Obfuscate"),
            PredatorBonus(_T.BACKGROUND, "One dot of Resources", background_name="Resources",
                          value=1),
        ],
        drawbacks=[],
        feeding_description="Breaks into homes and feeds on the sleeping.",
    ),
    PredatorPath(
        name="Scene Queen",
        description="Rules a subculture and feeds on those who adore them.",
        bonuses=[
            _spec("Etiquette", "Specific Scene", "Leadership or Streetwise (Specific Scene)"),
            _disc("Dominate", "Potence"),
            PredatorBonus(_T.BACKGROUND, "One dot of Fame", background_name="Fame", value=1),
            PredatorBonus(_T.BACKGROUND, "One dot of Contacts", background_name="Contacts",
                          value=1),
        ],
        drawbacks=["Influence flaw: Disliked outside the scene, or Prey Exclusion"],
        feeding_description="Feeds in the clubs and circles where they hold court.",
    ),
    PredatorPath(
        name="Siren",
        description="Seduces vessels and feeds during intimacy.",
        bonuses=[
            _spec("Persuasion", "Seduction", "Subterfuge (Seduction)"),
            _disc("Fortitude", "Presence"),
            PredatorBonus(_T.BACKGROUND, "Looks merit: Beautiful", background_name="Beautiful",
                          value=2),
        ],
        drawbacks=["Enemy flaw: a spurned lover or jealous partner"],
        feeding_description="Lures vessels with romance and feeds in private.",
    ),
)

_BY_NAME: dict[str, PredatorPath] = {path.name: path for path in PREDATOR_PATHS}


def get_predator_path(name: str) -> PredatorPath | None:
    if name == NONE_PATH_NAME:
        return NONE_PATH
    return _BY_NAME.get(name)


def all_predator_path_names() -> list[str]:
    return [path.name for path in PREDATOR_PATHS]


def available_predator_paths(vampire: VampireCharacter) -> list[PredatorPath]:
    """Catalog paths, then the vampire's custom paths, then the None option."""
    return [*PREDATOR_PATHS, *vampire.custom_predator_paths, NONE_PATH]


def select_predator_path(vampire: VampireCharacter, name: str) -> None:
    """Set the vampire's predator path. ``"None"`` or ``""`` clears it."""
    if name in ("", NONE_PATH_NAME):
        vampire.predator_path = ""
        return
    known = {path.name for path in available_predator_paths(vampire)}
    if name not in known:
        raise ValueError(f"Unknown predator path: {name!r}")
    vampire.predator_path = name


def add_custom_predator_path(vampire: VampireCharacter, path: PredatorPath) -> None:
    if not path.name.strip():
        raise ValueError("Predator path name cannot be empty")
    if path.name in _BY_NAME or path.name == NONE_PATH_NAME:
        raise ValueError(f"Predator path {path.name!r} already exists")
    if any(p.name == path.name for p in vampire.custom_predator_paths):
        raise ValueError(f"Predator path {path.name!r} already exists")
    path.is_custom = True
    vampire.custom_predator_paths.append(path)
