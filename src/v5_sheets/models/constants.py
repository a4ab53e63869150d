"""V5 rules constants: character types, trait names, clans, and backgrounds.

Attribute and skill names double as dictionary keys on the character
record, so they must stay stable across releases (saved collections and
QR payloads key traits by these strings).
"""

from dataclasses import dataclass
from enum import Enum


class CharacterType(str, Enum):
    """Supported sheet types. Values are the persisted type tags."""
    VAMPIRE = "Vampire"
    GHOUL = "Ghoul"
    MAGE = "Mage"

    @property
    def display_name(self) -> str:
        return self.value


ALL_CHARACTER_TYPES: tuple[CharacterType, ...] = (
    CharacterType.VAMPIRE,
    CharacterType.GHOUL,
    CharacterType.MAGE,
)


# ---------------------------------------------------------------------------
# Attributes and skills
# ---------------------------------------------------------------------------

PHYSICAL_ATTRIBUTES: tuple[str, ...] = ("Strength", "Dexterity", "Stamina")
SOCIAL_ATTRIBUTES: tuple[str, ...] = ("Charisma", "Manipulation", "Composure")
MENTAL_ATTRIBUTES: tuple[str, ...] = ("Intelligence", "Wits", "Resolve")

ALL_ATTRIBUTES: tuple[str, ...] = (
    PHYSICAL_ATTRIBUTES + SOCIAL_ATTRIBUTES + MENTAL_ATTRIBUTES
)

PHYSICAL_SKILLS: tuple[str, ...] = (
    "Athletics", "Brawl", "Craft", "Drive", "Firearms",
    "Larceny", "Melee", "Stealth", "Survival",
)
SOCIAL_SKILLS: tuple[str, ...] = (
    "Animal Ken", "Etiquette", "Insight", "Intimidation", "Leadership",
    "Performance", "Persuasion", "Streetwise", "Subterfuge",
)
MENTAL_SKILLS: tuple[str, ...] = (
    "Academics", "Awareness", "Finance", "Investigation", "Medicine",
    "Occult", "Politics", "Science", "Technology",
)

ALL_SKILLS: tuple[str, ...] = PHYSICAL_SKILLS + SOCIAL_SKILLS + MENTAL_SKILLS

# Category keys used by the character record's nested maps.
PHYSICAL = "physical"
SOCIAL = "social"
MENTAL = "mental"
CATEGORIES: tuple[str, ...] = (PHYSICAL, SOCIAL, MENTAL)

ATTRIBUTES_BY_CATEGORY: dict[str, tuple[str, ...]] = {
    PHYSICAL: PHYSICAL_ATTRIBUTES,
    SOCIAL: SOCIAL_ATTRIBUTES,
    MENTAL: MENTAL_ATTRIBUTES,
}

SKILLS_BY_CATEGORY: dict[str, tuple[str, ...]] = {
    PHYSICAL: PHYSICAL_SKILLS,
    SOCIAL: SOCIAL_SKILLS,
    MENTAL: MENTAL_SKILLS,
}

DEFAULT_ATTRIBUTE_VALUE = 1
DEFAULT_SKILL_VALUE = 0
MIN_DOTS = 0
MAX_DOTS = 5


@dataclass(frozen=True, slots=True)
class SkillInfo:
    """Per-skill metadata shown when picking specializations."""

    name: str
    specialization_examples: tuple[str, ...]
    requires_free_specialization: bool = False


SKILL_INFO: dict[str, SkillInfo] = {
    info.name: info
    for info in (
        # Physical
        SkillInfo("Athletics", ("Climbing", "Running", "Swimming", "Parkour", "Acrobatics")),
        SkillInfo("Brawl", ("Boxing", "Wrestling", "Martial Arts", "Grappling", "Dirty Fighting")),
        SkillInfo(
            "Craft",
            ("Woodworking", "Metalworking", "Painting", "Sculpture", "Electronics"),
            requires_free_specialization=True,
        ),
        SkillInfo("Drive", ("Cars", "Motorcycles", "Trucks", "Racing", "Off-road")),
        SkillInfo("Firearms", ("Pistols", "Rifles", "Shotguns", "Archery", "Thrown Weapons")),
        SkillInfo(
            "Larceny",
            ("Lockpicking", "Pickpocketing", "Security Systems", "Safecracking", "Sleight of Hand"),
        ),
        SkillInfo("Melee", ("Swords", "Knives", "Clubs", "Improvised Weapons", "Fencing")),
        SkillInfo("Stealth", ("Hiding", "Moving Silently", "Camouflage", "Crowds", "Shadows")),
        SkillInfo(
            "Survival",
            ("Tracking", "Foraging", "Navigation", "Weather Prediction", "Urban Survival"),
        ),
        # Social
        SkillInfo("Animal Ken", ("Dogs", "Cats", "Horses", "Wild Animals", "Rats")),
        SkillInfo("Etiquette", ("High Society", "Corporate", "Street", "Academic", "Criminal")),
        SkillInfo("Insight", ("Emotions", "Lies", "Fear", "Desires", "Motivations")),
        SkillInfo(
            "Intimidation",
            ("Physical Threats", "Stare Down", "Verbal Abuse", "Torture", "Social Pressure"),
        ),
        SkillInfo("Leadership", ("Military", "Corporate", "Gang", "Cult", "Noble")),
        SkillInfo(
            "Performance",
            ("Acting", "Singing", "Dancing", "Comedy", "Oratory"),
            requires_free_specialization=True,
        ),
        SkillInfo("Persuasion", ("Fast Talk", "Seduction", "Sales", "Oratory", "Lies")),
        SkillInfo("Streetwise", ("Rumors", "Black Market", "Drugs", "Gangs", "Fence")),
        SkillInfo(
            "Subterfuge",
            ("Lying", "Misdirection", "Innocent Face", "Changing Subject", "Long Con"),
        ),
        # Mental
        SkillInfo(
            "Academics",
            ("History", "Literature", "Anthropology", "Art", "Law"),
            requires_free_specialization=True,
        ),
        SkillInfo("Awareness", ("Ambushes", "Crowds", "Supernatural", "Details", "Eavesdropping")),
        SkillInfo("Finance", ("Accounting", "Investment", "Banking", "Appraisal", "Forgery")),
        SkillInfo(
            "Investigation",
            ("Crime Scenes", "Research", "Surveillance", "Forensics", "Internet"),
        ),
        SkillInfo("Medicine", ("First Aid", "Surgery", "Pathology", "Pharmacy", "Veterinary")),
        SkillInfo("Occult", ("Kindred Lore", "Rituals", "Ghosts", "Witchcraft", "Mythology")),
        SkillInfo("Politics", ("City", "Kindred", "Corporate", "Church", "Anarchs")),
        SkillInfo(
            "Science",
            ("Biology", "Chemistry", "Physics", "Psychology", "Computer Science"),
            requires_free_specialization=True,
        ),
        SkillInfo(
            "Technology",
            ("Computers", "Electronics", "Programming", "Hacking", "Data Recovery"),
        ),
    )
}


def skill_info(name: str) -> SkillInfo | None:
    return SKILL_INFO.get(name)


def skills_requiring_free_specialization() -> list[str]:
    """Skills whose first dot grants a mandatory free specialization."""
    return [name for name in ALL_SKILLS if SKILL_INFO[name].requires_free_specialization]


def attribute_category(name: str) -> str:
    for category, names in ATTRIBUTES_BY_CATEGORY.items():
        if name in names:
            return category
    raise ValueError(f"Unknown attribute: {name!r}")


def skill_category(name: str) -> str:
    for category, names in SKILLS_BY_CATEGORY.items():
        if name in names:
            return category
    raise ValueError(f"Unknown skill: {name!r}")


# ---------------------------------------------------------------------------
# Vampire / Ghoul / Mage lists
# ---------------------------------------------------------------------------

CLANS: tuple[str, ...] = (
    "Brujah", "Gangrel", "Malkavian", "Nosferatu", "Toreador", "Tremere",
    "Ventrue", "Banu Haqim", "Hecata", "Lasombra", "Ministry", "Ravnos",
    "Salubri", "Tzimisce", "Caitiff", "Thin-Blood",
)

# Pre-V5 discipline names kept for the legacy name → dots map.
DISCIPLINES: tuple[str, ...] = (
    "Animalism", "Auspex", "Blood Sorcery", "Celerity", "Dominate",
    "Fortitude", "Obfuscate", "Potence", "Presence", "Protean",
    "Hecata Sorcery", "Lasombra Oblivion", "Oblivion", "Obeah", "Quietus",
    "Serpentis", "Vicissitude",
)

MAGE_SPHERES: tuple[str, ...] = (
    "Correspondence", "Entropy", "Forces", "Life", "Matter",
    "Mind", "Prime", "Spirit", "Time",
)

HUMANITY_TRACK_LENGTH = 10
MAGE_TRACK_LENGTH = 5
MAX_HUNGER = 5
MAX_BLOOD_POTENCY = 10
MIN_GENERATION = 4
MAX_GENERATION = 16


# ---------------------------------------------------------------------------
# Predefined backgrounds
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class PredefinedBackground:
    """Catalog entry for a merit (cost > 0) or flaw (cost < 0)."""

    name: str
    cost: int
    suitable_types: frozenset[CharacterType]


_ANY = frozenset(ALL_CHARACTER_TYPES)
_VAMPIRE = frozenset({CharacterType.VAMPIRE})

PREDEFINED_ADVANTAGES: tuple[PredefinedBackground, ...] = (
    PredefinedBackground("Allies", 3, _ANY),
    PredefinedBackground("Contacts", 1, _ANY),
    PredefinedBackground("Fame", 1, _ANY),
    PredefinedBackground("Influence", 2, _ANY),
    PredefinedBackground("Resources", 3, _ANY),
    PredefinedBackground("Retainers", 2, _ANY),
    PredefinedBackground("Status", 2, _ANY),
    PredefinedBackground("Iron Will", 5, _ANY),
    PredefinedBackground("Time Sense", 1, _ANY),
    PredefinedBackground("Eidetic Memory", 2, _ANY),
    PredefinedBackground("Linguistics", 1, _ANY),
    # Vampire only
    PredefinedBackground("Herd", 3, _VAMPIRE),
    PredefinedBackground("Haven", 2, _VAMPIRE),
    PredefinedBackground("Feeding Grounds", 1, _VAMPIRE),
    PredefinedBackground("Domain", 2, _VAMPIRE),
    PredefinedBackground("Thin-Blooded Alchemy", 5, _VAMPIRE),
)

PREDEFINED_FLAWS: tuple[PredefinedBackground, ...] = (
    PredefinedBackground("Enemy", -1, _ANY),
    PredefinedBackground("Dark Secret", -1, _ANY),
    PredefinedBackground("Hunted", -3, _ANY),
    PredefinedBackground("Anachronism", -1, _ANY),
    PredefinedBackground("Archaic", -1, _ANY),
    PredefinedBackground("Disgraced", -2, _ANY),
    PredefinedBackground("Shunned", -1, _ANY),
    PredefinedBackground("Suspect", -2, _ANY),
    # Vampire only
    PredefinedBackground("Folkloric Block", -2, _VAMPIRE),
    PredefinedBackground("Clan Curse", -2, _VAMPIRE),
    PredefinedBackground("Feeding Restriction", -1, _VAMPIRE),
    PredefinedBackground("Obvious Predator", -2, _VAMPIRE),
    PredefinedBackground("Prey Exclusion", -1, _VAMPIRE),
    PredefinedBackground("Stigmata", -2, _VAMPIRE),
    PredefinedBackground("Thin-Blooded", -4, _VAMPIRE),
    PredefinedBackground("Caitiff", -2, _VAMPIRE),
)


def advantages_for(character_type: CharacterType) -> list[PredefinedBackground]:
    return [bg for bg in PREDEFINED_ADVANTAGES if character_type in bg.suitable_types]


def flaws_for(character_type: CharacterType) -> list[PredefinedBackground]:
    return [bg for bg in PREDEFINED_FLAWS if character_type in bg.suitable_types]
