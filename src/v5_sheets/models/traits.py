"""Small value types shared by all character sheets."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


class HealthState(str, Enum):
    """State of one health or willpower box."""
    OK = "ok"
    SUPERFICIAL = "superficial"
    AGGRAVATED = "aggravated"


class HumanityState(str, Enum):
    CHECKED = "checked"
    UNCHECKED = "unchecked"
    STAINED = "stained"


class MageTraitState(str, Enum):
    """Box state for the mage Hubris and Quiet tracks."""
    CHECKED = "checked"
    UNCHECKED = "unchecked"


@dataclass(frozen=True, slots=True)
class Background:
    """A merit (positive cost) or flaw (negative cost) on a sheet."""

    name: str
    cost: int
    is_custom: bool = False
    comment: str = ""

    @property
    def is_flaw(self) -> bool:
        return self.cost < 0


@dataclass(frozen=True, slots=True)
class Specialization:
    """A skill specialization. Identity is the (skill, text) pair."""

    skill_name: str
    name: str


@dataclass(slots=True)
class ChangeLogEntry:
    """One line-item in a character's history."""

    summary: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
