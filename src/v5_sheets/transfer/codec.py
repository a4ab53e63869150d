"""Character <-> JSON-ready dict conversion.

Every character travels inside a tagged envelope::

    {"type": "Vampire", "data": {...}}

so the collection can hold mixed sheet types. Decoding is lenient about
older payloads: missing optional fields take their defaults, and legacy
advantages/flaws stored as bare strings become custom backgrounds worth
1 (advantage) or -1 (flaw). Malformed input raises ``ValueError``.
"""

from __future__ import annotations

import json
from datetime import date, datetime
from typing import Any

from v5_sheets.models.character import (
    CHARACTER_CLASSES,
    CREATION_COMPLETE,
    CharacterBase,
    GhoulCharacter,
    MageCharacter,
    VampireCharacter,
)
from v5_sheets.models.constants import (
    ATTRIBUTES_BY_CATEGORY,
    DEFAULT_ATTRIBUTE_VALUE,
    DEFAULT_SKILL_VALUE,
    MAGE_SPHERES,
    MAX_DOTS,
    MIN_DOTS,
    SKILLS_BY_CATEGORY,
    CharacterType,
)
from v5_sheets.models.derived_stats import humanity_track
from v5_sheets.models.disciplines import V5Discipline, V5DisciplinePower, V5DisciplineProgress
from v5_sheets.models.predator import PredatorBonus, PredatorBonusType, PredatorPath
from v5_sheets.models.traits import (
    Background,
    ChangeLogEntry,
    HealthState,
    HumanityState,
    MageTraitState,
    Specialization,
)

Json = dict[str, Any]


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------


def _date(value: date | None) -> str | None:
    return value.isoformat() if value is not None else None


def _background(bg: Background) -> Json:
    return {"name": bg.name, "cost": bg.cost, "is_custom": bg.is_custom, "comment": bg.comment}


def _power(power: V5DisciplinePower) -> Json:
    return {
        "id": power.id,
        "name": power.name,
        "description": power.description,
        "level": power.level,
        "is_custom": power.is_custom,
    }


def _discipline(discipline: V5Discipline) -> Json:
    return {
        "name": discipline.name,
        "description": discipline.description,
        "is_custom": discipline.is_custom,
        "powers": {
            str(level): [_power(p) for p in powers]
            for level, powers in sorted(discipline.powers.items())
        },
    }


def _progress(progress: V5DisciplineProgress) -> Json:
    return {
        "discipline_name": progress.discipline_name,
        "current_level": progress.current_level,
        "selected_powers": {
            str(level): list(ids) for level, ids in sorted(progress.selected_powers.items())
        },
    }


def _predator_path(path: PredatorPath) -> Json:
    return {
        "name": path.name,
        "description": path.description,
        "bonuses": [
            {
                "type": b.type.value,
                "description": b.description,
                "discipline_name": b.discipline_name,
                "skill_name": b.skill_name,
                "specialization_name": b.specialization_name,
                "background_name": b.background_name,
                "value": b.value,
                "alternatives": list(b.alternatives),
            }
            for b in path.bonuses
        ],
        "drawbacks": list(path.drawbacks),
        "feeding_description": path.feeding_description,
        "is_custom": path.is_custom,
    }


def _encode_base(ch: CharacterBase) -> Json:
    return {
        "id": ch.id,
        "name": ch.name,
        "chronicle_name": ch.chronicle_name,
        "concept": ch.concept,
        "attributes": {cat: dict(values) for cat, values in ch.attributes.items()},
        "skills": {cat: dict(values) for cat, values in ch.skills.items()},
        "specializations": [
            {"skill_name": s.skill_name, "name": s.name} for s in ch.specializations
        ],
        "health": ch.health,
        "willpower": ch.willpower,
        "health_states": [s.value for s in ch.health_states],
        "willpower_states": [s.value for s in ch.willpower_states],
        "experience": ch.experience,
        "spent_experience": ch.spent_experience,
        "ambition": ch.ambition,
        "desire": ch.desire,
        "character_description": ch.character_description,
        "notes": ch.notes,
        "date_of_birth": _date(ch.date_of_birth),
        "convictions": list(ch.convictions),
        "touchstones": list(ch.touchstones),
        "advantages": [_background(bg) for bg in ch.advantages],
        "flaws": [_background(bg) for bg in ch.flaws],
        "current_session": ch.current_session,
        "change_log": [
            {"id": e.id, "summary": e.summary, "timestamp": e.timestamp.isoformat()}
            for e in ch.change_log
        ],
        "is_archived": ch.is_archived,
        "creation_progress": ch.creation_progress,
    }


def character_to_dict(ch: CharacterBase) -> Json:
    """Encode a sheet as a tagged envelope of plain JSON types."""
    data = _encode_base(ch)
    if isinstance(ch, VampireCharacter):
        data.update(
            clan=ch.clan,
            generation=ch.generation,
            blood_potency=ch.blood_potency,
            humanity=ch.humanity,
            hunger=ch.hunger,
            humanity_states=[s.value for s in ch.humanity_states],
            disciplines=dict(ch.disciplines),
            v5_disciplines={n: _progress(p) for n, p in sorted(ch.v5_disciplines.items())},
            custom_v5_disciplines=[_discipline(d) for d in ch.custom_v5_disciplines],
            predator_path=ch.predator_path,
            custom_predator_paths=[_predator_path(p) for p in ch.custom_predator_paths],
            date_of_embrace=_date(ch.date_of_embrace),
        )
    elif isinstance(ch, GhoulCharacter):
        data.update(
            humanity=ch.humanity,
            humanity_states=[s.value for s in ch.humanity_states],
            disciplines=dict(ch.disciplines),
            date_of_ghouling=_date(ch.date_of_ghouling),
        )
    elif isinstance(ch, MageCharacter):
        data.update(
            spheres=dict(ch.spheres),
            arete=ch.arete,
            paradox=ch.paradox,
            hubris=ch.hubris,
            quiet=ch.quiet,
            hubris_states=[s.value for s in ch.hubris_states],
            quiet_states=[s.value for s in ch.quiet_states],
        )
    return {"type": ch.character_type.value, "data": data}


def dumps(payload: Any) -> str:
    """Deterministic compact JSON (sorted keys, no whitespace)."""
    return json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------


def _parse_date(raw: Any) -> date | None:
    if raw in (None, ""):
        return None
    return date.fromisoformat(raw)


def _decode_backgrounds(items: list[Any], legacy_cost: int) -> list[Background]:
    out: list[Background] = []
    for item in items:
        if isinstance(item, str):
            out.append(Background(item, legacy_cost, is_custom=True))
        else:
            out.append(Background(
                name=item["name"],
                cost=int(item["cost"]),
                is_custom=bool(item.get("is_custom", False)),
                comment=item.get("comment", ""),
            ))
    return out


def _merge_dots(
    raw: dict[str, dict[str, int]] | None,
    layout: dict[str, tuple[str, ...]],
    default: int,
    minimum: int,
) -> dict[str, dict[str, int]]:
    raw = raw or {}
    merged: dict[str, dict[str, int]] = {}
    for cat, names in layout.items():
        merged[cat] = {}
        for name in names:
            value = int(raw.get(cat, {}).get(name, default))
            if not minimum <= value <= MAX_DOTS:
                raise ValueError(f"{name} must be {minimum}-{MAX_DOTS}, got {value}")
            merged[cat][name] = value
    return merged


def _decode_power(raw: Json) -> V5DisciplinePower:
    return V5DisciplinePower(
        name=raw["name"],
        description=raw.get("description", ""),
        level=int(raw["level"]),
        is_custom=bool(raw.get("is_custom", False)),
        id=raw["id"],
    )


def _decode_discipline(raw: Json) -> V5Discipline:
    return V5Discipline(
        name=raw["name"],
        description=raw.get("description", ""),
        is_custom=bool(raw.get("is_custom", True)),
        powers={
            int(level): [_decode_power(p) for p in powers]
            for level, powers in raw.get("powers", {}).items()
        },
    )


def _decode_progress(name: str, raw: Json) -> V5DisciplineProgress:
    return V5DisciplineProgress(
        discipline_name=raw.get("discipline_name", name),
        current_level=int(raw.get("current_level", 0)),
        selected_powers={
            int(level): list(ids) for level, ids in raw.get("selected_powers", {}).items()
        },
    )


def _decode_predator_path(raw: Json) -> PredatorPath:
    return PredatorPath(
        name=raw["name"],
        description=raw.get("description", ""),
        bonuses=[
            PredatorBonus(
                type=PredatorBonusType(b["type"]),
                description=b.get("description", ""),
                discipline_name=b.get("discipline_name"),
                skill_name=b.get("skill_name"),
                specialization_name=b.get("specialization_name"),
                background_name=b.get("background_name"),
                value=int(b.get("value", 0)),
                alternatives=tuple(b.get("alternatives", ())),
            )
            for b in raw.get("bonuses", [])
        ],
        drawbacks=list(raw.get("drawbacks", [])),
        feeding_description=raw.get("feeding_description", ""),
        is_custom=bool(raw.get("is_custom", True)),
    )


def _base_kwargs(data: Json) -> Json:
    kwargs: Json = {
        "name": data.get("name", ""),
        "chronicle_name": data.get("chronicle_name", ""),
        "concept": data.get("concept", ""),
        "attributes": _merge_dots(
            data.get("attributes"), ATTRIBUTES_BY_CATEGORY, DEFAULT_ATTRIBUTE_VALUE, 1,
        ),
        "skills": _merge_dots(
            data.get("skills"), SKILLS_BY_CATEGORY, DEFAULT_SKILL_VALUE, MIN_DOTS,
        ),
        "specializations": [
            Specialization(s["skill_name"], s["name"]) for s in data.get("specializations", [])
        ],
        "health_states": [HealthState(s) for s in data.get("health_states", [])],
        "willpower_states": [HealthState(s) for s in data.get("willpower_states", [])],
        "experience": int(data.get("experience", 0)),
        "spent_experience": int(data.get("spent_experience", 0)),
        "ambition": data.get("ambition", ""),
        "desire": data.get("desire", ""),
        "character_description": data.get("character_description", ""),
        "notes": data.get("notes", ""),
        "date_of_birth": _parse_date(data.get("date_of_birth")),
        "convictions": list(data.get("convictions", [])),
        "touchstones": list(data.get("touchstones", [])),
        "advantages": _decode_backgrounds(data.get("advantages", []), 1),
        "flaws": _decode_backgrounds(data.get("flaws", []), -1),
        "current_session": int(data.get("current_session", 1)),
        "change_log": [
            ChangeLogEntry(
                summary=e["summary"],
                timestamp=datetime.fromisoformat(e["timestamp"]),
                **({"id": e["id"]} if "id" in e else {}),
            )
            for e in data.get("change_log", [])
        ],
        "is_archived": bool(data.get("is_archived", False)),
        "creation_progress": int(data.get("creation_progress", CREATION_COMPLETE)),
    }
    if "id" in data:
        kwargs["id"] = data["id"]
    return kwargs


def _humanity_states(data: Json, humanity: int) -> list[HumanityState]:
    if "humanity_states" in data:
        return [HumanityState(s) for s in data["humanity_states"]]
    return humanity_track(humanity)


def character_from_dict(envelope: Json) -> CharacterBase:
    """Decode a tagged envelope. Raises ValueError on malformed input."""
    try:
        character_type = CharacterType(envelope["type"])
        data = envelope["data"]
        if not isinstance(data, dict):
            raise ValueError("Character data must be an object")
        kwargs = _base_kwargs(data)

        if character_type == CharacterType.VAMPIRE:
            humanity = int(data.get("humanity", 7))
            kwargs.update(
                clan=data.get("clan", ""),
                generation=int(data.get("generation", 13)),
                blood_potency=int(data.get("blood_potency", 1)),
                humanity=humanity,
                hunger=int(data.get("hunger", 1)),
                humanity_states=_humanity_states(data, humanity),
                disciplines={k: int(v) for k, v in data.get("disciplines", {}).items()},
                v5_disciplines={
                    name: _decode_progress(name, raw)
                    for name, raw in data.get("v5_disciplines", {}).items()
                },
                custom_v5_disciplines=[
                    _decode_discipline(d) for d in data.get("custom_v5_disciplines", [])
                ],
                predator_path=data.get("predator_path", ""),
                custom_predator_paths=[
                    _decode_predator_path(p) for p in data.get("custom_predator_paths", [])
                ],
                date_of_embrace=_parse_date(data.get("date_of_embrace")),
            )
        elif character_type == CharacterType.GHOUL:
            humanity = int(data.get("humanity", 7))
            kwargs.update(
                humanity=humanity,
                humanity_states=_humanity_states(data, humanity),
                disciplines={k: int(v) for k, v in data.get("disciplines", {}).items()},
                date_of_ghouling=_parse_date(data.get("date_of_ghouling")),
            )
        else:
            spheres = {name: 0 for name in MAGE_SPHERES}
            spheres.update({k: int(v) for k, v in data.get("spheres", {}).items()})
            kwargs.update(
                spheres=spheres,
                arete=int(data.get("arete", 2)),
                paradox=int(data.get("paradox", 1)),
                hubris=int(data.get("hubris", 0)),
                quiet=int(data.get("quiet", 0)),
            )
            for key in ("hubris_states", "quiet_states"):
                if key in data:
                    kwargs[key] = [MageTraitState(s) for s in data[key]]

        return CHARACTER_CLASSES[character_type](**kwargs)
    except (KeyError, TypeError, AttributeError, OverflowError) as exc:
        raise ValueError(f"Malformed character payload: {exc!r}") from exc


def encode_collection(characters: list[CharacterBase]) -> str:
    return dumps([character_to_dict(ch) for ch in characters])


def decode_collection(text: str) -> list[CharacterBase]:
    """Decode a whole collection. Raises ValueError if any entry is malformed."""
    try:
        payload = json.loads(text)
    except RecursionError as exc:
        raise ValueError("Character collection is nested too deeply") from exc
    if not isinstance(payload, list):
        raise ValueError("Character collection must be a JSON array")
    return [character_from_dict(item) for item in payload]
