"""Local persistence: a JSON key-value file and the observable character store.

The whole collection is encoded as one JSON array and stored under a
single key (``characters``). Every mutation rewrites it. Loading is
forgiving: a missing file or key yields an empty store, and entries that
fail to decode are skipped with a warning instead of taking the rest of
the collection down with them.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from collections.abc import Callable
from pathlib import Path
from typing import Any

from v5_sheets.engine.change_log import ARCHIVED_MESSAGE, UNARCHIVED_MESSAGE
from v5_sheets.models.character import CREATION_COMPLETE, CharacterBase
from v5_sheets.models.traits import ChangeLogEntry
from v5_sheets.transfer.codec import character_from_dict, character_to_dict, dumps

LOG = logging.getLogger(__name__)

CHARACTERS_KEY = "characters"
STORE_ENV_VAR = "V5_SHEETS_STORE"


def default_store_path() -> Path:
    """``$V5_SHEETS_STORE`` if set, else the per-user data directory."""
    env_path = os.environ.get(STORE_ENV_VAR)
    if env_path:
        return Path(env_path).expanduser()
    data_home = os.environ.get("XDG_DATA_HOME")
    base = Path(data_home) if data_home else Path.home() / ".local/share"
    return base / "v5-sheets" / "characters.json"


class JsonFileStorage:
    """Tiny key-value store backed by one JSON object on disk."""

    __slots__ = ("path",)

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def _read(self) -> dict[str, Any]:
        try:
            text = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        try:
            doc = json.loads(text)
        except (ValueError, RecursionError):
            LOG.warning("Ignoring unreadable store file %s", self.path)
            return {}
        if not isinstance(doc, dict):
            LOG.warning("Ignoring store file %s: top level is not an object", self.path)
            return {}
        return doc

    def _write(self, doc: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=".store-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(dumps(doc))
            os.replace(tmp, self.path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise

    def get(self, key: str) -> Any | None:
        return self._read().get(key)

    def set(self, key: str, value: Any) -> None:
        doc = self._read()
        doc[key] = value
        self._write(doc)

    def delete(self, key: str) -> bool:
        doc = self._read()
        if key not in doc:
            return False
        del doc[key]
        self._write(doc)
        return True


Listener = Callable[[], None]


class CharacterStore:
    """The saved character collection, with change notification."""

    __slots__ = ("_storage", "_characters", "_listeners")

    def __init__(self, storage: JsonFileStorage) -> None:
        self._storage = storage
        self._characters: list[CharacterBase] = []
        self._listeners: list[Listener] = []
        self.load()

    @classmethod
    def open(cls, path: Path | str | None = None) -> CharacterStore:
        return cls(JsonFileStorage(path or default_store_path()))

    # --- Persistence --------------------------------------------------------

    def load(self) -> None:
        raw = self._storage.get(CHARACTERS_KEY)
        self._characters = []
        if raw is None:
            return
        if not isinstance(raw, list):
            LOG.warning("Stored %r is not a list; starting empty", CHARACTERS_KEY)
            return
        for index, item in enumerate(raw):
            try:
                self._characters.append(character_from_dict(item))
            except ValueError as exc:
                LOG.warning("Skipping stored character #%d: %s", index, exc)

    def save(self) -> None:
        self._storage.set(CHARACTERS_KEY, [character_to_dict(ch) for ch in self._characters])
        for listener in list(self._listeners):
            listener()

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call ``listener`` after every save. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # --- Queries ------------------------------------------------------------

    @property
    def characters(self) -> list[CharacterBase]:
        return list(self._characters)

    def __len__(self) -> int:
        return len(self._characters)

    def get(self, character_id: str) -> CharacterBase | None:
        for ch in self._characters:
            if ch.id == character_id:
                return ch
        return None

    def _require(self, character_id: str) -> CharacterBase:
        ch = self.get(character_id)
        if ch is None:
            raise ValueError(f"No character with id {character_id}")
        return ch

    def characters_in_creation(self) -> list[CharacterBase]:
        return [ch for ch in self._characters if ch.is_in_creation]

    def completed_characters(self) -> list[CharacterBase]:
        return [ch for ch in self._characters if not ch.is_in_creation]

    def active_characters(self) -> list[CharacterBase]:
        return [ch for ch in self.completed_characters() if not ch.is_archived]

    def archived_characters(self) -> list[CharacterBase]:
        return [ch for ch in self.completed_characters() if ch.is_archived]

    def by_chronicle(self) -> dict[str, list[CharacterBase]]:
        """Active characters grouped by chronicle name, both sorted."""
        groups: dict[str, list[CharacterBase]] = {}
        for ch in self.active_characters():
            groups.setdefault(ch.chronicle_name.strip() or "No Chronicle", []).append(ch)
        return {
            chronicle: sorted(members, key=lambda c: c.name.lower())
            for chronicle, members in sorted(groups.items())
        }

    # --- Mutations ----------------------------------------------------------

    def add(self, character: CharacterBase) -> None:
        if self.get(character.id) is not None:
            raise ValueError(f"Character {character.id} is already stored")
        self._characters.append(character)
        self.save()

    def update(self, character: CharacterBase) -> None:
        """Replace the stored character with the same id."""
        for index, ch in enumerate(self._characters):
            if ch.id == character.id:
                self._characters[index] = character
                self.save()
                return
        raise ValueError(f"No character with id {character.id}")

    def delete(self, character_id: str) -> bool:
        before = len(self._characters)
        self._characters = [ch for ch in self._characters if ch.id != character_id]
        if len(self._characters) == before:
            return False
        self.save()
        return True

    def archive(self, character_id: str) -> bool:
        ch = self._require(character_id)
        if ch.is_archived:
            return False
        ch.is_archived = True
        ch.change_log.append(ChangeLogEntry(ARCHIVED_MESSAGE))
        self.save()
        return True

    def unarchive(self, character_id: str) -> bool:
        ch = self._require(character_id)
        if not ch.is_archived:
            return False
        ch.is_archived = False
        ch.change_log.append(ChangeLogEntry(UNARCHIVED_MESSAGE))
        self.save()
        return True

    # --- Creation bookkeeping -----------------------------------------------

    def add_in_creation(self, character: CharacterBase) -> None:
        """Store a sheet that is still going through the wizard."""
        if not character.is_in_creation:
            character.creation_progress = 0
        self.add(character)

    def update_creation_progress(self, character_id: str, stage: int) -> None:
        if stage < 0:
            raise ValueError(f"Creation stage must be >= 0, got {stage}")
        self._require(character_id).creation_progress = int(stage)
        self.save()

    def complete_creation(self, character_id: str) -> None:
        ch = self._require(character_id)
        ch.creation_progress = CREATION_COMPLETE
        ch.recalculate_derived_values()
        self.save()
