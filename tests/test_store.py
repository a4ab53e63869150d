"""Tests for the JSON file storage and the character store."""

import json
import logging

import pytest

from v5_sheets.engine.change_log import ARCHIVED_MESSAGE, UNARCHIVED_MESSAGE
from v5_sheets.models.character import CREATION_COMPLETE, MageCharacter, VampireCharacter
from v5_sheets.storage.store import (
    CHARACTERS_KEY,
    STORE_ENV_VAR,
    CharacterStore,
    JsonFileStorage,
    default_store_path,
)
from v5_sheets.transfer.codec import character_to_dict


@pytest.fixture
def path(tmp_path):
    return tmp_path / "data" / "characters.json"


@pytest.fixture
def store(path):
    return CharacterStore.open(path)


def _finished(name: str, chronicle: str = "") -> VampireCharacter:
    return VampireCharacter(name=name, chronicle_name=chronicle)


# --- Paths ---

def test_env_var_overrides_path(monkeypatch, tmp_path):
    monkeypatch.setenv(STORE_ENV_VAR, str(tmp_path / "x.json"))
    assert default_store_path() == tmp_path / "x.json"


def test_xdg_data_home(monkeypatch, tmp_path):
    monkeypatch.delenv(STORE_ENV_VAR, raising=False)
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path))
    assert default_store_path() == tmp_path / "v5-sheets" / "characters.json"


# --- Key-value file ---

class TestJsonFileStorage:
    def test_missing_file_reads_empty(self, path):
        assert JsonFileStorage(path).get("anything") is None

    def test_set_get_delete(self, path):
        kv = JsonFileStorage(path)
        kv.set("a", [1, 2])
        kv.set("b", "x")
        assert kv.get("a") == [1, 2]
        assert kv.delete("a")
        assert not kv.delete("a")
        assert json.loads(path.read_text(encoding="utf-8")) == {"b": "x"}

    def test_no_temp_files_left(self, path):
        JsonFileStorage(path).set("a", 1)
        assert [p.name for p in path.parent.iterdir()] == ["characters.json"]

    def test_corrupt_file_reads_empty(self, path, caplog):
        path.parent.mkdir(parents=True)
        path.write_text("{not json", encoding="utf-8")
        with caplog.at_level(logging.WARNING):
            assert JsonFileStorage(path).get("a") is None
        assert "unreadable" in caplog.text


# --- Character store ---

class TestPersistence:
    def test_empty_store(self, store):
        assert len(store) == 0
        assert store.characters == []

    def test_add_persists(self, store, path):
        v = _finished("Ada")
        store.add(v)
        reopened = CharacterStore.open(path)
        assert [c.id for c in reopened.characters] == [v.id]
        assert reopened.get(v.id) == v

    def test_bad_entries_skipped(self, path, caplog):
        good = _finished("Ada")
        kv = JsonFileStorage(path)
        kv.set(CHARACTERS_KEY, [{"type": "Werewolf", "data": {}}, character_to_dict(good)])
        with caplog.at_level(logging.WARNING):
            store = CharacterStore.open(path)
        assert [c.name for c in store.characters] == ["Ada"]
        assert "Skipping stored character #0" in caplog.text

    def test_entry_with_infinite_number_skipped(self, path, caplog):
        good = _finished("Ada")
        doc = json.dumps({CHARACTERS_KEY: ["BAD", character_to_dict(good)]})
        doc = doc.replace('"BAD"', '{"type": "Mage", "data": {"arete": 1e400}}')
        path.parent.mkdir(parents=True)
        path.write_text(doc, encoding="utf-8")
        with caplog.at_level(logging.WARNING):
            store = CharacterStore.open(path)
        assert [c.name for c in store.characters] == ["Ada"]
        assert "Skipping stored character #0" in caplog.text

    def test_deeply_nested_file_reads_empty(self, path, caplog):
        path.parent.mkdir(parents=True)
        path.write_text("[" * 200_000 + "]" * 200_000, encoding="utf-8")
        with caplog.at_level(logging.WARNING):
            store = CharacterStore.open(path)
        assert len(store) == 0
        assert "unreadable" in caplog.text

    def test_listeners(self, store):
        calls = []
        unsubscribe = store.subscribe(lambda: calls.append(1))
        store.add(_finished("Ada"))
        unsubscribe()
        store.add(_finished("Bea"))
        assert calls == [1]


class TestMutations:
    def test_duplicate_add(self, store):
        v = _finished("Ada")
        store.add(v)
        with pytest.raises(ValueError, match="already stored"):
            store.add(v)

    def test_update(self, store, path):
        v = _finished("Ada")
        store.add(v)
        edited = v.clone()
        edited.name = "Adeline"
        store.update(edited)
        assert CharacterStore.open(path).get(v.id).name == "Adeline"

    def test_update_unknown(self, store):
        with pytest.raises(ValueError, match="No character"):
            store.update(_finished("Ghost"))

    def test_delete(self, store):
        v = _finished("Ada")
        store.add(v)
        assert store.delete(v.id)
        assert not store.delete(v.id)
        assert store.get(v.id) is None


class TestArchive:
    def test_archive_and_unarchive(self, store):
        v = _finished("Ada")
        store.add(v)
        assert store.archive(v.id)
        assert not store.archive(v.id)
        assert store.archived_characters() == [v]
        assert store.active_characters() == []
        assert v.change_log[-1].summary == ARCHIVED_MESSAGE

        assert store.unarchive(v.id)
        assert not store.unarchive(v.id)
        assert v.change_log[-1].summary == UNARCHIVED_MESSAGE
        assert store.active_characters() == [v]

    def test_unknown_id(self, store):
        with pytest.raises(ValueError):
            store.archive("missing")


class TestQueries:
    def test_by_chronicle(self, store):
        store.add(_finished("zed", "Chicago"))
        store.add(_finished("Amy", "Chicago"))
        store.add(_finished("Bob", "  "))
        store.add(MageCharacter(name="Mira", chronicle_name="Ascension"))
        groups = store.by_chronicle()
        assert list(groups) == ["Ascension", "Chicago", "No Chronicle"]
        assert [c.name for c in groups["Chicago"]] == ["Amy", "zed"]

    def test_creation_partitions(self, store):
        done = _finished("Ada")
        pending = VampireCharacter(name="Bea")
        store.add(done)
        store.add_in_creation(pending)
        assert pending.creation_progress == 0
        assert store.characters_in_creation() == [pending]
        assert store.completed_characters() == [done]
        assert "No Chronicle" in store.by_chronicle()
        assert pending not in store.by_chronicle()["No Chronicle"]


class TestCreationBookkeeping:
    def test_update_progress(self, store, path):
        v = VampireCharacter(name="Bea")
        store.add_in_creation(v)
        store.update_creation_progress(v.id, 5)
        assert CharacterStore.open(path).get(v.id).creation_progress == 5
        with pytest.raises(ValueError, match=">= 0"):
            store.update_creation_progress(v.id, -1)

    def test_complete(self, store):
        v = VampireCharacter(name="Bea")
        store.add_in_creation(v)
        v.attributes["physical"]["Stamina"] = 4
        store.complete_creation(v.id)
        assert v.creation_progress == CREATION_COMPLETE
        assert v.health == 7
