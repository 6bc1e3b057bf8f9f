import json

import pytest

from video_notes.errors import PersistenceWriteError
from video_notes.model.storage import KeyedStore


def test_read_missing_key_returns_and_persists_default(tmp_path):
    store = KeyedStore(tmp_path / "data")
    assert store.read("bookmarks", {}) == {}
    assert json.loads((tmp_path / "data" / "bookmarks.json").read_text()) == {}


def test_read_corrupt_file_falls_back_to_default(tmp_path):
    directory = tmp_path / "data"
    directory.mkdir()
    (directory / "theme.json").write_text("{not json")
    store = KeyedStore(directory)
    assert store.read("theme", "dark") == "dark"
    assert json.loads((directory / "theme.json").read_text()) == "dark"


def test_write_replaces_persisted_value_and_reloads(tmp_path):
    store = KeyedStore(tmp_path)
    store.write("bookmarks", {"abc123": [{"id": 1, "time": 2.0, "note": ""}]})
    store.write("bookmarks", {"abc123": []})

    reloaded = KeyedStore(tmp_path)
    assert reloaded.read("bookmarks", None) == {"abc123": []}
    assert not list(tmp_path.glob("*.tmp"))


def test_keys_are_independent_entries(tmp_path):
    store = KeyedStore(tmp_path)
    store.write("bookmarks", {"a": []})
    store.write("theme", "light")
    assert sorted(path.name for path in tmp_path.glob("*.json")) == ["bookmarks.json", "theme.json"]


def test_failed_write_keeps_in_memory_value_and_old_file(tmp_path):
    store = KeyedStore(tmp_path)
    store.write("bookmarks", {"a": []})
    with pytest.raises(PersistenceWriteError):
        store.write("bookmarks", {"a": object()})
    assert json.loads((tmp_path / "bookmarks.json").read_text()) == {"a": []}
    assert "a" in store.read("bookmarks", {})
    assert not list(tmp_path.glob("*.tmp"))


@pytest.mark.parametrize("key", ["", "../escape", "with space", ".."])
def test_invalid_keys_are_rejected(tmp_path, key):
    with pytest.raises(ValueError):
        KeyedStore(tmp_path).write(key, 1)
