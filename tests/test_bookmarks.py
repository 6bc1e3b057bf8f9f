import json
import math
import threading

import pytest

from video_notes.errors import InvalidTimeError, PersistenceWriteError
from video_notes.model.bookmarks import BookmarkRepository
from video_notes.model.entities import Bookmark, display_order
from video_notes.model.storage import KeyedStore


def _persisted(store: KeyedStore, video_id: str):
    raw = json.loads(store.path_for("bookmarks").read_text())
    return [Bookmark.from_dict(entry) for entry in raw.get(video_id, [])]


def test_list_unknown_video_is_empty(repository):
    assert repository.list("nope") == []


def test_add_appends_bookmark_with_empty_note(repository, store):
    before = repository.list("abc123")
    bookmark = repository.add("abc123", 42.5)
    after = repository.list("abc123")

    assert len(after) == len(before) + 1
    assert after[-1] == bookmark
    assert bookmark.time == 42.5
    assert bookmark.note == ""
    assert _persisted(store, "abc123") == after


def test_ids_are_unique_and_increasing(repository):
    ids = [repository.add("abc123", float(index)).id for index in range(20)]
    assert ids == sorted(ids)
    assert len(set(ids)) == len(ids)


@pytest.mark.parametrize("value", [-1, math.nan, math.inf, "12", None, True])
def test_add_rejects_invalid_time_without_mutation(repository, store, value):
    repository.add("abc123", 1.0)
    with pytest.raises(InvalidTimeError):
        repository.add("abc123", value)
    assert len(repository.list("abc123")) == 1
    assert len(_persisted(store, "abc123")) == 1


def test_update_note_replaces_note_and_persists(repository, store):
    bookmark = repository.add("abc123", 3.0)
    assert repository.update_note("abc123", bookmark.id, "intro ends") is True
    (updated,) = repository.list("abc123")
    assert updated.id == bookmark.id
    assert updated.time == bookmark.time
    assert updated.note == "intro ends"
    assert _persisted(store, "abc123") == [updated]


def test_update_note_unknown_id_is_silent(repository):
    bookmark = repository.add("abc123", 3.0)
    assert repository.update_note("abc123", bookmark.id + 1, "x") is False
    assert repository.update_note("other", bookmark.id, "x") is False
    assert repository.list("abc123") == [bookmark]


def test_delete_removes_and_keeps_empty_collection(repository, store):
    bookmark = repository.add("abc123", 3.0)
    assert repository.delete("abc123", bookmark.id) is True
    assert repository.list("abc123") == []
    raw = json.loads(store.path_for("bookmarks").read_text())
    assert raw == {"abc123": []}


def test_delete_unknown_id_does_not_touch_file(repository, store):
    repository.add("abc123", 3.0)
    path = store.path_for("bookmarks")
    content = path.read_text()
    mtime = path.stat().st_mtime_ns

    assert repository.delete("abc123", -42) is False
    assert repository.delete("missing", 1) is False
    assert path.read_text() == content
    assert path.stat().st_mtime_ns == mtime


def test_persisted_state_matches_memory_after_each_operation(repository, store):
    first = repository.add("abc123", 10.0)
    assert _persisted(store, "abc123") == repository.list("abc123")
    second = repository.add("abc123", 5.0)
    assert _persisted(store, "abc123") == repository.list("abc123")
    repository.update_note("abc123", second.id, "earlier")
    assert _persisted(store, "abc123") == repository.list("abc123")
    repository.delete("abc123", first.id)
    assert _persisted(store, "abc123") == repository.list("abc123")


def test_repository_reloads_from_disk(tmp_path):
    repository = BookmarkRepository(KeyedStore(tmp_path))
    bookmark = repository.add("abc123", 7.25)
    repository.update_note("abc123", bookmark.id, "hello")

    reloaded = BookmarkRepository(KeyedStore(tmp_path))
    assert reloaded.list("abc123") == repository.list("abc123")
    assert reloaded.add("abc123", 8.0).id > bookmark.id


def test_damaged_entries_are_skipped_on_load(tmp_path):
    (tmp_path / "bookmarks.json").write_text(
        json.dumps(
            {
                "abc123": [
                    {"id": 5, "time": 1.0, "note": "ok"},
                    {"id": 5, "time": 2.0, "note": "duplicate"},
                    {"id": 6, "time": -3},
                    {"id": 7, "time": "soon"},
                    {"time": 4.0, "note": None},
                    "garbage",
                ],
                "broken": {"not": "a list"},
            }
        )
    )
    repository = BookmarkRepository(KeyedStore(tmp_path))
    bookmarks = repository.list("abc123")
    assert [(b.time, b.note) for b in bookmarks] == [(1.0, "ok"), (4.0, "")]
    assert bookmarks[1].id > 5
    assert repository.video_ids() == ["abc123"]


def test_write_failure_is_logged_and_memory_stays_authoritative(repository, store, monkeypatch, caplog):
    def failing_write(key, value):
        raise PersistenceWriteError("disk full")

    monkeypatch.setattr(store, "write", failing_write)
    bookmark = repository.add("abc123", 9.0)
    assert repository.list("abc123") == [bookmark]
    assert "write failed" in caplog.text


def test_next_successful_write_reconciles_file(repository, store, monkeypatch):
    def failing_write(key, value):
        raise PersistenceWriteError("disk full")

    monkeypatch.setattr(store, "write", failing_write)
    lost = repository.add("abc123", 9.0)
    monkeypatch.undo()

    kept = repository.add("abc123", 12.0)
    assert repository.list("abc123") == [lost, kept]
    assert _persisted(store, "abc123") == repository.list("abc123")
    reloaded = BookmarkRepository(KeyedStore(store.path_for("bookmarks").parent))
    assert reloaded.list("abc123") == [lost, kept]


def test_concurrent_adds_leave_consistent_store(repository, store):
    def worker(offset):
        for index in range(10):
            repository.add("abc123", float(offset * 100 + index))

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(repository.list("abc123")) == 40
    assert _persisted(store, "abc123") == repository.list("abc123")


def test_display_order_is_stable_and_idempotent():
    bookmarks = [
        Bookmark(id=1, time=30.0),
        Bookmark(id=2, time=10.0),
        Bookmark(id=3, time=30.0, note="tie"),
        Bookmark(id=4, time=0.0),
    ]
    ordered = display_order(bookmarks)
    assert [b.id for b in ordered] == [4, 2, 1, 3]
    assert display_order(ordered) == ordered
    assert [b.id for b in bookmarks] == [1, 2, 3, 4]
