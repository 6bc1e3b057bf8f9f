from __future__ import annotations

import logging
import threading
import time
from dataclasses import replace
from typing import Any, Dict, List

from ..errors import PersistenceWriteError
from .entities import Bookmark, validate_time
from .storage import KeyedStore

BOOKMARKS_KEY = "bookmarks"


class BookmarkRepository:
    """Bookmark collections keyed by video id, persisted as a single store entry.

    Every mutation rewrites the whole mapping before returning. Mutation and
    write happen under one lock, so concurrent callers see the last write win
    with a complete mapping on disk.
    """

    def __init__(self, store: KeyedStore, key: str = BOOKMARKS_KEY) -> None:
        self._store = store
        self._key = key
        self._lock = threading.RLock()
        self._log = logging.getLogger(__name__)
        self._last_id = 0
        self._collections: Dict[str, List[Bookmark]] = self._decode(store.read(key, {}))

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def list(self, video_id: str) -> List[Bookmark]:
        with self._lock:
            return list(self._collections.get(video_id, []))

    def video_ids(self) -> List[str]:
        with self._lock:
            return list(self._collections.keys())

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def add(self, video_id: str, time_value: float) -> Bookmark:
        time_value = validate_time(time_value)
        with self._lock:
            bookmark = Bookmark(id=self._next_id(), time=time_value, note="")
            self._collections.setdefault(video_id, []).append(bookmark)
            self._persist()
        self._log.debug("Bookmarks: added id=%s video=%s time=%.3f", bookmark.id, video_id, time_value)
        return bookmark

    def update_note(self, video_id: str, bookmark_id: int, note: str) -> bool:
        with self._lock:
            collection = self._collections.get(video_id)
            if collection is None:
                return False
            for index, bookmark in enumerate(collection):
                if bookmark.id == bookmark_id:
                    collection[index] = replace(bookmark, note=note)
                    self._persist()
                    return True
        self._log.debug("Bookmarks: update skipped, id=%s not in video=%s", bookmark_id, video_id)
        return False

    def delete(self, video_id: str, bookmark_id: int) -> bool:
        with self._lock:
            collection = self._collections.get(video_id)
            if collection is None:
                return False
            remaining = [bookmark for bookmark in collection if bookmark.id != bookmark_id]
            if len(remaining) == len(collection):
                return False
            # An emptied collection stays in the store as an empty list.
            self._collections[video_id] = remaining
            self._persist()
        self._log.debug("Bookmarks: deleted id=%s video=%s", bookmark_id, video_id)
        return True

    # ------------------------------------------------------------------
    # Persistence helpers
    # ------------------------------------------------------------------
    def _next_id(self) -> int:
        candidate = time.time_ns() // 1_000_000
        if candidate <= self._last_id:
            candidate = self._last_id + 1
        self._last_id = candidate
        return candidate

    def _persist(self) -> None:
        try:
            self._store.write(self._key, self._encode())
        except PersistenceWriteError as exc:
            self._log.warning("Bookmarks: write failed, keeping in-memory state (%s)", exc)

    def _encode(self) -> Dict[str, List[Dict[str, Any]]]:
        return {
            video_id: [bookmark.to_dict() for bookmark in collection]
            for video_id, collection in self._collections.items()
        }

    def _decode(self, data: Any) -> Dict[str, List[Bookmark]]:
        collections: Dict[str, List[Bookmark]] = {}
        if not isinstance(data, dict):
            self._log.warning("Bookmarks: ignoring malformed store of type %s", type(data).__name__)
            return collections
        pending: List[tuple] = []
        for video_id, entries in data.items():
            if not isinstance(entries, list):
                continue
            collection: List[Bookmark] = []
            seen_ids = set()
            for entry in entries:
                bookmark = Bookmark.from_dict(entry)
                if bookmark is None or bookmark.id in seen_ids:
                    continue
                if bookmark.id >= 0:
                    seen_ids.add(bookmark.id)
                    self._last_id = max(self._last_id, bookmark.id)
                else:
                    pending.append((video_id, len(collection)))
                collection.append(bookmark)
            collections[video_id] = collection
        for video_id, index in pending:
            bookmark = collections[video_id][index]
            collections[video_id][index] = replace(bookmark, id=self._next_id())
        return collections
