from __future__ import annotations

from typing import Callable, List, Optional

import pytest

from video_notes.controller import VideoNotesController
from video_notes.model.bookmarks import BookmarkRepository
from video_notes.model.storage import KeyedStore
from video_notes.model.video.player import PlayerLifecycleController


class FakeInstance:
    def __init__(self, video_id: str) -> None:
        self.video_id = video_id
        self.current_time = 0.0
        self.calls: List[tuple] = []
        self.destroyed = False

    def seek_to(self, time: float, allow_seek_ahead: bool) -> None:
        self.calls.append(("seek_to", time, allow_seek_ahead))
        self.current_time = time

    def play_video(self) -> None:
        self.calls.append(("play_video",))

    def get_current_time(self) -> float:
        self.calls.append(("get_current_time",))
        return self.current_time

    def destroy(self) -> None:
        self.destroyed = True


class PendingLoad:
    def __init__(self, video_id: str, on_ready: Callable, on_error: Callable) -> None:
        self.video_id = video_id
        self.on_ready = on_ready
        self.on_error = on_error
        self.instance: Optional[FakeInstance] = None

    def resolve(self) -> FakeInstance:
        self.instance = FakeInstance(self.video_id)
        self.on_ready(self.instance)
        return self.instance

    def fail(self, message: str = "boom") -> None:
        self.on_error(message)


class FakeProvider:
    """Records lifecycle requests; callbacks fire only when a test resolves them."""

    def __init__(self, script_loaded: bool = False) -> None:
        self.script_loaded = script_loaded
        self.script_requests = 0
        self.script_callbacks: List[Callable[[], None]] = []
        self.loads: List[PendingLoad] = []

    def is_script_loaded(self) -> bool:
        return self.script_loaded

    def load_script(self, on_ready: Callable[[], None]) -> None:
        self.script_requests += 1
        self.script_callbacks.append(on_ready)

    def finish_script(self) -> None:
        self.script_loaded = True
        for callback in self.script_callbacks:
            callback()

    def load(self, container, video_id: str, on_ready, on_error) -> None:
        self.loads.append(PendingLoad(video_id, on_ready, on_error))

    @property
    def load_count(self) -> int:
        return len(self.loads)


@pytest.fixture
def store(tmp_path) -> KeyedStore:
    return KeyedStore(tmp_path / "data")


@pytest.fixture
def repository(store) -> BookmarkRepository:
    return BookmarkRepository(store)


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def player(provider) -> PlayerLifecycleController:
    return PlayerLifecycleController(provider)


@pytest.fixture
def controller(tmp_path, provider) -> VideoNotesController:
    return VideoNotesController(tmp_path, provider=provider)


@pytest.fixture
def make_ready(provider):
    def _make_ready(submit: Callable[[str], None], video_id: str) -> FakeInstance:
        submit(video_id)
        if provider.script_callbacks and not provider.script_loaded:
            provider.finish_script()
        return provider.loads[-1].resolve()

    return _make_ready
