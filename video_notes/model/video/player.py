from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional, Protocol

from PyQt5 import QtCore

from ...errors import NotReadyError


class PlayerState(enum.Enum):
    UNINITIALIZED = "uninitialized"
    SCRIPT_LOADING = "script_loading"
    SCRIPT_READY = "script_ready"
    PLAYER_CREATING = "player_creating"
    PLAYER_READY = "player_ready"
    DESTROYED = "destroyed"


class PlaybackInstance(Protocol):
    def seek_to(self, time: float, allow_seek_ahead: bool) -> None: ...

    def play_video(self) -> None: ...

    def get_current_time(self) -> float: ...

    def destroy(self) -> None: ...


class PlaybackProvider(Protocol):
    def is_script_loaded(self) -> bool: ...

    def load_script(self, on_ready: Callable[[], None]) -> None: ...

    def load(
        self,
        container: Any,
        video_id: str,
        on_ready: Callable[[PlaybackInstance], None],
        on_error: Callable[[str], None],
    ) -> None: ...


@dataclass
class PlayerSession:
    video_id: str
    instance: PlaybackInstance


class PlayerLifecycleController(QtCore.QObject):
    """Owns the single live playback instance and its asynchronous setup.

    The provider backend is loaded once; after that every submitted video id
    replaces the current session. Callbacks from superseded creations carry an
    old generation number and their instances are destroyed on arrival.
    """

    stateChanged = QtCore.pyqtSignal(object)
    readyChanged = QtCore.pyqtSignal(bool)
    loadFailed = QtCore.pyqtSignal(str)

    def __init__(
        self,
        provider: PlaybackProvider,
        container: Any = None,
        parent: Optional[QtCore.QObject] = None,
    ) -> None:
        super().__init__(parent)
        self._provider = provider
        self._container = container
        self._state = PlayerState.UNINITIALIZED
        self._session: Optional[PlayerSession] = None
        self._requested_video_id: Optional[str] = None
        self._generation = 0
        self._creation_count = 0
        self._log = logging.getLogger(__name__)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------
    @property
    def state(self) -> PlayerState:
        return self._state

    @property
    def is_ready(self) -> bool:
        return self._state is PlayerState.PLAYER_READY

    @property
    def video_id(self) -> Optional[str]:
        return self._session.video_id if self._session else None

    @property
    def requested_video_id(self) -> Optional[str]:
        return self._requested_video_id

    @property
    def creation_count(self) -> int:
        return self._creation_count

    def set_container(self, container: Any) -> None:
        self._container = container

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def submit(self, video_id: str) -> None:
        if self._state is PlayerState.DESTROYED:
            self._log.warning("Player: ignoring video %s after destroy", video_id)
            return
        self._requested_video_id = video_id
        if self._state is PlayerState.UNINITIALIZED:
            if self._provider.is_script_loaded():
                self._set_state(PlayerState.SCRIPT_READY)
                self._create(video_id)
                return
            self._set_state(PlayerState.SCRIPT_LOADING)
            self._provider.load_script(self._on_script_ready)
        elif self._state is PlayerState.SCRIPT_LOADING:
            self._log.debug("Player: script still loading, queued video %s", video_id)
        else:
            self._create(video_id)

    def destroy(self) -> None:
        self._release_session()
        self._generation += 1
        self._requested_video_id = None
        self._set_state(PlayerState.DESTROYED)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------
    def seek_to(self, time: float) -> None:
        instance = self._require_instance("seek_to")
        instance.seek_to(time, True)
        instance.play_video()

    def get_current_time(self) -> float:
        instance = self._require_instance("get_current_time")
        return float(instance.get_current_time())

    # ------------------------------------------------------------------
    # Internal transitions
    # ------------------------------------------------------------------
    def _create(self, video_id: str) -> None:
        self._release_session()
        self._generation += 1
        generation = self._generation
        self._creation_count += 1
        self._set_state(PlayerState.PLAYER_CREATING)
        self._log.debug("Player: creating instance for %s (generation %s)", video_id, generation)
        self._provider.load(
            self._container,
            video_id,
            lambda instance: self._on_player_ready(generation, video_id, instance),
            lambda message: self._on_player_error(generation, video_id, message),
        )

    def _on_script_ready(self) -> None:
        if self._state is not PlayerState.SCRIPT_LOADING:
            self._log.debug("Player: ignoring script ready in state %s", self._state.name)
            return
        self._set_state(PlayerState.SCRIPT_READY)
        if self._requested_video_id is not None:
            self._create(self._requested_video_id)

    def _on_player_ready(self, generation: int, video_id: str, instance: PlaybackInstance) -> None:
        if generation != self._generation or self._state is not PlayerState.PLAYER_CREATING:
            self._log.debug("Player: destroying stale instance for %s (generation %s)", video_id, generation)
            instance.destroy()
            return
        self._session = PlayerSession(video_id=video_id, instance=instance)
        self._set_state(PlayerState.PLAYER_READY)

    def _on_player_error(self, generation: int, video_id: str, message: str) -> None:
        if generation != self._generation or self._state is not PlayerState.PLAYER_CREATING:
            self._log.debug("Player: ignoring stale load error for %s: %s", video_id, message)
            return
        self._log.error("Player: failed to load %s: %s", video_id, message)
        self._set_state(PlayerState.SCRIPT_READY)
        self.loadFailed.emit(message)

    def _release_session(self) -> None:
        session = self._session
        self._session = None
        if session is None:
            return
        self._log.debug("Player: destroying instance for %s", session.video_id)
        session.instance.destroy()

    def _require_instance(self, command: str) -> PlaybackInstance:
        if self._state is not PlayerState.PLAYER_READY or self._session is None:
            raise NotReadyError(f"Cannot {command} while player is {self._state.value}.")
        return self._session.instance

    def _set_state(self, state: PlayerState) -> None:
        if state is self._state:
            return
        was_ready = self.is_ready
        self._log.debug("Player: %s -> %s", self._state.name, state.name)
        self._state = state
        self.stateChanged.emit(state)
        if was_ready != self.is_ready:
            self.readyChanged.emit(self.is_ready)
