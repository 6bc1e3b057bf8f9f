from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, List, Optional

from PyQt5 import QtCore

from ..errors import InvalidVideoUrlError, NotReadyError
from ..model.app_model import VideoNotesModel
from ..model.bookmarks import BookmarkRepository
from ..model.entities import Bookmark, display_order
from ..model.settings import AppSettings, SettingsManager
from ..model.video.player import PlaybackProvider, PlayerLifecycleController, PlayerState
from ..utils import extract_video_id

if TYPE_CHECKING:  # pragma: no cover - for static analysis only
    from ..view.main_window import VideoNotesWindow

# States in which the requested video is already on its way to being playable.
_LIVE_STATES = (PlayerState.SCRIPT_LOADING, PlayerState.PLAYER_CREATING, PlayerState.PLAYER_READY)


class VideoNotesController(QtCore.QObject):
    """Coordinates the view, the bookmark repository and the player lifecycle."""

    bookmarksChanged = QtCore.pyqtSignal(object)
    activeVideoChanged = QtCore.pyqtSignal(str)

    def __init__(
        self,
        root_path: Path,
        provider: Optional[PlaybackProvider] = None,
        parent: Optional[QtCore.QObject] = None,
    ) -> None:
        super().__init__(parent)
        self._model = VideoNotesModel(root_path, provider)
        self._bookmarks: List[Bookmark] = []
        self.view: Optional["VideoNotesWindow"] = None
        self._log = logging.getLogger(__name__)

    def set_view(self, view: "VideoNotesWindow") -> None:
        self.view = view

    # ------------------------------------------------------------------
    # Convenience accessors
    # ------------------------------------------------------------------
    @property
    def settings_manager(self) -> SettingsManager:
        return self._model.settings_manager

    @property
    def settings(self) -> AppSettings:
        return self._model.settings

    @property
    def repository(self) -> BookmarkRepository:
        return self._model.repository

    @property
    def player(self) -> PlayerLifecycleController:
        return self._model.player

    @property
    def active_video_id(self) -> Optional[str]:
        return self._model.active_video_id

    @property
    def is_ready(self) -> bool:
        return self.player.is_ready

    @property
    def bookmarks(self) -> List[Bookmark]:
        return list(self._bookmarks)

    @property
    def theme(self) -> str:
        return self._model.theme.value

    # ------------------------------------------------------------------
    # Video selection
    # ------------------------------------------------------------------
    def submit_url(self, url: str) -> str:
        video_id = extract_video_id(url)
        if video_id is None:
            raise InvalidVideoUrlError(f"Invalid YouTube URL: {url}")
        self.load_video(video_id)
        return video_id

    def load_video(self, video_id: str) -> None:
        player = self.player
        if (
            video_id == self._model.active_video_id
            and player.requested_video_id == video_id
            and player.state in _LIVE_STATES
        ):
            self._log.debug("Controller: video %s already active, skipping reload", video_id)
            return
        self._log.info("Controller: loading video %s", video_id)
        self._model.active_video_id = video_id
        player.submit(video_id)
        self.activeVideoChanged.emit(video_id)
        self._refresh_bookmarks()

    # ------------------------------------------------------------------
    # Bookmark actions
    # ------------------------------------------------------------------
    def capture_bookmark(self) -> Bookmark:
        video_id = self._require_active_video()
        bookmark = self.repository.add(video_id, self.player.get_current_time())
        self._refresh_bookmarks()
        return bookmark

    def jump_to(self, time: float) -> None:
        self.player.seek_to(time)

    def rename_note(self, bookmark_id: int, note: str) -> bool:
        video_id = self._model.active_video_id
        if video_id is None:
            return False
        updated = self.repository.update_note(video_id, bookmark_id, note)
        self._refresh_bookmarks()
        return updated

    def remove_bookmark(self, bookmark_id: int) -> bool:
        video_id = self._model.active_video_id
        if video_id is None:
            return False
        removed = self.repository.delete(video_id, bookmark_id)
        self._refresh_bookmarks()
        return removed

    # ------------------------------------------------------------------
    # Preferences and teardown
    # ------------------------------------------------------------------
    def toggle_theme(self) -> str:
        return self._model.theme.toggle()

    def shutdown(self) -> None:
        self.player.destroy()
        shutdown = getattr(self._model.provider, "shutdown", None)
        if callable(shutdown):
            shutdown()

    def _require_active_video(self) -> str:
        video_id = self._model.active_video_id
        if video_id is None or not self.player.is_ready:
            raise NotReadyError("Load a video and wait for the player before capturing bookmarks.")
        return video_id

    def _refresh_bookmarks(self) -> None:
        video_id = self._model.active_video_id
        self._bookmarks = display_order(self.repository.list(video_id)) if video_id else []
        self.bookmarksChanged.emit(list(self._bookmarks))
