from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from .bookmarks import BookmarkRepository
from .settings import AppSettings, SettingsManager, get_settings_path
from .storage import KeyedStore
from .theme import ThemePreference
from .video import OpenCVPlaybackProvider, PlayerLifecycleController
from .video.player import PlaybackProvider


class VideoNotesModel:
    """Encapsulates the non-UI state for the Video Notes application."""

    def __init__(self, root_path: Path, provider: Optional[PlaybackProvider] = None) -> None:
        self.settings_manager = SettingsManager(get_settings_path(root_path))
        self.settings: AppSettings = self.settings_manager.settings
        if not self.settings_manager.path.exists():
            self._write_default_settings()

        self.store = KeyedStore(self.settings_manager.storage_path(root_path))
        self.repository = BookmarkRepository(self.store)
        self.theme = ThemePreference(self.store, default=self.settings.general.theme)

        if provider is None:
            provider = OpenCVPlaybackProvider(self.settings.playback)
        self.provider = provider
        self.player = PlayerLifecycleController(provider)

        self.active_video_id: Optional[str] = None

    def _write_default_settings(self) -> None:
        try:
            self.settings_manager.save()
        except OSError as exc:
            logging.getLogger(__name__).warning("Settings: unable to write defaults (%s)", exc)
