"""Model layer containing the application's core logic and data structures."""

from .app_model import VideoNotesModel
from .bookmarks import BOOKMARKS_KEY, BookmarkRepository
from .entities import Bookmark, display_order, validate_time
from .settings import (
    AppSettings,
    DataSettings,
    GeneralSettings,
    PlaybackSettings,
    SettingsManager,
    get_settings_path,
)
from .storage import KeyedStore
from .theme import THEME_KEY, ThemePreference
from .video import PlayerLifecycleController, PlayerState

__all__ = [
    "AppSettings",
    "BOOKMARKS_KEY",
    "Bookmark",
    "BookmarkRepository",
    "DataSettings",
    "GeneralSettings",
    "KeyedStore",
    "PlaybackSettings",
    "PlayerLifecycleController",
    "PlayerState",
    "SettingsManager",
    "THEME_KEY",
    "ThemePreference",
    "VideoNotesModel",
    "display_order",
    "get_settings_path",
    "validate_time",
]
