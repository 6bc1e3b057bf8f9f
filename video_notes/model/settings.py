import json
import logging
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Dict, Optional


SETTINGS_FILENAME = "settings.json"

LOG_LEVELS = {
    "Debug": logging.DEBUG,
    "Info": logging.INFO,
    "Warning": logging.WARNING,
    "Error": logging.ERROR,
}


@dataclass
class GeneralSettings:
    theme: str = "system"
    log_level: str = "Info"


@dataclass
class PlaybackSettings:
    stream_format: str = "best[ext=mp4][height<=720]/best[height<=720]/best"
    frame_interval_ms: int = 33
    cookies_path: Optional[str] = None


@dataclass
class DataSettings:
    storage_dir: str = "data"


@dataclass
class AppSettings:
    general: GeneralSettings = field(default_factory=GeneralSettings)
    playback: PlaybackSettings = field(default_factory=PlaybackSettings)
    data: DataSettings = field(default_factory=DataSettings)


class SettingsManager:
    def __init__(self, path: Path) -> None:
        self.path = path
        self.settings = AppSettings()
        self.load()

    def load(self) -> None:
        if not self.path.exists():
            return
        try:
            data = json.loads(self.path.read_text())
        except (json.JSONDecodeError, OSError):
            return
        self.settings = self._from_dict(data)

    def save(self) -> None:
        self.path.write_text(json.dumps(self._to_dict(), indent=2))

    def storage_path(self, root: Path) -> Path:
        storage = Path(self.settings.data.storage_dir).expanduser()
        return storage if storage.is_absolute() else root / storage

    def log_level(self) -> int:
        return LOG_LEVELS.get(self.settings.general.log_level, logging.INFO)

    def _to_dict(self) -> Dict:
        return asdict(self.settings)

    def _from_dict(self, data: Dict) -> AppSettings:
        def merge(default_cls, section):
            instance = default_cls()
            if isinstance(section, dict):
                for key, value in section.items():
                    if hasattr(instance, key):
                        setattr(instance, key, value)
            return instance

        settings = AppSettings()
        if not isinstance(data, dict):
            return settings
        if "general" in data:
            settings.general = merge(GeneralSettings, data["general"])
        if "playback" in data:
            settings.playback = merge(PlaybackSettings, data["playback"])
        if "data" in data:
            settings.data = merge(DataSettings, data["data"])
        return settings


def get_settings_path(root: Path) -> Path:
    return root / SETTINGS_FILENAME
