import json
import logging
import os
import re
import threading
from pathlib import Path
from typing import Any, Dict

from ..errors import PersistenceWriteError

_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")


class KeyedStore:
    """JSON values persisted one file per key inside ``directory``.

    Each key is loaded lazily on its first read and cached in memory. Writes
    replace the whole file through a temporary file, so the persisted copy is
    either the previous value or the new one.
    """

    def __init__(self, directory: Path) -> None:
        self.directory = Path(directory)
        self._values: Dict[str, Any] = {}
        self._lock = threading.RLock()
        self._log = logging.getLogger(__name__)

    def path_for(self, key: str) -> Path:
        if not key or not _KEY_PATTERN.match(key) or key.strip(".") == "":
            raise ValueError(f"Invalid storage key: {key!r}")
        return self.directory / f"{key}.json"

    def read(self, key: str, default: Any) -> Any:
        with self._lock:
            if key in self._values:
                return self._values[key]
            path = self.path_for(key)
            try:
                value = json.loads(path.read_text(encoding="utf-8"))
            except (json.JSONDecodeError, OSError, UnicodeDecodeError) as exc:
                if path.exists():
                    self._log.warning("Store: unreadable %s, using default (%s)", path, exc)
                value = default
                self._values[key] = value
                try:
                    self._persist(key, value)
                except PersistenceWriteError as write_exc:
                    self._log.warning("Store: unable to persist default for %s (%s)", key, write_exc)
                return value
            self._values[key] = value
            return value

    def write(self, key: str, value: Any) -> None:
        self.path_for(key)
        with self._lock:
            self._values[key] = value
            self._persist(key, value)

    def _persist(self, key: str, value: Any) -> None:
        path = self.path_for(key)
        tmp_path = path.with_name(path.name + ".tmp")
        try:
            payload = json.dumps(value, ensure_ascii=False, indent=2)
            self.directory.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(payload, encoding="utf-8")
            os.replace(tmp_path, path)
        except (OSError, TypeError, ValueError) as exc:
            try:
                tmp_path.unlink()
            except OSError:
                pass
            raise PersistenceWriteError(f"Failed to write {path}: {exc}") from exc
        self._log.debug("Store: wrote %s", path)
