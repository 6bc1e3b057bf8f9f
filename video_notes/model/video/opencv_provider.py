from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Set

import cv2
import numpy as np
import yt_dlp
from PyQt5 import QtCore

from ...errors import PlaybackSourceError
from ..settings import PlaybackSettings
from .player import PlaybackInstance

YOUTUBE_WATCH_URL = "https://www.youtube.com/watch?v={video_id}"


def ydl_options(settings: PlaybackSettings) -> Dict[str, Any]:
    opts: Dict[str, Any] = {
        "quiet": True,
        "no_warnings": True,
        "skip_download": True,
        "format": settings.stream_format,
    }
    if settings.cookies_path:
        opts["cookiefile"] = settings.cookies_path
    return opts


def resolve_source(options: Optional[Dict[str, Any]], video_id: str) -> str:
    """Return a path or stream URL OpenCV can open for ``video_id``.

    Existing local files are used as-is; anything else is treated as a
    YouTube video id and resolved through a yt-dlp client opened for this
    call only. ``options`` is ``None`` when yt-dlp is unavailable.
    """
    local_path = Path(video_id).expanduser()
    if local_path.is_file():
        return str(local_path)
    if options is None:
        raise PlaybackSourceError("yt-dlp is unavailable; only local files can be opened.")
    try:
        with yt_dlp.YoutubeDL(options) as ydl:
            info = ydl.extract_info(YOUTUBE_WATCH_URL.format(video_id=video_id), download=False)
    except yt_dlp.utils.DownloadError as exc:
        raise PlaybackSourceError(f"Unable to resolve video {video_id}: {exc}") from exc
    info = info or {}
    if info.get("url"):
        return info["url"]
    for fmt in info.get("requested_formats") or []:
        if fmt.get("url") and fmt.get("vcodec") not in (None, "none"):
            return fmt["url"]
    raise PlaybackSourceError(f"No playable stream found for video {video_id}.")


class BackendLoader(QtCore.QThread):
    """Primes yt-dlp off the GUI thread and reports whether it is usable."""

    loaded = QtCore.pyqtSignal(bool)

    def __init__(self, options: Dict[str, Any], parent: Optional[QtCore.QObject] = None) -> None:
        super().__init__(parent)
        self._options = options
        self._log = logging.getLogger(__name__)

    def run(self) -> None:  # pragma: no cover - runs in background thread
        try:
            with yt_dlp.YoutubeDL(self._options):
                pass
        except Exception as exc:
            self._log.error("Backend: yt-dlp initialisation failed (%s)", exc)
            self.loaded.emit(False)
            return
        self.loaded.emit(True)


class SourceResolveWorker(QtCore.QThread):
    resolved = QtCore.pyqtSignal(object)
    failed = QtCore.pyqtSignal(str)

    def __init__(
        self,
        options: Optional[Dict[str, Any]],
        video_id: str,
        parent: Optional[QtCore.QObject] = None,
    ) -> None:
        super().__init__(parent)
        self._options = options
        self._video_id = video_id
        self._log = logging.getLogger(__name__)

    def run(self) -> None:  # pragma: no cover - runs in background thread
        try:
            source = resolve_source(self._options, self._video_id)
            capture = cv2.VideoCapture(source)
            if not capture.isOpened():
                capture.release()
                raise PlaybackSourceError(f"Failed to open video {self._video_id}.")
        except Exception as exc:
            self._log.debug("Resolver[%s]: failed (%s)", self._video_id, exc)
            self.failed.emit(str(exc))
            return
        self.resolved.emit(capture)


class OpenCVPlaybackInstance(QtCore.QObject):
    """A decoded stream that pushes RGB frames to ``container`` while playing.

    ``container`` needs ``set_frame(ndarray)`` and ``clear()``; it may be
    ``None`` for headless use.
    """

    def __init__(
        self,
        capture: cv2.VideoCapture,
        container: Any,
        fallback_interval_ms: int = 33,
        parent: Optional[QtCore.QObject] = None,
    ) -> None:
        super().__init__(parent)
        self._capture: Optional[cv2.VideoCapture] = capture
        self._container = container
        fps = float(capture.get(cv2.CAP_PROP_FPS) or 0.0)
        self.fps = fps if fps > 0 else 1000.0 / max(1, fallback_interval_ms)
        self.frame_interval_ms = max(1, int(round(1000 / self.fps)))
        frame_count = int(capture.get(cv2.CAP_PROP_FRAME_COUNT) or 0)
        self.duration = frame_count / self.fps if frame_count > 0 else None
        self._position = 0.0
        self._timer = QtCore.QTimer(self)
        self._timer.setTimerType(QtCore.Qt.PreciseTimer)
        self._timer.timeout.connect(self._next_frame)
        self._log = logging.getLogger(__name__)
        self._show(self._read())

    def seek_to(self, time: float, allow_seek_ahead: bool = True) -> None:
        if self._capture is None:
            return
        target = max(0.0, float(time))
        if self.duration is not None and not allow_seek_ahead:
            target = min(target, self.duration)
        self._capture.set(cv2.CAP_PROP_POS_MSEC, target * 1000.0)
        frame = self._read()
        if frame is None:
            self._position = target
        self._show(frame)

    def play_video(self) -> None:
        if self._capture is not None and not self._timer.isActive():
            self._timer.start(self.frame_interval_ms)

    def pause_video(self) -> None:
        self._timer.stop()

    def get_current_time(self) -> float:
        return self._position

    def destroy(self) -> None:
        self._timer.stop()
        if self._capture is not None:
            self._capture.release()
        self._capture = None
        if self._container is not None:
            self._container.clear()

    def _read(self) -> Optional[np.ndarray]:
        if self._capture is None:
            return None
        success, frame = self._capture.read()
        if not success or frame is None:
            return None
        self._position = max(0.0, float(self._capture.get(cv2.CAP_PROP_POS_MSEC)) / 1000.0)
        return frame

    def _next_frame(self) -> None:
        frame = self._read()
        if frame is None:
            self._log.debug("Instance: end of stream at %.2fs", self._position)
            self.pause_video()
            return
        self._show(frame)

    def _show(self, frame: Optional[np.ndarray]) -> None:
        if frame is None or self._container is None:
            return
        self._container.set_frame(cv2.cvtColor(frame, cv2.COLOR_BGR2RGB))


class OpenCVPlaybackProvider(QtCore.QObject):
    """Playback provider backed by yt-dlp stream resolution and OpenCV decoding."""

    def __init__(self, settings: PlaybackSettings, parent: Optional[QtCore.QObject] = None) -> None:
        super().__init__(parent)
        self._settings = settings
        self._backend_available = False
        self._script_loaded = False
        self._loader: Optional[BackendLoader] = None
        self._script_callbacks = []
        self._workers: Set[SourceResolveWorker] = set()
        self._log = logging.getLogger(__name__)

    def is_script_loaded(self) -> bool:
        return self._script_loaded

    def load_script(self, on_ready: Callable[[], None]) -> None:
        if self._script_loaded:
            on_ready()
            return
        self._script_callbacks.append(on_ready)
        if self._loader is not None:
            return
        self._log.debug("Provider: loading playback backend")
        self._loader = BackendLoader(ydl_options(self._settings), self)
        self._loader.loaded.connect(self._on_backend_loaded)
        self._loader.start()

    def load(
        self,
        container: Any,
        video_id: str,
        on_ready: Callable[[PlaybackInstance], None],
        on_error: Callable[[str], None],
    ) -> None:
        options = ydl_options(self._settings) if self._backend_available else None
        worker = SourceResolveWorker(options, video_id, self)
        interval = self._settings.frame_interval_ms

        def handle_resolved(capture: cv2.VideoCapture) -> None:
            on_ready(OpenCVPlaybackInstance(capture, container, interval, self))

        worker.resolved.connect(handle_resolved)
        worker.failed.connect(on_error)
        worker.finished.connect(lambda: self._workers.discard(worker))
        self._workers.add(worker)
        worker.start()

    def shutdown(self, timeout_ms: int = 5000) -> None:
        for worker in list(self._workers):
            worker.wait(timeout_ms)
        if self._loader is not None:
            self._loader.wait(timeout_ms)

    def _on_backend_loaded(self, available: bool) -> None:
        self._backend_available = available
        self._script_loaded = True
        if not available:
            self._log.warning("Provider: yt-dlp unavailable, only local files can be played")
        callbacks, self._script_callbacks = self._script_callbacks, []
        for callback in callbacks:
            callback()
