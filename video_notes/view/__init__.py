"""GUI components for the Video Notes application."""

from .main_window import VideoNotesWindow
from .video_widget import VideoCanvas

__all__ = ["VideoNotesWindow", "VideoCanvas"]
