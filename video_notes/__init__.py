"""Video Notes: timestamped bookmarks for videos, with a PyQt5 player."""

__version__ = "0.1.0"
