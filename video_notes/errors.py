"""Exceptions raised by the bookmark and playback layers."""


class VideoNotesError(Exception):
    """Base class for recoverable application errors."""


class InvalidTimeError(VideoNotesError, ValueError):
    """Raised when a bookmark time is not a finite, non-negative number."""


class NotReadyError(VideoNotesError, RuntimeError):
    """Raised when a playback command is issued before the player is ready."""


class PersistenceWriteError(VideoNotesError, OSError):
    """Raised when a value could not be written to durable storage."""


class InvalidVideoUrlError(VideoNotesError, ValueError):
    """Raised when no video id can be extracted from user input."""


class PlaybackSourceError(VideoNotesError, RuntimeError):
    """Raised when a video id cannot be resolved to a playable stream."""
