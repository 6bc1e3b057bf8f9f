"""Playback lifecycle and the OpenCV-backed playback provider."""

from .opencv_provider import OpenCVPlaybackInstance, OpenCVPlaybackProvider
from .player import (
    PlaybackInstance,
    PlaybackProvider,
    PlayerLifecycleController,
    PlayerSession,
    PlayerState,
)

__all__ = [
    "OpenCVPlaybackInstance",
    "OpenCVPlaybackProvider",
    "PlaybackInstance",
    "PlaybackProvider",
    "PlayerLifecycleController",
    "PlayerSession",
    "PlayerState",
]
