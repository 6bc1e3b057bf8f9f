"""Controller layer coordinating the view with the model."""

from .app_controller import VideoNotesController

__all__ = ["VideoNotesController"]
