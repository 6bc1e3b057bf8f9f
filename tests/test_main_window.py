from types import SimpleNamespace

from video_notes.model.video.player import PlayerState
from video_notes.view.main_window import VideoNotesWindow


class FakeLabel:
    def __init__(self):
        self.text = ""

    def setText(self, text):
        self.text = text


class FakeCanvas:
    def __init__(self):
        self.placeholder = "Enter a YouTube URL to begin"

    def set_placeholder(self, text):
        self.placeholder = text


def _window_parts(video_id="abc123"):
    return SimpleNamespace(
        controller=SimpleNamespace(active_video_id=video_id),
        status_label=FakeLabel(),
        video_canvas=FakeCanvas(),
    )


def test_creating_player_replaces_failure_placeholder():
    window = _window_parts()
    window.video_canvas.set_placeholder("Unable to play this video")

    VideoNotesWindow._on_state_changed(window, PlayerState.PLAYER_CREATING)
    assert window.video_canvas.placeholder == "Opening video... (abc123)"
    assert window.status_label.text == "Opening video... (abc123)"


def test_other_states_only_update_status():
    window = _window_parts()
    window.video_canvas.set_placeholder("Unable to play this video")

    VideoNotesWindow._on_state_changed(window, PlayerState.SCRIPT_READY)
    assert window.status_label.text == "Player idle"
    assert window.video_canvas.placeholder == "Unable to play this video"
