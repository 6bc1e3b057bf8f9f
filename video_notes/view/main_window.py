import logging
from typing import TYPE_CHECKING, List, Optional

from PyQt5 import QtCore, QtGui, QtWidgets

from ..errors import VideoNotesError
from ..model.entities import Bookmark
from ..model.video.player import PlayerState
from ..utils import format_time
from .video_widget import VideoCanvas

if TYPE_CHECKING:  # pragma: no cover - for static analysis only
    from ..controller import VideoNotesController

BOOKMARK_ID_ROLE = QtCore.Qt.UserRole
BOOKMARK_TIME_ROLE = QtCore.Qt.UserRole + 1

THEME_STYLES = {
    "dark": """
        QWidget { background-color: #0b0b0b; color: #f0f0f0; font-size: 13px; }
        QLineEdit, QListWidget { background-color: #1f1f1f; border: 1px solid #2f2f2f; border-radius: 8px; padding: 6px; }
        QPushButton { background-color: #1f1f1f; border: 1px solid #2f2f2f; border-radius: 12px; padding: 6px 14px; }
        QPushButton:hover { background-color: #2b2b2b; }
        QPushButton:disabled { color: #777777; background-color: #161616; border-color: #202020; }
    """,
    "light": """
        QWidget { background-color: #f3f4f6; color: #111827; font-size: 13px; }
        QLineEdit, QListWidget { background-color: #ffffff; border: 1px solid #d1d5db; border-radius: 8px; padding: 6px; }
        QPushButton { background-color: #ffffff; border: 1px solid #d1d5db; border-radius: 12px; padding: 6px 14px; }
        QPushButton:hover { background-color: #e5e7eb; }
        QPushButton:disabled { color: #9ca3af; background-color: #f9fafb; border-color: #e5e7eb; }
    """,
}

STATE_MESSAGES = {
    PlayerState.UNINITIALIZED: "No video loaded",
    PlayerState.SCRIPT_LOADING: "Loading playback backend...",
    PlayerState.SCRIPT_READY: "Player idle",
    PlayerState.PLAYER_CREATING: "Opening video...",
    PlayerState.PLAYER_READY: "Ready",
    PlayerState.DESTROYED: "Player closed",
}


class VideoNotesWindow(QtWidgets.QMainWindow):
    def __init__(self, controller: "VideoNotesController") -> None:
        super().__init__()
        self.controller = controller
        self.controller.set_view(self)
        self._log = logging.getLogger(__name__)

        self.setWindowTitle("Video Notes")
        self.resize(1280, 760)

        self._build_ui()
        self._setup_connections()
        self.controller.player.set_container(self.video_canvas)
        self._apply_theme(self.controller.theme)
        self._on_state_changed(self.controller.player.state)
        self._render_bookmarks(self.controller.bookmarks)

    # ------------------------------------------------------------------
    # UI construction
    # ------------------------------------------------------------------
    def _build_ui(self) -> None:
        central = QtWidgets.QWidget(self)
        self.setCentralWidget(central)
        main_layout = QtWidgets.QVBoxLayout(central)
        main_layout.setContentsMargins(24, 24, 24, 24)
        main_layout.setSpacing(16)

        header_layout = QtWidgets.QHBoxLayout()
        title = QtWidgets.QLabel("Video Notes")
        title.setStyleSheet("font-size: 20px; font-weight: 600;")
        header_layout.addWidget(title)
        header_layout.addStretch(1)
        self.theme_button = QtWidgets.QPushButton()
        self.theme_button.setCursor(QtCore.Qt.PointingHandCursor)
        header_layout.addWidget(self.theme_button)
        main_layout.addLayout(header_layout)

        url_layout = QtWidgets.QHBoxLayout()
        self.url_input = QtWidgets.QLineEdit()
        self.url_input.setPlaceholderText("Enter YouTube URL (e.g., https://www.youtube.com/watch?v=...)")
        self.load_button = QtWidgets.QPushButton("Load Video")
        self.load_button.setCursor(QtCore.Qt.PointingHandCursor)
        url_layout.addWidget(self.url_input, stretch=1)
        url_layout.addWidget(self.load_button)
        main_layout.addLayout(url_layout)

        self.video_canvas = VideoCanvas()
        self.sidebar = self._build_sidebar()
        self.sidebar.setMinimumWidth(300)

        self.splitter = QtWidgets.QSplitter(QtCore.Qt.Horizontal)
        self.splitter.setChildrenCollapsible(False)
        self.splitter.addWidget(self.video_canvas)
        self.splitter.addWidget(self.sidebar)
        self.splitter.setStretchFactor(0, 3)
        self.splitter.setStretchFactor(1, 2)
        main_layout.addWidget(self.splitter, stretch=1)

        self.status_label = QtWidgets.QLabel()
        main_layout.addWidget(self.status_label)

    def _build_sidebar(self) -> QtWidgets.QFrame:
        sidebar = QtWidgets.QFrame()
        layout = QtWidgets.QVBoxLayout(sidebar)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(12)

        header_label = QtWidgets.QLabel("Bookmarks")
        header_label.setStyleSheet("font-size: 16px; font-weight: 600;")
        layout.addWidget(header_label)

        self.capture_button = QtWidgets.QPushButton("Add Bookmark at Current Time")
        self.capture_button.setCursor(QtCore.Qt.PointingHandCursor)
        self.capture_button.setEnabled(False)
        layout.addWidget(self.capture_button)

        self.bookmark_list = QtWidgets.QListWidget()
        self.bookmark_list.setSelectionMode(QtWidgets.QAbstractItemView.SingleSelection)
        layout.addWidget(self.bookmark_list, stretch=1)

        actions = QtWidgets.QHBoxLayout()
        self.jump_button = QtWidgets.QPushButton("Jump")
        self.edit_button = QtWidgets.QPushButton("Edit Note")
        self.delete_button = QtWidgets.QPushButton("Delete")
        for button in (self.jump_button, self.edit_button, self.delete_button):
            button.setEnabled(False)
            actions.addWidget(button)
        layout.addLayout(actions)
        return sidebar

    def _setup_connections(self) -> None:
        self.load_button.clicked.connect(self._submit_url)
        self.url_input.returnPressed.connect(self._submit_url)
        self.theme_button.clicked.connect(self._toggle_theme)
        self.capture_button.clicked.connect(self._capture_bookmark)
        self.jump_button.clicked.connect(self._jump_to_selected)
        self.edit_button.clicked.connect(self._edit_selected)
        self.delete_button.clicked.connect(self._delete_selected)
        self.bookmark_list.itemDoubleClicked.connect(lambda _item: self._jump_to_selected())
        self.bookmark_list.itemSelectionChanged.connect(self._update_action_buttons)

        self.controller.bookmarksChanged.connect(self._render_bookmarks)
        self.controller.activeVideoChanged.connect(self._on_active_video_changed)
        player = self.controller.player
        player.stateChanged.connect(self._on_state_changed)
        player.readyChanged.connect(self._on_ready_changed)
        player.loadFailed.connect(self._on_load_failed)

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------
    def _submit_url(self) -> None:
        url = self.url_input.text()
        try:
            video_id = self.controller.submit_url(url)
        except VideoNotesError as exc:
            self._show_error(str(exc))
            return
        self._log.debug("UI: submitted video %s", video_id)

    def _capture_bookmark(self) -> None:
        try:
            bookmark = self.controller.capture_bookmark()
        except VideoNotesError as exc:
            self._show_error(str(exc))
            return
        self._select_bookmark(bookmark.id)

    def _jump_to_selected(self) -> None:
        item = self.bookmark_list.currentItem()
        if item is None or item.data(BOOKMARK_ID_ROLE) is None:
            return
        try:
            self.controller.jump_to(float(item.data(BOOKMARK_TIME_ROLE)))
        except VideoNotesError as exc:
            self._show_error(str(exc))

    def _edit_selected(self) -> None:
        bookmark = self._selected_bookmark()
        if bookmark is None:
            return
        note, accepted = QtWidgets.QInputDialog.getText(
            self,
            "Edit note",
            f"Note at {format_time(bookmark.time)}:",
            QtWidgets.QLineEdit.Normal,
            bookmark.note,
        )
        if not accepted or note == bookmark.note:
            return
        if not self.controller.rename_note(bookmark.id, note):
            self._log.debug("UI: bookmark %s vanished before rename", bookmark.id)

    def _delete_selected(self) -> None:
        bookmark = self._selected_bookmark()
        if bookmark is None:
            return
        self.controller.remove_bookmark(bookmark.id)

    def _toggle_theme(self) -> None:
        self._apply_theme(self.controller.toggle_theme())

    # ------------------------------------------------------------------
    # Controller/player signal handlers
    # ------------------------------------------------------------------
    def _render_bookmarks(self, bookmarks: List[Bookmark]) -> None:
        selected = self._selected_bookmark()
        self.bookmark_list.clear()
        if not bookmarks:
            if self.controller.active_video_id is None:
                text = "Load a video to see bookmarks."
            else:
                text = 'No bookmarks yet. Play the video and click "Add Bookmark" to start.'
            placeholder = QtWidgets.QListWidgetItem(text)
            placeholder.setFlags(QtCore.Qt.NoItemFlags)
            self.bookmark_list.addItem(placeholder)
        for bookmark in bookmarks:
            label = f"{format_time(bookmark.time)}    {bookmark.note or 'Click Edit Note to add a note...'}"
            item = QtWidgets.QListWidgetItem(label)
            item.setData(BOOKMARK_ID_ROLE, bookmark.id)
            item.setData(BOOKMARK_TIME_ROLE, bookmark.time)
            item.setToolTip(bookmark.note or "Click Edit Note to add a note")
            if not bookmark.note:
                font = item.font()
                font.setItalic(True)
                item.setFont(font)
            self.bookmark_list.addItem(item)
        if selected is not None:
            self._select_bookmark(selected.id)
        self._update_action_buttons()

    def _on_active_video_changed(self, video_id: str) -> None:
        self.setWindowTitle(f"Video Notes - {video_id}")

    def _on_state_changed(self, state: PlayerState) -> None:
        message = STATE_MESSAGES.get(state, state.value)
        video_id = self.controller.active_video_id
        if video_id and state in (PlayerState.PLAYER_CREATING, PlayerState.PLAYER_READY):
            message = f"{message} ({video_id})"
        self.status_label.setText(message)
        if state is PlayerState.PLAYER_CREATING:
            self.video_canvas.set_placeholder(message)

    def _on_ready_changed(self, ready: bool) -> None:
        self.capture_button.setEnabled(ready)
        self._update_action_buttons()

    def _on_load_failed(self, message: str) -> None:
        self.video_canvas.set_placeholder("Unable to play this video")
        self._show_error(message)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _selected_bookmark(self) -> Optional[Bookmark]:
        item = self.bookmark_list.currentItem()
        if item is None or item.data(BOOKMARK_ID_ROLE) is None:
            return None
        bookmark_id = int(item.data(BOOKMARK_ID_ROLE))
        for bookmark in self.controller.bookmarks:
            if bookmark.id == bookmark_id:
                return bookmark
        return None

    def _select_bookmark(self, bookmark_id: int) -> None:
        for row in range(self.bookmark_list.count()):
            item = self.bookmark_list.item(row)
            if item.data(BOOKMARK_ID_ROLE) == bookmark_id:
                self.bookmark_list.setCurrentItem(item)
                return

    def _update_action_buttons(self) -> None:
        has_selection = self._selected_bookmark() is not None
        self.jump_button.setEnabled(has_selection and self.controller.is_ready)
        self.edit_button.setEnabled(has_selection)
        self.delete_button.setEnabled(has_selection)

    def _apply_theme(self, theme: str) -> None:
        self.centralWidget().setStyleSheet(THEME_STYLES.get(theme, THEME_STYLES["dark"]))
        self.theme_button.setText("Light mode" if theme == "dark" else "Dark mode")

    def _show_error(self, message: str) -> None:
        self._log.warning("UI: %s", message)
        QtWidgets.QMessageBox.warning(self, "Video Notes", message)

    def closeEvent(self, event: QtGui.QCloseEvent) -> None:
        self.controller.shutdown()
        super().closeEvent(event)
