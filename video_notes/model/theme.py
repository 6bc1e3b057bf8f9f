import logging

from PyQt5 import QtGui

from ..errors import PersistenceWriteError
from .storage import KeyedStore

THEME_KEY = "theme"
THEMES = ("light", "dark")
SYSTEM_THEME = "system"


def system_theme(fallback: str = "dark") -> str:
    """Light or dark, following the running application's palette.

    Without a GUI application (tests, scripts) ``fallback`` is returned.
    """
    app = QtGui.QGuiApplication.instance()
    if not isinstance(app, QtGui.QGuiApplication):
        return fallback
    window = app.palette().color(QtGui.QPalette.Window)
    return "dark" if window.lightness() < 128 else "light"


class ThemePreference:
    """Light/dark preference kept in its own store entry.

    ``default`` applies until a theme is stored; ``"system"`` or an unknown
    value takes it from the desktop colour scheme.
    """

    def __init__(self, store: KeyedStore, default: str = SYSTEM_THEME) -> None:
        self._store = store
        self._default = default if default in THEMES else system_theme()
        self._log = logging.getLogger(__name__)

    @property
    def value(self) -> str:
        theme = self._store.read(THEME_KEY, self._default)
        return theme if theme in THEMES else self._default

    def set(self, theme: str) -> str:
        if theme not in THEMES:
            raise ValueError(f"Unknown theme: {theme!r}")
        try:
            self._store.write(THEME_KEY, theme)
        except PersistenceWriteError as exc:
            self._log.warning("Theme: unable to persist preference (%s)", exc)
        return theme

    def toggle(self) -> str:
        return self.set("light" if self.value == "dark" else "dark")
