import sys
from pathlib import Path
import logging

from PyQt5 import QtWidgets

from .controller import VideoNotesController
from .model.settings import SettingsManager, get_settings_path
from .view import VideoNotesWindow

# Runs the GUI
def main() -> None:
    root_path = Path.cwd()
    logging.basicConfig(
        level=SettingsManager(get_settings_path(root_path)).log_level(),
        format="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
    )
    app = QtWidgets.QApplication(sys.argv)
    controller = VideoNotesController(root_path)
    window = VideoNotesWindow(controller)
    window.show()
    sys.exit(app.exec_())


if __name__ == "__main__":
    main()
