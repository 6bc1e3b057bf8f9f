from typing import Optional

import numpy as np
from PyQt5 import QtCore, QtGui, QtWidgets


class VideoCanvas(QtWidgets.QWidget):
    """Paints the most recent RGB frame, letterboxed to the widget size."""

    def __init__(self, parent: Optional[QtWidgets.QWidget] = None) -> None:
        super().__init__(parent)
        self.setAttribute(QtCore.Qt.WA_OpaquePaintEvent, True)
        self.setMinimumSize(480, 270)
        self._pixmap: Optional[QtGui.QPixmap] = None
        self._placeholder = "Enter a YouTube URL to begin"

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------
    def set_frame(self, frame_rgb: np.ndarray) -> None:
        height, width = frame_rgb.shape[:2]
        frame_rgb = np.ascontiguousarray(frame_rgb)
        image = QtGui.QImage(frame_rgb.data, width, height, frame_rgb.strides[0], QtGui.QImage.Format_RGB888)
        self._pixmap = QtGui.QPixmap.fromImage(image.copy())
        self.update()

    def clear(self) -> None:
        self._pixmap = None
        self.update()

    def set_placeholder(self, text: str) -> None:
        self._placeholder = text
        self.update()

    def paintEvent(self, event: QtGui.QPaintEvent) -> None:
        painter = QtGui.QPainter(self)
        painter.fillRect(self.rect(), QtGui.QColor("#000000"))
        if not self._pixmap:
            painter.setPen(QtGui.QColor("#9ca3af"))
            painter.drawText(self.rect(), QtCore.Qt.AlignCenter, self._placeholder)
            return

        scaled_pixmap = self._pixmap.scaled(
            self.size(), QtCore.Qt.KeepAspectRatio, QtCore.Qt.SmoothTransformation
        )
        left = (self.width() - scaled_pixmap.width()) / 2
        top = (self.height() - scaled_pixmap.height()) / 2
        painter.drawPixmap(QtCore.QPointF(left, top), scaled_pixmap)
