from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Dict, Optional

import numpy as np
from PyQt6 import QtCore, QtGui, QtWidgets

from .export import PathLike, check_frame, save_ppm

logger = logging.getLogger(__name__)


# -------------------------------------------------------------
# Image conversion
# -------------------------------------------------------------


def frame_to_qimage(frame: np.ndarray) -> QtGui.QImage:
    image = check_frame(frame)
    qimage = QtGui.QImage(
        image.tobytes(), image.shape[1], image.shape[0], 3 * image.shape[1], QtGui.QImage.Format.Format_RGB888
    )
    # detach from the temporary bytes buffer
    return qimage.copy()


def save_image(path: PathLike, frame: np.ndarray) -> Path:
    """Save through Qt's image writers, chosen by file suffix; ``.ppm`` stays ASCII."""
    out = Path(path)
    if out.suffix.lower() == ".ppm":
        return save_ppm(out, frame)
    if not frame_to_qimage(frame).save(str(out)):
        raise OSError(f"Qt could not write image {out}")
    logger.debug("wrote %s", out)
    return out


# -------------------------------------------------------------
# Preview window
# -------------------------------------------------------------


class FrameView(QtWidgets.QWidget):
    def __init__(self, parent: Optional[QtWidgets.QWidget] = None):
        super().__init__(parent)
        self.setMinimumSize(400, 400)
        self._image: Optional[QtGui.QImage] = None

    def set_frame(self, frame: np.ndarray) -> None:
        self._image = frame_to_qimage(frame)
        self.update()

    def sizeHint(self) -> QtCore.QSize:
        return QtCore.QSize(800, 800)

    def paintEvent(self, event: QtGui.QPaintEvent) -> None:
        painter = QtGui.QPainter(self)
        painter.fillRect(self.rect(), QtGui.QColor(0, 0, 0))
        if self._image is not None:
            painter.setRenderHint(QtGui.QPainter.RenderHint.SmoothPixmapTransform, True)
            size = self._image.size().scaled(self.size(), QtCore.Qt.AspectRatioMode.KeepAspectRatio)
            target_rect = QtCore.QRect(QtCore.QPoint(0, 0), size)
            target_rect.moveCenter(self.rect().center())
            painter.drawImage(target_rect, self._image)
        painter.end()


class PreviewWindow(QtWidgets.QMainWindow):
    def __init__(self, frames: Dict[str, np.ndarray]):
        super().__init__()
        if not frames:
            raise ValueError("nothing to preview")
        self.setWindowTitle("Solar raster (software renderer)")
        self.frames = dict(frames)

        self.scene_list = QtWidgets.QListWidget()
        self.scene_list.addItems(list(self.frames))
        self.scene_list.currentTextChanged.connect(self._show_scene)
        self.view = FrameView()

        splitter = QtWidgets.QSplitter(QtCore.Qt.Orientation.Horizontal)
        splitter.addWidget(self.scene_list)
        splitter.addWidget(self.view)
        splitter.setStretchFactor(0, 0)
        splitter.setStretchFactor(1, 1)
        self.scene_list.setMinimumWidth(200)
        self.setCentralWidget(splitter)

        self.scene_list.setCurrentRow(0)

    def _show_scene(self, name: str) -> None:
        frame = self.frames.get(name)
        if frame is None:
            return
        self.view.set_frame(frame)
        height, width, _ = frame.shape
        self.statusBar().showMessage(f"{name}: {width}x{height}")


def show_frames(frames: Dict[str, np.ndarray]) -> int:
    os.environ["QT_LOGGING_RULES"] = "qt.qpa.*=false"
    app = QtWidgets.QApplication.instance() or QtWidgets.QApplication(sys.argv)
    app.setStyle("Fusion")
    win = PreviewWindow(frames)
    win.show()
    return app.exec()
