"""
Image View - Single and side-by-side image display.

- ImagePane: One labelled image, or a text placeholder
- ImagePanel: Up to three panes laid out by the presenter
"""

from __future__ import annotations

from PySide6.QtWidgets import (
    QWidget,
    QVBoxLayout,
    QHBoxLayout,
    QLabel,
    QSizePolicy,
)
from PySide6.QtCore import Qt
from PySide6.QtGui import QPixmap

from image_edit_studio.core.data_types import ImagePayload
from image_edit_studio.ui.presenter import Pane


def pixmap_from_payload(payload: ImagePayload) -> QPixmap:
    """Decode a payload's bytes straight into a QPixmap."""
    pixmap = QPixmap()
    pixmap.loadFromData(payload.data)
    return pixmap


class ImagePane(QWidget):
    """A caption above an image scaled to fit."""

    def __init__(self, parent: QWidget | None = None):
        super().__init__(parent)

        self._pixmap: QPixmap | None = None

        layout = QVBoxLayout(self)
        layout.setContentsMargins(4, 4, 4, 4)

        self._caption = QLabel()
        self._caption.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._caption.setStyleSheet("color: #a6adc8; font-weight: bold;")
        layout.addWidget(self._caption)

        self._image = QLabel()
        self._image.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._image.setMinimumSize(256, 256)
        self._image.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Expanding)
        self._image.setStyleSheet("background-color: #11111b; color: #6c7086; border-radius: 6px;")
        layout.addWidget(self._image, 1)

    def show_image(self, payload: ImagePayload | None, caption: str = "") -> None:
        self._caption.setText(caption)
        self._caption.setVisible(bool(caption))
        if payload is None:
            self._pixmap = None
            self._image.setPixmap(QPixmap())
            self._image.setText("")
            return
        self._pixmap = pixmap_from_payload(payload)
        self._image.setToolTip(payload.metadata.prompt or "")
        self._rescale()

    def show_message(self, caption: str, text: str) -> None:
        """Show text instead of an image (loading state or placeholder)."""
        self._pixmap = None
        self._caption.setText(caption)
        self._caption.setVisible(bool(caption))
        self._image.setPixmap(QPixmap())
        self._image.setToolTip("")
        self._image.setText(text)

    def show_pane(self, pane: Pane) -> None:
        if pane.loading:
            self.show_message(pane.caption, "Working…")
        elif pane.image is None and pane.placeholder:
            self.show_message(pane.caption, pane.placeholder)
        else:
            self.show_image(pane.image, pane.caption)

    def _rescale(self) -> None:
        if self._pixmap is None or self._pixmap.isNull():
            return
        self._image.setPixmap(self._pixmap.scaled(
            self._image.size(),
            Qt.AspectRatioMode.KeepAspectRatio,
            Qt.TransformationMode.SmoothTransformation,
        ))

    def resizeEvent(self, event) -> None:
        super().resizeEvent(event)
        self._rescale()


class ImagePanel(QWidget):
    """Row of image panes: comparison pair, single image, optional cutout."""

    MAX_PANES = 3

    def __init__(self, parent: QWidget | None = None):
        super().__init__(parent)

        layout = QHBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)

        self._panes = [ImagePane() for _ in range(self.MAX_PANES)]
        for pane in self._panes:
            layout.addWidget(pane)

    def show_panes(self, panes: list[Pane]) -> None:
        for widget, pane in zip(self._panes, panes[:self.MAX_PANES]):
            widget.setVisible(True)
            widget.show_pane(pane)
        for widget in self._panes[len(panes):]:
            widget.show_image(None)
            widget.setVisible(False)
