"""Game board widgets: a clickable emoji tile drawn in its orientation."""

from __future__ import annotations

from typing import Optional

from PySide6.QtCore import Qt, Signal
from PySide6.QtGui import QColor, QPainter, QPen
from PySide6.QtWidgets import QSizePolicy, QWidget

from oddoneout.core.models import Tile

TILE_BG = "#ffffff"
TILE_BG_HOVER = "#e0f7fa"
TILE_BORDER = "#00838f"

# Degrees of rotation and horizontal scale for each orientation.
ORIENTATION_TRANSFORMS = {
    "upright": (0.0, 1.0),
    "tilt-left": (-25.0, 1.0),
    "tilt-right": (25.0, 1.0),
    "flip-horizontal": (0.0, -1.0),
}


class TileWidget(QWidget):
    """Rounded card showing one tile's emoji; emits ``picked`` with the tile id."""

    picked = Signal(str)

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self._tile: Optional[Tile] = None
        self._hover = False
        self.setMinimumSize(120, 120)
        self.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Expanding)
        self.setCursor(Qt.PointingHandCursor)
        self.setFocusPolicy(Qt.StrongFocus)

    def set_tile(self, tile: Optional[Tile]) -> None:
        self._tile = tile
        self.setToolTip("" if tile is None else tile.emoji)
        self.update()

    def mouseReleaseEvent(self, event) -> None:
        if self._tile is not None and event.button() == Qt.LeftButton:
            self.picked.emit(self._tile.id)
        super().mouseReleaseEvent(event)

    def keyPressEvent(self, event) -> None:
        if self._tile is not None and event.key() in (Qt.Key_Return, Qt.Key_Enter, Qt.Key_Space):
            self.picked.emit(self._tile.id)
            return
        super().keyPressEvent(event)

    def enterEvent(self, event) -> None:
        self._hover = True
        self.update()
        super().enterEvent(event)

    def leaveEvent(self, event) -> None:
        self._hover = False
        self.update()
        super().leaveEvent(event)

    def paintEvent(self, event) -> None:
        super().paintEvent(event)
        painter = QPainter(self)
        painter.setRenderHint(QPainter.Antialiasing, True)

        side = min(self.width(), self.height()) - 8
        x = (self.width() - side) // 2
        y = (self.height() - side) // 2
        painter.setBrush(QColor(TILE_BG_HOVER if self._hover or self.hasFocus() else TILE_BG))
        painter.setPen(QPen(QColor(TILE_BORDER), 2))
        painter.drawRoundedRect(x, y, side, side, 16, 16)

        if self._tile is None:
            return
        angle, scale_x = ORIENTATION_TRANSFORMS.get(self._tile.orientation, (0.0, 1.0))
        font = painter.font()
        font.setPointSize(max(12, side // 3))
        painter.setFont(font)
        painter.translate(self.width() / 2, self.height() / 2)
        painter.rotate(angle)
        painter.scale(scale_x, 1.0)
        painter.drawText(-side // 2, -side // 2, side, side, Qt.AlignCenter, self._tile.emoji)
