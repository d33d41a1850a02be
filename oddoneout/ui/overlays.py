"""In-window overlays: game over and game settings."""

from __future__ import annotations

from typing import Callable, Dict, Sequence

from PySide6.QtCore import Qt, Signal
from PySide6.QtGui import QColor
from PySide6.QtWidgets import (
    QCheckBox,
    QFrame,
    QGraphicsDropShadowEffect,
    QGridLayout,
    QLabel,
    QPushButton,
    QSizePolicy,
    QVBoxLayout,
    QWidget,
)

from oddoneout.core.models import PATTERN_TYPES, GameSettings, GameState

_PRIMARY = "#00838f"
_PRIMARY_LIGHT = "#4fb3bf"
_MUTED = "#78909c"


def _card(object_name: str) -> QFrame:
    card = QFrame()
    card.setObjectName(object_name)
    card.setMinimumWidth(320)
    card.setMaximumWidth(440)
    card.setStyleSheet(
        f"""
        QFrame#{object_name} {{
            background: #ffffff;
            border: 1px solid rgba(0, 131, 143, 0.12);
            border-radius: 20px;
        }}
        """
    )
    shadow = QGraphicsDropShadowEffect(card)
    shadow.setBlurRadius(20)
    shadow.setOffset(0, 6)
    shadow.setColor(QColor(0, 80, 100, 25))
    card.setGraphicsEffect(shadow)
    return card


def _backdrop(parent: QWidget, on_click: Callable[[], None]) -> QWidget:
    bg = QWidget(parent)
    bg.setStyleSheet("background: rgba(0, 0, 0, 0.2);")
    bg.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Expanding)
    bg.mousePressEvent = lambda e: on_click()
    return bg


def _primary_button(text: str) -> QPushButton:
    button = QPushButton(text)
    button.setCursor(Qt.PointingHandCursor)
    button.setStyleSheet(
        f"""
        QPushButton {{
            background: qlineargradient(x1:0, y1:0, x2:1, y2:1,
                stop:0 {_PRIMARY_LIGHT}, stop:1 {_PRIMARY});
            color: white;
            padding: 10px 16px;
            border: none;
            border-radius: 12px;
            font-weight: 600;
        }}
        QPushButton:hover {{ background: {_PRIMARY}; }}
        """
    )
    return button


def _section(text: str) -> QLabel:
    label = QLabel(text.upper())
    label.setStyleSheet(f"color: {_MUTED}; font-size: 11px; font-weight: 700; letter-spacing: 1px;")
    return label


def _hint(text: str) -> QLabel:
    label = QLabel(text)
    label.setWordWrap(True)
    label.setStyleSheet(f"color: {_MUTED}; font-size: 11px;")
    return label


class _Overlay(QWidget):
    """Covers the parent window; the card sits centred over a dim backdrop."""

    def __init__(self, parent: QWidget, object_name: str) -> None:
        super().__init__(parent)
        layout = QGridLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.addWidget(_backdrop(self, self._on_backdrop), 0, 0)
        self.card = _card(object_name)
        layout.addWidget(self.card, 0, 0, Qt.AlignCenter)
        self.hide()

    def _on_backdrop(self) -> None:
        self.hide()

    def open(self) -> None:
        self.setGeometry(self.parentWidget().rect())
        self.raise_()
        self.show()


class GameOverOverlay(_Overlay):
    play_again = Signal()

    def __init__(self, parent: QWidget) -> None:
        super().__init__(parent, "gameOverCard")
        content = QVBoxLayout(self.card)
        content.setContentsMargins(28, 24, 28, 24)
        content.setSpacing(14)

        title = QLabel("Game Over")
        title.setStyleSheet("font-size: 20px; font-weight: 800; color: #1a3a3a;")
        content.addWidget(title)

        self._summary = QLabel()
        self._summary.setWordWrap(True)
        content.addWidget(self._summary)
        content.addWidget(_hint("Keep practising to improve your streaks and reaction time!"))

        button = _primary_button("Play Again")
        button.clicked.connect(self._on_play_again)
        content.addWidget(button)

    def show_result(self, state: GameState) -> None:
        self._summary.setText(f"You reached round {state.round} with a score of {state.score}.")
        self.open()

    def _on_backdrop(self) -> None:
        self._on_play_again()

    def _on_play_again(self) -> None:
        self.hide()
        self.play_again.emit()


class SettingsOverlay(_Overlay):
    """Pattern switches and theme toggles.

    Emits requests only; :meth:`sync` re-reads the settings the controller
    actually accepted.
    """

    pattern_toggled = Signal(str, bool)
    themes_changed = Signal(list)

    def __init__(self, parent: QWidget, theme_labels: Dict[str, str]) -> None:
        super().__init__(parent, "settingsCard")
        self._themes: Sequence[str] = ()
        self._pattern_boxes: Dict[str, QCheckBox] = {}
        self._theme_buttons: Dict[str, QPushButton] = {}

        content = QVBoxLayout(self.card)
        content.setContentsMargins(28, 24, 28, 24)
        content.setSpacing(10)

        title = QLabel("Game settings")
        title.setStyleSheet("font-size: 18px; font-weight: 800; color: #1a3a3a;")
        content.addWidget(title)

        content.addWidget(_section("Pattern types"))
        for pattern in PATTERN_TYPES:
            box = QCheckBox(pattern.capitalize())
            box.toggled.connect(lambda checked, p=pattern: self.pattern_toggled.emit(p, checked))
            self._pattern_boxes[pattern] = box
            content.addWidget(box)
        content.addWidget(_hint("At least one pattern must remain enabled."))

        content.addWidget(_section("Themes"))
        grid = QGridLayout()
        grid.setSpacing(6)
        for i, (theme, label) in enumerate(theme_labels.items()):
            button = QPushButton(label)
            button.setCheckable(True)
            button.setCursor(Qt.PointingHandCursor)
            button.setStyleSheet(
                f"""
                QPushButton {{ padding: 6px 12px; border: 1px solid {_PRIMARY}; border-radius: 14px; }}
                QPushButton:checked {{ background: {_PRIMARY}; color: white; }}
                QPushButton:disabled {{ border-color: #b0bec5; color: #b0bec5; }}
                """
            )
            button.clicked.connect(lambda _checked, t=theme: self._on_theme_clicked(t))
            self._theme_buttons[theme] = button
            grid.addWidget(button, i // 3, i % 3)
        content.addLayout(grid)
        content.addWidget(_hint("Choose at least two themes for better variety."))

        close = _primary_button("Close")
        close.clicked.connect(self.hide)
        content.addWidget(close)

    def sync(self, settings: GameSettings) -> None:
        self._themes = tuple(settings.themes)
        for pattern, box in self._pattern_boxes.items():
            box.blockSignals(True)
            box.setChecked(getattr(settings.patterns, pattern))
            box.blockSignals(False)
        for theme, button in self._theme_buttons.items():
            active = theme in self._themes
            button.setChecked(active)
            button.setEnabled(not active or len(self._themes) > 2)

    def _on_theme_clicked(self, theme: str) -> None:
        if theme in self._themes:
            themes = [t for t in self._themes if t != theme]
        else:
            themes = [*self._themes, theme]
        self.themes_changed.emit(themes)
