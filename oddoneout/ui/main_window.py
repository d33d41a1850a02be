from __future__ import annotations

import math
from typing import List, Optional

from PySide6.QtCore import Qt, QTimer
from PySide6.QtWidgets import (
    QComboBox,
    QGridLayout,
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QProgressBar,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from oddoneout.core.controller import TICK_INTERVAL_MS, GameController
from oddoneout.core.models import MODES
from oddoneout.ui.overlays import GameOverOverlay, SettingsOverlay
from oddoneout.ui.tile_widgets import TileWidget


class MainWindow(QMainWindow):
    """Single-screen game window: HUD, rule hint, 2x2 board and controls.

    A ``QTimer`` drives :meth:`GameController.advance` while the round clock
    is running; the controller owns all game logic.
    """

    def __init__(self, controller: GameController) -> None:
        super().__init__()
        self._controller = controller
        self._tiles: List[TileWidget] = []
        self._hud_labels: dict[str, QLabel] = {}
        self._time_bar: Optional[QProgressBar] = None
        self._rule_label: Optional[QLabel] = None
        self._announcement_label: Optional[QLabel] = None
        self._mode_combo: Optional[QComboBox] = None
        self._settings_overlay: Optional[SettingsOverlay] = None
        self._game_over_overlay: Optional[GameOverOverlay] = None

        self.setWindowTitle("Odd One Out")
        self._build_ui()
        self._build_overlays()

        self._timer = QTimer(self)
        self._timer.setInterval(TICK_INTERVAL_MS)
        self._timer.timeout.connect(self._on_tick)

        self._refresh()

    def _build_ui(self) -> None:
        root = QWidget(self)
        layout = QVBoxLayout(root)
        layout.setContentsMargins(24, 24, 24, 24)
        layout.setSpacing(16)

        hud = QHBoxLayout()
        for key in ("round", "score", "streak", "lives", "best"):
            label = QLabel(root)
            label.setAlignment(Qt.AlignCenter)
            label.setStyleSheet("font-size: 16px; font-weight: 600;")
            self._hud_labels[key] = label
            hud.addWidget(label)
        layout.addLayout(hud)

        self._time_bar = QProgressBar(root)
        self._time_bar.setRange(0, 1000)
        self._time_bar.setTextVisible(False)
        self._time_bar.setFixedHeight(10)
        layout.addWidget(self._time_bar)

        self._rule_label = QLabel(root)
        self._rule_label.setAlignment(Qt.AlignCenter)
        self._rule_label.setStyleSheet("color: #4a6572;")
        layout.addWidget(self._rule_label)

        board = QGridLayout()
        board.setSpacing(12)
        for i in range(4):
            tile = TileWidget(root)
            tile.picked.connect(self._on_pick)
            board.addWidget(tile, i // 2, i % 2)
            self._tiles.append(tile)
        layout.addLayout(board, 1)

        self._announcement_label = QLabel(root)
        self._announcement_label.setAlignment(Qt.AlignCenter)
        self._announcement_label.setWordWrap(True)
        layout.addWidget(self._announcement_label)

        controls = QHBoxLayout()
        self._mode_combo = QComboBox(root)
        for mode in MODES:
            self._mode_combo.addItem(mode.capitalize(), mode)
        self._mode_combo.setCurrentIndex(MODES.index(self._controller.settings.mode))
        self._mode_combo.currentIndexChanged.connect(self._on_mode_changed)
        controls.addWidget(self._mode_combo)

        settings = QPushButton("Settings", root)
        settings.clicked.connect(self._on_open_settings)
        controls.addWidget(settings)

        restart = QPushButton("Restart", root)
        restart.clicked.connect(self._on_restart)
        controls.addWidget(restart)
        layout.addLayout(controls)

        self.setCentralWidget(root)

    def _build_overlays(self) -> None:
        catalog = self._controller.catalog
        labels = {theme: catalog.label(theme) for theme in catalog.themes}
        self._settings_overlay = SettingsOverlay(self, labels)
        self._settings_overlay.pattern_toggled.connect(self._on_pattern_toggled)
        self._settings_overlay.themes_changed.connect(self._on_themes_changed)

        self._game_over_overlay = GameOverOverlay(self)
        self._game_over_overlay.play_again.connect(self._on_restart)

    def resizeEvent(self, event) -> None:
        super().resizeEvent(event)
        for overlay in (self._settings_overlay, self._game_over_overlay):
            if overlay is not None and overlay.isVisible():
                overlay.setGeometry(self.rect())

    def _on_pick(self, tile_id: str) -> None:
        was_running = self._controller.state.status == "running"
        self._controller.select_tile(tile_id)
        self._refresh(was_running)

    def _on_tick(self) -> None:
        was_running = self._controller.state.status == "running"
        self._controller.advance(TICK_INTERVAL_MS)
        self._refresh(was_running)

    def _on_restart(self) -> None:
        self._game_over_overlay.hide()
        self._controller.restart()
        self._refresh()

    def _on_mode_changed(self, index: int) -> None:
        self._controller.set_mode(self._mode_combo.itemData(index))
        self._refresh()

    def _on_open_settings(self) -> None:
        self._settings_overlay.sync(self._controller.settings)
        self._settings_overlay.open()

    def _on_pattern_toggled(self, pattern: str, enabled: bool) -> None:
        self._controller.toggle_pattern(pattern, enabled)
        self._settings_overlay.sync(self._controller.settings)
        self._refresh()

    def _on_themes_changed(self, themes: list) -> None:
        self._controller.set_themes(themes)
        self._settings_overlay.sync(self._controller.settings)
        self._refresh()

    def _refresh(self, was_running: bool = False) -> None:
        state = self._controller.state
        if was_running and state.status == "lost":
            self._game_over_overlay.show_result(state)
        lives = "∞" if self._controller.settings.mode == "practice" else str(state.lives)
        self._hud_labels["round"].setText(f"Round {state.round}")
        self._hud_labels["score"].setText(f"Score {state.score}")
        self._hud_labels["streak"].setText(f"Streak {state.streak}")
        self._hud_labels["lives"].setText(f"Lives {lives}")
        self._hud_labels["best"].setText(f"Best {self._controller.best_score}")

        if math.isinf(state.round_time_ms) or state.round_time_ms <= 0:
            self._time_bar.setValue(1000)
        else:
            self._time_bar.setValue(int(1000 * state.time_left_ms / state.round_time_ms))

        self._rule_label.setText(self._controller.rule_hint)
        self._announcement_label.setText(self._controller.announcement)

        for widget, tile in zip(self._tiles, state.tiles):
            widget.set_tile(tile)
            widget.setEnabled(state.status == "running")

        if self._controller.timer_active:
            if not self._timer.isActive():
                self._timer.start()
        else:
            self._timer.stop()
