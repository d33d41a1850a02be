from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Mapping, Optional, Sequence

from oddoneout.core import engine
from oddoneout.core.catalog import EmojiCatalog, default_catalog
from oddoneout.core.engine import EngineDependencies
from oddoneout.core.models import GameSettings, GameState, Mode, PatternType
from oddoneout.core.settings import create_settings, merge_settings, preset_for
from oddoneout.core.storage import StorageGateway

logger = logging.getLogger(__name__)

TICK_INTERVAL_MS = 120

RULE_HINT_FALLBACK = "Pick the odd one to keep your streak alive!"

MODE_ANNOUNCEMENTS = {
    "endless": "Endless mode enabled. Timers will speed up each round.",
    "practice": "Practice mode enabled. Take your time and learn the rules.",
    "kid": "Kid mode enabled. Longer timers and gentler ramp.",
}


class GameController:
    """Holds the running game and settings for a host UI.

    The host forwards clicks to :meth:`select_tile` and calls :meth:`advance`
    every ``TICK_INTERVAL_MS`` while :attr:`timer_active` is true.
    """

    def __init__(
        self,
        storage: Optional[StorageGateway] = None,
        initial_settings: Optional[Mapping[str, Any]] = None,
        dependencies: Optional[EngineDependencies] = None,
        catalog: Optional[EmojiCatalog] = None,
    ) -> None:
        self._storage = storage
        self._deps = dependencies if dependencies is not None else EngineDependencies()
        self._catalog = catalog if catalog is not None else default_catalog()

        stored = storage.load_settings() if storage is not None else None
        if stored is not None and not self.is_playable(stored):
            logger.warning("Stored settings cannot build rounds (patterns=%s themes=%s), using defaults",
                           stored.patterns.enabled(), ",".join(stored.themes))
            stored = None
        self._settings: GameSettings = stored if stored is not None else create_settings(initial_settings)
        self._best_score = self._load_best()
        self._state: GameState = engine.initialize(self._settings, self._deps)
        self.announcement = "Welcome to Odd One Out!"

    @property
    def settings(self) -> GameSettings:
        return self._settings

    @property
    def state(self) -> GameState:
        return self._state

    @property
    def best_score(self) -> int:
        return self._best_score

    @property
    def timer_active(self) -> bool:
        return self._state.status == "running" and self._settings.mode != "practice"

    @property
    def rule_hint(self) -> str:
        return self._state.rule.description or RULE_HINT_FALLBACK

    def select_tile(self, tile_id: str) -> bool:
        previous = self._state
        odd_before = previous.odd_tile
        result = engine.evaluate_pick(previous, tile_id, self._settings, self._deps)
        self._state = result.state
        if result.state is previous:
            return False

        if result.correct:
            self.announcement = f"Correct! Round {self._state.round}. {self._state.rule.description}"
            self._record_score()
        elif self._state.status == "lost":
            self.announcement = f"No lives left. Final score {self._state.score}."
        elif self._settings.mode == "practice":
            if odd_before is not None:
                self.announcement = f"{odd_before.emoji} was the odd one. {previous.rule.description}"
            else:
                self.announcement = "Not quite. Try again and consider the rule hint."
        else:
            self.announcement = f"Oops! {self._state.lives} lives remaining."
        return result.correct

    def advance(self, elapsed_ms: float = TICK_INTERVAL_MS) -> GameState:
        previous = self._state
        self._state = engine.tick(previous, elapsed_ms, self._settings, self._deps)
        if self._state.status == "lost" and previous.status != "lost":
            self.announcement = f"Game over. Final score {self._state.score}."
        elif self._state is not previous and self._state.lives < previous.lives:
            self.announcement = f"Time's up! {self._state.lives} lives remaining."
        return self._state

    def restart(self) -> None:
        self._state = engine.revive(self._settings, self._deps)
        self.announcement = f"New {self._settings.mode} game. Find the odd emoji!"

    def set_mode(self, mode: Mode) -> None:
        self._apply(preset_for(mode, self._settings))
        self.announcement = MODE_ANNOUNCEMENTS[mode]

    def toggle_pattern(self, pattern: PatternType, enabled: bool) -> bool:
        patterns = replace(self._settings.patterns, **{pattern: enabled})
        if not patterns.enabled():
            return False
        self._apply(merge_settings(self._settings, {"patterns": patterns}))
        return True

    def set_themes(self, themes: Sequence[str]) -> bool:
        settings = merge_settings(self._settings, {"themes": tuple(themes)})
        if not self.is_playable(settings):
            return False
        self._apply(settings)
        return True

    @property
    def catalog(self) -> EmojiCatalog:
        return self._catalog

    def is_playable(self, settings: GameSettings) -> bool:
        """At least one pattern and two themes the catalog knows."""
        known = {t for t in settings.themes if self._catalog.has_theme(t)}
        return bool(settings.patterns.enabled()) and len(known) >= 2

    def _apply(self, settings: GameSettings) -> None:
        logger.info("Settings changed: mode=%s patterns=%s themes=%s",
                    settings.mode, settings.patterns.enabled(), ",".join(settings.themes))
        self._settings = settings
        if self._storage is not None:
            self._storage.save_settings(settings)
        self._best_score = self._load_best()
        self._state = engine.initialize(settings, self._deps)

    def _load_best(self) -> int:
        if self._storage is None:
            return 0
        return self._storage.load_best_score(self._settings.mode)

    def _record_score(self) -> None:
        if self._state.score <= self._best_score:
            return
        self._best_score = self._state.score
        if self._storage is not None:
            self._storage.save_best_score(self._settings.mode, self._state.score)
