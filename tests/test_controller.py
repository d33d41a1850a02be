"""Tests for oddoneout.core.controller – host-side game flow."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from oddoneout.core.controller import RULE_HINT_FALLBACK, TICK_INTERVAL_MS, GameController
from oddoneout.core.engine import EngineDependencies
from oddoneout.core.models import CategoryMeta, RoundOutput, Rule, Tile
from oddoneout.core.settings import DEFAULT_SETTINGS, create_settings
from oddoneout.core.storage import StorageGateway


def _generate(request) -> RoundOutput:
    tiles = tuple(
        Tile(id=f"r{request.round}-t{i}", emoji=emoji, theme="animals", is_odd=i == 3)
        for i, emoji in enumerate(["🐼", "🦊", "🐨", "🍎"])
    )
    rule = Rule("category", "Three Animals, one Food", CategoryMeta("animals", "food"))
    return RoundOutput(tiles=tiles, rule=rule, odd_tile_id=tiles[3].id)


DEPS = EngineDependencies(generate_round=_generate, random=lambda: 0.0)


def _odd(controller: GameController) -> str:
    return f"r{controller.state.round}-t3"


def _wrong(controller: GameController) -> str:
    return f"r{controller.state.round}-t0"


@pytest.fixture()
def storage(tmp_path: Path) -> StorageGateway:
    return StorageGateway(tmp_path / "storage.json")


@pytest.fixture()
def controller(storage: StorageGateway) -> GameController:
    return GameController(storage=storage, dependencies=DEPS)


# ---------------------------------------------------------------------------
# Start-up
# ---------------------------------------------------------------------------

class TestStartup:
    def test_fresh_game(self, controller: GameController):
        assert controller.announcement == "Welcome to Odd One Out!"
        assert controller.state.round == 1
        assert controller.state.status == "running"
        assert controller.best_score == 0
        assert controller.settings.mode == "endless"

    def test_initial_settings_without_storage(self):
        c = GameController(initial_settings={"mode": "kid", "lives": 4}, dependencies=DEPS)
        assert c.settings.mode == "kid"
        assert c.state.lives == 4

    def test_hydrates_from_storage(self, storage: StorageGateway):
        storage.save_settings(create_settings({"mode": "practice"}))
        storage.save_best_score("practice", 12)
        c = GameController(storage=storage, initial_settings={"mode": "kid"}, dependencies=DEPS)
        assert c.settings.mode == "practice"
        assert c.best_score == 12

    def test_badly_typed_stored_settings_fall_back(self, tmp_path: Path):
        path = tmp_path / "storage.json"
        path.write_text(json.dumps({"settings": {"lives": "3"}}), encoding="utf-8")
        c = GameController(storage=StorageGateway(path), initial_settings={"lives": 2}, dependencies=DEPS)
        assert c.settings.lives == 2
        c.select_tile(_wrong(c))
        assert c.state.lives == 1

    @pytest.mark.parametrize(
        "stored",
        [
            {"themes": ["sports"]},
            {"themes": ["sports", "unknown"]},
            {"patterns": {"category": False, "attribute": False, "orientation": False}},
        ],
    )
    def test_unplayable_stored_settings_fall_back(
        self, tmp_path: Path, caplog: pytest.LogCaptureFixture, stored
    ):
        path = tmp_path / "storage.json"
        path.write_text(json.dumps({"settings": stored}), encoding="utf-8")
        with caplog.at_level(logging.WARNING):
            c = GameController(storage=StorageGateway(path), initial_settings={"mode": "kid"})
        assert c.settings.mode == "kid"
        assert c.settings.themes == DEFAULT_SETTINGS.themes
        assert c.state.status == "running"
        assert "using defaults" in caplog.text

    def test_is_playable(self, controller: GameController):
        assert controller.is_playable(DEFAULT_SETTINGS)
        assert not controller.is_playable(create_settings({"themes": ["food", "nope"]}))


# ---------------------------------------------------------------------------
# Picks
# ---------------------------------------------------------------------------

class TestSelectTile:
    def test_correct_pick(self, controller: GameController, storage: StorageGateway):
        assert controller.select_tile(_odd(controller)) is True
        assert controller.announcement == "Correct! Round 2. Three Animals, one Food"
        assert controller.best_score == 3
        assert storage.load_best_score("endless") == 3

    def test_wrong_pick(self, controller: GameController):
        assert controller.select_tile(_wrong(controller)) is False
        assert controller.announcement == "Oops! 2 lives remaining."

    def test_unknown_tile_keeps_announcement(self, controller: GameController):
        controller.select_tile("missing")
        assert controller.announcement == "Welcome to Odd One Out!"

    def test_game_over(self, controller: GameController):
        for _ in range(3):
            controller.select_tile(_wrong(controller))
        assert controller.state.status == "lost"
        assert controller.announcement == "No lives left. Final score 0."
        assert controller.timer_active is False

    def test_practice_explains_odd_tile(self, storage: StorageGateway):
        c = GameController(storage=storage, initial_settings={"mode": "practice"}, dependencies=DEPS)
        c.select_tile(_wrong(c))
        assert c.announcement == "🍎 was the odd one. Three Animals, one Food"
        assert c.state.round == 2

    def test_best_score_not_lowered(self, controller: GameController, storage: StorageGateway):
        storage.save_best_score("endless", 50)
        controller.set_mode("endless")
        controller.select_tile(_odd(controller))
        assert controller.best_score == 50
        assert storage.load_best_score("endless") == 50


# ---------------------------------------------------------------------------
# Rule hint
# ---------------------------------------------------------------------------

class TestRuleHint:
    @pytest.mark.parametrize("mode", ["endless", "practice", "kid"])
    def test_shown_in_every_mode(self, storage: StorageGateway, mode):
        c = GameController(storage=storage, initial_settings={"mode": mode}, dependencies=DEPS)
        assert c.rule_hint == "Three Animals, one Food"

    def test_fallback_for_empty_description(self, storage: StorageGateway):
        def blank(request) -> RoundOutput:
            output = _generate(request)
            return RoundOutput(tiles=output.tiles, rule=Rule("category", "", output.rule.meta),
                               odd_tile_id=output.odd_tile_id)

        c = GameController(storage=storage, dependencies=EngineDependencies(blank, lambda: 0.0))
        assert c.rule_hint == RULE_HINT_FALLBACK


# ---------------------------------------------------------------------------
# Timer
# ---------------------------------------------------------------------------

class TestAdvance:
    def test_timer_active_by_mode(self, controller: GameController):
        assert controller.timer_active is True
        controller.set_mode("practice")
        assert controller.timer_active is False
        controller.set_mode("kid")
        assert controller.timer_active is True

    def test_counts_down(self, controller: GameController):
        state = controller.advance()
        assert state.time_left_ms == 6000 - TICK_INTERVAL_MS

    def test_time_up(self, controller: GameController):
        for _ in range(6000 // TICK_INTERVAL_MS):
            controller.advance()
        assert controller.state.round == 2
        assert controller.announcement == "Time's up! 2 lives remaining."

    def test_time_up_on_last_life(self, storage: StorageGateway):
        c = GameController(storage=storage, initial_settings={"lives": 1}, dependencies=DEPS)
        c.advance(10_000)
        assert c.state.status == "lost"
        assert c.announcement == "Game over. Final score 0."


# ---------------------------------------------------------------------------
# Settings changes
# ---------------------------------------------------------------------------

class TestSettingsChanges:
    def test_set_mode_applies_preset_and_persists(self, controller: GameController, storage: StorageGateway):
        controller.select_tile(_odd(controller))
        controller.set_mode("kid")
        assert controller.settings.lives == 4
        assert controller.state.round == 1
        assert controller.state.lives == 4
        assert controller.announcement == "Kid mode enabled. Longer timers and gentler ramp."
        assert storage.load_settings().mode == "kid"

    def test_best_score_follows_mode(self, controller: GameController, storage: StorageGateway):
        storage.save_best_score("kid", 7)
        controller.set_mode("kid")
        assert controller.best_score == 7

    def test_toggle_pattern(self, controller: GameController):
        assert controller.toggle_pattern("orientation", True) is True
        assert controller.settings.patterns.orientation is True

    def test_cannot_disable_every_pattern(self, controller: GameController):
        assert controller.toggle_pattern("category", False) is True
        assert controller.toggle_pattern("attribute", False) is False
        assert controller.settings.patterns.enabled() == ("attribute",)

    def test_set_themes(self, controller: GameController, storage: StorageGateway):
        assert controller.set_themes(["food", "space"]) is True
        assert controller.settings.themes == ("food", "space")
        assert storage.load_settings().themes == ("food", "space")

    def test_needs_two_themes(self, controller: GameController):
        assert controller.set_themes(["food"]) is False
        assert len(controller.settings.themes) == 7

    def test_unknown_themes_do_not_count(self, controller: GameController):
        assert controller.set_themes(["food", "nope"]) is False
        assert len(controller.settings.themes) == 7

    def test_restart(self, controller: GameController):
        controller.select_tile(_odd(controller))
        controller.restart()
        assert controller.state.round == 1
        assert controller.state.score == 0
        assert controller.announcement == "New endless game. Find the odd emoji!"
