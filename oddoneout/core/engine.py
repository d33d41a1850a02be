"""Game state machine.

Every transition takes the previous :class:`GameState` and returns a new one;
nothing is mutated. Randomness and round generation come in through
:class:`EngineDependencies` so tests can pin both.
"""

from __future__ import annotations

import math
import random as _random
from dataclasses import dataclass, replace
from typing import Callable, Optional

from oddoneout.core.models import GameSettings, GameState, PickResult, RoundOutput
from oddoneout.core.rules import RandomSource, RoundRequest, generate_round

RoundGenerator = Callable[[RoundRequest], RoundOutput]


@dataclass(frozen=True)
class EngineDependencies:
    generate_round: RoundGenerator = generate_round
    random: RandomSource = _random.random
    # Score untimed rounds against their full, never-decreasing budget.
    untimed_speed_bonus: bool = False


DEFAULT_DEPENDENCIES = EngineDependencies()


def _deps(dependencies: Optional[EngineDependencies]) -> EngineDependencies:
    return dependencies if dependencies is not None else DEFAULT_DEPENDENCIES


def round_time_ms(round_number: int, settings: GameSettings) -> float:
    """Time budget for ``round_number``; infinite outside endless mode."""
    if not settings.timed:
        return math.inf
    timer = settings.timer
    steps = max(0, round_number - 1)
    return max(timer.min_ms, timer.start_ms - timer.step_ms * steps)


def speed_bonus(state: GameState, dependencies: Optional[EngineDependencies] = None) -> int:
    """Extra points for answering with most of the round time left."""
    if math.isinf(state.round_time_ms):
        return 2 if _deps(dependencies).untimed_speed_bonus else 0
    if state.round_time_ms <= 0:
        return 0
    speed = state.time_left_ms / state.round_time_ms
    if speed >= 0.75:
        return 2
    if speed >= 0.4:
        return 1
    return 0


def _generate(round_number: int, settings: GameSettings, deps: EngineDependencies) -> RoundOutput:
    return deps.generate_round(
        RoundRequest(
            round=round_number,
            settings=settings,
            available_patterns=settings.patterns.enabled(),
            random=deps.random,
        )
    )


def initialize(settings: GameSettings, dependencies: Optional[EngineDependencies] = None) -> GameState:
    deps = _deps(dependencies)
    budget = round_time_ms(1, settings)
    generated = _generate(1, settings, deps)
    return GameState(
        round=1,
        score=0,
        streak=0,
        lives=settings.lives,
        time_left_ms=budget,
        round_time_ms=budget,
        tiles=generated.tiles,
        rule=generated.rule,
        status="running",
    )


def _next_round(state: GameState, settings: GameSettings, deps: EngineDependencies) -> GameState:
    number = state.round + 1
    budget = round_time_ms(number, settings)
    generated = _generate(number, settings, deps)
    return replace(
        state,
        round=number,
        tiles=generated.tiles,
        rule=generated.rule,
        time_left_ms=budget,
        round_time_ms=budget,
        status="running",
    )


def _fail(state: GameState, settings: GameSettings, deps: EngineDependencies) -> GameState:
    """Shared by wrong picks and time-outs."""
    if settings.mode == "practice":
        return _next_round(replace(state, streak=0), settings, deps)

    lives = max(0, state.lives - 1)
    if lives == 0:
        return replace(state, lives=0, streak=0, status="lost", time_left_ms=0)
    return _next_round(replace(state, lives=lives, streak=0), settings, deps)


def tick(
    state: GameState,
    elapsed_ms: float,
    settings: GameSettings,
    dependencies: Optional[EngineDependencies] = None,
) -> GameState:
    """Let ``elapsed_ms`` pass. Running out of time counts as a wrong pick."""
    if state.status != "running" or not settings.timed:
        return state
    time_left = max(0, state.time_left_ms - elapsed_ms)
    if time_left == 0:
        return _fail(replace(state, time_left_ms=0), settings, _deps(dependencies))
    return replace(state, time_left_ms=time_left)


def evaluate_pick(
    state: GameState,
    tile_id: str,
    settings: GameSettings,
    dependencies: Optional[EngineDependencies] = None,
) -> PickResult:
    if state.status != "running":
        return PickResult(correct=False, state=state)
    picked = state.tile(tile_id)
    if picked is None:
        return PickResult(correct=False, state=state)

    deps = _deps(dependencies)
    if picked.is_odd:
        scored = replace(
            state,
            score=state.score + 1 + speed_bonus(state, deps),
            streak=state.streak + 1,
        )
        return PickResult(correct=True, state=_next_round(scored, settings, deps))
    return PickResult(correct=False, state=_fail(state, settings, deps))


def revive(settings: GameSettings, dependencies: Optional[EngineDependencies] = None) -> GameState:
    """Start over from round one."""
    return initialize(settings, dependencies)
