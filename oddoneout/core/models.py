"""Immutable value types shared by the round generator, engine and host."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Tuple, Union

Mode = Literal["endless", "practice", "kid"]
PatternType = Literal["category", "attribute", "orientation"]
Orientation = Literal["upright", "tilt-left", "tilt-right", "flip-horizontal"]
Status = Literal["idle", "running", "won", "lost"]

MODES: Tuple[Mode, ...] = ("endless", "practice", "kid")
PATTERN_TYPES: Tuple[PatternType, ...] = ("category", "attribute", "orientation")
UNTIMED_MODES: Tuple[Mode, ...] = ("practice", "kid")


@dataclass(frozen=True)
class Tile:
    """One of the four symbols placed in a round."""

    id: str
    emoji: str
    theme: str
    is_odd: bool
    attributes: Tuple[str, ...] = ()
    orientation: Orientation = "upright"


@dataclass(frozen=True)
class CategoryMeta:
    base_theme: str
    odd_theme: str


@dataclass(frozen=True)
class AttributeMeta:
    attribute: str


@dataclass(frozen=True)
class OrientationMeta:
    theme: str
    orientation: Orientation


RuleMeta = Union[CategoryMeta, AttributeMeta, OrientationMeta]


@dataclass(frozen=True)
class Rule:
    """Pattern family of a round plus what is needed to explain the odd tile."""

    type: PatternType
    description: str
    meta: RuleMeta


@dataclass(frozen=True)
class TimerSettings:
    start_ms: int = 6000
    min_ms: int = 2500
    step_ms: int = 200


@dataclass(frozen=True)
class PatternToggles:
    category: bool = True
    attribute: bool = True
    orientation: bool = False

    def enabled(self) -> Tuple[PatternType, ...]:
        """Enabled pattern families, in declaration order."""
        return tuple(p for p in PATTERN_TYPES if getattr(self, p))


@dataclass(frozen=True)
class GameSettings:
    mode: Mode
    lives: int
    patterns: PatternToggles
    themes: Tuple[str, ...]
    timer: TimerSettings

    @property
    def timed(self) -> bool:
        return self.mode not in UNTIMED_MODES


@dataclass(frozen=True)
class RoundOutput:
    tiles: Tuple[Tile, ...]
    rule: Rule
    odd_tile_id: str


@dataclass(frozen=True)
class GameState:
    """Snapshot of a game between two transitions.

    ``time_left_ms`` and ``round_time_ms`` are ``math.inf`` in untimed modes.
    """

    round: int
    score: int
    streak: int
    lives: int
    time_left_ms: float
    round_time_ms: float
    tiles: Tuple[Tile, ...]
    rule: Rule
    status: Status = "idle"

    def tile(self, tile_id: str) -> Tile | None:
        for tile in self.tiles:
            if tile.id == tile_id:
                return tile
        return None

    @property
    def odd_tile(self) -> Tile | None:
        return next((tile for tile in self.tiles if tile.is_odd), None)


@dataclass(frozen=True)
class PickResult:
    correct: bool
    state: GameState
