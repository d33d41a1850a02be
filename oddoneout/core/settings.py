from __future__ import annotations

from dataclasses import asdict, replace
from typing import Any, Dict, Mapping, Optional, Union

from oddoneout.core.models import GameSettings, Mode, PatternToggles, TimerSettings

DEFAULT_TIMER = TimerSettings(start_ms=6000, min_ms=2500, step_ms=200)

DEFAULT_THEMES = ("animals", "food", "nature", "space", "sports", "transport", "shapes")

DEFAULT_SETTINGS = GameSettings(
    mode="endless",
    lives=3,
    patterns=PatternToggles(category=True, attribute=True, orientation=False),
    themes=DEFAULT_THEMES,
    timer=DEFAULT_TIMER,
)

# Applied when the player switches mode. ``lives`` of None keeps the current value.
MODE_PRESETS: Dict[str, Dict[str, Any]] = {
    "endless": {"lives": None, "timer": TimerSettings(6000, 2500, 200)},
    "practice": {"lives": None, "timer": TimerSettings(6000, 6000, 0)},
    "kid": {"lives": 4, "timer": TimerSettings(7000, 3500, 150)},
}

Updates = Union[Mapping[str, Any], GameSettings]

_PATTERN_KEYS = frozenset(asdict(PatternToggles()))
_TIMER_KEYS = frozenset(asdict(TimerSettings()))


def _as_mapping(value: Any) -> Dict[str, Any]:
    if value is None:
        return {}
    if isinstance(value, (PatternToggles, TimerSettings)):
        return asdict(value)
    return dict(value)


def merge_settings(base: GameSettings, updates: Optional[Updates] = None) -> GameSettings:
    """Overlay ``updates`` on ``base``.

    ``patterns`` and ``timer`` merge key by key, ``themes`` is replaced as a
    whole. Unknown keys are ignored so older persisted payloads still load.
    Nothing is validated here.
    """
    if updates is None:
        return base
    if isinstance(updates, GameSettings):
        updates = {
            "mode": updates.mode,
            "lives": updates.lives,
            "patterns": updates.patterns,
            "themes": updates.themes,
            "timer": updates.timer,
        }

    patterns = {**asdict(base.patterns), **_as_mapping(updates.get("patterns"))}
    timer = {**asdict(base.timer), **_as_mapping(updates.get("timer"))}
    themes = updates.get("themes")

    return GameSettings(
        mode=updates.get("mode", base.mode),
        lives=updates.get("lives", base.lives),
        patterns=PatternToggles(**{k: bool(v) for k, v in patterns.items() if k in _PATTERN_KEYS}),
        themes=tuple(themes) if themes is not None else base.themes,
        timer=TimerSettings(**{k: v for k, v in timer.items() if k in _TIMER_KEYS}),
    )


def create_settings(overrides: Optional[Updates] = None) -> GameSettings:
    """Complete settings: defaults merged with ``overrides``."""
    return merge_settings(DEFAULT_SETTINGS, overrides)


def preset_for(mode: Mode, current: GameSettings) -> GameSettings:
    """``current`` switched to ``mode`` with that mode's lives and timer curve."""
    preset = MODE_PRESETS[mode]
    lives = preset["lives"] if preset["lives"] is not None else current.lives
    return replace(current, mode=mode, lives=lives, timer=preset["timer"])


def settings_to_dict(settings: GameSettings) -> Dict[str, Any]:
    """JSON-friendly form accepted back by :func:`create_settings`."""
    return {
        "mode": settings.mode,
        "lives": settings.lives,
        "patterns": asdict(settings.patterns),
        "themes": list(settings.themes),
        "timer": asdict(settings.timer),
    }
