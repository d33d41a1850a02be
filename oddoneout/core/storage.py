from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

from oddoneout.core.models import MODES, GameSettings
from oddoneout.core.settings import create_settings, settings_to_dict

logger = logging.getLogger(__name__)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _settings_problem(raw: Dict[str, Any]) -> Optional[str]:
    """Describe the first badly typed field of a stored settings payload."""
    if "mode" in raw and raw["mode"] not in MODES:
        return f"unknown mode {raw['mode']!r}"
    if "lives" in raw and not _is_int(raw["lives"]):
        return f"lives must be an integer, got {raw['lives']!r}"
    themes = raw.get("themes")
    if themes is not None and (not isinstance(themes, list) or not all(isinstance(t, str) for t in themes)):
        return f"themes must be a list of names, got {themes!r}"
    patterns = raw.get("patterns")
    if patterns is not None and (
        not isinstance(patterns, dict) or not all(isinstance(v, bool) for v in patterns.values())
    ):
        return f"patterns must map names to booleans, got {patterns!r}"
    timer = raw.get("timer")
    if timer is not None and (not isinstance(timer, dict) or not all(_is_int(v) for v in timer.values())):
        return f"timer must map names to integers, got {timer!r}"
    return None


def default_storage_path() -> Path:
    home = os.environ.get("ODDONEOUT_HOME")
    base = Path(home) if home else Path.home() / ".oddoneout"
    return base / "storage.json"


class StorageGateway:
    """Keeps the last used settings and the best score per mode.
    File: ~/.oddoneout/storage.json (or $ODDONEOUT_HOME/storage.json)."""

    def __init__(self, file_path: Optional[Path] = None) -> None:
        self._file_path = Path(file_path) if file_path is not None else default_storage_path()
        self._file_path.parent.mkdir(parents=True, exist_ok=True)
        self._settings, self._best_scores = self._load()

    @property
    def file_path(self) -> Path:
        return self._file_path

    def load_settings(self) -> Optional[GameSettings]:
        if self._settings is None:
            return None
        return create_settings(self._settings)

    def save_settings(self, settings: GameSettings) -> None:
        self._settings = settings_to_dict(settings)
        self._save()

    def load_best_score(self, mode: str) -> int:
        return max(0, int(self._best_scores.get(mode, 0)))

    def save_best_score(self, mode: str, score: int) -> bool:
        """Store ``score`` if it beats the current best. Returns True when written."""
        if score <= self.load_best_score(mode):
            return False
        self._best_scores[mode] = int(score)
        self._save()
        return True

    def reset(self) -> None:
        self._settings = None
        self._best_scores = {}
        self._save()

    def _load(self) -> tuple[Optional[Dict[str, Any]], Dict[str, int]]:
        best: Dict[str, int] = {}
        if not self._file_path.exists():
            return None, best
        try:
            payload = json.loads(self._file_path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Could not load storage from %s: %s", self._file_path, e)
            return None, best
        if not isinstance(payload, dict):
            logger.warning("Ignoring malformed storage file %s", self._file_path)
            return None, best

        settings = payload.get("settings")
        if not isinstance(settings, dict):
            settings = None
        else:
            problem = _settings_problem(settings)
            if problem:
                logger.warning("Ignoring stored settings in %s: %s", self._file_path, problem)
                settings = None
        scores = payload.get("best_scores", {})
        if isinstance(scores, dict):
            for mode, value in scores.items():
                try:
                    best[str(mode)] = max(0, int(value))
                except (TypeError, ValueError):
                    logger.warning("Ignoring invalid best score for %s: %r", mode, value)
        return settings, best

    def _save(self) -> None:
        self._file_path.parent.mkdir(parents=True, exist_ok=True)
        payload = {
            "settings": self._settings,
            "best_scores": dict(self._best_scores),
        }
        try:
            self._file_path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
        except OSError as e:
            logger.warning("Could not save storage to %s: %s", self._file_path, e)
