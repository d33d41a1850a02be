from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Dict, FrozenSet, List, Optional, Tuple

import yaml

DEFAULT_CATALOG_PATH = Path(__file__).resolve().parent.parent / "data" / "emojis.yaml"


@dataclass(frozen=True)
class EmojiEntry:
    emoji: str
    attributes: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Theme:
    key: str
    label: str
    pool: Tuple[EmojiEntry, ...]


class EmojiCatalog:
    """Themed emoji pools and the lookups derived from them."""

    def __init__(self, path: Optional[Path] = None) -> None:
        self._path = Path(path) if path is not None else DEFAULT_CATALOG_PATH
        self._themes, self._orientation_friendly = self._load()

        self._theme_of: Dict[str, str] = {}
        self._attributes_of: Dict[str, Tuple[str, ...]] = {}
        self._by_attribute: Dict[str, List[str]] = {}
        for theme in self._themes.values():
            for entry in theme.pool:
                self._theme_of[entry.emoji] = theme.key
                self._attributes_of[entry.emoji] = entry.attributes
                for attr in entry.attributes:
                    self._by_attribute.setdefault(attr, []).append(entry.emoji)

    @property
    def themes(self) -> Tuple[str, ...]:
        return tuple(self._themes)

    @property
    def all_attributes(self) -> Tuple[str, ...]:
        """Sorted attribute vocabulary actually used by the pools."""
        return tuple(sorted(self._by_attribute))

    @property
    def all_emojis(self) -> Tuple[str, ...]:
        return tuple(sorted(self._theme_of))

    @property
    def orientation_friendly(self) -> FrozenSet[str]:
        return self._orientation_friendly

    def has_theme(self, theme: str) -> bool:
        return theme in self._themes

    def label(self, theme: str) -> str:
        return self._themes[theme].label

    def pool(self, theme: str) -> Tuple[EmojiEntry, ...]:
        return self._themes[theme].pool

    def theme_of(self, emoji: str) -> str:
        return self._theme_of[emoji]

    def attributes_of(self, emoji: str) -> Tuple[str, ...]:
        return self._attributes_of.get(emoji, ())

    def emojis_with(self, attribute: str) -> Tuple[str, ...]:
        return tuple(self._by_attribute.get(attribute, ()))

    def orientation_friendly_in(self, theme: str) -> Tuple[str, ...]:
        return tuple(e.emoji for e in self._themes[theme].pool if e.emoji in self._orientation_friendly)

    def _load(self) -> Tuple[Dict[str, Theme], FrozenSet[str]]:
        if not self._path.exists():
            raise FileNotFoundError(f"Emoji catalog not found: {self._path}")
        name = self._path.name
        raw = yaml.safe_load(self._path.read_text(encoding="utf-8"))
        if not raw or not isinstance(raw, dict):
            raise ValueError(f"{name}: expected YAML with 'attributes' and 'themes'")

        vocabulary = raw.get("attributes") or []
        if not isinstance(vocabulary, list):
            raise ValueError(f"{name}: 'attributes' must be a list")
        known = {str(a).strip() for a in vocabulary}

        raw_themes = raw.get("themes")
        if not raw_themes or not isinstance(raw_themes, dict):
            raise ValueError(f"{name}: missing or invalid 'themes'")

        themes: Dict[str, Theme] = {}
        for key, body in raw_themes.items():
            if not isinstance(body, dict):
                raise ValueError(f"{name}: theme '{key}' must be a mapping")
            label = body.get("label")
            if not label or not isinstance(label, str):
                raise ValueError(f"{name}: theme '{key}' has missing or invalid 'label'")
            entries = body.get("emojis")
            if not entries or not isinstance(entries, list):
                raise ValueError(f"{name}: theme '{key}' has no emojis")
            pool: List[EmojiEntry] = []
            for item in entries:
                if isinstance(item, str):
                    item = {"emoji": item}
                emoji = str(item.get("emoji", "")).strip() if isinstance(item, dict) else ""
                if not emoji:
                    raise ValueError(f"{name}: theme '{key}' has an entry without 'emoji'")
                attrs = tuple(str(a).strip() for a in (item.get("attributes") or []))
                unknown = [a for a in attrs if a not in known]
                if unknown:
                    raise ValueError(f"{name}: {emoji} uses unknown attribute(s) {', '.join(unknown)}")
                pool.append(EmojiEntry(emoji=emoji, attributes=attrs))
            themes[str(key)] = Theme(key=str(key), label=label.strip(), pool=tuple(pool))

        friendly = frozenset(str(e).strip() for e in (raw.get("orientation_friendly") or []))
        return themes, friendly


@lru_cache(maxsize=None)
def default_catalog() -> EmojiCatalog:
    """The bundled catalog, loaded on first use."""
    return EmojiCatalog()
