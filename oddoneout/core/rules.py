"""Round generation: build a four-tile puzzle for one of the pattern families.

Every choice goes through the ``random`` callable carried by the request, so a
seeded or scripted source reproduces a round exactly.
"""

from __future__ import annotations

import logging
import math
import random as _random
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence, Tuple, TypeVar

from oddoneout.core.catalog import EmojiCatalog, default_catalog
from oddoneout.core.models import (
    AttributeMeta,
    CategoryMeta,
    GameSettings,
    Orientation,
    OrientationMeta,
    PatternType,
    RoundOutput,
    Rule,
    Tile,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")
RandomSource = Callable[[], float]

MATCH_ORIENTATIONS: Tuple[Orientation, ...] = ("tilt-left", "tilt-right", "flip-horizontal")
FALLBACK_PATTERN: PatternType = "category"


class RoundGenerationError(RuntimeError):
    """A round could not be built although its pattern was deemed eligible."""


@dataclass(frozen=True)
class RoundRequest:
    round: int
    settings: GameSettings
    available_patterns: Tuple[PatternType, ...]
    random: RandomSource = field(default=_random.random)


@dataclass(frozen=True)
class _Pick:
    emoji: str
    theme: str


# ---------------------------------------------------------------------------
# Sampling helpers
# ---------------------------------------------------------------------------

def pick_random(values: Sequence[T], random: RandomSource) -> T:
    if not values:
        raise RoundGenerationError("Cannot pick from an empty list")
    index = math.floor(random() * len(values))
    return values[min(index, len(values) - 1)]


def sample_unique(values: Sequence[T], random: RandomSource, count: int) -> List[T]:
    """Draw ``count`` distinct items, removing each from the pool once drawn."""
    if count > len(values):
        raise RoundGenerationError(f"Cannot sample {count} values from {len(values)}")
    pool = list(values)
    picks: List[T] = []
    while len(picks) < count:
        index = min(math.floor(random() * len(pool)), len(pool) - 1)
        picks.append(pool.pop(index))
    return picks


def shuffle(values: Sequence[T], random: RandomSource) -> List[T]:
    """Fisher-Yates shuffle driven by ``random``."""
    arr = list(values)
    for i in range(len(arr) - 1, 0, -1):
        j = min(math.floor(random() * (i + 1)), i)
        arr[i], arr[j] = arr[j], arr[i]
    return arr


# ---------------------------------------------------------------------------
# Eligibility
# ---------------------------------------------------------------------------

def _enabled_themes(settings: GameSettings, catalog: EmojiCatalog) -> List[str]:
    themes: List[str] = []
    for theme in settings.themes:
        if catalog.has_theme(theme) and theme not in themes:
            themes.append(theme)
    return themes


def _theme_picks(theme: str, catalog: EmojiCatalog) -> List[_Pick]:
    return [_Pick(entry.emoji, theme) for entry in catalog.pool(theme)]


def _attribute_split(
    attribute: str, themes: Sequence[str], catalog: EmojiCatalog
) -> Tuple[List[_Pick], List[_Pick]]:
    matches: List[_Pick] = []
    others: List[_Pick] = []
    for theme in themes:
        for pick in _theme_picks(theme, catalog):
            if attribute in catalog.attributes_of(pick.emoji):
                matches.append(pick)
            else:
                others.append(pick)
    return matches, others


def attribute_candidates(themes: Sequence[str], catalog: EmojiCatalog) -> List[str]:
    """Attributes carried by at least three enabled symbols and missing from one."""
    candidates = []
    for attribute in catalog.all_attributes:
        matches, others = _attribute_split(attribute, themes, catalog)
        if len(matches) >= 3 and others:
            candidates.append(attribute)
    return candidates


def _category_bases(themes: Sequence[str], catalog: EmojiCatalog) -> List[str]:
    return [t for t in themes if len(catalog.pool(t)) >= 3]


def _orientation_themes(themes: Sequence[str], catalog: EmojiCatalog) -> List[str]:
    return [t for t in themes if len(catalog.orientation_friendly_in(t)) >= 4]


def is_eligible(pattern: PatternType, themes: Sequence[str], catalog: EmojiCatalog) -> bool:
    if pattern == "category":
        return len(_category_bases(themes, catalog)) >= 2
    if pattern == "attribute":
        return bool(attribute_candidates(themes, catalog))
    if pattern == "orientation":
        return bool(_orientation_themes(themes, catalog))
    return False


def eligible_patterns(
    available: Sequence[PatternType], settings: GameSettings, catalog: EmojiCatalog
) -> List[PatternType]:
    themes = _enabled_themes(settings, catalog)
    return [p for p in available if is_eligible(p, themes, catalog)]


def choose_pattern(request: RoundRequest, catalog: EmojiCatalog) -> PatternType:
    eligible = eligible_patterns(request.available_patterns, request.settings, catalog)
    if not eligible:
        logger.debug("No eligible pattern among %s, using %s", request.available_patterns, FALLBACK_PATTERN)
        return FALLBACK_PATTERN
    return pick_random(eligible, request.random)


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------

def _to_tile(
    pick: _Pick,
    round_number: int,
    index: int,
    is_odd: bool,
    catalog: EmojiCatalog,
    orientation: Orientation = "upright",
) -> Tile:
    return Tile(
        id=f"r{round_number}-t{index}-{pick.emoji}",
        emoji=pick.emoji,
        theme=pick.theme,
        is_odd=is_odd,
        attributes=catalog.attributes_of(pick.emoji),
        orientation=orientation,
    )


def _finish(tiles: List[Tile], rule: Rule) -> RoundOutput:
    odd = [tile for tile in tiles if tile.is_odd]
    if len(tiles) != 4 or len(odd) != 1:
        raise RoundGenerationError(
            f"{rule.type} round produced {len(tiles)} tiles with {len(odd)} odd"
        )
    return RoundOutput(tiles=tuple(tiles), rule=rule, odd_tile_id=odd[0].id)


def _three_and_one(
    matches: List[_Pick], odd: _Pick, request: RoundRequest, catalog: EmojiCatalog
) -> List[Tile]:
    tiles = [_to_tile(p, request.round, i, False, catalog) for i, p in enumerate(matches)]
    tiles.append(_to_tile(odd, request.round, len(matches), True, catalog))
    return shuffle(tiles, request.random)


def category_round(request: RoundRequest, catalog: EmojiCatalog) -> RoundOutput:
    random = request.random
    themes = _enabled_themes(request.settings, catalog)
    base_theme = pick_random(_category_bases(themes, catalog), random)
    odd_theme = pick_random([t for t in themes if t != base_theme], random)

    matches = sample_unique(_theme_picks(base_theme, catalog), random, 3)
    odd = pick_random(_theme_picks(odd_theme, catalog), random)

    rule = Rule(
        type="category",
        description=f"Three {catalog.label(base_theme)}, one {catalog.label(odd_theme)}",
        meta=CategoryMeta(base_theme=base_theme, odd_theme=odd_theme),
    )
    return _finish(_three_and_one(matches, odd, request, catalog), rule)


def attribute_round(request: RoundRequest, catalog: EmojiCatalog) -> RoundOutput:
    random = request.random
    themes = _enabled_themes(request.settings, catalog)
    candidates = attribute_candidates(themes, catalog)
    if not candidates:
        raise RoundGenerationError("Attribute round requested without sufficient attributes")
    attribute = pick_random(candidates, random)
    matches, others = _attribute_split(attribute, themes, catalog)
    if not others:
        raise RoundGenerationError(f"No non-matching emoji found for attribute {attribute}")

    picks = sample_unique(matches, random, 3)
    odd = pick_random(others, random)

    rule = Rule(
        type="attribute",
        description=f"Three emojis share attribute “{attribute}”",
        meta=AttributeMeta(attribute=attribute),
    )
    return _finish(_three_and_one(picks, odd, request, catalog), rule)


def orientation_round(request: RoundRequest, catalog: EmojiCatalog) -> RoundOutput:
    random = request.random
    candidates = _orientation_themes(_enabled_themes(request.settings, catalog), catalog)
    if not candidates:
        raise RoundGenerationError("Orientation round requested without suitable themes")

    theme = pick_random(candidates, random)
    picks = sample_unique([_Pick(e, theme) for e in catalog.orientation_friendly_in(theme)], random, 4)
    odd_index = min(math.floor(random() * len(picks)), len(picks) - 1)
    orientation = pick_random(MATCH_ORIENTATIONS, random)

    tiles = [
        _to_tile(
            pick,
            request.round,
            i,
            i == odd_index,
            catalog,
            "upright" if i == odd_index else orientation,
        )
        for i, pick in enumerate(picks)
    ]
    rule = Rule(
        type="orientation",
        description="One emoji faces differently than the others",
        meta=OrientationMeta(theme=theme, orientation=orientation),
    )
    return _finish(shuffle(tiles, random), rule)


_BUILDERS = {
    "category": category_round,
    "attribute": attribute_round,
    "orientation": orientation_round,
}


def generate_round(request: RoundRequest, catalog: Optional[EmojiCatalog] = None) -> RoundOutput:
    """Build one puzzle for ``request``.

    Raises :class:`RoundGenerationError` when the chosen pattern cannot be
    satisfied; a round without a single well-defined odd tile is never returned.
    """
    catalog = catalog or default_catalog()
    pattern = choose_pattern(request, catalog)
    logger.debug("Round %d uses pattern %s", request.round, pattern)
    return _BUILDERS[pattern](request, catalog)
