"""Tests for oddoneout.core.rules – round generation."""

from __future__ import annotations

import random
from collections import Counter
from typing import Iterable

import pytest

from oddoneout.core.catalog import default_catalog
from oddoneout.core.models import AttributeMeta, CategoryMeta, OrientationMeta, RoundOutput
from oddoneout.core.rules import (
    MATCH_ORIENTATIONS,
    RoundGenerationError,
    RoundRequest,
    attribute_candidates,
    eligible_patterns,
    generate_round,
    is_eligible,
    pick_random,
    sample_unique,
    shuffle,
)
from oddoneout.core.settings import create_settings

ALL_PATTERNS = ("category", "attribute", "orientation")
SEEDS = range(150)


def _scripted(values: Iterable[float]):
    it = iter(values)
    return lambda: next(it)


def _request(seed: int, round_number: int = 1, patterns=ALL_PATTERNS, **overrides) -> RoundRequest:
    settings = create_settings(overrides)
    return RoundRequest(
        round=round_number,
        settings=settings,
        available_patterns=tuple(patterns),
        random=random.Random(seed).random,
    )


def _check_common(out: RoundOutput, round_number: int) -> None:
    assert len(out.tiles) == 4
    odd = [t for t in out.tiles if t.is_odd]
    assert len(odd) == 1
    assert odd[0].id == out.odd_tile_id
    assert len({t.id for t in out.tiles}) == 4
    assert all(t.id.startswith(f"r{round_number}-t") for t in out.tiles)


# ---------------------------------------------------------------------------
# Sampling helpers
# ---------------------------------------------------------------------------

class TestPickRandom:
    def test_first_and_last(self):
        assert pick_random(["a", "b", "c"], lambda: 0.0) == "a"
        assert pick_random(["a", "b", "c"], lambda: 0.99) == "c"

    def test_clamps_out_of_range_source(self):
        assert pick_random(["a", "b"], lambda: 1.0) == "b"

    def test_empty_raises(self):
        with pytest.raises(RoundGenerationError):
            pick_random([], lambda: 0.5)


class TestSampleUnique:
    def test_removes_drawn_values(self):
        # 0.0 always takes the head of the remaining pool
        assert sample_unique(["a", "b", "c", "d"], lambda: 0.0, 3) == ["a", "b", "c"]

    def test_distinct(self):
        rng = random.Random(3)
        for _ in range(50):
            picks = sample_unique(range(5), rng.random, 5)
            assert sorted(picks) == [0, 1, 2, 3, 4]

    def test_too_many_raises(self):
        with pytest.raises(RoundGenerationError):
            sample_unique(["a", "b"], lambda: 0.0, 3)


class TestShuffle:
    def test_is_permutation(self):
        rng = random.Random(7)
        for _ in range(20):
            assert sorted(shuffle([1, 2, 3, 4], rng.random)) == [1, 2, 3, 4]

    def test_zero_source_rotates_deterministically(self):
        # j is always 0: swaps (3,0), (2,0), (1,0)
        assert shuffle(["a", "b", "c", "d"], lambda: 0.0) == ["b", "c", "d", "a"]

    def test_input_not_modified(self):
        values = [1, 2, 3]
        shuffle(values, lambda: 0.0)
        assert values == [1, 2, 3]


# ---------------------------------------------------------------------------
# Eligibility
# ---------------------------------------------------------------------------

class TestEligibility:
    def test_category_needs_two_themes(self):
        catalog = default_catalog()
        assert not is_eligible("category", ["animals"], catalog)
        assert is_eligible("category", ["animals", "food"], catalog)

    def test_orientation_needs_four_friendly_symbols(self):
        catalog = default_catalog()
        assert not is_eligible("orientation", ["animals", "food"], catalog)
        assert is_eligible("orientation", ["shapes"], catalog)

    def test_attribute(self):
        catalog = default_catalog()
        assert not is_eligible("attribute", ["sports"], catalog)
        assert is_eligible("attribute", ["shapes"], catalog)
        assert "square-ish" in attribute_candidates(["shapes"], catalog)

    def test_intersects_with_available(self):
        settings = create_settings()
        eligible = eligible_patterns(("attribute", "orientation"), settings, default_catalog())
        assert eligible == ["attribute", "orientation"]
        settings = create_settings({"themes": ["animals", "food"]})
        assert eligible_patterns(ALL_PATTERNS, settings, default_catalog()) == ["category", "attribute"]

    def test_unknown_themes_are_ignored(self):
        settings = create_settings({"themes": ["shapes", "nope"]})
        assert eligible_patterns(ALL_PATTERNS, settings, default_catalog()) == ["attribute", "orientation"]


# ---------------------------------------------------------------------------
# Generated rounds
# ---------------------------------------------------------------------------

class TestCategoryRound:
    def test_three_plus_one(self):
        for seed in SEEDS:
            out = generate_round(_request(seed, patterns=("category",)))
            _check_common(out, 1)
            assert out.rule.type == "category"
            meta = out.rule.meta
            assert isinstance(meta, CategoryMeta)
            assert meta.base_theme != meta.odd_theme
            counts = Counter(t.theme for t in out.tiles)
            assert counts == {meta.base_theme: 3, meta.odd_theme: 1}
            odd = next(t for t in out.tiles if t.is_odd)
            assert odd.theme == meta.odd_theme

    def test_description_uses_labels(self):
        out = generate_round(_request(1, patterns=("category",), themes=["animals", "food"]))
        assert out.rule.description in ("Three Animals, one Food", "Three Food, one Animals")

    def test_tiles_copy_attributes(self):
        catalog = default_catalog()
        out = generate_round(_request(5, patterns=("category",)))
        for tile in out.tiles:
            assert tile.attributes == catalog.attributes_of(tile.emoji)
            assert tile.orientation == "upright"


class TestAttributeRound:
    def test_three_carry_one_lacks(self):
        for seed in SEEDS:
            out = generate_round(_request(seed, patterns=("attribute",)))
            _check_common(out, 1)
            meta = out.rule.meta
            assert isinstance(meta, AttributeMeta)
            carriers = [t for t in out.tiles if meta.attribute in t.attributes]
            assert len(carriers) == 3
            odd = next(t for t in out.tiles if t.is_odd)
            assert meta.attribute not in odd.attributes

    def test_only_enabled_themes(self):
        for seed in SEEDS:
            out = generate_round(_request(seed, patterns=("attribute",), themes=["animals", "transport"]))
            assert {t.theme for t in out.tiles} <= {"animals", "transport"}


class TestOrientationRound:
    def test_single_upright_odd_tile(self):
        for seed in SEEDS:
            out = generate_round(_request(seed, patterns=("orientation",)))
            _check_common(out, 1)
            meta = out.rule.meta
            assert isinstance(meta, OrientationMeta)
            assert meta.orientation in MATCH_ORIENTATIONS
            counts = Counter(t.orientation for t in out.tiles)
            assert counts == {"upright": 1, meta.orientation: 3}
            odd = next(t for t in out.tiles if t.is_odd)
            assert odd.orientation == "upright"
            assert {t.theme for t in out.tiles} == {meta.theme}
            assert all(t.emoji in default_catalog().orientation_friendly for t in out.tiles)


class TestGenerateRound:
    def test_mixed_patterns_are_all_valid(self):
        seen = set()
        for seed in SEEDS:
            out = generate_round(_request(seed, round_number=4))
            _check_common(out, 4)
            seen.add(out.rule.type)
        assert seen == set(ALL_PATTERNS)

    def test_deterministic_for_same_source(self):
        assert generate_round(_request(42)) == generate_round(_request(42))

    def test_falls_back_to_category_when_nothing_eligible(self):
        out = generate_round(_request(0, patterns=("orientation",), themes=["animals", "food"]))
        assert out.rule.type == "category"

    def test_falls_back_to_category_with_no_patterns(self):
        out = generate_round(_request(0, patterns=()))
        assert out.rule.type == "category"

    def test_single_theme_cannot_build_category(self):
        with pytest.raises(RoundGenerationError):
            generate_round(_request(0, patterns=("category",), themes=["shapes"]))

    def test_scripted_source_picks_pattern(self):
        request = _request(0, patterns=("category", "attribute"))
        values = [0.99] + [0.0] * 20
        request = RoundRequest(
            round=1,
            settings=request.settings,
            available_patterns=request.available_patterns,
            random=_scripted(values),
        )
        assert generate_round(request).rule.type == "attribute"
