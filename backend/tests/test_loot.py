"""Tests for loot weighting and the reveal strip."""

from __future__ import annotations

import random
from collections import Counter

import pytest

from nail_arena.data.nail_definitions import NAIL_DEFINITIONS
from nail_arena.errors import ConfigurationError
from nail_arena.models import NailDefinition
from nail_arena.services import loot
from nail_arena.services.loot import CaseTier, StripItem

CATALOG = [NailDefinition(**entry) for entry in NAIL_DEFINITIONS]


class TestWeights:
    def test_weight_decays_with_order_index(self):
        weights = [loot.item_weight(nail.order_index) for nail in CATALOG]
        assert weights[0] == 100
        assert all(a > b for a, b in zip(weights, weights[1:]))

    def test_weight_never_drops_below_one(self):
        assert loot.item_weight(50) == 1

    def test_odds_are_normalised(self):
        for tier in CaseTier:
            table = loot.odds(CATALOG, tier)
            assert sum(table.values()) == pytest.approx(1.0)


class TestDraw:
    def test_frequencies_follow_weight_table(self):
        """Empirical frequencies converge on the odds table."""
        rng = random.Random(7)
        draws = 20_000
        counts = Counter(loot.draw(CATALOG, CaseTier.BASIC, rng)[0].id for _ in range(draws))
        expected = loot.odds(CATALOG, CaseTier.BASIC)

        for nail_id, probability in expected.items():
            assert counts[nail_id] / draws == pytest.approx(probability, abs=0.015)

        ordered = [counts[nail.id] for nail in CATALOG]
        assert all(a > b for a, b in zip(ordered, ordered[1:]))

    def test_legendary_case_excludes_lowest_item(self):
        rng = random.Random(3)
        ids = {loot.draw(CATALOG, CaseTier.LEGENDARY, rng)[0].id for _ in range(2_000)}
        assert "old_nail" not in ids
        assert "sharpened_nail" in ids

    def test_plain_case_never_rolls_dream(self):
        rng = random.Random(11)
        results = [loot.draw(CATALOG, CaseTier.PLAIN, rng) for _ in range(1_000)]
        assert not any(is_dream for _, is_dream in results)
        assert "old_nail" not in {nail.id for nail, _ in results}

    def test_basic_case_rolls_dream_about_one_in_ten(self):
        rng = random.Random(5)
        dreams = sum(loot.draw(CATALOG, CaseTier.BASIC, rng)[1] for _ in range(10_000))
        assert 800 < dreams < 1_200

    def test_empty_catalog_is_a_configuration_error(self):
        with pytest.raises(ConfigurationError):
            loot.draw([], CaseTier.BASIC, random.Random(0))

    def test_single_item_catalog_has_no_legendary_pool(self):
        with pytest.raises(ConfigurationError):
            loot.draw(CATALOG[:1], CaseTier.LEGENDARY, random.Random(0))


class TestStrip:
    @pytest.mark.parametrize("seed", range(10))
    def test_winner_sits_at_fixed_slot(self, seed: int):
        rng = random.Random(seed)
        winner, is_dream = loot.draw(CATALOG, CaseTier.BASIC, rng)
        strip = loot.build_strip(CATALOG, winner, is_dream, rng=rng)

        assert len(strip) == 50
        assert strip[45] == StripItem(nail=winner, is_dream=is_dream, is_winner=True)
        assert sum(item.is_winner for item in strip) == 1

    def test_custom_length_and_offset(self):
        winner = CATALOG[-1]
        strip = loot.build_strip(CATALOG, winner, True, strip_length=10, winner_offset_from_end=1, rng=random.Random(1))
        assert len(strip) == 10
        assert strip[9].nail == winner
        assert strip[9].is_dream is True

    def test_decoys_come_from_given_pool(self):
        pool = loot.tier_pool(CATALOG, CaseTier.LEGENDARY)
        strip = loot.build_strip(pool, pool[0], False, rng=random.Random(2))
        assert all(item.nail.id != "old_nail" for item in strip)

    @pytest.mark.parametrize("offset", [0, 51])
    def test_offset_outside_strip_is_rejected(self, offset: int):
        with pytest.raises(ConfigurationError):
            loot.build_strip(CATALOG, CATALOG[0], False, winner_offset_from_end=offset, rng=random.Random(0))
