from __future__ import annotations

import random
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Sequence, Tuple

from ..config import settings
from ..errors import ConfigurationError
from ..models import NailDefinition


class CaseTier(str, Enum):
    BASIC = "basic"
    LEGENDARY = "legendary"
    # Legendary pool without the dream roll.
    PLAIN = "plain"


@dataclass(frozen=True)
class StripItem:
    nail: NailDefinition
    is_dream: bool
    is_winner: bool = False


def item_weight(order_index: int, base: float | None = None, decay: float | None = None) -> int:
    """Drop weight decaying exponentially with ``order_index``, floored at 1."""

    base = settings.loot_weight_base if base is None else base
    decay = settings.loot_weight_decay if decay is None else decay
    return max(1, round(base / decay ** (order_index - 1)))


def tier_pool(catalog: Sequence[NailDefinition], tier: CaseTier) -> List[NailDefinition]:
    if tier is CaseTier.BASIC or not catalog:
        pool = list(catalog)
    else:
        lowest = min(nail.order_index for nail in catalog)
        pool = [nail for nail in catalog if nail.order_index != lowest]
    if not pool:
        raise ConfigurationError(f"No nails available for the {tier.value} case")
    return pool


def allows_bonus(tier: CaseTier) -> bool:
    return tier is not CaseTier.PLAIN


def weighted_choice(pool: Sequence[NailDefinition], rng: random.Random) -> NailDefinition:
    weights = [item_weight(nail.order_index) for nail in pool]
    remaining = rng.random() * sum(weights)
    for nail, weight in zip(pool, weights):
        remaining -= weight
        if remaining < 0:
            return nail
    # Float rounding can leave ``remaining`` at exactly zero after the last item.
    return pool[-1]


def roll_bonus(rng: random.Random) -> bool:
    return rng.random() < settings.bonus_variant_chance


def draw(
    catalog: Sequence[NailDefinition],
    tier: CaseTier,
    rng: random.Random | None = None,
) -> Tuple[NailDefinition, bool]:
    """Draw one nail for ``tier`` and roll its dream variant."""

    rng = rng or random.SystemRandom()
    pool = tier_pool(catalog, tier)
    winner = weighted_choice(pool, rng)
    is_dream = roll_bonus(rng) if allows_bonus(tier) else False
    return winner, is_dream


def odds(catalog: Sequence[NailDefinition], tier: CaseTier) -> Dict[str, float]:
    """Normalised drop probability per nail id."""

    pool = tier_pool(catalog, tier)
    weights = {nail.id: item_weight(nail.order_index) for nail in pool}
    total = sum(weights.values())
    return {nail_id: weight / total for nail_id, weight in weights.items()}


def build_strip(
    catalog: Sequence[NailDefinition],
    winner: NailDefinition,
    is_dream: bool,
    strip_length: int | None = None,
    winner_offset_from_end: int | None = None,
    rng: random.Random | None = None,
) -> List[StripItem]:
    """Decoy sequence for the reveal animation with the winner at a fixed slot.

    The award is decided before this runs; decoys are display only.
    """

    strip_length = settings.strip_length if strip_length is None else strip_length
    offset = settings.strip_winner_offset if winner_offset_from_end is None else winner_offset_from_end
    if not catalog:
        raise ConfigurationError("Cannot build a reveal strip from an empty catalog")
    if not 1 <= offset <= strip_length:
        raise ConfigurationError("Winner offset must fall inside the strip")

    rng = rng or random.SystemRandom()
    items = [StripItem(nail=rng.choice(catalog), is_dream=roll_bonus(rng)) for _ in range(strip_length)]
    items[winner_index(strip_length, offset)] = StripItem(nail=winner, is_dream=is_dream, is_winner=True)
    return items


def winner_index(strip_length: int, winner_offset_from_end: int) -> int:
    return strip_length - winner_offset_from_end
