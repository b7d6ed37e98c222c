from __future__ import annotations

from enum import Enum
from typing import Dict, Iterable, Optional


class Ability(str, Enum):
    DASH = "dash"
    THREAD = "thread"
    WALL_JUMP = "wall_jump"
    VENGEFUL_SPIRIT = "vengeful_spirit"
    DOUBLE_JUMP = "double_jump"
    # Narrative flag, no combat effect.
    VOID_HEART = "void_heart"


BOSS_ABILITIES: Dict[str, Ability] = {
    "false_knight": Ability.DASH,
    "hornet": Ability.THREAD,
    "mantis_lords": Ability.WALL_JUMP,
    "soul_master": Ability.VENGEFUL_SPIRIT,
    "broken_vessel": Ability.DOUBLE_JUMP,
    "hollow_knight": Ability.VOID_HEART,
}

FINAL_BOSS = "hollow_knight"


def ability_for_boss(boss_id: str) -> Optional[Ability]:
    return BOSS_ABILITIES.get(boss_id)


def parse_abilities(values: Iterable[str]) -> frozenset[Ability]:
    """Known abilities from stored strings; unknown names are ignored."""

    known = {ability.value for ability in Ability}
    return frozenset(Ability(value) for value in values if value in known)
