from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Callable, Dict, List, Tuple

from ..errors import ValidationError


@dataclass(frozen=True)
class EnemyPreset:
    level: int
    health: int
    damage: int
    soul_reward: int
    dream_points_reward: int


ENEMY_PRESETS: Dict[int, EnemyPreset] = {
    1: EnemyPreset(level=1, health=80, damage=10, soul_reward=40, dream_points_reward=5),
    2: EnemyPreset(level=2, health=100, damage=15, soul_reward=75, dream_points_reward=10),
    3: EnemyPreset(level=3, health=130, damage=20, soul_reward=120, dream_points_reward=18),
    4: EnemyPreset(level=4, health=170, damage=25, soul_reward=180, dream_points_reward=30),
    5: EnemyPreset(level=5, health=220, damage=35, soul_reward=300, dream_points_reward=50),
}


def get_preset(level: int) -> EnemyPreset:
    try:
        return ENEMY_PRESETS[level]
    except KeyError:
        raise ValidationError(f"Unknown difficulty level {level}") from None


def list_presets() -> List[EnemyPreset]:
    return [ENEMY_PRESETS[level] for level in sorted(ENEMY_PRESETS)]


@dataclass(frozen=True)
class BattleState:
    bar_speed: float = 1.0
    reaction_window: float = 60.0
    reverse: bool = False
    pulsing: bool = False
    modifiers: Tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class BattleModifier:
    name: str
    description: str
    apply: Callable[[BattleState], BattleState]


MODIFIERS: List[BattleModifier] = [
    BattleModifier("Fast", "Bar sweeps 30% faster", lambda state: replace(state, bar_speed=state.bar_speed * 1.3)),
    BattleModifier("Reverse", "Bar sweeps the other way", lambda state: replace(state, reverse=not state.reverse)),
    BattleModifier("Pulse", "Bar pulses", lambda state: replace(state, pulsing=True)),
    BattleModifier(
        "Blur",
        "Reaction window shrinks by 20%",
        lambda state: replace(state, reaction_window=state.reaction_window * 0.8),
    ),
]


def get_battle_state(level: int) -> BattleState:
    """Apply the first ``min(level, len(MODIFIERS))`` modifiers to the base state."""

    state = BattleState()
    for modifier in MODIFIERS[: max(0, min(level, len(MODIFIERS)))]:
        state = modifier.apply(state)
        state = replace(state, modifiers=state.modifiers + (modifier.name,))
    return state
