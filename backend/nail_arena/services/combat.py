"""Turn resolution for timing-bar battles.

A :class:`BattleSession` holds everything one battle needs and nothing else:
no store access happens here. The battle service drives the bar, feeds
attacks in and persists the outcome once the session reaches a terminal
phase.
"""

from __future__ import annotations

import math
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, List, Optional, Tuple

from ..config import Settings, settings
from ..models import NailDefinition
from ..models.base import new_id
from .abilities import Ability
from .difficulty import BattleState, EnemyPreset

BAR_MIN = 0.0
BAR_MAX = 100.0


class BattlePhase(str, Enum):
    ACTIVE = "active"
    RESOLVING = "resolving"
    VICTORY = "victory"
    DEFEAT = "defeat"


class HitQuality(str, Enum):
    PERFECT = "perfect"
    GOOD = "good"
    MISS = "miss"


@dataclass(frozen=True)
class CombatRules:
    bar_speed: float = 2.75
    perfect_zone_start: float = 45.0
    perfect_zone_size: float = 10.0
    perfect_zone_size_thread: float = 15.0
    good_zone_start: float = 35.0
    good_zone_end: float = 65.0
    perfect_multiplier: float = 2.5
    good_multiplier: float = 1.5
    miss_multiplier: float = 0.5
    player_max_health: int = 100
    player_damage_roll: int = 10
    enemy_damage_roll: int = 8
    soul_reward_roll: int = 20
    dream_reward_roll: int = 10
    dodge_chance: float = 0.15
    damage_reduction: float = 0.20
    reflect_ratio: float = 0.25
    death_save_health: int = 30

    @classmethod
    def from_settings(cls, config: Settings | None = None) -> "CombatRules":
        config = config or settings
        return cls(**{name: getattr(config, name) for name in cls.__dataclass_fields__})


def classify_hit(value: float, rules: CombatRules, has_thread: bool = False) -> Tuple[HitQuality, float]:
    zone_size = rules.perfect_zone_size_thread if has_thread else rules.perfect_zone_size
    if rules.perfect_zone_start <= value <= rules.perfect_zone_start + zone_size:
        return HitQuality.PERFECT, rules.perfect_multiplier
    if rules.good_zone_start <= value <= rules.good_zone_end:
        return HitQuality.GOOD, rules.good_multiplier
    return HitQuality.MISS, rules.miss_multiplier


@dataclass
class TimingBar:
    """Oscillating value in ``[0, 100]`` that bounces off both bounds."""

    speed: float
    reverse: bool = False
    position: float = BAR_MIN
    direction: int = 1

    def __post_init__(self) -> None:
        self.reset()

    def reset(self) -> None:
        if self.reverse:
            self.position, self.direction = BAR_MAX, -1
        else:
            self.position, self.direction = BAR_MIN, 1

    def tick(self) -> float:
        next_position = self.position + self.speed * self.direction
        if next_position >= BAR_MAX or next_position <= BAR_MIN:
            self.direction = -self.direction
        self.position = max(BAR_MIN, min(BAR_MAX, next_position))
        return self.position


@dataclass
class TurnOutcome:
    quality: HitQuality
    bar_value: float
    multiplier: float
    damage_dealt: int
    damage_taken: int = 0
    enemy_attacked: bool = False
    dodged: bool = False
    damage_reduced: int = 0
    reflected: int = 0
    death_save_used: bool = False
    bonus_turn: bool = False
    boss_events: List[str] = field(default_factory=list)
    phase: BattlePhase = BattlePhase.ACTIVE
    player_health: int = 0
    enemy_health: int = 0


@dataclass
class BattleRewards:
    soul: int = 0
    dream_points: int = 0


@dataclass
class BattleSession:
    user_id: str
    owned_nail_id: str
    nail: NailDefinition
    preset: EnemyPreset
    is_dream: bool = False
    boss_id: Optional[str] = None
    abilities: FrozenSet[Ability] = frozenset()
    modifiers: Optional[BattleState] = None
    soul_bonus: int = 0
    rules: CombatRules = field(default_factory=CombatRules.from_settings)
    rng: random.Random = field(default_factory=random.SystemRandom, repr=False)
    id: str = field(default_factory=new_id)
    phase: BattlePhase = BattlePhase.ACTIVE
    player_health: int = 0
    enemy_health: int = 0
    death_save_used: bool = False
    rewards: Optional[BattleRewards] = None
    turns: List[TurnOutcome] = field(default_factory=list)
    bar: TimingBar = field(init=False)

    def __post_init__(self) -> None:
        self.player_health = self.player_health or self.rules.player_max_health
        self.enemy_health = self.enemy_health or self.preset.health
        speed = self.rules.bar_speed * (self.modifiers.bar_speed if self.modifiers else 1.0)
        self.bar = TimingBar(speed=speed, reverse=bool(self.modifiers and self.modifiers.reverse))

    @property
    def timing_active(self) -> bool:
        return self.phase is BattlePhase.ACTIVE

    @property
    def finished(self) -> bool:
        return self.phase in (BattlePhase.VICTORY, BattlePhase.DEFEAT)

    @property
    def won(self) -> bool:
        return self.phase is BattlePhase.VICTORY

    def has(self, ability: Ability) -> bool:
        return ability in self.abilities

    def tick(self) -> float:
        if self.timing_active:
            self.bar.tick()
        return self.bar.position

    def attack(self, bar_value: float | None = None) -> Optional[TurnOutcome]:
        """Resolve one player attack at ``bar_value`` (the current bar by default).

        Returns None when the timing bar is not running.
        """

        if not self.timing_active:
            return None
        self.phase = BattlePhase.RESOLVING
        value = self.bar.position if bar_value is None else bar_value

        quality, multiplier = classify_hit(value, self.rules, self.has(Ability.THREAD))
        roll = self.rng.randrange(self.rules.player_damage_roll)
        damage = math.floor((self.nail.base_damage + roll) * multiplier)
        outcome = TurnOutcome(quality=quality, bar_value=value, multiplier=multiplier, damage_dealt=0)

        damage = self._boss_pre_modifier(damage, quality, outcome)
        outcome.damage_dealt = damage
        self.enemy_health = max(0, self.enemy_health - damage)

        if self.enemy_health == 0:
            self._finish(BattlePhase.VICTORY)
        elif quality is HitQuality.PERFECT:
            outcome.bonus_turn = True
            self._continue()
        else:
            self._enemy_turn(quality, outcome)

        outcome.phase = self.phase
        outcome.player_health = self.player_health
        outcome.enemy_health = self.enemy_health
        self.turns.append(outcome)
        return outcome

    def forfeit(self) -> None:
        """End an unfinished battle as a defeat with no rewards."""

        if not self.finished:
            self._finish(BattlePhase.DEFEAT)

    def _boss_pre_modifier(self, damage: int, quality: HitQuality, outcome: TurnOutcome) -> int:
        if self.boss_id == "false_knight":
            outcome.boss_events.append("heavy_armor")
            return math.floor(damage * 0.7)
        if self.boss_id == "hornet" and quality is HitQuality.MISS:
            outcome.boss_events.append("counterattack")
        elif self.boss_id == "mantis_lords":
            outcome.boss_events.append("three_strikes")
        elif self.boss_id == "soul_master" and self.rng.random() > 0.7:
            outcome.boss_events.append("teleport")
        elif self.boss_id == "hollow_knight":
            outcome.boss_events.append("final_boss")
        return damage

    def _enemy_damage(self, quality: HitQuality) -> int:
        damage = self.preset.damage + self.rng.randrange(self.rules.enemy_damage_roll)
        if self.boss_id == "hornet" and quality is HitQuality.MISS:
            return math.floor(damage * 1.5)
        if self.boss_id == "mantis_lords":
            return 3 * math.floor(damage * 0.4)
        if self.boss_id == "hollow_knight":
            return math.floor(damage * 1.2)
        return damage

    def _enemy_turn(self, quality: HitQuality, outcome: TurnOutcome) -> None:
        outcome.enemy_attacked = True
        damage = self._enemy_damage(quality)

        if self.has(Ability.DASH) and self.rng.random() < self.rules.dodge_chance:
            outcome.dodged = True
            damage = 0

        if self.has(Ability.WALL_JUMP) and damage > 0:
            outcome.damage_reduced = math.floor(damage * self.rules.damage_reduction)
            damage -= outcome.damage_reduced

        if self.has(Ability.VENGEFUL_SPIRIT) and damage > 0:
            outcome.reflected = math.floor(damage * self.rules.reflect_ratio)
            self.enemy_health = max(0, self.enemy_health - outcome.reflected)
            if self.enemy_health == 0:
                self._finish(BattlePhase.VICTORY)
                return

        outcome.damage_taken = damage
        self.player_health = max(0, self.player_health - damage)

        if self.player_health == 0 and self.has(Ability.DOUBLE_JUMP) and not self.death_save_used:
            self.player_health = self.rules.death_save_health
            self.death_save_used = True
            outcome.death_save_used = True

        if self.player_health == 0:
            self._finish(BattlePhase.DEFEAT)
        else:
            self._continue()

    def _continue(self) -> None:
        self.bar.reset()
        self.phase = BattlePhase.ACTIVE

    def _finish(self, phase: BattlePhase) -> None:
        self.phase = phase
        if phase is BattlePhase.VICTORY:
            self.rewards = self._roll_rewards()
        else:
            self.rewards = BattleRewards()

    def _roll_rewards(self) -> BattleRewards:
        soul = self.preset.soul_reward + self.rng.randrange(self.rules.soul_reward_roll) + self.soul_bonus
        dream_points = 0
        if self.is_dream:
            dream_points = self.preset.dream_points_reward + self.rng.randrange(self.rules.dream_reward_roll)
        return BattleRewards(soul=soul, dream_points=dream_points)
