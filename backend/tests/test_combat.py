"""Tests for the battle session state machine."""

from __future__ import annotations

import math
import random

import pytest

from nail_arena.models import NailDefinition, Rarity
from nail_arena.services.abilities import Ability
from nail_arena.services.combat import (
    BattlePhase,
    BattleSession,
    CombatRules,
    HitQuality,
    TimingBar,
    classify_hit,
)
from nail_arena.services.difficulty import EnemyPreset, get_battle_state, get_preset

NAIL = NailDefinition(
    id="channelled_nail",
    name="Channelled Nail",
    rarity=Rarity.RARE,
    base_damage=20,
    sell_value=45,
    dream_sell_value=110,
    order_index=3,
)
TOUGH = EnemyPreset(level=2, health=10_000, damage=15, soul_reward=75, dream_points_reward=10)
FRAGILE = EnemyPreset(level=2, health=1, damage=15, soul_reward=75, dream_points_reward=10)
LETHAL = EnemyPreset(level=5, health=10_000, damage=200, soul_reward=300, dream_points_reward=50)
RULES = CombatRules()


def make_session(seed: int = 0, **overrides) -> BattleSession:
    params = dict(
        user_id="player",
        owned_nail_id="owned-1",
        nail=NAIL,
        preset=get_preset(2),
        rules=RULES,
        rng=random.Random(seed),
    )
    params.update(overrides)
    return BattleSession(**params)


class AlwaysHigh(random.Random):
    """Random whose ``random()`` always lands above 0.7."""

    def random(self) -> float:
        return 0.9


class TestClassifyHit:
    @pytest.mark.parametrize(
        "value, quality, multiplier",
        [
            (45, HitQuality.PERFECT, 2.5),
            (50, HitQuality.PERFECT, 2.5),
            (55, HitQuality.PERFECT, 2.5),
            (35, HitQuality.GOOD, 1.5),
            (57, HitQuality.GOOD, 1.5),
            (65, HitQuality.GOOD, 1.5),
            (34.9, HitQuality.MISS, 0.5),
            (65.1, HitQuality.MISS, 0.5),
            (0, HitQuality.MISS, 0.5),
            (100, HitQuality.MISS, 0.5),
        ],
    )
    def test_zones(self, value, quality, multiplier):
        assert classify_hit(value, RULES) == (quality, multiplier)

    def test_thread_widens_perfect_zone(self):
        assert classify_hit(60, RULES, has_thread=True)[0] is HitQuality.PERFECT
        assert classify_hit(60, RULES)[0] is HitQuality.GOOD

    def test_zone_bounds_are_configurable(self):
        rules = CombatRules(perfect_zone_start=40, perfect_zone_size=20, perfect_multiplier=2.0)
        assert classify_hit(41, rules) == (HitQuality.PERFECT, 2.0)


class TestTimingBar:
    def test_bar_bounces_off_both_bounds(self):
        bar = TimingBar(speed=30)
        positions = [bar.tick() for _ in range(8)]
        assert positions == [30, 60, 90, 100, 70, 40, 10, 0]
        assert bar.direction == 1

    def test_reverse_bar_starts_at_top(self):
        bar = TimingBar(speed=30, reverse=True)
        assert (bar.position, bar.direction) == (100, -1)
        assert bar.tick() == 70

    def test_session_applies_modifier_state(self):
        session = make_session(modifiers=get_battle_state(2))
        assert session.bar.speed == pytest.approx(RULES.bar_speed * 1.3)
        assert session.bar.position == 100

    def test_tick_is_ignored_while_resolving(self):
        session = make_session()
        session.phase = BattlePhase.RESOLVING
        assert session.tick() == 0


class TestTurnResolution:
    def test_perfect_hit_grants_bonus_turn(self):
        """Worked example: level 2, base damage 20, bar at 50."""
        session = make_session()
        outcome = session.attack(50)

        assert outcome.quality is HitQuality.PERFECT
        assert outcome.multiplier == 2.5
        assert 50 <= outcome.damage_dealt <= 72
        assert session.enemy_health == 100 - outcome.damage_dealt
        assert outcome.bonus_turn is True
        assert outcome.enemy_attacked is False
        assert session.player_health == 100
        assert session.phase is BattlePhase.ACTIVE
        assert session.bar.position == 0

    def test_attack_is_ignored_unless_timing_is_active(self):
        session = make_session()
        session.phase = BattlePhase.RESOLVING
        assert session.attack(50) is None
        assert session.turns == []

    def test_good_hit_triggers_counter_attack(self):
        session = make_session(preset=TOUGH)
        outcome = session.attack(40)

        assert outcome.quality is HitQuality.GOOD
        assert outcome.enemy_attacked is True
        assert 15 <= outcome.damage_taken <= 22
        assert session.player_health == 100 - outcome.damage_taken
        assert session.phase is BattlePhase.ACTIVE

    def test_lethal_hit_wins_without_counter_attack(self):
        session = make_session(preset=FRAGILE)
        outcome = session.attack(0)

        assert session.phase is BattlePhase.VICTORY
        assert outcome.enemy_attacked is False
        assert session.player_health == 100
        assert 75 <= session.rewards.soul < 95
        assert session.rewards.dream_points == 0

    def test_dream_victory_awards_dream_points(self):
        session = make_session(preset=FRAGILE, is_dream=True)
        session.attack(0)
        assert 10 <= session.rewards.dream_points < 20

    def test_soul_bonus_is_added_to_rewards(self):
        session = make_session(preset=FRAGILE, soul_bonus=12)
        session.attack(0)
        assert 87 <= session.rewards.soul < 107

    def test_lethal_damage_without_save_is_defeat(self):
        session = make_session(preset=LETHAL)
        outcome = session.attack(0)

        assert session.phase is BattlePhase.DEFEAT
        assert outcome.player_health == 0
        assert session.rewards.soul == 0
        assert session.attack(50) is None


class TestAbilities:
    def test_death_save_fires_once(self):
        session = make_session(preset=LETHAL, abilities=frozenset({Ability.DOUBLE_JUMP}))

        first = session.attack(0)
        assert first.death_save_used is True
        assert session.player_health == 30
        assert session.phase is BattlePhase.ACTIVE

        second = session.attack(0)
        assert second.death_save_used is False
        assert session.player_health == 0
        assert session.phase is BattlePhase.DEFEAT

    def test_dash_can_dodge_everything(self):
        rules = CombatRules(dodge_chance=1.0)
        session = make_session(preset=TOUGH, rules=rules, abilities=frozenset({Ability.DASH}))
        outcome = session.attack(0)

        assert outcome.dodged is True
        assert outcome.damage_taken == 0
        assert session.player_health == 100

    def test_wall_jump_reduces_damage(self):
        plain = make_session(seed=4, preset=TOUGH).attack(0)
        reduced = make_session(seed=4, preset=TOUGH, abilities=frozenset({Ability.WALL_JUMP})).attack(0)

        assert reduced.damage_reduced == math.floor(plain.damage_taken * 0.2)
        assert reduced.damage_taken == plain.damage_taken - reduced.damage_reduced

    def test_vengeful_spirit_reflects_before_player_is_hit(self):
        session = make_session(seed=2, preset=TOUGH, abilities=frozenset({Ability.VENGEFUL_SPIRIT}))
        outcome = session.attack(0)

        assert outcome.reflected == math.floor(outcome.damage_taken * 0.25)
        assert session.enemy_health == TOUGH.health - outcome.damage_dealt - outcome.reflected

    def test_lethal_reflection_wins_without_player_damage(self):
        rules = CombatRules(reflect_ratio=1.0)
        session = make_session(rules=rules, abilities=frozenset({Ability.VENGEFUL_SPIRIT}))
        session.enemy_health = 16
        outcome = session.attack(0)

        assert session.phase is BattlePhase.VICTORY
        assert outcome.reflected > 0
        assert outcome.damage_taken == 0
        assert session.player_health == 100

    def test_abilities_apply_in_order(self):
        rules = CombatRules(dodge_chance=1.0)
        abilities = frozenset({Ability.DASH, Ability.WALL_JUMP, Ability.VENGEFUL_SPIRIT})
        outcome = make_session(preset=TOUGH, rules=rules, abilities=abilities).attack(0)

        assert outcome.dodged is True
        assert outcome.damage_reduced == 0
        assert outcome.reflected == 0


class TestBosses:
    def test_false_knight_armor_cuts_player_damage(self):
        plain = make_session(seed=5).attack(50)
        armored = make_session(seed=5, boss_id="false_knight").attack(50)

        assert armored.damage_dealt == math.floor(plain.damage_dealt * 0.7)
        assert "heavy_armor" in armored.boss_events

    def test_hornet_punishes_misses(self):
        plain = make_session(seed=3, preset=TOUGH).attack(0)
        hornet = make_session(seed=3, preset=TOUGH, boss_id="hornet").attack(0)

        assert hornet.damage_taken == math.floor(plain.damage_taken * 1.5)
        assert "counterattack" in hornet.boss_events

    def test_hornet_ignores_good_hits(self):
        plain = make_session(seed=3, preset=TOUGH).attack(40)
        hornet = make_session(seed=3, preset=TOUGH, boss_id="hornet").attack(40)
        assert hornet.damage_taken == plain.damage_taken

    def test_mantis_lords_strike_three_times(self):
        plain = make_session(seed=8, preset=TOUGH).attack(0)
        mantis = make_session(seed=8, preset=TOUGH, boss_id="mantis_lords").attack(0)
        assert mantis.damage_taken == 3 * math.floor(plain.damage_taken * 0.4)

    def test_hollow_knight_hits_harder(self):
        plain = make_session(seed=9, preset=TOUGH).attack(0)
        final = make_session(seed=9, preset=TOUGH, boss_id="hollow_knight").attack(0)
        assert final.damage_taken == math.floor(plain.damage_taken * 1.2)

    def test_soul_master_teleport_has_no_numeric_effect(self):
        session = make_session(preset=TOUGH, boss_id="soul_master", rng=AlwaysHigh(1))
        outcome = session.attack(50)

        assert outcome.boss_events == ["teleport"]
        assert outcome.bonus_turn is True
