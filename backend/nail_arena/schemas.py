from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from .models import AdminLink, Location, LocationChoice, NailDefinition, OwnedNailView, Profile, StoryProgress
from .services.abilities import Ability
from .services.combat import BattlePhase, BattleSession, HitQuality, TurnOutcome
from .services.difficulty import BattleState
from .services.economy import AdminLinkSummary, TradePreview
from .services.loot import CaseTier, StripItem
from .services.story import StoryView


class ProfilePublic(BaseModel):
    soul: int
    dream_points: int
    masks: int
    coins: int

    @classmethod
    def from_profile(cls, profile: Profile) -> "ProfilePublic":
        return cls(soul=profile.soul, dream_points=profile.dream_points, masks=profile.masks, coins=profile.coins)


class OwnedNailPublic(BaseModel):
    id: str
    is_dream: bool
    acquired_at: datetime
    sell_price: int
    nail: NailDefinition

    @classmethod
    def from_view(cls, view: OwnedNailView) -> "OwnedNailPublic":
        return cls(
            id=view.id,
            is_dream=view.is_dream,
            acquired_at=view.acquired_at,
            sell_price=view.sell_price,
            nail=view.nail,
        )


class CaseInfo(BaseModel):
    tier: CaseTier
    cost: int
    odds: Dict[str, float]


class StripItemPublic(BaseModel):
    nail_id: str
    name: str
    rarity: str
    is_dream: bool

    @classmethod
    def from_item(cls, item: StripItem) -> "StripItemPublic":
        return cls(nail_id=item.nail.id, name=item.nail.name, rarity=item.nail.rarity.value, is_dream=item.is_dream)


class CaseOpeningResponse(BaseModel):
    owned: OwnedNailPublic
    strip: List[StripItemPublic]
    winner_index: int
    profile: ProfilePublic


class SaleResponse(BaseModel):
    credited: int
    currency: str
    profile: ProfilePublic


class MaskPurchaseRequest(BaseModel):
    quantity: int = Field(default=1, ge=1)


class ConversionRequest(BaseModel):
    from_currency: str
    to_currency: str
    amount: int = Field(..., gt=0)


class ConversionResponse(BaseModel):
    debited: int
    credited: int
    profile: ProfilePublic


class RedeemRequest(BaseModel):
    code: str = Field(..., min_length=1, max_length=64)


class AdminLinkCreate(BaseModel):
    soul_amount: int = Field(default=100, ge=0)
    dream_points_amount: int = Field(default=50, ge=0)
    uses_remaining: Optional[int] = Field(default=None, ge=1)


class AdminLinkPublic(BaseModel):
    id: str
    code: str
    soul_amount: int
    dream_points_amount: int
    uses_remaining: Optional[int]
    claims: int
    created_at: datetime

    @classmethod
    def from_link(cls, link: AdminLink, claims: int = 0) -> "AdminLinkPublic":
        return cls(
            id=link.id,
            code=link.code,
            soul_amount=link.soul_amount,
            dream_points_amount=link.dream_points_amount,
            uses_remaining=link.uses_remaining,
            claims=claims,
            created_at=link.created_at,
        )

    @classmethod
    def from_summary(cls, summary: AdminLinkSummary) -> "AdminLinkPublic":
        return cls.from_link(summary.link, summary.claims)


class TradeCreate(BaseModel):
    owned_nail_id: str


class TradePublic(BaseModel):
    code: str
    is_dream: bool
    claimed: bool
    nail: NailDefinition
    created_at: datetime

    @classmethod
    def from_preview(cls, preview: TradePreview) -> "TradePublic":
        return cls(
            code=preview.link.code,
            is_dream=preview.link.is_dream,
            claimed=preview.link.is_claimed,
            nail=preview.nail,
            created_at=preview.link.created_at,
        )


class EnemyPresetPublic(BaseModel):
    level: int
    health: int
    damage: int
    soul_reward: int
    dream_points_reward: int


class BattleStatePublic(BaseModel):
    bar_speed: float
    reaction_window: float
    reverse: bool
    pulsing: bool
    modifiers: List[str]

    @classmethod
    def from_state(cls, state: BattleState) -> "BattleStatePublic":
        return cls(
            bar_speed=state.bar_speed,
            reaction_window=state.reaction_window,
            reverse=state.reverse,
            pulsing=state.pulsing,
            modifiers=list(state.modifiers),
        )


class BattleStart(BaseModel):
    owned_nail_id: str
    difficulty: int = Field(default=2, ge=1, le=5)
    is_dream: bool = False
    modifier_level: Optional[int] = Field(default=None, ge=0)


class TurnPublic(BaseModel):
    quality: HitQuality
    bar_value: float
    multiplier: float
    damage_dealt: int
    damage_taken: int
    enemy_attacked: bool
    dodged: bool
    damage_reduced: int
    reflected: int
    death_save_used: bool
    bonus_turn: bool
    boss_events: List[str]
    phase: BattlePhase
    player_health: int
    enemy_health: int

    @classmethod
    def from_outcome(cls, outcome: TurnOutcome) -> "TurnPublic":
        return cls(**vars(outcome))


class BattlePublic(BaseModel):
    id: str
    phase: BattlePhase
    difficulty: int
    is_dream: bool
    boss_id: Optional[str]
    nail: NailDefinition
    player_health: int
    player_max_health: int
    enemy_health: int
    enemy_max_health: int
    bar_position: float
    bar_direction: int
    bar_speed: float
    tick_interval_ms: int
    perfect_zone: List[float]
    good_zone: List[float]
    abilities: List[str]
    modifiers: Optional[BattleStatePublic] = None
    soul_gained: int = 0
    dream_points_gained: int = 0

    @classmethod
    def from_session(cls, session: BattleSession, tick_interval_ms: int) -> "BattlePublic":
        rules = session.rules
        zone_size = rules.perfect_zone_size_thread if session.has(Ability.THREAD) else rules.perfect_zone_size
        return cls(
            id=session.id,
            phase=session.phase,
            difficulty=session.preset.level,
            is_dream=session.is_dream,
            boss_id=session.boss_id,
            nail=session.nail,
            player_health=session.player_health,
            player_max_health=rules.player_max_health,
            enemy_health=session.enemy_health,
            enemy_max_health=session.preset.health,
            bar_position=session.bar.position,
            bar_direction=session.bar.direction,
            bar_speed=session.bar.speed,
            tick_interval_ms=tick_interval_ms,
            perfect_zone=[rules.perfect_zone_start, rules.perfect_zone_start + zone_size],
            good_zone=[rules.good_zone_start, rules.good_zone_end],
            abilities=sorted(ability.value for ability in session.abilities),
            modifiers=BattleStatePublic.from_state(session.modifiers) if session.modifiers else None,
            soul_gained=session.rewards.soul if session.rewards else 0,
            dream_points_gained=session.rewards.dream_points if session.rewards else 0,
        )


class AttackResponse(BaseModel):
    accepted: bool
    turn: Optional[TurnPublic] = None
    battle: BattlePublic


class CombatHistoryPublic(BaseModel):
    nail_id: Optional[str]
    won: bool
    is_dream: bool
    soul_gained: int
    dream_points_gained: int
    created_at: datetime


class ChoicePublic(BaseModel):
    index: int
    enabled: bool
    choice: LocationChoice


class StoryPublic(BaseModel):
    location: Location
    choices: List[ChoicePublic]
    progress: StoryProgress

    @classmethod
    def from_view(cls, view: StoryView) -> "StoryPublic":
        return cls(
            location=view.location,
            choices=[ChoicePublic(index=item.index, enabled=item.enabled, choice=item.choice) for item in view.choices],
            progress=view.progress,
        )


class StoryChoose(BaseModel):
    index: int = Field(..., ge=0)
    owned_nail_id: Optional[str] = None


class StoryChooseResponse(BaseModel):
    progress: StoryProgress
    battle: Optional[BattlePublic] = None
