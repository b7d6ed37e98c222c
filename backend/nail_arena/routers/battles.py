from typing import List

from fastapi import APIRouter, Depends, Query, status

from ..config import settings
from ..errors import NotFoundError
from ..schemas import (
    AttackResponse,
    BattlePublic,
    BattleStart,
    BattleStatePublic,
    CombatHistoryPublic,
    EnemyPresetPublic,
    TurnPublic,
)
from ..security import get_current_user_id
from ..services import BattleService
from ..services.difficulty import get_battle_state, list_presets
from ..state import get_battles

router = APIRouter(prefix="/battles", tags=["battles"])


@router.get("/difficulties", response_model=List[EnemyPresetPublic])
async def list_difficulties() -> List[EnemyPresetPublic]:
    return [EnemyPresetPublic(**vars(preset)) for preset in list_presets()]


@router.get("/modifiers/{level}", response_model=BattleStatePublic)
async def read_modifiers(level: int) -> BattleStatePublic:
    """Timing-bar perturbations applied at ``level``."""

    return BattleStatePublic.from_state(get_battle_state(level))


@router.post("", response_model=BattlePublic, status_code=status.HTTP_201_CREATED)
async def start_battle(
    payload: BattleStart,
    user_id: str = Depends(get_current_user_id),
    battles: BattleService = Depends(get_battles),
) -> BattlePublic:
    """Spend a mask and start a battle with the selected nail."""

    session = await battles.start_battle(
        user_id,
        payload.owned_nail_id,
        payload.difficulty,
        is_dream=payload.is_dream,
        modifier_level=payload.modifier_level,
    )
    return BattlePublic.from_session(session, settings.tick_interval_ms)


@router.get("/current", response_model=BattlePublic)
async def read_current_battle(
    user_id: str = Depends(get_current_user_id),
    battles: BattleService = Depends(get_battles),
) -> BattlePublic:
    session = battles.get_current(user_id)
    if session is None:
        raise NotFoundError("No battle in progress")
    return BattlePublic.from_session(session, settings.tick_interval_ms)


@router.delete("/current", response_model=BattlePublic)
async def abandon_battle(
    user_id: str = Depends(get_current_user_id),
    battles: BattleService = Depends(get_battles),
) -> BattlePublic:
    """Leave the current battle as a defeat. The spent mask is not refunded."""

    session = await battles.abandon(user_id)
    return BattlePublic.from_session(session, settings.tick_interval_ms)


@router.post("/current/attack", response_model=AttackResponse)
async def attack(
    user_id: str = Depends(get_current_user_id),
    battles: BattleService = Depends(get_battles),
) -> AttackResponse:
    """Strike at the bar's current position.

    ``accepted`` is false when the previous strike is still resolving.
    """

    session = battles.get_current(user_id)
    if session is None:
        raise NotFoundError("No battle in progress")
    outcome = await battles.attack(user_id)
    return AttackResponse(
        accepted=outcome is not None,
        turn=TurnPublic.from_outcome(outcome) if outcome else None,
        battle=BattlePublic.from_session(session, settings.tick_interval_ms),
    )


@router.get("/history", response_model=List[CombatHistoryPublic])
async def list_history(
    limit: int = Query(default=50, ge=1, le=200),
    user_id: str = Depends(get_current_user_id),
    battles: BattleService = Depends(get_battles),
) -> List[CombatHistoryPublic]:
    records = await battles.list_history(user_id, limit=limit)
    return [CombatHistoryPublic(**record.model_dump(exclude={"id", "user_id"})) for record in records]
