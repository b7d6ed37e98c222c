from fastapi import APIRouter, Depends, status

from ..schemas import OwnedNailPublic, TradeCreate, TradePublic
from ..security import get_current_user_id
from ..services import EconomyService
from ..services.economy import TradePreview
from ..state import get_economy

router = APIRouter(prefix="/trades", tags=["trades"])


@router.post("", response_model=TradePublic, status_code=status.HTTP_201_CREATED)
async def create_trade(
    payload: TradeCreate,
    user_id: str = Depends(get_current_user_id),
    economy: EconomyService = Depends(get_economy),
) -> TradePublic:
    """Escrow an owned nail behind a one-shot code."""

    link = await economy.create_trade(user_id, payload.owned_nail_id)
    return TradePublic.from_preview(TradePreview(link=link, nail=await economy.get_definition(link.nail_id)))


@router.get("/{code}", response_model=TradePublic)
async def get_trade(
    code: str,
    _: str = Depends(get_current_user_id),
    economy: EconomyService = Depends(get_economy),
) -> TradePublic:
    return TradePublic.from_preview(await economy.get_trade(code))


@router.post("/{code}/claim", response_model=OwnedNailPublic)
async def claim_trade(
    code: str,
    user_id: str = Depends(get_current_user_id),
    economy: EconomyService = Depends(get_economy),
) -> OwnedNailPublic:
    return OwnedNailPublic.from_view(await economy.claim_trade(user_id, code))
