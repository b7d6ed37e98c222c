from fastapi import APIRouter, Depends

from ..schemas import ConversionRequest, ConversionResponse, MaskPurchaseRequest, ProfilePublic, RedeemRequest
from ..security import get_current_user_id
from ..services import EconomyService
from ..state import get_economy

router = APIRouter(prefix="/shop", tags=["shop"])


@router.post("/masks", response_model=ProfilePublic)
async def buy_masks(
    payload: MaskPurchaseRequest,
    user_id: str = Depends(get_current_user_id),
    economy: EconomyService = Depends(get_economy),
) -> ProfilePublic:
    return ProfilePublic.from_profile(await economy.buy_masks(user_id, payload.quantity))


@router.post("/convert", response_model=ConversionResponse)
async def convert_currency(
    payload: ConversionRequest,
    user_id: str = Depends(get_current_user_id),
    economy: EconomyService = Depends(get_economy),
) -> ConversionResponse:
    result = await economy.convert(user_id, payload.from_currency, payload.to_currency, payload.amount)
    return ConversionResponse(
        debited=result.debited,
        credited=result.credited,
        profile=ProfilePublic.from_profile(result.profile),
    )


@router.post("/forfeit-dream-point", response_model=ProfilePublic)
async def forfeit_dream_point(
    user_id: str = Depends(get_current_user_id),
    economy: EconomyService = Depends(get_economy),
) -> ProfilePublic:
    return ProfilePublic.from_profile(await economy.forfeit_dream_point(user_id))


@router.post("/redeem", response_model=ProfilePublic)
async def redeem_code(
    payload: RedeemRequest,
    user_id: str = Depends(get_current_user_id),
    economy: EconomyService = Depends(get_economy),
) -> ProfilePublic:
    """Redeem an admin reward code."""

    return ProfilePublic.from_profile(await economy.redeem_admin_code(user_id, payload.code))
