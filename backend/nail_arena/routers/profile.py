from typing import List

from fastapi import APIRouter, Depends, status

from ..models import NailDefinition
from ..schemas import CaseInfo, CaseOpeningResponse, OwnedNailPublic, ProfilePublic, StripItemPublic
from ..security import get_current_user_id
from ..services import EconomyService
from ..services.loot import CaseTier
from ..state import get_economy

router = APIRouter(tags=["profile"])


@router.get("/profile", response_model=ProfilePublic)
async def read_profile(
    user_id: str = Depends(get_current_user_id),
    economy: EconomyService = Depends(get_economy),
) -> ProfilePublic:
    """Return the caller's balances, creating the profile on first access."""

    return ProfilePublic.from_profile(await economy.get_or_create_profile(user_id))


@router.get("/catalog", response_model=List[NailDefinition])
async def list_catalog(economy: EconomyService = Depends(get_economy)) -> List[NailDefinition]:
    return await economy.list_catalog()


@router.get("/cases", response_model=List[CaseInfo])
async def list_cases(economy: EconomyService = Depends(get_economy)) -> List[CaseInfo]:
    """Case tiers with their price and drop odds."""

    return [CaseInfo(tier=tier, cost=cost, odds=odds) for tier, cost, odds in await economy.list_cases()]


@router.post("/cases/{tier}/open", response_model=CaseOpeningResponse, status_code=status.HTTP_201_CREATED)
async def open_case(
    tier: CaseTier,
    user_id: str = Depends(get_current_user_id),
    economy: EconomyService = Depends(get_economy),
) -> CaseOpeningResponse:
    opening = await economy.open_case(user_id, tier)
    return CaseOpeningResponse(
        owned=OwnedNailPublic.from_view(opening.owned),
        strip=[StripItemPublic.from_item(item) for item in opening.strip],
        winner_index=opening.winner_index,
        profile=ProfilePublic.from_profile(opening.profile),
    )
