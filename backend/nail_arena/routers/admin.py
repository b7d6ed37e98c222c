from typing import List

from fastapi import APIRouter, Depends, status

from ..schemas import AdminLinkCreate, AdminLinkPublic
from ..security import get_current_user_id
from ..services import EconomyService
from ..state import get_economy

router = APIRouter(prefix="/admin", tags=["admin"])


@router.post("/links", response_model=AdminLinkPublic, status_code=status.HTTP_201_CREATED)
async def create_link(
    payload: AdminLinkCreate,
    user_id: str = Depends(get_current_user_id),
    economy: EconomyService = Depends(get_economy),
) -> AdminLinkPublic:
    link = await economy.create_admin_link(
        user_id,
        soul_amount=payload.soul_amount,
        dream_points_amount=payload.dream_points_amount,
        uses_remaining=payload.uses_remaining,
    )
    return AdminLinkPublic.from_link(link)


@router.get("/links", response_model=List[AdminLinkPublic])
async def list_links(
    user_id: str = Depends(get_current_user_id),
    economy: EconomyService = Depends(get_economy),
) -> List[AdminLinkPublic]:
    """Links created by the caller, newest first, with their claim counts."""

    return [AdminLinkPublic.from_summary(summary) for summary in await economy.list_admin_links(user_id)]
