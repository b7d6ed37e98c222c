from typing import List

from fastapi import APIRouter, Depends, Response, status

from ..schemas import OwnedNailPublic, ProfilePublic, SaleResponse
from ..security import get_current_user_id
from ..services import EconomyService
from ..state import get_economy

router = APIRouter(prefix="/inventory", tags=["inventory"])


@router.get("", response_model=List[OwnedNailPublic])
async def list_inventory(
    user_id: str = Depends(get_current_user_id),
    economy: EconomyService = Depends(get_economy),
) -> List[OwnedNailPublic]:
    return [OwnedNailPublic.from_view(view) for view in await economy.list_inventory(user_id)]


@router.post("/{owned_id}/sell", response_model=SaleResponse)
async def sell_nail(
    owned_id: str,
    user_id: str = Depends(get_current_user_id),
    economy: EconomyService = Depends(get_economy),
) -> SaleResponse:
    sale = await economy.sell_nail(user_id, owned_id)
    return SaleResponse(credited=sale.credited, currency=sale.currency, profile=ProfilePublic.from_profile(sale.profile))


@router.delete("/{owned_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_nail(
    owned_id: str,
    user_id: str = Depends(get_current_user_id),
    economy: EconomyService = Depends(get_economy),
) -> Response:
    """Discard a nail without compensation."""

    await economy.delete_nail(user_id, owned_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
