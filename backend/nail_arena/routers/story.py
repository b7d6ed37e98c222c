from fastapi import APIRouter, Depends

from ..config import settings
from ..schemas import BattlePublic, StoryChoose, StoryChooseResponse, StoryPublic
from ..security import get_current_user_id
from ..services import StoryService
from ..state import get_story

router = APIRouter(prefix="/story", tags=["story"])


@router.get("", response_model=StoryPublic)
async def read_story(
    user_id: str = Depends(get_current_user_id),
    story: StoryService = Depends(get_story),
) -> StoryPublic:
    """Current location with each choice flagged as enabled or locked."""

    return StoryPublic.from_view(await story.view(user_id))


@router.post("/choose", response_model=StoryChooseResponse)
async def choose(
    payload: StoryChoose,
    user_id: str = Depends(get_current_user_id),
    story: StoryService = Depends(get_story),
) -> StoryChooseResponse:
    result = await story.choose(user_id, payload.index, payload.owned_nail_id)
    battle = BattlePublic.from_session(result.battle, settings.tick_interval_ms) if result.battle else None
    return StoryChooseResponse(progress=result.progress, battle=battle)


@router.post("/reset", response_model=StoryPublic)
async def reset(
    user_id: str = Depends(get_current_user_id),
    story: StoryService = Depends(get_story),
) -> StoryPublic:
    await story.reset(user_id)
    return StoryPublic.from_view(await story.view(user_id))
