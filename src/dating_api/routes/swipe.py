from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field

from dating_api.deps import current_user_id, get_matcher
from dating_api.services.matcher import SwipeMatcher

router = APIRouter()


class SwipeRequest(BaseModel):
    user: int = Field(gt=0)
    liked: bool = False


class SwipeResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    matched: bool
    match_id: Optional[int] = Field(default=None, alias="matchId")


@router.post("/swipe", response_model=SwipeResponse, response_model_exclude_none=True)
async def swipe(
    body: SwipeRequest,
    user_id: int = Depends(current_user_id),
    matcher: SwipeMatcher = Depends(get_matcher),
):
    result = await matcher.swipe(user_id, body.user, body.liked)
    return SwipeResponse(matched=result.matched, match_id=result.match_id)
