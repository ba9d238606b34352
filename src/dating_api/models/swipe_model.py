from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel


class SwipeLedger(BaseModel):
    """Per-profile swipe state.

    ``swiped_on`` holds every profile this one has liked or passed on.
    ``swiped_yes_by`` holds profiles that liked this one and are still
    waiting for a like back.
    """

    id: int
    swiped_on: set[int] = set()
    swiped_yes_by: set[int] = set()


class Match(BaseModel):
    id: int
    user1_id: int
    user2_id: int
    matched_at: Optional[datetime] = None


class SwipeOutcome(str, Enum):
    MATCH = "match"
    PENDING_LIKE = "pending_like"
    PASS = "pass"


class SwipeResult(BaseModel):
    matched: bool
    match_id: Optional[int] = None
