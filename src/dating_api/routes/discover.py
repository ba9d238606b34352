from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field, field_validator

from dating_api.db.discover import DiscoveryStore
from dating_api.deps import current_user_id, get_discovery_store
from dating_api.models.profile_model import DiscoverFilters, DiscoverProfile, Gender, Location
from dating_api.services.discovery import sort_profiles_by_location

router = APIRouter()


class DiscoverRequest(BaseModel):
    min_age: Optional[int] = Field(default=None, alias="minAge", ge=18, le=150)
    max_age: Optional[int] = Field(default=None, alias="maxAge", ge=18, le=150)
    genders: list[Gender] = []
    lat: float
    long: float

    @field_validator("min_age", "max_age", mode="before")
    @classmethod
    def zero_means_unset(cls, value):
        return None if value == 0 else value


class DiscoverResponse(BaseModel):
    results: list[DiscoverProfile]


@router.post("/discover", response_model=DiscoverResponse)
async def discover(
    body: DiscoverRequest,
    user_id: int = Depends(current_user_id),
    discovery: DiscoveryStore = Depends(get_discovery_store),
):
    filters = DiscoverFilters(
        min_age=body.min_age or 0,
        max_age=body.max_age or 0,
        genders=list(body.genders),
    )
    results = await discovery.list_candidates(user_id, filters)
    sort_profiles_by_location(results, Location(lat=body.lat, long=body.long))
    return DiscoverResponse(results=results)
