from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

Gender = Literal["male", "female", "other"]
GENDERS: tuple[str, ...] = ("male", "female", "other")


class Location(BaseModel):
    lat: float
    long: float


class Profile(BaseModel):
    id: int
    age: int
    name: str
    gender: str
    email: str
    password: str
    location: Location


class DiscoverFilters(BaseModel):
    min_age: int = 0
    max_age: int = 0
    genders: list[str] = []


class DiscoverProfile(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    age: int
    name: str
    gender: str
    distance_from_me: int = Field(default=0, alias="distanceFromMe")
    lat: float = Field(default=0.0, exclude=True)
    long: float = Field(default=0.0, exclude=True)
