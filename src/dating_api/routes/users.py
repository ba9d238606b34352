import logging
import random
from uuid import uuid4

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from dating_api.config import Settings
from dating_api.db.profile import ProfileStore
from dating_api.db.session import SessionStore
from dating_api.deps import get_profile_store, get_session_store, get_settings
from dating_api.models.profile_model import GENDERS, Location, Profile

logger = logging.getLogger(__name__)

router = APIRouter()

NAME_PARTS = (
    "amber", "brisk", "cedar", "dune", "ember", "fable", "gale", "harbor",
    "iris", "juniper", "kestrel", "lumen", "maple", "nova", "opal", "pine",
)
DEFAULT_LOCATION = Location(lat=-0.08768348444653988, long=51.508050972200834)


class LoginRequest(BaseModel):
    email: str
    password: str


class LoginResponse(BaseModel):
    token: str


def generate_name() -> str:
    return f"{random.choice(NAME_PARTS)}-{random.choice(NAME_PARTS)}-{random.randint(1, 999)}"


@router.get("/user/create", response_model=Profile)
async def create_user(
    profiles: ProfileStore = Depends(get_profile_store),
    settings: Settings = Depends(get_settings),
):
    name = generate_name()
    profile = await profiles.create_profile(
        age=random.randint(18, 99),
        name=name,
        gender=random.choice(GENDERS),
        email=f"{name}-{uuid4().hex[:8]}@{settings.email_domain}",
        password=uuid4().hex,
        location=DEFAULT_LOCATION,
    )
    return profile


@router.post("/login", response_model=LoginResponse)
async def login(
    body: LoginRequest,
    profiles: ProfileStore = Depends(get_profile_store),
    sessions: SessionStore = Depends(get_session_store),
):
    user_id = await profiles.login(body.email, body.password)
    token = await sessions.create_session(user_id)
    logger.info(f"User {user_id} logged in")
    return LoginResponse(token=token)
