from fastapi import Depends, Header, Request

from dating_api.config import Settings
from dating_api.db.discover import DiscoveryStore
from dating_api.db.profile import ProfileStore
from dating_api.db.session import SessionStore
from dating_api.errors import StoreError
from dating_api.services.matcher import SwipeMatcher


class MissingSession(StoreError):
    message = "invalid request"
    status_code = 400


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_profile_store(request: Request) -> ProfileStore:
    return request.app.state.profile_store


def get_discovery_store(request: Request) -> DiscoveryStore:
    return request.app.state.discovery_store


def get_session_store(request: Request) -> SessionStore:
    return request.app.state.session_store


def get_matcher(request: Request) -> SwipeMatcher:
    return request.app.state.matcher


async def current_user_id(
    session: str | None = Header(default=None),
    sessions: SessionStore = Depends(get_session_store),
) -> int:
    if not session:
        raise MissingSession()
    return await sessions.resolve_session(session)
