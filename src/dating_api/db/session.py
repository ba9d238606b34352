import logging
from uuid import uuid4

import redis.asyncio as redis
from redis.exceptions import RedisError

from dating_api.errors import DatabaseError, NoValidSession

logger = logging.getLogger(__name__)


class SessionStore:
    """Session tokens kept in redis.

    ``session:{token}`` maps a token to its user id and ``user:{id}:session``
    points back at the live token, so logging in again revokes the old one.
    Both keys expire after ``ttl`` seconds.
    """

    def __init__(self, client: redis.Redis, ttl: int):
        self.client = client
        self.ttl = ttl

    async def create_session(self, user_id: int) -> str:
        token = str(uuid4())
        try:
            await self.client.set(f"session:{token}", str(user_id), ex=self.ttl)
            # SET ... GET swaps the pointer atomically, so each replaced token is
            # returned to exactly one login, which revokes it.
            previous = await self.client.set(f"user:{user_id}:session", token, ex=self.ttl, get=True)
            if previous:
                await self.client.delete(f"session:{previous}")
        except RedisError as e:
            logger.error(f"Error creating session for {user_id}: {e}", exc_info=True)
            raise DatabaseError() from e
        logger.info(f"Session created for {user_id}")
        return token

    async def resolve_session(self, token: str) -> int:
        try:
            user_id = await self.client.get(f"session:{token}")
        except RedisError as e:
            logger.error(f"Error finding session: {e}", exc_info=True)
            raise DatabaseError() from e
        if user_id is None:
            logger.info("No valid session for token")
            raise NoValidSession()
        return int(user_id)
