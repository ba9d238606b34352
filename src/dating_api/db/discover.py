import logging

import asyncpg

from dating_api.db.db import run_with_timeout, translate_errors
from dating_api.models.profile_model import GENDERS, DiscoverFilters, DiscoverProfile

logger = logging.getLogger(__name__)

# An age bound of 0 means "no bound".
LIST_CANDIDATES = """
    SELECT id, age, name, gender, lat, long FROM profiles
    WHERE id <> $1
      AND id <> ALL (SELECT unnest(swiped_on) FROM profiles WHERE id = $1)
      AND ($2 = 0 OR age <= $2)
      AND ($3 = 0 OR age >= $3)
      AND gender = ANY($4::text[])
"""


class DiscoveryStore:
    def __init__(self, pool: asyncpg.Pool, timeout: float):
        self.pool = pool
        self.timeout = timeout

    async def list_candidates(self, user_id: int, filters: DiscoverFilters) -> list[DiscoverProfile]:
        logger.info(f"Getting discover profiles for {user_id}")
        genders = filters.genders or list(GENDERS)
        rows = await run_with_timeout(
            self._fetch(user_id, filters.max_age, filters.min_age, genders), self.timeout
        )
        profiles = [
            DiscoverProfile(
                id=row["id"],
                age=row["age"],
                name=row["name"],
                gender=row["gender"],
                lat=row["lat"] or 0.0,
                long=row["long"] or 0.0,
            )
            for row in rows
        ]
        logger.info(f"Getting discover profiles complete: {len(profiles)} found")
        return profiles

    async def _fetch(self, user_id: int, max_age: int, min_age: int, genders: list[str]):
        async with translate_errors("list_candidates"):
            async with self.pool.acquire() as conn:
                return await conn.fetch(LIST_CANDIDATES, user_id, max_age, min_age, genders)
