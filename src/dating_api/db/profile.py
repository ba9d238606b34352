import logging

import asyncpg

from dating_api.db.db import run_with_timeout, translate_errors
from dating_api.errors import LoginFailed
from dating_api.models.profile_model import Location, Profile

logger = logging.getLogger(__name__)


def _profile_from_row(row: asyncpg.Record) -> Profile:
    return Profile(
        id=row["id"],
        age=row["age"],
        name=row["name"],
        gender=row["gender"],
        email=row["email"],
        password=row["password"],
        location=Location(lat=row["lat"], long=row["long"]),
    )


class ProfileStore:
    def __init__(self, pool: asyncpg.Pool, timeout: float):
        self.pool = pool
        self.timeout = timeout

    async def create_profile(
        self, age: int, name: str, gender: str, email: str, password: str, location: Location
    ) -> Profile:
        logger.info("Creating profile")
        row = await run_with_timeout(
            self._fetchrow(
                "create_profile",
                """INSERT INTO profiles (age, name, gender, email, password, lat, long)
                   VALUES ($1, $2, $3, $4, $5, $6, $7)
                   RETURNING id, age, name, gender, email, password, lat, long
                """,
                age, name, gender, email, password, location.lat, location.long,
            ),
            self.timeout,
        )
        logger.info(f"Creating profile complete: id={row['id']}")
        return _profile_from_row(row)

    async def login(self, email: str, password: str) -> int:
        """Return the id of the profile owning these credentials."""
        logger.info("Logging in")
        row = await run_with_timeout(
            self._fetchrow(
                "login",
                "SELECT id FROM profiles WHERE email = $1 AND password = $2",
                email, password,
            ),
            self.timeout,
        )
        if row is None:
            logger.info(f"No profile for {email}")
            raise LoginFailed()
        return row["id"]

    async def _fetchrow(self, operation: str, query: str, *args):
        async with translate_errors(operation):
            async with self.pool.acquire() as conn:
                return await conn.fetchrow(query, *args)
