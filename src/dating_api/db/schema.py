import logging

import asyncpg

logger = logging.getLogger(__name__)

SCHEMA = """
    CREATE TABLE IF NOT EXISTS profiles (
        id INTEGER GENERATED ALWAYS AS IDENTITY PRIMARY KEY,
        email TEXT NOT NULL UNIQUE,
        password TEXT NOT NULL,
        age INTEGER NOT NULL,
        name TEXT NOT NULL,
        gender TEXT NOT NULL,
        swiped_on INTEGER[] NOT NULL DEFAULT '{}',
        swiped_yes_by INTEGER[] NOT NULL DEFAULT '{}',
        lat DOUBLE PRECISION,
        long DOUBLE PRECISION,
        created_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP
    );

    CREATE TABLE IF NOT EXISTS matches (
        id INTEGER GENERATED ALWAYS AS IDENTITY PRIMARY KEY,
        user1_id INTEGER NOT NULL REFERENCES profiles (id),
        user2_id INTEGER NOT NULL REFERENCES profiles (id),
        matched_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP
    );

    CREATE UNIQUE INDEX IF NOT EXISTS matches_pair_idx
        ON matches (LEAST(user1_id, user2_id), GREATEST(user1_id, user2_id));
"""


async def apply_schema(pool: asyncpg.Pool):
    async with pool.acquire() as conn:
        async with conn.transaction():
            await conn.execute(SCHEMA)
    logger.info("Schema applied.")
