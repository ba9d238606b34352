import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import asyncpg

from dating_api.db.db import translate_errors
from dating_api.errors import SwipeRequestInvalid
from dating_api.models.swipe_model import Match, SwipeLedger

logger = logging.getLogger(__name__)

# Rows are locked in id order, so two swipes between the same pair queue up
# behind each other instead of deadlocking.
LOAD_LEDGER_PAIR = """
    SELECT id, swiped_on, swiped_yes_by FROM profiles
    WHERE id = ANY($1::int[])
    ORDER BY id
    FOR UPDATE
"""

PERSIST_LEDGER = "UPDATE profiles SET swiped_on = $1, swiped_yes_by = $2 WHERE id = $3"

# A pair matches at most once; a repeat mutual like returns the existing row.
CREATE_MATCH = """
    INSERT INTO matches (user1_id, user2_id) VALUES ($1, $2)
    ON CONFLICT ((LEAST(user1_id, user2_id)), (GREATEST(user1_id, user2_id)))
    DO UPDATE SET user1_id = matches.user1_id
    RETURNING id, user1_id, user2_id, matched_at
"""


class PostgresLedger:
    """Ledger reads and writes bound to one open transaction."""

    def __init__(self, conn: asyncpg.Connection):
        self.conn = conn

    async def load_ledger_pair(self, user_id1: int, user_id2: int) -> dict[int, SwipeLedger]:
        logger.info(f"Getting profiles for swipe: swiper={user_id1} swiped={user_id2}")
        rows = await self.conn.fetch(LOAD_LEDGER_PAIR, [user_id1, user_id2])
        ledgers = {
            row["id"]: SwipeLedger(
                id=row["id"],
                swiped_on=set(row["swiped_on"] or []),
                swiped_yes_by=set(row["swiped_yes_by"] or []),
            )
            for row in rows
        }
        if len(ledgers) < 2:
            logger.info(f"Swipe pair ({user_id1}, {user_id2}) resolved to {len(ledgers)} profile(s)")
            raise SwipeRequestInvalid()
        return ledgers

    async def persist_ledger(self, ledger: SwipeLedger):
        await self.conn.execute(
            PERSIST_LEDGER, sorted(ledger.swiped_on), sorted(ledger.swiped_yes_by), ledger.id
        )
        logger.info(f"Updated ledger for profile {ledger.id}")

    async def create_match(self, user_id1: int, user_id2: int) -> Match:
        row = await self.conn.fetchrow(CREATE_MATCH, user_id1, user_id2)
        match = Match(**dict(row))
        logger.info(f"Created match {match.id} for ({user_id1}, {user_id2})")
        return match


class PostgresLedgerStore:
    def __init__(self, pool: asyncpg.Pool):
        self.pool = pool

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[PostgresLedger]:
        """Yield a ledger inside one transaction.

        The transaction commits when the block exits cleanly and rolls back
        on any exception, cancellation included.
        """
        async with translate_errors("swipe"):
            async with self.pool.acquire() as conn:
                async with conn.transaction():
                    yield PostgresLedger(conn)
