import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Awaitable, TypeVar

import asyncpg

from dating_api.config import Settings
from dating_api.db.schema import apply_schema
from dating_api.errors import DatabaseError, QueryTimedOut, StoreError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Database:
    def __init__(self, settings: Settings):
        self.database_url = settings.database_url
        self.timeout = settings.db_timeout
        self.pool: asyncpg.Pool | None = None

    async def init(self):
        logger.info("Creating database pool...")
        self.pool = await asyncpg.create_pool(self.database_url, command_timeout=self.timeout)
        await apply_schema(self.pool)
        logger.info("Database pool ready.")

    async def close(self):
        if self.pool:
            await self.pool.close()
            logger.info("Database pool closed.")


async def run_with_timeout(aw: Awaitable[T], timeout: float) -> T:
    """Await ``aw`` for at most ``timeout`` seconds.

    Expiry cancels the awaitable, so any transaction opened inside it is
    rolled back before ``QueryTimedOut`` reaches the caller.
    """
    try:
        return await asyncio.wait_for(aw, timeout=timeout)
    except asyncio.TimeoutError as e:
        logger.error(f"Operation exceeded {timeout}s deadline")
        raise QueryTimedOut() from e


@asynccontextmanager
async def translate_errors(operation: str):
    try:
        yield
    except StoreError:
        raise
    # command_timeout surfaces as asyncio.TimeoutError, an OSError on 3.11+.
    except (asyncpg.QueryCanceledError, asyncio.TimeoutError) as e:
        logger.error(f"Query timed out during {operation}: {e}")
        raise QueryTimedOut() from e
    except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError) as e:
        logger.error(f"Database error during {operation}: {e}", exc_info=True)
        raise DatabaseError() from e
