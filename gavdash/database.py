import logging

import asyncpg

from gavdash.config import get_settings

logger = logging.getLogger(__name__)

_pool: asyncpg.Pool | None = None


async def get_pool() -> asyncpg.Pool | None:
    """Return the shared connection pool, or None when no DATABASE_URL is set."""
    global _pool
    if _pool is None:
        settings = get_settings()
        if not settings.database_url:
            return None
        _pool = await asyncpg.create_pool(
            settings.database_url,
            min_size=1,
            max_size=settings.db_pool_max_size,
        )
        logger.info("Database pool created (max_size=%d)", settings.db_pool_max_size)
    return _pool


async def close_pool() -> None:
    global _pool
    if _pool is not None:
        await _pool.close()
        _pool = None
