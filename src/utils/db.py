import asyncpg
from typing import Optional

from src.utils.logger import get_logger

logger = get_logger(__name__)

_pool: Optional[asyncpg.Pool] = None

PORTFOLIOS_SCHEMA = """
CREATE TABLE IF NOT EXISTS portfolios (
    username TEXT PRIMARY KEY,
    data JSONB NOT NULL DEFAULT '{}'::jsonb,
    created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
)
"""


async def get_pool(database_url: str) -> asyncpg.Pool:
    """Get or create the connection pool."""
    global _pool
    if _pool is None:
        # asyncpg uses postgresql:// not postgresql+asyncpg://
        url = database_url.replace("+asyncpg", "")
        _pool = await asyncpg.create_pool(url, min_size=1, max_size=10)
    return _pool


async def ensure_schema(pool: asyncpg.Pool) -> None:
    """Create the portfolios table if it does not exist yet."""
    async with pool.acquire() as conn:
        await conn.execute(PORTFOLIOS_SCHEMA)
    logger.info("db.schema_ready")


async def close_pool() -> None:
    """Close the connection pool."""
    global _pool
    if _pool:
        await _pool.close()
        _pool = None
