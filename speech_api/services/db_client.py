"""Database client for PostgreSQL using asyncpg."""

from contextlib import asynccontextmanager
from typing import Optional

import asyncpg

from speech_api.config import Settings

_pool: Optional[asyncpg.Pool] = None


async def get_db_pool(settings: Settings) -> asyncpg.Pool:
    """Get or create the database connection pool."""
    global _pool
    if _pool is None:
        _pool = await asyncpg.create_pool(
            host=settings.postgres_host,
            port=settings.postgres_port,
            user=settings.postgres_user,
            password=settings.postgres_password,
            database=settings.postgres_db,
            min_size=1,
            max_size=10,
            command_timeout=10.0,
        )
    return _pool


async def close_db_pool() -> None:
    """Close the database connection pool."""
    global _pool
    if _pool is not None:
        await _pool.close()
        _pool = None


@asynccontextmanager
async def acquire(pool: asyncpg.Pool, timeout: Optional[float] = None):
    """Context manager for database connections."""
    async with pool.acquire(timeout=timeout) as connection:
        yield connection
