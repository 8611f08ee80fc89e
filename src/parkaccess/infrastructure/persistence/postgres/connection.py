"""PostgreSQL async connection pool."""

import logging

from psycopg_pool import AsyncConnectionPool

logger = logging.getLogger(__name__)


def create_pool(conninfo: str, min_size: int = 2, max_size: int = 10) -> AsyncConnectionPool:
    """Create async connection pool.

    Pool is created with open=False. Caller must call await pool.open()
    before use (PoolLifespanMiddleware does this on ASGI startup).
    """
    return AsyncConnectionPool(
        conninfo=conninfo,
        min_size=min_size,
        max_size=max(min_size, max_size),
        open=False,
        name="parkaccess",
    )


async def check_connection(pool: AsyncConnectionPool) -> bool:
    """Run a trivial query; False when the database cannot be reached."""
    try:
        async with pool.connection() as conn:
            await conn.execute("SELECT 1")
        return True
    except Exception:
        logger.warning("Database readiness check failed", exc_info=True)
        return False
