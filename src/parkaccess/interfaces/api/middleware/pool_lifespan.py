"""Pool lifespan middleware - opens pool on startup, closes on shutdown."""

import logging
from typing import Any

from psycopg_pool import AsyncConnectionPool

logger = logging.getLogger(__name__)


class PoolLifespanMiddleware:
    """Middleware that opens the connection pool on startup and closes on shutdown."""

    def __init__(self, pool: AsyncConnectionPool, wait_timeout: float = 30.0) -> None:
        self._pool = pool
        self._wait_timeout = wait_timeout

    async def process_startup(
        self, scope: dict[str, Any], event: dict[str, Any]
    ) -> None:
        """Open pool and wait for min_size connections before serving."""
        await self._pool.open(wait=True, timeout=self._wait_timeout)
        logger.info("Database pool %s opened", self._pool.name)

    async def process_shutdown(
        self, scope: dict[str, Any], event: dict[str, Any]
    ) -> None:
        await self._pool.close()
        logger.info("Database pool %s closed", self._pool.name)
