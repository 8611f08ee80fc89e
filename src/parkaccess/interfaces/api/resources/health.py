"""Health check endpoints."""

import falcon.asgi
from psycopg_pool import AsyncConnectionPool

from parkaccess.infrastructure.persistence.postgres.connection import check_connection


class HealthResource:
    """Health and readiness endpoints."""

    def __init__(self, pool: AsyncConnectionPool | None = None) -> None:
        self._pool = pool

    async def on_get(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        """GET /v1/health - liveness."""
        resp.media = {"status": "ok"}
        resp.status = falcon.HTTP_200

    async def on_get_ready(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        """GET /v1/health/ready - readiness (database reachable)."""
        if self._pool is not None and not await check_connection(self._pool):
            resp.media = {"status": "unavailable", "database": "unreachable"}
            resp.status = falcon.HTTP_503
            return
        resp.media = {"status": "ready"}
        resp.status = falcon.HTTP_200
