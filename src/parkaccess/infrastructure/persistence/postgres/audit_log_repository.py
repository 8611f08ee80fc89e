"""PostgreSQL audit log repository implementation."""

from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from psycopg import AsyncConnection
from psycopg.types.json import Jsonb

SYSTEM_ACTOR_ID = "00000000-0000-0000-0000-000000000000"


def _json(values: dict[str, Any] | None) -> Jsonb | None:
    return Jsonb(values) if values is not None else None


class PostgresAuditLogRepository:
    """Audit log repository implementation (append only)."""

    def __init__(self, conn: AsyncConnection) -> None:
        self._conn = conn

    async def record(
        self,
        action: str,
        resource_type: str,
        resource_id: str | None,
        old_values: dict[str, Any] | None,
        new_values: dict[str, Any] | None,
        actor_id: str | None = None,
    ) -> None:
        """Append audit record; rows without an actor are attributed to the system."""
        await self._conn.execute(
            "INSERT INTO audit_logs "
            "(id, user_id, action, resource_type, resource_id, old_values, new_values, created_at) "
            "VALUES (%s, %s, %s, %s, %s, %s, %s, %s)",
            (
                uuid4(),
                actor_id or SYSTEM_ACTOR_ID,
                action,
                resource_type,
                resource_id,
                _json(old_values),
                _json(new_values),
                datetime.now(UTC),
            ),
        )
