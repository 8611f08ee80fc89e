"""PostgreSQL user repository - reads identity rows owned by the auth provider."""

from psycopg import AsyncConnection

from parkaccess.domain.entities import UserIdentity
from parkaccess.domain.value_objects import UserType


class PostgresUserRepository:
    """User repository implementation (read only)."""

    def __init__(self, conn: AsyncConnection) -> None:
        self._conn = conn

    async def get_by_id(self, user_id: str) -> UserIdentity | None:
        """Get user type and operator by user id."""
        cur = await self._conn.execute(
            "SELECT id, user_type, operator_id FROM users WHERE id = %s",
            (user_id,),
        )
        r = await cur.fetchone()
        if not r:
            return None
        return UserIdentity(
            user_id=str(r[0]),
            user_type=UserType(r[1]),
            operator_id=str(r[2]) if r[2] is not None else None,
        )
