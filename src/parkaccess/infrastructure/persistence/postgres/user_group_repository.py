"""PostgreSQL user group repository implementation."""

from __future__ import annotations

from typing import Any
from uuid import UUID

from psycopg import AsyncConnection
from psycopg.types.json import Jsonb

from parkaccess.domain.entities import Permission, UserGroup

_SELECT = (
    "SELECT g.id, g.name, g.description, g.permissions, g.operator_id, "
    "g.created_at, g.updated_at, "
    "(SELECT count(*) FROM user_group_memberships m WHERE m.group_id = g.id) "
    "FROM user_groups g"
)


def _row_to_group(r: tuple[Any, ...]) -> UserGroup:
    return UserGroup(
        id=str(r[0]),
        name=r[1],
        description=r[2] or "",
        permissions=[Permission.from_dict(p) for p in (r[3] or [])],
        operator_id=str(r[4]) if r[4] is not None else None,
        created_at=r[5],
        updated_at=r[6],
        member_count=r[7] or 0,
    )


def parse_group_id(group_id: str) -> UUID | None:
    """Group ids are uuid columns; anything else names no group."""
    try:
        return UUID(group_id)
    except (TypeError, ValueError, AttributeError):
        return None


def _permissions_json(group: UserGroup) -> Jsonb:
    return Jsonb([p.to_dict() for p in group.permissions])


class PostgresUserGroupRepository:
    """User group repository implementation."""

    def __init__(self, conn: AsyncConnection) -> None:
        self._conn = conn

    async def get_by_id(self, group_id: str) -> UserGroup | None:
        """Get group by id."""
        uid = parse_group_id(group_id)
        if uid is None:
            return None
        cur = await self._conn.execute(f"{_SELECT} WHERE g.id = %s", (uid,))
        r = await cur.fetchone()
        if not r:
            return None
        return _row_to_group(r)

    async def list(self, operator_id: str | None = None) -> list[UserGroup]:
        """List groups, optionally of one operator, newest first."""
        if operator_id is None:
            cur = await self._conn.execute(f"{_SELECT} ORDER BY g.created_at DESC")
        else:
            cur = await self._conn.execute(
                f"{_SELECT} WHERE g.operator_id = %s ORDER BY g.created_at DESC",
                (operator_id,),
            )
        rows = await cur.fetchall()
        return [_row_to_group(r) for r in rows]

    async def list_for_user(self, user_id: str) -> list[UserGroup]:
        """List groups the user is a member of, in join order."""
        cur = await self._conn.execute(
            f"{_SELECT} JOIN user_group_memberships um ON um.group_id = g.id "
            "WHERE um.user_id = %s ORDER BY um.joined_at",
            (user_id,),
        )
        rows = await cur.fetchall()
        return [_row_to_group(r) for r in rows]

    async def create(self, group: UserGroup) -> UserGroup:
        """Create group."""
        await self._conn.execute(
            "INSERT INTO user_groups "
            "(id, name, description, permissions, operator_id, created_at, updated_at) "
            "VALUES (%s, %s, %s, %s, %s, %s, %s)",
            (
                group.id,
                group.name,
                group.description,
                _permissions_json(group),
                group.operator_id,
                group.created_at,
                group.updated_at,
            ),
        )
        return group

    async def update(self, group: UserGroup) -> None:
        """Update name, description and permissions."""
        await self._conn.execute(
            "UPDATE user_groups SET name=%s, description=%s, permissions=%s, updated_at=%s "
            "WHERE id=%s",
            (
                group.name,
                group.description,
                _permissions_json(group),
                group.updated_at,
                group.id,
            ),
        )

    async def delete(self, group_id: str) -> None:
        """Delete group."""
        uid = parse_group_id(group_id)
        if uid is None:
            return
        await self._conn.execute("DELETE FROM user_groups WHERE id = %s", (uid,))
