"""PostgreSQL group membership repository implementation."""

from psycopg import AsyncConnection
from psycopg.errors import UniqueViolation

from parkaccess.domain.entities import GroupMembership
from parkaccess.domain.exceptions import AlreadyMember
from parkaccess.infrastructure.persistence.postgres.user_group_repository import parse_group_id


class PostgresGroupMembershipRepository:
    """Group membership repository implementation."""

    def __init__(self, conn: AsyncConnection) -> None:
        self._conn = conn

    async def get(self, user_id: str, group_id: str) -> GroupMembership | None:
        """Get membership of user in group."""
        uid = parse_group_id(group_id)
        if uid is None:
            return None
        cur = await self._conn.execute(
            "SELECT user_id, group_id, joined_at FROM user_group_memberships "
            "WHERE user_id = %s AND group_id = %s",
            (user_id, uid),
        )
        r = await cur.fetchone()
        if not r:
            return None
        return GroupMembership(user_id=str(r[0]), group_id=str(r[1]), joined_at=r[2])

    async def list_by_group(self, group_id: str) -> list[GroupMembership]:
        """List members of group, most recent first."""
        uid = parse_group_id(group_id)
        if uid is None:
            return []
        cur = await self._conn.execute(
            "SELECT user_id, group_id, joined_at FROM user_group_memberships "
            "WHERE group_id = %s ORDER BY joined_at DESC",
            (uid,),
        )
        rows = await cur.fetchall()
        return [
            GroupMembership(user_id=str(r[0]), group_id=str(r[1]), joined_at=r[2])
            for r in rows
        ]

    async def add(self, membership: GroupMembership) -> GroupMembership:
        """Create membership. Raises AlreadyMember if the pair exists."""
        try:
            await self._conn.execute(
                "INSERT INTO user_group_memberships (user_id, group_id, joined_at) "
                "VALUES (%s, %s, %s)",
                (membership.user_id, membership.group_id, membership.joined_at),
            )
        except UniqueViolation as e:
            raise AlreadyMember(membership.user_id, membership.group_id) from e
        return membership

    async def remove(self, user_id: str, group_id: str) -> bool:
        """Delete membership. Returns False if there was none."""
        uid = parse_group_id(group_id)
        if uid is None:
            return False
        cur = await self._conn.execute(
            "DELETE FROM user_group_memberships WHERE user_id = %s AND group_id = %s",
            (user_id, uid),
        )
        return cur.rowcount > 0

    async def delete_by_group(self, group_id: str) -> None:
        """Delete all memberships of group."""
        uid = parse_group_id(group_id)
        if uid is None:
            return
        await self._conn.execute(
            "DELETE FROM user_group_memberships WHERE group_id = %s",
            (uid,),
        )
