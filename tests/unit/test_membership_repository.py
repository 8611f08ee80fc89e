"""Unit tests for the PostgreSQL group membership repository."""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock
from uuid import UUID

import pytest
from psycopg.errors import UniqueViolation

from parkaccess.domain.entities import GroupMembership
from parkaccess.domain.exceptions import AlreadyMember
from parkaccess.infrastructure.persistence.postgres.membership_repository import (
    PostgresGroupMembershipRepository,
)

NOW = datetime(2026, 2, 1, 9, 30, tzinfo=UTC)
GROUP_ID = UUID("6f1c1b1e-58a4-4b3a-9a52-0d6a7a3f2c11")


def _conn(rows: list[tuple], rowcount: int = 0) -> MagicMock:
    cursor = MagicMock()
    cursor.fetchone = AsyncMock(return_value=rows[0] if rows else None)
    cursor.fetchall = AsyncMock(return_value=rows)
    cursor.rowcount = rowcount
    conn = MagicMock()
    conn.execute = AsyncMock(return_value=cursor)
    return conn


@pytest.mark.asyncio
async def test_get_maps_row() -> None:
    conn = _conn([("c1", GROUP_ID, NOW)])
    repo = PostgresGroupMembershipRepository(conn)

    membership = await repo.get("c1", str(GROUP_ID))

    assert membership == GroupMembership(user_id="c1", group_id=str(GROUP_ID), joined_at=NOW)
    _, params = conn.execute.call_args.args
    assert params == ("c1", GROUP_ID)


@pytest.mark.asyncio
async def test_malformed_group_id_matches_nothing() -> None:
    conn = _conn([("c1", GROUP_ID, NOW)], rowcount=1)
    repo = PostgresGroupMembershipRepository(conn)

    assert await repo.get("c1", "xyz") is None
    assert await repo.list_by_group("xyz") == []
    assert await repo.remove("c1", "xyz") is False
    await repo.delete_by_group("xyz")
    conn.execute.assert_not_called()


@pytest.mark.asyncio
async def test_remove_reports_rowcount() -> None:
    repo = PostgresGroupMembershipRepository(_conn([], rowcount=1))
    assert await repo.remove("c1", str(GROUP_ID)) is True


@pytest.mark.asyncio
async def test_duplicate_insert_raises_already_member() -> None:
    conn = _conn([])
    conn.execute.side_effect = UniqueViolation("duplicate key value")
    repo = PostgresGroupMembershipRepository(conn)
    membership = GroupMembership(user_id="c1", group_id=str(GROUP_ID), joined_at=NOW)

    with pytest.raises(AlreadyMember) as excinfo:
        await repo.add(membership)

    assert excinfo.value.user_id == "c1"
    assert excinfo.value.group_id == str(GROUP_ID)
