"""Pytest fixtures for ParkAccess tests."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import replace
from typing import Any

import pytest

from parkaccess.domain.entities import GroupMembership, UserGroup, UserIdentity
from parkaccess.domain.value_objects import UserType


# --- Fake repositories ---


class FakeUserRepository:
    """In-memory user store."""

    def __init__(self) -> None:
        self._by_id: dict[str, UserIdentity] = {}

    async def get_by_id(self, user_id: str) -> UserIdentity | None:
        return self._by_id.get(user_id)

    def add_user(
        self, user_id: str, user_type: UserType, operator_id: str | None = None
    ) -> UserIdentity:
        """Helper to add user for tests."""
        user = UserIdentity(user_id=user_id, user_type=user_type, operator_id=operator_id)
        self._by_id[user_id] = user
        return user


class FakeGroupMembershipRepository:
    """In-memory user <-> group join table, kept in insertion order."""

    def __init__(self) -> None:
        self._by_key: dict[tuple[str, str], GroupMembership] = {}

    async def get(self, user_id: str, group_id: str) -> GroupMembership | None:
        return self._by_key.get((user_id, group_id))

    async def list_by_group(self, group_id: str) -> list[GroupMembership]:
        return [m for m in self._by_key.values() if m.group_id == group_id]

    async def add(self, membership: GroupMembership) -> GroupMembership:
        self._by_key[(membership.user_id, membership.group_id)] = membership
        return membership

    async def remove(self, user_id: str, group_id: str) -> bool:
        return self._by_key.pop((user_id, group_id), None) is not None

    async def delete_by_group(self, group_id: str) -> None:
        for key in [k for k in self._by_key if k[1] == group_id]:
            del self._by_key[key]

    def count(self, group_id: str) -> int:
        return sum(1 for m in self._by_key.values() if m.group_id == group_id)

    def group_ids_for(self, user_id: str) -> list[str]:
        members = [m for m in self._by_key.values() if m.user_id == user_id]
        members.sort(key=lambda m: m.joined_at)
        return [m.group_id for m in members]


class FakeUserGroupRepository:
    """In-memory user group repository; member counts come from the membership fake."""

    def __init__(self, memberships: FakeGroupMembershipRepository) -> None:
        self._by_id: dict[str, UserGroup] = {}
        self._memberships = memberships

    def _copy(self, group: UserGroup) -> UserGroup:
        return replace(
            group,
            permissions=list(group.permissions),
            member_count=self._memberships.count(group.id),
        )

    async def get_by_id(self, group_id: str) -> UserGroup | None:
        group = self._by_id.get(group_id)
        return self._copy(group) if group else None

    async def list(self, operator_id: str | None = None) -> list[UserGroup]:
        items = [
            g
            for g in self._by_id.values()
            if operator_id is None or g.operator_id == operator_id
        ]
        items.sort(key=lambda g: g.created_at, reverse=True)
        return [self._copy(g) for g in items]

    async def list_for_user(self, user_id: str) -> list[UserGroup]:
        return [
            self._copy(self._by_id[gid])
            for gid in self._memberships.group_ids_for(user_id)
            if gid in self._by_id
        ]

    async def create(self, group: UserGroup) -> UserGroup:
        self._by_id[group.id] = self._copy(group)
        return group

    async def update(self, group: UserGroup) -> None:
        self._by_id[group.id] = self._copy(group)

    async def delete(self, group_id: str) -> None:
        self._by_id.pop(group_id, None)


class FakeAuditLogRepository:
    """Collects audit records; set ``fail`` to simulate a broken audit table."""

    def __init__(self) -> None:
        self.records: list[dict[str, Any]] = []
        self.fail = False

    async def record(
        self,
        action: str,
        resource_type: str,
        resource_id: str | None,
        old_values: dict[str, Any] | None,
        new_values: dict[str, Any] | None,
        actor_id: str | None = None,
    ) -> None:
        if self.fail:
            raise RuntimeError("audit_logs unavailable")
        self.records.append(
            {
                "action": action,
                "resource_type": resource_type,
                "resource_id": resource_id,
                "old_values": old_values,
                "new_values": new_values,
                "actor_id": actor_id,
            }
        )


# --- Fake UnitOfWork ---


class FakeUnitOfWork:
    """In-memory Unit of Work with fake repositories."""

    def __init__(self) -> None:
        self.users = FakeUserRepository()
        self.memberships = FakeGroupMembershipRepository()
        self.user_groups = FakeUserGroupRepository(self.memberships)
        self.audit_logs = FakeAuditLogRepository()

    async def commit(self) -> None:
        pass

    async def rollback(self) -> None:
        pass


def make_uow_factory(uow: FakeUnitOfWork):
    """Factory whose every unit of work shares the given in-memory state."""

    @asynccontextmanager
    async def _factory() -> AsyncIterator[FakeUnitOfWork]:
        yield uow

    return _factory


# --- Fixtures ---


@pytest.fixture
def fake_uow() -> FakeUnitOfWork:
    """In-memory UnitOfWork seeded with one user of every type."""
    uow = FakeUnitOfWork()
    uow.users.add_user("admin-1", UserType.ADMIN)
    uow.users.add_user("op1", UserType.OPERATOR)
    uow.users.add_user("op2", UserType.OPERATOR)
    uow.users.add_user("pos1", UserType.POS, operator_id="op1")
    uow.users.add_user("pos-orphan", UserType.POS)
    uow.users.add_user("host1", UserType.HOST)
    uow.users.add_user("c1", UserType.CLIENT)
    uow.users.add_user("c2", UserType.CLIENT)
    return uow


@pytest.fixture
def uow_factory(fake_uow: FakeUnitOfWork):
    """Factory returning async context manager over the shared fake_uow."""
    return make_uow_factory(fake_uow)


@pytest.fixture
def mock_group_resolver():
    """AsyncMock for GroupPermissionResolver - no custom permissions by default."""
    from unittest.mock import AsyncMock

    mock = AsyncMock()
    mock.get_custom_permissions.return_value = []
    return mock
