"""Unit tests for GroupPermissionResolver."""

from datetime import UTC, datetime, timedelta

import pytest

from parkaccess.application.services.group_permission_resolver import (
    GroupPermissionResolver,
)
from parkaccess.domain.entities import GroupMembership, Permission, UserGroup

from tests.conftest import FakeUnitOfWork, make_uow_factory


async def _group(uow: FakeUnitOfWork, group_id: str, *permissions: Permission) -> UserGroup:
    now = datetime.now(UTC)
    group = UserGroup(
        id=group_id,
        name=group_id,
        description="",
        created_at=now,
        updated_at=now,
        permissions=list(permissions),
    )
    await uow.user_groups.create(group)
    return group


@pytest.mark.asyncio
async def test_concatenates_groups_in_join_order() -> None:
    uow = FakeUnitOfWork()
    reports = Permission.of("reports", ["read"])
    payments = Permission.of("payments", ["read"])
    settings = Permission.of("settings", ["update"])
    await _group(uow, "g-finance", reports, payments)
    await _group(uow, "g-settings", settings)
    await _group(uow, "g-other", Permission.of("users", ["read"]))

    t0 = datetime(2026, 3, 1, tzinfo=UTC)
    await uow.memberships.add(GroupMembership("u1", "g-settings", t0 + timedelta(days=1)))
    await uow.memberships.add(GroupMembership("u1", "g-finance", t0))

    resolver = GroupPermissionResolver(make_uow_factory(uow))

    assert await resolver.get_custom_permissions("u1") == [reports, payments, settings]


@pytest.mark.asyncio
async def test_no_groups_no_permissions() -> None:
    resolver = GroupPermissionResolver(make_uow_factory(FakeUnitOfWork()))
    assert await resolver.get_custom_permissions("u1") == []


@pytest.mark.asyncio
async def test_store_errors_propagate() -> None:
    uow = FakeUnitOfWork()

    async def broken(user_id: str):
        raise RuntimeError("relation user_group_memberships does not exist")

    uow.user_groups.list_for_user = broken
    resolver = GroupPermissionResolver(make_uow_factory(uow))

    with pytest.raises(RuntimeError):
        await resolver.get_custom_permissions("u1")
