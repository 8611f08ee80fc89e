"""Unit tests for the authorization engine."""

import logging
from datetime import UTC, datetime

import pytest

from parkaccess.application.dto.authorization_dto import PermissionCheck
from parkaccess.application.services.authorization_service import AuthorizationService
from parkaccess.domain.entities import AuthorizationContext, Permission, UserGroup
from parkaccess.domain.exceptions import NotFound, PermissionDenied, ValidationError
from parkaccess.domain.value_objects import PermissionAction, UserType

from tests.conftest import FakeUnitOfWork


def _context(user_id: str, user_type: UserType, operator_id: str | None = None):
    return AuthorizationContext(user_id=user_id, user_type=user_type, operator_id=operator_id)


def _spot_path(operator_id: str) -> dict:
    return {"spot": {"zone": {"section": {"location": {"operator_id": operator_id}}}}}


async def _grant(uow: FakeUnitOfWork, user_id: str, *permissions: Permission) -> None:
    """Put user in a new group holding the given permissions."""
    from parkaccess.domain.entities import GroupMembership

    now = datetime.now(UTC)
    group = UserGroup(
        id=f"g-{user_id}-{len(uow.user_groups._by_id)}",
        name="Extra",
        description="",
        created_at=now,
        updated_at=now,
        permissions=list(permissions),
    )
    await uow.user_groups.create(group)
    await uow.memberships.add(GroupMembership(user_id=user_id, group_id=group.id, joined_at=now))


@pytest.fixture
def engine(uow_factory) -> AuthorizationService:
    return AuthorizationService(unit_of_work_factory=uow_factory)


# --- has_permission ---


@pytest.mark.asyncio
@pytest.mark.parametrize("action", list(PermissionAction))
async def test_admin_is_allowed_everything(engine: AuthorizationService, action) -> None:
    admin = _context("admin-1", UserType.ADMIN)
    assert await engine.has_permission(admin, "api_management", action)
    assert await engine.has_permission(admin, "some_future_resource", action, {"x": 1})


@pytest.mark.asyncio
async def test_admin_skips_group_lookup(uow_factory, mock_group_resolver) -> None:
    engine = AuthorizationService(uow_factory, group_permissions=mock_group_resolver)
    assert await engine.has_permission(_context("admin-1", UserType.ADMIN), "payments", "delete")
    mock_group_resolver.get_custom_permissions.assert_not_called()


@pytest.mark.asyncio
async def test_deny_by_default(engine: AuthorizationService) -> None:
    operator = _context("op1", UserType.OPERATOR)
    assert not await engine.has_permission(operator, "api_management", PermissionAction.DELETE)
    assert not await engine.has_permission(operator, "payments", "read")


@pytest.mark.asyncio
async def test_unconditioned_default_grants(engine: AuthorizationService) -> None:
    client = _context("c1", UserType.CLIENT)
    assert await engine.has_permission(client, "locations", "read")
    assert not await engine.has_permission(client, "locations", "update")


@pytest.mark.asyncio
async def test_conditioned_permission_needs_resource_data(engine: AuthorizationService) -> None:
    operator = _context("op1", UserType.OPERATOR)
    assert not await engine.has_permission(operator, "locations", "read")
    assert not await engine.has_permission(operator, "locations", "read", None)


@pytest.mark.asyncio
async def test_operator_scoped_to_own_locations(engine: AuthorizationService) -> None:
    operator = _context("op1", UserType.OPERATOR)
    loc1 = {"id": "loc1", "operator_id": "op1"}
    loc2 = {"id": "loc2", "operator_id": "op2"}

    for action in PermissionAction:
        assert await engine.has_permission(operator, "locations", action, loc1)
        assert not await engine.has_permission(operator, "locations", action, loc2)

    zone = {"section": {"location": {"operator_id": "op1"}}}
    assert await engine.has_permission(operator, "zones", "update", zone)
    assert await engine.has_permission(operator, "bookings", "read", _spot_path("op1"))
    assert not await engine.has_permission(operator, "bookings", "read", _spot_path("op2"))
    assert not await engine.has_permission(operator, "bookings", "delete", _spot_path("op1"))


@pytest.mark.asyncio
async def test_operator_updates_spots_only_under_own_location(
    engine: AuthorizationService,
) -> None:
    operator = _context("op1", UserType.OPERATOR)

    def spot(location_id: str, operator_id: str) -> dict:
        location = {"id": location_id, "operator_id": operator_id}
        return {"id": "spot-7", "zone": {"section": {"location": location}}}

    assert await engine.has_permission(operator, "parking_spots", "update", spot("loc1", "op1"))
    assert not await engine.has_permission(
        operator, "parking_spots", "update", spot("loc2", "op2")
    )


@pytest.mark.asyncio
async def test_pos_acts_for_its_operator(engine: AuthorizationService) -> None:
    pos = _context("pos1", UserType.POS, operator_id="op1")
    assert await engine.has_permission(pos, "bookings", "create", _spot_path("op1"))
    assert not await engine.has_permission(pos, "bookings", "create", _spot_path("op2"))
    assert await engine.has_permission(pos, "vehicles", "read")


@pytest.mark.asyncio
async def test_pos_without_operator_matches_nothing_scoped(engine: AuthorizationService) -> None:
    pos = _context("pos-orphan", UserType.POS)
    assert not await engine.has_permission(pos, "bookings", "read", _spot_path(""))
    assert not await engine.has_permission(pos, "bookings", "read", {})


@pytest.mark.asyncio
async def test_client_messages_by_participation(engine: AuthorizationService) -> None:
    client = _context("c1", UserType.CLIENT)
    assert await engine.has_permission(client, "messages", "read", {"participants": ["c1", "host1"]})
    assert not await engine.has_permission(client, "messages", "read", {"participants": ["c2"]})


@pytest.mark.asyncio
async def test_group_permissions_extend_defaults(
    engine: AuthorizationService, fake_uow: FakeUnitOfWork
) -> None:
    client = _context("c1", UserType.CLIENT)
    assert not await engine.has_permission(client, "reports", "delete")

    await _grant(fake_uow, "c1", Permission.of("reports", ["read", "delete"]))

    assert await engine.has_permission(client, "reports", "delete")
    assert not await engine.has_permission(_context("c2", UserType.CLIENT), "reports", "delete")


@pytest.mark.asyncio
async def test_scan_continues_past_failed_conditions(
    engine: AuthorizationService, fake_uow: FakeUnitOfWork
) -> None:
    """A failing conditioned default does not hide a later group grant."""
    await _grant(fake_uow, "op1", Permission.of("locations", ["read"]))
    operator = _context("op1", UserType.OPERATOR)
    assert await engine.has_permission(operator, "locations", "read", {"operator_id": "op2"})


@pytest.mark.asyncio
async def test_unknown_action_denies(engine: AuthorizationService, caplog) -> None:
    name = "parkaccess.application.services.authorization_service"
    caplog.set_level(logging.DEBUG, logger=name)
    assert not await engine.has_permission(_context("c1", UserType.CLIENT), "locations", "publish")
    records = [r for r in caplog.records if r.name == name]
    assert [(r.levelno, r.exc_info) for r in records] == [(logging.DEBUG, None)]


@pytest.mark.asyncio
async def test_store_failure_denies(uow_factory, mock_group_resolver) -> None:
    mock_group_resolver.get_custom_permissions.side_effect = RuntimeError("connection reset")
    engine = AuthorizationService(uow_factory, group_permissions=mock_group_resolver)

    assert not await engine.has_permission(_context("c1", UserType.CLIENT), "locations", "read")


@pytest.mark.asyncio
async def test_require_permission(engine: AuthorizationService) -> None:
    operator = _context("op1", UserType.OPERATOR)
    await engine.require_permission(operator, "locations", "delete", {"operator_id": "op1"})

    with pytest.raises(PermissionDenied, match="op1 may not delete locations"):
        await engine.require_permission(operator, "locations", "delete", {"operator_id": "op2"})


# --- batch and filtering ---


@pytest.mark.asyncio
async def test_check_multiple_permissions(engine: AuthorizationService) -> None:
    operator = _context("op1", UserType.OPERATOR)
    results = await engine.check_multiple_permissions(
        operator,
        [
            PermissionCheck("locations", PermissionAction.READ, {"operator_id": "op1"}),
            PermissionCheck("api_management", "delete"),
            PermissionCheck("reports", "read"),
        ],
    )
    assert results == {
        "locations:read": True,
        "api_management:delete": False,
        "reports:read": True,
    }


@pytest.mark.asyncio
async def test_check_multiple_permissions_later_duplicate_wins(engine: AuthorizationService) -> None:
    operator = _context("op1", UserType.OPERATOR)
    results = await engine.check_multiple_permissions(
        operator,
        [
            PermissionCheck("locations", "read", {"operator_id": "op1"}),
            PermissionCheck("locations", "read", {"operator_id": "op2"}),
        ],
    )
    assert results == {"locations:read": False}


@pytest.mark.asyncio
async def test_get_filtered_resources_keeps_order(engine: AuthorizationService) -> None:
    items = [
        {"id": "loc1", "operator_id": "op1"},
        {"id": "loc2", "operator_id": "op2"},
        {"id": "loc3", "operator_id": "op1"},
    ]
    visible = await engine.get_filtered_resources(
        _context("op1", UserType.OPERATOR), "locations", "read", items
    )
    assert [i["id"] for i in visible] == ["loc1", "loc3"]


# --- user permissions and contexts ---


@pytest.mark.asyncio
async def test_get_user_permissions_defaults_then_groups(
    engine: AuthorizationService, fake_uow: FakeUnitOfWork
) -> None:
    extra = Permission.of("reports", ["read"])
    await _grant(fake_uow, "c1", extra)

    permissions = await engine.get_user_permissions("c1")

    defaults = engine.catalog.for_user_type(UserType.CLIENT)
    assert permissions == [*defaults, extra]


@pytest.mark.asyncio
async def test_get_user_permissions_unknown_user(engine: AuthorizationService) -> None:
    with pytest.raises(NotFound, match="ghost"):
        await engine.get_user_permissions("ghost")


@pytest.mark.asyncio
async def test_create_authorization_context(engine: AuthorizationService) -> None:
    context = await engine.create_authorization_context(
        "pos1", resource_id="b-1", resource_type="bookings"
    )
    assert context.user_type == UserType.POS
    assert context.operator_id == "op1"
    assert context.resource_id == "b-1"
    assert context.resource_type == "bookings"
    assert context.metadata == {}


@pytest.mark.asyncio
async def test_create_authorization_context_unknown_user(engine: AuthorizationService) -> None:
    with pytest.raises(NotFound):
        await engine.create_authorization_context("ghost")


@pytest.mark.asyncio
async def test_create_authorization_context_pos_without_operator(
    engine: AuthorizationService,
) -> None:
    with pytest.raises(ValidationError, match="pos-orphan"):
        await engine.create_authorization_context("pos-orphan")


def test_generate_rls_condition_uses_catalog(engine: AuthorizationService) -> None:
    assert engine.generate_rls_condition("client", "c1", "bookings", "read") == "user_id = 'c1'"
    assert engine.generate_rls_condition("admin", "admin-1", "bookings", "delete") == "true"
    assert (
        engine.generate_rls_condition("pos", "pos1", "parking_spots", "update", operator_id="op1")
        == "zone_section_location_operator_id = 'op1'"
    )


# --- permission_guard ---


@pytest.mark.asyncio
async def test_permission_guard(engine: AuthorizationService) -> None:
    guard = engine.permission_guard("locations", PermissionAction.UPDATE)

    assert await guard("op1", {"operator_id": "op1"})
    assert not await guard("op1", {"operator_id": "op2"})
    assert await guard("admin-1")


@pytest.mark.asyncio
async def test_permission_guard_denies_when_context_fails(engine: AuthorizationService) -> None:
    guard = engine.permission_guard("bookings", "read")
    assert not await guard("ghost")
    assert not await guard("pos-orphan", _spot_path("op1"))


@pytest.mark.asyncio
async def test_permission_guard_denies_on_store_error(fake_uow: FakeUnitOfWork) -> None:
    from contextlib import asynccontextmanager

    @asynccontextmanager
    async def broken_factory():
        raise RuntimeError("pool exhausted")
        yield fake_uow

    engine = AuthorizationService(unit_of_work_factory=broken_factory)
    assert not await engine.permission_guard("locations", "read")("c1")
