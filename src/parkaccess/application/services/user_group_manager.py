"""User group management - CRUD, membership, validation and audit trail."""

import logging
from collections.abc import Iterable, Mapping
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from parkaccess.application.dto.user_group_dto import UpdateUserGroupInput
from parkaccess.application.ports import UnitOfWorkFactory
from parkaccess.domain.authorization import (
    ASSIGNABLE_PERMISSIONS,
    AssignablePermission,
    PermissionValidationResult,
    evaluate_conditions,
    validate_permissions,
)
from parkaccess.domain.entities import (
    AuthorizationContext,
    GroupMembership,
    Permission,
    UserGroup,
)
from parkaccess.domain.exceptions import AlreadyMember, NotFound
from parkaccess.domain.value_objects import PermissionAction

logger = logging.getLogger(__name__)

GROUPS = "user_groups"
MEMBERSHIPS = "user_group_memberships"


class UserGroupManager:
    """Manages named permission groups and who belongs to them.

    Every mutation is followed by an audit record written in its own unit of
    work; a failing audit write is logged and never fails the mutation.
    """

    def __init__(self, unit_of_work_factory: UnitOfWorkFactory) -> None:
        self._uow_factory = unit_of_work_factory

    async def create_group(
        self,
        name: str,
        description: str,
        permissions: Iterable[Permission] = (),
        operator_id: str | None = None,
        *,
        actor_id: str | None = None,
    ) -> UserGroup:
        """Create group with no members."""
        now = datetime.now(UTC)
        group = UserGroup(
            id=str(uuid4()),
            name=name,
            description=description,
            operator_id=operator_id,
            member_count=0,
            created_at=now,
            updated_at=now,
        )
        group.replace_permissions(list(permissions))

        async with self._uow_factory() as uow:
            await uow.user_groups.create(group)

        logger.info("Created user group %s (%s)", group.id, name)
        await self._audit("user_group_created", GROUPS, group.id, None, group.snapshot(), actor_id)
        return group

    async def get_group(self, group_id: str) -> UserGroup | None:
        async with self._uow_factory() as uow:
            return await uow.user_groups.get_by_id(group_id)

    async def list_groups(self, operator_id: str | None = None) -> list[UserGroup]:
        """All groups, or those of one operator, newest first."""
        async with self._uow_factory() as uow:
            return await uow.user_groups.list(operator_id)

    async def update_group(
        self,
        group_id: str,
        changes: UpdateUserGroupInput,
        *,
        actor_id: str | None = None,
    ) -> UserGroup:
        """Apply supplied fields; permissions replace the whole list."""
        async with self._uow_factory() as uow:
            group = await uow.user_groups.get_by_id(group_id)
            if not group:
                raise NotFound("User group", group_id)
            before = group.snapshot()

            if changes.name is not None:
                group.name = changes.name
            if changes.description is not None:
                group.description = changes.description
            if changes.permissions is not None:
                group.replace_permissions(changes.permissions)
            group.updated_at = datetime.now(UTC)
            await uow.user_groups.update(group)

        logger.info("Updated user group %s", group_id)
        await self._audit("user_group_updated", GROUPS, group_id, before, group.snapshot(), actor_id)
        return group

    async def delete_group(self, group_id: str, *, actor_id: str | None = None) -> None:
        """Remove memberships, then the group."""
        async with self._uow_factory() as uow:
            group = await uow.user_groups.get_by_id(group_id)
            if not group:
                raise NotFound("User group", group_id)
            await uow.memberships.delete_by_group(group_id)
            await uow.user_groups.delete(group_id)

        logger.info("Deleted user group %s", group_id)
        await self._audit("user_group_deleted", GROUPS, group_id, group.snapshot(), None, actor_id)

    async def add_permission(
        self,
        group_id: str,
        permission: Permission,
        *,
        actor_id: str | None = None,
    ) -> UserGroup:
        """Grant permission; an existing entry for the same resource is replaced."""
        async with self._uow_factory() as uow:
            group = await uow.user_groups.get_by_id(group_id)
            if not group:
                raise NotFound("User group", group_id)
            before = group.snapshot()
            group.add_permission(permission)
            group.updated_at = datetime.now(UTC)
            await uow.user_groups.update(group)

        await self._audit("user_group_updated", GROUPS, group_id, before, group.snapshot(), actor_id)
        return group

    async def remove_permission(
        self,
        group_id: str,
        resource: str,
        *,
        actor_id: str | None = None,
    ) -> UserGroup:
        """Revoke the entry for resource, if any."""
        async with self._uow_factory() as uow:
            group = await uow.user_groups.get_by_id(group_id)
            if not group:
                raise NotFound("User group", group_id)
            before = group.snapshot()
            if not group.remove_permission(resource):
                return group
            group.updated_at = datetime.now(UTC)
            await uow.user_groups.update(group)

        await self._audit("user_group_updated", GROUPS, group_id, before, group.snapshot(), actor_id)
        return group

    async def list_members(self, group_id: str) -> list[GroupMembership]:
        async with self._uow_factory() as uow:
            if not await uow.user_groups.get_by_id(group_id):
                raise NotFound("User group", group_id)
            return await uow.memberships.list_by_group(group_id)

    async def list_groups_for_user(self, user_id: str) -> list[UserGroup]:
        async with self._uow_factory() as uow:
            return await uow.user_groups.list_for_user(user_id)

    async def add_user_to_group(
        self, user_id: str, group_id: str, *, actor_id: str | None = None
    ) -> GroupMembership:
        """Add member. Raises AlreadyMember for duplicates."""
        async with self._uow_factory() as uow:
            if not await uow.user_groups.get_by_id(group_id):
                raise NotFound("User group", group_id)
            if await uow.memberships.get(user_id, group_id):
                raise AlreadyMember(user_id, group_id)
            membership = GroupMembership(
                user_id=user_id,
                group_id=group_id,
                joined_at=datetime.now(UTC),
            )
            await uow.memberships.add(membership)

        logger.info("Added user %s to group %s", user_id, group_id)
        await self._audit(
            "user_added_to_group",
            MEMBERSHIPS,
            None,
            None,
            {"user_id": user_id, "group_id": group_id},
            actor_id,
        )
        return membership

    async def remove_user_from_group(
        self, user_id: str, group_id: str, *, actor_id: str | None = None
    ) -> None:
        """Remove member; removing a non-member is a no-op."""
        async with self._uow_factory() as uow:
            removed = await uow.memberships.remove(user_id, group_id)
        if not removed:
            return

        logger.info("Removed user %s from group %s", user_id, group_id)
        await self._audit(
            "user_removed_from_group",
            MEMBERSHIPS,
            None,
            {"user_id": user_id, "group_id": group_id},
            None,
            actor_id,
        )

    async def user_has_permission(
        self,
        user_id: str,
        resource: str,
        action: PermissionAction | str,
        context: Mapping[str, Any] | None = None,
    ) -> bool:
        """Check only the user's group grants, ignoring role defaults.

        Resources must match exactly. Conditioned grants apply only when
        ``context`` is given and satisfies them. Errors deny.
        """
        try:
            requested = PermissionAction(action)
            async with self._uow_factory() as uow:
                user = await uow.users.get_by_id(user_id)
                if not user:
                    return False
                groups = await uow.user_groups.list_for_user(user_id)

            auth_context = AuthorizationContext(
                user_id=user_id,
                user_type=user.user_type,
                operator_id=user.operator_id,
            )
            for group in groups:
                for permission in group.permissions:
                    if permission.resource != resource or not permission.allows(requested):
                        continue
                    if not permission.conditions:
                        return True
                    if context is not None and evaluate_conditions(
                        permission.conditions, auth_context, context
                    ):
                        return True
            return False
        except Exception:
            logger.warning(
                "Group permission check failed for user %s on %s:%s",
                user_id,
                resource,
                action,
                exc_info=True,
            )
            return False

    @staticmethod
    def validate_permissions(
        permissions: Iterable[Permission | Mapping[str, Any]],
    ) -> PermissionValidationResult:
        return validate_permissions(permissions)

    @staticmethod
    def available_permissions() -> tuple[AssignablePermission, ...]:
        return ASSIGNABLE_PERMISSIONS

    async def _audit(
        self,
        action: str,
        resource_type: str,
        resource_id: str | None,
        old_values: dict[str, Any] | None,
        new_values: dict[str, Any] | None,
        actor_id: str | None,
    ) -> None:
        try:
            async with self._uow_factory() as uow:
                await uow.audit_logs.record(
                    action,
                    resource_type,
                    resource_id,
                    old_values,
                    new_values,
                    actor_id=actor_id,
                )
        except Exception:
            logger.warning("Failed to write audit record %s for %s", action, resource_id, exc_info=True)
