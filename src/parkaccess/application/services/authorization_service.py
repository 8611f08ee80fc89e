"""Authorization engine - combines role defaults, group grants and conditions."""

import logging
from collections.abc import Awaitable, Callable, Iterable, Sequence
from typing import Any, TypeVar

from parkaccess.application.dto.authorization_dto import PermissionCheck
from parkaccess.application.ports import UnitOfWorkFactory
from parkaccess.application.services.group_permission_resolver import (
    GroupPermissionResolver,
)
from parkaccess.domain.authorization import (
    PermissionCatalog,
    build_default_catalog,
    evaluate_conditions,
    generate_rls_condition,
    matches_resource,
)
from parkaccess.domain.entities import AuthorizationContext, Permission
from parkaccess.domain.exceptions import (
    NotFound,
    ParkAccessError,
    PermissionDenied,
    ValidationError,
)
from parkaccess.domain.value_objects import PermissionAction, UserType

logger = logging.getLogger(__name__)

T = TypeVar("T")

PermissionGuard = Callable[[str, Any], Awaitable[bool]]


class AuthorizationService:
    """Decides whether a caller may perform an action on a resource.

    Admins are allowed everything without looking at any rule. For everybody
    else the role defaults are scanned first, then the permissions granted
    through groups; the first permission that matches the resource, lists the
    action and has all its conditions satisfied by ``resource_data`` allows
    the request. A conditioned permission never applies when no
    ``resource_data`` is given.

    ``has_permission`` never raises: any failure is logged and denies.
    """

    def __init__(
        self,
        unit_of_work_factory: UnitOfWorkFactory,
        catalog: PermissionCatalog | None = None,
        group_permissions: GroupPermissionResolver | None = None,
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._catalog = catalog or build_default_catalog()
        self._group_permissions = group_permissions or GroupPermissionResolver(
            unit_of_work_factory
        )

    @property
    def catalog(self) -> PermissionCatalog:
        return self._catalog

    async def has_permission(
        self,
        context: AuthorizationContext,
        resource: str,
        action: PermissionAction | str,
        resource_data: Any = None,
    ) -> bool:
        """Check if the caller may perform action on resource (fail-closed)."""
        if context.user_type == UserType.ADMIN:
            return True
        try:
            requested = PermissionAction(action)
        except ValueError:
            logger.debug("Unknown action %r on %s, denying", action, resource)
            return False

        try:
            custom = await self._group_permissions.get_custom_permissions(context.user_id)
            candidates = [*self._catalog.for_user_type(context.user_type), *custom]

            for permission in candidates:
                if not matches_resource(permission.resource, resource):
                    continue
                if not permission.allows(requested):
                    continue
                if not permission.conditions:
                    return True
                if resource_data is not None and evaluate_conditions(
                    permission.conditions, context, resource_data
                ):
                    return True
            return False
        except Exception:
            logger.warning(
                "Permission check failed for user %s on %s:%s, denying",
                context.user_id,
                resource,
                action,
                exc_info=True,
            )
            return False

    async def require_permission(
        self,
        context: AuthorizationContext,
        resource: str,
        action: PermissionAction | str,
        resource_data: Any = None,
    ) -> None:
        """Raise PermissionDenied unless has_permission allows the request."""
        if not await self.has_permission(context, resource, action, resource_data):
            raise PermissionDenied(f"User {context.user_id} may not {action} {resource}")

    async def get_user_permissions(self, user_id: str) -> list[Permission]:
        """Role defaults followed by group permissions, unfiltered."""
        async with self._uow_factory() as uow:
            user = await uow.users.get_by_id(user_id)
        if not user:
            raise NotFound("User", user_id)

        custom = await self._group_permissions.get_custom_permissions(user_id)
        return [*self._catalog.for_user_type(user.user_type), *custom]

    async def check_multiple_permissions(
        self,
        context: AuthorizationContext,
        checks: Iterable[PermissionCheck],
    ) -> dict[str, bool]:
        """Batch check, keyed ``"resource:action"``."""
        results: dict[str, bool] = {}
        for check in checks:
            results[check.key] = await self.has_permission(
                context, check.resource, check.action, check.resource_data
            )
        return results

    async def get_filtered_resources(
        self,
        context: AuthorizationContext,
        resource: str,
        action: PermissionAction | str,
        items: Sequence[T],
    ) -> list[T]:
        """Keep only the items the caller may act on."""
        allowed: list[T] = []
        for item in items:
            if await self.has_permission(context, resource, action, item):
                allowed.append(item)
        return allowed

    async def create_authorization_context(
        self,
        user_id: str,
        *,
        resource_id: str | None = None,
        resource_type: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> AuthorizationContext:
        """Build a context from the user store.

        Raises NotFound for unknown users and ValidationError for a POS user
        without an operator, whose operator-scoped rules could never match.
        """
        async with self._uow_factory() as uow:
            user = await uow.users.get_by_id(user_id)
        if not user:
            raise NotFound("User", user_id)
        if user.user_type == UserType.POS and not user.operator_id:
            raise ValidationError(f"POS user {user_id} is not assigned to an operator")

        return AuthorizationContext(
            user_id=user_id,
            user_type=user.user_type,
            operator_id=user.operator_id,
            resource_id=resource_id,
            resource_type=resource_type,
            metadata=metadata or {},
        )

    def generate_rls_condition(
        self,
        user_type: UserType | str,
        user_id: str,
        resource: str,
        action: PermissionAction | str,
        *,
        operator_id: str | None = None,
    ) -> str:
        """Row-level security predicate for the engine's catalog."""
        return generate_rls_condition(
            self._catalog,
            user_type,
            user_id,
            resource,
            action,
            operator_id=operator_id,
        )

    def permission_guard(
        self, resource: str, action: PermissionAction | str
    ) -> PermissionGuard:
        """Return ``guard(user_id, resource_data=None)`` checking one fixed permission."""

        async def guard(user_id: str, resource_data: Any = None) -> bool:
            try:
                context = await self.create_authorization_context(user_id)
            except ParkAccessError as e:
                logger.info("Denying %s:%s for %s: %s", resource, action, user_id, e)
                return False
            except Exception:
                logger.warning(
                    "Could not build context for %s, denying", user_id, exc_info=True
                )
                return False
            return await self.has_permission(context, resource, action, resource_data)

        return guard
