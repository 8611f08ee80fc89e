"""Permission checker port - authorization decisions."""

from typing import Any, Protocol

from parkaccess.domain.entities import AuthorizationContext
from parkaccess.domain.value_objects import PermissionAction


class PermissionChecker(Protocol):
    """Port for deciding whether a caller may act on a resource."""

    async def has_permission(
        self,
        context: AuthorizationContext,
        resource: str,
        action: PermissionAction | str,
        resource_data: Any = None,
    ) -> bool: ...
