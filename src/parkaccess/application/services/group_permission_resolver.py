"""Custom permissions granted through group membership."""

import logging

from parkaccess.application.ports import UnitOfWorkFactory
from parkaccess.domain.entities import Permission

logger = logging.getLogger(__name__)


class GroupPermissionResolver:
    """Loads the union of permissions of every group a user belongs to."""

    def __init__(self, unit_of_work_factory: UnitOfWorkFactory) -> None:
        self._uow_factory = unit_of_work_factory

    async def get_custom_permissions(self, user_id: str) -> list[Permission]:
        """Permissions of all member groups, in store order. Store errors propagate."""
        async with self._uow_factory() as uow:
            groups = await uow.user_groups.list_for_user(user_id)

        permissions: list[Permission] = []
        for group in groups:
            permissions.extend(group.permissions)
        logger.debug(
            "Resolved %d custom permissions from %d groups for user %s",
            len(permissions),
            len(groups),
            user_id,
        )
        return permissions
