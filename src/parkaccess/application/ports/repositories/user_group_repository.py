"""User group repository port."""

from __future__ import annotations

from typing import Protocol

from parkaccess.domain.entities import UserGroup


class UserGroupRepository(Protocol):
    """Port for user group persistence."""

    async def get_by_id(self, group_id: str) -> UserGroup | None: ...

    async def list(self, operator_id: str | None = None) -> list[UserGroup]: ...

    async def list_for_user(self, user_id: str) -> list[UserGroup]: ...

    async def create(self, group: UserGroup) -> UserGroup: ...

    async def update(self, group: UserGroup) -> None: ...

    async def delete(self, group_id: str) -> None: ...
