"""Group membership repository port."""

from typing import Protocol

from parkaccess.domain.entities import GroupMembership


class GroupMembershipRepository(Protocol):
    """Port for the user <-> group join table."""

    async def get(self, user_id: str, group_id: str) -> GroupMembership | None: ...

    async def list_by_group(self, group_id: str) -> list[GroupMembership]: ...

    async def add(self, membership: GroupMembership) -> GroupMembership: ...

    async def remove(self, user_id: str, group_id: str) -> bool: ...

    async def delete_by_group(self, group_id: str) -> None: ...
