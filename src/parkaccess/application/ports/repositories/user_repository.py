"""User repository port - read-only view of the identity store."""

from typing import Protocol

from parkaccess.domain.entities import UserIdentity


class UserRepository(Protocol):
    """Port for looking up a user's type and operator."""

    async def get_by_id(self, user_id: str) -> UserIdentity | None: ...
