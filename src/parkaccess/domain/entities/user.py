"""User identity as read from the user store."""

from dataclasses import dataclass

from parkaccess.domain.value_objects import UserType


@dataclass
class UserIdentity:
    """User type and tenant of an account."""

    user_id: str
    user_type: UserType
    operator_id: str | None = None
