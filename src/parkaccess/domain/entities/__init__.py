"""Domain entities."""

from parkaccess.domain.entities.authorization_context import AuthorizationContext
from parkaccess.domain.entities.permission import Condition, Permission
from parkaccess.domain.entities.user import UserIdentity
from parkaccess.domain.entities.user_group import GroupMembership, UserGroup

__all__ = [
    "AuthorizationContext",
    "Condition",
    "GroupMembership",
    "Permission",
    "UserGroup",
    "UserIdentity",
]
