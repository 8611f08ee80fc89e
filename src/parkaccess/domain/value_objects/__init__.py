"""Domain value objects."""

from parkaccess.domain.value_objects.condition_operator import ConditionOperator
from parkaccess.domain.value_objects.permission_action import PermissionAction
from parkaccess.domain.value_objects.user_type import UserType

__all__ = [
    "ConditionOperator",
    "PermissionAction",
    "UserType",
]
