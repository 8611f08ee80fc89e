"""Repository ports."""

from parkaccess.application.ports.repositories.audit_log_repository import (
    AuditLogRepository,
)
from parkaccess.application.ports.repositories.membership_repository import (
    GroupMembershipRepository,
)
from parkaccess.application.ports.repositories.user_group_repository import (
    UserGroupRepository,
)
from parkaccess.application.ports.repositories.user_repository import UserRepository

__all__ = [
    "AuditLogRepository",
    "GroupMembershipRepository",
    "UserGroupRepository",
    "UserRepository",
]
