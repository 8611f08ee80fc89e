"""User group entity - named permission set granted to its members."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from parkaccess.domain.entities.permission import Permission


@dataclass
class UserGroup:
    """Group of users sharing custom permissions, optionally scoped to an operator.

    Holds at most one permission per distinct resource string.
    """

    id: str
    name: str
    description: str
    created_at: datetime
    updated_at: datetime
    permissions: list[Permission] = field(default_factory=list)
    operator_id: str | None = None
    member_count: int = 0

    def add_permission(self, permission: Permission) -> None:
        """Add permission, replacing the existing entry for the same resource in place."""
        for i, existing in enumerate(self.permissions):
            if existing.resource == permission.resource:
                self.permissions[i] = permission
                return
        self.permissions.append(permission)

    def remove_permission(self, resource: str) -> bool:
        """Remove the entry for resource. Returns False if there was none."""
        before = len(self.permissions)
        self.permissions = [p for p in self.permissions if p.resource != resource]
        return len(self.permissions) != before

    def replace_permissions(self, permissions: list[Permission]) -> None:
        """Replace the whole list; duplicates collapse, last one wins."""
        self.permissions = []
        for permission in permissions:
            self.add_permission(permission)

    def snapshot(self) -> dict[str, Any]:
        """JSON-ready view used for audit records and API responses."""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "permissions": [p.to_dict() for p in self.permissions],
            "operator_id": self.operator_id,
            "member_count": self.member_count,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }


@dataclass
class GroupMembership:
    """User belongs to group since joined_at."""

    user_id: str
    group_id: str
    joined_at: datetime
