"""Authorization DTOs."""

from dataclasses import dataclass
from typing import Any

from parkaccess.domain.value_objects import PermissionAction


@dataclass
class PermissionCheck:
    """One entry of a batch permission check."""

    resource: str
    action: PermissionAction | str
    resource_data: Any = None

    @property
    def key(self) -> str:
        action = self.action.value if isinstance(self.action, PermissionAction) else self.action
        return f"{self.resource}:{action}"
