"""User group DTOs."""

from dataclasses import dataclass

from parkaccess.domain.entities import Permission


@dataclass
class UpdateUserGroupInput:
    """Partial update - fields left as None are not changed."""

    name: str | None = None
    description: str | None = None
    permissions: list[Permission] | None = None

    def is_empty(self) -> bool:
        return self.name is None and self.description is None and self.permissions is None
