"""Authorization context - who is asking, built per request."""

from dataclasses import dataclass, field
from typing import Any

from parkaccess.domain.value_objects import UserType


@dataclass(frozen=True)
class AuthorizationContext:
    """Caller identity plus optional request-scoped hints. Never persisted."""

    user_id: str
    user_type: UserType
    operator_id: str | None = None
    resource_id: str | None = None
    resource_type: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
