"""Audit log repository port."""

from typing import Any, Protocol


class AuditLogRepository(Protocol):
    """Port for writing audit records."""

    async def record(
        self,
        action: str,
        resource_type: str,
        resource_id: str | None,
        old_values: dict[str, Any] | None,
        new_values: dict[str, Any] | None,
        actor_id: str | None = None,
    ) -> None: ...
