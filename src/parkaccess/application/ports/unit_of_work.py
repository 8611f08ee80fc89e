"""Unit of Work port - transactional boundary."""

from contextlib import AbstractAsyncContextManager
from typing import Protocol

from parkaccess.application.ports.repositories import (
    AuditLogRepository,
    GroupMembershipRepository,
    UserGroupRepository,
    UserRepository,
)


class UnitOfWork(Protocol):
    """Unit of Work - manages transaction and repository access."""

    @property
    def users(self) -> UserRepository: ...

    @property
    def user_groups(self) -> UserGroupRepository: ...

    @property
    def memberships(self) -> GroupMembershipRepository: ...

    @property
    def audit_logs(self) -> AuditLogRepository: ...

    async def commit(self) -> None: ...

    async def rollback(self) -> None: ...


class UnitOfWorkFactory(Protocol):
    """Factory for creating UnitOfWork instances (commit on success)."""

    def __call__(self) -> AbstractAsyncContextManager[UnitOfWork]: ...
