"""PostgreSQL Unit of Work implementation."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from psycopg_pool import AsyncConnectionPool

from parkaccess.application.ports import UnitOfWorkFactory
from parkaccess.infrastructure.persistence.postgres.audit_log_repository import (
    PostgresAuditLogRepository,
)
from parkaccess.infrastructure.persistence.postgres.membership_repository import (
    PostgresGroupMembershipRepository,
)
from parkaccess.infrastructure.persistence.postgres.user_group_repository import (
    PostgresUserGroupRepository,
)
from parkaccess.infrastructure.persistence.postgres.user_repository import (
    PostgresUserRepository,
)


class PostgresUnitOfWork:
    """PostgreSQL Unit of Work - one connection, one transaction."""

    def __init__(self, pool: AsyncConnectionPool) -> None:
        self._pool = pool
        self._conn: object | None = None
        self._conn_cm: object | None = None

    async def __aenter__(self) -> "PostgresUnitOfWork":
        self._conn_cm = self._pool.connection()
        self._conn = await self._conn_cm.__aenter__()
        self._users = PostgresUserRepository(self._conn)
        self._user_groups = PostgresUserGroupRepository(self._conn)
        self._memberships = PostgresGroupMembershipRepository(self._conn)
        self._audit_logs = PostgresAuditLogRepository(self._conn)
        return self

    async def __aexit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        if exc_type and self._conn:
            await self._conn.rollback()
        if self._conn_cm:
            await self._conn_cm.__aexit__(exc_type, exc_val, exc_tb)

    @property
    def users(self) -> PostgresUserRepository:
        return self._users

    @property
    def user_groups(self) -> PostgresUserGroupRepository:
        return self._user_groups

    @property
    def memberships(self) -> PostgresGroupMembershipRepository:
        return self._memberships

    @property
    def audit_logs(self) -> PostgresAuditLogRepository:
        return self._audit_logs

    async def commit(self) -> None:
        if self._conn:
            await self._conn.commit()

    async def rollback(self) -> None:
        if self._conn:
            await self._conn.rollback()


def create_uow_factory(pool: AsyncConnectionPool) -> UnitOfWorkFactory:
    """Create UnitOfWork factory (async context manager)."""

    @asynccontextmanager
    async def factory() -> AsyncIterator[PostgresUnitOfWork]:
        uow = PostgresUnitOfWork(pool)
        async with uow:
            try:
                yield uow
                await uow.commit()
            except BaseException:
                await uow.rollback()
                raise

    return factory
