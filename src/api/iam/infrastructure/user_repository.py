"""PostgreSQL implementation of IUserRepository.

Statements are built with SQLAlchemy Core on the ``users`` table and run
either on a caller-provided transaction connection or through the
connection pool's retrying ``query``.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from sqlalchemy import Integer, cast, func, insert, select, update
from sqlalchemy.sql import Executable

from iam.domain.aggregates import User
from iam.domain.value_objects import (
    IdentityId,
    TenantId,
    UserId,
    UserRole,
    UserStatus,
)
from iam.infrastructure.models import UserModel
from iam.ports.repositories import IUserRepository
from infrastructure.database import ConnectionPoolManager, QueryResult, execute

users = UserModel.__table__

_USER_COLUMNS = (
    users.c.tenant_id,
    users.c.user_id,
    users.c.email,
    users.c.identity_id,
    users.c.role,
    users.c.region,
    users.c.store_id,
    users.c.is_tenant_admin,
    users.c.status,
    users.c.created_at,
)


def _to_domain(row: Mapping[str, Any]) -> User:
    return User(
        user_id=UserId(row["user_id"]),
        tenant_id=TenantId(row["tenant_id"]),
        email=row["email"],
        identity_id=IdentityId(row["identity_id"]),
        role=UserRole(row["role"]),
        status=UserStatus(row["status"]),
        is_tenant_admin=bool(row["is_tenant_admin"]),
        created_at=row["created_at"],
        region=row["region"],
        store_id=row["store_id"],
    )


class UserRepository(IUserRepository):
    """Relational store repository for tenant-scoped user rows."""

    def __init__(self, pool: ConnectionPoolManager) -> None:
        """Initialize repository with the shared connection pool.

        Args:
            pool: Process-wide connection pool manager
        """
        self._pool = pool

    async def _run(self, statement: Executable, connection: Any) -> QueryResult:
        if connection is not None:
            return await execute(connection, statement)
        return await self._pool.query(statement)

    async def _first(self, statement: Executable, connection: Any) -> User | None:
        row = (await self._run(statement, connection)).first()
        return _to_domain(row) if row else None

    async def get_active_by_identity(
        self, tenant_id: str, identity_id: str, connection: Any = None
    ) -> User | None:
        stmt = select(*_USER_COLUMNS).where(
            users.c.tenant_id == tenant_id,
            users.c.identity_id == identity_id,
            users.c.status == UserStatus.ACTIVE.value,
        )
        return await self._first(stmt, connection)

    async def get_by_user_id(
        self, tenant_id: str, user_id: str, connection: Any = None
    ) -> User | None:
        stmt = select(*_USER_COLUMNS).where(
            users.c.tenant_id == tenant_id,
            users.c.user_id == user_id,
        )
        return await self._first(stmt, connection)

    async def find_live_by_email(
        self, tenant_id: str, email: str, connection: Any = None
    ) -> User | None:
        stmt = (
            select(*_USER_COLUMNS)
            .where(
                users.c.tenant_id == tenant_id,
                func.lower(users.c.email) == email.lower(),
                users.c.status != UserStatus.DELETED.value,
            )
            .limit(1)
        )
        return await self._first(stmt, connection)

    async def list_live(self, tenant_id: str) -> list[User]:
        stmt = (
            select(*_USER_COLUMNS)
            .where(
                users.c.tenant_id == tenant_id,
                users.c.status != UserStatus.DELETED.value,
            )
            .order_by(users.c.created_at.desc(), users.c.user_id.desc())
        )
        result = await self._pool.query(stmt)
        return [_to_domain(row) for row in result.rows]

    async def next_user_id(self, tenant_id: str, connection: Any) -> UserId:
        """Allocate from the tenant's highest suffix, deleted rows included.

        Suffixes of deleted users are never reused.
        """
        suffix = func.substr(users.c.user_id, 2)
        stmt = select(
            func.max(cast(suffix, Integer)).label("max_number"),
            func.max(func.length(suffix)).label("width"),
        ).where(users.c.tenant_id == tenant_id)
        row = (await self._run(stmt, connection)).first() or {}
        return UserId.allocate(row.get("max_number"), row.get("width"))

    async def insert(self, user: User, connection: Any) -> None:
        stmt = insert(users).values(
            tenant_id=user.tenant_id.value,
            user_id=user.user_id.value,
            email=user.email,
            identity_id=user.identity_id.value,
            role=user.role.value,
            region=user.region,
            store_id=user.store_id,
            is_tenant_admin=user.is_tenant_admin,
            status=user.status.value,
            created_at=user.created_at,
            updated_at=user.created_at,
        )
        await self._run(stmt, connection)

    async def update_role(
        self, tenant_id: str, user_id: str, role: UserRole, connection: Any
    ) -> int:
        stmt = (
            update(users)
            .where(
                users.c.tenant_id == tenant_id,
                users.c.user_id == user_id,
                users.c.status != UserStatus.DELETED.value,
            )
            .values(role=role.value)
        )
        return (await self._run(stmt, connection)).rowcount

    async def soft_delete(self, tenant_id: str, user_id: str, connection: Any) -> int:
        stmt = (
            update(users)
            .where(
                users.c.tenant_id == tenant_id,
                users.c.user_id == user_id,
                users.c.status != UserStatus.DELETED.value,
            )
            .values(status=UserStatus.DELETED.value)
        )
        return (await self._run(stmt, connection)).rowcount
