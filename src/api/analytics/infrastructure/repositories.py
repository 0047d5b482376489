"""PostgreSQL implementations of the analytics repository ports.

Statements are built with SQLAlchemy Core and run through the shared
connection pool, so every read and write gets the pool's retry policy.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from sqlalchemy import Boolean, column, delete, func, insert, select, table, update
from sqlalchemy.ext.asyncio import AsyncConnection

from analytics.domain.value_objects import (
    CallerProfile,
    GovernanceDimension,
    GovernanceRule,
    RoleMetric,
)
from analytics.infrastructure.models import (
    GovernanceRuleModel,
    RoleMetricVisibilityModel,
)
from analytics.ports.repositories import (
    ICallerDirectory,
    IGovernanceRuleRepository,
    IRoleVisibilityRepository,
)
from infrastructure.database import (
    ConnectionPoolManager,
    IntegrityViolationError,
    execute,
)
from shared_kernel.errors import RoleAlreadyExistsError

governance_rules = GovernanceRuleModel.__table__
role_metrics = RoleMetricVisibilityModel.__table__

# The users table belongs to IAM; analytics reads only the columns it needs
users = table(
    "users",
    column("tenant_id"),
    column("user_id"),
    column("identity_id"),
    column("role"),
    column("is_tenant_admin", Boolean),
    column("status"),
)

_ACTIVE = "Active"

_ROLE_METRIC_COLUMNS = (
    role_metrics.c.id,
    role_metrics.c.role,
    role_metrics.c.metric_name,
    role_metrics.c.is_visible,
    role_metrics.c.created_at,
    role_metrics.c.updated_at,
)


def _to_role_metric(row: Mapping[str, Any]) -> RoleMetric:
    return RoleMetric(
        id=row["id"],
        role=row["role"],
        metric_name=row["metric_name"],
        is_visible=bool(row["is_visible"]),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


class GovernanceRuleRepository(IGovernanceRuleRepository):
    """Reads governance rules, always scoped by tenant."""

    def __init__(self, pool: ConnectionPoolManager) -> None:
        self._pool = pool

    async def list_for_user(self, tenant_id: str, user_id: str) -> list[GovernanceRule]:
        stmt = (
            select(
                governance_rules.c.tenant_id,
                governance_rules.c.user_id,
                governance_rules.c.dimension,
                governance_rules.c["values"],
            )
            .where(
                governance_rules.c.tenant_id == tenant_id,
                governance_rules.c.user_id == user_id,
            )
            .order_by(governance_rules.c.created_at, governance_rules.c.rule_id)
        )
        result = await self._pool.query(stmt)
        return [
            GovernanceRule(
                tenant_id=row["tenant_id"],
                user_id=row["user_id"],
                dimension=GovernanceDimension(row["dimension"]),
                values=tuple(row["values"] or ()),
            )
            for row in result.rows
        ]


class CallerDirectory(ICallerDirectory):
    """Resolves callers against the users table."""

    def __init__(self, pool: ConnectionPoolManager) -> None:
        self._pool = pool

    async def find_active_caller(
        self, tenant_id: str, identity_id: str
    ) -> CallerProfile | None:
        stmt = select(
            users.c.tenant_id,
            users.c.user_id,
            users.c.role,
            users.c.is_tenant_admin,
        ).where(
            users.c.tenant_id == tenant_id,
            users.c.identity_id == identity_id,
            users.c.status == _ACTIVE,
        )
        row = (await self._pool.query(stmt)).first()
        if row is None:
            return None
        return CallerProfile(
            tenant_id=row["tenant_id"],
            user_id=row["user_id"],
            role=row["role"],
            is_tenant_admin=bool(row["is_tenant_admin"]),
        )

    async def count_active_with_role(self, tenant_id: str, role: str) -> int:
        stmt = select(func.count().label("count")).where(
            users.c.tenant_id == tenant_id,
            users.c.role == role,
            users.c.status == _ACTIVE,
        )
        row = (await self._pool.query(stmt)).first()
        return int(row["count"]) if row else 0


class RoleVisibilityRepository(IRoleVisibilityRepository):
    """Role → metric visibility rows."""

    def __init__(self, pool: ConnectionPoolManager) -> None:
        self._pool = pool

    async def list_all(self, tenant_id: str) -> list[RoleMetric]:
        stmt = (
            select(*_ROLE_METRIC_COLUMNS)
            .where(role_metrics.c.tenant_id == tenant_id)
            .order_by(role_metrics.c.role, role_metrics.c.metric_name)
        )
        result = await self._pool.query(stmt)
        return [_to_role_metric(row) for row in result.rows]

    async def list_for_role(self, tenant_id: str, role: str) -> list[RoleMetric]:
        stmt = (
            select(*_ROLE_METRIC_COLUMNS)
            .where(
                role_metrics.c.tenant_id == tenant_id,
                role_metrics.c.role == role,
            )
            .order_by(role_metrics.c.metric_name)
        )
        result = await self._pool.query(stmt)
        return [_to_role_metric(row) for row in result.rows]

    async def role_exists(self, tenant_id: str, role: str) -> bool:
        stmt = (
            select(role_metrics.c.id)
            .where(
                role_metrics.c.tenant_id == tenant_id,
                role_metrics.c.role == role,
            )
            .limit(1)
        )
        return (await self._pool.query(stmt)).first() is not None

    async def create_role(
        self, tenant_id: str, role: str, metrics: Sequence[str]
    ) -> list[RoleMetric]:
        async def insert_all(connection: AsyncConnection) -> list[RoleMetric]:
            return [
                await self._insert(connection, tenant_id, role, metric)
                for metric in metrics
            ]

        try:
            return await self._pool.transaction(insert_all)
        except IntegrityViolationError as e:
            # A concurrent create won the unique constraint
            raise RoleAlreadyExistsError("Role already exists", field="role") from e

    async def show_metrics(
        self, tenant_id: str, role: str, metrics: Sequence[str]
    ) -> list[RoleMetric]:
        async def show_all(connection: AsyncConnection) -> list[RoleMetric]:
            changed: list[RoleMetric] = []
            for metric in metrics:
                existing = await execute(
                    connection,
                    select(role_metrics.c.is_visible).where(
                        role_metrics.c.tenant_id == tenant_id,
                        role_metrics.c.role == role,
                        role_metrics.c.metric_name == metric,
                    ),
                )
                row = existing.first()
                if row is None:
                    changed.append(
                        await self._insert(connection, tenant_id, role, metric)
                    )
                elif not row["is_visible"]:
                    result = await execute(
                        connection,
                        update(role_metrics)
                        .where(
                            role_metrics.c.tenant_id == tenant_id,
                            role_metrics.c.role == role,
                            role_metrics.c.metric_name == metric,
                        )
                        .values(is_visible=True)
                        .returning(*_ROLE_METRIC_COLUMNS),
                    )
                    changed.extend(_to_role_metric(r) for r in result.rows)
            return changed

        try:
            return await self._pool.transaction(show_all)
        except IntegrityViolationError:
            # A concurrent show inserted one of the rows first; the rerun
            # sees it and only updates what is still hidden
            return await self._pool.transaction(show_all)

    async def hide_metric(self, tenant_id: str, role: str, metric_name: str) -> bool:
        stmt = (
            update(role_metrics)
            .where(
                role_metrics.c.tenant_id == tenant_id,
                role_metrics.c.role == role,
                role_metrics.c.metric_name == metric_name,
            )
            .values(is_visible=False)
        )
        return (await self._pool.query(stmt)).rowcount > 0

    async def delete_role(self, tenant_id: str, role: str) -> int:
        stmt = delete(role_metrics).where(
            role_metrics.c.tenant_id == tenant_id,
            role_metrics.c.role == role,
        )
        return (await self._pool.query(stmt)).rowcount

    async def _insert(
        self,
        connection: AsyncConnection,
        tenant_id: str,
        role: str,
        metric: str,
    ) -> RoleMetric:
        result = await execute(
            connection,
            insert(role_metrics)
            .values(tenant_id=tenant_id, role=role, metric_name=metric, is_visible=True)
            .returning(*_ROLE_METRIC_COLUMNS),
        )
        return _to_role_metric(result.rows[0])
