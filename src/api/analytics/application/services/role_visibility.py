"""Role → metric visibility management.

Each tenant decides which dashboard metrics each role sees. Reads are
open to any authenticated member of the tenant; changes require the
caller to be an active tenant admin in the relational store.
"""

from __future__ import annotations

from analytics.application.commands import CreateRoleCommand, ShowMetricsCommand
from analytics.application.observability import (
    DefaultRoleVisibilityProbe,
    RoleVisibilityProbe,
)
from analytics.domain.value_objects import CallerProfile, RoleMetric
from analytics.ports.repositories import ICallerDirectory, IRoleVisibilityRepository
from shared_kernel.auth import RequestContext
from shared_kernel.errors import (
    CallerNotFoundError,
    InsufficientPrivilegeError,
    MetricNotFoundError,
    RoleAlreadyExistsError,
    RoleInUseError,
    RoleNotFoundError,
)


class RoleVisibilityService:
    """Application service for the role visibility table."""

    def __init__(
        self,
        repository: IRoleVisibilityRepository,
        callers: ICallerDirectory,
        probe: RoleVisibilityProbe | None = None,
    ):
        self._repository = repository
        self._callers = callers
        self._probe = probe or DefaultRoleVisibilityProbe()

    async def list_roles(self, context: RequestContext) -> dict[str, list[RoleMetric]]:
        """Metrics of the caller's tenant grouped by role, roles sorted."""
        grouped: dict[str, list[RoleMetric]] = {}
        for metric in await self._repository.list_all(context.tenant_id):
            grouped.setdefault(metric.role, []).append(metric)
        return grouped

    async def get_role(self, context: RequestContext, role: str) -> list[RoleMetric]:
        """Metrics of one role. Unknown roles have none."""
        return await self._repository.list_for_role(context.tenant_id, role)

    async def create_role(
        self, context: RequestContext, command: CreateRoleCommand
    ) -> list[RoleMetric]:
        """Create a role with every requested metric visible.

        Raises:
            CallerNotFoundError: Caller has no active row
            InsufficientPrivilegeError: Caller is not a tenant admin
            RoleAlreadyExistsError: The role already has rows
        """
        await self._require_tenant_admin(context)
        role = command.role.value
        if await self._repository.role_exists(context.tenant_id, role):
            raise RoleAlreadyExistsError("Role already exists", field="role")
        created = await self._repository.create_role(
            context.tenant_id, role, command.metrics
        )
        self._probe.role_created(
            tenant_id=context.tenant_id, role=role, metric_count=len(created)
        )
        return created

    async def show_metrics(
        self, context: RequestContext, command: ShowMetricsCommand
    ) -> list[RoleMetric]:
        """Make metrics visible for a role.

        Returns:
            Only rows that changed (inserted or flipped to visible)
        """
        await self._require_tenant_admin(context)
        role = command.role.value
        changed = await self._repository.show_metrics(
            context.tenant_id, role, command.metrics
        )
        self._probe.metrics_shown(
            tenant_id=context.tenant_id, role=role, changed_count=len(changed)
        )
        return changed

    async def hide_metric(
        self, context: RequestContext, role: str, metric_name: str
    ) -> None:
        """Hide a metric from a role. The row is kept.

        Raises:
            MetricNotFoundError: The role has no such metric
        """
        await self._require_tenant_admin(context)
        if not await self._repository.hide_metric(context.tenant_id, role, metric_name):
            raise MetricNotFoundError("Metric not found for this role")
        self._probe.metric_hidden(
            tenant_id=context.tenant_id, role=role, metric_name=metric_name
        )

    async def delete_role(self, context: RequestContext, role: str) -> int:
        """Delete every visibility row of a role.

        Returns:
            Number of rows deleted

        Raises:
            RoleInUseError: Active users still hold the role
            RoleNotFoundError: The role has no rows
        """
        await self._require_tenant_admin(context)
        if await self._callers.count_active_with_role(context.tenant_id, role) > 0:
            raise RoleInUseError("Cannot delete role that is assigned to active users")
        deleted = await self._repository.delete_role(context.tenant_id, role)
        if deleted == 0:
            raise RoleNotFoundError("Role not found")
        self._probe.role_deleted(
            tenant_id=context.tenant_id, role=role, metrics_deleted=deleted
        )
        return deleted

    async def _require_tenant_admin(self, context: RequestContext) -> CallerProfile:
        caller = await self._callers.find_active_caller(
            context.tenant_id, context.user_id
        )
        if caller is None:
            self._probe.access_denied(
                tenant_id=context.tenant_id,
                user_id=context.user_id,
                reason="caller_not_found",
            )
            raise CallerNotFoundError("User not found")
        if not caller.is_tenant_admin:
            self._probe.access_denied(
                tenant_id=context.tenant_id,
                user_id=context.user_id,
                reason="insufficient_privilege",
            )
            raise InsufficientPrivilegeError(
                "Unauthorized: Only tenant admins can perform this action"
            )
        return caller
