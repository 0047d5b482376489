"""Protocol for role → metric visibility observability."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class RoleVisibilityProbe(Protocol):
    """Domain probe for role visibility management."""

    def role_created(self, tenant_id: str, role: str, metric_count: int) -> None:
        ...

    def metrics_shown(self, tenant_id: str, role: str, changed_count: int) -> None:
        ...

    def metric_hidden(self, tenant_id: str, role: str, metric_name: str) -> None:
        ...

    def role_deleted(self, tenant_id: str, role: str, metrics_deleted: int) -> None:
        ...

    def access_denied(self, tenant_id: str, user_id: str, reason: str) -> None:
        """Record a refused management operation."""
        ...

    def with_context(self, context: ObservationContext) -> RoleVisibilityProbe:
        ...


class DefaultRoleVisibilityProbe:
    """Default implementation of RoleVisibilityProbe using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        if self._context is None:
            return {}
        return {
            k: v
            for k, v in self._context.as_dict().items()
            if k not in ("tenant_id", "user_id")
        }

    def with_context(self, context: ObservationContext) -> DefaultRoleVisibilityProbe:
        return DefaultRoleVisibilityProbe(logger=self._logger, context=context)

    def role_created(self, tenant_id: str, role: str, metric_count: int) -> None:
        self._logger.info(
            "role_created",
            tenant_id=tenant_id,
            role=role,
            metric_count=metric_count,
            **self._get_context_kwargs(),
        )

    def metrics_shown(self, tenant_id: str, role: str, changed_count: int) -> None:
        self._logger.info(
            "role_metrics_shown",
            tenant_id=tenant_id,
            role=role,
            changed_count=changed_count,
            **self._get_context_kwargs(),
        )

    def metric_hidden(self, tenant_id: str, role: str, metric_name: str) -> None:
        self._logger.info(
            "role_metric_hidden",
            tenant_id=tenant_id,
            role=role,
            metric_name=metric_name,
            **self._get_context_kwargs(),
        )

    def role_deleted(self, tenant_id: str, role: str, metrics_deleted: int) -> None:
        self._logger.info(
            "role_deleted",
            tenant_id=tenant_id,
            role=role,
            metrics_deleted=metrics_deleted,
            **self._get_context_kwargs(),
        )

    def access_denied(self, tenant_id: str, user_id: str, reason: str) -> None:
        self._logger.warning(
            "role_management_access_denied",
            tenant_id=tenant_id,
            user_id=user_id,
            reason=reason,
            **self._get_context_kwargs(),
        )
