"""Protocol for tenant authorization observability.

Every denial is recorded with the tenant and caller so the log doubles as
an audit trail of refused operations.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class TenantAuthorizationProbe(Protocol):
    """Domain probe for tenant authorization decisions."""

    def access_denied(
        self,
        tenant_id: str,
        user_id: str,
        reason: str,
        target_user_id: str | None = None,
    ) -> None:
        """Record that an operation was refused."""
        ...

    def admin_verified(self, tenant_id: str, user_id: str) -> None:
        """Record that the caller was confirmed as tenant admin."""
        ...

    def with_context(self, context: ObservationContext) -> TenantAuthorizationProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultTenantAuthorizationProbe:
    """Default implementation of TenantAuthorizationProbe using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        """Get context metadata as kwargs for logging."""
        if self._context is None:
            return {}
        # Explicit tenant/user arguments win over the bound context
        return {
            k: v
            for k, v in self._context.as_dict().items()
            if k not in ("tenant_id", "user_id")
        }

    def with_context(
        self, context: ObservationContext
    ) -> DefaultTenantAuthorizationProbe:
        """Create a new probe with observation context bound."""
        return DefaultTenantAuthorizationProbe(logger=self._logger, context=context)

    def access_denied(
        self,
        tenant_id: str,
        user_id: str,
        reason: str,
        target_user_id: str | None = None,
    ) -> None:
        self._logger.warning(
            "tenant_access_denied",
            tenant_id=tenant_id,
            user_id=user_id,
            reason=reason,
            target_user_id=target_user_id,
            **self._get_context_kwargs(),
        )

    def admin_verified(self, tenant_id: str, user_id: str) -> None:
        self._logger.debug(
            "tenant_admin_verified",
            tenant_id=tenant_id,
            user_id=user_id,
            **self._get_context_kwargs(),
        )
