"""Protocol for user lifecycle observability.

Defines the interface for domain probes that capture create, role update
and delete events across the identity provider and the relational store.
Divergence events are logged at critical level and flagged for
reconciliation so they stand apart from ordinary transient failures.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class UserLifecycleProbe(Protocol):
    """Domain probe for dual-system user lifecycle operations."""

    def user_created(self, tenant_id: str, user_id: str, role: str) -> None:
        """Record that both records of a new user exist."""
        ...

    def user_role_updated(
        self, tenant_id: str, user_id: str, previous_role: str, role: str
    ) -> None:
        """Record that a role change reached both systems."""
        ...

    def user_deleted(self, tenant_id: str, user_id: str) -> None:
        """Record that a user was removed from both systems."""
        ...

    def self_deletion_denied(self, tenant_id: str, user_id: str) -> None:
        """Record that a caller tried to delete their own account."""
        ...

    def user_id_conflict(self, tenant_id: str, candidate_user_id: str, attempt: int) -> None:
        """Record that a concurrent create claimed the candidate user ID."""
        ...

    def compensation_started(
        self, operation: str, tenant_id: str, identity_id: str, error: Exception
    ) -> None:
        """Record that an identity-provider change is being undone."""
        ...

    def compensation_succeeded(self, operation: str, tenant_id: str, identity_id: str) -> None:
        """Record that the undo succeeded and the systems agree again."""
        ...

    def divergence_detected(
        self,
        kind: str,
        tenant_id: str,
        identity_id: str,
        user_id: str | None,
        error: Exception,
    ) -> None:
        """Record that the two systems disagree and need reconciliation."""
        ...

    def with_context(self, context: ObservationContext) -> UserLifecycleProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultUserLifecycleProbe:
    """Default implementation of UserLifecycleProbe using structlog."""

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
        return {
            k: v
            for k, v in self._context.as_dict().items()
            if k not in ("tenant_id", "user_id")
        }

    def with_context(self, context: ObservationContext) -> DefaultUserLifecycleProbe:
        """Create a new probe with observation context bound."""
        return DefaultUserLifecycleProbe(logger=self._logger, context=context)

    def user_created(self, tenant_id: str, user_id: str, role: str) -> None:
        self._logger.info(
            "user_created",
            tenant_id=tenant_id,
            user_id=user_id,
            role=role,
            **self._get_context_kwargs(),
        )

    def user_role_updated(
        self, tenant_id: str, user_id: str, previous_role: str, role: str
    ) -> None:
        self._logger.info(
            "user_role_updated",
            tenant_id=tenant_id,
            user_id=user_id,
            previous_role=previous_role,
            role=role,
            **self._get_context_kwargs(),
        )

    def user_deleted(self, tenant_id: str, user_id: str) -> None:
        self._logger.info(
            "user_deleted",
            tenant_id=tenant_id,
            user_id=user_id,
            **self._get_context_kwargs(),
        )

    def self_deletion_denied(self, tenant_id: str, user_id: str) -> None:
        self._logger.warning(
            "user_self_deletion_denied",
            tenant_id=tenant_id,
            user_id=user_id,
            reason="self_deletion_forbidden",
            **self._get_context_kwargs(),
        )

    def user_id_conflict(self, tenant_id: str, candidate_user_id: str, attempt: int) -> None:
        self._logger.warning(
            "user_id_allocation_conflict",
            tenant_id=tenant_id,
            candidate_user_id=candidate_user_id,
            attempt=attempt,
            **self._get_context_kwargs(),
        )

    def compensation_started(
        self, operation: str, tenant_id: str, identity_id: str, error: Exception
    ) -> None:
        self._logger.warning(
            "identity_compensation_started",
            operation=operation,
            tenant_id=tenant_id,
            identity_id=identity_id,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )

    def compensation_succeeded(self, operation: str, tenant_id: str, identity_id: str) -> None:
        self._logger.info(
            "identity_compensation_succeeded",
            operation=operation,
            tenant_id=tenant_id,
            identity_id=identity_id,
            **self._get_context_kwargs(),
        )

    def divergence_detected(
        self,
        kind: str,
        tenant_id: str,
        identity_id: str,
        user_id: str | None,
        error: Exception,
    ) -> None:
        self._logger.critical(
            "identity_store_divergence",
            divergence_kind=kind,
            tenant_id=tenant_id,
            identity_id=identity_id,
            user_id=user_id,
            error=str(error),
            error_type=type(error).__name__,
            requires_reconciliation=True,
            retryable_by_caller=False,
            **self._get_context_kwargs(),
        )
