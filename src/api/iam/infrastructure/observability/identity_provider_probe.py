"""Domain probe for identity provider calls."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class IdentityProviderProbe(Protocol):
    """Domain probe for identity provider operations."""

    def identity_created(self, identity_id: str, tenant_id: str) -> None:
        """Record that an identity record was created."""
        ...

    def identity_attribute_updated(self, identity_id: str, attribute: str) -> None:
        """Record that an identity attribute was written."""
        ...

    def identity_deleted(self, identity_id: str, existed: bool) -> None:
        """Record that an identity record was deleted."""
        ...

    def identity_call_failed(self, operation: str, error_code: str, error: Exception) -> None:
        """Record that the provider rejected or failed a call."""
        ...

    def with_context(self, context: ObservationContext) -> IdentityProviderProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultIdentityProviderProbe:
    """Default implementation of IdentityProviderProbe using structlog."""

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
        return self._context.as_dict()

    def with_context(self, context: ObservationContext) -> DefaultIdentityProviderProbe:
        """Create a new probe with observation context bound."""
        return DefaultIdentityProviderProbe(logger=self._logger, context=context)

    def identity_created(self, identity_id: str, tenant_id: str) -> None:
        self._logger.info(
            "identity_created",
            identity_id=identity_id,
            identity_tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def identity_attribute_updated(self, identity_id: str, attribute: str) -> None:
        self._logger.info(
            "identity_attribute_updated",
            identity_id=identity_id,
            attribute=attribute,
            **self._get_context_kwargs(),
        )

    def identity_deleted(self, identity_id: str, existed: bool) -> None:
        self._logger.info(
            "identity_deleted",
            identity_id=identity_id,
            existed=existed,
            **self._get_context_kwargs(),
        )

    def identity_call_failed(self, operation: str, error_code: str, error: Exception) -> None:
        self._logger.error(
            "identity_provider_call_failed",
            operation=operation,
            error_code=error_code,
            error=str(error),
            **self._get_context_kwargs(),
        )
