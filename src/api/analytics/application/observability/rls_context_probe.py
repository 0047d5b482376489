"""Protocol for RLS session context observability."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class RLSContextProbe(Protocol):
    """Domain probe for building analytics session contexts."""

    def session_context_built(
        self, tenant_id: str, user_id: str, tag_keys: list[str]
    ) -> None:
        """Record the tag keys (never the values) handed to analytics."""
        ...

    def foreign_tenant_rule_discarded(
        self, tenant_id: str, user_id: str, rule_tenant_id: str
    ) -> None:
        """Record a governance rule that belonged to another tenant."""
        ...

    def with_context(self, context: ObservationContext) -> RLSContextProbe:
        ...


class DefaultRLSContextProbe:
    """Default implementation of RLSContextProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultRLSContextProbe:
        return DefaultRLSContextProbe(logger=self._logger, context=context)

    def session_context_built(
        self, tenant_id: str, user_id: str, tag_keys: list[str]
    ) -> None:
        self._logger.info(
            "rls_session_context_built",
            tenant_id=tenant_id,
            user_id=user_id,
            tag_keys=tag_keys,
            **self._get_context_kwargs(),
        )

    def foreign_tenant_rule_discarded(
        self, tenant_id: str, user_id: str, rule_tenant_id: str
    ) -> None:
        self._logger.error(
            "rls_foreign_tenant_rule_discarded",
            tenant_id=tenant_id,
            user_id=user_id,
            rule_tenant_id=rule_tenant_id,
            **self._get_context_kwargs(),
        )
