"""Protocol for dashboard embedding observability."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class DashboardEmbeddingProbe(Protocol):
    """Domain probe for embed URL requests."""

    def caller_not_found(self, tenant_id: str, user_id: str) -> None:
        ...

    def embed_url_generated(
        self, tenant_id: str, user_id: str, experience: str, expires_in: int
    ) -> None:
        ...

    def embed_url_failed(
        self, tenant_id: str, user_id: str, experience: str, error: Exception
    ) -> None:
        ...

    def with_context(self, context: ObservationContext) -> DashboardEmbeddingProbe:
        ...


class DefaultDashboardEmbeddingProbe:
    """Default implementation of DashboardEmbeddingProbe using structlog."""

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

    def with_context(
        self, context: ObservationContext
    ) -> DefaultDashboardEmbeddingProbe:
        return DefaultDashboardEmbeddingProbe(logger=self._logger, context=context)

    def caller_not_found(self, tenant_id: str, user_id: str) -> None:
        self._logger.warning(
            "dashboard_caller_not_found",
            tenant_id=tenant_id,
            user_id=user_id,
            **self._get_context_kwargs(),
        )

    def embed_url_generated(
        self, tenant_id: str, user_id: str, experience: str, expires_in: int
    ) -> None:
        self._logger.info(
            "dashboard_embed_url_generated",
            tenant_id=tenant_id,
            user_id=user_id,
            experience=experience,
            expires_in=expires_in,
            **self._get_context_kwargs(),
        )

    def embed_url_failed(
        self, tenant_id: str, user_id: str, experience: str, error: Exception
    ) -> None:
        self._logger.error(
            "dashboard_embed_url_failed",
            tenant_id=tenant_id,
            user_id=user_id,
            experience=experience,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )
