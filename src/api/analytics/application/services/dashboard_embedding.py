"""Embedded dashboard sessions for tenant members."""

from __future__ import annotations

from analytics.application.observability import (
    DashboardEmbeddingProbe,
    DefaultDashboardEmbeddingProbe,
)
from analytics.application.services.rls_context import RLSContextBuilder
from analytics.domain.value_objects import EmbedUrl, SessionContext
from analytics.ports.embedding import EmbeddingExperience, IEmbeddingService
from analytics.ports.repositories import ICallerDirectory
from shared_kernel.auth import RequestContext
from shared_kernel.errors import CallerNotFoundError, ServiceError


class DashboardEmbeddingService:
    """Resolves the caller, builds their RLS context and requests a URL.

    The session context is keyed on the caller's relational row, so only
    users that exist and are active in the tenant get a session.
    """

    def __init__(
        self,
        callers: ICallerDirectory,
        rls_context_builder: RLSContextBuilder,
        embedding_service: IEmbeddingService,
        probe: DashboardEmbeddingProbe | None = None,
    ):
        self._callers = callers
        self._rls_context_builder = rls_context_builder
        self._embedding_service = embedding_service
        self._probe = probe or DefaultDashboardEmbeddingProbe()

    async def session_context(self, context: RequestContext) -> SessionContext:
        """RLS session context of the caller.

        Raises:
            CallerNotFoundError: Caller has no active row in their tenant
        """
        caller = await self._callers.find_active_caller(
            context.tenant_id, context.user_id
        )
        if caller is None:
            self._probe.caller_not_found(
                tenant_id=context.tenant_id, user_id=context.user_id
            )
            raise CallerNotFoundError("User not found")
        return await self._rls_context_builder.build(
            tenant_id=context.tenant_id, user_id=caller.user_id, role=caller.role
        )

    async def embed_url(
        self,
        context: RequestContext,
        experience: EmbeddingExperience = EmbeddingExperience.DASHBOARD,
    ) -> EmbedUrl:
        """Generate an embed URL restricted to the caller's session context."""
        session_context = await self.session_context(context)
        try:
            embed_url = await self._embedding_service.generate_embed_url(
                session_context, experience
            )
        except ServiceError as e:
            self._probe.embed_url_failed(
                tenant_id=context.tenant_id,
                user_id=session_context.user_id,
                experience=experience.value,
                error=e,
            )
            raise
        self._probe.embed_url_generated(
            tenant_id=context.tenant_id,
            user_id=session_context.user_id,
            experience=experience.value,
            expires_in=embed_url.expires_in,
        )
        return embed_url
