"""Pydantic models for dashboard embedding responses."""

from __future__ import annotations

from analytics.domain.value_objects import EmbedUrl, SessionContext
from analytics.presentation.camel import CamelModel


class SessionTagResponse(CamelModel):
    key: str
    value: str


class SessionContextResponse(CamelModel):
    """The RLS session context applied to the caller's dashboards."""

    tenant_id: str
    user_id: str
    role: str
    session_tags: list[SessionTagResponse]

    @classmethod
    def from_domain(cls, context: SessionContext) -> SessionContextResponse:
        return cls(
            tenant_id=context.tenant_id,
            user_id=context.user_id,
            role=context.role,
            session_tags=[
                SessionTagResponse(key=tag.key, value=tag.value) for tag in context.tags
            ],
        )


class EmbedUrlResponse(CamelModel):
    embed_url: str
    expires_in: int

    @classmethod
    def from_domain(cls, embed_url: EmbedUrl) -> EmbedUrlResponse:
        return cls(embed_url=embed_url.url, expires_in=embed_url.expires_in)
