"""HTTP routes for embedded dashboards."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from analytics.application.services import DashboardEmbeddingService
from analytics.dependencies import get_dashboard_embedding_service
from analytics.ports.embedding import EmbeddingExperience
from analytics.presentation.dashboards.models import (
    EmbedUrlResponse,
    SessionContextResponse,
)
from infrastructure.authentication_dependencies import get_request_context
from shared_kernel.auth import RequestContext

router = APIRouter(
    prefix="/dashboards",
    tags=["dashboards"],
)

Service = Annotated[DashboardEmbeddingService, Depends(get_dashboard_embedding_service)]
Context = Annotated[RequestContext, Depends(get_request_context)]


@router.get("/session-context")
async def get_session_context(
    context: Context, service: Service
) -> SessionContextResponse:
    """Show the row-level security tags applied to the caller's dashboards."""
    session_context = await service.session_context(context)
    return SessionContextResponse.from_domain(session_context)


@router.get("/embed-url")
async def get_embed_url(context: Context, service: Service) -> EmbedUrlResponse:
    """Generate a dashboard embed URL restricted to the caller's data."""
    embed_url = await service.embed_url(context, EmbeddingExperience.DASHBOARD)
    return EmbedUrlResponse.from_domain(embed_url)


@router.get("/q-embed-url")
async def get_q_embed_url(context: Context, service: Service) -> EmbedUrlResponse:
    """Generate a Q topic embed URL restricted to the caller's data."""
    embed_url = await service.embed_url(context, EmbeddingExperience.Q_TOPIC)
    return EmbedUrlResponse.from_domain(embed_url)
