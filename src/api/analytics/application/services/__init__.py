"""Application services for the analytics bounded context."""

from analytics.application.services.dashboard_embedding import (
    DashboardEmbeddingService,
)
from analytics.application.services.rls_context import RLSContextBuilder
from analytics.application.services.role_visibility import RoleVisibilityService

__all__ = [
    "DashboardEmbeddingService",
    "RLSContextBuilder",
    "RoleVisibilityService",
]
