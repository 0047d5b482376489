"""Domain probes for the analytics application services."""

from analytics.application.observability.dashboard_embedding_probe import (
    DashboardEmbeddingProbe,
    DefaultDashboardEmbeddingProbe,
)
from analytics.application.observability.rls_context_probe import (
    DefaultRLSContextProbe,
    RLSContextProbe,
)
from analytics.application.observability.role_visibility_probe import (
    DefaultRoleVisibilityProbe,
    RoleVisibilityProbe,
)

__all__ = [
    "DashboardEmbeddingProbe",
    "DefaultDashboardEmbeddingProbe",
    "DefaultRLSContextProbe",
    "DefaultRoleVisibilityProbe",
    "RLSContextProbe",
    "RoleVisibilityProbe",
]
