"""Dependency injection for the analytics bounded context.

Composes the process-wide connection pool and the QuickSight adapter with
the analytics application services.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from analytics.application.services import (
    DashboardEmbeddingService,
    RLSContextBuilder,
    RoleVisibilityService,
)
from analytics.infrastructure.quicksight_embedding import QuickSightEmbeddingService
from analytics.infrastructure.repositories import (
    CallerDirectory,
    GovernanceRuleRepository,
    RoleVisibilityRepository,
)
from analytics.ports import (
    ICallerDirectory,
    IEmbeddingService,
    IGovernanceRuleRepository,
    IRoleVisibilityRepository,
)
from infrastructure.database import ConnectionPoolManager
from infrastructure.database.dependencies import get_connection_pool
from infrastructure.settings import get_analytics_settings

Pool = Annotated[ConnectionPoolManager, Depends(get_connection_pool)]


@lru_cache
def get_embedding_service() -> IEmbeddingService:
    """Get the cached QuickSight adapter (one boto3 client per process)."""
    return QuickSightEmbeddingService(get_analytics_settings())


def get_caller_directory(pool: Pool) -> ICallerDirectory:
    return CallerDirectory(pool)


def get_governance_rule_repository(pool: Pool) -> IGovernanceRuleRepository:
    return GovernanceRuleRepository(pool)


def get_role_visibility_repository(pool: Pool) -> IRoleVisibilityRepository:
    return RoleVisibilityRepository(pool)


def get_rls_context_builder(
    governance_rules: Annotated[
        IGovernanceRuleRepository, Depends(get_governance_rule_repository)
    ],
) -> RLSContextBuilder:
    return RLSContextBuilder(governance_rules)


def get_role_visibility_service(
    repository: Annotated[
        IRoleVisibilityRepository, Depends(get_role_visibility_repository)
    ],
    callers: Annotated[ICallerDirectory, Depends(get_caller_directory)],
) -> RoleVisibilityService:
    return RoleVisibilityService(repository=repository, callers=callers)


def get_dashboard_embedding_service(
    callers: Annotated[ICallerDirectory, Depends(get_caller_directory)],
    rls_context_builder: Annotated[RLSContextBuilder, Depends(get_rls_context_builder)],
    embedding_service: Annotated[IEmbeddingService, Depends(get_embedding_service)],
) -> DashboardEmbeddingService:
    """Get the dashboard embedding service for the current request."""
    return DashboardEmbeddingService(
        callers=callers,
        rls_context_builder=rls_context_builder,
        embedding_service=embedding_service,
    )
