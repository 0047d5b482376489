"""Unit tests for analytics dependency wiring."""

from unittest.mock import MagicMock, patch

from analytics import dependencies
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
from infrastructure.settings import AnalyticsSettings


def test_embedding_service_is_cached():
    dependencies.get_embedding_service.cache_clear()
    settings = AnalyticsSettings(aws_account_id="123456789012", dashboard_id="dash-1")

    with patch.object(dependencies, "get_analytics_settings", return_value=settings):
        first = dependencies.get_embedding_service()
        second = dependencies.get_embedding_service()

    dependencies.get_embedding_service.cache_clear()
    assert isinstance(first, QuickSightEmbeddingService)
    assert first is second


def test_services_are_composed_from_pool():
    pool = MagicMock()
    callers = dependencies.get_caller_directory(pool)
    rules = dependencies.get_governance_rule_repository(pool)
    repository = dependencies.get_role_visibility_repository(pool)
    builder = dependencies.get_rls_context_builder(rules)

    role_service = dependencies.get_role_visibility_service(repository, callers)
    dashboard_service = dependencies.get_dashboard_embedding_service(
        callers=callers,
        rls_context_builder=builder,
        embedding_service=MagicMock(),
    )

    assert isinstance(callers, CallerDirectory)
    assert isinstance(rules, GovernanceRuleRepository)
    assert isinstance(repository, RoleVisibilityRepository)
    assert isinstance(builder, RLSContextBuilder)
    assert isinstance(role_service, RoleVisibilityService)
    assert isinstance(dashboard_service, DashboardEmbeddingService)
