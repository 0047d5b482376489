"""Unit tests for IAM dependency wiring."""

from unittest.mock import MagicMock, patch

from iam.application.services import (
    DualSystemUserLifecycleCoordinator,
    TenantAuthorizationGuard,
)
from iam.dependencies import user_lifecycle
from iam.infrastructure.cognito_identity_provider import CognitoIdentityProvider
from iam.infrastructure.transactions import PoolTransactionRunner
from iam.infrastructure.user_repository import UserRepository
from infrastructure.settings import IdentityProviderSettings


def test_identity_provider_is_cached():
    user_lifecycle.get_identity_provider.cache_clear()
    settings = IdentityProviderSettings(user_pool_id="us-east-1_pool")

    with patch.object(
        user_lifecycle, "get_identity_provider_settings", return_value=settings
    ):
        first = user_lifecycle.get_identity_provider()
        second = user_lifecycle.get_identity_provider()

    user_lifecycle.get_identity_provider.cache_clear()
    assert isinstance(first, CognitoIdentityProvider)
    assert first is second


def test_coordinator_is_composed_from_pool():
    pool = MagicMock()
    repository = user_lifecycle.get_user_repository(pool)
    transactions = user_lifecycle.get_transaction_runner(pool)
    guard = user_lifecycle.get_tenant_authorization_guard(repository)

    coordinator = user_lifecycle.get_user_lifecycle_coordinator(
        user_repository=repository,
        identity_provider=MagicMock(),
        transactions=transactions,
        guard=guard,
    )

    assert isinstance(repository, UserRepository)
    assert isinstance(transactions, PoolTransactionRunner)
    assert isinstance(guard, TenantAuthorizationGuard)
    assert isinstance(coordinator, DualSystemUserLifecycleCoordinator)
