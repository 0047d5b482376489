"""Dependency injection for the IAM user lifecycle.

Composes the process-wide connection pool and the Cognito adapter with
the IAM application services. Services are built per request; the pool
and the identity provider client are shared.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from iam.application.services import (
    DualSystemUserLifecycleCoordinator,
    TenantAuthorizationGuard,
)
from iam.infrastructure.cognito_identity_provider import CognitoIdentityProvider
from iam.infrastructure.transactions import PoolTransactionRunner
from iam.infrastructure.user_repository import UserRepository
from iam.ports import IIdentityProvider, IUserRepository, TransactionRunner
from infrastructure.database import ConnectionPoolManager
from infrastructure.database.dependencies import get_connection_pool
from infrastructure.settings import get_identity_provider_settings


@lru_cache
def get_identity_provider() -> IIdentityProvider:
    """Get the cached Cognito adapter (one boto3 client per process)."""
    settings = get_identity_provider_settings()
    return CognitoIdentityProvider(
        user_pool_id=settings.user_pool_id,
        region_name=settings.region,
        suppress_invitation=settings.suppress_invitation,
    )


def get_user_repository(
    pool: Annotated[ConnectionPoolManager, Depends(get_connection_pool)],
) -> IUserRepository:
    return UserRepository(pool)


def get_transaction_runner(
    pool: Annotated[ConnectionPoolManager, Depends(get_connection_pool)],
) -> TransactionRunner:
    return PoolTransactionRunner(pool)


def get_tenant_authorization_guard(
    user_repository: Annotated[IUserRepository, Depends(get_user_repository)],
) -> TenantAuthorizationGuard:
    return TenantAuthorizationGuard(user_repository)


def get_user_lifecycle_coordinator(
    user_repository: Annotated[IUserRepository, Depends(get_user_repository)],
    identity_provider: Annotated[IIdentityProvider, Depends(get_identity_provider)],
    transactions: Annotated[TransactionRunner, Depends(get_transaction_runner)],
    guard: Annotated[TenantAuthorizationGuard, Depends(get_tenant_authorization_guard)],
) -> DualSystemUserLifecycleCoordinator:
    """Get the lifecycle coordinator for the current request."""
    return DualSystemUserLifecycleCoordinator(
        user_repository=user_repository,
        identity_provider=identity_provider,
        transactions=transactions,
        guard=guard,
    )
