"""Repository and transaction protocols (ports) for IAM bounded context.

Repository methods that take a ``connection`` run on it when given, so a
caller can group several of them into one transaction opened through a
``TransactionRunner``. Without one, each call runs on its own.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any, Protocol, TypeVar, runtime_checkable

from iam.domain.aggregates import User
from iam.domain.value_objects import UserId, UserRole

T = TypeVar("T")


@runtime_checkable
class TransactionRunner(Protocol):
    """Runs a unit of work inside one relational transaction."""

    async def transaction(self, fn: Callable[[Any], Awaitable[T]]) -> T:
        """Run ``fn(connection)`` inside BEGIN/COMMIT.

        The transaction is rolled back if ``fn`` raises.

        Raises:
            DuplicateUserRowError: A statement hit a uniqueness constraint
            StoreUnavailableError: The store stayed unreachable
        """
        ...


@runtime_checkable
class IUserRepository(Protocol):
    """Persistence of tenant-scoped user rows.

    Every method filters by tenant id; there is no cross-tenant lookup.
    """

    async def get_active_by_identity(
        self, tenant_id: str, identity_id: str, connection: Any = None
    ) -> User | None:
        """Find the active row for an identity-provider subject in a tenant.

        Args:
            tenant_id: Tenant to search
            identity_id: Identity-provider subject
            connection: Optional open transaction

        Returns:
            The user if an ``Active`` row exists, None otherwise
        """
        ...

    async def get_by_user_id(
        self, tenant_id: str, user_id: str, connection: Any = None
    ) -> User | None:
        """Load a user by tenant-scoped ID, whatever its status."""
        ...

    async def find_live_by_email(
        self, tenant_id: str, email: str, connection: Any = None
    ) -> User | None:
        """Find a non-deleted user with the given email in a tenant."""
        ...

    async def list_live(self, tenant_id: str) -> list[User]:
        """All non-deleted users of a tenant, newest first."""
        ...

    async def next_user_id(self, tenant_id: str, connection: Any) -> UserId:
        """Compute the next free user ID for a tenant.

        The result is only a candidate: a concurrent create may claim it
        first, in which case ``insert`` fails with DuplicateUserRowError.
        """
        ...

    async def insert(self, user: User, connection: Any) -> None:
        """Insert a new user row.

        Raises:
            DuplicateUserRowError: (tenant, user ID), identity or live email
                already taken (raised when the transaction ends)
        """
        ...

    async def update_role(
        self, tenant_id: str, user_id: str, role: UserRole, connection: Any
    ) -> int:
        """Set the role of a non-deleted user. Returns rows updated."""
        ...

    async def soft_delete(self, tenant_id: str, user_id: str, connection: Any) -> int:
        """Mark a non-deleted user ``Deleted``. Returns rows updated."""
        ...
