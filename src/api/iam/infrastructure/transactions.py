"""TransactionRunner backed by the connection pool."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from iam.ports.exceptions import DuplicateUserRowError
from infrastructure.database import ConnectionPoolManager, IntegrityViolationError

T = TypeVar("T")

# Uniqueness constraints a concurrent create can trip on the users table
USER_UNIQUE_CONSTRAINTS = frozenset(
    {"pk_users", "uq_users_tenant_email_live", "uq_users_identity_id"}
)

# SQLite reports no constraint name, only the columns involved
_SQLITE_UNIQUE_PREFIX = "UNIQUE constraint failed: users."


def is_duplicate_user_row(error: IntegrityViolationError) -> bool:
    """Whether the violation is a users-table uniqueness conflict."""
    if error.constraint is not None:
        return error.constraint in USER_UNIQUE_CONSTRAINTS
    return _SQLITE_UNIQUE_PREFIX in str(error)


class PoolTransactionRunner:
    """Runs IAM units of work through ``ConnectionPoolManager.transaction``.

    Uniqueness violations on the users table are translated to the
    port-level ``DuplicateUserRowError``. Any other constraint violation
    (CHECK, foreign key) propagates as ``IntegrityViolationError``.
    """

    def __init__(self, pool: ConnectionPoolManager):
        self._pool = pool

    async def transaction(self, fn: Callable[[Any], Awaitable[T]]) -> T:
        try:
            return await self._pool.transaction(fn)
        except IntegrityViolationError as e:
            if not is_duplicate_user_row(e):
                raise
            raise DuplicateUserRowError(str(e), constraint=e.constraint) from e
