"""Database infrastructure - pooled, retrying relational store access."""

from infrastructure.database.connection_pool import (
    ConnectionPoolManager,
    QueryResult,
    execute,
)
from infrastructure.database.exceptions import (
    CredentialsRejectedError,
    DatabaseError,
    IntegrityViolationError,
)
from infrastructure.database.retry import RetryPolicy, is_transient

__all__ = [
    "ConnectionPoolManager",
    "CredentialsRejectedError",
    "DatabaseError",
    "IntegrityViolationError",
    "QueryResult",
    "RetryPolicy",
    "execute",
    "is_transient",
]
