"""Database-specific exceptions raised by the connection pool."""


class DatabaseError(Exception):
    """Base exception for database operations."""

    pass


class CredentialsRejectedError(DatabaseError):
    """Raised when the store refuses the cached credentials.

    Usually means the secret was rotated; the credential cache is
    invalidated before this is raised so a retry picks up fresh values.
    """

    pass


class IntegrityViolationError(DatabaseError):
    """Raised when a statement violates a table constraint.

    Never retried. ``constraint`` carries the constraint name when the
    driver reports one.
    """

    def __init__(self, message: str, constraint: str | None = None):
        super().__init__(message)
        self.constraint = constraint
