"""Port-level exceptions for IAM bounded context.

These are raised by adapters and handled by the application layer; they
never reach API callers directly.
"""


class DuplicateUserRowError(Exception):
    """Raised when inserting a user row hits a uniqueness constraint.

    Either the candidate user ID was claimed by a concurrent create, or
    a live row with the same email (or identity) appeared since the
    application checked. The lifecycle coordinator tells the two apart by
    re-reading the email.
    """

    def __init__(self, message: str, constraint: str | None = None):
        super().__init__(message)
        self.constraint = constraint
