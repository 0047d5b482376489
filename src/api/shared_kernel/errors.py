"""Closed error taxonomy shared by every bounded context.

Every failure the service reports to a caller is a ``ServiceError``
subclass. Each subclass pins an ``ErrorKind`` (the tag callers switch on),
a category, an HTTP status and whether retrying the same request can
succeed. Structured fields (``field``, ``details``) travel with the error
so nothing downstream has to parse messages.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any, ClassVar


class ErrorCategory(StrEnum):
    """Broad classes of failure, used for logging and status selection."""

    VALIDATION = "validation"
    AUTHENTICATION = "authentication"
    AUTHORIZATION = "authorization"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    TRANSIENT = "transient"
    DIVERGENCE = "divergence"
    INTERNAL = "internal"


class ErrorKind(StrEnum):
    """Every error tag the service can return."""

    # Authentication
    MISSING_TENANT_CLAIM = "MissingTenantClaim"
    MISSING_SUBJECT_CLAIM = "MissingSubjectClaim"
    INVALID_TOKEN = "InvalidToken"

    # Validation
    VALIDATION_FAILED = "ValidationFailed"

    # Authorization
    CALLER_NOT_FOUND = "CallerNotFound"
    INSUFFICIENT_PRIVILEGE = "InsufficientPrivilege"
    CROSS_TENANT_ACCESS = "CrossTenantAccess"
    SELF_DELETION_FORBIDDEN = "SelfDeletionForbidden"
    ANALYTICS_ACCESS_DENIED = "AnalyticsAccessDenied"

    # Not found
    USER_NOT_FOUND = "UserNotFound"
    ROLE_NOT_FOUND = "RoleNotFound"
    METRIC_NOT_FOUND = "MetricNotFound"

    # Conflict
    DUPLICATE_EMAIL = "DuplicateEmail"
    ALLOCATION_CONFLICT = "AllocationConflict"
    ROLE_ALREADY_EXISTS = "RoleAlreadyExists"
    ROLE_IN_USE = "RoleInUse"

    # Transient
    STORE_UNAVAILABLE = "StoreUnavailable"
    CREDENTIALS_UNAVAILABLE = "CredentialsUnavailable"
    IDENTITY_PROVIDER_THROTTLED = "IdentityProviderThrottled"
    IDENTITY_PROVIDER_UNAVAILABLE = "IdentityProviderUnavailable"
    ANALYTICS_THROTTLED = "AnalyticsThrottled"
    ANALYTICS_UNAVAILABLE = "AnalyticsUnavailable"

    # Divergence between the identity provider and the relational store
    ORPHANED_IDENTITY_RECORD = "OrphanedIdentityRecord"
    ORPHANED_USER_RECORD = "OrphanedUserRecord"
    ROLE_DIVERGENCE = "RoleDivergence"

    # Internal
    IMMUTABLE_IDENTITY_ATTRIBUTE = "ImmutableIdentityAttribute"
    IDENTITY_PROVIDER_ERROR = "IdentityProviderError"
    ANALYTICS_CONFIGURATION_ERROR = "AnalyticsConfigurationError"
    ANALYTICS_PLAN_UNSUPPORTED = "AnalyticsPlanUnsupported"
    ANALYTICS_ERROR = "AnalyticsError"
    INTERNAL_ERROR = "InternalError"


class ServiceError(Exception):
    """Base class for every error surfaced to API callers.

    Subclasses override the class attributes; instances carry the message
    and optional structured fields.

    Attributes:
        kind: Tag identifying the failure.
        category: Broad class of the failure.
        status_code: HTTP status returned to the caller.
        retryable: Whether resubmitting the same request may succeed.
        field: Name of the offending input field, if any.
        details: Additional structured data for logs.
    """

    kind: ClassVar[ErrorKind] = ErrorKind.INTERNAL_ERROR
    category: ClassVar[ErrorCategory] = ErrorCategory.INTERNAL
    status_code: ClassVar[int] = 500
    retryable: ClassVar[bool] = False

    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.field = field
        self.details = details or {}

    def to_envelope(self) -> dict[str, Any]:
        """Render the uniform JSON error body."""
        body: dict[str, Any] = {"error": self.message, "kind": str(self.kind)}
        if self.field is not None:
            body["field"] = self.field
        if self.retryable or self.category in (
            ErrorCategory.TRANSIENT,
            ErrorCategory.DIVERGENCE,
        ):
            body["retryable"] = self.retryable
        return body


# ---------------------------------------------------------------------------
# Authentication (401)
# ---------------------------------------------------------------------------


class AuthenticationError(ServiceError):
    category = ErrorCategory.AUTHENTICATION
    status_code = 401


class MissingTenantClaimError(AuthenticationError):
    """Verified claims carry no tenant identifier."""

    kind = ErrorKind.MISSING_TENANT_CLAIM


class MissingSubjectClaimError(AuthenticationError):
    """Verified claims carry no subject."""

    kind = ErrorKind.MISSING_SUBJECT_CLAIM


class InvalidTokenError(AuthenticationError):
    """Bearer token is missing, malformed, expired or fails verification."""

    kind = ErrorKind.INVALID_TOKEN


# ---------------------------------------------------------------------------
# Validation (400)
# ---------------------------------------------------------------------------


class ValidationFailedError(ServiceError):
    """Request input failed validation. ``field`` names the offending input."""

    kind = ErrorKind.VALIDATION_FAILED
    category = ErrorCategory.VALIDATION
    status_code = 400


# ---------------------------------------------------------------------------
# Authorization (403)
# ---------------------------------------------------------------------------


class AuthorizationError(ServiceError):
    category = ErrorCategory.AUTHORIZATION
    status_code = 403


class CallerNotFoundError(AuthorizationError):
    """The caller has no active user row in their tenant."""

    kind = ErrorKind.CALLER_NOT_FOUND


class InsufficientPrivilegeError(AuthorizationError):
    """The caller is not a tenant administrator."""

    kind = ErrorKind.INSUFFICIENT_PRIVILEGE


class CrossTenantAccessError(AuthorizationError):
    """The target resource does not exist in the caller's tenant."""

    kind = ErrorKind.CROSS_TENANT_ACCESS


class SelfDeletionForbiddenError(AuthorizationError):
    """A caller attempted to delete their own account."""

    kind = ErrorKind.SELF_DELETION_FORBIDDEN


class AnalyticsAccessDeniedError(AuthorizationError):
    """The analytics service refused to embed the dashboard."""

    kind = ErrorKind.ANALYTICS_ACCESS_DENIED


# ---------------------------------------------------------------------------
# Not found (404)
# ---------------------------------------------------------------------------


class NotFoundError(ServiceError):
    category = ErrorCategory.NOT_FOUND
    status_code = 404


class UserNotFoundError(NotFoundError):
    kind = ErrorKind.USER_NOT_FOUND


class RoleNotFoundError(NotFoundError):
    kind = ErrorKind.ROLE_NOT_FOUND


class MetricNotFoundError(NotFoundError):
    kind = ErrorKind.METRIC_NOT_FOUND


# ---------------------------------------------------------------------------
# Conflict (400 / 409)
# ---------------------------------------------------------------------------


class ConflictError(ServiceError):
    category = ErrorCategory.CONFLICT
    status_code = 400


class DuplicateEmailError(ConflictError):
    """An active user with the same email already exists in the tenant."""

    kind = ErrorKind.DUPLICATE_EMAIL


class AllocationConflictError(ConflictError):
    """Two concurrent creates raced for the same userId twice in a row."""

    kind = ErrorKind.ALLOCATION_CONFLICT
    status_code = 409


class RoleAlreadyExistsError(ConflictError):
    kind = ErrorKind.ROLE_ALREADY_EXISTS


class RoleInUseError(ConflictError):
    """Active users still hold the role being deleted."""

    kind = ErrorKind.ROLE_IN_USE


# ---------------------------------------------------------------------------
# Transient infrastructure (429 / 503)
# ---------------------------------------------------------------------------


class TransientError(ServiceError):
    category = ErrorCategory.TRANSIENT
    status_code = 503
    retryable = True


class StoreUnavailableError(TransientError):
    """The relational store stayed unreachable through the retry budget."""

    kind = ErrorKind.STORE_UNAVAILABLE


class CredentialsUnavailableError(TransientError):
    """Database credentials could not be retrieved."""

    kind = ErrorKind.CREDENTIALS_UNAVAILABLE


class IdentityProviderThrottledError(TransientError):
    kind = ErrorKind.IDENTITY_PROVIDER_THROTTLED
    status_code = 429


class IdentityProviderUnavailableError(TransientError):
    kind = ErrorKind.IDENTITY_PROVIDER_UNAVAILABLE


class AnalyticsThrottledError(TransientError):
    kind = ErrorKind.ANALYTICS_THROTTLED
    status_code = 429


class AnalyticsUnavailableError(TransientError):
    kind = ErrorKind.ANALYTICS_UNAVAILABLE


# ---------------------------------------------------------------------------
# Divergence (500, never retryable by the caller)
# ---------------------------------------------------------------------------


class DivergenceError(ServiceError):
    """The identity provider and the relational store disagree.

    Raised only after a compensating action failed or could not exist.
    An operator must reconcile the two systems; ``details`` carries the
    identifiers needed to do so.
    """

    category = ErrorCategory.DIVERGENCE
    status_code = 500
    retryable = False


class OrphanedIdentityRecordError(DivergenceError):
    """An identity record exists with no matching user row."""

    kind = ErrorKind.ORPHANED_IDENTITY_RECORD


class OrphanedUserRecordError(DivergenceError):
    """A user row is still live although its identity record was deleted."""

    kind = ErrorKind.ORPHANED_USER_RECORD


class RoleDivergenceError(DivergenceError):
    """The identity record and the user row hold different roles."""

    kind = ErrorKind.ROLE_DIVERGENCE


# ---------------------------------------------------------------------------
# Internal (500)
# ---------------------------------------------------------------------------


class ImmutableIdentityAttributeError(ServiceError):
    """Attempted to write an identity attribute that is fixed at creation."""

    kind = ErrorKind.IMMUTABLE_IDENTITY_ATTRIBUTE


class IdentityProviderError(ServiceError):
    """The identity provider rejected a request for a non-transient reason."""

    kind = ErrorKind.IDENTITY_PROVIDER_ERROR


class AnalyticsConfigurationError(ServiceError):
    kind = ErrorKind.ANALYTICS_CONFIGURATION_ERROR


class AnalyticsPlanUnsupportedError(ServiceError):
    """The analytics account plan does not allow anonymous embedding."""

    kind = ErrorKind.ANALYTICS_PLAN_UNSUPPORTED
    status_code = 503


class AnalyticsError(ServiceError):
    """The analytics service failed for an unrecognised reason."""

    kind = ErrorKind.ANALYTICS_ERROR
    retryable = True
