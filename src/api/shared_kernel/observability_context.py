"""Observation context for domain-oriented observability.

Observation contexts carry request-scoped metadata that every probe event
should include, so a log line can always be traced back to a tenant and
caller.

See: https://martinfowler.com/articles/domain-oriented-observability.html
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any


@dataclass(frozen=True)
class ObservationContext:
    """Immutable metadata attached to instrumentation events.

    Attributes:
        request_id: Identifier of the current request.
        tenant_id: Tenant the caller belongs to.
        user_id: Identity-provider subject of the caller.
        role: Role claimed by the caller.
        extra: Additional contextual metadata.

    Example:
        context = ObservationContext(request_id="req-123", tenant_id="T001")
        probe = DefaultConnectionPoolProbe().with_context(context)
    """

    request_id: str | None = None
    tenant_id: str | None = None
    user_id: str | None = None
    role: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def as_dict(self) -> dict[str, Any]:
        """Convert context to a dictionary for logging.

        Only includes non-None values to keep logs clean.
        """
        result: dict[str, Any] = {}
        if self.request_id is not None:
            result["request_id"] = self.request_id
        if self.tenant_id is not None:
            result["tenant_id"] = self.tenant_id
        if self.user_id is not None:
            result["user_id"] = self.user_id
        if self.role is not None:
            result["role"] = self.role
        result.update(self.extra)
        return result

    def with_extra(self, **kwargs: Any) -> ObservationContext:
        """Create a new context with additional metadata."""
        return replace(self, extra={**self.extra, **kwargs})
