"""Typed request context derived from verified identity claims.

``extract_request_context`` is the only place a tenant id enters the
service. Request bodies, paths and query strings never supply one.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from shared_kernel.auth.observability import (
    DefaultRequestContextProbe,
    RequestContextProbe,
)
from shared_kernel.errors import MissingSubjectClaimError, MissingTenantClaimError

DEFAULT_ROLE = "Finance"


@dataclass(frozen=True)
class ClaimNames:
    """Names of the claims carrying each context field."""

    subject: str = "sub"
    tenant_id: str = "custom:tenant_id"
    role: str = "custom:role"
    email: str = "email"


@dataclass(frozen=True)
class RequestContext:
    """Request-scoped caller identity.

    Attributes:
        tenant_id: Tenant the caller belongs to.
        user_id: Identity-provider subject of the caller.
        role: Role claimed by the caller.
        email: Caller's email, empty when the token carries none.
    """

    tenant_id: str
    user_id: str
    role: str
    email: str


def _claim(claims: Mapping[str, Any], name: str) -> str | None:
    value = claims.get(name)
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def extract_request_context(
    claims: Mapping[str, Any],
    claim_names: ClaimNames = ClaimNames(),
    probe: RequestContextProbe | None = None,
) -> RequestContext:
    """Build a ``RequestContext`` from already-verified claims.

    Blank claim values count as absent. The role falls back to
    ``Finance`` and the email to an empty string.

    Raises:
        MissingTenantClaimError: No tenant id claim.
        MissingSubjectClaimError: No subject claim.
    """
    probe = probe or DefaultRequestContextProbe()
    subject = _claim(claims, claim_names.subject)
    tenant_id = _claim(claims, claim_names.tenant_id)

    if tenant_id is None:
        probe.required_claim_missing(claim=claim_names.tenant_id, user_id=subject)
        raise MissingTenantClaimError("Tenant ID not found in token")
    if subject is None:
        probe.required_claim_missing(claim=claim_names.subject, user_id=None)
        raise MissingSubjectClaimError("Subject not found in token")

    context = RequestContext(
        tenant_id=tenant_id,
        user_id=subject,
        role=_claim(claims, claim_names.role) or DEFAULT_ROLE,
        email=_claim(claims, claim_names.email) or "",
    )
    probe.context_extracted(
        tenant_id=context.tenant_id, user_id=context.user_id, role=context.role
    )
    return context
