"""FastAPI dependencies turning a bearer token into a RequestContext.

Shared by every bounded context. Route handlers depend on
``get_request_context`` and never see raw claims.
"""

from __future__ import annotations

from datetime import timedelta
from functools import lru_cache
from typing import Annotated, Any

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from infrastructure.settings import get_oidc_settings
from shared_kernel.auth import (
    ClaimNames,
    DefaultJWTValidatorProbe,
    JWTValidator,
    RequestContext,
    extract_request_context,
)
from shared_kernel.errors import InvalidTokenError

# auto_error=False so a missing header surfaces as InvalidToken in the
# uniform error envelope instead of FastAPI's default 403
bearer_scheme = HTTPBearer(auto_error=False)


@lru_cache
def get_jwt_validator() -> JWTValidator:
    """Get cached JWT validator.

    A single instance is reused across requests so its key-set cache is
    shared.
    """
    settings = get_oidc_settings()
    return JWTValidator(
        issuer_url=settings.issuer_url,
        audience=settings.audience,
        probe=DefaultJWTValidatorProbe(),
        jwks_cache_ttl=timedelta(seconds=settings.jwks_cache_ttl_seconds),
    )


@lru_cache
def get_claim_names() -> ClaimNames:
    """Claim names configured for the identity provider."""
    settings = get_oidc_settings()
    return ClaimNames(
        subject=settings.subject_claim,
        tenant_id=settings.tenant_id_claim,
        role=settings.role_claim,
        email=settings.email_claim,
    )


async def get_verified_claims(
    validator: Annotated[JWTValidator, Depends(get_jwt_validator)],
    credentials: Annotated[
        HTTPAuthorizationCredentials | None, Depends(bearer_scheme)
    ] = None,
) -> dict[str, Any]:
    """Verify the bearer token and return its claims.

    Raises:
        InvalidTokenError: No bearer token, or the token fails verification
    """
    if credentials is None or not credentials.credentials:
        raise InvalidTokenError("Missing bearer token")
    return await validator.verify(credentials.credentials)


def get_request_context(
    claims: Annotated[dict[str, Any], Depends(get_verified_claims)],
    claim_names: Annotated[ClaimNames, Depends(get_claim_names)],
) -> RequestContext:
    """Build the typed request context for the current caller.

    Raises:
        MissingTenantClaimError: Token has no tenant claim
        MissingSubjectClaimError: Token has no subject
    """
    return extract_request_context(claims, claim_names)
