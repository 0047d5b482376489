"""Identity token verification against the provider's published keys.

The verified claim mapping is handed straight to
``extract_request_context``; nothing else in the service reads raw claims.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Any, NoReturn

import httpx
from jose import JWTError, jwt
from jose.exceptions import ExpiredSignatureError, JWTClaimsError

from shared_kernel.errors import InvalidTokenError

if TYPE_CHECKING:
    from shared_kernel.auth.observability import JWTValidatorProbe


class JWTValidator:
    """Verifies RS256 identity tokens using the issuer's JWKS.

    The key set is discovered through the issuer's OpenID configuration and
    cached for ``jwks_cache_ttl``. Signature, expiry, issuer and audience
    are all checked.
    """

    def __init__(
        self,
        issuer_url: str,
        audience: str,
        probe: JWTValidatorProbe,
        jwks_cache_ttl: timedelta = timedelta(hours=24),
        http_client_factory: type[httpx.AsyncClient] = httpx.AsyncClient,
    ):
        """Initialize the validator.

        Args:
            issuer_url: Token issuer (for Cognito, the user pool URL).
            audience: Expected ``aud`` claim (the app client id).
            probe: Observability probe for logging events.
            jwks_cache_ttl: How long to cache the key set (default: 24 hours).
            http_client_factory: Client class used to fetch discovery documents.
        """
        self._issuer_url = issuer_url.rstrip("/")
        self._audience = audience
        self._probe = probe
        self._jwks_cache_ttl = jwks_cache_ttl
        self._http_client_factory = http_client_factory

        self._jwks: dict[str, Any] | None = None
        self._jwks_fetched_at: datetime | None = None
        self._jwks_lock = asyncio.Lock()

    async def verify(self, token: str) -> dict[str, Any]:
        """Verify a token and return its claims.

        Raises:
            InvalidTokenError: If the token is malformed, expired, signed by
                an unknown key or issued for another audience.
        """
        try:
            header = jwt.get_unverified_header(token)
        except JWTError as e:
            self._reject(f"Malformed token: {e}", "Invalid token format", e)

        if not header:
            self._reject("Missing token header", "Invalid token: missing header")

        jwks = await self._get_jwks()

        try:
            claims = jwt.decode(
                token=token,
                key=jwks,
                algorithms=["RS256"],
                audience=self._audience,
                issuer=self._issuer_url,
                options={
                    "verify_signature": True,
                    "verify_aud": True,
                    "verify_iss": True,
                    "verify_exp": True,
                    "verify_iat": True,
                    "verify_at_hash": False,
                },
            )
        except ExpiredSignatureError as e:
            self._reject("Token expired", "Token has expired", e)
        except JWTClaimsError as e:
            self._reject(f"Claims error: {e}", "Invalid token claims", e)
        except JWTError as e:
            self._reject(f"JWT error: {e}", "Invalid token", e)

        self._probe.token_validated(subject=str(claims.get("sub", "")))
        return claims

    def _reject(
        self, reason: str, message: str, cause: Exception | None = None
    ) -> NoReturn:
        self._probe.token_validation_failed(reason=reason)
        raise InvalidTokenError(message) from cause

    async def _get_jwks(self) -> dict[str, Any]:
        if self._is_cache_valid():
            self._probe.jwks_cache_hit()
            return self._jwks  # type: ignore[return-value]

        async with self._jwks_lock:
            # Double-check after acquiring lock
            if self._is_cache_valid():
                self._probe.jwks_cache_hit()
                return self._jwks  # type: ignore[return-value]
            return await self._fetch_jwks()

    def _is_cache_valid(self) -> bool:
        if self._jwks is None or self._jwks_fetched_at is None:
            return False
        age = datetime.now(tz=timezone.utc) - self._jwks_fetched_at
        return age < self._jwks_cache_ttl

    async def _fetch_jwks(self) -> dict[str, Any]:
        """Fetch the key set via the issuer's discovery document.

        Raises:
            InvalidTokenError: If either document cannot be fetched.
        """
        try:
            async with self._http_client_factory() as client:
                config_response = await client.get(
                    f"{self._issuer_url}/.well-known/openid-configuration"
                )
                config_response.raise_for_status()
                jwks_uri = config_response.json().get("jwks_uri")
                if not jwks_uri:
                    self._probe.jwks_fetch_failed(error="Missing jwks_uri")
                    raise InvalidTokenError("Issuer does not publish a jwks_uri")

                jwks_response = await client.get(jwks_uri)
                jwks_response.raise_for_status()
                jwks = jwks_response.json()
        except httpx.HTTPError as e:
            self._probe.jwks_fetch_failed(error=str(e))
            raise InvalidTokenError("Unable to fetch signing keys") from e

        self._jwks = jwks
        self._jwks_fetched_at = datetime.now(tz=timezone.utc)
        self._probe.jwks_fetched(key_count=len(jwks.get("keys", [])))
        return jwks
