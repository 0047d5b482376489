"""Domain probes for authentication.

Following Domain-Oriented Observability patterns, these probes capture
token verification and request-context extraction events.

See: https://martinfowler.com/articles/domain-oriented-observability.html
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class JWTValidatorProbe(Protocol):
    """Domain probe for token verification."""

    def token_validated(self, subject: str) -> None:
        """Record that a token was successfully verified."""
        ...

    def token_validation_failed(self, reason: str) -> None:
        """Record that token verification failed."""
        ...

    def jwks_fetched(self, key_count: int) -> None:
        """Record that the key set was fetched from the issuer."""
        ...

    def jwks_cache_hit(self) -> None:
        """Record that the key set was served from cache."""
        ...

    def jwks_fetch_failed(self, error: str) -> None:
        """Record that fetching the key set failed."""
        ...

    def with_context(self, context: ObservationContext) -> JWTValidatorProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultJWTValidatorProbe:
    """Default implementation of JWTValidatorProbe using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        """Get context metadata as kwargs for logging."""
        if self._context is None:
            return {}
        return self._context.as_dict()

    def with_context(self, context: ObservationContext) -> DefaultJWTValidatorProbe:
        """Create a new probe with observation context bound."""
        return DefaultJWTValidatorProbe(logger=self._logger, context=context)

    def token_validated(self, subject: str) -> None:
        self._logger.debug(
            "jwt_token_validated",
            subject=subject,
            **self._get_context_kwargs(),
        )

    def token_validation_failed(self, reason: str) -> None:
        self._logger.warning(
            "jwt_token_validation_failed",
            reason=reason,
            **self._get_context_kwargs(),
        )

    def jwks_fetched(self, key_count: int) -> None:
        self._logger.info(
            "jwt_jwks_fetched",
            key_count=key_count,
            **self._get_context_kwargs(),
        )

    def jwks_cache_hit(self) -> None:
        self._logger.debug(
            "jwt_jwks_cache_hit",
            **self._get_context_kwargs(),
        )

    def jwks_fetch_failed(self, error: str) -> None:
        self._logger.error(
            "jwt_jwks_fetch_failed",
            error=error,
            **self._get_context_kwargs(),
        )


class RequestContextProbe(Protocol):
    """Domain probe for turning verified claims into a request context."""

    def context_extracted(self, tenant_id: str, user_id: str, role: str) -> None:
        """Record that a request context was built."""
        ...

    def required_claim_missing(self, claim: str, user_id: str | None) -> None:
        """Record that a required claim was absent."""
        ...


class DefaultRequestContextProbe:
    """Default implementation of RequestContextProbe using structlog."""

    def __init__(self, logger: structlog.stdlib.BoundLogger | None = None):
        self._logger = logger or structlog.get_logger()

    def context_extracted(self, tenant_id: str, user_id: str, role: str) -> None:
        self._logger.debug(
            "request_context_extracted",
            tenant_id=tenant_id,
            user_id=user_id,
            role=role,
        )

    def required_claim_missing(self, claim: str, user_id: str | None) -> None:
        self._logger.warning(
            "request_context_claim_missing",
            claim=claim,
            user_id=user_id,
        )
