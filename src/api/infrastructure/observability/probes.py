"""Domain probes for infrastructure observability.

Domain probes provide a high-level instrumentation API oriented around
domain semantics, keeping infrastructure code clean and testable.

Credential values never reach a probe; only the secret id, host and
database name are recorded.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class CredentialProbe(Protocol):
    """Domain probe for credential retrieval."""

    def credentials_fetched(self, source: str, host: str, database: str) -> None:
        """Record that credentials were fetched from their source."""
        ...

    def credentials_cache_hit(self) -> None:
        """Record that credentials were served from the cache."""
        ...

    def credentials_fetch_failed(self, source: str, error: Exception) -> None:
        """Record that credentials could not be fetched."""
        ...

    def credentials_invalidated(self) -> None:
        """Record that cached credentials were discarded."""
        ...

    def with_context(self, context: ObservationContext) -> CredentialProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultCredentialProbe:
    """Default implementation of CredentialProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultCredentialProbe:
        """Create a new probe with observation context bound."""
        return DefaultCredentialProbe(logger=self._logger, context=context)

    def credentials_fetched(self, source: str, host: str, database: str) -> None:
        self._logger.info(
            "database_credentials_fetched",
            source=source,
            host=host,
            database=database,
            **self._get_context_kwargs(),
        )

    def credentials_cache_hit(self) -> None:
        self._logger.debug(
            "database_credentials_cache_hit",
            **self._get_context_kwargs(),
        )

    def credentials_fetch_failed(self, source: str, error: Exception) -> None:
        self._logger.error(
            "database_credentials_fetch_failed",
            source=source,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )

    def credentials_invalidated(self) -> None:
        self._logger.info(
            "database_credentials_invalidated",
            **self._get_context_kwargs(),
        )


class ConnectionPoolProbe(Protocol):
    """Domain probe for database connection pool observability.

    This probe captures domain-significant events related to database
    connections without exposing logging implementation details.
    """

    def pool_initialized(self, max_connections: int) -> None:
        """Record that the connection pool was created."""
        ...

    def connection_established(self, host: str, database: str) -> None:
        """Record that a new physical connection was opened."""
        ...

    def connection_failed(self, host: str, database: str, error: Exception) -> None:
        """Record that opening a physical connection failed."""
        ...

    def transient_failure(
        self, operation: str, attempt: int, delay_seconds: float, error: Exception
    ) -> None:
        """Record a transient failure that will be retried."""
        ...

    def retries_exhausted(self, operation: str, attempts: int, error: Exception) -> None:
        """Record that the retry budget for an operation ran out."""
        ...

    def pool_closed(self) -> None:
        """Record that the connection pool was disposed."""
        ...

    def with_context(self, context: ObservationContext) -> ConnectionPoolProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultConnectionPoolProbe:
    """Default implementation of ConnectionPoolProbe using structlog.

    Supports observation context for including request-scoped metadata
    with all log events.
    """

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

    def with_context(self, context: ObservationContext) -> DefaultConnectionPoolProbe:
        """Create a new probe with observation context bound."""
        return DefaultConnectionPoolProbe(logger=self._logger, context=context)

    def pool_initialized(self, max_connections: int) -> None:
        self._logger.info(
            "connection_pool_initialized",
            max_connections=max_connections,
            **self._get_context_kwargs(),
        )

    def connection_established(self, host: str, database: str) -> None:
        self._logger.debug(
            "database_connection_established",
            host=host,
            database=database,
            **self._get_context_kwargs(),
        )

    def connection_failed(self, host: str, database: str, error: Exception) -> None:
        self._logger.warning(
            "database_connection_failed",
            host=host,
            database=database,
            error=str(error),
            **self._get_context_kwargs(),
        )

    def transient_failure(
        self, operation: str, attempt: int, delay_seconds: float, error: Exception
    ) -> None:
        self._logger.warning(
            "database_transient_failure",
            operation=operation,
            attempt=attempt,
            delay_seconds=round(delay_seconds, 3),
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )

    def retries_exhausted(self, operation: str, attempts: int, error: Exception) -> None:
        self._logger.error(
            "database_retries_exhausted",
            operation=operation,
            attempts=attempts,
            error=str(error),
            error_type=type(error).__name__,
            **self._get_context_kwargs(),
        )

    def pool_closed(self) -> None:
        self._logger.info(
            "connection_pool_closed",
            **self._get_context_kwargs(),
        )
