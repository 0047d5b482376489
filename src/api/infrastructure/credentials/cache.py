"""Time-bounded cache in front of a credential source."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable

from infrastructure.credentials.sources import CredentialSource, DatabaseCredentials
from infrastructure.observability.probes import CredentialProbe, DefaultCredentialProbe
from shared_kernel.errors import CredentialsUnavailableError

DEFAULT_CREDENTIAL_TTL_SECONDS = 300.0


class CredentialCache:
    """Caches credentials for a bounded TTL to limit calls to the source.

    Reads within the TTL are served from memory. Once the TTL lapses the
    next reader refetches; concurrent readers wait on a lock and reuse the
    result of the single fetch. Rotated credentials are therefore picked up
    at most one TTL after rotation, or immediately after ``invalidate()``.
    """

    def __init__(
        self,
        source: CredentialSource,
        ttl_seconds: float = DEFAULT_CREDENTIAL_TTL_SECONDS,
        probe: CredentialProbe | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._source = source
        self._ttl_seconds = ttl_seconds
        self._probe = probe or DefaultCredentialProbe()
        self._clock = clock

        self._credentials: DatabaseCredentials | None = None
        self._fetched_at: float | None = None
        self._lock = asyncio.Lock()

    async def get(self) -> DatabaseCredentials:
        """Return current credentials, fetching when the cache is stale.

        Raises:
            CredentialsUnavailableError: If a fetch was needed and failed.
        """
        if self._is_cache_valid():
            self._probe.credentials_cache_hit()
            return self._credentials  # type: ignore[return-value]

        async with self._lock:
            # Double-check after acquiring lock
            if self._is_cache_valid():
                self._probe.credentials_cache_hit()
                return self._credentials  # type: ignore[return-value]
            return await self._fetch()

    def invalidate(self) -> None:
        """Discard cached credentials so the next ``get`` refetches."""
        self._credentials = None
        self._fetched_at = None
        self._probe.credentials_invalidated()

    def _is_cache_valid(self) -> bool:
        if self._credentials is None or self._fetched_at is None:
            return False
        return (self._clock() - self._fetched_at) < self._ttl_seconds

    async def _fetch(self) -> DatabaseCredentials:
        try:
            credentials = await self._source.fetch()
        except CredentialsUnavailableError as e:
            self._probe.credentials_fetch_failed(source=self._source.name, error=e)
            raise
        except Exception as e:
            self._probe.credentials_fetch_failed(source=self._source.name, error=e)
            raise CredentialsUnavailableError(
                f"Failed to retrieve database credentials: {type(e).__name__}"
            ) from e

        self._credentials = credentials
        self._fetched_at = self._clock()
        self._probe.credentials_fetched(
            source=self._source.name,
            host=credentials.host,
            database=credentials.database,
        )
        return credentials
