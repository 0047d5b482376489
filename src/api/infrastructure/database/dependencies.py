"""Process-wide connection pool for FastAPI dependency injection.

The pool is the one resource deliberately kept warm between requests. It is
created on first use and torn down only by ``close_connection_pool`` during
application shutdown.
"""

from __future__ import annotations

import threading

from infrastructure.credentials import (
    CredentialCache,
    CredentialSource,
    EnvironmentCredentialSource,
    SecretsManagerCredentialSource,
)
from infrastructure.database.connection_pool import ConnectionPoolManager
from infrastructure.settings import (
    CredentialSourceKind,
    DatabaseSettings,
    get_database_settings,
)

_pool: ConnectionPoolManager | None = None

# Thread lock for safe pool initialization
_pool_lock = threading.Lock()


def build_credential_source(settings: DatabaseSettings) -> CredentialSource:
    """Select the credential source configured in settings."""
    if settings.credential_source == CredentialSourceKind.SECRETS_MANAGER:
        return SecretsManagerCredentialSource(
            secret_id=settings.secret_id,  # type: ignore[arg-type]
            region_name=settings.aws_region,
        )
    return EnvironmentCredentialSource(settings)


def get_connection_pool() -> ConnectionPoolManager:
    """Get the connection pool manager (singleton).

    Uses double-check locking for thread-safe initialization. Creating the
    manager opens no connections; the engine is built on first query.
    """
    global _pool
    if _pool is None:
        with _pool_lock:
            # Double-check after acquiring lock
            if _pool is None:
                settings = get_database_settings()
                cache = CredentialCache(
                    build_credential_source(settings),
                    ttl_seconds=settings.credential_cache_ttl_seconds,
                )
                _pool = ConnectionPoolManager(settings, cache)
    return _pool


async def close_connection_pool() -> None:
    """Dispose the pool; called once on application shutdown."""
    global _pool
    if _pool is not None:
        await _pool.close()
        _pool = None
