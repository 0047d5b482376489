"""Async SQLAlchemy engine creation on top of asyncpg.

Credentials are not baked into the URL. Each new physical connection is
opened by ``make_asyncpg_creator``, which asks the credential cache for the
current values, so a rotated secret is used as soon as the cache refreshes.
"""

from __future__ import annotations

import ssl
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any

import asyncpg
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from infrastructure.database.exceptions import CredentialsRejectedError

if TYPE_CHECKING:
    from infrastructure.credentials import CredentialCache
    from infrastructure.observability.probes import ConnectionPoolProbe
    from infrastructure.settings import DatabaseSettings

__all__ = [
    "build_ssl_context",
    "create_pool_engine",
    "make_asyncpg_creator",
]


def build_ssl_context(settings: DatabaseSettings) -> ssl.SSLContext:
    """TLS context with certificate and hostname verification enabled.

    Uses ``settings.ssl_root_cert`` as the CA bundle when given (e.g. the
    RDS global bundle), otherwise the system trust store.
    """
    context = ssl.create_default_context(cafile=settings.ssl_root_cert)
    context.check_hostname = True
    context.verify_mode = ssl.CERT_REQUIRED
    return context


def make_asyncpg_creator(
    credential_cache: CredentialCache,
    settings: DatabaseSettings,
    probe: ConnectionPoolProbe,
) -> Callable[[], Awaitable[Any]]:
    """Build the coroutine SQLAlchemy calls to open a physical connection."""
    ssl_context = build_ssl_context(settings)

    async def connect() -> Any:
        credentials = await credential_cache.get()
        try:
            connection = await asyncpg.connect(
                host=credentials.host,
                port=credentials.port,
                user=credentials.username,
                password=credentials.password.get_secret_value(),
                database=credentials.database,
                ssl=ssl_context,
                timeout=settings.connect_timeout_seconds,
                command_timeout=settings.statement_timeout_seconds,
            )
        except asyncpg.InvalidAuthorizationSpecificationError as e:
            credential_cache.invalidate()
            probe.connection_failed(
                host=credentials.host, database=credentials.database, error=e
            )
            raise CredentialsRejectedError(
                "Database rejected the cached credentials"
            ) from e
        except (OSError, TimeoutError) as e:
            probe.connection_failed(
                host=credentials.host, database=credentials.database, error=e
            )
            raise
        probe.connection_established(host=credentials.host, database=credentials.database)
        return connection

    return connect


def create_pool_engine(
    settings: DatabaseSettings,
    creator: Callable[[], Awaitable[Any]],
) -> AsyncEngine:
    """Create the bounded async engine used by ``ConnectionPoolManager``.

    Args:
        settings: Database settings (pool size and timeouts).
        creator: Coroutine opening one asyncpg connection.

    Returns:
        Engine with a strict pool limit and pre-ping enabled.
    """
    return create_async_engine(
        "postgresql+asyncpg://",
        async_creator=creator,
        pool_size=settings.pool_max_connections,
        max_overflow=0,  # No overflow - strict pool limit
        pool_timeout=settings.connect_timeout_seconds,
        pool_recycle=settings.pool_idle_timeout_seconds,
        pool_pre_ping=True,  # Verify connections before using
        echo=False,
    )
