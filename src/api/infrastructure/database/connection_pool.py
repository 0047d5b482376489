"""Pooled, credentialed, retrying access to the relational store.

``ConnectionPoolManager`` is the only object in the process that owns
database connections. It is created once per worker (see
``infrastructure.database.dependencies``), builds its engine on first use
and is disposed on application shutdown.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, TypeVar

from sqlalchemy import exc as sa_exc
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine
from sqlalchemy.sql import Executable

from infrastructure.database.engines import create_pool_engine, make_asyncpg_creator
from infrastructure.database.exceptions import IntegrityViolationError
from infrastructure.database.retry import RetryPolicy, retry_async
from infrastructure.observability.probes import (
    ConnectionPoolProbe,
    DefaultConnectionPoolProbe,
)

if TYPE_CHECKING:
    from infrastructure.credentials import CredentialCache
    from infrastructure.settings import DatabaseSettings

T = TypeVar("T")

Statement = str | Executable


@dataclass(frozen=True)
class QueryResult:
    """Materialized result of one statement.

    Attributes:
        rows: Returned rows as column-name mappings (empty for DML).
        rowcount: Rows affected, as reported by the driver.
    """

    rows: list[dict[str, Any]] = field(default_factory=list)
    rowcount: int = 0

    def first(self) -> dict[str, Any] | None:
        """First row or None."""
        return self.rows[0] if self.rows else None


async def execute(
    connection: AsyncConnection,
    statement: Statement,
    params: Mapping[str, Any] | None = None,
) -> QueryResult:
    """Execute one statement on an open connection and materialize it.

    Plain strings are treated as SQL text with ``:name`` bind parameters;
    values are always bound, never interpolated.
    """
    if isinstance(statement, str):
        statement = text(statement)
    result = await connection.execute(statement, dict(params or {}))
    rows = [dict(row) for row in result.mappings().all()] if result.returns_rows else []
    return QueryResult(rows=rows, rowcount=result.rowcount)


class ConnectionPoolManager:
    """Owns the connection pool and exposes retrying primitives.

    Both ``query`` and ``transaction`` wrap every attempt in
    retry-with-backoff. A transaction is retried as a whole: the callback
    runs again on a fresh connection after the failed attempt has been
    rolled back, so callbacks must only touch the database.
    """

    def __init__(
        self,
        settings: DatabaseSettings,
        credential_cache: CredentialCache,
        probe: ConnectionPoolProbe | None = None,
        retry_policy: RetryPolicy | None = None,
        engine_factory: Callable[[], AsyncEngine] | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """Initialize the manager without touching the network.

        Args:
            settings: Database settings (pool bounds, timeouts, retry policy)
            credential_cache: Source of credentials for new connections
            probe: Optional observability probe
            retry_policy: Overrides the policy derived from settings
            engine_factory: Overrides engine construction (tests)
            sleep: Awaitable used between retries
        """
        self._settings = settings
        self._credential_cache = credential_cache
        self._probe = probe or DefaultConnectionPoolProbe()
        self._retry_policy = retry_policy or RetryPolicy.from_settings(settings)
        self._engine_factory = engine_factory or self._default_engine_factory
        self._sleep = sleep

        self._engine: AsyncEngine | None = None
        self._engine_lock = asyncio.Lock()

    @property
    def is_initialized(self) -> bool:
        return self._engine is not None

    def _default_engine_factory(self) -> AsyncEngine:
        creator = make_asyncpg_creator(
            self._credential_cache, self._settings, self._probe
        )
        return create_pool_engine(self._settings, creator)

    async def _get_engine(self) -> AsyncEngine:
        if self._engine is not None:
            return self._engine
        async with self._engine_lock:
            # Double-check after acquiring lock
            if self._engine is None:
                self._engine = self._engine_factory()
                self._probe.pool_initialized(
                    max_connections=self._settings.pool_max_connections
                )
        return self._engine

    async def query(
        self,
        statement: Statement,
        params: Mapping[str, Any] | None = None,
    ) -> QueryResult:
        """Run a single statement in its own short transaction.

        Raises:
            IntegrityViolationError: The statement violated a constraint.
            StoreUnavailableError: Transient failures exhausted the retry budget.
        """

        async def attempt() -> QueryResult:
            engine = await self._get_engine()
            async with engine.begin() as connection:
                return await execute(connection, statement, params)

        return await self._run("query", attempt)

    async def transaction(
        self, fn: Callable[[AsyncConnection], Awaitable[T]]
    ) -> T:
        """Run ``fn`` inside BEGIN/COMMIT, rolling back if it raises.

        Raises:
            IntegrityViolationError: A statement violated a constraint.
            StoreUnavailableError: Transient failures exhausted the retry budget.
            Exception: Anything else ``fn`` raised, after rollback.
        """

        async def attempt() -> T:
            engine = await self._get_engine()
            async with engine.begin() as connection:
                return await fn(connection)

        return await self._run("transaction", attempt)

    async def ping(self) -> bool:
        """Check connectivity with ``SELECT 1`` (no retries)."""
        try:
            engine = await self._get_engine()
            async with engine.connect() as connection:
                await connection.execute(text("SELECT 1"))
        except Exception as e:
            self._probe.connection_failed(
                host=self._settings.host, database=self._settings.database, error=e
            )
            return False
        return True

    async def close(self) -> None:
        """Dispose the engine and every pooled connection."""
        if self._engine is None:
            return
        await self._engine.dispose()
        self._engine = None
        self._probe.pool_closed()

    async def _run(self, operation: str, attempt_fn: Callable[[], Awaitable[T]]) -> T:
        try:
            return await retry_async(
                operation,
                attempt_fn,
                self._retry_policy,
                self._probe,
                sleep=self._sleep,
            )
        except sa_exc.IntegrityError as e:
            raise IntegrityViolationError(
                str(e.orig), constraint=_constraint_name(e)
            ) from e


def _constraint_name(error: sa_exc.IntegrityError) -> str | None:
    # asyncpg exposes the violated constraint on the driver exception, which
    # SQLAlchemy's adapter keeps as the cause of ``orig``
    for candidate in (error.orig, getattr(error.orig, "__cause__", None)):
        name = getattr(candidate, "constraint_name", None)
        if name:
            return name
    return None
