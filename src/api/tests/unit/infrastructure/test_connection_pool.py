"""Unit tests for ConnectionPoolManager over an in-memory SQLite engine."""

from unittest.mock import MagicMock

import pytest
from sqlalchemy import exc as sa_exc
from sqlalchemy import insert, select
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from iam.infrastructure.models import TenantModel
from infrastructure.database import (
    ConnectionPoolManager,
    IntegrityViolationError,
    RetryPolicy,
    execute,
)
from shared_kernel.errors import StoreUnavailableError

tenants = TenantModel.__table__


def make_engine():
    return create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )


async def no_sleep(_: float) -> None:
    return None


class TestQuery:
    @pytest.mark.asyncio
    async def test_select_returns_mappings(self, sqlite_pool):
        result = await sqlite_pool.query(
            select(tenants.c.tenant_id, tenants.c.tenant_name).order_by(
                tenants.c.tenant_id
            )
        )

        assert result.rows == [
            {"tenant_id": "T001", "tenant_name": "Acme Retail"},
            {"tenant_id": "T002", "tenant_name": "Globex Stores"},
        ]
        assert result.first()["tenant_id"] == "T001"

    @pytest.mark.asyncio
    async def test_text_statement_binds_parameters(self, sqlite_pool):
        result = await sqlite_pool.query(
            "SELECT tenant_name FROM tenants WHERE tenant_id = :tenant_id",
            {"tenant_id": "T002"},
        )

        assert result.first() == {"tenant_name": "Globex Stores"}

    @pytest.mark.asyncio
    async def test_dml_reports_rowcount(self, sqlite_pool):
        result = await sqlite_pool.query(
            tenants.update().values(is_active=False).where(tenants.c.tenant_id == "T002")
        )

        assert result.rows == []
        assert result.rowcount == 1

    @pytest.mark.asyncio
    async def test_empty_result_first_is_none(self, sqlite_pool):
        result = await sqlite_pool.query(
            select(tenants.c.tenant_id).where(tenants.c.tenant_id == "T999")
        )

        assert result.first() is None

    @pytest.mark.asyncio
    async def test_integrity_error_is_translated(self, sqlite_pool):
        with pytest.raises(IntegrityViolationError):
            await sqlite_pool.query(
                insert(tenants).values(
                    tenant_id="T001", tenant_name="Duplicate", is_active=True
                )
            )


class TestTransaction:
    @pytest.mark.asyncio
    async def test_commits_all_statements(self, sqlite_pool):
        async def work(connection):
            await execute(
                connection,
                insert(tenants).values(tenant_id="T003", tenant_name="Initech", is_active=True),
            )
            result = await execute(
                connection, select(tenants.c.tenant_id).where(tenants.c.tenant_id == "T003")
            )
            return result.first()["tenant_id"]

        assert await sqlite_pool.transaction(work) == "T003"
        result = await sqlite_pool.query(
            select(tenants.c.tenant_id).where(tenants.c.tenant_id == "T003")
        )
        assert result.rows == [{"tenant_id": "T003"}]

    @pytest.mark.asyncio
    async def test_rolls_back_when_callback_raises(self, sqlite_pool):
        async def work(connection):
            await execute(
                connection,
                insert(tenants).values(tenant_id="T004", tenant_name="Hooli", is_active=True),
            )
            raise ValueError("abort")

        with pytest.raises(ValueError, match="abort"):
            await sqlite_pool.transaction(work)

        result = await sqlite_pool.query(
            select(tenants.c.tenant_id).where(tenants.c.tenant_id == "T004")
        )
        assert result.rows == []

    @pytest.mark.asyncio
    async def test_retries_whole_transaction_on_transient_failure(
        self, mock_db_settings, mock_credential_cache
    ):
        pool = ConnectionPoolManager(
            mock_db_settings,
            mock_credential_cache,
            retry_policy=RetryPolicy(max_retries=2, jitter=False),
            engine_factory=make_engine,
            sleep=no_sleep,
        )
        attempts = []

        async def work(connection):
            attempts.append(1)
            if len(attempts) == 1:
                raise sa_exc.OperationalError("SELECT 1", {}, ConnectionResetError())
            result = await execute(connection, "SELECT 1 AS one")
            return result.first()["one"]

        try:
            assert await pool.transaction(work) == 1
        finally:
            await pool.close()

        assert len(attempts) == 2

    @pytest.mark.asyncio
    async def test_exhausted_retries_raise_store_unavailable(
        self, mock_db_settings, mock_credential_cache
    ):
        probe = MagicMock()
        pool = ConnectionPoolManager(
            mock_db_settings,
            mock_credential_cache,
            probe=probe,
            retry_policy=RetryPolicy(max_retries=1, jitter=False),
            engine_factory=make_engine,
            sleep=no_sleep,
        )

        async def work(connection):
            raise ConnectionResetError("reset")

        try:
            with pytest.raises(StoreUnavailableError):
                await pool.transaction(work)
        finally:
            await pool.close()

        probe.retries_exhausted.assert_called_once()


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_engine_built_lazily_once(self, mock_db_settings, mock_credential_cache):
        factory = MagicMock(side_effect=make_engine)
        pool = ConnectionPoolManager(
            mock_db_settings, mock_credential_cache, engine_factory=factory
        )

        assert pool.is_initialized is False
        factory.assert_not_called()

        await pool.query("SELECT 1")
        await pool.query("SELECT 1")

        assert pool.is_initialized is True
        factory.assert_called_once()
        await pool.close()

    @pytest.mark.asyncio
    async def test_ping(self, sqlite_pool):
        assert await sqlite_pool.ping() is True

    @pytest.mark.asyncio
    async def test_ping_reports_failure(self, mock_db_settings, mock_credential_cache):
        probe = MagicMock()
        pool = ConnectionPoolManager(
            mock_db_settings,
            mock_credential_cache,
            probe=probe,
            engine_factory=MagicMock(side_effect=OSError("refused")),
        )

        assert await pool.ping() is False
        probe.connection_failed.assert_called_once()

    @pytest.mark.asyncio
    async def test_close_disposes_engine(self, mock_db_settings, mock_credential_cache):
        probe = MagicMock()
        pool = ConnectionPoolManager(
            mock_db_settings, mock_credential_cache, probe=probe, engine_factory=make_engine
        )
        await pool.query("SELECT 1")

        await pool.close()
        await pool.close()

        assert pool.is_initialized is False
        probe.pool_closed.assert_called_once()
