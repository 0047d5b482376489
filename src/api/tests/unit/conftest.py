"""Unit test fixtures.

``sqlite_pool`` runs the real ``ConnectionPoolManager`` over an in-memory
aiosqlite database with every table created, so repositories execute
their actual SQL without a PostgreSQL server.
"""

from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from sqlalchemy import insert
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

import analytics.infrastructure.models  # noqa: F401
from iam.infrastructure.models import TenantModel, UserModel
from infrastructure.database import ConnectionPoolManager, RetryPolicy
from infrastructure.database.models import Base
from shared_kernel.auth import RequestContext


async def _no_sleep(_: float) -> None:
    return None


@pytest.fixture
def mock_db_settings():
    """Provide test database settings."""
    from infrastructure.settings import DatabaseSettings

    return DatabaseSettings(
        host="testhost",
        port=5432,
        database="testdb",
        username="testuser",
        password="testpass",
    )


@pytest.fixture
def mock_credential_cache():
    return AsyncMock()


@pytest_asyncio.fixture
async def sqlite_pool(mock_db_settings, mock_credential_cache):
    """Connection pool manager backed by in-memory SQLite with all tables.

    ``StaticPool`` hands every checkout the same sqlite connection, so
    transactions run concurrently with ``asyncio.gather`` are not isolated
    from each other and can interleave on one BEGIN/COMMIT. Use it for
    sequential SQL behavior only. Concurrent user ID allocation is covered
    against ``InMemoryUserStore`` in ``tests/unit/iam/conftest.py``.
    """

    def engine_factory():
        return create_async_engine(
            "sqlite+aiosqlite://",
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )

    pool = ConnectionPoolManager(
        mock_db_settings,
        mock_credential_cache,
        retry_policy=RetryPolicy(max_retries=0, jitter=False),
        engine_factory=engine_factory,
        sleep=_no_sleep,
    )

    async def create_schema(connection):
        await connection.run_sync(Base.metadata.create_all)
        await connection.execute(
            insert(TenantModel.__table__),
            [
                {"tenant_id": "T001", "tenant_name": "Acme Retail", "is_active": True},
                {"tenant_id": "T002", "tenant_name": "Globex Stores", "is_active": True},
            ],
        )

    await pool.transaction(create_schema)
    yield pool
    await pool.close()


async def seed_user(
    pool: ConnectionPoolManager,
    tenant_id: str,
    user_id: str,
    identity_id: str,
    role: str = "Finance",
    is_tenant_admin: bool = False,
    status: str = "Active",
    email: str | None = None,
) -> None:
    """Insert a user row directly."""
    now = datetime.now(timezone.utc)
    await pool.query(
        insert(UserModel.__table__).values(
            tenant_id=tenant_id,
            user_id=user_id,
            email=email or f"{user_id.lower()}@{tenant_id.lower()}.example.com",
            identity_id=identity_id,
            role=role,
            is_tenant_admin=is_tenant_admin,
            status=status,
            created_at=now,
            updated_at=now,
        )
    )


def make_context(
    tenant_id: str = "T001",
    user_id: str = "sub-admin",
    role: str = "Admin",
    email: str = "admin@t001.example.com",
) -> RequestContext:
    return RequestContext(tenant_id=tenant_id, user_id=user_id, role=role, email=email)
