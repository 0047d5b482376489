"""Alembic environment.

Migrations connect exactly like the application does: credentials come
from the configured credential source and the connection requires TLS.
"""

import asyncio
from logging.config import fileConfig

from alembic import context
from sqlalchemy.engine import Connection

import analytics.infrastructure.models  # noqa: F401
import iam.infrastructure.models  # noqa: F401
from infrastructure.credentials import CredentialCache
from infrastructure.database.dependencies import build_credential_source
from infrastructure.database.engines import create_pool_engine, make_asyncpg_creator
from infrastructure.database.models import Base
from infrastructure.observability import DefaultConnectionPoolProbe
from infrastructure.settings import get_database_settings

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    """Emit SQL to stdout without connecting."""
    context.configure(
        url="postgresql+asyncpg://",
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection: Connection) -> None:
    context.configure(connection=connection, target_metadata=target_metadata)

    with context.begin_transaction():
        context.run_migrations()


async def run_async_migrations() -> None:
    settings = get_database_settings()
    cache = CredentialCache(build_credential_source(settings))
    creator = make_asyncpg_creator(cache, settings, DefaultConnectionPoolProbe())
    engine = create_pool_engine(settings, creator)

    async with engine.connect() as connection:
        await connection.run_sync(do_run_migrations)

    await engine.dispose()


def run_migrations_online() -> None:
    asyncio.run(run_async_migrations())


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
