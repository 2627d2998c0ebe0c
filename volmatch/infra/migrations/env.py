from __future__ import annotations

import asyncio

from alembic import context
from sqlalchemy.engine import Connection

from volmatch.config import Settings
from volmatch.infra.db import Base, make_engine
from volmatch.infra import db_models  # noqa: F401  registers tables


config = context.config

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    url = Settings().DATABASE_DSN
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def _run(connection: Connection) -> None:
    context.configure(connection=connection, target_metadata=target_metadata)

    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    connectable = make_engine(Settings().DATABASE_DSN)

    async with connectable.connect() as connection:
        await connection.run_sync(_run)
    await connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
