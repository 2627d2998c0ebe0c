from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool


class Base(DeclarativeBase):
    pass


def make_engine(dsn: str) -> AsyncEngine:
    if dsn.startswith("sqlite"):
        if ":memory:" in dsn:
            # one shared connection, otherwise every session sees an empty database
            return create_async_engine(
                dsn, poolclass=StaticPool, connect_args={"check_same_thread": False}
            )
        return create_async_engine(dsn)
    # Use asyncpg for performance in async context
    async_dsn = dsn.replace("postgresql+psycopg://", "postgresql+asyncpg://")
    return create_async_engine(async_dsn, pool_pre_ping=True)


async def create_schema(engine: AsyncEngine) -> None:
    from . import db_models  # noqa: F401  registers tables on Base.metadata

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


def make_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False)

