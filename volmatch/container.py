from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from volmatch.config import AppConfig, Settings, load_app_config
from volmatch.infra.db import create_schema, make_engine, make_session_factory
from volmatch.infra.redis import InMemoryStore, KeyValueStore, RedisStore
from volmatch.services.applications import ApplicationService
from volmatch.services.auth import AuthService
from volmatch.services.opportunities import OpportunityService
from volmatch.services.users import UserService
from volmatch.telemetry.logger import get_logger, setup_logging


log = get_logger("container")


class DatabaseUnavailableError(RuntimeError):
    """The configured database did not answer at startup."""


@dataclass
class Container:
    settings: Settings
    cfg: AppConfig
    store: KeyValueStore
    engine: AsyncEngine
    session_factory: async_sessionmaker[AsyncSession]
    auth: AuthService
    users: UserService
    opportunities: OpportunityService
    applications: ApplicationService

    async def close(self) -> None:
        await self.store.close()
        await self.engine.dispose()


async def _make_store(settings: Settings) -> KeyValueStore:
    if not settings.REDIS_URL:
        return InMemoryStore()
    try:
        store = RedisStore(settings.REDIS_URL)
        # ensure connection is alive; fallback to memory if unreachable
        await store.ping()
        return store
    except Exception as e:  # noqa: BLE001
        log.warning("container.redis.unavailable", err=str(e))
        return InMemoryStore()  # graceful degradation


async def _make_engine(settings: Settings) -> AsyncEngine:
    if settings.DATABASE_DSN.startswith("sqlite"):
        engine = make_engine(settings.DATABASE_DSN)
        await create_schema(engine)
        return engine
    engine = make_engine(settings.DATABASE_DSN)
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except (OSError, SQLAlchemyError) as e:
        log.error("container.db.unavailable", err=str(e))
        await engine.dispose()
        raise DatabaseUnavailableError(str(e)) from e
    return engine


async def build_container(settings: Settings | None = None, cfg: AppConfig | None = None) -> Container:
    setup_logging()
    settings = settings or Settings()
    cfg = cfg or load_app_config(settings.CONFIG_PATH)

    engine = await _make_engine(settings)
    store = await _make_store(settings)
    session_factory = make_session_factory(engine)

    return Container(
        settings=settings,
        cfg=cfg,
        store=store,
        engine=engine,
        session_factory=session_factory,
        auth=AuthService(session_factory, settings),
        users=UserService(session_factory),
        opportunities=OpportunityService(session_factory, cfg),
        applications=ApplicationService(session_factory),
    )
