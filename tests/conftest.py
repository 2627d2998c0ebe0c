from __future__ import annotations

import pytest_asyncio

from volmatch.config import AppConfig, Settings
from volmatch.container import Container, build_container
from volmatch.domain.models import User
from volmatch.schemas import OpportunityIn, RegisterIn


def make_settings(**kw) -> Settings:
    base = dict(
        DATABASE_DSN="sqlite+aiosqlite:///:memory:",
        REDIS_URL="",
        SECRET_KEY="test-secret-key-that-is-long-enough-for-hs256",
    )
    base.update(kw)
    return Settings(**base)


@pytest_asyncio.fixture
async def container():
    c = await build_container(make_settings(), AppConfig())
    yield c
    await c.close()


async def register(c: Container, username: str, role: str = "volunteer", **profile) -> User:
    data = RegisterIn(
        name=username.title(),
        username=username,
        email=f"{username}@example.org",
        password="secret123",
        role=role,
        **profile,
    )
    _, user = await c.auth.register(data)
    return user


def opportunity_in(title: str, description: str = "Help out", **kw) -> OpportunityIn:
    return OpportunityIn(title=title, description=description, **kw)
