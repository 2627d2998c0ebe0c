from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from volmatch.config import Settings
from volmatch.domain.errors import AuthenticationError, ConflictError
from volmatch.domain.models import User
from volmatch.infra.security import create_token, decode_token, hash_password, verify_password
from volmatch.repositories.base import UnitOfWork
from volmatch.repositories.users import UsersRepo, to_domain
from volmatch.schemas import LoginIn, RegisterIn
from volmatch.telemetry.logger import get_logger


log = get_logger("auth")


class AuthService:
    """Minimal identity provider: bcrypt passwords and HS256 bearer tokens."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession], settings: Settings) -> None:
        self._sf = session_factory
        self._settings = settings

    async def register(self, data: RegisterIn) -> tuple[str, User]:
        uow = UnitOfWork(self._sf)
        async with uow.begin() as s:
            repo = UsersRepo(s)
            if await repo.exists(data.email, data.username):
                raise ConflictError("User already exists")
            user = await repo.create(
                role=data.role,
                name=data.name,
                username=data.username,
                email=data.email,
                password_hash=hash_password(data.password),
                fields=data.profile_fields(),
            )
            await uow.write_audit("user.registered", {"role": user.role}, user.id)
        log.info("auth.registered", user_id=user.id, role=user.role)
        return create_token(self._settings, user.id), user

    async def login(self, data: LoginIn) -> tuple[str, User]:
        async with self._sf() as s:
            row = await UsersRepo(s).get_row_by_email(data.email)
        if row is None or not verify_password(data.password, row.password_hash):
            log.info("auth.login.failed")
            raise AuthenticationError("Invalid credentials")
        return create_token(self._settings, row.id), to_domain(row)

    async def authenticate(self, token: str) -> User:
        user_id = decode_token(self._settings, token)
        async with self._sf() as s:
            user = await UsersRepo(s).get(user_id)
        if user is None:
            raise AuthenticationError("Not authorized, user not found")
        return user
