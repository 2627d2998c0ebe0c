from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from volmatch.domain.errors import AuthorizationError, NotFoundError
from volmatch.domain.models import PosterDetail, PublicVolunteer, User
from volmatch.domain.projections import public_user, public_volunteer
from volmatch.repositories.base import UnitOfWork
from volmatch.repositories.users import UsersRepo, editable_fields
from volmatch.schemas import ProfileUpdateIn
from volmatch.telemetry.logger import get_logger


log = get_logger("users")


class UserService:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._sf = session_factory

    async def profile(self, caller: User, user_id: int) -> User | PublicVolunteer | PosterDetail:
        """Own profile in full, anybody else's as the public projection."""
        async with self._sf() as s:
            user = await UsersRepo(s).get(user_id)
        if user is None:
            raise NotFoundError("User not found")
        if user.id == caller.id:
            return user
        return public_user(user)

    async def update_profile(self, caller: User, user_id: int, data: ProfileUpdateIn) -> User:
        if caller.id != user_id:
            raise AuthorizationError("Not authorized to update this profile")
        # fields that belong to the other role are dropped
        changes = {k: v for k, v in data.changes().items() if k in editable_fields(caller.role)}
        uow = UnitOfWork(self._sf)
        async with uow.begin() as s:
            user = await UsersRepo(s).update(user_id, changes)
            if user is None:
                raise NotFoundError("User not found")
            await uow.write_audit("user.updated", {"fields": sorted(changes)}, user_id)
        log.info("users.profile.updated", user_id=user_id, fields=sorted(changes))
        return user

    async def volunteers(self) -> list[PublicVolunteer]:
        async with self._sf() as s:
            vols = await UsersRepo(s).list_volunteers()
        return [public_volunteer(v) for v in vols]
