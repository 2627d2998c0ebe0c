from __future__ import annotations

from typing import Any, Iterable

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from volmatch.domain.models import Nonprofit, Role, User, Volunteer
from volmatch.infra.db_models import User as DBUser, as_utc


VOLUNTEER_FIELDS = frozenset(
    {
        "age",
        "school",
        "skills",
        "interests",
        "resume_url",
        "volunteer_form_url",
        "pitch_video_url",
        "profile_photo",
        "social_links",
    }
)
NONPROFIT_FIELDS = frozenset(
    {
        "needed_skills",
        "needed_interests",
        "organization_description",
        "website",
        "organization_logo",
    }
)
COMMON_FIELDS = frozenset({"name", "pronouns", "location", "matching_profile"})


def editable_fields(role: Role) -> frozenset[str]:
    return COMMON_FIELDS | (VOLUNTEER_FIELDS if role == "volunteer" else NONPROFIT_FIELDS)


def to_domain(row: DBUser) -> User:
    if row.role == "volunteer":
        return Volunteer(
            id=row.id,
            name=row.name,
            username=row.username,
            email=row.email,
            created_at=as_utc(row.created_at),
            pronouns=row.pronouns,
            location=row.location or "",
            age=row.age,
            school=row.school or "",
            skills=list(row.skills or []),
            interests=list(row.interests or []),
            resume_url=row.resume_url or "",
            volunteer_form_url=row.volunteer_form_url or "",
            pitch_video_url=row.pitch_video_url or "",
            profile_photo=row.profile_photo or "",
            social_links=dict(row.social_links or {}),
            matching_profile=dict(row.matching_profile or {}),
            email_verified=bool(row.email_verified),
        )
    return Nonprofit(
        id=row.id,
        name=row.name,
        username=row.username,
        email=row.email,
        created_at=as_utc(row.created_at),
        pronouns=row.pronouns,
        location=row.location or "",
        needed_skills=list(row.needed_skills or []),
        needed_interests=list(row.needed_interests or []),
        organization_description=row.organization_description or "",
        website=row.website or "",
        organization_logo=row.organization_logo or "",
        matching_profile=dict(row.matching_profile or {}),
        email_verified=bool(row.email_verified),
    )


class UsersRepo:
    def __init__(self, session: AsyncSession):
        self.s = session

    async def create(
        self,
        *,
        role: Role,
        name: str,
        username: str,
        email: str,
        password_hash: str,
        fields: dict[str, Any],
    ) -> User:
        allowed = editable_fields(role)
        row = DBUser(
            role=role,
            name=name,
            username=username,
            email=email,
            password_hash=password_hash,
            **{k: v for k, v in fields.items() if k in allowed and k != "name"},
        )
        self.s.add(row)
        await self.s.flush()
        return to_domain(row)

    async def get(self, user_id: int) -> User | None:
        row = await self.s.get(DBUser, user_id)
        return to_domain(row) if row else None

    async def get_row_by_email(self, email: str) -> DBUser | None:
        res = await self.s.execute(select(DBUser).where(DBUser.email == email))
        return res.scalar_one_or_none()

    async def exists(self, email: str, username: str) -> bool:
        res = await self.s.execute(
            select(DBUser.id).where(or_(DBUser.email == email, DBUser.username == username)).limit(1)
        )
        return res.first() is not None

    async def get_many(self, ids: Iterable[int]) -> dict[int, User]:
        wanted = {i for i in ids if i is not None}
        if not wanted:
            return {}
        res = await self.s.execute(select(DBUser).where(DBUser.id.in_(wanted)))
        return {row.id: to_domain(row) for row in res.scalars().all()}

    async def list_volunteers(self) -> list[Volunteer]:
        stmt = select(DBUser).where(DBUser.role == "volunteer").order_by(DBUser.created_at, DBUser.id)
        res = await self.s.execute(stmt)
        return [v for v in (to_domain(r) for r in res.scalars().all()) if isinstance(v, Volunteer)]

    async def update(self, user_id: int, fields: dict[str, Any]) -> User | None:
        row = await self.s.get(DBUser, user_id)
        if not row:
            return None
        allowed = editable_fields(row.role)  # type: ignore[arg-type]
        for k, v in fields.items():
            if k in allowed:
                setattr(row, k, v)
        await self.s.flush()
        return to_domain(row)
