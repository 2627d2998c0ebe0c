from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from volmatch.domain.models import Application, ApplicationStatus
from volmatch.infra.db_models import Application as DBApplication
from volmatch.infra.db_models import as_utc, utcnow


def to_domain(row: DBApplication) -> Application:
    return Application(
        id=row.id,
        volunteer_id=row.volunteer_id,
        opportunity_id=row.opportunity_id,
        status=row.status,  # type: ignore[arg-type]
        created_at=as_utc(row.created_at),
        reviewed_at=as_utc(row.reviewed_at),
    )


class ApplicationsRepo:
    def __init__(self, session: AsyncSession):
        self.s = session

    async def find(self, volunteer_id: int, opportunity_id: int) -> Application | None:
        res = await self.s.execute(
            select(DBApplication).where(
                DBApplication.volunteer_id == volunteer_id,
                DBApplication.opportunity_id == opportunity_id,
            )
        )
        row = res.scalar_one_or_none()
        return to_domain(row) if row else None

    async def create(self, volunteer_id: int, opportunity_id: int) -> Application:
        row = DBApplication(volunteer_id=volunteer_id, opportunity_id=opportunity_id, status="applied")
        self.s.add(row)
        await self.s.flush()
        return to_domain(row)

    async def get(self, application_id: int) -> Application | None:
        row = await self.s.get(DBApplication, application_id)
        return to_domain(row) if row else None

    async def list_for_volunteer(self, volunteer_id: int) -> list[Application]:
        res = await self.s.execute(
            select(DBApplication)
            .where(DBApplication.volunteer_id == volunteer_id)
            .order_by(DBApplication.created_at.desc(), DBApplication.id.desc())
        )
        return [to_domain(r) for r in res.scalars().all()]

    async def list_for_opportunity(self, opportunity_id: int) -> list[Application]:
        res = await self.s.execute(
            select(DBApplication)
            .where(DBApplication.opportunity_id == opportunity_id)
            .order_by(DBApplication.created_at, DBApplication.id)
        )
        return [to_domain(r) for r in res.scalars().all()]

    async def set_status(self, application_id: int, status: ApplicationStatus) -> Application | None:
        row = await self.s.get(DBApplication, application_id)
        if not row:
            return None
        row.status = status
        row.reviewed_at = utcnow()
        await self.s.flush()
        return to_domain(row)
