from __future__ import annotations

from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from volmatch.domain.models import Opportunity, OpportunityStatus
from volmatch.infra.db_models import Application as DBApplication
from volmatch.infra.db_models import Opportunity as DBOpportunity
from volmatch.infra.db_models import as_utc, utcnow


OPPORTUNITY_FIELDS = frozenset(
    {
        "title",
        "description",
        "category",
        "location",
        "work_mode",
        "estimated_hours",
        "deadline",
        "skills_required",
    }
)


def to_domain(row: DBOpportunity) -> Opportunity:
    return Opportunity(
        id=row.id,
        nonprofit_id=row.nonprofit_id,
        title=row.title,
        description=row.description,
        created_at=as_utc(row.created_at),
        category=row.category or "",
        location=row.location or "",
        work_mode=row.work_mode,
        estimated_hours=row.estimated_hours,
        deadline=row.deadline,
        status=row.status,  # type: ignore[arg-type]
        skills_required=list(row.skills_required or []),
        keywords=list(row.keywords or []),
        updated_at=as_utc(row.updated_at),
    )


class OpportunitiesRepo:
    def __init__(self, session: AsyncSession):
        self.s = session

    async def create(self, nonprofit_id: int, fields: dict[str, Any], keywords: list[str]) -> Opportunity:
        row = DBOpportunity(
            nonprofit_id=nonprofit_id,
            status="open",
            keywords=keywords,
            **{k: v for k, v in fields.items() if k in OPPORTUNITY_FIELDS},
        )
        self.s.add(row)
        await self.s.flush()
        return to_domain(row)

    async def get(self, opportunity_id: int) -> Opportunity | None:
        row = await self.s.get(DBOpportunity, opportunity_id)
        return to_domain(row) if row else None

    async def list_filtered(
        self,
        *,
        status: OpportunityStatus | None = None,
        category: str | None = None,
        nonprofit_id: int | None = None,
    ) -> list[Opportunity]:
        stmt = select(DBOpportunity).order_by(DBOpportunity.created_at.desc(), DBOpportunity.id.desc())
        if status:
            stmt = stmt.where(DBOpportunity.status == status)
        if category:
            stmt = stmt.where(DBOpportunity.category == category)
        if nonprofit_id is not None:
            stmt = stmt.where(DBOpportunity.nonprofit_id == nonprofit_id)
        res = await self.s.execute(stmt)
        return [to_domain(r) for r in res.scalars().all()]

    async def update(
        self, opportunity_id: int, fields: dict[str, Any], keywords: list[str] | None = None
    ) -> Opportunity | None:
        row = await self.s.get(DBOpportunity, opportunity_id)
        if not row:
            return None
        for k, v in fields.items():
            if k in OPPORTUNITY_FIELDS:
                setattr(row, k, v)
        if keywords is not None:
            row.keywords = keywords
        row.updated_at = utcnow()
        await self.s.flush()
        return to_domain(row)

    async def set_status(self, opportunity_id: int, status: OpportunityStatus) -> Opportunity | None:
        row = await self.s.get(DBOpportunity, opportunity_id)
        if not row:
            return None
        row.status = status
        row.updated_at = utcnow()
        await self.s.flush()
        return to_domain(row)

    async def delete(self, opportunity_id: int) -> int:
        """Delete the opportunity and its applications; returns how many applications went with it."""
        res = await self.s.execute(
            delete(DBApplication).where(DBApplication.opportunity_id == opportunity_id)
        )
        await self.s.execute(delete(DBOpportunity).where(DBOpportunity.id == opportunity_id))
        return res.rowcount or 0
