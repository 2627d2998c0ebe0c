from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from volmatch.config import AppConfig
from volmatch.domain.errors import AuthorizationError, NotFoundError
from volmatch.domain.keywords import opportunity_keywords
from volmatch.domain.models import (
    Nonprofit,
    Opportunity,
    OpportunityStatus,
    OpportunityView,
    PosterDetail,
    RankedOpportunity,
    RankedVolunteer,
    User,
)
from volmatch.domain.projections import poster_detail, poster_summary
from volmatch.domain.ranking import rank_opportunities, rank_volunteers
from volmatch.domain.scoring import scorer_for
from volmatch.repositories.base import UnitOfWork
from volmatch.repositories.opportunities import OpportunitiesRepo
from volmatch.repositories.users import UsersRepo
from volmatch.schemas import OpportunityIn, OpportunityUpdateIn
from volmatch.telemetry.logger import get_logger
from volmatch.telemetry.metrics import counter, timer


log = get_logger("opportunities")

# fields that feed keyword extraction
KEYWORD_SOURCES = frozenset({"title", "description", "category", "skills_required"})


def _nonprofits(users: dict[int, User]) -> dict[int, Nonprofit]:
    return {uid: u for uid, u in users.items() if isinstance(u, Nonprofit)}


def _require_owner(caller: User, opp: Opportunity | None, action: str) -> Opportunity:
    if opp is None:
        raise NotFoundError("Opportunity not found")
    if opp.nonprofit_id != caller.id:
        raise AuthorizationError(f"Not authorized to {action} this opportunity")
    return opp


class OpportunityService:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession], cfg: AppConfig) -> None:
        self._sf = session_factory
        self._cfg = cfg

    def _keywords(self, title: str, description: str, category: str | None, skills: list[str]) -> list[str]:
        return opportunity_keywords(description, skills, category, title, self._cfg.matching.keyword_limit)

    async def create(self, caller: User, data: OpportunityIn) -> OpportunityView:
        if not isinstance(caller, Nonprofit):
            raise AuthorizationError("Only nonprofits can create opportunities")
        keywords = self._keywords(data.title, data.description, data.category, data.skills_required)
        uow = UnitOfWork(self._sf)
        async with uow.begin() as s:
            opp = await OpportunitiesRepo(s).create(caller.id, data.as_fields(), keywords)
            await uow.write_audit("opportunity.created", {"opportunity_id": opp.id}, caller.id)
        log.info("opportunity.created", opportunity_id=opp.id, nonprofit_id=caller.id, keywords=len(keywords))
        return OpportunityView(opportunity=opp, poster=poster_summary(caller))

    async def browse(
        self, *, status: OpportunityStatus | None = None, category: str | None = None
    ) -> list[OpportunityView]:
        async with self._sf() as s:
            opps = await OpportunitiesRepo(s).list_filtered(status=status, category=category)
            posters = _nonprofits(await UsersRepo(s).get_many(o.nonprofit_id for o in opps))
        return [
            OpportunityView(opportunity=o, poster=poster_summary(posters.get(o.nonprofit_id)))  # type: ignore[arg-type]
            for o in opps
        ]

    async def mine(self, caller: User) -> list[OpportunityView]:
        if not isinstance(caller, Nonprofit):
            raise AuthorizationError("Only nonprofits can view their opportunities")
        async with self._sf() as s:
            opps = await OpportunitiesRepo(s).list_filtered(nonprofit_id=caller.id)
        poster = poster_summary(caller)
        return [OpportunityView(opportunity=o, poster=poster) for o in opps]

    async def get(self, opportunity_id: int) -> tuple[Opportunity, PosterDetail | None]:
        async with self._sf() as s:
            opp = await OpportunitiesRepo(s).get(opportunity_id)
            if opp is None:
                raise NotFoundError("Opportunity not found")
            poster = await UsersRepo(s).get(opp.nonprofit_id) if opp.nonprofit_id is not None else None
        return opp, poster_detail(poster if isinstance(poster, Nonprofit) else None)

    async def update(self, caller: User, opportunity_id: int, data: OpportunityUpdateIn) -> OpportunityView:
        changes = data.changes()
        uow = UnitOfWork(self._sf)
        async with uow.begin() as s:
            repo = OpportunitiesRepo(s)
            current = _require_owner(caller, await repo.get(opportunity_id), "update")
            keywords = None
            if self._cfg.matching.recompute_keywords_on_update and KEYWORD_SOURCES & changes.keys():
                keywords = self._keywords(
                    changes.get("title", current.title),
                    changes.get("description", current.description),
                    changes.get("category", current.category),
                    changes.get("skills_required", current.skills_required) or [],
                )
            opp = await repo.update(opportunity_id, changes, keywords)
            if opp is None:
                raise NotFoundError("Opportunity not found")
            await uow.write_audit(
                "opportunity.updated",
                {"opportunity_id": opportunity_id, "fields": sorted(changes), "keywords": keywords is not None},
                caller.id,
            )
        log.info("opportunity.updated", opportunity_id=opportunity_id, keywords_recomputed=keywords is not None)
        return OpportunityView(opportunity=opp, poster=poster_summary(caller if isinstance(caller, Nonprofit) else None))

    async def close(self, caller: User, opportunity_id: int) -> Opportunity:
        uow = UnitOfWork(self._sf)
        async with uow.begin() as s:
            repo = OpportunitiesRepo(s)
            _require_owner(caller, await repo.get(opportunity_id), "close")
            opp = await repo.set_status(opportunity_id, "closed")
            if opp is None:
                raise NotFoundError("Opportunity not found")
            await uow.write_audit("opportunity.closed", {"opportunity_id": opportunity_id}, caller.id)
        log.info("opportunity.closed", opportunity_id=opportunity_id)
        return opp

    async def delete(self, caller: User, opportunity_id: int) -> None:
        uow = UnitOfWork(self._sf)
        async with uow.begin() as s:
            repo = OpportunitiesRepo(s)
            _require_owner(caller, await repo.get(opportunity_id), "delete")
            removed = await repo.delete(opportunity_id)
            await uow.write_audit(
                "opportunity.deleted", {"opportunity_id": opportunity_id, "applications": removed}, caller.id
            )
        log.info("opportunity.deleted", opportunity_id=opportunity_id, applications_removed=removed)

    async def recommended(self, caller: User) -> list[RankedOpportunity]:
        async with self._sf() as s:
            opps = await OpportunitiesRepo(s).list_filtered(status="open")
            posters = _nonprofits(await UsersRepo(s).get_many(o.nonprofit_id for o in opps))
        with timer("ranking.opportunities"):
            ranked = rank_opportunities(caller, opps, posters, scorer_for(self._cfg.matching))
        counter("ranking.opportunities.results", len(ranked))
        log.info("ranking.opportunities", user_id=caller.id, results=len(ranked))
        return ranked

    async def recommended_volunteers(self, caller: User, opportunity_id: int) -> list[RankedVolunteer]:
        async with self._sf() as s:
            opp = await OpportunitiesRepo(s).get(opportunity_id)
            volunteers = await UsersRepo(s).list_volunteers() if opp is not None else []
        with timer("ranking.volunteers"):
            ranked = rank_volunteers(opp, caller, volunteers, scorer_for(self._cfg.matching))
        counter("ranking.volunteers.results", len(ranked))
        log.info("ranking.volunteers", user_id=caller.id, opportunity_id=opportunity_id, results=len(ranked))
        return ranked
