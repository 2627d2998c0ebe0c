from __future__ import annotations

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from volmatch.domain.errors import AuthorizationError, ConflictError, NotFoundError
from volmatch.domain.models import Application, ApplicationStatus, ApplicationView, User, Volunteer
from volmatch.repositories.applications import ApplicationsRepo
from volmatch.repositories.base import UnitOfWork
from volmatch.repositories.opportunities import OpportunitiesRepo
from volmatch.repositories.users import UsersRepo
from volmatch.telemetry.logger import get_logger


log = get_logger("applications")


class ApplicationService:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._sf = session_factory

    async def apply(self, caller: User, opportunity_id: int) -> Application:
        if not isinstance(caller, Volunteer):
            raise AuthorizationError("Only volunteers can apply to opportunities")
        uow = UnitOfWork(self._sf)
        try:
            async with uow.begin() as s:
                opp = await OpportunitiesRepo(s).get(opportunity_id)
                if opp is None:
                    raise NotFoundError("Opportunity not found")
                if opp.status != "open":
                    raise ConflictError("This opportunity is closed")
                repo = ApplicationsRepo(s)
                if await repo.find(caller.id, opportunity_id):
                    raise ConflictError("You have already applied to this opportunity")
                app = await repo.create(caller.id, opportunity_id)
                await uow.write_audit(
                    "application.created", {"application_id": app.id, "opportunity_id": opportunity_id}, caller.id
                )
        except IntegrityError as e:
            # concurrent duplicate caught by uq_application_pair
            raise ConflictError("You have already applied to this opportunity") from e
        log.info("application.created", application_id=app.id, opportunity_id=opportunity_id, volunteer_id=caller.id)
        return app

    async def mine(self, caller: User) -> list[ApplicationView]:
        if not isinstance(caller, Volunteer):
            raise AuthorizationError("Only volunteers have applications")
        async with self._sf() as s:
            apps = await ApplicationsRepo(s).list_for_volunteer(caller.id)
            opps = OpportunitiesRepo(s)
            views = []
            for a in apps:
                opp = await opps.get(a.opportunity_id)
                views.append(ApplicationView(application=a, opportunity_title=opp.title if opp else ""))
        return views

    async def for_opportunity(self, caller: User, opportunity_id: int) -> list[ApplicationView]:
        async with self._sf() as s:
            opp = await OpportunitiesRepo(s).get(opportunity_id)
            if opp is None:
                raise NotFoundError("Opportunity not found")
            if opp.nonprofit_id != caller.id:
                raise AuthorizationError("Not authorized to view applications for this opportunity")
            apps = await ApplicationsRepo(s).list_for_opportunity(opportunity_id)
            users = await UsersRepo(s).get_many(a.volunteer_id for a in apps)
        views = []
        for a in apps:
            vol = users.get(a.volunteer_id)
            views.append(
                ApplicationView(
                    application=a,
                    opportunity_title=opp.title,
                    volunteer=vol if isinstance(vol, Volunteer) else None,
                )
            )
        return views

    async def review(self, caller: User, application_id: int, status: ApplicationStatus) -> Application:
        if status == "applied":
            raise ConflictError("Applications can only be accepted or rejected")
        uow = UnitOfWork(self._sf)
        async with uow.begin() as s:
            repo = ApplicationsRepo(s)
            app = await repo.get(application_id)
            if app is None:
                raise NotFoundError("Application not found")
            opp = await OpportunitiesRepo(s).get(app.opportunity_id)
            if opp is None or opp.nonprofit_id != caller.id:
                raise AuthorizationError("Not authorized to review this application")
            if app.status != "applied":
                raise ConflictError(f"Application already {app.status}")
            updated = await repo.set_status(application_id, status)
            if updated is None:
                raise NotFoundError("Application not found")
            await uow.write_audit(
                "application.reviewed", {"application_id": application_id, "status": status}, caller.id
            )
        log.info("application.reviewed", application_id=application_id, status=status)
        return updated
