from __future__ import annotations

from aiohttp import web

from volmatch.domain.errors import ValidationError
from volmatch.domain.models import OPPORTUNITY_STATUSES
from volmatch.schemas import OpportunityIn, OpportunityUpdateIn
from volmatch.web.middlewares import require_user
from volmatch.web.serializers import (
    opportunity_json,
    ranked_opportunity_json,
    ranked_volunteer_json,
)

from .common import container, parse_body, path_id


routes = web.RouteTableDef()


@routes.get("/api/opportunities")
async def list_opportunities(request: web.Request) -> web.Response:
    status = request.query.get("status") or None
    if status is not None and status not in OPPORTUNITY_STATUSES:
        raise ValidationError(f"Unknown status {status!r}")
    category = request.query.get("category") or None
    views = await container(request).opportunities.browse(status=status, category=category)  # type: ignore[arg-type]
    return web.json_response({"opportunities": [opportunity_json(v.opportunity, v.poster) for v in views]})


@routes.post("/api/opportunities")
async def create_opportunity(request: web.Request) -> web.Response:
    caller = require_user(request)
    data = await parse_body(request, OpportunityIn)
    view = await container(request).opportunities.create(caller, data)
    return web.json_response({"opportunity": opportunity_json(view.opportunity, view.poster)}, status=201)


@routes.get("/api/opportunities/recommended")
async def recommended_opportunities(request: web.Request) -> web.Response:
    caller = require_user(request)
    ranked = await container(request).opportunities.recommended(caller)
    return web.json_response({"opportunities": [ranked_opportunity_json(r) for r in ranked]})


@routes.get("/api/opportunities/my")
async def my_opportunities(request: web.Request) -> web.Response:
    caller = require_user(request)
    views = await container(request).opportunities.mine(caller)
    return web.json_response({"opportunities": [opportunity_json(v.opportunity, v.poster) for v in views]})


@routes.get(r"/api/opportunities/{id:\d+}/recommended-volunteers")
async def recommended_volunteers(request: web.Request) -> web.Response:
    caller = require_user(request)
    ranked = await container(request).opportunities.recommended_volunteers(caller, path_id(request))
    return web.json_response({"volunteers": [ranked_volunteer_json(r) for r in ranked]})


@routes.get(r"/api/opportunities/{id:\d+}")
async def get_opportunity(request: web.Request) -> web.Response:
    opp, poster = await container(request).opportunities.get(path_id(request))
    return web.json_response({"opportunity": opportunity_json(opp, poster)})


@routes.put(r"/api/opportunities/{id:\d+}")
async def update_opportunity(request: web.Request) -> web.Response:
    caller = require_user(request)
    data = await parse_body(request, OpportunityUpdateIn)
    view = await container(request).opportunities.update(caller, path_id(request), data)
    return web.json_response({"opportunity": opportunity_json(view.opportunity, view.poster)})


@routes.post(r"/api/opportunities/{id:\d+}/close")
async def close_opportunity(request: web.Request) -> web.Response:
    caller = require_user(request)
    opp = await container(request).opportunities.close(caller, path_id(request))
    return web.json_response({"opportunity": opportunity_json(opp)})


@routes.delete(r"/api/opportunities/{id:\d+}")
async def delete_opportunity(request: web.Request) -> web.Response:
    caller = require_user(request)
    await container(request).opportunities.delete(caller, path_id(request))
    return web.json_response({"message": "Opportunity deleted successfully"})
