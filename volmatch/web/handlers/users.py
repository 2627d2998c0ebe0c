from __future__ import annotations

from aiohttp import web

from volmatch.domain.models import Nonprofit, Volunteer
from volmatch.schemas import ProfileUpdateIn
from volmatch.web.middlewares import require_user
from volmatch.web.serializers import public_user_json, public_volunteer_json, user_json

from .common import container, parse_body, path_id


routes = web.RouteTableDef()


@routes.get("/api/users/volunteers")
async def list_volunteers(request: web.Request) -> web.Response:
    require_user(request)
    vols = await container(request).users.volunteers()
    return web.json_response({"volunteers": [public_volunteer_json(v) for v in vols]})


@routes.get(r"/api/users/{id:\d+}")
async def get_profile(request: web.Request) -> web.Response:
    caller = require_user(request)
    found = await container(request).users.profile(caller, path_id(request))
    if isinstance(found, (Volunteer, Nonprofit)):
        return web.json_response({"user": user_json(found)})
    return web.json_response({"user": public_user_json(found)})


@routes.put(r"/api/users/{id:\d+}")
async def update_profile(request: web.Request) -> web.Response:
    caller = require_user(request)
    data = await parse_body(request, ProfileUpdateIn)
    user = await container(request).users.update_profile(caller, path_id(request), data)
    return web.json_response({"user": user_json(user)})
