from __future__ import annotations

from aiohttp import web

from volmatch.web.middlewares import require_user
from volmatch.web.serializers import application_json, application_view_json

from .common import container, path_id


routes = web.RouteTableDef()


@routes.post(r"/api/opportunities/{id:\d+}/applications")
async def apply(request: web.Request) -> web.Response:
    caller = require_user(request)
    app = await container(request).applications.apply(caller, path_id(request))
    return web.json_response({"application": application_json(app)}, status=201)


@routes.get(r"/api/opportunities/{id:\d+}/applications")
async def list_for_opportunity(request: web.Request) -> web.Response:
    caller = require_user(request)
    views = await container(request).applications.for_opportunity(caller, path_id(request))
    return web.json_response({"applications": [application_view_json(v) for v in views]})


@routes.get("/api/applications/mine")
async def my_applications(request: web.Request) -> web.Response:
    caller = require_user(request)
    views = await container(request).applications.mine(caller)
    return web.json_response({"applications": [application_view_json(v) for v in views]})


@routes.post(r"/api/applications/{id:\d+}/accept")
async def accept(request: web.Request) -> web.Response:
    caller = require_user(request)
    app = await container(request).applications.review(caller, path_id(request), "accepted")
    return web.json_response({"application": application_json(app)})


@routes.post(r"/api/applications/{id:\d+}/reject")
async def reject(request: web.Request) -> web.Response:
    caller = require_user(request)
    app = await container(request).applications.review(caller, path_id(request), "rejected")
    return web.json_response({"application": application_json(app)})
