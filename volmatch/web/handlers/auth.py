from __future__ import annotations

from aiohttp import web

from volmatch.schemas import LoginIn, RegisterIn
from volmatch.web.middlewares import require_user
from volmatch.web.serializers import user_json

from .common import container, parse_body


routes = web.RouteTableDef()


@routes.post("/api/auth/register")
async def register(request: web.Request) -> web.Response:
    data = await parse_body(request, RegisterIn)
    token, user = await container(request).auth.register(data)
    return web.json_response({"token": token, "user": user_json(user)}, status=201)


@routes.post("/api/auth/login")
async def login(request: web.Request) -> web.Response:
    data = await parse_body(request, LoginIn)
    token, user = await container(request).auth.login(data)
    return web.json_response({"token": token, "user": user_json(user)})


@routes.get("/api/auth/me")
async def me(request: web.Request) -> web.Response:
    return web.json_response({"user": user_json(require_user(request))})
