from __future__ import annotations

from aiohttp import web


routes = web.RouteTableDef()


# Lightweight endpoint for load balancer health checks
@routes.get("/health")
async def health(_: web.Request) -> web.Response:
    return web.Response(text="OK")
