from __future__ import annotations

from aiohttp import web

from volmatch.container import Container

from .handlers import applications as h_applications
from .handlers import auth as h_auth
from .handlers import health as h_health
from .handlers import opportunities as h_opportunities
from .handlers import users as h_users
from .keys import CONTAINER
from .middlewares import auth_middleware, error_middleware, rate_limit_middleware


def create_app(c: Container, *, close_container: bool = True) -> web.Application:
    app = web.Application(
        middlewares=[
            error_middleware,
            auth_middleware,
            rate_limit_middleware(c.cfg.ratelimit.per_user_per_minute),
        ]
    )
    app[CONTAINER] = c

    app.add_routes(h_health.routes)
    app.add_routes(h_auth.routes)
    app.add_routes(h_users.routes)
    app.add_routes(h_opportunities.routes)
    app.add_routes(h_applications.routes)

    if close_container:
        async def _close(app: web.Application) -> None:
            await app[CONTAINER].close()

        app.on_cleanup.append(_close)
    return app
