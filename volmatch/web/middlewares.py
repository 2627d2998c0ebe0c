from __future__ import annotations

from typing import Awaitable, Callable

from aiohttp import web
from pydantic import ValidationError as PayloadError

from volmatch.domain.errors import AuthenticationError, DomainError, RateLimitedError
from volmatch.domain.models import User
from volmatch.telemetry.logger import get_logger

from .keys import CONTAINER


Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]

log = get_logger("http")


@web.middleware
async def error_middleware(request: web.Request, handler: Handler) -> web.StreamResponse:
    try:
        return await handler(request)
    except DomainError as e:
        # rejected requests are not system faults
        log.info("http.rejected", path=request.path, status=e.status, code=e.code)
        return web.json_response({"message": e.message, "code": e.code}, status=e.status)
    except PayloadError as e:
        return web.json_response(
            {
                "message": "Invalid payload",
                "code": "invalid",
                "errors": e.errors(include_url=False, include_context=False, include_input=False),
            },
            status=400,
        )
    except web.HTTPException:
        raise
    except Exception:
        log.exception("http.unhandled", path=request.path, method=request.method)
        return web.json_response({"message": "Internal server error", "code": "internal"}, status=500)


@web.middleware
async def auth_middleware(request: web.Request, handler: Handler) -> web.StreamResponse:
    """Resolve a bearer token into ``request["user"]``.

    A missing or unusable token leaves the request anonymous; public routes
    still answer, and ``require_user`` reports why the token was refused.
    """
    request["user"] = None
    request["auth_error"] = None
    header = request.headers.get("Authorization", "")
    if header:
        scheme, _, token = header.partition(" ")
        if scheme.lower() == "bearer" and token.strip():
            try:
                request["user"] = await request.app[CONTAINER].auth.authenticate(token.strip())
            except AuthenticationError as e:
                request["auth_error"] = e
        else:
            request["auth_error"] = AuthenticationError("Not authorized, token failed")
        if request["auth_error"] is not None:
            log.info("http.auth.rejected", path=request.path, reason=request["auth_error"].message)
    return await handler(request)


def rate_limit_middleware(per_minute: int) -> Callable[[web.Request, Handler], Awaitable[web.StreamResponse]]:
    @web.middleware
    async def middleware(request: web.Request, handler: Handler) -> web.StreamResponse:
        user: User | None = request.get("user")
        who = f"u:{user.id}" if user is not None else f"ip:{request.remote or '-'}"
        count = await request.app[CONTAINER].store.incr(f"rate:{who}", 60)
        if count > per_minute:
            raise RateLimitedError("Too many requests")
        return await handler(request)

    return middleware


def require_user(request: web.Request) -> User:
    user: User | None = request.get("user")
    if user is None:
        raise request.get("auth_error") or AuthenticationError("Not authorized, no token")
    return user
