from __future__ import annotations

import asyncio
from typing import Any

import httpx

from volmatch.config import AppConfig, Settings
from volmatch.domain.errors import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    DomainError,
    NotFoundError,
    RateLimitedError,
    ValidationError,
)
from volmatch.infra.http import create_async_client
from volmatch.telemetry.logger import get_logger
from volmatch.telemetry.metrics import timer


log = get_logger("api_client")

_ERRORS: dict[int, type[DomainError]] = {
    400: ValidationError,
    401: AuthenticationError,
    403: AuthorizationError,
    404: NotFoundError,
    409: ConflictError,
    429: RateLimitedError,
}


def _error_message(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        # empty, html or plain-text bodies from proxies
        return resp.reason_phrase
    message = body.get("message") if isinstance(body, dict) else None
    return message or resp.reason_phrase


class ApiClient:
    """Thin async client for the marketplace REST API.

    Rejections (4xx) are raised as the matching ``DomainError``; only
    transport failures and 5xx responses are retried.
    """

    def __init__(
        self,
        settings: Settings,
        cfg: AppConfig,
        token: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings
        self._cfg = cfg
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self.token = token

    def _client_or_create(self) -> httpx.AsyncClient:
        if self._client is None:
            t = self._cfg.timeouts
            self._client = create_async_client(
                self._settings.API_BASE_URL.rstrip("/"), t.api_connect, t.api_read, t.total, self._transport
            )
        return self._client

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def _request(self, method: str, path: str, *, json: Any = None, params: dict[str, Any] | None = None) -> Any:
        headers = {"Authorization": f"Bearer {self.token}"} if self.token else {}
        client = self._client_or_create()
        backoffs = [0.2, 0.4, 0.8]
        for attempt, backoff in enumerate(backoffs, start=1):
            try:
                with timer("api_request", method=method, attempt=str(attempt)):
                    resp = await client.request(method, path, json=json, params=params, headers=headers)
            except httpx.TransportError as e:
                log.warning("api.request.error", path=path, attempt=attempt, err=str(e))
                if attempt == len(backoffs):
                    raise
                await asyncio.sleep(backoff)
                continue
            if resp.status_code in _ERRORS:
                raise _ERRORS[resp.status_code](_error_message(resp))
            if resp.status_code >= 500 and attempt < len(backoffs):
                log.warning("api.request.server_error", path=path, attempt=attempt, status=resp.status_code)
                await asyncio.sleep(backoff)
                continue
            resp.raise_for_status()
            return resp.json()
        return None

    async def login(self, email: str, password: str) -> dict[str, Any]:
        data = await self._request("POST", "/api/auth/login", json={"email": email, "password": password})
        self.token = data["token"]
        return data["user"]

    async def me(self) -> dict[str, Any]:
        return (await self._request("GET", "/api/auth/me"))["user"]

    async def opportunities(self, *, status: str | None = None, category: str | None = None) -> list[dict[str, Any]]:
        params = {k: v for k, v in {"status": status, "category": category}.items() if v}
        return (await self._request("GET", "/api/opportunities", params=params))["opportunities"]

    async def opportunity(self, opportunity_id: int) -> dict[str, Any]:
        return (await self._request("GET", f"/api/opportunities/{opportunity_id}"))["opportunity"]

    async def my_opportunities(self) -> list[dict[str, Any]]:
        return (await self._request("GET", "/api/opportunities/my"))["opportunities"]

    async def recommended_opportunities(self) -> list[dict[str, Any]]:
        return (await self._request("GET", "/api/opportunities/recommended"))["opportunities"]

    async def recommended_volunteers(self, opportunity_id: int) -> list[dict[str, Any]]:
        path = f"/api/opportunities/{opportunity_id}/recommended-volunteers"
        return (await self._request("GET", path))["volunteers"]

    async def create_opportunity(self, payload: dict[str, Any]) -> dict[str, Any]:
        return (await self._request("POST", "/api/opportunities", json=payload))["opportunity"]

    async def close_opportunity(self, opportunity_id: int) -> dict[str, Any]:
        return (await self._request("POST", f"/api/opportunities/{opportunity_id}/close"))["opportunity"]

    async def apply(self, opportunity_id: int) -> dict[str, Any]:
        return (await self._request("POST", f"/api/opportunities/{opportunity_id}/applications"))["application"]

    async def my_applications(self) -> list[dict[str, Any]]:
        return (await self._request("GET", "/api/applications/mine"))["applications"]

    async def opportunity_applications(self, opportunity_id: int) -> list[dict[str, Any]]:
        return (await self._request("GET", f"/api/opportunities/{opportunity_id}/applications"))["applications"]

    async def review_application(self, application_id: int, accept: bool) -> dict[str, Any]:
        action = "accept" if accept else "reject"
        return (await self._request("POST", f"/api/applications/{application_id}/{action}"))["application"]
