from __future__ import annotations

import asyncio
import re
from typing import Any, Awaitable, Callable, Iterable, TypeVar

from .api_client import ApiClient


T = TypeVar("T")
Loader = Callable[[ApiClient], Awaitable[Any]]

_STATIC: dict[str, Loader] = {
    "opportunities": lambda api: api.opportunities(),
    "opportunities:recommended": lambda api: api.recommended_opportunities(),
    "opportunities:my": lambda api: api.my_opportunities(),
    "applications:mine": lambda api: api.my_applications(),
    "me": lambda api: api.me(),
}
_OPP_KEY_RE = re.compile(r"^opportunity:(\d+)(?::(applications|recommended-volunteers))?$")


def _loader(key: str) -> Loader:
    if key in _STATIC:
        return _STATIC[key]
    m = _OPP_KEY_RE.match(key)
    if not m:
        raise KeyError(key)
    opp_id, sub = int(m.group(1)), m.group(2)
    if sub == "applications":
        return lambda api: api.opportunity_applications(opp_id)
    if sub == "recommended-volunteers":
        return lambda api: api.recommended_volunteers(opp_id)
    return lambda api: api.opportunity(opp_id)


class ClientStore:
    """Client-side cache of server state.

    The API is the only source of truth: ``fetch`` fills the cache from it,
    ``commit`` sends a mutation and drops every key it may have changed, and
    ``invalidate`` drops entries explicitly. Nothing is ever written into the
    cache that did not come back from the server.
    """

    def __init__(self, api: ApiClient) -> None:
        self._api = api
        self._cache: dict[str, Any] = {}
        self._generations: dict[str, int] = {}
        self._epoch = 0
        self._lock = asyncio.Lock()

    def cached(self, key: str) -> bool:
        return key in self._cache

    def _generation(self, key: str) -> int:
        # changes when the key, or any key it sits under, is invalidated
        parts = key.split(":")
        return self._epoch + sum(
            self._generations.get(":".join(parts[:i]), 0) for i in range(1, len(parts) + 1)
        )

    async def fetch(self, key: str, *, refresh: bool = False) -> Any:
        async with self._lock:
            if not refresh and key in self._cache:
                return self._cache[key]
            started = self._generation(key)
        value = await _loader(key)(self._api)
        async with self._lock:
            # invalidated while loading: the value may predate a mutation
            if self._generation(key) == started:
                self._cache[key] = value
        return value

    async def commit(self, mutation: Callable[[ApiClient], Awaitable[T]], invalidates: Iterable[str] = ()) -> T:
        result = await mutation(self._api)
        for key in invalidates:
            self.invalidate(key)
        return result

    def invalidate(self, key: str | None = None) -> None:
        """Drop ``key`` and everything under ``key:``; no key clears the whole cache."""
        if key is None:
            self._epoch += 1
            self._cache.clear()
            return
        self._generations[key] = self._generations.get(key, 0) + 1
        prefix = key + ":"
        for k in [k for k in self._cache if k == key or k.startswith(prefix)]:
            del self._cache[k]

    async def apply(self, opportunity_id: int) -> dict[str, Any]:
        return await self.commit(
            lambda api: api.apply(opportunity_id),
            ["applications:mine", f"opportunity:{opportunity_id}"],
        )

    async def create_opportunity(self, payload: dict[str, Any]) -> dict[str, Any]:
        return await self.commit(lambda api: api.create_opportunity(payload), ["opportunities"])

    async def close_opportunity(self, opportunity_id: int) -> dict[str, Any]:
        return await self.commit(
            lambda api: api.close_opportunity(opportunity_id),
            ["opportunities", f"opportunity:{opportunity_id}"],
        )

    async def review_application(self, opportunity_id: int, application_id: int, accept: bool) -> dict[str, Any]:
        return await self.commit(
            lambda api: api.review_application(application_id, accept),
            [f"opportunity:{opportunity_id}:applications"],
        )
