from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from typing import Protocol, Optional

from redis.asyncio import Redis


class KeyValueStore(Protocol):
    async def get(self, key: str) -> Optional[str]: ...
    async def setex(self, key: str, seconds: int, value: str) -> None: ...
    async def incr(self, key: str, ex: int) -> int: ...
    async def delete(self, key: str) -> None: ...
    async def ping(self) -> None: ...
    async def close(self) -> None: ...


class RedisStore:
    def __init__(self, url: str):
        self._r: Redis = Redis.from_url(url, decode_responses=True)

    async def get(self, key: str) -> Optional[str]:
        return await self._r.get(key)

    async def setex(self, key: str, seconds: int, value: str) -> None:
        await self._r.setex(key, seconds, value)

    async def incr(self, key: str, ex: int) -> int:
        count = int(await self._r.incr(key))
        if count == 1:
            # expiry is set only when the window opens
            await self._r.expire(key, ex)
        return count

    async def delete(self, key: str) -> None:
        await self._r.delete(key)

    async def ping(self) -> None:
        await self._r.ping()

    async def close(self) -> None:
        await self._r.aclose()


@dataclass
class InMemoryStore:
    data: dict[str, tuple[str, float]] = field(default_factory=dict)
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)

    def _alive(self, key: str) -> tuple[str, float] | None:
        v = self.data.get(key)
        if not v:
            return None
        if v[1] and v[1] < time.time():
            self.data.pop(key, None)
            return None
        return v

    async def get(self, key: str) -> Optional[str]:
        async with self.lock:
            v = self._alive(key)
            return v[0] if v else None

    async def setex(self, key: str, seconds: int, value: str) -> None:
        async with self.lock:
            self.data[key] = (value, time.time() + seconds)

    async def incr(self, key: str, ex: int) -> int:
        async with self.lock:
            v = self._alive(key)
            if v is None:
                self.data[key] = ("1", time.time() + ex)
                return 1
            count = int(v[0]) + 1
            self.data[key] = (str(count), v[1])
            return count

    async def delete(self, key: str) -> None:
        async with self.lock:
            self.data.pop(key, None)

    async def ping(self) -> None:
        return None

    async def close(self) -> None:
        self.data.clear()
