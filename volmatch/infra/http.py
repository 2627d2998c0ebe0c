from __future__ import annotations

import httpx


def create_async_client(
    base_url: str,
    connect: int,
    read: int,
    total: int,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    limits = httpx.Limits(max_connections=100, max_keepalive_connections=20)
    timeout = httpx.Timeout(connect=connect, read=read, write=read, pool=total)
    return httpx.AsyncClient(base_url=base_url, limits=limits, timeout=timeout, transport=transport)
