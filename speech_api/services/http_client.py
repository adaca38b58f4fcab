from __future__ import annotations

from httpx import AsyncClient, Limits, Timeout

_http_client: AsyncClient | None = None


async def get_http_client() -> AsyncClient:
    global _http_client
    if _http_client is None:
        _http_client = AsyncClient(
            timeout=Timeout(30.0, connect=5.0, read=30.0),
            limits=Limits(max_connections=100, max_keepalive_connections=20),
        )
    return _http_client


async def close_http_client() -> None:
    global _http_client
    if _http_client is not None:
        await _http_client.aclose()
        _http_client = None
