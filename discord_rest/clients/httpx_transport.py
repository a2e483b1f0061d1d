"""
Thin wrapper around httpx.AsyncClient that issues the actual HTTP exchange.
"""

from __future__ import annotations

from typing import Any, Mapping, Protocol

import httpx


class TransportResponse(Protocol):
    """Subset of a response the dispatcher reads."""

    status_code: int
    headers: Mapping[str, str]
    text: str

    def json(self) -> Any:
        ...


class Transport(Protocol):
    """Protocol the dispatcher delegates HTTP I/O to."""

    async def request(
        self,
        method: str,
        path: str,
        *,
        query: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
        json: Any = None,
        content: bytes | None = None,
    ) -> TransportResponse:
        ...

    async def aclose(self) -> None:
        ...


class HttpxTransport:
    """Transport backed by a shared ``httpx.AsyncClient``."""

    def __init__(
        self,
        base_url: str,
        *,
        user_agent: str | None = None,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        headers = {"User-Agent": user_agent} if user_agent else None
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=base_url,
            headers=headers,
            timeout=timeout,
        )

    @property
    def client(self) -> httpx.AsyncClient:
        return self._client

    async def request(
        self,
        method: str,
        path: str,
        *,
        query: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
        json: Any = None,
        content: bytes | None = None,
    ) -> httpx.Response:
        return await self._client.request(
            method,
            path,
            params=dict(query) if query else None,
            headers=dict(headers) if headers else None,
            json=json,
            content=content,
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
