"""Shared fakes for dispatcher tests: a millisecond clock and a scripted transport."""

from __future__ import annotations

import asyncio
from collections import deque
from datetime import datetime, timezone
from email.utils import format_datetime
from types import SimpleNamespace
from typing import Any, Iterable

import httpx

# Whole seconds, so HTTP dates (second resolution) round-trip exactly.
START_MS = 1_700_000_000_000.0


def http_date(milliseconds: float) -> str:
    moment = datetime.fromtimestamp(milliseconds / 1000, tz=timezone.utc)
    return format_datetime(moment, usegmt=True)


class FakeClock:
    """Millisecond clock whose ``sleep`` advances time instead of blocking."""

    def __init__(self, start: float = START_MS) -> None:
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def advance(self, milliseconds: float) -> None:
        self.now += milliseconds

    async def sleep(self, milliseconds: float) -> None:
        self.sleeps.append(milliseconds)
        self.now += max(milliseconds, 0.0)
        await asyncio.sleep(0)


def make_response(
    status: int = 200,
    body: Any = None,
    *,
    headers: dict[str, str] | None = None,
    text: str | None = None,
) -> httpx.Response:
    if text is not None:
        return httpx.Response(status, text=text, headers=headers)
    if body is None:
        return httpx.Response(status, headers=headers)
    return httpx.Response(status, json=body, headers=headers)


class ScriptedTransport:
    """Transport double that replays queued responses and records every call."""

    def __init__(
        self,
        responses: Iterable[httpx.Response | Exception] = (),
        *,
        clock: FakeClock | None = None,
        latency: float = 0.0,
    ) -> None:
        self._responses: deque[httpx.Response | Exception] = deque(responses)
        self._clock = clock
        self._latency = latency
        self.calls: list[SimpleNamespace] = []
        self.active = 0
        self.max_active = 0
        self.closed = False

    def queue(self, *responses: httpx.Response | Exception) -> None:
        self._responses.extend(responses)

    async def request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        self.calls.append(SimpleNamespace(method=method, path=path, **kwargs))
        try:
            await asyncio.sleep(0)
            if self._clock is not None:
                self._clock.advance(self._latency)
            await asyncio.sleep(0)
            if not self._responses:
                return make_response(200, {"path": path})
            response = self._responses.popleft()
            if isinstance(response, Exception):
                raise response
            return response
        finally:
            self.active -= 1

    async def aclose(self) -> None:
        self.closed = True
