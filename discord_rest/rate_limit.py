"""
Ratelimit state derived from Discord response headers.

The parsing side (:class:`RatelimitHeaders`) is pure so it can be tested
against literal header tables; :class:`RouteBucket` keeps per-route state and
:class:`GlobalRatelimitGate` blocks every route while an API-wide limit lasts.
All timestamps and durations are milliseconds on the local clock.
"""

from __future__ import annotations

import asyncio
import math
import time
from dataclasses import dataclass
from datetime import timezone
from email.utils import parsedate_to_datetime
from typing import Awaitable, Callable, Mapping

Clock = Callable[[], float]
Sleeper = Callable[[float], Awaitable[None]]

# Google's front proxy reports retry-after in seconds.
PROXY_MARKER = "1.1 google"
# Reaction routes need extra slack: https://github.com/discord/discord-api-docs/issues/182
REACTION_ROUTE_MARKER = "reactions"
REACTION_RESET_GRACE_MS = 250.0
RETRY_AFTER_EPSILON_MS = 100.0


def epoch_millis() -> float:
    return time.time() * 1000


async def sleep_ms(milliseconds: float) -> None:
    """The one backoff primitive every internal wait goes through."""

    await asyncio.sleep(max(milliseconds, 0.0) / 1000)


def _header(headers: Mapping[str, str], name: str) -> str | None:
    value = headers.get(name)
    if value is not None:
        return value
    lowered = name.lower()
    for key, candidate in headers.items():
        if key.lower() == lowered:
            return candidate
    return None


def _to_float(value: str | None) -> float | None:
    if value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _parse_server_date(value: str | None) -> float:
    if not value:
        return math.nan
    try:
        moment = parsedate_to_datetime(value)
    except (TypeError, ValueError, IndexError):
        return math.nan
    if moment.tzinfo is None:
        # "-0000" zones parse as naive; HTTP dates are always UTC.
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.timestamp() * 1000


@dataclass(slots=True)
class RatelimitHeaders:
    """Ratelimit metadata parsed from one response."""

    server_date: float = math.nan
    remaining: int | None = None
    reset: float | None = None
    reset_after: float | None = None
    retry_after: float | None = None
    via: str | None = None
    is_global: bool = False
    bucket: str | None = None

    @classmethod
    def from_headers(cls, headers: Mapping[str, str]) -> "RatelimitHeaders":
        remaining = _to_float(_header(headers, "x-ratelimit-remaining"))
        global_flag = _header(headers, "x-ratelimit-global")
        return cls(
            server_date=_parse_server_date(_header(headers, "date")),
            remaining=int(remaining) if remaining is not None else None,
            reset=_to_float(_header(headers, "x-ratelimit-reset")),
            reset_after=_to_float(_header(headers, "x-ratelimit-reset-after")),
            retry_after=_to_float(_header(headers, "retry-after")),
            via=_header(headers, "via"),
            is_global=global_flag is not None
            and global_flag.strip().lower() not in ("", "false", "0"),
            bucket=_header(headers, "x-ratelimit-bucket"),
        )

    @property
    def via_proxy(self) -> bool:
        return self.via is not None and PROXY_MARKER in self.via

    def offset(self, now: float) -> float:
        """Server clock minus local clock, NaN when the server sent no date."""
        return self.server_date - now

    def retry_after_ms(self) -> float | None:
        if self.retry_after is None:
            return None
        if self.via_proxy:
            return self.retry_after * 1000
        if self.reset is None and self.reset_after is None:
            return self.retry_after * 1000 + RETRY_AFTER_EPSILON_MS
        return self.retry_after


def compute_reset_at(route: str, parsed: RatelimitHeaders, now: float) -> float:
    """Translate the server's reset signal into a local timestamp."""

    if parsed.reset is not None:
        # reset*1000 - offset == now + (reset*1000 - server_date)
        reset_at = parsed.reset * 1000 - parsed.offset(now)
    elif parsed.reset_after is not None:
        reset_at = now + parsed.reset_after * 1000
    else:
        reset_at = now

    if math.isnan(reset_at) or math.isinf(reset_at):
        reset_at = now

    if REACTION_ROUTE_MARKER in route:
        reset_at += REACTION_RESET_GRACE_MS
    return reset_at


class RouteBucket:
    """Ratelimit bucket for a single route."""

    def __init__(self, route: str, *, clock: Clock = epoch_millis) -> None:
        self.route = route
        self.remaining = -1
        self.reset_at = -1.0
        self.last_headers: RatelimitHeaders | None = None
        self._clock = clock

    def __repr__(self) -> str:
        return (
            f"RouteBucket(route={self.route!r}, remaining={self.remaining}, "
            f"reset_at={self.reset_at})"
        )

    @property
    def ratelimited(self) -> bool:
        return self.is_limited()

    def is_limited(self) -> bool:
        return self.remaining == 0 and self.reset_at > self._clock()

    def wait_duration(self) -> float:
        if self.reset_at < 0:
            return 0.0
        return max(self.reset_at - self._clock(), 0.0)

    def observe(self, headers: Mapping[str, str] | RatelimitHeaders) -> RatelimitHeaders:
        parsed = (
            headers
            if isinstance(headers, RatelimitHeaders)
            else RatelimitHeaders.from_headers(headers)
        )
        now = self._clock()
        self.remaining = parsed.remaining if parsed.remaining is not None else 1
        self.reset_at = compute_reset_at(self.route, parsed, now)
        self.last_headers = parsed
        return parsed


class GlobalRatelimitGate:
    """Shared timer that holds back every route during a global ratelimit.

    Only the first :meth:`engage` in a window starts the timer; later calls
    are ignored until it elapses and clears itself. All waiters await the
    same in-flight task.
    """

    def __init__(self, *, sleep: Sleeper = sleep_ms) -> None:
        self._sleep = sleep
        self._pending: asyncio.Future[None] | None = None

    @property
    def engaged(self) -> bool:
        return self._pending is not None and not self._pending.done()

    def engage(self, duration: float) -> bool:
        if self._pending is not None:
            return False

        pending = asyncio.ensure_future(self._sleep(max(duration, 0.0)))
        pending.add_done_callback(self._clear)
        self._pending = pending
        return True

    async def wait_if_engaged(self) -> None:
        pending = self._pending
        if pending is not None:
            await asyncio.shield(pending)

    def _clear(self, pending: asyncio.Future[None]) -> None:
        if self._pending is pending:
            self._pending = None
