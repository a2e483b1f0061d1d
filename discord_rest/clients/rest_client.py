"""
Dispatcher that serializes requests and applies Discord's ratelimits.
"""

from __future__ import annotations

from http import HTTPStatus
from typing import Any, Mapping
from urllib.parse import quote

from pydantic import ValidationError

from discord_rest.clients.httpx_transport import Transport, TransportResponse
from discord_rest.events import CALL, DEBUG, RATELIMITED, EventEmitter
from discord_rest.exceptions import (
    ConfigurationError,
    DiscordAPIError,
    DiscordRestError,
    ResponseDecodeError,
)
from discord_rest.logging import get_logger
from discord_rest.models import ApiErrorPayload, RequestDispatchOptions, RestCallProperties
from discord_rest.multipart import encode_files
from discord_rest.rate_limit import (
    Clock,
    GlobalRatelimitGate,
    RatelimitHeaders,
    RouteBucket,
    Sleeper,
    epoch_millis,
    sleep_ms,
)
from discord_rest.sequential import DispatchSequencer

NO_CONTENT = 204
TOO_MANY_REQUESTS = 429
AUDIT_LOG_SAFE_CHARS = "!~*'()"


def status_reason(status: int) -> str:
    try:
        return HTTPStatus(status).phrase
    except ValueError:
        return "Unknown Status"


class RestClient(EventEmitter):
    """Issues requests one at a time, in call order, honouring ratelimits.

    Events:
        ``ratelimited``: a wait was forced by a 429 or an exhausted bucket.
        ``call``: a response arrived; receives :class:`RestCallProperties`.
        ``debug``: a human readable trace line.
    """

    def __init__(
        self,
        transport: Transport,
        *,
        token: str | None = None,
        clock: Clock = epoch_millis,
        sleep: Sleeper = sleep_ms,
        global_gate: GlobalRatelimitGate | None = None,
    ) -> None:
        super().__init__()
        self.token = token
        self.routes: dict[str, RouteBucket] = {}
        self.sequencer = DispatchSequencer()
        self.global_gate = global_gate or GlobalRatelimitGate(sleep=sleep)
        self.last_dispatch_at = -1.0
        self.last_requested_at = -1.0
        self._transport = transport
        self._clock = clock
        self._sleep = sleep
        self._logger = get_logger("discord_rest.rest_client")

    async def __aenter__(self) -> "RestClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    @property
    def ping(self) -> float:
        if self.last_requested_at == -1 and self.last_dispatch_at == -1:
            return 0.0
        return self.last_requested_at - self.last_dispatch_at

    async def aclose(self) -> None:
        await self._transport.aclose()

    def evict(self, route: str) -> RouteBucket | None:
        return self.routes.pop(route, None)

    def clear_routes(self) -> None:
        self.routes.clear()

    async def dispatch(self, endpoint: str, method: str = "GET", **options: Any) -> Any:
        """
        Send a request and return its decoded JSON body.

        Args:
            endpoint: Route path, also used as the ratelimit bucket key
            method: HTTP verb
            **options: Remaining :class:`RequestDispatchOptions` fields
                (``query``, ``audit_log_reason``, ``auth``, ``file``, ``data``)

        Returns:
            The decoded body, or ``None`` for 204 / empty responses

        Raises:
            ConfigurationError: ``auth=True`` without a configured token
            DiscordAPIError: Discord answered with a 5xx status
            DiscordRestError: The body carried a structured error
        """
        request = RequestDispatchOptions(endpoint=endpoint, method=method, **options)
        return await self.execute(request)

    async def execute(self, request: RequestDispatchOptions) -> Any:
        if request.auth and not self.token:
            raise ConfigurationError("This route requires authentication")

        headers, json_body, content = self._prepare(request)
        async with self.sequencer.turn():
            return await self._execute(request, headers, json_body, content)

    def _prepare(
        self, request: RequestDispatchOptions
    ) -> tuple[dict[str, str], Any, bytes | None]:
        headers: dict[str, str] = {}
        if request.auth:
            headers["Authorization"] = f"Bot {self.token}"

        if request.audit_log_reason is not None:
            headers["X-Audit-Log-Reason"] = quote(
                request.audit_log_reason, safe=AUDIT_LOG_SAFE_CHARS
            )

        if not request.has_body:
            return headers, None, None

        if request.files:
            body = encode_files(request.files, request.data)
            headers["Content-Type"] = body.content_type
            return headers, None, body.content

        headers["Content-Type"] = "application/json"
        return headers, request.data, None

    def _bucket(self, route: str) -> RouteBucket:
        bucket = self.routes.get(route)
        if bucket is None:
            bucket = self.routes[route] = RouteBucket(route, clock=self._clock)
        return bucket

    async def _execute(
        self,
        request: RequestDispatchOptions,
        headers: Mapping[str, str],
        json_body: Any,
        content: bytes | None,
    ) -> Any:
        bucket = self._bucket(request.endpoint)
        trace = f'[REST -> "{request.method} {request.endpoint}"]'

        while True:
            await self.global_gate.wait_if_engaged()

            self.last_dispatch_at = self._clock()
            response = await self._transport.request(
                request.method,
                request.endpoint,
                query=request.query,
                headers=headers,
                json=json_body,
                content=content,
            )
            status = response.status_code
            if status == NO_CONTENT:
                return None

            self.last_requested_at = self._clock()
            self._logger.debug(
                "Received response",
                method=request.method,
                endpoint=request.endpoint,
                status=status,
                ping=self.ping,
            )
            self.emit(DEBUG, f"{trace} Received a {status} status code!")
            self.emit(
                CALL,
                RestCallProperties(
                    ratelimited=status == TOO_MANY_REQUESTS,
                    endpoint=request.endpoint,
                    method=request.method,
                    status=status_reason(status),
                    query=request.query,
                    body=response.text,
                    ping=self.ping,
                ),
            )

            parsed = bucket.observe(response.headers)
            if parsed.is_global:
                self._engage_global(bucket, parsed)

            if status == TOO_MANY_REQUESTS:
                delay = self._retry_delay(bucket, parsed)
                self._logger.info(
                    "Ratelimited, retrying",
                    endpoint=request.endpoint,
                    delay_ms=delay,
                    is_global=parsed.is_global,
                )
                self.emit(RATELIMITED)
                if delay > 0:
                    await self._sleep(delay)
                continue

            if bucket.is_limited():
                delay = bucket.wait_duration()
                self._logger.info(
                    "Bucket exhausted, waiting for reset",
                    endpoint=request.endpoint,
                    delay_ms=delay,
                )
                self.emit(RATELIMITED)
                await self._sleep(delay)

            return self._classify(response)

    def _engage_global(self, bucket: RouteBucket, parsed: RatelimitHeaders) -> None:
        retry_after = parsed.retry_after_ms()
        duration = retry_after if retry_after is not None else bucket.wait_duration()
        if self.global_gate.engage(duration):
            self._logger.warning("Global ratelimit engaged", duration_ms=duration)
            self.emit(DEBUG, f"Globally ratelimited for {duration:.0f}ms")

    def _retry_delay(self, bucket: RouteBucket, parsed: RatelimitHeaders) -> float:
        # The global gate already holds the next attempt back.
        if parsed.is_global:
            return 0.0
        retry_after = parsed.retry_after_ms()
        if retry_after is not None:
            return max(retry_after, 0.0)
        return bucket.wait_duration()

    def _classify(self, response: TransportResponse) -> Any:
        status = response.status_code
        if status >= 500:
            raise DiscordAPIError(status, status_reason(status))

        text = response.text
        if not text:
            return None

        try:
            data = response.json()
        except ValueError as exc:
            raise ResponseDecodeError(
                f"Unable to decode {status} response body as JSON.",
                status=status,
                body=text,
            ) from exc

        try:
            error = ApiErrorPayload.from_body(data)
        except ValidationError as exc:
            raise ResponseDecodeError(
                f"Malformed error body in {status} response.",
                status=status,
                body=text,
            ) from exc

        if error is not None:
            raise DiscordRestError(error.code, error.message, error.formatted_errors())
        return data
