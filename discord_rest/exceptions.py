"""
Domain specific exception hierarchy for the discord_rest package.
"""

from __future__ import annotations

from typing import Sequence


class RestClientError(Exception):
    """Base exception for all library errors."""


class ConfigurationError(RestClientError):
    """Raised when required configuration or credentials are missing."""


class ApiResponseError(RestClientError):
    """Raised when the Discord API answers with a failure."""

    def __init__(self, message: str, *, code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code


class DiscordAPIError(ApiResponseError):
    """Raised when Discord answers with a server fault (5xx)."""

    def __init__(self, status: int, reason: str | None = None) -> None:
        reason = reason or "Unknown Error"
        super().__init__(f"{status} {reason}", code=status)
        self.status = status
        self.reason = reason


class DiscordRestError(ApiResponseError):
    """Raised when the response body carries a structured error."""

    def __init__(
        self,
        code: int,
        message: str,
        errors: Sequence[str] | None = None,
    ) -> None:
        self.errors = list(errors or [])
        if self.errors:
            message = message + "\n  " + "\n  ".join(self.errors)
        super().__init__(message, code=code)
        self.name = f"DiscordRESTError [{code}]"


class ResponseDecodeError(ApiResponseError):
    """Raised when a response body cannot be decoded as JSON."""

    def __init__(self, message: str, *, status: int, body: str) -> None:
        super().__init__(message, code=status)
        self.status = status
        self.body = body
