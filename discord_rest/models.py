"""
Pydantic models for dispatch requests and Discord API payloads used by discord_rest.
"""

from __future__ import annotations

from typing import Any, Iterator, Literal, Mapping

from pydantic import BaseModel, ConfigDict, Field, field_validator

HttpMethod = Literal["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]
BODYLESS_METHODS = frozenset({"GET", "HEAD"})
DEFAULT_FILE_NAME = "file.png"


class MessageFile(BaseModel):
    """A file attachment sent alongside a request."""

    file: bytes
    name: str = DEFAULT_FILE_NAME

    @field_validator("name", mode="before")
    @classmethod
    def default_name(cls, value: Any) -> Any:
        return value or DEFAULT_FILE_NAME


class RequestDispatchOptions(BaseModel):
    """Everything the dispatcher needs to issue one logical request."""

    endpoint: str
    method: HttpMethod = "GET"
    query: dict[str, Any] | None = None
    audit_log_reason: str | None = None
    auth: bool = False
    file: MessageFile | list[MessageFile] | None = None
    data: Any = None

    @field_validator("method", mode="before")
    @classmethod
    def normalize_method(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.upper()
        return value

    @property
    def files(self) -> list[MessageFile]:
        if self.file is None:
            return []
        if isinstance(self.file, list):
            return self.file
        return [self.file]

    @property
    def has_body(self) -> bool:
        return self.method not in BODYLESS_METHODS


class RestCallProperties(BaseModel):
    """Summary of a completed call, handed to ``call`` listeners."""

    ratelimited: bool
    endpoint: str
    method: str
    status: str
    query: dict[str, Any] | None = None
    body: str
    ping: float


class FieldError(BaseModel):
    """One field-level validation failure reported by the API."""

    code: str | int
    key: str = ""
    message: str

    model_config = ConfigDict(extra="allow")

    def format(self) -> str:
        return f"[{self.code}: {self.key}] {self.message}"


def _flatten_error_tree(node: Mapping[str, Any], path: tuple[str, ...] = ()) -> Iterator[dict[str, Any]]:
    for key, value in node.items():
        if key == "_errors" and isinstance(value, list):
            for item in value:
                yield {
                    "code": item.get("code", "UNKNOWN"),
                    "key": ".".join(path),
                    "message": item.get("message", ""),
                }
        elif isinstance(value, Mapping):
            yield from _flatten_error_tree(value, path + (str(key),))


class ApiErrorPayload(BaseModel):
    """Structured error body: a code, a message and optional field errors."""

    code: int
    message: str
    errors: list[FieldError] = Field(default_factory=list)

    model_config = ConfigDict(extra="allow")

    @field_validator("errors", mode="before")
    @classmethod
    def flatten_errors(cls, value: Any) -> Any:
        # Discord nests field errors as {"field": {"0": {"_errors": [...]}}}
        if value is None:
            return []
        if isinstance(value, Mapping):
            return list(_flatten_error_tree(value))
        return value

    @classmethod
    def from_body(cls, body: Any) -> "ApiErrorPayload | None":
        if not isinstance(body, Mapping):
            return None
        if "code" not in body or "message" not in body:
            return None
        return cls.model_validate(body)

    def formatted_errors(self) -> list[str]:
        return [error.format() for error in self.errors]
