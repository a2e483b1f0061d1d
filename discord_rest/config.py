"""
Configuration management utilities for discord_rest.
"""

from __future__ import annotations

import json
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Mapping, Sequence

from dotenv import dotenv_values

from discord_rest import __version__
from discord_rest.exceptions import ConfigurationError

SUPPORTED_VERSIONS = (8, 9)
DEFAULT_REST_VERSION = 9

TOKEN_ENV_VAR = "DISCORD_TOKEN"
REST_VERSION_ENV_VAR = "DISCORD_REST_VERSION"
BASE_URL_ENV_VAR = "DISCORD_BASE_URL"


def api_url(version: int) -> str:
    return f"https://discord.com/api/v{version}"


def default_user_agent() -> str:
    return f"DiscordBot (https://github.com/auguwu/Wumpcord, {__version__})"


@dataclass(slots=True)
class DiscordCredentials:
    """Bot token container."""

    token: str | None = None

    def is_empty(self) -> bool:
        return self.token in (None, "")

    def merge(self, other: "DiscordCredentials") -> "DiscordCredentials":
        """Merge credential sets, preferring non-null values from ``other``."""

        return DiscordCredentials(token=other.token or self.token)

    def to_dict(self) -> dict[str, str]:
        return {
            key: value
            for key, value in asdict(self).items()
            if isinstance(value, str) and value
        }

    @classmethod
    def from_mapping(cls, data: Mapping[str, str | None]) -> "DiscordCredentials":
        return cls(token=data.get("token"))


@dataclass(slots=True)
class RestClientOptions:
    """Options used to build a :class:`~discord_rest.clients.RestClient`."""

    rest_version: int = DEFAULT_REST_VERSION
    base_url: str | None = None
    user_agent: str = field(default_factory=default_user_agent)
    timeout: float = 30.0

    def __post_init__(self) -> None:
        if self.rest_version not in SUPPORTED_VERSIONS:
            raise ConfigurationError(f"API v{self.rest_version} is not supported.")
        if self.base_url is None:
            self.base_url = api_url(self.rest_version)


class ConfigManager:
    """Loads and persists credentials from the environment, a dotenv file or disk."""

    def __init__(
        self,
        credential_path: Path | None = None,
        *,
        dotenv_path: Path | None = None,
        env: Mapping[str, str] | None = None,
    ) -> None:
        self._credential_path = credential_path or Path("credentials/discord_config.json")
        self._dotenv_path = dotenv_path or Path(".env")
        self._env = env if env is not None else os.environ

    def load_credentials(
        self,
        priority: Sequence[str] = ("env", "dotenv", "file"),
    ) -> DiscordCredentials:
        """
        Load credentials according to the requested priority order.

        Raises:
            ConfigurationError: when no credentials are available.
        """

        for source in priority:
            if source == "env":
                credentials = self._load_from_env()
            elif source == "dotenv":
                credentials = self._load_from_dotenv()
            elif source == "file":
                credentials = self._load_from_file()
            else:
                raise ValueError(f"Unknown credential source '{source}'.")

            if credentials and not credentials.is_empty():
                return credentials

        raise ConfigurationError("Discord credentials are not configured.")

    def load_options(self) -> RestClientOptions:
        """Build client options, honouring overrides from the environment."""

        values = {**self._dotenv_values(), **{k: v for k, v in self._env.items() if v}}
        raw_version = values.get(REST_VERSION_ENV_VAR)
        try:
            version = int(raw_version) if raw_version else DEFAULT_REST_VERSION
        except ValueError as exc:
            raise ConfigurationError(
                f"{REST_VERSION_ENV_VAR} must be an integer, got '{raw_version}'."
            ) from exc
        return RestClientOptions(rest_version=version, base_url=values.get(BASE_URL_ENV_VAR))

    def save_credentials(self, credentials: DiscordCredentials) -> None:
        """Persist credentials to disk, merging with existing values."""

        existing = self._load_from_file()
        merged = existing.merge(credentials) if existing else credentials

        self._credential_path.parent.mkdir(parents=True, exist_ok=True)
        with self._credential_path.open("w", encoding="utf-8") as fp:
            json.dump(merged.to_dict(), fp, indent=2, sort_keys=True)

        os.chmod(self._credential_path, 0o600)

    def _load_from_env(self) -> DiscordCredentials | None:
        credentials = DiscordCredentials(token=self._env.get(TOKEN_ENV_VAR))
        return credentials if not credentials.is_empty() else None

    def _dotenv_values(self) -> dict[str, str]:
        if not self._dotenv_path.exists():
            return {}
        return {key: value for key, value in dotenv_values(self._dotenv_path).items() if value}

    def _load_from_dotenv(self) -> DiscordCredentials | None:
        credentials = DiscordCredentials(token=self._dotenv_values().get(TOKEN_ENV_VAR))
        return credentials if not credentials.is_empty() else None

    def _load_from_file(self) -> DiscordCredentials | None:
        if not self._credential_path.exists():
            return None

        with self._credential_path.open("r", encoding="utf-8") as fp:
            data = json.load(fp)

        if not isinstance(data, Mapping):
            raise ConfigurationError(
                f"Credential file {self._credential_path} did not contain a mapping."
            )

        credentials = DiscordCredentials.from_mapping(data)
        return credentials if not credentials.is_empty() else None
