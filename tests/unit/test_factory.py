from __future__ import annotations

from unittest.mock import Mock

import pytest

from discord_rest.clients.httpx_transport import HttpxTransport
from discord_rest.clients.rest_client import RestClient
from discord_rest.config import ConfigManager, DiscordCredentials, RestClientOptions
from discord_rest.exceptions import ConfigurationError
from discord_rest.factory import RestClientFactory


def test_create_from_credentials_builds_httpx_backed_client() -> None:
    """Factory wires the token and base URL into a RestClient."""
    client = RestClientFactory.create_from_credentials(
        DiscordCredentials(token="abc"),
        RestClientOptions(rest_version=8),
    )

    assert isinstance(client, RestClient)
    assert client.token == "abc"
    transport = client._transport
    assert isinstance(transport, HttpxTransport)
    assert str(transport.client.base_url) == "https://discord.com/api/v8/"
    assert transport.client.headers["User-Agent"].startswith("DiscordBot (")


def test_create_from_config_uses_loaded_credentials() -> None:
    config = Mock(spec=ConfigManager)
    config.load_credentials.return_value = DiscordCredentials(token="from-config")
    config.load_options.return_value = RestClientOptions()

    client = RestClientFactory.create_from_config(config)

    config.load_credentials.assert_called_once_with()
    assert client.token == "from-config"


def test_create_from_config_requires_token_by_default() -> None:
    config = Mock(spec=ConfigManager)
    config.load_credentials.side_effect = ConfigurationError("missing")
    config.load_options.return_value = RestClientOptions()

    with pytest.raises(ConfigurationError):
        RestClientFactory.create_from_config(config)


def test_create_from_config_allows_anonymous_client() -> None:
    config = Mock(spec=ConfigManager)
    config.load_credentials.side_effect = ConfigurationError("missing")
    config.load_options.return_value = RestClientOptions()

    client = RestClientFactory.create_from_config(config, require_token=False)

    assert client.token is None
