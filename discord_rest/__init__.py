"""
Ratelimit-aware client for the Discord REST API.
"""

__version__ = "0.1.0"

from discord_rest.clients import HttpxTransport, RestClient
from discord_rest.config import ConfigManager, DiscordCredentials, RestClientOptions
from discord_rest.exceptions import (
    ApiResponseError,
    ConfigurationError,
    DiscordAPIError,
    DiscordRestError,
    ResponseDecodeError,
    RestClientError,
)
from discord_rest.factory import RestClientFactory
from discord_rest.models import MessageFile, RequestDispatchOptions, RestCallProperties

__all__ = [
    "ApiResponseError",
    "ConfigManager",
    "ConfigurationError",
    "DiscordAPIError",
    "DiscordCredentials",
    "DiscordRestError",
    "HttpxTransport",
    "MessageFile",
    "RequestDispatchOptions",
    "ResponseDecodeError",
    "RestCallProperties",
    "RestClient",
    "RestClientError",
    "RestClientFactory",
    "RestClientOptions",
]
