"""
Factory for creating RestClient instances with proper initialization.
"""

from __future__ import annotations

from discord_rest.clients.httpx_transport import HttpxTransport
from discord_rest.clients.rest_client import RestClient
from discord_rest.config import ConfigManager, DiscordCredentials, RestClientOptions
from discord_rest.exceptions import ConfigurationError


class RestClientFactory:
    """Factory for creating ready-to-use Discord REST clients."""

    @staticmethod
    def create_from_config(
        config_manager: ConfigManager,
        *,
        require_token: bool = True,
    ) -> RestClient:
        """
        Create a RestClient using credentials and options from configuration.

        Args:
            config_manager: ConfigManager used to resolve the token and options
            require_token: When False, a missing token yields an anonymous client

        Raises:
            ConfigurationError: If the token is required but not configured,
                or the configured API version is unsupported
        """
        options = config_manager.load_options()
        try:
            credentials = config_manager.load_credentials()
        except ConfigurationError:
            if require_token:
                raise
            credentials = DiscordCredentials()
        return RestClientFactory.create_from_credentials(credentials, options)

    @staticmethod
    def create_from_credentials(
        credentials: DiscordCredentials,
        options: RestClientOptions | None = None,
    ) -> RestClient:
        """
        Create a RestClient directly from credentials.

        Args:
            credentials: DiscordCredentials carrying the bot token (may be empty)
            options: Client options; defaults target the latest supported API version

        Returns:
            RestClient backed by an HttpxTransport
        """
        options = options or RestClientOptions()
        transport = HttpxTransport(
            options.base_url or "",
            user_agent=options.user_agent,
            timeout=options.timeout,
        )
        return RestClient(transport, token=credentials.token or None)
