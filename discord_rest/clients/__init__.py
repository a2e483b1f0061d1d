"""
Client adapters: the dispatcher and the HTTP transport it drives.
"""

from discord_rest.clients.httpx_transport import HttpxTransport, Transport, TransportResponse
from discord_rest.clients.rest_client import RestClient

__all__ = ["HttpxTransport", "RestClient", "Transport", "TransportResponse"]
