"""REST connectors - mapped client and pluggable transports.

This package contains the RestClient that turns mapped operations into
HTTP calls, the abstract Transport interface it talks through, and the
concrete aiohttp transport.

Key Design Principle:
- URL construction and response classification live in /core/ and are pure
- Only transports perform network I/O
- Every operation returns exactly one Outcome

To add a new transport:
1. Implement the Transport interface
2. Register it using the @register_transport decorator
"""

from connectors.transport_base import (
    Transport,
    TransportResponse,
    create_transport,
    register_transport,
    list_available_transports,
)
from connectors.http.aiohttp_transport import AiohttpTransport
from connectors.rest_client import RestClient

__all__ = [
    "Transport",
    "TransportResponse",
    "create_transport",
    "register_transport",
    "list_available_transports",
    "AiohttpTransport",
    "RestClient",
]
