"""HTTP transports."""

from connectors.http.aiohttp_transport import AiohttpTransport

__all__ = ["AiohttpTransport"]
