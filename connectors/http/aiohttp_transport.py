"""aiohttp HTTP transport.

Executes RequestDescriptors over HTTP with a single aiohttp ClientSession.
No retries, no authentication: connection-level failures are reported as
TransportError and left to the caller.
"""

import asyncio
from typing import Any, Dict, Optional

import aiohttp

from connectors.transport_base import Transport, TransportResponse, register_transport
from core.errors import TransportError
from core.mapping.url_builder import RequestDescriptor
from core.observability.logging import get_logger

logger = get_logger(__name__)


@register_transport("aiohttp")
class AiohttpTransport(Transport):
    """HTTP transport backed by aiohttp.

    Usage:
        async with AiohttpTransport(timeout_seconds=10) as transport:
            response = await transport.execute(descriptor)
    """

    def __init__(
        self,
        timeout_seconds: float = 30,
        session: Optional[aiohttp.ClientSession] = None,
        **client_kwargs: Any,
    ):
        """Initialize the transport.

        Args:
            timeout_seconds: Total timeout per request
            session: Externally managed session (not closed by this transport)
            **client_kwargs: Passed to aiohttp.ClientSession when one is created
        """
        self.timeout_seconds = timeout_seconds
        self._client_kwargs = client_kwargs
        self._session = session
        self._owns_session = session is None
        self._lock = asyncio.Lock()

    async def _get_session(self) -> aiohttp.ClientSession:
        async with self._lock:
            if self._session is None or self._session.closed:
                self._session = aiohttp.ClientSession(
                    timeout=aiohttp.ClientTimeout(total=self.timeout_seconds),
                    **self._client_kwargs,
                )
                self._owns_session = True
            return self._session

    async def execute(self, descriptor: RequestDescriptor) -> TransportResponse:
        session = await self._get_session()

        kwargs: Dict[str, Any] = dict(descriptor.options)
        kwargs["headers"] = dict(descriptor.headers)
        if descriptor.has_body and descriptor.body is not None:
            kwargs["data"] = descriptor.body.encode("utf-8")

        try:
            async with session.request(descriptor.method, descriptor.url, **kwargs) as response:
                body = await response.read()
                return TransportResponse(
                    status=response.status,
                    body=body,
                    headers=dict(response.headers),
                )
        except asyncio.TimeoutError as e:
            raise TransportError(
                f"Request timed out after {self.timeout_seconds}s: {descriptor.method} {descriptor.url}",
                cause=e,
            ) from e
        except aiohttp.ClientError as e:
            raise TransportError(
                f"Request failed with {type(e).__name__}: {e}",
                cause=e,
            ) from e

    async def close(self) -> None:
        """Close the HTTP session if this transport created it."""
        if self._session is not None and self._owns_session:
            await self._session.close()
        self._session = None
