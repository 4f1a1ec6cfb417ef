"""Mapped REST client.

Exposes insert/update/delete/get/list/assoc on top of a declarative
mapping. Each call:

1. builds a RequestDescriptor with the UrlBuilder (pure, no I/O)
2. merges the client-wide transport defaults into it
3. executes it once through the transport
4. classifies the raw response into an Outcome

Errors are returned inside the Outcome, never raised.
"""

import asyncio
import logging
import uuid
from types import MappingProxyType
from typing import Any, Mapping, Optional, Union

from connectors.transport_base import Transport
from core.config import RestClientConfig
from core.errors import TransportError, UnmappedOperationError
from core.mapping.config import MappingConfig, OperationKind
from core.mapping.url_builder import RequestDescriptor, UrlBuilder
from core.observability.logging import configure_logging, get_logger, with_correlation
from core.responses.classifier import Outcome, classify_response

logger = get_logger(__name__)


class RestClient:
    """Client for a REST API described by a mapping.

    Usage:
        client = RestClient(
            "http://foo.sub.com/rest/v1",
            {"get": {"video": {}}, "list": {"category/videos": {"insert": "category"}}},
        )
        async with client:
            outcome = await client.get("video", {"id": 1})
            if outcome.ok:
                video = outcome.result
    """

    def __init__(
        self,
        base_url: str,
        mapping: Union[MappingConfig, Mapping[str, Any], None] = None,
        translation_map: Optional[Mapping[str, Any]] = None,
        transport: Optional[Transport] = None,
        transport_defaults: Optional[Mapping[str, Any]] = None,
    ):
        """Initialize the client.

        Args:
            base_url: Base URL for all requests
            mapping: Raw or normalized mapping configuration
            translation_map: ``$placeholder`` substitutions for URL templates
            transport: Transport to execute requests (aiohttp if None)
            transport_defaults: Merged into every request; the "headers" key is
                merged into request headers, every other key is passed to the
                transport as a request option
        """
        self._builder = UrlBuilder(base_url, mapping, translation_map)

        defaults = dict(transport_defaults or {})
        self._default_headers = MappingProxyType(dict(defaults.pop("headers", None) or {}))
        self._default_options = MappingProxyType(defaults)

        if transport is None:
            from connectors.http.aiohttp_transport import AiohttpTransport
            transport = AiohttpTransport()
        self._transport = transport

    @classmethod
    def from_config(cls, config: RestClientConfig, transport: Optional[Transport] = None) -> "RestClient":
        """Create a client (and configure logging) from a RestClientConfig."""
        configure_logging(
            level=logging.getLevelName(config.log_level),
            json_format=config.log_json,
        )
        if transport is None:
            from connectors.http.aiohttp_transport import AiohttpTransport
            transport = AiohttpTransport(timeout_seconds=config.timeout_seconds)
        return cls(
            config.base_url,
            config.mapping,
            config.translation_map,
            transport=transport,
            transport_defaults=config.transport_defaults,
        )

    @property
    def mapping(self) -> MappingConfig:
        return self._builder.mapping

    @property
    def transport(self) -> Transport:
        return self._transport

    async def close(self) -> None:
        await self._transport.close()

    async def __aenter__(self) -> "RestClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    # =========================================================================
    # Operations
    # =========================================================================

    async def insert(self, type_name: str, entity: Mapping[str, Any]) -> Outcome:
        """Insert an entity. Body is the serialized entity."""
        return await self._perform(OperationKind.INSERT, type_name, entity)

    async def update(self, type_name: str, entity: Mapping[str, Any]) -> Outcome:
        """Update an entity. Body is the serialized entity."""
        return await self._perform(OperationKind.UPDATE, type_name, entity)

    async def delete(self, type_name: str, entity: Mapping[str, Any]) -> Outcome:
        """Delete an entity."""
        return await self._perform(OperationKind.DELETE, type_name, entity)

    async def get(self, type_name: str, entity: Mapping[str, Any]) -> Outcome:
        """Retrieve a single entity."""
        return await self._perform(OperationKind.GET, type_name, entity)

    async def list(self, type_name: str, filter: Mapping[str, Any]) -> Outcome:
        """List entities matching a filter."""
        return await self._perform(OperationKind.LIST, type_name, filter)

    async def assoc(self, type_name: str, entities: Mapping[str, Any]) -> Outcome:
        """Associate entities. Body is the directive's ``data`` field, if any."""
        return await self._perform(OperationKind.ASSOC, type_name, entities)

    def build_request(
        self,
        kind: Union[OperationKind, str],
        type_name: str,
        entity: Optional[Mapping[str, Any]] = None,
    ) -> Optional[RequestDescriptor]:
        """Return the request an operation would send, or None if not mapped."""
        descriptor = self._builder.build(kind, type_name, entity)
        if descriptor is None:
            return None
        return descriptor.with_defaults(self._default_headers, self._default_options)

    # =========================================================================
    # Internals
    # =========================================================================

    async def _perform(self, kind: OperationKind, type_name: str, entity: Mapping[str, Any]) -> Outcome:
        request_id = uuid.uuid4().hex
        with with_correlation(
            request_id=request_id,
            operation=kind.value,
            type_name=type_name,
            base_url=self._builder.base_url,
        ):
            descriptor = self.build_request(kind, type_name, entity)
            if descriptor is None:
                logger.error(f"Undefined rest mapping for {kind.value} '{type_name}'")
                return Outcome.failure(UnmappedOperationError(kind.value, type_name))

            try:
                response = await self._transport.execute(descriptor)
            except asyncio.CancelledError:
                raise
            except TransportError as e:
                logger.error(f"Transport failure: {e}", extra_fields={"url": descriptor.url})
                return Outcome.failure(e)
            except Exception as e:
                logger.error(
                    f"Transport failure: {type(e).__name__}: {e}",
                    extra_fields={"url": descriptor.url},
                )
                return Outcome.failure(TransportError(str(e) or type(e).__name__, cause=e))

            outcome = classify_response(response.status, response.body)
            logger.debug(
                f"{descriptor.method} {descriptor.url} -> {response.status}",
                extra_fields={
                    "status": response.status,
                    "error_kind": outcome.kind.value if outcome.kind else None,
                },
            )
            return outcome
