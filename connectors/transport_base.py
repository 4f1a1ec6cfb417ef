"""Abstract Transport Interface.

The transport is the only part of the client that performs network I/O.
It executes one RequestDescriptor and returns the raw status, headers and
body. It does not classify responses; the RestClient does that.

Key Design Principles:
- One ``execute`` call per operation invocation
- Connection-level failures surface as TransportError, never as a status
- Authentication, retries, pooling and caching belong to implementations
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Mapping, Type, Union

from core.mapping.url_builder import RequestDescriptor


@dataclass(frozen=True)
class TransportResponse:
    """Raw HTTP response as returned by a transport."""
    status: int
    body: Union[str, bytes, None] = None
    headers: Mapping[str, str] = field(default_factory=dict)


class Transport(ABC):
    """Abstract base class for HTTP transports.

    Implementations:
    - connectors/http/aiohttp_transport.py
    """

    @abstractmethod
    async def execute(self, descriptor: RequestDescriptor) -> TransportResponse:
        """Execute a request.

        Args:
            descriptor: Fully built request

        Returns:
            TransportResponse with status, body and headers

        Raises:
            TransportError: The exchange could not be completed
        """
        pass

    async def close(self) -> None:
        """Release transport resources."""
        return None

    async def __aenter__(self) -> "Transport":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()


# =============================================================================
# Transport Registry
# =============================================================================

_transport_registry: Dict[str, Type[Transport]] = {}


def register_transport(transport_type: str) -> Callable[[Type[Transport]], Type[Transport]]:
    """Decorator to register a transport implementation."""
    def decorator(cls):
        _transport_registry[transport_type.lower()] = cls
        return cls
    return decorator


def create_transport(transport_type: str, **kwargs) -> Transport:
    """Create a transport instance by registered name.

    Args:
        transport_type: Registered name (e.g., "aiohttp")
        **kwargs: Passed to the transport constructor

    Raises:
        ValueError: If transport_type is not registered
    """
    key = transport_type.lower()
    if key not in _transport_registry:
        available = list(_transport_registry.keys())
        raise ValueError(
            f"Unknown transport type: {transport_type}. "
            f"Available: {available}"
        )
    return _transport_registry[key](**kwargs)


def list_available_transports() -> List[str]:
    """List all registered transport types."""
    return list(_transport_registry.keys())
