"""
Observability for the REST mapping client.

Provides structured logging with correlation IDs per operation call.
"""

from core.observability.logging import (
    get_logger,
    configure_logging,
    CorrelationContext,
    get_correlation_context,
    with_correlation,
    StructuredFormatter,
    HumanReadableFormatter,
)

__all__ = [
    "get_logger",
    "configure_logging",
    "CorrelationContext",
    "get_correlation_context",
    "with_correlation",
    "StructuredFormatter",
    "HumanReadableFormatter",
]
