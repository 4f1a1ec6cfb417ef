"""Response classification - HTTP status and body to normalized Outcome."""

from core.responses.classifier import (
    ErrorKind,
    Outcome,
    classify_response,
    decode_body,
)

__all__ = [
    "ErrorKind",
    "Outcome",
    "classify_response",
    "decode_body",
]
