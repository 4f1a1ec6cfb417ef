"""Classification of raw HTTP responses into Outcomes.

Checks run in a fixed order:

1. body decoding     - a non-JSON body is a malformed response at any status
2. status >= 500     - server error, parsed body passed through as payload
3. status == 404     - not found (synthesized, body ignored)
4. 400 <= status     - bad request if the body has a ``message``, else an
                       unclassified client error carrying the body
5. 2xx               - success with the parsed body
6. anything else     - unexpected status (1xx, 3xx)
"""

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Union

from core.errors import (
    BadRequestError,
    ClientError,
    MalformedResponseError,
    NotFoundError,
    RestMappingError,
    ServerError,
    UnexpectedStatusError,
)
from core.observability.logging import get_logger

logger = get_logger(__name__)


class ErrorKind(str, Enum):
    """Normalized error kinds an Outcome can carry."""
    UNMAPPED_OPERATION = "unmapped_operation"
    TRANSPORT_FAILURE = "transport_failure"
    MALFORMED_RESPONSE = "malformed_response"
    NOT_FOUND = "not_found"
    BAD_REQUEST = "bad_request"
    CLIENT_ERROR = "client_error"
    SERVER_ERROR = "server_error"
    UNEXPECTED_STATUS = "unexpected_status"


@dataclass(frozen=True)
class Outcome:
    """Result of one operation: a result value or an error, never both."""
    error: Optional[RestMappingError] = None
    result: Any = None

    @classmethod
    def success(cls, result: Any) -> "Outcome":
        return cls(error=None, result=result)

    @classmethod
    def failure(cls, error: RestMappingError) -> "Outcome":
        return cls(error=error, result=None)

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def kind(self) -> Optional[ErrorKind]:
        """Error kind, or None on success."""
        if self.error is None:
            return None
        return ErrorKind(self.error.kind)

    def unwrap(self) -> Any:
        """Return the result or raise the carried error."""
        if self.error is not None:
            raise self.error
        return self.result


def decode_body(raw_body: Union[str, bytes, None]) -> Any:
    """Parse a raw body as JSON. A missing body (None) decodes to None.

    An empty or blank body is not JSON and fails like any other.

    Raises:
        ValueError: Body is not valid JSON (or not UTF-8)
    """
    if raw_body is None:
        return None
    if isinstance(raw_body, (bytes, bytearray)):
        raw_body = raw_body.decode("utf-8")
    return json.loads(raw_body)


def _message_of(body: Any) -> Optional[str]:
    if isinstance(body, dict):
        message = body.get("message")
        if isinstance(message, str) and message:
            return message
    return None


def classify_response(status: int, raw_body: Union[str, bytes, None]) -> Outcome:
    """Turn a status code and raw body into an Outcome.

    Args:
        status: HTTP status code
        raw_body: Response body as returned by the transport

    Returns:
        Outcome with the parsed body as result, or a classified error
    """
    try:
        body = decode_body(raw_body)
    except ValueError:
        text = raw_body.decode("utf-8", "replace") if isinstance(raw_body, (bytes, bytearray)) else raw_body
        logger.error(f"Unknown REST response format: {text}", extra_fields={"status": status})
        return Outcome.failure(MalformedResponseError(status, text))

    if status >= 500:
        message = _message_of(body) or f"Server error {status}"
        return Outcome.failure(ServerError(message, status, body))

    if status == 404:
        return Outcome.failure(NotFoundError(status, body))

    if status >= 400:
        message = _message_of(body)
        if message is not None:
            return Outcome.failure(BadRequestError(message, status, body))
        return Outcome.failure(ClientError(f"Client error {status}", status, body))

    if 200 <= status < 300:
        return Outcome.success(body)

    logger.warning(f"Unexpected response status {status}")
    return Outcome.failure(UnexpectedStatusError(f"Unexpected status {status}", status, body))
