"""Error taxonomy for mapped REST operations.

These exceptions are carried inside an ``Outcome``; the public client
operations return them instead of raising. ``Outcome.unwrap()`` re-raises
for callers that prefer exceptions.
"""

from typing import Any, Optional


class RestMappingError(Exception):
    """Base exception for mapped REST operation errors."""
    kind = "error"

    def __init__(self, message: str, status_code: int = 0, payload: Any = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload


class UnmappedOperationError(RestMappingError):
    """No directive exists for the type name under the operation kind."""
    kind = "unmapped_operation"

    def __init__(self, operation: str, type_name: str):
        super().__init__(f"Undefined rest mapping for {operation} '{type_name}'")
        self.operation = operation
        self.type_name = type_name


class TransportError(RestMappingError):
    """The transport could not complete the exchange (connection, DNS, timeout)."""
    kind = "transport_failure"

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class MalformedResponseError(RestMappingError):
    """Response body could not be decoded as JSON."""
    kind = "malformed_response"

    def __init__(self, status_code: int, raw_body: str):
        super().__init__(f"Unknown REST response format: {raw_body}", status_code, raw_body)


class NotFoundError(RestMappingError):
    """Resource not found (404)."""
    kind = "not_found"

    def __init__(self, status_code: int = 404, payload: Any = None):
        super().__init__("Not found", status_code, payload)


class BadRequestError(RestMappingError):
    """Client error (4xx) whose body carries a message."""
    kind = "bad_request"


class ClientError(RestMappingError):
    """Client error (4xx) without a recognizable message; body kept verbatim."""
    kind = "client_error"


class ServerError(RestMappingError):
    """Server error (5xx); the parsed body is passed through as ``payload``."""
    kind = "server_error"


class UnexpectedStatusError(RestMappingError):
    """Status outside the 2xx/4xx/5xx classes (1xx, 3xx, ...)."""
    kind = "unexpected_status"
