"""
Response Classifier Tests

Validates status/body classification:
1. Malformed bodies are reported before any status branch
2. 5xx pass the parsed body through verbatim
3. 404 is synthesized as "not found"
4. 4xx with/without a message field
5. 2xx success and the unexpected-status default
"""

import pytest

from core.errors import (
    BadRequestError,
    ClientError,
    MalformedResponseError,
    NotFoundError,
    ServerError,
    UnexpectedStatusError,
)
from core.responses import ErrorKind, Outcome, classify_response, decode_body


class TestClassification:

    def test_success(self):
        outcome = classify_response(200, '{"id":1}')
        assert outcome.ok
        assert outcome.error is None
        assert outcome.result == {"id": 1}
        assert outcome.kind is None

    def test_success_with_list_body(self):
        outcome = classify_response(201, b"[1, 2, 3]")
        assert outcome.result == [1, 2, 3]

    @pytest.mark.parametrize("status", [200, 204, 400, 404, 500])
    @pytest.mark.parametrize("raw", [b"", "", "  \n"])
    def test_empty_body_is_malformed(self, status, raw):
        outcome = classify_response(status, raw)
        assert isinstance(outcome.error, MalformedResponseError)
        assert outcome.kind == ErrorKind.MALFORMED_RESPONSE
        assert outcome.result is None

    def test_missing_body_succeeds_with_none(self):
        outcome = classify_response(204, None)
        assert outcome.ok
        assert outcome.result is None

    def test_not_found_ignores_body(self):
        outcome = classify_response(404, '{"message": "gone"}')
        assert isinstance(outcome.error, NotFoundError)
        assert outcome.error.message == "Not found"
        assert outcome.kind == ErrorKind.NOT_FOUND
        assert outcome.result is None

    def test_bad_request_with_message(self):
        outcome = classify_response(400, '{"message":"bad id"}')
        assert isinstance(outcome.error, BadRequestError)
        assert outcome.error.message == "bad id"
        assert str(outcome.error) == "bad id"
        assert outcome.kind == ErrorKind.BAD_REQUEST

    def test_client_error_without_message(self):
        outcome = classify_response(422, '{"required":"name"}')
        assert isinstance(outcome.error, ClientError)
        assert outcome.error.payload == {"required": "name"}
        assert outcome.error.status_code == 422
        assert outcome.kind == ErrorKind.CLIENT_ERROR

    def test_server_error_passes_body_through(self):
        outcome = classify_response(500, '{"message":"server down"}')
        assert isinstance(outcome.error, ServerError)
        assert outcome.error.payload == {"message": "server down"}
        assert outcome.error.message == "server down"
        assert outcome.kind == ErrorKind.SERVER_ERROR

    def test_server_error_without_message(self):
        outcome = classify_response(503, '["overloaded"]')
        assert outcome.error.payload == ["overloaded"]
        assert outcome.error.status_code == 503

    @pytest.mark.parametrize("status", [200, 404, 400, 500])
    def test_malformed_body_checked_first(self, status):
        outcome = classify_response(status, "this is a non-json response!")
        assert isinstance(outcome.error, MalformedResponseError)
        assert outcome.kind == ErrorKind.MALFORMED_RESPONSE
        assert outcome.error.payload == "this is a non-json response!"

    @pytest.mark.parametrize("status", [100, 301, 304])
    def test_unexpected_status(self, status):
        outcome = classify_response(status, "{}")
        assert isinstance(outcome.error, UnexpectedStatusError)
        assert outcome.kind == ErrorKind.UNEXPECTED_STATUS
        assert outcome.error.status_code == status


class TestOutcome:

    def test_unwrap_success(self):
        assert Outcome.success({"id": 1}).unwrap() == {"id": 1}

    def test_unwrap_failure_raises_carried_error(self):
        outcome = classify_response(404, "{}")
        with pytest.raises(NotFoundError):
            outcome.unwrap()


class TestDecodeBody:

    def test_bytes_are_utf8(self):
        assert decode_body('{"name":"café"}'.encode("utf-8")) == {"name": "café"}

    def test_none_is_none(self):
        assert decode_body(None) is None

    def test_blank_is_value_error(self):
        with pytest.raises(ValueError):
            decode_body("  ")
        with pytest.raises(ValueError):
            decode_body(b"")

    def test_invalid_utf8_is_value_error(self):
        with pytest.raises(ValueError):
            decode_body(b"\xff\xfe")
