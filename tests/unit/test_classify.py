"""
Tests for response classification.

A failed response is a backend error only when its body decodes as the
declared error shape; everything else keeps the transport's own error.
"""

import httpx
import pytest
from pydantic import ValidationError

from netlayer.core.classify import classify, unwrap
from netlayer.exceptions import BackendError, ResponseInvariantError, TransportError
from netlayer.models import (
    BackendFailure,
    ErrorMessage,
    RawResponse,
    Success,
    TransportFailure,
)
from tests.helpers.shapes import LoginError, Token


def status_error(status_code: int) -> httpx.HTTPStatusError:
    request = httpx.Request("POST", "https://api.example.com/login")
    response = httpx.Response(status_code, request=request)
    return httpx.HTTPStatusError("failed", request=request, response=response)


class TestClassifyFailures:
    """Test classification of failed responses."""

    def test_decodable_body_is_backend_failure(self):
        """Test an error body matching the error shape becomes a backend failure."""
        raw = RawResponse(
            status_code=401,
            content=b'{"code": "bad_credentials"}',
            error=status_error(401),
        )
        outcome = classify(raw, LoginError)

        assert outcome == BackendFailure(LoginError(code="bad_credentials"), 401)

    def test_undecodable_body_keeps_original_error(self):
        """Test a body that doesn't match keeps the transport error unchanged."""
        error = status_error(500)
        raw = RawResponse(status_code=500, content=b"<html>oops</html>", error=error)
        outcome = classify(raw, LoginError)

        assert isinstance(outcome, TransportFailure)
        assert outcome.error is error
        assert outcome.status_code == 500

    def test_wrong_shape_keeps_original_error(self):
        """Test valid JSON of the wrong shape is not a backend error."""
        error = status_error(404)
        raw = RawResponse(status_code=404, content=b'{"message": "nope"}', error=error)
        assert classify(raw, LoginError).error is error

    def test_absent_body_keeps_original_error(self):
        """Test a network failure without a body is a transport failure."""
        error = httpx.ConnectError("unreachable")
        outcome = classify(RawResponse(error=error), LoginError)

        assert outcome == TransportFailure(error, None)

    def test_empty_body_keeps_original_error(self):
        """Test an empty body is treated as no body."""
        error = status_error(503)
        outcome = classify(RawResponse(503, b"", error=error), ErrorMessage)
        assert outcome.error is error

    def test_no_error_shape(self):
        """Test requests without an error shape never produce backend failures."""
        error = status_error(400)
        raw = RawResponse(400, b'{"code": "x"}', error=error)
        assert classify(raw, None).error is error

    def test_decode_error_on_success_status(self):
        """Test a malformed success body with no error payload stays a transport failure."""
        try:
            Token.model_validate_json(b"not json")
        except ValidationError as e:
            error = e
        raw = RawResponse(200, b"not json", error=error)

        outcome = classify(raw, LoginError)
        assert isinstance(outcome, TransportFailure)
        assert outcome.error is error


class TestClassifySuccess:
    """Test classification of successful responses."""

    def test_success_value_passed_through(self):
        """Test the transport's decoded value is returned untouched."""
        token = Token(token="abc")
        raw = RawResponse(200, b'{"token": "abc"}', value=token, decoded=True)
        outcome = classify(raw, LoginError)

        assert isinstance(outcome, Success)
        assert outcome.value is token

    def test_success_not_redecoded(self):
        """Test the body is not decoded again on success."""
        raw = RawResponse(200, b"garbage", value="already decoded", decoded=True)
        assert classify(raw, LoginError) == Success("already decoded")

    def test_decoded_none_is_success(self):
        """Test a request without a response body succeeds with None."""
        raw = RawResponse(204, b"", value=None, decoded=True)
        assert classify(raw, LoginError) == Success(None)


class TestClassifyInvariant:
    """Test raw responses that break the value-or-error invariant."""

    def test_neither_value_nor_error(self):
        """Test an empty raw response becomes an internal transport failure."""
        outcome = classify(RawResponse(200, b"{}"), LoginError)

        assert isinstance(outcome, TransportFailure)
        assert isinstance(outcome.error, ResponseInvariantError)
        assert "neither" in outcome.error.message

    def test_both_value_and_error(self):
        """Test a raw response with both a value and an error is rejected."""
        raw = RawResponse(
            200, b"{}", value=Token(token="x"), error=status_error(500), decoded=True
        )
        outcome = classify(raw, LoginError)

        assert isinstance(outcome.error, ResponseInvariantError)
        assert "both" in outcome.error.message


class TestUnwrap:
    """Test converting outcomes into values or exceptions."""

    def test_success(self):
        """Test success returns the value."""
        assert unwrap(Success(42)) == 42

    def test_backend_failure_raises_backend_error(self):
        """Test backend failures raise BackendError with the payload."""
        payload = LoginError(code="bad_credentials")
        with pytest.raises(BackendError) as exc_info:
            unwrap(BackendFailure(payload, 401))

        assert exc_info.value.payload is payload
        assert exc_info.value.status_code == 401

    def test_transport_failure_raises_transport_error(self):
        """Test transport failures raise TransportError chained to the original."""
        error = httpx.ReadTimeout("slow")
        with pytest.raises(TransportError) as exc_info:
            unwrap(TransportFailure(error))

        assert exc_info.value.error is error
        assert exc_info.value.__cause__ is error

    def test_unknown_outcome(self):
        """Test anything else is rejected."""
        with pytest.raises(TypeError):
            unwrap("not an outcome")
