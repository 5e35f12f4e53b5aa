"""
Tests for the error taxonomy and failure classification.
"""
import httpx
import pytest

from carrier_gateway.core.error_classifier import (
    classify_failure,
    extract_error_message,
    parse_retry_after,
)
from carrier_gateway.core.exceptions import (
    AuthenticationError,
    CarrierApiError,
    CarrierError,
    ConfigurationError,
    ErrorKind,
    NetworkError,
    NotImplementedCarrierError,
    RateLimitError,
    ValidationError,
    is_carrier_error,
    is_retryable,
)
from carrier_gateway.core.http_client import FailureKind, TransportFailure, TransportResponse
from carrier_gateway.utils.log_sanitizer import mask_token, sanitize_for_logging
from tests.fixtures.ups_responses import ERROR_BODY


class TestClassifyFailure:
    """Decision order of classify_failure()."""

    def test_timeout(self):
        failure = TransportFailure(FailureKind.TIMEOUT, "Request timed out after 30.0s")

        error = classify_failure(failure, "UPS")

        assert isinstance(error, NetworkError)
        assert error.is_timeout is True
        assert error.message == "Request timed out"
        assert error.carrier == "UPS"
        assert error.cause is failure

    def test_no_response(self):
        failure = TransportFailure(FailureKind.NO_RESPONSE, "connection refused")

        error = classify_failure(failure, "UPS")

        assert isinstance(error, NetworkError)
        assert error.is_timeout is False
        assert error.message == "Network error: connection refused"

    def test_401(self):
        error = classify_failure(TransportResponse(401, {}, {"message": "Invalid token"}), "UPS")

        assert isinstance(error, AuthenticationError)
        assert error.message == "Authentication failed"
        assert error.code == "AUTH_ERROR"

    def test_429_with_retry_after(self):
        response = TransportResponse(429, {"retry-after": "30"}, {"message": "slow down"})

        error = classify_failure(response, "UPS")

        assert isinstance(error, RateLimitError)
        assert error.message == "Rate limit exceeded"
        assert error.retry_after_seconds == 30
        assert error.code == "RATE_LIMIT_ERROR"

    def test_429_without_retry_after(self):
        error = classify_failure(TransportResponse(429, {}, None))

        assert isinstance(error, RateLimitError)
        assert error.retry_after_seconds is None

    def test_500_extracts_nested_message(self):
        error = classify_failure(TransportResponse(500, {}, ERROR_BODY), "UPS")

        assert isinstance(error, CarrierApiError)
        assert error.status_code == 500
        assert error.message == "The requested service is unavailable between the selected locations."
        assert error.response_body == ERROR_BODY

    def test_status_message_fallback(self):
        error = classify_failure(TransportResponse(502, {}, "<html>Bad Gateway</html>"))

        assert isinstance(error, CarrierApiError)
        assert error.message == "API error with status 502"

    def test_unexpected_exception(self):
        error = classify_failure(RuntimeError("boom"), "UPS")

        assert isinstance(error, NetworkError)
        assert error.message == "Request failed: boom"
        assert error.is_timeout is False

    def test_non_exception_value(self):
        error = classify_failure({"weird": True})

        assert isinstance(error, NetworkError)
        assert error.message == "Request failed with unknown error"

    def test_existing_carrier_error_passes_through(self):
        original = ValidationError("bad input")
        assert classify_failure(original) is original


class TestExtractErrorMessage:

    @pytest.mark.parametrize("body,expected", [
        ({"message": "top"}, "top"),
        ({"error": "invalid_grant"}, "invalid_grant"),
        ({"error_description": "expired"}, "expired"),
        ({"errorMessage": "legacy"}, "legacy"),
        ({"errors": [{"code": "1", "message": "first"}, {"message": "second"}]}, "first"),
        (ERROR_BODY, "The requested service is unavailable between the selected locations."),
        ({"errors": []}, None),
        ("plain text", None),
        (None, None),
    ])
    def test_extract(self, body, expected):
        assert extract_error_message(body) == expected

    def test_retry_after_ignores_http_date(self):
        assert parse_retry_after("Wed, 21 Oct 2015 07:28:00 GMT") is None
        assert parse_retry_after(" 120 ") == 120
        assert parse_retry_after(None) is None

    def test_retry_after_takes_leading_integer(self):
        assert parse_retry_after("30.5") == 30
        assert parse_retry_after("abc") is None
        assert parse_retry_after("-5") is None

        error = classify_failure(TransportResponse(429, {"Retry-After": "30.5"}, None))
        assert error.retry_after_seconds == 30


class TestErrorTaxonomy:

    @pytest.mark.parametrize("error,code,kind", [
        (AuthenticationError("x"), "AUTH_ERROR", ErrorKind.AUTHENTICATION),
        (RateLimitError("x"), "RATE_LIMIT_ERROR", ErrorKind.RATE_LIMIT),
        (ValidationError("x"), "VALIDATION_ERROR", ErrorKind.VALIDATION),
        (NetworkError("x"), "NETWORK_ERROR", ErrorKind.NETWORK),
        (CarrierApiError("x"), "CARRIER_API_ERROR", ErrorKind.CARRIER_API),
        (NotImplementedCarrierError("track"), "NOT_IMPLEMENTED", ErrorKind.NOT_IMPLEMENTED),
        (ConfigurationError("x"), "CONFIGURATION_ERROR", ErrorKind.CONFIGURATION),
    ])
    def test_codes_and_kinds(self, error, code, kind):
        assert error.code == code
        assert error.kind == kind
        assert is_carrier_error(error)
        assert error.timestamp

    def test_not_implemented_message(self):
        error = NotImplementedCarrierError("createLabel", carrier="UPS")
        assert error.message == "Operation 'createLabel' is not implemented"
        assert error.operation == "createLabel"

    def test_to_dict_includes_kind_specific_fields(self):
        cause = ValueError("root")
        error = CarrierApiError(
            "boom",
            status_code=503,
            response_body={"message": "down"},
            carrier="UPS",
            context={"attempt": 1},
            cause=cause,
        )

        data = error.to_dict()

        assert data["error_type"] == "CarrierApiError"
        assert data["kind"] == "carrier_api"
        assert data["code"] == "CARRIER_API_ERROR"
        assert data["carrier"] == "UPS"
        assert data["status_code"] == 503
        assert data["response_body"] == {"message": "down"}
        assert data["context"] == {"attempt": 1}
        assert data["cause"] == "root"

    def test_custom_code_overrides_default(self):
        assert CarrierError("x", code="CUSTOM").code == "CUSTOM"

    def test_plain_exceptions_are_not_carrier_errors(self):
        assert not is_carrier_error(ValueError("x"))
        assert not is_carrier_error(None)


class TestIsRetryable:

    @pytest.mark.parametrize("error,expected", [
        (NetworkError("x", is_timeout=True), True),
        (NetworkError("x"), True),
        (RateLimitError("x", retry_after_seconds=5), True),
        (CarrierApiError("x", status_code=500), True),
        (CarrierApiError("x", status_code=503), True),
        (CarrierApiError("x", status_code=400), False),
        (CarrierApiError("x"), False),
        (AuthenticationError("x"), False),
        (ValidationError("x"), False),
        (NotImplementedCarrierError("track"), False),
        (ConfigurationError("x"), False),
        (httpx.ConnectError("x"), False),
    ])
    def test_retryable(self, error, expected):
        assert is_retryable(error) is expected


class TestLogSanitizer:

    def test_redacts_credentials(self):
        text = sanitize_for_logging('Authorization: Bearer abc.def-123 {"access_token": "xyz"}')
        assert "abc.def-123" not in text
        assert "xyz" not in text
        assert "[REDACTED]" in text

    def test_redacts_contact_details(self):
        text = sanitize_for_logging({"email": "jane@example.com", "phone": "555-123-4567", "zip": "97201"})
        assert "jane@example.com" not in text
        assert "555-123-4567" not in text
        assert "97201" not in text

    def test_secret_crossing_length_limit_is_redacted(self):
        text = sanitize_for_logging({"pad": "x" * 445, "access_token": "SUPERSECRETTOKENVALUE0123456789"})

        assert "SUPERSECRET" not in text
        assert len(text) <= 500

    def test_bearer_token_crossing_length_limit_is_redacted(self):
        text = sanitize_for_logging("x " * 245 + "Bearer SUPERSECRETTOKENVALUE")

        assert "SUPERSECRET" not in text

    def test_truncates(self):
        assert len(sanitize_for_logging("a" * 1000, max_length=50)) == 50

    def test_mask_token(self):
        assert mask_token("abcdefgh1234") == "****1234"
        assert mask_token("abc") == "****"
        assert mask_token("") == ""
