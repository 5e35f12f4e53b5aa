"""
Carrier error classification

Turns a failed transport outcome into exactly one CarrierError. Decision
order, first match wins:

1. TransportFailure flagged as timeout      -> NetworkError(is_timeout=True)
2. TransportFailure of any other kind       -> NetworkError(is_timeout=False)
3. HTTP 401                                 -> AuthenticationError
4. HTTP 429                                 -> RateLimitError(retry_after_seconds)
5. Any other non-2xx status                 -> CarrierApiError(status_code, response_body)
6. Anything else (unexpected exception)     -> NetworkError with a generic message
"""
import logging
import re
from typing import Any, Optional, Union

from carrier_gateway.core.exceptions import (
    AuthenticationError,
    CarrierApiError,
    CarrierError,
    NetworkError,
    RateLimitError,
)
from carrier_gateway.core.http_client import TransportFailure, TransportResponse
from carrier_gateway.utils.log_sanitizer import sanitize_for_logging

logger = logging.getLogger(__name__)

# Searched in order for a human-readable message in an error body
MESSAGE_FIELDS = ("message", "error", "error_description", "errorMessage")

_LEADING_INT = re.compile(r"\s*(\d+)")


def extract_error_message(body: Any) -> Optional[str]:
    """
    Pull a message out of a carrier error body.

    Checks the common top-level fields first, then the first element of an
    ``errors`` array. UPS nests its array under ``response``, which is
    searched the same way.
    """
    if not isinstance(body, dict):
        return None

    for field_name in MESSAGE_FIELDS:
        value = body.get(field_name)
        if isinstance(value, str):
            return value

    errors = body.get("errors")
    if isinstance(errors, list) and errors:
        first = errors[0]
        if isinstance(first, dict) and isinstance(first.get("message"), str):
            return first["message"]

    nested = body.get("response")
    if isinstance(nested, dict):
        return extract_error_message(nested)

    return None


def parse_retry_after(value: Optional[str]) -> Optional[int]:
    """
    Parse a numeric Retry-After header to whole seconds.

    Leading digits are taken ("30.5" -> 30). HTTP-date and other non-numeric
    values are ignored.
    """
    if value is None:
        return None
    match = _LEADING_INT.match(value)
    if match is None:
        return None
    return int(match.group(1))


def classify_failure(
    outcome: Union[TransportFailure, TransportResponse, BaseException, Any],
    carrier: Optional[str] = None,
) -> CarrierError:
    """
    Classify a failed call.

    Args:
        outcome: TransportFailure, a non-2xx TransportResponse, or any other
            raised value
        carrier: Carrier identity attached to the resulting error

    Returns:
        A CarrierError; an existing CarrierError is returned unchanged
    """
    if isinstance(outcome, CarrierError):
        return outcome

    if isinstance(outcome, TransportFailure):
        if outcome.is_timeout:
            error = NetworkError(
                "Request timed out",
                is_timeout=True,
                carrier=carrier,
                context={"failure_kind": outcome.kind.value},
                cause=outcome,
            )
        else:
            error = NetworkError(
                f"Network error: {outcome.message}",
                is_timeout=False,
                carrier=carrier,
                context={"failure_kind": outcome.kind.value},
                cause=outcome,
            )
        logger.warning(f"{carrier or 'carrier'} network failure: {error.message}")
        return error

    if isinstance(outcome, TransportResponse):
        return _classify_response(outcome, carrier)

    if isinstance(outcome, BaseException):
        error = NetworkError(
            f"Request failed: {outcome}",
            carrier=carrier,
            cause=outcome,
        )
    else:
        error = NetworkError(
            "Request failed with unknown error",
            carrier=carrier,
            context={"raw": repr(outcome)},
        )
    logger.error(f"{carrier or 'carrier'} unclassifiable failure: {error.message}")
    return error


def _classify_response(response: TransportResponse, carrier: Optional[str]) -> CarrierError:
    status = response.status
    body = response.body

    if status == 401:
        error = AuthenticationError(
            "Authentication failed",
            carrier=carrier,
            context={"status": status, "response_data": body},
        )
    elif status == 429:
        retry_after = parse_retry_after(response.header("Retry-After"))
        error = RateLimitError(
            "Rate limit exceeded",
            retry_after_seconds=retry_after,
            carrier=carrier,
            context={"status": status, "response_data": body},
        )
    else:
        message = extract_error_message(body) or f"API error with status {status}"
        error = CarrierApiError(
            message,
            status_code=status,
            response_body=body,
            carrier=carrier,
        )

    logger.error(
        f"{carrier or 'carrier'} API error: {error.code} status={status} "
        f"message={sanitize_for_logging(error.message)} body={sanitize_for_logging(body)}"
    )
    return error
