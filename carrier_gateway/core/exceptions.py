"""
Carrier Gateway Exception Taxonomy

Structured exception classes for every failure a carrier call can produce.
All exceptions carry code, message, carrier, context, timestamp and the
causal chain so a single log line can describe the failure without
re-deriving anything downstream.

Exception Taxonomy (flat):
    CarrierError
    ├── AuthenticationError
    ├── RateLimitError
    ├── ValidationError
    ├── NetworkError
    ├── CarrierApiError
    ├── NotImplementedCarrierError
    └── ConfigurationError
"""
import enum
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional


class ErrorKind(str, enum.Enum):
    """Discriminator shared by every CarrierError, for match/case dispatch."""
    AUTHENTICATION = "authentication"
    RATE_LIMIT = "rate_limit"
    VALIDATION = "validation"
    NETWORK = "network"
    CARRIER_API = "carrier_api"
    NOT_IMPLEMENTED = "not_implemented"
    CONFIGURATION = "configuration"


class CarrierError(Exception):
    """
    Base exception for all carrier integration errors.

    Attributes:
        message: Human-readable error description
        code: Machine-readable error code for programmatic handling
        kind: ErrorKind discriminator
        carrier: Carrier that produced the error, if any
        context: Additional context for debugging/audit
        timestamp: ISO-8601 UTC time the error was created
    """

    default_code: str = "CARRIER_ERROR"
    kind: Optional[ErrorKind] = None

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        carrier: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ):
        self.message = message
        self.code = code or self.default_code
        self.carrier = carrier
        self.context = context or {}
        self.timestamp = datetime.now(timezone.utc).isoformat()
        super().__init__(self.message)
        if cause is not None:
            self.__cause__ = cause

    @property
    def cause(self) -> Optional[BaseException]:
        return self.__cause__

    def extra_fields(self) -> Dict[str, Any]:
        """Kind-specific payload merged into to_dict()."""
        return {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging/serialization."""
        data = {
            "error_type": self.__class__.__name__,
            "kind": self.kind.value if self.kind else None,
            "code": self.code,
            "message": self.message,
            "carrier": self.carrier,
            "context": self.context,
            "timestamp": self.timestamp,
            "cause": str(self.cause) if self.cause is not None else None,
        }
        data.update(self.extra_fields())
        return data

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


class AuthenticationError(CarrierError):
    """OAuth token acquisition failed or the carrier rejected our credentials."""
    default_code = "AUTH_ERROR"
    kind = ErrorKind.AUTHENTICATION


class RateLimitError(CarrierError):
    """Carrier rejected the call with 429."""
    default_code = "RATE_LIMIT_ERROR"
    kind = ErrorKind.RATE_LIMIT

    def __init__(
        self,
        message: str,
        retry_after_seconds: Optional[int] = None,
        **kwargs
    ):
        self.retry_after_seconds = retry_after_seconds
        super().__init__(message, **kwargs)

    def extra_fields(self) -> Dict[str, Any]:
        return {"retry_after_seconds": self.retry_after_seconds}


class ValidationError(CarrierError):
    """Inbound request failed structural validation."""
    default_code = "VALIDATION_ERROR"
    kind = ErrorKind.VALIDATION

    def __init__(
        self,
        message: str,
        field_errors: Optional[Dict[str, List[str]]] = None,
        **kwargs
    ):
        self.field_errors = field_errors or {}
        super().__init__(message, **kwargs)

    def extra_fields(self) -> Dict[str, Any]:
        return {"field_errors": self.field_errors}


class NetworkError(CarrierError):
    """No usable response: timeout, connection refused, DNS failure, etc."""
    default_code = "NETWORK_ERROR"
    kind = ErrorKind.NETWORK

    def __init__(
        self,
        message: str,
        is_timeout: bool = False,
        **kwargs
    ):
        self.is_timeout = is_timeout
        super().__init__(message, **kwargs)

    def extra_fields(self) -> Dict[str, Any]:
        return {"is_timeout": self.is_timeout}


class CarrierApiError(CarrierError):
    """Carrier answered, but with an error status or an embedded failure."""
    default_code = "CARRIER_API_ERROR"
    kind = ErrorKind.CARRIER_API

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response_body: Any = None,
        **kwargs
    ):
        self.status_code = status_code
        self.response_body = response_body
        super().__init__(message, **kwargs)

    def extra_fields(self) -> Dict[str, Any]:
        return {
            "status_code": self.status_code,
            "response_body": self.response_body,
        }


class NotImplementedCarrierError(CarrierError):
    """Requested capability (tracking, labels, ...) is not available for a carrier."""
    default_code = "NOT_IMPLEMENTED"
    kind = ErrorKind.NOT_IMPLEMENTED

    def __init__(self, operation: str, **kwargs):
        self.operation = operation
        super().__init__(f"Operation '{operation}' is not implemented", **kwargs)

    def extra_fields(self) -> Dict[str, Any]:
        return {"operation": self.operation}


class ConfigurationError(CarrierError):
    """Settings are missing or invalid. Raised at construction time only."""
    default_code = "CONFIGURATION_ERROR"
    kind = ErrorKind.CONFIGURATION

    def __init__(
        self,
        message: str,
        missing_keys: Optional[List[str]] = None,
        **kwargs
    ):
        self.missing_keys = missing_keys or []
        super().__init__(message, **kwargs)

    def extra_fields(self) -> Dict[str, Any]:
        return {"missing_keys": self.missing_keys}


def is_carrier_error(error: Any) -> bool:
    """Type guard for CarrierError instances."""
    return isinstance(error, CarrierError)


def is_retryable(error: Any) -> bool:
    """
    Whether the caller may retry the operation that produced ``error``.

    Network errors and rate limits are always retryable, carrier API errors
    only for 5xx statuses. Everything else is permanent.
    """
    if isinstance(error, (NetworkError, RateLimitError)):
        return True
    if isinstance(error, CarrierApiError) and error.status_code is not None:
        return 500 <= error.status_code < 600
    return False
