"""
HTTP Transport for Carrier API Calls

Thin async wrapper over httpx that turns every call into one of two outcomes:
- TransportResponse for ANY HTTP status (classification happens upstream)
- TransportFailure when no usable response arrived (timeout, connection
  error, protocol error)

No retries, rate limiting or circuit breaking live here; callers decide
what to do with a classified error.
"""
import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Union
from urllib.parse import urlparse

import httpx

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_MS = 30000

Body = Union[Dict[str, Any], list, str, bytes, None]


class FailureKind(str, Enum):
    TIMEOUT = "timeout"          # Request sent, no answer within the deadline
    NO_RESPONSE = "no_response"  # Connection refused/reset, DNS failure, ...
    OTHER = "other"              # Anything else raised by the HTTP stack


class TransportFailure(Exception):
    """No HTTP response could be obtained."""

    def __init__(self, kind: FailureKind, message: str, cause: Optional[BaseException] = None):
        self.kind = kind
        self.message = message
        super().__init__(message)
        if cause is not None:
            self.__cause__ = cause

    @property
    def is_timeout(self) -> bool:
        return self.kind == FailureKind.TIMEOUT


@dataclass(frozen=True)
class TransportResponse:
    """Raw HTTP outcome. ``body`` is decoded JSON when possible, else text."""
    status: int
    headers: Mapping[str, str] = field(default_factory=dict)
    body: Any = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def header(self, name: str) -> Optional[str]:
        """Case-insensitive header lookup."""
        lowered = name.lower()
        for key, value in self.headers.items():
            if key.lower() == lowered:
                return value
        return None


def decode_body(content: bytes) -> Any:
    """JSON-decode a response body, falling back to text."""
    if not content:
        return None
    try:
        return json.loads(content)
    except (ValueError, UnicodeDecodeError):
        return content.decode("utf-8", errors="replace")


class HttpTransport:
    """
    Async HTTP transport shared by token refresh and carrier calls.

    Usage:
        async with HttpTransport(timeout_ms=30000) as transport:
            response = await transport.send("POST", url, headers=..., body=...)
    """

    def __init__(
        self,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
        default_headers: Optional[Dict[str, str]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.timeout_ms = timeout_ms
        self.default_headers = {
            "Accept": "application/json",
            **(default_headers or {}),
        }
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self):
        self._get_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.timeout_ms / 1000.0,
                headers=self.default_headers,
                transport=self._transport,
            )
        return self._client

    async def close(self):
        """Close HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def send(
        self,
        method: str,
        url: str,
        headers: Optional[Dict[str, str]] = None,
        body: Body = None,
        timeout_ms: Optional[int] = None,
    ) -> TransportResponse:
        """
        Issue one HTTP request.

        Args:
            method: HTTP verb
            url: Absolute URL
            headers: Per-request headers (merged over defaults)
            body: dict/list is sent as JSON, str/bytes as raw content
            timeout_ms: Overrides the transport default for this call

        Returns:
            TransportResponse for any status code

        Raises:
            TransportFailure: no response was received
        """
        client = self._get_client()
        timeout = (timeout_ms if timeout_ms is not None else self.timeout_ms) / 1000.0
        host = urlparse(url).netloc

        kwargs: Dict[str, Any] = {"headers": headers or {}, "timeout": timeout}
        if isinstance(body, (dict, list)):
            kwargs["json"] = body
        elif body is not None:
            kwargs["content"] = body

        try:
            response = await client.request(method.upper(), url, **kwargs)
        except httpx.TimeoutException as e:
            logger.warning(f"[HTTP] {method.upper()} {host}: timed out after {timeout:.1f}s")
            raise TransportFailure(FailureKind.TIMEOUT, f"Request timed out after {timeout:.1f}s", cause=e) from e
        except httpx.TransportError as e:
            logger.warning(f"[HTTP] {method.upper()} {host}: no response ({type(e).__name__}: {e})")
            raise TransportFailure(FailureKind.NO_RESPONSE, f"Network error: {e}", cause=e) from e
        except httpx.HTTPError as e:
            logger.error(f"[HTTP] {method.upper()} {host}: request failed ({type(e).__name__}: {e})")
            raise TransportFailure(FailureKind.OTHER, f"Request failed: {e}", cause=e) from e

        logger.debug(f"[HTTP] {method.upper()} {url} -> {response.status_code}")

        return TransportResponse(
            status=response.status_code,
            headers=dict(response.headers),
            body=decode_body(response.content),
        )
