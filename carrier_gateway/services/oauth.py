"""
OAuth 2.0 client-credentials token cache

One TokenCache per carrier credential set. It hands out the cached access
token while it is outside the refresh buffer and otherwise performs a single
refresh that every concurrent caller waits on.

Coalescing:
- State (cached token, in-flight refresh task) only changes under _lock.
- The first caller that finds no valid token becomes the leader: it creates
  the refresh task and records it. Later callers attach to the same task.
- The task publishes its result (token or AuthenticationError) to all
  waiters and clears the in-flight marker when it finishes, so a failure
  is never cached and the next call starts a new attempt.
- Waiters are shielded: cancelling one caller never cancels the refresh
  the others are waiting on.
"""
import asyncio
import base64
import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional

from pydantic import ValidationError as PydanticValidationError

from carrier_gateway.core.exceptions import AuthenticationError
from carrier_gateway.core.http_client import (
    DEFAULT_TIMEOUT_MS,
    HttpTransport,
    TransportFailure,
    TransportResponse,
)
from carrier_gateway.schemas.ups import UPSOAuthResponse
from carrier_gateway.utils.log_sanitizer import mask_token, sanitize_for_logging

logger = logging.getLogger(__name__)

DEFAULT_REFRESH_BUFFER_SECONDS = 300


def _now_ms() -> int:
    return int(time.time() * 1000)


def _retrieve_exception(task: "asyncio.Task[OAuthToken]") -> None:
    # Waiters may all have been cancelled; the failure is still consumed here
    if not task.cancelled():
        task.exception()


@dataclass(frozen=True)
class OAuthToken:
    """Immutable access token. expires_at_epoch_ms is wall-clock milliseconds."""
    access_token: str = field(repr=False)
    token_type: str
    expires_at_epoch_ms: int
    scope: Optional[str] = None

    @property
    def authorization_header(self) -> str:
        return f"Bearer {self.access_token}"

    def expires_in_seconds(self, now_ms: int) -> float:
        return (self.expires_at_epoch_ms - now_ms) / 1000.0

    def __repr__(self) -> str:
        return (
            f"OAuthToken(access_token={mask_token(self.access_token)!r}, "
            f"token_type={self.token_type!r}, expires_at_epoch_ms={self.expires_at_epoch_ms})"
        )


@dataclass(frozen=True)
class OAuthConfig:
    """Credentials and endpoint for one client-credentials grant."""
    token_url: str
    client_id: str
    client_secret: str = field(repr=False)
    carrier: Optional[str] = None
    refresh_buffer_seconds: int = DEFAULT_REFRESH_BUFFER_SECONDS
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    additional_headers: Dict[str, str] = field(default_factory=dict)

    @property
    def basic_auth_header(self) -> str:
        raw = f"{self.client_id}:{self.client_secret}"
        return f"Basic {base64.b64encode(raw.encode()).decode()}"


class TokenCache:
    """
    In-memory OAuth token cache with single-flight refresh.

    Args:
        transport: HttpTransport used for the token request
        config: OAuthConfig for the credential set
        clock: returns current wall-clock time in epoch milliseconds
    """

    def __init__(
        self,
        transport: HttpTransport,
        config: OAuthConfig,
        clock: Callable[[], int] = _now_ms,
    ):
        self._transport = transport
        self._config = config
        self._clock = clock
        self._lock = asyncio.Lock()
        self._token: Optional[OAuthToken] = None
        self._refresh_task: Optional["asyncio.Task[OAuthToken]"] = None
        # Bumped by clear_cache() so refreshes started before a clear cannot
        # write into the cache afterwards.
        self._generation = 0
        self.refresh_count = 0

    @property
    def config(self) -> OAuthConfig:
        return self._config

    @property
    def is_refreshing(self) -> bool:
        return self._refresh_task is not None

    def is_token_valid(self, token: Optional[OAuthToken] = None) -> bool:
        """True iff the token expires strictly after now + refresh buffer."""
        token = token if token is not None else self._token
        if token is None:
            return False
        threshold = self._clock() + self._config.refresh_buffer_seconds * 1000
        return token.expires_at_epoch_ms > threshold

    async def get_token(self) -> OAuthToken:
        """
        Return a valid token, refreshing at most once for concurrent callers.

        Raises:
            AuthenticationError: the refresh failed (delivered to every waiter)
        """
        async with self._lock:
            if self.is_token_valid(self._token):
                return self._token
            task = self._refresh_task
            if task is None:
                task = self._start_refresh()
            else:
                logger.debug(f"{self._carrier_label}: joining in-flight token refresh")

        return await asyncio.shield(task)

    async def force_refresh(self) -> OAuthToken:
        """
        Drop the cached token and return a freshly issued one.

        A refresh already in flight was issued after the token went stale, so
        it is joined rather than duplicated.
        """
        async with self._lock:
            self._token = None
            task = self._refresh_task
            if task is None:
                task = self._start_refresh()

        return await asyncio.shield(task)

    def invalidate(self, token: OAuthToken) -> bool:
        """
        Drop ``token`` if it is still the cached one (the carrier rejected it).

        A token that has already been replaced by a newer refresh is left alone.
        """
        if self._token is not None and self._token == token:
            self._token = None
            logger.info(f"{self._carrier_label}: cached token invalidated after rejection")
            return True
        return False

    def clear_cache(self) -> None:
        """
        Drop the cached token and forget any in-flight refresh.

        A request already on the wire is not cancelled; its waiters still get
        its result, but it will not populate the cache.
        """
        self._token = None
        self._refresh_task = None
        self._generation += 1
        logger.debug(f"{self._carrier_label}: token cache cleared")

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @property
    def _carrier_label(self) -> str:
        return self._config.carrier or "oauth"

    def _start_refresh(self) -> "asyncio.Task[OAuthToken]":
        """Create and record the refresh task. Caller holds _lock."""
        task = asyncio.ensure_future(self._run_refresh(self._generation))
        task.add_done_callback(_retrieve_exception)
        self._refresh_task = task
        self.refresh_count += 1
        return task

    async def _run_refresh(self, generation: int) -> OAuthToken:
        # Nothing below awaits between reading and writing cache state, so each
        # branch runs atomically with respect to get_token()'s critical section.
        try:
            token = await self._request_token()
        except BaseException:
            self._finish_refresh(generation)
            raise

        if generation == self._generation:
            self._token = token
        self._finish_refresh(generation)
        return token

    def _finish_refresh(self, generation: int) -> None:
        """Clear the in-flight marker if it still points at this refresh."""
        if generation == self._generation and self._refresh_task is asyncio.current_task():
            self._refresh_task = None

    async def _request_token(self) -> OAuthToken:
        """Perform the client-credentials grant and parse the response."""
        cfg = self._config
        headers = {
            "Content-Type": "application/x-www-form-urlencoded",
            "Authorization": cfg.basic_auth_header,
            **cfg.additional_headers,
        }

        logger.info(f"{self._carrier_label}: requesting OAuth token")
        try:
            response = await self._transport.send(
                "POST",
                cfg.token_url,
                headers=headers,
                body="grant_type=client_credentials",
                timeout_ms=cfg.timeout_ms,
            )
        except TransportFailure as e:
            logger.error(f"{self._carrier_label}: OAuth request failed: {e.message}")
            raise AuthenticationError(
                f"OAuth request failed: {e.message}",
                carrier=cfg.carrier,
                context={"failure_kind": e.kind.value, "is_timeout": e.is_timeout},
                cause=e,
            ) from e
        except Exception as e:
            logger.error(f"{self._carrier_label}: OAuth request failed: {e}")
            raise AuthenticationError(
                f"OAuth request failed: {e}",
                carrier=cfg.carrier,
                cause=e,
            ) from e

        if not response.ok:
            raise self._status_error(response)

        return self._parse_token(response)

    def _status_error(self, response: TransportResponse) -> AuthenticationError:
        data = response.body
        logger.error(
            f"{self._carrier_label}: OAuth failed: {response.status} - {sanitize_for_logging(data)}"
        )

        if response.status == 401:
            return AuthenticationError(
                "Invalid client credentials",
                carrier=self._config.carrier,
                context={"status": 401, "response_data": data},
            )

        if response.status == 400:
            description = None
            if isinstance(data, dict):
                description = data.get("error_description") or data.get("error")
            return AuthenticationError(
                f"OAuth request failed: {description or 'Bad request'}",
                carrier=self._config.carrier,
                context={"status": 400, "response_data": data},
            )

        return AuthenticationError(
            f"OAuth request failed with status {response.status}",
            carrier=self._config.carrier,
            context={"status": response.status, "response_data": data},
        )

    def _parse_token(self, response: TransportResponse) -> OAuthToken:
        try:
            parsed = UPSOAuthResponse.model_validate(response.body)
        except PydanticValidationError as e:
            logger.error(f"{self._carrier_label}: malformed OAuth token response")
            raise AuthenticationError(
                "OAuth token response was malformed",
                carrier=self._config.carrier,
                context={"status": response.status, "errors": [err["msg"] for err in e.errors()]},
                cause=e,
            ) from e

        token = OAuthToken(
            access_token=parsed.access_token,
            token_type=parsed.token_type,
            expires_at_epoch_ms=self._clock() + parsed.expires_in * 1000,
            scope=parsed.scope,
        )
        logger.info(
            f"{self._carrier_label}: OAuth token obtained, "
            f"expires in {token.expires_in_seconds(self._clock()):.0f}s"
        )
        return token
