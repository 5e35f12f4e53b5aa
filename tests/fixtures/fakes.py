"""
In-process stand-ins for the HTTP transport and the wall clock.
"""
import asyncio
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from carrier_gateway.core.http_client import TransportResponse


@dataclass
class SentRequest:
    method: str
    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    body: Any = None
    timeout_ms: Optional[int] = None


class FakeClock:
    """Epoch-millisecond clock the test moves by hand."""

    def __init__(self, now_ms: int = 1_700_000_000_000):
        self.now_ms = now_ms

    def __call__(self) -> int:
        return self.now_ms

    def advance(self, seconds: float):
        self.now_ms += int(seconds * 1000)


class FakeTransport:
    """
    Replays queued outcomes in order.

    A queued exception is raised, anything else is returned. Setting ``gate``
    holds every send() until the event is set.
    """

    def __init__(self, *outcomes):
        self.outcomes: List[Any] = list(outcomes)
        self.calls: List[SentRequest] = []
        self.gate: Optional[asyncio.Event] = None
        self.closed = False

    def queue(self, *outcomes):
        self.outcomes.extend(outcomes)

    async def send(self, method, url, headers=None, body=None, timeout_ms=None):
        self.calls.append(SentRequest(method, url, dict(headers or {}), body, timeout_ms))
        if self.gate is not None:
            await self.gate.wait()
        if not self.outcomes:
            raise AssertionError(f"Unexpected request: {method} {url}")
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    async def close(self):
        self.closed = True


def json_response(status: int, body: Any = None, headers: Optional[Dict[str, str]] = None) -> TransportResponse:
    return TransportResponse(status=status, headers=headers or {}, body=body)


async def settle(rounds: int = 10):
    """Let scheduled tasks run up to their next real suspension point."""
    for _ in range(rounds):
        await asyncio.sleep(0)
