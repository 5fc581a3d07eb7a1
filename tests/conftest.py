import logging
from dataclasses import dataclass
from typing import Optional

import pytest

from linkup.errors import TransportError
from linkup.transport.http_client import BytesBody, TransportResponse
from linkup.transport.retry_policy import RetryPolicy


@dataclass
class SentRequest:
    method: str
    url: str
    headers: dict
    body: Optional[bytes]


class FakeTransport:
    """Scripted transport; the last step repeats once the script runs out.

    Each step is a callable taking the deadline and returning a
    TransportResponse (or raising).
    """

    def __init__(self, *steps):
        self.steps = list(steps)
        self.calls: list[SentRequest] = []
        self.responses: list[TransportResponse] = []
        self.closed = False

    def send(self, method, url, headers, body, deadline):
        self.calls.append(SentRequest(method, url, dict(headers), body))
        step = self.steps.pop(0) if len(self.steps) > 1 else self.steps[0]
        response = step(deadline)
        self.responses.append(response)
        return response

    def close(self):
        self.closed = True


def respond(status, body=b"", headers=None):
    def make(deadline):
        return TransportResponse(status, headers or {}, BytesBody(body))
    return make


def fail(message="connection refused"):
    def make(deadline):
        raise TransportError(message)
    return make


def slow(latency, then):
    """Simulate latency that honors the deadline like a real transport."""
    def make(deadline):
        if deadline.wait(latency):
            raise TransportError("request timed out")
        return then(deadline)
    return make


@pytest.fixture
def fast_policy():
    """Two retries, millisecond backoff, jitter pinned to 1.0."""
    return RetryPolicy(max_retries=2, min_delay=0.001, max_delay=0.005, rand=lambda: 0.5)


@pytest.fixture(autouse=True)
def restore_root_logger():
    """The CLI reconfigures the root logger; undo it after each test."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
