"""HTTP transport for the Linkup API.

The executor talks to a ``Transport``; ``RequestsTransport`` is the
production implementation on top of ``requests.Session``. Connection
pooling, TLS and proxies are left to requests.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterator, Mapping, Optional, Protocol

import requests
from requests.structures import CaseInsensitiveDict

from ..errors import TransportError
from .deadline import Deadline

logger = logging.getLogger(__name__)

READ_CHUNK_SIZE = 64 * 1024


class ResponseBody(Protocol):
    """Readable, closable response body."""

    def read(self, limit: Optional[int] = None) -> bytes:
        ...

    def close(self) -> None:
        ...


class BytesBody:
    """In-memory body, used for canned responses."""

    def __init__(self, data: bytes = b""):
        self._data = data
        self._pos = 0
        self.closed = False

    def read(self, limit: Optional[int] = None) -> bytes:
        end = len(self._data) if limit is None else self._pos + limit
        chunk = self._data[self._pos:end]
        self._pos += len(chunk)
        return chunk

    def close(self) -> None:
        self.closed = True


class RequestsBody:
    """Streaming body backed by a ``requests.Response``."""

    def __init__(self, response: requests.Response):
        self._response = response

    def _chunks(self) -> Iterator[bytes]:
        try:
            yield from self._response.iter_content(chunk_size=READ_CHUNK_SIZE)
        except requests.RequestException as e:
            raise TransportError(f"linkup: reading response body: {e}") from e

    def read(self, limit: Optional[int] = None) -> bytes:
        buf = bytearray()
        for chunk in self._chunks():
            buf.extend(chunk)
            if limit is not None and len(buf) >= limit:
                return bytes(buf[:limit])
        return bytes(buf)

    def close(self) -> None:
        self._response.close()


@dataclass
class TransportResponse:
    """Status, headers and body of one physical HTTP attempt."""
    status_code: int
    headers: Mapping[str, str] = field(default_factory=CaseInsensitiveDict)
    body: ResponseBody = field(default_factory=BytesBody)

    def __post_init__(self):
        if not isinstance(self.headers, CaseInsensitiveDict):
            self.headers = CaseInsensitiveDict(self.headers)

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300


class Transport(Protocol):
    """Capability consumed by the request executor."""

    def send(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str],
        body: Optional[bytes],
        deadline: Deadline,
    ) -> TransportResponse:
        """Send one request.

        Raises:
            TransportError: If no response was received.
        """
        ...

    def close(self) -> None:
        ...


class RequestsTransport:
    """Transport backed by a pooled ``requests.Session``.

    The deadline only bounds the per-request ``timeout``, which requests
    applies to each connect and socket read rather than to the whole call.
    A server trickling bytes can keep an in-flight request running past the
    deadline, and a set cancel event is only seen before the next attempt
    or during a retry sleep.
    """

    def __init__(
        self,
        request_timeout: float = 30.0,
        session: Optional[requests.Session] = None,
    ):
        """Initialize transport.

        Args:
            request_timeout: Default timeout in seconds per request.
            session: Custom session (proxies, adapters). A new one if omitted.
        """
        self.request_timeout = request_timeout
        self._session = session or requests.Session()

    def _timeout_for(self, deadline: Deadline) -> float:
        remaining = deadline.remaining
        if remaining is None:
            return self.request_timeout
        return min(self.request_timeout, remaining)

    def send(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str],
        body: Optional[bytes],
        deadline: Deadline,
    ) -> TransportResponse:
        deadline.check()
        timeout = self._timeout_for(deadline)
        logger.debug(f"{method} {url} (timeout={timeout:.2f}s)")

        try:
            response = self._session.request(
                method,
                url,
                headers=dict(headers),
                data=body,
                timeout=timeout,
                stream=True,
            )
        except requests.RequestException as e:
            raise TransportError(f"linkup: {method} {url}: {e}") from e

        return TransportResponse(
            status_code=response.status_code,
            headers=response.headers,
            body=RequestsBody(response),
        )

    def close(self) -> None:
        """Close the HTTP session."""
        self._session.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()
