"""Exception types raised by the Linkup client.

Only the final outcome of a logical call is raised to the caller;
individual failed attempts are handled inside the executor.
"""

from typing import Any, Optional


class LinkupError(Exception):
    """Base class for all client errors."""


class ConfigurationError(LinkupError, ValueError):
    """Missing credential or malformed input, detected before any request."""


class TransportError(LinkupError):
    """Network-level failure (connect, timeout, DNS) before a response arrived."""


class CancellationError(LinkupError):
    """The caller's deadline expired or the call was cancelled."""


class DecodeError(LinkupError):
    """A success payload could not be decoded into the requested shape."""


class StatusError(LinkupError):
    """Terminal failure derived from a non-2xx HTTP status."""

    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        super().__init__(message)


class UnauthorizedError(StatusError):
    """401 response."""

    def __init__(self):
        super().__init__(401, "linkup: unauthorized (check API key)")


class ForbiddenError(StatusError):
    """403 response."""

    def __init__(self):
        super().__init__(403, "linkup: forbidden")


class HTTPStatusError(StatusError):
    """Non-2xx response without a usable error body."""

    def __init__(self, status_code: int):
        super().__init__(status_code, f"linkup: http {status_code}")


class APIError(StatusError):
    """Structured error decoded from a non-2xx response body."""

    def __init__(self, status_code: int, message: str, details: Optional[Any] = None):
        self.message = message
        self.details = details
        super().__init__(
            status_code, f"linkup api error: {message} (status={status_code})"
        )
