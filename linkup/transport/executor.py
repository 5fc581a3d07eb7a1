"""Resilient request executor.

Turns one logical API call into one or more HTTP attempts:
1. Send the request through the transport
2. Classify the outcome (success, retryable, terminal)
3. Sleep and retry, return the payload, or raise
"""

import json
import logging
import re
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Optional

from ..errors import (
    APIError,
    CancellationError,
    ConfigurationError,
    ForbiddenError,
    HTTPStatusError,
    LinkupError,
    TransportError,
    UnauthorizedError,
)
from .deadline import Deadline
from .http_client import Transport, TransportResponse
from .retry_policy import RetryPolicy, default_retry_policy

logger = logging.getLogger(__name__)

# Upper bound on error bodies read for decoding.
MAX_ERROR_BODY = 1 << 20

_RETRY_AFTER_RE = re.compile(r"\+?[0-9]+")


class OutcomeKind(str, Enum):
    """Classification of a single attempt."""
    SUCCESS = "success"
    RETRYABLE = "retryable"
    TERMINAL = "terminal"


@dataclass
class Outcome:
    """Classified result of one attempt."""
    kind: OutcomeKind
    payload: Optional[bytes] = None
    reason: str = ""
    delay: float = 0.0
    error: Optional[LinkupError] = None


def is_retryable_status(status_code: int) -> bool:
    return status_code == 429 or 500 <= status_code <= 599


def parse_retry_after(value: Optional[str]) -> Optional[int]:
    """Parse a Retry-After header given in whole seconds.

    Returns:
        Positive number of seconds, or None if absent, zero, unparsable
        or too large to wait on.
    """
    if not value or not _RETRY_AFTER_RE.fullmatch(value):
        return None
    seconds = int(value)
    if seconds <= 0 or seconds > threading.TIMEOUT_MAX:
        return None
    return seconds


def decode_api_error(status_code: int, data: bytes) -> LinkupError:
    """Build the terminal error for a non-2xx response body.

    Args:
        status_code: HTTP status of the response.
        data: Body prefix (already bounded by the caller).

    Returns:
        APIError when the body carries a non-empty message,
        HTTPStatusError otherwise.
    """
    try:
        parsed = json.loads(data)
    except (ValueError, UnicodeDecodeError):
        parsed = None

    if isinstance(parsed, dict):
        message = parsed.get("message")
        if isinstance(message, str) and message:
            return APIError(status_code, message, parsed.get("details"))

    return HTTPStatusError(status_code)


class RequestExecutor:
    """Executes HTTP calls with bearer auth, retries and error classification.

    Holds only immutable state after construction, so one executor can
    serve concurrent calls from several threads.
    """

    def __init__(
        self,
        transport: Transport,
        api_key: str,
        retry_policy: Optional[RetryPolicy] = None,
    ):
        """Initialize executor.

        Args:
            transport: Transport that performs the physical requests.
            api_key: Bearer credential sent with every request.
            retry_policy: Retry policy for transient failures.
        """
        self.transport = transport
        self.api_key = api_key
        self.retry_policy = retry_policy or default_retry_policy()

    def execute(
        self,
        method: str,
        url: str,
        headers: Optional[Mapping[str, str]] = None,
        body: Optional[bytes] = None,
        deadline: Optional[Deadline] = None,
    ) -> bytes:
        """Execute one logical call.

        Args:
            method: HTTP method (GET, POST, etc.).
            url: Absolute request URL.
            headers: Extra request headers.
            body: Request body bytes.
            deadline: Caller deadline / cancellation signal.

        Returns:
            The response body, byte for byte.

        Raises:
            ConfigurationError: If the API key is empty.
            TransportError: If the last attempt failed at the network level.
            CancellationError: If the deadline expired or the call was cancelled.
            StatusError: Terminal HTTP failure (see linkup.errors).
        """
        if not self.api_key:
            raise ConfigurationError("linkup: API key is empty")

        deadline = deadline or Deadline.never()
        request_headers = dict(headers or {})
        request_headers["Authorization"] = f"Bearer {self.api_key}"
        max_retries = self.retry_policy.max_retries

        for attempt in range(max_retries + 1):
            deadline.check()
            has_retries_left = attempt < max_retries

            try:
                response = self.transport.send(
                    method, url, request_headers, body, deadline
                )
            except TransportError as e:
                if deadline.is_expired:
                    raise CancellationError(str(e)) from e
                if not has_retries_left:
                    raise
                delay = self.retry_policy.get_delay(attempt)
                logger.warning(
                    f"{method} {url}: transport error on attempt "
                    f"{attempt + 1}/{max_retries + 1}: {e}. Retrying in {delay:.2f}s"
                )
                deadline.sleep(delay)
                continue

            try:
                outcome = self._classify(response, attempt, has_retries_left)
            finally:
                response.body.close()

            if outcome.kind == OutcomeKind.SUCCESS:
                return outcome.payload

            if outcome.kind == OutcomeKind.TERMINAL:
                logger.debug(f"{method} {url}: terminal failure: {outcome.error}")
                raise outcome.error

            logger.warning(
                f"{method} {url}: {outcome.reason} on attempt "
                f"{attempt + 1}/{max_retries + 1}. Retrying in {outcome.delay:.2f}s"
            )
            deadline.sleep(outcome.delay)

        # Every path through the last attempt returns or raises.
        raise RuntimeError("linkup: retry loop exited without an outcome")

    def _classify(
        self,
        response: TransportResponse,
        attempt: int,
        has_retries_left: bool,
    ) -> Outcome:
        """Classify one response. The caller closes the body."""
        status = response.status_code

        if response.is_success:
            return Outcome(OutcomeKind.SUCCESS, payload=response.body.read())

        if status == 401:
            return Outcome(OutcomeKind.TERMINAL, error=UnauthorizedError())
        if status == 403:
            return Outcome(OutcomeKind.TERMINAL, error=ForbiddenError())

        if is_retryable_status(status) and has_retries_left:
            retry_after = parse_retry_after(response.headers.get("Retry-After"))
            if retry_after is not None:
                delay = float(retry_after)
            else:
                delay = self.retry_policy.get_delay(attempt)
            return Outcome(
                OutcomeKind.RETRYABLE, reason=f"HTTP {status}", delay=delay
            )

        try:
            data = response.body.read(MAX_ERROR_BODY)
        except TransportError as e:
            logger.debug(f"Discarding unreadable error body for HTTP {status}: {e}")
            data = b""
        return Outcome(OutcomeKind.TERMINAL, error=decode_api_error(status, data))
