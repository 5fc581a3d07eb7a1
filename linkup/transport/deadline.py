"""Deadline and cancellation handling for a single logical call."""

import threading
import time
from typing import Optional

from ..errors import CancellationError


class Deadline:
    """Caller-supplied deadline plus an optional cancellation event.

    Waits go through ``threading.Event.wait`` so that setting the event
    wakes a sleeping retry immediately.
    """

    def __init__(
        self,
        timeout: Optional[float] = None,
        cancel_event: Optional[threading.Event] = None,
    ):
        """Initialize deadline.

        Args:
            timeout: Seconds from now until expiry. None = no deadline.
            cancel_event: Event the caller sets to cancel the call.
        """
        self.timeout = timeout
        self._cancel_event = cancel_event or threading.Event()
        self._start_time = time.monotonic()
        self._expires_at = None if timeout is None else self._start_time + timeout

    @classmethod
    def never(cls) -> "Deadline":
        return cls()

    @property
    def elapsed(self) -> float:
        """Seconds elapsed since creation."""
        return time.monotonic() - self._start_time

    @property
    def remaining(self) -> Optional[float]:
        """Seconds remaining before expiry, or None when unbounded."""
        if self._expires_at is None:
            return None
        return max(0.0, self._expires_at - time.monotonic())

    @property
    def is_cancelled(self) -> bool:
        return self._cancel_event.is_set()

    @property
    def is_expired(self) -> bool:
        """Whether the deadline passed or the call was cancelled."""
        if self.is_cancelled:
            return True
        return self._expires_at is not None and time.monotonic() >= self._expires_at

    def cancel(self) -> None:
        self._cancel_event.set()

    def wait(self, seconds: float) -> bool:
        """Block for up to ``seconds``, bounded by the deadline.

        Returns:
            True if the wait was cut short by cancellation or expiry.
        """
        seconds = min(max(seconds, 0.0), threading.TIMEOUT_MAX)
        remaining = self.remaining
        if remaining is not None and remaining < seconds:
            self._cancel_event.wait(remaining)
            return True
        if self._cancel_event.wait(seconds):
            return True
        return self.is_expired

    def check(self) -> None:
        """Raise CancellationError if the deadline is over."""
        if self.is_expired:
            raise CancellationError(self._reason())

    def sleep(self, seconds: float) -> None:
        """Sleep for ``seconds`` unless interrupted.

        Raises:
            CancellationError: If cancelled or expired during the wait.
        """
        if self.wait(seconds):
            raise CancellationError(self._reason())

    def _reason(self) -> str:
        if self.is_cancelled:
            return "linkup: request cancelled"
        return f"linkup: deadline exceeded after {self.elapsed:.1f}s"
