"""Retry policy for HTTP transport.

Provides exponential backoff with jitter. The randomness source is
injectable so tests can pin the jitter.
"""

import random
from dataclasses import dataclass, field
from typing import Callable

from ..errors import ConfigurationError

JITTER_LOW = 0.8
JITTER_SPAN = 0.4

# 2**62 seconds is already far beyond any sane max_delay.
_MAX_EXPONENT = 62


def backoff(
    attempt: int,
    min_delay: float,
    max_delay: float,
    rand: Callable[[], float] = random.random,
) -> float:
    """Calculate the jittered delay before a retry.

    Args:
        attempt: Retry number (0 = first retry).
        min_delay: Delay in seconds for the first retry.
        max_delay: Upper bound for the un-jittered delay.
        rand: Source of floats in [0, 1).

    Returns:
        Delay in seconds, within +/- 20% of min(min_delay * 2**attempt, max_delay).
    """
    if attempt >= _MAX_EXPONENT:
        base = max_delay
    else:
        base = min(min_delay * (2 ** max(attempt, 0)), max_delay)

    r = min(max(rand(), 0.0), 1.0)
    return max(base, 0.0) * (JITTER_LOW + JITTER_SPAN * r)


def _default_rand() -> Callable[[], float]:
    return random.Random().random


@dataclass(frozen=True)
class RetryPolicy:
    """Retry policy for 429/5xx responses and transport failures."""
    max_retries: int = 3
    min_delay: float = 0.25
    max_delay: float = 4.0
    rand: Callable[[], float] = field(
        default_factory=_default_rand, compare=False, repr=False
    )

    def __post_init__(self):
        if self.max_retries < 0:
            raise ConfigurationError(
                f"max_retries must be >= 0, got {self.max_retries}"
            )
        if self.min_delay < 0:
            raise ConfigurationError(
                f"min_delay must be >= 0, got {self.min_delay}"
            )
        if self.max_delay < self.min_delay:
            raise ConfigurationError(
                f"max_delay ({self.max_delay}) must be >= min_delay ({self.min_delay})"
            )

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1

    def get_delay(self, attempt: int) -> float:
        """Calculate delay for a given retry attempt (0-indexed)."""
        return backoff(attempt, self.min_delay, self.max_delay, self.rand)


def default_retry_policy() -> RetryPolicy:
    """Create default retry policy.

    3 retries, 250ms initial delay, 4s max.
    """
    return RetryPolicy()


def aggressive_retry_policy() -> RetryPolicy:
    """Create aggressive retry policy for flaky connections.

    5 retries, 100ms initial delay, 2s max.
    """
    return RetryPolicy(max_retries=5, min_delay=0.1, max_delay=2.0)


def no_retry_policy() -> RetryPolicy:
    """Create a no-retry policy (fail immediately)."""
    return RetryPolicy(max_retries=0)
