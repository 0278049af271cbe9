"""Retry policies for queued jobs."""

from abc import ABC, abstractmethod
from datetime import timedelta

_MAX_EXPONENT = 32


class RetryPolicy(ABC):
    """Decides whether a failed job runs again and when."""

    @abstractmethod
    def should_retry(self, attempt: int, max_attempts: int) -> bool:
        """Whether another attempt is allowed.

        Args:
            attempt: 1-based number of the attempt that just failed.
            max_attempts: Attempts allowed for the job.
        """

    @abstractmethod
    def next_delay(self, attempt: int) -> timedelta:
        """Delay before the attempt following ``attempt``."""


class ExponentialBackoffRetryPolicy(RetryPolicy):
    """Retries until attempts run out, doubling the delay each time.

    The delay after attempt ``n`` is ``min(base * 2**n, cap)``.
    """

    def __init__(
        self,
        base_seconds: float = 1.0,
        max_seconds: float = 60.0,
    ) -> None:
        if base_seconds <= 0:
            raise ValueError(f"base_seconds must be positive, got {base_seconds}")
        if max_seconds < base_seconds:
            raise ValueError("max_seconds must be >= base_seconds")
        self._base_seconds = base_seconds
        self._max_seconds = max_seconds

    def should_retry(self, attempt: int, max_attempts: int) -> bool:
        return attempt < max_attempts

    def next_delay(self, attempt: int) -> timedelta:
        exponent = min(max(attempt, 0), _MAX_EXPONENT)
        seconds = min(self._base_seconds * 2**exponent, self._max_seconds)
        return timedelta(seconds=seconds)
