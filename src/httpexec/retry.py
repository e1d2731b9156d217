"""Retry decisions and backoff for the attempt loop."""

import asyncio
from contextlib import suppress

import httpx

from httpexec.constants import (
    DEFAULT_DELAY_MS,
    MAX_BACKOFF_DELAY_MS,
    MIN_MAX_ATTEMPTS,
)
from httpexec.errors import AttemptTimeoutError, RequestCancelledError
from httpexec.models import RetryDescriptor


# Failures likely to succeed on a later attempt
TRANSIENT_EXCEPTIONS: tuple[type[BaseException], ...] = (
    httpx.TimeoutException,
    httpx.NetworkError,
    httpx.RemoteProtocolError,
    AttemptTimeoutError,
)


class RetryPolicy:
    """Per-call retry state machine.

    Attempt numbers are 1-based and always refer to the attempt that just
    completed. ``max_attempts`` counts the initial send and is never below 1.
    """

    def __init__(
        self,
        descriptor: RetryDescriptor | None = None,
        default_max_attempts: int = 0,
    ) -> None:
        """Initialize the policy.

        Args:
            descriptor: Retry settings from the request, if any.
            default_max_attempts: Host default used when the request has no
                retry settings. Values below 1 mean a single attempt.
        """
        if descriptor is None:
            descriptor = RetryDescriptor(
                max_attempts=default_max_attempts,
                delay_ms=DEFAULT_DELAY_MS,
            )
        self._descriptor = descriptor
        self._max_attempts = max(MIN_MAX_ATTEMPTS, descriptor.max_attempts)
        self._status_codes = descriptor.effective_status_codes

    @property
    def max_attempts(self) -> int:
        """Maximum number of attempts, including the first."""
        return self._max_attempts

    @property
    def retry_status_codes(self) -> frozenset[int]:
        """Status codes that trigger a retry."""
        return self._status_codes

    def should_retry(self, status_code: int, attempt: int) -> bool:
        """Decide whether a response status warrants another attempt.

        Args:
            status_code: HTTP status code received.
            attempt: Attempt number that produced it (1-based).

        Returns:
            True if another attempt should be made.
        """
        if attempt >= self._max_attempts:
            return False
        return status_code in self._status_codes

    def should_retry_on_exception(self, exc: BaseException, attempt: int) -> bool:
        """Decide whether a transport failure warrants another attempt.

        Only connection-level failures and timeouts are retried.

        Args:
            exc: Exception raised by the attempt.
            attempt: Attempt number that raised it (1-based).

        Returns:
            True if another attempt should be made.
        """
        if attempt >= self._max_attempts:
            return False
        return self.is_transient(exc)

    @staticmethod
    def is_transient(exc: BaseException) -> bool:
        """Check whether an exception belongs to a retryable failure class."""
        return isinstance(exc, TRANSIENT_EXCEPTIONS)

    def get_delay_ms(self, attempt: int) -> int:
        """Calculate the delay before the next attempt.

        Args:
            attempt: Attempt number that just completed (1-based).

        Returns:
            Delay in milliseconds, capped at 60 seconds.
        """
        delay = self._descriptor.delay_ms
        if self._descriptor.exponential_backoff and attempt > 1:
            delay = delay * 2 ** (attempt - 1)
        return min(delay, MAX_BACKOFF_DELAY_MS)

    async def wait(
        self, attempt: int, cancel_event: asyncio.Event | None = None
    ) -> None:
        """Sleep for the backoff delay.

        Args:
            attempt: Attempt number that just completed (1-based).
            cancel_event: Caller cancellation signal.

        Raises:
            RequestCancelledError: If the caller cancels during the wait.
        """
        delay_seconds = self.get_delay_ms(attempt) / 1000.0

        if cancel_event is None:
            await asyncio.sleep(delay_seconds)
            return

        if cancel_event.is_set():
            raise RequestCancelledError

        waiter = asyncio.ensure_future(cancel_event.wait())
        try:
            done, _ = await asyncio.wait({waiter}, timeout=delay_seconds)
        finally:
            if not waiter.done():
                waiter.cancel()
                with suppress(asyncio.CancelledError):
                    await waiter

        if waiter in done:
            raise RequestCancelledError
