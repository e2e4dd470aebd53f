# src/tokenstats/shared/retry.py
"""
Retry Policy - Bounded Retries for Upstream Calls

This module provides an explicit retry policy applied per call site by the
stats aggregator. Each attempt runs a blocking client call on a worker thread
and is bounded by its own timeout; only transient failures are retried.
A thread cannot be killed, so cancellable calls receive a threading.Event
that is set when their attempt ends and must stop working once it is set.

Files that USE this module:
- tokenstats.application.stats_service (wraps every upstream fetch)
- tests.test_retry (unit tests)

Files that this module USES:
- tokenstats.domain.errors (DataUnavailableError.retryable decides what is transient)
"""
from __future__ import annotations

import asyncio
import functools
import logging
import threading
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, TypeVar

from tokenstats.domain.errors import DataUnavailableError

log = logging.getLogger(__name__)

T = TypeVar("T")


def is_transient(exc: BaseException) -> bool:
    """
    Decide whether a failure is worth retrying.

    Timeouts and DataUnavailableError flagged as retryable (network errors,
    HTTP 429, 502-504) are transient. Malformed responses are not.
    """
    if isinstance(exc, asyncio.TimeoutError):
        return True
    if isinstance(exc, DataUnavailableError):
        return exc.retryable
    return False


@dataclass
class RetryPolicy:
    """
    Retry configuration for one upstream fetch.

    Attributes:
        max_attempts: Total attempts including the first one
        backoff_seconds: Delay before the second attempt
        backoff_multiplier: Factor applied to the delay after every retry (1.0 = fixed)
        attempt_timeout: Seconds each attempt may take before it is abandoned
    """
    max_attempts: int = 3
    backoff_seconds: float = 1.0
    backoff_multiplier: float = 2.0
    attempt_timeout: Optional[float] = 15.0
    retry_if: Callable[[BaseException], bool] = is_transient
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep

    def delays(self):
        """Yield the backoff delay before each retry."""
        delay = self.backoff_seconds
        for _ in range(max(0, self.max_attempts - 1)):
            yield delay
            delay *= self.backoff_multiplier

    async def run_in_thread(self, label: str, func: Callable[..., T], cancellable: bool = False) -> T:
        """
        Run a blocking callable on the default executor with timeout and retries.

        Args:
            label: Name used in log messages (e.g., "price")
            func: Blocking callable; takes no arguments unless cancellable
            cancellable: Pass func a fresh threading.Event per attempt, set as soon
                as the attempt finishes, times out or is cancelled

        Returns:
            The callable's result

        Raises:
            DataUnavailableError: When the final attempt times out
            Exception: The last error raised by func once retries are exhausted
                or the error is not transient
        """
        loop = asyncio.get_running_loop()

        async def attempt() -> T:
            if not cancellable:
                return await loop.run_in_executor(None, func)
            cancel = threading.Event()
            try:
                return await loop.run_in_executor(None, functools.partial(func, cancel))
            finally:
                cancel.set()

        return await self.run(label, attempt)

    async def run(self, label: str, factory: Callable[[], Awaitable[T]]) -> T:
        """
        Await a fresh coroutine from factory until it succeeds or retries run out.

        Args:
            label: Name used in log messages
            factory: Zero-argument callable returning a new awaitable per attempt
        """
        delays = self.delays()
        attempt_no = 0
        while True:
            attempt_no += 1
            try:
                if self.attempt_timeout is not None:
                    return await asyncio.wait_for(factory(), timeout=self.attempt_timeout)
                return await factory()
            except Exception as e:
                if not self.retry_if(e):
                    raise
                delay = next(delays, None)
                if delay is None:
                    log.warning("%s: giving up after %d attempt(s): %s", label, attempt_no, _describe(e))
                    if isinstance(e, asyncio.TimeoutError):
                        raise DataUnavailableError(
                            label, f"timed out after {self.attempt_timeout}s", retryable=True
                        ) from e
                    raise
                log.info(
                    "%s: transient failure on attempt %d/%d (%s), retrying in %.1fs",
                    label, attempt_no, self.max_attempts, _describe(e), delay,
                )
                await self.sleep(delay)


def _describe(exc: BaseException) -> str:
    if isinstance(exc, asyncio.TimeoutError):
        return "timeout"
    return str(exc) or type(exc).__name__
