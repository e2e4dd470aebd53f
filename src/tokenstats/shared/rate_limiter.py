# src/tokenstats/shared/rate_limiter.py
"""
Rate Limiter - Abuse Prevention and Resource Protection

This module implements a rate limiting system to prevent abuse and protect
upstream API quotas. It provides per-client sliding-window limiting with
configurable limits for different kinds of requests and temporary blocking
for clients that exceed them. Clients idle for longer than the widest window
are forgotten by a periodic sweep, so memory follows active clients only.

Files that USE this module:
- tokenstats.adapters.web.middleware (RateLimitMiddleware checks every request)
- tests.test_rate_limiter (unit tests)

Files that this module USES:
- None (pure utility implementation)
"""
import threading
import time
from typing import Callable, Dict, Optional
from collections import deque
from dataclasses import dataclass


@dataclass
class RateLimitConfig:
    """Configuration for rate limiting."""
    max_requests: int
    time_window: int  # in seconds
    block_duration: int = 60  # seconds a client stays blocked after exceeding the limit


class RateLimiter:
    """Simple in-memory rate limiter."""

    def __init__(self, clock: Callable[[], float] = time.time, sweep_interval: float = 60.0):
        self._requests: Dict[str, deque] = {}
        self._blocked: Dict[str, float] = {}
        self._clock = clock
        self._lock = threading.Lock()
        self._sweep_interval = sweep_interval
        self._max_window = 0
        self._last_sweep = clock()

    def is_allowed(self, identifier: str, config: RateLimitConfig) -> bool:
        """
        Check if a request is allowed for the given identifier.

        Args:
            identifier: Unique identifier (e.g., client IP)
            config: Rate limit configuration

        Returns:
            True if request is allowed, False if rate limited
        """
        with self._lock:
            now = self._clock()
            self._max_window = max(self._max_window, config.time_window)
            if now - self._last_sweep >= self._sweep_interval:
                self._sweep(now)

            if identifier in self._blocked:
                if now < self._blocked[identifier]:
                    return False
                del self._blocked[identifier]

            requests = self._requests.setdefault(identifier, deque())
            self._prune(requests, now - config.time_window)

            if len(requests) >= config.max_requests:
                self._blocked[identifier] = now + config.block_duration
                return False

            requests.append(now)
            return True

    def get_remaining_requests(self, identifier: str, config: RateLimitConfig) -> int:
        """
        Get remaining requests available for an identifier within the time window.

        Args:
            identifier: Unique identifier (e.g., client IP)
            config: Rate limit configuration

        Returns:
            Number of remaining requests (0 or positive)
        """
        with self._lock:
            requests = self._requests.get(identifier)
            if not requests:
                return config.max_requests
            self._prune(requests, self._clock() - config.time_window)
            return max(0, config.max_requests - len(requests))

    def get_reset_time(self, identifier: str, config: RateLimitConfig) -> Optional[float]:
        """
        Get when the rate limit window resets for an identifier.

        Args:
            identifier: Unique identifier (e.g., client IP)
            config: Rate limit configuration

        Returns:
            Unix timestamp when rate limit resets, or None if not currently limited
        """
        with self._lock:
            if identifier in self._blocked:
                return self._blocked[identifier]

            requests = self._requests.get(identifier)
            if not requests:
                return None

            return requests[0] + config.time_window

    def now(self) -> float:
        return self._clock()

    def tracked_identifiers(self) -> int:
        """Number of clients currently holding limiter state."""
        with self._lock:
            return len(self._requests.keys() | self._blocked.keys())

    def _sweep(self, now: float) -> None:
        cutoff = now - self._max_window
        for identifier in [k for k, q in self._requests.items() if not q or q[-1] < cutoff]:
            del self._requests[identifier]
        for identifier in [k for k, until in self._blocked.items() if until <= now]:
            del self._blocked[identifier]
        self._last_sweep = now

    @staticmethod
    def _prune(requests: deque, cutoff: float) -> None:
        while requests and requests[0] < cutoff:
            requests.popleft()


def build_rate_limits(max_requests: int, window_seconds: int) -> Dict[str, RateLimitConfig]:
    """
    Build the named rate limit configurations used by the HTTP layer.

    Args:
        max_requests: Requests allowed per client per window for regular endpoints
        window_seconds: Window length in seconds

    Returns:
        Mapping of limit name to RateLimitConfig
    """
    return {
        "api_request": RateLimitConfig(
            max_requests=max_requests, time_window=window_seconds, block_duration=window_seconds
        ),
        # Uploads hit object storage, keep them well below the read limit
        "upload": RateLimitConfig(
            max_requests=max(1, max_requests // 6), time_window=window_seconds,
            block_duration=window_seconds,
        ),
    }
