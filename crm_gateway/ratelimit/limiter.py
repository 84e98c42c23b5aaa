"""Sliding-window rate limiter with in-memory storage."""

import math
import time
import threading
from collections import deque
from typing import Callable, NamedTuple
from pydantic import BaseModel, Field


class RateLimitConfig(BaseModel):
    """Configuration for rate limiting.

    Attributes:
        max_requests: Maximum requests allowed per rolling window.
        window_ms: Window length in milliseconds.
    """

    max_requests: int = Field(default=100, gt=0, description="Requests per window")
    window_ms: int = Field(default=60000, gt=0, description="Window length in ms")


class RateLimitResult(NamedTuple):
    """Result of a rate limit check.

    Attributes:
        allowed: Whether the request is allowed.
        limit: The rate limit.
        remaining: Remaining requests in window.
        reset_at: Unix timestamp (seconds) when the oldest entry leaves the window.
        retry_after: Whole seconds to wait if denied (0 if allowed).
    """

    allowed: bool
    limit: int
    remaining: int
    reset_at: int
    retry_after: int = 0


def _now_ms() -> float:
    return time.time() * 1000


class SlidingWindowRateLimiter:
    """Per-identifier sliding-window counter.

    Each identifier keeps the timestamps of its admitted requests inside
    the trailing window. Bursts are capped at ``max_requests`` per rolling
    ``window_ms``; unlike a token bucket, no credit accumulates.
    """

    def __init__(
        self,
        config: RateLimitConfig | None = None,
        clock: Callable[[], float] = _now_ms,
    ):
        """Initialize rate limiter.

        Args:
            config: Limit configuration (100 requests / 60 s if not provided).
            clock: Returns the current time in milliseconds.
        """
        self.config = config or RateLimitConfig()
        self._clock = clock
        self._windows: dict[str, deque[float]] = {}
        self._lock = threading.Lock()
        self._last_sweep = clock()
        self._sweep_interval_ms = 5 * 60 * 1000

    def _prune(self, window: deque[float], now: float) -> None:
        window_start = now - self.config.window_ms
        while window and window[0] <= window_start:
            window.popleft()

    def _sweep(self, now: float) -> None:
        """Drop identifiers whose windows are empty."""
        if now - self._last_sweep < self._sweep_interval_ms:
            return

        for key in list(self._windows):
            window = self._windows[key]
            self._prune(window, now)
            if not window:
                del self._windows[key]

        self._last_sweep = now

    def check(self, identifier: str) -> RateLimitResult:
        """Admit or deny one request for an identifier.

        Denied requests are not recorded.

        Args:
            identifier: Client key (e.g. remote address).

        Returns:
            RateLimitResult with status and header metadata.
        """
        limit = self.config.max_requests
        window_ms = self.config.window_ms

        with self._lock:
            now = self._clock()
            self._sweep(now)

            window = self._windows.get(identifier)
            if window is None:
                window = deque()
            else:
                self._prune(window, now)

            if len(window) >= limit:
                oldest = window[0]
                retry_after = max(1, math.ceil((oldest + window_ms - now) / 1000))
                return RateLimitResult(
                    allowed=False,
                    limit=limit,
                    remaining=0,
                    reset_at=math.ceil((oldest + window_ms) / 1000),
                    retry_after=retry_after,
                )

            # keep entries non-decreasing if the clock steps backwards
            window.append(max(now, window[-1]) if window else now)
            self._windows[identifier] = window
            return RateLimitResult(
                allowed=True,
                limit=limit,
                remaining=limit - len(window),
                reset_at=math.ceil((window[0] + window_ms) / 1000),
            )

    def tracked_identifiers(self) -> int:
        """Number of identifiers currently held in memory."""
        with self._lock:
            return len(self._windows)

    def reset(self) -> None:
        """Drop all windows. Called on application shutdown and in tests."""
        with self._lock:
            self._windows.clear()
