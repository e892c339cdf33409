"""
Unified Rate Limiter

Client-side rate limiting for the outbound Gemini and YouTube calls.
Supports per-second (token bucket) and per-minute (sliding window) limits.
"""

import asyncio
import time
from collections import deque
from typing import Optional

import structlog

logger = structlog.get_logger(__name__)


class UnifiedRateLimiter:
    """
    Rate limiter shared by every client of one external service.

    Supports:
    - Per-second limiting with a token bucket (YouTube)
    - Per-minute limiting over a sliding window (Gemini free tier)
    """

    def __init__(
        self,
        calls_per_second: Optional[float] = None,
        calls_per_minute: Optional[int] = None,
        burst_size: Optional[int] = None,
        service_name: str = "api"
    ):
        """
        Initialize rate limiter with specified limits.

        Args:
            calls_per_second: Maximum calls per second
            calls_per_minute: Maximum calls per minute
            burst_size: Token bucket size (defaults to calls_per_second * 2)
            service_name: Service name for logging
        """
        self.calls_per_second = calls_per_second
        self.calls_per_minute = calls_per_minute
        self.service_name = service_name

        if calls_per_second:
            self.burst_size = burst_size or max(int(calls_per_second * 2), 1)
            self.tokens = float(self.burst_size)
            self.last_refill = time.monotonic()
        else:
            self.burst_size = None
            self.tokens = 0.0
            self.last_refill = 0.0

        self.request_times: deque = deque()
        self.lock = asyncio.Lock()

        self.logger = logger.bind(service=f"RateLimiter-{service_name}")
        self.logger.debug(
            "Rate limiter initialized",
            calls_per_second=calls_per_second,
            calls_per_minute=calls_per_minute,
            burst_size=self.burst_size
        )

    @classmethod
    def for_youtube(cls, calls_per_second: float = 5.0) -> "UnifiedRateLimiter":
        """Rate limiter for the YouTube Data API."""
        return cls(calls_per_second=calls_per_second, service_name="YouTube")

    @classmethod
    def for_gemini(cls, calls_per_minute: int = 15) -> "UnifiedRateLimiter":
        """Rate limiter for the Gemini API."""
        return cls(calls_per_minute=calls_per_minute, service_name="Gemini")

    async def wait_if_needed(self) -> None:
        """
        Wait if necessary to respect rate limits.

        Call this before every outbound request.
        """
        async with self.lock:
            current_time = time.monotonic()
            self._cleanup_old_requests(current_time)

            wait_time = 0.0
            if self.calls_per_second:
                wait_time = max(wait_time, self._check_per_second_limit(current_time))
            if self.calls_per_minute:
                wait_time = max(wait_time, self._check_per_minute_limit(current_time))

            if wait_time > 0:
                self.logger.debug(
                    "Rate limit wait required",
                    wait_time=wait_time,
                    current_requests=len(self.request_times)
                )
                await asyncio.sleep(wait_time)
                current_time = time.monotonic()
                if self.calls_per_second:
                    self._refill(current_time)

            self.request_times.append(current_time)

            if self.calls_per_second and self.tokens >= 1:
                self.tokens -= 1

    def _refill(self, current_time: float) -> None:
        elapsed = current_time - self.last_refill
        self.tokens = min(float(self.burst_size), self.tokens + elapsed * self.calls_per_second)
        self.last_refill = current_time

    def _check_per_second_limit(self, current_time: float) -> float:
        """Token bucket check; returns seconds until the next token."""
        self._refill(current_time)

        if self.tokens >= 1:
            return 0.0

        return (1.0 - self.tokens) / self.calls_per_second

    def _check_per_minute_limit(self, current_time: float) -> float:
        """Sliding-window check; returns seconds until the oldest call leaves the window."""
        minute_ago = current_time - 60
        recent_requests = [t for t in self.request_times if t > minute_ago]

        if len(recent_requests) < self.calls_per_minute:
            return 0.0

        oldest_request = min(recent_requests)
        return max(0.0, 60 - (current_time - oldest_request))

    def _cleanup_old_requests(self, current_time: float) -> None:
        cutoff_time = current_time - 60
        while self.request_times and self.request_times[0] < cutoff_time:
            self.request_times.popleft()

    def get_current_usage(self) -> dict:
        """Current usage statistics."""
        current_time = time.monotonic()
        minute_requests = len([t for t in self.request_times if t > current_time - 60])

        usage = {
            "service": self.service_name,
            "requests_last_minute": minute_requests,
        }

        if self.calls_per_second:
            usage["tokens_available"] = round(self.tokens, 2)
            usage["calls_per_second_limit"] = self.calls_per_second

        if self.calls_per_minute:
            usage["calls_per_minute_limit"] = self.calls_per_minute
            usage["minute_usage_percent"] = (minute_requests / self.calls_per_minute) * 100

        return usage

    def reset(self) -> None:
        """Reset rate limiter state (useful for testing)."""
        self.request_times.clear()
        if self.calls_per_second:
            self.tokens = float(self.burst_size)
            self.last_refill = time.monotonic()
