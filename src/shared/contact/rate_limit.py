"""In-memory fixed-window rate limiting for contact form submissions."""

import math
import time
import logging
from dataclasses import dataclass
from threading import Lock
from typing import Callable, Dict

from fastapi import Request


RATE_LIMIT_WINDOW_MS = 60_000
RATE_LIMIT_MAX = 3
RATE_LIMIT_MAX_KEYS = 10_000  # sweep expired windows once the table grows past this


@dataclass
class RateLimitEntry:
    count: int
    window_reset_at: float  # epoch milliseconds


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    retry_after_ms: int = 0

    @property
    def retry_after_seconds(self) -> int:
        """Retry-After header value, rounded up to whole seconds."""
        return -(-self.retry_after_ms // 1000)


class FixedWindowRateLimiter:
    """
    Counts requests per client key inside fixed, non-overlapping windows.

    Best-effort only: the table lives in process memory, is lost on restart
    and is not shared between server instances.
    """

    def __init__(self, window_ms: int = RATE_LIMIT_WINDOW_MS, max_per_window: int = RATE_LIMIT_MAX,
                 clock: Callable[[], float] = time.time, max_keys: int = RATE_LIMIT_MAX_KEYS):
        self.window_ms = window_ms
        self.max_per_window = max_per_window
        self.max_keys = max_keys
        self._clock = clock
        self._entries: Dict[str, RateLimitEntry] = {}
        self._lock = Lock()

    def _now_ms(self) -> float:
        return self._clock() * 1000

    def check(self, client_key: str) -> RateLimitDecision:
        now = self._now_ms()
        with self._lock:
            entry = self._entries.get(client_key)
            if entry is None or now > entry.window_reset_at:
                if entry is None and len(self._entries) >= self.max_keys:
                    self._sweep_locked(now)
                self._entries[client_key] = RateLimitEntry(count=1, window_reset_at=now + self.window_ms)
                return RateLimitDecision(allowed=True)
            if entry.count >= self.max_per_window:
                return RateLimitDecision(allowed=False, retry_after_ms=math.ceil(entry.window_reset_at - now))
            entry.count += 1
            return RateLimitDecision(allowed=True)

    def sweep(self) -> int:
        """Drop every entry whose window has expired. Returns how many were removed."""
        with self._lock:
            return self._sweep_locked(self._now_ms())

    def _sweep_locked(self, now: float) -> int:
        expired = [key for key, entry in self._entries.items() if now > entry.window_reset_at]
        for key in expired:
            del self._entries[key]
        if expired:
            logging.info(f"Rate limit sweep removed {len(expired)} expired entries")
        return len(expired)

    def __len__(self) -> int:
        return len(self._entries)


def get_client_key(request: Request) -> str:
    """Client identifier for rate limiting: first X-Forwarded-For hop, else the peer address."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    if request.client and request.client.host:
        return request.client.host
    return "unknown"
