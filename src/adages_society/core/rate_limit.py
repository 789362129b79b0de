"""In-memory fixed-window rate limiting.

Counters live in process memory only; they are neither durable across restarts
nor shared between instances. A background worker purges expired windows.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from threading import Lock

from adages_society.core.settings import settings

logger = logging.getLogger(__name__)


@dataclass
class RateLimitEntry:
    """Hit counter for a single key within the current window."""

    count: int
    reset_at: float


@dataclass(frozen=True)
class RateLimitResult:
    """Outcome of registering a hit against a key."""

    allowed: bool
    remaining: int
    reset_at: float


class RateLimiter:
    """Fixed-window counter keyed by arbitrary strings (user id, client ip, ...)."""

    def __init__(
        self,
        default_limit: int | None = None,
        window_seconds: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.default_limit = default_limit or settings.rate_limit_default_requests
        self.window_seconds = window_seconds or float(settings.rate_limit_window_seconds)
        self._clock = clock
        self._entries: dict[str, RateLimitEntry] = {}
        self._lock = Lock()

    def hit(
        self,
        key: str,
        limit: int | None = None,
        window_seconds: float | None = None,
    ) -> RateLimitResult:
        """Record one request for `key` and report whether it is allowed."""
        max_requests = limit or self.default_limit
        window = window_seconds or self.window_seconds
        now = self._clock()

        with self._lock:
            entry = self._entries.get(key)
            if entry is None or entry.reset_at <= now:
                entry = RateLimitEntry(count=0, reset_at=now + window)
                self._entries[key] = entry

            if entry.count >= max_requests:
                return RateLimitResult(allowed=False, remaining=0, reset_at=entry.reset_at)

            entry.count += 1
            return RateLimitResult(
                allowed=True,
                remaining=max_requests - entry.count,
                reset_at=entry.reset_at,
            )

    def cleanup(self) -> int:
        """Drop expired windows and return how many were removed."""
        now = self._clock()
        with self._lock:
            expired = [key for key, entry in self._entries.items() if entry.reset_at <= now]
            for key in expired:
                del self._entries[key]
        return len(expired)

    def reset(self) -> None:
        """Forget every counter."""
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class RateLimitCleanupWorker:
    """Periodically purges expired rate limit windows in the background."""

    def __init__(self, limiter: RateLimiter, interval_seconds: float | None = None) -> None:
        self.limiter = limiter
        self.interval = max(
            0.01,
            float(interval_seconds or settings.rate_limit_cleanup_interval_seconds),
        )
        self._task: asyncio.Task[None] | None = None
        self._stopping = asyncio.Event()

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """Start the background cleanup loop."""
        if self._task is None or self._task.done():
            self._stopping.clear()
            self._task = asyncio.create_task(self._run())
            logger.info("Rate limit cleanup started (interval=%.0fs)", self.interval)

    async def stop(self) -> None:
        """Stop the background cleanup loop."""
        if self._task is None:
            return

        self._stopping.set()
        await self._task
        self._task = None
        logger.info("Rate limit cleanup stopped")

    async def _run(self) -> None:
        while not self._stopping.is_set():
            with contextlib.suppress(asyncio.TimeoutError):
                await asyncio.wait_for(self._stopping.wait(), timeout=self.interval)
            removed = self.limiter.cleanup()
            if removed:
                logger.debug("Purged %d expired rate limit windows", removed)


def client_identifier(headers: Mapping[str, str], fallback: str | None = None) -> str:
    """Derive a client key from proxy headers, falling back to the socket peer."""
    forwarded = headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    for header in ("x-real-ip", "cf-connecting-ip"):
        value = headers.get(header)
        if value:
            return value.strip()
    return fallback or "unknown"


_rate_limiter: RateLimiter | None = None
_limiter_lock = Lock()


def get_rate_limiter() -> RateLimiter:
    """Return the process-wide rate limiter."""
    global _rate_limiter
    with _limiter_lock:
        if _rate_limiter is None:
            _rate_limiter = RateLimiter()
        return _rate_limiter


__all__ = [
    "RateLimitCleanupWorker",
    "RateLimitEntry",
    "RateLimitResult",
    "RateLimiter",
    "client_identifier",
    "get_rate_limiter",
]
