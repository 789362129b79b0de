# tests/services/test_rate_limit.py
"""Tests for the in-memory rate limiter and its cleanup worker."""

import asyncio

from adages_society.core.rate_limit import (
    RateLimitCleanupWorker,
    RateLimiter,
    client_identifier,
)


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def test_allows_up_to_limit_then_blocks() -> None:
    limiter = RateLimiter(default_limit=3, window_seconds=60, clock=FakeClock())
    results = [limiter.hit("login:1.2.3.4") for _ in range(4)]
    assert [r.allowed for r in results] == [True, True, True, False]
    assert [r.remaining for r in results] == [2, 1, 0, 0]


def test_keys_are_independent() -> None:
    limiter = RateLimiter(default_limit=1, window_seconds=60, clock=FakeClock())
    assert limiter.hit("a").allowed
    assert not limiter.hit("a").allowed
    assert limiter.hit("b").allowed


def test_window_resets_after_expiry() -> None:
    clock = FakeClock()
    limiter = RateLimiter(default_limit=1, window_seconds=60, clock=clock)
    limiter.hit("key")
    assert not limiter.hit("key").allowed

    clock.now += 60
    assert limiter.hit("key").allowed


def test_per_call_limit_overrides_default() -> None:
    limiter = RateLimiter(default_limit=1, window_seconds=60, clock=FakeClock())
    assert all(limiter.hit("votes", limit=5).allowed for _ in range(5))
    assert not limiter.hit("votes", limit=5).allowed


def test_cleanup_drops_only_expired_windows() -> None:
    clock = FakeClock()
    limiter = RateLimiter(default_limit=5, window_seconds=10, clock=clock)
    limiter.hit("old")
    clock.now += 5
    limiter.hit("new")
    clock.now += 6

    assert limiter.cleanup() == 1
    assert len(limiter) == 1

    limiter.reset()
    assert len(limiter) == 0


def test_client_identifier_prefers_proxy_headers() -> None:
    assert client_identifier({"x-forwarded-for": "10.0.0.1, 10.0.0.2"}, "peer") == "10.0.0.1"
    assert client_identifier({"x-real-ip": " 10.0.0.3 "}, "peer") == "10.0.0.3"
    assert client_identifier({"cf-connecting-ip": "10.0.0.4"}, "peer") == "10.0.0.4"
    assert client_identifier({}, "peer") == "peer"
    assert client_identifier({}, None) == "unknown"


async def test_cleanup_worker_purges_in_background() -> None:
    clock = FakeClock()
    limiter = RateLimiter(default_limit=5, window_seconds=1, clock=clock)
    limiter.hit("expiring")
    clock.now += 2

    worker = RateLimitCleanupWorker(limiter, interval_seconds=0.01)
    await worker.start()
    assert worker.running
    for _ in range(50):
        if len(limiter) == 0:
            break
        await asyncio.sleep(0.01)
    await worker.stop()

    assert len(limiter) == 0
    assert not worker.running
