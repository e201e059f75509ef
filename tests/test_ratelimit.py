"""
Tests for the fixed-window rate limiter.
"""
from types import SimpleNamespace

import pytest

import ratelimit
from ratelimit import RateLimiter


@pytest.fixture
def clock(monkeypatch):
    fake = SimpleNamespace(now=1000.0)
    monkeypatch.setattr(ratelimit, "time", SimpleNamespace(monotonic=lambda: fake.now))
    return fake


def test_blocks_after_limit(clock):
    limiter = RateLimiter(limit=2, window_seconds=60)
    assert limiter.hit("1.2.3.4")
    assert limiter.hit("1.2.3.4")
    assert not limiter.hit("1.2.3.4")
    assert limiter.hit("5.6.7.8")


def test_window_resets(clock):
    limiter = RateLimiter(limit=1, window_seconds=60)
    assert limiter.hit("1.2.3.4")
    assert not limiter.hit("1.2.3.4")
    clock.now += 60
    assert limiter.hit("1.2.3.4")


def test_expired_hosts_are_evicted(clock):
    limiter = RateLimiter(limit=5, window_seconds=60)
    limiter.hit("old-host")
    clock.now += 61
    limiter.hit("new-host")
    assert "old-host" not in limiter._hits
    assert "new-host" in limiter._hits


def test_zero_limit_disables(clock):
    limiter = RateLimiter(limit=0, window_seconds=60)
    assert all(limiter.hit("1.2.3.4") for _ in range(10))
    assert limiter._hits == {}
