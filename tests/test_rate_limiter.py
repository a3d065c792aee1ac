"""
Tests for `services/rate_limiter.py`.

Covers contract rules:
- At most max_requests requests per key within a sliding window.
- Keys are independent (actor, origin and endpoint all partition the limit).
- Requests are allowed again once the oldest request leaves the window.
"""

from __future__ import annotations

import pytest

from services.rate_limiter import RateLimiter, build_key


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def test_build_key_uses_anonymous_without_actor() -> None:
    assert build_key(None, "10.0.0.1", "/api/v1/orders") == "anonymous:10.0.0.1:/api/v1/orders"
    assert build_key("user-1", "10.0.0.1", "/api/v1/orders") == "user-1:10.0.0.1:/api/v1/orders"


def test_allows_up_to_limit_then_rejects() -> None:
    """With a limit of 10 per minute, the 11th request inside the window is rejected."""

    clock = FakeClock()
    limiter = RateLimiter(max_requests=10, window_seconds=60, clock=clock)

    decisions = [limiter.check("k") for _ in range(10)]
    assert all(decision.allowed for decision in decisions)
    assert decisions[-1].remaining == 0

    rejected = limiter.check("k")
    assert rejected.allowed is False
    assert rejected.retry_after == pytest.approx(60)


def test_window_slides() -> None:
    clock = FakeClock()
    limiter = RateLimiter(max_requests=2, window_seconds=60, clock=clock)

    assert limiter.check("k").allowed
    clock.advance(30)
    assert limiter.check("k").allowed
    assert not limiter.check("k").allowed

    # First request leaves the window; one slot frees up.
    clock.advance(31)
    assert limiter.check("k").allowed
    assert not limiter.check("k").allowed


def test_keys_are_independent() -> None:
    limiter = RateLimiter(max_requests=1, window_seconds=60, clock=FakeClock())

    assert limiter.check(build_key("a", "1.1.1.1", "/orders")).allowed
    assert limiter.check(build_key("b", "1.1.1.1", "/orders")).allowed
    assert limiter.check(build_key("a", "2.2.2.2", "/orders")).allowed
    assert limiter.check(build_key("a", "1.1.1.1", "/fraud")).allowed
    assert not limiter.check(build_key("a", "1.1.1.1", "/orders")).allowed


def test_rejected_requests_do_not_extend_the_window() -> None:
    clock = FakeClock()
    limiter = RateLimiter(max_requests=1, window_seconds=10, clock=clock)

    assert limiter.check("k").allowed
    for _ in range(5):
        clock.advance(1)
        assert not limiter.check("k").allowed

    clock.advance(5)
    assert limiter.check("k").allowed


def test_reset_clears_state() -> None:
    limiter = RateLimiter(max_requests=1, window_seconds=60, clock=FakeClock())
    limiter.check("k")

    limiter.reset()

    assert limiter.check("k").allowed


@pytest.mark.parametrize("max_requests, window", [(0, 60), (1, 0)])
def test_rejects_invalid_configuration(max_requests: int, window: float) -> None:
    with pytest.raises(ValueError):
        RateLimiter(max_requests=max_requests, window_seconds=window)
