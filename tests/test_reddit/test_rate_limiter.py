"""
Tests for FixedWindowCounter and apply_window.

Tests cover:
- Admission up to the window capacity
- Rejection without counting once the window is full
- Window restart after the reset time passes
- get_remaining() accuracy
"""

import pytest

from reddit_dashboard.reddit.exceptions import RateLimitError
from reddit_dashboard.reddit.rate_limiter import (
    FixedWindowCounter,
    RateWindow,
    apply_window,
)


class TestApplyWindow:
    """Test the fixed-window rule on a bare window."""

    def test_first_hit_opens_window(self):
        window = RateWindow(key="k")
        decision = apply_window(window, max_requests=3, window_ms=1000, now=5000)

        assert decision.allowed is True
        assert decision.remaining == 2
        assert decision.reset_at == 6000
        assert window.count == 1

    def test_denied_hit_does_not_count(self):
        window = RateWindow(key="k", count=3, reset_at=6000)
        decision = apply_window(window, max_requests=3, window_ms=1000, now=5500)

        assert decision.allowed is False
        assert decision.remaining == 0
        assert window.count == 3

    def test_window_boundary_is_inclusive(self):
        """At exactly reset_at the old window still applies."""
        window = RateWindow(key="k", count=3, reset_at=6000)

        assert apply_window(window, 3, 1000, now=6000).allowed is False
        assert apply_window(window, 3, 1000, now=6001).allowed is True
        assert window.reset_at == 7001


class TestFixedWindowCounter:
    """Test suite for FixedWindowCounter."""

    def test_initialization(self, clock):
        counter = FixedWindowCounter(clock=clock)

        assert counter.max_requests == 100
        assert counter.window_ms == 60000
        assert counter.get_remaining() == 100

    def test_admits_n_then_rejects(self, clock):
        counter = FixedWindowCounter(max_requests=5, window_ms=60000, clock=clock)

        for i in range(5):
            counter.acquire()
            assert counter.get_remaining() == 5 - (i + 1)

        with pytest.raises(RateLimitError) as exc_info:
            counter.acquire()

        assert exc_info.value.limit == 5
        assert exc_info.value.reset_at == clock.now + 60000

    def test_resets_after_window(self, clock):
        counter = FixedWindowCounter(max_requests=2, window_ms=1000, clock=clock)
        counter.acquire()
        counter.acquire()

        with pytest.raises(RateLimitError):
            counter.acquire()

        clock.advance(1001)

        assert counter.get_remaining() == 2
        counter.acquire()
        assert counter.get_remaining() == 1

    def test_get_remaining_does_not_count(self, clock):
        counter = FixedWindowCounter(max_requests=3, clock=clock)

        for _ in range(10):
            counter.get_remaining()

        assert counter.get_remaining() == 3

    def test_reset(self, clock):
        counter = FixedWindowCounter(max_requests=2, clock=clock)
        counter.acquire()
        counter.acquire()

        counter.reset()

        assert counter.get_remaining() == 2
