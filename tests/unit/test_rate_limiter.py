"""Unit tests for token-bucket admission across block, strict and test modes."""

from __future__ import annotations

import asyncio

import pytest

from livetranslate.errors import RateLimitExceeded
from livetranslate.translation.rate_limiter import TokenBucketRateLimiter
from tests.fakes import FakeClock


def _limiter(clock: FakeClock, mode: str, capacity: float = 10.0) -> TokenBucketRateLimiter:
    """Build a limiter on fake time with a one-second refill interval."""

    return TokenBucketRateLimiter(
        capacity=capacity,
        refill_interval_seconds=1.0,
        mode=mode,
        clock=clock,
        sleeper=clock.sleep,
    )


def test_strict_mode_allows_capacity_then_fails_fast(fake_clock: FakeClock) -> None:
    """A full bucket admits exactly `capacity` calls before raising."""

    limiter = _limiter(fake_clock, "strict")

    async def _scenario() -> None:
        """Drain the bucket and attempt one more acquisition."""

        for _ in range(10):
            await limiter.acquire()
        with pytest.raises(RateLimitExceeded):
            await limiter.acquire()

    asyncio.run(_scenario())
    assert fake_clock.sleeps == []


def test_strict_mode_refills_one_token_per_interval(fake_clock: FakeClock) -> None:
    """One elapsed interval should admit exactly one further call."""

    limiter = _limiter(fake_clock, "strict")

    async def _scenario() -> None:
        """Drain, advance one interval, then acquire twice."""

        for _ in range(10):
            await limiter.acquire()
        fake_clock.advance(1.0)
        await limiter.acquire()
        with pytest.raises(RateLimitExceeded):
            await limiter.acquire()

    asyncio.run(_scenario())


def test_block_mode_waits_for_the_missing_token_fraction(fake_clock: FakeClock) -> None:
    """Block mode should sleep just long enough for one token to refill."""

    limiter = _limiter(fake_clock, "block", capacity=1.0)

    async def _scenario() -> None:
        """Acquire twice from a one-token bucket."""

        await limiter.acquire()
        fake_clock.advance(0.25)
        await limiter.acquire()

    asyncio.run(_scenario())

    assert fake_clock.sleeps == [pytest.approx(0.75)]
    assert limiter.wait_count == 1


def test_test_mode_bypasses_limiting(fake_clock: FakeClock) -> None:
    """Test mode should never debit tokens, wait or fail."""

    limiter = _limiter(fake_clock, "test", capacity=1.0)

    async def _scenario() -> None:
        """Acquire far more often than the bucket holds."""

        for _ in range(50):
            await limiter.acquire()

    asyncio.run(_scenario())

    assert fake_clock.sleeps == []
    assert limiter.available_tokens() == 1.0


def test_refill_is_capped_at_capacity(fake_clock: FakeClock) -> None:
    """Long idle periods must not accumulate more than `capacity` tokens."""

    limiter = _limiter(fake_clock, "strict", capacity=3.0)

    async def _scenario() -> None:
        """Spend one token and then idle for a long time."""

        await limiter.acquire()

    asyncio.run(_scenario())
    fake_clock.advance(100.0)

    assert limiter.available_tokens() == 3.0
