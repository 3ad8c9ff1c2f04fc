# File: tests/test_throttle.py
import pytest

from mirrorget.crawler.throttle import RateLimiter


def test_disabled_limiter_never_waits():
    limiter = RateLimiter(0)
    assert not limiter.enabled
    assert limiter.delay_for(1024, 10**9, 0.001) == 0.0


def test_no_delay_before_first_byte():
    assert RateLimiter(100).delay_for(0, 0, 0.0) == 0.0


def test_delay_proportional_to_chunk_when_over_budget():
    limiter = RateLimiter(2048)
    # 4096 B in 1 s is above 2048 B/s
    assert limiter.delay_for(1024, 4096, 1.0) == pytest.approx(0.5)


def test_delay_is_truncated_to_milliseconds():
    limiter = RateLimiter(3000)
    assert limiter.delay_for(1000, 10_000, 1.0) == pytest.approx(0.333)


def test_no_delay_within_budget():
    assert RateLimiter(2048).delay_for(1024, 1024, 1.0) == 0.0


def test_negative_rate_rejected():
    with pytest.raises(ValueError):
        RateLimiter(-1)


@pytest.mark.asyncio()
async def test_throttle_sleeps_with_injected_clock():
    slept = []

    async def fake_sleep(seconds):
        slept.append(seconds)

    limiter = RateLimiter(1024, sleep=fake_sleep)
    assert await limiter.throttle(1024, 2048, 0.5) == pytest.approx(1.0)
    assert await limiter.throttle(1024, 1024, 2.0) == 0.0
    assert slept == [pytest.approx(1.0)]
