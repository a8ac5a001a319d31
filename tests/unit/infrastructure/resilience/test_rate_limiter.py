import asyncio
from types import SimpleNamespace

import pytest

from gamereviews.infrastructure.resilience import rate_limiter as rate_limiter_module
from gamereviews.infrastructure.resilience.rate_limiter import RateLimiter

class FakeClock:
    """Monotonic clock advanced only by the patched asyncio.sleep."""

    def __init__(self):
        self.now = 100.0
        self.sleeps = []

    def monotonic(self):
        return self.now

    async def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds

@pytest.fixture
def clock(monkeypatch):
    """Replaces the limiter module's view of time and asyncio, leaving the event loop alone."""
    fake = FakeClock()
    monkeypatch.setattr(rate_limiter_module, "time", SimpleNamespace(monotonic=fake.monotonic))
    monkeypatch.setattr(rate_limiter_module, "asyncio", SimpleNamespace(Lock=asyncio.Lock, sleep=fake.sleep))
    return fake

@pytest.mark.parametrize("max_requests, time_window", [(0, 1.0), (4, 0), (-1, 1.0)])
def test_rejects_non_positive_parameters(max_requests, time_window):
    with pytest.raises(ValueError):
        RateLimiter(max_requests=max_requests, time_window=time_window)

@pytest.mark.asyncio
async def test_permits_up_to_max_requests_without_waiting(clock):
    limiter = RateLimiter(max_requests=4, time_window=1.0)

    for _ in range(4):
        await limiter.acquire()

    assert clock.sleeps == []
    assert await limiter.get_wait_time() == pytest.approx(1.0)

@pytest.mark.asyncio
async def test_fifth_request_waits_for_the_window(clock):
    limiter = RateLimiter(max_requests=4, time_window=1.0)

    for _ in range(5):
        await limiter.acquire()

    assert clock.sleeps == [pytest.approx(1.0)]
    assert clock.now == pytest.approx(101.0)

@pytest.mark.asyncio
async def test_old_timestamps_expire(clock):
    limiter = RateLimiter(max_requests=2, time_window=1.0)
    await limiter.acquire()
    await limiter.acquire()

    clock.now += 1.5

    assert await limiter.get_wait_time() == 0.0
    await limiter.acquire()
    assert clock.sleeps == []

@pytest.mark.asyncio
async def test_concurrent_callers_share_one_budget(clock):
    """Any window of one second holds at most max_requests grants."""
    limiter = RateLimiter(max_requests=4, time_window=1.0)
    granted = []

    async def worker():
        await limiter.acquire()
        granted.append(clock.now)

    await asyncio.gather(*(worker() for _ in range(10)))

    assert len(granted) == 10
    for start in granted:
        in_window = [t for t in granted if start <= t < start + 1.0]
        assert len(in_window) <= 4
