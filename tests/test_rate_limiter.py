import pytest

from citation_resolver.services.rate_limiter import RateLimiter


class _FakeClock:
    def __init__(self) -> None:
        self.now = 100.0
        self.sleeps = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


def test_first_call_never_waits():
    clock = _FakeClock()
    limiter = RateLimiter(0.2, clock=clock, sleep=clock.sleep)

    limiter.wait()

    assert clock.sleeps == []


def test_waits_for_remaining_interval():
    clock = _FakeClock()
    limiter = RateLimiter(0.2, clock=clock, sleep=clock.sleep)

    limiter.wait()
    clock.now += 0.05
    limiter.wait()

    assert clock.sleeps == [pytest.approx(0.15)]


def test_no_wait_when_interval_already_elapsed():
    clock = _FakeClock()
    limiter = RateLimiter(0.2, clock=clock, sleep=clock.sleep)

    limiter.wait()
    clock.now += 1.0
    limiter.wait()

    assert clock.sleeps == []


def test_reset_forgets_previous_call():
    clock = _FakeClock()
    limiter = RateLimiter(0.2, clock=clock, sleep=clock.sleep)

    limiter.wait()
    limiter.reset()
    limiter.wait()

    assert clock.sleeps == []


def test_zero_interval_never_sleeps_and_negative_is_rejected():
    clock = _FakeClock()
    limiter = RateLimiter(0, clock=clock, sleep=clock.sleep)
    limiter.wait()
    limiter.wait()

    assert clock.sleeps == []
    with pytest.raises(ValueError):
        RateLimiter(-0.1)
