"""Sliding-window 요청 제한기"""

import pytest

from catalog_sync.rate_limit import RateLimiter


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def test_rejects_after_limit_until_window_rolls_over():
    clock = FakeClock()
    limiter = RateLimiter(limit=3, window=60.0, clock=clock)

    assert [limiter.allow("1.2.3.4") for _ in range(3)] == [True, True, True]
    assert limiter.allow("1.2.3.4") is False
    assert limiter.remaining("1.2.3.4") == 0
    assert limiter.retry_after("1.2.3.4") == pytest.approx(60.0)

    # 다른 키는 독립
    assert limiter.allow("5.6.7.8") is True

    clock.now += 59.0
    assert limiter.allow("1.2.3.4") is False

    clock.now += 1.0
    assert limiter.allow("1.2.3.4") is True
    assert limiter.remaining("1.2.3.4") == 2


def test_rejected_requests_are_not_recorded():
    clock = FakeClock()
    limiter = RateLimiter(limit=1, window=10.0, clock=clock)
    assert limiter.allow("k")
    for _ in range(5):
        clock.now += 1.0
        assert not limiter.allow("k")
    # 첫 요청 기준으로만 만료
    clock.now = 1010.0
    assert limiter.allow("k")


def test_sweep_removes_idle_keys():
    clock = FakeClock()
    limiter = RateLimiter(limit=2, window=5.0, clock=clock)
    limiter.allow("a")
    clock.now += 3.0
    limiter.allow("b")
    assert len(limiter) == 2

    clock.now += 2.5
    assert limiter.sweep() == 1
    assert len(limiter) == 1
    assert limiter.remaining("b") == 1


def test_invalid_limit():
    with pytest.raises(ValueError):
        RateLimiter(limit=0)


def test_allow_sweeps_expired_keys_once_per_window():
    clock = FakeClock()
    limiter = RateLimiter(limit=5, window=10.0, clock=clock)
    for i in range(50):
        limiter.allow(f"10.0.0.{i}")
    assert len(limiter) == 50

    clock.now += 9.0
    limiter.allow("late")
    assert len(limiter) == 51

    clock.now += 1.0
    limiter.allow("later")
    # 1000에 기록된 50개 만료, 1009의 "late"는 남음
    assert len(limiter) == 2
