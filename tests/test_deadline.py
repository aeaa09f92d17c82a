# tests/test_deadline.py
from __future__ import annotations

from judit_proxy.orchestrator.deadline import Deadline


class _FakeClock:
    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


def test_expires_after_budget() -> None:
    clock = _FakeClock()
    d = Deadline(2000, clock=clock, sleeper=clock.sleep)

    assert not d.expired()
    assert d.remaining_ms == 2000

    clock.now = 2.0
    assert d.expired()
    assert d.elapsed_ms == 2000
    assert d.remaining_ms == 0


def test_sleep_never_overshoots_the_deadline() -> None:
    clock = _FakeClock()
    d = Deadline(1500, clock=clock, sleeper=clock.sleep)

    assert d.sleep(1000) is True
    assert d.sleep(1000) is False  # only 500 ms were left

    assert clock.sleeps == [1.0, 0.5]
    assert d.elapsed_ms == 1500


def test_zero_budget_is_expired_immediately() -> None:
    clock = _FakeClock()
    d = Deadline(0, clock=clock, sleeper=clock.sleep)

    assert d.expired()
    assert d.sleep(1000) is False
    assert clock.sleeps == []


def test_negative_budget_is_treated_as_zero() -> None:
    clock = _FakeClock()
    assert Deadline(-10, clock=clock, sleeper=clock.sleep).budget_ms == 0
