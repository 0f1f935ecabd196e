"""Tests for the lookup CircuitBreaker (microsoc.reputation.circuit_breaker)."""

from __future__ import annotations

from microsoc.reputation import CircuitBreaker


class FakeClock:
    def __init__(self, now: float = 1_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def make_breaker(threshold: int = 3, cooldown: float = 60.0, clock=None) -> CircuitBreaker:
    return CircuitBreaker(threshold=threshold, cooldown_seconds=cooldown, clock=clock or FakeClock())


class TestCircuitBreakerState:
    def test_closed_by_default(self):
        cb = make_breaker()
        assert cb.is_open is False
        assert cb.consecutive_failures == 0
        assert cb.open_at is None

    def test_stays_closed_below_threshold(self):
        cb = make_breaker(threshold=3)
        cb.record_failure()
        cb.record_failure()
        assert cb.is_open is False

    def test_opens_at_threshold(self):
        clock = FakeClock(500.0)
        cb = make_breaker(threshold=3, clock=clock)
        for _ in range(3):
            cb.record_failure()
        assert cb.is_open is True
        assert cb.open_at == 500.0

    def test_opens_only_once_per_trip(self):
        clock = FakeClock()
        cb = make_breaker(threshold=2, clock=clock)
        cb.record_failure()
        cb.record_failure()
        first_open_at = cb.open_at
        clock.now += 5
        cb.record_failure()
        assert cb.open_at == first_open_at

    def test_resets_after_cooldown(self):
        clock = FakeClock()
        cb = make_breaker(threshold=1, cooldown=60.0, clock=clock)
        cb.record_failure()
        clock.now += 59
        assert cb.is_open is True
        clock.now += 1
        assert cb.is_open is False
        assert cb.open_at is None
        assert cb.consecutive_failures == 0


class TestCircuitBreakerTransitions:
    def test_success_resets_counter(self):
        cb = make_breaker(threshold=5)
        cb.record_failure()
        cb.record_failure()
        cb.record_success()
        assert cb.consecutive_failures == 0

    def test_success_between_failures_restarts_sequence(self):
        cb = make_breaker(threshold=3)
        cb.record_failure()
        cb.record_failure()
        cb.record_success()
        cb.record_failure()
        assert cb.is_open is False
        assert cb.consecutive_failures == 1
