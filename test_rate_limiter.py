#!/usr/bin/env python3
"""
Tests for the per-sender cooldown gate
"""
import threading

from replybot.rate_limiter import RateLimiter


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


def test_first_message_is_accepted():
    limiter = RateLimiter(cooldown_seconds=2.0, clock=FakeClock())
    assert limiter.allow("628123") is True


def test_repeat_within_cooldown_is_dropped():
    clock = FakeClock()
    limiter = RateLimiter(cooldown_seconds=2.0, clock=clock)

    assert limiter.allow("628123")
    clock.advance(1.0)
    assert limiter.allow("628123") is False


def test_rejection_does_not_extend_the_window():
    clock = FakeClock()
    limiter = RateLimiter(cooldown_seconds=2.0, clock=clock)

    assert limiter.allow("628123")
    clock.advance(1.5)
    assert not limiter.allow("628123")
    # 2.0s after the accepted message, not after the rejected one
    clock.advance(0.5)
    assert limiter.allow("628123")


def test_senders_are_independent():
    clock = FakeClock()
    limiter = RateLimiter(cooldown_seconds=2.0, clock=clock)

    assert limiter.allow("628111")
    assert limiter.allow("628222")
    clock.advance(0.1)
    assert not limiter.allow("628111")
    assert not limiter.allow("628222")


def test_prunes_idle_senders_past_threshold():
    clock = FakeClock()
    limiter = RateLimiter(cooldown_seconds=2.0, clock=clock, prune_threshold=3, retention_seconds=300.0)

    for sender in ("a", "b", "c"):
        limiter.allow(sender)
    clock.advance(301)
    limiter.allow("d")  # map exceeds threshold -> a, b, c are stale
    limiter.allow("e")

    assert len(limiter) == 2


def test_reset_forgets_everyone():
    clock = FakeClock()
    limiter = RateLimiter(cooldown_seconds=2.0, clock=clock)
    limiter.allow("628123")
    limiter.reset()
    assert limiter.allow("628123")


def test_concurrent_allow_accepts_exactly_once():
    limiter = RateLimiter(cooldown_seconds=60.0)
    results = []
    barrier = threading.Barrier(20)

    def worker():
        barrier.wait()
        results.append(limiter.allow("628123"))

    threads = [threading.Thread(target=worker) for _ in range(20)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert results.count(True) == 1
    assert results.count(False) == 19


if __name__ == "__main__":
    test_first_message_is_accepted()
    test_repeat_within_cooldown_is_dropped()
    test_rejection_does_not_extend_the_window()
    test_senders_are_independent()
    test_prunes_idle_senders_past_threshold()
    test_reset_forgets_everyone()
    test_concurrent_allow_accepts_exactly_once()
    print("✅ All rate limiter tests passed")
