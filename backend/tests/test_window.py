import asyncio

import pytest

from report_limiter.rate_limit import AccessLimiter
from report_limiter.window import WindowResetter


def test_tick_clears_counts_only():
    limiter = AccessLimiter()
    limiter.should_limit("a", 3, 60)
    limiter.should_limit("b", 3, 60)
    resetter = WindowResetter(limiter, interval_seconds=60)

    assert resetter.tick() == 2

    assert limiter.count_for("a") is None
    assert limiter.count_for("b") is None
    assert limiter.last_access_for("a") is not None
    assert len(limiter) == 2


def test_report_after_tick_starts_new_window():
    limiter = AccessLimiter()
    for _ in range(3):
        limiter.should_limit("a", 3, 60)
    assert limiter.should_limit("a", 3, 60).limited is True

    WindowResetter(limiter, interval_seconds=60).tick()
    decision = limiter.should_limit("a", 3, 60)

    assert decision.limited is False
    assert decision.count == 1


def test_rejects_non_positive_interval():
    with pytest.raises(ValueError):
        WindowResetter(AccessLimiter(), interval_seconds=0)


def test_background_loop_resets_counts():
    limiter = AccessLimiter()

    async def scenario() -> None:
        resetter = WindowResetter(limiter, interval_seconds=0.05)
        limiter.should_limit("a", 1, 60)
        await resetter.start()
        assert resetter.running
        await asyncio.sleep(0.2)
        await resetter.stop()
        assert not resetter.running

    asyncio.run(scenario())

    assert limiter.count_for("a") is None
    assert limiter.last_access_for("a") is not None


def test_stop_without_start_is_noop():
    resetter = WindowResetter(AccessLimiter(), interval_seconds=1)
    asyncio.run(resetter.stop())
    assert not resetter.running
