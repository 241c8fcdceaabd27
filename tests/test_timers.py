"""Behavior tests for the virtual clock used by simulations."""

from segstitch.playback.timers import ManualTimerService


def test_timers_fire_in_due_then_scheduling_order() -> None:
    """Equal due times fire in the order they were scheduled."""
    clock = ManualTimerService()
    fired: list[str] = []
    clock.call_later(2, lambda: fired.append("late"))
    clock.call_later(1, lambda: fired.append("first"))
    clock.call_later(1, lambda: fired.append("second"))

    assert clock.advance(1.5) == 2
    assert fired == ["first", "second"]
    assert clock.now == 1.5
    assert clock.run_until_idle() == 1
    assert fired == ["first", "second", "late"]
    assert clock.now == 2


def test_cancelled_timers_never_fire() -> None:
    """Cancelling a timer removes it from the pending set."""
    clock = ManualTimerService()
    fired: list[int] = []
    kept = clock.call_later(3, lambda: fired.append(3))
    dropped = clock.call_later(1, lambda: fired.append(1))

    dropped.cancel()

    assert clock.pending() == [kept]
    assert clock.advance(5) == 1
    assert fired == [3]


def test_rearming_leaves_no_cancelled_timers_behind() -> None:
    """Re-arming many times keeps only the live timer once time moves on."""
    clock = ManualTimerService()
    fired: list[int] = []
    timer = clock.call_later(0.5, lambda: fired.append(0))
    for step in range(1, 5000):
        timer.cancel()
        timer = clock.call_later(
            0.5 + step * 1e-4, lambda step=step: fired.append(step)
        )

    assert clock.advance(10) == 1
    assert fired == [4999]
    assert clock._queue == []


def test_negative_delays_fire_immediately_on_advance() -> None:
    clock = ManualTimerService(start=5.0)
    fired: list[bool] = []
    clock.call_later(-1, lambda: fired.append(True))

    assert clock.advance(0) == 1
    assert fired == [True]
