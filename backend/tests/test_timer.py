import pytest

from dealgame.domain.timer import DEFAULT_BUDGET_S, SessionTimer, TimerStatus, tick, whole_seconds


def test_default_budget_is_five_minutes():
    t = SessionTimer.start()
    assert t.budget_s == DEFAULT_BUDGET_S == 300
    assert t.remaining_s == 300
    assert t.status == TimerStatus.running


def test_expires_exactly_once():
    t = SessionTimer.start(3)
    fired = []
    for _ in range(10):
        t, expired_now = tick(t, decided=False)
        fired.append(expired_now)
    assert fired.count(True) == 1
    assert fired[2] is True
    assert t.expired and t.remaining_s == 0


def test_decision_stops_the_clock():
    t = SessionTimer.start(5)
    t, _ = tick(t, decided=False)
    stopped, expired_now = tick(t, decided=True)
    assert stopped is t
    assert not expired_now
    assert t.elapsed_s == 1


def test_non_positive_budget_rejected():
    with pytest.raises(ValueError):
        SessionTimer.start(0)


def test_whole_seconds_carries_fractions_between_samples():
    carry = 0.0
    total = 0
    for elapsed in (0.75, 0.75, 0.75, 0.75):
        ticks, carry = whole_seconds(elapsed, carry)
        total += ticks
    assert total == 3
    assert carry == 0.0


def test_whole_seconds_ignores_negative_elapsed():
    assert whole_seconds(-2.0, 0.25) == (0, 0.25)
