import pytest
from esghub.utils.exception import ViewerNotReady
from esghub.utils.scheduling import Scheduler, wait_for
from tests.fakes import TimerLog


def test_callback_runs_once_when_fired():
    log = TimerLog()
    calls = []
    scheduler = Scheduler(log)
    scheduler.call_later("k", 1.0, lambda: calls.append(1))
    assert scheduler.pending("k")
    log.timers[0].fire()
    assert calls == [1]
    assert not scheduler.pending("k")


def test_same_key_replaces_pending_callback():
    log = TimerLog()
    calls = []
    scheduler = Scheduler(log)
    scheduler.call_later("k", 1.0, lambda: calls.append("old"))
    scheduler.call_later("k", 1.0, lambda: calls.append("new"))
    assert log.timers[0].cancelled
    for t in log.timers:
        t.fire()
    assert calls == ["new"]


def test_close_cancels_and_blocks_new_callbacks():
    log = TimerLog()
    calls = []
    scheduler = Scheduler(log)
    scheduler.call_later("a", 1.0, lambda: calls.append("a"))
    scheduler.close()
    assert scheduler.call_later("b", 1.0, lambda: calls.append("b")) is False
    for t in log.timers:
        t.fire()
    assert calls == []
    assert len(log.timers) == 1


def test_wait_for_returns_once_ready():
    checks = iter([False, False, True])
    sleeps = []
    wait_for(lambda: next(checks), interval=0.5, timeout=10, sleep=sleeps.append)
    assert sleeps == [0.5, 0.5]


def test_wait_for_times_out():
    now = [0.0]

    def sleep(seconds):
        now[0] += seconds

    with pytest.raises(ViewerNotReady):
        wait_for(lambda: False, interval=1.0, timeout=3.0, sleep=sleep, clock=lambda: now[0])
    assert now[0] == 3.0


def test_wait_for_treats_errors_as_not_ready():
    state = {"n": 0}

    def check():
        state["n"] += 1
        if state["n"] == 1:
            raise RuntimeError("frame detached")
        return True

    wait_for(check, interval=0, timeout=1, sleep=lambda s: None)
    assert state["n"] == 2
