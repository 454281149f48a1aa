"""Cancellable delayed callbacks and a bounded readiness poll.

A Scheduler belongs to one view. Every callback it starts is keyed; scheduling
a key again replaces the pending callback, and close() cancels everything so
nothing fires against a torn-down view.
"""
from __future__ import annotations
import threading
import time
from typing import Callable, Dict, Optional
from esghub.utils.exception import ViewerNotReady
from esghub.utils.logger import logger

TimerFactory = Callable[[float, Callable[[], None]], "threading.Timer"]


def _default_timer(delay: float, fn: Callable[[], None]) -> threading.Timer:
    t = threading.Timer(delay, fn)
    t.daemon = True
    return t


class Scheduler:
    def __init__(self, timer_factory: Optional[TimerFactory] = None):
        self._timer_factory = timer_factory or _default_timer
        self._timers: Dict[str, object] = {}
        self._lock = threading.Lock()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def call_later(self, key: str, delay: float, fn: Callable[[], None]) -> bool:
        """Run `fn` after `delay` seconds, replacing any pending callback under `key`.

        Returns False (and schedules nothing) once the scheduler is closed.
        """
        with self._lock:
            if self._closed:
                return False
            previous = self._timers.pop(key, None)
            if previous is not None:
                previous.cancel()

            def _run(timer_key=key):
                with self._lock:
                    if self._closed or self._timers.get(timer_key) is not timer:
                        return
                    del self._timers[timer_key]
                fn()

            timer = self._timer_factory(delay, _run)
            self._timers[key] = timer
        timer.start()
        return True

    def cancel(self, key: str) -> bool:
        with self._lock:
            timer = self._timers.pop(key, None)
        if timer is None:
            return False
        timer.cancel()
        return True

    def pending(self, key: str) -> bool:
        with self._lock:
            return key in self._timers

    def close(self) -> None:
        with self._lock:
            self._closed = True
            timers = list(self._timers.values())
            self._timers.clear()
        for t in timers:
            t.cancel()
        logger.debug("Scheduler closed, %d pending callback(s) cancelled", len(timers))


def wait_for(
    predicate: Callable[[], bool],
    interval: float,
    timeout: float,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> None:
    """Poll `predicate` every `interval` seconds until true; ViewerNotReady after `timeout`.

    A predicate that raises counts as not ready.
    """
    deadline = clock() + timeout
    while True:
        try:
            if predicate():
                return
        except Exception as e:
            logger.debug("Readiness check raised: %s", e)
        if clock() >= deadline:
            raise ViewerNotReady(f"Document view not ready after {timeout:.1f}s")
        sleep(interval)
