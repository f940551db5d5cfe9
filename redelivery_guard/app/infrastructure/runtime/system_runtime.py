"""Runtime adapters: system wall clock and thread-blocking sleepers."""
from __future__ import annotations

import threading
import time


class SystemClock:
    """Clock implementation backed by time.time()."""

    def now_ms(self) -> int:
        return int(time.time() * 1000)


class BlockingSleeper:
    """Sleeper implementation backed by time.sleep()."""

    def sleep(self, seconds: float) -> None:
        time.sleep(seconds)


class InterruptibleSleeper:
    """
    Sleeper whose pending waits can be woken from another thread.

    interrupt() wakes every sleep in progress (and any started before reset()),
    which then raises InterruptedError. Useful for consumers that must shut down
    without waiting out a throttling delay.
    """

    def __init__(self) -> None:
        self._interrupted = threading.Event()

    @property
    def interrupted(self) -> bool:
        return self._interrupted.is_set()

    def sleep(self, seconds: float) -> None:
        if self._interrupted.wait(timeout=seconds):
            raise InterruptedError(f"sleep of {seconds}s interrupted")

    def interrupt(self) -> None:
        self._interrupted.set()

    def reset(self) -> None:
        self._interrupted.clear()
