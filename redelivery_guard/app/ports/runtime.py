"""Ports for wall-clock time and blocking waits, so the guard can run without real delays in tests."""
from __future__ import annotations

from typing import Protocol


class Clock(Protocol):
    def now_ms(self) -> int:
        """Current wall-clock time in ms since epoch."""
        ...


class Sleeper(Protocol):
    def sleep(self, seconds: float) -> None:
        """Block the calling thread. May raise InterruptedError when woken externally."""
        ...
