from __future__ import annotations

import threading
import time
from typing import Protocol, runtime_checkable


@runtime_checkable
class Clock(Protocol):
    """Trusted timestamp source, in whole seconds since the epoch."""

    def now(self) -> int:
        ...


class SystemClock:
    def now(self) -> int:
        return int(time.time())


class ManualClock:
    """A clock that only moves when told to. For tests and simulations."""

    def __init__(self, start: int = 1_700_000_000) -> None:
        self._t = int(start)
        self._lock = threading.Lock()

    def now(self) -> int:
        with self._lock:
            return self._t

    def set(self, t: int) -> None:
        with self._lock:
            self._t = int(t)

    def advance(self, seconds: int) -> int:
        with self._lock:
            self._t += int(seconds)
            return self._t


__all__ = ["Clock", "SystemClock", "ManualClock"]
