from __future__ import annotations

import time
from collections.abc import Callable
from typing import Protocol


class Clock(Protocol):
    """Monotonic clock abstraction.

    Core logic depends on this interface rather than calling real time directly.
    """

    def now(self) -> float:
        """Return monotonic seconds."""


class RealClock:
    """Production clock backed by time.monotonic()."""

    def now(self) -> float:
        return time.monotonic()


class SecondTicker:
    """Turns monotonic clock time into whole-second tick callbacks.

    The UI shell pumps this once per frame; every full second that elapsed
    since the previous tick results in exactly one call to ``on_tick``.
    Fractional remainders are carried over, so a slow frame never loses or
    doubles a second.
    """

    def __init__(self, *, clock: Clock, on_tick: Callable[[], object]) -> None:
        self._clock = clock
        self._on_tick = on_tick
        self._last_s = clock.now()

    def restart(self) -> None:
        self._last_s = self._clock.now()

    def pump(self) -> int:
        """Deliver pending ticks. Returns how many were delivered."""

        now = self._clock.now()
        delivered = 0
        while now - self._last_s >= 1.0:
            self._last_s += 1.0
            self._on_tick()
            delivered += 1
        return delivered
