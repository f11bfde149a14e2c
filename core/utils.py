"""
Frame timing helpers for the acquisition loop.
"""

import time
from collections import deque
from typing import Deque


class RollingAverage:
    """Rolling average over the last N values."""

    def __init__(self, maxlen: int = 30) -> None:
        self._values: Deque[float] = deque(maxlen=maxlen)

    def add(self, value: float) -> None:
        self._values.append(value)

    @property
    def average(self) -> float:
        if not self._values:
            return 0.0
        return sum(self._values) / len(self._values)

    def clear(self) -> None:
        self._values.clear()


class FPSCounter:
    """Acquisition rate and per-frame interval, ticked once per submitted frame."""

    def __init__(self, rolling_size: int = 30, clock=time.perf_counter) -> None:
        self._clock = clock
        self._last_time: float | None = None
        self._last_interval: float | None = None
        self._rolling = RollingAverage(maxlen=rolling_size)

    def tick(self) -> tuple[float, float]:
        """Returns (fps, interval_ms) since the previous tick."""
        now = self._clock()
        interval_ms = 0.0
        if self._last_time is not None:
            dt = now - self._last_time
            interval_ms = dt * 1000.0
            self._last_interval = dt
            self._rolling.add(interval_ms)
        self._last_time = now
        fps = 1.0 / self._last_interval if self._last_interval else 0.0
        return fps, interval_ms

    @property
    def rolling_average_ms(self) -> float:
        return self._rolling.average

    def reset(self) -> None:
        self._last_time = None
        self._last_interval = None
        self._rolling.clear()
