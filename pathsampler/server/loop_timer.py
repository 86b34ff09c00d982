"""Deadline scheduling for the sampling loop: hybrid sleep + busy-wait."""

from __future__ import annotations

import time

import numpy as np
from numba import njit  # type: ignore[import-untyped]

from pathsampler import config as cfg

# ~5 seconds of periods, rounded up to a power of 2 for bitmask modulo
_TARGET_BUFFER_SECONDS = 5.0
_raw_size = int(cfg.SAMPLE_RATE_HZ * _TARGET_BUFFER_SECONDS)
BUFFER_SIZE = 1 << max(_raw_size - 1, 1).bit_length()
BUFFER_MASK = BUFFER_SIZE - 1


@njit(cache=True)
def _compute_period_stats(
    samples: np.ndarray, n: int
) -> tuple[float, float, float, float]:
    """Single-pass mean, std, min and max (Welford)."""
    if n == 0:
        return 0.0, 0.0, 0.0, 0.0

    mean = 0.0
    m2 = 0.0
    min_val = samples[0]
    max_val = samples[0]
    for i in range(n):
        x = samples[i]
        delta = x - mean
        mean += delta / (i + 1)
        m2 += delta * (x - mean)
        if x < min_val:
            min_val = x
        if x > max_val:
            max_val = x
    return mean, np.sqrt(m2 / n), min_val, max_val


class LoopMetrics:
    """Rolling period statistics and counters of a LoopTimer."""

    __slots__ = (
        "loop_count",
        "overrun_count",
        "mean_period_s",
        "std_period_s",
        "min_period_s",
        "max_period_s",
        "_buffer",
        "_buffer_idx",
        "_buffer_count",
    )

    def __init__(self) -> None:
        self.loop_count = 0
        self.overrun_count = 0
        self.mean_period_s = 0.0
        self.std_period_s = 0.0
        self.min_period_s = 0.0
        self.max_period_s = 0.0
        self._buffer = np.zeros(BUFFER_SIZE, dtype=np.float64)
        self._buffer_idx = 0
        self._buffer_count = 0

    def record_period(self, period: float) -> None:
        self._buffer[self._buffer_idx] = period
        self._buffer_idx = (self._buffer_idx + 1) & BUFFER_MASK
        if self._buffer_count < BUFFER_SIZE:
            self._buffer_count += 1

    def compute_stats(self) -> None:
        if self._buffer_count == 0:
            return
        mean, std, min_val, max_val = _compute_period_stats(
            self._buffer, self._buffer_count
        )
        self.mean_period_s = mean
        self.std_period_s = std
        self.min_period_s = min_val
        self.max_period_s = max_val


def format_hz_summary(m: LoopMetrics) -> str:
    """Format metrics as 'XXX.XHz σ=X.XXms max=X.XXms'."""
    if m.mean_period_s <= 0:
        return "0.0Hz σ=0.00ms max=0.00ms"
    hz = 1.0 / m.mean_period_s
    return f"{hz:.1f}Hz σ={m.std_period_s * 1000:.2f}ms max={m.max_period_s * 1000:.2f}ms"


class LoopTimer:
    """Deadline-based loop timing with hybrid sleep + busy-loop.

    Uses time.sleep() for most of the wait time, then busy-waits the final
    ``busy_threshold_s`` before each deadline.
    """

    def __init__(
        self,
        interval_s: float,
        busy_threshold_s: float | None = None,
        stats_interval: int = 50,
    ):
        self._interval = interval_s
        self._busy_threshold = (
            busy_threshold_s
            if busy_threshold_s is not None
            else cfg.BUSY_THRESHOLD_MS / 1000.0
        )
        self._stats_interval = max(1, stats_interval)
        self._next_deadline = 0.0
        self._prev_t = 0.0
        self.metrics = LoopMetrics()

    @property
    def interval(self) -> float:
        return self._interval

    def start(self) -> None:
        """Initialize timing. Call once before entering the loop."""
        now = time.perf_counter()
        self._next_deadline = now
        self._prev_t = now

    def wait_for_next_tick(self) -> bool:
        """Wait until the next deadline.

        Returns:
            False if the deadline had already passed (overrun), True otherwise.
        """
        self.metrics.loop_count += 1
        if self.metrics.loop_count % self._stats_interval == 0:
            self.metrics.compute_stats()

        self._next_deadline += self._interval
        sleep_time = self._next_deadline - time.perf_counter()

        if sleep_time > self._busy_threshold:
            time.sleep(sleep_time - self._busy_threshold)

        on_time = sleep_time > 0
        if on_time:
            while time.perf_counter() < self._next_deadline:
                pass
            now = time.perf_counter()
        else:
            # Overrun: restart from now rather than catching up
            self.metrics.overrun_count += 1
            now = time.perf_counter()
            self._next_deadline = now

        self.metrics.record_period(now - self._prev_t)
        self._prev_t = now
        return on_time
