"""
Periodic driver for a Sampler.

SamplerLoop calls Sampler.compute() once per tick on a background thread,
advancing the sampled time by the loop interval. Ticks that cannot be
sampled (no path, publishing inactive, unevaluable time) are logged and
skipped rather than stopping the loop.
"""

from __future__ import annotations

import logging
import threading
import time

from pathsampler import config as cfg
from pathsampler.sampler.discretization import Sampler
from pathsampler.server.async_logging import AsyncLogHandler
from pathsampler.server.loop_timer import LoopTimer, format_hz_summary
from pathsampler.utils.errors import (
    EvaluationFailedError,
    NotInitializedError,
    NotReadyError,
)

logger = logging.getLogger(__name__)


class SamplerLoop:
    """
    Drive ``sampler.compute(t)`` at a fixed rate.

    Args:
        sampler: The sampler to drive.
        rate_hz: Tick rate (default cfg.SAMPLE_RATE_HZ).
        start_time: First sampled time. Defaults to the start of the path.
        loop: Restart from start_time when the end of the path is passed.
            Defaults to cfg.LOOP_PATH, and to False when that is unset.
        async_logging: Move log output to a listener thread while running.
    """

    def __init__(
        self,
        sampler: Sampler,
        rate_hz: float | None = None,
        start_time: float | None = None,
        loop: bool | None = None,
        async_logging: bool = False,
        stats_log_interval_s: float = 5.0,
    ) -> None:
        self.sampler = sampler
        rate = cfg.SAMPLE_RATE_HZ if rate_hz is None else rate_hz
        if rate <= 0:
            raise ValueError(f"rate_hz must be positive, got {rate}")
        self.interval_s = 1.0 / rate
        self._start_time = start_time
        if loop is None:
            loop = bool(cfg.LOOP_PATH)
        self.loop = loop
        self._stats_log_interval_s = stats_log_interval_s

        self._timer = LoopTimer(self.interval_s)
        self._async_log = AsyncLogHandler("pathsampler") if async_logging else None
        self.shutdown_event = threading.Event()
        self._thread: threading.Thread | None = None

        self.current_time = 0.0
        self.tick_count = 0
        self.skipped_count = 0
        self._skipping = False

    @property
    def metrics(self):
        return self._timer.metrics

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def step(self, t: float) -> bool:
        """Sample once at ``t``. Returns False if the tick was skipped."""
        try:
            self.sampler.compute(t)
        except (NotReadyError, NotInitializedError, EvaluationFailedError) as e:
            self.skipped_count += 1
            # Warn once per run of consecutive skips
            if not self._skipping:
                logger.warning("Skipping ticks from t=%.6f: %s", t, e)
                self._skipping = True
            else:
                logger.debug("Skipped tick at t=%.6f: %s", t, e)
            return False
        if self._skipping:
            logger.info("Sampling resumed at t=%.6f", t)
            self._skipping = False
        self.tick_count += 1
        return True

    def _first_time(self) -> float:
        if self._start_time is not None:
            return self._start_time
        path = self.sampler.path
        return path.time_range[0] if path is not None else 0.0

    def _advance(self, t: float) -> float | None:
        """Next sampled time, or None when the run is over."""
        t += self.interval_s
        path = self.sampler.path
        if path is None:
            return t
        if t > path.time_range[1] and not path.contains(t):
            if not self.loop:
                return None
            return self._first_time()
        return t

    def run(self) -> None:
        """Run the loop in the calling thread until stopped or the path ends."""
        if self._async_log:
            self._async_log.start()
        logger.info("Sampler loop starting at %.1f Hz", 1.0 / self.interval_s)
        self._timer.start()
        last_log = time.perf_counter()
        t: float | None = self._first_time()
        try:
            while not self.shutdown_event.is_set() and t is not None:
                self.current_time = t
                self.step(t)

                now = time.perf_counter()
                if now - last_log >= self._stats_log_interval_s:
                    last_log = now
                    logger.debug(
                        "Sampler loop %s overruns=%d skipped=%d",
                        format_hz_summary(self._timer.metrics),
                        self._timer.metrics.overrun_count,
                        self.skipped_count,
                    )

                t = self._advance(t)
                if t is not None:
                    self._timer.wait_for_next_tick()
        finally:
            logger.info(
                "Sampler loop stopped after %d ticks (%d skipped, %d overruns)",
                self.tick_count,
                self.skipped_count,
                self._timer.metrics.overrun_count,
            )
            if self._async_log:
                self._async_log.stop()

    def start(self) -> bool:
        """
        Run the loop on a daemon thread.

        Returns False without starting while a previous loop thread is alive,
        including one still winding down after a timed-out stop().
        """
        if self.running:
            if self.shutdown_event.is_set():
                logger.warning("Previous sampler loop is still stopping")
            else:
                logger.warning("Sampler loop already running")
            return False
        self.shutdown_event.clear()
        self._thread = threading.Thread(
            target=self.run, name="pathsampler-loop", daemon=True
        )
        self._thread.start()
        return True

    def stop(self, timeout: float | None = 2.0) -> bool:
        """Signal shutdown and wait. Returns False if the thread outlived ``timeout``."""
        self.shutdown_event.set()
        if self._thread is None:
            return True
        self._thread.join(timeout)
        if self._thread.is_alive():
            logger.warning("Sampler loop did not stop within %s s", timeout)
            return False
        self._thread = None
        return True

    def join(self, timeout: float | None = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout)
