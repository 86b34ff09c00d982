"""
Joint-space paths.

SplinePath interpolates time-stamped waypoints with a C2 cubic spline;
QuinticPath is a rest-to-rest quintic time scaling between two
configurations. Both treat the configuration space as Euclidean, so the
derivative size equals the configuration size.
"""

from __future__ import annotations

import logging

import numpy as np
from numpy.typing import ArrayLike, NDArray
from scipy.interpolate import CubicSpline

from pathsampler.path.base import Path

logger = logging.getLogger(__name__)


class SplinePath(Path):
    """
    Cubic spline through waypoints.

    Attributes:
        times: (N,) strictly increasing knot times in seconds
        positions: (N, nq) configurations at the knots
    """

    def __init__(
        self,
        times: ArrayLike,
        positions: ArrayLike,
        bc_type: str = "clamped",
    ) -> None:
        self.times = np.asarray(times, dtype=np.float64)
        self.positions = np.atleast_2d(np.asarray(positions, dtype=np.float64))
        if self.times.ndim != 1 or len(self.times) < 2:
            raise ValueError("SplinePath needs at least two knot times")
        if len(self.times) != len(self.positions):
            raise ValueError(
                f"{len(self.times)} knot times for {len(self.positions)} waypoints"
            )
        if np.any(np.diff(self.times) <= 0.0):
            raise ValueError("knot times must be strictly increasing")
        self._spline = CubicSpline(self.times, self.positions, axis=0, bc_type=bc_type)

    @classmethod
    def from_samples(
        cls, positions: ArrayLike, duration: float, start_time: float = 0.0
    ) -> SplinePath:
        """Spread waypoints uniformly over [start_time, start_time + duration]."""
        positions = np.atleast_2d(np.asarray(positions, dtype=np.float64))
        times = start_time + np.linspace(0.0, duration, len(positions))
        return cls(times, positions)

    @property
    def time_range(self) -> tuple[float, float]:
        return float(self.times[0]), float(self.times[-1])

    @property
    def output_size(self) -> int:
        return self.positions.shape[1]

    def eval(self, time: float) -> tuple[NDArray[np.float64], bool]:
        if not self.contains(time):
            logger.debug("SplinePath: t=%.6f outside %s", time, self.time_range)
            return np.zeros(self.output_size), False
        return np.asarray(self._spline(self._clamp(time)), dtype=np.float64), True

    def derivative(self, time: float, order: int) -> NDArray[np.float64]:
        if order < 1:
            raise ValueError(f"derivative order must be >= 1, got {order}")
        return np.asarray(self._spline(self._clamp(time), nu=order), dtype=np.float64)


def _quintic_scaling(tau: float, T: float) -> tuple[float, float, float]:
    """Quintic time scaling s(t) and its first two derivatives, tau = t / T."""
    s2, s3, s4, s5 = tau**2, tau**3, tau**4, tau**5
    s = 10 * s3 - 15 * s4 + 6 * s5
    sdot = (30 * s2 - 60 * s3 + 30 * s4) / T
    sddot = (60 * tau - 180 * s2 + 120 * s3) / (T * T)
    return s, sdot, sddot


class QuinticPath(Path):
    """Rest-to-rest motion from ``start`` to ``end`` in ``duration`` seconds."""

    def __init__(
        self,
        start: ArrayLike,
        end: ArrayLike,
        duration: float,
        start_time: float = 0.0,
    ) -> None:
        if duration <= 0.0:
            raise ValueError(f"duration must be > 0, got {duration}")
        self.start = np.asarray(start, dtype=np.float64)
        self.end = np.asarray(end, dtype=np.float64)
        if self.start.shape != self.end.shape:
            raise ValueError("start and end configurations differ in size")
        self.duration = float(duration)
        self.start_time = float(start_time)
        self._delta = self.end - self.start

    @property
    def time_range(self) -> tuple[float, float]:
        return self.start_time, self.start_time + self.duration

    @property
    def output_size(self) -> int:
        return self.start.shape[0]

    def _scaling(self, time: float) -> tuple[float, float, float]:
        tau = (self._clamp(time) - self.start_time) / self.duration
        return _quintic_scaling(tau, self.duration)

    def eval(self, time: float) -> tuple[NDArray[np.float64], bool]:
        if not self.contains(time):
            return np.zeros(self.output_size), False
        s, _, _ = self._scaling(time)
        return self.start + s * self._delta, True

    def derivative(self, time: float, order: int) -> NDArray[np.float64]:
        _, sdot, sddot = self._scaling(time)
        if order == 1:
            return sdot * self._delta
        if order == 2:
            return sddot * self._delta
        raise ValueError(f"QuinticPath supports derivative orders 1 and 2, got {order}")
