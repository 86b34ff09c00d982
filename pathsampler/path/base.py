"""Continuous-time path contract consumed by the sampler."""

from __future__ import annotations

from abc import ABC, abstractmethod

import numpy as np
from numpy.typing import NDArray

# Tolerance on the time range when deciding whether a time is evaluable
TIME_EPS: float = 1e-9


class Path(ABC):
    """
    A trajectory over a configuration space, parameterized by time.

    eval() reports failure through its boolean result instead of raising, so
    that the caller decides how an unevaluable time is handled.
    """

    @property
    @abstractmethod
    def time_range(self) -> tuple[float, float]: ...

    @property
    @abstractmethod
    def output_size(self) -> int:
        """Size of a configuration returned by eval()."""

    @property
    def output_derivative_size(self) -> int:
        """Size of a vector returned by derivative()."""
        return self.output_size

    @property
    def length(self) -> float:
        t0, t1 = self.time_range
        return t1 - t0

    def contains(self, time: float) -> bool:
        t0, t1 = self.time_range
        return t0 - TIME_EPS <= time <= t1 + TIME_EPS

    def _clamp(self, time: float) -> float:
        t0, t1 = self.time_range
        return min(max(time, t0), t1)

    @abstractmethod
    def eval(self, time: float) -> tuple[NDArray[np.float64], bool]:
        """Configuration at ``time`` and whether the evaluation succeeded."""

    @abstractmethod
    def derivative(self, time: float, order: int) -> NDArray[np.float64]:
        """``order``-th time derivative at ``time`` (order >= 1)."""
