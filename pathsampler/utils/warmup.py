"""
JIT warmup utilities.

Call warmup_jit() on startup to compile the numba kernels before the first
compute(). With cache=True this is fast once the on-disk cache exists.
"""

import logging
import time

import numpy as np

from pathsampler.sampler.index_view import _gather_rows, _scatter_rows
from pathsampler.server.loop_timer import _compute_period_stats

logger = logging.getLogger(__name__)


def warmup_jit() -> float:
    """
    Pre-compile all numba JIT functions by calling them with dummy data.

    Returns the time taken in seconds.
    """
    logger.info("Warming JIT...")
    start = time.perf_counter()

    full = np.zeros(8, dtype=np.float64)
    reduced = np.zeros(4, dtype=np.float64)
    offsets = np.array([0, 4], dtype=np.int64)
    lengths = np.array([2, 2], dtype=np.int64)

    # pathsampler/sampler/index_view.py
    _gather_rows(full, offsets, lengths, reduced)
    _scatter_rows(reduced, offsets, lengths, full)

    # pathsampler/server/loop_timer.py
    _compute_period_stats(full, full.shape[0])

    elapsed = time.perf_counter() - start
    logger.info("JIT warmup done in %.3fs", elapsed)
    return elapsed
