"""
Row-block index views.

An IndexView selects a set of (offset, length) blocks out of a base vector
(a full configuration or velocity) and projects it onto the reduced vector
formed by concatenating those blocks in ascending offset order.
"""

from __future__ import annotations

import numpy as np
from numba import njit  # type: ignore[import-untyped]
from numpy.typing import ArrayLike, NDArray

from pathsampler.utils.errors import FailFastError, InvalidRangeError


@njit(cache=True)
def _gather_rows(
    full: np.ndarray, offsets: np.ndarray, lengths: np.ndarray, out: np.ndarray
) -> None:
    """Copy each row block of ``full`` into consecutive slices of ``out``."""
    k = 0
    for i in range(offsets.shape[0]):
        o = offsets[i]
        for j in range(lengths[i]):
            out[k] = full[o + j]
            k += 1


@njit(cache=True)
def _scatter_rows(
    reduced: np.ndarray, offsets: np.ndarray, lengths: np.ndarray, full: np.ndarray
) -> None:
    """Write consecutive slices of ``reduced`` back into the row blocks of ``full``."""
    k = 0
    for i in range(offsets.shape[0]):
        o = offsets[i]
        for j in range(lengths[i]):
            full[o + j] = reduced[k]
            k += 1


class IndexView:
    """
    Ordered, mergeable set of coordinate ranges over a base vector.

    Rows are collected with add_row() and normalized by finalize(): sorted by
    offset, overlapping or adjacent rows merged, zero-length rows dropped.
    restrict()/distribute() may only be used on a finalized view.
    """

    __slots__ = ("_pending", "_offsets", "_lengths", "_nb_indices", "_finalized")

    def __init__(self) -> None:
        self._pending: list[tuple[int, int]] = []
        self._offsets: NDArray[np.int64] = np.zeros(0, dtype=np.int64)
        self._lengths: NDArray[np.int64] = np.zeros(0, dtype=np.int64)
        self._nb_indices = 0
        self._finalized = False

    def __repr__(self) -> str:
        state = "finalized" if self._finalized else "pending"
        return f"IndexView(rows={self._pending!r}, {state})"

    # ------------------------------------------------------------------
    # Building
    # ------------------------------------------------------------------

    def add_row(self, offset: int, length: int) -> IndexView:
        """Append the half-open range [offset, offset + length)."""
        offset = int(offset)
        length = int(length)
        if length < 0:
            raise InvalidRangeError(f"row length must be >= 0, got {length}")
        if offset < 0:
            raise InvalidRangeError(f"row offset must be >= 0, got {offset}")
        self._pending.append((offset, length))
        self._finalized = False
        return self

    def finalize(self) -> IndexView:
        """Sort and merge rows, then cache the selected length."""
        merged: list[list[int]] = []
        for offset, length in sorted(r for r in self._pending if r[1] > 0):
            if merged and offset <= merged[-1][0] + merged[-1][1]:
                last = merged[-1]
                end = max(last[0] + last[1], offset + length)
                last[1] = end - last[0]
            else:
                merged.append([offset, length])

        self._pending = [(o, n) for o, n in merged]
        self._offsets = np.array([o for o, _ in merged], dtype=np.int64)
        self._lengths = np.array([n for _, n in merged], dtype=np.int64)
        self._nb_indices = int(self._lengths.sum())
        self._finalized = True
        return self

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def is_finalized(self) -> bool:
        return self._finalized

    @property
    def rows(self) -> tuple[tuple[int, int], ...]:
        """Rows as added, or merged rows once finalized."""
        return tuple(self._pending)

    @property
    def nb_indices(self) -> int:
        self._check_finalized()
        return self._nb_indices

    def indices(self) -> NDArray[np.int64]:
        """Full-vector index of each reduced coordinate, in reduced order."""
        self._check_finalized()
        if self._nb_indices == 0:
            return np.zeros(0, dtype=np.int64)
        return np.concatenate(
            [np.arange(o, o + n, dtype=np.int64) for o, n in self._pending]
        )

    def _check_finalized(self) -> None:
        if not self._finalized:
            raise FailFastError("IndexView used before finalize()")

    def _required_size(self) -> int:
        if self._offsets.shape[0] == 0:
            return 0
        return int(self._offsets[-1] + self._lengths[-1])

    # ------------------------------------------------------------------
    # Projection
    # ------------------------------------------------------------------

    def restrict(self, full: ArrayLike) -> NDArray[np.float64]:
        """Project ``full`` onto the reduced vector."""
        self._check_finalized()
        out = np.empty(self._nb_indices, dtype=np.float64)
        return self.restrict_into(full, out)

    def restrict_into(
        self, full: ArrayLike, out: NDArray[np.float64]
    ) -> NDArray[np.float64]:
        """Project ``full`` into the caller-provided buffer ``out``."""
        self._check_finalized()
        src = np.ascontiguousarray(full, dtype=np.float64)
        if src.shape[0] < self._required_size():
            raise FailFastError(
                f"vector of size {src.shape[0]} is too short for view "
                f"ending at {self._required_size()}"
            )
        if out.shape[0] != self._nb_indices:
            raise FailFastError(
                f"output buffer has size {out.shape[0]}, expected {self._nb_indices}"
            )
        _gather_rows(src, self._offsets, self._lengths, out)
        return out

    def distribute(
        self, reduced: ArrayLike, full: NDArray[np.float64]
    ) -> NDArray[np.float64]:
        """Write ``reduced`` back into ``full``; unselected entries are untouched."""
        self._check_finalized()
        src = np.ascontiguousarray(reduced, dtype=np.float64)
        if src.shape[0] != self._nb_indices:
            raise FailFastError(
                f"reduced vector has size {src.shape[0]}, expected {self._nb_indices}"
            )
        if full.dtype != np.float64:
            raise FailFastError(f"target vector must be float64, got {full.dtype}")
        if full.shape[0] < self._required_size():
            raise FailFastError(
                f"vector of size {full.shape[0]} is too short for view "
                f"ending at {self._required_size()}"
            )
        _scatter_rows(src, self._offsets, self._lengths, full)
        return full
