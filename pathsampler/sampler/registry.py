"""
Registry of observation targets.

Two ordered, append-only collections (frames and centers of mass). Adding a
target whose identity is already registered merges the requested option
into the existing entry instead of appending a duplicate.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pathsampler.sampler.targets import (
    CenterOfMassTarget,
    ComputationOption,
    FrameTarget,
)

if TYPE_CHECKING:
    from pathsampler.model.base import CenterOfMassComputation
    from pathsampler.publishing.base import Sink

logger = logging.getLogger(__name__)


class TargetRegistry:
    """Frame and center-of-mass targets keyed by frame index / handle identity."""

    def __init__(self) -> None:
        self._frames: list[FrameTarget] = []
        self._coms: list[CenterOfMassTarget] = []

    def __len__(self) -> int:
        return len(self._frames) + len(self._coms)

    @property
    def frames(self) -> tuple[FrameTarget, ...]:
        return tuple(self._frames)

    @property
    def centers_of_mass(self) -> tuple[CenterOfMassTarget, ...]:
        return tuple(self._coms)

    def find_frame(self, frame_index: int) -> FrameTarget | None:
        for target in self._frames:
            if target.frame_index == frame_index:
                return target
        return None

    def find_center_of_mass(
        self, com: CenterOfMassComputation
    ) -> CenterOfMassTarget | None:
        for target in self._coms:
            if target.com is com:
                return target
        return None

    def merge_frame(
        self, frame_index: int, option: ComputationOption
    ) -> tuple[FrameTarget, bool]:
        """
        Register ``frame_index`` with ``option``.

        Returns:
            (target, created): created is False when an existing entry had its
            option widened to the union of the old and new options.
        """
        target = self.find_frame(frame_index)
        if target is not None:
            target.option = ComputationOption(target.option | option)
            logger.debug("Frame %d option merged -> %r", frame_index, target.option)
            return target, False
        target = FrameTarget(frame_index=frame_index, option=ComputationOption(option))
        self._frames.append(target)
        return target, True

    def merge_center_of_mass(
        self, com: CenterOfMassComputation, option: ComputationOption
    ) -> tuple[CenterOfMassTarget, bool]:
        """Register ``com`` with ``option``; same contract as merge_frame()."""
        target = self.find_center_of_mass(com)
        if target is not None:
            target.option = ComputationOption(target.option | option)
            logger.debug("COM %r option merged -> %r", com, target.option)
            return target, False
        target = CenterOfMassTarget(com=com, option=ComputationOption(option))
        self._coms.append(target)
        return target, True

    def clear(self) -> list[Sink]:
        """Drop every target. Returns the sinks they held so the caller can release them."""
        released: list[Sink] = []
        for frame in self._frames:
            released.extend(frame.sinks())
        for com in self._coms:
            released.extend(com.sinks())
        self._frames.clear()
        self._coms.clear()
        return released
