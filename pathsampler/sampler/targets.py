"""
Observation targets: what the sampler computes and publishes per tick
beyond the aggregate position/velocity/acceleration vectors.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntFlag
from typing import TYPE_CHECKING

from pathsampler.model.base import ComQuantity

if TYPE_CHECKING:
    from pathsampler.model.base import CenterOfMassComputation
    from pathsampler.publishing.base import Sink


class ComputationOption(IntFlag):
    """Quantities requested for an observation target. Combine with ``|``."""

    NONE = 0
    POSITION = 1
    DERIVATIVE = 2
    ACCELERATION = 4
    POSITION_AND_DERIVATIVE = POSITION | DERIVATIVE


@dataclass
class FrameTarget:
    """An operational frame whose world placement and/or velocity is published."""

    frame_index: int
    option: ComputationOption
    position_sink: Sink | None = None
    derivative_sink: Sink | None = None

    def sinks(self) -> list[Sink]:
        return [s for s in (self.position_sink, self.derivative_sink) if s is not None]


@dataclass(eq=False)
class CenterOfMassTarget:
    """
    A center-of-mass computation whose position and/or velocity is published.

    Identity is the ``com`` handle object itself, never its name.
    """

    com: CenterOfMassComputation
    option: ComputationOption
    position_sink: Sink | None = None
    derivative_sink: Sink | None = None

    def sinks(self) -> list[Sink]:
        return [s for s in (self.position_sink, self.derivative_sink) if s is not None]

    def requested_quantities(self) -> ComQuantity:
        """COM quantities needed to serve this target's option.

        ACCELERATION has no COM counterpart, so an acceleration-only target
        requests nothing and is never computed.
        """
        quantities = ComQuantity.NONE
        if self.option & ComputationOption.POSITION:
            quantities |= ComQuantity.POSITION
        if self.option & ComputationOption.DERIVATIVE:
            quantities |= ComQuantity.JACOBIAN
        return quantities
