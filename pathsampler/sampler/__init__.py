"""
Sampling core: index views, observation targets, their registry and the
Sampler that ties them to a path, a kinematic model and a transport.
"""

from pathsampler.sampler.discretization import Sampler
from pathsampler.sampler.index_view import IndexView
from pathsampler.sampler.registry import TargetRegistry
from pathsampler.sampler.targets import (
    CenterOfMassTarget,
    ComputationOption,
    FrameTarget,
)

__all__ = [
    "Sampler",
    "IndexView",
    "TargetRegistry",
    "CenterOfMassTarget",
    "ComputationOption",
    "FrameTarget",
]
