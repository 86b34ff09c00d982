"""
pathsampler

Real-time trajectory sampling: evaluate a continuous path at a given time,
run forward kinematics on a shared robot model and publish joint vectors,
operational-frame placements/velocities and center-of-mass quantities.

Key components:
- Sampler: compute(t) under one lock, target registration, publishing lifecycle
- IndexView: row-block projection between full and reduced vectors
- ComputationOption: Position / Derivative / Acceleration bit flags
- SamplerLoop: fixed-rate driver on a background thread
- InProcessTransport / UdpTransport: sink transports

Concrete model adapters live in pathsampler.model.pinocchio_model and
pathsampler.model.toolbox_model.
"""

from ._version import __version__
from .path import Path, QuinticPath, SplinePath
from .publishing import InProcessTransport, UdpTransport
from .sampler import ComputationOption, IndexView, Sampler
from .server import SamplerLoop
from .utils.errors import (
    EvaluationFailedError,
    NotInitializedError,
    NotReadyError,
    SamplerError,
)

__all__ = [
    "__version__",
    "Sampler",
    "IndexView",
    "ComputationOption",
    "SamplerLoop",
    "Path",
    "QuinticPath",
    "SplinePath",
    "InProcessTransport",
    "UdpTransport",
    "SamplerError",
    "NotReadyError",
    "NotInitializedError",
    "EvaluationFailedError",
]
