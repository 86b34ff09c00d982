"""
Kinematic model adapters.

- KinematicModel / CenterOfMassComputation: the interface the sampler consumes
- PinocchioModel: pinocchio-backed adapter (floating bases, subtree COM)
- ToolboxModel: roboticstoolbox-backed adapter (fixed-base link trees)

The concrete adapters are not re-exported here; import them from their own
modules so that using one backend does not import the other.
"""

from pathsampler.model.base import (
    FLOATING_BASE_KINDS,
    CenterOfMassComputation,
    ComQuantity,
    ConfigurationSpaceKind,
    JointInfo,
    KinematicModel,
)

__all__ = [
    "FLOATING_BASE_KINDS",
    "CenterOfMassComputation",
    "ComQuantity",
    "ConfigurationSpaceKind",
    "JointInfo",
    "KinematicModel",
]
