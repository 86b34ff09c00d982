"""
Kinematic model interface consumed by the sampler.

The sampler never talks to a dynamics library directly. It pushes q/v into a
KinematicModel, asks for one batched kinematics update per tick, then reads
frame placements/velocities and center-of-mass quantities back out.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum, IntFlag

import numpy as np
import sophuspy as sp
from numpy.typing import ArrayLike, NDArray


class ConfigurationSpaceKind(Enum):
    """Configuration space of a single joint."""

    EUCLIDEAN = "R^n"
    SO2 = "SO(2)"
    SO3 = "SO(3)"
    SE2 = "SE(2)"
    SE3 = "SE(3)"
    R2xSO2 = "R^2 x SO(2)"
    R3xSO3 = "R^3 x SO(3)"
    OTHER = "other"

    @property
    def is_floating_base(self) -> bool:
        """True for the free-flyer parameterizations (translation + rotation)."""
        return self in FLOATING_BASE_KINDS


FLOATING_BASE_KINDS = frozenset(
    {
        ConfigurationSpaceKind.SE3,
        ConfigurationSpaceKind.R3xSO3,
        ConfigurationSpaceKind.SE2,
        ConfigurationSpaceKind.R2xSO2,
    }
)


class ComQuantity(IntFlag):
    """Quantities a CenterOfMassComputation can be asked to refresh."""

    NONE = 0
    POSITION = 1
    JACOBIAN = 2
    ALL = POSITION | JACOBIAN


@dataclass(slots=True, frozen=True)
class JointInfo:
    """Joint metadata needed to build configuration/velocity index views."""

    name: str
    index: int
    rank_in_configuration: int
    rank_in_velocity: int
    config_size: int
    number_dof: int
    kind: ConfigurationSpaceKind = ConfigurationSpaceKind.EUCLIDEAN


class CenterOfMassComputation(ABC):
    """
    Handle on a center-of-mass computation bound to a model's shared state.

    compute() must be called after the model's kinematics were updated for the
    current configuration; position()/jacobian() return the last computed
    values.
    """

    @abstractmethod
    def compute(self, quantities: ComQuantity) -> None: ...

    @abstractmethod
    def position(self) -> NDArray[np.float64]:
        """Center of mass in the world frame, shape (3,)."""

    @abstractmethod
    def jacobian(self) -> NDArray[np.float64]:
        """Center-of-mass Jacobian, shape (3, nv)."""


class KinematicModel(ABC):
    """Single shared mutable model; callers serialize access to it."""

    @abstractmethod
    def configuration_size(self) -> int: ...

    @abstractmethod
    def velocity_dimension(self) -> int: ...

    @abstractmethod
    def get_joint_by_name(self, name: str) -> JointInfo:
        """Raises UnknownJointError when the model has no such joint."""

    @abstractmethod
    def exist_frame(self, name: str) -> bool: ...

    @abstractmethod
    def get_frame_id(self, name: str) -> int:
        """Raises UnknownFrameError when the model has no such frame."""

    @abstractmethod
    def set_configuration(self, q: ArrayLike) -> None: ...

    @abstractmethod
    def set_velocity(self, v: ArrayLike) -> None: ...

    @abstractmethod
    def compute_frame_kinematics(self) -> None:
        """Forward kinematics and frame placements for the current q/v."""

    @abstractmethod
    def frame_placement(self, frame_index: int) -> sp.SE3:
        """World placement of a frame after compute_frame_kinematics()."""

    @abstractmethod
    def joint_placement(self, joint_index: int) -> sp.SE3:
        """World placement of a joint after compute_frame_kinematics()."""

    @abstractmethod
    def frame_velocity(self, frame_index: int) -> NDArray[np.float64]:
        """Spatial velocity [linear, angular] of a frame, expressed in that frame."""
