"""
KinematicModel backed by pinocchio.

Wraps a ``pinocchio.Model`` and its ``Data``. The Data object is the shared
mutable state: compute_frame_kinematics() refreshes oMi/oMf/v, and the
center-of-mass handles read/write the same Data.
"""

from __future__ import annotations

import logging

import numpy as np
import pinocchio as pin
import sophuspy as sp
from numpy.typing import ArrayLike, NDArray

from pathsampler.model.base import (
    CenterOfMassComputation,
    ComQuantity,
    ConfigurationSpaceKind,
    JointInfo,
    KinematicModel,
)
from pathsampler.utils.errors import UnknownFrameError, UnknownJointError
from pathsampler.utils.se3_utils import se3_from_rotation

logger = logging.getLogger(__name__)

_KIND_BY_SHORTNAME: dict[str, ConfigurationSpaceKind] = {
    "JointModelFreeFlyer": ConfigurationSpaceKind.SE3,
    "JointModelPlanar": ConfigurationSpaceKind.SE2,
    "JointModelSpherical": ConfigurationSpaceKind.SO3,
    "JointModelRUBX": ConfigurationSpaceKind.SO2,
    "JointModelRUBY": ConfigurationSpaceKind.SO2,
    "JointModelRUBZ": ConfigurationSpaceKind.SO2,
    "JointModelRevoluteUnboundedUnaligned": ConfigurationSpaceKind.SO2,
}


def _joint_kind(joint) -> ConfigurationSpaceKind:
    kind = _KIND_BY_SHORTNAME.get(joint.shortname())
    if kind is not None:
        return kind
    return (
        ConfigurationSpaceKind.EUCLIDEAN
        if joint.nq == joint.nv
        else ConfigurationSpaceKind.OTHER
    )


class PinocchioModel(KinematicModel):
    """Pinocchio model + data pair exposing the sampler's model contract."""

    def __init__(self, model: pin.Model, data: pin.Data | None = None) -> None:
        self.model = model
        self.data = data if data is not None else model.createData()
        self._q = pin.neutral(model)
        self._v = np.zeros(model.nv)

    @classmethod
    def from_urdf(cls, urdf_path: str, floating_base: bool = False) -> PinocchioModel:
        """Load a URDF, optionally under a free-flyer root joint."""
        if floating_base:
            model = pin.buildModelFromUrdf(urdf_path, pin.JointModelFreeFlyer())
        else:
            model = pin.buildModelFromUrdf(urdf_path)
        logger.info(
            "Loaded model '%s' from %s (nq=%d, nv=%d, frames=%d)",
            model.name,
            urdf_path,
            model.nq,
            model.nv,
            len(model.frames),
        )
        return cls(model)

    @property
    def q(self) -> NDArray[np.float64]:
        return self._q

    @property
    def v(self) -> NDArray[np.float64]:
        return self._v

    def configuration_size(self) -> int:
        return self.model.nq

    def velocity_dimension(self) -> int:
        return self.model.nv

    def get_joint_by_name(self, name: str) -> JointInfo:
        if not self.model.existJointName(name):
            raise UnknownJointError(name)
        index = self.model.getJointId(name)
        joint = self.model.joints[index]
        return JointInfo(
            name=name,
            index=index,
            rank_in_configuration=joint.idx_q,
            rank_in_velocity=joint.idx_v,
            config_size=joint.nq,
            number_dof=joint.nv,
            kind=_joint_kind(joint),
        )

    def exist_frame(self, name: str) -> bool:
        return bool(self.model.existFrame(name))

    def get_frame_id(self, name: str) -> int:
        if not self.model.existFrame(name):
            raise UnknownFrameError(name)
        return int(self.model.getFrameId(name))

    def set_configuration(self, q: ArrayLike) -> None:
        self._q = np.array(q, dtype=np.float64)

    def set_velocity(self, v: ArrayLike) -> None:
        self._v = np.array(v, dtype=np.float64)

    def compute_frame_kinematics(self) -> None:
        pin.forwardKinematics(self.model, self.data, self._q, self._v)
        pin.updateFramePlacements(self.model, self.data)

    def frame_placement(self, frame_index: int) -> sp.SE3:
        oMf = self.data.oMf[frame_index]
        return se3_from_rotation(oMf.rotation, oMf.translation)

    def joint_placement(self, joint_index: int) -> sp.SE3:
        oMi = self.data.oMi[joint_index]
        return se3_from_rotation(oMi.rotation, oMi.translation)

    def frame_velocity(self, frame_index: int) -> NDArray[np.float64]:
        motion = pin.getFrameVelocity(self.model, self.data, frame_index)
        return np.array(motion.vector, dtype=np.float64)

    def center_of_mass(self, root_joint: str | int = 0) -> PinocchioCenterOfMass:
        """Handle on the COM of the whole model (0) or of a joint's subtree."""
        if isinstance(root_joint, str):
            root_joint = self.get_joint_by_name(root_joint).index
        return PinocchioCenterOfMass(self, root_joint)


class PinocchioCenterOfMass(CenterOfMassComputation):
    """COM of the subtree rooted at ``root_joint`` (0 = whole model)."""

    def __init__(self, model: PinocchioModel, root_joint: int = 0) -> None:
        self._model = model
        self.root_joint = int(root_joint)
        self._position = np.zeros(3)
        self._jacobian = np.zeros((3, model.velocity_dimension()))

    def __repr__(self) -> str:
        return f"PinocchioCenterOfMass(root_joint={self.root_joint})"

    def compute(self, quantities: ComQuantity) -> None:
        model, data, q = self._model.model, self._model.data, self._model.q
        if self.root_joint == 0:
            if quantities & ComQuantity.JACOBIAN:
                # Also refreshes data.com[0]
                self._jacobian = np.array(pin.jacobianCenterOfMass(model, data, q))
            elif quantities & ComQuantity.POSITION:
                pin.centerOfMass(model, data, q)
            if quantities & ComQuantity.POSITION:
                self._position = np.array(data.com[0])
            return

        if quantities & ComQuantity.POSITION:
            pin.centerOfMass(model, data, q, True)
            self._position = np.array(data.com[self.root_joint])
        if quantities & ComQuantity.JACOBIAN:
            self._jacobian = np.array(
                pin.jacobianSubtreeCenterOfMass(model, data, q, self.root_joint)
            )

    def position(self) -> NDArray[np.float64]:
        return self._position

    def jacobian(self) -> NDArray[np.float64]:
        return self._jacobian
