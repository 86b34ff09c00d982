"""
KinematicModel backed by roboticstoolbox.

Fixed-base kinematic trees of 1-DOF revolute/prismatic joints. Frames are the
robot's links (frame index = position in ``robot.links``). Link poses are
evaluated once per compute_frame_kinematics(); frame velocities and COM
Jacobians are assembled from those poses and the joint axes.
"""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np
import roboticstoolbox as rtb
import sophuspy as sp
from numpy.typing import ArrayLike, NDArray
from roboticstoolbox.tools.urdf import URDF

from pathsampler.model.base import (
    CenterOfMassComputation,
    ComQuantity,
    ConfigurationSpaceKind,
    JointInfo,
    KinematicModel,
)
from pathsampler.utils.errors import UnknownFrameError, UnknownJointError
from pathsampler.utils.se3_utils import se3_from_matrix

logger = logging.getLogger(__name__)

_AXES: dict[str, NDArray[np.float64]] = {
    "x": np.array([1.0, 0.0, 0.0]),
    "y": np.array([0.0, 1.0, 0.0]),
    "z": np.array([0.0, 0.0, 1.0]),
}


def load_urdf_robot(urdf_path: str | Path) -> rtb.Robot:
    """Parse a URDF file into a roboticstoolbox Robot."""
    path = Path(urdf_path).resolve()
    urdf = URDF.loadstr(path.read_text(encoding="utf-8"), str(path), base_path=path.parent)
    return rtb.Robot(list(urdf.elinks), name=urdf.name)


class ToolboxModel(KinematicModel):
    """roboticstoolbox Robot exposing the sampler's model contract."""

    def __init__(self, robot: rtb.Robot) -> None:
        self.robot = robot
        self._links = list(robot.links)
        self._frame_ids = {link.name: i for i, link in enumerate(self._links)}
        self._joint_links = {}
        for link in self._links:
            if link.isjoint:
                self._joint_links[link.name] = link
                joint_name = getattr(link, "joint_name", None)
                if joint_name:
                    self._joint_links.setdefault(joint_name, link)
        self._q = np.zeros(robot.n)
        self._v = np.zeros(robot.n)
        self._poses: list[NDArray[np.float64]] = [np.eye(4) for _ in self._links]

    @classmethod
    def from_urdf(cls, urdf_path: str | Path) -> ToolboxModel:
        robot = load_urdf_robot(urdf_path)
        logger.info("Loaded robot '%s' from %s (n=%d)", robot.name, urdf_path, robot.n)
        return cls(robot)

    @property
    def q(self) -> NDArray[np.float64]:
        return self._q

    @property
    def v(self) -> NDArray[np.float64]:
        return self._v

    @property
    def links(self) -> list:
        return self._links

    def configuration_size(self) -> int:
        return self.robot.n

    def velocity_dimension(self) -> int:
        return self.robot.n

    def get_joint_by_name(self, name: str) -> JointInfo:
        link = self._joint_links.get(name)
        if link is None:
            raise UnknownJointError(name)
        return JointInfo(
            name=name,
            index=int(link.jindex),
            rank_in_configuration=int(link.jindex),
            rank_in_velocity=int(link.jindex),
            config_size=1,
            number_dof=1,
            kind=ConfigurationSpaceKind.EUCLIDEAN,
        )

    def exist_frame(self, name: str) -> bool:
        return name in self._frame_ids

    def get_frame_id(self, name: str) -> int:
        try:
            return self._frame_ids[name]
        except KeyError:
            raise UnknownFrameError(name) from None

    def set_configuration(self, q: ArrayLike) -> None:
        self._q = np.array(q, dtype=np.float64)

    def set_velocity(self, v: ArrayLike) -> None:
        self._v = np.array(v, dtype=np.float64)

    def compute_frame_kinematics(self) -> None:
        for i, link in enumerate(self._links):
            T = self.robot.fkine(self._q, end=link)
            self._poses[i] = np.asarray(T.A, dtype=np.float64)

    def link_pose(self, frame_index: int) -> NDArray[np.float64]:
        """4x4 world pose of a link from the last kinematics update."""
        return self._poses[frame_index]

    def frame_placement(self, frame_index: int) -> sp.SE3:
        return se3_from_matrix(self._poses[frame_index])

    def joint_placement(self, joint_index: int) -> sp.SE3:
        for i, link in enumerate(self._links):
            if link.isjoint and link.jindex == joint_index:
                return se3_from_matrix(self._poses[i])
        raise UnknownJointError(joint_index)

    def point_jacobian(
        self, frame_index: int, point: NDArray[np.float64]
    ) -> NDArray[np.float64]:
        """
        World-frame geometric Jacobian (6 x n, linear rows first) of a point
        rigidly attached to link ``frame_index``, given in world coordinates.
        """
        J = np.zeros((6, self.robot.n))
        link = self._links[frame_index]
        while link is not None:
            if link.isjoint:
                T = self._poses[self._frame_ids[link.name]]
                et = link.v
                axis = T[:3, :3] @ _AXES[et.axis[-1]]
                if et.isflip:
                    axis = -axis
                j = int(link.jindex)
                if link.isrevolute:
                    J[:3, j] = np.cross(axis, point - T[:3, 3])
                    J[3:, j] = axis
                else:
                    J[:3, j] = axis
            link = link.parent
        return J

    def frame_velocity(self, frame_index: int) -> NDArray[np.float64]:
        T = self._poses[frame_index]
        J = self.point_jacobian(frame_index, T[:3, 3])
        twist = J @ self._v
        R_t = T[:3, :3].T
        return np.concatenate([R_t @ twist[:3], R_t @ twist[3:]])

    def center_of_mass(self, link_names: list[str] | None = None) -> ToolboxCenterOfMass:
        """Handle on the COM of the given links (default: every link)."""
        if link_names is None:
            indices = list(range(len(self._links)))
        else:
            indices = [self.get_frame_id(name) for name in link_names]
        return ToolboxCenterOfMass(self, indices)


class ToolboxCenterOfMass(CenterOfMassComputation):
    """Mass-weighted COM of a set of links."""

    def __init__(self, model: ToolboxModel, frame_indices: list[int]) -> None:
        self._model = model
        self._bodies: list[tuple[int, float, NDArray[np.float64]]] = []
        for i in frame_indices:
            link = model.links[i]
            mass = float(link.m) if link.m is not None else 0.0
            if mass <= 0.0:
                continue
            r = np.zeros(3) if link.r is None else np.asarray(link.r, dtype=np.float64)
            self._bodies.append((i, mass, r.reshape(3)))
        self._total_mass = sum(m for _, m, _ in self._bodies)
        if self._total_mass <= 0.0:
            raise ValueError("center of mass requested over links without mass")
        self._position = np.zeros(3)
        self._jacobian = np.zeros((3, model.velocity_dimension()))

    @property
    def total_mass(self) -> float:
        return self._total_mass

    def compute(self, quantities: ComQuantity) -> None:
        if not quantities:
            return
        position = np.zeros(3)
        jacobian = np.zeros((3, self._model.velocity_dimension()))
        for i, mass, r in self._bodies:
            T = self._model.link_pose(i)
            p = T[:3, :3] @ r + T[:3, 3]
            position += mass * p
            if quantities & ComQuantity.JACOBIAN:
                jacobian += mass * self._model.point_jacobian(i, p)[:3]
        if quantities & ComQuantity.POSITION:
            self._position = position / self._total_mass
        if quantities & ComQuantity.JACOBIAN:
            self._jacobian = jacobian / self._total_mass

    def position(self) -> NDArray[np.float64]:
        return self._position

    def jacobian(self) -> NDArray[np.float64]:
        return self._jacobian
