"""Shared fixtures: a scriptable kinematic model, path and COM handle."""

from __future__ import annotations

import numpy as np
import pytest
import sophuspy as sp

from pathsampler.model.base import (
    CenterOfMassComputation,
    ComQuantity,
    ConfigurationSpaceKind,
    JointInfo,
    KinematicModel,
)
from pathsampler.path.base import Path
from pathsampler.publishing.inprocess import InProcessTransport
from pathsampler.sampler.discretization import Sampler
from pathsampler.utils.errors import UnknownFrameError, UnknownJointError
from pathsampler.utils.se3_utils import se3_from_rpy


class FakeModel(KinematicModel):
    """
    One revolute joint "j1", optionally behind a free-flyer joint "base".

    Without the base: nq = nv = 1, j1 at rank 0.
    With the base: q = [x y z qx qy qz qw | j1], v = [6 | j1].
    second_base appends another free flyer "base2": q = [7 | j1 | 7], v = [6 | j1 | 6].
    Frames: "world" (0) at the origin, "tool" (1) at (q_j1, 0, 0).
    """

    def __init__(self, floating_base: bool = False, second_base: bool = False) -> None:
        self.floating_base = floating_base or second_base
        self.joints: dict[str, JointInfo] = {}
        if self.floating_base:
            self.joints["base"] = JointInfo(
                "base", 1, 0, 0, 7, 6, ConfigurationSpaceKind.SE3
            )
            self.joints["j1"] = JointInfo("j1", 2, 7, 6, 1, 1)
            if second_base:
                self.joints["base2"] = JointInfo(
                    "base2", 3, 8, 7, 7, 6, ConfigurationSpaceKind.SE3
                )
        else:
            self.joints["j1"] = JointInfo("j1", 1, 0, 0, 1, 1)
        self.frames = {"world": 0, "tool": 1}
        self.base_placement = se3_from_rpy(1.0, 2.0, 3.0, 0.1, 0.2, 0.3)
        self.placements = {
            1: self.base_placement,
            3: se3_from_rpy(-4.0, 5.0, 6.0, 0.5, 0.0, 0.0),
        }
        self.q = np.zeros(self.configuration_size())
        self.v = np.zeros(self.velocity_dimension())
        self.kinematics_calls = 0

    def configuration_size(self) -> int:
        return sum(j.config_size for j in self.joints.values())

    def velocity_dimension(self) -> int:
        return sum(j.number_dof for j in self.joints.values())

    def get_joint_by_name(self, name: str) -> JointInfo:
        try:
            return self.joints[name]
        except KeyError:
            raise UnknownJointError(name) from None

    def exist_frame(self, name: str) -> bool:
        return name in self.frames

    def get_frame_id(self, name: str) -> int:
        if name not in self.frames:
            raise UnknownFrameError(name)
        return self.frames[name]

    def set_configuration(self, q) -> None:
        self.q = np.array(q, dtype=np.float64)

    def set_velocity(self, v) -> None:
        self.v = np.array(v, dtype=np.float64)

    def compute_frame_kinematics(self) -> None:
        self.kinematics_calls += 1

    def frame_placement(self, frame_index: int) -> sp.SE3:
        if frame_index == 0:
            return sp.SE3()
        x = self.q[self.joints["j1"].rank_in_configuration]
        return sp.SE3(np.eye(3), np.array([x, 0.0, 0.0]))

    def joint_placement(self, joint_index: int) -> sp.SE3:
        return self.placements[joint_index]

    def frame_velocity(self, frame_index: int) -> np.ndarray:
        w = self.v[self.joints["j1"].rank_in_velocity]
        return np.array([w, 0.0, 0.0, 0.0, 0.0, float(frame_index)])


class FakePath(Path):
    """Constant-derivative path over [0, 1] that can be told to fail."""

    def __init__(self, q, v=None, a=None, fail: bool = False) -> None:
        self.q = np.asarray(q, dtype=np.float64)
        self.v = np.zeros_like(self.q) if v is None else np.asarray(v, dtype=np.float64)
        self.a = np.zeros_like(self.v) if a is None else np.asarray(a, dtype=np.float64)
        self.fail = fail
        self.eval_calls = 0

    @property
    def time_range(self) -> tuple[float, float]:
        return 0.0, 1.0

    @property
    def output_size(self) -> int:
        return self.q.shape[0]

    @property
    def output_derivative_size(self) -> int:
        return self.v.shape[0]

    def eval(self, time: float):
        self.eval_calls += 1
        if self.fail:
            return np.zeros_like(self.q), False
        return self.q * (1.0 + time), True

    def derivative(self, time: float, order: int):
        return self.v.copy() if order == 1 else self.a.copy()


class FakeCom(CenterOfMassComputation):
    """Fixed COM at (1, 2, 3) with an all-ones Jacobian."""

    def __init__(self, nv: int = 1) -> None:
        self.nv = nv
        self.compute_calls: list[ComQuantity] = []

    def compute(self, quantities: ComQuantity) -> None:
        self.compute_calls.append(quantities)

    def position(self) -> np.ndarray:
        return np.array([1.0, 2.0, 3.0])

    def jacobian(self) -> np.ndarray:
        return np.ones((3, self.nv))


@pytest.fixture
def model():
    return FakeModel()


@pytest.fixture
def floating_model():
    return FakeModel(floating_base=True)


@pytest.fixture
def two_base_model():
    return FakeModel(second_base=True)


@pytest.fixture
def sampler(model):
    return Sampler(model, transport_factory=InProcessTransport, topic_prefix="/t/")


@pytest.fixture
def active_sampler(sampler):
    sampler.activate_publishing("test")
    return sampler


@pytest.fixture
def make_path():
    return FakePath


@pytest.fixture
def make_com():
    return FakeCom
