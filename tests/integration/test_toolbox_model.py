"""Sampler against a planar 2R roboticstoolbox robot."""

import numpy as np
import pytest
from roboticstoolbox import ET, Link, Robot

from pathsampler.model.base import ComQuantity
from pathsampler.model.toolbox_model import ToolboxModel
from pathsampler.path import QuinticPath
from pathsampler.sampler import ComputationOption, Sampler
from pathsampler.utils.errors import UnknownJointError

pytestmark = pytest.mark.integration


@pytest.fixture
def model():
    """Two 1 m links, 1 kg each with the mass at mid-link, and a tool at the tip."""
    link1 = Link(ET.Rz(), name="link1", m=1.0, r=[0.5, 0.0, 0.0])
    link2 = Link(ET.tx(1.0) * ET.Rz(), name="link2", parent=link1, m=1.0, r=[0.5, 0.0, 0.0])
    tool = Link(ET.tx(1.0), name="tool", parent=link2)
    return ToolboxModel(Robot([link1, link2, tool], name="planar2r"))


class TestToolboxModel:
    def test_joint_metadata(self, model):
        joint = model.get_joint_by_name("link2")
        assert joint.rank_in_configuration == 1
        assert joint.config_size == 1
        with pytest.raises(UnknownJointError):
            model.get_joint_by_name("tool")

    def test_tool_placement(self, model):
        model.set_configuration([0.0, np.pi / 2])
        model.compute_frame_kinematics()
        pose = model.frame_placement(model.get_frame_id("tool"))
        assert np.allclose(pose.translation(), [1.0, 1.0, 0.0])

    def test_tool_velocity_in_local_frame(self, model):
        model.set_configuration([0.0, np.pi / 2])
        model.set_velocity([1.0, 0.0])
        model.compute_frame_kinematics()
        twist = model.frame_velocity(model.get_frame_id("tool"))
        assert np.allclose(twist, [1.0, 1.0, 0.0, 0.0, 0.0, 1.0])

    def test_center_of_mass_and_jacobian(self, model):
        model.set_configuration([0.0, 0.0])
        model.compute_frame_kinematics()
        com = model.center_of_mass()
        com.compute(ComQuantity.ALL)

        assert com.total_mass == pytest.approx(2.0)
        assert np.allclose(com.position(), [1.0, 0.0, 0.0])
        assert np.allclose(com.jacobian(), [[0.0, 0.0], [1.0, 0.25], [0.0, 0.0]])

    def test_center_of_mass_without_mass(self, model):
        with pytest.raises(ValueError):
            model.center_of_mass(["tool"])


def test_sampler_publishes_joint_vector(model):
    sampler = Sampler(model, topic_prefix="/rtb/")
    sampler.activate_publishing("rtb")
    sampler.set_joint_names(["link1", "link2"])
    path = QuinticPath([0.0, 0.0], [1.0, -1.0], duration=2.0)
    sampler.set_path(path)
    assert sampler.add_operational_frame("tool", ComputationOption.POSITION)

    sampler.compute(1.0)

    q, _ = path.eval(1.0)
    assert np.allclose(sampler.transport.last("/rtb/position").data, q)
    assert np.allclose(sampler.transport.last("/rtb/velocity").data, path.derivative(1.0, 1))
    tool = sampler.transport.last("/rtb/op_frame/tool").translation.to_array()
    expected = np.array([np.cos(q[0]), np.sin(q[0]), 0.0]) + np.array(
        [np.cos(q[0] + q[1]), np.sin(q[0] + q[1]), 0.0]
    )
    assert np.allclose(tool, expected)
