"""Unit tests for SE3 conversions used in published messages."""

import numpy as np
import pytest
from scipy.spatial.transform import Rotation

from pathsampler.utils.se3_utils import (
    se3_euler_zyx,
    se3_from_matrix,
    se3_from_rotation,
    se3_from_rpy,
    se3_quaternion,
    se3_translation,
    so3_euler_zyx,
)


def test_identity_quaternion_is_scalar_last():
    pose = se3_from_rpy(0.0, 0.0, 0.0, 0.0, 0.0, 0.0)
    assert np.allclose(se3_quaternion(pose), [0.0, 0.0, 0.0, 1.0])


def test_translation_roundtrip_through_matrix():
    m = np.eye(4)
    m[:3, 3] = [0.1, -0.2, 0.3]
    assert np.allclose(se3_translation(se3_from_matrix(m)), [0.1, -0.2, 0.3])


def test_euler_zyx_reconstructs_rotation():
    """R == Rz(ez) @ Ry(ey) @ Rx(ex) for [ez, ey, ex] = so3_euler_zyx(R)."""
    R = Rotation.from_euler("ZYX", [0.4, -0.3, 1.2]).as_matrix()
    ez, ey, ex = so3_euler_zyx(R)

    rebuilt = (
        Rotation.from_euler("z", ez).as_matrix()
        @ Rotation.from_euler("y", ey).as_matrix()
        @ Rotation.from_euler("x", ex).as_matrix()
    )
    assert np.allclose(rebuilt, R)
    assert [ez, ey, ex] == pytest.approx([0.4, -0.3, 1.2])


def test_se3_euler_zyx_matches_so3():
    pose = se3_from_rpy(1.0, 2.0, 3.0, 0.1, 0.2, 0.3)
    assert np.allclose(se3_euler_zyx(pose), so3_euler_zyx(pose.rotationMatrix()))


def test_from_rotation_reprojects_drifted_matrix():
    R = Rotation.from_euler("z", 0.5).as_matrix() * (1.0 + 1e-9)
    pose = se3_from_rotation(R, [0.0, 0.0, 1.0])
    assert np.allclose(pose.rotationMatrix() @ pose.rotationMatrix().T, np.eye(3))


def test_rpy_degrees():
    a = se3_from_rpy(0, 0, 0, 90, 0, 0, degrees=True)
    b = se3_from_rpy(0, 0, 0, np.pi / 2, 0, 0)
    assert np.allclose(a.matrix(), b.matrix())


def test_euler_zyx_canonical_range():
    """A negative yaw stays negative instead of being folded into [0, pi]."""
    pose = se3_from_rotation(Rotation.from_euler("z", -2.0).as_matrix(), [0.0, 0.0, 0.0])
    ez, ey, ex = se3_euler_zyx(pose)
    assert ez == pytest.approx(-2.0)
    assert ey == pytest.approx(0.0, abs=1e-12)
    assert ex == pytest.approx(0.0, abs=1e-12)

    angles = se3_euler_zyx(se3_from_rpy(0.0, 0.0, 0.0, 3.0, 1.4, -3.0))
    assert -np.pi <= angles[0] <= np.pi
    assert -np.pi / 2 <= angles[1] <= np.pi / 2
    assert -np.pi <= angles[2] <= np.pi
