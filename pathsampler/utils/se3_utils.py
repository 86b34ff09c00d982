"""SE3/SO3 helpers built on sophuspy.

Model adapters hand placements to the sampler as ``sophuspy.SE3`` values;
these helpers convert them into the flat representations that end up in
published messages (translation, unit quaternion, Z-Y-X Euler angles).
"""

import numpy as np
import sophuspy as sp
from numpy.typing import ArrayLike, NDArray
from scipy.spatial.transform import Rotation

__all__ = [
    "se3_from_matrix",
    "se3_from_rotation",
    "se3_from_rpy",
    "se3_translation",
    "se3_quaternion",
    "se3_euler_zyx",
    "so3_euler_zyx",
]


def se3_from_rotation(rotation: ArrayLike, translation: ArrayLike) -> sp.SE3:
    """Create SE3 from a 3x3 rotation and a translation.

    The rotation is re-projected onto SO(3) first, so matrices that drifted
    by floating point error in a kinematic chain are still accepted.
    """
    R = Rotation.from_matrix(np.asarray(rotation, dtype=np.float64)).as_matrix()
    return sp.SE3(R, np.asarray(translation, dtype=np.float64).reshape(3))


def se3_from_matrix(matrix: ArrayLike) -> sp.SE3:
    """Create SE3 from 4x4 homogeneous transformation matrix."""
    m = np.asarray(matrix, dtype=np.float64)
    return se3_from_rotation(m[:3, :3], m[:3, 3])


def se3_from_rpy(
    x: float,
    y: float,
    z: float,
    roll: float,
    pitch: float,
    yaw: float,
    degrees: bool = False,
) -> sp.SE3:
    """Create SE3 from position and RPY angles.

    Args:
        x, y, z: Translation components
        roll, pitch, yaw: Rotation angles (xyz order)
        degrees: If True, angles are in degrees
    """
    if degrees:
        roll, pitch, yaw = np.radians([roll, pitch, yaw])
    R = Rotation.from_euler("XYZ", [roll, pitch, yaw]).as_matrix()
    return sp.SE3(R, [x, y, z])


def se3_translation(se3: sp.SE3) -> NDArray[np.float64]:
    return np.asarray(se3.translation(), dtype=np.float64).reshape(3)


def se3_quaternion(se3: sp.SE3) -> NDArray[np.float64]:
    """Unit quaternion of the rotation part, scalar last: [x, y, z, w]."""
    return Rotation.from_matrix(se3.rotationMatrix()).as_quat()


def so3_euler_zyx(rotation_matrix: ArrayLike) -> NDArray[np.float64]:
    """Z-Y-X Euler angles [ez, ey, ex] such that R = Rz(ez) @ Ry(ey) @ Rx(ex)."""
    return Rotation.from_matrix(np.asarray(rotation_matrix)).as_euler("ZYX")


def se3_euler_zyx(se3: sp.SE3) -> NDArray[np.float64]:
    """
    Z-Y-X Euler angles of the rotation part of ``se3``.

    Canonical ranges: ez and ex in [-pi, pi], ey in [-pi/2, pi/2].
    """
    return so3_euler_zyx(se3.rotationMatrix())
