# Copyright (c) Meta Platforms, Inc. and affiliates.

# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

"""
Rigid-body transforms for camera poses.

Poses are 4x4 homogeneous numpy matrices. ``T_A_B`` maps points expressed
in frame B into frame A, so ``T_G_C @ T_C_B`` gives ``T_G_B``.
"""

import numpy as np
from scipy.spatial.transform import Rotation as R

from ..utils.error_handling import InvalidTransformError

# Tolerance on R^T R = I and det(R) = 1
RIGIDITY_ATOL = 1e-6


def create_identity_pose() -> np.ndarray:
    """Create identity pose matrix"""
    return np.eye(4, dtype=np.float64)


def euler2matrix(angles=[0, 0, 0], translation=[0, 0, 0], xyz="xyz", degrees=False):
    """Convert Euler angles to 4x4 transformation matrix"""
    r = R.from_euler(xyz, angles, degrees=degrees)
    pose = np.eye(4)
    pose[:3, :3] = r.as_matrix()
    pose[:3, 3] = translation
    return pose


def pose_from_translation_rotation(translation, rotation) -> np.ndarray:
    """
    Create pose matrix from translation and rotation

    Args:
        translation: Translation vector (3,)
        rotation: Rotation matrix (3, 3) or quaternion (4,) in [qx, qy, qz, qw] order

    Returns:
        Pose matrix (4, 4)
    """
    translation = np.asarray(translation, dtype=np.float64)
    rotation = np.asarray(rotation, dtype=np.float64)
    if translation.shape != (3,):
        raise InvalidTransformError(f"Invalid translation shape: {translation.shape}")

    pose = create_identity_pose()
    pose[:3, 3] = translation

    if rotation.shape == (3, 3):
        pose[:3, :3] = rotation
    elif rotation.shape == (4,):
        if not np.isfinite(rotation).all() or np.linalg.norm(rotation) == 0.0:
            raise InvalidTransformError(f"Invalid quaternion: {rotation}")
        pose[:3, :3] = R.from_quat(rotation).as_matrix()
    else:
        raise InvalidTransformError(f"Invalid rotation shape: {rotation.shape}")

    return pose


def pose_from_config(pose_config) -> np.ndarray:
    """
    Create pose matrix from configuration list

    Args:
        pose_config: [x, y, z, qx, qy, qz, qw], [x, y, z, rx, ry, rz]
            (Euler angles in radians) or empty for identity

    Returns:
        Pose matrix (4, 4)
    """
    if pose_config is None or len(pose_config) == 0:
        return create_identity_pose()

    values = np.asarray(pose_config, dtype=np.float64)
    if len(values) == 7:
        return pose_from_translation_rotation(values[:3], values[3:])
    elif len(values) == 6:
        rotation_matrix = R.from_euler('xyz', values[3:]).as_matrix()
        return pose_from_translation_rotation(values[:3], rotation_matrix)
    else:
        raise InvalidTransformError(
            f"Pose must have 6 (xyz + euler) or 7 (xyz + quaternion) values, got {len(values)}"
        )


def validate_rigid_transform(T, name: str = "transform") -> np.ndarray:
    """
    Check that ``T`` is a finite 4x4 rigid transform and return it as float64.

    Raises:
        InvalidTransformError: wrong shape, non-finite entries, bad bottom row
            or a rotation block that is not a proper rotation
    """
    T = np.asarray(T, dtype=np.float64)
    if T.shape != (4, 4):
        raise InvalidTransformError(f"Invalid {name} shape: {T.shape}. Expected (4, 4)")
    if not np.isfinite(T).all():
        raise InvalidTransformError(f"{name} contains non-finite values")
    if not np.allclose(T[3], [0.0, 0.0, 0.0, 1.0], atol=RIGIDITY_ATOL):
        raise InvalidTransformError(f"{name} bottom row must be [0, 0, 0, 1], got {T[3]}")

    rotation = T[:3, :3]
    if not np.allclose(rotation.T @ rotation, np.eye(3), atol=RIGIDITY_ATOL):
        raise InvalidTransformError(f"{name} rotation block is not orthonormal")
    if abs(np.linalg.det(rotation) - 1.0) > RIGIDITY_ATOL:
        raise InvalidTransformError(f"{name} rotation block is a reflection")

    return T.copy()


def invert_transform(T) -> np.ndarray:
    """Closed-form inverse of a rigid transform: [R^T, -R^T t]"""
    T = np.asarray(T, dtype=np.float64)
    rotation_T = T[:3, :3].T
    inverse = np.eye(4)
    inverse[:3, :3] = rotation_T
    inverse[:3, 3] = -rotation_T @ T[:3, 3]
    return inverse


def compose_transforms(T_A_B, T_B_C) -> np.ndarray:
    """Compose ``T_A_B`` and ``T_B_C`` into ``T_A_C``"""
    return np.asarray(T_A_B, dtype=np.float64) @ np.asarray(T_B_C, dtype=np.float64)


def transform_points_np(points, T):
    """Transform (N, 3) or (3,) points using a 4x4 transformation matrix"""
    points = np.asarray(points, dtype=np.float64)
    if points.ndim == 1:
        return transform_points_np(points[None, :], T)[0]
    if len(points) == 0:
        return points
    T = np.asarray(T, dtype=np.float64)
    # Rotation then translation, same as (T @ homogeneous.T).T[:, :3]
    return points @ T[:3, :3].T + T[:3, 3]


__all__ = [
    'create_identity_pose',
    'euler2matrix',
    'pose_from_translation_rotation',
    'pose_from_config',
    'validate_rigid_transform',
    'invert_transform',
    'compose_transforms',
    'transform_points_np',
]
