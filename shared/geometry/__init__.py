"""
Shared geometry utilities for camfrustum.

Rigid transforms, oriented planes and batched frustum tests used by the
camera model.
"""

from .transforms import (
    create_identity_pose,
    euler2matrix,
    pose_from_translation_rotation,
    pose_from_config,
    validate_rigid_transform,
    invert_transform,
    compose_transforms,
    transform_points_np
)

from .frustum import (
    check_inside_planes,
    check_inside_aabb,
    compute_aabb
)

from .plane import Plane

__all__ = [
    # Transform functions
    'create_identity_pose',
    'euler2matrix',
    'pose_from_translation_rotation',
    'pose_from_config',
    'validate_rigid_transform',
    'invert_transform',
    'compose_transforms',
    'transform_points_np',

    # Frustum functions
    'check_inside_planes',
    'check_inside_aabb',
    'compute_aabb',

    # Planes
    'Plane'
]
