# Copyright (c) Meta Platforms, Inc. and affiliates.

# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

"""
Camera visibility frustum.

The camera looks along its local +X axis. Horizontal field of view spans
local Y and vertical field of view spans local Z. Eight corner points are
generated once from the intrinsics; every pose update transforms them into
the world frame and rebuilds six bounding planes and an axis-aligned
bounding box (AABB) from them.

Typical per-frame use::

    model.set_camera_pose(T_G_C)
    aabb_min, aabb_max = model.get_aabb()
    # reject candidates outside the AABB, then
    model.is_point_in_view(point)
"""

import logging
import math
from enum import IntEnum
from typing import Dict, Optional, Tuple

import numpy as np

from shared.geometry.frustum import check_inside_aabb, check_inside_planes, compute_aabb
from shared.geometry.plane import Plane
from shared.geometry.transforms import (
    compose_transforms,
    create_identity_pose,
    invert_transform,
    transform_points_np,
    validate_rigid_transform,
)
from shared.utils.error_handling import (
    CameraModelNotReadyError,
    DegeneratePlaneError,
    InvalidIntrinsicsError,
    validate_and_raise,
)

logger = logging.getLogger(__name__)


class FrustumCorner(IntEnum):
    """Generation order of the camera-local corner points.

    Right/left is the sign of local Y (+/-), top/bottom the sign of local Z.
    """
    NEAR_TOP_RIGHT = 0
    NEAR_BOTTOM_RIGHT = 1
    NEAR_BOTTOM_LEFT = 2
    NEAR_TOP_LEFT = 3
    FAR_TOP_RIGHT = 4
    FAR_BOTTOM_RIGHT = 5
    FAR_BOTTOM_LEFT = 6
    FAR_TOP_LEFT = 7


# (sign Y, sign Z) for each corner of one distance quartet
CORNER_SIGNS = (
    (1.0, 1.0),
    (1.0, -1.0),
    (-1.0, -1.0),
    (-1.0, 1.0),
)

C = FrustumCorner

# Winding chosen so that every normal points into the frustum
PLANE_CORNER_TRIPLES: Dict[str, Tuple[FrustumCorner, FrustumCorner, FrustumCorner]] = {
    "near": (C.NEAR_TOP_RIGHT, C.NEAR_BOTTOM_LEFT, C.NEAR_BOTTOM_RIGHT),
    "far": (C.FAR_TOP_RIGHT, C.FAR_BOTTOM_RIGHT, C.FAR_BOTTOM_LEFT),
    "left": (C.NEAR_TOP_LEFT, C.FAR_BOTTOM_LEFT, C.NEAR_BOTTOM_LEFT),
    "right": (C.NEAR_TOP_RIGHT, C.FAR_BOTTOM_RIGHT, C.FAR_TOP_RIGHT),
    "top": (C.NEAR_TOP_LEFT, C.FAR_TOP_RIGHT, C.FAR_TOP_LEFT),
    "bottom": (C.NEAR_BOTTOM_LEFT, C.FAR_BOTTOM_LEFT, C.FAR_BOTTOM_RIGHT),
}

PLANE_NAMES = tuple(PLANE_CORNER_TRIPLES)

# Twelve frustum edges: near rectangle, far rectangle, then the four rays
FRUSTUM_EDGES = (
    (C.NEAR_TOP_RIGHT, C.NEAR_BOTTOM_RIGHT),
    (C.NEAR_BOTTOM_RIGHT, C.NEAR_BOTTOM_LEFT),
    (C.NEAR_BOTTOM_LEFT, C.NEAR_TOP_LEFT),
    (C.NEAR_TOP_LEFT, C.NEAR_TOP_RIGHT),
    (C.FAR_TOP_RIGHT, C.FAR_BOTTOM_RIGHT),
    (C.FAR_BOTTOM_RIGHT, C.FAR_BOTTOM_LEFT),
    (C.FAR_BOTTOM_LEFT, C.FAR_TOP_LEFT),
    (C.FAR_TOP_LEFT, C.FAR_TOP_RIGHT),
    (C.NEAR_TOP_RIGHT, C.FAR_TOP_RIGHT),
    (C.NEAR_BOTTOM_RIGHT, C.FAR_BOTTOM_RIGHT),
    (C.NEAR_BOTTOM_LEFT, C.FAR_BOTTOM_LEFT),
    (C.NEAR_TOP_LEFT, C.FAR_TOP_LEFT),
)


def fov_from_focal_length(size: float, focal_length: float) -> float:
    """Full field of view (radians) covered by ``size`` at ``focal_length``"""
    return 2.0 * math.atan(size / (2.0 * focal_length))


def _validate_distances(min_distance: float, max_distance: float) -> None:
    validate_and_raise(
        math.isfinite(min_distance) and math.isfinite(max_distance),
        f"Clip distances must be finite, got min={min_distance}, max={max_distance}",
        InvalidIntrinsicsError,
    )
    validate_and_raise(
        0.0 < min_distance < max_distance,
        f"Clip distances must satisfy 0 < min < max, got min={min_distance}, max={max_distance}",
        InvalidIntrinsicsError,
    )


class CameraModel:
    """Frustum of a single camera with intrinsics, extrinsics and a world pose.

    Derived state (world corners, planes, AABB) is only replaced as a whole
    by the setters. Before intrinsics and a pose are both set, queries on it
    raise ``CameraModelNotReadyError``.
    """

    def __init__(self, boundary_tolerance: float = 0.0):
        """
        Args:
            boundary_tolerance: slack on the inside of every plane, used to
                keep points lying on a face inside despite rounding
        """
        validate_and_raise(boundary_tolerance >= 0.0,
                           f"boundary_tolerance must be >= 0, got {boundary_tolerance}")
        self.boundary_tolerance = float(boundary_tolerance)

        self._untransformed_corners: Optional[np.ndarray] = None
        self._T_C_B = create_identity_pose()
        self._T_G_C = create_identity_pose()
        self._pose_set = False
        self._frustum_cleared = False

        self._transformed_corners: Optional[np.ndarray] = None
        self._bounding_planes: Optional[Tuple[Plane, ...]] = None
        self._plane_normals: Optional[np.ndarray] = None
        self._plane_distances: Optional[np.ndarray] = None
        self._aabb_min: Optional[np.ndarray] = None
        self._aabb_max: Optional[np.ndarray] = None

    # ------------------------------------------------------------------
    # Intrinsics
    # ------------------------------------------------------------------

    def set_intrinsics_from_focal_length(self, resolution, focal_length: float,
                                         min_distance: float, max_distance: float) -> None:
        """
        Set up the frustum from image size and focal length.

        Args:
            resolution: (width, height) in the same units as ``focal_length``
            focal_length: focal length, > 0
            min_distance: near clip distance
            max_distance: far clip distance
        """
        resolution = np.asarray(resolution, dtype=np.float64)
        validate_and_raise(resolution.shape == (2,),
                           f"Resolution must be (width, height), got shape {resolution.shape}",
                           InvalidIntrinsicsError)
        validate_and_raise(math.isfinite(focal_length) and focal_length > 0.0,
                           f"Focal length must be > 0, got {focal_length}",
                           InvalidIntrinsicsError)
        validate_and_raise(bool(np.isfinite(resolution).all() and (resolution > 0.0).all()),
                           f"Resolution components must be > 0, got {resolution.tolist()}",
                           InvalidIntrinsicsError)

        horizontal_fov = fov_from_focal_length(resolution[0], focal_length)
        vertical_fov = fov_from_focal_length(resolution[1], focal_length)
        self.set_intrinsics_from_fov(horizontal_fov, vertical_fov, min_distance, max_distance)

    def set_intrinsics_from_fov(self, horizontal_fov: float, vertical_fov: float,
                                min_distance: float, max_distance: float) -> None:
        """
        Set up the frustum from angular extents (radians) and clip distances.

        Raises:
            InvalidIntrinsicsError: if a field of view is outside (0, pi) or
                the distances do not satisfy 0 < min < max
        """
        for label, fov in (("Horizontal", horizontal_fov), ("Vertical", vertical_fov)):
            validate_and_raise(math.isfinite(fov) and 0.0 < fov < math.pi,
                               f"{label} field of view must be in (0, pi), got {fov}",
                               InvalidIntrinsicsError)
        _validate_distances(min_distance, max_distance)

        tan_half_horizontal_fov = math.tan(horizontal_fov / 2.0)
        tan_half_vertical_fov = math.tan(vertical_fov / 2.0)

        corners = []
        for distance in (min_distance, max_distance):
            for sign_y, sign_z in CORNER_SIGNS:
                corners.append((distance,
                                sign_y * distance * tan_half_horizontal_fov,
                                sign_z * distance * tan_half_vertical_fov))
        self._untransformed_corners = np.array(corners, dtype=np.float64)

        logger.debug(f"Intrinsics set: hfov={horizontal_fov:.4f} vfov={vertical_fov:.4f} "
                     f"min={min_distance} max={max_distance}")

        # Keep derived state in step with the new corner template
        if self._pose_set:
            self._calculate_bounding_planes()

    @property
    def is_ready(self) -> bool:
        """True once intrinsics have been set"""
        return self._untransformed_corners is not None

    @property
    def has_frustum(self) -> bool:
        """True once planes and AABB have been computed for a pose"""
        return self._bounding_planes is not None

    def get_untransformed_corners(self) -> np.ndarray:
        """Camera-frame corner template (8, 3), ordered as ``FrustumCorner``"""
        if self._untransformed_corners is None:
            raise CameraModelNotReadyError("Intrinsics have not been set")
        return self._untransformed_corners.copy()

    # ------------------------------------------------------------------
    # Extrinsics and pose
    # ------------------------------------------------------------------

    def set_extrinsics(self, T_C_B) -> None:
        """Store the camera-to-body transform. Does not recompute the frustum."""
        self._T_C_B = validate_rigid_transform(T_C_B, "T_C_B")

    def get_extrinsics(self) -> np.ndarray:
        return self._T_C_B.copy()

    def get_camera_pose(self) -> np.ndarray:
        return self._T_G_C.copy()

    def get_body_pose(self) -> np.ndarray:
        return compose_transforms(self._T_G_C, self._T_C_B)

    def set_camera_pose(self, T_G_C) -> None:
        """Set the camera-to-world pose and rebuild planes and AABB."""
        self._T_G_C = validate_rigid_transform(T_G_C, "T_G_C")
        self._pose_set = True
        self._calculate_bounding_planes()

    def set_body_pose(self, T_G_B) -> None:
        """Set the body-to-world pose; the camera pose follows from the extrinsics."""
        T_G_B = validate_rigid_transform(T_G_B, "T_G_B")
        self.set_camera_pose(compose_transforms(T_G_B, invert_transform(self._T_C_B)))

    # ------------------------------------------------------------------
    # Recomputation
    # ------------------------------------------------------------------

    def _calculate_bounding_planes(self) -> None:
        if self._untransformed_corners is None:
            logger.debug("Pose set before intrinsics, skipping frustum computation")
            return

        transformed_corners = transform_points_np(self._untransformed_corners, self._T_G_C)

        planes = []
        try:
            for name, triple in PLANE_CORNER_TRIPLES.items():
                plane = Plane.from_points(*(transformed_corners[idx] for idx in triple))
                # Offset through the lowest corner so all eight corners pass
                # the exact ``>=`` test despite rounding in the normal
                normal = plane.normal
                distance = min(float(np.dot(corner, normal)) for corner in transformed_corners)
                plane.set_from_distance_normal(normal, distance)
                logger.debug(f"{name.capitalize()} plane: normal: {normal} distance: {distance}")
                planes.append(plane)
        except DegeneratePlaneError:
            self._clear_frustum()
            self._frustum_cleared = True
            raise

        aabb_min, aabb_max = compute_aabb(transformed_corners)
        logger.debug(f"AABB min: {aabb_min} AABB max: {aabb_max}")

        self._transformed_corners = transformed_corners
        self._bounding_planes = tuple(planes)
        self._plane_normals = np.stack([p.normal for p in planes])
        self._plane_distances = np.array([p.distance for p in planes])
        self._aabb_min = aabb_min
        self._aabb_max = aabb_max
        self._frustum_cleared = False

    def _clear_frustum(self) -> None:
        self._transformed_corners = None
        self._bounding_planes = None
        self._plane_normals = None
        self._plane_distances = None
        self._aabb_min = None
        self._aabb_max = None

    def _require_frustum(self) -> None:
        if self._bounding_planes is None:
            if self._untransformed_corners is None:
                raise CameraModelNotReadyError("Intrinsics have not been set")
            if self._frustum_cleared:
                raise CameraModelNotReadyError(
                    "Frustum was cleared by a degenerate plane in the last update; set a new pose"
                )
            raise CameraModelNotReadyError("No camera pose has been set")

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_aabb(self) -> Tuple[np.ndarray, np.ndarray]:
        """World-frame (aabb_min, aabb_max) of the current frustum"""
        self._require_frustum()
        return self._aabb_min.copy(), self._aabb_max.copy()

    @property
    def bounding_planes(self) -> Tuple[Plane, ...]:
        """Copies of the six planes, ordered as ``PLANE_NAMES``"""
        self._require_frustum()
        return tuple(plane.copy() for plane in self._bounding_planes)

    def get_plane(self, name: str) -> Plane:
        if name not in PLANE_CORNER_TRIPLES:
            raise KeyError(f"Unknown plane '{name}', expected one of {PLANE_NAMES}")
        self._require_frustum()
        return self._bounding_planes[PLANE_NAMES.index(name)].copy()

    def get_transformed_corners(self) -> np.ndarray:
        """World-frame corners (8, 3), ordered as ``FrustumCorner``"""
        self._require_frustum()
        return self._transformed_corners.copy()

    def get_far_plane_points(self) -> np.ndarray:
        """The four world-frame far corners (4, 3)"""
        self._require_frustum()
        return self._transformed_corners[C.FAR_TOP_RIGHT:].copy()

    def get_bounding_lines(self) -> np.ndarray:
        """The twelve frustum edges as (24, 3) points, one segment per consecutive pair"""
        self._require_frustum()
        indices = [int(idx) for edge in FRUSTUM_EDGES for idx in edge]
        return self._transformed_corners[indices].copy()

    def is_point_in_aabb(self, point) -> bool:
        self._require_frustum()
        return check_inside_aabb(np.asarray(point, dtype=np.float64), self._aabb_min, self._aabb_max)

    def is_point_in_view(self, point) -> bool:
        """
        Check a single point against all six planes.

        The AABB is not consulted; callers are expected to have rejected
        points outside it already.
        """
        self._require_frustum()
        for plane in self._bounding_planes:
            if not plane.is_point_inside(point, self.boundary_tolerance):
                return False
        return True

    def points_in_view(self, points, use_aabb: bool = True):
        """
        Vectorised visibility test for an (N, 3) numpy array or torch tensor.

        Args:
            points: candidate points in the world frame
            use_aabb: reject points outside the AABB before the plane test

        Returns:
            (N,) boolean mask of the same array type as ``points``
        """
        self._require_frustum()
        mask = check_inside_planes(points, self._plane_normals, self._plane_distances,
                                   self.boundary_tolerance)
        if use_aabb:
            mask = mask & check_inside_aabb(points, self._aabb_min, self._aabb_max)
        return mask


__all__ = [
    'CameraModel',
    'FrustumCorner',
    'CORNER_SIGNS',
    'PLANE_CORNER_TRIPLES',
    'PLANE_NAMES',
    'FRUSTUM_EDGES',
    'fov_from_focal_length',
]
