# Copyright (c) Meta Platforms, Inc. and affiliates.

# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

"""
Oriented half-space plane.

A point ``p`` is inside the plane when ``dot(normal, p) >= distance``.
Points exactly on the plane count as inside.
"""

from typing import Optional

import numpy as np

from .frustum import check_inside_planes
from ..utils.error_handling import DegeneratePlaneError

# Relative threshold on |p1p2 x p1p3| / (|p1p2| |p1p3|), i.e. sin of the
# angle between the two edges
DEGENERATE_SIN_EPS = 1e-12


def _as_vector(value, name: str) -> np.ndarray:
    vector = np.asarray(value, dtype=np.float64)
    if vector.shape != (3,):
        raise ValueError(f"{name} must be a 3-vector, got shape {vector.shape}")
    return vector


class Plane:
    """
    Half-space boundary with a unit normal pointing to the inside.

    A default-constructed plane has a zero normal and is unusable until one
    of the ``set_from_*`` methods succeeds.
    """

    def __init__(self, normal: Optional[np.ndarray] = None, distance: float = 0.0):
        self._normal = np.zeros(3)
        self._distance = 0.0
        if normal is not None:
            self.set_from_distance_normal(normal, distance)

    @classmethod
    def from_points(cls, p1, p2, p3) -> "Plane":
        plane = cls()
        plane.set_from_points(p1, p2, p3)
        return plane

    @classmethod
    def from_distance_normal(cls, normal, distance: float) -> "Plane":
        return cls(normal, distance)

    def set_from_points(self, p1, p2, p3) -> None:
        """
        Build the plane through three points.

        The normal is ``normalize((p2 - p1) x (p3 - p1))``, so the winding of
        the points picks which side is inside (right-hand rule).

        Raises:
            DegeneratePlaneError: if the points are collinear, coincident or
                not finite. The plane is left unchanged.
        """
        p1 = _as_vector(p1, "p1")
        p1p2 = _as_vector(p2, "p2") - p1
        p1p3 = _as_vector(p3, "p3") - p1

        cross = np.cross(p1p2, p1p3)
        cross_norm = np.linalg.norm(cross)
        edge_scale = np.linalg.norm(p1p2) * np.linalg.norm(p1p3)

        if not np.isfinite(cross_norm) or not np.isfinite(edge_scale):
            raise DegeneratePlaneError(f"Plane points are not finite: {p1}, {p1 + p1p2}, {p1 + p1p3}")
        if edge_scale == 0.0 or cross_norm <= DEGENERATE_SIN_EPS * edge_scale:
            raise DegeneratePlaneError(
                f"Plane points are collinear or coincident: {p1}, {p1 + p1p2}, {p1 + p1p3}"
            )

        normal = cross / cross_norm
        self._normal = normal
        self._distance = float(normal.dot(p1))

    def set_from_distance_normal(self, normal, distance: float) -> None:
        """Set the plane directly. ``normal`` is expected to be unit length."""
        normal = _as_vector(normal, "normal")
        if not np.isfinite(normal).all() or not np.isfinite(distance):
            raise DegeneratePlaneError(f"Plane normal/distance not finite: {normal}, {distance}")
        if not np.any(normal):
            raise DegeneratePlaneError("Plane normal is the zero vector")

        self._normal = normal.copy()
        self._distance = float(distance)

    @property
    def normal(self) -> np.ndarray:
        return self._normal.copy()

    @property
    def distance(self) -> float:
        return self._distance

    def signed_distance(self, point) -> float:
        """Positive on the inside, negative outside, zero on the plane"""
        return float(np.dot(point, self._normal)) - self._distance

    def is_point_inside(self, point, tolerance: float = 0.0) -> bool:
        return float(np.dot(point, self._normal)) >= self._distance - tolerance

    def points_inside(self, points, tolerance: float = 0.0):
        """Vectorised ``is_point_inside`` over an (N, 3) array or tensor"""
        return check_inside_planes(
            points, self._normal[None, :], np.array([self._distance]), tolerance
        )

    def copy(self) -> "Plane":
        plane = Plane()
        plane._normal = self._normal.copy()
        plane._distance = self._distance
        return plane

    def __eq__(self, other):
        if not isinstance(other, Plane):
            return NotImplemented
        return np.array_equal(self._normal, other._normal) and self._distance == other._distance

    def __repr__(self):
        return f"Plane(normal={self._normal.tolist()}, distance={self._distance})"


__all__ = ['Plane', 'DEGENERATE_SIN_EPS']
