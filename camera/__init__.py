"""
Camera module for camfrustum

Visibility frustum of a posed camera for culling voxels and points.
"""

from .camera_model import (
    CameraModel,
    FrustumCorner,
    PLANE_CORNER_TRIPLES,
    PLANE_NAMES,
    fov_from_focal_length
)

__all__ = [
    'CameraModel',
    'FrustumCorner',
    'PLANE_CORNER_TRIPLES',
    'PLANE_NAMES',
    'fov_from_focal_length'
]
