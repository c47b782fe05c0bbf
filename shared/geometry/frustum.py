# Copyright (c) Meta Platforms, Inc. and affiliates.

# This source code is licensed under the MIT license found in the
# LICENSE file in the root directory of this source tree.

"""
Shared camera frustum operations.

Batched half-space and bounding box tests used by the camera model to cull
voxel centres or point clouds. Every function accepts either a numpy array
or a torch tensor of points and returns a boolean mask of the same kind.
"""

import numpy as np
import torch


def _as_points(points):
    """Promote a single (3,) point to (1, 3) and return the original ndim"""
    if points.ndim == 1:
        return points[None, :], 1
    return points, points.ndim


def _as_float_tensor(points):
    """Cast integer and bool tensors to the default float dtype"""
    if not points.is_floating_point():
        return points.to(torch.get_default_dtype())
    return points


def check_inside_planes(points, normals, distances, tolerance=0.0):
    """Check if points satisfy every half-space ``dot(n, p) >= d``

    Args:
        points: (N, 3) or (3,) points to test (numpy or torch)
        normals: (P, 3) plane normals pointing towards the inside
        distances: (P,) plane offsets
        tolerance: slack added on the inside of every plane

    Returns:
        inside_mask: (N,) boolean mask, or a single bool for a (3,) input
    """
    if isinstance(points, torch.Tensor):
        pts, ndim = _as_points(_as_float_tensor(points))
        normals_t = torch.as_tensor(normals, dtype=pts.dtype, device=pts.device)
        distances_t = torch.as_tensor(distances, dtype=pts.dtype, device=pts.device)
        dots = pts @ normals_t.T
        mask = (dots >= distances_t - tolerance).all(dim=1)
        return mask[0] if ndim == 1 else mask

    pts, ndim = _as_points(np.asarray(points, dtype=np.float64))
    dots = pts @ np.asarray(normals, dtype=np.float64).T
    mask = (dots >= np.asarray(distances, dtype=np.float64) - tolerance).all(axis=1)
    return bool(mask[0]) if ndim == 1 else mask


def check_inside_aabb(points, aabb_min, aabb_max):
    """Check if points lie inside a closed axis-aligned box

    Args:
        points: (N, 3) or (3,) points to test (numpy or torch)
        aabb_min: (3,) minimum corner
        aabb_max: (3,) maximum corner

    Returns:
        inside_mask: (N,) boolean mask, or a single bool for a (3,) input
    """
    if isinstance(points, torch.Tensor):
        pts, ndim = _as_points(_as_float_tensor(points))
        lo = torch.as_tensor(aabb_min, dtype=pts.dtype, device=pts.device)
        hi = torch.as_tensor(aabb_max, dtype=pts.dtype, device=pts.device)
        mask = ((pts >= lo) & (pts <= hi)).all(dim=1)
        return mask[0] if ndim == 1 else mask

    pts, ndim = _as_points(np.asarray(points, dtype=np.float64))
    mask = ((pts >= aabb_min) & (pts <= aabb_max)).all(axis=1)
    return bool(mask[0]) if ndim == 1 else mask


def compute_aabb(points):
    """Elementwise (min, max) of an (N, 3) point set"""
    points = np.asarray(points, dtype=np.float64)
    if points.ndim != 2 or points.shape[1] != 3 or len(points) == 0:
        raise ValueError(f"Expected non-empty (N, 3) points, got shape {points.shape}")
    return points.min(axis=0), points.max(axis=0)


__all__ = [
    'check_inside_planes',
    'check_inside_aabb',
    'compute_aabb',
]
