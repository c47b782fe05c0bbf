"""Shared fixtures for camfrustum tests."""

import math

import numpy as np
import pytest

from camera.camera_model import CameraModel
from shared.geometry.transforms import create_identity_pose, euler2matrix


@pytest.fixture
def wide_camera():
    """90 x 90 degree camera, clip distances 1..10, identity pose"""
    model = CameraModel()
    model.set_intrinsics_from_fov(math.pi / 2, math.pi / 2, 1.0, 10.0)
    model.set_camera_pose(create_identity_pose())
    return model


@pytest.fixture
def random_poses():
    """A handful of reproducible rigid poses"""
    rng = np.random.default_rng(7)
    poses = [create_identity_pose()]
    for _ in range(10):
        angles = rng.uniform(-math.pi, math.pi, size=3)
        translation = rng.uniform(-20.0, 20.0, size=3)
        poses.append(euler2matrix(angles, translation))
    return poses
