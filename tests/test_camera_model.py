#!/usr/bin/env python

"""Tests for the camera frustum model."""

import math

import numpy as np
import pytest
import torch

from camera.camera_model import (
    CameraModel,
    FrustumCorner,
    PLANE_CORNER_TRIPLES,
    PLANE_NAMES,
    fov_from_focal_length,
)
from shared.geometry.plane import Plane
from shared.geometry.transforms import (
    create_identity_pose,
    euler2matrix,
    invert_transform,
    transform_points_np,
)
from shared.utils.error_handling import (
    CameraModelNotReadyError,
    DegeneratePlaneError,
    InvalidIntrinsicsError,
    InvalidTransformError,
)


class TestIntrinsics:
    """Corner template generation and validation."""

    def test_corners_split_into_near_and_far_quartets(self):
        model = CameraModel()
        model.set_intrinsics_from_fov(1.2, 0.8, 0.5, 7.0)
        corners = model.get_untransformed_corners()

        assert corners.shape == (8, 3)
        np.testing.assert_array_equal(corners[:4, 0], 0.5)
        np.testing.assert_array_equal(corners[4:, 0], 7.0)
        np.testing.assert_array_equal(np.sign(corners[:4, 1:]), np.sign(corners[4:, 1:]))

    def test_corner_extents_follow_half_angles(self):
        model = CameraModel()
        model.set_intrinsics_from_fov(1.2, 0.8, 0.5, 7.0)
        corners = model.get_untransformed_corners()

        far_top_right = corners[FrustumCorner.FAR_TOP_RIGHT]
        assert far_top_right[1] == pytest.approx(7.0 * math.tan(0.6))
        assert far_top_right[2] == pytest.approx(7.0 * math.tan(0.4))
        near_bottom_left = corners[FrustumCorner.NEAR_BOTTOM_LEFT]
        assert near_bottom_left[1] < 0 and near_bottom_left[2] < 0

    def test_focal_length_matches_fov(self):
        from_focal = CameraModel()
        from_focal.set_intrinsics_from_focal_length([640, 480], 320.0, 0.1, 5.0)

        from_fov = CameraModel()
        from_fov.set_intrinsics_from_fov(2 * math.atan(1.0), 2 * math.atan(0.75), 0.1, 5.0)

        np.testing.assert_allclose(from_focal.get_untransformed_corners(),
                                   from_fov.get_untransformed_corners())

    def test_fov_from_focal_length(self):
        assert fov_from_focal_length(2.0, 1.0) == pytest.approx(math.pi / 2)

    @pytest.mark.parametrize("hfov, vfov", [
        (0.0, 1.0), (1.0, 0.0), (-0.5, 1.0), (math.pi, 1.0), (1.0, 4.0), (math.nan, 1.0),
    ])
    def test_invalid_fov_rejected(self, hfov, vfov):
        with pytest.raises(InvalidIntrinsicsError):
            CameraModel().set_intrinsics_from_fov(hfov, vfov, 1.0, 10.0)

    @pytest.mark.parametrize("min_distance, max_distance", [
        (0.0, 10.0), (-1.0, 10.0), (10.0, 10.0), (11.0, 10.0), (1.0, math.inf),
    ])
    def test_invalid_distances_rejected(self, min_distance, max_distance):
        with pytest.raises(InvalidIntrinsicsError):
            CameraModel().set_intrinsics_from_fov(1.0, 1.0, min_distance, max_distance)

    @pytest.mark.parametrize("resolution, focal_length", [
        ([640, 480], 0.0), ([640, 480], -1.0), ([0, 480], 300.0), ([640, -1], 300.0),
        ([640, 480, 3], 300.0),
    ])
    def test_invalid_focal_intrinsics_rejected(self, resolution, focal_length):
        with pytest.raises(InvalidIntrinsicsError):
            CameraModel().set_intrinsics_from_focal_length(resolution, focal_length, 0.1, 5.0)

    def test_rejected_intrinsics_keep_previous_template(self):
        model = CameraModel()
        model.set_intrinsics_from_fov(1.0, 1.0, 1.0, 10.0)
        before = model.get_untransformed_corners()
        with pytest.raises(InvalidIntrinsicsError):
            model.set_intrinsics_from_fov(1.0, 1.0, 5.0, 2.0)
        np.testing.assert_array_equal(model.get_untransformed_corners(), before)


class TestReadiness:
    """Behaviour before intrinsics and pose are both available."""

    def test_queries_before_anything_raise(self):
        model = CameraModel()
        assert not model.is_ready
        assert not model.has_frustum
        with pytest.raises(CameraModelNotReadyError):
            model.get_aabb()
        with pytest.raises(CameraModelNotReadyError):
            model.is_point_in_view([1.0, 0.0, 0.0])
        with pytest.raises(CameraModelNotReadyError):
            model.get_untransformed_corners()

    def test_pose_before_intrinsics_is_a_no_op(self):
        model = CameraModel()
        model.set_camera_pose(create_identity_pose())
        assert not model.has_frustum
        with pytest.raises(CameraModelNotReadyError):
            model.get_aabb()

    def test_intrinsics_after_pose_compute_frustum(self):
        model = CameraModel()
        model.set_camera_pose(euler2matrix([0, 0, 0], [1.0, 2.0, 3.0]))
        model.set_intrinsics_from_fov(math.pi / 2, math.pi / 2, 1.0, 10.0)
        assert model.has_frustum
        assert model.is_point_in_view([6.0, 2.0, 3.0])

    def test_intrinsics_only_is_ready_without_frustum(self):
        model = CameraModel()
        model.set_intrinsics_from_fov(1.0, 1.0, 1.0, 10.0)
        assert model.is_ready
        assert not model.has_frustum
        with pytest.raises(CameraModelNotReadyError):
            model.bounding_planes


class TestPlaneOrientation:
    """Every plane normal must point into the frustum."""

    def test_identity_pose_normals(self, wide_camera):
        def normal(name):
            return wide_camera.get_plane(name).normal

        np.testing.assert_allclose(normal("near"), [1, 0, 0], atol=1e-12)
        np.testing.assert_allclose(normal("far"), [-1, 0, 0], atol=1e-12)
        assert normal("left")[1] > 0
        assert normal("right")[1] < 0
        assert normal("top")[2] < 0
        assert normal("bottom")[2] > 0

    def test_frustum_centroid_strictly_inside_every_plane(self, wide_camera, random_poses):
        for pose in random_poses:
            wide_camera.set_camera_pose(pose)
            centroid = wide_camera.get_transformed_corners().mean(axis=0)
            for plane in wide_camera.bounding_planes:
                assert plane.signed_distance(centroid) > 0

    def test_plane_table_covers_six_faces(self):
        assert PLANE_NAMES == ("near", "far", "left", "right", "top", "bottom")
        triples = [tuple(int(i) for i in PLANE_CORNER_TRIPLES[name]) for name in PLANE_NAMES]
        assert triples == [(0, 2, 1), (4, 5, 6), (3, 6, 2), (0, 5, 4), (3, 4, 7), (2, 6, 5)]

    def test_unknown_plane_name(self, wide_camera):
        with pytest.raises(KeyError):
            wide_camera.get_plane("front")


class TestVisibility:
    """Point-in-view queries."""

    def test_ninety_degree_scenario(self, wide_camera):
        assert wide_camera.is_point_in_view([5.0, 0.0, 0.0])
        assert not wide_camera.is_point_in_view([5.0, 5.1, 0.0])
        assert not wide_camera.is_point_in_view([5.0, -5.1, 0.0])
        assert not wide_camera.is_point_in_view([5.0, 0.0, 5.1])
        assert not wide_camera.is_point_in_view([0.5, 0.0, 0.0])

    def test_midpoint_on_axis_is_inside(self):
        model = CameraModel()
        model.set_intrinsics_from_focal_length([640, 640], 400.0, 0.3, 4.0)
        model.set_camera_pose(create_identity_pose())
        assert model.is_point_in_view([(0.3 + 4.0) / 2, 0.0, 0.0])

    def test_beyond_far_plane_is_outside(self, wide_camera):
        point = np.array([10.5, 0.0, 0.0])
        aabb_min, aabb_max = wide_camera.get_aabb()
        assert aabb_min[1] <= point[1] <= aabb_max[1]
        assert aabb_min[2] <= point[2] <= aabb_max[2]
        assert not wide_camera.is_point_in_view(point)
        assert not wide_camera.get_plane("far").is_point_inside(point)

    def test_behind_camera_is_outside(self, wide_camera):
        assert not wide_camera.is_point_in_view([-5.0, 0.0, 0.0])

    def test_corners_inside_own_frustum(self, random_poses):
        model = CameraModel()
        model.set_intrinsics_from_fov(1.3, 0.9, 0.4, 12.0)
        for pose in random_poses:
            model.set_camera_pose(pose)
            for corner in model.get_transformed_corners():
                assert model.is_point_in_view(corner)

    def test_rotated_camera(self, wide_camera):
        # Yaw by 90 degrees: camera now looks along world +Y
        wide_camera.set_camera_pose(euler2matrix([0, 0, 90], [0, 0, 0], degrees=True))
        assert wide_camera.is_point_in_view([0.0, 5.0, 0.0])
        assert not wide_camera.is_point_in_view([5.0, 0.0, 0.0])

    def test_translated_camera(self, wide_camera):
        wide_camera.set_camera_pose(euler2matrix([0, 0, 0], [100.0, 0.0, 0.0]))
        assert wide_camera.is_point_in_view([105.0, 0.0, 0.0])
        assert not wide_camera.is_point_in_view([5.0, 0.0, 0.0])


class TestAabb:

    def test_aabb_equals_corner_extremes(self, wide_camera, random_poses):
        for pose in random_poses:
            wide_camera.set_camera_pose(pose)
            corners = transform_points_np(wide_camera.get_untransformed_corners(), pose)
            aabb_min, aabb_max = wide_camera.get_aabb()
            np.testing.assert_array_equal(aabb_min, corners.min(axis=0))
            np.testing.assert_array_equal(aabb_max, corners.max(axis=0))

    def test_identity_aabb(self, wide_camera):
        aabb_min, aabb_max = wide_camera.get_aabb()
        np.testing.assert_allclose(aabb_min, [1.0, -10.0, -10.0])
        np.testing.assert_allclose(aabb_max, [10.0, 10.0, 10.0])

    def test_point_off_one_axis_fails_aabb(self, wide_camera):
        assert wide_camera.is_point_in_aabb([5.0, 0.0, 0.0])
        assert not wide_camera.is_point_in_aabb([5.0, 0.0, 100.0])
        assert not wide_camera.is_point_in_aabb([5.0, -100.0, 0.0])
        assert not wide_camera.is_point_in_aabb([100.0, 0.0, 0.0])

    def test_returned_aabb_is_a_copy(self, wide_camera):
        aabb_min, _ = wide_camera.get_aabb()
        aabb_min[:] = 1e9
        np.testing.assert_allclose(wide_camera.get_aabb()[0], [1.0, -10.0, -10.0])


class TestDegenerateRecompute:
    """A plane failure during a pose update leaves the frustum unknown."""

    @pytest.fixture
    def failing_third_plane(self, monkeypatch, wide_camera):
        build_plane = Plane.from_points
        calls = {"count": 0}

        def from_points(cls, p1, p2, p3):
            calls["count"] += 1
            if calls["count"] == 3:
                raise DegeneratePlaneError("collinear corners")
            return build_plane(p1, p2, p3)

        monkeypatch.setattr(Plane, "from_points", classmethod(from_points))
        return calls

    def test_error_propagates_and_clears_frustum(self, wide_camera, failing_third_plane):
        with pytest.raises(DegeneratePlaneError):
            wide_camera.set_camera_pose(euler2matrix([0, 0, 0.3], [1.0, 0.0, 0.0]))

        assert not wide_camera.has_frustum
        with pytest.raises(CameraModelNotReadyError, match="degenerate"):
            wide_camera.get_aabb()
        with pytest.raises(CameraModelNotReadyError):
            wide_camera.is_point_in_view([5.0, 0.0, 0.0])

    def test_next_pose_restores_frustum(self, wide_camera, failing_third_plane):
        with pytest.raises(DegeneratePlaneError):
            wide_camera.set_camera_pose(create_identity_pose())
        wide_camera.set_camera_pose(create_identity_pose())
        assert wide_camera.has_frustum
        assert wide_camera.is_point_in_view([5.0, 0.0, 0.0])


class TestPoses:

    def test_body_pose_uses_extrinsics(self, wide_camera):
        T_C_B = euler2matrix([0.1, -0.2, 0.3], [0.05, 0.0, -0.1])
        T_G_B = euler2matrix([0.0, 0.0, 0.5], [1.0, 2.0, 3.0])
        wide_camera.set_extrinsics(T_C_B)
        wide_camera.set_body_pose(T_G_B)

        np.testing.assert_allclose(wide_camera.get_camera_pose(), T_G_B @ invert_transform(T_C_B),
                                   atol=1e-12)
        np.testing.assert_allclose(wide_camera.get_body_pose(), T_G_B, atol=1e-12)

    def test_extrinsics_alone_do_not_recompute(self, wide_camera):
        before = wide_camera.get_aabb()
        wide_camera.set_extrinsics(euler2matrix([0, 0, 0], [5.0, 0.0, 0.0]))
        after = wide_camera.get_aabb()
        np.testing.assert_array_equal(before[0], after[0])
        np.testing.assert_array_equal(before[1], after[1])

    def test_non_rigid_pose_rejected_without_side_effects(self, wide_camera):
        before = wide_camera.get_aabb()
        with pytest.raises(InvalidTransformError):
            wide_camera.set_camera_pose(np.diag([2.0, 2.0, 2.0, 1.0]))
        np.testing.assert_array_equal(wide_camera.get_aabb()[1], before[1])
        np.testing.assert_array_equal(wide_camera.get_camera_pose(), create_identity_pose())


class TestBatchQueries:

    @pytest.fixture
    def cloud(self):
        rng = np.random.default_rng(3)
        return rng.uniform(-12.0, 12.0, size=(2000, 3))

    def test_numpy_batch_matches_single_queries(self, wide_camera, cloud):
        wide_camera.set_camera_pose(euler2matrix([0.2, -0.1, 0.7], [0.5, -1.0, 0.2]))
        mask = wide_camera.points_in_view(cloud)
        expected = [wide_camera.is_point_in_view(p) for p in cloud]
        assert mask.dtype == bool
        np.testing.assert_array_equal(mask, expected)
        assert mask.any() and not mask.all()

    def test_aabb_prefilter_does_not_change_result(self, wide_camera, cloud):
        np.testing.assert_array_equal(wide_camera.points_in_view(cloud, use_aabb=True),
                                      wide_camera.points_in_view(cloud, use_aabb=False))

    def test_torch_batch_matches_numpy(self, wide_camera, cloud):
        mask_np = wide_camera.points_in_view(cloud)
        mask_t = wide_camera.points_in_view(torch.from_numpy(cloud))
        assert isinstance(mask_t, torch.Tensor)
        assert mask_t.dtype == torch.bool
        np.testing.assert_array_equal(mask_t.numpy(), mask_np)

    def test_integer_tensor_matches_single_queries(self, wide_camera):
        points = torch.tensor([[5, 8, 0], [5, 0, 0], [5, 0, -4]])
        mask = wide_camera.points_in_view(points)
        expected = [wide_camera.is_point_in_view(p) for p in points.tolist()]
        assert mask.tolist() == expected == [False, True, True]


class TestVisualisationHelpers:

    def test_far_plane_points(self, wide_camera):
        far = wide_camera.get_far_plane_points()
        assert far.shape == (4, 3)
        np.testing.assert_allclose(far[:, 0], 10.0)

    def test_bounding_lines(self, wide_camera):
        lines = wide_camera.get_bounding_lines()
        assert lines.shape == (24, 3)
        corners = wide_camera.get_transformed_corners()
        # First segment is the near right edge
        np.testing.assert_array_equal(lines[0], corners[FrustumCorner.NEAR_TOP_RIGHT])
        np.testing.assert_array_equal(lines[1], corners[FrustumCorner.NEAR_BOTTOM_RIGHT])

    def test_bounding_planes_are_copies(self, wide_camera):
        planes = wide_camera.bounding_planes
        assert len(planes) == 6
        planes[0].set_from_distance_normal([0.0, 0.0, 1.0], 100.0)
        assert wide_camera.is_point_in_view([5.0, 0.0, 0.0])
