"""
Tests for rotation and depth estimation.
"""

from dataclasses import replace

import numpy as np
import pytest

from lipguide.coordinates import build_coordinate_system
from lipguide.rotation import (
    RotationAngles,
    apply_distance_scale,
    calculate_distance_scale,
    calculate_hybrid_rotation_angles,
    calculate_rotation_angles,
    calculate_rotation_angles_from_distance,
    estimate_depth_from_rotation,
)

from face_fixtures import pose_points, rotation_matrix


@pytest.fixture
def personal(face_landmarks):
    return build_coordinate_system(face_landmarks)


class TestVectorAngles:
    """Test the axis-angle estimator."""

    def test_identity(self, personal):
        angles = calculate_rotation_angles(personal, personal)
        assert angles.yaw == pytest.approx(0.0, abs=1e-6)
        assert angles.pitch == pytest.approx(0.0, abs=1e-6)
        assert angles.roll == pytest.approx(0.0, abs=1e-6)

    def test_rotation_about_frame_y(self, face_landmarks, personal):
        """Turning about the head's own Y axis moves X and Z, not Y."""
        R = rotation_matrix(personal.y_axis, 30.0)
        dynamic = build_coordinate_system(pose_points(face_landmarks, rotation=R))
        angles = calculate_rotation_angles(personal, dynamic)
        assert angles.yaw == pytest.approx(30.0, abs=1e-6)
        assert angles.pitch == pytest.approx(0.0, abs=1e-6)
        assert angles.roll == pytest.approx(30.0, abs=1e-6)

    def test_angles_are_unsigned(self, face_landmarks, personal):
        left = build_coordinate_system(pose_points(
            face_landmarks, rotation=rotation_matrix(personal.y_axis, 20.0)))
        right = build_coordinate_system(pose_points(
            face_landmarks, rotation=rotation_matrix(personal.y_axis, -20.0)))
        a = calculate_rotation_angles(personal, left)
        b = calculate_rotation_angles(personal, right)
        assert a.yaw == pytest.approx(b.yaw)
        assert a.yaw > 0.0

    def test_range(self, face_landmarks, personal):
        rng = np.random.RandomState(3)
        for _ in range(20):
            R = rotation_matrix(rng.normal(size=3), rng.uniform(-180, 180))
            dynamic = build_coordinate_system(pose_points(face_landmarks, rotation=R))
            angles = calculate_rotation_angles(personal, dynamic)
            for value in (angles.yaw, angles.pitch, angles.roll):
                assert 0.0 <= value <= 180.0


class TestDistanceAngles:
    """Test the foreshortening estimator."""

    def test_half_eye_distance_is_60_degrees(self, personal):
        dynamic = replace(personal, eye_distance=personal.eye_distance * 0.5)
        angles = calculate_rotation_angles_from_distance(personal, dynamic)
        assert angles.yaw == pytest.approx(60.0)
        assert angles.pitch == pytest.approx(0.0)

    def test_closer_face_clamps_to_zero(self, personal):
        """Ratios above 1 (user moved closer) clamp to 0 degrees."""
        dynamic = replace(
            personal,
            eye_distance=personal.eye_distance * 1.5,
            nose_to_eye_distance=personal.nose_to_eye_distance * 1.2,
        )
        angles = calculate_rotation_angles_from_distance(personal, dynamic)
        assert angles.yaw == 0.0
        assert angles.pitch == 0.0

    def test_pitch_from_mouth_to_eye_ratio(self, personal):
        dynamic = replace(
            personal,
            nose_to_eye_distance=personal.nose_to_eye_distance * np.cos(np.radians(25.0)),
        )
        angles = calculate_rotation_angles_from_distance(personal, dynamic)
        assert angles.pitch == pytest.approx(25.0)

    def test_roll_reuses_vector_method(self, face_landmarks, personal):
        R = rotation_matrix([0.0, 0.0, 1.0], 15.0)
        dynamic = build_coordinate_system(pose_points(face_landmarks, rotation=R))
        by_distance = calculate_rotation_angles_from_distance(personal, dynamic)
        by_vector = calculate_rotation_angles(personal, dynamic)
        assert by_distance.roll == pytest.approx(by_vector.roll)

    def test_zero_reference_gives_zero(self, personal):
        degenerate = replace(personal, eye_distance=0.0)
        angles = calculate_rotation_angles_from_distance(degenerate, personal)
        assert angles.yaw == 0.0


class TestHybridAngles:
    """Test the weighted blend."""

    def test_identity_is_zero(self, personal):
        angles = calculate_hybrid_rotation_angles(personal, personal)
        assert angles.yaw == pytest.approx(0.0, abs=1e-6)
        assert angles.pitch == pytest.approx(0.0, abs=1e-6)
        assert angles.roll == pytest.approx(0.0, abs=1e-6)

    def test_weights(self, face_landmarks, personal):
        R = rotation_matrix([0.3, 1.0, 0.2], 28.0)
        dynamic = build_coordinate_system(
            pose_points(face_landmarks, rotation=R, scale=0.8))
        vec = calculate_rotation_angles(personal, dynamic)
        dist = calculate_rotation_angles_from_distance(personal, dynamic)
        hybrid = calculate_hybrid_rotation_angles(personal, dynamic)
        assert hybrid.yaw == pytest.approx(0.6 * vec.yaw + 0.4 * dist.yaw)
        assert hybrid.pitch == pytest.approx(0.6 * vec.pitch + 0.4 * dist.pitch)
        assert hybrid.roll == pytest.approx(0.8 * vec.roll + 0.2 * dist.roll)


class TestDepth:
    """Test depth correction from rotation."""

    def test_zero_rotation(self):
        assert estimate_depth_from_rotation(RotationAngles(0.0, 0.0, 0.0)) == 0.0

    def test_formula(self):
        angles = RotationAngles(yaw=30.0, pitch=45.0, roll=10.0)
        expected = np.sqrt((0.1 * np.sin(np.radians(30.0))) ** 2
                           + (0.1 * np.sin(np.radians(45.0))) ** 2)
        assert estimate_depth_from_rotation(angles) == pytest.approx(expected)

    def test_roll_is_ignored(self):
        assert estimate_depth_from_rotation(RotationAngles(0.0, 0.0, 75.0)) == 0.0

    def test_base_depth_scales_linearly(self):
        angles = RotationAngles(yaw=20.0, pitch=10.0, roll=0.0)
        assert estimate_depth_from_rotation(angles, base_depth=0.3) == pytest.approx(
            3.0 * estimate_depth_from_rotation(angles, base_depth=0.1))

    def test_monotonic_and_non_negative(self):
        depths = [estimate_depth_from_rotation(RotationAngles(a, a / 2.0, 0.0))
                  for a in np.linspace(0.0, 90.0, 19)]
        assert all(d >= 0.0 for d in depths)
        assert all(b > a for a, b in zip(depths, depths[1:]))


class TestDistanceScale:

    def test_ratio(self, personal):
        dynamic = replace(personal, eye_distance=personal.eye_distance * 1.25)
        assert calculate_distance_scale(personal, dynamic) == pytest.approx(1.25)

    def test_apply(self):
        assert np.allclose(apply_distance_scale([0.1, -0.2, 0.0], 2.0), [0.2, -0.4, 0.0])

    def test_apply_batched(self):
        offsets = np.array([[0.1, -0.2, 0.0], [0.0, 0.05, 0.01]])
        scaled = apply_distance_scale(offsets, 0.5)
        assert scaled.shape == (2, 3)
        assert np.allclose(scaled, offsets * 0.5)
