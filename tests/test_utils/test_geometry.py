"""Tests for rotations and point measurements."""

import math

import numpy as np
import pytest

from pcfuse.utils.geometry import distance, measure, nearest_vertex, rotation_z


class TestRotationZ:
    def test_quarter_turn(self):
        p = rotation_z(math.pi / 2) @ np.array([1.0, 0.0, 0.0, 1.0])
        np.testing.assert_allclose(p, (0.0, 1.0, 0.0, 1.0), atol=1e-12)

    def test_inverse_is_negative_angle(self):
        np.testing.assert_allclose(rotation_z(0.7) @ rotation_z(-0.7), np.eye(4), atol=1e-12)

    def test_z_untouched(self):
        p = rotation_z(1.234) @ np.array([0.0, 0.0, 5.0, 1.0])
        np.testing.assert_allclose(p, (0.0, 0.0, 5.0, 1.0), atol=1e-12)


class TestMeasure:
    @pytest.fixture
    def positions(self) -> np.ndarray:
        return np.array([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.0, 2.0, 0.0]], dtype=np.float32)

    def test_distance(self):
        assert distance((0, 0, 0), (3, 4, 0)) == pytest.approx(5.0)

    def test_nearest_vertex(self, positions):
        idx, dist = nearest_vertex(positions, (0.9, 0.1, 0.0))
        assert idx == 1
        assert dist == pytest.approx(math.sqrt(0.02))

    def test_measure_snaps_to_points(self, positions):
        a, b, dist = measure(positions, (0.1, -0.1, 0.0), (0.1, 1.8, 0.05))
        np.testing.assert_allclose(a, (0, 0, 0))
        np.testing.assert_allclose(b, (0, 2, 0))
        assert dist == pytest.approx(2.0)

    def test_empty_point_set(self):
        with pytest.raises(ValueError, match="empty"):
            nearest_vertex(np.zeros((0, 3)), (0, 0, 0))
