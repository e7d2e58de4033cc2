"""Tests for line/plane box intersection and the dimension dispatch."""
import numpy as np
import pytest

from polyembed import AffineBasis, AxisBox, Polygon2D, UnsupportedDimensionError
from polyembed.intersect import PLANE_BOX_TESTS, line_box_intersect, plane_box_intersect_3d

X = np.array([1.0, 0.0, 0.0])
Y = np.array([0.0, 1.0, 0.0])


def _xy_plane() -> AffineBasis:
    return AffineBasis(3, np.zeros(3), (X.copy(), Y.copy()))


class TestLineBox:
    """Slab test of an infinite line against a box."""

    def test_hit_with_midpoint_witness(self):
        hit, p2 = line_box_intersect(np.zeros(3), X, AxisBox((1, -1, -1), (3, 1, 1)))
        assert hit
        np.testing.assert_allclose(p2, [2.0, 0.0])

    def test_parallel_line_outside_slab(self):
        hit, _ = line_box_intersect(np.array([0.0, 5.0, 0.0]), X, AxisBox((1, -1, -1), (3, 1, 1)))
        assert not hit

    def test_parallel_line_on_slab_face(self):
        box = AxisBox((1, 0, -1), (3, 1, 1))
        assert line_box_intersect(np.zeros(3), X, box)[0]
        assert not line_box_intersect(np.zeros(3), X, box, proper=True)[0]

    def test_diagonal_line_misses_corner(self):
        d = np.array([1.0, -1.0, 0.0]) / np.sqrt(2)
        hit, _ = line_box_intersect(np.array([0.0, 0.0, 0.5]), d, AxisBox((1, 1, 0), (2, 2, 1)))
        assert not hit


class TestPlaneBox3D:

    def test_box_crossing_plane(self):
        hit, p2 = plane_box_intersect_3d(_xy_plane(), AxisBox((0.25, 0.25, -1), (0.75, 0.75, 1)))
        assert hit
        np.testing.assert_allclose(p2, [0.5, 0.5])

    def test_box_above_plane(self):
        hit, _ = plane_box_intersect_3d(_xy_plane(), AxisBox((0, 0, 1), (1, 1, 2)))
        assert not hit

    def test_box_resting_on_plane(self):
        box = AxisBox((0, 0, 0), (1, 1, 1))
        hit, p2 = plane_box_intersect_3d(_xy_plane(), box)
        assert hit
        np.testing.assert_allclose(p2, [1.0, 1.0])
        assert not plane_box_intersect_3d(_xy_plane(), box, proper=True)[0]

    def test_flat_box_in_plane(self):
        box = AxisBox((0, 0, 0), (1, 1, 0))
        hit, p2 = plane_box_intersect_3d(_xy_plane(), box)
        assert hit
        np.testing.assert_allclose(p2, [0.5, 0.5])
        assert not plane_box_intersect_3d(_xy_plane(), box, proper=True)[0]

    def test_flat_box_off_plane(self):
        hit, _ = plane_box_intersect_3d(_xy_plane(), AxisBox((0, 0, 1), (1, 1, 1)))
        assert not hit

    def test_flat_tolerance_scales_with_box(self):
        box = AxisBox((1e6, 1e6, 0), (1e6 + 1, 1e6 + 1, 1e-4))
        hit, p2 = plane_box_intersect_3d(_xy_plane(), box)
        assert hit
        np.testing.assert_allclose(p2, [1e6 + 0.5, 1e6 + 0.5])

    def test_flat_tolerance_follows_epsilon(self):
        box = AxisBox((1e6, 1e6, 0), (1e6 + 1, 1e6 + 1, 1e-4))
        hit, p2 = plane_box_intersect_3d(_xy_plane(), box, epsilon=1e-15)
        assert hit
        np.testing.assert_allclose(p2, [1e6 + 1, 1e6 + 1])

    def test_tilted_plane(self):
        n = np.array([1.0, 1.0, 1.0]) / np.sqrt(3)
        a0 = np.array([1.0, -1.0, 0.0]) / np.sqrt(2)
        a1 = np.cross(n, a0)
        basis = AffineBasis(3, np.zeros(3), (a0, a1))
        assert plane_box_intersect_3d(basis, AxisBox((-1, -1, -1), (1, 1, 1)))[0]
        assert not plane_box_intersect_3d(basis, AxisBox((1, 1, 1), (2, 2, 2)))[0]


class TestCheckIntersectDispatch:

    def test_point_rank(self):
        basis = AffineBasis(3, np.array([5.0, 5.0, 5.0]))
        assert basis.check_intersect(AxisBox((4, 4, 4), (6, 6, 6)))[0]
        assert not basis.check_intersect(AxisBox((0, 0, 0), (1, 1, 1)))[0]

    def test_proper_plane_witness_must_be_inside_shape(self):
        square = Polygon2D([(0, 0), (10, 0), (10, 10), (0, 10)])
        box = AxisBox((9, 9, -1), (11, 11, 1))
        hit, p2 = _xy_plane().check_intersect(box, proper=True)
        assert hit
        np.testing.assert_allclose(p2, [10, 10])
        assert not _xy_plane().check_intersect(box, proper=True, shape=square)[0]
        assert _xy_plane().check_intersect(box, shape=square)[0]

    def test_only_3d_registered(self):
        assert set(PLANE_BOX_TESTS) == {3}

    def test_plane_in_4d_unsupported(self):
        e0 = np.array([1.0, 0.0, 0.0, 0.0])
        e1 = np.array([0.0, 1.0, 0.0, 0.0])
        basis = AffineBasis(4, np.zeros(4), (e0, e1))
        with pytest.raises(UnsupportedDimensionError):
            basis.check_intersect(AxisBox((0, 0, 0, 0), (1, 1, 1, 1)))

    def test_line_in_4d_supported(self):
        e0 = np.array([1.0, 0.0, 0.0, 0.0])
        basis = AffineBasis(4, np.zeros(4), (e0,))
        hit, _ = basis.check_intersect(AxisBox((1, -1, -1, -1), (2, 1, 1, 1)))
        assert hit
