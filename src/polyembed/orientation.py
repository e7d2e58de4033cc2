"""Affine embedding of a 2D parametric plane inside n-D world space.

An ``AffineBasis`` is an origin plus zero, one or two orthonormal axes. The
number of axes is the rank: a single point, a line, or a plane. Corners are
stored as parametric ``(u, v)`` pairs and reconstructed as
``origin + u * axes[0] + v * axes[1]``. Coordinates on missing axes are
always exactly zero.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from polyembed.contracts import (
    DEFAULT_EPSILON,
    DimensionMismatchError,
    PointLike,
    UnsupportedDimensionError,
    as_point,
)
from polyembed.intersect import PLANE_BOX_TESTS, line_box_intersect
from polyembed.reorient import ReorientationPlan
from polyembed.shapes import AxisBox, Polygon2D
from polyembed.tolerance import float_equal

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class AffineBasis:
    """Origin and up to two orthonormal axes in ``dim``-dimensional space."""

    dim: int
    origin: Optional[np.ndarray] = None
    axes: Tuple[np.ndarray, ...] = ()

    def __post_init__(self) -> None:
        if self.dim < 1:
            raise ValueError(f"dim must be >= 1, got: {self.dim}")
        assert len(self.axes) <= 2, "At most two axes"
        assert self.origin is not None or not self.axes, "Axes on an empty basis"

    @property
    def rank(self) -> int:
        return len(self.axes)

    @property
    def is_empty(self) -> bool:
        return self.origin is None

    def copy(self) -> "AffineBasis":
        origin = None if self.origin is None else self.origin.copy()
        return AffineBasis(self.dim, origin, tuple(a.copy() for a in self.axes))

    def _check_point(self, point: PointLike) -> np.ndarray:
        return as_point(point, self.dim)

    def _check_matrix(self, matrix) -> np.ndarray:
        m = np.asarray(matrix, dtype=float)
        if m.shape != (self.dim, self.dim):
            raise DimensionMismatchError(
                f"Expected a ({self.dim}, {self.dim}) matrix, got: {m.shape}"
            )
        return m

    # ─── Conversion ─────────────────────────────────────────────────────────

    def convert(self, p2: PointLike) -> np.ndarray:
        """World point for parametric coordinates *p2*."""
        assert self.origin is not None, "convert() on an empty basis"
        out = self.origin.copy()
        for j in range(2):
            if j < self.rank:
                out = out + self.axes[j] * float(p2[j])
            else:
                assert p2[j] == 0, f"Nonzero coordinate on missing axis {j}: {p2[j]}"
        return out

    def offset(self, point: PointLike) -> Tuple[np.ndarray, np.ndarray]:
        """Project *point* onto the embedding.

        Returns ``(p2, residual)``: the in-plane coordinates and the part of
        ``point - origin`` perpendicular to every axis.
        """
        assert self.origin is not None, "offset() on an empty basis"
        out = self._check_point(point) - self.origin
        p2 = np.zeros(2)
        for j, axis in enumerate(self.axes):
            p2[j] = float(np.dot(out, axis))
            out = out - axis * p2[j]
        return p2, out

    # ─── Growing ────────────────────────────────────────────────────────────

    def expand(self, point: PointLike, epsilon: float = DEFAULT_EPSILON) -> Tuple[bool, np.ndarray]:
        """Fit *point* into the embedding, adding an axis if needed.

        Returns ``(ok, p2)``. Fails, leaving the basis unchanged, when the
        point needs a third independent direction. The zero test on the
        residual is relative to ``|point - origin|``.
        """
        pd = self._check_point(point)
        p2 = np.zeros(2)

        if self.origin is None:
            self.origin = pd.copy()
            logger.debug("Basis origin set to %s", pd)
            return True, p2

        shift = pd - self.origin
        start_shift = shift
        bound = float(np.dot(shift, shift)) * epsilon

        for j in range(3):
            if float(np.dot(shift, start_shift)) <= bound:
                return True, p2
            if j == 2:
                logger.debug("Point %s is off the plane of the basis", pd)
                return False, p2
            if j >= self.rank:
                mag = float(np.linalg.norm(shift))
                p2[j] = mag
                self.axes = self.axes + (shift / mag,)
                logger.debug("Basis rank grew to %d", self.rank)
                return True, p2
            p2[j] = float(np.dot(shift, self.axes[j]))
            shift = shift - self.axes[j] * p2[j]

        raise AssertionError("unreachable")

    # ─── Shrinking ──────────────────────────────────────────────────────────

    def reduce(
        self,
        poly: Polygon2D,
        skip: Optional[int] = None,
        ratio_epsilon: float = DEFAULT_EPSILON,
    ) -> ReorientationPlan:
        """Drop axes the corners of *poly* (ignoring index *skip*) no longer span.

        Mutates the basis and returns the plan that rewrites the stored
        corners to match. The plan must be applied exactly once.
        """
        remaining = [i for i in range(len(poly)) if i != skip]
        if not remaining:
            self.origin = None
            self.axes = ()
            logger.debug("Basis cleared, no corners left")
            return ReorientationPlan.clear_all()

        assert self.origin is not None, "Corners stored on an empty basis"

        first = poly[remaining[0]]
        still_valid = [False, False]
        ratio: Optional[float] = None

        for i in remaining[1:]:
            diff = poly[i] - first
            if diff[0] == 0 and diff[1] == 0:
                continue
            if diff[1] == 0 or diff[0] == 0:
                j = 0 if diff[1] == 0 else 1
                if still_valid[1 - j] or ratio is not None:
                    return ReorientationPlan.none()
                still_valid[j] = True
                continue
            if still_valid[0] or still_valid[1]:
                return ReorientationPlan.none()
            new_ratio = float(diff[1] / diff[0])
            if ratio is None:
                ratio = new_ratio
            elif not float_equal(ratio, new_ratio, ratio_epsilon):
                return ReorientationPlan.none()

        u0, v0 = float(first[0]), float(first[1])

        if still_valid[0]:
            if self.rank == 2:
                logger.debug("Basis reduced to a line along axis 0")
            if v0 != 0:
                self.origin = self.origin + self.axes[1] * v0
                self.axes = self.axes[:1]
                return ReorientationPlan.clear_axis2()
            self.axes = self.axes[:1]
            return ReorientationPlan.none()

        if still_valid[1]:
            if u0 != 0:
                self.origin = self.origin + self.axes[0] * u0
            self.axes = (self.axes[1],)
            logger.debug("Basis reduced to a line along former axis 1")
            return ReorientationPlan.move_axis2_to_axis1()

        if ratio is None:
            shift_points = [u0 != 0, v0 != 0]
            for j in range(self.rank):
                if shift_points[j]:
                    self.origin = self.origin + self.axes[j] * float(first[j])
            if self.axes:
                logger.debug("Basis reduced to a single point")
            self.axes = ()
            return ReorientationPlan.clearing(*shift_points)

        # Colinear along a line parallel to neither axis.
        axis0, axis1 = self.axes
        factor = math.sqrt(1.0 + ratio * ratio)
        self.origin = self.origin + axis1 * (v0 - ratio * u0)
        self.axes = ((axis0 + axis1 * ratio) / factor,)
        logger.debug("Basis reduced to a diagonal line, slope %g", ratio)
        return ReorientationPlan.scale(factor)

    # ─── Motion ─────────────────────────────────────────────────────────────

    def shift(self, vector: PointLike) -> None:
        if self.origin is not None:
            self.origin = self.origin + self._check_point(vector)

    def rotate(self, matrix, pivot: PointLike) -> None:
        """Rotate the embedding by *matrix* about the world point *pivot*."""
        m = self._check_matrix(matrix)
        p = self._check_point(pivot)
        if self.origin is not None:
            self.origin = p + m @ (self.origin - p)
        self.axes = tuple(m @ a for a in self.axes)

    def rotate_parametric(self, matrix, pivot: PointLike) -> None:
        """Rotate by *matrix* about the point with parametric coordinates *pivot*."""
        assert self.origin is not None, "rotate_parametric() on an empty basis"
        m = self._check_matrix(matrix)
        if self.rank == 0:
            assert pivot[0] == 0 and pivot[1] == 0, "Nonzero pivot on a point basis"
            return
        shift = np.zeros(self.dim)
        for j in range(2):
            if j < self.rank:
                shift = shift + self.axes[j] * float(pivot[j])
            else:
                assert pivot[j] == 0, f"Nonzero pivot coordinate on missing axis {j}"
        self.axes = tuple(m @ a for a in self.axes)
        self.origin = self.origin + shift - m @ shift

    # ─── Intersection ───────────────────────────────────────────────────────

    def check_intersect(
        self,
        box: AxisBox,
        proper: bool = False,
        shape: Optional[Polygon2D] = None,
        epsilon: float = DEFAULT_EPSILON,
    ) -> Tuple[bool, np.ndarray]:
        """Whether the point, line or plane of the embedding meets *box*.

        Returns ``(hit, witness)`` with the witness in parametric
        coordinates. For a plane with *proper* set, the witness must also lie
        strictly inside *shape*.
        """
        assert self.origin is not None, "check_intersect() on an empty basis"
        if box.dim != self.dim:
            raise DimensionMismatchError(f"Box has dim {box.dim}, basis has dim {self.dim}")

        if self.rank == 0:
            return box.intersects_point(self.origin, proper), np.zeros(2)

        if self.rank == 1:
            return line_box_intersect(self.origin, self.axes[0], box, proper)

        plane_test = PLANE_BOX_TESTS.get(self.dim)
        if plane_test is None:
            raise UnsupportedDimensionError(
                f"Plane/box intersection is only implemented for dims {sorted(PLANE_BOX_TESTS)}, "
                f"got: {self.dim}"
            )
        hit, p2 = plane_test(self, box, proper, epsilon)
        if hit and proper and shape is not None:
            hit = shape.contains(p2, proper=True)
        return hit, p2
