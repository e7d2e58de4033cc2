"""A planar polygon living in n-dimensional space.

``BoundedPolygon`` keeps its corners as 2D coordinates in a ``Polygon2D``
together with the ``AffineBasis`` that places that plane in world space.
Corners are always read back through the basis, so two polygons with the
same world corners compare equal even when their stored coordinates differ.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple

import numpy as np

from polyembed.contracts import (
    DimensionMismatchError,
    EmptyPolygonError,
    PointLike,
    PolygonConfig,
    as_point,
    canonical_json_dumps,
)
from polyembed.intersect import polygon_box_intersect
from polyembed.orientation import AffineBasis
from polyembed.shapes import AxisBox, Ball, Polygon2D
from polyembed.tolerance import points_equal

logger = logging.getLogger(__name__)


class BoundedPolygon:
    """Polygon with corners in ``dim``-dimensional space, all in one plane.

    Adding or moving a corner off the current plane is rejected (the call
    returns ``False`` and nothing changes).
    """

    def __init__(
        self,
        dim: int = 3,
        corners: Optional[Iterable[PointLike]] = None,
        config: Optional[PolygonConfig] = None,
    ) -> None:
        self.config = config or PolygonConfig()
        self._basis = AffineBasis(dim)
        self._poly = Polygon2D()
        for corner in corners or []:
            if not self.add_corner(len(self._poly), corner):
                raise ValueError(f"Corner {list(corner)} is not coplanar with the previous corners")

    @property
    def dim(self) -> int:
        return self._basis.dim

    @property
    def basis(self) -> AffineBasis:
        """Copy of the current embedding."""
        return self._basis.copy()

    @property
    def rank(self) -> int:
        return self._basis.rank

    def _eps(self, epsilon: Optional[float]) -> float:
        return self.config.epsilon if epsilon is None else epsilon

    # ─── Corners ────────────────────────────────────────────────────────────

    def num_corners(self) -> int:
        return len(self._poly)

    def __len__(self) -> int:
        return len(self._poly)

    def get_corner(self, index: int) -> np.ndarray:
        """World-space position of corner *index*."""
        return self._basis.convert(self._poly[index])

    def corners(self) -> Iterator[np.ndarray]:
        for p2 in self._poly:
            yield self._basis.convert(p2)

    def add_corner(self, index: int, point: PointLike, epsilon: Optional[float] = None) -> bool:
        """Insert *point* before corner *index*. Returns False if it is off-plane."""
        if not 0 <= index <= len(self._poly):
            raise IndexError(f"Corner index out of range: {index}")
        ok, p2 = self._basis.expand(point, self._eps(epsilon))
        if not ok:
            logger.debug("Rejected corner %s at index %d", point, index)
            return False
        self._poly.add_corner(index, p2)
        return True

    def remove_corner(self, index: int) -> None:
        self._poly.remove_corner(index)
        plan = self._basis.reduce(self._poly, ratio_epsilon=self.config.ratio_epsilon)
        plan.apply(self._poly)

    def move_corner(self, index: int, point: PointLike, epsilon: Optional[float] = None) -> bool:
        """Move corner *index* to *point*.

        All or nothing: the trial runs on a copy of the basis, and the real
        polygon is only touched once the new point is known to fit.
        """
        if not 0 <= index < len(self._poly):
            raise IndexError(f"Corner index out of range: {index}")
        trial = self._basis.copy()
        plan = trial.reduce(self._poly, skip=index, ratio_epsilon=self.config.ratio_epsilon)
        ok, p2 = trial.expand(point, self._eps(epsilon))
        if not ok:
            logger.debug("Rejected move of corner %d to %s", index, point)
            return False

        plan.apply(self._poly, skip=index)
        self._poly[index] = p2
        self._basis = trial
        return True

    def clear(self) -> None:
        self._poly.clear()
        self._basis = AffineBasis(self.dim)

    # ─── Comparison ─────────────────────────────────────────────────────────

    def is_equal_to(self, other: "BoundedPolygon", epsilon: Optional[float] = None) -> bool:
        """Same corner count and matching world corners, in order."""
        if len(self) != len(other):
            return False
        eps = self._eps(epsilon)
        return all(
            points_equal(a, b, eps) for a, b in zip(self.corners(), other.corners())
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BoundedPolygon):
            return NotImplemented
        return self.is_equal_to(other)

    __hash__ = None  # mutable, and equality is approximate

    def sort_key(self) -> Tuple[int, Tuple[Tuple[float, ...], ...]]:
        """Key for sorting only. Carries no geometric meaning."""
        return len(self), tuple(tuple(float(x) for x in c) for c in self.corners())

    def __lt__(self, other: "BoundedPolygon") -> bool:
        if not isinstance(other, BoundedPolygon):
            return NotImplemented
        return self.sort_key() < other.sort_key()

    def __repr__(self) -> str:
        corners = [tuple(round(float(x), 6) for x in c) for c in self.corners()]
        return f"BoundedPolygon(dim={self.dim}, corners={corners})"

    # ─── Bounding volumes ───────────────────────────────────────────────────

    def bounding_box(self) -> AxisBox:
        if not len(self._poly):
            raise EmptyPolygonError("Bounding box of an empty polygon")
        pts = np.array(list(self.corners()))
        return AxisBox(pts.min(axis=0), pts.max(axis=0))

    def bounding_sphere(self) -> Ball:
        return self._to_world_ball(self._poly.bounding_sphere())

    def bounding_sphere_sloppy(self) -> Ball:
        return self._to_world_ball(self._poly.bounding_sphere_sloppy())

    def _to_world_ball(self, ball: Ball) -> Ball:
        # Axes are orthonormal, so the radius carries over unchanged.
        center = np.array(ball.center, dtype=float)
        center[self.rank:] = 0.0
        return Ball(center=self._basis.convert(center), radius=ball.radius)

    def get_center(self) -> np.ndarray:
        """Barycenter of the corners."""
        if not len(self._poly):
            raise EmptyPolygonError("Center of an empty polygon")
        return self._basis.convert(self._center_2d())

    def _center_2d(self) -> np.ndarray:
        center = np.mean(np.array(list(self._poly)), axis=0)
        center[self.rank:] = 0.0
        return center

    # ─── Queries ────────────────────────────────────────────────────────────

    def intersects(self, box: AxisBox, proper: bool = False) -> bool:
        """Whether the polygon meets *box*. *proper* excludes mere touching."""
        if box.dim != self.dim:
            raise DimensionMismatchError(f"Box has dim {box.dim}, polygon has dim {self.dim}")
        return polygon_box_intersect(self._basis, self._poly, box, proper, self.config.epsilon)

    def contains_point(self, point: PointLike, proper: bool = False, epsilon: Optional[float] = None) -> bool:
        """Whether *point* lies on the polygon (in its plane and inside its outline)."""
        pd = as_point(point, self.dim)
        if not len(self._poly):
            return False
        p2, _ = self._basis.offset(pd)
        if not points_equal(self._basis.convert(p2), pd, self._eps(epsilon)):
            return False
        return self._poly.contains(p2, proper)

    def is_contained_in(self, box: AxisBox, proper: bool = False) -> bool:
        """Whether every corner lies inside *box*."""
        if box.dim != self.dim:
            raise DimensionMismatchError(f"Box has dim {box.dim}, polygon has dim {self.dim}")
        return all(box.intersects_point(c, proper) for c in self.corners())

    # ─── Motion ─────────────────────────────────────────────────────────────

    def shift(self, vector: PointLike) -> None:
        self._basis.shift(vector)

    def move_center_to(self, point: PointLike) -> None:
        self.shift(as_point(point, self.dim) - self.get_center())

    def rotate_point(self, matrix, pivot: PointLike) -> None:
        """Rotate about a world-space pivot."""
        self._basis.rotate(matrix, pivot)

    def rotate_corner(self, matrix, index: int) -> None:
        """Rotate about corner *index*, which stays fixed."""
        self._basis.rotate_parametric(matrix, self._poly[index])

    def rotate_center(self, matrix) -> None:
        """Rotate about the barycenter of the corners."""
        if len(self._poly):
            self._basis.rotate_parametric(matrix, self._center_2d())

    # ─── Export ─────────────────────────────────────────────────────────────

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dim": self.dim,
            "corners": [[float(x) for x in c] for c in self.corners()],
        }

    def to_json(self) -> str:
        return canonical_json_dumps(self.to_dict())

    @classmethod
    def from_dict(cls, payload: Dict[str, Any], config: Optional[PolygonConfig] = None) -> "BoundedPolygon":
        dim = int(payload["dim"])
        corners: List[PointLike] = [as_point(c, dim) for c in payload.get("corners", [])]
        return cls(dim=dim, corners=corners, config=config)
