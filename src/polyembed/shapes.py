"""Axis-aligned boxes, balls and the 2D corner container.

``Polygon2D`` holds the parametric (in-plane) corners of an embedded polygon.
Area queries go through Shapely; everything else is plain numpy.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional

import numpy as np
import shapely
from shapely.geometry import LineString, MultiPoint, Point, Polygon
from shapely.validation import make_valid

from polyembed.contracts import DimensionMismatchError, EmptyPolygonError, PointLike
from polyembed.tolerance import greater, less, less_eq, scale_epsilon


@dataclass
class Ball:
    """A ball (sphere in 3D, circle in 2D)."""
    center: np.ndarray
    radius: float


@dataclass
class AxisBox:
    """Axis-aligned box given by two opposite corners.

    Corners are reordered componentwise, so any two opposite corners work.
    """
    low: np.ndarray
    high: np.ndarray

    def __post_init__(self) -> None:
        a = np.asarray(self.low, dtype=float)
        b = np.asarray(self.high, dtype=float)
        if a.ndim != 1 or a.shape != b.shape:
            raise DimensionMismatchError(
                f"Box corners must be vectors of equal length, got: {a.shape} and {b.shape}"
            )
        self.low = np.minimum(a, b)
        self.high = np.maximum(a, b)

    @property
    def dim(self) -> int:
        return int(self.low.shape[0])

    def corner(self, index: int) -> np.ndarray:
        """Box corner whose bit ``i`` selects the high side on axis ``i``."""
        if not 0 <= index < (1 << self.dim):
            raise IndexError(f"Box corner index out of range: {index}")
        return np.array([
            self.high[i] if index & (1 << i) else self.low[i]
            for i in range(self.dim)
        ])

    def center(self) -> np.ndarray:
        return (self.low + self.high) / 2.0

    def intersects_point(self, point: PointLike, proper: bool = False) -> bool:
        p = np.asarray(point, dtype=float)
        for i in range(self.dim):
            if greater(self.low[i], p[i], proper) or less(self.high[i], p[i], proper):
                return False
        return True

    def intersects_segment(self, start: PointLike, end: PointLike, proper: bool = False) -> bool:
        """Slab test of the segment ``start -> end`` against this box."""
        p1 = np.asarray(start, dtype=float)
        p2 = np.asarray(end, dtype=float)
        t_min, t_max = 0.0, 1.0
        for i in range(self.dim):
            if p1[i] == p2[i]:
                if less(p1[i], self.low[i], proper) or greater(p1[i], self.high[i], proper):
                    return False
                continue
            low = (self.low[i] - p1[i]) / (p2[i] - p1[i])
            high = (self.high[i] - p1[i]) / (p2[i] - p1[i])
            if low > high:
                low, high = high, low
            t_min = max(t_min, low)
            t_max = min(t_max, high)
        return less_eq(t_min, t_max, proper)


class Polygon2D:
    """Ordered 2D corners; order defines the edges, duplicates allowed."""

    def __init__(self, corners: Optional[Iterable[PointLike]] = None) -> None:
        self._corners: List[np.ndarray] = []
        for c in corners or []:
            self._corners.append(self._as_2d(c))

    @staticmethod
    def _as_2d(value: PointLike) -> np.ndarray:
        arr = np.array(value, dtype=float)
        if arr.shape != (2,):
            raise DimensionMismatchError(f"Expected a 2D point, got shape: {arr.shape}")
        return arr

    def __len__(self) -> int:
        return len(self._corners)

    def __iter__(self) -> Iterator[np.ndarray]:
        return iter(self._corners)

    def __getitem__(self, index: int) -> np.ndarray:
        return self._corners[index]

    def __setitem__(self, index: int, value: PointLike) -> None:
        self._corners[index] = self._as_2d(value)

    def __repr__(self) -> str:
        return f"Polygon2D({[tuple(float(x) for x in c) for c in self._corners]})"

    def num_corners(self) -> int:
        return len(self._corners)

    def add_corner(self, index: int, point: PointLike) -> None:
        if not 0 <= index <= len(self._corners):
            raise IndexError(f"Corner index out of range: {index}")
        self._corners.insert(index, self._as_2d(point))

    def remove_corner(self, index: int) -> None:
        del self._corners[index]

    def clear(self) -> None:
        self._corners.clear()

    # ─── Shapely views ───────────────────────────────────────────────────────

    def to_shapely(self):
        """Shapely geometry for the corners, or ``None`` when empty.

        Fewer than three corners, or a ring with no area, become a Point or
        LineString so degenerate polygons still answer containment.
        """
        coords = [(float(c[0]), float(c[1])) for c in self._corners]
        if not coords:
            return None
        if len(coords) == 1:
            return Point(coords[0])
        if len(coords) == 2:
            return LineString(coords)
        poly = Polygon(coords)
        if poly.area == 0.0:
            return LineString(coords + [coords[0]])
        if not poly.is_valid:
            poly = make_valid(poly)
        return poly

    def contains(self, point: PointLike, proper: bool = False) -> bool:
        """Whether the 2D *point* lies inside the polygon.

        With *proper* the boundary is excluded, so shapes without area never
        contain anything.
        """
        geom = self.to_shapely()
        if geom is None:
            return False
        p = self._as_2d(point)
        pt = Point(float(p[0]), float(p[1]))
        if geom.area == 0.0:
            if proper:
                return False
            tol = scale_epsilon(np.concatenate([p] + self._corners))
            return bool(geom.distance(pt) <= tol)
        if proper:
            return bool(geom.contains(pt))
        return bool(geom.covers(pt))

    # ─── Bounding volumes ────────────────────────────────────────────────────

    def bounding_sphere(self) -> Ball:
        """Minimum enclosing circle of the corners."""
        if not self._corners:
            raise EmptyPolygonError("Bounding sphere of an empty polygon")
        geom = MultiPoint([(float(c[0]), float(c[1])) for c in self._corners])
        radius = float(shapely.minimum_bounding_radius(geom))
        if radius == 0.0:
            return Ball(center=self._corners[0].copy(), radius=0.0)
        circle = shapely.minimum_bounding_circle(geom)
        center = np.array(circle.centroid.coords[0], dtype=float)
        return Ball(center=center, radius=radius)

    def bounding_sphere_sloppy(self) -> Ball:
        """Enclosing circle centred on the bounding-box midpoint. Not minimal."""
        if not self._corners:
            raise EmptyPolygonError("Bounding sphere of an empty polygon")
        pts = np.array(self._corners)
        center = (pts.min(axis=0) + pts.max(axis=0)) / 2.0
        radius = float(np.max(np.linalg.norm(pts - center, axis=1)))
        return Ball(center=center, radius=radius)
