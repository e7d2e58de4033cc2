"""Public API for planar polygons embedded in n-dimensional space."""

from polyembed.contracts import (
    DEFAULT_EPSILON,
    DimensionMismatchError,
    EmptyPolygonError,
    PolygonConfig,
    PolygonError,
    UnsupportedDimensionError,
)
from polyembed.orientation import AffineBasis
from polyembed.polygon import BoundedPolygon
from polyembed.reorient import ReorientationPlan, ReorientKind
from polyembed.shapes import AxisBox, Ball, Polygon2D

__all__ = [
    "DEFAULT_EPSILON",
    "AffineBasis",
    "AxisBox",
    "Ball",
    "BoundedPolygon",
    "DimensionMismatchError",
    "EmptyPolygonError",
    "Polygon2D",
    "PolygonConfig",
    "PolygonError",
    "ReorientKind",
    "ReorientationPlan",
    "UnsupportedDimensionError",
]
