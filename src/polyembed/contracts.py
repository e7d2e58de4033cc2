"""Contracts for the embedded polygon package: tolerances, config and errors."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, Sequence, Tuple, Union

import numpy as np

Vec2 = Tuple[float, float]
PointLike = Union[Sequence[float], np.ndarray]

# Relative tolerance used for zero / equality tests when the caller gives none.
DEFAULT_EPSILON = 1e-9


class PolygonError(Exception):
    """Base exception for embedded polygon errors."""
    pass


class EmptyPolygonError(PolygonError, ValueError):
    """Query needs at least one corner."""
    pass


class DimensionMismatchError(PolygonError, ValueError):
    """Point, box or matrix does not match the polygon's dimension."""
    pass


class UnsupportedDimensionError(PolygonError, NotImplementedError):
    """No plane/box intersection routine is registered for this dimension."""
    pass


@dataclass(frozen=True)
class PolygonConfig:
    """Tolerances for a BoundedPolygon."""

    epsilon: float = DEFAULT_EPSILON        # relative zero test in expand / equality
    ratio_epsilon: float = DEFAULT_EPSILON  # slope comparison in reduce

    def __post_init__(self) -> None:
        if not (self.epsilon >= 0.0):
            raise ValueError(f"epsilon must be >= 0, got: {self.epsilon}")
        if not (self.ratio_epsilon >= 0.0):
            raise ValueError(f"ratio_epsilon must be >= 0, got: {self.ratio_epsilon}")


def as_point(value: PointLike, dim: int) -> np.ndarray:
    """Coerce *value* to a float vector of length *dim*."""
    arr = np.asarray(value, dtype=float)
    if arr.shape != (dim,):
        raise DimensionMismatchError(
            f"Expected a point of shape ({dim},), got: {arr.shape}"
        )
    return arr


def canonical_json_dumps(payload: Dict[str, Any]) -> str:
    return json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=True)
