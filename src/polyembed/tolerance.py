"""Relative-epsilon float comparisons.

Tolerances scale with the binary exponent of the largest operand, so the
same epsilon works for coordinates near 1e-3 and near 1e6.
"""

from __future__ import annotations

import math
from typing import Iterable

import numpy as np

from polyembed.contracts import DEFAULT_EPSILON


def scale_epsilon(values: Iterable[float], epsilon: float = DEFAULT_EPSILON) -> float:
    """Absolute tolerance for comparing numbers of the magnitude in *values*."""
    max_val = max((abs(float(v)) for v in values), default=0.0)
    _, exponent = math.frexp(max_val)
    return math.ldexp(epsilon, exponent)


def float_equal(a: float, b: float, epsilon: float = DEFAULT_EPSILON) -> bool:
    return abs(a - b) <= scale_epsilon((a, b), epsilon)


def points_equal(a: np.ndarray, b: np.ndarray, epsilon: float = DEFAULT_EPSILON) -> bool:
    """Componentwise equality with one tolerance scaled over both points."""
    a = np.asarray(a, dtype=float)
    b = np.asarray(b, dtype=float)
    if a.shape != b.shape:
        return False
    delta = scale_epsilon(np.concatenate([a, b]), epsilon)
    return bool(np.all(np.abs(a - b) <= delta))


def less(x: float, y: float, proper: bool) -> bool:
    """``x < y``, widened to ``x <= y`` when boundaries are excluded."""
    return x <= y if proper else x < y


def greater(x: float, y: float, proper: bool) -> bool:
    return x >= y if proper else x > y


def less_eq(x: float, y: float, proper: bool) -> bool:
    """``x <= y``, tightened to ``x < y`` when boundaries are excluded."""
    return x < y if proper else x <= y
