"""Box intersection tests for embedded lines, planes and polygons.

The plane/box test depends on the ambient dimension and is looked up in
``PLANE_BOX_TESTS`` by dimension. Only 3D is registered; other dimensions
raise ``UnsupportedDimensionError`` from ``AffineBasis.check_intersect``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Dict, Tuple

import numpy as np

from polyembed.contracts import DEFAULT_EPSILON
from polyembed.shapes import AxisBox, Polygon2D
from polyembed.tolerance import less, greater, less_eq, points_equal, scale_epsilon

if TYPE_CHECKING:
    from polyembed.orientation import AffineBasis

PlaneBoxTest = Callable[["AffineBasis", AxisBox, bool, float], Tuple[bool, np.ndarray]]


def line_box_intersect(
    origin: np.ndarray,
    direction: np.ndarray,
    box: AxisBox,
    proper: bool = False,
) -> Tuple[bool, np.ndarray]:
    """Slab test of the infinite line ``origin + t * direction`` against *box*.

    Returns ``(hit, (t_mid, 0))`` where ``t_mid`` is the midpoint of the
    parameter interval inside the box.
    """
    t_min = t_max = 0.0
    got_bounds = False

    for i in range(box.dim):
        dist = float(direction[i])
        if dist == 0:
            if less(origin[i], box.low[i], proper) or greater(origin[i], box.high[i], proper):
                return False, np.zeros(2)
            continue
        low = (box.low[i] - origin[i]) / dist
        high = (box.high[i] - origin[i]) / dist
        if low > high:
            low, high = high, low
        if got_bounds:
            t_min = max(t_min, low)
            t_max = min(t_max, high)
        else:
            t_min, t_max = low, high
            got_bounds = True

    assert got_bounds, "Line direction is zero in every dimension"

    if less_eq(t_min, t_max, proper):
        return True, np.array([(t_min + t_max) / 2.0, 0.0])
    return False, np.zeros(2)


def plane_box_intersect_3d(
    basis: "AffineBasis",
    box: AxisBox,
    proper: bool = False,
    epsilon: float = DEFAULT_EPSILON,
) -> Tuple[bool, np.ndarray]:
    """Whether the plane of a rank-2 basis in 3D passes through *box*.

    Picks the two box corners extreme along the plane normal. The plane
    meets the box iff those corners are on opposite sides (or touching,
    unless *proper*). The witness is where the corner-to-corner diagonal
    crosses the plane. A box thinner than *epsilon*, relative to its corner
    magnitudes, along the normal counts as flat.
    """
    assert basis.origin is not None and basis.rank == 2, "Plane test needs a rank-2 basis"
    normal = np.cross(basis.axes[0], basis.axes[1])
    normal_mag = float(np.linalg.norm(normal))
    flat_tol = scale_epsilon(np.concatenate([box.low, box.high]), epsilon)

    high_corner_num = 0
    for i in range(3):
        if normal[i] > 0:
            high_corner_num |= 1 << i
    low_corner_num = high_corner_num ^ 7

    high_corner = box.corner(high_corner_num)
    low_corner = box.corner(low_corner_num)

    perp_size = float(np.dot(normal, high_corner - low_corner)) / normal_mag
    assert perp_size >= 0

    if perp_size < flat_tol:
        # Box is flat and parallel to the plane.
        mid = box.center()
        p2, _ = basis.offset(mid)
        return (not proper and points_equal(basis.convert(p2), mid, epsilon)), p2

    if (less(float(np.dot(high_corner - basis.origin, normal)), 0.0, proper)
            or less(float(np.dot(basis.origin - low_corner, normal)), 0.0, proper)):
        return False, np.zeros(2)

    p2_high, res_high = basis.offset(high_corner)
    p2_low, res_low = basis.offset(low_corner)
    high_dist = float(np.linalg.norm(res_high))
    low_dist = float(np.linalg.norm(res_low))
    total = high_dist + low_dist
    frac = high_dist / total if total > 0 else 0.5
    return True, p2_high * (1.0 - frac) + p2_low * frac


PLANE_BOX_TESTS: Dict[int, PlaneBoxTest] = {
    3: plane_box_intersect_3d,
}


def polygon_box_intersect(
    basis: "AffineBasis",
    poly: Polygon2D,
    box: AxisBox,
    proper: bool = False,
    epsilon: float = DEFAULT_EPSILON,
) -> bool:
    """Whether the polygon stored as (*basis*, *poly*) meets *box*.

    The embedding must reach the box first. Then either an edge crosses the
    box, or the box sits inside the polygon and the witness point shows it.
    The plane prefilter runs without the outline check, since a box can
    properly overlap the interior while the plane witness lies outside it.
    """
    n = len(poly)
    if n == 0:
        return False

    hit, witness = basis.check_intersect(box, proper, epsilon=epsilon)
    if not hit:
        return False

    start = basis.convert(poly[n - 1])
    for i in range(n):
        end = basis.convert(poly[i])
        if box.intersects_segment(start, end, proper):
            return True
        start = end

    return poly.contains(witness, proper)
