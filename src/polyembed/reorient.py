"""Rewrites of stored 2D corner coordinates after the embedding shrinks.

``AffineBasis.reduce`` decides what changed and returns a plan; the plan is
applied to the corner container afterwards. Keeping the two steps apart lets
``BoundedPolygon.move_corner`` try a reduction on a copy of the basis and
only touch the real corners once the move is known to succeed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

import numpy as np

from polyembed.shapes import Polygon2D

logger = logging.getLogger(__name__)


class ReorientKind(Enum):
    """How stored corners must change after a reduction."""
    NONE = "none"
    CLEAR_AXIS1 = "clear_axis1"
    CLEAR_AXIS2 = "clear_axis2"
    CLEAR_BOTH = "clear_both"
    MOVE_AXIS2_TO_AXIS1 = "move_axis2_to_axis1"
    SCALE_AXIS1_CLEAR_AXIS2 = "scale_axis1_clear_axis2"
    CLEAR_ALL = "clear_all"


@dataclass
class ReorientationPlan:
    """A single-use rewrite of a Polygon2D's coordinates.

    ``factor`` is only meaningful for SCALE_AXIS1_CLEAR_AXIS2.
    """
    kind: ReorientKind
    factor: float = 1.0
    _applied: bool = field(default=False, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.kind is not ReorientKind.SCALE_AXIS1_CLEAR_AXIS2 and self.factor != 1.0:
            raise ValueError(f"Only the scale plan carries a factor, got {self.kind}")

    @classmethod
    def none(cls) -> "ReorientationPlan":
        return cls(ReorientKind.NONE)

    @classmethod
    def clear_axis1(cls) -> "ReorientationPlan":
        return cls(ReorientKind.CLEAR_AXIS1)

    @classmethod
    def clear_axis2(cls) -> "ReorientationPlan":
        return cls(ReorientKind.CLEAR_AXIS2)

    @classmethod
    def clear_both(cls) -> "ReorientationPlan":
        return cls(ReorientKind.CLEAR_BOTH)

    @classmethod
    def move_axis2_to_axis1(cls) -> "ReorientationPlan":
        return cls(ReorientKind.MOVE_AXIS2_TO_AXIS1)

    @classmethod
    def scale(cls, factor: float) -> "ReorientationPlan":
        return cls(ReorientKind.SCALE_AXIS1_CLEAR_AXIS2, float(factor))

    @classmethod
    def clear_all(cls) -> "ReorientationPlan":
        return cls(ReorientKind.CLEAR_ALL)

    @classmethod
    def clearing(cls, first: bool, second: bool) -> "ReorientationPlan":
        """Plan zeroing whichever coordinates are flagged."""
        if first and second:
            return cls.clear_both()
        if first:
            return cls.clear_axis1()
        if second:
            return cls.clear_axis2()
        return cls.none()

    @property
    def applied(self) -> bool:
        return self._applied

    def apply(self, poly: Polygon2D, skip: Optional[int] = None) -> None:
        """Rewrite every corner of *poly* except index *skip*."""
        assert not self._applied, "ReorientationPlan applied twice"
        self._applied = True

        kind = self.kind
        if kind is ReorientKind.NONE:
            return
        logger.debug("Applying %s plan to %d corners (skip=%s)", kind.value, len(poly), skip)

        if kind is ReorientKind.CLEAR_ALL:
            for i in reversed(range(len(poly))):
                if i != skip:
                    poly.remove_corner(i)
            return

        for i in range(len(poly)):
            if i == skip:
                continue
            u, v = float(poly[i][0]), float(poly[i][1])
            if kind is ReorientKind.CLEAR_AXIS1:
                poly[i] = np.array([0.0, v])
            elif kind is ReorientKind.CLEAR_AXIS2:
                poly[i] = np.array([u, 0.0])
            elif kind is ReorientKind.CLEAR_BOTH:
                poly[i] = np.zeros(2)
            elif kind is ReorientKind.MOVE_AXIS2_TO_AXIS1:
                poly[i] = np.array([v, 0.0])
            elif kind is ReorientKind.SCALE_AXIS1_CLEAR_AXIS2:
                poly[i] = np.array([u * self.factor, 0.0])
