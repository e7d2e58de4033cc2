"""
Shared test fixtures for embedded polygon tests.
"""
import sys
from pathlib import Path

import pytest

# Add src/ to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from polyembed import BoundedPolygon


UNIT_SQUARE = [(0, 0, 0), (1, 0, 0), (1, 1, 0), (0, 1, 0)]


@pytest.fixture
def unit_square():
    """Unit square in the z=0 plane, counter-clockwise from the origin."""
    return BoundedPolygon(corners=UNIT_SQUARE)


@pytest.fixture
def segment():
    """Two corners along +x: (0,0,0) -> (2,0,0)."""
    return BoundedPolygon(corners=[(0, 0, 0), (2, 0, 0)])


@pytest.fixture
def single_point():
    """One corner at (5,5,5)."""
    return BoundedPolygon(corners=[(5, 5, 5)])


@pytest.fixture
def tilted_quad():
    """Rectangle in a plane spanned by (3,4,0) and (0,0,5), offset from the origin."""
    return BoundedPolygon(corners=[(1, 2, 3), (4, 6, 3), (4, 6, 8), (1, 2, 8)])
