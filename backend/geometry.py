"""Planar geometry primitives shared by the routing engine.

All coordinates live in a per-floor 0..100 percentage plane.

Usage example:
    >>> from backend.geometry import Point, distance
    >>> distance(Point(0, 0, 1), Point(3, 4, 2))
    5.0
"""

from __future__ import annotations

import math
from dataclasses import dataclass

PLANE_MIN = 0.0
PLANE_MAX = 100.0


@dataclass(frozen=True, slots=True)
class Point:
    """Immutable planar position on a given floor."""

    x: float
    y: float
    floor: int


def distance(a: Point, b: Point) -> float:
    """Euclidean distance between two points, ignoring floors."""
    return math.hypot(a.x - b.x, a.y - b.y)


def in_plane(x: float, y: float) -> bool:
    """Return True when `(x, y)` lies inside the closed 0..100 plane."""
    return PLANE_MIN <= x <= PLANE_MAX and PLANE_MIN <= y <= PLANE_MAX
