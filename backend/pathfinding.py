"""A* pathfinding on a single floor of the 0..100 percentage plane.

Purpose:
- Compute obstacle-avoiding walking paths between two points on one floor.
- Expand a lattice lazily from the start point with 8-direction steps.
- Degrade to a direct line when the goal cannot be reached.

Usage example:
    >>> from backend.geometry import Point
    >>> from backend.pathfinding import find_path_on_floor
    >>> find_path_on_floor(Point(50, 92, 1), Point(20, 51, 1), 1, obstacles=[])
"""

from __future__ import annotations

import heapq
import logging
import math
from dataclasses import dataclass
from typing import Iterable, Literal, Sequence

import numpy as np

from backend.geometry import Point, distance, in_plane
from backend.world import FloorArea

logger = logging.getLogger(__name__)

# Search state is keyed on integer lattice offsets from the start point.
LATTICE_RESOLUTION = 0.5
ARRIVAL_RADIUS = 2.0
DEFAULT_MAX_EXPANSIONS = 40_000

LatticeIndex = tuple[int, int]
PathKind = Literal["found", "fallback_direct"]

# Order matters: +x, -x, +y, -y, then the four diagonals.
NEIGHBOR_STEPS: tuple[tuple[float, float], ...] = (
    (2.0, 0.0),
    (-2.0, 0.0),
    (0.0, 2.0),
    (0.0, -2.0),
    (1.5, 1.5),
    (-1.5, -1.5),
    (1.5, -1.5),
    (-1.5, 1.5),
)

_LATTICE_STEPS: tuple[tuple[int, int, float], ...] = tuple(
    (int(round(dx / LATTICE_RESOLUTION)), int(round(dy / LATTICE_RESOLUTION)), math.hypot(dx, dy))
    for dx, dy in NEIGHBOR_STEPS
)


@dataclass(frozen=True, slots=True)
class PathResult:
    """Tagged single-floor search result.

    `kind == "fallback_direct"` means the goal was unreachable (or the search
    budget ran out) and `points` is the straight `[start, end]` line.
    """

    kind: PathKind
    points: tuple[Point, ...]
    expansions: int = 0

    @property
    def is_fallback(self) -> bool:
        return self.kind == "fallback_direct"


class ObstacleMask:
    """Vectorized closed-rectangle test over one floor's blocking areas."""

    def __init__(self, obstacles: Iterable[FloorArea], floor: int) -> None:
        rects = [
            (a.x, a.y, a.x + a.width, a.y + a.height)
            for a in obstacles
            if a.floor == floor and a.blocks_walking
        ]
        self._bounds = np.asarray(rects, dtype=np.float64).reshape(-1, 4)

    def __len__(self) -> int:
        return int(self._bounds.shape[0])

    def blocks(self, x: float, y: float) -> bool:
        if self._bounds.shape[0] == 0:
            return False
        b = self._bounds
        hits = (b[:, 0] <= x) & (x <= b[:, 2]) & (b[:, 1] <= y) & (y <= b[:, 3])
        return bool(np.any(hits))


def path_length(points: Sequence[Point]) -> float:
    """Total polyline length of a waypoint sequence."""
    if len(points) < 2:
        return 0.0
    coords = np.array([(p.x, p.y) for p in points], dtype=np.float64)
    return float(np.hypot(*np.diff(coords, axis=0).T).sum())


def _validate_endpoint(point: Point, label: str) -> None:
    if not (math.isfinite(point.x) and math.isfinite(point.y)):
        raise ValueError(f"{label} coordinates must be finite")
    if not in_plane(point.x, point.y):
        raise ValueError(f"{label} is outside the 0..100 floor plane")


def search_floor_path(
    start: Point,
    end: Point,
    floor: int,
    obstacles: Iterable[FloorArea],
    max_expansions: int | None = DEFAULT_MAX_EXPANSIONS,
) -> PathResult:
    """Run A* from `start` towards `end` on one floor.

    Args:
        start: Search origin; the lattice is anchored here.
        end: Goal point, appended literally as the last waypoint.
        floor: Floor whose obstacles apply.
        obstacles: Floor areas; other floors and `entrance` areas are ignored.
        max_expansions: Optional bound on expanded nodes. `None` disables it.

    Returns:
        PathResult tagged `found`, or `fallback_direct` with `[start, end]`.

    Raises:
        ValueError: If endpoints are outside the plane or the budget is invalid.
    """
    _validate_endpoint(start, "Start")
    _validate_endpoint(end, "End")
    if max_expansions is not None and max_expansions <= 0:
        raise ValueError("max_expansions must be > 0 or None")

    mask = ObstacleMask(obstacles, floor)

    def to_point(idx: LatticeIndex) -> Point:
        return Point(
            start.x + idx[0] * LATTICE_RESOLUTION,
            start.y + idx[1] * LATTICE_RESOLUTION,
            floor,
        )

    origin: LatticeIndex = (0, 0)
    came_from: dict[LatticeIndex, LatticeIndex] = {}
    g_score: dict[LatticeIndex, float] = {origin: 0.0}
    f_score: dict[LatticeIndex, float] = {origin: distance(start, end)}

    # Ties on f are broken by the order in which nodes joined the open set.
    entry_order: dict[LatticeIndex, int] = {origin: 0}
    next_order = 1
    in_open: set[LatticeIndex] = {origin}
    open_heap: list[tuple[float, int, LatticeIndex]] = [(f_score[origin], 0, origin)]

    expansions = 0
    while open_heap:
        f, order, current = heapq.heappop(open_heap)
        if current not in in_open or order != entry_order[current] or f != f_score[current]:
            continue
        in_open.discard(current)

        current_point = to_point(current)
        if distance(current_point, end) < ARRIVAL_RADIUS:
            trail: list[Point] = []
            node = current
            while node != origin:
                trail.append(to_point(node))
                node = came_from[node]
            trail.reverse()
            return PathResult(kind="found", points=(start, *trail, end), expansions=expansions)

        if max_expansions is not None and expansions >= max_expansions:
            logger.warning(
                "Search budget of %d expansions exhausted on floor %s; using direct line",
                max_expansions,
                floor,
            )
            return PathResult(kind="fallback_direct", points=(start, end), expansions=expansions)
        expansions += 1

        for di, dj, step_cost in _LATTICE_STEPS:
            neighbor = (current[0] + di, current[1] + dj)
            candidate = to_point(neighbor)
            if not in_plane(candidate.x, candidate.y):
                continue
            if mask.blocks(candidate.x, candidate.y):
                continue

            tentative = g_score[current] + step_cost
            if tentative < g_score.get(neighbor, math.inf):
                came_from[neighbor] = current
                g_score[neighbor] = tentative
                f_score[neighbor] = tentative + distance(candidate, end)
                if neighbor not in in_open:
                    entry_order[neighbor] = next_order
                    next_order += 1
                    in_open.add(neighbor)
                heapq.heappush(open_heap, (f_score[neighbor], entry_order[neighbor], neighbor))

    logger.warning(
        "No walkable path on floor %s from (%.1f, %.1f) to (%.1f, %.1f); using direct line",
        floor,
        start.x,
        start.y,
        end.x,
        end.y,
    )
    return PathResult(kind="fallback_direct", points=(start, end), expansions=expansions)


def find_path_on_floor(
    start: Point,
    end: Point,
    floor: int,
    obstacles: Iterable[FloorArea],
    max_expansions: int | None = DEFAULT_MAX_EXPANSIONS,
) -> list[Point]:
    """Compute a walking path on one floor; never fails.

    Returns:
        Waypoints from `start` to exactly `end`. Unreachable goals yield the
        direct line `[start, end]`.
    """
    return list(search_floor_path(start, end, floor, obstacles, max_expansions=max_expansions).points)
