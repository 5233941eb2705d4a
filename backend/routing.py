"""Multi-stop route composition across floors.

Purpose:
- Order destinations with a greedy, floor-aware nearest-next heuristic.
- Chain floor transitions through stairs, escalators and lifts.
- Emit one path segment per floor walk with a localized instruction.

Routing never raises for unroutable stops: the plan is cut short, the
failure is logged, and the caller receives the segments computed so far.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Literal, Sequence

from backend.floor_graph import find_floor_path
from backend.geometry import Point, distance
from backend.instructions import Translate
from backend.pathfinding import DEFAULT_MAX_EXPANSIONS, search_floor_path
from backend.world import DestinationStop, FloorArea, NavigationNode, PathSegment

logger = logging.getLogger(__name__)

# Cost of one floor change relative to in-floor distance; keeps same-floor stops first.
FLOOR_CHANGE_PENALTY = 1000.0

RouteFailure = Literal["no_floor_path", "no_transit_node", "unresolved_link"]


@dataclass(slots=True)
class RoutePlan:
    """Composed route plus completion metadata."""

    segments: list[PathSegment]
    complete: bool = True
    visited: list[str | int] = field(default_factory=list)
    unreached: list[str | int] = field(default_factory=list)
    failure: RouteFailure | None = None
    fallback_segments: int = 0


def floor_aware_distance(target: Point, current: Point, floor_change_penalty: float = FLOOR_CHANGE_PENALTY) -> float:
    """Ordering metric: penalized floor difference plus planar distance."""
    return floor_change_penalty * abs(target.floor - current.floor) + distance(target, current)


def _nearest_transit(nodes: Sequence[NavigationNode], from_floor: int, to_floor: int, current: Point) -> NavigationNode | None:
    candidates = [n for n in nodes if n.floor == from_floor and n.links_to(to_floor)]
    if not candidates:
        return None
    candidates.sort(key=lambda n: distance(n.point, current))
    return candidates[0]


def _resolve_node(nodes: Sequence[NavigationNode], node_id: str) -> NavigationNode | None:
    for node in nodes:
        if node.id == node_id:
            return node
    return None


def plan_route(
    start: Point,
    destinations: Iterable[DestinationStop],
    areas: Iterable[FloorArea],
    nodes: Iterable[NavigationNode],
    translate: Translate,
    floor_change_penalty: float = FLOOR_CHANGE_PENALTY,
    max_expansions: int | None = DEFAULT_MAX_EXPANSIONS,
) -> RoutePlan:
    """Compose a route from `start` through every destination.

    Args:
        start: Visitor position.
        destinations: Stops to visit, in any order.
        areas: Floor areas used as obstacles.
        nodes: Transit nodes with their cross-floor links.
        translate: Instruction text provider (`goTo`, `proceedTo`, `arrivedAt`).
        floor_change_penalty: Weight of one floor change in stop ordering.
        max_expansions: Per-segment A* budget, forwarded to the pathfinder.

    Returns:
        RoutePlan whose `complete` flag is False when routing stopped early.
    """
    if floor_change_penalty < 0:
        raise ValueError("floor_change_penalty must be >= 0")

    area_list = list(areas)
    node_list = list(nodes)
    remaining = list(destinations)

    plan = RoutePlan(segments=[])
    current = start

    def walk(frm: Point, to: Point, floor: int, instruction: str) -> None:
        result = search_floor_path(frm, to, floor, area_list, max_expansions=max_expansions)
        if result.is_fallback:
            plan.fallback_segments += 1
        plan.segments.append(PathSegment(floor=floor, points=result.points, instruction=instruction))

    def abort(stop: DestinationStop, reason: RouteFailure) -> RoutePlan:
        plan.complete = False
        plan.failure = reason
        plan.unreached = [stop.id, *(s.id for s in remaining)]
        return plan

    while remaining:
        remaining.sort(key=lambda s: floor_aware_distance(s.destination_point, current, floor_change_penalty))
        stop = remaining.pop(0)
        target = stop.destination_point

        if current.floor != target.floor:
            floor_path = find_floor_path(current.floor, target.floor, node_list)
            if floor_path is None:
                logger.error("Could not find a floor path from %s to %s", current.floor, target.floor)
                return abort(stop, "no_floor_path")

            for from_floor, to_floor in zip(floor_path, floor_path[1:]):
                transit = _nearest_transit(node_list, from_floor, to_floor, current)
                if transit is None:
                    logger.error("No transit node found to get from floor %s to %s", from_floor, to_floor)
                    return abort(stop, "no_transit_node")

                walk(
                    current,
                    transit.point,
                    from_floor,
                    translate("goTo", destination=translate(transit.type), floor=to_floor),
                )

                link = transit.first_link_to(to_floor)
                linked = _resolve_node(node_list, link.id) if link is not None else None
                if linked is None:
                    logger.error(
                        "Transit node %s links to unknown node %s",
                        transit.id,
                        link.id if link is not None else "?",
                    )
                    return abort(stop, "unresolved_link")
                if linked.floor != to_floor:
                    logger.error(
                        "Transit node %s claims node %s is on floor %s but it is on floor %s",
                        transit.id,
                        linked.id,
                        to_floor,
                        linked.floor,
                    )
                    return abort(stop, "unresolved_link")
                current = linked.point

        key = "proceedTo" if remaining else "arrivedAt"
        walk(current, target, target.floor, translate(key, destination=stop.destination_name))
        plan.visited.append(stop.id)
        current = target

    return plan


def calculate_multi_stop_route(
    start: Point,
    destinations: Iterable[DestinationStop],
    areas: Iterable[FloorArea],
    nodes: Iterable[NavigationNode],
    translate: Translate,
    floor_change_penalty: float = FLOOR_CHANGE_PENALTY,
    max_expansions: int | None = DEFAULT_MAX_EXPANSIONS,
) -> list[PathSegment]:
    """Compose a multi-stop route and return only its segments.

    A route that does not end at the last requested stop means routing could
    not complete; see `plan_route` for the reason.
    """
    return plan_route(
        start,
        destinations,
        areas,
        nodes,
        translate,
        floor_change_penalty=floor_change_penalty,
        max_expansions=max_expansions,
    ).segments
