"""Utility helpers shared across backend modules.

Purpose:
- Convert engine value types to JSON-safe payloads.
"""

from __future__ import annotations

from typing import Any, Iterable

from backend.geometry import Point
from backend.routing import RoutePlan
from backend.world import FloorArea, NavigationNode, PathSegment


def point_payload(point: Point) -> dict[str, float | int]:
    return {"x": float(point.x), "y": float(point.y), "floor": int(point.floor)}


def to_serializable_points(points: Iterable[Point]) -> list[dict[str, float | int]]:
    """Convert points to JSON-friendly dictionary objects."""
    return [point_payload(p) for p in points]


def segment_payload(segment: PathSegment) -> dict[str, Any]:
    return {
        "floor": int(segment.floor),
        "points": to_serializable_points(segment.points),
        "instruction": segment.instruction,
    }


def route_plan_payload(plan: RoutePlan) -> dict[str, Any]:
    """Serialize a RoutePlan including its completion metadata."""
    return {
        "segments": [segment_payload(s) for s in plan.segments],
        "complete": plan.complete,
        "visited": list(plan.visited),
        "unreached": list(plan.unreached),
        "failure": plan.failure,
        "fallback_segments": plan.fallback_segments,
    }


def area_payload(area: FloorArea) -> dict[str, Any]:
    return {
        "id": area.id,
        "type": area.type,
        "floor": area.floor,
        "x": area.x,
        "y": area.y,
        "width": area.width,
        "height": area.height,
        "name": dict(area.name),
        "entrance_point": point_payload(area.entrance_point) if area.entrance_point else None,
    }


def node_payload(node: NavigationNode) -> dict[str, Any]:
    return {
        "id": node.id,
        "type": node.type,
        "floor": node.floor,
        "x": node.x,
        "y": node.y,
        "links": [{"floor": link.floor, "id": link.id} for link in node.links],
    }
