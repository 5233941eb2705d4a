"""Integrity checks for static world data (areas and transit links)."""

from __future__ import annotations

from typing import Any

from shapely.geometry import Point, box

from backend.geometry import in_plane
from backend.world import World


def _issue(kind: str, severity: str, message: str, **extra: Any) -> dict[str, Any]:
    payload = {"kind": kind, "severity": severity, "message": message}
    payload.update(extra)
    return payload


def validate_world(world: World) -> dict[str, Any]:
    """Validate transit link consistency and placement against obstacles."""
    issues: list[dict[str, Any]] = []
    link_checks = 0

    # Lookups keep the first definition, so later duplicates are unreachable.
    for collection, label in ((world.areas, "area"), (world.nodes, "node")):
        seen: set[str] = set()
        for item in collection:
            if item.id in seen:
                issues.append(
                    _issue(
                        "duplicate_id",
                        "error",
                        f"Duplicate {label} id '{item.id}'; only the first definition is used",
                        floor=item.floor,
                        **{f"{label}_id": item.id},
                    )
                )
            seen.add(item.id)

    obstacles_by_floor: dict[int, list[tuple[str, Any]]] = {}
    for area in world.areas:
        if not in_plane(area.x, area.y) or not in_plane(area.x + area.width, area.y + area.height):
            issues.append(
                _issue(
                    "area_out_of_plane",
                    "error",
                    "Area bounds extend outside the 0..100 plane",
                    floor=area.floor,
                    area_id=area.id,
                )
            )
        if area.blocks_walking:
            obstacles_by_floor.setdefault(area.floor, []).append(
                (area.id, box(area.x, area.y, area.x + area.width, area.y + area.height))
            )

    for node in world.nodes:
        if not in_plane(node.x, node.y):
            issues.append(
                _issue(
                    "node_out_of_plane",
                    "error",
                    "Transit node lies outside the 0..100 plane",
                    floor=node.floor,
                    node_id=node.id,
                )
            )

        node_pt = Point(node.x, node.y)
        for area_id, rect in obstacles_by_floor.get(node.floor, []):
            # covers() is closed-bounds, matching the pathfinder's obstacle test.
            if rect.covers(node_pt):
                issues.append(
                    _issue(
                        "node_blocked",
                        "warning",
                        f"Transit node lies inside obstacle '{area_id}'",
                        floor=node.floor,
                        node_id=node.id,
                        area_id=area_id,
                    )
                )

        for link in node.links:
            link_checks += 1
            target = world.find_node(link.id)
            if target is None:
                issues.append(
                    _issue(
                        "link_unknown_node",
                        "error",
                        f"Link targets unknown node '{link.id}'",
                        floor=node.floor,
                        node_id=node.id,
                    )
                )
                continue
            if target.floor != link.floor:
                issues.append(
                    _issue(
                        "link_floor_mismatch",
                        "error",
                        f"Link claims floor {link.floor} but node '{target.id}' is on floor {target.floor}",
                        floor=node.floor,
                        node_id=node.id,
                    )
                )
            if not any(back.id == node.id for back in target.links):
                issues.append(
                    _issue(
                        "link_asymmetric",
                        "warning",
                        f"Node '{target.id}' does not link back",
                        floor=node.floor,
                        node_id=node.id,
                    )
                )

    for area in world.areas:
        entrance = area.entrance_point
        if entrance is None:
            continue
        entrance_pt = Point(entrance.x, entrance.y)
        for area_id, rect in obstacles_by_floor.get(entrance.floor, []):
            if area_id == area.id:
                continue
            if rect.covers(entrance_pt):
                issues.append(
                    _issue(
                        "entrance_blocked",
                        "warning",
                        f"Entrance point lies inside obstacle '{area_id}'",
                        floor=entrance.floor,
                        area_id=area.id,
                    )
                )

    error_count = sum(1 for issue in issues if issue.get("severity") == "error")
    warning_count = sum(1 for issue in issues if issue.get("severity") == "warning")

    return {
        "ok": error_count == 0,
        "summary": {
            "areas": len(world.areas),
            "nodes": len(world.nodes),
            "links": link_checks,
            "errors": error_count,
            "warnings": warning_count,
        },
        "issues": issues,
    }
