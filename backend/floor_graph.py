"""Floor-level connectivity implied by transit node links."""

from __future__ import annotations

from collections import deque
from typing import Iterable

from backend.world import NavigationNode


def floor_adjacency(nodes: Iterable[NavigationNode]) -> dict[int, list[int]]:
    """Map each floor to the floors directly reachable from it.

    Neighbour order follows node order, then link order. Links are followed
    exactly as declared; reverse edges are not inferred.
    """
    adjacency: dict[int, dict[int, None]] = {}
    for node in nodes:
        reachable = adjacency.setdefault(node.floor, {})
        for link in node.links:
            if link.floor != node.floor:
                reachable.setdefault(link.floor, None)
    return {floor: list(targets) for floor, targets in adjacency.items()}


def find_floor_path(start_floor: int, end_floor: int, nodes: Iterable[NavigationNode]) -> list[int] | None:
    """Compute the floor sequence with the fewest transit hops using BFS.

    Returns:
        Floors from `start_floor` to `end_floor` inclusive, `[start_floor]` when
        they are equal, or None when the floors are not connected.
    """
    start = int(start_floor)
    goal = int(end_floor)
    if start == goal:
        return [start]

    neighbors = floor_adjacency(nodes)

    q: deque[int] = deque([start])
    parent: dict[int, int | None] = {start: None}

    while q:
        cur = q.popleft()
        for nxt in neighbors.get(cur, []):
            if nxt in parent:
                continue
            parent[nxt] = cur
            if nxt == goal:
                route = [goal]
                while route[-1] != start:
                    p = parent[route[-1]]
                    if p is None:
                        break
                    route.append(p)
                route.reverse()
                return route
            q.append(nxt)

    return None
