"""Static building data: floor areas, transit nodes and destination stops.

The world is loaded once from JSON and treated as read-only by the engine.

Expected document layout:
    {
      "areas": [
        {"id": "f1_bakery", "type": "shop", "floor": 1,
         "x": 40, "y": 10, "width": 25, "height": 25,
         "name": {"en": "Bakery"}, "entrance_point": {"x": 52.5, "y": 36}}
      ],
      "nodes": [
        {"id": "s1_left", "type": "stairs", "floor": 1, "x": 2.5, "y": 45,
         "links": [{"floor": 2, "id": "s2_left"}]}
      ]
    }
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from backend.geometry import Point

AREA_TYPES = ("shop", "washroom", "utility", "exit", "entrance")
NODE_TYPES = ("stairs", "escalator", "lift")
WALKABLE_AREA_TYPE = "entrance"

DEFAULT_WORLD_PATH = Path(__file__).resolve().parent / "data" / "store_layout.json"


@dataclass(frozen=True, slots=True)
class FloorArea:
    """Axis-aligned rectangle on one floor (shop, washroom, exit, ...)."""

    id: str
    floor: int
    x: float
    y: float
    width: float
    height: float
    type: str
    name: dict[str, str] = field(default_factory=dict, compare=False)
    entrance_point: Point | None = None

    @property
    def blocks_walking(self) -> bool:
        return self.type != WALKABLE_AREA_TYPE

    def contains(self, x: float, y: float) -> bool:
        """Closed-bounds containment test."""
        return self.x <= x <= self.x + self.width and self.y <= y <= self.y + self.height

    def label(self, language: str = "en") -> str:
        return self.name.get(language) or self.name.get("en") or self.id


@dataclass(frozen=True, slots=True)
class TransitLink:
    """Directed link from a transit node to a paired node on another floor."""

    floor: int
    id: str


@dataclass(frozen=True, slots=True)
class NavigationNode:
    """Stairs, escalator or lift endpoint on one floor."""

    id: str
    type: str
    floor: int
    x: float
    y: float
    links: tuple[TransitLink, ...] = ()

    @property
    def point(self) -> Point:
        return Point(self.x, self.y, self.floor)

    def links_to(self, floor: int) -> bool:
        return any(link.floor == floor for link in self.links)

    def first_link_to(self, floor: int) -> TransitLink | None:
        for link in self.links:
            if link.floor == floor:
                return link
        return None


@dataclass(frozen=True, slots=True)
class DestinationStop:
    """One stop the visitor wants to reach."""

    id: str | int
    destination_point: Point
    destination_name: str


@dataclass(frozen=True, slots=True)
class PathSegment:
    """Contiguous walk on a single floor with its instruction."""

    floor: int
    points: tuple[Point, ...]
    instruction: str


@dataclass(slots=True)
class World:
    """Read-only container for all static map data."""

    areas: list[FloorArea]
    nodes: list[NavigationNode]
    _areas_by_id: dict[str, FloorArea] = field(init=False, repr=False)
    _nodes_by_id: dict[str, NavigationNode] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._areas_by_id = {}
        for area in self.areas:
            self._areas_by_id.setdefault(area.id, area)
        self._nodes_by_id = {}
        for node in self.nodes:
            # First definition wins, matching a linear search over the node list.
            self._nodes_by_id.setdefault(node.id, node)

    @property
    def floors(self) -> list[int]:
        """All floor numbers referenced by areas or nodes, ascending."""
        return sorted({a.floor for a in self.areas} | {n.floor for n in self.nodes})

    def find_area(self, area_id: str) -> FloorArea | None:
        return self._areas_by_id.get(area_id)

    def find_node(self, node_id: str) -> NavigationNode | None:
        return self._nodes_by_id.get(node_id)

    def areas_on_floor(self, floor: int) -> list[FloorArea]:
        return [a for a in self.areas if a.floor == floor]

    def nodes_on_floor(self, floor: int) -> list[NavigationNode]:
        return [n for n in self.nodes if n.floor == floor]

    def destination_for_area(self, area_id: str, language: str = "en") -> DestinationStop:
        """Build a stop targeting an area's entrance point.

        Raises:
            KeyError: If the area does not exist.
            ValueError: If the area has no entrance point.
        """
        area = self.find_area(area_id)
        if area is None:
            raise KeyError(f"Area '{area_id}' was not found")
        if area.entrance_point is None:
            raise ValueError(f"Area '{area_id}' has no entrance point")
        return DestinationStop(
            id=area.id,
            destination_point=area.entrance_point,
            destination_name=area.label(language),
        )


def _require(item: dict[str, Any], keys: set[str], label: str) -> None:
    missing = sorted(keys - item.keys())
    if missing:
        raise ValueError(f"{label} is missing required keys: {', '.join(missing)}")


def _parse_area(item: Any, idx: int) -> FloorArea:
    label = f"areas[{idx}]"
    if not isinstance(item, dict):
        raise ValueError(f"{label} must be an object")
    _require(item, {"id", "type", "floor", "x", "y", "width", "height"}, label)

    area_type = str(item["type"])
    if area_type not in AREA_TYPES:
        raise ValueError(f"{label}.type must be one of {', '.join(AREA_TYPES)}")

    width = float(item["width"])
    height = float(item["height"])
    if width < 0 or height < 0:
        raise ValueError(f"{label} width/height must be >= 0")

    floor = int(item["floor"])
    raw_name = item.get("name", {})
    if isinstance(raw_name, str):
        name = {"en": raw_name}
    elif isinstance(raw_name, dict):
        name = {str(k): str(v) for k, v in raw_name.items()}
    else:
        raise ValueError(f"{label}.name must be a string or a language mapping")

    entrance = item.get("entrance_point")
    entrance_point = None
    if entrance is not None:
        if not isinstance(entrance, dict) or not {"x", "y"}.issubset(entrance.keys()):
            raise ValueError(f"{label}.entrance_point must be an object with x and y")
        entrance_point = Point(float(entrance["x"]), float(entrance["y"]), int(entrance.get("floor", floor)))

    return FloorArea(
        id=str(item["id"]),
        floor=floor,
        x=float(item["x"]),
        y=float(item["y"]),
        width=width,
        height=height,
        type=area_type,
        name=name,
        entrance_point=entrance_point,
    )


def _parse_node(item: Any, idx: int) -> NavigationNode:
    label = f"nodes[{idx}]"
    if not isinstance(item, dict):
        raise ValueError(f"{label} must be an object")
    _require(item, {"id", "type", "floor", "x", "y"}, label)

    node_type = str(item["type"])
    if node_type not in NODE_TYPES:
        raise ValueError(f"{label}.type must be one of {', '.join(NODE_TYPES)}")

    raw_links = item.get("links", [])
    if not isinstance(raw_links, list):
        raise ValueError(f"{label}.links must be a list")

    links: list[TransitLink] = []
    for link_idx, link in enumerate(raw_links):
        if not isinstance(link, dict) or not {"floor", "id"}.issubset(link.keys()):
            raise ValueError(f"{label}.links[{link_idx}] must include floor and id")
        links.append(TransitLink(floor=int(link["floor"]), id=str(link["id"])))

    return NavigationNode(
        id=str(item["id"]),
        type=node_type,
        floor=int(item["floor"]),
        x=float(item["x"]),
        y=float(item["y"]),
        links=tuple(links),
    )


def world_from_payload(payload: Any) -> World:
    """Build a World from an already decoded JSON document.

    Raises:
        ValueError: If the document structure is invalid.
    """
    if not isinstance(payload, dict):
        raise ValueError("World document must be a JSON object")

    raw_areas = payload.get("areas", [])
    raw_nodes = payload.get("nodes", [])
    if not isinstance(raw_areas, list):
        raise ValueError("areas must be a JSON list")
    if not isinstance(raw_nodes, list):
        raise ValueError("nodes must be a JSON list")

    areas = [_parse_area(item, idx) for idx, item in enumerate(raw_areas)]
    nodes = [_parse_node(item, idx) for idx, item in enumerate(raw_nodes)]
    return World(areas=areas, nodes=nodes)


def load_world(path: str | Path | None = None) -> World:
    """Load world data from a JSON file (defaults to the bundled store layout)."""
    source = Path(path) if path else DEFAULT_WORLD_PATH
    try:
        payload = json.loads(source.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"World file '{source}' is not valid JSON") from exc
    return world_from_payload(payload)
