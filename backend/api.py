"""FastAPI routes for indoor route planning over the loaded store layout.

Endpoints:
- Map data (`/floors`, `/areas`, `/transit-nodes`, `/validation`)
- Routing (`/floor-path`, `/find-path`, `/route`)
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Any

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field, model_validator

from backend.floor_graph import find_floor_path, floor_adjacency
from backend.geometry import Point
from backend.instructions import Translator
from backend.pathfinding import path_length, search_floor_path
from backend.routing import plan_route
from backend.settings import RouteSettings
from backend.utils import area_payload, node_payload, route_plan_payload, to_serializable_points
from backend.world import DestinationStop, World, load_world
from backend.world_validation import validate_world

logger = logging.getLogger(__name__)


@dataclass
class ProcessingState:
    """In-memory world data and routing settings."""

    world: World | None = None
    settings: RouteSettings = field(default_factory=RouteSettings)


STATE = ProcessingState()


class PlanePoint(BaseModel):
    """Floor position in 0..100 percentage coordinates."""

    x: float = Field(..., ge=0, le=100)
    y: float = Field(..., ge=0, le=100)
    floor: int

    def to_point(self) -> Point:
        return Point(float(self.x), float(self.y), int(self.floor))


class DestinationIn(BaseModel):
    """Explicit stop supplied by the caller."""

    id: str | int
    point: PlanePoint
    name: str


class RouteRequest(BaseModel):
    """Request payload for multi-stop routing.

    Provide explicit destinations, area ids (routed to each area's entrance
    point), or both.
    """

    start: PlanePoint
    destinations: list[DestinationIn] = Field(default_factory=list)
    area_ids: list[str] = Field(default_factory=list)
    language: str | None = None

    @model_validator(mode="after")
    def validate_inputs(self) -> "RouteRequest":
        """Ensure at least one stop was requested."""
        if not self.destinations and not self.area_ids:
            raise ValueError("Provide at least one destination or area_id")
        return self


class FindPathRequest(BaseModel):
    """Request payload for a single-floor path."""

    start: PlanePoint
    end: PlanePoint

    @model_validator(mode="after")
    def validate_same_floor(self) -> "FindPathRequest":
        if self.start.floor != self.end.floor:
            raise ValueError("start and end must be on the same floor")
        return self


class FindPathResponse(BaseModel):
    """Response payload for single-floor pathfinding."""

    floor: int
    kind: str
    points: list[dict[str, float | int]]
    length: float
    expansions: int


def _world() -> World:
    """Return the loaded world, loading it on first use."""
    if STATE.world is None:
        try:
            STATE.world = load_world(STATE.settings.world_path)
        except (OSError, ValueError) as exc:
            logger.error("Failed to load world data: %s", exc)
            raise HTTPException(status_code=500, detail=f"World data unavailable: {exc}") from exc
        logger.info(
            "Loaded world with %d areas and %d transit nodes",
            len(STATE.world.areas),
            len(STATE.world.nodes),
        )
    return STATE.world


def _require_floor(world: World, floor: int) -> None:
    if floor not in world.floors:
        raise HTTPException(status_code=404, detail=f"Floor {floor} was not found")


def create_app(settings: RouteSettings | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    if settings is not None:
        STATE.settings = settings

    app = FastAPI(title="AisleNav API", version="1.0.0")

    raw_origins = os.getenv("AISLENAV_CORS_ORIGINS", "*").strip()
    if raw_origins == "*":
        cors_origins = ["*"]
        allow_credentials = False
    else:
        cors_origins = [origin.strip() for origin in raw_origins.split(",") if origin.strip()]
        allow_credentials = True

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=allow_credentials,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    def health() -> dict[str, Any]:
        """Health endpoint with loaded world summary."""
        world = _world()
        return {
            "status": "ok",
            "version": app.version,
            "floors": len(world.floors),
            "areas": len(world.areas),
            "nodes": len(world.nodes),
        }

    @app.get("/floors")
    async def get_floors() -> dict[str, Any]:
        """Return floors with area/node counts and direct floor adjacency."""
        world = _world()
        adjacency = floor_adjacency(world.nodes)
        return {
            "floors": [
                {
                    "floor": floor,
                    "area_count": len(world.areas_on_floor(floor)),
                    "node_count": len(world.nodes_on_floor(floor)),
                    "reachable_floors": adjacency.get(floor, []),
                }
                for floor in world.floors
            ]
        }

    @app.get("/areas")
    async def get_areas(floor: int | None = Query(default=None)) -> dict[str, Any]:
        """Return floor areas, optionally filtered by floor."""
        world = _world()
        if floor is None:
            areas = world.areas
        else:
            _require_floor(world, floor)
            areas = world.areas_on_floor(floor)
        return {"areas": [area_payload(a) for a in areas]}

    @app.get("/transit-nodes")
    async def get_transit_nodes(floor: int | None = Query(default=None)) -> dict[str, Any]:
        """Return stairs, escalator and lift nodes, optionally filtered by floor."""
        world = _world()
        if floor is None:
            nodes = world.nodes
        else:
            _require_floor(world, floor)
            nodes = world.nodes_on_floor(floor)
        return {"nodes": [node_payload(n) for n in nodes]}

    @app.get("/validation")
    async def get_validation() -> dict[str, Any]:
        """Return the static data integrity report."""
        return validate_world(_world())

    @app.get("/floor-path")
    async def get_floor_path(start_floor: int = Query(...), end_floor: int = Query(...)) -> dict[str, Any]:
        """Return the floor sequence with the fewest transit hops."""
        world = _world()
        floors = find_floor_path(start_floor, end_floor, world.nodes)
        if floors is None:
            raise HTTPException(status_code=404, detail="No floor path found")
        return {
            "start_floor": start_floor,
            "end_floor": end_floor,
            "floor_path": floors,
            "hops": len(floors) - 1,
        }

    @app.post("/find-path", response_model=FindPathResponse)
    async def find_path(payload: FindPathRequest) -> FindPathResponse:
        """Compute an obstacle-avoiding path on one floor."""
        world = _world()
        floor = payload.start.floor
        try:
            result = search_floor_path(
                payload.start.to_point(),
                payload.end.to_point(),
                floor,
                world.areas,
                max_expansions=STATE.settings.max_expansions,
            )
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=f"Invalid path query: {exc}") from exc

        return FindPathResponse(
            floor=floor,
            kind=result.kind,
            points=to_serializable_points(result.points),
            length=path_length(result.points),
            expansions=result.expansions,
        )

    @app.post("/route")
    async def route(payload: RouteRequest) -> dict[str, Any]:
        """Compose a multi-stop route through every requested stop."""
        world = _world()
        language = payload.language or STATE.settings.default_language

        try:
            translator = Translator(language)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc

        stops = [
            DestinationStop(id=d.id, destination_point=d.point.to_point(), destination_name=d.name)
            for d in payload.destinations
        ]
        for area_id in payload.area_ids:
            try:
                stops.append(world.destination_for_area(area_id, language))
            except KeyError as exc:
                raise HTTPException(status_code=404, detail=f"Area '{area_id}' was not found") from exc
            except ValueError as exc:
                raise HTTPException(status_code=400, detail=str(exc)) from exc

        try:
            plan = plan_route(
                payload.start.to_point(),
                stops,
                world.areas,
                world.nodes,
                translator,
                floor_change_penalty=STATE.settings.floor_change_penalty,
                max_expansions=STATE.settings.max_expansions,
            )
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=f"Invalid route query: {exc}") from exc

        if not plan.complete:
            logger.warning("Route stopped early (%s); unreached stops: %s", plan.failure, plan.unreached)

        body = route_plan_payload(plan)
        body["language"] = language
        return body

    return app
