"""Pytest global fixtures and test isolation hooks."""

from __future__ import annotations

import pytest

from backend.api import STATE
from backend.settings import RouteSettings
from backend.world import FloorArea, NavigationNode, TransitLink, World, load_world


@pytest.fixture(autouse=True)
def reset_processing_state() -> None:
    """Reset in-memory API state before each test."""
    STATE.world = None
    STATE.settings = RouteSettings()


@pytest.fixture()
def store_world() -> World:
    """Bundled four-floor store layout."""
    return load_world()


@pytest.fixture()
def stairs_world() -> World:
    """Three obstacle-free floors chained by stairs 1<->2 and 2<->3 only."""
    nodes = [
        NavigationNode("s1", "stairs", 1, 10.0, 10.0, (TransitLink(2, "s2a"),)),
        NavigationNode("s2a", "stairs", 2, 10.0, 10.0, (TransitLink(1, "s1"),)),
        NavigationNode("s2b", "stairs", 2, 90.0, 10.0, (TransitLink(3, "s3"),)),
        NavigationNode("s3", "stairs", 3, 90.0, 10.0, (TransitLink(2, "s2b"),)),
    ]
    areas = [FloorArea("lobby", 1, 40.0, 85.0, 20.0, 10.0, "entrance")]
    return World(areas=areas, nodes=nodes)


@pytest.fixture()
def recorder() -> tuple:
    """Translate callable that renders `key|k=v|...` plus the list of calls it saw."""
    calls: list[tuple[str, dict]] = []

    def translate(key: str, **params) -> str:
        calls.append((key, params))
        if not params:
            return key
        rendered = "|".join(f"{k}={params[k]}" for k in sorted(params))
        return f"{key}|{rendered}"

    return translate, calls
