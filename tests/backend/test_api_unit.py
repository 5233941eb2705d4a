"""Unit-level API tests for direct endpoint behavior and error handling."""

from __future__ import annotations

from fastapi.testclient import TestClient

from backend.api import STATE, create_app
from backend.settings import RouteSettings
from backend.world import NavigationNode, TransitLink, World


def test_health_endpoint_reports_world_summary() -> None:
    client = TestClient(create_app())
    res = client.get("/health")
    assert res.status_code == 200
    body = res.json()
    assert body["status"] == "ok"
    assert body["floors"] == 4
    assert body["nodes"] == 11


def test_missing_world_file_returns_500(tmp_path) -> None:
    client = TestClient(create_app(RouteSettings(world_path=str(tmp_path / "missing.json"))))
    res = client.get("/floors")
    assert res.status_code == 500
    assert "World data unavailable" in res.json()["detail"]


def test_floor_path_disconnected_returns_404() -> None:
    STATE.world = World(
        areas=[],
        nodes=[
            NavigationNode("a", "stairs", 1, 5.0, 5.0, (TransitLink(2, "b"),)),
            NavigationNode("b", "stairs", 2, 5.0, 5.0, (TransitLink(1, "a"),)),
            NavigationNode("c", "lift", 7, 5.0, 5.0, ()),
        ],
    )
    client = TestClient(create_app())

    res = client.get("/floor-path", params={"start_floor": 1, "end_floor": 7})

    assert res.status_code == 404
    assert res.json()["detail"] == "No floor path found"


def test_route_requires_a_stop() -> None:
    client = TestClient(create_app())
    res = client.post("/route", json={"start": {"x": 50, "y": 92, "floor": 1}})
    assert res.status_code == 422


def test_route_rejects_out_of_plane_start() -> None:
    client = TestClient(create_app())
    res = client.post("/route", json={"start": {"x": 150, "y": 92, "floor": 1}, "area_ids": ["f1_bakery"]})
    assert res.status_code == 422


def test_route_unknown_area_returns_404() -> None:
    client = TestClient(create_app())
    res = client.post("/route", json={"start": {"x": 50, "y": 92, "floor": 1}, "area_ids": ["nope"]})
    assert res.status_code == 404
    assert res.json()["detail"] == "Area 'nope' was not found"


def test_route_unknown_language_returns_400() -> None:
    client = TestClient(create_app())
    res = client.post(
        "/route",
        json={"start": {"x": 50, "y": 92, "floor": 1}, "area_ids": ["f1_bakery"], "language": "fr"},
    )
    assert res.status_code == 400


def test_find_path_requires_same_floor() -> None:
    client = TestClient(create_app())
    res = client.post(
        "/find-path",
        json={"start": {"x": 10, "y": 10, "floor": 1}, "end": {"x": 20, "y": 20, "floor": 2}},
    )
    assert res.status_code == 422


def test_areas_unknown_floor_returns_404() -> None:
    client = TestClient(create_app())
    res = client.get("/areas", params={"floor": 12})
    assert res.status_code == 404
