"""Unit tests for backend.routing."""

from __future__ import annotations

import logging

import pytest

from backend.geometry import Point
from backend.instructions import Translator
from backend.routing import calculate_multi_stop_route, floor_aware_distance, plan_route
from backend.world import DestinationStop, FloorArea, NavigationNode, TransitLink


def _stop(stop_id: str, x: float, y: float, floor: int) -> DestinationStop:
    return DestinationStop(stop_id, Point(x, y, floor), stop_id.title())


def _lift_nodes() -> list[NavigationNode]:
    return [
        NavigationNode("l1", "lift", 1, 97.5, 45.0, (TransitLink(2, "l2"),)),
        NavigationNode("l2", "lift", 2, 97.5, 45.0, (TransitLink(1, "l1"),)),
    ]


def _xy(point: Point) -> tuple[float, float]:
    return point.x, point.y


def test_floor_aware_distance_penalizes_floor_changes() -> None:
    here = Point(0, 0, 1)
    assert floor_aware_distance(Point(3, 4, 1), here) == pytest.approx(5.0)
    assert floor_aware_distance(Point(3, 4, 3), here) == pytest.approx(2005.0)
    assert floor_aware_distance(Point(3, 4, 3), here, floor_change_penalty=10) == pytest.approx(25.0)


def test_single_same_floor_destination_yields_one_arrival_segment(recorder) -> None:
    translate, _ = recorder
    start = Point(50, 92, 1)
    stop = DestinationStop(1, Point(20, 51, 1), "Fresh Produce")

    segments = calculate_multi_stop_route(start, [stop], [], [], translate)

    assert len(segments) == 1
    assert segments[0].floor == 1
    assert _xy(segments[0].points[0]) == (50, 92)
    assert _xy(segments[0].points[-1]) == (20, 51)
    assert segments[0].instruction == "arrivedAt|destination=Fresh Produce"


def test_two_floor_hop_uses_chained_stairs(stairs_world, recorder) -> None:
    translate, calls = recorder
    start = Point(50, 50, 1)
    stop = _stop("toys", 50, 50, 3)

    plan = plan_route(start, [stop], stairs_world.areas, stairs_world.nodes, translate)

    assert plan.complete
    assert [s.floor for s in plan.segments] == [1, 2, 3]
    assert _xy(plan.segments[0].points[-1]) == (10, 10)
    assert _xy(plan.segments[1].points[0]) == (10, 10)
    assert _xy(plan.segments[1].points[-1]) == (90, 10)
    assert _xy(plan.segments[2].points[0]) == (90, 10)
    assert _xy(plan.segments[2].points[-1]) == (50, 50)
    assert [s.instruction for s in plan.segments] == [
        "goTo|destination=stairs|floor=2",
        "goTo|destination=stairs|floor=3",
        "arrivedAt|destination=Toys",
    ]
    assert ("stairs", {}) in calls


def test_segment_points_share_segment_floor(stairs_world, recorder) -> None:
    translate, _ = recorder
    segments = calculate_multi_stop_route(
        Point(30, 70, 1), [_stop("a", 60, 40, 3), _stop("b", 20, 20, 1)], stairs_world.areas, stairs_world.nodes, translate
    )

    assert len(segments) == 4
    for segment in segments:
        assert all(p.floor == segment.floor for p in segment.points)
    for prev, nxt in zip(segments, segments[1:]):
        assert _xy(prev.points[-1]) == _xy(nxt.points[0])


def test_same_floor_stop_is_visited_before_closer_upstairs_stop(recorder) -> None:
    translate, _ = recorder
    start = Point(50, 50, 1)
    upstairs = _stop("upstairs", 50, 52, 2)
    far_corner = _stop("corner", 95, 95, 1)

    plan = plan_route(start, [upstairs, far_corner], [], _lift_nodes(), translate)

    assert plan.visited == ["corner", "upstairs"]
    assert [s.floor for s in plan.segments] == [1, 1, 2]
    assert plan.segments[0].instruction == "proceedTo|destination=Corner"
    assert plan.segments[1].instruction == "goTo|destination=lift|floor=2"
    assert plan.segments[2].instruction == "arrivedAt|destination=Upstairs"


def test_zero_penalty_orders_by_planar_distance_only(recorder) -> None:
    translate, _ = recorder
    start = Point(50, 50, 1)
    upstairs = _stop("upstairs", 50, 52, 2)
    far_corner = _stop("corner", 95, 95, 1)

    plan = plan_route(start, [far_corner, upstairs], [], _lift_nodes(), translate, floor_change_penalty=0)

    assert plan.visited == ["upstairs", "corner"]


def test_nearest_transit_node_is_chosen(recorder) -> None:
    translate, _ = recorder
    nodes = [
        NavigationNode("far", "stairs", 1, 5.0, 5.0, (TransitLink(2, "far2"),)),
        NavigationNode("near", "escalator", 1, 80.0, 80.0, (TransitLink(2, "near2"),)),
        NavigationNode("far2", "stairs", 2, 5.0, 5.0, (TransitLink(1, "far"),)),
        NavigationNode("near2", "escalator", 2, 80.0, 80.0, (TransitLink(1, "near"),)),
    ]

    segments = calculate_multi_stop_route(Point(70, 70, 1), [_stop("x", 20, 20, 2)], [], nodes, translate)

    assert _xy(segments[0].points[-1]) == (80, 80)
    assert segments[0].instruction == "goTo|destination=escalator|floor=2"
    assert _xy(segments[1].points[0]) == (80, 80)


def test_missing_floor_path_returns_partial_route(recorder, caplog) -> None:
    translate, _ = recorder
    start = Point(50, 50, 1)
    nearby = _stop("nearby", 40, 50, 1)
    nowhere = _stop("nowhere", 50, 50, 9)

    with caplog.at_level(logging.ERROR, logger="backend.routing"):
        plan = plan_route(start, [nowhere, nearby], [], _lift_nodes(), translate)

    assert not plan.complete
    assert plan.failure == "no_floor_path"
    assert plan.visited == ["nearby"]
    assert plan.unreached == ["nowhere"]
    assert len(plan.segments) == 1
    assert plan.segments[0].instruction == "proceedTo|destination=Nearby"
    assert "Could not find a floor path from 1 to 9" in caplog.text


def test_unknown_linked_node_stops_after_approach_segment(recorder, caplog) -> None:
    translate, _ = recorder
    nodes = [NavigationNode("s1", "stairs", 1, 10.0, 10.0, (TransitLink(2, "ghost"),))]

    with caplog.at_level(logging.ERROR, logger="backend.routing"):
        plan = plan_route(Point(50, 50, 1), [_stop("a", 50, 50, 2)], [], nodes, translate)

    assert plan.failure == "unresolved_link"
    assert len(plan.segments) == 1
    assert _xy(plan.segments[0].points[-1]) == (10, 10)
    assert "links to unknown node ghost" in caplog.text


def test_link_to_node_on_wrong_floor_is_rejected(recorder) -> None:
    translate, _ = recorder
    nodes = [
        NavigationNode("s1", "stairs", 1, 10.0, 10.0, (TransitLink(2, "s3"),)),
        NavigationNode("s3", "stairs", 3, 10.0, 10.0, (TransitLink(1, "s1"),)),
    ]

    plan = plan_route(Point(50, 50, 1), [_stop("a", 50, 50, 2)], [], nodes, translate)

    assert not plan.complete
    assert plan.failure == "unresolved_link"
    assert plan.unreached == ["a"]


def test_one_way_links_are_enough_to_move_upwards(recorder) -> None:
    translate, _ = recorder
    nodes = [
        NavigationNode("a1", "lift", 1, 10.0, 10.0, (TransitLink(2, "a2"),)),
        NavigationNode("a2", "lift", 2, 10.0, 10.0, (TransitLink(3, "a3"),)),
        NavigationNode("a3", "lift", 3, 10.0, 10.0, ()),
    ]
    plan = plan_route(Point(50, 50, 1), [_stop("a", 50, 50, 3)], [], nodes, translate)

    assert plan.complete
    assert [s.floor for s in plan.segments] == [1, 2, 3]


def test_no_destinations_yields_empty_complete_plan(recorder) -> None:
    translate, _ = recorder
    plan = plan_route(Point(50, 50, 1), [], [], [], translate)

    assert plan.segments == []
    assert plan.complete


def test_unreachable_stop_is_counted_as_fallback(recorder) -> None:
    translate, _ = recorder
    walls = [
        FloorArea("west", 1, 40, 40, 4, 20, "shop"),
        FloorArea("east", 1, 56, 40, 4, 20, "shop"),
        FloorArea("north", 1, 40, 40, 20, 4, "shop"),
        FloorArea("south", 1, 40, 56, 20, 4, "shop"),
    ]

    plan = plan_route(Point(50, 50, 1), [_stop("lobby", 10, 10, 1)], walls, [], translate)

    assert plan.complete
    assert plan.fallback_segments == 1
    assert plan.segments[0].points == (Point(50, 50, 1), Point(10, 10, 1))


def test_negative_penalty_raises(recorder) -> None:
    translate, _ = recorder
    with pytest.raises(ValueError, match="floor_change_penalty"):
        plan_route(Point(50, 50, 1), [], [], [], translate, floor_change_penalty=-1)


def test_store_route_visits_all_stops_deterministically(store_world) -> None:
    translator = Translator("en")
    start = Point(50, 92, 1)
    stops = [store_world.destination_for_area(a) for a in ("f3_toys", "f2_frozen", "f1_produce")]

    first = plan_route(start, stops, store_world.areas, store_world.nodes, translator)
    second = plan_route(start, stops, store_world.areas, store_world.nodes, translator)

    assert first == second
    assert first.complete
    assert first.visited == ["f1_produce", "f2_frozen", "f3_toys"]
    assert first.segments[-1].points[-1] == store_world.find_area("f3_toys").entrance_point
    assert first.segments[-1].instruction == "You have arrived at Toys & Games"
    assert first.segments[1].instruction == "Take the stairs to floor 2"
