import numpy as np
import pytest

from hieramanet.core.vector import Vector3
from hieramanet.mobility.waypoint import (
    RandomWaypointTrack,
    SuperLeaderPlanner,
    Waypoint,
    WaypointTrack,
)


def test_track_holds_position_until_next_waypoint():
    track = WaypointTrack([
        Waypoint(0.0, Vector3(50, 50, 0)),
        Waypoint(5.0, Vector3(120, 30, 0)),
    ])
    assert track.position_at(0.0) == Vector3(50, 50, 0)
    assert track.position_at(4.99) == Vector3(50, 50, 0)
    assert track.position_at(5.0) == Vector3(120, 30, 0)
    assert track.position_at(100.0) == Vector3(120, 30, 0)


def test_track_before_first_waypoint_uses_initial_target():
    track = WaypointTrack([Waypoint(1.0, Vector3(1, 2, 3))])
    assert track.position_at(0.0) == Vector3(1, 2, 3)


def test_track_requires_strictly_increasing_times():
    track = WaypointTrack([Waypoint(2.0, Vector3())])
    with pytest.raises(ValueError):
        track.add_waypoint(Waypoint(2.0, Vector3(1, 1, 1)))
    with pytest.raises(ValueError):
        track.add_waypoint(Waypoint(1.0, Vector3(1, 1, 1)))


def test_empty_track_has_no_position():
    with pytest.raises(ValueError):
        WaypointTrack().position_at(0.0)


def test_planner_samples_one_relocation_in_second_half():
    planner = SuperLeaderPlanner(10.0, 100.0, np.random.default_rng(1))

    assert len(planner.track) == 2
    relocation = planner.relocation
    assert 5.0 <= relocation.time <= 10.0
    assert 0.0 <= relocation.target.x <= 100.0
    assert 0.0 <= relocation.target.y <= 100.0
    assert relocation.target.z == 0.0
    assert planner.position_at(0.0) == Vector3(50, 50, 0)


def test_planner_draw_order_is_time_then_x_then_y():
    planner = SuperLeaderPlanner(160.0, 200.0, np.random.default_rng(42))
    rng = np.random.default_rng(42)
    expected_time = rng.uniform(80.0, 160.0)
    expected_x = rng.uniform(0.0, 200.0)
    expected_y = rng.uniform(0.0, 200.0)

    assert planner.relocation.time == expected_time
    assert planner.relocation.target == Vector3(expected_x, expected_y, 0.0)


def test_planner_zero_horizon_never_relocates():
    planner = SuperLeaderPlanner(0.0, 100.0, np.random.default_rng(1), start_position=Vector3(1, 2, 0))
    assert len(planner.track) == 1
    assert planner.relocation is None
    assert planner.position_at(1000.0) == Vector3(1, 2, 0)


def test_planner_is_deterministic_per_seed():
    a = SuperLeaderPlanner(160.0, 200.0, np.random.default_rng(7))
    b = SuperLeaderPlanner(160.0, 200.0, np.random.default_rng(7))
    c = SuperLeaderPlanner(160.0, 200.0, np.random.default_rng(8))
    assert a.relocation == b.relocation
    assert a.relocation != c.relocation


def test_random_waypoint_stays_in_area_and_moves_continuously():
    track = RandomWaypointTrack(200.0, np.random.default_rng(5), speed_min=0.5, speed_max=1.5, pause=5.0)
    dt = 0.1
    previous = track.position_at(0.0)
    assert previous == track.start_position

    for step in range(1, 3000):
        current = track.position_at(step * dt)
        assert 0.0 <= current.x <= 200.0
        assert 0.0 <= current.y <= 200.0
        assert current.distance_to(previous) <= 1.5 * dt + 1e-9
        previous = current


def test_random_waypoint_pauses_at_destination():
    track = RandomWaypointTrack(200.0, np.random.default_rng(5), pause=5.0)
    track.position_at(1.0)
    leg = track._legs[0]
    assert track.position_at(leg.arrive) == leg.destination
    assert track.position_at(leg.arrive + 4.9) == leg.destination


def test_random_waypoint_keeps_only_current_leg():
    track = RandomWaypointTrack(200.0, np.random.default_rng(9), speed_min=1000.0, speed_max=1000.0, pause=0.0)

    for step in range(1, 1001):
        track.position_at(step * 0.1)
        assert len(track._legs) <= 2

    with pytest.raises(ValueError):
        track.position_at(50.0)
