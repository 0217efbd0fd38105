import numpy as np

from hieramanet.core.agent import AgentRegistry
from hieramanet.core.vector import Vector3
from hieramanet.mobility.seek import SeekWithNoiseModel


def _registry(followers=2):
    registry = AgentRegistry.create(followers)
    registry.set_position(registry.leader_of(0).agent_id, Vector3(10, 0, 0))
    registry.set_position(registry.leader_of(1).agent_id, Vector3(0, 10, 0))
    return registry


def test_noiseless_follower_moves_toward_leader():
    registry = _registry(1)
    model = SeekWithNoiseModel(1.5, 0.0, 0.1, np.random.default_rng(1))

    model.step(registry)

    a = registry.followers_of(0)[0]
    b = registry.followers_of(1)[0]
    assert abs(a.position.x - 0.15) < 1e-12 and abs(a.position.y) < 1e-12
    assert abs(b.position.y - 0.15) < 1e-12 and abs(b.position.x) < 1e-12
    assert a.position.z == 0.0


def test_follower_at_leader_moves_by_noise_only():
    registry = AgentRegistry.create(1)
    leader = registry.leader_of(0)
    follower = registry.followers_of(0)[0]
    registry.set_position(leader.agent_id, Vector3(3, 4, 0))
    registry.set_position(follower.agent_id, Vector3(3, 4, 0))

    model = SeekWithNoiseModel(1.5, 1.0, 0.1, np.random.default_rng(11))
    model.step_cluster(registry, 0)

    rng = np.random.default_rng(11)
    nx = rng.uniform(-1.0, 1.0)
    ny = rng.uniform(-1.0, 1.0)
    expected = Vector3(3, 4, 0) + Vector3(nx, ny, 0) * 0.1
    assert follower.position == expected
    assert follower.velocity == Vector3(nx, ny, 0)


def test_noise_is_bounded_planar_and_fresh_each_tick():
    registry = _registry(3)
    noise_factor = 0.5
    model = SeekWithNoiseModel(1.5, noise_factor, 0.1, np.random.default_rng(2))
    leader = registry.leader_of(0).position

    seen = set()
    for _ in range(50):
        before = {f.agent_id: f.position.copy() for f in registry.followers_of(0)}
        model.step_cluster(registry, 0)
        for follower in registry.followers_of(0):
            direction = (leader - before[follower.agent_id]).normalized()
            noise = follower.velocity - direction * 1.5
            assert -noise_factor <= noise.x <= noise_factor
            assert -noise_factor <= noise.y <= noise_factor
            assert abs(noise.z) < 1e-12
            seen.add(round(noise.x, 12))
    assert len(seen) > 100


def test_followers_do_not_move_leaders():
    registry = _registry(2)
    model = SeekWithNoiseModel(1.5, 1.0, 0.1, np.random.default_rng(3))
    model.step(registry)
    assert registry.leader_of(0).position == Vector3(10, 0, 0)
    assert registry.leader_of(1).position == Vector3(0, 10, 0)
    assert registry.super_leader.position == Vector3(0, 0, 0)


def test_no_clamping_allows_overshoot():
    registry = AgentRegistry.create(1)
    registry.set_position(registry.leader_of(0).agent_id, Vector3(0.05, 0, 0))
    follower = registry.followers_of(0)[0]
    model = SeekWithNoiseModel(10.0, 0.0, 0.1, np.random.default_rng(1))

    model.step_cluster(registry, 0)

    assert abs(follower.position.x - 1.0) < 1e-12


def test_step_returns_moved_positions():
    registry = _registry(2)
    model = SeekWithNoiseModel(1.5, 1.0, 0.1, np.random.default_rng(4))
    moved = model.step(registry)
    assert sorted(moved) == [f.agent_id for f in registry.followers()]
