"""
Follower mobility for HieraManet.

Followers seek their Cluster-Leader at a fixed speed with bounded uniform
noise, integrated with explicit Euler steps. Positions are never clamped:
a follower may overshoot its leader or leave the nominal area.
"""

from __future__ import annotations

from typing import Dict

import numpy as np

from hieramanet.core.agent import AgentRegistry
from hieramanet.core.vector import Vector3


class SeekWithNoiseModel:
    """
    Seek-with-noise follower model.

    velocity = normalize(L - p) * speed + (U(-nf, nf), U(-nf, nf), 0)
    p' = p + velocity * dt
    """

    def __init__(
        self,
        speed: float,
        noise_factor: float,
        dt: float,
        rng: np.random.Generator,
    ):
        self.speed = speed
        self.noise_factor = noise_factor
        self.dt = dt
        self._rng = rng

    def sample_noise(self) -> Vector3:
        """Draw a fresh planar noise vector, x first then y."""
        nf = self.noise_factor
        nx = self._rng.uniform(-nf, nf)
        ny = self._rng.uniform(-nf, nf)
        return Vector3(nx, ny, 0.0)

    def velocity(self, position: Vector3, leader_position: Vector3) -> Vector3:
        """Velocity of a follower at `position` seeking `leader_position`."""
        direction = (leader_position - position).normalized()
        return direction * self.speed + self.sample_noise()

    def step_cluster(self, registry: AgentRegistry, cluster_id: int) -> Dict[int, Vector3]:
        """
        Advance every follower of a cluster by one step.

        The leader position is read once, so all followers seek the same
        snapshot.

        Returns:
            agent_id -> new position
        """
        leader_position = registry.leader_of(cluster_id).position.copy()

        moved = {}
        for follower in registry.followers_of(cluster_id):
            velocity = self.velocity(follower.position, leader_position)
            follower.velocity = velocity
            follower.position = follower.position + velocity * self.dt
            moved[follower.agent_id] = follower.position
        return moved

    def step(self, registry: AgentRegistry) -> Dict[int, Vector3]:
        """Advance the followers of every cluster, cluster A first."""
        moved = {}
        for cluster_id in registry.cluster_ids:
            moved.update(self.step_cluster(registry, cluster_id))
        return moved
