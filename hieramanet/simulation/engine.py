"""
Hierarchical mobility engine for HieraManet.

One engine is one simulation run: it owns the agent registry, the three
mobility models and the tick scheduler, and exposes agent positions to
observers after every tick.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

import numpy as np
from loguru import logger

from hieramanet.core.agent import AgentRegistry
from hieramanet.core.config import SimulationParameters
from hieramanet.core.vector import Vector3
from hieramanet.mobility.formation import FormationStrategy, create_formation
from hieramanet.mobility.seek import SeekWithNoiseModel
from hieramanet.mobility.waypoint import SuperLeaderPlanner
from hieramanet.simulation.scheduler import SchedulerStatus, TickScheduler

PositionCallback = Callable[[float, Dict[int, Vector3]], None]


@dataclass(frozen=True)
class SimulationRun:
    """Identity of one trial of a batch."""

    run_number: int
    seed: int
    parameters: SimulationParameters

    def random_streams(self, count: int) -> List[np.random.Generator]:
        """Independent random generators derived from the run seed."""
        children = np.random.SeedSequence(self.seed).spawn(count)
        return [np.random.default_rng(child) for child in children]


class HierarchicalMobilityEngine:
    """
    Mobility engine for one run.

    Each tick:
    1. reads the Super-Leader position from its waypoint track,
    2. places both Cluster-Leaders with the formation strategy,
    3. moves every Follower toward its leader,
    4. hands the new positions to the registered observers.
    """

    def __init__(self, run: SimulationRun, record_trajectory: bool = False):
        """
        Initialize engine.

        Args:
            run: Run identity and parameters
            record_trajectory: Keep per-tick positions of every agent
        """
        self.run = run
        params = run.parameters
        planner_rng, formation_rng, follower_rng = run.random_streams(3)

        self.registry = AgentRegistry.create(
            params.followers_per_cluster,
            super_leader_position=params.start_position,
            follower_position=Vector3(0.0, 0.0, 0.0),
        )
        self.planner = SuperLeaderPlanner(
            params.sim_time,
            params.area_size,
            planner_rng,
            start_position=params.start_position,
        )
        self.formation: FormationStrategy = create_formation(params, formation_rng)
        self.seek = SeekWithNoiseModel(
            params.follower_speed,
            params.noise_factor,
            params.tick_interval,
            follower_rng,
        )
        self.scheduler = TickScheduler()

        self._position_callbacks: List[PositionCallback] = []
        self._record_trajectory = record_trajectory
        self._trajectory: List[Dict[str, Any]] = []
        self._relocated_at: Optional[float] = None

        self._place_leaders(0.0)

        logger.info(
            f"Run {run.run_number} (seed {run.seed}): {len(self.registry)} agents, "
            f"formation {self.formation.mode.value}"
        )

    @property
    def status(self) -> SchedulerStatus:
        return self.scheduler.status

    @property
    def sim_time(self) -> float:
        return self.scheduler.now

    @property
    def tick_count(self) -> int:
        return self.scheduler.tick_count

    def register_position_callback(self, callback: PositionCallback) -> None:
        """Register an observer of agent positions after every tick."""
        self._position_callbacks.append(callback)

    def _place_leaders(self, now: float) -> Vector3:
        super_leader = self.registry.super_leader
        super_leader_pos = self.planner.position_at(now)
        self.registry.set_position(super_leader.agent_id, super_leader_pos)

        for cluster_id, position in self.formation.update(super_leader_pos, now).items():
            self.registry.set_position(self.registry.leader_of(cluster_id).agent_id, position)
        return super_leader_pos

    def tick(self, now: float) -> None:
        """Recompute every agent position at simulated time `now`."""
        self._place_leaders(now)
        self.seek.step(self.registry)

        positions = self.registry.positions()
        if self._record_trajectory:
            self._trajectory.append({
                "t": now,
                "positions": {aid: pos.to_list() for aid, pos in positions.items()},
            })
        for callback in self._position_callbacks:
            callback(now, positions)

    def _on_relocation(self, now: float) -> None:
        self._relocated_at = now
        target = self.planner.relocation.target
        logger.info(f"Run {self.run.run_number}: super-leader relocates to "
                    f"({target.x:.2f}, {target.y:.2f}) at t={now:.2f}s")

    def start(self) -> None:
        """Start ticking; the first tick runs one interval after the origin."""
        relocation = self.planner.relocation
        if relocation is not None:
            self.scheduler.schedule(relocation.time - self.sim_time, self._on_relocation)
        self.scheduler.start(self.run.parameters.tick_interval, self.tick)

    def advance_to(self, horizon: float) -> int:
        """Run all ticks and one-shot events due up to `horizon`."""
        return self.scheduler.run_until(horizon)

    def stop(self) -> None:
        self.scheduler.stop()

    def run_to_completion(self) -> int:
        """
        Start, advance to the configured horizon and stop.

        Returns:
            Number of ticks executed
        """
        self.start()
        self.advance_to(max(self.run.parameters.sim_time, 0.0))
        self.stop()
        return self.tick_count

    def get_trajectory(self) -> List[Dict[str, Any]]:
        """Get recorded per-tick positions."""
        return list(self._trajectory)

    def get_statistics(self) -> Dict[str, Any]:
        relocation = self.planner.relocation
        return {
            "run_number": self.run.run_number,
            "seed": self.run.seed,
            "status": self.status.name,
            "sim_time": self.sim_time,
            "tick_count": self.tick_count,
            "num_agents": len(self.registry),
            "relocation_time": relocation.time if relocation else None,
            "relocated_at": self._relocated_at,
        }

    def teardown(self) -> None:
        """Release all per-run state."""
        self.scheduler.stop()
        self._position_callbacks.clear()
        self._trajectory = []
        self.registry.clear()
