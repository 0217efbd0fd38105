"""
Cluster-Leader formation for HieraManet.

Two interchangeable strategies position the Cluster-Leaders:
- RigidOffsetFormation: leader = Super-Leader + fixed per-cluster offset
- IndependentWaypointFormation: each leader follows its own random-waypoint track

A run uses exactly one strategy for both leaders.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Dict

import numpy as np
from loguru import logger

from hieramanet.core.config import CLUSTER_LABELS, FormationMode, SimulationParameters
from hieramanet.core.errors import ConfigurationError
from hieramanet.core.vector import Vector3
from hieramanet.mobility.waypoint import RandomWaypointTrack


class FormationStrategy(ABC):
    """Computes Cluster-Leader positions for one tick."""

    mode: FormationMode

    @abstractmethod
    def update(self, super_leader_pos: Vector3, sim_time: float = 0.0) -> Dict[int, Vector3]:
        """
        Compute leader positions.

        Args:
            super_leader_pos: Current Super-Leader position
            sim_time: Current simulated time

        Returns:
            cluster_id -> leader position
        """
        ...


class RigidOffsetFormation(FormationStrategy):
    """Leaders keep a constant offset from the Super-Leader."""

    mode = FormationMode.RIGID_OFFSET

    def __init__(self, offsets: Dict[int, Vector3]):
        self._offsets = {cid: offset.copy() for cid, offset in offsets.items()}

    @property
    def offsets(self) -> Dict[int, Vector3]:
        return {cid: offset.copy() for cid, offset in self._offsets.items()}

    def update(self, super_leader_pos: Vector3, sim_time: float = 0.0) -> Dict[int, Vector3]:
        return {cid: super_leader_pos + offset for cid, offset in self._offsets.items()}


class IndependentWaypointFormation(FormationStrategy):
    """Leaders move on their own tracks and ignore the Super-Leader."""

    mode = FormationMode.INDEPENDENT_WAYPOINT

    def __init__(self, tracks: Dict[int, RandomWaypointTrack]):
        self._tracks = dict(tracks)

    def update(self, super_leader_pos: Vector3, sim_time: float = 0.0) -> Dict[int, Vector3]:
        return {cid: track.position_at(sim_time) for cid, track in self._tracks.items()}


def create_formation(params: SimulationParameters, rng: np.random.Generator) -> FormationStrategy:
    """Build the formation strategy selected by the parameters."""
    try:
        mode = FormationMode(params.formation_mode)
    except ValueError as e:
        raise ConfigurationError(f"Unknown formation mode: {params.formation_mode}") from e

    if mode == FormationMode.RIGID_OFFSET:
        try:
            offsets = {cid: params.offset_for(label) for cid, label in enumerate(CLUSTER_LABELS)}
        except KeyError as e:
            raise ConfigurationError(f"No formation offset for cluster {e}") from e
        logger.debug(f"Rigid offset formation: {offsets}")
        return RigidOffsetFormation(offsets)

    if mode == FormationMode.INDEPENDENT_WAYPOINT:
        tracks = {
            cid: RandomWaypointTrack(
                params.area_size,
                rng,
                speed_min=params.leader_speed_min,
                speed_max=params.leader_speed_max,
                pause=params.leader_pause,
            )
            for cid in range(len(CLUSTER_LABELS))
        }
        logger.debug("Independent random-waypoint formation")
        return IndependentWaypointFormation(tracks)

    raise ConfigurationError(f"Unknown formation mode: {mode}")
