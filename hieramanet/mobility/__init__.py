"""
Mobility models for HieraManet.

Provides the Super-Leader waypoint planner, Cluster-Leader formation
strategies and the Follower seek-with-noise model.
"""

from hieramanet.mobility.waypoint import (
    Waypoint,
    WaypointTrack,
    SuperLeaderPlanner,
    RandomWaypointTrack,
)
from hieramanet.mobility.formation import (
    FormationStrategy,
    RigidOffsetFormation,
    IndependentWaypointFormation,
    create_formation,
)
from hieramanet.mobility.seek import SeekWithNoiseModel

__all__ = [
    "Waypoint",
    "WaypointTrack",
    "SuperLeaderPlanner",
    "RandomWaypointTrack",
    "FormationStrategy",
    "RigidOffsetFormation",
    "IndependentWaypointFormation",
    "create_formation",
    "SeekWithNoiseModel",
]
