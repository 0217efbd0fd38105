"""
HieraManet: hierarchical mobility simulation for mobile ad hoc networks.

This package provides:
- A three-tier agent hierarchy (Super-Leader, Cluster-Leaders, Followers)
- Waypoint, formation and seek-with-noise mobility models
- A fixed-interval tick scheduler driving one run
- Per-flow statistics export to an append-only CSV store
"""

__version__ = "1.0.0"

from hieramanet.core.vector import Vector3
from hieramanet.core.config import FormationMode, SimulationParameters
from hieramanet.core.agent import Agent, AgentRegistry, AgentRole
from hieramanet.simulation.engine import HierarchicalMobilityEngine, SimulationRun
from hieramanet.analysis.exporter import FlowRecord, StatisticsExporter

__all__ = [
    "__version__",
    "Vector3",
    "FormationMode",
    "SimulationParameters",
    "Agent",
    "AgentRegistry",
    "AgentRole",
    "HierarchicalMobilityEngine",
    "SimulationRun",
    "FlowRecord",
    "StatisticsExporter",
]
