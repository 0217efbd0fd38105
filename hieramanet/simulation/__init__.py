"""
Simulation module for HieraManet.

Tick scheduler and the per-run mobility engine.
"""

from hieramanet.simulation.scheduler import (
    TickScheduler,
    SchedulerStatus,
    ScheduledEvent,
)
from hieramanet.simulation.engine import (
    HierarchicalMobilityEngine,
    SimulationRun,
)

__all__ = [
    "TickScheduler",
    "SchedulerStatus",
    "ScheduledEvent",
    "HierarchicalMobilityEngine",
    "SimulationRun",
]
