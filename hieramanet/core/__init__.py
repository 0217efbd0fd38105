"""
Core module for HieraManet.

Vectors, configuration, errors and the agent registry.
"""

from hieramanet.core.vector import Vector3, normalize
from hieramanet.core.errors import (
    HieraManetError,
    ConfigurationError,
    ExportError,
    RunError,
)
from hieramanet.core.config import (
    CLUSTER_LABELS,
    FormationMode,
    SimulationParameters,
    parameters_from_dict,
)
from hieramanet.core.agent import Agent, AgentRegistry, AgentRole

__all__ = [
    "Vector3",
    "normalize",
    "HieraManetError",
    "ConfigurationError",
    "ExportError",
    "RunError",
    "CLUSTER_LABELS",
    "FormationMode",
    "SimulationParameters",
    "parameters_from_dict",
    "Agent",
    "AgentRegistry",
    "AgentRole",
]
