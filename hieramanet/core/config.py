"""
Simulation parameters for HieraManet.

Defines the immutable parameter set shared by every run of a batch,
loading from YAML, and the domain checks that are reported but never
enforced.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Tuple, Union

import yaml
from loguru import logger
from pydantic import BaseModel, Field, ValidationError

from hieramanet.core.errors import ConfigurationError
from hieramanet.core.vector import Vector3


class FormationMode(str, Enum):
    """How the Cluster-Leaders move."""
    RIGID_OFFSET = "rigid_offset"            # fixed offset from the Super-Leader
    INDEPENDENT_WAYPOINT = "independent_waypoint"  # own random-waypoint track


# camelCase command line names, as used by the experiment scripts.
CLI_ALIASES: Dict[str, str] = {
    "nodesPerCluster": "nodes_per_cluster",
    "simTime": "sim_time",
    "areaSize": "area_size",
    "followerSpeed": "follower_speed",
    "noiseFactor": "noise_factor",
    "packetSizei": "packet_size",
    "numRuns": "num_runs",
}

CLUSTER_LABELS: Tuple[str, str] = ("A", "B")


class SimulationParameters(BaseModel):
    """
    Parameters of a simulation batch.

    Values are only type-checked. Out-of-range values (negative speed, an
    empty cluster) are accepted and produce degenerate motion; use
    :meth:`check_domain` to report them.
    """

    # Experiment parameters
    nodes_per_cluster: int = 5
    sim_time: float = 160.0  # seconds
    area_size: float = 200.0  # meters, side of the square area
    follower_speed: float = 1.5  # m/s
    noise_factor: float = 1.0
    packet_size: int = 1024  # bytes
    num_runs: int = 1

    # Mobility
    formation_mode: FormationMode = FormationMode.RIGID_OFFSET
    tick_interval: float = 0.1  # seconds
    super_leader_start: Tuple[float, float, float] = (50.0, 50.0, 0.0)
    formation_offsets: Dict[str, Tuple[float, float, float]] = Field(
        default_factory=lambda: {"A": (-50.0, -50.0, 0.0), "B": (50.0, 50.0, 0.0)}
    )
    leader_speed_min: float = 0.5  # m/s, independent waypoint mode
    leader_speed_max: float = 1.5
    leader_pause: float = 5.0  # seconds

    # Telemetry traffic
    telemetry_port: int = 9
    telemetry_rate_kbps: float = 256.0
    telemetry_start: float = 2.0  # seconds
    telemetry_stop_margin: float = 2.0  # seconds before sim_time
    link_range: float = 100.0  # meters
    hop_delay_ms: float = 2.0

    class Config:
        """Pydantic configuration."""
        frozen = True
        extra = "forbid"

    @property
    def followers_per_cluster(self) -> int:
        """Followers in each cluster; the leader is itself a cluster member."""
        return max(0, self.nodes_per_cluster - 1)

    def offset_for(self, cluster_label: str) -> Vector3:
        """Get the formation offset of a cluster as a vector."""
        return Vector3.from_sequence(self.formation_offsets[cluster_label])

    @property
    def start_position(self) -> Vector3:
        return Vector3.from_sequence(self.super_leader_start)

    @property
    def telemetry_stop(self) -> float:
        return self.sim_time - self.telemetry_stop_margin

    def with_overrides(self, **overrides: Any) -> SimulationParameters:
        """Return a copy with the given (non-None) fields replaced."""
        data = self.model_dump()
        data.update({k: v for k, v in overrides.items() if v is not None})
        return parameters_from_dict(data)

    def check_domain(self) -> List[str]:
        """
        Report out-of-domain values.

        Nothing is rejected: each problem is logged as a warning and the raw
        value is kept.
        """
        warnings = []
        if self.nodes_per_cluster < 1:
            warnings.append(f"nodes_per_cluster={self.nodes_per_cluster} leaves clusters without followers")
        if self.sim_time < 0:
            warnings.append(f"sim_time={self.sim_time} is negative")
        if self.area_size <= 0:
            warnings.append(f"area_size={self.area_size} is not positive")
        if self.follower_speed < 0:
            warnings.append(f"follower_speed={self.follower_speed} is negative")
        if self.noise_factor < 0:
            warnings.append(f"noise_factor={self.noise_factor} is negative")
        if self.packet_size <= 0:
            warnings.append(f"packet_size={self.packet_size} is not positive")
        if self.num_runs < 0:
            warnings.append(f"num_runs={self.num_runs} is negative")
        if self.tick_interval <= 0:
            warnings.append(f"tick_interval={self.tick_interval} is not positive")
        if self.leader_speed_min > self.leader_speed_max:
            warnings.append("leader_speed_min exceeds leader_speed_max")
        missing = [label for label in CLUSTER_LABELS if label not in self.formation_offsets]
        if missing:
            warnings.append(f"formation_offsets missing clusters {missing}")

        for message in warnings:
            logger.warning(f"Configuration: {message}")

        return warnings

    @classmethod
    def from_yaml(cls, yaml_path: Union[str, Path]) -> SimulationParameters:
        """Load parameters from a YAML file."""
        try:
            with open(yaml_path, "r") as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Cannot read configuration {yaml_path}: {e}") from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigurationError(f"Configuration {yaml_path} must be a mapping")

        logger.debug(f"Loaded configuration from {yaml_path}")
        return parameters_from_dict(data)

    def to_yaml(self) -> str:
        data = self.model_dump(mode="json")
        return yaml.safe_dump(data, default_flow_style=False, sort_keys=False)


def parameters_from_dict(data: Dict[str, Any]) -> SimulationParameters:
    """
    Build parameters from a plain mapping.

    Keys may use either the snake_case field names or the
    camelCase command line names.
    """
    normalized = {CLI_ALIASES.get(key, key): value for key, value in data.items()}
    try:
        return SimulationParameters(**normalized)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid simulation parameters: {e}") from e
