"""
Flow observations for HieraManet.

The network side of a run (channel, routing, traffic applications and flow
measurement) lives outside this package. It is consumed through two narrow
contracts: it observes agent positions after every tick, and it hands back a
list of per-flow counters once the run ends.

This module defines that contract, the cluster addressing plan, and
TelemetryFlowMonitor, a stand-in source that models the constant-rate
follower-to-leader telemetry with a plain reachability check.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, List, Optional

from loguru import logger

from hieramanet.core.agent import AgentRegistry
from hieramanet.core.config import SimulationParameters
from hieramanet.core.vector import Vector3

# IPv4 + UDP headers, counted in measured byte totals
IP_UDP_HEADER_BYTES = 28

BACKBONE_SUBNET = "192.168.1"
CLUSTER_SUBNETS = ("10.1.1", "10.1.2")


@dataclass
class FlowObservation:
    """Aggregate counters of one observed source -> destination flow."""

    flow_id: int
    src: str
    dst: str
    dst_port: int
    tx_packets: int = 0
    rx_packets: int = 0
    tx_bytes: int = 0
    rx_bytes: int = 0
    delay_sum_ms: float = 0.0
    first_tx_time: float = 0.0  # seconds
    last_rx_time: float = 0.0  # seconds


class FlowObservationSource(ABC):
    """Anything that can report per-flow counters at the end of a run."""

    def observe(self, sim_time: float, positions: Dict[int, Vector3]) -> None:
        """Receive the positions of every agent after a tick."""

    @abstractmethod
    def collect(self) -> List[FlowObservation]:
        """Return observed flows in discovery order."""
        ...


class ClusterAddressing:
    """
    Address plan of the hierarchy.

    Leaders share the backbone subnet (Super-Leader .1, leader A .2,
    leader B .3). Each cluster has its own /24: followers take host
    addresses 1..n in creation order and the leader the next one.
    """

    def __init__(self, registry: AgentRegistry):
        self._cluster_addresses: Dict[int, str] = {}
        self._backbone_addresses: Dict[int, str] = {}

        self._backbone_addresses[registry.super_leader.agent_id] = f"{BACKBONE_SUBNET}.1"
        for cluster_id in registry.cluster_ids:
            leader = registry.leader_of(cluster_id)
            self._backbone_addresses[leader.agent_id] = f"{BACKBONE_SUBNET}.{cluster_id + 2}"

            subnet = CLUSTER_SUBNETS[cluster_id]
            host = 1
            for follower in registry.followers_of(cluster_id):
                self._cluster_addresses[follower.agent_id] = f"{subnet}.{host}"
                host += 1
            self._cluster_addresses[leader.agent_id] = f"{subnet}.{host}"

    def cluster_address(self, agent_id: int) -> str:
        """Address of an agent on its cluster subnet."""
        return self._cluster_addresses[agent_id]

    def backbone_address(self, agent_id: int) -> Optional[str]:
        return self._backbone_addresses.get(agent_id)


@dataclass
class _TelemetryFlow:
    follower_id: int
    leader_id: int
    observation: Optional[FlowObservation] = None
    emitted: int = 0  # packets emitted so far
    src: str = ""
    dst: str = ""


class TelemetryFlowMonitor(FlowObservationSource):
    """
    Stand-in for the external traffic and flow measurement platform.

    Every follower sends constant-rate telemetry to its Cluster-Leader
    between ``telemetry_start`` and ``sim_time - telemetry_stop_margin``.
    Packets emitted since the previous tick count as delivered when
    follower and leader are within ``link_range`` at the current tick,
    each with a fixed one-hop latency. No channel, contention or routing
    is modeled.
    """

    def __init__(self, params: SimulationParameters, registry: AgentRegistry):
        self.params = params
        self.port = params.telemetry_port
        self.packet_bytes = params.packet_size + IP_UDP_HEADER_BYTES
        self.start_time = params.telemetry_start
        self.stop_time = params.telemetry_stop

        bits_per_packet = params.packet_size * 8
        rate_bps = params.telemetry_rate_kbps * 1000.0
        self.packet_interval = bits_per_packet / rate_bps if rate_bps > 0 and bits_per_packet > 0 else math.inf

        addressing = ClusterAddressing(registry)
        self._flows: List[_TelemetryFlow] = []
        for follower in registry.followers():
            leader = registry.leader_of(follower.cluster_id)
            self._flows.append(_TelemetryFlow(
                follower_id=follower.agent_id,
                leader_id=leader.agent_id,
                src=addressing.cluster_address(follower.agent_id),
                dst=addressing.cluster_address(leader.agent_id),
            ))

        self._discovered: List[FlowObservation] = []
        self._last_time = 0.0

        logger.debug(
            f"Telemetry monitor: {len(self._flows)} flows, "
            f"{params.telemetry_rate_kbps:g} kbps, {params.packet_size} B packets"
        )

    def _emitted_by(self, t: float) -> int:
        """Number of packets a source has emitted at or before time t."""
        if math.isinf(self.packet_interval) or t < self.start_time:
            return 0
        t = min(t, self.stop_time)
        if t < self.start_time:
            return 0
        return int(math.floor((t - self.start_time) / self.packet_interval + 1e-9)) + 1

    def _emission_time(self, index: int) -> float:
        return self.start_time + index * self.packet_interval

    def observe(self, sim_time: float, positions: Dict[int, Vector3]) -> None:
        total = self._emitted_by(sim_time)
        self._last_time = sim_time

        for flow in self._flows:
            new_packets = total - flow.emitted
            if new_packets <= 0:
                continue

            first_index = flow.emitted
            flow.emitted = total

            if flow.observation is None:
                flow.observation = FlowObservation(
                    flow_id=len(self._discovered) + 1,
                    src=flow.src,
                    dst=flow.dst,
                    dst_port=self.port,
                    first_tx_time=self._emission_time(first_index),
                )
                self._discovered.append(flow.observation)

            obs = flow.observation
            obs.tx_packets += new_packets
            obs.tx_bytes += new_packets * self.packet_bytes

            distance = positions[flow.follower_id].distance_to(positions[flow.leader_id])
            if distance <= self.params.link_range:
                obs.rx_packets += new_packets
                obs.rx_bytes += new_packets * self.packet_bytes
                obs.delay_sum_ms += new_packets * self.params.hop_delay_ms
                last_emission = self._emission_time(total - 1)
                obs.last_rx_time = last_emission + self.params.hop_delay_ms / 1000.0

    def collect(self) -> List[FlowObservation]:
        logger.debug(f"Collected {len(self._discovered)} flows at t={self._last_time:.2f}s")
        return list(self._discovered)
