import pytest

from hieramanet.communication.flows import (
    IP_UDP_HEADER_BYTES,
    ClusterAddressing,
    TelemetryFlowMonitor,
)
from hieramanet.core.agent import AgentRegistry
from hieramanet.core.config import SimulationParameters
from hieramanet.core.vector import Vector3


def _run_monitor(monitor, positions, sim_time=10.0, dt=0.1):
    ticks = int(round(sim_time / dt))
    for k in range(1, ticks + 1):
        monitor.observe(k * dt, positions)
    return monitor.collect()


def test_cluster_addressing():
    registry = AgentRegistry.create(2)
    addressing = ClusterAddressing(registry)

    assert [addressing.cluster_address(f.agent_id) for f in registry.followers_of(0)] == [
        "10.1.1.1", "10.1.1.2",
    ]
    assert [addressing.cluster_address(f.agent_id) for f in registry.followers_of(1)] == [
        "10.1.2.1", "10.1.2.2",
    ]
    assert addressing.cluster_address(registry.leader_of(0).agent_id) == "10.1.1.3"
    assert addressing.cluster_address(registry.leader_of(1).agent_id) == "10.1.2.3"

    assert addressing.backbone_address(registry.super_leader.agent_id) == "192.168.1.1"
    assert addressing.backbone_address(registry.leader_of(0).agent_id) == "192.168.1.2"
    assert addressing.backbone_address(registry.leader_of(1).agent_id) == "192.168.1.3"
    assert addressing.backbone_address(registry.followers()[0].agent_id) is None


def test_in_range_flows_deliver_everything():
    params = SimulationParameters(nodes_per_cluster=2, sim_time=10.0)
    registry = AgentRegistry.create(params.followers_per_cluster)
    positions = registry.positions()

    flows = _run_monitor(TelemetryFlowMonitor(params, registry), positions)

    assert [f.flow_id for f in flows] == [1, 2]
    assert [(f.src, f.dst) for f in flows] == [("10.1.1.1", "10.1.1.2"), ("10.1.2.1", "10.1.2.2")]
    for flow in flows:
        assert flow.dst_port == 9
        assert flow.tx_packets == 188
        assert flow.rx_packets == 188
        assert flow.tx_bytes == 188 * (1024 + IP_UDP_HEADER_BYTES)
        assert flow.rx_bytes == flow.tx_bytes
        assert flow.delay_sum_ms == pytest.approx(376.0)
        assert flow.first_tx_time == pytest.approx(2.0)
        assert flow.last_rx_time == pytest.approx(7.986)


def test_out_of_range_flow_transmits_without_delivery():
    params = SimulationParameters(nodes_per_cluster=2, sim_time=10.0)
    registry = AgentRegistry.create(1)
    positions = registry.positions()
    positions[registry.leader_of(1).agent_id] = Vector3(500, 500, 0)

    flows = _run_monitor(TelemetryFlowMonitor(params, registry), positions)

    in_range, out_of_range = flows
    assert in_range.rx_packets == 188
    assert out_of_range.tx_packets == 188
    assert out_of_range.rx_packets == 0
    assert out_of_range.rx_bytes == 0
    assert out_of_range.last_rx_time == 0.0


def test_no_flows_before_telemetry_starts():
    params = SimulationParameters(nodes_per_cluster=2, sim_time=10.0)
    registry = AgentRegistry.create(1)
    monitor = TelemetryFlowMonitor(params, registry)

    flows = _run_monitor(monitor, registry.positions(), sim_time=1.5)
    assert flows == []


def test_no_followers_no_flows():
    params = SimulationParameters(nodes_per_cluster=1, sim_time=10.0)
    registry = AgentRegistry.create(0)
    assert _run_monitor(TelemetryFlowMonitor(params, registry), registry.positions()) == []
