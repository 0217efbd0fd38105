"""
Communication module for HieraManet.

Flow observation contract, cluster addressing and the telemetry stand-in.
"""

from hieramanet.communication.flows import (
    FlowObservation,
    FlowObservationSource,
    ClusterAddressing,
    TelemetryFlowMonitor,
)

__all__ = [
    "FlowObservation",
    "FlowObservationSource",
    "ClusterAddressing",
    "TelemetryFlowMonitor",
]
