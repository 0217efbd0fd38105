"""Statistics export for HieraManet."""

from hieramanet.analysis.exporter import (
    CSV_HEADER,
    FlowRecord,
    StatisticsExporter,
    packet_delivery_ratio,
    average_latency_ms,
    average_throughput_kbps,
)

__all__ = [
    "CSV_HEADER",
    "FlowRecord",
    "StatisticsExporter",
    "packet_delivery_ratio",
    "average_latency_ms",
    "average_throughput_kbps",
]
