"""
Statistics export for HieraManet.

Turns the flow observations of a run into FlowRecords and appends them to a
CSV record store named after the packet size. The store is append-only: the
header is written once, when the file is created, and rows are never updated
or deduplicated.
"""

from __future__ import annotations

import csv
import io
import threading
from dataclasses import astuple, dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Union

from loguru import logger

from hieramanet.communication.flows import FlowObservation
from hieramanet.core.config import SimulationParameters
from hieramanet.core.errors import ExportError

CSV_HEADER = [
    "RunNumber", "NodesPerCluster", "SimTime", "AreaSize", "FollowerSpeed",
    "NoiseFactor", "PacketSize", "FlowID", "SourceAddress", "DestinationAddress",
    "TxPackets", "RxPackets", "TxBytes", "RxBytes", "PacketDeliveryRatio",
    "AvgLatency_ms", "AvgThroughput_kbps",
]

# One lock per output target, shared by every exporter in the process
_TARGET_LOCKS: Dict[Path, threading.Lock] = {}
_TARGET_LOCKS_GUARD = threading.Lock()


def _lock_for(path: Path) -> threading.Lock:
    key = path.resolve()
    with _TARGET_LOCKS_GUARD:
        if key not in _TARGET_LOCKS:
            _TARGET_LOCKS[key] = threading.Lock()
        return _TARGET_LOCKS[key]


def packet_delivery_ratio(tx_packets: int, rx_packets: int) -> float:
    """Delivered share of transmitted packets, in percent."""
    if tx_packets <= 0:
        return 0.0
    return rx_packets / tx_packets * 100.0


def average_latency_ms(delay_sum_ms: float, rx_packets: int) -> float:
    if rx_packets <= 0:
        return 0.0
    return delay_sum_ms / rx_packets


def average_throughput_kbps(rx_bytes: int, first_tx_time: float, last_rx_time: float) -> float:
    """Received kilobits per second between first transmission and last reception."""
    duration = last_rx_time - first_tx_time
    if duration <= 0:
        return 0.0
    return rx_bytes * 8.0 / (duration * 1000.0)


def _fmt_param(value: Union[int, float]) -> str:
    if isinstance(value, float):
        return f"{value:.15g}"
    return str(value)


@dataclass(frozen=True)
class FlowRecord:
    """One exported row."""

    run_number: int
    nodes_per_cluster: int
    sim_time: float
    area_size: float
    follower_speed: float
    noise_factor: float
    packet_size: int
    flow_id: int
    source_address: str
    destination_address: str
    tx_packets: int
    rx_packets: int
    tx_bytes: int
    rx_bytes: int
    pdr: float
    avg_latency_ms: float
    avg_throughput_kbps: float

    @classmethod
    def from_observation(
        cls,
        run_number: int,
        params: SimulationParameters,
        flow: FlowObservation,
    ) -> FlowRecord:
        return cls(
            run_number=run_number,
            nodes_per_cluster=params.nodes_per_cluster,
            sim_time=params.sim_time,
            area_size=params.area_size,
            follower_speed=params.follower_speed,
            noise_factor=params.noise_factor,
            packet_size=params.packet_size,
            flow_id=flow.flow_id,
            source_address=flow.src,
            destination_address=flow.dst,
            tx_packets=flow.tx_packets,
            rx_packets=flow.rx_packets,
            tx_bytes=flow.tx_bytes,
            rx_bytes=flow.rx_bytes,
            pdr=packet_delivery_ratio(flow.tx_packets, flow.rx_packets),
            avg_latency_ms=average_latency_ms(flow.delay_sum_ms, flow.rx_packets),
            avg_throughput_kbps=average_throughput_kbps(
                flow.rx_bytes, flow.first_tx_time, flow.last_rx_time
            ),
        )

    def to_row(self) -> List[str]:
        """Render as CSV fields; rates and ratios get two decimals."""
        values = astuple(self)
        head = [_fmt_param(v) for v in values[:14]]
        return head + [f"{self.pdr:.2f}", f"{self.avg_latency_ms:.2f}", f"{self.avg_throughput_kbps:.2f}"]


class StatisticsExporter:
    """
    Appends FlowRecords to the per-packet-size CSV store.

    Exports to the same target are serialized; each call owns the file from
    open to close.
    """

    FILE_PATTERN = "hierarchical_manet_stats_packetSize_{packet_size}.csv"

    def __init__(self, output_dir: Union[str, Path] = ".", telemetry_port: int = 9):
        self.output_dir = Path(output_dir)
        self.telemetry_port = telemetry_port

    def target_for(self, packet_size: int) -> Path:
        """Output file for a packet size."""
        return self.output_dir / self.FILE_PATTERN.format(packet_size=packet_size)

    def build_records(
        self,
        run_number: int,
        params: SimulationParameters,
        flow_stats: Iterable[FlowObservation],
    ) -> List[FlowRecord]:
        """Keep telemetry flows and compute their derived metrics, in input order."""
        return [
            FlowRecord.from_observation(run_number, params, flow)
            for flow in flow_stats
            if flow.dst_port == self.telemetry_port
        ]

    def export(
        self,
        run_number: int,
        params: SimulationParameters,
        flow_stats: Iterable[FlowObservation],
    ) -> List[FlowRecord]:
        """
        Append the records of one run.

        Args:
            run_number: Run being exported
            params: Parameters echoed into every row
            flow_stats: Flow observations in discovery order

        Returns:
            Records written

        Raises:
            ExportError: If the target cannot be opened or written
        """
        records = self.build_records(run_number, params, flow_stats)

        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        for record in records:
            writer.writerow(record.to_row())
        body = buffer.getvalue()

        path = self.target_for(params.packet_size)
        with _lock_for(path):
            try:
                exists = path.exists()
                path.parent.mkdir(parents=True, exist_ok=True)
                with open(path, "a", newline="") as f:
                    if not exists:
                        f.write(",".join(CSV_HEADER) + "\n")
                    f.write(body)
            except OSError as e:
                raise ExportError(f"Cannot append to {path}: {e}", path=str(path)) from e

        logger.info(f"Wrote {len(records)} flow records for run {run_number} to {path}")
        return records
