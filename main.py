#!/usr/bin/env python
"""
HieraManet - Hierarchical MANET mobility simulation

Main entry point for running simulation batches.
"""

import sys
import argparse
from typing import List, Optional
from loguru import logger

from hieramanet.core.config import SimulationParameters
from hieramanet.core.errors import ConfigurationError


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="HieraManet hierarchical mobility simulation")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Enable verbose logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    run = subparsers.add_parser("run", help="Run a batch of simulations")
    params = subparsers.add_parser("params", help="Print the effective parameters as YAML")

    for sub in (run, params):
        sub.add_argument("--config", help="YAML file with simulation parameters")
        sub.add_argument("--nodesPerCluster", dest="nodes_per_cluster", type=int,
                         help="Number of nodes per cluster, leader included (default 5)")
        sub.add_argument("--simTime", dest="sim_time", type=float,
                         help="Total simulation time in seconds (default 160)")
        sub.add_argument("--areaSize", dest="area_size", type=float,
                         help="Side length of the simulation area in meters (default 200)")
        sub.add_argument("--followerSpeed", dest="follower_speed", type=float,
                         help="Speed of follower nodes in m/s (default 1.5)")
        sub.add_argument("--noiseFactor", dest="noise_factor", type=float,
                         help="Noise factor for follower movement (default 1.0)")
        sub.add_argument("--packetSizei", dest="packet_size", type=int,
                         help="Telemetry packet size in bytes (default 1024)")
        sub.add_argument("--numRuns", dest="num_runs", type=int,
                         help="Number of simulation repetitions (default 1)")
        sub.add_argument("--formation", dest="formation_mode",
                         choices=["rigid_offset", "independent_waypoint"],
                         help="Cluster-leader mobility (default rigid_offset)")

    run.add_argument("--output-dir", default=".",
                     help="Directory for the statistics CSV files")
    run.add_argument("--save-summary", action="store_true",
                     help="Write batch summary and per-run results as JSON")
    run.add_argument("--save-trajectories", action="store_true",
                     help="Write per-run agent trajectories as JSON")

    return parser


def load_parameters(args: argparse.Namespace) -> SimulationParameters:
    """Combine the optional YAML file with command line overrides."""
    if args.config:
        params = SimulationParameters.from_yaml(args.config)
    else:
        params = SimulationParameters()

    return params.with_overrides(
        nodes_per_cluster=args.nodes_per_cluster,
        sim_time=args.sim_time,
        area_size=args.area_size,
        follower_speed=args.follower_speed,
        noise_factor=args.noise_factor,
        packet_size=args.packet_size,
        num_runs=args.num_runs,
        formation_mode=args.formation_mode,
    )


def run_simulations(params: SimulationParameters, args: argparse.Namespace) -> bool:
    """Run the batch; True when at least one run succeeded."""
    from experiments.hierarchical import run_batch

    summary = run_batch(
        params.num_runs,
        params,
        output_dir=args.output_dir,
        save_summary=args.save_summary,
        save_trajectories=args.save_trajectories,
    )

    print(f"\nCompleted {summary.successful_runs}/{summary.num_runs} runs")
    if summary.failed_runs:
        print(f"  Failed runs: {summary.failed_runs}")
    if "mean_pdr" in summary.metrics_mean:
        print(f"  Mean PDR: {summary.metrics_mean['mean_pdr']:.2f}%")
        print(f"  Mean latency: {summary.metrics_mean['mean_latency_ms']:.2f} ms")
        print(f"  Mean throughput: {summary.metrics_mean['mean_throughput_kbps']:.2f} kbps")

    return summary.num_runs == 0 or summary.successful_runs > 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if args.verbose else "WARNING")

    try:
        params = load_parameters(args)
    except ConfigurationError as e:
        logger.error(str(e))
        return 2

    params.check_domain()

    if args.command == "params":
        print(params.to_yaml(), end="")
        return 0

    success = run_simulations(params, args)
    return 0 if success else 1


if __name__ == "__main__":
    sys.exit(main())
