"""
Base Experiment Class for HieraManet.

Provides the run controller: repeated, independently seeded trials executed
strictly in sequence, with per-run failure isolation and a batch summary.
"""

from __future__ import annotations

import json
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional
import numpy as np
from loguru import logger

from hieramanet.core.config import SimulationParameters
from hieramanet.core.errors import RunError
from hieramanet.simulation.engine import HierarchicalMobilityEngine, SimulationRun


@dataclass
class ExperimentConfig:
    """Base configuration for experiments."""

    name: str = "experiment"
    description: str = ""

    # Repetitions
    num_runs: int = 1

    # Output
    output_dir: str = "."
    save_summary: bool = False
    save_trajectories: bool = False


@dataclass
class ExperimentResult:
    """Result from a single experiment run."""

    run_number: int
    seed: int

    # Timing
    start_time: float = 0.0
    end_time: float = 0.0
    duration: float = 0.0

    # Metrics
    metrics: Dict[str, float] = field(default_factory=dict)

    # Status
    success: bool = True
    error: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "run_number": self.run_number,
            "seed": self.seed,
            "duration": self.duration,
            "metrics": self.metrics,
            "success": self.success,
            "error": self.error,
        }


@dataclass
class ExperimentSummary:
    """Summary statistics for experiment."""

    name: str
    num_runs: int
    successful_runs: int

    # Aggregated metrics
    metrics_mean: Dict[str, float] = field(default_factory=dict)
    metrics_std: Dict[str, float] = field(default_factory=dict)
    metrics_min: Dict[str, float] = field(default_factory=dict)
    metrics_max: Dict[str, float] = field(default_factory=dict)

    total_duration: float = 0.0

    @property
    def failed_runs(self) -> int:
        return self.num_runs - self.successful_runs

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "num_runs": self.num_runs,
            "successful_runs": self.successful_runs,
            "metrics_mean": self.metrics_mean,
            "metrics_std": self.metrics_std,
            "metrics_min": self.metrics_min,
            "metrics_max": self.metrics_max,
            "total_duration": self.total_duration,
        }


class ExperimentBase(ABC):
    """
    Base class for experiments.

    Runs are numbered from 1 and seeded with their own number. Each run gets
    a fresh engine that is torn down before the next run starts; a failing
    run is recorded and the batch moves on.
    """

    def __init__(self, config: ExperimentConfig, parameters: SimulationParameters):
        """
        Initialize experiment.

        Args:
            config: Experiment configuration
            parameters: Simulation parameters shared by every run
        """
        self.config = config
        self.parameters = parameters
        self._results: List[ExperimentResult] = []
        self._summary: Optional[ExperimentSummary] = None

    @staticmethod
    def seed_for(run_number: int) -> int:
        """Random seed of a run: the run number itself."""
        return run_number

    @abstractmethod
    def setup(self, run: SimulationRun) -> HierarchicalMobilityEngine:
        """
        Set up experiment for a run.

        Args:
            run: Run identity and parameters

        Returns:
            Configured engine, not yet started
        """
        pass

    @abstractmethod
    def compute_metrics(self, run: SimulationRun, engine: HierarchicalMobilityEngine) -> Dict[str, float]:
        """
        Collect and export the results of a finished run.

        Args:
            run: Run identity and parameters
            engine: Engine after its scheduler has been stopped

        Returns:
            Dictionary of metrics
        """
        pass

    def on_run_start(self, run_number: int) -> None:
        """Hook called before each run of a batch."""

    def on_run_end(self, run_number: int) -> None:
        """Hook called after each run, whether it succeeded or not."""

    def run_single(self, run_number: int) -> ExperimentResult:
        """Run a single experiment trial."""
        seed = self.seed_for(run_number)
        logger.info(f"Starting run {run_number} of {self.config.name} (seed {seed})")

        result = ExperimentResult(run_number=run_number, seed=seed)
        result.start_time = time.time()
        engine: Optional[HierarchicalMobilityEngine] = None

        try:
            run = SimulationRun(run_number=run_number, seed=seed, parameters=self.parameters)

            # Setup
            engine = self.setup(run)

            # Run simulation up to the horizon, then halt the scheduler
            engine.run_to_completion()

            if self.config.save_trajectories:
                self._save_trajectory(run, engine)

            # Compute metrics; exporting is the last step so a failure
            # anywhere earlier leaves no rows behind
            result.metrics = self.compute_metrics(run, engine)
            result.metrics["tick_count"] = float(engine.tick_count)

            result.success = True

        except Exception as e:
            error = RunError(run_number, str(e))
            logger.error(str(error))
            result.success = False
            result.error = str(error)

        finally:
            if engine is not None:
                engine.teardown()
            self.on_run_end(run_number)
            result.end_time = time.time()
            result.duration = result.end_time - result.start_time

        if result.success:
            logger.info(f"Run {run_number} completed in {result.duration:.2f}s")

        return result

    def run_all(self) -> ExperimentSummary:
        """Run all experiment trials in order."""
        logger.info(f"Starting experiment: {self.config.name}")
        logger.info(f"Configuration: {self.config.num_runs} runs, {self.parameters.sim_time}s each")

        self._results = []

        for run_number in range(1, self.config.num_runs + 1):
            self.on_run_start(run_number)
            result = self.run_single(run_number)
            self._results.append(result)

        # Compute summary
        self._summary = self._compute_summary()

        if self.config.save_summary:
            self._save_results()

        logger.info(f"Experiment completed: {self._summary.successful_runs}/{self._summary.num_runs} successful")

        return self._summary

    def _compute_summary(self) -> ExperimentSummary:
        """Compute summary statistics from results."""
        successful_results = [r for r in self._results if r.success]

        summary = ExperimentSummary(
            name=self.config.name,
            num_runs=len(self._results),
            successful_runs=len(successful_results),
            total_duration=sum(r.duration for r in self._results),
        )

        if not successful_results:
            return summary

        # Aggregate metrics
        all_metrics: Dict[str, List[float]] = {}

        for result in successful_results:
            for key, value in result.metrics.items():
                if key not in all_metrics:
                    all_metrics[key] = []
                all_metrics[key].append(value)

        for key, values in all_metrics.items():
            summary.metrics_mean[key] = float(np.mean(values))
            summary.metrics_std[key] = float(np.std(values))
            summary.metrics_min[key] = float(np.min(values))
            summary.metrics_max[key] = float(np.max(values))

        return summary

    def _save_trajectory(self, run: SimulationRun, engine: HierarchicalMobilityEngine) -> None:
        output_dir = Path(self.config.output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
        trajectory_file = output_dir / (
            f"trajectories_packetSize_{run.parameters.packet_size}_run_{run.run_number}.json"
        )
        with open(trajectory_file, "w") as f:
            json.dump(engine.get_trajectory(), f)
        logger.debug(f"Trajectory saved to {trajectory_file}")

    def _save_results(self) -> None:
        """Save results to files."""
        output_dir = Path(self.config.output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)

        # Save summary
        summary_file = output_dir / f"{self.config.name}_summary.json"
        with open(summary_file, "w") as f:
            json.dump(self._summary.to_dict(), f, indent=2)

        # Save individual results
        results_file = output_dir / f"{self.config.name}_results.json"
        with open(results_file, "w") as f:
            json.dump([r.to_dict() for r in self._results], f, indent=2)

        logger.info(f"Results saved to {output_dir}")

    def get_results(self) -> List[ExperimentResult]:
        """Get all results."""
        return self._results

    def get_summary(self) -> Optional[ExperimentSummary]:
        """Get summary."""
        return self._summary
