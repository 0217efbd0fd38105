"""
Experiments for HieraManet evaluation.

Provides the batch run controller and the hierarchical mobility experiment.
"""

from experiments.base import ExperimentBase, ExperimentConfig, ExperimentResult, ExperimentSummary
from experiments.hierarchical import HierarchicalConfig, HierarchicalMobilityExperiment, run_batch

__all__ = [
    "ExperimentBase",
    "ExperimentConfig",
    "ExperimentResult",
    "ExperimentSummary",
    "HierarchicalConfig",
    "HierarchicalMobilityExperiment",
    "run_batch",
]
