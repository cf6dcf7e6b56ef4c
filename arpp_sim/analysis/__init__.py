"""Metrics and charts for simulation output."""

from arpp_sim.analysis.metrics import (
    PoolMetrics,
    PoolMetricsStep,
    SimulationAnalysis,
    accumulate_pool_metrics,
    analyze_simulation_results,
)

__all__ = [
    "PoolMetrics",
    "PoolMetricsStep",
    "SimulationAnalysis",
    "accumulate_pool_metrics",
    "analyze_simulation_results",
]
