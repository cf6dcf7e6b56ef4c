"""Monte Carlo simulation driver."""

from arpp_sim.simulation.monte_carlo import MonteCarloSimulation, SimulationState
from arpp_sim.simulation.result import IterationResult, SimulationResult, run_timed_simulation

__all__ = [
    "MonteCarloSimulation",
    "SimulationState",
    "IterationResult",
    "SimulationResult",
    "run_timed_simulation",
]
