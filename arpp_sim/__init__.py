"""ARPP liquidity pool and Monte Carlo simulation framework."""

from arpp_sim.core.errors import InsufficientLiquidity, InvalidAmount, PoolError
from arpp_sim.core.formula import arpp
from arpp_sim.core.pool import LiquidityPool
from arpp_sim.market.strategies import MeanReversionStrategy, RandomStrategy, TradingStrategy
from arpp_sim.simulation.monte_carlo import MonteCarloSimulation
from arpp_sim.simulation.result import SimulationResult

__all__ = [
    "InsufficientLiquidity",
    "InvalidAmount",
    "PoolError",
    "arpp",
    "LiquidityPool",
    "MeanReversionStrategy",
    "RandomStrategy",
    "TradingStrategy",
    "MonteCarloSimulation",
    "SimulationResult",
]
