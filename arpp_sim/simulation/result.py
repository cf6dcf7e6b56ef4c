"""Simulation result types."""

import time
from dataclasses import dataclass, field
from decimal import Decimal
from typing import TYPE_CHECKING

from arpp_sim.analysis.metrics import PoolMetrics

if TYPE_CHECKING:
    from arpp_sim.core.pool import LiquidityPool
    from arpp_sim.simulation.monte_carlo import MonteCarloSimulation


@dataclass
class IterationResult:
    """Everything one Monte Carlo iteration hands back to the fold."""
    index: int
    initial_price: Decimal
    final_price: Decimal
    initial_liquidity: Decimal
    final_liquidity: Decimal
    metrics: PoolMetrics
    price_history: list[Decimal]
    final_pool: "LiquidityPool"
    strategy_errors: int = 0

    @property
    def price_change(self) -> Decimal:
        return abs(self.final_price - self.initial_price)

    @property
    def liquidity_change(self) -> Decimal:
        return abs(self.final_liquidity - self.initial_liquidity)


@dataclass(frozen=True)
class SimulationResult:
    """Aggregate outcome of a Monte Carlo run."""
    average_price_change: Decimal
    average_liquidity_change: Decimal
    max_price: Decimal
    min_price: Decimal
    metrics: PoolMetrics = field(default_factory=PoolMetrics)

    @classmethod
    def empty(cls) -> "SimulationResult":
        """Zero-valued result returned for a run with no iterations."""
        return cls(
            average_price_change=Decimal("0"),
            average_liquidity_change=Decimal("0"),
            max_price=Decimal("0"),
            min_price=Decimal("0"),
            metrics=PoolMetrics(),
        )

    def summary_lines(self) -> list[str]:
        """Human-readable summary, one metric per line."""
        return [
            f"Average price change: {self.average_price_change}",
            f"Average liquidity change: {self.average_liquidity_change}",
            f"Maximum price: {self.max_price}",
            f"Minimum price: {self.min_price}",
            f"Price volatility: {self.metrics.price_volatility}",
            f"Liquidity depth: {self.metrics.liquidity_depth}",
            f"Trading volume: {self.metrics.trading_volume}",
            f"Impermanent loss: {self.metrics.impermanent_loss}",
        ]

    def to_dict(self) -> dict:
        return {
            "average_price_change": self.average_price_change,
            "average_liquidity_change": self.average_liquidity_change,
            "max_price": self.max_price,
            "min_price": self.min_price,
            "metrics": self.metrics.to_dict(),
        }


def run_timed_simulation(
    simulation: "MonteCarloSimulation",
) -> tuple[SimulationResult, float]:
    """Run a simulation and return its result with the elapsed seconds."""
    start = time.perf_counter()
    result = simulation.run()
    return result, time.perf_counter() - start
