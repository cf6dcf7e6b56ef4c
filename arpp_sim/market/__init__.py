"""Market simulation components."""

from arpp_sim.market.price_process import ReferencePriceProcess, random_walk_price
from arpp_sim.market.strategies import (
    MeanReversionStrategy,
    RandomStrategy,
    StrategyKind,
    TradingStrategy,
    build_strategy,
)

__all__ = [
    "ReferencePriceProcess",
    "random_walk_price",
    "MeanReversionStrategy",
    "RandomStrategy",
    "StrategyKind",
    "TradingStrategy",
    "build_strategy",
]
