"""Core pool components."""

from arpp_sim.core.errors import InsufficientLiquidity, InvalidAmount, PoolError
from arpp_sim.core.formula import arpp, price_bounds, token_ratio
from arpp_sim.core.pool import LiquidityPool

__all__ = [
    "InsufficientLiquidity",
    "InvalidAmount",
    "PoolError",
    "arpp",
    "price_bounds",
    "token_ratio",
    "LiquidityPool",
]
