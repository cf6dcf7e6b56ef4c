"""Default settings for pools and Monte Carlo runs."""

import multiprocessing
import os
from dataclasses import dataclass
from decimal import Decimal

from arpp_sim.core.pool import LiquidityPool


@dataclass(frozen=True)
class PoolSettings:
    token_a: Decimal
    token_b: Decimal
    p_ref: Decimal
    alpha: Decimal
    beta: Decimal


@dataclass(frozen=True)
class SimulationSettings:
    iterations: int
    steps_per_iteration: int
    walk_alpha: Decimal  # mean std dev of a p_ref step
    walk_beta: Decimal   # std dev of that std dev

    def __post_init__(self) -> None:
        if self.iterations < 0:
            raise ValueError(f"iterations must be >= 0, got {self.iterations}")
        if self.steps_per_iteration < 0:
            raise ValueError(
                f"steps_per_iteration must be >= 0, got {self.steps_per_iteration}"
            )


DEFAULT_POOL = PoolSettings(
    token_a=Decimal("1000"),
    token_b=Decimal("1000"),
    p_ref=Decimal("1"),
    alpha=Decimal("0.5"),
    beta=Decimal("1"),
)


DEFAULT_SIMULATION = SimulationSettings(
    iterations=1000,
    steps_per_iteration=100,
    walk_alpha=Decimal("1"),
    walk_beta=Decimal("1"),
)


# Walk used by the standalone random-walk command
DEFAULT_WALK_INITIAL_PRICE = Decimal("100")
DEFAULT_WALK_STD_DEV = Decimal("0.1")
DEFAULT_WALK_STD_DEV_OF_STD_DEV = Decimal("0.02")


def resolve_n_workers() -> int:
    """Resolve worker count from environment or CPU count."""
    return int(os.environ.get("N_WORKERS", str(min(8, multiprocessing.cpu_count()))))


def build_pool(
    settings: PoolSettings = DEFAULT_POOL,
    *,
    token_a: Decimal | None = None,
    token_b: Decimal | None = None,
) -> LiquidityPool:
    """Build a pool from settings, optionally overriding the balances."""
    return LiquidityPool(
        token_a=settings.token_a if token_a is None else token_a,
        token_b=settings.token_b if token_b is None else token_b,
        p_ref=settings.p_ref,
        alpha=settings.alpha,
        beta=settings.beta,
    )
