"""Pool test fixtures.

Provides builders for ARPP pools with standard balance profiles, immutable
state snapshots for before/after accounting, and small deterministic
strategies for driving the Monte Carlo simulation in tests.

Pool balance profiles:
- Balanced: equal A and B (1000, 1000)
- Skewed_a: more A (2000, 500)
- Skewed_b: more B (500, 2000)
- Extreme: very imbalanced (1, 1000000)
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Optional

from arpp_sim.core.errors import InsufficientLiquidity
from arpp_sim.core.pool import LiquidityPool
from arpp_sim.market.strategies import TradingStrategy


class PoolBalanceProfile(Enum):
    """Standard pool balance configurations for testing."""
    BALANCED = "balanced"      # Equal balances
    SKEWED_A = "skewed_a"      # More A than B
    SKEWED_B = "skewed_b"      # More B than A
    EXTREME = "extreme"        # Very imbalanced


_BALANCES = {
    PoolBalanceProfile.BALANCED: (Decimal("1000"), Decimal("1000")),
    PoolBalanceProfile.SKEWED_A: (Decimal("2000"), Decimal("500")),
    PoolBalanceProfile.SKEWED_B: (Decimal("500"), Decimal("2000")),
    PoolBalanceProfile.EXTREME: (Decimal("1"), Decimal("1000000")),
}


def get_pool_balance(profile: PoolBalanceProfile) -> tuple[Decimal, Decimal]:
    """Get (token_a, token_b) for a balance profile."""
    return _BALANCES[profile]


def create_pool(
    profile: PoolBalanceProfile = PoolBalanceProfile.BALANCED,
    p_ref: Decimal = Decimal("1"),
    alpha: Decimal = Decimal("0.5"),
    beta: Decimal = Decimal("1"),
) -> LiquidityPool:
    """Create a pool with the standard curve (alpha 0.5, beta 1).

    Example:
        >>> pool = create_pool()
        >>> pool.get_balances()
        (Decimal('1000'), Decimal('1000'))
    """
    token_a, token_b = get_pool_balance(profile)
    return LiquidityPool(token_a=token_a, token_b=token_b, p_ref=p_ref, alpha=alpha, beta=beta)


@dataclass(frozen=True)
class PoolStateSnapshot:
    """Immutable snapshot of pool state for before/after accounting."""
    token_a: Decimal
    token_b: Decimal
    p_ref: Decimal

    @property
    def total(self) -> Decimal:
        return self.token_a + self.token_b


def snapshot_pool_state(pool: LiquidityPool) -> PoolStateSnapshot:
    return PoolStateSnapshot(token_a=pool.token_a, token_b=pool.token_b, p_ref=pool.p_ref)


class NoOpStrategy(TradingStrategy):
    """Strategy that never trades."""

    def execute(self, pool, current_price, rng=None) -> None:
        pass


class RoundTripStrategy(TradingStrategy):
    """Adds liquidity, swaps A->B, then swaps the proceeds back.

    Every step changes balances by a deterministic amount, which makes
    liquidity and price changes strictly positive across a run.
    """

    def __init__(self, amount_a: Decimal = Decimal("10"), amount_b: Decimal = Decimal("5")):
        super().__init__(seed=0)
        self.amount_a = amount_a
        self.amount_b = amount_b

    def execute(self, pool, current_price, rng=None) -> None:
        pool.add_liquidity(self.amount_a, self.amount_b)
        swapped_b = pool.swap_a_to_b(self.amount_a)
        pool.swap_b_to_a(swapped_b)


class FailingStrategy(TradingStrategy):
    """Always raises InsufficientLiquidity, counting its calls."""

    def __init__(self, message: Optional[str] = None):
        super().__init__(seed=0)
        self.calls = 0
        self.message = message or "drained"

    def execute(self, pool, current_price, rng=None) -> None:
        self.calls += 1
        raise InsufficientLiquidity(self.message)


class EmptyingStrategy(TradingStrategy):
    """Drains the A side of a balanced pool with a single B->A swap.

    At r = 1 the quote is exactly p_ref = 1, so selling token_a of B pays
    out the whole A balance.
    """

    def __init__(self):
        super().__init__(seed=0)
        self.swaps = 0

    def execute(self, pool, current_price, rng=None) -> None:
        if pool.token_a == pool.token_b:
            pool.swap_b_to_a(pool.token_a)
            self.swaps += 1
