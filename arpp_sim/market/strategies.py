"""Trading strategies that put pressure on a liquidity pool."""

import logging
from abc import ABC, abstractmethod
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, Optional

import numpy as np

from arpp_sim.core.errors import InsufficientLiquidity

if TYPE_CHECKING:
    from arpp_sim.core.pool import LiquidityPool

logger = logging.getLogger(__name__)


class TradingStrategy(ABC):
    """Abstract base class for trading strategies.

    A strategy looks at the pool and the price observed at the start of
    the step and decides whether to swap, and how much. Strategies keep no
    memory between calls.

    The simulation passes each iteration its own generator through `rng`
    so concurrent iterations never share random state. Called without one,
    a strategy draws from the generator it was constructed with.
    """

    def __init__(self, seed: Optional[int] = None):
        self._rng = np.random.default_rng(seed)

    @abstractmethod
    def execute(
        self,
        pool: "LiquidityPool",
        current_price: Decimal,
        rng: Optional[np.random.Generator] = None,
    ) -> None:
        """Trade against the pool for one simulation step.

        Args:
            pool: The pool to trade against (mutated in place)
            current_price: Pool price observed at the start of the step
            rng: Per-iteration generator, if the caller has one

        Raises:
            PoolError: when the strategy's policy is to surface swap failures
        """

    def get_name(self) -> str:
        """Return the strategy name for display purposes."""
        return self.__class__.__name__

    def _generator(self, rng: Optional[np.random.Generator]) -> np.random.Generator:
        return rng if rng is not None else self._rng


class RandomStrategy(TradingStrategy):
    """Uninformed trader that swaps a random amount in a random direction.

    Each step it trades with probability `swap_probability`. The size is
    uniform in [0, max_swap_amount], capped at half the source-side
    balance. Running short of liquidity is an expected outcome of random
    sizing, so InsufficientLiquidity is logged and dropped.
    """

    def __init__(
        self,
        swap_probability: float,
        max_swap_amount: Decimal,
        seed: Optional[int] = None,
    ):
        """
        Args:
            swap_probability: Chance of trading on a given step, in [0, 1]
            max_swap_amount: Upper bound on a single swap
            seed: Seed for the fallback generator
        """
        if not 0.0 <= swap_probability <= 1.0:
            raise ValueError(
                f"swap_probability must be in [0, 1], got {swap_probability}"
            )
        if max_swap_amount < 0:
            raise ValueError(f"max_swap_amount must be >= 0, got {max_swap_amount}")
        super().__init__(seed)
        self.swap_probability = swap_probability
        self.max_swap_amount = max_swap_amount

    def execute(
        self,
        pool: "LiquidityPool",
        current_price: Decimal,
        rng: Optional[np.random.Generator] = None,
    ) -> None:
        gen = self._generator(rng)
        if gen.random() >= self.swap_probability:
            return

        balance_a, balance_b = pool.get_balances()
        cap_a = min(balance_a / 2, self.max_swap_amount)
        cap_b = min(balance_b / 2, self.max_swap_amount)

        amount = Decimal(str(gen.random())) * self.max_swap_amount
        a_to_b = bool(gen.integers(0, 2))
        swap_amount = min(amount, cap_a if a_to_b else cap_b)

        if swap_amount <= 0:
            logger.debug("Nothing to swap this step (amount %s)", swap_amount)
            return

        try:
            if a_to_b:
                logger.debug("Swapping %s tokens from A to B", swap_amount)
                pool.swap_a_to_b(swap_amount)
            else:
                logger.debug("Swapping %s tokens from B to A", swap_amount)
                pool.swap_b_to_a(swap_amount)
        except InsufficientLiquidity as exc:
            logger.debug("Random swap skipped: %s", exc)


class MeanReversionStrategy(TradingStrategy):
    """Trades a fixed amount back towards the reference price.

    Price above p_ref + threshold: sell B for A. Price below
    p_ref - threshold: sell A for B. Swap failures propagate to the caller.
    """

    def __init__(
        self,
        swap_threshold: Decimal,
        swap_amount: Decimal,
        seed: Optional[int] = None,
    ):
        if swap_threshold < 0:
            raise ValueError(f"swap_threshold must be >= 0, got {swap_threshold}")
        if swap_amount <= 0:
            raise ValueError(f"swap_amount must be > 0, got {swap_amount}")
        super().__init__(seed)
        self.swap_threshold = swap_threshold
        self.swap_amount = swap_amount

    def execute(
        self,
        pool: "LiquidityPool",
        current_price: Decimal,
        rng: Optional[np.random.Generator] = None,
    ) -> None:
        p_ref = pool.get_p_ref()
        if current_price > p_ref + self.swap_threshold:
            pool.swap_b_to_a(self.swap_amount)
        elif current_price < p_ref - self.swap_threshold:
            pool.swap_a_to_b(self.swap_amount)


class StrategyKind(Enum):
    """Strategies selectable from the command line."""
    RANDOM = "random"
    MEAN_REVERSION = "mean-reversion"


def build_strategy(kind: StrategyKind, **params) -> TradingStrategy:
    """Construct a strategy from its kind and keyword parameters."""
    if kind is StrategyKind.RANDOM:
        return RandomStrategy(
            swap_probability=params["swap_probability"],
            max_swap_amount=params["max_swap_amount"],
            seed=params.get("seed"),
        )
    if kind is StrategyKind.MEAN_REVERSION:
        return MeanReversionStrategy(
            swap_threshold=params["swap_threshold"],
            swap_amount=params["swap_amount"],
            seed=params.get("seed"),
        )
    raise ValueError(f"Unknown strategy kind: {kind}")
