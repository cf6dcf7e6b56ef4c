"""Two-token liquidity pool priced by the ARPP curve."""

import copy
from dataclasses import dataclass
from decimal import ROUND_DOWN, Decimal, localcontext
from typing import Optional

import numpy as np

from arpp_sim.analysis.metrics import PoolMetricsStep
from arpp_sim.core.errors import InsufficientLiquidity, InvalidAmount
from arpp_sim.core.formula import arpp, token_ratio
from arpp_sim.market.price_process import random_walk_price

# Swap outputs are rounded down to this scale
AMOUNT_SCALE = Decimal("1e-18")
# Working precision for swap settlement, wide enough that no balance update rounds
SETTLEMENT_PRECISION = 60


def swap_output(amount_in: Decimal, price: Decimal) -> Decimal:
    """amount_in * price, truncated to AMOUNT_SCALE."""
    with localcontext() as ctx:
        ctx.prec = SETTLEMENT_PRECISION
        return (amount_in * price).quantize(AMOUNT_SCALE, rounding=ROUND_DOWN)


@dataclass
class LiquidityPool:
    """Liquidity pool holding token A and token B.

    Prices are never cached: every quote is recomputed from the current
    balances and reference price. Swaps are priced off the pre-swap
    ratio of the side being traded, so an A->B swap and a B->A swap at
    the same instant only mirror each other at exact balance (r = 1).

    The curve parameters (alpha, beta) are fixed at construction. They are
    unrelated to the random-walk parameters passed to set_reference_price.
    """
    token_a: Decimal
    token_b: Decimal
    p_ref: Decimal
    alpha: Decimal
    beta: Decimal

    def __post_init__(self) -> None:
        if self.token_a < 0:
            raise ValueError(f"token_a must be >= 0, got {self.token_a}")
        if self.token_b < 0:
            raise ValueError(f"token_b must be >= 0, got {self.token_b}")
        if self.p_ref <= 0:
            raise ValueError(f"p_ref must be > 0, got {self.p_ref}")
        if self.beta <= 0:
            raise ValueError(f"beta must be > 0, got {self.beta}")

    def add_liquidity(self, amount_a: Decimal, amount_b: Decimal) -> None:
        """Deposit both tokens. Both amounts must be strictly positive."""
        if amount_a <= 0 or amount_b <= 0:
            raise InvalidAmount(
                f"Amounts must be positive, got ({amount_a}, {amount_b})"
            )
        self.token_a += amount_a
        self.token_b += amount_b

    def remove_liquidity(self, amount_a: Decimal, amount_b: Decimal) -> None:
        """Withdraw both tokens without overdrawing either balance."""
        if amount_a <= 0 or amount_b <= 0:
            raise InvalidAmount(
                f"Amounts must be positive, got ({amount_a}, {amount_b})"
            )
        if amount_a > self.token_a or amount_b > self.token_b:
            raise InsufficientLiquidity(
                f"Cannot remove ({amount_a}, {amount_b}) from "
                f"({self.token_a}, {self.token_b})"
            )
        self.token_a -= amount_a
        self.token_b -= amount_b

    def top_up(
        self, amount_a: Decimal = Decimal("0"), amount_b: Decimal = Decimal("0")
    ) -> None:
        """Single-sided deposit used by the rebalancing safety valve.

        Either amount may be zero, but not both, and neither may be negative.
        """
        if amount_a < 0 or amount_b < 0 or (amount_a == 0 and amount_b == 0):
            raise InvalidAmount(
                f"Top-up needs one positive amount, got ({amount_a}, {amount_b})"
            )
        self.token_a += amount_a
        self.token_b += amount_b

    def quote_a_to_b(self, amount_a: Decimal) -> Decimal:
        """Amount of B paid out for amount_a of A, without executing.

        Raises:
            InvalidAmount: amount_a <= 0
            InsufficientLiquidity: amount_a exceeds token_a, or the B
                output is non-positive or exceeds token_b
        """
        if amount_a <= 0:
            raise InvalidAmount(f"Amount must be positive, got {amount_a}")
        if amount_a > self.token_a:
            raise InsufficientLiquidity(
                f"Swap of {amount_a} A exceeds balance {self.token_a}"
            )

        r = self.token_b / self.token_a
        price = arpp(self.p_ref, self.alpha, self.beta, r)
        amount_b = swap_output(amount_a, price)

        if amount_b <= 0 or amount_b > self.token_b:
            raise InsufficientLiquidity(
                f"Swap output {amount_b} B not covered by balance {self.token_b}"
            )
        return amount_b

    def quote_b_to_a(self, amount_b: Decimal) -> Decimal:
        """Amount of A paid out for amount_b of B, without executing."""
        if amount_b <= 0:
            raise InvalidAmount(f"Amount must be positive, got {amount_b}")
        if amount_b > self.token_b:
            raise InsufficientLiquidity(
                f"Swap of {amount_b} B exceeds balance {self.token_b}"
            )

        r = self.token_a / self.token_b
        price = arpp(self.p_ref, self.alpha, self.beta, r)
        amount_a = swap_output(amount_b, price)

        if amount_a <= 0 or amount_a > self.token_a:
            raise InsufficientLiquidity(
                f"Swap output {amount_a} A not covered by balance {self.token_a}"
            )
        return amount_a

    def swap_a_to_b(self, amount_a: Decimal) -> Decimal:
        """Sell amount_a of A into the pool and return the B paid out."""
        amount_b = self.quote_a_to_b(amount_a)
        with localcontext() as ctx:
            ctx.prec = SETTLEMENT_PRECISION
            self.token_a += amount_a
            self.token_b -= amount_b
        return amount_b

    def swap_b_to_a(self, amount_b: Decimal) -> Decimal:
        """Sell amount_b of B into the pool and return the A paid out."""
        amount_a = self.quote_b_to_a(amount_b)
        with localcontext() as ctx:
            ctx.prec = SETTLEMENT_PRECISION
            self.token_b += amount_b
            self.token_a -= amount_a
        return amount_a

    def get_price(self) -> Decimal:
        """Current quote from the B/A ratio and the reference price."""
        if self.token_a == 0:
            raise InsufficientLiquidity("Price is undefined with an empty A side")
        r = self.token_b / self.token_a
        return arpp(self.p_ref, self.alpha, self.beta, r)

    def get_balances(self) -> tuple[Decimal, Decimal]:
        return self.token_a, self.token_b

    def get_p_ref(self) -> Decimal:
        return self.p_ref

    def set_reference_price(
        self,
        alpha: Decimal,
        beta: Decimal,
        rng: Optional[np.random.Generator] = None,
    ) -> Decimal:
        """Move p_ref one step along its random walk.

        Args:
            alpha: Mean standard deviation of the price step
            beta: Standard deviation of that standard deviation
            rng: Generator to draw from (a fresh one if omitted)

        Returns:
            The new reference price
        """
        self.p_ref = random_walk_price(self.p_ref, alpha, beta, rng)
        return self.p_ref

    def snapshot(self) -> PoolMetricsStep:
        """Capture the pool state for metrics accumulation."""
        return PoolMetricsStep(
            price=self.get_price(),
            p_ref=self.p_ref,
            balances_a=self.token_a,
            balances_b=self.token_b,
            ratio=token_ratio(self.token_a, self.token_b),
        )

    def clone(self) -> "LiquidityPool":
        """Independent copy; mutating it never touches this pool."""
        return copy.copy(self)
