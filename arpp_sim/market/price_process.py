"""Bounded random walk for the pool's reference price."""

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterator, Optional

import numpy as np

# Floor that keeps p_ref strictly positive for the pricing curve
MIN_PRICE = Decimal("0.1")


def random_walk_price(
    last_price: Decimal,
    std_dev: Decimal,
    std_dev_of_std_dev: Decimal,
    rng: Optional[np.random.Generator] = None,
) -> Decimal:
    """Draw the next reference price.

    Two-stage draw: the step's standard deviation is itself sampled from
    N(std_dev, std_dev_of_std_dev) and clamped at zero, then the price
    change is sampled from N(0, that standard deviation). The result is
    floored at MIN_PRICE.

    With both parameters at zero the walk is switched off and last_price
    is returned unchanged.

    Args:
        last_price: Current reference price
        std_dev: Mean standard deviation of a price step
        std_dev_of_std_dev: Spread of the step's standard deviation
        rng: Generator to draw from (a fresh unseeded one if omitted)

    Returns:
        The new reference price
    """
    if std_dev == 0 and std_dev_of_std_dev == 0:
        return last_price
    if std_dev < 0 or std_dev_of_std_dev < 0:
        raise ValueError(
            f"standard deviations must be >= 0, got ({std_dev}, {std_dev_of_std_dev})"
        )

    if rng is None:
        rng = np.random.default_rng()

    effective_std = max(rng.normal(float(std_dev), float(std_dev_of_std_dev)), 0.0)
    price_change = Decimal(str(rng.normal(0.0, effective_std)))

    return max(last_price + price_change, MIN_PRICE)


def generate_random_walk_sequence(
    initial_price: Decimal,
    length: int,
    std_dev: Decimal,
    std_dev_of_std_dev: Decimal,
    rng: Optional[np.random.Generator] = None,
) -> list[Decimal]:
    """Generate one walk of `length` prices starting at initial_price."""
    if length <= 0:
        return []
    if rng is None:
        rng = np.random.default_rng()

    prices = [initial_price]
    current = initial_price
    for _ in range(length - 1):
        current = random_walk_price(current, std_dev, std_dev_of_std_dev, rng)
        prices.append(current)
    return prices


def generate_multiple_random_walks(
    num_sequences: int,
    initial_price: Decimal,
    length: int,
    std_dev: Decimal,
    std_dev_of_std_dev: Decimal,
    seed: Optional[int] = None,
) -> list[list[Decimal]]:
    """Generate independent walks, each from its own child generator."""
    children = np.random.SeedSequence(seed).spawn(num_sequences)
    return [
        generate_random_walk_sequence(
            initial_price,
            length,
            std_dev,
            std_dev_of_std_dev,
            np.random.default_rng(child),
        )
        for child in children
    ]


@dataclass
class ReferencePriceProcess:
    """Seeded reference-price walk.

    Stateful wrapper around random_walk_price for callers that want a
    reproducible path rather than single draws.
    """
    initial_price: Decimal
    std_dev: Decimal = Decimal("0.1")
    std_dev_of_std_dev: Decimal = Decimal("0.02")
    seed: Optional[int] = None

    def __post_init__(self) -> None:
        if self.initial_price <= 0:
            raise ValueError(f"initial_price must be > 0, got {self.initial_price}")
        self._rng = np.random.default_rng(self.seed)
        self._current_price = self.initial_price

    def reset(self, seed: Optional[int] = None) -> None:
        """Reset the walk to its initial price."""
        if seed is not None:
            self._rng = np.random.default_rng(seed)
        self._current_price = self.initial_price

    @property
    def current_price(self) -> Decimal:
        return self._current_price

    def next(self, p_ref: Decimal) -> Decimal:
        """One step from an arbitrary starting price (does not move the walk)."""
        return random_walk_price(p_ref, self.std_dev, self.std_dev_of_std_dev, self._rng)

    def step(self) -> Decimal:
        """Advance the walk by one step and return the new price."""
        self._current_price = self.next(self._current_price)
        return self._current_price

    def generate(self, n_steps: int) -> Iterator[Decimal]:
        """Yield n_steps prices, starting with the current one."""
        if n_steps <= 0:
            return
        yield self.current_price
        for _ in range(n_steps - 1):
            yield self.step()

    def generate_path(self, n_steps: int) -> list[Decimal]:
        return list(self.generate(n_steps))
