"""Pool metrics accumulated over a simulation run.

Each simulation step is captured as a PoolMetricsStep and compared against
the run's fixed initial step. Four running sums are kept:

- price volatility: relative price move, clamped to [0, 1]
- liquidity depth: geometric mean of the balances
- trading volume: absolute balance drift on both sides
- impermanent loss: pool value versus holding, clamped to [-1, 1]

Degenerate inputs (zero or negative prices, empty pools) map to sentinel
values of 0 or 1 instead of raising, so a bad step shows up in the numbers
rather than aborting the run.
"""

from dataclasses import asdict, dataclass, field
from decimal import Decimal, InvalidOperation
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from arpp_sim.core.pool import LiquidityPool
    from arpp_sim.simulation.result import SimulationResult

ZERO = Decimal("0")
ONE = Decimal("1")


@dataclass(frozen=True)
class PoolMetricsStep:
    """Pool state captured once per simulation step."""
    price: Decimal
    p_ref: Decimal
    balances_a: Decimal
    balances_b: Decimal
    ratio: Decimal  # balances_b / balances_a


@dataclass
class PoolMetrics:
    """Ordered step snapshots plus the four running accumulators."""
    steps: list[PoolMetricsStep] = field(default_factory=list)
    price_volatility: Decimal = ZERO
    liquidity_depth: Decimal = ZERO
    trading_volume: Decimal = ZERO
    impermanent_loss: Decimal = ZERO

    def get_prices(self) -> list[Decimal]:
        return [step.price for step in self.steps]

    def get_p_ref(self) -> list[Decimal]:
        return [step.p_ref for step in self.steps]

    def get_balances_a(self) -> list[Decimal]:
        return [step.balances_a for step in self.steps]

    def get_balances_b(self) -> list[Decimal]:
        return [step.balances_b for step in self.steps]

    def get_ratios(self) -> list[Decimal]:
        return [step.ratio for step in self.steps]

    def update_metrics(
        self, current_step: PoolMetricsStep, initial_step: PoolMetricsStep
    ) -> None:
        """Add one step's contribution to the accumulators."""
        self.price_volatility += calculate_price_volatility(
            current_step.price, initial_step.price
        )
        self.liquidity_depth += calculate_liquidity_depth(
            current_step.balances_a, current_step.balances_b
        )
        self.trading_volume += calculate_trading_volume(
            current_step.balances_a,
            current_step.balances_b,
            initial_step.balances_a,
            initial_step.balances_b,
        )
        self.impermanent_loss += calculate_impermanent_loss(
            current_step.balances_a,
            current_step.balances_b,
            initial_step.balances_a,
            initial_step.balances_b,
            current_step.price,
            initial_step.price,
        )

    def merge(self, other: "PoolMetrics") -> "PoolMetrics":
        """Fold another partial into this one.

        The accumulators are plain sums, so merging partials in any order
        gives the same totals. Steps are appended in call order.
        """
        self.steps.extend(other.steps)
        self.price_volatility += other.price_volatility
        self.liquidity_depth += other.liquidity_depth
        self.trading_volume += other.trading_volume
        self.impermanent_loss += other.impermanent_loss
        return self

    def to_dict(self) -> dict:
        """Plain-data export for reporting layers."""
        return {
            "steps": [asdict(step) for step in self.steps],
            "price_volatility": self.price_volatility,
            "liquidity_depth": self.liquidity_depth,
            "trading_volume": self.trading_volume,
            "impermanent_loss": self.impermanent_loss,
        }


def accumulate_pool_metrics(
    pool: "LiquidityPool",
    metrics: PoolMetrics,
    initial_step: PoolMetricsStep,
) -> PoolMetricsStep:
    """Snapshot the pool, record the step and update the accumulators."""
    current_step = pool.snapshot()
    metrics.steps.append(current_step)
    metrics.update_metrics(current_step, initial_step)
    return current_step


def _clamp(value: Decimal, low: Decimal, high: Decimal) -> Decimal:
    return max(low, min(high, value))


def calculate_price_volatility(current_price: Decimal, initial_price: Decimal) -> Decimal:
    """Relative price move |current - initial| / initial, clamped to [0, 1]."""
    if current_price < 0 or initial_price < 0:
        return ONE
    if initial_price == 0:
        return ZERO if current_price == 0 else ONE

    volatility = abs((current_price - initial_price) / initial_price)
    return _clamp(volatility, ZERO, ONE)


def calculate_liquidity_depth(token_a: Decimal, token_b: Decimal) -> Decimal:
    """sqrt(token_a * token_b), or 0 when the product is negative."""
    product = token_a * token_b
    if product < 0:
        return ZERO
    try:
        return product.sqrt()
    except InvalidOperation:
        return ZERO


def calculate_trading_volume(
    token_a: Decimal,
    token_b: Decimal,
    initial_a: Decimal,
    initial_b: Decimal,
) -> Decimal:
    return abs(token_a - initial_a) + abs(token_b - initial_b)


def calculate_impermanent_loss(
    token_a: Decimal,
    token_b: Decimal,
    initial_a: Decimal,
    initial_b: Decimal,
    current_price: Decimal,
    initial_price: Decimal,
) -> Decimal:
    """Pool value relative to holding the initial balances, in [-1, 1].

    value_if_held = initial_a * current_price / initial_price + initial_b
    value_in_pool = token_a * current_price + token_b
    """
    if min(token_a, token_b, initial_a, initial_b, current_price, initial_price) < 0:
        return ZERO
    if initial_price == 0:
        return ZERO if current_price == 0 else ONE

    value_if_held = initial_a * current_price / initial_price + initial_b
    value_in_pool = token_a * current_price + token_b

    if value_if_held == 0:
        return ZERO if value_in_pool == 0 else ONE

    impermanent_loss = (value_in_pool - value_if_held) / value_if_held
    return _clamp(impermanent_loss, -ONE, ONE)


@dataclass(frozen=True)
class SimulationAnalysis:
    """Headline scores derived from a SimulationResult."""
    price_stability: Decimal
    average_price_impact: Decimal
    liquidity_efficiency: Decimal


def analyze_simulation_results(results: "SimulationResult") -> SimulationAnalysis:
    return SimulationAnalysis(
        price_stability=calculate_price_stability(results.min_price, results.max_price),
        average_price_impact=results.average_price_change,
        liquidity_efficiency=calculate_liquidity_efficiency(
            results.average_liquidity_change
        ),
    )


def calculate_price_stability(min_price: Decimal, max_price: Decimal) -> Decimal:
    """1 - (max - min) / mid, clamped to [0, 1].

    No price movement at all (both zero) counts as perfectly stable; an
    inverted or negative range counts as fully unstable.
    """
    if min_price == 0 and max_price == 0:
        return ONE
    if min_price < 0 or max_price < 0 or min_price > max_price:
        return ZERO

    avg_price = (max_price + min_price) / 2
    if avg_price == 0:
        return ZERO

    stability = ONE - (max_price - min_price) / avg_price
    return _clamp(stability, ZERO, ONE)


def calculate_liquidity_efficiency(average_liquidity_change: Decimal) -> Decimal:
    """1 / (1 + change), clamped to [0, 1]; 0 at the -1 pole."""
    if average_liquidity_change == -ONE:
        return ZERO
    efficiency = ONE / (ONE + average_liquidity_change)
    return _clamp(efficiency, ZERO, ONE)
