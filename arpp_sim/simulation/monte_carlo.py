"""Monte Carlo driver for an ARPP liquidity pool under a trading strategy."""

import logging
from concurrent.futures import ProcessPoolExecutor, as_completed
from decimal import Decimal
from enum import Enum
from typing import Optional

import numpy as np

from arpp_sim.analysis.metrics import PoolMetrics, PoolMetricsStep, accumulate_pool_metrics
from arpp_sim.core.errors import InsufficientLiquidity, PoolError
from arpp_sim.core.pool import LiquidityPool
from arpp_sim.market.strategies import TradingStrategy
from arpp_sim.simulation.result import IterationResult, SimulationResult

logger = logging.getLogger(__name__)


class SimulationState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    AGGREGATING = "aggregating"
    DONE = "done"


def add_liquidity_if_needed(pool: LiquidityPool) -> None:
    """Top up whichever side has fallen below half of the other.

    This is a safety valve independent of the strategy: it keeps long runs
    from draining one side to zero.
    """
    token_a, token_b = pool.get_balances()

    if token_a < token_b / 2:
        amount_a = token_b / 2 - token_a
        pool.top_up(amount_a=amount_a)
        logger.debug("Adding liquidity to token A: %s", amount_a)
    if token_b < token_a / 2:
        amount_b = token_a / 2 - token_b
        pool.top_up(amount_b=amount_b)
        logger.debug("Adding liquidity to token B: %s", amount_b)


def observe_price(pool: LiquidityPool) -> Optional[Decimal]:
    """Read the pool price, refilling an emptied A side first.

    Returns None when the price stays undefined after rebalancing.
    """
    try:
        return pool.get_price()
    except InsufficientLiquidity as exc:
        logger.debug("Rebalancing before price read: %s", exc)

    add_liquidity_if_needed(pool)
    try:
        return pool.get_price()
    except InsufficientLiquidity as exc:
        logger.debug("Price still undefined after rebalancing: %s", exc)
        return None


def run_iteration(
    index: int,
    template: LiquidityPool,
    steps: int,
    strategy: TradingStrategy,
    alpha: Decimal,
    beta: Decimal,
    initial_step: PoolMetricsStep,
    seed_seq: np.random.SeedSequence,
) -> IterationResult:
    """Run one iteration on its own copy of the pool template.

    Module-level so it can be shipped to worker processes. The iteration
    owns its pool and its generator; nothing is shared with other
    iterations.
    """
    pool = template.clone()
    rng = np.random.default_rng(seed_seq)
    metrics = PoolMetrics()
    price_history: list[Decimal] = []
    strategy_errors = 0

    initial_price = pool.get_price()
    initial_liquidity = pool.token_a + pool.token_b

    last_price = initial_price
    for _ in range(steps):
        current_price = observe_price(pool)
        if current_price is None:
            strategy_errors += 1
            continue
        last_price = current_price
        price_history.append(current_price)
        pool.set_reference_price(alpha, beta, rng)

        accumulate_pool_metrics(pool, metrics, initial_step)

        add_liquidity_if_needed(pool)

        try:
            strategy.execute(pool, current_price, rng)
        except PoolError as exc:
            strategy_errors += 1
            logger.debug("Strategy execution error: %s", exc)

    final_price = observe_price(pool)
    return IterationResult(
        index=index,
        initial_price=initial_price,
        final_price=last_price if final_price is None else final_price,
        initial_liquidity=initial_liquidity,
        final_liquidity=pool.token_a + pool.token_b,
        metrics=metrics,
        price_history=price_history,
        final_pool=pool,
        strategy_errors=strategy_errors,
    )


class MonteCarloSimulation:
    """Runs `iterations` independent trials of `steps_per_iteration` steps.

    Every iteration starts from a clone of the pool template. Within an
    iteration steps are strictly sequential; across iterations the work
    can be spread over worker processes and folded back with sums, max and
    min, which do not depend on completion order.

    The metrics accumulators are summed over the whole run against the
    template's initial snapshot; they are not reset per iteration.

    Args:
        pool: Pool template, never mutated by the run
        iterations: Number of independent trials
        steps_per_iteration: Steps per trial
        strategy: Strategy invoked once per step
        alpha: Mean standard deviation of the reference-price walk
        beta: Standard deviation of the walk's standard deviation
        seed: Root seed; each iteration gets its own spawned generator
        n_workers: Worker processes (1 runs everything in-process)
    """

    def __init__(
        self,
        pool: LiquidityPool,
        iterations: int,
        steps_per_iteration: int,
        strategy: TradingStrategy,
        alpha: Decimal,
        beta: Decimal,
        seed: Optional[int] = None,
        n_workers: int = 1,
    ):
        if iterations < 0:
            raise ValueError(f"iterations must be >= 0, got {iterations}")
        if steps_per_iteration < 0:
            raise ValueError(
                f"steps_per_iteration must be >= 0, got {steps_per_iteration}"
            )
        self.pool = pool
        self.iterations = iterations
        self.steps_per_iteration = steps_per_iteration
        self.strategy = strategy
        self.alpha = alpha
        self.beta = beta
        self.seed = seed
        self.n_workers = max(1, n_workers)
        self.state = SimulationState.IDLE
        self._price_history: list[Decimal] = []
        self._metrics_history: list[PoolMetrics] = []
        self._final_pool: LiquidityPool = pool.clone()

    def run(self) -> SimulationResult:
        """Run all iterations and fold them into a SimulationResult."""
        self._price_history = []
        self._metrics_history = []
        self._final_pool = self.pool.clone()

        if self.iterations == 0:
            self.state = SimulationState.DONE
            return SimulationResult.empty()

        self.state = SimulationState.RUNNING
        logger.info(
            "Running %d iterations x %d steps with %s (%d worker(s))",
            self.iterations,
            self.steps_per_iteration,
            self.strategy.get_name(),
            self.n_workers,
        )

        initial_step = self.pool.snapshot()
        children = np.random.SeedSequence(self.seed).spawn(self.iterations)

        if self.n_workers == 1 or self.iterations == 1:
            results = [
                run_iteration(
                    i,
                    self.pool,
                    self.steps_per_iteration,
                    self.strategy,
                    self.alpha,
                    self.beta,
                    initial_step,
                    child,
                )
                for i, child in enumerate(children)
            ]
        else:
            results = self._run_parallel(initial_step, children)

        self.state = SimulationState.AGGREGATING
        result = self._aggregate(results)
        self.state = SimulationState.DONE
        logger.info("Simulation finished: %s", "; ".join(result.summary_lines()[:4]))
        return result

    def _run_parallel(
        self,
        initial_step: PoolMetricsStep,
        children: list[np.random.SeedSequence],
    ) -> list[IterationResult]:
        results = []
        workers = min(self.n_workers, self.iterations)
        with ProcessPoolExecutor(max_workers=workers) as executor:
            futures = [
                executor.submit(
                    run_iteration,
                    i,
                    self.pool,
                    self.steps_per_iteration,
                    self.strategy,
                    self.alpha,
                    self.beta,
                    initial_step,
                    child,
                )
                for i, child in enumerate(children)
            ]
            for future in as_completed(futures):
                results.append(future.result())
        return results

    def _aggregate(self, results: list[IterationResult]) -> SimulationResult:
        """Fold iteration results; the outcome does not depend on their order."""
        results = sorted(results, key=lambda r: r.index)

        total_price_change = sum((r.price_change for r in results), Decimal("0"))
        total_liquidity_change = sum((r.liquidity_change for r in results), Decimal("0"))
        max_price = max(r.final_price for r in results)
        min_price = min(r.final_price for r in results)

        metrics = PoolMetrics()
        for r in results:
            metrics.merge(r.metrics)
            self._price_history.extend(r.price_history)
            self._metrics_history.append(r.metrics)

        self._final_pool = results[-1].final_pool

        errors = sum(r.strategy_errors for r in results)
        if errors:
            logger.info("%d strategy step(s) failed and were skipped", errors)

        count = Decimal(len(results))
        return SimulationResult(
            average_price_change=total_price_change / count,
            average_liquidity_change=total_liquidity_change / count,
            max_price=max_price,
            min_price=min_price,
            metrics=metrics,
        )

    def get_price_history(self) -> list[Decimal]:
        """Prices observed at the start of every step, iteration by iteration."""
        return list(self._price_history)

    def get_metrics_history(self) -> list[PoolMetrics]:
        """Per-iteration metrics partials, in iteration order."""
        return list(self._metrics_history)

    def get_final_pool(self) -> LiquidityPool:
        """Pool state at the end of the last iteration."""
        return self._final_pool.clone()
