"""Command-line interface for running ARPP pool simulations."""

import argparse
import logging
import sys
from decimal import Decimal
from pathlib import Path
from typing import Optional, Sequence

from arpp_sim.analysis.metrics import analyze_simulation_results
from arpp_sim.analysis.visualization import (
    create_metrics_chart,
    create_price_chart,
    create_simulation_analysis_chart,
    visualize_random_walk,
    visualize_random_walks,
)
from arpp_sim.core.errors import PoolError
from arpp_sim.market.price_process import generate_multiple_random_walks
from arpp_sim.market.strategies import StrategyKind, build_strategy
from arpp_sim.simulation.config import (
    DEFAULT_POOL,
    DEFAULT_SIMULATION,
    DEFAULT_WALK_INITIAL_PRICE,
    DEFAULT_WALK_STD_DEV,
    DEFAULT_WALK_STD_DEV_OF_STD_DEV,
    build_pool,
    resolve_n_workers,
)
from arpp_sim.simulation.monte_carlo import MonteCarloSimulation
from arpp_sim.simulation.result import run_timed_simulation

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging once for command-line runs."""
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)


def simulate_command(args: argparse.Namespace) -> int:
    """Run a Monte Carlo simulation and print its summary."""
    kind = StrategyKind(args.strategy)
    try:
        if kind is StrategyKind.RANDOM:
            strategy = build_strategy(
                kind,
                swap_probability=args.swap_probability,
                max_swap_amount=args.max_swap_amount,
                seed=args.seed,
            )
        else:
            strategy = build_strategy(
                kind,
                swap_threshold=args.swap_threshold,
                swap_amount=args.swap_amount,
                seed=args.seed,
            )
        pool = build_pool(
            DEFAULT_POOL,
            token_a=args.initial_token_a,
            token_b=args.initial_token_b,
        )
    except ValueError as e:
        print(f"Error: {e}")
        return 1

    n_workers = args.workers if args.workers is not None else resolve_n_workers()
    simulation = MonteCarloSimulation(
        pool,
        iterations=args.iterations,
        steps_per_iteration=args.steps,
        strategy=strategy,
        alpha=args.walk_alpha,
        beta=args.walk_beta,
        seed=args.seed,
        n_workers=n_workers,
    )

    print(f"Running {args.iterations} iterations x {args.steps} steps "
          f"with {strategy.get_name()}...")
    try:
        result, duration = run_timed_simulation(simulation)
    except PoolError as e:
        print(f"Simulation failed: {e}")
        return 1

    print(f"\nSimulation completed in {duration:.3f}s")
    for line in result.summary_lines():
        print(f"  {line}")

    analysis = analyze_simulation_results(result)
    print("\nSimulation Analysis:")
    print(f"  Price stability: {analysis.price_stability}")
    print(f"  Average price impact: {analysis.average_price_impact}")
    print(f"  Liquidity efficiency: {analysis.liquidity_efficiency}")

    if args.charts is not None:
        chart_dir = Path(args.charts)
        create_price_chart(
            simulation.get_price_history(),
            result.metrics.get_p_ref(),
            pool.alpha,
            pool.beta,
            output=chart_dir / "price_chart.html",
        )
        create_metrics_chart(
            simulation.get_metrics_history(),
            output=chart_dir / "metrics_chart.html",
        )
        create_simulation_analysis_chart(
            analysis,
            pool.alpha,
            pool.beta,
            output=chart_dir / "analysis_chart.html",
        )
        print(f"\nCharts written to {chart_dir}")

    return 0


def random_walk_command(args: argparse.Namespace) -> int:
    """Generate reference-price walks and chart them."""
    if args.sequences < 1:
        print("Error: --sequences must be at least 1")
        return 1

    sequences = generate_multiple_random_walks(
        args.sequences,
        args.initial_price,
        args.length,
        args.std_dev,
        args.std_dev_of_std_dev,
        seed=args.seed,
    )
    first = sequences[0]
    if first:
        print(f"Generated {len(sequences)} walk(s) of {len(first)} prices; "
              f"first walk ends at {first[-1]}")

    if args.output is not None:
        output = Path(args.output)
        visualize_random_walks(sequences, output=output)
        visualize_random_walk(first, output=output.with_name(f"{output.stem}_first{output.suffix}"))
        print(f"Charts written next to {output}")
    return 0


def _add_common_simulation_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--iterations",
        type=int,
        default=DEFAULT_SIMULATION.iterations,
        help="Number of Monte Carlo iterations",
    )
    parser.add_argument(
        "--steps",
        type=int,
        default=DEFAULT_SIMULATION.steps_per_iteration,
        help="Steps per iteration",
    )
    parser.add_argument(
        "--initial-token-a",
        type=Decimal,
        default=DEFAULT_POOL.token_a,
        help="Initial token A balance",
    )
    parser.add_argument(
        "--initial-token-b",
        type=Decimal,
        default=DEFAULT_POOL.token_b,
        help="Initial token B balance",
    )
    parser.add_argument(
        "--walk-alpha",
        type=Decimal,
        default=DEFAULT_SIMULATION.walk_alpha,
        help="Mean standard deviation of the reference-price walk",
    )
    parser.add_argument(
        "--walk-beta",
        type=Decimal,
        default=DEFAULT_SIMULATION.walk_beta,
        help="Standard deviation of the walk's standard deviation",
    )
    parser.add_argument("--seed", type=int, default=None, help="Root random seed")
    parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Worker processes (defaults to N_WORKERS or CPU count)",
    )
    parser.add_argument(
        "--charts",
        default=None,
        help="Directory to write HTML charts into",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="ARPP liquidity pool - Monte Carlo simulation of the adjusted reference price curve",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  arpp-sim simulate random --iterations 1000 --steps 100 --swap-probability 0.6
  arpp-sim simulate mean-reversion --iterations 1000 --steps 100 --swap-threshold 0.05
  arpp-sim random-walk --length 30000 --sequences 20 --output draws/random_walks.html
        """,
    )
    parser.add_argument("--log-level", default="INFO", help="Logging level")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Simulate command
    simulate_parser = subparsers.add_parser("simulate", help="Run a Monte Carlo simulation")
    strategies = simulate_parser.add_subparsers(dest="strategy", help="Trading strategy")

    random_parser = strategies.add_parser(
        StrategyKind.RANDOM.value, help="Random swaps in random directions"
    )
    _add_common_simulation_args(random_parser)
    random_parser.add_argument(
        "--swap-probability",
        type=float,
        default=0.5,
        help="Probability of swapping on each step",
    )
    random_parser.add_argument(
        "--max-swap-amount",
        type=Decimal,
        default=Decimal("10"),
        help="Maximum size of a single swap",
    )
    random_parser.set_defaults(func=simulate_command)

    mean_parser = strategies.add_parser(
        StrategyKind.MEAN_REVERSION.value, help="Fixed swaps back towards the reference price"
    )
    _add_common_simulation_args(mean_parser)
    mean_parser.add_argument(
        "--swap-threshold",
        type=Decimal,
        default=Decimal("0.1"),
        help="Deviation from p_ref that triggers a swap",
    )
    mean_parser.add_argument(
        "--swap-amount",
        type=Decimal,
        default=Decimal("10"),
        help="Fixed size of each swap",
    )
    mean_parser.set_defaults(func=simulate_command)

    # Random walk command
    walk_parser = subparsers.add_parser("random-walk", help="Generate reference-price walks")
    walk_parser.add_argument("--initial-price", type=Decimal, default=DEFAULT_WALK_INITIAL_PRICE)
    walk_parser.add_argument("--length", type=int, default=1000, help="Prices per walk")
    walk_parser.add_argument("--sequences", type=int, default=20, help="Number of walks")
    walk_parser.add_argument("--std-dev", type=Decimal, default=DEFAULT_WALK_STD_DEV)
    walk_parser.add_argument(
        "--std-dev-of-std-dev", type=Decimal, default=DEFAULT_WALK_STD_DEV_OF_STD_DEV
    )
    walk_parser.add_argument("--seed", type=int, default=None, help="Root random seed")
    walk_parser.add_argument("--output", default=None, help="HTML file for the chart")
    walk_parser.set_defaults(func=random_walk_command)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None or not hasattr(args, "func"):
        parser.print_help()
        return 1

    configure_logging(args.log_level)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
