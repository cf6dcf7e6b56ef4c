"""Tests for metric calculators, accumulation and run analysis."""

from decimal import Decimal

import pytest

from arpp_sim.analysis.metrics import (
    PoolMetrics,
    PoolMetricsStep,
    accumulate_pool_metrics,
    analyze_simulation_results,
    calculate_impermanent_loss,
    calculate_liquidity_depth,
    calculate_liquidity_efficiency,
    calculate_price_stability,
    calculate_price_volatility,
    calculate_trading_volume,
)
from arpp_sim.simulation.result import SimulationResult


def _step(price="1", a="1000", b="1000", p_ref="1"):
    a, b = Decimal(a), Decimal(b)
    return PoolMetricsStep(
        price=Decimal(price),
        p_ref=Decimal(p_ref),
        balances_a=a,
        balances_b=b,
        ratio=b / a,
    )


class TestCalculators:

    @pytest.mark.parametrize(
        "current,initial,expected",
        [
            ("1.1", "1", "0.1"),
            ("0.9", "1", "0.1"),
            ("100", "100", "0"),
            ("5", "1", "1"),       # clamped
            ("100", "0", "1"),
            ("0", "0", "0"),
            ("-1", "1", "1"),
        ],
    )
    def test_price_volatility(self, current, initial, expected):
        assert calculate_price_volatility(Decimal(current), Decimal(initial)) == Decimal(expected)

    def test_liquidity_depth(self):
        assert calculate_liquidity_depth(Decimal("4"), Decimal("9")) == Decimal("6")
        assert calculate_liquidity_depth(Decimal("0"), Decimal("9")) == Decimal("0")
        assert calculate_liquidity_depth(Decimal("-4"), Decimal("9")) == Decimal("0")

    def test_trading_volume(self):
        volume = calculate_trading_volume(
            Decimal("1100"), Decimal("900"), Decimal("1000"), Decimal("1000")
        )
        assert volume == Decimal("200")

    def test_impermanent_loss_unchanged_value(self):
        il = calculate_impermanent_loss(
            Decimal("1100"), Decimal("900"), Decimal("1000"), Decimal("1000"),
            Decimal("1"), Decimal("1"),
        )
        assert il == Decimal("0")

    def test_impermanent_loss_gain(self):
        # held: 1000 * 2 / 1 + 1000 = 3000; pool: 2000 * 2 + 0 = 4000
        il = calculate_impermanent_loss(
            Decimal("2000"), Decimal("0"), Decimal("1000"), Decimal("1000"),
            Decimal("2"), Decimal("1"),
        )
        assert abs(il - Decimal(1) / Decimal(3)) < Decimal("1e-20")

    def test_impermanent_loss_clamped(self):
        il = calculate_impermanent_loss(
            Decimal("100000"), Decimal("0"), Decimal("1"), Decimal("1"),
            Decimal("1"), Decimal("1"),
        )
        assert il == Decimal("1")

    def test_impermanent_loss_sentinels(self):
        zero, one = Decimal("0"), Decimal("1")
        assert calculate_impermanent_loss(-one, one, one, one, one, one) == zero
        assert calculate_impermanent_loss(one, one, one, one, zero, zero) == zero
        assert calculate_impermanent_loss(one, one, one, one, one, zero) == one
        assert calculate_impermanent_loss(one, one, zero, zero, one, one) == one
        assert calculate_impermanent_loss(zero, zero, zero, zero, one, one) == zero

    @pytest.mark.parametrize(
        "low,high,expected",
        [
            ("1", "1", "1"),
            ("0", "0", "1"),
            ("1", "3", "0"),
            ("2", "1", "0"),
            ("-1", "1", "0"),
        ],
    )
    def test_price_stability(self, low, high, expected):
        assert calculate_price_stability(Decimal(low), Decimal(high)) == Decimal(expected)

    def test_price_stability_partial(self):
        stability = calculate_price_stability(Decimal("0.8"), Decimal("1.2"))
        assert stability == Decimal("0.6")

    @pytest.mark.parametrize(
        "change,expected",
        [("0", "1"), ("1", "0.5"), ("-1", "0"), ("-0.5", "1"), ("-2", "0")],
    )
    def test_liquidity_efficiency(self, change, expected):
        assert calculate_liquidity_efficiency(Decimal(change)) == Decimal(expected)


class TestPoolMetrics:

    def test_accumulate_records_step(self, standard_pool):
        metrics = PoolMetrics()
        initial = standard_pool.snapshot()

        step = accumulate_pool_metrics(standard_pool, metrics, initial)

        assert metrics.steps == [step]
        assert metrics.price_volatility == Decimal("0")
        assert metrics.liquidity_depth == Decimal("1000")
        assert metrics.trading_volume == Decimal("0")
        assert metrics.impermanent_loss == Decimal("0")

    def test_accumulators_sum_over_steps(self, standard_pool):
        metrics = PoolMetrics()
        initial = standard_pool.snapshot()

        accumulate_pool_metrics(standard_pool, metrics, initial)
        standard_pool.swap_a_to_b(Decimal("100"))
        accumulate_pool_metrics(standard_pool, metrics, initial)

        assert len(metrics.steps) == 2
        assert metrics.trading_volume == Decimal("200")
        assert metrics.price_volatility > 0

    def test_accessors(self):
        metrics = PoolMetrics(steps=[_step(), _step(price="2", a="500", b="2000", p_ref="1.5")])
        assert metrics.get_prices() == [Decimal("1"), Decimal("2")]
        assert metrics.get_p_ref() == [Decimal("1"), Decimal("1.5")]
        assert metrics.get_balances_a() == [Decimal("1000"), Decimal("500")]
        assert metrics.get_balances_b() == [Decimal("1000"), Decimal("2000")]
        assert metrics.get_ratios() == [Decimal("1"), Decimal("4")]

    def test_merge_is_order_independent(self):
        def partial(value):
            return PoolMetrics(
                steps=[_step(price=value)],
                price_volatility=Decimal(value),
                liquidity_depth=Decimal(value) * 10,
                trading_volume=Decimal(value) * 2,
                impermanent_loss=-Decimal(value),
            )

        forward = PoolMetrics()
        for value in ("0.1", "0.2", "0.3"):
            forward.merge(partial(value))
        backward = PoolMetrics()
        for value in ("0.3", "0.2", "0.1"):
            backward.merge(partial(value))

        assert forward.price_volatility == backward.price_volatility == Decimal("0.6")
        assert forward.liquidity_depth == backward.liquidity_depth
        assert forward.trading_volume == backward.trading_volume
        assert forward.impermanent_loss == backward.impermanent_loss

    def test_to_dict(self):
        metrics = PoolMetrics(steps=[_step()], trading_volume=Decimal("3"))
        data = metrics.to_dict()
        assert data["trading_volume"] == Decimal("3")
        assert data["steps"][0]["balances_a"] == Decimal("1000")


class TestAnalysis:

    def test_analyze_simulation_results(self):
        result = SimulationResult(
            average_price_change=Decimal("0.1"),
            average_liquidity_change=Decimal("1"),
            max_price=Decimal("1.2"),
            min_price=Decimal("0.8"),
        )
        analysis = analyze_simulation_results(result)
        assert analysis.price_stability == Decimal("0.6")
        assert analysis.average_price_impact == Decimal("0.1")
        assert analysis.liquidity_efficiency == Decimal("0.5")

    def test_analyze_empty_result(self):
        analysis = analyze_simulation_results(SimulationResult.empty())
        assert analysis.price_stability == Decimal("1")
        assert analysis.average_price_impact == Decimal("0")
        assert analysis.liquidity_efficiency == Decimal("1")
