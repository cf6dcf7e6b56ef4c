"""Pytest configuration and shared fixtures.

This module provides:
- Pytest markers for test categorization
- Shared pool fixtures for common balance profiles
- Seed fixtures for reproducible random draws
"""

from decimal import Decimal

import numpy as np
import pytest

from arpp_sim.core.pool import LiquidityPool
from tests.fixtures.pool_fixtures import PoolBalanceProfile, create_pool


# ============================================================================
# Pytest Hooks
# ============================================================================


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "economic: Pricing and accounting property tests"
    )
    config.addinivalue_line(
        "markers", "edge_case: Edge case and stress tests with extreme inputs"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests spanning multiple components"
    )
    config.addinivalue_line(
        "markers", "slow: Tests taking more than 5 seconds to run"
    )


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on location and name."""
    for item in items:
        if "edge_case" in item.nodeid or "extreme" in item.name:
            item.add_marker(pytest.mark.edge_case)

        if any(keyword in item.nodeid for keyword in ["monte_carlo", "cli"]):
            item.add_marker(pytest.mark.integration)

        if any(keyword in item.nodeid for keyword in ["formula", "pool"]):
            item.add_marker(pytest.mark.economic)


# ============================================================================
# Standard Pool Fixtures
# ============================================================================


@pytest.fixture
def standard_pool() -> LiquidityPool:
    """Balanced pool (1000, 1000), p_ref 1, alpha 0.5, beta 1."""
    return create_pool()


@pytest.fixture
def skewed_a_pool() -> LiquidityPool:
    """Pool holding more A than B (2000, 500)."""
    return create_pool(PoolBalanceProfile.SKEWED_A)


@pytest.fixture
def skewed_b_pool() -> LiquidityPool:
    """Pool holding more B than A (500, 2000)."""
    return create_pool(PoolBalanceProfile.SKEWED_B)


@pytest.fixture
def extreme_pool() -> LiquidityPool:
    """Pool with extreme imbalance (1, 1000000)."""
    return create_pool(PoolBalanceProfile.EXTREME)


# ============================================================================
# Price and Seed Fixtures
# ============================================================================


@pytest.fixture
def reference_price() -> Decimal:
    """Standard reference price (1.0 B per A)."""
    return Decimal("1.0")


@pytest.fixture
def fixed_seed() -> int:
    """Fixed random seed for deterministic tests."""
    return 42


@pytest.fixture
def rng(fixed_seed) -> np.random.Generator:
    """Generator seeded with the fixed seed."""
    return np.random.default_rng(fixed_seed)
