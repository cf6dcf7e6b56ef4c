"""Test fixtures for ARPP pool and simulation tests."""

from tests.fixtures.pool_fixtures import (
    EmptyingStrategy,
    FailingStrategy,
    NoOpStrategy,
    PoolBalanceProfile,
    PoolStateSnapshot,
    RoundTripStrategy,
    create_pool,
    get_pool_balance,
    snapshot_pool_state,
)

__all__ = [
    "EmptyingStrategy",
    "FailingStrategy",
    "NoOpStrategy",
    "PoolBalanceProfile",
    "PoolStateSnapshot",
    "RoundTripStrategy",
    "create_pool",
    "get_pool_balance",
    "snapshot_pool_state",
]
