"""Test fixtures for dynamic-fee pool testing."""

from tests.fixtures.pool_fixtures import (
    LP,
    TRADER,
    FakeClock,
    PoolStateSnapshot,
    RejectingToken,
    create_pool,
    create_tokens,
    fund,
    history_from,
    snapshot_pool_state,
)

__all__ = [
    "LP",
    "TRADER",
    "FakeClock",
    "PoolStateSnapshot",
    "RejectingToken",
    "create_pool",
    "create_tokens",
    "fund",
    "history_from",
    "snapshot_pool_state",
]
