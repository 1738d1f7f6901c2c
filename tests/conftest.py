"""Pytest configuration and shared fixtures for pool tests.

This module provides:
- Pytest markers for test categorization
- Standard pool fixtures (empty, balanced, fixed-fee)
- A manually advanced clock
"""

import pytest

from dynamic_fee_amm.core.config import BASE_FEE, PRECISION
from dynamic_fee_amm.core.pool import DynamicFeePool
from tests.fixtures.pool_fixtures import FakeClock, create_pool


# ============================================================================
# Pytest Hooks
# ============================================================================


def pytest_configure(config):
    """Register custom markers."""
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
        if "edge_case" in item.nodeid or "edge_case" in item.name:
            item.add_marker(pytest.mark.edge_case)

        if any(keyword in item.nodeid for keyword in ["simulation", "concurrency"]):
            item.add_marker(pytest.mark.integration)


# ============================================================================
# Pool Fixtures
# ============================================================================


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(now=1_000)


@pytest.fixture
def empty_pool(clock) -> DynamicFeePool:
    """Freshly deployed pool with no liquidity."""
    return create_pool(0, 0, clock=clock)


@pytest.fixture
def balanced_pool(clock) -> DynamicFeePool:
    """Pool holding 1000 A / 1000 B after its first deposit."""
    return create_pool(clock=clock)


@pytest.fixture
def base_fee_pool(clock) -> DynamicFeePool:
    """Balanced 1000 / 1000 pool whose next swap pays the 0.5% base fee."""
    return create_pool(1000 * PRECISION, 1000 * PRECISION, fee=BASE_FEE, clock=clock)
