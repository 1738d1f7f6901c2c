"""Edge case and stress testing for the dynamic-fee pool.

Tests extreme scenarios including:
- Numerical extremes (single-unit and very large amounts)
- Pool states (heavily imbalanced reserves)
- Trade patterns (many small trades, alternating direction, long idle gaps)

All arithmetic is exact integer math, so expectations are exact.
"""

from dynamic_fee_amm.core.config import MAX_FEE, MIN_FEE, PRECISION, VOLATILITY_PERIOD
from dynamic_fee_amm.core.pool import get_amount_out
from tests.fixtures.pool_fixtures import TRADER, create_pool, fund, snapshot_pool_state


class TestNumericalExtremes:

    def test_single_unit_reserves(self):
        pool = create_pool(1, 1)
        assert pool.get_current_price() == PRECISION

        a_out, b_out = pool.swap(10**6, 0, sender=TRADER)

        assert a_out == 0
        assert b_out == 0  # 1 * eff // (1 + eff) truncates to zero
        assert pool.get_reserves() == (1 + 10**6, 1)

    def test_output_never_drains_reserve(self):
        pool = create_pool(1000 * PRECISION, 1000 * PRECISION)
        fund(pool.token_a, TRADER, 10**30 * PRECISION)

        _, b_out = pool.swap(10**30 * PRECISION, 0, sender=TRADER)

        assert b_out < 1000 * PRECISION
        assert pool.reserve_b > 0

    def test_get_amount_out_zero_fee(self):
        assert get_amount_out(100, 1000, 1000, 0) == 1000 * 100 // 1100


class TestImbalancedPools:

    def test_extreme_ratio_swaps(self):
        pool = create_pool(1 * PRECISION, 1_000_000 * PRECISION)

        a_out, _ = pool.swap(0, 1000 * PRECISION, sender=TRADER)
        _, b_out = pool.swap(PRECISION // 1000, 0, sender=TRADER)

        assert 0 < a_out < PRECISION
        assert b_out > 0
        assert MIN_FEE <= pool.current_fee <= MAX_FEE

    def test_liquidity_on_imbalanced_pool(self):
        pool = create_pool(3, 10**30)
        fund(pool.token_b, TRADER, 10**30)
        before = snapshot_pool_state(pool)

        amount_a, amount_b = pool.add_liquidity(1, 10**40, provider=TRADER)

        assert (amount_a, amount_b) == (1, 10**30 // 3)
        assert pool.reserve_a == before.reserve_a + 1


class TestTradePatterns:

    def test_many_small_trades(self, clock):
        pool = create_pool(clock=clock)
        for _ in range(500):
            clock.advance(1)
            pool.swap(10**15, 0, sender=TRADER)

        assert len(pool.price_history) == 24
        assert pool.reserve_a == 1000 * PRECISION + 500 * 10**15
        assert MIN_FEE <= pool.current_fee <= MAX_FEE

    def test_alternating_trades_raise_fee(self, clock):
        """Large back-and-forth swaps register as volatility."""
        pool = create_pool(clock=clock)
        for i in range(20):
            clock.advance(12)
            if i % 2:
                pool.swap(0, 300 * PRECISION, sender=TRADER)
            else:
                pool.swap(300 * PRECISION, 0, sender=TRADER)

        assert pool.current_fee > MIN_FEE
        assert pool.volatility_accumulator > 0

    def test_idle_deposit_decays_accumulator(self, clock):
        """Decay only happens when time has passed since the newest snapshot."""
        pool = create_pool(clock=clock)
        for i in range(10):
            clock.advance(12)
            if i % 2:
                pool.swap(0, 300 * PRECISION, sender=TRADER)
            else:
                pool.swap(300 * PRECISION, 0, sender=TRADER)
        hot_accumulator = pool.volatility_accumulator
        assert hot_accumulator > 0

        clock.advance(VOLATILITY_PERIOD)
        pool.add_liquidity(PRECISION, PRECISION, provider=TRADER)

        # fully decayed history contribution, only the fresh estimate remains
        assert pool.volatility_accumulator < hot_accumulator
        assert pool.volatility_accumulator <= PRECISION

    def test_long_gap_between_swaps_excludes_old_prices(self, clock):
        pool = create_pool(clock=clock)
        pool.swap(500 * PRECISION, 0, sender=TRADER)
        clock.advance(VOLATILITY_PERIOD + 1)
        accumulator = pool.volatility_accumulator

        pool.swap(1, 0, sender=TRADER)

        # the only older snapshot is stale, so nothing is added
        assert pool.volatility_accumulator == accumulator
