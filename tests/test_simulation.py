"""Simulation runs: determinism, bounds and fee response to volatility.

Simulations are reproducible for a fixed seed: the same seed must produce
identical step frames, and different seeds must diverge.
"""

import pandas as pd
import pytest

from dynamic_fee_amm.core.config import MAX_FEE, MIN_FEE, PRECISION
from dynamic_fee_amm.market.arbitrageur import Arbitrageur
from dynamic_fee_amm.market.price_process import GBMPriceProcess
from dynamic_fee_amm.market.retail import RetailTrader
from dynamic_fee_amm.simulation.charts import (
    create_fee_chart,
    create_fee_distribution_chart,
    create_price_chart,
    write_report,
)
from dynamic_fee_amm.simulation.config import (
    BASELINE_SETTINGS,
    BASELINE_VARIANCE,
    NO_VARIANCE,
    SimulationSettings,
)
from dynamic_fee_amm.simulation.runner import (
    LIQUIDITY_PROVIDER,
    SimulationRunner,
    build_pool,
    run_simulation,
)
from tests.fixtures.pool_fixtures import TRADER, create_pool

SHORT = BASELINE_SETTINGS.with_overrides(n_simulations=2, n_steps=150)


class TestMarketAgents:

    def test_gbm_is_seeded(self):
        first = GBMPriceProcess(100.0, sigma=0.01, seed=3)
        second = GBMPriceProcess(100.0, sigma=0.01, seed=3)
        assert first.price == 100.0

        a = [first.step() for _ in range(50)]
        b = [second.step() for _ in range(50)]
        assert a == b
        assert all(p > 0 for p in a)
        assert first.price == a[-1]

    def test_gbm_rejects_bad_price(self):
        with pytest.raises(ValueError):
            GBMPriceProcess(0.0)

    def test_retail_orders_positive(self):
        trader = RetailTrader(arrival_rate=3.0, mean_size=10.0, seed=1)
        orders = [o for _ in range(100) for o in trader.generate_orders()]
        assert orders
        assert all(o.size > 0 for o in orders)
        assert {o.side for o in orders} == {"buy", "sell"}

    def test_arbitrage_moves_price_toward_fair(self):
        pool = create_pool(1000 * PRECISION, 1000 * PRECISION)
        arb = Arbitrageur(TRADER)

        result = arb.execute_arb(pool, fair_price=1.2, timestamp=1)

        assert result is not None
        assert result.side == "buy"
        assert result.profit > 0
        spot = pool.get_current_price() / PRECISION
        assert 1.0 < spot <= 1.2

    def test_arbitrage_sells_when_pool_overprices(self):
        pool = create_pool(1000 * PRECISION, 1000 * PRECISION)

        result = Arbitrageur(TRADER).execute_arb(pool, fair_price=0.8, timestamp=1)

        assert result.side == "sell"
        assert 0.8 <= pool.get_current_price() / PRECISION < 1.0

    def test_no_arbitrage_inside_fee_band(self):
        pool = create_pool(1000 * PRECISION, 1000 * PRECISION)
        assert Arbitrageur(TRADER).find_arb_opportunity(pool, 1.0005) is None
        assert Arbitrageur(TRADER).find_arb_opportunity(pool, 1.0) is None


class TestSingleRun:

    def test_build_pool_seeds_reserves(self):
        pool = build_pool(SHORT)
        assert pool.get_reserves() == (100 * PRECISION, 10_000 * PRECISION)
        assert pool.token_a.balance_of(LIQUIDITY_PROVIDER) == 0

    def test_same_seed_is_reproducible(self):
        first = run_simulation(SHORT, seed=11)
        second = run_simulation(SHORT, seed=11)

        pd.testing.assert_frame_equal(first.to_frame(), second.to_frame())
        assert first.summary() == second.summary()

    def test_different_seeds_diverge(self):
        first = run_simulation(SHORT, seed=1)
        second = run_simulation(SHORT, seed=2)
        assert not first.to_frame().equals(second.to_frame())

    def test_fee_and_price_bounds(self):
        result = run_simulation(SHORT, seed=5)
        frame = result.to_frame()

        assert len(frame) == SHORT.n_steps
        assert frame["fee"].between(MIN_FEE / PRECISION, MAX_FEE / PRECISION).all()
        assert result.arb_trades + result.retail_trades > 0
        assert result.failed_trades == 0
        final = frame.iloc[-1]
        assert abs(final["spot_price"] / final["fair_price"] - 1) < 0.1

    def test_fee_rises_with_volatility(self):
        calm = run_simulation(SHORT.with_overrides(gbm_sigma=0.0001), seed=9)
        wild = run_simulation(SHORT.with_overrides(gbm_sigma=0.01), seed=9)
        assert wild.average_fee > calm.average_fee


class TestBatch:

    def test_runner_sequential(self):
        runner = SimulationRunner(n_simulations=2, settings=SHORT, n_workers=1)
        batch = runner.run_batch()

        frame = batch.summary_frame()
        assert list(frame.index) == [0, 1]
        assert MIN_FEE / PRECISION <= batch.average_fee <= MAX_FEE / PRECISION

    def test_variance_changes_sigma_per_seed(self):
        runner = SimulationRunner(
            n_simulations=2, settings=SHORT, n_workers=1, variance=BASELINE_VARIANCE
        )
        sigmas = runner.run_batch().summary_frame()["gbm_sigma"]
        assert sigmas.iloc[0] != sigmas.iloc[1]
        assert sigmas.between(BASELINE_VARIANCE.gbm_sigma_min, BASELINE_VARIANCE.gbm_sigma_max).all()

    def test_runner_rejects_worker_count(self):
        with pytest.raises(ValueError):
            SimulationRunner(n_simulations=1, settings=SHORT, n_workers=0)

    def test_no_variance_keeps_settings(self):
        assert NO_VARIANCE.sample(SHORT, seed=4) == SHORT

    def test_invalid_settings(self):
        with pytest.raises(ValueError):
            SHORT.with_overrides(n_steps=0)
        with pytest.raises(ValueError):
            SimulationSettings(**{**SHORT.__dict__, "retail_buy_prob": 1.5})


class TestCharts:

    def test_figures(self, tmp_path):
        batch = SimulationRunner(n_simulations=1, settings=SHORT, n_workers=1).run_batch()
        result = batch.results[0]

        assert len(create_price_chart(result).data) == 2
        assert len(create_fee_chart(result).data) == 2
        assert len(create_fee_distribution_chart(batch).data) == 1

        path = tmp_path / "report.html"
        write_report(batch, str(path))
        assert "plotly" in path.read_text(encoding="utf-8")
