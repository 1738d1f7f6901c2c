"""Simulation runner driving a dynamic-fee pool with market agents."""

import logging
from concurrent.futures import ProcessPoolExecutor
from dataclasses import asdict, dataclass, field
from itertools import repeat

import pandas as pd

from dynamic_fee_amm.core.config import DEFAULT_POOL_CONFIG, PRECISION, PoolConfig, to_scale
from dynamic_fee_amm.core.custody import InMemoryToken
from dynamic_fee_amm.core.errors import SlippageExceeded, TransferFailed
from dynamic_fee_amm.core.events import FeeUpdatedEvent
from dynamic_fee_amm.core.pool import DynamicFeePool
from dynamic_fee_amm.market.arbitrageur import Arbitrageur
from dynamic_fee_amm.market.price_process import GBMPriceProcess
from dynamic_fee_amm.market.retail import RetailTrader
from dynamic_fee_amm.simulation.config import (
    NO_VARIANCE,
    HyperparameterVariance,
    SimulationSettings,
)

logger = logging.getLogger(__name__)

POOL_ACCOUNT = "pool"
LIQUIDITY_PROVIDER = "liquidity_provider"
ARBITRAGEUR = "arbitrageur"
RETAIL = "retail"

TOKEN_A_ADDRESS = "0x" + "a" * 40
TOKEN_B_ADDRESS = "0x" + "b" * 40

# Trading accounts are funded far beyond anything a run can spend
_AGENT_FUNDING = 10**15 * PRECISION


@dataclass
class StepResult:
    """Pool state at the end of one simulation step."""
    timestamp: int
    fair_price: float
    spot_price: float
    fee: float
    volatility_accumulator: float
    reserve_a: float
    reserve_b: float


@dataclass
class SimulationResult:
    """Outcome of one seeded simulation."""
    seed: int
    settings: SimulationSettings
    steps: list[StepResult] = field(default_factory=list)
    arb_trades: int = 0
    retail_trades: int = 0
    failed_trades: int = 0
    arb_volume_b: float = 0.0
    retail_volume_b: float = 0.0
    arb_profit_b: float = 0.0
    fees_collected_b: float = 0.0
    fee_updates: int = 0

    @property
    def average_fee(self) -> float:
        if not self.steps:
            return 0.0
        return sum(s.fee for s in self.steps) / len(self.steps)

    @property
    def max_fee(self) -> float:
        return max((s.fee for s in self.steps), default=0.0)

    @property
    def min_fee(self) -> float:
        return min((s.fee for s in self.steps), default=0.0)

    def to_frame(self) -> pd.DataFrame:
        """Step results as a DataFrame indexed by timestamp."""
        frame = pd.DataFrame([asdict(s) for s in self.steps])
        if frame.empty:
            return frame
        return frame.set_index("timestamp")

    def summary(self) -> dict:
        return {
            "seed": self.seed,
            "steps": len(self.steps),
            "arb_trades": self.arb_trades,
            "retail_trades": self.retail_trades,
            "failed_trades": self.failed_trades,
            "arb_volume_b": self.arb_volume_b,
            "retail_volume_b": self.retail_volume_b,
            "arb_profit_b": self.arb_profit_b,
            "fees_collected_b": self.fees_collected_b,
            "fee_updates": self.fee_updates,
            "average_fee": self.average_fee,
            "min_fee": self.min_fee,
            "max_fee": self.max_fee,
            "gbm_sigma": self.settings.gbm_sigma,
        }


@dataclass
class BatchResult:
    """Results of a batch of seeded simulations."""
    results: list[SimulationResult]

    def summary_frame(self) -> pd.DataFrame:
        return pd.DataFrame([r.summary() for r in self.results]).set_index("seed")

    @property
    def average_fee(self) -> float:
        if not self.results:
            return 0.0
        return sum(r.average_fee for r in self.results) / len(self.results)


def build_pool(
    settings: SimulationSettings,
    pool_config: PoolConfig = DEFAULT_POOL_CONFIG,
) -> DynamicFeePool:
    """Create funded tokens and a pool seeded with the initial reserves."""
    token_a = InMemoryToken(TOKEN_A_ADDRESS, custodian=POOL_ACCOUNT)
    token_b = InMemoryToken(TOKEN_B_ADDRESS, custodian=POOL_ACCOUNT)

    initial_a = to_scale(settings.initial_a)
    initial_b = to_scale(settings.initial_b)
    token_a.mint(LIQUIDITY_PROVIDER, initial_a)
    token_b.mint(LIQUIDITY_PROVIDER, initial_b)
    token_a.approve(LIQUIDITY_PROVIDER, initial_a)
    token_b.approve(LIQUIDITY_PROVIDER, initial_b)

    for account in (ARBITRAGEUR, RETAIL):
        for token in (token_a, token_b):
            token.mint(account, _AGENT_FUNDING)
            token.approve(account, _AGENT_FUNDING)

    pool = DynamicFeePool(token_a, token_b, config=pool_config, name="simulated")
    pool.add_liquidity(initial_a, initial_b, provider=LIQUIDITY_PROVIDER, timestamp=0)
    return pool


def run_simulation(
    settings: SimulationSettings,
    seed: int,
    pool_config: PoolConfig = DEFAULT_POOL_CONFIG,
) -> SimulationResult:
    """Run one simulation: each step moves the fair price, lets the
    arbitrageur realign the pool, then executes arriving retail orders.

    Agent trades rejected by the pool (slippage or custody) are counted in
    ``failed_trades`` and the run continues.
    """
    pool = build_pool(settings, pool_config)
    price_process = GBMPriceProcess(
        initial_price=settings.initial_price,
        mu=settings.gbm_mu,
        sigma=settings.gbm_sigma,
        dt=settings.gbm_dt,
        seed=seed,
    )
    retail = RetailTrader(
        arrival_rate=settings.retail_arrival_rate,
        mean_size=settings.retail_mean_size,
        size_sigma=settings.retail_size_sigma,
        buy_prob=settings.retail_buy_prob,
        # separate stream so retail flow does not shift with the price path
        seed=seed + 1_000_003,
    )
    arbitrageur = Arbitrageur(ARBITRAGEUR)
    result = SimulationResult(seed=seed, settings=settings)

    for step in range(1, settings.n_steps + 1):
        timestamp = step * settings.step_seconds
        fair_price = price_process.step()

        fee = pool.current_fee / PRECISION
        try:
            arb = arbitrageur.execute_arb(pool, fair_price, timestamp)
        except (SlippageExceeded, TransferFailed) as exc:
            logger.debug("Arbitrage rejected at t=%d: %s", timestamp, exc)
            result.failed_trades += 1
            arb = None
        if arb is not None:
            volume_b = arb.amount_b / PRECISION
            result.arb_trades += 1
            result.arb_volume_b += volume_b
            result.arb_profit_b += arb.profit
            if arb.side == "buy":
                result.fees_collected_b += volume_b * fee
            else:
                result.fees_collected_b += arb.amount_a / PRECISION * fee * fair_price

        for order in retail.generate_orders():
            fee = pool.current_fee / PRECISION
            if order.side == "buy":
                amount_a_in, amount_b_in = 0, to_scale(order.size)
            else:
                amount_a_in, amount_b_in = to_scale(order.size / fair_price), 0
            if amount_a_in == 0 and amount_b_in == 0:
                continue
            try:
                pool.swap(amount_a_in, amount_b_in, sender=RETAIL, timestamp=timestamp)
            except (SlippageExceeded, TransferFailed) as exc:
                logger.debug("Retail order rejected at t=%d: %s", timestamp, exc)
                result.failed_trades += 1
                continue
            result.retail_trades += 1
            result.retail_volume_b += order.size
            result.fees_collected_b += order.size * fee

        reserve_a, reserve_b = pool.get_reserves()
        result.steps.append(
            StepResult(
                timestamp=timestamp,
                fair_price=fair_price,
                spot_price=pool.get_current_price() / PRECISION,
                fee=pool.current_fee / PRECISION,
                volatility_accumulator=pool.volatility_accumulator / PRECISION,
                reserve_a=reserve_a / PRECISION,
                reserve_b=reserve_b / PRECISION,
            )
        )

    result.fee_updates = len(pool.events.of_type(FeeUpdatedEvent))
    logger.info(
        "Simulation seed=%s finished: %d arb / %d retail trades, avg fee %.4f%%",
        seed, result.arb_trades, result.retail_trades, result.average_fee * 100,
    )
    return result


class SimulationRunner:
    """Runs a batch of seeded simulations, optionally in worker processes."""

    def __init__(
        self,
        *,
        n_simulations: int,
        settings: SimulationSettings,
        n_workers: int = 1,
        variance: HyperparameterVariance = NO_VARIANCE,
        pool_config: PoolConfig = DEFAULT_POOL_CONFIG,
        base_seed: int = 0,
    ):
        if n_workers < 1:
            raise ValueError(f"n_workers must be >= 1, got {n_workers}")
        self.n_simulations = n_simulations
        self.settings = settings
        self.n_workers = n_workers
        self.variance = variance
        self.pool_config = pool_config
        self.base_seed = base_seed

    def _build_settings(self) -> list[tuple[SimulationSettings, int]]:
        """Per-seed settings with optional variance."""
        runs = []
        for i in range(self.n_simulations):
            seed = self.base_seed + i
            runs.append((self.variance.sample(self.settings, seed), seed))
        return runs

    def run_batch(self) -> BatchResult:
        runs = self._build_settings()
        settings_list = [s for s, _ in runs]
        seeds = [seed for _, seed in runs]

        if self.n_workers > 1 and len(runs) > 1:
            logger.info(
                "Running %d simulations on %d workers", len(runs), self.n_workers
            )
            with ProcessPoolExecutor(max_workers=self.n_workers) as executor:
                results = list(
                    executor.map(
                        run_simulation, settings_list, seeds, repeat(self.pool_config)
                    )
                )
        else:
            results = [
                run_simulation(s, seed, self.pool_config)
                for s, seed in zip(settings_list, seeds)
            ]
        return BatchResult(results=results)
