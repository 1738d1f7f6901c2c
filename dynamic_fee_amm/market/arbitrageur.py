"""Arbitrageur that trades the pool back toward the fair price."""

import logging
import math
from dataclasses import dataclass
from typing import Literal, Optional

from dynamic_fee_amm.core.config import PRECISION
from dynamic_fee_amm.core.pool import DynamicFeePool

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ArbResult:
    """An arbitrage trade, quoted or executed."""
    side: Literal["buy", "sell"]  # arbitrageur buys or sells A
    amount_a: int
    amount_b: int
    profit: float                 # in B, valued at the fair price


class Arbitrageur:
    """Finds and executes the profit-maximizing trade against a pool.

    Closed-form for a constant product pool with reserves (x, y), k = x*y,
    fee-on-input gamma = 1 - f and fair price p (B per A):

    - Buy A (pay B):  x' = sqrt(k / (gamma*p)),  b_in = (k/x' - y) / gamma
    - Sell A (get B): x' = sqrt(k * gamma / p),  a_in = (x' - x) / gamma

    Sizes are solved in floats and then quoted exactly against the pool.
    """

    def __init__(self, account: str = "arbitrageur"):
        self.account = account

    def find_arb_opportunity(
        self, pool: DynamicFeePool, fair_price: float
    ) -> Optional[ArbResult]:
        """Quote the optimal trade, or None if no trade is profitable."""
        if pool.is_empty or fair_price <= 0:
            return None

        x, y = pool.get_reserves()
        gamma = 1.0 - pool.current_fee / PRECISION
        if gamma <= 0.0:
            return None

        spot = y / x
        if spot < fair_price:
            return self._compute_buy_arb(pool, x, y, gamma, fair_price)
        if spot > fair_price:
            return self._compute_sell_arb(pool, x, y, gamma, fair_price)
        return None

    def _compute_buy_arb(
        self, pool: DynamicFeePool, x: int, y: int, gamma: float, fair_price: float
    ) -> Optional[ArbResult]:
        k = float(x) * float(y)
        target_x = math.sqrt(k / (gamma * fair_price))
        amount_b_in = int((k / target_x - y) / gamma)
        if amount_b_in <= 0:
            return None

        amount_a_out, _ = pool.quote_swap(0, amount_b_in)
        profit = (amount_a_out * fair_price - amount_b_in) / PRECISION
        if amount_a_out <= 0 or profit <= 0:
            return None
        return ArbResult("buy", amount_a_out, amount_b_in, profit)

    def _compute_sell_arb(
        self, pool: DynamicFeePool, x: int, y: int, gamma: float, fair_price: float
    ) -> Optional[ArbResult]:
        k = float(x) * float(y)
        target_x = math.sqrt(k * gamma / fair_price)
        amount_a_in = int((target_x - x) / gamma)
        if amount_a_in <= 0:
            return None

        _, amount_b_out = pool.quote_swap(amount_a_in, 0)
        profit = (amount_b_out - amount_a_in * fair_price) / PRECISION
        if amount_b_out <= 0 or profit <= 0:
            return None
        return ArbResult("sell", amount_a_in, amount_b_out, profit)

    def execute_arb(
        self, pool: DynamicFeePool, fair_price: float, timestamp: int
    ) -> Optional[ArbResult]:
        """Find and execute the optimal arbitrage trade.

        The quoted output is passed as the slippage bound, so the swap either
        fills exactly as quoted or raises.
        """
        opportunity = self.find_arb_opportunity(pool, fair_price)
        if opportunity is None:
            return None

        if opportunity.side == "buy":
            pool.swap(
                0, opportunity.amount_b, opportunity.amount_a, 0,
                sender=self.account, timestamp=timestamp,
            )
        else:
            pool.swap(
                opportunity.amount_a, 0, 0, opportunity.amount_b,
                sender=self.account, timestamp=timestamp,
            )
        logger.debug("Arbitrage at t=%d: %s", timestamp, opportunity)
        return opportunity
