"""Volatility-driven fee controller."""

import logging
from dataclasses import dataclass, field
from typing import Sequence

from dynamic_fee_amm.core.config import DEFAULT_POOL_CONFIG, PRECISION, PoolConfig
from dynamic_fee_amm.core.history import PriceSnapshot
from dynamic_fee_amm.core.volatility import estimate_volatility

logger = logging.getLogger(__name__)


@dataclass
class FeeController:
    """Maintains a decaying volatility accumulator and the fee derived from it.

    The accumulator is not clamped; it is only capped at PRECISION when mapped
    onto the fee range. Fees computed by ``update`` apply to the next trade,
    never to the one that triggered the update.
    """
    config: PoolConfig = DEFAULT_POOL_CONFIG
    current_fee: int = field(init=False)
    volatility_accumulator: int = field(default=0, init=False)

    def __post_init__(self) -> None:
        self.current_fee = self.config.base_fee

    def fee_for(self, accumulator: int) -> int:
        """Map an accumulator value onto [min_fee, max_fee]."""
        span = self.config.max_fee - self.config.min_fee
        return self.config.min_fee + span * min(accumulator, PRECISION) // PRECISION

    def decay_factor(self, time_passed: int) -> int:
        """Fraction (scale units) of the accumulator retired after ``time_passed``."""
        period = self.config.volatility_period
        time_passed = max(time_passed, 0)
        return min(time_passed, period) * PRECISION // period

    def update(self, now: int, history: Sequence[PriceSnapshot]) -> bool:
        """Blend fresh volatility into the accumulator and recompute the fee.

        Args:
            now: Current timestamp
            history: Price snapshots, oldest first

        Returns:
            True if the fee changed

        Raises:
            ArithmeticFault: Propagated from the volatility estimate
        """
        last_update = history[-1].timestamp if len(history) else now
        decay = self.decay_factor(now - last_update)

        volatility = estimate_volatility(history, self.config.volatility_period)
        self.volatility_accumulator = (
            self.volatility_accumulator * (PRECISION - decay) // PRECISION + volatility
        )

        new_fee = self.fee_for(self.volatility_accumulator)
        if new_fee == self.current_fee:
            return False

        logger.info(
            "Fee %d -> %d (volatility=%d, accumulator=%d)",
            self.current_fee, new_fee, volatility, self.volatility_accumulator,
        )
        self.current_fee = new_fee
        return True

    def snapshot(self) -> tuple[int, int]:
        """Capture (current_fee, volatility_accumulator) for rollback."""
        return self.current_fee, self.volatility_accumulator

    def restore(self, state: tuple[int, int]) -> None:
        self.current_fee, self.volatility_accumulator = state
