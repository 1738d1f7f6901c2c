"""Core pool engine."""

from dynamic_fee_amm.core.config import (
    BASE_FEE,
    DEFAULT_POOL_CONFIG,
    MAX_FEE,
    MAX_PRICE_HISTORY,
    MIN_FEE,
    PRECISION,
    VOLATILITY_PERIOD,
    PoolConfig,
)
from dynamic_fee_amm.core.custody import InMemoryToken, TokenCustody
from dynamic_fee_amm.core.events import AddLiquidityEvent, EventLog, FeeUpdatedEvent, SwapEvent
from dynamic_fee_amm.core.fee import FeeController
from dynamic_fee_amm.core.history import PriceHistory, PriceSnapshot
from dynamic_fee_amm.core.pool import DynamicFeePool, get_amount_out
from dynamic_fee_amm.core.volatility import estimate_volatility

__all__ = [
    "BASE_FEE",
    "DEFAULT_POOL_CONFIG",
    "MAX_FEE",
    "MAX_PRICE_HISTORY",
    "MIN_FEE",
    "PRECISION",
    "VOLATILITY_PERIOD",
    "PoolConfig",
    "InMemoryToken",
    "TokenCustody",
    "AddLiquidityEvent",
    "EventLog",
    "FeeUpdatedEvent",
    "SwapEvent",
    "FeeController",
    "PriceHistory",
    "PriceSnapshot",
    "DynamicFeePool",
    "get_amount_out",
    "estimate_volatility",
]
