"""Dynamic-fee constant product pool and market simulator."""

from dynamic_fee_amm.core.config import PRECISION, PoolConfig
from dynamic_fee_amm.core.custody import InMemoryToken, TokenCustody
from dynamic_fee_amm.core.pool import DynamicFeePool

__all__ = [
    "PRECISION",
    "PoolConfig",
    "InMemoryToken",
    "TokenCustody",
    "DynamicFeePool",
]
