"""Market agents that trade against a pool."""

from dynamic_fee_amm.market.price_process import GBMPriceProcess
from dynamic_fee_amm.market.arbitrageur import Arbitrageur, ArbResult
from dynamic_fee_amm.market.retail import RetailOrder, RetailTrader

__all__ = [
    "GBMPriceProcess",
    "Arbitrageur",
    "ArbResult",
    "RetailOrder",
    "RetailTrader",
]
