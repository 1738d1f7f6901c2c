"""Fixed-point constants and pool configuration."""

from dataclasses import dataclass

# 1.0 in scale units
PRECISION = 10**18

MIN_FEE = 10**15          # 0.1%
MAX_FEE = 3 * 10**16      # 3%
BASE_FEE = 5 * 10**15     # 0.5%, fee of a freshly deployed pool

VOLATILITY_PERIOD = 3600
MAX_PRICE_HISTORY = 24


@dataclass(frozen=True)
class PoolConfig:
    """Fee bounds and volatility window of a pool.

    All fee values are in scale units of PRECISION (10**18 == 100%).
    """
    min_fee: int = MIN_FEE
    max_fee: int = MAX_FEE
    base_fee: int = BASE_FEE
    volatility_period: int = VOLATILITY_PERIOD
    max_history: int = MAX_PRICE_HISTORY

    def __post_init__(self) -> None:
        if self.min_fee < 0:
            raise ValueError(f"min_fee must be >= 0, got {self.min_fee}")
        if self.max_fee > PRECISION:
            raise ValueError(f"max_fee must be <= {PRECISION}, got {self.max_fee}")
        if not self.min_fee <= self.base_fee <= self.max_fee:
            raise ValueError(
                f"base_fee ({self.base_fee}) must lie within "
                f"[{self.min_fee}, {self.max_fee}]"
            )
        if self.volatility_period <= 0:
            raise ValueError(
                f"volatility_period must be > 0, got {self.volatility_period}"
            )
        if self.max_history < 2:
            raise ValueError(f"max_history must be >= 2, got {self.max_history}")


DEFAULT_POOL_CONFIG = PoolConfig()


def to_scale(value: float) -> int:
    """Convert a human-readable quantity (e.g. 0.005 or 1000) to scale units."""
    return int(round(value * PRECISION))


def from_scale(value: int) -> float:
    """Convert scale units back to a float for display."""
    return value / PRECISION
