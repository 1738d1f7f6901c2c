"""Volatility estimate over the recent price window."""

from typing import Sequence

from dynamic_fee_amm.core.config import PRECISION, VOLATILITY_PERIOD
from dynamic_fee_amm.core.errors import ArithmeticFault
from dynamic_fee_amm.core.history import PriceSnapshot


def estimate_volatility(
    history: Sequence[PriceSnapshot],
    volatility_period: int = VOLATILITY_PERIOD,
) -> int:
    """Estimate recent volatility as a value in [0, PRECISION].

    Compares every recent snapshot against the newest price and takes the
    largest relative deviation. Walking from the newest-but-one snapshot back
    to the oldest, a snapshot is skipped when the gap to the snapshot that
    follows it exceeds ``volatility_period``; the walk still continues past
    it.

    The maximum deviation d (scale units) is squared and renormalized,
    d * d / PRECISION, so small moves contribute sub-linearly and large moves
    saturate at PRECISION.

    Args:
        history: Snapshots ordered oldest first
        volatility_period: Largest gap between neighbouring snapshots that
            still counts as recent

    Returns:
        Volatility in scale units, 0 when fewer than two snapshots exist

    Raises:
        ArithmeticFault: If the newest price is 0 and any snapshot is compared
            against it
    """
    if len(history) < 2:
        return 0

    last_price = history[-1].price
    max_deviation = 0

    for i in range(len(history) - 2, -1, -1):
        snapshot = history[i]
        if history[i + 1].timestamp - snapshot.timestamp > volatility_period:
            continue
        if last_price == 0:
            raise ArithmeticFault(
                f"latest recorded price is 0, cannot compare snapshot at "
                f"t={snapshot.timestamp}"
            )
        deviation = abs(snapshot.price - last_price) * PRECISION // last_price
        if deviation > max_deviation:
            max_deviation = deviation

    return min(max_deviation * max_deviation // PRECISION, PRECISION)
