"""Uninformed retail flow with Poisson arrivals."""

from dataclasses import dataclass
from typing import Literal, Optional

import numpy as np


@dataclass(frozen=True)
class RetailOrder:
    """A retail order against the pool."""
    side: Literal["buy", "sell"]  # trader buys or sells A
    size: float                   # notional in B


class RetailTrader:
    """Draws the retail orders arriving in each time step.

    Arrivals per step are Poisson distributed. Sizes are lognormal with
    mean ``mean_size``, and each order buys A with probability ``buy_prob``.
    """

    def __init__(
        self,
        arrival_rate: float = 1.0,
        mean_size: float = 1.0,
        size_sigma: float = 1.2,
        buy_prob: float = 0.5,
        seed: Optional[int] = None,
    ):
        self.arrival_rate = arrival_rate
        self.buy_prob = buy_prob
        self._size_sigma = max(size_sigma, 0.01)
        # lognormal location so that E[size] == mean_size
        self._size_mu = float(np.log(max(mean_size, 0.01)) - 0.5 * self._size_sigma ** 2)
        self._rng = np.random.default_rng(seed)

    def generate_orders(self) -> list[RetailOrder]:
        """Orders for one step, possibly none."""
        n_arrivals = int(self._rng.poisson(self.arrival_rate))
        if n_arrivals == 0:
            return []
        sizes = self._rng.lognormal(self._size_mu, self._size_sigma, size=n_arrivals)
        buys = self._rng.random(n_arrivals) < self.buy_prob
        return [
            RetailOrder(side="buy" if is_buy else "sell", size=float(size))
            for size, is_buy in zip(sizes, buys)
        ]
