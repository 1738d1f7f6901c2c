"""Geometric Brownian Motion fair price of A in units of B."""

from dataclasses import dataclass, field
from typing import Optional

import numpy as np


@dataclass
class GBMPriceProcess:
    """Fair price path under Geometric Brownian Motion.

    Each step multiplies the price by exp(N(log_drift, log_vol)), the exact
    log-space solution of dS = mu * S * dt + sigma * S * dW.
    """
    initial_price: float
    mu: float = 0.0
    sigma: float = 0.001      # per-step volatility
    dt: float = 1.0
    seed: Optional[int] = None
    price: float = field(init=False)

    def __post_init__(self) -> None:
        if self.initial_price <= 0:
            raise ValueError(f"initial_price must be > 0, got {self.initial_price}")
        if self.sigma < 0:
            raise ValueError(f"sigma must be >= 0, got {self.sigma}")
        self.price = self.initial_price
        self._log_drift = (self.mu - 0.5 * self.sigma ** 2) * self.dt
        self._log_vol = self.sigma * float(np.sqrt(self.dt))
        self._rng = np.random.default_rng(self.seed)

    def step(self) -> float:
        """Advance one time step and return the new fair price."""
        shock = self._rng.normal(self._log_drift, self._log_vol)
        self.price = float(self.price * np.exp(shock))
        return self.price
