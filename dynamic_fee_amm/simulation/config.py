"""Shared configuration for pool simulations and per-seed variance."""

from dataclasses import dataclass, replace
import multiprocessing
import os

import numpy as np


@dataclass(frozen=True)
class SimulationSettings:
    n_simulations: int
    n_steps: int
    step_seconds: int
    initial_price: float
    initial_a: float
    initial_b: float
    gbm_mu: float
    gbm_sigma: float
    gbm_dt: float
    retail_arrival_rate: float
    retail_mean_size: float
    retail_size_sigma: float
    retail_buy_prob: float

    def __post_init__(self) -> None:
        if self.n_simulations < 1:
            raise ValueError(f"n_simulations must be >= 1, got {self.n_simulations}")
        if self.n_steps < 1:
            raise ValueError(f"n_steps must be >= 1, got {self.n_steps}")
        if self.step_seconds < 0:
            raise ValueError(f"step_seconds must be >= 0, got {self.step_seconds}")
        if self.initial_a <= 0 or self.initial_b <= 0:
            raise ValueError("initial reserves must be > 0")
        if not 0.0 <= self.retail_buy_prob <= 1.0:
            raise ValueError(
                f"retail_buy_prob must be in [0, 1], got {self.retail_buy_prob}"
            )

    def with_overrides(self, **overrides) -> "SimulationSettings":
        """Copy with the given fields replaced; ``None`` values are ignored."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


BASELINE_SETTINGS = SimulationSettings(
    n_simulations=10,
    n_steps=2000,
    step_seconds=12,
    initial_price=100.0,
    initial_a=100.0,
    initial_b=10000.0,
    gbm_mu=0.0,
    gbm_sigma=0.001,
    gbm_dt=1.0,
    retail_arrival_rate=0.8,
    retail_mean_size=20.0,
    retail_size_sigma=1.2,
    retail_buy_prob=0.5,
)


@dataclass(frozen=True)
class HyperparameterVariance:
    """Ranges sampled per seed when a batch varies market conditions."""
    retail_mean_size_min: float
    retail_mean_size_max: float
    vary_retail_mean_size: bool

    retail_arrival_rate_min: float
    retail_arrival_rate_max: float
    vary_retail_arrival_rate: bool

    gbm_sigma_min: float
    gbm_sigma_max: float
    vary_gbm_sigma: bool

    def sample(self, base: SimulationSettings, seed: int) -> SimulationSettings:
        """Draw the settings for one seed, keeping fixed fields from ``base``."""
        rng = np.random.default_rng(seed=seed)
        return base.with_overrides(
            retail_mean_size=(
                float(rng.uniform(self.retail_mean_size_min, self.retail_mean_size_max))
                if self.vary_retail_mean_size
                else None
            ),
            retail_arrival_rate=(
                float(rng.uniform(self.retail_arrival_rate_min, self.retail_arrival_rate_max))
                if self.vary_retail_arrival_rate
                else None
            ),
            gbm_sigma=(
                float(rng.uniform(self.gbm_sigma_min, self.gbm_sigma_max))
                if self.vary_gbm_sigma
                else None
            ),
        )


BASELINE_VARIANCE = HyperparameterVariance(
    retail_mean_size_min=19.0,
    retail_mean_size_max=21.0,
    vary_retail_mean_size=True,
    retail_arrival_rate_min=0.6,
    retail_arrival_rate_max=1.0,
    vary_retail_arrival_rate=True,
    gbm_sigma_min=0.0005,
    gbm_sigma_max=0.005,
    vary_gbm_sigma=True,
)

NO_VARIANCE = HyperparameterVariance(
    retail_mean_size_min=0.0,
    retail_mean_size_max=0.0,
    vary_retail_mean_size=False,
    retail_arrival_rate_min=0.0,
    retail_arrival_rate_max=0.0,
    vary_retail_arrival_rate=False,
    gbm_sigma_min=0.0,
    gbm_sigma_max=0.0,
    vary_gbm_sigma=False,
)


def resolve_n_workers() -> int:
    """Resolve worker count from environment or CPU count."""
    return int(os.environ.get("N_WORKERS", str(min(8, multiprocessing.cpu_count()))))
