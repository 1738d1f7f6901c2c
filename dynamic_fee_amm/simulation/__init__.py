"""Market simulation of a dynamic-fee pool."""

from dynamic_fee_amm.simulation.config import (
    BASELINE_SETTINGS,
    BASELINE_VARIANCE,
    NO_VARIANCE,
    HyperparameterVariance,
    SimulationSettings,
    resolve_n_workers,
)
from dynamic_fee_amm.simulation.runner import (
    BatchResult,
    SimulationResult,
    SimulationRunner,
    StepResult,
    build_pool,
    run_simulation,
)

__all__ = [
    "BASELINE_SETTINGS",
    "BASELINE_VARIANCE",
    "NO_VARIANCE",
    "HyperparameterVariance",
    "SimulationSettings",
    "resolve_n_workers",
    "BatchResult",
    "SimulationResult",
    "SimulationRunner",
    "StepResult",
    "build_pool",
    "run_simulation",
]
