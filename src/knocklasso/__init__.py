"""
Knockoffs vs. Lasso: a Monte-Carlo study of power and FDR for variable
selection on correlated high-dimensional linear models.
"""

from .config import DEFAULT_PARAMS, load_config, resolve_params
from .data import SimulatedData, generate_data, make_toeplitz_cov
from .evaluate import SelectionMetrics, evaluate_selection
from .knockoffs import (
    KnockoffAggregate, KnockoffSelection, KnockoffTrialRunner, KnockpySelector,
    aggregate_trials, level_index,
)
from .lasso import LassoResult, LassoTrialRunner
from .simulation import SimulationResult, run_simulation

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_PARAMS",
    "load_config",
    "resolve_params",
    "SimulatedData",
    "generate_data",
    "make_toeplitz_cov",
    "SelectionMetrics",
    "evaluate_selection",
    "KnockoffAggregate",
    "KnockoffSelection",
    "KnockoffTrialRunner",
    "KnockpySelector",
    "aggregate_trials",
    "level_index",
    "LassoResult",
    "LassoTrialRunner",
    "SimulationResult",
    "run_simulation",
]
