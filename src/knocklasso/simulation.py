"""End-to-end Lasso vs. Knockoffs simulation run."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

from .config import resolve_params
from .data import SimulatedData, generate_data
from .knockoffs import KnockoffAggregate, KnockoffTrialRunner, KnockpySelector
from .lasso import LassoResult, LassoTrialRunner
from .plotting import plot_comparison
from .report import print_report

logger = logging.getLogger(__name__)


@dataclass
class SimulationResult:
    params: Dict
    data: SimulatedData
    lasso: LassoResult
    knockoffs: KnockoffAggregate
    figure_path: Optional[Path]


def build_knockoff_runner(params: Dict, selector=None, show_progress: bool = True) -> KnockoffTrialRunner:
    if selector is None:
        selector = KnockpySelector(
            method=params['knockoff_method'],
            fstat=params['knockoff_fstat'],
            fdr_targets=params['fdr_targets'],
            offset=params['knockoff_offset'],
        )
    return KnockoffTrialRunner(
        selector=selector,
        n_trials=params['n_trials'],
        seed=params['knockoff_seed'],
        n_jobs=params['n_jobs'],
        skip_failed=params['skip_failed_trials'],
        show_progress=show_progress,
    )


def run_simulation(params: Optional[Dict] = None, selector=None, plot: bool = True,
                   report: bool = True) -> SimulationResult:
    """
    Generate data once, score both methods on it, report and plot.

    Parameters
    ----------
    params : dict, optional
        Overrides of ``config.DEFAULT_PARAMS``; validated before anything runs.
    selector : callable, optional
        Knockoff selector ``(X, y, seed) -> KnockoffSelection``; defaults to knockpy.
    plot : bool
        Write the comparison figure to ``params['output_path']``.
    report : bool
        Print the console report.

    Returns
    -------
    SimulationResult
    """
    params = resolve_params(params)

    data = generate_data(
        n=params['n'],
        p=params['p'],
        rho=params['rho'],
        k=params['k'],
        covariate_seed=params['covariate_seed'],
        coefficient_seed=params['coefficient_seed'],
    )

    lasso = LassoTrialRunner(
        cv=params['cv_folds'],
        standardize=params['lasso_standardize'],
    ).run(data)

    knockoffs = build_knockoff_runner(params, selector=selector).run(data)

    if report:
        print_report(params, data, lasso, knockoffs)

    figure_path = None
    if plot:
        figure_path = plot_comparison(lasso, knockoffs, params['comparison_fdr'],
                                      params['output_path'])

    logger.info("Simulation complete")
    return SimulationResult(params=params, data=data, lasso=lasso,
                            knockoffs=knockoffs, figure_path=figure_path)
