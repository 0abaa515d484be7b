import logging
import math
from dataclasses import dataclass, field
from functools import reduce
from typing import Callable, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
from joblib import Parallel, delayed
from tqdm import tqdm

from .data import SimulatedData
from .evaluate import SelectionMetrics, evaluate_selection

logger = logging.getLogger(__name__)

DEFAULT_FDR_TARGETS = (0.01, 0.05, 0.10, 0.25, 0.50)


@dataclass
class KnockoffSelection:
    """Selections from one filter call, one index array per target FDR level."""
    fdr_targets: Tuple[float, ...]
    selected: List[np.ndarray]
    W: Optional[np.ndarray] = field(default=None, repr=False)


@dataclass
class TrialOutcome:
    trial: int
    fdr_targets: Tuple[float, ...]
    metrics: List[SelectionMetrics]


@dataclass
class KnockoffAggregate:
    """Trial-averaged power, FDR and selection size per target FDR level."""
    fdr_targets: np.ndarray
    power: np.ndarray
    fdr: np.ndarray
    mean_selected: np.ndarray
    n_trials: int
    n_failed: int = 0
    trials: pd.DataFrame = field(default=None, repr=False)

    def at_level(self, level: float) -> Tuple[float, float, float]:
        """(power, fdr, mean_selected) at one target level."""
        j = level_index(self.fdr_targets, level)
        return float(self.power[j]), float(self.fdr[j]), float(self.mean_selected[j])


def level_index(fdr_targets: Sequence[float], level: float) -> int:
    """Position of ``level`` in ``fdr_targets``, compared with a float tolerance."""
    for j, q in enumerate(fdr_targets):
        if math.isclose(q, level, rel_tol=1e-9, abs_tol=1e-12):
            return j
    raise ValueError(f"Target FDR level {level} not found in {list(fdr_targets)}")


class KnockpySelector():

    def __init__(self, method: str = 'mvr', fstat: str = 'lasso',
                 fdr_targets: Sequence[float] = DEFAULT_FDR_TARGETS, offset: int = 1,
                 shrinkage: Optional[str] = 'ledoitwolf', fstat_kwargs: Optional[dict] = None):
        """Model-X knockoff filter evaluated at several target FDR levels.

        One call samples Gaussian knockoffs, computes the feature statistics W
        once and thresholds W at every level, so the selections for different
        levels come from the same knockoff draw.

        Parameters
        ----------
        method : str
            Knockoff construction passed to knockpy ('mvr', 'sdp', 'equicorrelated', ...).
        fstat : str
            knockpy feature statistic ('lasso', 'lsm', 'ols', ...).
        fdr_targets : sequence of float
            Target FDR levels, in the order results are reported.
        offset : int
            1 for knockoff+ (controls FDR), 0 for the original knockoff threshold.
        shrinkage : str or None
            Covariance shrinkage knockpy applies when estimating Sigma from X.
        fstat_kwargs : dict, optional
            Extra keyword arguments for the feature statistic.
        """
        if len(fdr_targets) == 0:
            raise ValueError("fdr_targets must not be empty")
        self.method = method
        self.fstat = fstat
        self.fdr_targets = tuple(float(q) for q in fdr_targets)
        self.offset = offset
        self.shrinkage = shrinkage
        self.fstat_kwargs = fstat_kwargs or {}

    def __call__(self, X, y, seed=None) -> KnockoffSelection:
        from knockpy import KnockoffFilter
        from knockpy.knockoff_stats import data_dependent_threshhold

        # knockpy samples knockoffs from numpy's global RNG
        if seed is not None:
            np.random.seed(seed)

        kfilter = KnockoffFilter(
            ksampler='gaussian',
            fstat=self.fstat,
            fstat_kwargs=self.fstat_kwargs,
            knockoff_kwargs={'method': self.method},
        )
        kfilter.forward(X=X, y=np.asarray(y).flatten(), fdr=self.fdr_targets[0],
                        shrinkage=self.shrinkage)
        W = np.asarray(kfilter.W)

        selected = []
        for q in self.fdr_targets:
            t = data_dependent_threshhold(W, fdr=q, offset=self.offset)
            selected.append(np.flatnonzero(W >= t))

        return KnockoffSelection(fdr_targets=self.fdr_targets, selected=selected, W=W)


def _single_knockoff_trial(selector, X, y, true_support, k, seed, trial, skip_failed):
    """Run and score one knockoff trial.

    Module-level so joblib can pickle it for parallel execution.
    Returns None for a failed trial when ``skip_failed`` is set.
    """
    try:
        selection = selector(X, y, seed=seed)
    except Exception as e:
        if not skip_failed:
            raise
        logger.warning(f"Knockoff trial {trial} failed and is skipped: {e}")
        return None

    fdr_targets = tuple(float(q) for q in selection.fdr_targets)
    if len(selection.selected) != len(fdr_targets):
        raise ValueError(
            f"Trial {trial}: got {len(selection.selected)} selections "
            f"for {len(fdr_targets)} target FDR levels")

    p = X.shape[1]
    metrics = [evaluate_selection(sel, true_support, k=k, p=p) for sel in selection.selected]
    return TrialOutcome(trial=trial, fdr_targets=fdr_targets, metrics=metrics)


def aggregate_trials(outcomes: List[TrialOutcome], n_failed: int = 0) -> KnockoffAggregate:
    """
    Average per-level metrics over trials.

    Per-trial (levels x [power, fdp, n_selected]) arrays are summed in one
    reduction and divided once by the number of trials, so the result does
    not depend on the order trials finished in.

    Raises
    ------
    ValueError
        If there are no trials or the trials disagree on the target levels.
    """
    if len(outcomes) == 0:
        raise ValueError("Cannot aggregate zero knockoff trials")

    fdr_targets = outcomes[0].fdr_targets
    for outcome in outcomes[1:]:
        if len(outcome.fdr_targets) != len(fdr_targets) or not np.allclose(
                outcome.fdr_targets, fdr_targets):
            raise ValueError(
                f"Target FDR levels differ between trials: trial {outcomes[0].trial} "
                f"reported {list(fdr_targets)}, trial {outcome.trial} reported "
                f"{list(outcome.fdr_targets)}")

    per_trial = [np.vstack([m.as_array() for m in outcome.metrics]) for outcome in outcomes]
    totals = reduce(np.add, per_trial)
    means = totals / len(outcomes)

    rows = []
    for outcome in outcomes:
        for q, m in zip(outcome.fdr_targets, outcome.metrics):
            rows.append({
                'trial': outcome.trial,
                'fdr_target': q,
                'tp': m.tp,
                'fp': m.fp,
                'fn': m.fn,
                'power': m.power,
                'fdp': m.fdp,
                'n_selected': m.n_selected,
            })

    return KnockoffAggregate(
        fdr_targets=np.array(fdr_targets),
        power=means[:, 0],
        fdr=means[:, 1],
        mean_selected=means[:, 2],
        n_trials=len(outcomes),
        n_failed=n_failed,
        trials=pd.DataFrame(rows),
    )


class KnockoffTrialRunner():

    def __init__(self, selector: Optional[Callable] = None, n_trials: int = 10, seed=None,
                 n_jobs: int = 1, skip_failed: bool = False, show_progress: bool = True,
                 backend: str = "loky"):
        """Monte-Carlo evaluation of a knockoff selector.

        Args:
            selector: Callable ``(X, y, seed) -> KnockoffSelection``. Defaults to
                an MVR ``KnockpySelector``.
            n_trials: Number of independent filter calls.
            seed: Root seed; each trial gets its own child seed.
            n_jobs: 1 runs trials sequentially, anything else uses joblib.
            skip_failed: Drop failed trials (and shrink the divisor) instead of
                aborting the run.
            show_progress: Show a tqdm bar for sequential runs.
            backend: joblib backend for parallel runs. ``KnockpySelector`` seeds
                numpy's global RNG, so it needs process-based workers
                ("loky" or "multiprocessing"); "threading" is rejected for it.
        """
        if n_trials < 1:
            raise ValueError(f"n_trials must be at least 1, got {n_trials}")
        selector = selector if selector is not None else KnockpySelector()
        if backend == "threading" and isinstance(selector, KnockpySelector):
            raise ValueError("KnockpySelector draws from numpy's global RNG and is not "
                             "reproducible under the threading backend; use 'loky'")
        self.selector = selector
        self.n_trials = n_trials
        self.seed = seed
        self.n_jobs = n_jobs
        self.skip_failed = skip_failed
        self.show_progress = show_progress
        self.backend = backend

    def trial_seeds(self) -> List[int]:
        """Independent per-trial seeds derived from the root seed."""
        states = np.random.SeedSequence(self.seed).generate_state(self.n_trials)
        return [int(s) for s in states]

    def run(self, data: SimulatedData) -> KnockoffAggregate:
        seeds = self.trial_seeds()
        args = (self.selector, data.X, data.y, data.true_support, data.k)

        logger.info(f"Running {self.n_trials} knockoff trials with n_jobs={self.n_jobs}")

        if self.n_jobs == 1:
            results = [
                _single_knockoff_trial(*args, seed, trial, self.skip_failed)
                for trial, seed in enumerate(tqdm(seeds, desc="Knockoff trials",
                                                  disable=not self.show_progress))
            ]
        else:
            results = Parallel(n_jobs=self.n_jobs, backend=self.backend)(
                delayed(_single_knockoff_trial)(*args, seed, trial, self.skip_failed)
                for trial, seed in enumerate(seeds)
            )

        outcomes = [r for r in results if r is not None]
        n_failed = len(results) - len(outcomes)

        if len(outcomes) == 0:
            raise RuntimeError(f"All {self.n_trials} knockoff trials failed")
        if n_failed > 0:
            logger.warning(f"{n_failed} of {self.n_trials} knockoff trials failed; "
                           f"averaging over {len(outcomes)}")

        aggregate = aggregate_trials(outcomes, n_failed=n_failed)
        logger.info(f"Aggregated {aggregate.n_trials} knockoff trials "
                    f"over levels {list(aggregate.fdr_targets)}")
        return aggregate
