import numpy as np
import pytest

from knocklasso.data import generate_data
from knocklasso.knockoffs import KnockoffSelection

FDR_TARGETS = (0.01, 0.05, 0.10, 0.25, 0.50)


class RandomSubsetSelector:
    """Seed-driven stand-in for a knockoff filter.

    Selects a nested family of random subsets, larger for looser levels,
    so trials differ by seed but are reproducible.
    """

    def __init__(self, fdr_targets=FDR_TARGETS, sizes=(1, 2, 4, 8, 16)):
        self.fdr_targets = tuple(fdr_targets)
        self.sizes = sizes

    def __call__(self, X, y, seed=None):
        rng = np.random.default_rng(seed)
        order = rng.permutation(X.shape[1])
        selected = [order[:size] for size in self.sizes]
        return KnockoffSelection(fdr_targets=self.fdr_targets, selected=selected)


class FixedSelector:
    """Returns the same selections on every call."""

    def __init__(self, selected, fdr_targets=FDR_TARGETS):
        self.selected = [np.asarray(s, dtype=int) for s in selected]
        self.fdr_targets = tuple(fdr_targets)
        self.calls = 0

    def __call__(self, X, y, seed=None):
        self.calls += 1
        return KnockoffSelection(fdr_targets=self.fdr_targets, selected=self.selected)


@pytest.fixture
def small_data():
    return generate_data(n=120, p=40, rho=0.4, k=5, covariate_seed=2022, coefficient_seed=123)


@pytest.fixture
def small_params(tmp_path):
    return {
        'n': 120,
        'p': 40,
        'k': 5,
        'n_trials': 3,
        'cv_folds': 5,
        'output_path': str(tmp_path / 'knockoffs_vs_lasso.png'),
    }
