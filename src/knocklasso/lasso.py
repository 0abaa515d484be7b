from __future__ import annotations

import logging
from dataclasses import dataclass, field

import numpy as np
from sklearn.linear_model import Lasso, LassoCV
from sklearn.model_selection import KFold
from sklearn.preprocessing import StandardScaler

from .data import SimulatedData
from .evaluate import SelectionMetrics, evaluate_selection

logger = logging.getLogger(__name__)


@dataclass
class LassoResult:
    alpha: float
    alphas: np.ndarray = field(repr=False)
    mean_cv_loss: np.ndarray = field(repr=False)
    coef: np.ndarray = field(repr=False)
    selected: np.ndarray
    metrics: SelectionMetrics


class LassoTrialRunner():

    def __init__(self, cv: int = 10, standardize: bool = True, max_iter: int = 10000,
                 n_alphas: int = 100, n_jobs=None):
        """Cross-validated Lasso selection, run once per dataset.

        Args:
            cv: Number of (unshuffled) folds used to pick the penalty.
            standardize: Scale columns to unit variance before fitting.
            max_iter: Coordinate descent iteration cap.
            n_alphas: Size of the penalty grid built by LassoCV.
            n_jobs: Parallel folds for LassoCV.
        """
        if cv < 2:
            raise ValueError(f"cv must be at least 2, got {cv}")
        self.cv = cv
        self.standardize = standardize
        self.max_iter = max_iter
        self.n_alphas = n_alphas
        self.n_jobs = n_jobs

    def scale_features(self, X):
        if not self.standardize:
            return X
        return StandardScaler().fit_transform(X)

    def alpha_grid(self, X, y, eps=1e-3):
        """Log-spaced penalty grid from alpha_max (all coefficients zero) down to eps * alpha_max."""
        n = X.shape[0]
        Xc = X - X.mean(axis=0)
        yc = y - y.mean()
        alpha_max = np.max(np.abs(Xc.T @ yc)) / n
        return np.logspace(np.log10(alpha_max), np.log10(alpha_max * eps), self.n_alphas)

    def select_alpha(self, X, y):
        """Penalty minimizing the fold-averaged CV loss.

        Returns:
            (best_alpha, alphas, mean_cv_loss)
        """
        lasso_cv = LassoCV(
            cv=KFold(n_splits=self.cv),
            alphas=self.alpha_grid(X, y),
            max_iter=self.max_iter,
            n_jobs=self.n_jobs,
        )
        lasso_cv.fit(X, y)

        mean_cv_loss = lasso_cv.mse_path_.mean(axis=1)
        best_alpha = float(lasso_cv.alphas_[np.argmin(mean_cv_loss)])
        return best_alpha, lasso_cv.alphas_, mean_cv_loss

    def fit(self, X, y, alpha):
        """Refit on the full data at a single penalty and return the coefficients."""
        model = Lasso(alpha=alpha, max_iter=self.max_iter)
        model.fit(X, y)
        return model.coef_

    def run(self, data: SimulatedData) -> LassoResult:
        X = self.scale_features(data.X)
        y = data.y

        logger.info(f"Running {self.cv}-fold cross-validated Lasso on X shape={X.shape}")
        alpha, alphas, mean_cv_loss = self.select_alpha(X, y)
        logger.info(f"Selected lasso penalty alpha={alpha:.6g}")

        coef = self.fit(X, y, alpha)
        selected = np.flatnonzero(coef)
        metrics = evaluate_selection(selected, data.true_support, k=data.k, p=data.p)

        logger.info(f"Lasso selected {len(selected)} variables "
                    f"(TP={metrics.tp}, FP={metrics.fp}, FN={metrics.fn})")

        return LassoResult(
            alpha=alpha,
            alphas=np.asarray(alphas),
            mean_cv_loss=mean_cv_loss,
            coef=coef,
            selected=selected,
            metrics=metrics,
        )
