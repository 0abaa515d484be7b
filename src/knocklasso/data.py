"""
Synthetic sparse linear model with Toeplitz-correlated covariates.

    X ~ N(0, Sigma),  Sigma_ij = rho^|i-j|
    y = X beta + eps,  eps ~ N(0, 1)

beta has exactly k nonzero N(0, 1) entries at shuffled positions. Two
independent generators are used: one for X, one for (beta, shuffle, eps).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Union

import numpy as np
from numpy.typing import NDArray
from scipy.linalg import toeplitz

logger = logging.getLogger(__name__)

SeedLike = Union[None, int, np.random.Generator]


@dataclass
class SimulatedData:
    """One draw of the simulation design."""
    X: NDArray
    y: NDArray
    beta: NDArray
    true_support: NDArray
    Sigma: NDArray = field(repr=False)
    rho: float = 0.0

    @property
    def n(self) -> int:
        return self.X.shape[0]

    @property
    def p(self) -> int:
        return self.X.shape[1]

    @property
    def k(self) -> int:
        return len(self.true_support)


def make_toeplitz_cov(p: int, rho: float) -> NDArray:
    """
    Construct the Toeplitz covariance matrix with Sigma_ij = rho^|i-j|.

    Parameters
    ----------
    p : int
        Dimension.
    rho : float
        Correlation decay, must lie in (-1, 1).

    Returns
    -------
    Sigma : ndarray of shape (p, p)
    """
    if not -1 < rho < 1:
        raise ValueError(f"rho must lie in (-1, 1), got {rho}")
    return toeplitz(rho ** np.arange(p))


def sample_design(n: int, Sigma: NDArray, rng: np.random.Generator) -> NDArray:
    """Draw X = Z L^T where L L^T = Sigma and Z is i.i.d. N(0, 1)."""
    p = Sigma.shape[0]
    try:
        L = np.linalg.cholesky(Sigma)
    except np.linalg.LinAlgError as e:
        raise ValueError(
            f"Covariance matrix ({p}x{p}) is not positive definite, "
            f"cannot factor it: {e}") from e

    Z = rng.standard_normal((n, p))
    return Z @ L.T


def sample_coefficients(p: int, k: int, rng: np.random.Generator) -> NDArray:
    """k nonzero N(0, 1) coefficients at uniformly shuffled positions."""
    if not 0 <= k <= p:
        raise ValueError(f"k must be between 0 and p={p}, got {k}")

    beta = np.zeros(p)
    beta[:k] = rng.standard_normal(k)
    rng.shuffle(beta)
    return beta


def sample_response(X: NDArray, beta: NDArray, rng: np.random.Generator) -> NDArray:
    return X @ beta + rng.standard_normal(X.shape[0])


def generate_data(
    n: int,
    p: int,
    rho: float,
    k: int,
    covariate_seed: SeedLike = None,
    coefficient_seed: SeedLike = None,
) -> SimulatedData:
    """
    Generate (X, y, true support) for one run.

    Parameters
    ----------
    n, p : int
        Sample size and number of covariates.
    rho : float
        Toeplitz correlation parameter.
    k : int
        Number of nonzero coefficients.
    covariate_seed : int, Generator or None
        Controls X only.
    coefficient_seed : int, Generator or None
        Controls beta, its shuffle and the noise.

    Returns
    -------
    SimulatedData
    """
    if n < 1 or p < 1:
        raise ValueError(f"n and p must be positive, got n={n}, p={p}")
    if not 0 <= k <= p:
        raise ValueError(f"k must be between 0 and p={p}, got {k}")

    rng_x = np.random.default_rng(covariate_seed)
    rng_beta = np.random.default_rng(coefficient_seed)

    Sigma = make_toeplitz_cov(p, rho)
    X = sample_design(n, Sigma, rng_x)

    beta = sample_coefficients(p, k, rng_beta)
    y = sample_response(X, beta, rng_beta)

    true_support = np.flatnonzero(beta)
    logger.info(f"Generated data: n={n}, p={p}, rho={rho}, k={k}, support size={len(true_support)}")

    return SimulatedData(X=X, y=y, beta=beta, true_support=true_support, Sigma=Sigma, rho=rho)
