"""
Run parameters for the Lasso vs. Knockoffs simulation.

Parameters live in a plain dict. ``DEFAULT_PARAMS`` reproduces the reference
study; a YAML file and explicit overrides are layered on top of it.
"""

import copy
import logging
import math
from typing import Dict, Optional

import yaml

from .knockoffs import DEFAULT_FDR_TARGETS

logger = logging.getLogger(__name__)


DEFAULT_PARAMS = {
    # data generation
    'n': 500,
    'p': 1000,
    'rho': 0.4,
    'k': 50,
    'covariate_seed': 2022,
    'coefficient_seed': 123,
    # lasso
    'cv_folds': 10,
    'lasso_standardize': True,
    # knockoffs
    'n_trials': 10,
    'knockoff_seed': None,      # None -> coefficient_seed
    'knockoff_method': 'mvr',
    'knockoff_fstat': 'lasso',
    'knockoff_offset': 1,
    'fdr_targets': list(DEFAULT_FDR_TARGETS),
    'n_jobs': 1,
    'skip_failed_trials': False,
    # reporting
    'comparison_fdr': 0.10,
    'output_path': 'knockoffs_vs_lasso.png',
}

# Small problem for smoke runs (--quick)
QUICK_PARAMS = {
    'n': 200,
    'p': 100,
    'k': 10,
    'n_trials': 2,
}


def load_config(config_path: str) -> Dict:
    """Read a YAML mapping of parameters."""
    logger.info(f"Loading config from {config_path}")
    with open(config_path) as f:
        config = yaml.safe_load(f)

    if config is None:
        return {}
    if not isinstance(config, dict):
        raise ValueError(f"Config file {config_path} must contain a mapping, got {type(config).__name__}")
    return config


def resolve_params(overrides: Optional[Dict] = None, config_path: Optional[str] = None) -> Dict:
    """
    Build the full parameter dict: defaults, then the YAML file, then overrides.

    Parameters
    ----------
    overrides : dict, optional
        Explicit values; ``None`` entries are ignored so argparse defaults
        do not clobber the config file.
    config_path : str, optional
        Path to a YAML config file.

    Returns
    -------
    dict
        Validated parameters.
    """
    params = copy.deepcopy(DEFAULT_PARAMS)

    layers = []
    if config_path is not None:
        layers.append(load_config(config_path))
    if overrides:
        layers.append({key: val for key, val in overrides.items() if val is not None})

    for layer in layers:
        unknown = sorted(set(layer) - set(DEFAULT_PARAMS))
        if unknown:
            raise ValueError(f"Unknown parameters: {unknown}")
        params.update(layer)

    if params['knockoff_seed'] is None:
        params['knockoff_seed'] = params['coefficient_seed']

    params['fdr_targets'] = [float(q) for q in params['fdr_targets']]

    validate_params(params)
    return params


def validate_params(params: Dict) -> None:
    """Fail fast on parameter combinations that cannot run."""
    for key in ('n', 'p', 'cv_folds', 'n_trials'):
        if int(params[key]) < 1:
            raise ValueError(f"{key} must be a positive integer, got {params[key]}")

    if not 0 <= params['k'] <= params['p']:
        raise ValueError(f"k must be between 0 and p={params['p']}, got {params['k']}")

    if not -1 < params['rho'] < 1:
        raise ValueError(f"rho must lie in (-1, 1), got {params['rho']}")

    if params['cv_folds'] < 2:
        raise ValueError(f"cv_folds must be at least 2, got {params['cv_folds']}")

    targets = params['fdr_targets']
    if len(targets) == 0:
        raise ValueError("fdr_targets must not be empty")
    if any(not 0 < q < 1 for q in targets):
        raise ValueError(f"fdr_targets must lie in (0, 1), got {targets}")

    if not any(math.isclose(q, params['comparison_fdr']) for q in targets):
        raise ValueError(
            f"comparison_fdr={params['comparison_fdr']} is not one of fdr_targets {targets}")

    if params['knockoff_offset'] not in (0, 1):
        raise ValueError(f"knockoff_offset must be 0 or 1, got {params['knockoff_offset']}")
