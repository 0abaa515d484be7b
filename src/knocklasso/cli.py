#!/usr/bin/env python3
"""
Monte-Carlo comparison of cross-validated Lasso and model-X Knockoffs.

Generates a sparse linear model with Toeplitz-correlated covariates, scores
both selection methods against the known support and writes a 2x2
comparison figure.

Usage:
    # Reference run (n=500, p=1000, rho=0.4, k=50, 10 knockoff trials)
    knocklasso

    # Parameters from a YAML file, trials in parallel
    knocklasso --config study.yaml --n-jobs 4

    # Quick smoke run on a small problem
    knocklasso --quick -o quick.png
"""

import argparse
import logging
import sys

from .config import QUICK_PARAMS, resolve_params
from .simulation import run_simulation

logger = logging.getLogger(__name__)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description='Knockoffs vs. Lasso variable selection simulation',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )
    parser.add_argument('--config', '-c', default=None,
                        help='Path to YAML config file')
    parser.add_argument('--output', '-o', default=None,
                        help='Output figure path (default: knockoffs_vs_lasso.png)')
    parser.add_argument('--n-trials', type=int, default=None,
                        help='Number of knockoff trials')
    parser.add_argument('--n-jobs', type=int, default=None,
                        help='Parallel knockoff trials (-1 uses all cores)')
    parser.add_argument('--seed', type=int, default=None,
                        help='Root seed for the knockoff trials')
    parser.add_argument('--quick', action='store_true',
                        help='Quick test mode (small problem, 2 trials)')
    parser.add_argument('--verbose', '-v', action='store_true',
                        help='Debug logging')
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )

    overrides = dict(QUICK_PARAMS) if args.quick else {}
    overrides.update({
        'output_path': args.output,
        'n_trials': args.n_trials,
        'n_jobs': args.n_jobs,
        'knockoff_seed': args.seed,
    })

    params = resolve_params(overrides, config_path=args.config)
    run_simulation(params)

    return 0


if __name__ == '__main__':
    sys.exit(main())
