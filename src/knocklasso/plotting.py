import logging
from pathlib import Path

import matplotlib
matplotlib.use('Agg')  # Non-interactive backend
import matplotlib.pyplot as plt

from .knockoffs import KnockoffAggregate
from .lasso import LassoResult

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT = 'knockoffs_vs_lasso.png'


def plot_comparison(lasso: LassoResult, knockoffs: KnockoffAggregate,
                    comparison_fdr: float = 0.10, output_path=DEFAULT_OUTPUT):
    """
    Save the 2x2 comparison figure.

    Top row: Knockoffs power and empirical FDR against the target level
    (the FDR panel carries the y = x reference). Bottom row: Lasso vs.
    Knockoffs power and FDR at ``comparison_fdr``.
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    targets = knockoffs.fdr_targets
    ko_power, ko_fdr, _ = knockoffs.at_level(comparison_fdr)
    lasso_power = lasso.metrics.power
    lasso_fdr = lasso.metrics.fdp
    methods = ['Lasso', 'Knockoffs']

    fig, axes = plt.subplots(2, 2, figsize=(12, 9))
    ax1, ax2, ax3, ax4 = axes.flatten()

    ax1.plot(targets, knockoffs.power, marker='o', markersize=5, linewidth=2)
    ax1.set_xlabel('Target FDR')
    ax1.set_ylabel('Power')
    ax1.set_title('Knockoffs Method: Power vs Target FDR')
    ax1.grid(True)

    ax2.plot(targets, knockoffs.fdr, marker='o', markersize=5, linewidth=2)
    ax2.plot(targets, targets, linestyle='--', color='red', alpha=0.7, label='Ideal case (y=x)')
    ax2.set_xlabel('Target FDR')
    ax2.set_ylabel('Empirical FDR')
    ax2.set_title('Knockoffs Method: FDR Control')
    ax2.legend()
    ax2.grid(True)

    ax3.bar(methods, [lasso_power, ko_power])
    ax3.set_ylabel('Power')
    ax3.set_title(f'Power Comparison (Target FDR={comparison_fdr:.2f})')
    ax3.set_ylim(0, 1)

    fdr_max = max(lasso_fdr, ko_fdr)
    ax4.bar(methods, [lasso_fdr, ko_fdr])
    ax4.set_ylabel('False Discovery Rate')
    ax4.set_title(f'FDR Comparison (Target FDR={comparison_fdr:.2f})')
    ax4.set_ylim(0, fdr_max * 1.2 if fdr_max > 0 else 1)

    plt.tight_layout()
    plt.savefig(output_path, dpi=150)
    plt.close(fig)

    logger.info(f"Saved figure to {output_path}")
    return output_path
