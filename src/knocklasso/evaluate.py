"""True/false positive accounting for a selected set of variables."""

from dataclasses import dataclass
from typing import Iterable, Optional

import numpy as np


@dataclass(frozen=True)
class SelectionMetrics:
    tp: int
    fp: int
    fn: int
    power: float
    fdp: float
    n_selected: int

    def as_array(self) -> np.ndarray:
        """(power, fdp, n_selected), the quantities averaged over trials."""
        return np.array([self.power, self.fdp, self.n_selected], dtype=float)


def _as_index_set(indices: Iterable, p: Optional[int] = None) -> set:
    arr = np.asarray(list(indices)).ravel()
    if arr.size == 0:
        return set()
    if arr.dtype == bool:
        raise ValueError("Expected column indices, got a boolean mask; "
                         "convert it with np.flatnonzero first")
    if not np.issubdtype(arr.dtype, np.integer):
        raise ValueError(f"Column indices must be integers, got dtype {arr.dtype}")
    if arr.min() < 0 or (p is not None and arr.max() >= p):
        bound = f"[0, {p})" if p is not None else "non-negative"
        raise ValueError(f"Column indices must be {bound}, got range "
                         f"[{arr.min()}, {arr.max()}]")
    return {int(i) for i in arr}


def evaluate_selection(selected: Iterable, true_support: Iterable,
                       k: Optional[int] = None, p: Optional[int] = None) -> SelectionMetrics:
    """Score a selection against the known support.

    Args:
        selected: Selected column indices (order and duplicates ignored).
        true_support: Indices with nonzero true coefficient.
        k: Number of true signals; defaults to the size of ``true_support``.
        p: Number of columns; when given, indices outside ``[0, p)`` are rejected.

    Returns:
        SelectionMetrics with power = TP / k and FDP = FP / max(|selected|, 1).

    Raises:
        ValueError: If indices are boolean, non-integer, negative or out of range.
    """
    selected = _as_index_set(selected, p)
    support = _as_index_set(true_support, p)
    if k is None:
        k = len(support)

    tp = len(selected & support)
    fp = len(selected - support)
    fn = len(support - selected)

    power = tp / k if k > 0 else 0.0
    fdp = fp / max(len(selected), 1)

    return SelectionMetrics(tp=tp, fp=fp, fn=fn, power=power, fdp=fdp,
                            n_selected=len(selected))
