import numpy as np
import pytest

from knocklasso.evaluate import evaluate_selection


class TestEvaluateSelection:

    def test_basic_counts(self):
        m = evaluate_selection([2, 3, 4], [1, 2, 3])

        assert (m.tp, m.fp, m.fn) == (2, 1, 1)
        assert m.power == pytest.approx(2 / 3)
        assert m.fdp == pytest.approx(1 / 3)
        assert m.n_selected == 3

    def test_empty_selection(self):
        m = evaluate_selection([], [1, 2, 3])

        assert m.fdp == 0.0
        assert not np.isnan(m.fdp)
        assert m.power == 0.0
        assert (m.tp, m.fp, m.fn) == (0, 0, 3)

    def test_duplicates_and_order_ignored(self):
        a = evaluate_selection([4, 2, 3, 2, 4], [3, 1, 2])
        b = evaluate_selection([2, 3, 4], [1, 2, 3])

        assert a == b

    def test_numpy_inputs(self):
        m = evaluate_selection(np.array([0, 5]), np.array([5, 6]))

        assert (m.tp, m.fp, m.fn) == (1, 1, 1)

    def test_explicit_k(self):
        m = evaluate_selection([1], [1, 2], k=4)

        assert m.power == pytest.approx(0.25)

    def test_no_true_signals(self):
        m = evaluate_selection([0, 1], [])

        assert m.power == 0.0
        assert m.fdp == 1.0

    def test_relabeling_invariance(self):
        rng = np.random.default_rng(7)
        p = 30
        support = rng.choice(p, size=6, replace=False)
        selected = rng.choice(p, size=9, replace=False)
        perm = rng.permutation(p)

        before = evaluate_selection(selected, support)
        after = evaluate_selection(perm[selected], perm[support])

        assert before == after

    def test_boolean_mask_rejected(self):
        mask = np.zeros(10, dtype=bool)
        mask[[2, 7]] = True

        with pytest.raises(ValueError, match="boolean mask"):
            evaluate_selection(mask, [2, 7])

    def test_float_indices_rejected(self):
        with pytest.raises(ValueError, match="integers"):
            evaluate_selection([2.7, 3.0], [2, 3])

    def test_negative_index_rejected(self):
        with pytest.raises(ValueError, match="non-negative"):
            evaluate_selection([-1, 2], [2, 3])

    def test_out_of_range_with_p(self):
        with pytest.raises(ValueError, match=r"\[0, 10\)"):
            evaluate_selection([3, 10], [2, 3], p=10)

        m = evaluate_selection([3, 9], [2, 3], p=10)
        assert (m.tp, m.fp, m.fn) == (1, 1, 1)

    def test_empty_list_with_p(self):
        m = evaluate_selection([], [], p=5)

        assert (m.tp, m.fp, m.fn, m.n_selected) == (0, 0, 0, 0)
