import numpy as np
import pytest

from knocklasso import cli
from knocklasso.config import QUICK_PARAMS, resolve_params
from knocklasso.data import generate_data
from knocklasso.lasso import LassoTrialRunner
from knocklasso.simulation import build_knockoff_runner, run_simulation

from conftest import RandomSubsetSelector


class TestRunSimulation:

    def test_end_to_end(self, small_params, capsys):
        result = run_simulation(small_params, selector=RandomSubsetSelector())

        assert result.figure_path.exists()
        assert result.data.X.shape == (120, 40)
        assert result.knockoffs.n_trials == 3
        assert len(result.knockoffs.power) == 5
        assert "Method comparison" in capsys.readouterr().out

    def test_reproducible(self, small_params):
        a = run_simulation(small_params, selector=RandomSubsetSelector(), plot=False, report=False)
        b = run_simulation(small_params, selector=RandomSubsetSelector(), plot=False, report=False)

        assert a.figure_path is None
        np.testing.assert_array_equal(a.data.X, b.data.X)
        assert a.lasso.metrics == b.lasso.metrics
        assert a.lasso.alpha == b.lasso.alpha
        np.testing.assert_array_equal(a.knockoffs.power, b.knockoffs.power)

    def test_invalid_params_fail_before_running(self, small_params):
        small_params['k'] = 100

        with pytest.raises(ValueError, match="k must be"):
            run_simulation(small_params, selector=RandomSubsetSelector())

    def test_runner_built_from_params(self, small_params):
        small_params.update({'n_jobs': 2, 'skip_failed_trials': True, 'knockoff_seed': 7})
        runner = build_knockoff_runner(resolve_params(small_params))

        assert runner.n_trials == 3
        assert runner.n_jobs == 2
        assert runner.skip_failed
        assert runner.seed == 7
        assert runner.selector.method == 'mvr'


@pytest.mark.slow
class TestReferenceRun:
    """n=500, p=1000, rho=0.4, k=50, seeds 2022 and 123, 10 knockoff trials."""

    @staticmethod
    def generate(params):
        return generate_data(
            n=params['n'], p=params['p'], rho=params['rho'], k=params['k'],
            covariate_seed=params['covariate_seed'],
            coefficient_seed=params['coefficient_seed'],
        )

    @pytest.fixture(scope="class")
    def reference(self):
        params = resolve_params()
        return params, self.generate(params)

    def test_lasso_reproducible(self, reference):
        params, data = reference
        runner = LassoTrialRunner(cv=params['cv_folds'], standardize=params['lasso_standardize'])

        a = runner.run(data)
        b = runner.run(self.generate(params))

        assert data.X.shape == (500, 1000)
        assert len(data.true_support) == 50
        assert a.alpha == b.alpha
        np.testing.assert_array_equal(a.selected, b.selected)
        assert a.metrics == b.metrics
        assert a.metrics.tp + a.metrics.fn == 50
        assert a.metrics.tp + a.metrics.fp == a.metrics.n_selected == len(a.selected)

    def test_knockoff_fdr_near_target(self, reference):
        pytest.importorskip("knockpy")
        params, data = reference
        runner = build_knockoff_runner(params, show_progress=False)

        agg = runner.run(data)

        assert agg.n_trials == 10
        _, fdr, _ = agg.at_level(0.10)
        assert 0.0 <= fdr <= 0.25


class TestCli:

    def test_defaults(self):
        args = cli.parse_args([])

        assert args.config is None
        assert args.n_trials is None
        assert not args.quick

    def test_quick_overrides(self, monkeypatch, tmp_path):
        captured = {}
        monkeypatch.setattr(cli, 'run_simulation', lambda params: captured.update(params))

        out = tmp_path / 'quick.png'
        assert cli.main(['--quick', '-o', str(out), '--n-trials', '3', '--seed', '5']) == 0

        assert captured['p'] == QUICK_PARAMS['p']
        assert captured['n_trials'] == 3
        assert captured['knockoff_seed'] == 5
        assert captured['output_path'] == str(out)
