"""Tests for GridParameterSweep."""

import numpy as np
import pytest

from grid_engine.core.ladder import GridSpacing
from grid_engine.engine.models import BacktestResult, GridParameters, RunConfig, SweepObjective
from grid_engine.engine.simulator import run_backtest
from grid_engine.engine.sweep import GridParameterSweep, SweepResult, expand_grid, objective_value

BASE = GridParameters(lower_price=92.0, upper_price=108.0, grid_count=8)


class TestExpandGrid:

    def test_cartesian_product(self):
        grids = expand_grid(
            BASE,
            grid_counts=[5, 10],
            spacings=[GridSpacing.UNIFORM, GridSpacing.GEOMETRIC],
            bounds=[(90.0, 110.0), (95.0, 105.0)],
        )
        assert len(grids) == 8
        assert {g.grid_count for g in grids} == {5, 10}
        assert {(g.lower_price, g.upper_price) for g in grids} == {(90.0, 110.0), (95.0, 105.0)}

    def test_defaults_to_base(self):
        assert expand_grid(BASE) == [BASE]

    def test_resets_grid_step(self):
        base = GridParameters(lower_price=90.0, upper_price=110.0, grid_count=4, grid_step=5.0)
        grids = expand_grid(base, grid_counts=[2])
        assert grids[0].grid_step is None


class TestObjective:

    def test_values(self):
        result = BacktestResult(total_return_pct=6.0, sharpe_ratio=1.5, win_rate_pct=70.0, max_drawdown_pct=2.0)
        assert objective_value(result, SweepObjective.ROI) == 6.0
        assert objective_value(result, SweepObjective.SHARPE) == 1.5
        assert objective_value(result, SweepObjective.WIN_RATE) == 70.0
        assert objective_value(result, SweepObjective.CALMAR) == 3.0

    def test_calmar_without_drawdown(self):
        result = BacktestResult(total_return_pct=4.0)
        assert objective_value(result, SweepObjective.CALMAR) == 4.0


class TestSweep:

    def test_sequential(self, ranging_candles_200):
        grids = expand_grid(BASE, grid_counts=[4, 8, 12])
        sweep = GridParameterSweep(max_workers=1).run(
            ranging_candles_200, grids, RunConfig(investment_amount=10000.0, leverage=2.0),
        )

        assert len(sweep.trials) == 3
        assert sweep.failed_trials == 0
        assert sweep.best_trial is not None
        values = [t.objective_value for t in sweep.top_n(3)]
        assert values == sorted(values, reverse=True)

    def test_trials_match_single_runs(self, ranging_candles_200):
        run = RunConfig(investment_amount=10000.0, leverage=2.0)
        grids = expand_grid(BASE, grid_counts=[4, 8])
        sweep = GridParameterSweep(max_workers=1).run(ranging_candles_200, grids, run)

        for trial in sweep.trials:
            assert trial.result == run_backtest(ranging_candles_200, trial.grid, run)

    def test_parallel_matches_sequential(self, ranging_candles_200):
        grids = expand_grid(BASE, grid_counts=[4, 8], spacings=[GridSpacing.UNIFORM, GridSpacing.GEOMETRIC])
        runs = [RunConfig(leverage=1.0), RunConfig(leverage=3.0)]

        sequential = GridParameterSweep(max_workers=1).run(ranging_candles_200, grids, runs)
        parallel = GridParameterSweep(max_workers=2).run(ranging_candles_200, grids, runs)

        assert len(sequential.trials) == len(parallel.trials) == 8
        for a, b in zip(sequential.trials, parallel.trials):
            assert a.trial_id == b.trial_id
            assert a.result == b.result

    def test_numpy_grid_counts(self, ranging_candles_200):
        grids = expand_grid(BASE, grid_counts=np.arange(4, 12, 4))
        sweep = GridParameterSweep(max_workers=1).run(
            ranging_candles_200, grids, RunConfig(leverage=2.0),
        )
        assert sweep.failed_trials == 0
        assert [t.grid.grid_count for t in sweep.trials] == [4, 8]
        assert all(type(t.result.grid_levels) is int for t in sweep.trials)

    def test_failed_trials_are_counted(self, ranging_candles_200):
        grids = [BASE, GridParameters(lower_price=110.0, upper_price=90.0, grid_count=8)]
        sweep = GridParameterSweep(max_workers=1).run(ranging_candles_200, grids)
        assert len(sweep.trials) == 1
        assert sweep.failed_trials == 1

    def test_param_impact(self, ranging_candles_200):
        grids = expand_grid(BASE, grid_counts=[4, 8, 16])
        sweep = GridParameterSweep(max_workers=1).run(
            ranging_candles_200, grids, RunConfig(leverage=2.0),
        )
        impact = sweep.param_impact()
        assert set(impact) == {"grid_count", "range_width", "leverage"}
        assert impact["range_width"] == 0.0
        assert impact["leverage"] == 0.0
        assert 0.0 <= impact["grid_count"] <= 1.0


class TestSweepResult:

    def test_empty(self):
        sweep = SweepResult(objective=SweepObjective.ROI)
        assert sweep.best_trial is None
        assert sweep.top_n() == []
        assert sweep.param_impact() == {}

    def test_ties_broken_by_trial_id(self, ranging_candles_200):
        flat = GridParameters(lower_price=500.0, upper_price=600.0, grid_count=4)
        sweep = GridParameterSweep(max_workers=1).run(ranging_candles_200, [flat, flat, flat])
        assert [t.trial_id for t in sweep.top_n(3)] == [0, 1, 2]
        assert sweep.best_trial.objective_value == pytest.approx(0.0)
