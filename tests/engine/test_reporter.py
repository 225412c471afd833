"""Tests for GridBacktestReporter."""

import json

import pytest
import yaml

from grid_engine.engine.models import GridParameters, RunConfig
from grid_engine.engine.reporter import GridBacktestReporter
from grid_engine.engine.simulator import run_backtest
from grid_engine.engine.sweep import GridParameterSweep, expand_grid
from tests.conftest import make_path


@pytest.fixture
def reporter():
    return GridBacktestReporter()


@pytest.fixture
def spot_result():
    grid = GridParameters(lower_price=90.0, upper_price=110.0, grid_count=2)
    run = RunConfig(investment_amount=1000.0, missing_wick_pct=0.0)
    return run_backtest(make_path(100.0, 90.0, 110.0), grid, run)


class TestSummary:

    def test_empty(self, reporter):
        assert reporter.generate_summary([]) == {"results": [], "count": 0}

    def test_rankings(self, reporter, ranging_candles_200):
        results = [
            run_backtest(
                ranging_candles_200,
                GridParameters(lower_price=92.0, upper_price=108.0, grid_count=count),
                RunConfig(leverage=2.0),
            )
            for count in (4, 8, 12)
        ]
        summary = reporter.generate_summary(results, top_n=2)

        assert summary["count"] == 3
        assert len(summary["top_by_return"]) == 2
        returns = [r["total_return_pct"] for r in summary["top_by_return"]]
        assert returns == sorted(returns, reverse=True)
        drawdowns = [r["max_drawdown_pct"] for r in summary["lowest_drawdown"]]
        assert drawdowns == sorted(drawdowns)
        assert summary["avg_return_pct"] == pytest.approx(
            sum(r.total_return_pct for r in results) / 3
        )


class TestSweepReport:

    def test_report(self, reporter, ranging_candles_200):
        grids = expand_grid(
            GridParameters(lower_price=92.0, upper_price=108.0, grid_count=8), grid_counts=[4, 8],
        )
        sweep = GridParameterSweep(max_workers=1).run(ranging_candles_200, grids, RunConfig(leverage=2.0))
        report = reporter.generate_sweep_report(sweep, top_n=1)

        assert report["objective"] == "roi"
        assert report["total_trials"] == 2
        assert report["failed_trials"] == 0
        assert report["best_config"]["grid_count"] in (4, 8)
        assert report["best_config"]["spacing"] == "uniform"
        assert len(report["top"]) == 1
        assert "grid_count" in report["param_impact"]


class TestExport:

    def test_json(self, reporter, spot_result):
        data = json.loads(reporter.export_json(spot_result))
        assert data["parameters"]["mode"] == "spot"
        assert data["parameters"]["grid_levels"] == 2
        assert data["parameters"]["price_range"] == {"lower": 90.0, "upper": 110.0}
        assert data["metrics"]["total_trades"] == 2
        assert data["metrics"]["total_return_pct"] == 2.0
        # No losing exits
        assert data["metrics"]["profit_factor"] is None
        assert data["metrics"]["final_balance"] == 1020.0
        assert "trades" not in data

    def test_json_with_trades(self, reporter, spot_result):
        data = json.loads(reporter.export_json(spot_result, include_trades=True))
        assert len(data["trades"]) == 4
        assert data["trades"][-1]["balance_after"] == 1020.0

    def test_yaml(self, reporter, spot_result):
        data = yaml.safe_load(reporter.export_yaml(spot_result))
        assert data["parameters"]["leverage"] == 1.0
        assert data["metrics"]["win_rate_pct"] == 100.0
        assert data["metrics"]["candles_processed"] == 3
