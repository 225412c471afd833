"""
GridBacktestReporter — Report generation and result export.

Generates:
- Summary reports over several backtest results
- Sweep reports with parameter impact analysis
- JSON/YAML exports of a result with its echoed parameters
"""

import json
import math
from typing import Any

import yaml

from grid_engine.engine.metrics import PerformanceAggregator
from grid_engine.engine.models import BacktestResult
from grid_engine.engine.sweep import SweepResult
from grid_engine.logging import get_logger

logger = get_logger(__name__)


class GridBacktestReporter:
    """Generates reports and exports from backtest and sweep results."""

    def generate_summary(
        self,
        results: list[BacktestResult],
        top_n: int = 5,
    ) -> dict[str, Any]:
        """Generate summary report from multiple backtest results."""
        if not results:
            return {"results": [], "count": 0}

        by_return = sorted(results, key=lambda r: r.total_return_pct, reverse=True)
        by_sharpe = sorted(results, key=lambda r: r.sharpe_ratio, reverse=True)
        by_drawdown = sorted(results, key=lambda r: r.max_drawdown_pct)

        logger.info("Summary report generated", count=len(results))

        return {
            "count": len(results),
            "top_by_return": [r.to_dict() for r in by_return[:top_n]],
            "top_by_sharpe": [r.to_dict() for r in by_sharpe[:top_n]],
            "lowest_drawdown": [r.to_dict() for r in by_drawdown[:top_n]],
            "avg_return_pct": sum(r.total_return_pct for r in results) / len(results),
            "avg_sharpe": sum(r.sharpe_ratio for r in results) / len(results),
            "avg_drawdown_pct": sum(r.max_drawdown_pct for r in results) / len(results),
        }

    def generate_sweep_report(self, sweep: SweepResult, top_n: int = 5) -> dict[str, Any]:
        """Generate a sweep report with the best configuration and parameter impact."""
        report: dict[str, Any] = {
            "objective": sweep.objective.value,
            "total_trials": len(sweep.trials),
            "failed_trials": sweep.failed_trials,
            "duration_seconds": round(sweep.total_duration_seconds, 2),
        }

        best = sweep.best_trial
        if best:
            report["best_config"] = {
                "lower_price": best.grid.lower_price,
                "upper_price": best.grid.upper_price,
                "grid_count": best.grid.grid_count,
                "spacing": best.grid.spacing.value,
                "leverage": best.run.leverage,
                "objective_value": round(best.objective_value, 6),
            }
            report["best_result"] = best.result.to_dict()

        report["top"] = [t.to_dict() for t in sweep.top_n(top_n)]
        report["param_impact"] = sweep.param_impact()

        logger.info("Sweep report generated", total_trials=len(sweep.trials))
        return report

    def export_json(self, result: BacktestResult, include_trades: bool = False) -> str:
        """Export a result summary (optionally with trades) as JSON."""
        return json.dumps(self._build_export_dict(result, include_trades), indent=2)

    def export_yaml(self, result: BacktestResult, include_trades: bool = False) -> str:
        """Export a result summary (optionally with trades) as YAML."""
        return yaml.safe_dump(
            self._build_export_dict(result, include_trades),
            default_flow_style=False,
            sort_keys=False,
        )

    def _build_export_dict(self, result: BacktestResult, include_trades: bool) -> dict[str, Any]:
        export: dict[str, Any] = {
            "parameters": {
                "mode": result.mode.value,
                "grid_levels": result.grid_levels,
                "spacing": result.spacing.value,
                "price_range": result.price_range.to_dict(),
                "profit_per_grid": result.profit_per_grid,
                "investment_amount": result.investment_amount,
                "leverage": result.leverage,
            },
        }

        profit_factor = PerformanceAggregator.profit_factor(result.trades)
        export["metrics"] = {
            "total_trades": result.total_trades,
            "profitable_trades": result.profitable_trades,
            "total_profit": round(result.total_profit, 2),
            "total_fees": round(result.total_fees, 2),
            "total_return_pct": round(result.total_return_pct, 4),
            "win_rate_pct": round(result.win_rate_pct, 4),
            "max_drawdown_pct": round(result.max_drawdown_pct, 4),
            "sharpe_ratio": round(result.sharpe_ratio, 4),
            "profit_factor": round(profit_factor, 4) if math.isfinite(profit_factor) else None,
            "average_trade_profit": round(PerformanceAggregator.average_trade_profit(result.trades), 4),
            "final_balance": round(result.final_balance, 2),
            "open_positions": result.open_positions,
            "candles_processed": result.candles_processed,
        }

        if include_trades:
            export["trades"] = [t.to_dict() for t in result.trades]

        return export
