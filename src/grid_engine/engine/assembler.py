"""Result assembly — packages trades, metrics and echoed parameters."""

from typing import Sequence

from grid_engine.core.types import TradeRecord
from grid_engine.engine.metrics import PerformanceSummary
from grid_engine.engine.models import BacktestResult, EquityPoint, GridParameters, RunConfig


def assemble_result(
    grid: GridParameters,
    run: RunConfig,
    trades: Sequence[TradeRecord],
    summary: PerformanceSummary,
    final_balance: float,
    open_positions: int,
    equity_curve: Sequence[EquityPoint],
) -> BacktestResult:
    return BacktestResult(
        trades=tuple(trades),
        total_trades=summary.completed_trades,
        profitable_trades=summary.profitable_trades,
        total_profit=summary.total_profit,
        total_fees=summary.total_fees,
        total_return_pct=summary.total_return_pct,
        win_rate_pct=summary.win_rate_pct,
        max_drawdown_pct=summary.max_drawdown_pct,
        sharpe_ratio=summary.sharpe_ratio,
        grid_levels=grid.grid_count,
        price_range=grid.price_range,
        investment_amount=run.investment_amount,
        leverage=run.leverage,
        mode=run.resolved_mode,
        spacing=grid.spacing,
        profit_per_grid=grid.profit_per_grid,
        final_balance=final_balance,
        open_positions=open_positions,
        candles_processed=len(equity_curve),
        equity_curve=tuple(equity_curve),
    )


def empty_result(grid: GridParameters, run: RunConfig) -> BacktestResult:
    """All-zero result for series too short to simulate."""
    return BacktestResult(
        grid_levels=grid.grid_count,
        price_range=grid.price_range,
        investment_amount=run.investment_amount,
        leverage=run.leverage,
        mode=run.resolved_mode,
        spacing=grid.spacing,
        profit_per_grid=grid.profit_per_grid,
        final_balance=run.investment_amount,
    )
