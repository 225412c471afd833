"""
GridBacktestSimulator — Core grid backtest simulation loop.

Composes:
- GridLadder: level prices, fixed for the run
- LevelStateMachine: per-level fills, fees, slippage
- Account: balance and drawdown sampling at candle boundaries
- PerformanceAggregator / assemble_result: metrics and the result record

A run is synchronous and deterministic. Cancellation, when requested, is only
observed between candles.
"""

import threading
import time
from typing import Sequence

import pandas as pd

from grid_engine.core.account import Account
from grid_engine.core.levels import LevelStateMachine, ModeRules
from grid_engine.engine.assembler import assemble_result, empty_result
from grid_engine.engine.candles import candles_from_dataframe, validate_candles
from grid_engine.engine.metrics import PerformanceAggregator
from grid_engine.engine.models import (
    BacktestResult,
    Candle,
    EquityPoint,
    GridParameters,
    RunConfig,
)
from grid_engine.errors import BacktestCancelledError
from grid_engine.logging import get_logger

logger = get_logger(__name__)


class GridBacktestSimulator:
    """
    Runs a grid backtest over a candle series.

    Usage:
        grid = GridParameters(lower_price=90, upper_price=110, grid_count=10)
        simulator = GridBacktestSimulator(grid, RunConfig(investment_amount=10000, leverage=3))
        result = simulator.run(candles)
    """

    def __init__(
        self,
        grid: GridParameters,
        run: RunConfig | None = None,
        aggregator: PerformanceAggregator | None = None,
    ) -> None:
        self.grid = grid
        self.run_config = run or RunConfig()
        self.aggregator = aggregator or PerformanceAggregator()

    def validate(self) -> None:
        """Fail fast on invalid parameters, before any simulation step."""
        self.grid.validate()
        self.run_config.validate()

        if self.grid.grid_step is not None:
            expected = self.grid.uniform_step
            if abs(self.grid.grid_step - expected) > 1e-9 * max(1.0, abs(expected)):
                logger.warning(
                    "Supplied grid step differs from ladder step",
                    grid_step=self.grid.grid_step,
                    ladder_step=expected,
                )

    def run(
        self,
        candles: Sequence[Candle] | pd.DataFrame,
        cancel_event: threading.Event | None = None,
    ) -> BacktestResult:
        """Replay ``candles`` against the grid and return the result."""
        self.validate()

        if isinstance(candles, pd.DataFrame):
            candles = candles_from_dataframe(candles)

        mode = self.run_config.resolved_mode

        if len(candles) < 2:
            logger.warning(
                "Not enough candles, returning empty result",
                candles=len(candles),
                mode=mode.value,
            )
            return empty_result(self.grid, self.run_config)

        validate_candles(candles)

        start_time = time.perf_counter()
        logger.info(
            "Starting grid backtest",
            candles=len(candles),
            mode=mode.value,
            grid_count=self.grid.grid_count,
            spacing=self.grid.spacing.value,
            lower=self.grid.lower_price,
            upper=self.grid.upper_price,
            leverage=self.run_config.leverage,
        )

        account = Account(self.run_config.investment_amount, mode)
        rules = ModeRules.for_run(
            mode=mode,
            fees=self.run_config.fees,
            investment=self.run_config.investment_amount,
            leverage=self.run_config.leverage,
            grid_count=self.grid.grid_count,
        )
        machine = LevelStateMachine.from_prices(self.grid.ladder(), rules, account)

        trades = []
        equity_curve: list[EquityPoint] = []
        wick = self.run_config.missing_wick_pct
        reference = candles[0].price

        for idx, candle in enumerate(candles):
            if cancel_event is not None and cancel_event.is_set():
                logger.warning("Backtest cancelled", candles_processed=idx)
                raise BacktestCancelledError(idx)

            bar = candle.resolve(wick, reference)
            trades.extend(machine.process(bar))

            drawdown = account.sample()
            equity_curve.append(EquityPoint(
                time=candle.time,
                timestamp=candle.timestamp,
                price=candle.price,
                balance=account.balance,
                drawdown_pct=drawdown,
            ))
            reference = candle.price

        summary = self.aggregator.summarize(
            trades,
            investment=self.run_config.investment_amount,
            final_balance=account.balance,
            total_fees=account.total_fees,
            max_drawdown_pct=account.max_drawdown_pct,
        )

        logger.info(
            "Backtest completed",
            candles=len(candles),
            fills=len(trades),
            completed_trades=summary.completed_trades,
            return_pct=round(summary.total_return_pct, 4),
            max_drawdown=round(summary.max_drawdown_pct, 4),
            open_positions=machine.open_positions,
            duration_s=round(time.perf_counter() - start_time, 4),
        )

        return assemble_result(
            self.grid,
            self.run_config,
            trades,
            summary,
            final_balance=account.balance,
            open_positions=machine.open_positions,
            equity_curve=equity_curve,
        )


def run_backtest(
    candles: Sequence[Candle] | pd.DataFrame,
    grid: GridParameters,
    run: RunConfig | None = None,
    cancel_event: threading.Event | None = None,
) -> BacktestResult:
    """Run a single backtest."""
    return GridBacktestSimulator(grid, run).run(candles, cancel_event=cancel_event)
