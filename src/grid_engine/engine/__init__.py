"""Grid backtest engine — simulator, metrics, assembler, sweep, reporter."""

from grid_engine.engine.models import (
    BacktestResult,
    Candle,
    EquityPoint,
    GridParameters,
    PriceRange,
    RunConfig,
    SweepObjective,
)
from grid_engine.engine.candles import candles_from_dataframe, candles_from_records, validate_candles
from grid_engine.engine.metrics import PerformanceAggregator, PerformanceSummary
from grid_engine.engine.assembler import assemble_result, empty_result
from grid_engine.engine.simulator import GridBacktestSimulator, run_backtest
from grid_engine.engine.sweep import GridParameterSweep, SweepResult, SweepTrial, expand_grid
from grid_engine.engine.reporter import GridBacktestReporter

__all__ = [
    "BacktestResult",
    "Candle",
    "EquityPoint",
    "GridParameters",
    "PriceRange",
    "RunConfig",
    "SweepObjective",
    "candles_from_dataframe",
    "candles_from_records",
    "validate_candles",
    "PerformanceAggregator",
    "PerformanceSummary",
    "assemble_result",
    "empty_result",
    "GridBacktestSimulator",
    "run_backtest",
    "GridParameterSweep",
    "SweepResult",
    "SweepTrial",
    "expand_grid",
    "GridBacktestReporter",
]
