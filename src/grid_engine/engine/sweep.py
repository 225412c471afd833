"""
GridParameterSweep — runs many independent backtests over one candle series.

Each trial owns its own ladder, account and trade log, so trials run either
sequentially or across a ProcessPoolExecutor without shared state.
"""

import itertools
import time
from concurrent.futures import ProcessPoolExecutor, as_completed
from dataclasses import dataclass, field, replace
from typing import Any, Iterable, Sequence

import numpy as np
import pandas as pd

from grid_engine.core.ladder import GridSpacing
from grid_engine.engine.candles import candles_from_dataframe
from grid_engine.engine.models import (
    BacktestResult,
    Candle,
    GridParameters,
    RunConfig,
    SweepObjective,
)
from grid_engine.engine.simulator import GridBacktestSimulator
from grid_engine.logging import get_logger, log_context
from grid_engine.settings import get_settings

logger = get_logger(__name__)


# =============================================================================
# Data Models
# =============================================================================


@dataclass
class SweepTrial:
    """Result of a single sweep trial."""

    trial_id: int
    grid: GridParameters
    run: RunConfig
    result: BacktestResult
    objective_value: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "trial_id": self.trial_id,
            "objective_value": round(self.objective_value, 6),
            **self.result.to_dict(),
        }


@dataclass
class SweepResult:
    """All trials of a sweep, ranked on demand."""

    objective: SweepObjective
    trials: list[SweepTrial] = field(default_factory=list)
    failed_trials: int = 0
    total_duration_seconds: float = 0.0

    @property
    def best_trial(self) -> SweepTrial | None:
        if not self.trials:
            return None
        return self.top_n(1)[0]

    def top_n(self, n: int = 5) -> list[SweepTrial]:
        """Top N trials by objective value, ties broken by trial id."""
        ranked = sorted(self.trials, key=lambda t: (-t.objective_value, t.trial_id))
        return ranked[:n]

    def param_impact(self) -> dict[str, float]:
        """Absolute correlation of each grid parameter with the objective."""
        if len(self.trials) < 2:
            return {}

        extractors = {
            "grid_count": lambda t: float(t.grid.grid_count),
            "range_width": lambda t: t.grid.upper_price - t.grid.lower_price,
            "leverage": lambda t: float(t.run.leverage),
        }
        objectives = np.array([t.objective_value for t in self.trials])

        impact: dict[str, float] = {}
        for name, extract in extractors.items():
            values = np.array([extract(t) for t in self.trials])
            if values.std() > 0 and objectives.std() > 0:
                corr = np.corrcoef(values, objectives)[0, 1]
                impact[name] = round(abs(float(corr)), 4)
            else:
                impact[name] = 0.0
        return impact


# =============================================================================
# Standalone trial runner (picklable for ProcessPoolExecutor)
# =============================================================================


def _run_single_trial(
    grid: GridParameters, run: RunConfig, candles: Sequence[Candle],
) -> BacktestResult:
    return GridBacktestSimulator(grid, run).run(candles)


def objective_value(result: BacktestResult, objective: SweepObjective) -> float:
    """Extract the ranking value from a result."""
    if objective == SweepObjective.ROI:
        return result.total_return_pct
    elif objective == SweepObjective.SHARPE:
        return result.sharpe_ratio
    elif objective == SweepObjective.WIN_RATE:
        return result.win_rate_pct
    elif objective == SweepObjective.CALMAR:
        if result.max_drawdown_pct > 0:
            return result.total_return_pct / result.max_drawdown_pct
        return result.total_return_pct
    return 0.0


def expand_grid(
    base: GridParameters,
    grid_counts: Iterable[int] | None = None,
    spacings: Iterable[GridSpacing] | None = None,
    bounds: Iterable[tuple[float, float]] | None = None,
) -> list[GridParameters]:
    """Cartesian product of candidate grid shapes around ``base``."""
    counts = list(grid_counts) if grid_counts is not None else [base.grid_count]
    spacing_values = list(spacings) if spacings is not None else [base.spacing]
    bound_values = list(bounds) if bounds is not None else [(base.lower_price, base.upper_price)]

    combos = []
    for count, spacing, (lower, upper) in itertools.product(counts, spacing_values, bound_values):
        combos.append(replace(
            base,
            grid_count=count,
            spacing=spacing,
            lower_price=lower,
            upper_price=upper,
            grid_step=None,
        ))
    return combos


# =============================================================================
# Sweep
# =============================================================================


class GridParameterSweep:
    """Parameter sweep with optional process-level parallelism."""

    def __init__(self, max_workers: int | None = None) -> None:
        if max_workers is None:
            max_workers = get_settings().sweep_max_workers
        self.max_workers = max_workers

    def run(
        self,
        candles: Sequence[Candle] | pd.DataFrame,
        grids: Sequence[GridParameters],
        run: RunConfig | Sequence[RunConfig] | None = None,
        objective: SweepObjective = SweepObjective.ROI,
    ) -> SweepResult:
        """Run every (grid, run config) pair and rank the results."""
        start_time = time.perf_counter()

        if isinstance(candles, pd.DataFrame):
            candles = candles_from_dataframe(candles)
        candles = list(candles)

        if run is None or isinstance(run, RunConfig):
            runs = [run or RunConfig()]
        else:
            runs = list(run)
        combos = list(itertools.product(grids, runs))

        logger.info(
            "Starting parameter sweep",
            trials=len(combos),
            objective=objective.value,
            max_workers=self.max_workers,
        )

        sweep = SweepResult(objective=objective)
        if self.max_workers and self.max_workers > 1 and len(combos) > 1:
            results = self._run_parallel(combos, candles)
        else:
            results = self._run_sequential(combos, candles)

        for trial_id, (grid, run_config) in enumerate(combos):
            result = results.get(trial_id)
            if result is None:
                sweep.failed_trials += 1
                continue
            sweep.trials.append(SweepTrial(
                trial_id=trial_id,
                grid=grid,
                run=run_config,
                result=result,
                objective_value=objective_value(result, objective),
            ))

        sweep.total_duration_seconds = time.perf_counter() - start_time
        best = sweep.best_trial

        logger.info(
            "Parameter sweep complete",
            successful=len(sweep.trials),
            failed=sweep.failed_trials,
            best_objective=round(best.objective_value, 4) if best else None,
            duration_s=round(sweep.total_duration_seconds, 2),
        )
        return sweep

    def _run_sequential(
        self,
        combos: list[tuple[GridParameters, RunConfig]],
        candles: list[Candle],
    ) -> dict[int, BacktestResult]:
        results: dict[int, BacktestResult] = {}
        for trial_id, (grid, run_config) in enumerate(combos):
            with log_context(trial_id=trial_id):
                try:
                    results[trial_id] = _run_single_trial(grid, run_config, candles)
                except ValueError as e:
                    logger.error("Trial failed", trial_id=trial_id, error=str(e))
        return results

    def _run_parallel(
        self,
        combos: list[tuple[GridParameters, RunConfig]],
        candles: list[Candle],
    ) -> dict[int, BacktestResult]:
        results: dict[int, BacktestResult] = {}
        with ProcessPoolExecutor(max_workers=self.max_workers) as executor:
            future_to_id = {
                executor.submit(_run_single_trial, grid, run_config, candles): trial_id
                for trial_id, (grid, run_config) in enumerate(combos)
            }
            for future in as_completed(future_to_id):
                trial_id = future_to_id[future]
                try:
                    results[trial_id] = future.result()
                except ValueError as e:
                    logger.error("Trial failed", trial_id=trial_id, error=str(e))
        return results
