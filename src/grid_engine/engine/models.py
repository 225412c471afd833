"""
Grid backtest data models — inputs, configs, results.

Defines:
- Candle input records
- Grid parameters and run configuration (with validation)
- Equity curve points
- The immutable backtest result
- Sweep objectives
"""

import math
import numbers
import operator
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from grid_engine.core.ladder import GridLadder, GridSpacing
from grid_engine.core.types import FeeSchedule, GridMode, PriceBar, TradeRecord
from grid_engine.errors import InvalidConfigurationError, InvalidRangeError
from grid_engine.settings import get_settings


# =============================================================================
# Enums
# =============================================================================


class SweepObjective(str, Enum):
    """Objective used to rank parameter sweep trials."""

    ROI = "roi"
    SHARPE = "sharpe"
    WIN_RATE = "win_rate"
    CALMAR = "calmar"


# =============================================================================
# Candles
# =============================================================================


@dataclass(frozen=True)
class Candle:
    """One price observation. ``high``/``low`` are optional."""

    time: int
    timestamp: str
    price: float
    high: float | None = None
    low: float | None = None

    def resolve(self, missing_wick_pct: float, reference: float) -> PriceBar:
        """Fill in a missing high/low as ``price * (1 +/- missing_wick_pct)``."""
        high = self.high if self.high is not None else self.price * (1 + missing_wick_pct)
        low = self.low if self.low is not None else self.price * (1 - missing_wick_pct)
        return PriceBar(
            time=self.time,
            timestamp=self.timestamp,
            close=self.price,
            high=high,
            low=low,
            reference=reference,
        )


# =============================================================================
# Configuration
# =============================================================================


@dataclass(frozen=True)
class PriceRange:
    lower: float
    upper: float

    def to_dict(self) -> dict[str, float]:
        return {"lower": self.lower, "upper": self.upper}


@dataclass(frozen=True)
class GridParameters:
    """Grid shape of a run."""

    lower_price: float
    upper_price: float
    grid_count: int
    spacing: GridSpacing = GridSpacing.UNIFORM
    # Optional uniform step supplied by the caller; echoed only
    grid_step: float | None = None
    profit_per_grid: float = 0.0

    def __post_init__(self) -> None:
        # Accept "geometric" and numpy integers from sweep ranges
        if not isinstance(self.spacing, GridSpacing) and self.spacing in {s.value for s in GridSpacing}:
            object.__setattr__(self, "spacing", GridSpacing(self.spacing))
        if isinstance(self.grid_count, numbers.Integral) and not isinstance(self.grid_count, bool):
            object.__setattr__(self, "grid_count", operator.index(self.grid_count))

    @property
    def price_range(self) -> PriceRange:
        return PriceRange(lower=self.lower_price, upper=self.upper_price)

    @property
    def uniform_step(self) -> float:
        return (self.upper_price - self.lower_price) / self.grid_count

    def validate(self) -> None:
        """Raises InvalidConfigurationError (InvalidRangeError for bounds)."""
        GridLadder.validate_bounds(self.lower_price, self.upper_price, self.grid_count)
        if not isinstance(self.spacing, GridSpacing):
            raise InvalidRangeError(f"Unknown spacing type: {self.spacing}")
        if self.grid_step is not None and not (math.isfinite(self.grid_step) and self.grid_step > 0):
            raise InvalidConfigurationError("grid_step must be positive")
        if not math.isfinite(self.profit_per_grid):
            raise InvalidConfigurationError("profit_per_grid must be finite")

    def ladder(self) -> tuple[float, ...]:
        return GridLadder.calculate_levels(
            self.lower_price, self.upper_price, self.grid_count, self.spacing,
        )


def _default_missing_wick_pct() -> float:
    return get_settings().missing_wick_pct


@dataclass(frozen=True)
class RunConfig:
    """Capital, leverage and execution costs of a run.

    ``mode`` defaults to spot for ``leverage == 1`` and leveraged otherwise.
    """

    investment_amount: float = 10000.0
    leverage: float = 1.0
    mode: GridMode | None = None
    fees: FeeSchedule = field(default_factory=FeeSchedule.from_settings)
    missing_wick_pct: float = field(default_factory=_default_missing_wick_pct)

    @property
    def resolved_mode(self) -> GridMode:
        if self.mode is not None:
            return GridMode(self.mode)
        return GridMode.SPOT if self.leverage == 1 else GridMode.LEVERAGED

    def validate(self) -> None:
        if not math.isfinite(self.investment_amount) or self.investment_amount <= 0:
            raise InvalidConfigurationError("investment_amount must be positive")
        if not math.isfinite(self.leverage) or self.leverage < 1:
            raise InvalidConfigurationError("leverage must be at least 1")
        if self.resolved_mode == GridMode.SPOT and self.leverage != 1:
            raise InvalidConfigurationError("spot mode does not support leverage")
        if not math.isfinite(self.missing_wick_pct) or not 0 <= self.missing_wick_pct < 1:
            raise InvalidConfigurationError("missing_wick_pct must be in [0, 1)")
        self.fees.validate()


# =============================================================================
# Equity Point
# =============================================================================


@dataclass(frozen=True)
class EquityPoint:
    """Account balance sampled at a candle boundary."""

    time: int
    timestamp: str
    price: float
    balance: float
    drawdown_pct: float = 0.0


# =============================================================================
# Backtest Result
# =============================================================================


@dataclass(frozen=True)
class BacktestResult:
    """Outcome of one run. Built once, never mutated."""

    trades: tuple[TradeRecord, ...] = ()
    total_trades: int = 0
    profitable_trades: int = 0
    total_profit: float = 0.0
    total_fees: float = 0.0
    total_return_pct: float = 0.0
    win_rate_pct: float = 0.0
    max_drawdown_pct: float = 0.0
    sharpe_ratio: float = 0.0

    # Echoed parameters
    grid_levels: int = 0
    price_range: PriceRange = PriceRange(0.0, 0.0)
    investment_amount: float = 0.0
    leverage: float = 1.0
    mode: GridMode = GridMode.SPOT
    spacing: GridSpacing = GridSpacing.UNIFORM
    profit_per_grid: float = 0.0

    # Run state
    final_balance: float = 0.0
    open_positions: int = 0
    candles_processed: int = 0
    equity_curve: tuple[EquityPoint, ...] = ()

    @property
    def completed_trades(self) -> list[TradeRecord]:
        return [t for t in self.trades if t.is_exit]

    def to_dict(self, include_series: bool = False) -> dict[str, Any]:
        """Convert to dictionary; trades and the equity curve only on request."""
        d: dict[str, Any] = {
            "total_trades": self.total_trades,
            "profitable_trades": self.profitable_trades,
            "total_profit": self.total_profit,
            "total_fees": self.total_fees,
            "total_return_pct": self.total_return_pct,
            "win_rate_pct": self.win_rate_pct,
            "max_drawdown_pct": self.max_drawdown_pct,
            "sharpe_ratio": self.sharpe_ratio,
            "grid_levels": self.grid_levels,
            "price_range": self.price_range.to_dict(),
            "investment_amount": self.investment_amount,
            "leverage": self.leverage,
            "mode": self.mode.value,
            "spacing": self.spacing.value,
            "profit_per_grid": self.profit_per_grid,
            "final_balance": self.final_balance,
            "open_positions": self.open_positions,
            "candles_processed": self.candles_processed,
        }
        if include_series:
            d["trades"] = [t.to_dict() for t in self.trades]
            d["equity_curve"] = [
                {
                    "time": p.time,
                    "timestamp": p.timestamp,
                    "price": p.price,
                    "balance": p.balance,
                    "drawdown_pct": p.drawdown_pct,
                }
                for p in self.equity_curve
            ]
        return d

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> "BacktestResult":
        """Rebuild a summary from ``to_dict()`` output.

        Note: trades and the equity curve are not restored.
        """
        price_range = d.get("price_range", {})
        return cls(
            total_trades=d.get("total_trades", 0),
            profitable_trades=d.get("profitable_trades", 0),
            total_profit=d.get("total_profit", 0.0),
            total_fees=d.get("total_fees", 0.0),
            total_return_pct=d.get("total_return_pct", 0.0),
            win_rate_pct=d.get("win_rate_pct", 0.0),
            max_drawdown_pct=d.get("max_drawdown_pct", 0.0),
            sharpe_ratio=d.get("sharpe_ratio", 0.0),
            grid_levels=d.get("grid_levels", 0),
            price_range=PriceRange(
                lower=price_range.get("lower", 0.0),
                upper=price_range.get("upper", 0.0),
            ),
            investment_amount=d.get("investment_amount", 0.0),
            leverage=d.get("leverage", 1.0),
            mode=GridMode(d.get("mode", GridMode.SPOT.value)),
            spacing=GridSpacing(d.get("spacing", GridSpacing.UNIFORM.value)),
            profit_per_grid=d.get("profit_per_grid", 0.0),
            final_balance=d.get("final_balance", 0.0),
            open_positions=d.get("open_positions", 0),
            candles_processed=d.get("candles_processed", 0),
        )
