"""
PerformanceAggregator — summary statistics over a trade log.

Completed trades are exits (SELL of a long, BUY of a short). The Sharpe
ratio is annualised with a fixed period count (252 by default) regardless of
the candle interval, so it is only a true annual figure for daily candles.
"""

import math
import statistics
from dataclasses import dataclass
from typing import Sequence

from grid_engine.core.types import TradeRecord
from grid_engine.settings import get_settings


@dataclass(frozen=True)
class PerformanceSummary:
    completed_trades: int
    profitable_trades: int
    total_profit: float
    total_fees: float
    total_return_pct: float
    win_rate_pct: float
    max_drawdown_pct: float
    sharpe_ratio: float


class PerformanceAggregator:
    """Turns a run's trade log and final account state into metrics."""

    def __init__(self, periods_per_year: int | None = None) -> None:
        if periods_per_year is None:
            periods_per_year = get_settings().sharpe_periods_per_year
        self.periods_per_year = periods_per_year

    def summarize(
        self,
        trades: Sequence[TradeRecord],
        investment: float,
        final_balance: float,
        total_fees: float,
        max_drawdown_pct: float,
    ) -> PerformanceSummary:
        exits = [t for t in trades if t.is_exit]
        profitable = sum(1 for t in exits if t.net_profit > 0)
        total_profit = final_balance - investment

        return PerformanceSummary(
            completed_trades=len(exits),
            profitable_trades=profitable,
            total_profit=total_profit,
            total_fees=total_fees,
            total_return_pct=self.total_return_pct(final_balance, investment),
            win_rate_pct=self.win_rate(profitable, len(exits)),
            max_drawdown_pct=max(max_drawdown_pct, 0.0),
            sharpe_ratio=self.sharpe_ratio([t.return_pct for t in exits]),
        )

    @staticmethod
    def total_return_pct(final_balance: float, investment: float) -> float:
        if investment <= 0:
            return 0.0
        return (final_balance - investment) / investment * 100

    @staticmethod
    def win_rate(profitable: int, completed: int) -> float:
        if completed == 0:
            return 0.0
        return min(max(profitable / completed * 100, 0.0), 100.0)

    def sharpe_ratio(self, returns: Sequence[float]) -> float:
        """mean / population stdev * sqrt(periods_per_year); 0 when undefined."""
        if not returns:
            return 0.0
        mean_ret = statistics.fmean(returns)
        std_ret = statistics.pstdev(returns, mu=mean_ret)
        if std_ret == 0 or not math.isfinite(std_ret):
            return 0.0
        return (mean_ret / std_ret) * math.sqrt(self.periods_per_year)

    @staticmethod
    def profit_factor(trades: Sequence[TradeRecord]) -> float:
        """Gross winning exits over gross losing exits."""
        exits = [t for t in trades if t.is_exit]
        gross_profit = sum(t.net_profit for t in exits if t.net_profit > 0)
        gross_loss = abs(sum(t.net_profit for t in exits if t.net_profit < 0))
        if gross_loss > 0:
            return gross_profit / gross_loss
        return float("inf") if gross_profit > 0 else 0.0

    @staticmethod
    def average_trade_profit(trades: Sequence[TradeRecord]) -> float:
        exits = [t for t in trades if t.is_exit]
        if not exits:
            return 0.0
        return sum(t.net_profit for t in exits) / len(exits)
