"""
Grid Engine — Backtest simulation engine for grid trading strategies.

Provides:
- Uniform and geometric grid ladders
- Per-level position state machine (spot and leveraged modes)
- Candle-by-candle simulation with fees, slippage and leverage
- Performance aggregation (return, win rate, drawdown, Sharpe ratio)
- Parallel parameter sweeps
- JSON/YAML report export and a camelCase request/response contract
"""

__version__ = "1.0.0"
