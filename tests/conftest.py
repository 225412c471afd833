"""Shared test fixtures and helpers for grid engine tests."""

import numpy as np
import pandas as pd
import pytest

from grid_engine.engine.models import Candle


def make_candles(
    n: int = 100,
    start_price: float = 100.0,
    volatility: float = 0.01,
    seed: int = 42,
) -> pd.DataFrame:
    """Generate synthetic candles (time, timestamp, price, high, low)."""
    rng = np.random.RandomState(seed)
    prices = [start_price]
    for _ in range(n - 1):
        change = rng.normal(0, volatility)
        prices.append(prices[-1] * (1 + change))

    rows = []
    for i, close in enumerate(prices):
        high = close * (1 + abs(rng.normal(0, volatility / 2)))
        low = close * (1 - abs(rng.normal(0, volatility / 2)))
        rows.append({
            "time": 1_700_000_000 + i * 86400,
            "timestamp": f"2025-01-{i:04d}",
            "price": close,
            "high": high,
            "low": low,
        })

    return pd.DataFrame(rows)


def make_ranging_candles(
    n: int = 100,
    center: float = 100.0,
    spread: float = 5.0,
    seed: int = 42,
) -> pd.DataFrame:
    """Generate candles oscillating within a range (ideal for grid)."""
    rng = np.random.RandomState(seed)
    rows = []
    prev_close = center

    for i in range(n):
        target = center + rng.uniform(-spread, spread)
        close = prev_close + (target - prev_close) * 0.3
        high = max(close, prev_close) + abs(rng.normal(0, spread * 0.1))
        low = min(close, prev_close) - abs(rng.normal(0, spread * 0.1))

        rows.append({
            "time": 1_700_000_000 + i * 3600,
            "timestamp": f"2025-01-01T{i:04d}",
            "price": close,
            "high": high,
            "low": low,
        })
        prev_close = close

    return pd.DataFrame(rows)


def make_path(*bars: float | tuple[float, float, float]) -> list[Candle]:
    """Build candles from closes or (close, high, low) tuples, one time unit apart."""
    candles = []
    for i, bar in enumerate(bars):
        if isinstance(bar, tuple):
            price, high, low = bar
        else:
            price, high, low = bar, None, None
        candles.append(Candle(time=i + 1, timestamp=f"t{i + 1}", price=price, high=high, low=low))
    return candles


@pytest.fixture
def candles_100():
    return make_candles(n=100)


@pytest.fixture
def ranging_candles_200():
    return make_ranging_candles(n=200, center=100.0, spread=8.0)
