"""
Candle ingestion and validation.

Accepts pandas DataFrames (``price`` or ``close`` column, optional ``high``,
``low``, ``time``, ``timestamp``) and the camelCase record dicts used by the
calling application.
"""

import math
from typing import Any, Iterable, Sequence

import pandas as pd

from grid_engine.engine.models import Candle
from grid_engine.errors import InvalidCandleError


def _optional_float(value: Any) -> float | None:
    if value is None:
        return None
    value = float(value)
    if math.isnan(value):
        return None
    return value


def candles_from_dataframe(df: pd.DataFrame) -> list[Candle]:
    """Convert an OHLC(V) DataFrame into candles, front to back."""
    price_col = "price" if "price" in df.columns else "close"
    if price_col not in df.columns:
        raise ValueError("Missing columns: {'price' or 'close'}")

    has_high = "high" in df.columns
    has_low = "low" in df.columns
    has_time = "time" in df.columns
    has_timestamp = "timestamp" in df.columns

    candles = []
    for idx, row in enumerate(df.itertuples(index=False)):
        values = row._asdict()
        time = int(values["time"]) if has_time else idx
        timestamp = str(values["timestamp"]) if has_timestamp else f"candle_{idx}"
        candles.append(Candle(
            time=time,
            timestamp=timestamp,
            price=float(values[price_col]),
            high=_optional_float(values["high"]) if has_high else None,
            low=_optional_float(values["low"]) if has_low else None,
        ))
    return candles


def candles_from_records(records: Iterable[dict[str, Any]]) -> list[Candle]:
    """Convert ``{time, timestamp, price, high?, low?}`` dicts into candles."""
    candles = []
    for idx, record in enumerate(records):
        missing = {"time", "price"} - set(record)
        if missing:
            raise ValueError(f"Missing columns: {missing} in record {idx}")
        candles.append(Candle(
            time=int(record["time"]),
            timestamp=str(record.get("timestamp", f"candle_{idx}")),
            price=float(record["price"]),
            high=_optional_float(record.get("high")),
            low=_optional_float(record.get("low")),
        ))
    return candles


def validate_candles(candles: Sequence[Candle]) -> None:
    """Raise InvalidCandleError on unordered times or impossible prices."""
    prev_time: int | None = None
    for idx, candle in enumerate(candles):
        if prev_time is not None and candle.time <= prev_time:
            raise InvalidCandleError(
                f"Candle times must be strictly increasing (index {idx}: {candle.time} <= {prev_time})"
            )
        prev_time = candle.time

        if not math.isfinite(candle.price) or candle.price <= 0:
            raise InvalidCandleError(f"Candle {idx} has non-positive price {candle.price}")
        for name in ("high", "low"):
            value = getattr(candle, name)
            if value is not None and (not math.isfinite(value) or value <= 0):
                raise InvalidCandleError(f"Candle {idx} has invalid {name} {value}")
        if candle.high is not None and candle.low is not None and candle.high < candle.low:
            raise InvalidCandleError(f"Candle {idx} has high below low")
