"""
Shared value types for the grid core — modes, trade enums, fee schedule,
trade records and the resolved per-candle price bar.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any

from grid_engine.errors import InvalidConfigurationError
from grid_engine.settings import get_settings


class GridMode(str, Enum):
    """Accounting mode of a run."""

    SPOT = "spot"
    LEVERAGED = "leveraged"


class TradeType(str, Enum):
    BUY = "buy"
    SELL = "sell"


class PositionSide(str, Enum):
    LONG = "long"
    SHORT = "short"


@dataclass(frozen=True)
class FeeSchedule:
    """Fee rates and slippage applied to every leveraged fill."""

    maker_fee: float = 0.0002
    taker_fee: float = 0.0004
    slippage: float = 0.0005

    @classmethod
    def from_settings(cls) -> "FeeSchedule":
        settings = get_settings()
        return cls(
            maker_fee=settings.maker_fee,
            taker_fee=settings.taker_fee,
            slippage=settings.slippage,
        )

    @classmethod
    def zero(cls) -> "FeeSchedule":
        return cls(maker_fee=0.0, taker_fee=0.0, slippage=0.0)

    def validate(self) -> None:
        """Raises InvalidConfigurationError on negative or non-finite rates."""
        for name in ("maker_fee", "taker_fee", "slippage"):
            value = getattr(self, name)
            if not math.isfinite(value) or value < 0:
                raise InvalidConfigurationError(f"{name} must be a non-negative number")
        if self.slippage >= 1:
            raise InvalidConfigurationError("slippage must be below 1")


@dataclass(frozen=True)
class TradeRecord:
    """Single fill. Entries and exits are both recorded."""

    time: int
    timestamp: str
    price: float
    type: TradeType
    side: PositionSide
    gross_profit: float
    fees: float
    net_profit: float
    balance_after: float
    level_index: int
    return_pct: float = 0.0

    @property
    def is_exit(self) -> bool:
        """Exits close a position: SELL of a long or BUY of a short."""
        if self.side == PositionSide.LONG:
            return self.type == TradeType.SELL
        return self.type == TradeType.BUY

    def to_dict(self) -> dict[str, Any]:
        return {
            "time": self.time,
            "timestamp": self.timestamp,
            "price": self.price,
            "type": self.type.value,
            "side": self.side.value,
            "gross_profit": self.gross_profit,
            "fees": self.fees,
            "net_profit": self.net_profit,
            "balance_after": self.balance_after,
            "level_index": self.level_index,
            "return_pct": self.return_pct,
        }


@dataclass(frozen=True)
class PriceBar:
    """Resolved prices of one candle as seen by the level state machine.

    ``reference`` is the close of the previous candle (the candle's own close
    for the first one); spot entries require price to come down onto a level.
    A first candle closing exactly on a level therefore buys that level on
    the first candle rather than waiting for the next down-move.
    """

    time: int
    timestamp: str
    close: float
    high: float
    low: float
    reference: float
