"""
Per-level position state and fill decisions.

Each grid level holds one of three states: ``Flat``, ``Long`` or ``Short``.
Entry fields exist only on the non-flat states, so a flat level can never
carry a stale entry price or size. Spot runs use ``Long`` with a unit size
as their "holding" state and never open shorts.

Within a candle levels are visited in ascending price order, and each level
runs open-long, close-long, open-short, close-short, allowing at most one
open and one close per level.
"""

from dataclasses import dataclass
from typing import Union

from grid_engine.core.account import Account
from grid_engine.core.types import (
    FeeSchedule,
    GridMode,
    PositionSide,
    PriceBar,
    TradeRecord,
    TradeType,
)
from grid_engine.logging import get_logger

logger = get_logger(__name__)


# =============================================================================
# Position States
# =============================================================================


@dataclass(frozen=True)
class Flat:
    pass


@dataclass(frozen=True)
class Long:
    entry_price: float
    size: float


@dataclass(frozen=True)
class Short:
    entry_price: float
    size: float


FLAT = Flat()

LevelState = Union[Flat, Long, Short]


@dataclass
class GridLevel:
    """A ladder rung. Its price is fixed; only the simulation mutates its state."""

    index: int
    price: float
    state: LevelState = FLAT

    @property
    def is_flat(self) -> bool:
        return isinstance(self.state, Flat)


# =============================================================================
# Mode Rules
# =============================================================================


@dataclass(frozen=True)
class ModeRules:
    """What differs between spot and leveraged fills."""

    mode: GridMode
    fees: FeeSchedule
    capital_per_level: float
    allow_shorts: bool

    @classmethod
    def for_run(
        cls,
        mode: GridMode,
        fees: FeeSchedule,
        investment: float,
        leverage: float,
        grid_count: int,
    ) -> "ModeRules":
        if mode == GridMode.SPOT:
            return cls(mode=mode, fees=FeeSchedule.zero(), capital_per_level=0.0, allow_shorts=False)
        return cls(
            mode=mode,
            fees=fees,
            capital_per_level=(investment * leverage) / grid_count,
            allow_shorts=True,
        )

    def position_size(self, entry_price: float) -> float:
        if self.mode == GridMode.SPOT:
            return 1.0
        return self.capital_per_level / entry_price

    def committed_capital(self, entry_price: float) -> float:
        """Capital a position on one level represents."""
        if self.mode == GridMode.SPOT:
            return entry_price
        return self.capital_per_level

    def long_entry_triggered(self, level_price: float, bar: PriceBar) -> bool:
        if bar.low > level_price:
            return False
        if self.mode == GridMode.SPOT:
            return level_price <= bar.reference
        return level_price < bar.close

    def short_entry_triggered(self, level_price: float, bar: PriceBar) -> bool:
        return self.allow_shorts and bar.high >= level_price and level_price > bar.close


# =============================================================================
# State Machine
# =============================================================================


class LevelStateMachine:
    """Applies fill rules to every level of a ladder, one candle at a time."""

    def __init__(self, levels: list[GridLevel], rules: ModeRules, account: Account) -> None:
        self.levels = levels
        self.rules = rules
        self.account = account

    @classmethod
    def from_prices(
        cls, prices: tuple[float, ...], rules: ModeRules, account: Account,
    ) -> "LevelStateMachine":
        return cls([GridLevel(index=i, price=p) for i, p in enumerate(prices)], rules, account)

    @property
    def open_positions(self) -> int:
        return sum(1 for level in self.levels if not level.is_flat)

    def process(self, bar: PriceBar) -> list[TradeRecord]:
        """Run all level transitions for one candle and return the fills in order."""
        trades: list[TradeRecord] = []
        last = len(self.levels) - 1

        for i, level in enumerate(self.levels):
            opened = False
            closed = False

            if level.is_flat and self.rules.long_entry_triggered(level.price, bar):
                trades.append(self._open(level, PositionSide.LONG, bar))
                opened = True

            if i < last and isinstance(level.state, Long):
                next_price = self.levels[i + 1].price
                if bar.high >= next_price:
                    trades.append(self._close(level, next_price, bar))
                    closed = True

            if not opened and level.is_flat and self.rules.short_entry_triggered(level.price, bar):
                trades.append(self._open(level, PositionSide.SHORT, bar))
                opened = True

            if i > 0 and isinstance(level.state, Short) and not closed:
                prev_price = self.levels[i - 1].price
                if bar.low <= prev_price:
                    trades.append(self._close(level, prev_price, bar))
                    closed = True

        return trades

    # =========================================================================
    # Transitions
    # =========================================================================

    def _open(self, level: GridLevel, side: PositionSide, bar: PriceBar) -> TradeRecord:
        slippage = self.rules.fees.slippage
        if side == PositionSide.LONG:
            entry_price = level.price * (1 + slippage)
        else:
            entry_price = level.price * (1 - slippage)

        size = self.rules.position_size(entry_price)
        capital = self.rules.committed_capital(entry_price)
        fee = capital * self.rules.fees.taker_fee

        level.state = Long(entry_price, size) if side == PositionSide.LONG else Short(entry_price, size)
        self.account.charge_fee(fee)

        logger.debug(
            "Position opened",
            level=level.index,
            side=side.value,
            entry_price=entry_price,
            size=size,
            fee=fee,
        )

        return TradeRecord(
            time=bar.time,
            timestamp=bar.timestamp,
            price=entry_price,
            type=TradeType.BUY if side == PositionSide.LONG else TradeType.SELL,
            side=side,
            gross_profit=0.0,
            fees=fee,
            net_profit=-fee,
            balance_after=self.account.balance,
            level_index=level.index,
        )

    def _close(self, level: GridLevel, target_price: float, bar: PriceBar) -> TradeRecord:
        state = level.state
        slippage = self.rules.fees.slippage
        capital = self.rules.committed_capital(state.entry_price)

        if isinstance(state, Long):
            side = PositionSide.LONG
            exit_price = target_price * (1 - slippage)
            position_value = state.size * exit_price
            gross_profit = position_value - capital
        else:
            side = PositionSide.SHORT
            exit_price = target_price * (1 + slippage)
            position_value = state.size * exit_price
            gross_profit = capital - position_value

        fee = position_value * self.rules.fees.maker_fee
        net_profit = gross_profit - fee

        self.account.realize(net_profit, fee)
        level.state = FLAT

        logger.debug(
            "Position closed",
            level=level.index,
            side=side.value,
            exit_price=exit_price,
            net_profit=net_profit,
        )

        return TradeRecord(
            time=bar.time,
            timestamp=bar.timestamp,
            price=exit_price,
            type=TradeType.SELL if side == PositionSide.LONG else TradeType.BUY,
            side=side,
            gross_profit=gross_profit,
            fees=fee,
            net_profit=net_profit,
            balance_after=self.account.balance,
            level_index=level.index,
            return_pct=net_profit / capital * 100 if capital > 0 else 0.0,
        )
