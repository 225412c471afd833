"""Core grid components — ladder, level state machine, account, shared types."""

from grid_engine.core.account import Account
from grid_engine.core.ladder import GridLadder, GridSpacing, build_ladder
from grid_engine.core.levels import (
    FLAT,
    Flat,
    GridLevel,
    LevelState,
    LevelStateMachine,
    Long,
    ModeRules,
    Short,
)
from grid_engine.core.types import (
    FeeSchedule,
    GridMode,
    PositionSide,
    PriceBar,
    TradeRecord,
    TradeType,
)

__all__ = [
    "Account",
    "GridLadder",
    "GridSpacing",
    "build_ladder",
    "FLAT",
    "Flat",
    "GridLevel",
    "LevelState",
    "LevelStateMachine",
    "Long",
    "ModeRules",
    "Short",
    "FeeSchedule",
    "GridMode",
    "PositionSide",
    "PriceBar",
    "TradeRecord",
    "TradeType",
]
