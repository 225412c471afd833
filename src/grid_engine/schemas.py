"""
Pydantic schemas for the request/response contract of the calling application.

Payloads use camelCase keys (``lowerPrice``, ``gridCount``, ``investmentAmount``);
snake_case names are accepted as well. ``run_backtest_request`` is the single
entry point: it validates a payload, runs the engine and returns a camelCase
result dict.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from grid_engine.core.ladder import GridSpacing
from grid_engine.core.types import FeeSchedule, GridMode, PositionSide, TradeRecord, TradeType
from grid_engine.engine.models import BacktestResult, Candle, GridParameters, RunConfig
from grid_engine.engine.simulator import run_backtest
from grid_engine.settings import get_settings


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# =============================================================================
# Request
# =============================================================================


class CandleSchema(CamelModel):
    """One price observation"""

    time: int
    timestamp: str = ""
    price: float = Field(..., gt=0)
    high: float | None = Field(default=None, gt=0)
    low: float | None = Field(default=None, gt=0)

    def to_candle(self) -> Candle:
        return Candle(
            time=self.time,
            timestamp=self.timestamp,
            price=self.price,
            high=self.high,
            low=self.low,
        )


class GridConfigSchema(CamelModel):
    """Grid shape"""

    lower_price: float = Field(..., gt=0, description="Lowest ladder rung")
    upper_price: float = Field(..., gt=0, description="Highest ladder rung")
    grid_count: int = Field(..., ge=2, description="Number of intervals between rungs")
    spacing: float | None = Field(
        default=None,
        gt=0,
        description="Uniform step between rungs; echoed and checked against the bounds",
    )
    spacing_mode: GridSpacing = Field(default=GridSpacing.UNIFORM)
    profit_per_grid: float = Field(default=0.0, description="Echoed, not used in fill logic")

    @model_validator(mode="after")
    def validate_price_range(self) -> "GridConfigSchema":
        """Ensure upper price is greater than lower price"""
        if self.upper_price <= self.lower_price:
            raise ValueError("upperPrice must be greater than lowerPrice")
        return self

    def to_parameters(self) -> GridParameters:
        return GridParameters(
            lower_price=self.lower_price,
            upper_price=self.upper_price,
            grid_count=self.grid_count,
            spacing=self.spacing_mode,
            grid_step=self.spacing,
            profit_per_grid=self.profit_per_grid,
        )


class RunConfigSchema(CamelModel):
    """Capital and execution costs; unset costs fall back to engine settings"""

    investment_amount: float = Field(default=10000.0, gt=0)
    leverage: float = Field(default=1.0, ge=1, description="1 = spot")
    mode: GridMode | None = None
    maker_fee: float | None = Field(default=None, ge=0)
    taker_fee: float | None = Field(default=None, ge=0)
    slippage: float | None = Field(default=None, ge=0, lt=1)
    missing_wick_pct: float | None = Field(default=None, ge=0, lt=1)

    def to_run_config(self) -> RunConfig:
        settings = get_settings()
        fees = FeeSchedule(
            maker_fee=self.maker_fee if self.maker_fee is not None else settings.maker_fee,
            taker_fee=self.taker_fee if self.taker_fee is not None else settings.taker_fee,
            slippage=self.slippage if self.slippage is not None else settings.slippage,
        )
        return RunConfig(
            investment_amount=self.investment_amount,
            leverage=self.leverage,
            mode=self.mode,
            fees=fees,
            missing_wick_pct=(
                self.missing_wick_pct if self.missing_wick_pct is not None else settings.missing_wick_pct
            ),
        )


class BacktestRequest(CamelModel):
    candles: list[CandleSchema]
    grid_config: GridConfigSchema
    run_config: RunConfigSchema = Field(default_factory=RunConfigSchema)

    def to_engine(self) -> tuple[list[Candle], GridParameters, RunConfig]:
        return (
            [c.to_candle() for c in self.candles],
            self.grid_config.to_parameters(),
            self.run_config.to_run_config(),
        )


# =============================================================================
# Response
# =============================================================================


class PriceRangeSchema(CamelModel):
    lower: float
    upper: float


class TradeSchema(CamelModel):
    timestamp: str
    price: float
    type: Literal["BUY", "SELL"]
    side: Literal["LONG", "SHORT"]
    profit: float
    fees: float
    net_profit: float
    balance: float

    @classmethod
    def from_trade(cls, trade: TradeRecord) -> "TradeSchema":
        return cls(
            timestamp=trade.timestamp,
            price=trade.price,
            type="BUY" if trade.type == TradeType.BUY else "SELL",
            side="LONG" if trade.side == PositionSide.LONG else "SHORT",
            profit=trade.gross_profit,
            fees=trade.fees,
            net_profit=trade.net_profit,
            balance=trade.balance_after,
        )


class BacktestResponse(CamelModel):
    trades: list[TradeSchema]
    total_trades: int
    profitable_trades: int
    total_profit: float
    total_fees: float
    total_return: float
    win_rate: float
    max_drawdown: float
    sharpe_ratio: float
    grid_levels: int
    price_range: PriceRangeSchema
    investment_amount: float
    leverage: float

    @classmethod
    def from_result(cls, result: BacktestResult) -> "BacktestResponse":
        return cls(
            trades=[TradeSchema.from_trade(t) for t in result.trades],
            total_trades=result.total_trades,
            profitable_trades=result.profitable_trades,
            total_profit=result.total_profit,
            total_fees=result.total_fees,
            total_return=result.total_return_pct,
            win_rate=result.win_rate_pct,
            max_drawdown=result.max_drawdown_pct,
            sharpe_ratio=result.sharpe_ratio,
            grid_levels=result.grid_levels,
            price_range=PriceRangeSchema(
                lower=result.price_range.lower,
                upper=result.price_range.upper,
            ),
            investment_amount=result.investment_amount,
            leverage=result.leverage,
        )


def run_backtest_request(payload: dict[str, Any] | BacktestRequest) -> dict[str, Any]:
    """Validate a request payload, run the engine and return a camelCase result."""
    request = payload if isinstance(payload, BacktestRequest) else BacktestRequest.model_validate(payload)
    candles, grid, run = request.to_engine()
    result = run_backtest(candles, grid, run)
    return BacktestResponse.from_result(result).model_dump(by_alias=True)
