"""
Engine configuration using pydantic-settings.

Values are read from ``GRID_ENGINE_*`` environment variables (or a ``.env``
file) and provide the defaults for fee schedules, candle handling, Sharpe
annualisation, logging and parameter sweeps.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings


class EngineSettings(BaseSettings):
    """Grid engine defaults."""

    # Binance futures fee structure
    maker_fee: float = Field(default=0.0002, ge=0)
    taker_fee: float = Field(default=0.0004, ge=0)
    slippage: float = Field(default=0.0005, ge=0, lt=1)

    # Candles without high/low use close * (1 +/- missing_wick_pct)
    missing_wick_pct: float = Field(default=0.0, ge=0, lt=1)

    # Sharpe annualisation, independent of the candle interval
    sharpe_periods_per_year: int = Field(default=252, gt=0)

    # Logging
    log_level: str = "INFO"
    json_logs: bool = False

    # Parameter sweeps
    sweep_max_workers: int | None = None

    model_config = {"env_prefix": "GRID_ENGINE_", "env_file": ".env", "extra": "ignore"}


@lru_cache
def get_settings() -> EngineSettings:
    """Return the process-wide settings instance."""
    return EngineSettings()
