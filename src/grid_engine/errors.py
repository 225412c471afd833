"""Exceptions raised by the grid backtest engine"""


class GridEngineError(Exception):
    """Base exception for all grid engine errors"""

    pass


class InvalidConfigurationError(GridEngineError, ValueError):
    """Raised when grid or run parameters are invalid"""

    pass


class InvalidRangeError(InvalidConfigurationError):
    """Raised when ladder bounds or grid count are invalid"""

    pass


class InvalidCandleError(GridEngineError, ValueError):
    """Raised when the candle series is malformed"""

    pass


class BacktestCancelledError(GridEngineError):
    """Raised when a run is cancelled at a candle boundary"""

    def __init__(self, candles_processed: int) -> None:
        super().__init__(f"Backtest cancelled after {candles_processed} candles")
        self.candles_processed = candles_processed
