"""
GridLadder — Grid level price calculation.

Supports:
- Uniform grids (evenly spaced price levels)
- Geometric grids (constant ratio between consecutive levels)

A ladder for ``grid_count`` intervals always holds ``grid_count + 1`` strictly
increasing prices, with the first and last rung pinned to the configured
bounds.
"""

import math
import numbers
import operator
from enum import Enum

from grid_engine.errors import InvalidRangeError
from grid_engine.logging import get_logger

logger = get_logger(__name__)


class GridSpacing(str, Enum):
    """Grid spacing type."""

    UNIFORM = "uniform"
    GEOMETRIC = "geometric"


class GridLadder:
    """Builds the ordered price levels of a grid."""

    @staticmethod
    def validate_bounds(lower_price: float, upper_price: float, grid_count: int) -> int:
        """Raise InvalidRangeError unless the bounds describe a usable ladder; return the count as int."""
        if isinstance(grid_count, bool) or not isinstance(grid_count, numbers.Integral):
            raise InvalidRangeError(f"grid_count must be an integer, got {grid_count!r}")
        grid_count = operator.index(grid_count)
        if grid_count < 2:
            raise InvalidRangeError("grid_count must be at least 2")
        if not (math.isfinite(lower_price) and math.isfinite(upper_price)):
            raise InvalidRangeError("price bounds must be finite")
        if lower_price <= 0:
            raise InvalidRangeError("lower_price must be positive")
        if upper_price <= lower_price:
            raise InvalidRangeError("upper_price must be greater than lower_price")
        return grid_count

    @staticmethod
    def calculate_uniform_levels(
        lower_price: float,
        upper_price: float,
        grid_count: int,
    ) -> tuple[float, ...]:
        """Calculate evenly spaced grid levels."""
        grid_count = GridLadder.validate_bounds(lower_price, upper_price, grid_count)

        step = (upper_price - lower_price) / grid_count
        levels = [lower_price + step * i for i in range(grid_count)]
        levels.append(upper_price)
        return tuple(levels)

    @staticmethod
    def calculate_geometric_levels(
        lower_price: float,
        upper_price: float,
        grid_count: int,
    ) -> tuple[float, ...]:
        """Calculate ratio-based (geometric) grid levels."""
        grid_count = GridLadder.validate_bounds(lower_price, upper_price, grid_count)

        ratio = (upper_price / lower_price) ** (1.0 / grid_count)
        levels = [lower_price * ratio ** i for i in range(grid_count)]
        levels.append(upper_price)
        return tuple(levels)

    @staticmethod
    def calculate_levels(
        lower_price: float,
        upper_price: float,
        grid_count: int,
        spacing: GridSpacing = GridSpacing.UNIFORM,
    ) -> tuple[float, ...]:
        """Calculate grid levels using the specified spacing type."""
        if spacing == GridSpacing.UNIFORM:
            levels = GridLadder.calculate_uniform_levels(lower_price, upper_price, grid_count)
        elif spacing == GridSpacing.GEOMETRIC:
            levels = GridLadder.calculate_geometric_levels(lower_price, upper_price, grid_count)
        else:
            raise InvalidRangeError(f"Unknown spacing type: {spacing}")

        logger.debug(
            "Grid ladder calculated",
            spacing=GridSpacing(spacing).value,
            levels=len(levels),
            lower=lower_price,
            upper=upper_price,
        )
        return levels

    @staticmethod
    def level_step(levels: tuple[float, ...]) -> float:
        """Average absolute distance between consecutive levels."""
        if len(levels) < 2:
            return 0.0
        return (levels[-1] - levels[0]) / (len(levels) - 1)

    @staticmethod
    def spacing_pct(levels: tuple[float, ...]) -> list[float]:
        """Percentage gap between consecutive grid levels."""
        return [
            (levels[i] - levels[i - 1]) / levels[i - 1] * 100
            for i in range(1, len(levels))
        ]


def build_ladder(
    lower_price: float,
    upper_price: float,
    grid_count: int,
    spacing: GridSpacing = GridSpacing.UNIFORM,
) -> tuple[float, ...]:
    """Shortcut for ``GridLadder.calculate_levels``."""
    return GridLadder.calculate_levels(lower_price, upper_price, grid_count, spacing)
