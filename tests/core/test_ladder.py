"""Tests for GridLadder."""

import numpy as np
import pytest

from grid_engine.core.ladder import GridLadder, GridSpacing, build_ladder
from grid_engine.errors import InvalidConfigurationError, InvalidRangeError


class TestUniformLadder:

    def test_basic(self):
        levels = GridLadder.calculate_uniform_levels(40000.0, 50000.0, 5)
        assert len(levels) == 6
        assert levels[0] == 40000.0
        assert levels[-1] == 50000.0
        step = levels[1] - levels[0]
        for i in range(1, len(levels)):
            assert levels[i] - levels[i - 1] == pytest.approx(step)

    def test_strictly_increasing(self):
        levels = build_ladder(0.1, 0.13, 37)
        assert len(levels) == 38
        assert all(b > a for a, b in zip(levels, levels[1:]))

    def test_level_step(self):
        levels = build_ladder(90.0, 110.0, 10)
        assert GridLadder.level_step(levels) == pytest.approx(2.0)

    def test_ladder_is_immutable(self):
        levels = build_ladder(90.0, 110.0, 4)
        assert isinstance(levels, tuple)


class TestGeometricLadder:

    def test_basic(self):
        levels = GridLadder.calculate_geometric_levels(40000.0, 50000.0, 5)
        assert len(levels) == 6
        assert levels[0] == 40000.0
        assert levels[-1] == 50000.0

    def test_constant_ratio(self):
        levels = build_ladder(10.0, 80.0, 3, GridSpacing.GEOMETRIC)
        assert levels == pytest.approx((10.0, 20.0, 40.0, 80.0))
        ratios = [b / a for a, b in zip(levels, levels[1:])]
        for r in ratios:
            assert r == pytest.approx(ratios[0])

    def test_spacing_pct_constant(self):
        levels = build_ladder(100.0, 200.0, 8, GridSpacing.GEOMETRIC)
        pcts = GridLadder.spacing_pct(levels)
        assert len(pcts) == 8
        assert max(pcts) - min(pcts) == pytest.approx(0.0, abs=1e-9)


class TestLadderValidation:

    @pytest.mark.parametrize(
        "lower, upper, count",
        [
            (100.0, 100.0, 10),
            (110.0, 90.0, 10),
            (90.0, 110.0, 1),
            (0.0, 110.0, 10),
            (-5.0, 110.0, 10),
        ],
    )
    def test_invalid_range(self, lower, upper, count):
        with pytest.raises(InvalidRangeError):
            build_ladder(lower, upper, count)

    def test_range_error_is_configuration_error(self):
        with pytest.raises(InvalidConfigurationError):
            build_ladder(110.0, 90.0, 10)
        with pytest.raises(ValueError):
            build_ladder(110.0, 90.0, 10)

    def test_non_integer_count(self):
        with pytest.raises(InvalidRangeError):
            GridLadder.validate_bounds(90.0, 110.0, 2.5)

    def test_numpy_integer_count(self):
        levels = build_ladder(90.0, 110.0, np.int64(4))
        assert len(levels) == 5
        assert all(type(p) is float for p in levels)

    def test_bool_count_rejected(self):
        with pytest.raises(InvalidRangeError):
            GridLadder.validate_bounds(90.0, 110.0, True)

    def test_unknown_spacing(self):
        with pytest.raises(InvalidRangeError):
            GridLadder.calculate_levels(90.0, 110.0, 4, "fibonacci")
