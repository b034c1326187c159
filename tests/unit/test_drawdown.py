"""
Unit tests for drawdown computation.

Tests compute_max_drawdown and compute_drawdown_curve on empty, monotonic
and mixed series.
"""

import numpy as np
import pytest

from backtest_portfolio.backtest.drawdown import (
    compute_drawdown_curve,
    compute_max_drawdown,
)


pytestmark = pytest.mark.unit


class TestComputeMaxDrawdown:
    """Test cases for compute_max_drawdown."""

    def test_empty_series_returns_zero(self):
        """Empty input has no drawdown."""
        assert compute_max_drawdown([]) == 0.0

    def test_non_decreasing_series_returns_zero(self):
        """A series that never falls has zero drawdown."""
        assert compute_max_drawdown([0, 1, 1, 5, 9]) == 0.0

    def test_single_dip(self):
        """[0, 10, 4, 12] falls 6 below its peak of 10."""
        assert compute_max_drawdown([0, 10, 4, 12]) == pytest.approx(6.0)

    def test_largest_of_several_dips(self):
        """The deepest decline from the running peak wins."""
        values = [100, 120, 90, 80, 150, 130, 200, 140]
        assert compute_max_drawdown(values) == pytest.approx(60.0)

    def test_losses_from_start(self):
        """Decline from the first value counts as drawdown."""
        assert compute_max_drawdown([0, -5, -12, -3]) == pytest.approx(12.0)

    def test_result_is_never_negative(self):
        """Drawdown is a magnitude."""
        assert compute_max_drawdown([3.0, 7.5, 11.0]) >= 0.0


class TestComputeDrawdownCurve:
    """Test cases for compute_drawdown_curve."""

    def test_empty_series(self):
        """Empty input gives an empty array."""
        curve = compute_drawdown_curve([])
        assert isinstance(curve, np.ndarray)
        assert len(curve) == 0

    def test_distance_below_peak(self):
        """Each element is the gap to the highest value seen so far."""
        curve = compute_drawdown_curve([0.0, 10.0, 4.0, 12.0, 7.0])
        np.testing.assert_allclose(curve, [0.0, 0.0, 6.0, 0.0, 5.0])

    def test_curve_max_matches_max_drawdown(self):
        """The curve's maximum equals compute_max_drawdown."""
        values = [100, 120, 90, 80, 150, 130, 200, 140]
        assert float(compute_drawdown_curve(values).max()) == compute_max_drawdown(values)
