"""
Drawdown computation for equity and exposure series.

This module provides the peak-to-trough scan shared by per-backtest and
portfolio-level drawdown. It works on plain value sequences and has no notion
of time: callers must order the values chronologically before calling.

All functions handle empty sequences gracefully and return appropriate defaults.
"""

import logging
from collections.abc import Sequence

import numpy as np
from numpy.typing import NDArray


logger = logging.getLogger(__name__)


def compute_drawdown_curve(values: Sequence[float]) -> NDArray[np.float64]:
    """
    Compute the distance below the running peak at every point.

    The running peak starts at the first value and only moves up when a value
    exceeds it. All returned values are >= 0.

    Args:
        values: Ordered equity (or exposure) values.

    Returns:
        NumPy array of drawdown magnitudes, same length as ``values``.
        Returns empty array if no values provided.

    Examples:
        >>> compute_drawdown_curve([0.0, 10.0, 4.0, 12.0])
        array([0., 0., 6., 0.])
    """
    if len(values) == 0:
        return np.array([], dtype=np.float64)

    series = np.asarray(values, dtype=np.float64)

    # Track running maximum (peak equity)
    running_max = np.maximum.accumulate(series)

    return running_max - series


def compute_max_drawdown(values: Sequence[float]) -> float:
    """
    Compute the largest peak-to-trough decline of an ordered series.

    Args:
        values: Ordered equity (or exposure) values.

    Returns:
        Maximum drawdown magnitude (>= 0). Returns 0.0 for an empty or
        non-decreasing series.

    Examples:
        >>> compute_max_drawdown([])
        0.0
        >>> compute_max_drawdown([0, 10, 4, 12])
        6.0
        >>> compute_max_drawdown([100, 120, 90, 80, 150, 130, 200, 140])
        60.0
    """
    drawdown_curve = compute_drawdown_curve(values)

    if len(drawdown_curve) == 0:
        logger.debug("No values provided for max drawdown computation")
        return 0.0

    max_dd = float(np.max(drawdown_curve))

    logger.debug("Maximum drawdown: %.2f from %d points", max_dd, len(drawdown_curve))

    return max_dd
