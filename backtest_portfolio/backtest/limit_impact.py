"""
Concurrency limit impact analysis.

Re-runs the portfolio summary for each concurrency limit from 1 up to a
maximum, plus one unlimited run, so the trade-off between realized pnl and
risk can be compared across limits.
"""

import logging
from collections.abc import Sequence

from ..config.parameters import AggregationConfig
from ..models.metrics import BacktestMetrics, LimitImpactPoint, PortfolioSummary
from .summary import summarize_portfolio


logger = logging.getLogger(__name__)

UNLIMITED_LABEL = "∞"


def _to_point(label: str, limit: int | None, summary: PortfolioSummary) -> LimitImpactPoint:
    return LimitImpactPoint(
        label=label,
        limit=limit,
        total_pnl=summary.total_pnl,
        aggregate_drawdown=summary.aggregate_drawdown,
        max_concurrent_exposure=summary.max_concurrent_exposure,
        pnl_to_risk=summary.pnl_to_risk,
        total_deals=summary.total_deals,
        excluded_deals=summary.excluded_deals,
    )


def compute_limit_impact(
    metrics_list: Sequence[BacktestMetrics],
    max_limit: int | None = None,
    position_blocking: bool = False,
) -> list[LimitImpactPoint]:
    """
    Summarize the portfolio under every limit in ``1..max_limit`` and unlimited.

    Args:
        metrics_list: Metrics of every selected backtest.
        max_limit: Highest finite limit to evaluate; defaults to the number
            of backtests.
        position_blocking: Forwarded to every AggregationConfig.

    Returns:
        One LimitImpactPoint per finite limit in ascending order, followed by
        the unlimited point (label ``"∞"``, ``limit=None``). Empty when there
        are no backtests.
    """
    if not metrics_list:
        return []

    upper = max_limit if max_limit is not None else len(metrics_list)
    total_trades = sum(len(metrics.trades) for metrics in metrics_list)

    points: list[LimitImpactPoint] = []
    for limit in range(1, max(1, upper) + 1):
        config = AggregationConfig(
            max_concurrent_positions=limit, position_blocking=position_blocking
        )
        points.append(_to_point(str(limit), limit, summarize_portfolio(metrics_list, config)))

    unlimited = AggregationConfig(
        max_concurrent_positions=max(1, total_trades), position_blocking=position_blocking
    )
    points.append(
        _to_point(UNLIMITED_LABEL, None, summarize_portfolio(metrics_list, unlimited))
    )

    logger.info(
        "Limit impact computed for limits 1..%d plus unlimited (%d trades)",
        max(1, upper),
        total_trades,
    )
    return points
