"""
Portfolio summarization across backtests.

This module folds per-backtest metrics and one concurrency sweep over the
union of their deals into a PortfolioSummary. Realized totals, counts and
series come from the sweep, so they only reflect admitted deals; drawdown
is reported twice: as the mean of the backtests' own drawdowns and as the
drawdown of the merged portfolio equity curve.
"""

import logging
import math
from collections.abc import Sequence

import numpy as np

from ..config.parameters import AggregationConfig
from ..models.core import MS_IN_DAY, ChartPoint, Deal, day_index, id_sort_key
from ..models.metrics import (
    BacktestMetrics,
    DailyConcurrency,
    DailyConcurrencyRecord,
    DailyConcurrencyStats,
    PortfolioEquitySeries,
    PortfolioSummary,
    SweepResult,
)
from .drawdown import compute_max_drawdown
from .sweep import run_interval_sweep


logger = logging.getLogger(__name__)


def build_portfolio_equity(
    used_deals: Sequence[Deal], span_starts: Sequence[int] = ()
) -> PortfolioEquitySeries:
    """
    Build the realized equity curve of the admitted deals.

    The curve starts at 0 on the earliest of the span starts and admitted
    deal starts, then steps by each closed deal's net in close order (ties
    broken by open time, then deal id; backtest id only separates equal deal
    ids).

    Args:
        used_deals: Deals admitted by the sweep.
        span_starts: Configured period starts of the aggregated backtests.

    Returns:
        PortfolioEquitySeries; empty when there is nothing to anchor it on.

    Examples:
        >>> from backtest_portfolio.models.enums import DealStatus
        >>> series = build_portfolio_equity([
        ...     Deal(id=1, backtest_id="A", start=0, end=10, status=DealStatus.FINISHED, net=100.0),
        ...     Deal(id=1, backtest_id="B", start=2, end=12, status=DealStatus.FINISHED, net=-40.0),
        ... ])
        >>> [(point.time, point.value) for point in series.points]
        [(0, 0.0), (10, 100.0), (12, 60.0)]
    """
    anchors = list(span_starts) + [deal.start for deal in used_deals]
    if not anchors:
        return PortfolioEquitySeries()

    closed = sorted(
        (deal for deal in used_deals if deal.is_closed),
        key=lambda deal: (
            deal.end,
            deal.start,
            id_sort_key(deal.id),
            id_sort_key(deal.backtest_id),
        ),
    )

    points = [ChartPoint(time=min(anchors), value=0.0)]
    running = 0.0
    for deal in closed:
        running += deal.net
        points.append(ChartPoint(time=deal.end, value=running))

    values = [point.value for point in points]
    return PortfolioEquitySeries(
        points=tuple(points),
        min_value=min(values),
        max_value=max(values),
    )


def compute_percentile(values: Sequence[float], percentile: float) -> float:
    """
    Linear-interpolated percentile; 0.0 for an empty sequence.

    Examples:
        >>> compute_percentile([1, 2, 3, 4], 75)
        3.25
        >>> compute_percentile([], 90)
        0.0
    """
    if len(values) == 0:
        return 0.0
    return float(np.percentile(np.asarray(values, dtype=np.float64), percentile))


def compute_daily_concurrency(active_count_series: Sequence[ChartPoint]) -> DailyConcurrency:
    """
    Bucket an active-count step series into UTC calendar days.

    Each sample holds its count until the next sample. Only days with a
    non-zero count for some positive duration produce a record.

    Args:
        active_count_series: Active-set size per time point, time ascending.

    Returns:
        DailyConcurrency with per-day records and percentile statistics of the
        per-day maxima.
    """
    buckets: dict[int, list[float]] = {}

    for current, following in zip(active_count_series, active_count_series[1:]):
        count = int(current.value)
        if count <= 0 or following.time <= current.time:
            continue

        segment_start = current.time
        while segment_start < following.time:
            day = day_index(segment_start)
            segment_end = min(following.time, (day + 1) * MS_IN_DAY)
            duration = segment_end - segment_start
            # [active_ms, weighted_sum, max_count]
            bucket = buckets.setdefault(day, [0, 0.0, 0])
            bucket[0] += duration
            bucket[1] += duration * count
            bucket[2] = max(bucket[2], count)
            segment_start = segment_end

    records = tuple(
        DailyConcurrencyRecord(
            day_index=day,
            day_start_ms=day * MS_IN_DAY,
            active_duration_ms=int(active_ms),
            max_count=int(max_count),
            avg_active_count=weighted / active_ms,
        )
        for day, (active_ms, weighted, max_count) in sorted(buckets.items())
    )

    if not records:
        return DailyConcurrency()

    maxima = [record.max_count for record in records]
    p75 = compute_percentile(maxima, 75)
    p90 = compute_percentile(maxima, 90)
    p95 = compute_percentile(maxima, 95)

    stats = DailyConcurrencyStats(
        mean_max=sum(maxima) / len(maxima),
        p75=p75,
        p90=p90,
        p95=p95,
        limit_p75=math.ceil(p75),
        limit_p90=math.ceil(p90),
        limit_p95=math.ceil(p95),
    )
    return DailyConcurrency(records=records, stats=stats)


def compute_average_concurrency(active_count_series: Sequence[ChartPoint]) -> float:
    """Time-weighted mean active count between the first and last samples."""
    if len(active_count_series) < 2:
        return 0.0

    total_ms = active_count_series[-1].time - active_count_series[0].time
    if total_ms <= 0:
        return 0.0

    weighted = sum(
        current.value * (following.time - current.time)
        for current, following in zip(active_count_series, active_count_series[1:])
    )
    return weighted / total_ms


def _configured_spans(metrics_list: Sequence[BacktestMetrics]) -> list[tuple[int, int]]:
    return [
        (metrics.span_start, metrics.span_end)
        for metrics in metrics_list
        if metrics.span_start is not None and metrics.span_end is not None
    ]


def _deal_coverage(metrics_list: Sequence[BacktestMetrics]) -> list[tuple[int, int]]:
    trades = [deal for metrics in metrics_list for deal in metrics.trades]
    if not trades:
        return []
    return [(min(deal.start for deal in trades), max(deal.end for deal in trades))]


def count_no_trade_days(
    metrics_list: Sequence[BacktestMetrics], daily: DailyConcurrency
) -> int:
    """
    Count calendar days inside the analysis window with no admitted deal open.

    The window is the union of the configured spans, or the deal coverage when
    no backtest has a span.
    """
    windows = _configured_spans(metrics_list) or _deal_coverage(metrics_list)

    window_days: set[int] = set()
    for start, end in windows:
        last = end - 1 if end > start else end
        window_days.update(range(day_index(start), day_index(last) + 1))

    active_days = {record.day_index for record in daily.records if record.max_count > 0}
    return len(window_days - active_days)


def _period_days(metrics_list: Sequence[BacktestMetrics]) -> float:
    windows = _configured_spans(metrics_list) or _deal_coverage(metrics_list)
    if not windows:
        return 0.0
    start = min(window[0] for window in windows)
    end = max(window[1] for window in windows)
    return (end - start) / MS_IN_DAY


def summarize_portfolio(
    metrics_list: Sequence[BacktestMetrics],
    config: AggregationConfig | None = None,
) -> PortfolioSummary:
    """
    Aggregate per-backtest metrics into a portfolio summary.

    Args:
        metrics_list: Metrics of every selected backtest.
        config: Aggregation settings; defaults to AggregationConfig().

    Returns:
        PortfolioSummary. An empty ``metrics_list`` yields a zeroed summary
        with ``win_rate_percent`` set to None.
    """
    if config is None:
        config = AggregationConfig()

    all_trades = [deal for metrics in metrics_list for deal in metrics.trades]
    sweep: SweepResult = run_interval_sweep(all_trades, config)

    span_starts = [start for start, _ in _configured_spans(metrics_list)]
    equity = build_portfolio_equity(sweep.used_deals, span_starts)
    aggregate_drawdown = compute_max_drawdown(equity.values)

    drawdowns = [metrics.max_drawdown for metrics in metrics_list]
    avg_max_drawdown = sum(drawdowns) / len(drawdowns) if drawdowns else 0.0

    daily = compute_daily_concurrency(sweep.active_count_series)

    total_deals = sweep.total_deals
    total_pnl = sweep.total_pnl
    used_duration_days = sum(deal.duration_days for deal in sweep.used_deals)
    risk_base = max(1.0, max(sweep.max_concurrent_exposure, aggregate_drawdown))

    summary = PortfolioSummary(
        total_backtests=len(metrics_list),
        total_pnl=total_pnl,
        total_profits=sweep.profitable_deals,
        total_losses=sweep.losing_deals,
        open_deals=sweep.open_deals,
        total_deals=total_deals,
        excluded_deals=len(sweep.excluded_deals),
        avg_pnl_per_deal=total_pnl / total_deals if total_deals else 0.0,
        avg_pnl_per_backtest=total_pnl / len(metrics_list) if metrics_list else 0.0,
        avg_net_per_day=total_pnl / max(1.0, _period_days(metrics_list)),
        avg_trade_duration_days=(
            used_duration_days / len(sweep.used_deals) if sweep.used_deals else 0.0
        ),
        win_rate_percent=(
            sweep.profitable_deals / total_deals * 100 if total_deals else None
        ),
        avg_max_drawdown=avg_max_drawdown,
        aggregate_drawdown=aggregate_drawdown,
        open_exposure=sweep.open_exposure,
        max_concurrent_exposure=sweep.max_concurrent_exposure,
        pnl_to_risk=total_pnl / risk_base,
        max_concurrent=sweep.max_concurrent_positions,
        avg_concurrent=compute_average_concurrency(sweep.active_count_series),
        total_idle_days=sweep.idle_time_ms / MS_IN_DAY,
        no_trade_days=count_no_trade_days(metrics_list, daily),
        daily_concurrency=daily,
        portfolio_equity=equity,
        pnl_series=sweep.pnl_series,
        exposure_series=sweep.exposure_series,
        active_count_series=sweep.active_count_series,
        timeline_rows=sweep.timeline_rows,
        config=config,
    )

    logger.info(
        "Portfolio summary: backtests=%d deals=%d excluded=%d pnl=%.2f "
        "aggregate_dd=%.2f max_concurrent=%d",
        summary.total_backtests,
        summary.total_deals,
        summary.excluded_deals,
        summary.total_pnl,
        summary.aggregate_drawdown,
        summary.max_concurrent,
    )
    return summary
