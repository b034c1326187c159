"""
Per-backtest metrics calculation.

This module computes the statistics of one backtest on its own, without any
portfolio concurrency limit: realized pnl and counts, trade durations,
excursions, the realized equity curve with its maximum drawdown, and the
calendar coverage (active intervals, trading days, downtime).
"""

import logging
from collections.abc import Iterable

from ..models.core import (
    MS_IN_DAY,
    BacktestInfo,
    Deal,
    EquityEvent,
    TimeInterval,
    day_index,
    id_sort_key,
)
from ..models.metrics import BacktestMetrics
from .drawdown import compute_drawdown_curve, compute_max_drawdown


logger = logging.getLogger(__name__)


def merge_intervals(intervals: Iterable[TimeInterval]) -> list[TimeInterval]:
    """
    Coalesce overlapping or touching spans into maximal disjoint spans.

    Args:
        intervals: Spans in any order.

    Returns:
        Sorted list of merged spans.

    Examples:
        >>> merge_intervals([TimeInterval(5, 8), TimeInterval(0, 3), TimeInterval(3, 4)])
        [TimeInterval(start=0, end=4), TimeInterval(start=5, end=8)]
    """
    merged: list[TimeInterval] = []
    for interval in sorted(intervals, key=lambda span: (span.start, span.end)):
        if merged and interval.start <= merged[-1].end:
            last = merged[-1]
            merged[-1] = TimeInterval(start=last.start, end=max(last.end, interval.end))
        else:
            merged.append(interval)
    return merged


def collect_active_days(deals: Iterable[Deal]) -> list[int]:
    """Return the sorted UTC day indices touched by any deal."""
    days: set[int] = set()
    for deal in deals:
        days.update(range(deal.start_day, deal.end_day + 1))
    return sorted(days)


def span_day_count(span_start: int, span_end: int) -> int:
    """
    Count the UTC calendar days covered by a span.

    Examples:
        >>> span_day_count(0, MS_IN_DAY)
        1
        >>> span_day_count(0, MS_IN_DAY + 1)
        2
    """
    if span_end <= span_start:
        return 1
    return day_index(span_end - 1) - day_index(span_start) + 1


def build_equity_events(deals: Iterable[Deal]) -> list[EquityEvent]:
    """
    Build the realized equity steps of closed deals ordered by close time.

    Ties on close time are broken by open time, then by deal id.
    """
    closed = sorted(
        (deal for deal in deals if deal.is_closed),
        key=lambda deal: (deal.end, deal.start, id_sort_key(deal.id)),
    )

    cumulative_values = [0.0]
    for deal in closed:
        cumulative_values.append(cumulative_values[-1] + deal.net)

    drawdowns = compute_drawdown_curve(cumulative_values)

    return [
        EquityEvent(
            time=deal.end,
            delta=deal.net,
            cumulative=cumulative_values[position],
            drawdown=float(drawdowns[position]),
        )
        for position, deal in enumerate(closed, start=1)
    ]


def _analysis_window(info: BacktestInfo) -> tuple[int, int] | None:
    """Return the configured span, or the deal coverage when none is set."""
    if info.span_start is not None and info.span_end is not None:
        return info.span_start, info.span_end
    if not info.deals:
        return None
    return (
        min(deal.start for deal in info.deals),
        max(deal.end for deal in info.deals),
    )


def compute_backtest_metrics(info: BacktestInfo) -> BacktestMetrics:
    """
    Compute limit-independent statistics for a single backtest.

    Args:
        info: Normalized backtest.

    Returns:
        BacktestMetrics for the backtest. A backtest without deals yields
        zeroed metrics with ``win_rate_percent`` set to None.

    Examples:
        >>> from backtest_portfolio.models.enums import DealStatus
        >>> info = BacktestInfo(id=1, name="demo", deals=(
        ...     Deal(id=1, backtest_id=1, start=0, end=10, status=DealStatus.FINISHED, net=10.0),
        ...     Deal(id=2, backtest_id=1, start=10, end=20, status=DealStatus.FINISHED, net=-6.0),
        ... ))
        >>> metrics = compute_backtest_metrics(info)
        >>> metrics.pnl, metrics.max_drawdown, metrics.win_rate_percent
        (4.0, 6.0, 50.0)
    """
    deals = info.deals
    closed = [deal for deal in deals if deal.is_closed]
    open_deals = [deal for deal in deals if not deal.is_closed]

    pnl = sum(deal.net for deal in closed)
    profits_count = sum(1 for deal in closed if deal.net >= 0)
    losses_count = len(closed) - profits_count
    win_rate = (profits_count / len(closed) * 100) if closed else None

    total_duration_days = sum(deal.duration_days for deal in deals)
    avg_duration_days = total_duration_days / len(deals) if deals else 0.0

    mae_values = [deal.mae_absolute for deal in deals]
    mfe_values = [deal.mfe_absolute for deal in deals]

    latest_open = max(
        open_deals,
        key=lambda deal: (deal.start, deal.end, id_sort_key(deal.id)),
        default=None,
    )

    equity_events = build_equity_events(deals)
    max_drawdown = compute_max_drawdown([0.0] + [event.cumulative for event in equity_events])

    intervals = merge_intervals(TimeInterval(deal.start, deal.end) for deal in deals)
    active_duration_ms = sum(interval.duration_ms for interval in intervals)
    active_days = collect_active_days(deals)

    window = _analysis_window(info)
    if window is None:
        window_days = 0
        period_days = 0.0
    else:
        window_days = span_day_count(*window)
        period_days = (window[1] - window[0]) / MS_IN_DAY

    metrics = BacktestMetrics(
        backtest_id=info.id,
        name=info.name,
        symbol=info.symbol,
        algorithm=info.algorithm,
        quote_currency=info.quote_currency,
        pnl=pnl,
        profits_count=profits_count,
        losses_count=losses_count,
        open_deals=len(open_deals),
        total_deals=len(deals),
        win_rate_percent=win_rate,
        total_trade_duration_days=total_duration_days,
        avg_trade_duration_days=avg_duration_days,
        avg_net_per_day=pnl / max(1.0, period_days),
        max_drawdown=max_drawdown,
        max_mae=max(mae_values, default=0.0),
        max_mfe=max(mfe_values, default=0.0),
        avg_mae=sum(mae_values) / len(mae_values) if mae_values else 0.0,
        avg_mfe=sum(mfe_values) / len(mfe_values) if mfe_values else 0.0,
        active_mae=latest_open.mae_absolute if latest_open is not None else 0.0,
        span_start=info.span_start,
        span_end=info.span_end,
        active_duration_ms=active_duration_ms,
        downtime_days=max(0, window_days - len(active_days)),
        trading_days=len(active_days),
        active_day_indices=tuple(active_days),
        concurrency_intervals=tuple(intervals),
        equity_events=tuple(equity_events),
        trades=tuple(deals),
    )

    logger.debug(
        "Backtest %s metrics: deals=%d pnl=%.2f max_dd=%.2f trading_days=%d",
        info.id,
        metrics.total_deals,
        metrics.pnl,
        metrics.max_drawdown,
        metrics.trading_days,
    )
    return metrics
