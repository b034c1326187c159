"""
Output formatters for portfolio aggregation results.

This module formats portfolio summaries, per-backtest metrics and limit impact
points into human-readable text and JSON, and exports the deal admission
timeline as a pandas DataFrame / CSV file. JSON keys are emitted in a fixed
order so that repeated runs over the same input produce identical bytes.
"""

import json
import logging
import math
from collections.abc import Sequence
from datetime import UTC, datetime
from pathlib import Path

import pandas as pd

from ..models.core import ChartPoint, DealTimelineRow
from ..models.enums import OutputFormat
from ..models.metrics import BacktestMetrics, LimitImpactPoint, PortfolioSummary


logger = logging.getLogger(__name__)

SCHEMA_VERSION = "1.0.0"

TIMELINE_COLUMNS = [
    "backtest_id",
    "backtest_name",
    "quote_currency",
    "deal_id",
    "status",
    "start",
    "end",
    "start_utc",
    "end_utc",
    "net",
    "limited_by_concurrency",
]


def generate_output_filename(
    command: str, output_format: OutputFormat, timestamp: datetime
) -> str:
    """
    Generate standardized filename for a report.

    Produces filenames in the format:
    portfolio_{command}_{YYYYMMDD}_{HHMMSS}.{ext}

    Args:
        command: CLI command that produced the report.
        output_format: Output format (TEXT/JSON).
        timestamp: Timestamp to use for filename generation.

    Returns:
        Formatted filename string.

    Examples:
        >>> ts = datetime(2025, 1, 15, 14, 30, 45, tzinfo=UTC)
        >>> generate_output_filename("summarize", OutputFormat.TEXT, ts)
        'portfolio_summarize_20250115_143045.txt'
        >>> generate_output_filename("limit-impact", OutputFormat.JSON, ts)
        'portfolio_limit_impact_20250115_143045.json'
    """
    command_str = command.lower().replace("-", "_")
    ext = "json" if output_format == OutputFormat.JSON else "txt"

    filename = f"portfolio_{command_str}_{timestamp:%Y%m%d}_{timestamp:%H%M%S}.{ext}"
    logger.debug("Generated filename: %s", filename)

    return filename


def _clean(value):
    """Convert NaN/Inf to None for JSON serialization."""
    if isinstance(value, float) and (math.isnan(value) or math.isinf(value)):
        return None
    return value


def _format_ms(timestamp_ms: int | None) -> str:
    if timestamp_ms is None:
        return "-"
    return datetime.fromtimestamp(timestamp_ms / 1000, tz=UTC).strftime("%Y-%m-%d %H:%M")


def _format_rate(value: float | None) -> str:
    return "n/a" if value is None else f"{value:.2f}%"


def format_text_output(
    summary: PortfolioSummary, metrics_list: Sequence[BacktestMetrics]
) -> str:
    """
    Format a portfolio summary as a human-readable text report.

    The report has a configuration block, the portfolio totals, risk and
    concurrency figures, and one line per backtest.

    Args:
        summary: Portfolio summary to format.
        metrics_list: Per-backtest metrics that produced the summary.

    Returns:
        Formatted text string.
    """
    lines = []
    lines.append("=" * 60)
    lines.append("PORTFOLIO SUMMARY")
    lines.append("=" * 60)
    lines.append("")

    lines.append("CONFIGURATION")
    lines.append("-" * 60)
    lines.append(f"Max Concurrent:   {summary.config.max_concurrent_positions}")
    lines.append(f"Position Block:   {'on' if summary.config.position_blocking else 'off'}")
    lines.append(f"Backtests:        {summary.total_backtests}")
    lines.append("")

    lines.append("RESULTS")
    lines.append("-" * 60)
    lines.append(f"Total PnL:        {summary.total_pnl:.2f}")
    lines.append(f"Deals:            {summary.total_deals}")
    lines.append(f"  Profitable:     {summary.total_profits}")
    lines.append(f"  Losing:         {summary.total_losses}")
    lines.append(f"  Open:           {summary.open_deals}")
    lines.append(f"Excluded:         {summary.excluded_deals}")
    lines.append(f"Win Rate:         {_format_rate(summary.win_rate_percent)}")
    lines.append(f"Avg PnL/Deal:     {summary.avg_pnl_per_deal:.2f}")
    lines.append(f"Avg PnL/Backtest: {summary.avg_pnl_per_backtest:.2f}")
    lines.append(f"Avg Net/Day:      {summary.avg_net_per_day:.2f}")
    lines.append(f"Avg Duration:     {summary.avg_trade_duration_days:.2f} days")
    lines.append("")

    lines.append("RISK")
    lines.append("-" * 60)
    lines.append(f"Aggregate DD:     {summary.aggregate_drawdown:.2f}")
    lines.append(f"Avg Max DD:       {summary.avg_max_drawdown:.2f}")
    lines.append(f"Max Exposure:     {summary.max_concurrent_exposure:.2f}")
    lines.append(f"Open Exposure:    {summary.open_exposure:.2f}")
    lines.append(f"PnL/Risk:         {summary.pnl_to_risk:.2f}")
    lines.append("")

    stats = summary.daily_concurrency.stats
    lines.append("CONCURRENCY")
    lines.append("-" * 60)
    lines.append(f"Max Concurrent:   {summary.max_concurrent}")
    lines.append(f"Avg Concurrent:   {summary.avg_concurrent:.2f}")
    lines.append(f"Idle Days:        {summary.total_idle_days:.2f}")
    lines.append(f"No-Trade Days:    {summary.no_trade_days}")
    lines.append(
        f"Daily Max P75/P90/P95: {stats.p75:.2f} / {stats.p90:.2f} / {stats.p95:.2f}"
    )
    lines.append("")

    if metrics_list:
        lines.append("BACKTESTS")
        lines.append("-" * 60)
        for metrics in metrics_list:
            lines.append(
                f"  {metrics.backtest_id} {metrics.name or '(unnamed)'} "
                f"[{metrics.symbol or '-'}]: pnl={metrics.pnl:.2f} "
                f"deals={metrics.total_deals} dd={metrics.max_drawdown:.2f} "
                f"win={_format_rate(metrics.win_rate_percent)}"
            )
        lines.append("")

    lines.append("=" * 60)

    return "\n".join(lines)


def _points_to_list(points: Sequence[ChartPoint]) -> list[list]:
    return [[point.time, _clean(point.value)] for point in points]


def _metrics_to_dict(metrics: BacktestMetrics) -> dict:
    """Convert BacktestMetrics to dict with NaN handling."""
    return {
        "backtest_id": metrics.backtest_id,
        "name": metrics.name,
        "symbol": metrics.symbol,
        "algorithm": metrics.algorithm,
        "quote_currency": metrics.quote_currency,
        "pnl": _clean(metrics.pnl),
        "profits_count": metrics.profits_count,
        "losses_count": metrics.losses_count,
        "open_deals": metrics.open_deals,
        "total_deals": metrics.total_deals,
        "win_rate_percent": _clean(metrics.win_rate_percent),
        "total_trade_duration_days": _clean(metrics.total_trade_duration_days),
        "avg_trade_duration_days": _clean(metrics.avg_trade_duration_days),
        "avg_net_per_day": _clean(metrics.avg_net_per_day),
        "max_drawdown": _clean(metrics.max_drawdown),
        "max_mae": _clean(metrics.max_mae),
        "max_mfe": _clean(metrics.max_mfe),
        "avg_mae": _clean(metrics.avg_mae),
        "avg_mfe": _clean(metrics.avg_mfe),
        "active_mae": _clean(metrics.active_mae),
        "span_start": metrics.span_start,
        "span_end": metrics.span_end,
        "active_duration_ms": metrics.active_duration_ms,
        "downtime_days": metrics.downtime_days,
        "trading_days": metrics.trading_days,
    }


def summary_to_dict(summary: PortfolioSummary) -> dict:
    """Convert PortfolioSummary to a JSON-ready dict in fixed key order."""
    stats = summary.daily_concurrency.stats
    return {
        "total_backtests": summary.total_backtests,
        "total_pnl": _clean(summary.total_pnl),
        "total_profits": summary.total_profits,
        "total_losses": summary.total_losses,
        "open_deals": summary.open_deals,
        "total_deals": summary.total_deals,
        "excluded_deals": summary.excluded_deals,
        "avg_pnl_per_deal": _clean(summary.avg_pnl_per_deal),
        "avg_pnl_per_backtest": _clean(summary.avg_pnl_per_backtest),
        "avg_net_per_day": _clean(summary.avg_net_per_day),
        "avg_trade_duration_days": _clean(summary.avg_trade_duration_days),
        "win_rate_percent": _clean(summary.win_rate_percent),
        "avg_max_drawdown": _clean(summary.avg_max_drawdown),
        "aggregate_drawdown": _clean(summary.aggregate_drawdown),
        "open_exposure": _clean(summary.open_exposure),
        "max_concurrent_exposure": _clean(summary.max_concurrent_exposure),
        "pnl_to_risk": _clean(summary.pnl_to_risk),
        "max_concurrent": summary.max_concurrent,
        "avg_concurrent": _clean(summary.avg_concurrent),
        "total_idle_days": _clean(summary.total_idle_days),
        "no_trade_days": summary.no_trade_days,
        "daily_concurrency": {
            "stats": {
                "mean_max": _clean(stats.mean_max),
                "p75": _clean(stats.p75),
                "p90": _clean(stats.p90),
                "p95": _clean(stats.p95),
                "limit_p75": stats.limit_p75,
                "limit_p90": stats.limit_p90,
                "limit_p95": stats.limit_p95,
            },
            "records": [
                {
                    "day_index": record.day_index,
                    "day_start_ms": record.day_start_ms,
                    "active_duration_ms": record.active_duration_ms,
                    "max_count": record.max_count,
                    "avg_active_count": _clean(record.avg_active_count),
                }
                for record in summary.daily_concurrency.records
            ],
        },
        "portfolio_equity": {
            "min_value": _clean(summary.portfolio_equity.min_value),
            "max_value": _clean(summary.portfolio_equity.max_value),
            "points": _points_to_list(summary.portfolio_equity.points),
        },
        "pnl_series": _points_to_list(summary.pnl_series),
        "exposure_series": _points_to_list(summary.exposure_series),
        "active_count_series": _points_to_list(summary.active_count_series),
    }


def format_json_output(
    summary: PortfolioSummary, metrics_list: Sequence[BacktestMetrics]
) -> str:
    """
    Format a portfolio summary as JSON.

    Args:
        summary: Portfolio summary to format.
        metrics_list: Per-backtest metrics that produced the summary.

    Returns:
        Pretty-printed JSON string with a ``schema_version`` field.

    Examples:
        >>> from backtest_portfolio.backtest.summary import summarize_portfolio
        >>> data = json.loads(format_json_output(summarize_portfolio([]), []))
        >>> data["schema_version"], data["backtests"]
        ('1.0.0', [])
    """
    data = {
        "schema_version": SCHEMA_VERSION,
        "config": {
            "max_concurrent_positions": summary.config.max_concurrent_positions,
            "position_blocking": summary.config.position_blocking,
        },
        "summary": summary_to_dict(summary),
        "backtests": [_metrics_to_dict(metrics) for metrics in metrics_list],
    }

    return json.dumps(data, indent=2, ensure_ascii=False)


def format_limit_impact_text(points: Sequence[LimitImpactPoint]) -> str:
    """Format limit impact points as a text table."""
    lines = [
        "=" * 80,
        "CONCURRENCY LIMIT IMPACT",
        "=" * 80,
        "",
        f"{'Limit':>6} {'PnL':>12} {'Aggr DD':>12} {'Max Exp':>12} "
        f"{'PnL/Risk':>10} {'Deals':>7} {'Excl':>7}",
        "-" * 80,
    ]
    for point in points:
        lines.append(
            f"{point.label:>6} {point.total_pnl:>12.2f} {point.aggregate_drawdown:>12.2f} "
            f"{point.max_concurrent_exposure:>12.2f} {point.pnl_to_risk:>10.2f} "
            f"{point.total_deals:>7} {point.excluded_deals:>7}"
        )
    if not points:
        lines.append("(No backtests)")
    lines.append("=" * 80)

    return "\n".join(lines)


def format_limit_impact_json(points: Sequence[LimitImpactPoint]) -> str:
    """Format limit impact points as JSON."""
    data = {
        "schema_version": SCHEMA_VERSION,
        "points": [
            {
                "label": point.label,
                "limit": point.limit,
                "total_pnl": _clean(point.total_pnl),
                "aggregate_drawdown": _clean(point.aggregate_drawdown),
                "max_concurrent_exposure": _clean(point.max_concurrent_exposure),
                "pnl_to_risk": _clean(point.pnl_to_risk),
                "total_deals": point.total_deals,
                "excluded_deals": point.excluded_deals,
            }
            for point in points
        ],
    }

    return json.dumps(data, indent=2, ensure_ascii=False)


def timeline_to_frame(rows: Sequence[DealTimelineRow]) -> pd.DataFrame:
    """
    Flatten the admission timeline into a DataFrame.

    One row per deal, grouped by backtest in timeline order. ``start`` and
    ``end`` keep the epoch milliseconds; ``start_utc`` / ``end_utc`` are
    timezone-aware timestamps.

    Args:
        rows: Timeline rows from a sweep or portfolio summary.

    Returns:
        DataFrame with the TIMELINE_COLUMNS columns.
    """
    records = [
        {
            "backtest_id": row.backtest_id,
            "backtest_name": row.backtest_name,
            "quote_currency": row.quote_currency,
            "deal_id": item.deal_id,
            "status": item.status.value,
            "start": item.start,
            "end": item.end,
            "net": item.net,
            "limited_by_concurrency": item.limited_by_concurrency,
        }
        for row in rows
        for item in row.items
    ]

    frame = pd.DataFrame.from_records(records, columns=[
        column for column in TIMELINE_COLUMNS if column not in ("start_utc", "end_utc")
    ])
    frame["start_utc"] = pd.to_datetime(frame["start"].astype("int64"), unit="ms", utc=True)
    frame["end_utc"] = pd.to_datetime(frame["end"].astype("int64"), unit="ms", utc=True)

    return frame[TIMELINE_COLUMNS]


def write_timeline_csv(rows: Sequence[DealTimelineRow], path: Path) -> Path:
    """
    Write the admission timeline to a CSV file.

    Args:
        rows: Timeline rows to export.
        path: Destination file; parent directories are created.

    Returns:
        The written path.
    """
    frame = timeline_to_frame(rows)
    path.parent.mkdir(parents=True, exist_ok=True)
    frame.to_csv(path, index=False)
    logger.info("Timeline with %d deals written to %s", len(frame), path)
    return path
