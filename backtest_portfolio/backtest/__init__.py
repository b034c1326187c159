"""Aggregation engine: normalization, sweep, metrics and portfolio summary."""

from .drawdown import compute_drawdown_curve, compute_max_drawdown
from .enrichment import attach_deposit, enrich_statistics
from .limit_impact import compute_limit_impact
from .metrics import compute_backtest_metrics, merge_intervals
from .normalizer import normalize_backtest, normalize_cycle, parse_timestamp
from .summary import summarize_portfolio
from .sweep import run_interval_sweep


__all__ = [
    "attach_deposit",
    "compute_backtest_metrics",
    "compute_drawdown_curve",
    "compute_limit_impact",
    "compute_max_drawdown",
    "enrich_statistics",
    "merge_intervals",
    "normalize_backtest",
    "normalize_cycle",
    "parse_timestamp",
    "run_interval_sweep",
    "summarize_portfolio",
]
