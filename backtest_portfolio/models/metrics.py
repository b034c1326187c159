"""
Derived metric models produced by the aggregation engine.

These frozen dataclasses are pure computation outputs: one BacktestMetrics per
backtest, one SweepResult per concurrency sweep and one PortfolioSummary per
aggregation run. Sequences are stored as tuples so outputs stay immutable.
"""

from dataclasses import dataclass

from ..config.parameters import AggregationConfig
from .core import (
    ChartPoint,
    Deal,
    DealId,
    DealTimelineRow,
    EquityEvent,
    TimeInterval,
)


@dataclass(frozen=True)
class BacktestMetrics:
    """
    Single-backtest statistics, independent of any portfolio limit.

    Attributes:
        backtest_id: Backtest identifier.
        name: Display name.
        symbol: Traded symbol.
        algorithm: Strategy algorithm.
        quote_currency: Quote currency of all money values.
        pnl: Sum of realized net over closed deals.
        profits_count: Closed deals with net >= 0.
        losses_count: Closed deals with net < 0.
        open_deals: Deals still STARTED at observation time.
        total_deals: All deals of the backtest.
        win_rate_percent: profits / closed deals * 100, None without closed deals.
        total_trade_duration_days: Sum of deal lifetimes in days.
        avg_trade_duration_days: Mean deal lifetime in days.
        avg_net_per_day: pnl divided by the analysis period in days (min 1).
        max_drawdown: Largest peak-to-trough decline of the realized equity.
        max_mae: Largest single-deal adverse excursion.
        max_mfe: Largest single-deal favorable excursion.
        avg_mae: Mean adverse excursion.
        avg_mfe: Mean favorable excursion.
        active_mae: Adverse excursion of the latest still-open deal, or 0.
        span_start: Analysis period start (epoch ms) or None.
        span_end: Analysis period end (epoch ms) or None.
        active_duration_ms: Total time covered by at least one open deal.
        downtime_days: Calendar days of the period without any open deal.
        trading_days: Count of calendar days touched by any deal.
        active_day_indices: Sorted UTC day indices touched by any deal.
        concurrency_intervals: Merged spans with at least one open deal.
        equity_events: Realized-pnl steps ordered by close time.
        trades: All deals with resolved numeric start/end.
    """

    backtest_id: DealId
    name: str
    symbol: str
    algorithm: str
    quote_currency: str
    pnl: float
    profits_count: int
    losses_count: int
    open_deals: int
    total_deals: int
    win_rate_percent: float | None
    total_trade_duration_days: float
    avg_trade_duration_days: float
    avg_net_per_day: float
    max_drawdown: float
    max_mae: float
    max_mfe: float
    avg_mae: float
    avg_mfe: float
    active_mae: float
    span_start: int | None
    span_end: int | None
    active_duration_ms: int
    downtime_days: int
    trading_days: int
    active_day_indices: tuple[int, ...]
    concurrency_intervals: tuple[TimeInterval, ...]
    equity_events: tuple[EquityEvent, ...]
    trades: tuple[Deal, ...]


@dataclass(frozen=True)
class SweepResult:
    """
    Output of one interval sweep under a concurrency limit.

    Attributes:
        total_pnl: Realized net over admitted closed deals.
        profitable_deals: Admitted closed deals with net >= 0.
        losing_deals: Admitted closed deals with net < 0.
        open_deals: Admitted deals still STARTED at their observation end.
        open_exposure: Sum of adverse excursion of those open deals.
        max_concurrent_positions: Largest active-set size observed.
        max_concurrent_exposure: Largest summed adverse excursion observed.
        idle_time_ms: Time between time points with nothing active.
        pnl_series: Realized equity, one point per closed deal.
        exposure_series: Active adverse excursion as a step series.
        active_count_series: Active-set size at each time point.
        used_deals: Deals admitted, in admission order.
        excluded_deals: Deals rejected by the limit, in decision order.
        timeline_rows: Per-backtest admission outcomes.
    """

    total_pnl: float
    profitable_deals: int
    losing_deals: int
    open_deals: int
    open_exposure: float
    max_concurrent_positions: int
    max_concurrent_exposure: float
    idle_time_ms: int
    pnl_series: tuple[ChartPoint, ...]
    exposure_series: tuple[ChartPoint, ...]
    active_count_series: tuple[ChartPoint, ...]
    used_deals: tuple[Deal, ...]
    excluded_deals: tuple[Deal, ...]
    timeline_rows: tuple[DealTimelineRow, ...]

    @property
    def total_deals(self) -> int:
        """Return admitted deals: profitable + losing + open."""
        return self.profitable_deals + self.losing_deals + self.open_deals


@dataclass(frozen=True)
class DailyConcurrencyRecord:
    """Concurrency observed during one UTC calendar day."""

    day_index: int
    day_start_ms: int
    active_duration_ms: int
    max_count: int
    avg_active_count: float


@dataclass(frozen=True)
class DailyConcurrencyStats:
    """Distribution of per-day maximum concurrency."""

    mean_max: float = 0.0
    p75: float = 0.0
    p90: float = 0.0
    p95: float = 0.0
    limit_p75: int = 0
    limit_p90: int = 0
    limit_p95: int = 0


@dataclass(frozen=True)
class DailyConcurrency:
    """Per-day concurrency records plus their summary statistics."""

    records: tuple[DailyConcurrencyRecord, ...] = ()
    stats: DailyConcurrencyStats = DailyConcurrencyStats()


@dataclass(frozen=True)
class PortfolioEquitySeries:
    """Merged realized equity curve of the portfolio."""

    points: tuple[ChartPoint, ...] = ()
    min_value: float = 0.0
    max_value: float = 0.0

    @property
    def values(self) -> list[float]:
        return [point.value for point in self.points]


@dataclass(frozen=True)
class PortfolioSummary:
    """
    Portfolio-level aggregate over N backtests under one configuration.

    Totals, counts and series come from the concurrency sweep, so they cover
    admitted deals only. ``avg_max_drawdown`` is the mean of each backtest's
    own drawdown; ``aggregate_drawdown`` is measured on the merged portfolio
    equity curve.
    """

    total_backtests: int
    total_pnl: float
    total_profits: int
    total_losses: int
    open_deals: int
    total_deals: int
    excluded_deals: int
    avg_pnl_per_deal: float
    avg_pnl_per_backtest: float
    avg_net_per_day: float
    avg_trade_duration_days: float
    win_rate_percent: float | None
    avg_max_drawdown: float
    aggregate_drawdown: float
    open_exposure: float
    max_concurrent_exposure: float
    pnl_to_risk: float
    max_concurrent: int
    avg_concurrent: float
    total_idle_days: float
    no_trade_days: int
    daily_concurrency: DailyConcurrency
    portfolio_equity: PortfolioEquitySeries
    pnl_series: tuple[ChartPoint, ...]
    exposure_series: tuple[ChartPoint, ...]
    active_count_series: tuple[ChartPoint, ...]
    timeline_rows: tuple[DealTimelineRow, ...]
    config: AggregationConfig


@dataclass(frozen=True)
class LimitImpactPoint:
    """Portfolio outcome for one concurrency limit (None = unlimited)."""

    label: str
    limit: int | None
    total_pnl: float
    aggregate_drawdown: float
    max_concurrent_exposure: float
    pnl_to_risk: float
    total_deals: int
    excluded_deals: int
