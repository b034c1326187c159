"""
Interval sweep with concurrency-limited deal admission.

This module merges the deals of every selected backtest into one global event
timeline and replays it left to right over the distinct sorted set of all
start and end instants ("time points"). At each time point, in fixed order:

1. Closures: active deals ending here are settled. Closed deals leave the
   active set and add their net to the realized total. STARTED deals stay
   active for the rest of the sweep (their end is only the last observation)
   and fold their adverse excursion into the open exposure once.
2. Admissions: deals starting here are admitted in queue order while the
   active set is below the limit; the rest are excluded for good.
3. Bookkeeping: concurrency maximum, exposure step samples and active count.

Closing before admitting lets a deal that ends at T free its slot for a deal
that starts at T. The queue is ordered by (start, backtest id, deal id), so
admission is reproducible regardless of input concatenation order.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from ..config.parameters import AggregationConfig
from ..models.core import (
    ChartPoint,
    Deal,
    DealId,
    DealTimelineItem,
    DealTimelineRow,
    id_sort_key,
)
from ..models.metrics import SweepResult


logger = logging.getLogger(__name__)


def admission_order_key(deal: Deal) -> tuple:
    """Queue ordering: start time, then backtest id, then deal id."""
    return (deal.start, id_sort_key(deal.backtest_id), id_sort_key(deal.id))


@dataclass
class _SweepState:
    """Working state of a single sweep; created and discarded per call."""

    active: list[Deal] = field(default_factory=list)
    total_pnl: float = 0.0
    profitable: int = 0
    losing: int = 0
    open_deals: int = 0
    open_exposure: float = 0.0
    pnl_series: list[ChartPoint] = field(default_factory=list)

    def settle(self, deal: Deal, time_point: int) -> bool:
        """
        Settle a deal whose end equals the current time point.

        Returns:
            True if the deal stays active (STARTED), False if it closed.
        """
        if not deal.is_closed:
            self.open_deals += 1
            self.open_exposure += deal.mae_absolute
            return True

        self.total_pnl += deal.net
        self.pnl_series.append(ChartPoint(time=time_point, value=self.total_pnl))
        if deal.net >= 0:
            self.profitable += 1
        else:
            self.losing += 1
        return False

    def is_blocked(self, candidate: Deal, limit: int, position_blocking: bool) -> bool:
        if len(self.active) >= limit:
            return True
        if not position_blocking or not candidate.symbol:
            return False
        return any(
            deal.symbol == candidate.symbol and deal.algorithm == candidate.algorithm
            for deal in self.active
        )


def run_interval_sweep(deals: Iterable[Deal], config: AggregationConfig) -> SweepResult:
    """
    Sweep all deals under the configured concurrency limit.

    Args:
        deals: Union of deals from every aggregated backtest, in any order.
        config: Aggregation settings (limit and optional position blocking).

    Returns:
        SweepResult with realized totals, step series and the per-backtest
        admission timeline.

    Examples:
        >>> from backtest_portfolio.models.enums import DealStatus
        >>> hour = 3_600_000
        >>> deals = [
        ...     Deal(id=i, backtest_id=i, start=i * hour, end=(i + 8) * hour,
        ...          status=DealStatus.FINISHED, net=10.0)
        ...     for i in range(3)
        ... ]
        >>> result = run_interval_sweep(deals, AggregationConfig(max_concurrent_positions=2))
        >>> result.max_concurrent_positions, [d.id for d in result.excluded_deals]
        (2, [2])
    """
    source = list(deals)
    limit = config.max_concurrent_positions
    pending = sorted(source, key=admission_order_key)
    time_points = sorted({deal.start for deal in pending} | {deal.end for deal in pending})

    state = _SweepState()
    decisions: list[tuple[Deal, bool]] = []
    exposure_series: list[ChartPoint] = []
    active_count_series: list[ChartPoint] = []
    max_concurrent = 0
    idle_time_ms = 0
    cursor = 0

    for index, time_point in enumerate(time_points):
        next_time_point = time_points[index + 1] if index + 1 < len(time_points) else None

        # 1. Closures
        state.active = [
            deal
            for deal in state.active
            if deal.end != time_point or state.settle(deal, time_point)
        ]

        # 2. Admissions
        while cursor < len(pending) and pending[cursor].start == time_point:
            candidate = pending[cursor]
            cursor += 1

            if state.is_blocked(candidate, limit, config.position_blocking):
                decisions.append((candidate, False))
                continue

            decisions.append((candidate, True))
            # Zero-length deals settle at their own admission instant
            if candidate.end != time_point or state.settle(candidate, time_point):
                state.active.append(candidate)

        # 3. Bookkeeping
        active_count = len(state.active)
        max_concurrent = max(max_concurrent, active_count)

        exposure = sum(deal.mae_absolute for deal in state.active)
        exposure_series.append(ChartPoint(time=time_point, value=exposure))
        if next_time_point is not None:
            exposure_series.append(ChartPoint(time=next_time_point, value=exposure))
            if active_count == 0:
                idle_time_ms += next_time_point - time_point

        active_count_series.append(ChartPoint(time=time_point, value=active_count))

    used = tuple(deal for deal, admitted in decisions if admitted)
    excluded = tuple(deal for deal, admitted in decisions if not admitted)
    max_exposure = max((point.value for point in exposure_series), default=0.0)

    result = SweepResult(
        total_pnl=state.total_pnl,
        profitable_deals=state.profitable,
        losing_deals=state.losing,
        open_deals=state.open_deals,
        open_exposure=state.open_exposure,
        max_concurrent_positions=max_concurrent,
        max_concurrent_exposure=max_exposure,
        idle_time_ms=idle_time_ms,
        pnl_series=tuple(state.pnl_series),
        exposure_series=tuple(exposure_series),
        active_count_series=tuple(active_count_series),
        used_deals=used,
        excluded_deals=excluded,
        timeline_rows=_build_timeline_rows(source, decisions),
    )

    logger.info(
        "Sweep complete: limit=%d time_points=%d admitted=%d excluded=%d pnl=%.2f",
        limit,
        len(time_points),
        len(used),
        len(excluded),
        result.total_pnl,
    )
    return result


def _build_timeline_rows(
    source: list[Deal], decisions: list[tuple[Deal, bool]]
) -> tuple[DealTimelineRow, ...]:
    """Group admission decisions per backtest, backtests in input order."""
    order: dict[DealId, Deal] = {}
    for deal in source:
        order.setdefault(deal.backtest_id, deal)

    items: dict[DealId, list[DealTimelineItem]] = {key: [] for key in order}
    for deal, admitted in decisions:
        items[deal.backtest_id].append(
            DealTimelineItem(
                deal_id=deal.id,
                start=deal.start,
                end=deal.end,
                net=deal.net,
                status=deal.status,
                limited_by_concurrency=not admitted,
            )
        )

    return tuple(
        DealTimelineRow(
            backtest_id=backtest_id,
            backtest_name=first.backtest_name,
            quote_currency=first.quote_currency,
            items=tuple(items[backtest_id]),
        )
        for backtest_id, first in order.items()
    )
