"""
Core data models for the portfolio aggregation engine.

This module defines immutable dataclasses for the fundamental entities the
engine works with: deals (one trade lifecycle each), normalized backtests,
chart samples and the per-deal admission timeline.

All dataclasses are frozen so every computation output is a fresh value that
cannot be mutated by a later call.
"""

from dataclasses import dataclass, field

from .enums import DealStatus


MS_IN_DAY = 24 * 60 * 60 * 1000

DealId = int | str


def day_index(timestamp_ms: int) -> int:
    """
    Return the UTC calendar-day index of an epoch-millisecond timestamp.

    Examples:
        >>> day_index(0)
        0
        >>> day_index(MS_IN_DAY - 1)
        0
        >>> day_index(MS_IN_DAY)
        1
    """
    return timestamp_ms // MS_IN_DAY


def id_sort_key(value: DealId) -> tuple[int, int, str]:
    """
    Build a total ordering key for opaque identifiers.

    Integer ids sort numerically and before string ids; string ids sort
    lexicographically. Mixed id types therefore never raise on comparison.

    Examples:
        >>> sorted([10, "b", 9, "a"], key=id_sort_key)
        [9, 10, 'a', 'b']
    """
    if isinstance(value, bool):
        return (1, 0, str(value))
    if isinstance(value, int):
        return (0, value, "")
    return (1, 0, str(value))


@dataclass(frozen=True)
class Deal:
    """
    One trade/position lifecycle from a single backtest.

    Attributes:
        id: Opaque identifier, unique within its backtest.
        backtest_id: Identifier of the owning backtest.
        start: Open time in epoch milliseconds.
        end: Close time in epoch milliseconds (>= start). For a STARTED deal
            this is the last observation time.
        status: Lifecycle state.
        net: Realized profit/loss in quote currency, 0.0 while STARTED.
        mae_absolute: Maximum adverse excursion magnitude (>= 0).
        mfe_absolute: Maximum favorable excursion magnitude (>= 0).
        backtest_name: Display name of the owning backtest.
        quote_currency: Quote currency of net and excursion values.
        symbol: Traded symbol of the owning backtest.
        algorithm: Strategy algorithm of the owning backtest.

    Examples:
        >>> deal = Deal(id=1, backtest_id=7, start=0, end=3_600_000,
        ...             status=DealStatus.FINISHED, net=12.5)
        >>> deal.duration_ms
        3600000
        >>> deal.is_closed
        True
    """

    id: DealId
    backtest_id: DealId
    start: int
    end: int
    status: DealStatus
    net: float = 0.0
    mae_absolute: float = 0.0
    mfe_absolute: float = 0.0
    backtest_name: str = ""
    quote_currency: str = ""
    symbol: str = ""
    algorithm: str = ""

    @property
    def is_closed(self) -> bool:
        """Return True when the deal contributes realized profit."""
        return self.status.is_closed

    @property
    def duration_ms(self) -> int:
        """Return the deal lifetime in milliseconds."""
        return self.end - self.start

    @property
    def duration_days(self) -> float:
        """Return the deal lifetime in fractional days."""
        return self.duration_ms / MS_IN_DAY

    @property
    def start_day(self) -> int:
        """Return the UTC day index of the open time."""
        return day_index(self.start)

    @property
    def end_day(self) -> int:
        """Return the UTC day index of the last millisecond the deal is open."""
        anchor = self.end - 1 if self.end > self.start else self.end
        return day_index(anchor)


@dataclass(frozen=True)
class BacktestInfo:
    """
    Normalized form of one backtest: provenance, analysis period and deals.

    Attributes:
        id: Backtest identifier.
        name: Display name.
        symbol: Traded symbol.
        algorithm: Strategy algorithm.
        quote_currency: Quote currency of all deal values.
        span_start: Configured period start (epoch ms) or None.
        span_end: Configured period end (epoch ms) or None.
        deals: Normalized deals in source order.
        skipped_cycles: Count of raw cycles rejected as unusable.
    """

    id: DealId
    name: str
    symbol: str = ""
    algorithm: str = ""
    quote_currency: str = ""
    span_start: int | None = None
    span_end: int | None = None
    deals: tuple[Deal, ...] = ()
    skipped_cycles: int = 0


@dataclass(frozen=True)
class ChartPoint:
    """A single (time, value) sample of a chart series."""

    time: int
    value: float


@dataclass(frozen=True)
class TimeInterval:
    """A closed time span in epoch milliseconds."""

    start: int
    end: int

    @property
    def duration_ms(self) -> int:
        return self.end - self.start


@dataclass(frozen=True)
class EquityEvent:
    """
    One realized-pnl step on a backtest's own equity curve.

    Attributes:
        time: Close time of the deal that produced the step.
        delta: Realized net of that deal.
        cumulative: Running realized total after the step.
        drawdown: Distance below the running peak after the step (>= 0).
    """

    time: int
    delta: float
    cumulative: float
    drawdown: float


@dataclass(frozen=True)
class DealTimelineItem:
    """Admission outcome of a single deal in the portfolio sweep."""

    deal_id: DealId
    start: int
    end: int
    net: float
    status: DealStatus
    limited_by_concurrency: bool


@dataclass(frozen=True)
class DealTimelineRow:
    """All admission outcomes for one backtest, in sweep decision order."""

    backtest_id: DealId
    backtest_name: str
    quote_currency: str
    items: tuple[DealTimelineItem, ...] = field(default_factory=tuple)
