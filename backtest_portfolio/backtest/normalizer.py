"""
Deal normalization for raw backtest records.

This module converts one backtest's statistics record and cycle list into
uniform Deal intervals. It is the boundary where unusable records are caught:
a cycle without orders, with an unparseable timestamp or with non-finite money
values is skipped (and counted) by default, or rejected with
DataIntegrityError in strict mode. Nothing downstream of this module ever sees
NaN timestamps.
"""

import logging
import math
from collections.abc import Sequence
from datetime import UTC, datetime, timedelta

from ..models.core import BacktestInfo, Deal
from ..models.enums import DealStatus
from ..models.exceptions import DataIntegrityError
from ..models.records import BacktestCycle, BacktestStatistics


logger = logging.getLogger(__name__)

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)
_ONE_MS = timedelta(milliseconds=1)


def parse_timestamp(value: object) -> int | None:
    """
    Parse a raw timestamp into epoch milliseconds.

    Accepts ISO-8601 strings (a trailing ``Z`` or a missing offset means UTC),
    ``datetime`` objects and numeric epoch milliseconds.

    Args:
        value: Raw timestamp value.

    Returns:
        Epoch milliseconds, or None when the value is missing or unparseable.

    Examples:
        >>> parse_timestamp("1970-01-02T00:00:00Z")
        86400000
        >>> parse_timestamp("not a date") is None
        True
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        return int(value) if math.isfinite(value) else None

    if isinstance(value, datetime):
        moment = value
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            moment = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    return (moment - _EPOCH) // _ONE_MS


def _to_float(value: object) -> float | None:
    """Coerce a raw money value; missing means 0.0, garbage means None."""
    if value is None:
        return 0.0
    if isinstance(value, bool):
        return None
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _require(value: float | int | None, cycle: BacktestCycle, field: str):
    if value is None:
        raise DataIntegrityError(
            "Unusable cycle value", context={"cycle_id": cycle.id, "field": field}
        )
    return value


def normalize_cycle(cycle: BacktestCycle, statistics: BacktestStatistics) -> Deal:
    """
    Convert one cycle record into a Deal.

    Start is the first order's creation time (execution time when the
    creation time is absent), end is the cycle completion time. Net is only
    read (``netQuote``, falling back to ``profitQuote``) for closed cycles;
    open cycles carry zero net. Excursions are stored as magnitudes.

    Args:
        cycle: Raw cycle record.
        statistics: Statistics record of the owning backtest (provenance).

    Returns:
        Normalized Deal.

    Raises:
        DataIntegrityError: If the cycle has no orders or carries an
            unparseable timestamp or non-finite money value.
    """
    if not cycle.orders:
        raise DataIntegrityError(
            "Cycle has no orders", context={"cycle_id": cycle.id, "field": "orders"}
        )

    first_order = cycle.orders[0]
    opened_at = first_order.created_at
    if opened_at is None:
        opened_at = first_order.executed_at
    start = _require(parse_timestamp(opened_at), cycle, "orders[0].createdAt")
    end = _require(parse_timestamp(cycle.date), cycle, "date")

    if end < start:
        logger.debug(
            "Cycle %s ends before it starts (%d < %d); clamping end to start",
            cycle.id,
            end,
            start,
        )
        end = start

    status = DealStatus.from_raw(cycle.status)
    net = 0.0
    if status.is_closed:
        raw_net = cycle.net_quote if cycle.net_quote is not None else cycle.profit_quote
        net = _require(_to_float(raw_net), cycle, "netQuote")
    mae = _require(_to_float(cycle.mae_absolute), cycle, "maeAbsolute")
    mfe = _require(_to_float(cycle.mfe_absolute), cycle, "mfeAbsolute")

    return Deal(
        id=cycle.id,
        backtest_id=statistics.id,
        start=start,
        end=end,
        status=status,
        net=net,
        mae_absolute=abs(mae),
        mfe_absolute=abs(mfe),
        backtest_name=statistics.name or "",
        quote_currency=_resolve_quote(statistics),
        symbol=_resolve_symbol(statistics),
        algorithm=statistics.algorithm or "",
    )


def _resolve_quote(statistics: BacktestStatistics) -> str:
    if statistics.quote:
        return statistics.quote
    if statistics.deposit is not None and statistics.deposit.currency:
        return statistics.deposit.currency.strip()
    return ""


def _resolve_symbol(statistics: BacktestStatistics) -> str:
    if statistics.symbol:
        return statistics.symbol
    return f"{statistics.base or ''}/{statistics.quote or ''}".strip("/")


def normalize_backtest(
    statistics: BacktestStatistics,
    cycles: Sequence[BacktestCycle],
    *,
    strict: bool = False,
) -> BacktestInfo:
    """
    Normalize a backtest's statistics and cycles into a BacktestInfo.

    Args:
        statistics: Statistics record (already enriched, if applicable).
        cycles: Raw cycle records.
        strict: If True, raise on the first unusable cycle instead of
            skipping it.

    Returns:
        BacktestInfo with deals in source order.

    Raises:
        DataIntegrityError: In strict mode, for the first unusable cycle.
    """
    deals: list[Deal] = []
    skipped = 0

    for cycle in cycles:
        try:
            deals.append(normalize_cycle(cycle, statistics))
        except DataIntegrityError as exc:
            if strict:
                exc.context.setdefault("backtest_id", statistics.id)
                raise
            skipped += 1
            logger.warning("Skipping cycle of backtest %s: %s", statistics.id, exc)

    span_start = parse_timestamp(statistics.period_from)
    span_end = parse_timestamp(statistics.period_to)
    if span_start is None or span_end is None or span_end <= span_start:
        span_start = span_end = None

    info = BacktestInfo(
        id=statistics.id,
        name=statistics.name or "",
        symbol=_resolve_symbol(statistics),
        algorithm=statistics.algorithm or "",
        quote_currency=_resolve_quote(statistics),
        span_start=span_start,
        span_end=span_end,
        deals=tuple(deals),
        skipped_cycles=skipped,
    )

    logger.debug(
        "Normalized backtest %s: %d deals, %d skipped",
        statistics.id,
        len(deals),
        skipped,
    )
    return info
