"""Enrichment of statistics records fetched from two endpoints.

The core listing endpoint and the detail endpoint each return a partially
populated statistics record. Enrichment is a pure reducer: the detail value
wins whenever it is present, otherwise the core value is kept.
"""
import logging

from ..models.records import BacktestConfig, BacktestStatistics

logger = logging.getLogger(__name__)


def enrich_statistics(
    core: BacktestStatistics, detail: BacktestStatistics | None
) -> BacktestStatistics:
    """Merge a detail-endpoint record over a core-endpoint record.

    Args:
        core: Statistics from the listing endpoint.
        detail: Statistics from the detail endpoint, if fetched.

    Returns:
        New statistics record; ``core`` and ``detail`` are left untouched.
    """
    if detail is None:
        return core

    if detail.id != core.id:
        logger.warning(
            "Enriching backtest %s with detail of backtest %s", core.id, detail.id
        )

    overrides = {
        name: value
        for name, value in detail
        if name != "id" and value is not None
    }
    return core.model_copy(update=overrides)


def attach_deposit(
    statistics: BacktestStatistics, config: BacktestConfig | None
) -> BacktestStatistics:
    """Copy the configured deposit (and missing symbol/algorithm) onto statistics."""
    if config is None:
        return statistics

    updates: dict = {}
    if config.deposit is not None:
        updates["deposit"] = config.deposit
    if statistics.symbol is None and config.symbol:
        updates["symbol"] = config.symbol
    if statistics.algorithm is None and config.algorithm:
        updates["algorithm"] = config.algorithm

    return statistics.model_copy(update=updates) if updates else statistics
