"""Aggregation configuration."""

from backtest_portfolio.config.parameters import (
    AggregationConfig,
    load_aggregation_config,
    load_aggregation_config_file,
)

__all__ = [
    "AggregationConfig",
    "load_aggregation_config",
    "load_aggregation_config_file",
]
